# api.py - FastAPI backend: auth, catalog, saved places, trips, export
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from sqlite3 import IntegrityError

from fastapi import FastAPI, HTTPException, Header, Depends, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
import jwt
from passlib.context import CryptContext
import uvicorn

import config
from db import init_db, create_user, get_user_by_email, get_user_by_id, save_export, get_exports_for_user
from errors import RelevanTripError
from models import Mood
from recommend import Recommender
from sessions import WorkspaceRegistry
from share import build_payload

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# ---------------------------
# Password hashing
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# App init
app = FastAPI(title="RelevanTrip API")
init_db()

registry = WorkspaceRegistry()
recommender = Recommender(registry.catalog)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RelevanTripError)
async def relevantrip_error_handler(request: Request, exc: RelevanTripError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# ---------------------------
# Pydantic models
class UserCreate(BaseModel):
    email: str
    password: str


class TokenResp(BaseModel):
    user_id: int
    access_token: str
    token_type: str = "bearer"


class SavePlaceRequest(BaseModel):
    place_id: str


class TripCreate(BaseModel):
    name: str


class TripPlaceRequest(BaseModel):
    place_id: str


class ReorderRequest(BaseModel):
    from_index: int
    to_index: int


class AssistantRequest(BaseModel):
    message: str


# ---------------------------
# Auth helpers
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def verify_token(token: str):
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
        return int(payload.get("sub"))
    except (jwt.PyJWTError, TypeError, ValueError):
        return None


def current_user(authorization: Optional[str] = Header(None)) -> int:
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing Authorization header")
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="Invalid authorization header")
    user_id = verify_token(parts[1])
    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid token")
    return user_id


def workspace(user_id: int = Depends(current_user)):
    return registry.for_user(str(user_id))


# ---------------------------
# Endpoints: register / login
@app.post("/register", response_model=TokenResp)
def register(user: UserCreate):
    if not user.email.strip() or not user.password:
        raise HTTPException(status_code=400, detail="Email and password are required")
    if get_user_by_email(user.email):
        raise HTTPException(status_code=400, detail="Email already registered")
    try:
        uid = create_user(user.email, pwd_context.hash(user.password))
    except IntegrityError:
        raise HTTPException(status_code=400, detail="Email already registered")
    token = create_access_token({"sub": str(uid)})
    return {"user_id": uid, "access_token": token}


@app.post("/login", response_model=TokenResp)
def login(user: UserCreate):
    existing = get_user_by_email(user.email)
    if not existing or not pwd_context.verify(user.password, existing["password_hash"]):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token = create_access_token({"sub": str(existing["id"])})
    return {"user_id": existing["id"], "access_token": token}


# ---------------------------
# Catalog (public)
@app.get("/places")
def list_places(search: Optional[str] = None, category: Optional[str] = None,
                eco_tag: Optional[str] = None, crowd_level: Optional[str] = None,
                limit: int = 20, offset: int = 0):
    places = registry.catalog.search(search, category, eco_tag=eco_tag, crowd_level=crowd_level,
                                     limit=limit, offset=offset)
    return {"places": places}


@app.get("/places/{place_id}")
def get_place(place_id: str):
    return {"place": registry.catalog.get(place_id)}


# ---------------------------
# Saved places
@app.get("/saved")
def list_saved(ws=Depends(workspace)):
    return {"places": ws.saved.list()}


@app.post("/saved")
def save_place(req: SavePlaceRequest, ws=Depends(workspace)):
    return {"place": ws.save_place(req.place_id)}


@app.delete("/saved/{place_id}")
def unsave_place(place_id: str, ws=Depends(workspace)):
    ws.saved.remove(place_id)
    return {"message": "Place removed from saved places"}


# ---------------------------
# Trips
@app.get("/trips")
def list_trips(ws=Depends(workspace)):
    active = ws.trips.active_trip
    return {"trips": ws.trips.list_trips(), "active_trip_id": active.id if active else None}


@app.post("/trips", status_code=201)
def create_trip(req: TripCreate, ws=Depends(workspace)):
    return {"trip": ws.trips.create_trip(req.name)}


@app.get("/trips/{trip_id}")
def get_trip(trip_id: str, user_id: int = Depends(current_user)):
    ws = registry.check_owner(str(user_id), trip_id)
    return {"trip": ws.trips.get_trip(trip_id)}


@app.delete("/trips/{trip_id}")
def delete_trip(trip_id: str, user_id: int = Depends(current_user)):
    ws = registry.check_owner(str(user_id), trip_id)
    ws.trips.delete_trip(trip_id)
    return {"message": "Trip deleted successfully"}


@app.post("/trips/{trip_id}/select")
def select_trip(trip_id: str, user_id: int = Depends(current_user)):
    ws = registry.check_owner(str(user_id), trip_id)
    return {"trip": ws.trips.select(trip_id)}


@app.post("/trips/{trip_id}/places")
def add_trip_place(trip_id: str, req: TripPlaceRequest, user_id: int = Depends(current_user)):
    ws = registry.check_owner(str(user_id), trip_id)
    return {"trip": ws.trips.add_place(trip_id, req.place_id)}


@app.delete("/trips/{trip_id}/places/{place_id}")
def remove_trip_place(trip_id: str, place_id: str, user_id: int = Depends(current_user)):
    ws = registry.check_owner(str(user_id), trip_id)
    return {"trip": ws.trips.remove_place(trip_id, place_id)}


@app.post("/trips/{trip_id}/reorder")
def reorder_trip(trip_id: str, req: ReorderRequest, user_id: int = Depends(current_user)):
    ws = registry.check_owner(str(user_id), trip_id)
    return {"trip": ws.trips.reorder(trip_id, req.from_index, req.to_index)}


@app.get("/trips/{trip_id}/stats")
def trip_stats(trip_id: str, user_id: int = Depends(current_user)):
    ws = registry.check_owner(str(user_id), trip_id)
    return {"stats": ws.trips.compute_statistics(trip_id)}


@app.post("/trips/{trip_id}/share")
def share_trip(trip_id: str, user_id: int = Depends(current_user)):
    ws = registry.check_owner(str(user_id), trip_id)
    trip = ws.trips.set_shared(trip_id, True)
    return {"trip": trip, "share": build_payload(trip)}


# ---------------------------
# Export
async def _export(ws, user_id: int, trip):
    stats = ws.trips.compute_statistics(trip.id) if trip is not None else None
    result = await ws.exporter.export_async(trip, stats)
    save_export(user_id, trip.id, trip.name, result.filename, result.page_count)
    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{result.filename}"',
            "X-Page-Count": str(result.page_count),
        },
    )


@app.get("/trips/{trip_id}/export")
async def export_trip(trip_id: str, user_id: int = Depends(current_user)):
    ws = registry.check_owner(str(user_id), trip_id)
    return await _export(ws, user_id, ws.trips.get_trip(trip_id))


@app.get("/export")
async def export_active(user_id: int = Depends(current_user)):
    ws = registry.for_user(str(user_id))
    return await _export(ws, user_id, ws.trips.active_trip)


# ---------------------------
# Assistant / user
@app.post("/assistant")
def assistant(req: AssistantRequest):
    return {"reply": recommender.respond(req.message)}


@app.get("/moods/{mood}/suggestions")
def mood_suggestions(mood: Mood):
    return {"mood": mood, "places": recommender.suggest_for_mood(mood)}


@app.get("/profile")
def profile(user_id: int = Depends(current_user)):
    user = get_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return {"user": user}


@app.get("/user/stats")
def user_stats(ws=Depends(workspace)):
    return {"stats": ws.trips.summary()}


@app.get("/history")
def history(user_id: int = Depends(current_user), limit: int = 50):
    return {"history": get_exports_for_user(user_id, limit=limit)}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
