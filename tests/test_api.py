import pytest
from fastapi.testclient import TestClient

import api
import db


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(db, "DB_FILE", str(tmp_path / "api.db"))
    db.init_db()
    api.registry.clear()
    return TestClient(api.app)


def signup(client, email="alex@example.com", password="secret123"):
    r = client.post("/register", json={"email": email, "password": password})
    assert r.status_code == 200
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


def test_register_login(client):
    signup(client)
    assert client.post("/register", json={"email": "alex@example.com", "password": "x"}).status_code == 400
    assert client.post("/login", json={"email": "alex@example.com", "password": "wrong"}).status_code == 401
    r = client.post("/login", json={"email": "alex@example.com", "password": "secret123"})
    assert r.status_code == 200
    assert r.json()["access_token"]


def test_auth_required(client):
    assert client.get("/trips").status_code == 401
    assert client.get("/trips", headers={"Authorization": "Bearer nope"}).status_code == 401
    assert client.get("/trips", headers={"Authorization": "Token abc"}).status_code == 401


def test_places_are_public(client):
    r = client.get("/places", params={"category": "cafe"})
    assert [p["id"] for p in r.json()["places"]] == ["4"]
    assert client.get("/places/99").status_code == 404


def test_trip_flow(client):
    h = signup(client)
    for pid in ("1", "2", "5"):
        assert client.post("/saved", json={"place_id": pid}, headers=h).status_code == 200

    r = client.post("/trips", json={"name": "Weekend Eco Adventure!"}, headers=h)
    assert r.status_code == 201
    trip_id = r.json()["trip"]["id"]

    for pid in ("1", "2", "5", "1"):
        r = client.post(f"/trips/{trip_id}/places", json={"place_id": pid}, headers=h)
        assert r.status_code == 200
    assert [p["id"] for p in r.json()["trip"]["places"]] == ["1", "2", "5"]

    r = client.post(f"/trips/{trip_id}/reorder", json={"from_index": 0, "to_index": 2}, headers=h)
    assert [p["id"] for p in r.json()["trip"]["places"]] == ["2", "5", "1"]

    stats = client.get(f"/trips/{trip_id}/stats", headers=h).json()["stats"]
    assert stats["count"] == 3
    assert round(stats["avg_rating"], 2) == 4.63
    assert stats["est_duration_hours"] == 6

    r = client.get(f"/trips/{trip_id}/export", headers=h)
    assert r.status_code == 200
    assert r.headers["content-type"] == "application/pdf"
    assert 'filename="Weekend_Eco_Adventure__trip_plan.pdf"' in r.headers["content-disposition"]
    assert r.content.startswith(b"%PDF")

    history = client.get("/history", headers=h).json()["history"]
    assert history[0]["trip_id"] == trip_id
    assert history[0]["page_count"] == 1

    summary = client.get("/user/stats", headers=h).json()["stats"]
    assert summary["total_trips"] == 1
    assert summary["total_places"] == 3


def test_error_statuses(client):
    h = signup(client)
    assert client.post("/trips", json={"name": "  "}, headers=h).status_code == 400
    assert client.post("/saved", json={"place_id": "99"}, headers=h).status_code == 404
    trip_id = client.post("/trips", json={"name": "t"}, headers=h).json()["trip"]["id"]
    # place not saved
    assert client.post(f"/trips/{trip_id}/places", json={"place_id": "3"}, headers=h).status_code == 404
    r = client.post(f"/trips/{trip_id}/reorder", json={"from_index": 0, "to_index": 1}, headers=h)
    assert r.status_code == 400
    assert client.get("/trips/trip-unknown", headers=h).status_code == 404


def test_export_without_selected_trip(client):
    h = signup(client)
    assert client.get("/export", headers=h).status_code == 409
    trip_id = client.post("/trips", json={"name": "Solo"}, headers=h).json()["trip"]["id"]
    r = client.get("/export", headers=h)
    assert r.status_code == 200
    assert "Solo_trip_plan.pdf" in r.headers["content-disposition"]
    client.delete(f"/trips/{trip_id}", headers=h)
    assert client.get("/export", headers=h).status_code == 409


def test_other_users_trip_is_forbidden(client):
    owner = signup(client, "owner@example.com")
    other = signup(client, "other@example.com")
    client.post("/saved", json={"place_id": "1"}, headers=owner)
    trip_id = client.post("/trips", json={"name": "Mine"}, headers=owner).json()["trip"]["id"]

    r = client.post(f"/trips/{trip_id}/places", json={"place_id": "1"}, headers=other)
    assert r.status_code == 403
    assert client.delete(f"/trips/{trip_id}", headers=other).status_code == 403
    assert client.get(f"/trips/{trip_id}", headers=owner).json()["trip"]["places"] == []


def test_share_marks_trip_shared(client):
    h = signup(client)
    trip_id = client.post("/trips", json={"name": "t"}, headers=h).json()["trip"]["id"]
    body = client.post(f"/trips/{trip_id}/share", headers=h).json()
    assert body["trip"]["shared"] is True
    assert body["share"]["url"].endswith(f"/{trip_id}")


def test_assistant(client):
    reply = client.post("/assistant", json={"message": "feeling adventurous and active"}).json()["reply"]
    assert [p["id"] for p in reply["suggestions"]] == ["2", "6"]


def test_places_filters(client):
    r = client.get("/places", params={"search": "trail"})
    assert [p["id"] for p in r.json()["places"]] == ["2", "4"]
    r = client.get("/places", params={"eco_tag": "green-certified", "crowd_level": "low"})
    assert [p["id"] for p in r.json()["places"]] == ["2"]


def test_mood_suggestions(client):
    r = client.get("/moods/sad/suggestions")
    assert r.status_code == 200
    assert [p["id"] for p in r.json()["places"]] == ["4", "5"]
    assert client.get("/moods/grumpy/suggestions").status_code == 422


def test_profile(client):
    h = signup(client, "profile@example.com")
    r = client.get("/profile", headers=h)
    assert r.status_code == 200
    user = r.json()["user"]
    assert user["email"] == "profile@example.com"
    assert user["created_at"]
    assert "password_hash" not in user
    assert client.get("/profile").status_code == 401
