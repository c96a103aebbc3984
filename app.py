# app.py - Streamlit front-end: explore, assistant, trip planner, export & share
from typing import get_args

import streamlit as st
import requests

import config
from models import Mood, TripPlan
from recommend import GREETING
from share import SharingAdapter, clipboard_for

API_URL = config.API_URL

st.set_page_config(page_title="RelevanTrip", layout="wide")
st.title("RelevanTrip 🌿")

# Init session
for key, value in [("token", None), ("user_id", None), ("share_links", {}), ("exporting", False)]:
    st.session_state.setdefault(key, value)


def auth_headers():
    return {"Authorization": f"Bearer {st.session_state['token']}"}


def api(method: str, path: str, **kwargs):
    r = requests.request(method, f"{API_URL}{path}", headers=auth_headers(), timeout=30, **kwargs)
    if r.status_code >= 400:
        try:
            detail = r.json().get("detail", r.text)
        except ValueError:
            detail = r.text
        raise RuntimeError(detail)
    return r


def place_line(place: dict) -> str:
    return f"**{place['name']}** · {place['category']} · ⭐ {place['rating']} · {place.get('price') or ''}"


# ---------------- Sidebar (Login - Account)
with st.sidebar:
    st.header("🔐 Account")

    if st.session_state["token"] is None:
        st.subheader("Login")
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")

        if st.button("Login ✅"):
            try:
                r = requests.post(f"{API_URL}/login", json={"email": email, "password": password}, timeout=10)
                r.raise_for_status()
                data = r.json()
                st.session_state["token"] = data["access_token"]
                st.session_state["user_id"] = data["user_id"]
                st.rerun()
            except requests.RequestException as e:
                st.error(f"Login failed ❌: {e}")

        st.markdown("---")
        st.subheader("Register")
        reg_email = st.text_input("Register email")
        reg_pass = st.text_input("Register password", type="password")

        if st.button("Register & Login ✅"):
            try:
                r = requests.post(f"{API_URL}/register", json={"email": reg_email, "password": reg_pass}, timeout=10)
                r.raise_for_status()
                data = r.json()
                st.session_state["token"] = data["access_token"]
                st.session_state["user_id"] = data["user_id"]
                st.rerun()
            except requests.RequestException as e:
                st.error(f"Registration failed ❌: {e}")
        st.stop()

    st.success(f"✅ Signed in: {st.session_state['user_id']}")
    if st.button("Logout"):
        st.session_state.update({"token": None, "user_id": None, "share_links": {}})
        st.rerun()

    page = st.radio("Go to", ["Explore", "AI Assistant", "Trip Planner", "Profile"])


# ---------------- Explore
def explore_page():
    st.subheader("🔎 Explore places")
    search = st.text_input("Search by name, description or address")
    f1, f2, f3 = st.columns(3)
    category = f1.selectbox("Category", ["", "restaurant", "outdoor", "culture", "cafe", "wellness", "adventure"])
    eco_tag = f2.selectbox("Eco tag", ["", "eco-friendly", "green-certified", "sustainable", "standard"])
    crowd_level = f3.selectbox("Crowd", ["", "low", "medium", "high"])
    params = {"search": search or None, "category": category or None,
              "eco_tag": eco_tag or None, "crowd_level": crowd_level or None}
    places = api("GET", "/places", params=params).json()["places"]
    saved_ids = {p["id"] for p in api("GET", "/saved").json()["places"]}

    for place in places:
        cols = st.columns([1, 4, 1])
        cols[0].image(place["image"], width=90)
        cols[1].markdown(place_line(place))
        cols[1].caption(f"{place['address']} · {place['eco_tag']} · crowd: {place['crowd_level']}")
        if place["id"] in saved_ids:
            if cols[2].button("Unsave", key=f"unsave-{place['id']}"):
                api("DELETE", f"/saved/{place['id']}")
                st.rerun()
        elif cols[2].button("Save", key=f"save-{place['id']}"):
            api("POST", "/saved", json={"place_id": place["id"]})
            st.rerun()


# ---------------- Assistant
def assistant_page():
    st.subheader("🤖 AI Travel Assistant")
    st.info(GREETING)

    mood = st.selectbox("How are you feeling?", list(get_args(Mood)))
    if st.button("Suggest for my mood"):
        for place in requests.get(f"{API_URL}/moods/{mood}/suggestions", timeout=10).json()["places"]:
            st.markdown(place_line(place))

    message = st.text_input("How are you feeling, or what are you looking for?")
    if st.button("Send") and message.strip():
        reply = requests.post(f"{API_URL}/assistant", json={"message": message}, timeout=10).json()["reply"]
        st.info(reply["content"])
        for place in reply["suggestions"]:
            st.markdown(place_line(place))


# ---------------- Trip planner
def share_trip(trip: dict):
    api("POST", f"/trips/{trip['id']}/share")
    adapter = SharingAdapter(
        clipboard=clipboard_for(st.session_state["share_links"], trip["id"]),
        notify=st.toast,
    )
    adapter.share(TripPlan.model_validate(trip))


def planner_page():
    st.subheader("🗺️ Trip Planner")
    data = api("GET", "/trips").json()
    trips = data["trips"]

    with st.expander("➕ New trip"):
        name = st.text_input("Trip name")
        if st.button("Create"):
            try:
                api("POST", "/trips", json={"name": name})
                st.rerun()
            except RuntimeError as e:
                st.error(f"❌ {e}")

    if not trips:
        st.info("No trips yet. Create your first trip!")
        return

    ids = [t["id"] for t in trips]
    active_id = data.get("active_trip_id")
    index = ids.index(active_id) if active_id in ids else 0
    selected = st.selectbox("My trips", options=ids, index=index,
                            format_func=lambda tid: next(t["name"] for t in trips if t["id"] == tid))
    if selected != active_id:
        api("POST", f"/trips/{selected}/select")
    trip = next(t for t in trips if t["id"] == selected)

    st.markdown(f"### {trip['name']}")
    st.caption(f"📅 {trip['date']} · 📍 {len(trip['places'])} places")

    # add saved places
    saved = api("GET", "/saved").json()["places"]
    addable = [p for p in saved if p["id"] not in {q["id"] for q in trip["places"]}]
    if addable:
        to_add = st.selectbox("Add a saved place", options=[p["id"] for p in addable],
                              format_func=lambda pid: next(p["name"] for p in addable if p["id"] == pid))
        if st.button("Add to trip"):
            api("POST", f"/trips/{trip['id']}/places", json={"place_id": to_add})
            st.rerun()

    st.markdown("#### Itinerary")
    if not trip["places"]:
        st.write("No places added yet")
    for i, place in enumerate(trip["places"]):
        cols = st.columns([5, 1])
        cols[0].markdown(f"{i + 1}. " + place_line(place))
        if cols[1].button("🗑️", key=f"rm-{place['id']}"):
            api("DELETE", f"/trips/{trip['id']}/places/{place['id']}")
            st.rerun()

    if len(trip["places"]) > 1:
        n = len(trip["places"])
        c1, c2, c3 = st.columns(3)
        src = c1.number_input("Move position", min_value=1, max_value=n, value=1)
        dst = c2.number_input("To position", min_value=1, max_value=n, value=n)
        if c3.button("Reorder"):
            api("POST", f"/trips/{trip['id']}/reorder", json={"from_index": src - 1, "to_index": dst - 1})
            st.rerun()

    if trip["places"]:
        stats = api("GET", f"/trips/{trip['id']}/stats").json()["stats"]
        s1, s2, s3 = st.columns(3)
        s1.metric("Places to Visit", stats["count"])
        s2.metric("Avg Rating", f"{stats['avg_rating']:.1f}")
        s3.metric("Est. Duration", f"{stats['est_duration_hours']}h")

    b1, b2 = st.columns(2)
    if b1.button("🔗 Share"):
        share_trip(trip)
    share_url = st.session_state["share_links"].get(trip["id"])
    if share_url:
        b1.code(share_url)

    if b2.button("🧾 Export PDF", disabled=st.session_state["exporting"]):
        st.session_state["exporting"] = True
        try:
            with st.spinner("⏳ Exporting..."):
                r = api("GET", f"/trips/{trip['id']}/export")
            filename = r.headers.get("Content-Disposition", "").split("filename=")[-1].strip('"')
            b2.download_button("📥 Download", data=r.content, file_name=filename, mime="application/pdf")
        except (RuntimeError, requests.RequestException) as e:
            st.error(f"Export failed ❌: {e}")
        finally:
            st.session_state["exporting"] = False

    if st.button("Delete trip"):
        api("DELETE", f"/trips/{trip['id']}")
        st.session_state["share_links"].pop(trip["id"], None)
        st.rerun()


# ---------------- Profile
def profile_page():
    st.subheader("👤 Profile")
    user = api("GET", "/profile").json()["user"]
    st.caption(f"{user['email']} · member since {user['created_at']}")
    stats = api("GET", "/user/stats").json()["stats"]
    c1, c2 = st.columns(2)
    c1.metric("Trips", stats["total_trips"])
    c2.metric("Planned places", stats["total_places"])
    if stats["favorite_categories"]:
        st.bar_chart(stats["favorite_categories"])

    st.markdown("#### Export history")
    for item in api("GET", "/history").json()["history"]:
        st.markdown(f"`{item['created_at']}` — {item['trip_name']} → {item['filename']} ({item['page_count']} pages)")


try:
    {"Explore": explore_page, "AI Assistant": assistant_page,
     "Trip Planner": planner_page, "Profile": profile_page}[page]()
except (RuntimeError, requests.RequestException) as e:
    st.error(f"Server Error ❌: {e}")
