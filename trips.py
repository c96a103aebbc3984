# trips.py - trip aggregator: owns a user's trip collection and itinerary order
import logging
import uuid
from collections import Counter
from datetime import date
from typing import Callable, Dict, List, Optional

import config
from errors import IndexOutOfRange, NotFoundError, ValidationError
from models import Place, TripPlan, TripStatistics, UserSummary
from saved import SavedSet

logger = logging.getLogger(__name__)


def new_trip_id() -> str:
    return f"trip-{uuid.uuid4().hex}"


def trip_statistics(
    places: List[Place],
    min_duration_hours: int = config.MIN_DURATION_HOURS,
    hours_per_place: int = config.HOURS_PER_PLACE,
) -> TripStatistics:
    count = len(places)
    avg = sum(p.rating for p in places) / count if count > 0 else 0.0
    hours = max(min_duration_hours, count * hours_per_place)
    return TripStatistics(count=count, avg_rating=avg, est_duration_hours=hours)


class TripAggregator:
    """
    Owning controller for one user's trips.

    All mutation goes through these methods; callers only ever receive
    snapshot copies, so editing a returned TripPlan never changes the
    collection.
    """

    def __init__(
        self,
        saved: SavedSet,
        user_id: str,
        min_duration_hours: int = config.MIN_DURATION_HOURS,
        hours_per_place: int = config.HOURS_PER_PLACE,
        today: Callable[[], date] = date.today,
    ):
        self.saved = saved
        self.user_id = user_id
        self.min_duration_hours = min_duration_hours
        self.hours_per_place = hours_per_place
        self._today = today
        self._trips: Dict[str, TripPlan] = {}
        self._active_id: Optional[str] = None

    # ---------------------------
    # Lookup
    def _get(self, trip_id: str) -> TripPlan:
        trip = self._trips.get(trip_id)
        if trip is None:
            raise NotFoundError(f"Trip not found: {trip_id}")
        return trip

    @staticmethod
    def _snapshot(trip: TripPlan) -> TripPlan:
        return trip.model_copy(update={"places": list(trip.places)})

    def has_trip(self, trip_id: str) -> bool:
        return trip_id in self._trips

    def get_trip(self, trip_id: str) -> TripPlan:
        return self._snapshot(self._get(trip_id))

    def list_trips(self) -> List[TripPlan]:
        return [self._snapshot(t) for t in self._trips.values()]

    @property
    def active_trip(self) -> Optional[TripPlan]:
        if self._active_id is None:
            return None
        return self._snapshot(self._trips[self._active_id])

    def select(self, trip_id: str) -> TripPlan:
        trip = self._get(trip_id)
        self._active_id = trip.id
        return self._snapshot(trip)

    # ---------------------------
    # Lifecycle
    def create_trip(self, name: str) -> TripPlan:
        if name is None or not name.strip():
            raise ValidationError("Trip name is required")
        trip = TripPlan(id=new_trip_id(), name=name, places=[], date=self._today(), user_id=self.user_id)
        self._trips[trip.id] = trip
        self._active_id = trip.id
        logger.info("Created trip %s (%r) for user %s", trip.id, name, self.user_id)
        return self._snapshot(trip)

    def delete_trip(self, trip_id: str) -> None:
        self._get(trip_id)
        del self._trips[trip_id]
        if self._active_id == trip_id:
            self._active_id = None
        logger.info("Deleted trip %s", trip_id)

    def set_shared(self, trip_id: str, shared: bool = True) -> TripPlan:
        trip = self._get(trip_id)
        trip.shared = shared
        return self._snapshot(trip)

    # ---------------------------
    # Itinerary mutation
    def add_place(self, trip_id: str, place_id: str) -> TripPlan:
        trip = self._get(trip_id)
        place = self.saved.get(place_id)
        if place is None:
            raise NotFoundError(f"Place {place_id} is not in the saved places")
        if place_id in trip.place_ids():
            return self._snapshot(trip)
        trip.places = trip.places + [place]
        logger.info("Added place %s to trip %s", place_id, trip_id)
        return self._snapshot(trip)

    def remove_place(self, trip_id: str, place_id: str) -> TripPlan:
        trip = self._get(trip_id)
        if place_id not in trip.place_ids():
            return self._snapshot(trip)
        trip.places = [p for p in trip.places if p.id != place_id]
        logger.info("Removed place %s from trip %s", place_id, trip_id)
        return self._snapshot(trip)

    def reorder(self, trip_id: str, from_index: int, to_index: int) -> TripPlan:
        """Move the place at from_index so it ends up at to_index (not a swap)."""
        trip = self._get(trip_id)
        size = len(trip.places)
        for idx in (from_index, to_index):
            if not 0 <= idx < size:
                raise IndexOutOfRange(f"Index {idx} out of range for {size} places")
        if from_index == to_index:
            return self._snapshot(trip)
        places = list(trip.places)
        moved = places.pop(from_index)
        places.insert(to_index, moved)
        trip.places = places
        return self._snapshot(trip)

    # ---------------------------
    # Derived values
    def compute_statistics(self, trip_id: str) -> TripStatistics:
        trip = self._get(trip_id)
        return trip_statistics(trip.places, self.min_duration_hours, self.hours_per_place)

    def summary(self) -> UserSummary:
        places = [p for t in self._trips.values() for p in t.places]
        return UserSummary(
            total_trips=len(self._trips),
            total_places=len(places),
            favorite_categories=dict(Counter(p.category for p in places)),
        )
