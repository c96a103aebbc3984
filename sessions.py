# sessions.py - one workspace (saved places + trips + exporter) per signed-in user
from typing import Dict, Optional

from catalog import PlaceCatalog
from errors import ForbiddenError, NotFoundError
from export import DocumentExporter
from saved import SavedSet
from trips import TripAggregator


class Workspace:
    def __init__(self, user_id: str, catalog: PlaceCatalog):
        self.user_id = user_id
        self.catalog = catalog
        self.saved = SavedSet()
        self.trips = TripAggregator(self.saved, user_id)
        self.exporter = DocumentExporter()

    def save_place(self, place_id: str):
        place = self.catalog.get(place_id)
        self.saved.add(place)
        return place


class WorkspaceRegistry:
    """Holds every user's workspace so trip ownership can be checked across users."""

    def __init__(self, catalog: Optional[PlaceCatalog] = None):
        self.catalog = catalog or PlaceCatalog()
        self._workspaces: Dict[str, Workspace] = {}

    def for_user(self, user_id: str) -> Workspace:
        ws = self._workspaces.get(user_id)
        if ws is None:
            ws = Workspace(user_id, self.catalog)
            self._workspaces[user_id] = ws
        return ws

    def owner_of(self, trip_id: str) -> Optional[str]:
        for user_id, ws in self._workspaces.items():
            if ws.trips.has_trip(trip_id):
                return user_id
        return None

    def check_owner(self, user_id: str, trip_id: str) -> Workspace:
        """Fetch the owner first and reject a mismatch before any mutation happens."""
        owner = self.owner_of(trip_id)
        if owner is None:
            raise NotFoundError(f"Trip not found: {trip_id}")
        if owner != user_id:
            raise ForbiddenError("Not authorized to modify this trip")
        return self._workspaces[owner]

    def clear(self):
        self._workspaces.clear()
