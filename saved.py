# saved.py - session-scoped set of bookmarked places
from typing import Dict, Iterator, List, Optional

from models import Place


class SavedSet:
    """Places a user has marked, keyed by id. All operations are total."""

    def __init__(self):
        self._places: Dict[str, Place] = {}

    def add(self, place: Place) -> None:
        if place.id not in self._places:
            self._places[place.id] = place

    def remove(self, place_id: str) -> None:
        self._places.pop(place_id, None)

    def contains(self, place_id: str) -> bool:
        return place_id in self._places

    def get(self, place_id: str) -> Optional[Place]:
        return self._places.get(place_id)

    def list(self) -> List[Place]:
        return list(self._places.values())

    def __contains__(self, place_id: str) -> bool:
        return self.contains(place_id)

    def __iter__(self) -> Iterator[Place]:
        return iter(list(self._places.values()))

    def __len__(self) -> int:
        return len(self._places)
