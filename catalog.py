# catalog.py - read-only place catalog (static in-memory table)
from typing import Iterable, List, Optional

from errors import NotFoundError
from models import Place

_IMG = "https://images.pexels.com/photos/{}/pexels-photo-{}.jpeg?auto=compress&cs=tinysrgb&w=800"

DEFAULT_PLACES = [
    Place(
        id="1",
        name="Eco Gardens Café",
        category="restaurant",
        rating=4.8,
        image=_IMG.format(1307698, 1307698),
        address="123 Green Street, Eco District",
        contact="+1 (555) 123-4567",
        hours="8:00 AM - 9:00 PM",
        description="A sustainable café serving organic, locally-sourced meals in a beautiful garden setting.",
        eco_tag="eco-friendly",
        safety_score=9.2,
        crowd_level="medium",
        weather="sunny",
        price="$$",
    ),
    Place(
        id="2",
        name="Sunset Beach Park",
        category="outdoor",
        rating=4.6,
        image=_IMG.format(1032650, 1032650),
        address="456 Coastal Highway, Beach Town",
        hours="6:00 AM - 10:00 PM",
        description="A pristine beach park with walking trails and stunning sunset views.",
        eco_tag="green-certified",
        safety_score=8.7,
        crowd_level="low",
        weather="cloudy",
        price="Free",
    ),
    Place(
        id="3",
        name="Urban Art Museum",
        category="culture",
        rating=4.9,
        image=_IMG.format(1839919, 1839919),
        address="789 Culture Avenue, Arts District",
        contact="+1 (555) 987-6543",
        hours="10:00 AM - 6:00 PM",
        description="Contemporary art museum featuring local and international artists.",
        eco_tag="sustainable",
        safety_score=9.5,
        crowd_level="high",
        weather="rainy",
        price="$$$",
    ),
    Place(
        id="4",
        name="Mountain Trail Coffee",
        category="cafe",
        rating=4.7,
        image=_IMG.format(1833399, 1833399),
        address="321 Mountain View Road",
        contact="+1 (555) 456-7890",
        hours="6:00 AM - 8:00 PM",
        description="Cozy mountain café with locally roasted coffee and hiking trail access.",
        eco_tag="eco-friendly",
        safety_score=8.9,
        crowd_level="low",
        weather="sunny",
        price="$",
    ),
    Place(
        id="5",
        name="Riverside Wellness Spa",
        category="wellness",
        rating=4.5,
        image=_IMG.format(3188831, 3188831),
        address="654 River Walk, Wellness District",
        contact="+1 (555) 234-5678",
        hours="9:00 AM - 8:00 PM",
        description="Tranquil spa offering eco-friendly treatments by the river.",
        eco_tag="green-certified",
        safety_score=9.0,
        crowd_level="medium",
        weather="sunny",
        price="$$$$",
    ),
    Place(
        id="6",
        name="Adventure Sports Center",
        category="adventure",
        rating=4.4,
        image=_IMG.format(1365425, 1365425),
        address="987 Adventure Lane, Sports Complex",
        contact="+1 (555) 345-6789",
        hours="7:00 AM - 9:00 PM",
        description="Extreme sports facility with rock climbing, kayaking, and more.",
        eco_tag="standard",
        safety_score=8.3,
        crowd_level="high",
        weather="clear",
        price="$$$",
    ),
]


def _matches_text(place: Place, needle: str) -> bool:
    return any(needle in field.lower() for field in (place.name, place.description, place.address))


class PlaceCatalog:
    """Opaque read-only provider of places."""

    def __init__(self, places: Optional[Iterable[Place]] = None):
        self._places: List[Place] = list(DEFAULT_PLACES if places is None else places)
        self._by_id = {p.id: p for p in self._places}

    def list(self) -> List[Place]:
        return list(self._places)

    def get(self, place_id: str) -> Place:
        place = self._by_id.get(place_id)
        if place is None:
            raise NotFoundError(f"Place not found: {place_id}")
        return place

    def search(self, text: Optional[str] = None, category: Optional[str] = None,
               eco_tag: Optional[str] = None, crowd_level: Optional[str] = None,
               limit: int = 20, offset: int = 0) -> List[Place]:
        """
        Filter the catalog the way the explore screen does.

        text matches name, description or address case-insensitively; the
        other filters are exact. Results keep catalog order and are paged
        by offset/limit.
        """
        out = self._places
        if text:
            needle = text.lower()
            out = [p for p in out if _matches_text(p, needle)]
        if category:
            out = [p for p in out if p.category == category]
        if eco_tag:
            out = [p for p in out if p.eco_tag == eco_tag]
        if crowd_level:
            out = [p for p in out if p.crowd_level == crowd_level]
        return out[offset:offset + limit]
