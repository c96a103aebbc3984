import os
import tempfile
from datetime import date, datetime

import pytest

# api.py initializes the database on import
os.environ.setdefault("DB_FILE", os.path.join(tempfile.mkdtemp(), "test.db"))

from catalog import PlaceCatalog  # noqa: E402
from models import Place  # noqa: E402
from saved import SavedSet  # noqa: E402
from trips import TripAggregator  # noqa: E402


def make_place(place_id: str, rating: float = 4.0, **kw) -> Place:
    fields = dict(
        id=place_id,
        name=f"Place {place_id}",
        category="outdoor",
        rating=rating,
        image="https://example.com/img.jpg",
        address=f"{place_id} Main Street",
        description="A place",
        eco_tag="standard",
        safety_score=8.0,
        crowd_level="low",
    )
    fields.update(kw)
    return Place(**fields)


@pytest.fixture
def catalog():
    return PlaceCatalog()


@pytest.fixture
def saved(catalog):
    s = SavedSet()
    for place in catalog.list():
        s.add(place)
    return s


@pytest.fixture
def trips(saved):
    return TripAggregator(saved, "user-1", today=lambda: date(2025, 1, 25))


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2025, 1, 25, 9, 30)


@pytest.fixture
def place_factory():
    return make_place
