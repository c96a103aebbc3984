# models.py - shared entities: places, trips, statistics, export layout
import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Category = Literal["restaurant", "outdoor", "culture", "cafe", "wellness", "adventure"]
EcoTag = Literal["eco-friendly", "sustainable", "green-certified", "standard"]
CrowdLevel = Literal["low", "medium", "high"]
Mood = Literal["happy", "sad", "calm", "adventurous", "bored"]


# ---------------------------
# Catalog / trips
class Place(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: Category
    rating: float = Field(ge=0.0, le=5.0)
    image: str
    address: str
    contact: Optional[str] = None
    hours: Optional[str] = None
    description: str
    eco_tag: EcoTag
    safety_score: float = Field(ge=0.0, le=10.0)
    crowd_level: CrowdLevel
    weather: Optional[str] = None
    price: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class TripPlan(BaseModel):
    id: str
    name: str = Field(min_length=1)
    places: List[Place] = []
    date: datetime.date
    user_id: str
    shared: bool = False

    def place_ids(self) -> List[str]:
        return [p.id for p in self.places]


class TripStatistics(BaseModel):
    count: int
    avg_rating: float
    est_duration_hours: int


class UserSummary(BaseModel):
    total_trips: int
    total_places: int
    favorite_categories: dict


# ---------------------------
# Export layout
class TextBlock(BaseModel):
    text: str
    x: float
    y: float  # distance from the top edge of the page
    font: str = "Helvetica"
    size: float = 10
    align: Literal["left", "center"] = "left"
    entry: Optional[int] = None  # itinerary index this block belongs to


class SeparatorLine(BaseModel):
    x1: float
    x2: float
    y: float


class Page(BaseModel):
    blocks: List[TextBlock] = []
    lines: List[SeparatorLine] = []


class ExportDocument(BaseModel):
    width: float
    height: float
    pages: List[Page] = []

    @property
    def page_count(self) -> int:
        return len(self.pages)
