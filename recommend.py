# recommend.py - keyword based place suggestions for the assistant screen
from typing import List, Optional

from pydantic import BaseModel

from catalog import PlaceCatalog
from models import Mood, Place

MAX_SUGGESTIONS = 3
MAX_MOOD_SUGGESTIONS = 4

# first matching group wins
SUGGESTION_RULES = [
    (("happy", "celebration"), ("restaurant", "culture")),
    (("sad", "relax"), ("wellness", "cafe")),
    (("adventure", "active"), ("adventure", "outdoor")),
    (("calm", "peaceful"), ("outdoor", "wellness")),
]

MOOD_CATEGORIES = {
    "happy": ("restaurant", "culture"),
    "sad": ("wellness", "cafe"),
    "calm": ("outdoor", "wellness"),
    "adventurous": ("adventure", "outdoor"),
    "bored": ("culture", "restaurant"),
}

REPLY_RULES = [
    (("happy", "celebration"),
     "I can sense your positive energy! For happy moods, I recommend vibrant places where you "
     "can celebrate and enjoy good company. Here are some great options that match your joyful vibe:"),
    (("sad", "down"),
     "I understand you might need some comfort right now. Here are some peaceful, nurturing places "
     "that can help lift your spirits and provide a calming atmosphere:"),
    (("adventure", "exciting"),
     "Ready for some excitement! I can tell you're in the mood for adventure. Here are some "
     "thrilling places that will get your adrenaline pumping:"),
    (("calm", "peaceful", "relax"),
     "Perfect for finding your zen! I've found some wonderfully tranquil places where you can "
     "unwind and reconnect with yourself:"),
    (("food", "eat", "hungry"),
     "Time to satisfy those taste buds! Based on what you're craving, here are some amazing "
     "dining experiences:"),
]

DEFAULT_REPLY = ("Great question! Based on your preferences and current trends, "
                 "I've found some fantastic places you might love:")

GREETING = ("Hello! I'm your AI travel assistant. Tell me how you're feeling or what you're "
            "looking for, and I'll help you discover the perfect places!")


class AssistantReply(BaseModel):
    content: str
    suggestions: List[Place]


def _match(text: str, keywords) -> bool:
    return any(k in text for k in keywords)


class Recommender:
    def __init__(self, catalog: Optional[PlaceCatalog] = None):
        self.catalog = catalog or PlaceCatalog()

    def suggest(self, text: str) -> List[Place]:
        lowered = (text or "").lower()
        places = self.catalog.list()
        for keywords, categories in SUGGESTION_RULES:
            if _match(lowered, keywords):
                return [p for p in places if p.category in categories][:MAX_SUGGESTIONS]
        return places[:MAX_SUGGESTIONS]

    def suggest_for_mood(self, mood: Mood) -> List[Place]:
        """Places for a mood picked from the dashboard selector; unknown moods get the whole catalog."""
        places = self.catalog.list()
        categories = MOOD_CATEGORIES.get(mood)
        if categories is not None:
            places = [p for p in places if p.category in categories]
        return places[:MAX_MOOD_SUGGESTIONS]

    def reply_text(self, text: str) -> str:
        lowered = (text or "").lower()
        for keywords, reply in REPLY_RULES:
            if _match(lowered, keywords):
                return reply
        return DEFAULT_REPLY

    def respond(self, text: str) -> AssistantReply:
        return AssistantReply(content=self.reply_text(text), suggestions=self.suggest(text))
