# share.py - native share with clipboard fallback
import logging
from typing import Callable, Dict, Optional

from pydantic import BaseModel

import config
from models import TripPlan

logger = logging.getLogger(__name__)

COPIED_MESSAGE = "Link copied to clipboard!"


class SharePayload(BaseModel):
    title: str
    text: str
    url: str


class ShareOutcome(BaseModel):
    method: str  # "native" or "clipboard"
    payload: SharePayload


def build_payload(trip: TripPlan, base_url: str = config.SHARE_BASE_URL) -> SharePayload:
    return SharePayload(
        title=trip.name,
        text=f"Check out my trip plan: {trip.name}",
        url=f"{base_url.rstrip('/')}/{trip.id}",
    )


def clipboard_for(links: Dict[str, str], trip_id: str) -> Callable[[str], None]:
    """Clipboard stand-in that files the copied url under its own trip id."""
    def copy(url: str):
        links[trip_id] = url
    return copy


class SharingAdapter:
    """
    Dispatches a share to the platform share sheet when one is wired in.

    native_share, clipboard and notify are platform callables supplied by
    the front end. A missing or failing native share falls back to copying
    the url and notifying; that failure is not raised.
    """

    def __init__(
        self,
        clipboard: Callable[[str], None],
        notify: Callable[[str], None],
        native_share: Optional[Callable[[SharePayload], None]] = None,
        base_url: str = config.SHARE_BASE_URL,
    ):
        self.clipboard = clipboard
        self.notify = notify
        self.native_share = native_share
        self.base_url = base_url

    def share(self, trip: TripPlan) -> ShareOutcome:
        payload = build_payload(trip, self.base_url)
        if self.native_share is not None:
            try:
                self.native_share(payload)
                return ShareOutcome(method="native", payload=payload)
            except Exception as e:
                logger.warning("Native share failed for trip %s, copying link instead: %s", trip.id, e)
        self.clipboard(payload.url)
        self.notify(COPIED_MESSAGE)
        return ShareOutcome(method="clipboard", payload=payload)
