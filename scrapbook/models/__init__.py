"""Scrapbook Events Database Models."""

from scrapbook.models.user import User
from scrapbook.models.event import (
    Event,
    EventParticipant,
    EventVisibility,
    GalleryStyle,
    ParticipantRole,
    ParticipantStatus,
)
from scrapbook.models.media import Image, MediaType

__all__ = [
    "User",
    "Event",
    "EventParticipant",
    "EventVisibility",
    "GalleryStyle",
    "ParticipantRole",
    "ParticipantStatus",
    "Image",
    "MediaType",
]
