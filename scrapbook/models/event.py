"""Event and membership models."""

import json
import secrets
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel, UniqueConstraint


class EventVisibility(str, Enum):
    PRIVATE = "PRIVATE"
    PUBLIC = "PUBLIC"
    INVITE_ONLY = "INVITE_ONLY"


class GalleryStyle(str, Enum):
    SCRAPBOOK = "SCRAPBOOK"
    GRID = "GRID"
    TIMELINE = "TIMELINE"


class ParticipantStatus(str, Enum):
    # PENDING and DECLINED are reserved for invite flows; the join flow never sets them.
    PENDING = "PENDING"
    JOINED = "JOINED"
    DECLINED = "DECLINED"
    LEFT = "LEFT"


class ParticipantRole(str, Enum):
    ADMIN = "ADMIN"
    MODERATOR = "MODERATOR"
    ATTENDEE = "ATTENDEE"


class Event(SQLModel, table=True):
    __tablename__ = "events"

    id: str = Field(default_factory=lambda: f"evt_{secrets.token_hex(6)}", primary_key=True)
    creator_id: str = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    name: str
    description: Optional[str] = None
    location: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    visibility: EventVisibility = Field(default=EventVisibility.PRIVATE)
    is_public_gallery: bool = Field(default=False)
    max_attendees: Optional[int] = None
    max_photos_per_attendee: Optional[int] = None
    gallery_style: GalleryStyle = Field(default=GalleryStyle.SCRAPBOOK)
    allow_comments: bool = Field(default=False)
    allow_joining: bool = Field(default=False)
    join_code: Optional[str] = Field(default=None, unique=True, index=True)
    join_code_expires_at: Optional[datetime] = None
    cover_image_url: Optional[str] = None
    features: str = "[]"  # JSON array of tags
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def feature_list(self) -> list[str]:
        return json.loads(self.features or "[]")


class EventParticipant(SQLModel, table=True):
    __tablename__ = "event_participants"
    __table_args__ = (UniqueConstraint("event_id", "user_id", name="uq_participant_event_user"),)

    id: str = Field(default_factory=lambda: f"par_{secrets.token_hex(6)}", primary_key=True)
    event_id: str = Field(foreign_key="events.id", index=True, ondelete="CASCADE")
    user_id: str = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    status: ParticipantStatus = Field(default=ParticipantStatus.PENDING)
    role: str = Field(default=ParticipantRole.ATTENDEE.value)
    joined_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    left_at: Optional[datetime] = None
    meta: Optional[str] = None  # JSON
