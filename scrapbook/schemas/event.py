"""Event and membership request/response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from scrapbook.models.event import EventVisibility, GalleryStyle, ParticipantRole
from scrapbook.schemas.common import CamelModel, UserSummary


class EventCreateRequest(CamelModel):
    name: str
    description: Optional[str] = None
    location: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    visibility: EventVisibility = EventVisibility.PRIVATE
    is_public_gallery: bool = False
    max_attendees: Optional[int] = Field(default=None, ge=1)
    max_photos_per_attendee: Optional[int] = Field(default=None, ge=1)
    gallery_style: GalleryStyle = GalleryStyle.SCRAPBOOK
    allow_comments: bool = False
    allow_joining: bool = False
    join_code: Optional[str] = None
    join_code_expires_at: Optional[datetime] = None
    cover_image_url: Optional[str] = None
    features: list[str] = []


class EventUpdateRequest(CamelModel):
    """Patch: only fields present in the request body are applied."""

    name: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    visibility: Optional[EventVisibility] = None
    is_public_gallery: Optional[bool] = None
    max_attendees: Optional[int] = Field(default=None, ge=1)
    max_photos_per_attendee: Optional[int] = Field(default=None, ge=1)
    gallery_style: Optional[GalleryStyle] = None
    allow_comments: Optional[bool] = None
    allow_joining: Optional[bool] = None
    join_code: Optional[str] = None
    join_code_expires_at: Optional[datetime] = None
    cover_image_url: Optional[str] = None
    features: Optional[list[str]] = None


class VisibilityUpdateRequest(CamelModel):
    visibility: Optional[EventVisibility] = None
    is_public_gallery: Optional[bool] = None


class JoinRequest(CamelModel):
    join_code: Optional[str] = None


class RoleUpdateRequest(CamelModel):
    role: ParticipantRole


class EventResponse(CamelModel):
    id: str
    name: str
    description: Optional[str]
    location: Optional[str]
    start_date: Optional[datetime]
    end_date: Optional[datetime]
    visibility: EventVisibility
    is_public_gallery: bool
    max_attendees: Optional[int]
    max_photos_per_attendee: Optional[int]
    gallery_style: GalleryStyle
    allow_comments: bool
    allow_joining: bool
    join_code: Optional[str] = None  # only shown to the creator
    join_code_expires_at: Optional[datetime] = None
    cover_image_url: Optional[str]
    features: list[str]
    creator: UserSummary
    participant_count: int
    media_count: int
    created_at: datetime
    updated_at: datetime


class ParticipantResponse(CamelModel):
    id: str
    user: UserSummary
    status: str
    role: str
    joined_at: datetime
    left_at: Optional[datetime]


class EventDetailResponse(EventResponse):
    participants: list[ParticipantResponse]
    membership_status: Optional[str] = None  # requester's own status, if any


class MyEventsResponse(CamelModel):
    created: list[EventResponse]
    joined: list[EventResponse]


class MembershipResponse(CamelModel):
    message: str
    participant: ParticipantResponse


class CoverImageResponse(CamelModel):
    cover_image_url: str
    message: str
