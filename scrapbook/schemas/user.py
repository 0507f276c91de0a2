"""User directory schemas."""

from datetime import datetime
from typing import Any, Optional

from scrapbook.schemas.auth import UserCounts
from scrapbook.schemas.common import CamelModel
from scrapbook.schemas.event import EventResponse
from scrapbook.schemas.media import MediaResponse


class UserUpdateRequest(CamelModel):
    name: Optional[str] = None
    avatar_url: Optional[str] = None


class PublicUserResponse(CamelModel):
    id: str
    name: str
    avatar_url: Optional[str]
    created_at: datetime
    counts: UserCounts


class UserDetailResponse(PublicUserResponse):
    recent_uploads: list[MediaResponse]
    created_events: list[EventResponse]


class StatusCount(CamelModel):
    status: str
    count: int


class UserProfileResponse(PublicUserResponse):
    email: str
    updated_at: datetime
    participation_stats: list[StatusCount]


class MediaTypeCount(CamelModel):
    media_type: str
    count: int


class EventUploadCount(CamelModel):
    id: str
    name: str
    count: int


class MediaStatsResponse(CamelModel):
    total_uploads: int
    media_by_type: list[MediaTypeCount]
    events_with_media: list[EventUploadCount]
    latest_upload: Optional[MediaResponse]


class ActivityItem(CamelModel):
    type: str  # 'participation' | 'upload' | 'event_creation'
    timestamp: datetime
    data: dict[str, Any]
