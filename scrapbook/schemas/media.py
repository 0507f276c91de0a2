"""Media catalog schemas."""

from datetime import datetime
from typing import Any, Optional

from scrapbook.schemas.common import CamelModel, Pagination, UserSummary


class MediaVersions(CamelModel):
    thumbnail: str
    medium: str
    original: str


class EventRef(CamelModel):
    id: str
    name: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class MediaResponse(CamelModel):
    id: str
    url: str
    description: Optional[str]
    media_type: str
    width: Optional[int]
    height: Optional[int]
    size: Optional[int]
    format: Optional[str]
    created_at: datetime
    uploader: UserSummary
    event: Optional[EventRef]
    versions: MediaVersions


class MediaUploadResponse(MediaResponse):
    message: str


class MediaListResponse(CamelModel):
    count: int
    data: list[MediaResponse]


class MediaPageResponse(CamelModel):
    data: list[MediaResponse]
    pagination: Pagination


class GalleryFilters(CamelModel):
    events: list[EventRef]
    applied_filters: dict[str, Any]


class GalleryResponse(MediaPageResponse):
    filters: GalleryFilters
