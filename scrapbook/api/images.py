"""Media API endpoints."""

from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from scrapbook.api.deps import get_auth_context, get_context
from scrapbook.config import settings
from scrapbook.context import RequestContext
from scrapbook.schemas.common import MessageResponse
from scrapbook.schemas.media import (
    GalleryResponse,
    MediaListResponse,
    MediaPageResponse,
    MediaUploadResponse,
)
from scrapbook.services import media_service

router = APIRouter(prefix="/images", tags=["media"])
media_router = APIRouter(prefix="/media", tags=["media"])


def upload(
    file: UploadFile = File(...),
    event_id: str = Form(default="", alias="eventId"),
    description: Optional[str] = Form(default=None),
    ctx: RequestContext = Depends(get_auth_context),
):
    """Upload a photo or video to an event the caller has joined."""
    # One byte past the ceiling is enough to detect an oversized file.
    data = file.file.read(settings.max_upload_bytes + 1)
    return media_service.upload_media(
        ctx,
        event_id=event_id,
        data=data,
        content_type=file.content_type or "application/octet-stream",
        description=description,
    )


for _router in (media_router, router):
    _router.add_api_route(
        "/upload",
        upload,
        methods=["POST"],
        response_model=MediaUploadResponse,
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/recent", response_model=MediaPageResponse)
def recent(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    ctx: RequestContext = Depends(get_context),
):
    """Newest media the caller may see, paginated."""
    return media_service.list_recent(ctx, page, limit)


@router.get("/gallery", response_model=GalleryResponse)
def gallery(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    start_date: Optional[datetime] = Query(default=None, alias="startDate"),
    end_date: Optional[datetime] = Query(default=None, alias="endDate"),
    event_id: Optional[str] = Query(default=None, alias="eventId"),
    media_type: Literal["image", "video", "all"] = Query(default="all", alias="mediaType"),
    sort_field: Literal["createdAt", "eventDate"] = Query(default="createdAt", alias="sortField"),
    sort_order: Literal["asc", "desc"] = Query(default="desc", alias="sortOrder"),
    ctx: RequestContext = Depends(get_auth_context),
):
    """The caller's own uploads with filters."""
    return media_service.user_gallery(
        ctx,
        page,
        limit,
        start_date=start_date,
        end_date=end_date,
        event_id=event_id,
        media_type=media_type,
        sort_field=sort_field,
        sort_order=sort_order,
    )


@router.get("/event/{event_id}", response_model=MediaListResponse)
def event_images(event_id: str, ctx: RequestContext = Depends(get_context)):
    return media_service.list_event_images(ctx, event_id)


@router.get("/event/{event_id}/media", response_model=MediaPageResponse)
def event_media(
    event_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    ctx: RequestContext = Depends(get_context),
):
    return media_service.list_event_media_page(ctx, event_id, page, limit)


@router.delete("/{media_id}", response_model=MessageResponse)
def delete_media(media_id: str, ctx: RequestContext = Depends(get_auth_context)):
    """Delete a media item. Uploader or event creator only."""
    return media_service.delete_media(ctx, media_id)
