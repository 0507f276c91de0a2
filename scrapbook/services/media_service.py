"""Media upload, listing, and deletion business logic."""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlmodel import Session, col, func, select

from scrapbook.config import settings
from scrapbook.context import RequestContext
from scrapbook.errors import BadRequest, NotFound, ServerError
from scrapbook.models.event import Event, EventParticipant, ParticipantStatus
from scrapbook.models.media import Image, MediaType
from scrapbook.schemas.common import MessageResponse, Pagination
from scrapbook.schemas.media import (
    EventRef,
    GalleryFilters,
    GalleryResponse,
    MediaListResponse,
    MediaPageResponse,
    MediaResponse,
    MediaUploadResponse,
    MediaVersions,
)
from scrapbook.services import access
from scrapbook.services.event_service import get_event_or_404, media_count, user_summary
from scrapbook.utils import media_storage

logger = logging.getLogger(__name__)


def to_media_response(session: Session, image: Image) -> MediaResponse:
    event = session.get(Event, image.event_id) if image.event_id else None
    return MediaResponse(
        id=image.id,
        url=image.url,
        description=image.description,
        media_type=image.media_type.value,
        width=image.width,
        height=image.height,
        size=image.size,
        format=image.format,
        created_at=image.created_at,
        uploader=user_summary(session, image.uploader_id),
        event=EventRef(id=event.id, name=event.name) if event else None,
        versions=MediaVersions(**media_storage.get_media_versions(image.url, image.media_type.value)),
    )


def upload_media(
    ctx: RequestContext,
    event_id: str,
    data: bytes,
    content_type: str,
    description: Optional[str] = None,
) -> MediaUploadResponse:
    """Validate, push to the CDN, then record. Nothing is recorded if the CDN call fails."""
    user = ctx.require_user()
    session = ctx.session

    media_type = media_storage.validate_upload(data, content_type)
    if not event_id:
        raise BadRequest("eventId is required")

    event = get_event_or_404(session, event_id)
    access.ensure_can_upload(ctx, event)

    if event.max_photos_per_attendee is not None and not access.is_creator(event, user.id):
        uploaded = session.exec(
            select(func.count()).select_from(Image).where(
                Image.event_id == event.id,
                Image.uploader_id == user.id,
            )
        ).one()
        if uploaded >= event.max_photos_per_attendee:
            raise BadRequest(
                f"Upload limit reached ({event.max_photos_per_attendee} per attendee)"
            )

    result = media_storage.upload_file(data, f"{settings.media_folder}/{event.id}", media_type.value)

    image = Image(
        url=result["secure_url"],
        public_id=result["public_id"],
        description=description or "",
        media_type=media_type,
        width=result.get("width"),
        height=result.get("height"),
        size=result.get("bytes", len(data)),
        format=result.get("format"),
        uploader_id=user.id,
        event_id=event.id,
    )
    session.add(image)
    session.commit()
    session.refresh(image)

    logger.info("Stored %s %s for event %s [%s]", media_type.value, image.id, event.id, ctx.request_id)
    return MediaUploadResponse(
        **to_media_response(session, image).model_dump(),
        message=f"{media_type.value} uploaded successfully",
    )


def _event_media_query(event_id: str):
    return select(Image).where(Image.event_id == event_id).order_by(col(Image.created_at).desc())


def list_event_images(ctx: RequestContext, event_id: str) -> MediaListResponse:
    event = get_event_or_404(ctx.session, event_id)
    access.ensure_can_read_event(ctx, event)
    images = ctx.session.exec(_event_media_query(event.id)).all()
    data = [to_media_response(ctx.session, i) for i in images]
    return MediaListResponse(count=len(data), data=data)


def list_event_media_page(ctx: RequestContext, event_id: str, page: int, limit: int) -> MediaPageResponse:
    session = ctx.session
    event = get_event_or_404(session, event_id)
    access.ensure_can_read_event(ctx, event)

    total = media_count(session, event.id)
    images = session.exec(_event_media_query(event.id).offset((page - 1) * limit).limit(limit)).all()
    return MediaPageResponse(
        data=[to_media_response(session, i) for i in images],
        pagination=Pagination.build(page, limit, total),
    )


def list_recent(ctx: RequestContext, page: int, limit: int) -> MediaPageResponse:
    """Newest media across every event the requester may see."""
    session = ctx.session
    query = (
        select(Image)
        .outerjoin(Event, col(Image.event_id) == Event.id)
        .where(access.visible_media_clause(ctx.user_id))
    )
    total = session.exec(select(func.count()).select_from(query.subquery())).one()
    images = session.exec(
        query.order_by(col(Image.created_at).desc()).offset((page - 1) * limit).limit(limit)
    ).all()
    return MediaPageResponse(
        data=[to_media_response(session, i) for i in images],
        pagination=Pagination.build(page, limit, total),
    )


def user_gallery(
    ctx: RequestContext,
    page: int,
    limit: int,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    event_id: Optional[str] = None,
    media_type: str = "all",
    sort_field: str = "createdAt",
    sort_order: str = "desc",
) -> GalleryResponse:
    """The requester's own uploads with filters, plus their events for filter menus."""
    user = ctx.require_user()
    session = ctx.session

    query = select(Image).where(Image.uploader_id == user.id)
    if event_id:
        query = query.where(Image.event_id == event_id)
    if media_type != "all":
        query = query.where(Image.media_type == MediaType(media_type))
    if start_date:
        query = query.where(Image.created_at >= start_date)
    if end_date:
        query = query.where(Image.created_at <= end_date)

    total = session.exec(select(func.count()).select_from(query.subquery())).one()

    if sort_field == "eventDate":
        query = query.outerjoin(Event, col(Image.event_id) == Event.id)
        sort_col = col(Event.start_date)
    else:
        sort_col = col(Image.created_at)
    query = query.order_by(sort_col.asc() if sort_order == "asc" else sort_col.desc())

    images = session.exec(query.offset((page - 1) * limit).limit(limit)).all()

    my_events = session.exec(
        select(Event)
        .where(
            or_(
                Event.creator_id == user.id,
                col(Event.id).in_(
                    select(EventParticipant.event_id).where(
                        EventParticipant.user_id == user.id,
                        EventParticipant.status == ParticipantStatus.JOINED,
                    )
                ),
            )
        )
        .order_by(col(Event.start_date).desc())
    ).all()

    return GalleryResponse(
        data=[to_media_response(session, i) for i in images],
        pagination=Pagination.build(page, limit, total),
        filters=GalleryFilters(
            events=[
                EventRef(id=e.id, name=e.name, start_date=e.start_date, end_date=e.end_date)
                for e in my_events
            ],
            applied_filters={
                "startDate": start_date.isoformat() if start_date else None,
                "endDate": end_date.isoformat() if end_date else None,
                "eventId": event_id,
                "mediaType": media_type,
                "sortField": sort_field,
                "sortOrder": sort_order,
            },
        ),
    )


def delete_media(ctx: RequestContext, media_id: str) -> MessageResponse:
    """Uploader or parent event creator only. The row is flushed out before the CDN asset goes."""
    ctx.require_user()
    session = ctx.session
    image = session.get(Image, media_id)
    if not image:
        raise NotFound("Media not found")

    event = session.get(Event, image.event_id) if image.event_id else None
    access.ensure_can_delete_media(ctx, image, event)

    public_id, media_type = image.public_id, image.media_type.value
    session.delete(image)
    session.flush()
    try:
        media_storage.delete_file(public_id, media_type)
    except ServerError:
        session.rollback()
        raise
    session.commit()

    logger.info("Deleted %s %s [%s]", media_type, media_id, ctx.request_id)
    return MessageResponse(message=f"{media_type} deleted successfully")
