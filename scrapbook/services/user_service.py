"""User directory: profiles, per-user event/media listings, stats, activity feed."""

import logging
from datetime import datetime, timezone

from sqlmodel import Session, col, func, select

from scrapbook.context import RequestContext
from scrapbook.errors import BadRequest, Forbidden, NotFound
from scrapbook.models.event import Event, EventParticipant, ParticipantStatus
from scrapbook.models.media import Image
from scrapbook.models.user import User
from scrapbook.schemas.auth import UserResponse
from scrapbook.schemas.event import EventResponse
from scrapbook.schemas.media import MediaResponse
from scrapbook.schemas.user import (
    ActivityItem,
    EventUploadCount,
    MediaStatsResponse,
    MediaTypeCount,
    PublicUserResponse,
    StatusCount,
    UserDetailResponse,
    UserProfileResponse,
    UserUpdateRequest,
)
from scrapbook.services import access
from scrapbook.services.auth_service import to_user_response, user_counts
from scrapbook.services.event_service import joined_count, purge_event, to_event_response
from scrapbook.services.media_service import to_media_response
from scrapbook.utils.security import as_utc

logger = logging.getLogger(__name__)


def get_user_or_404(session: Session, user_id: str) -> User:
    user = session.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


def _public(session: Session, user: User) -> PublicUserResponse:
    return PublicUserResponse(
        id=user.id,
        name=user.name,
        avatar_url=user.avatar_url,
        created_at=user.created_at,
        counts=user_counts(session, user.id),
    )


def _ensure_self(ctx: RequestContext, user_id: str, action: str) -> None:
    if ctx.user_id != user_id:
        raise Forbidden(f"You can only {action} your own account")


def _visible_uploads_query(ctx: RequestContext, uploader_id: str):
    query = select(Image).where(Image.uploader_id == uploader_id)
    if uploader_id != ctx.user_id:
        query = query.outerjoin(Event, col(Image.event_id) == Event.id).where(
            access.visible_media_clause(ctx.user_id)
        )
    return query.order_by(col(Image.created_at).desc())


# --- Directory ---

def list_users(ctx: RequestContext) -> list[PublicUserResponse]:
    users = ctx.session.exec(select(User).order_by(col(User.created_at))).all()
    return [_public(ctx.session, u) for u in users]


def get_user_detail(ctx: RequestContext, user_id: str) -> UserDetailResponse:
    session = ctx.session
    user = get_user_or_404(session, user_id)

    uploads = session.exec(_visible_uploads_query(ctx, user.id).limit(10)).all()
    created = session.exec(
        select(Event)
        .where(Event.creator_id == user.id, access.readable_events_clause(ctx.user_id))
        .order_by(col(Event.created_at).desc())
    ).all()
    return UserDetailResponse(
        **_public(session, user).model_dump(),
        recent_uploads=[to_media_response(session, i) for i in uploads],
        created_events=[to_event_response(session, e, ctx.user_id) for e in created],
    )


def update_user(ctx: RequestContext, user_id: str, patch: UserUpdateRequest) -> UserResponse:
    ctx.require_user()
    session = ctx.session
    user = get_user_or_404(session, user_id)
    _ensure_self(ctx, user.id, "update")

    provided = patch.model_fields_set
    if not provided:
        raise BadRequest("No updates provided")

    if "name" in provided:
        name = (patch.name or "").strip()
        if not name:
            raise BadRequest("Name cannot be empty")
        user.name = name
    if "avatar_url" in provided:
        user.avatar_url = patch.avatar_url

    user.updated_at = datetime.now(timezone.utc)
    session.add(user)
    session.commit()
    session.refresh(user)
    return to_user_response(user)


def delete_user(ctx: RequestContext, user_id: str) -> None:
    """Remove the account with its created events, memberships, and uploads."""
    ctx.require_user()
    session = ctx.session
    user = get_user_or_404(session, user_id)
    _ensure_self(ctx, user.id, "delete")

    for event in session.exec(select(Event).where(Event.creator_id == user.id)).all():
        purge_event(session, event)
    session.flush()
    for participant in session.exec(
        select(EventParticipant).where(EventParticipant.user_id == user.id)
    ).all():
        session.delete(participant)
    for image in session.exec(select(Image).where(Image.uploader_id == user.id)).all():
        session.delete(image)
    session.flush()
    session.delete(user)
    session.commit()
    logger.info("Deleted user %s [%s]", user_id, ctx.request_id)


# --- Per-user listings ---

def user_events(ctx: RequestContext, user_id: str) -> list[EventResponse]:
    """Events the user has joined, limited to those the requester can read."""
    session = ctx.session
    get_user_or_404(session, user_id)
    events = session.exec(
        select(Event)
        .join(EventParticipant, col(EventParticipant.event_id) == Event.id)
        .where(
            EventParticipant.user_id == user_id,
            EventParticipant.status == ParticipantStatus.JOINED,
            access.readable_events_clause(ctx.user_id),
        )
        .order_by(col(Event.created_at).desc())
    ).all()
    return [to_event_response(session, e, ctx.user_id) for e in events]


def user_images(ctx: RequestContext, user_id: str) -> list[MediaResponse]:
    session = ctx.session
    get_user_or_404(session, user_id)
    images = session.exec(_visible_uploads_query(ctx, user_id)).all()
    return [to_media_response(session, i) for i in images]


def created_events(ctx: RequestContext) -> list[EventResponse]:
    user = ctx.require_user()
    events = ctx.session.exec(
        select(Event).where(Event.creator_id == user.id).order_by(col(Event.created_at).desc())
    ).all()
    return [to_event_response(ctx.session, e, user.id) for e in events]


def joined_events(ctx: RequestContext) -> list[EventResponse]:
    user = ctx.require_user()
    events = ctx.session.exec(
        select(Event)
        .join(EventParticipant, col(EventParticipant.event_id) == Event.id)
        .where(
            EventParticipant.user_id == user.id,
            EventParticipant.status == ParticipantStatus.JOINED,
            Event.creator_id != user.id,
        )
        .order_by(col(EventParticipant.joined_at).desc())
    ).all()
    return [to_event_response(ctx.session, e, user.id) for e in events]


# --- Profile & stats ---

def user_profile(ctx: RequestContext, user_id: str) -> UserProfileResponse:
    session = ctx.session
    user = get_user_or_404(session, user_id)
    rows = session.exec(
        select(EventParticipant.status, func.count())
        .where(EventParticipant.user_id == user.id)
        .group_by(EventParticipant.status)
    ).all()
    return UserProfileResponse(
        **_public(session, user).model_dump(),
        email=user.email,
        updated_at=user.updated_at,
        participation_stats=[StatusCount(status=status.value, count=count) for status, count in rows],
    )


def media_stats(ctx: RequestContext, user_id: str) -> MediaStatsResponse:
    session = ctx.session
    user = get_user_or_404(session, user_id)

    by_type = session.exec(
        select(Image.media_type, func.count())
        .where(Image.uploader_id == user.id)
        .group_by(Image.media_type)
    ).all()
    by_event = session.exec(
        select(Event.id, Event.name, func.count(col(Image.id)))
        .join(Image, col(Image.event_id) == Event.id)
        .where(Image.uploader_id == user.id)
        .group_by(Event.id, Event.name)
        .order_by(col(Event.created_at).desc())
    ).all()
    total = session.exec(
        select(func.count()).select_from(Image).where(Image.uploader_id == user.id)
    ).one()
    latest = session.exec(
        select(Image).where(Image.uploader_id == user.id).order_by(col(Image.created_at).desc())
    ).first()

    return MediaStatsResponse(
        total_uploads=total,
        media_by_type=[MediaTypeCount(media_type=t.value, count=c) for t, c in by_type],
        events_with_media=[EventUploadCount(id=i, name=n, count=c) for i, n, c in by_event],
        latest_upload=to_media_response(session, latest) if latest else None,
    )


def activities(ctx: RequestContext, user_id: str) -> list[ActivityItem]:
    """Recent joins, uploads, and created events merged newest first, capped at 20."""
    session = ctx.session
    user = get_user_or_404(session, user_id)

    participations = session.exec(
        select(EventParticipant)
        .where(EventParticipant.user_id == user.id)
        .order_by(col(EventParticipant.joined_at).desc())
        .limit(10)
    ).all()
    uploads = session.exec(
        select(Image).where(Image.uploader_id == user.id).order_by(col(Image.created_at).desc()).limit(10)
    ).all()
    created = session.exec(
        select(Event).where(Event.creator_id == user.id).order_by(col(Event.created_at).desc()).limit(5)
    ).all()

    items: list[ActivityItem] = []
    for p in participations:
        event = session.get(Event, p.event_id)
        items.append(ActivityItem(
            type="participation",
            timestamp=as_utc(p.joined_at),
            data={
                "eventId": p.event_id,
                "eventName": event.name if event else None,
                "status": p.status.value,
                "role": p.role,
            },
        ))
    for image in uploads:
        items.append(ActivityItem(
            type="upload",
            timestamp=as_utc(image.created_at),
            data={
                "id": image.id,
                "url": image.url,
                "mediaType": image.media_type.value,
                "eventId": image.event_id,
            },
        ))
    for event in created:
        items.append(ActivityItem(
            type="event_creation",
            timestamp=as_utc(event.created_at),
            data={
                "id": event.id,
                "name": event.name,
                "participantCount": joined_count(session, event.id),
            },
        ))

    items.sort(key=lambda item: item.timestamp, reverse=True)
    return items[:20]
