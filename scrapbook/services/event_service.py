"""Event registry business logic: create, read, update, delete, participants."""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, func, select

from scrapbook.config import settings
from scrapbook.context import RequestContext
from scrapbook.errors import BadRequest, Conflict, NotFound
from scrapbook.models.event import (
    Event,
    EventParticipant,
    ParticipantRole,
    ParticipantStatus,
)
from scrapbook.models.media import Image
from scrapbook.models.user import User
from scrapbook.schemas.common import UserSummary
from scrapbook.schemas.event import (
    CoverImageResponse,
    EventCreateRequest,
    EventDetailResponse,
    EventResponse,
    EventUpdateRequest,
    MyEventsResponse,
    ParticipantResponse,
    VisibilityUpdateRequest,
)
from scrapbook.services import access
from scrapbook.utils import media_storage
from scrapbook.utils.security import as_utc

logger = logging.getLogger(__name__)


# --- Lookups & response builders ---

def get_event_or_404(session: Session, event_id: str) -> Event:
    event = session.get(Event, event_id)
    if not event:
        raise NotFound("Event not found")
    return event


def joined_count(session: Session, event_id: str) -> int:
    return session.exec(
        select(func.count()).select_from(EventParticipant).where(
            EventParticipant.event_id == event_id,
            EventParticipant.status == ParticipantStatus.JOINED,
        )
    ).one()


def media_count(session: Session, event_id: str) -> int:
    return session.exec(
        select(func.count()).select_from(Image).where(Image.event_id == event_id)
    ).one()


def user_summary(session: Session, user_id: str) -> UserSummary:
    user = session.get(User, user_id)
    if not user:
        return UserSummary(id=user_id, name="Unknown")
    return UserSummary(id=user.id, name=user.name, avatar_url=user.avatar_url)


def to_event_response(session: Session, event: Event, viewer_id: Optional[str] = None) -> EventResponse:
    show_code = access.is_creator(event, viewer_id)
    return EventResponse(
        id=event.id,
        name=event.name,
        description=event.description,
        location=event.location,
        start_date=event.start_date,
        end_date=event.end_date,
        visibility=event.visibility,
        is_public_gallery=bool(event.is_public_gallery),
        max_attendees=event.max_attendees,
        max_photos_per_attendee=event.max_photos_per_attendee,
        gallery_style=event.gallery_style,
        allow_comments=bool(event.allow_comments),
        allow_joining=bool(event.allow_joining),
        join_code=event.join_code if show_code else None,
        join_code_expires_at=event.join_code_expires_at if show_code else None,
        cover_image_url=event.cover_image_url,
        features=event.feature_list(),
        creator=user_summary(session, event.creator_id),
        participant_count=joined_count(session, event.id),
        media_count=media_count(session, event.id),
        created_at=event.created_at,
        updated_at=event.updated_at,
    )


def to_participant_response(session: Session, participant: EventParticipant) -> ParticipantResponse:
    return ParticipantResponse(
        id=participant.id,
        user=user_summary(session, participant.user_id),
        status=participant.status.value,
        role=participant.role,
        joined_at=participant.joined_at,
        left_at=participant.left_at,
    )


def _joined_participants(session: Session, event_id: str) -> list[EventParticipant]:
    return list(session.exec(
        select(EventParticipant).where(
            EventParticipant.event_id == event_id,
            EventParticipant.status == ParticipantStatus.JOINED,
        ).order_by(col(EventParticipant.joined_at))
    ).all())


def _ensure_join_code_free(session: Session, join_code: str, exclude_event_id: Optional[str] = None) -> None:
    query = select(Event.id).where(Event.join_code == join_code)
    if exclude_event_id:
        query = query.where(Event.id != exclude_event_id)
    if session.exec(query).first():
        raise Conflict("Join code is already in use by another event")


def _commit_event(session: Session, event: Event) -> None:
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict("Join code is already in use by another event")
    session.refresh(event)


# --- Reads ---

def list_events(ctx: RequestContext) -> list[EventResponse]:
    """Events the requester may read, newest first."""
    events = ctx.session.exec(
        select(Event)
        .where(access.readable_events_clause(ctx.user_id))
        .order_by(col(Event.created_at).desc())
    ).all()
    return [to_event_response(ctx.session, e, ctx.user_id) for e in events]


def my_events(ctx: RequestContext) -> MyEventsResponse:
    user = ctx.require_user()
    session = ctx.session
    created = session.exec(
        select(Event).where(Event.creator_id == user.id).order_by(col(Event.created_at).desc())
    ).all()
    joined = session.exec(
        select(Event)
        .join(EventParticipant, col(EventParticipant.event_id) == Event.id)
        .where(
            EventParticipant.user_id == user.id,
            EventParticipant.status == ParticipantStatus.JOINED,
            Event.creator_id != user.id,
        )
        .order_by(col(Event.created_at).desc())
    ).all()
    return MyEventsResponse(
        created=[to_event_response(session, e, user.id) for e in created],
        joined=[to_event_response(session, e, user.id) for e in joined],
    )


def get_event(ctx: RequestContext, event_id: str) -> EventDetailResponse:
    session = ctx.session
    event = get_event_or_404(session, event_id)
    access.ensure_can_read_event(ctx, event)

    membership = access.get_membership(session, event.id, ctx.user_id)
    base = to_event_response(session, event, ctx.user_id)
    return EventDetailResponse(
        **base.model_dump(),
        participants=[to_participant_response(session, p) for p in _joined_participants(session, event.id)],
        membership_status=membership.status.value if membership else None,
    )


def list_participants(ctx: RequestContext, event_id: str) -> list[ParticipantResponse]:
    event = get_event_or_404(ctx.session, event_id)
    access.ensure_can_read_event(ctx, event)
    return [to_participant_response(ctx.session, p) for p in _joined_participants(ctx.session, event.id)]


# --- Writes ---

def create_event(ctx: RequestContext, request: EventCreateRequest) -> EventResponse:
    """Create an event; the creator becomes its JOINED ADMIN participant."""
    user = ctx.require_user()
    session = ctx.session

    name = request.name.strip()
    if not name:
        raise BadRequest("Event name is required")
    if request.start_date and request.end_date and as_utc(request.end_date) < as_utc(request.start_date):
        raise BadRequest("Event end date must not be before its start date")

    join_code = request.join_code or None
    if join_code:
        _ensure_join_code_free(session, join_code)

    event = Event(
        creator_id=user.id,
        name=name,
        description=request.description,
        location=request.location,
        start_date=request.start_date,
        end_date=request.end_date,
        visibility=request.visibility,
        is_public_gallery=request.is_public_gallery,
        max_attendees=request.max_attendees,
        max_photos_per_attendee=request.max_photos_per_attendee,
        gallery_style=request.gallery_style,
        allow_comments=request.allow_comments,
        allow_joining=request.allow_joining,
        join_code=join_code,
        join_code_expires_at=request.join_code_expires_at,
        cover_image_url=request.cover_image_url,
        features=json.dumps(request.features),
    )
    session.add(event)
    try:
        session.flush()
    except IntegrityError:
        session.rollback()
        raise Conflict("Join code is already in use by another event")
    session.add(EventParticipant(
        event_id=event.id,
        user_id=user.id,
        status=ParticipantStatus.JOINED,
        role=ParticipantRole.ADMIN.value,
    ))
    _commit_event(session, event)

    logger.info("Event %s created by %s [%s]", event.id, user.id, ctx.request_id)
    return to_event_response(session, event, user.id)


def update_event(ctx: RequestContext, event_id: str, patch: EventUpdateRequest) -> EventResponse:
    """Creator-only partial update. Fields absent from the request are left alone."""
    session = ctx.session
    event = get_event_or_404(session, event_id)
    access.ensure_creator(ctx, event, "update the event")

    provided = patch.model_fields_set

    if "name" in provided:
        name = (patch.name or "").strip()
        if not name:
            raise BadRequest("Event name cannot be empty")
        event.name = name
    if "description" in provided:
        event.description = patch.description
    if "location" in provided:
        event.location = patch.location
    if "start_date" in provided:
        event.start_date = patch.start_date
    if "end_date" in provided:
        event.end_date = patch.end_date
    if patch.visibility is not None:
        event.visibility = patch.visibility
    if patch.is_public_gallery is not None:
        event.is_public_gallery = patch.is_public_gallery
    if "max_attendees" in provided:
        event.max_attendees = patch.max_attendees
    if "max_photos_per_attendee" in provided:
        event.max_photos_per_attendee = patch.max_photos_per_attendee
    if patch.gallery_style is not None:
        event.gallery_style = patch.gallery_style
    if patch.allow_comments is not None:
        event.allow_comments = patch.allow_comments
    if patch.allow_joining is not None:
        event.allow_joining = patch.allow_joining
    if "join_code" in provided:
        join_code = patch.join_code or None
        if join_code and join_code != event.join_code:
            _ensure_join_code_free(session, join_code, exclude_event_id=event.id)
        event.join_code = join_code
    if "join_code_expires_at" in provided:
        event.join_code_expires_at = patch.join_code_expires_at
    if "cover_image_url" in provided:
        event.cover_image_url = patch.cover_image_url
    if patch.features is not None:
        event.features = json.dumps(patch.features)

    if event.start_date and event.end_date and as_utc(event.end_date) < as_utc(event.start_date):
        raise BadRequest("Event end date must not be before its start date")

    event.updated_at = datetime.now(timezone.utc)
    session.add(event)
    _commit_event(session, event)
    return to_event_response(session, event, ctx.user_id)


def update_visibility(ctx: RequestContext, event_id: str, request: VisibilityUpdateRequest) -> EventResponse:
    session = ctx.session
    event = get_event_or_404(session, event_id)
    access.ensure_creator(ctx, event, "change event visibility")

    if request.visibility is not None:
        event.visibility = request.visibility
    if request.is_public_gallery is not None:
        event.is_public_gallery = request.is_public_gallery
    event.updated_at = datetime.now(timezone.utc)
    session.add(event)
    session.commit()
    session.refresh(event)
    return to_event_response(session, event, ctx.user_id)


def set_cover_image(ctx: RequestContext, event_id: str, data: bytes, content_type: str) -> CoverImageResponse:
    session = ctx.session
    event = get_event_or_404(session, event_id)
    access.ensure_creator(ctx, event, "update the cover image")

    if data and not content_type.startswith("image/"):
        raise BadRequest("Cover image must be an image file")
    media_storage.validate_upload(data, content_type)

    result = media_storage.upload_file(data, f"{settings.media_folder}/covers", "image")
    event.cover_image_url = result["secure_url"]
    event.updated_at = datetime.now(timezone.utc)
    session.add(event)
    session.commit()
    return CoverImageResponse(
        cover_image_url=event.cover_image_url,
        message="Cover image updated successfully",
    )


def purge_event(session: Session, event: Event) -> None:
    """Delete memberships, then media, then the event row. Caller commits."""
    for participant in session.exec(
        select(EventParticipant).where(EventParticipant.event_id == event.id)
    ).all():
        session.delete(participant)
    for image in session.exec(select(Image).where(Image.event_id == event.id)).all():
        session.delete(image)
    session.flush()
    session.delete(event)


def delete_event(ctx: RequestContext, event_id: str) -> None:
    session = ctx.session
    event = get_event_or_404(session, event_id)
    access.ensure_creator(ctx, event, "delete the event")

    purge_event(session, event)
    session.commit()
    logger.info("Event %s deleted by %s [%s]", event_id, ctx.user_id, ctx.request_id)


def update_participant_role(
    ctx: RequestContext, event_id: str, user_id: str, role: ParticipantRole
) -> ParticipantResponse:
    session = ctx.session
    event = get_event_or_404(session, event_id)
    access.ensure_creator(ctx, event, "change participant roles")

    if user_id == event.creator_id:
        raise BadRequest("The event creator's role cannot be changed")

    membership = access.get_membership(session, event.id, user_id)
    if not membership or membership.status != ParticipantStatus.JOINED:
        raise NotFound("Participant not found")

    membership.role = role.value
    session.add(membership)
    session.commit()
    session.refresh(membership)
    return to_participant_response(session, membership)
