"""Event access rules: who may read, join, upload to, and change an event.

Reads depend only on the public-gallery flag, the creator, and JOINED
membership. The ``visibility`` enum is carried on the event but is not
consulted here.
"""

from typing import Optional

from sqlalchemy import or_
from sqlmodel import Session, col, select

from scrapbook.context import RequestContext
from scrapbook.errors import Forbidden
from scrapbook.models.event import Event, EventParticipant, ParticipantStatus
from scrapbook.models.media import Image


def get_membership(session: Session, event_id: str, user_id: Optional[str]) -> Optional[EventParticipant]:
    if not user_id:
        return None
    return session.exec(
        select(EventParticipant).where(
            EventParticipant.event_id == event_id,
            EventParticipant.user_id == user_id,
        )
    ).first()


def is_joined(session: Session, event_id: str, user_id: Optional[str]) -> bool:
    membership = get_membership(session, event_id, user_id)
    return membership is not None and membership.status == ParticipantStatus.JOINED


def is_creator(event: Event, user_id: Optional[str]) -> bool:
    return user_id is not None and event.creator_id == user_id


def can_read_event(session: Session, event: Event, user_id: Optional[str]) -> bool:
    if event.is_public_gallery:
        return True
    if is_creator(event, user_id):
        return True
    return is_joined(session, event.id, user_id)


def ensure_can_read_event(ctx: RequestContext, event: Event) -> None:
    if not can_read_event(ctx.session, event, ctx.user_id):
        raise Forbidden("You do not have permission to view this event")


def ensure_creator(ctx: RequestContext, event: Event, action: str = "perform this action") -> None:
    if not is_creator(event, ctx.user_id):
        raise Forbidden(f"Only the event creator can {action}")


def ensure_can_upload(ctx: RequestContext, event: Event) -> None:
    # Creators hold a JOINED ADMIN row from creation, so no separate branch.
    if not is_joined(ctx.session, event.id, ctx.user_id):
        raise Forbidden("You must be a participant to upload media to this event")


def ensure_can_delete_media(ctx: RequestContext, media: Image, event: Optional[Event]) -> None:
    if media.uploader_id == ctx.user_id:
        return
    if event is not None and is_creator(event, ctx.user_id):
        return
    raise Forbidden("You do not have permission to delete this media")


def _joined_event_ids(user_id: str):
    return select(EventParticipant.event_id).where(
        EventParticipant.user_id == user_id,
        EventParticipant.status == ParticipantStatus.JOINED,
    )


def readable_events_clause(user_id: Optional[str]):
    """WHERE clause selecting the events ``user_id`` may read."""
    public = col(Event.is_public_gallery) == True  # noqa: E712
    if not user_id:
        return public
    return or_(
        public,
        Event.creator_id == user_id,
        col(Event.id).in_(_joined_event_ids(user_id)),
    )


def visible_media_clause(user_id: Optional[str]):
    """WHERE clause over Image (outer-joined to Event) for media ``user_id`` may see."""
    public = col(Event.is_public_gallery) == True  # noqa: E712
    if not user_id:
        return public
    return or_(
        public,
        Event.creator_id == user_id,
        col(Image.event_id).in_(_joined_event_ids(user_id)),
        Image.uploader_id == user_id,
    )
