"""Joining and leaving events.

Membership rows are never deleted here. Leaving flips the row to LEFT and a
later join flips the same row back to JOINED, so each (event, user) pair has
at most one row.

The capacity check and the insert are separate statements; two concurrent
joins can both pass the check. Transient over-capacity is accepted.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError

from scrapbook.context import RequestContext
from scrapbook.errors import BadRequest, Conflict, Forbidden
from scrapbook.models.event import EventParticipant, ParticipantRole, ParticipantStatus
from scrapbook.schemas.event import MembershipResponse
from scrapbook.services import access
from scrapbook.services.event_service import get_event_or_404, joined_count, to_participant_response
from scrapbook.utils.security import as_utc

logger = logging.getLogger(__name__)


def join_event(ctx: RequestContext, event_id: str, join_code: Optional[str] = None) -> MembershipResponse:
    """Admit the requester to an event. Checks run in order; the first failure wins."""
    user = ctx.require_user()
    session = ctx.session
    event = get_event_or_404(session, event_id)
    now = datetime.now(timezone.utc)

    membership = access.get_membership(session, event.id, user.id)

    if membership and membership.status == ParticipantStatus.JOINED:
        raise BadRequest("You are already a participant of this event")

    if membership and membership.status == ParticipantStatus.LEFT:
        # Returning members skip the joining, code and capacity checks.
        membership.status = ParticipantStatus.JOINED
        membership.left_at = None
        membership.joined_at = now
        session.add(membership)
        session.commit()
        session.refresh(membership)
        logger.info("User %s rejoined event %s [%s]", user.id, event.id, ctx.request_id)
        return MembershipResponse(
            message="Successfully rejoined event",
            participant=to_participant_response(session, membership),
        )

    creator = access.is_creator(event, user.id)

    if not event.allow_joining and not creator:
        raise Forbidden("This event is not accepting participants")

    if event.join_code:
        if join_code != event.join_code:
            raise Forbidden("Invalid join code")
        expires_at = as_utc(event.join_code_expires_at)
        if expires_at is not None and expires_at < now:
            raise Forbidden("Join code has expired")

    if event.max_attendees is not None and joined_count(session, event.id) >= event.max_attendees:
        raise BadRequest("This event is at capacity")

    role = ParticipantRole.ADMIN if creator else ParticipantRole.ATTENDEE
    if membership is None:
        membership = EventParticipant(event_id=event.id, user_id=user.id)
    # A reserved PENDING/DECLINED row is reused rather than duplicated.
    membership.status = ParticipantStatus.JOINED
    membership.role = role.value
    membership.joined_at = now
    membership.left_at = None
    session.add(membership)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict("Membership for this event already exists")
    session.refresh(membership)

    logger.info("User %s joined event %s as %s [%s]", user.id, event.id, role.value, ctx.request_id)
    return MembershipResponse(
        message="Successfully joined event",
        participant=to_participant_response(session, membership),
    )


def leave_event(ctx: RequestContext, event_id: str) -> MembershipResponse:
    user = ctx.require_user()
    session = ctx.session
    event = get_event_or_404(session, event_id)

    membership = access.get_membership(session, event.id, user.id)
    if not membership or membership.status != ParticipantStatus.JOINED:
        raise BadRequest("You are not a participant of this event")
    if access.is_creator(event, user.id):
        raise BadRequest("The event creator cannot leave their own event")

    membership.status = ParticipantStatus.LEFT
    membership.left_at = datetime.now(timezone.utc)
    session.add(membership)
    session.commit()
    session.refresh(membership)

    logger.info("User %s left event %s [%s]", user.id, event.id, ctx.request_id)
    return MembershipResponse(
        message="Successfully left event",
        participant=to_participant_response(session, membership),
    )
