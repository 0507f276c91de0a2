"""Event API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile, status

from scrapbook.api.deps import get_auth_context, get_context
from scrapbook.config import settings
from scrapbook.context import RequestContext
from scrapbook.schemas.common import MessageResponse
from scrapbook.schemas.event import (
    CoverImageResponse,
    EventCreateRequest,
    EventDetailResponse,
    EventResponse,
    EventUpdateRequest,
    JoinRequest,
    MembershipResponse,
    MyEventsResponse,
    ParticipantResponse,
    RoleUpdateRequest,
    VisibilityUpdateRequest,
)
from scrapbook.services import event_service, membership_service

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", response_model=list[EventResponse])
def list_events(ctx: RequestContext = Depends(get_context)):
    """List events readable by the caller (public galleries for anonymous callers)."""
    return event_service.list_events(ctx)


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def create_event(request: EventCreateRequest, ctx: RequestContext = Depends(get_auth_context)):
    return event_service.create_event(ctx, request)


@router.get("/mine", response_model=MyEventsResponse)
def my_events(ctx: RequestContext = Depends(get_auth_context)):
    """Events the caller created and events the caller has joined."""
    return event_service.my_events(ctx)


@router.get("/{event_id}", response_model=EventDetailResponse)
def get_event(event_id: str, ctx: RequestContext = Depends(get_context)):
    return event_service.get_event(ctx, event_id)


@router.patch("/{event_id}", response_model=EventResponse)
@router.put("/{event_id}", response_model=EventResponse, include_in_schema=False)
def update_event(
    event_id: str,
    request: EventUpdateRequest,
    ctx: RequestContext = Depends(get_auth_context),
):
    """Update event properties. Creator only; omitted fields are unchanged."""
    return event_service.update_event(ctx, event_id, request)


@router.delete("/{event_id}", response_model=MessageResponse)
def delete_event(event_id: str, ctx: RequestContext = Depends(get_auth_context)):
    """Delete an event with its memberships and media. Creator only."""
    event_service.delete_event(ctx, event_id)
    return MessageResponse(message="Event deleted successfully")


@router.patch("/{event_id}/visibility", response_model=EventResponse)
@router.put("/{event_id}/visibility", response_model=EventResponse, include_in_schema=False)
def update_visibility(
    event_id: str,
    request: VisibilityUpdateRequest,
    ctx: RequestContext = Depends(get_auth_context),
):
    return event_service.update_visibility(ctx, event_id, request)


@router.post("/{event_id}/cover-image", response_model=CoverImageResponse)
def upload_cover_image(
    event_id: str,
    cover_image: UploadFile = File(..., alias="coverImage"),
    ctx: RequestContext = Depends(get_auth_context),
):
    """Upload a new cover image. Creator only."""
    data = cover_image.file.read(settings.max_upload_bytes + 1)
    return event_service.set_cover_image(
        ctx, event_id, data, cover_image.content_type or "application/octet-stream"
    )


@router.post("/{event_id}/join", response_model=MembershipResponse)
def join_event(
    event_id: str,
    request: Optional[JoinRequest] = None,
    ctx: RequestContext = Depends(get_auth_context),
):
    join_code = request.join_code if request else None
    return membership_service.join_event(ctx, event_id, join_code)


@router.post("/{event_id}/leave", response_model=MembershipResponse)
def leave_event(event_id: str, ctx: RequestContext = Depends(get_auth_context)):
    return membership_service.leave_event(ctx, event_id)


@router.get("/{event_id}/participants", response_model=list[ParticipantResponse])
def list_participants(event_id: str, ctx: RequestContext = Depends(get_context)):
    return event_service.list_participants(ctx, event_id)


@router.patch("/{event_id}/participants/{user_id}", response_model=ParticipantResponse)
def update_participant_role(
    event_id: str,
    user_id: str,
    request: RoleUpdateRequest,
    ctx: RequestContext = Depends(get_auth_context),
):
    """Change a participant's role. Creator only."""
    return event_service.update_participant_role(ctx, event_id, user_id, request.role)
