"""User directory API endpoints."""

from fastapi import APIRouter, Depends

from scrapbook.api.deps import get_auth_context, get_context
from scrapbook.context import RequestContext
from scrapbook.schemas.auth import UserResponse
from scrapbook.schemas.common import MessageResponse
from scrapbook.schemas.event import EventResponse
from scrapbook.schemas.media import MediaResponse
from scrapbook.schemas.user import (
    ActivityItem,
    MediaStatsResponse,
    PublicUserResponse,
    UserDetailResponse,
    UserProfileResponse,
    UserUpdateRequest,
)
from scrapbook.services import user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[PublicUserResponse])
def list_users(ctx: RequestContext = Depends(get_auth_context)):
    return user_service.list_users(ctx)


@router.get("/me/events/created", response_model=list[EventResponse])
def my_created_events(ctx: RequestContext = Depends(get_auth_context)):
    return user_service.created_events(ctx)


@router.get("/me/events/joined", response_model=list[EventResponse])
def my_joined_events(ctx: RequestContext = Depends(get_auth_context)):
    """Events the caller has joined but did not create."""
    return user_service.joined_events(ctx)


@router.get("/{user_id}", response_model=UserDetailResponse)
def get_user(user_id: str, ctx: RequestContext = Depends(get_context)):
    return user_service.get_user_detail(ctx, user_id)


@router.patch("/{user_id}", response_model=UserResponse)
@router.put("/{user_id}", response_model=UserResponse, include_in_schema=False)
def update_user(
    user_id: str,
    request: UserUpdateRequest,
    ctx: RequestContext = Depends(get_auth_context),
):
    """Update your own name or avatar."""
    return user_service.update_user(ctx, user_id, request)


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(user_id: str, ctx: RequestContext = Depends(get_auth_context)):
    """Delete your own account and everything it owns."""
    user_service.delete_user(ctx, user_id)
    return MessageResponse(message="User deleted successfully")


@router.get("/{user_id}/events", response_model=list[EventResponse])
def user_events(user_id: str, ctx: RequestContext = Depends(get_auth_context)):
    return user_service.user_events(ctx, user_id)


@router.get("/{user_id}/images", response_model=list[MediaResponse])
def user_images(user_id: str, ctx: RequestContext = Depends(get_auth_context)):
    return user_service.user_images(ctx, user_id)


@router.get("/{user_id}/profile", response_model=UserProfileResponse)
def user_profile(user_id: str, ctx: RequestContext = Depends(get_auth_context)):
    return user_service.user_profile(ctx, user_id)


@router.get("/{user_id}/media-stats", response_model=MediaStatsResponse)
def media_stats(user_id: str, ctx: RequestContext = Depends(get_auth_context)):
    return user_service.media_stats(ctx, user_id)


@router.get("/{user_id}/activities", response_model=list[ActivityItem])
def activities(user_id: str, ctx: RequestContext = Depends(get_auth_context)):
    """Recent joins, uploads, and created events, newest first."""
    return user_service.activities(ctx, user_id)
