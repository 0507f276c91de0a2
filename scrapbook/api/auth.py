"""Authentication API endpoints."""

from fastapi import APIRouter, Depends, status

from scrapbook.api.deps import get_auth_context, get_context
from scrapbook.context import RequestContext
from scrapbook.schemas.auth import AuthResponse, CurrentUserResponse, LoginRequest, RegisterRequest
from scrapbook.services import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, ctx: RequestContext = Depends(get_context)):
    """Create an account. Returns the user and a bearer token."""
    return auth_service.register(ctx, request)


@router.post("/login", response_model=AuthResponse)
def login(request: LoginRequest, ctx: RequestContext = Depends(get_context)):
    return auth_service.login(ctx, request)


@router.get("/me", response_model=CurrentUserResponse)
def me(ctx: RequestContext = Depends(get_auth_context)):
    """Get the current user's profile with counts."""
    return auth_service.current_user(ctx)
