"""Registration, login and account summaries."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, func, select

from scrapbook.context import RequestContext
from scrapbook.errors import BadRequest, Conflict, NotFound, Unauthorized
from scrapbook.models.event import Event, EventParticipant, ParticipantStatus
from scrapbook.models.media import Image
from scrapbook.models.user import User
from scrapbook.schemas.auth import (
    AuthResponse,
    CurrentUserResponse,
    LoginRequest,
    RegisterRequest,
    UserCounts,
    UserResponse,
)
from scrapbook.utils.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def user_counts(session: Session, user_id: str) -> UserCounts:
    uploads = session.exec(
        select(func.count()).select_from(Image).where(Image.uploader_id == user_id)
    ).one()
    joined = session.exec(
        select(func.count()).select_from(EventParticipant).where(
            EventParticipant.user_id == user_id,
            EventParticipant.status == ParticipantStatus.JOINED,
        )
    ).one()
    created = session.exec(
        select(func.count()).select_from(Event).where(Event.creator_id == user_id)
    ).one()
    return UserCounts(uploads=uploads, joined_events=joined, created_events=created)


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        avatar_url=user.avatar_url,
        created_at=user.created_at,
    )


def _issue(user: User) -> AuthResponse:
    token = create_access_token(user.id, user.email, user.name)
    return AuthResponse(user=to_user_response(user), token=token)


def register(ctx: RequestContext, request: RegisterRequest) -> AuthResponse:
    """Create an account and return it with a fresh access token."""
    name = request.name.strip()
    email = normalize_email(request.email)
    if not name or not email or not request.password:
        raise BadRequest("Name, email, and password are required")

    session = ctx.session
    existing = session.exec(select(User).where(User.email == email)).first()
    if existing:
        raise Conflict("User with this email already exists")

    user = User(
        name=name,
        email=email,
        password_hash=hash_password(request.password),
        avatar_url=request.avatar_url,
    )
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict("User with this email already exists")
    session.refresh(user)

    logger.info("Registered user %s [%s]", user.id, ctx.request_id)
    return _issue(user)


def login(ctx: RequestContext, request: LoginRequest) -> AuthResponse:
    email = normalize_email(request.email)
    if not email or not request.password:
        raise BadRequest("Email and password are required")

    user = ctx.session.exec(select(User).where(User.email == email)).first()
    if not user:
        raise NotFound("User not found")
    if not verify_password(request.password, user.password_hash):
        raise Unauthorized("Invalid credentials")
    return _issue(user)


def current_user(ctx: RequestContext) -> CurrentUserResponse:
    user = ctx.require_user()
    return CurrentUserResponse(
        **to_user_response(user).model_dump(),
        counts=user_counts(ctx.session, user.id),
    )
