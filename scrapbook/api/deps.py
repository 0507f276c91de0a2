"""Common API dependencies: per-request context and current user extraction."""

from typing import Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from scrapbook.context import RequestContext
from scrapbook.database import get_session
from scrapbook.errors import Unauthorized
from scrapbook.models.user import User
from scrapbook.utils.security import decode_token

bearer_scheme = HTTPBearer(auto_error=False)


def _user_from_token(token: str, session: Session) -> User:
    try:
        payload = decode_token(token)
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token expired")
    except jwt.PyJWTError:
        raise Unauthorized("Invalid token")

    if payload.get("type") != "access":
        raise Unauthorized("Invalid token type")

    user = session.get(User, payload.get("sub"))
    if not user:
        raise Unauthorized("User not found")
    return user


def get_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> RequestContext:
    """Context with optional auth: no token means anonymous, a bad token is rejected."""
    user = _user_from_token(credentials.credentials, session) if credentials else None
    return RequestContext(
        session=session,
        user=user,
        request_id=getattr(request.state, "request_id", ""),
    )


def get_auth_context(ctx: RequestContext = Depends(get_context)) -> RequestContext:
    """Context that requires an authenticated user."""
    ctx.require_user()
    return ctx
