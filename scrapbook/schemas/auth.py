"""Registration and login schemas."""

from datetime import datetime
from typing import Optional

from scrapbook.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    name: str
    email: str
    password: str
    avatar_url: Optional[str] = None


class LoginRequest(CamelModel):
    email: str
    password: str


class UserResponse(CamelModel):
    id: str
    name: str
    email: str
    avatar_url: Optional[str]
    created_at: datetime


class AuthResponse(CamelModel):
    user: UserResponse
    token: str


class UserCounts(CamelModel):
    uploads: int
    joined_events: int
    created_events: int


class CurrentUserResponse(UserResponse):
    counts: UserCounts
