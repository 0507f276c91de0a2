"""Per-request context passed explicitly from routers into services."""

from dataclasses import dataclass
from typing import Optional

from sqlmodel import Session

from scrapbook.errors import Unauthorized
from scrapbook.models.user import User


@dataclass
class RequestContext:
    """Everything a service call needs to know about the current request."""

    session: Session
    user: Optional[User]
    request_id: str = ""

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user else None

    def require_user(self) -> User:
        if self.user is None:
            raise Unauthorized("Authentication required")
        return self.user
