"""Media catalog model."""

import secrets
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


class Image(SQLModel, table=True):
    __tablename__ = "images"

    id: str = Field(default_factory=lambda: f"med_{secrets.token_hex(6)}", primary_key=True)
    url: str
    public_id: str
    description: Optional[str] = None
    media_type: MediaType = Field(default=MediaType.IMAGE)
    width: Optional[int] = None
    height: Optional[int] = None
    size: Optional[int] = None
    format: Optional[str] = None
    uploader_id: str = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    event_id: Optional[str] = Field(default=None, foreign_key="events.id", index=True, ondelete="CASCADE")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
