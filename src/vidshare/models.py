"""Domain models for vidshare."""

from datetime import datetime, timezone
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field, computed_field

SortBy = Literal["recent", "views"]

ANONYMOUS = "Anonymous"


def new_id() -> str:
    """Opaque identifier for records, blobs and tokens."""
    return uuid4().hex


class Video(BaseModel):
    """A video record as stored in the catalog."""

    video_id: str = Field(default_factory=new_id)
    title: str
    description: str
    user_id: str  # owner
    storage_id: str  # primary content blob
    thumbnail_id: str | None = None
    views: int = Field(default=0, ge=0)
    created_at: datetime | None = None  # absent on legacy rows


class VideoDetails(Video):
    """A video with its owner name and storage references resolved to URLs."""

    username: str = ANONYMOUS
    url: str | None = None
    thumbnail_url: str | None = None


class Comment(BaseModel):
    """A comment on a video. Stored in the schema, not exposed by any operation."""

    comment_id: str = Field(default_factory=new_id)
    video_id: str
    user_id: str
    text: str


class User(BaseModel):
    """An identity record. Email is the only field shown to other users."""

    user_id: str = Field(default_factory=new_id)
    email: str | None = None
    token: str = Field(default_factory=new_id)

    @computed_field
    @property
    def display_name(self) -> str:
        return self.email or ANONYMOUS


class UploadSlot(BaseModel):
    """A one-time upload destination."""

    token: str
    url: str


class Blob(BaseModel):
    """Metadata of an uploaded file."""

    storage_id: str = Field(default_factory=new_id)
    content_type: str = "application/octet-stream"
    size: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
