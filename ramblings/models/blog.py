# ramblings/models/blog.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Union
from datetime import datetime
from enum import Enum

from ramblings.core.dates import parse_datetime


def keep_unparseable_timestamp(v):
    """Parse a stored timestamp, keeping the raw value when it is not ISO 8601."""
    parsed = parse_datetime(v)
    return v if parsed is None else parsed


class PostStatus(str, Enum):
    draft = "draft"
    published = "published"


class CommentStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class Post(BaseModel):
    """A blog post as stored in the ``posts`` document, keyed by slug."""
    slug: str
    title: str
    description: str = ""
    content: str = ""
    author: str
    date: str = Field(description="Publish date, ISO 8601 calendar date")
    tags: List[str] = []
    # Free-form in stored data; new posts use PostStatus values
    status: str = PostStatus.draft.value
    created_at: datetime
    updated_at: datetime


class Comment(BaseModel):
    """A reader comment as stored in the ``comments`` document, keyed by id."""
    id: str
    post_slug: str
    author: str
    email: str
    content: str
    status: CommentStatus = CommentStatus.pending
    # Unparseable stored values stay as strings; they sort last in search
    created_at: Union[datetime, str]
    updated_at: Optional[Union[datetime, str]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @field_validator("created_at", "updated_at", mode="before")
    def lenient_timestamps(cls, v):
        return keep_unparseable_timestamp(v)


class Image(BaseModel):
    """
    Metadata for an uploaded image, stored in the ``images`` document.
    The binary lives separately under ``filename``.
    """
    id: str
    filename: str = Field(description="Stored filename: {id}.{extension}")
    original_name: str
    mime_type: str
    size: int = Field(ge=0, description="File size in bytes")
    uploaded_at: Union[datetime, str]
    url: str
    alt: Optional[str] = None
    description: Optional[str] = None

    @field_validator("uploaded_at", mode="before")
    def lenient_timestamp(cls, v):
        return keep_unparseable_timestamp(v)
