# ramblings/schemas/blog.py
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List, Union
from datetime import datetime
import datetime as dt
import re

from ramblings.models.blog import PostStatus, CommentStatus

_SLUG_CHARS = re.compile(r"[a-z0-9]")


def _parse_tags(v):
    # The admin form posts tags as "go, backend"
    if v is None:
        return v
    if isinstance(v, str):
        return [tag.strip() for tag in v.split(",") if tag.strip()]
    return v


def _validate_title(v):
    if v is None:
        return v
    if len(v.strip()) == 0:
        raise ValueError('Title cannot be empty')
    if not _SLUG_CHARS.search(v.lower()):
        raise ValueError('Title must contain at least one letter or digit')
    return v


# Blog Post Schemas
class PostBase(BaseModel):
    title: str = Field(..., max_length=255)
    description: str = Field("", max_length=500)
    content: str
    author: str = Field(..., max_length=100)
    tags: List[str] = []
    status: PostStatus = PostStatus.draft


class PostCreate(PostBase):
    date: Optional[dt.date] = None  # Defaults to today

    @field_validator('title')
    def validate_title(cls, v):
        return _validate_title(v)

    @field_validator('content', 'author')
    def validate_required_text(cls, v):
        if not v or len(v.strip()) == 0:
            raise ValueError('Field cannot be empty')
        return v

    @field_validator('tags', mode='before')
    def parse_tags(cls, v):
        return _parse_tags(v)


class PostUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=500)
    content: Optional[str] = None
    author: Optional[str] = Field(None, max_length=100)
    date: Optional[dt.date] = None
    tags: Optional[List[str]] = None
    status: Optional[PostStatus] = None

    @field_validator('title')
    def validate_title(cls, v):
        return _validate_title(v)

    @field_validator('content', 'author')
    def validate_required_text(cls, v):
        if v is not None and len(v.strip()) == 0:
            raise ValueError('Field cannot be empty')
        return v

    @field_validator('tags', mode='before')
    def parse_tags(cls, v):
        return _parse_tags(v)


class PostSummary(BaseModel):
    """Lightweight blog post for list views"""
    slug: str
    title: str
    description: str
    author: str
    date: str
    tags: List[str] = []
    status: str

    class Config:
        from_attributes = True


class PostListResponse(BaseModel):
    items: List[PostSummary]
    total: int


class PostMutationResponse(BaseModel):
    success: bool = True
    slug: str
    message: str


# Comment Schemas
class CommentCreate(BaseModel):
    post_slug: str = Field(..., min_length=1)
    author: str = Field(..., max_length=100)
    email: EmailStr
    content: str = Field(..., max_length=5000)

    @field_validator('author', 'content')
    def strip_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Field cannot be empty')
        return v

    @field_validator('email', mode='before')
    def normalize_email(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


class CommentStatusUpdate(BaseModel):
    status: CommentStatus


class PublicComment(BaseModel):
    """Comment as shown under a post; contact details stay private."""
    id: str
    post_slug: str
    author: str
    content: str
    status: CommentStatus
    created_at: Union[datetime, str]

    class Config:
        from_attributes = True


class CommentStats(BaseModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
