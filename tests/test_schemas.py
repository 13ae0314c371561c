import datetime as dt

import pytest
from pydantic import ValidationError

from ramblings.schemas.auth import LoginRequest
from ramblings.schemas.blog import CommentCreate, CommentStatusUpdate, PostCreate, PostUpdate
from ramblings.schemas.images import ImageUpdate


class TestPostCreate:
    def test_valid_post(self):
        post = PostCreate(title="Hello", content="Body", author="Admin", date="2024-01-15")
        assert post.date == dt.date(2024, 1, 15)
        assert post.status.value == "draft"
        assert post.tags == []
        assert post.description == ""

    def test_comma_separated_tags(self):
        post = PostCreate(title="Hello", content="Body", author="Admin", tags="go,  backend , ,web")
        assert post.tags == ["go", "backend", "web"]

    def test_title_without_slug_characters(self):
        with pytest.raises(ValidationError):
            PostCreate(title="!!!", content="Body", author="Admin")

    def test_blank_title(self):
        with pytest.raises(ValidationError):
            PostCreate(title="   ", content="Body", author="Admin")

    def test_missing_content(self):
        with pytest.raises(ValidationError):
            PostCreate(title="Hello", author="Admin")

    def test_invalid_status(self):
        with pytest.raises(ValidationError):
            PostCreate(title="Hello", content="Body", author="Admin", status="archived")

    def test_invalid_date(self):
        with pytest.raises(ValidationError):
            PostCreate(title="Hello", content="Body", author="Admin", date="15/01/2024")


class TestPostUpdate:
    def test_all_fields_optional(self):
        assert PostUpdate().model_dump(exclude_unset=True) == {}

    def test_blank_author_rejected(self):
        with pytest.raises(ValidationError):
            PostUpdate(author=" ")


class TestCommentCreate:
    def test_valid_comment(self):
        comment = CommentCreate(post_slug="p", author=" Ann ", email="ANN@example.com", content=" Hi ")
        assert comment.author == "Ann"
        assert comment.email == "ann@example.com"
        assert comment.content == "Hi"

    def test_invalid_email(self):
        with pytest.raises(ValidationError):
            CommentCreate(post_slug="p", author="Ann", email="not-an-email", content="Hi")

    def test_whitespace_only_content(self):
        with pytest.raises(ValidationError):
            CommentCreate(post_slug="p", author="Ann", email="ann@example.com", content="   ")

    def test_missing_post_slug(self):
        with pytest.raises(ValidationError):
            CommentCreate(post_slug="", author="Ann", email="ann@example.com", content="Hi")


class TestOtherSchemas:
    def test_comment_status_must_be_known(self):
        assert CommentStatusUpdate(status="approved").status.value == "approved"
        with pytest.raises(ValidationError):
            CommentStatusUpdate(status="deleted")

    def test_image_update_tracks_sent_fields(self):
        assert ImageUpdate(description=None).model_dump(exclude_unset=True) == {"description": None}

    def test_login_requires_both_fields(self):
        with pytest.raises(ValidationError):
            LoginRequest(username="admin", password="")
