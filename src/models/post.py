"""
Post-related Pydantic models
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import field_validator

from models.validation import (
    RecordModel,
    ValidationResult,
    check_length,
    safe_validate,
    validate,
)

TITLE_MIN, TITLE_MAX = 3, 200
BODY_MIN, BODY_MAX = 10, 2000
AUTHOR_MIN, AUTHOR_MAX = 4, 30


def _check_title(value: str) -> str:
    return check_length(
        value, TITLE_MIN, TITLE_MAX,
        "Title is required",
        f"Title must be less than {TITLE_MAX} characters",
    )


def _check_body(value: str) -> str:
    return check_length(
        value, BODY_MIN, BODY_MAX,
        f"Body must be at least {BODY_MIN} characters",
        f"Body must be less than {BODY_MAX} characters",
    )


def _check_author(value: str) -> str:
    return check_length(
        value, AUTHOR_MIN, AUTHOR_MAX,
        "Author is required",
        f"Author name must be less than {AUTHOR_MAX} characters",
    )


class PostFields(RecordModel):
    title: str
    body: str
    author: str

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return _check_title(v)

    @field_validator("body")
    @classmethod
    def validate_body(cls, v):
        return _check_body(v)

    @field_validator("author")
    @classmethod
    def validate_author(cls, v):
        return _check_author(v)


class PostCreate(PostFields):
    """Post creation request - id and timestamps are assigned by the store"""
    author_id: Optional[int] = None


class PostUpdate(RecordModel):
    """Partial post update"""
    title: Optional[str] = None
    body: Optional[str] = None
    author: Optional[str] = None
    author_id: Optional[int] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return v if v is None else _check_title(v)

    @field_validator("body")
    @classmethod
    def validate_body(cls, v):
        return v if v is None else _check_body(v)

    @field_validator("author")
    @classmethod
    def validate_author(cls, v):
        return v if v is None else _check_author(v)


class Post(PostFields):
    id: int
    author_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class AuthorSummary(RecordModel):
    """Public fields of a post's author"""
    id: int
    name: str
    email: str
    username: Optional[str] = None


class PostWithAuthor(Post):
    user: Optional[AuthorSummary] = None


# Validation helpers

def validate_post(data: Any) -> Post:
    return validate(Post, data)


def safe_validate_post(data: Any) -> ValidationResult[Post]:
    return safe_validate(Post, data)


def validate_create_post(data: Any) -> PostCreate:
    return validate(PostCreate, data)


def safe_validate_create_post(data: Any) -> ValidationResult[PostCreate]:
    return safe_validate(PostCreate, data)


def safe_validate_update_post(data: Any) -> ValidationResult[PostUpdate]:
    return safe_validate(PostUpdate, data)
