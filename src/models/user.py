"""
User-related Pydantic models
"""

from datetime import datetime
from typing import Any, List, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import AnyUrl, TypeAdapter, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from models.post import Post
from models.validation import RecordModel, ValidationResult, safe_validate, validate

_url_adapter = TypeAdapter(AnyUrl)


def _check_name(value: str) -> str:
    if len(value) < 1:
        raise PydanticCustomError("string_too_short", "Name is required")
    return value


def _check_email(value: str) -> str:
    # Syntax only; the submitted string is stored unchanged
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise PydanticCustomError("value_error", "Invalid email format")
    return value


def _check_website(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return value
    try:
        _url_adapter.validate_python(value)
    except ValidationError:
        raise PydanticCustomError("url_parsing", "Invalid url")
    return value


class UserFields(RecordModel):
    name: str
    email: str
    username: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _check_name(v)

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        return _check_email(v)

    @field_validator("website")
    @classmethod
    def validate_website(cls, v):
        return _check_website(v)


class UserCreate(UserFields):
    """User creation request - id and timestamps are assigned by the store"""


class UserUpdate(RecordModel):
    """Partial user update"""
    name: Optional[str] = None
    email: Optional[str] = None
    username: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return v if v is None else _check_name(v)

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        return v if v is None else _check_email(v)

    @field_validator("website")
    @classmethod
    def validate_website(cls, v):
        return _check_website(v)


class User(UserFields):
    id: int
    created_at: datetime
    updated_at: datetime


class UserWithPosts(User):
    posts: List[Post] = []


# Validation helpers

def validate_user(data: Any) -> User:
    return validate(User, data)


def safe_validate_user(data: Any) -> ValidationResult[User]:
    return safe_validate(User, data)


def validate_create_user(data: Any) -> UserCreate:
    return validate(UserCreate, data)


def safe_validate_create_user(data: Any) -> ValidationResult[UserCreate]:
    return safe_validate(UserCreate, data)


def safe_validate_update_user(data: Any) -> ValidationResult[UserUpdate]:
    return safe_validate(UserUpdate, data)
