"""
Record validation primitives

Every record schema is a pydantic model. Validation is exposed in two modes
sharing one rule set: ``safe_validate`` returns a tagged ``ValidationResult``
and ``validate`` raises ``RecordValidationError``. Both carry the same list
of ``FieldError`` items, one per offending field.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

T = TypeVar("T", bound=BaseModel)


class RecordModel(BaseModel):
    """Base for all record schemas: camelCase on the wire, snake_case in Python"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


@dataclass(frozen=True)
class FieldError:
    path: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "message": self.message}


@dataclass
class ValidationResult(Generic[T]):
    """Outcome of a non-throwing validation"""
    success: bool
    data: Optional[T] = None
    errors: List[FieldError] = field(default_factory=list)

    def error_map(self) -> Dict[str, str]:
        """Field path -> message"""
        return {error.path: error.message for error in self.errors}

    def details(self) -> List[Dict[str, str]]:
        return [error.to_dict() for error in self.errors]


class RecordValidationError(ValueError):
    """Raised by the throwing validators with the full list of field errors"""

    def __init__(self, errors: List[FieldError]):
        self.errors = errors
        summary = "; ".join(f"{error.path or '<root>'}: {error.message}" for error in errors)
        super().__init__(f"Validation failed: {summary}")

    def details(self) -> List[Dict[str, str]]:
        return [error.to_dict() for error in self.errors]


def check_length(value: str, minimum: int, maximum: int, too_short: str, too_long: str) -> str:
    """Inclusive character-count bounds"""
    if len(value) < minimum:
        raise PydanticCustomError("string_too_short", too_short)
    if len(value) > maximum:
        raise PydanticCustomError("string_too_long", too_long)
    return value


def _field_errors(exc: ValidationError) -> List[FieldError]:
    errors: List[FieldError] = []
    seen = set()
    for error in exc.errors():
        path = ".".join(str(part) for part in error.get("loc", ()))
        # one entry per violated field
        if path in seen:
            continue
        seen.add(path)
        errors.append(FieldError(path=path, message=error.get("msg", "Invalid value")))
    return errors


def safe_validate(schema: Type[T], data: Any) -> ValidationResult[T]:
    """Validate ``data`` against ``schema`` without raising"""
    try:
        value = schema.model_validate(data)
    except ValidationError as exc:
        return ValidationResult(success=False, errors=_field_errors(exc))
    return ValidationResult(success=True, data=value)


def validate(schema: Type[T], data: Any) -> T:
    """Validate ``data`` against ``schema``, raising RecordValidationError on failure"""
    result = safe_validate(schema, data)
    if not result.success:
        raise RecordValidationError(result.errors)
    return result.data


def validate_field(
    schema: Type[BaseModel],
    field_name: str,
    value: Any,
    data: Optional[Dict[str, Any]] = None
) -> Optional[str]:
    """
    Validate a single form field in the context of the rest of the form

    Args:
        schema: Record schema the form targets
        field_name: Python or wire name of the field
        value: Candidate value for the field
        data: Current values of the other fields

    Returns:
        The error message for the field, or None when it is valid
    """
    model_field = schema.model_fields.get(field_name)
    alias = model_field.alias if model_field and model_field.alias else field_name

    candidate = dict(data or {})
    candidate[field_name] = value
    result = safe_validate(schema, candidate)
    if result.success:
        return None

    for error in result.errors:
        if error.path in (field_name, alias):
            return error.message
    return None
