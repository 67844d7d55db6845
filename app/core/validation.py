from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from app.core.errors import ValidationFailed


@dataclass
class ValidationResult:
    success: bool
    data: Optional[BaseModel] = None
    errors: list[str] = field(default_factory=list)


def _format_error(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "__root__")
    message = error.get("msg", "invalid value")
    if location:
        return f"{location}: {message}"
    return message


def validate_data(schema: type[BaseModel], data: Any) -> ValidationResult:
    """
    Validate ``data`` against a pydantic model.

    Returns a result instead of raising for bad data. A ``schema`` that is not
    a pydantic model class is a programming error and raises TypeError.
    """
    if not (isinstance(schema, type) and issubclass(schema, BaseModel)):
        raise TypeError(f"schema must be a pydantic model class, got {schema!r}")

    if data is None:
        return ValidationResult(success=False, errors=["Data is required"])

    try:
        if isinstance(data, schema):
            validated = schema.model_validate(data.model_dump())
        else:
            validated = schema.model_validate(data)
    except ValidationError as exc:
        return ValidationResult(
            success=False,
            errors=[_format_error(error) for error in exc.errors()],
        )
    return ValidationResult(success=True, data=validated)


def require_valid(schema: type[BaseModel], data: Any) -> BaseModel:
    result = validate_data(schema, data)
    if not result.success:
        raise ValidationFailed(result.errors)
    return result.data


__all__ = ["ValidationResult", "require_valid", "validate_data"]
