"""
Shared validation helpers and base model for Pydantic schemas.

The API speaks camelCase JSON (``orderIndex``, ``isPinned``) while Python code uses
snake_case attributes. ``CamelModel`` bridges the two for every request/response schema.
"""
import re
from datetime import UTC, datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, HttpUrl, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

# Category colors are stored as 6-digit hex, e.g. '#667eea'
HEX_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")

_http_url_adapter = TypeAdapter(HttpUrl)


class CamelModel(BaseModel):
    """Base schema: snake_case attributes, camelCase JSON, accepts either on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def validate_http_url(value: str) -> str:
    """
    Validate that a string is an absolute http(s) URL.

    Returns the value unchanged (no trailing-slash normalization) so stored URLs
    match exactly what the client submitted.

    Raises:
        ValueError: If the value is not a valid http(s) URL.
    """
    try:
        _http_url_adapter.validate_python(value)
    except ValidationError as e:
        raise ValueError(f"Invalid URL: '{value}'") from e
    return value


def validate_optional_url(value: str | None) -> str | None:
    """Validate an optional URL field; empty strings are accepted and stored as None."""
    if value is None or value == "":
        return None
    return validate_http_url(value)


def empty_to_none(value: str | None) -> str | None:
    """Convert empty strings to None so optional text columns store NULL."""
    if value is None or value == "":
        return None
    return value


def validate_hex_color(value: str | None) -> str | None:
    """Validate a '#RRGGBB' color string."""
    if value is None:
        return None
    if not HEX_COLOR_PATTERN.match(value):
        raise ValueError("Color must be a hex value like '#667eea'")
    return value


def ensure_utc(value: datetime) -> datetime:
    """
    Attach UTC to naive datetimes.

    SQLite stores timestamps without an offset, so values read back are naive even
    though they were written in UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


HttpUrlStr = Annotated[str, AfterValidator(validate_http_url)]
OptionalUrlStr = Annotated[str | None, AfterValidator(validate_optional_url)]
OptionalText = Annotated[str | None, AfterValidator(empty_to_none)]
HexColor = Annotated[str | None, AfterValidator(validate_hex_color)]
UtcDateTime = Annotated[datetime, AfterValidator(ensure_utc)]
