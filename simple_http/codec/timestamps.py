"""Timestamp formats used on the wire.

Upstream payloads are inconsistent about fractional seconds, so decoding
tries an ordered list of formats. Encoding always writes one format, in UTC,
with whole seconds.
"""

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BeforeValidator, PlainSerializer, SerializationInfo, ValidationInfo
from pydantic_core import PydanticCustomError

# =============================================================================
# Constants
# =============================================================================

DECODE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%dT%H:%M:%S.%f%z",  # 2019-02-27T10:00:00.123+00:00
    "%Y-%m-%dT%H:%M:%S%z",  # 2019-02-27T10:00:00+00:00
)
ENCODE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Keys the codec puts in the pydantic validation/serialization context
DECODE_FORMATS_CONTEXT_KEY = "timestamp_decode_formats"
ENCODE_FORMAT_CONTEXT_KEY = "timestamp_encode_format"

TIMESTAMP_ERROR_TYPE = "timestamp_format"


def parse_timestamp(value: str, formats: Sequence[str] = DECODE_FORMATS) -> datetime:
    """Parse ``value`` with the first matching format.

    Raises:
        ValueError: If no format matches.
    """
    for fmt in formats:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise ValueError(f"Could not decode date {value!r}")


def format_timestamp(value: datetime, fmt: str = ENCODE_FORMAT) -> str:
    """Render ``value`` in UTC. Naive datetimes are taken to be UTC already."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime(fmt)


def _context_get(context: Any, key: str, default: Any) -> Any:
    if isinstance(context, dict):
        return context.get(key, default)
    return default


def _validate_timestamp(value: Any, info: ValidationInfo) -> datetime:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise PydanticCustomError(
            TIMESTAMP_ERROR_TYPE,
            "Could not decode date: expected a string, got {type_name}",
            {"type_name": type(value).__name__},
        )
    formats = _context_get(info.context, DECODE_FORMATS_CONTEXT_KEY, DECODE_FORMATS)
    try:
        return parse_timestamp(value, formats)
    except ValueError:
        raise PydanticCustomError(
            TIMESTAMP_ERROR_TYPE,
            "Could not decode date '{value}'",
            {"value": value},
        ) from None


def _serialize_timestamp(value: datetime, info: SerializationInfo) -> str:
    fmt = _context_get(info.context, ENCODE_FORMAT_CONTEXT_KEY, ENCODE_FORMAT)
    return format_timestamp(value, fmt)


Timestamp = Annotated[
    datetime,
    BeforeValidator(_validate_timestamp),
    PlainSerializer(_serialize_timestamp, return_type=str, when_used="json"),
]
"""A datetime field that follows the codec's timestamp formats.

Use it in domain objects instead of a bare ``datetime``::

    class Event(BaseModel):
        name: str
        at: Timestamp
"""
