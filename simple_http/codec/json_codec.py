"""JSON payload codec: bytes <-> domain objects."""

import logging
from collections.abc import Sequence
from typing import Any, TypeVar

from pydantic import PydanticUserError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from simple_http.codec.timestamps import (
    DECODE_FORMATS,
    DECODE_FORMATS_CONTEXT_KEY,
    ENCODE_FORMAT,
    ENCODE_FORMAT_CONTEXT_KEY,
    TIMESTAMP_ERROR_TYPE,
)
from simple_http.exceptions import ConfigError, DecodeError, DecodeFailure, EncodeError
from simple_http.result import Result

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PayloadCodec:
    """Converts between raw JSON bytes and domain objects.

    A domain object is anything pydantic can validate and serialize: models,
    dataclasses, TypedDicts and containers of those. Fields typed as
    ``Timestamp`` are decoded with ``decode_formats`` (first match wins) and
    encoded with ``encode_format``.

    Neither direction raises on bad input; failures are logged and returned
    as the error of the ``Result``.
    """

    def __init__(
        self,
        *,
        decode_formats: Sequence[str] = DECODE_FORMATS,
        encode_format: str = ENCODE_FORMAT,
    ) -> None:
        """Initialize the codec.

        Args:
            decode_formats: strptime formats tried in order for timestamps.
            encode_format: strftime format used for timestamps (rendered in UTC).

        Raises:
            ConfigError: If no decode format or an empty encode format is given.
        """
        if isinstance(decode_formats, str) or not decode_formats:
            raise ConfigError("decode_formats must be a non-empty sequence of formats")
        if not encode_format:
            raise ConfigError("encode_format must not be empty")
        self._decode_formats = tuple(decode_formats)
        self._encode_format = encode_format

    @property
    def decode_formats(self) -> tuple[str, ...]:
        return self._decode_formats

    @property
    def encode_format(self) -> str:
        return self._encode_format

    def decode(self, data: bytes | str, model: type[T]) -> Result[T]:
        """Parse JSON ``data`` into an instance of ``model``.

        Returns:
            The decoded object, or a ``DecodeError`` whose ``reason`` is
            "malformed_json", "timestamp", "shape" or "unsupported_type"
            (``model`` is not a type pydantic can validate).
        """
        try:
            adapter: TypeAdapter[T] = TypeAdapter(model)
        except (PydanticUserError, TypeError) as e:
            error = DecodeError(
                f"Cannot decode into {getattr(model, '__name__', repr(model))}: {e}",
                "unsupported_type",
                cause=e,
            )
            logger.warning("%s", error)
            return Result.failure(error)

        try:
            value = adapter.validate_json(
                data, context={DECODE_FORMATS_CONTEXT_KEY: self._decode_formats}
            )
        except ValidationError as e:
            error = _decode_error(model, e)
            logger.warning("%s", error)
            return Result.failure(error)
        return Result.success(value)

    def encode(self, obj: Any, model: type[Any] | None = None) -> Result[bytes]:
        """Serialize ``obj`` to compact JSON bytes.

        The serializer is built from ``model``, or from ``type(obj)`` when no
        model is given. Pass ``model`` for TypedDicts and other plain dicts:
        their instances are bare ``dict``s, so ``Timestamp`` fields would
        otherwise be written in pydantic's default ISO-8601 form.
        """
        try:
            adapter: TypeAdapter[Any] = TypeAdapter(model or type(obj))
            data = adapter.dump_json(
                obj,
                by_alias=True,
                context={ENCODE_FORMAT_CONTEXT_KEY: self._encode_format},
            )
        except (PydanticSerializationError, TypeError, ValueError) as e:
            error = EncodeError(f"Could not encode {type(obj).__name__}: {e}", cause=e)
            logger.warning("%s", error)
            return Result[bytes].failure(error)
        return Result[bytes].success(data)


def _decode_error(model: Any, exc: ValidationError) -> DecodeError:
    errors = exc.errors(include_url=False)
    error_types = {err["type"] for err in errors}

    reason: DecodeFailure
    if "json_invalid" in error_types:
        reason = "malformed_json"
    elif TIMESTAMP_ERROR_TYPE in error_types:
        reason = "timestamp"
    else:
        reason = "shape"

    name = getattr(model, "__name__", repr(model))
    first = errors[0]
    location = ".".join(str(part) for part in first["loc"]) or "<root>"
    return DecodeError(
        f"Could not decode {name} ({len(errors)} error(s)): {location}: {first['msg']}",
        reason,
        cause=exc,
    )


_default_codec = PayloadCodec()


def decode(data: bytes | str, model: type[T], *, codec: PayloadCodec | None = None) -> Result[T]:
    """Decode with ``codec``, or the default codec when none is given."""
    return (codec or _default_codec).decode(data, model)


def encode(
    obj: Any, model: type[Any] | None = None, *, codec: PayloadCodec | None = None
) -> Result[bytes]:
    """Encode with ``codec``, or the default codec when none is given."""
    return (codec or _default_codec).encode(obj, model)
