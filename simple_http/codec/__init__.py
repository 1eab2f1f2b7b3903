"""Payload codec: JSON bytes to domain objects and back."""

from simple_http.codec.json_codec import PayloadCodec, decode, encode
from simple_http.codec.timestamps import (
    DECODE_FORMATS,
    ENCODE_FORMAT,
    Timestamp,
    format_timestamp,
    parse_timestamp,
)

__all__ = [
    "PayloadCodec",
    "decode",
    "encode",
    "Timestamp",
    "DECODE_FORMATS",
    "ENCODE_FORMAT",
    "parse_timestamp",
    "format_timestamp",
]
