"""Tests for PayloadCodec."""

from dataclasses import dataclass
from datetime import UTC, datetime

import pytest
from pydantic import BaseModel
from typing_extensions import TypedDict

from simple_http.codec.json_codec import PayloadCodec, decode, encode
from simple_http.codec.timestamps import Timestamp
from simple_http.exceptions import ConfigError, DecodeError, EncodeError


class Message(BaseModel):
    message: str


class Event(BaseModel):
    name: str
    at: Timestamp


class Schedule(BaseModel):
    title: str
    starts: Timestamp
    ends: Timestamp | None = None
    reminders: list[Timestamp] = []


@dataclass
class Point:
    x: int
    y: int


class Opaque:
    pass


class EventDict(TypedDict):
    name: str
    at: Timestamp


class TestDecode:
    """Tests for decoding bytes into domain objects."""

    def test_decode_message(self):
        """Should decode a one-field message."""
        result = decode(b'{"message":"Hello, World!"}', Message)

        assert result.ok is True
        assert result.value.message == "Hello, World!"

    def test_decode_accepts_str(self):
        """Should accept text as well as bytes."""
        assert decode('{"message":"hi"}', Message).value.message == "hi"

    def test_decode_dataclass(self):
        """Should decode into dataclasses."""
        assert decode(b'{"x":1,"y":2}', Point).value == Point(x=1, y=2)

    def test_decode_list(self):
        """Should decode containers of domain objects."""
        result = decode(b'[{"message":"a"},{"message":"b"}]', list[Message])
        assert [m.message for m in result.value] == ["a", "b"]

    def test_malformed_json(self):
        """Should return a malformed_json DecodeError instead of raising."""
        result = decode(b'{"message":"Hel', Message)

        assert result.ok is False
        assert result.value is None
        assert isinstance(result.error, DecodeError)
        assert result.error.reason == "malformed_json"

    def test_wrong_shape(self):
        """Should report a shape mismatch."""
        result = decode(b'{"msg":"Hello"}', Message)

        assert isinstance(result.error, DecodeError)
        assert result.error.reason == "shape"
        assert "message" in str(result.error)

    def test_empty_input(self):
        """Should fail on empty input."""
        result = decode(b"", Message)
        assert result.error.reason == "malformed_json"

    def test_failure_is_logged(self, caplog):
        """Should log decode failures at warning level."""
        with caplog.at_level("WARNING", logger="simple_http"):
            decode(b"{", Message)
        assert "Could not decode Message" in caplog.text

    def test_unsupported_model_type(self):
        """Should return an unsupported_type DecodeError instead of raising."""
        result = decode(b"{}", Opaque)

        assert result.ok is False
        assert result.value is None
        assert isinstance(result.error, DecodeError)
        assert result.error.reason == "unsupported_type"


class TestDecodeTimestamps:
    """Tests for timestamp fields on decode."""

    def test_fractional_and_whole_seconds(self):
        """Should accept both timestamp forms for the same field."""
        long_form = decode(b'{"name":"a","at":"2019-02-27T10:00:00.123+00:00"}', Event).value
        short_form = decode(b'{"name":"a","at":"2019-02-27T10:00:00+00:00"}', Event).value

        assert long_form.at == datetime(2019, 2, 27, 10, 0, 0, 123000, tzinfo=UTC)
        assert short_form.at == datetime(2019, 2, 27, 10, 0, 0, tzinfo=UTC)
        assert short_form.at.microsecond == 0
        assert long_form.at.replace(microsecond=0) == short_form.at

    def test_bad_timestamp(self):
        """Should report a timestamp failure."""
        result = decode(b'{"name":"a","at":"27 Feb 2019"}', Event)

        assert result.value is None
        assert result.error.reason == "timestamp"
        assert "at" in str(result.error)

    def test_missing_offset(self):
        """Should reject timestamps without an offset."""
        result = decode(b'{"name":"a","at":"2019-02-27T10:00:00"}', Event)
        assert result.error.reason == "timestamp"

    def test_non_string_timestamp(self):
        """Should reject numeric timestamps."""
        result = decode(b'{"name":"a","at":1551261600}', Event)
        assert result.error.reason == "timestamp"

    def test_optional_and_nested_timestamps(self):
        """Should apply to optional and list fields."""
        data = (
            b'{"title":"standup","starts":"2019-02-27T10:00:00Z","ends":null,'
            b'"reminders":["2019-02-27T09:50:00.5Z","2019-02-27T09:55:00Z"]}'
        )
        schedule = decode(data, Schedule).value

        assert schedule.ends is None
        assert schedule.reminders[0] == datetime(2019, 2, 27, 9, 50, 0, 500000, tzinfo=UTC)
        assert schedule.reminders[1] == datetime(2019, 2, 27, 9, 55, 0, tzinfo=UTC)

    def test_custom_decode_formats(self):
        """Should use the codec's configured formats."""
        codec = PayloadCodec(decode_formats=["%d/%m/%Y %H:%M:%S%z"])

        ok = codec.decode(b'{"name":"a","at":"27/02/2019 10:00:00+0000"}', Event)
        rejected = codec.decode(b'{"name":"a","at":"2019-02-27T10:00:00Z"}', Event)

        assert ok.value.at == datetime(2019, 2, 27, 10, 0, 0, tzinfo=UTC)
        assert rejected.error.reason == "timestamp"


class TestEncode:
    """Tests for encoding domain objects into bytes."""

    def test_encode_message(self):
        """Should encode compact JSON."""
        result = encode(Message(message="Hello, World!"))

        assert result.ok is True
        assert result.value == b'{"message":"Hello, World!"}'

    def test_encode_timestamp(self):
        """Should write timestamps in UTC without fractional seconds."""
        event = Event(name="launch", at=datetime(2019, 2, 27, 10, 0, 0, 123000, tzinfo=UTC))
        assert encode(event).value == b'{"name":"launch","at":"2019-02-27T10:00:00Z"}'

    def test_encode_dataclass(self):
        """Should encode dataclasses."""
        assert encode(Point(x=1, y=2)).value == b'{"x":1,"y":2}'

    def test_encode_non_ascii(self):
        """Should write UTF-8 text."""
        assert encode(Message(message="Grüße")).value == '{"message":"Grüße"}'.encode()

    def test_unsupported_object(self):
        """Should return EncodeError instead of raising."""
        result = encode(Opaque())

        assert result.ok is False
        assert result.value is None
        assert isinstance(result.error, EncodeError)

    def test_custom_encode_format(self):
        """Should use the codec's configured format."""
        codec = PayloadCodec(encode_format="%Y-%m-%d")
        event = Event(name="a", at=datetime(2019, 2, 27, 23, 0, 0, tzinfo=UTC))
        assert codec.encode(event).value == b'{"name":"a","at":"2019-02-27"}'

    def test_failure_is_logged(self, caplog):
        """Should log encode failures at warning level."""
        with caplog.at_level("WARNING", logger="simple_http"):
            encode(Opaque())
        assert "Could not encode Opaque" in caplog.text

    def test_typed_dict_with_model(self):
        """Should apply the timestamp format to TypedDicts when the model is given."""
        event = decode(b'{"name":"a","at":"2019-02-27T10:00:00.123+00:00"}', EventDict).value

        assert encode(event, EventDict).value == b'{"name":"a","at":"2019-02-27T10:00:00Z"}'

    def test_typed_dict_offset_converted_to_utc(self):
        """Should render a TypedDict timestamp in UTC."""
        event = decode(b'{"name":"a","at":"2019-02-27T12:00:00+02:00"}', EventDict).value

        assert encode(event, EventDict).value == b'{"name":"a","at":"2019-02-27T10:00:00Z"}'

    def test_codec_encode_with_model(self):
        """PayloadCodec.encode should accept the model as well."""
        codec = PayloadCodec(encode_format="%Y-%m-%d")
        event: EventDict = {"name": "a", "at": datetime(2019, 2, 27, 10, 0, 0, tzinfo=UTC)}

        assert codec.encode(event, EventDict).value == b'{"name":"a","at":"2019-02-27"}'

    def test_module_level_codec_argument(self):
        """encode() should use an explicitly supplied codec."""
        codec = PayloadCodec(encode_format="%H:%M")
        event = Event(name="a", at=datetime(2019, 2, 27, 10, 30, 0, tzinfo=UTC))
        assert encode(event, codec=codec).value == b'{"name":"a","at":"10:30"}'


class TestRoundTrip:
    """Tests for encode/decode round trips."""

    def test_single_format_is_byte_identical(self):
        """Whole-second UTC timestamps should round-trip byte for byte."""
        data = b'{"name":"launch","at":"2019-02-27T10:00:00Z"}'
        assert encode(decode(data, Event).value).value == data

    def test_typed_dict_is_byte_identical(self):
        """TypedDicts should round-trip byte for byte when the model is given."""
        data = b'{"name":"launch","at":"2019-02-27T10:00:00Z"}'
        assert encode(decode(data, EventDict).value, EventDict).value == data

    def test_fractional_seconds_are_truncated(self):
        """Fractional seconds are lost on encode."""
        original = decode(b'{"name":"a","at":"2019-02-27T10:00:00.123+00:00"}', Event).value

        encoded = encode(original).value
        restored = decode(encoded, Event).value

        assert encoded == b'{"name":"a","at":"2019-02-27T10:00:00Z"}'
        assert restored.at == original.at.replace(microsecond=0)
        assert restored.at != original.at


class TestPayloadCodecConfig:
    """Tests for PayloadCodec construction."""

    def test_defaults(self):
        """Should default to the standard formats."""
        codec = PayloadCodec()
        assert codec.decode_formats == (
            "%Y-%m-%dT%H:%M:%S.%f%z",
            "%Y-%m-%dT%H:%M:%S%z",
        )
        assert codec.encode_format == "%Y-%m-%dT%H:%M:%SZ"

    def test_empty_decode_formats_raises(self):
        """Should reject an empty format list."""
        with pytest.raises(ConfigError):
            PayloadCodec(decode_formats=[])

    def test_single_string_decode_formats_raises(self):
        """Should reject a bare string instead of a list of formats."""
        with pytest.raises(ConfigError):
            PayloadCodec(decode_formats="%Y")

    def test_empty_encode_format_raises(self):
        """Should reject an empty encode format."""
        with pytest.raises(ConfigError):
            PayloadCodec(encode_format="")
