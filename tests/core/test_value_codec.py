"""Value Codec tests - encoding to bytes, typed decoding, and decode failures.

Tests cover:
    - Round-trip for every ScalarKind at boundary values
    - Bytes pass through unchanged both ways
    - None rejected by the encoder
    - Booleans rejected for integer kinds at write time
    - Invariant text forms (booleans, floats, datetimes)
    - Integer range and format enforcement
    - Empty and non-UTF-8 stored bytes rejected as invalid database values
    - Unsupported declared kinds rejected with the property named

Design Decisions:
    - Pure core function: no fixtures, just data in -> data out
"""

from datetime import datetime, timezone, timedelta

import pytest

from entity_redis.core.domain_types import ScalarKind
from entity_redis.core.errors import (
    InvalidDatabaseValueError,
    NullValueError,
    UnsupportedPropertyTypeError,
    ValueFormatError,
    ValueTypeError,
)
from entity_redis.core.metadata import Property
from entity_redis.core.value_codec import CODECS, decode_value, encode_value


def _prop(kind, nullable=False, name="Value") -> Property:
    return Property(name, kind, nullable=nullable)


ROUND_TRIP_CASES = [
    (ScalarKind.TEXT, "Alice"),
    (ScalarKind.TEXT, ""),
    (ScalarKind.TEXT, "a:b::c ünïcode"),
    (ScalarKind.BYTES, b"\x00\xff\x10"),
    (ScalarKind.INT8, -128),
    (ScalarKind.INT8, 127),
    (ScalarKind.UINT8, 255),
    (ScalarKind.INT16, -32768),
    (ScalarKind.UINT16, 65535),
    (ScalarKind.INT32, -(2 ** 31)),
    (ScalarKind.UINT32, 2 ** 32 - 1),
    (ScalarKind.INT64, 2 ** 63 - 1),
    (ScalarKind.UINT64, 2 ** 64 - 1),
    (ScalarKind.SINGLE, 3.4028234663852886e38),
    (ScalarKind.DOUBLE, 0.1),
    (ScalarKind.DOUBLE, -1e-300),
    (ScalarKind.DOUBLE, float("inf")),
    (ScalarKind.BOOLEAN, True),
    (ScalarKind.BOOLEAN, False),
    (ScalarKind.CHAR, "é"),
    (ScalarKind.DATETIME, datetime(2024, 2, 29, 13, 45, 1, 123456)),
    (ScalarKind.DATETIME, datetime(2024, 1, 1, tzinfo=timezone(timedelta(hours=-5)))),
]


@pytest.mark.parametrize("kind,value", ROUND_TRIP_CASES)
def test_round_trip_preserves_value(kind, value):
    decoded = decode_value(encode_value(value, kind), _prop(kind))
    assert decoded == value
    assert type(decoded) is type(value)


def test_every_kind_except_bytes_has_a_codec():
    assert set(CODECS) == set(ScalarKind) - {ScalarKind.BYTES}


def test_nullable_property_decodes_to_bare_value():
    assert decode_value(b"30", _prop(ScalarKind.INT32, nullable=True)) == 30


def test_encode_rejects_none():
    with pytest.raises(NullValueError):
        encode_value(None)


def test_encode_passes_bytes_like_through():
    assert encode_value(bytearray(b"ab")) == b"ab"
    assert encode_value(memoryview(b"cd")) == b"cd"


def test_encode_uses_invariant_text():
    assert encode_value(30) == b"30"
    assert encode_value(True) == b"True"
    assert encode_value(1.5) == b"1.5"
    assert encode_value("Alice") == b"Alice"
    assert encode_value(datetime(2024, 5, 6, 7, 8, 9)) == b"2024-05-06T07:08:09"


def test_boolean_parse_is_case_insensitive():
    assert decode_value(b"true", _prop(ScalarKind.BOOLEAN)) is True
    assert decode_value(b"FALSE", _prop(ScalarKind.BOOLEAN)) is False


def test_integer_parse_tolerates_surrounding_whitespace():
    assert decode_value(b" 42 ", _prop(ScalarKind.INT32)) == 42


@pytest.mark.parametrize("kind,raw", [
    (ScalarKind.INT32, b"abc"),
    (ScalarKind.INT32, b"1_000"),
    (ScalarKind.INT32, b"4.5"),
    (ScalarKind.UINT8, b"256"),
    (ScalarKind.UINT16, b"-1"),
    (ScalarKind.INT8, b"-129"),
    (ScalarKind.DOUBLE, b"1_0.5"),
    (ScalarKind.BOOLEAN, b"yes"),
    (ScalarKind.CHAR, b"ab"),
    (ScalarKind.DATETIME, b"yesterday"),
])
def test_unparseable_text_raises_format_error(kind, raw):
    with pytest.raises(ValueFormatError) as exc_info:
        decode_value(raw, _prop(kind, name="Age"))
    assert exc_info.value.property_name == "Age"
    assert exc_info.value.declared_type == kind.value


def test_empty_bytes_for_non_text_kind_is_invalid_database_value():
    with pytest.raises(InvalidDatabaseValueError) as exc_info:
        decode_value(b"", _prop(ScalarKind.INT32, name="Age"))
    assert "Age" in exc_info.value.message


def test_non_utf8_bytes_are_invalid_database_value():
    with pytest.raises(InvalidDatabaseValueError) as exc_info:
        decode_value(b"\xff\xfe", _prop(ScalarKind.TEXT))
    assert "[255,254]" in exc_info.value.message


def test_unsupported_kind_names_property_and_type():
    with pytest.raises(UnsupportedPropertyTypeError) as exc_info:
        decode_value(b"POINT(1 2)", _prop("geography", name="Location"))
    assert exc_info.value.property_name == "Location"
    assert exc_info.value.declared_type == "geography"
    assert "Location" in exc_info.value.message
    assert "geography" in exc_info.value.message


@pytest.mark.parametrize("kind", [ScalarKind.INT32, ScalarKind.UINT8, ScalarKind.INT64])
def test_encode_rejects_bool_for_integer_kinds(kind):
    with pytest.raises(ValueTypeError) as exc_info:
        encode_value(True, kind, "Age")
    assert exc_info.value.property_name == "Age"
    assert exc_info.value.declared_type == kind.value


def test_encode_accepts_bool_for_boolean_kind():
    assert encode_value(False, ScalarKind.BOOLEAN) == b"False"
