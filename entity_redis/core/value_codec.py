"""Value Codec - typed scalars to Redis byte strings and back.

Invariants:
    - encode_value never receives None (nulls are stored as absent hash fields)
    - Byte values pass through both directions unchanged
    - Every other value is stored as UTF-8 of its invariant text form
    - decode_value(encode_value(v, kind), prop) == v for every supported kind
    - Decode failures name the property and its declared kind
    - A bool is never stored under an integer kind (it would not decode back)

Design Decisions:
    - Closed registry CODECS: one ScalarCodec (parse/format pair) per ScalarKind;
      adding a kind is one enum member plus one registry entry
    - Invariant text is locale-independent: repr() for floats (shortest
      round-trip form), isoformat() for datetimes, "True"/"False" for booleans
    - Nullable properties decode to the bare value; Optional is a typing-level
      concept in Python, so there is no wrapper to apply
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from entity_redis.core.domain_types import ScalarKind
from entity_redis.core.errors import (
    InvalidDatabaseValueError,
    NullValueError,
    UnsupportedPropertyTypeError,
    ValueFormatError,
    ValueTypeError,
)
from entity_redis.core.metadata import Property

_BYTES_TYPES = (bytes, bytearray, memoryview)
_INTEGER_TEXT = re.compile(r"\s*[+-]?[0-9]+\s*")
_INTEGER_KINDS = frozenset({
    ScalarKind.INT8, ScalarKind.INT16, ScalarKind.INT32, ScalarKind.INT64,
    ScalarKind.UINT8, ScalarKind.UINT16, ScalarKind.UINT32, ScalarKind.UINT64,
})


def to_invariant_text(value: Any) -> str:
    """Canonical, locale-independent text form of a scalar."""
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


@dataclass(frozen=True)
class ScalarCodec:
    """Parse/format pair for one ScalarKind."""
    parse: Callable[[str], Any]
    format: Callable[[Any], str] = to_invariant_text


def _integer_codec(bits: int, signed: bool) -> ScalarCodec:
    low, high = (-(1 << (bits - 1)), (1 << (bits - 1)) - 1) if signed else (0, (1 << bits) - 1)

    def parse(text: str) -> int:
        if not _INTEGER_TEXT.fullmatch(text):
            raise ValueError(f"not an integer: {text!r}")
        value = int(text)
        if not low <= value <= high:
            raise OverflowError(f"{value} outside [{low}, {high}]")
        return value

    return ScalarCodec(parse)


def _parse_float(text: str) -> float:
    if "_" in text:
        raise ValueError(f"not a float: {text!r}")
    return float(text)


def _parse_boolean(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValueError(f"not a boolean: {text!r}")


def _parse_char(text: str) -> str:
    if len(text) != 1:
        raise ValueError(f"expected exactly one character, got {len(text)}")
    return text


def _parse_datetime(text: str) -> datetime:
    return datetime.fromisoformat(text.strip())


CODECS: dict[ScalarKind, ScalarCodec] = {
    ScalarKind.TEXT: ScalarCodec(str),
    ScalarKind.INT8: _integer_codec(8, signed=True),
    ScalarKind.INT16: _integer_codec(16, signed=True),
    ScalarKind.INT32: _integer_codec(32, signed=True),
    ScalarKind.INT64: _integer_codec(64, signed=True),
    ScalarKind.UINT8: _integer_codec(8, signed=False),
    ScalarKind.UINT16: _integer_codec(16, signed=False),
    ScalarKind.UINT32: _integer_codec(32, signed=False),
    ScalarKind.UINT64: _integer_codec(64, signed=False),
    ScalarKind.SINGLE: ScalarCodec(_parse_float),
    ScalarKind.DOUBLE: ScalarCodec(_parse_float),
    ScalarKind.BOOLEAN: ScalarCodec(_parse_boolean),
    ScalarKind.CHAR: ScalarCodec(_parse_char),
    ScalarKind.DATETIME: ScalarCodec(_parse_datetime),
}


def resolve_kind(prop: Property) -> ScalarKind:
    """Return the property's ScalarKind, or raise if it has no codec."""
    try:
        kind = ScalarKind(prop.kind)
    except ValueError:
        raise UnsupportedPropertyTypeError(prop.name, str(prop.kind)) from None
    if kind is not ScalarKind.BYTES and kind not in CODECS:
        raise UnsupportedPropertyTypeError(prop.name, kind.value)
    return kind


def encode_value(
    value: Any, kind: ScalarKind | None = None, property_name: str = "value",
) -> bytes:
    """Encode a non-null scalar for storage in a hash field."""
    if value is None:
        raise NullValueError(property_name)
    if isinstance(value, _BYTES_TYPES):
        return bytes(value)
    if isinstance(value, bool) and kind in _INTEGER_KINDS:
        raise ValueTypeError(property_name, ScalarKind(kind).value, value)
    codec = CODECS.get(kind) if kind is not None else None
    text = codec.format(value) if codec else to_invariant_text(value)
    return text.encode("utf-8")


def decode_value(raw: bytes, prop: Property) -> Any:
    """Decode stored bytes into the property's declared type."""
    kind = resolve_kind(prop)
    raw = bytes(raw)
    if kind is ScalarKind.BYTES:
        return raw

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise InvalidDatabaseValueError(prop.name, kind.value, raw) from None
    # Empty text is only a legitimate value for TEXT
    if kind is not ScalarKind.TEXT and not text.strip():
        raise InvalidDatabaseValueError(prop.name, kind.value, raw)

    try:
        return CODECS[kind].parse(text)
    except (ValueError, OverflowError) as e:
        raise ValueFormatError(prop.name, kind.value, text) from e
