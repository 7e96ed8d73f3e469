"""Key Naming - deterministic Redis key names for primary-key indexes and data hashes.

Invariants:
    - Index key:  EF:Index:PK:<escaped entity type name>
    - Data key:   EF:Data:<escaped entity type name>:<composite key>
    - ":" appears in a constructed name only at structural boundaries; every
      ":" inside a type name or key value is replaced by the 4-char token \\x3A
    - Composite key = escaped key values joined by "::", in declared key order
    - Formats are stable: existing data written under these names must stay readable

Known limitation:
    - Escaping is not injective over names that already contain the literal
      text \\x3A: "a:b" and r"a\\x3Ab" map to the same key. The stored format
      cannot change, so such names must be avoided by callers

Design Decisions:
    - Plain string functions, no key parser: names are never decomposed at runtime
    - Key values rendered with the codec's invariant text (bytes as hex)
"""

from collections.abc import Iterable
from typing import Any

from entity_redis.core.domain_types import CompositeKey, KeyName
from entity_redis.core.errors import ErrorContext, NullValueError
from entity_redis.core.value_codec import to_invariant_text

KEY_NAME_SEPARATOR = ":"
ESCAPED_KEY_NAME_SEPARATOR = r"\x3A"
PROPERTY_VALUE_SEPARATOR = "::"

ENTITY_FRAMEWORK_PREFIX = "EF" + KEY_NAME_SEPARATOR
INDEX_PREFIX = ENTITY_FRAMEWORK_PREFIX + "Index" + KEY_NAME_SEPARATOR
PRIMARY_KEY_INDEX_PREFIX = INDEX_PREFIX + "PK" + KEY_NAME_SEPARATOR
DATA_PREFIX = ENTITY_FRAMEWORK_PREFIX + "Data" + KEY_NAME_SEPARATOR


def escape(text: str) -> str:
    return text.replace(KEY_NAME_SEPARATOR, ESCAPED_KEY_NAME_SEPARATOR)


def encode_key_value(value: Any) -> str:
    """Escaped text of one primary-key property value."""
    if value is None:
        raise NullValueError("primary key value")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return escape(bytes(value).hex())
    return escape(to_invariant_text(value))


def composite_key(values: Iterable[Any], entity_type_name: str | None = None) -> CompositeKey:
    """Join ordered primary-key values into the stored composite encoding."""
    try:
        return CompositeKey(
            PROPERTY_VALUE_SEPARATOR.join(encode_key_value(v) for v in values)
        )
    except NullValueError as e:
        e.context = ErrorContext(entity_type=entity_type_name, operation="composite_key")
        raise


def primary_key_index_name(entity_type_name: str) -> KeyName:
    return KeyName(PRIMARY_KEY_INDEX_PREFIX + escape(entity_type_name))


def data_key_name(entity_type_name: str, key: CompositeKey) -> KeyName:
    return KeyName(DATA_PREFIX + escape(entity_type_name) + KEY_NAME_SEPARATOR + key)
