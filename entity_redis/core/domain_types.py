"""Domain Types - rich types that replace bare strings across the mapping engine.

Invariants:
    - KeyName is a fully constructed Redis key (namespace + escaped parts)
    - CompositeKey is the escaped, separator-joined primary-key encoding
    - Every supported scalar kind is a ScalarKind member; there is no "other"

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: kinds serialize to plain strings in schemas and log records
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

KeyName = NewType("KeyName", str)
CompositeKey = NewType("CompositeKey", str)


# ─── Enums ───────────────────────────────────────────────────────

class ScalarKind(str, Enum):
    """Declared property types the value codec can round-trip."""
    TEXT = "text"
    BYTES = "bytes"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    SINGLE = "single"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    CHAR = "char"
    DATETIME = "datetime"


class MutationKind(str, Enum):
    """Pending mutation states handed over by the change tracker."""
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
