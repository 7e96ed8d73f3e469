"""Error Hierarchy - typed, categorized exceptions for all mapping and store failures.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Input and decode errors are local to one operation; store errors are critical
    - Decode errors always name the offending property and its declared type
    - to_dict() produces the structured envelope used by logging

Design Decisions:
    - Single hierarchy with EntityRedisError base: callers catch one type
    - ErrorContext as dataclass: rich observability without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and caller handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    DECODE = "decode"
    CONNECTION = "connection"
    DATABASE = "database"
    CONFLICT = "conflict"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    entity_type: str | None = None
    property_name: str | None = None
    key_name: str | None = None
    operation: str | None = None
    debug_info: dict[str, Any] | None = None


class EntityRedisError(Exception):
    """Base exception for all entity_redis errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    def to_dict(self) -> dict:
        """Convert to standardized structured error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "entity_type": self.context.entity_type,
                    "property_name": self.context.property_name,
                    "key_name": self.context.key_name,
                    "operation": self.context.operation,
                },
            }
        }


# ─── Input Errors ───────────────────────────────────────────────

class EntityConfigurationError(EntityRedisError):
    """Entity type metadata is malformed."""
    def __init__(self, message: str, entity_type: str | None = None):
        super().__init__(
            message, "ENTITY_CONFIGURATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ErrorContext(entity_type=entity_type),
        )


class NullValueError(EntityRedisError):
    """A null reached a path that requires a value (encoder or key part)."""
    def __init__(self, what: str, context: ErrorContext | None = None):
        super().__init__(
            f"{what} must not be None",
            "NULL_VALUE", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.what = what


class ValueTypeError(EntityRedisError):
    """A value of the wrong Python type was written to a typed property."""
    def __init__(self, property_name: str, declared_type: str, value: object):
        super().__init__(
            f"Cannot store {type(value).__name__} value {value!r} "
            f"in property '{property_name}' of type '{declared_type}'",
            "VALUE_TYPE_MISMATCH", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ErrorContext(property_name=property_name),
        )
        self.property_name = property_name
        self.declared_type = declared_type


# ─── Decode Errors ──────────────────────────────────────────────

class UnsupportedPropertyTypeError(EntityRedisError):
    """Declared property type has no codec."""
    def __init__(self, property_name: str, declared_type: str):
        super().__init__(
            f"Unable to decode property '{property_name}' of unsupported type '{declared_type}'",
            "UNSUPPORTED_PROPERTY_TYPE", ErrorCategory.DECODE,
            ErrorSeverity.ERROR, ErrorContext(property_name=property_name),
        )
        self.property_name = property_name
        self.declared_type = declared_type


class ValueFormatError(EntityRedisError):
    """Stored text could not be parsed as the declared type."""
    def __init__(self, property_name: str, declared_type: str, text: str):
        super().__init__(
            f"Value {text!r} of property '{property_name}' is not a valid {declared_type}",
            "VALUE_FORMAT_ERROR", ErrorCategory.DECODE,
            ErrorSeverity.ERROR, ErrorContext(property_name=property_name),
        )
        self.property_name = property_name
        self.declared_type = declared_type
        self.text = text


class InvalidDatabaseValueError(EntityRedisError):
    """Stored bytes do not decode to usable text."""
    def __init__(self, property_name: str, declared_type: str, raw: bytes):
        super().__init__(
            f"Invalid database value [{','.join(str(b) for b in raw)}] "
            f"for property '{property_name}' of type '{declared_type}'",
            "INVALID_DATABASE_VALUE", ErrorCategory.DECODE,
            ErrorSeverity.ERROR, ErrorContext(property_name=property_name),
        )
        self.property_name = property_name
        self.declared_type = declared_type
        self.raw = raw


# ─── Infrastructure Errors ──────────────────────────────────────

class StoreConnectionError(EntityRedisError):
    """Redis connection could not be established or was lost."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Redis connection failed: {message}",
            "STORE_CONNECTION_ERROR", ErrorCategory.CONNECTION,
            ErrorSeverity.CRITICAL, context,
        )


class StoreOperationError(EntityRedisError):
    """Redis command or transaction failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = operation
        super().__init__(
            f"Redis {operation} failed: {message}",
            "STORE_OPERATION_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, ctx,
        )
        self.operation = operation
