"""SchemaGuard error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Metadata
- 4xxx: Lookup (not found)
- 9xxx: Internal

Analysis failures are never raised to callers of the analyzer facade. The
facade converts them into ``AnalysisResult(found=False, error=...)``; the
codes exist so hosts and logs can tell the failure classes apart.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Metadata (3xxx)
    METADATA_UNAVAILABLE = 3001
    SNAPSHOT_INVALID = 3002

    # Lookup (4xxx)
    DATABASE_NOT_FOUND = 4001
    SCHEMA_NOT_FOUND = 4002
    OBJECT_NOT_FOUND = 4003

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class SchemaGuardError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'SCHEMA_NOT_FOUND')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(SchemaGuardError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class AnalysisError(SchemaGuardError):
    """Lookup and metadata failures met while analyzing an object.

    ``message`` holds the short text surfaced as ``AnalysisResult.error``.
    """

    @classmethod
    def metadata_unavailable(cls, reason: str | None = None) -> "AnalysisError":
        return cls(
            code=ErrorCode.METADATA_UNAVAILABLE,
            message="metadata unavailable",
            retryable=True,
            details={"reason": reason} if reason else {},
        )

    @classmethod
    def invalid_snapshot(cls, source: str, reason: str) -> "AnalysisError":
        return cls(
            code=ErrorCode.SNAPSHOT_INVALID,
            message=f"Invalid metadata snapshot {source}: {reason}",
            details={"source": source, "reason": reason},
        )

    @classmethod
    def database_not_found(cls) -> "AnalysisError":
        return cls(code=ErrorCode.DATABASE_NOT_FOUND, message="database not found")

    @classmethod
    def schema_not_found(cls, schema_name: str) -> "AnalysisError":
        return cls(
            code=ErrorCode.SCHEMA_NOT_FOUND,
            message="schema not found",
            details={"schema": schema_name},
        )

    @classmethod
    def object_not_found(cls, schema_name: str, object_name: str) -> "AnalysisError":
        return cls(
            code=ErrorCode.OBJECT_NOT_FOUND,
            message="object not found in schema",
            details={"schema": schema_name, "object": object_name},
        )


class InternalError(SchemaGuardError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
