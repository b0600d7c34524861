"""Core module exports."""

from schemaguard.core.errors import (
    AnalysisError,
    ConfigError,
    ErrorCode,
    InternalError,
    SchemaGuardError,
)
from schemaguard.core.logging import (
    clear_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    request_scope,
    set_request_id,
)

__all__ = [
    # Errors
    "AnalysisError",
    "ConfigError",
    "ErrorCode",
    "InternalError",
    "SchemaGuardError",
    # Logging
    "clear_request_id",
    "configure_logging",
    "get_logger",
    "get_request_id",
    "request_scope",
    "set_request_id",
]
