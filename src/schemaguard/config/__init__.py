"""Config module exports."""

from schemaguard.config.loader import load_config
from schemaguard.config.models import (
    AnalysisConfig,
    IndexConfig,
    LoggingConfig,
    LogOutputConfig,
    SchemaGuardConfig,
)

__all__ = [
    "load_config",
    "AnalysisConfig",
    "IndexConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "SchemaGuardConfig",
]
