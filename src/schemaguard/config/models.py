"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (SCHEMAGUARD__SECTION__KEY)
3. Project YAML (.schemaguard/config.yaml)
4. Global YAML (~/.config/schemaguard/config.yaml)
5. Built-in defaults (this file)

Examples:
    SCHEMAGUARD__LOGGING__LEVEL=DEBUG
    SCHEMAGUARD__ANALYSIS__USAGE_PREVIEW_LIMIT=25
    SCHEMAGUARD__INDEX__BUILD_ON_START=false
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from schemaguard.config.constants import LARGE_TABLE_ROWS, USAGE_PREVIEW_LIMIT

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        SCHEMAGUARD__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every index build and lookup.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class AnalysisConfig(BaseModel):
    """Risk rule thresholds.

    Env vars:
        SCHEMAGUARD__ANALYSIS__USAGE_PREVIEW_LIMIT: Usage lines before "+N more"
        SCHEMAGUARD__ANALYSIS__LARGE_TABLE_ROWS: Row count that escalates a delete
    """

    usage_preview_limit: int = Field(
        default=USAGE_PREVIEW_LIMIT,
        description="Usage references listed per risk before truncation.",
    )
    large_table_rows: int = Field(
        default=LARGE_TABLE_ROWS,
        description="Relations with more rows than this escalate one step on delete.",
    )

    @field_validator("usage_preview_limit", "large_table_rows")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Must be >= 0, got {v}")
        return v


class IndexConfig(BaseModel):
    """Identifier index configuration.

    Env vars:
        SCHEMAGUARD__INDEX__BUILD_ON_START: Start an index build when the analyzer is created
    """

    build_on_start: bool = Field(
        default=True,
        description="Schedule an index build as soon as the analyzer is created. "
        "When false the host must await rebuild_index() to get usage detection.",
    )


class SchemaGuardConfig(BaseModel):
    """Root configuration for SchemaGuard."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    index: IndexConfig = Field(default_factory=IndexConfig)
