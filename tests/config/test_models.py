"""Tests for configuration models."""

import pytest
from pydantic import ValidationError

from schemaguard.config.models import (
    AnalysisConfig,
    IndexConfig,
    LoggingConfig,
    LogOutputConfig,
    SchemaGuardConfig,
)


class TestLogOutputConfig:
    """Log output destination validation."""

    @pytest.mark.parametrize("destination", ["stderr", "stdout"])
    def test_given_stream_destination_when_validated_then_kept(self, destination: str) -> None:
        assert LogOutputConfig(destination=destination).destination == destination

    def test_given_relative_file_when_validated_then_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LogOutputConfig(destination="logs/schemaguard.log")

    def test_given_absolute_file_when_validated_then_kept(self) -> None:
        assert LogOutputConfig(destination="/var/log/schemaguard.log").destination == "/var/log/schemaguard.log"

    def test_given_unknown_format_when_validated_then_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LogOutputConfig(format="xml")  # type: ignore[arg-type]


class TestAnalysisConfig:
    """Risk threshold validation."""

    def test_given_defaults_when_created_then_match_rule_defaults(self) -> None:
        config = AnalysisConfig()

        assert config.usage_preview_limit == 10
        assert config.large_table_rows == 100_000

    @pytest.mark.parametrize("field", ["usage_preview_limit", "large_table_rows"])
    def test_given_negative_threshold_when_validated_then_rejected(self, field: str) -> None:
        with pytest.raises(ValidationError):
            AnalysisConfig(**{field: -1})

    def test_given_zero_preview_limit_when_validated_then_allowed(self) -> None:
        assert AnalysisConfig(usage_preview_limit=0).usage_preview_limit == 0


class TestSchemaGuardConfig:
    """Root config defaults."""

    def test_given_no_values_when_created_then_sections_defaulted(self) -> None:
        config = SchemaGuardConfig()

        assert config.logging == LoggingConfig()
        assert config.index == IndexConfig(build_on_start=True)
        assert config.logging.outputs[0].destination == "stderr"

    def test_given_invalid_log_level_when_validated_then_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SchemaGuardConfig.model_validate({"logging": {"level": "LOUD"}})
