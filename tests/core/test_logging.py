"""Tests for structured logging."""

import json
import logging
from pathlib import Path

import pytest
import structlog

from schemaguard.config.models import LoggingConfig, LogOutputConfig
from schemaguard.core.logging import (
    clear_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    request_scope,
    set_request_id,
)


class TestRequestIdCorrelation:
    """Request ID context variable tests."""

    def setup_method(self) -> None:
        clear_request_id()

    def test_given_request_id_when_set_then_can_retrieve(self) -> None:
        # Given
        request_id = "test-123"

        # When
        result = set_request_id(request_id)

        # Then
        assert result == request_id
        assert get_request_id() == request_id

    def test_given_no_id_when_set_then_generates_uuid(self) -> None:
        rid = set_request_id()

        assert len(rid) == 12  # uuid4().hex[:12]

    def test_given_set_id_when_clear_then_removes_id(self) -> None:
        set_request_id("to-clear")

        clear_request_id()

        assert get_request_id() is None

    def test_given_no_id_when_request_scope_then_fresh_id_cleared_afterwards(self) -> None:
        with request_scope() as rid:
            assert get_request_id() == rid

        assert get_request_id() is None

    def test_given_caller_id_when_request_scope_then_reused_and_kept(self) -> None:
        set_request_id("caller-1")

        with request_scope() as rid:
            assert rid == "caller-1"

        assert get_request_id() == "caller-1"

    def test_given_exception_when_request_scope_then_id_still_cleared(self) -> None:
        with pytest.raises(ValueError), request_scope():
            raise ValueError("boom")

        assert get_request_id() is None


class TestLoggingConfiguration:
    """Logging configuration tests."""

    def setup_method(self) -> None:
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()
        clear_request_id()

    def teardown_method(self) -> None:
        for handler in logging.getLogger().handlers:
            handler.close()
        logging.getLogger().handlers.clear()
        structlog.reset_defaults()

    def test_given_json_file_output_when_log_then_valid_json_with_request_id(self, tmp_path: Path) -> None:
        """JSON lines carry event, level, timestamp and the active request id."""
        # Given
        log_file = tmp_path / "schemaguard.log"
        configure_logging(config=LoggingConfig(outputs=[LogOutputConfig(format="json", destination=str(log_file))]))
        set_request_id("req-1")

        # When
        get_logger("test").info("object_assessed", kind="relation")

        # Then
        data = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert data["event"] == "object_assessed"
        assert data["kind"] == "relation"
        assert data["level"] == "info"
        assert data["request_id"] == "req-1"
        assert "timestamp" in data

    def test_given_level_override_when_configure_then_beats_config_levels(self, tmp_path: Path) -> None:
        """The --verbose override applies to the root and every output."""
        # Given
        log_file = tmp_path / "test.log"
        config = LoggingConfig(
            level="ERROR",
            outputs=[LogOutputConfig(format="json", destination=str(log_file), level="WARNING")],
        )

        # When
        configure_logging(config, level="DEBUG")
        get_logger("schemaguard.test").debug("debug msg")

        # Then
        data = json.loads(log_file.read_text().strip())
        assert data["event"] == "debug msg"
        assert data["logger"] == "schemaguard.test"

    def test_given_module_logger_created_before_configure_when_logged_then_new_config_applies(
        self, tmp_path: Path
    ) -> None:
        # Given
        logger = get_logger("schemaguard.early")
        log_file = tmp_path / "late.log"

        # When
        configure_logging(LoggingConfig(outputs=[LogOutputConfig(format="json", destination=str(log_file))]))
        logger.info("after_configure")

        # Then
        assert json.loads(log_file.read_text().strip())["event"] == "after_configure"

    def test_given_multi_output_config_when_configure_then_levels_per_output(self, tmp_path: Path) -> None:
        # Given
        debug_file = tmp_path / "debug.log"
        info_file = tmp_path / "info.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[
                LogOutputConfig(format="json", destination=str(info_file), level="INFO"),
                LogOutputConfig(format="console", destination=str(debug_file)),
            ],
        )

        # When
        configure_logging(config=config)
        logger = get_logger()
        logger.debug("debug only")
        logger.info("info msg")

        # Then
        info_content = info_file.read_text()
        assert "info msg" in info_content
        assert "debug only" not in info_content
        debug_content = debug_file.read_text()
        assert "debug only" in debug_content
        assert "info msg" in debug_content

    def test_given_reconfigure_when_called_twice_then_handlers_replaced(self, tmp_path: Path) -> None:
        config = LoggingConfig(outputs=[LogOutputConfig(destination=str(tmp_path / "a.log"))])

        configure_logging(config=config)
        configure_logging(config=config)

        assert len(logging.getLogger().handlers) == 1

    def test_given_defaults_when_configure_then_single_stderr_handler(self) -> None:
        configure_logging(level="WARNING")

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.StreamHandler)
        assert not isinstance(handlers[0], logging.FileHandler)
        assert logging.getLogger().level == logging.WARNING
