"""Structured logging for the analyzer and its CLI host.

Every module logs through ``get_logger(__name__)``. Hosts call
``configure_logging`` once; each configured output gets its own stdlib
handler with a console or JSON renderer. One analysis call is one request:
``request_scope`` tags every event it emits with a short correlation id.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from schemaguard.config.models import LoggingConfig, LogOutputConfig

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)

_STREAMS = ("stderr", "stdout")


def get_request_id() -> str | None:
    return _request_id.get()


def set_request_id(request_id: str | None = None) -> str:
    """Set or generate request correlation ID."""
    rid = request_id or uuid4().hex[:12]
    _request_id.set(rid)
    return rid


def clear_request_id() -> None:
    _request_id.set(None)


@contextmanager
def request_scope() -> Iterator[str]:
    """Reuse the caller's request id, or open a fresh one for this block."""
    current = get_request_id()
    if current is not None:
        yield current
        return
    rid = set_request_id()
    try:
        yield rid
    finally:
        clear_request_id()


def _add_request_id(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    if rid := get_request_id():
        event_dict["request_id"] = rid
    return event_dict


def _level(name: str | None, fallback: int = logging.INFO) -> int:
    if not name:
        return fallback
    resolved = logging.getLevelName(name.upper())
    return resolved if isinstance(resolved, int) else fallback


def _handler(output: LogOutputConfig) -> logging.Handler:
    if output.destination in _STREAMS:
        # Resolved per call so streams redirected after import are honored.
        return logging.StreamHandler(getattr(sys, output.destination))
    path = Path(output.destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, mode="a", encoding="utf-8")


def _formatter(
    output: LogOutputConfig,
    shared: list[structlog.types.Processor],
) -> structlog.stdlib.ProcessorFormatter:
    renderer: structlog.types.Processor
    if output.format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        colors = output.destination in _STREAMS and getattr(sys, output.destination).isatty()
        renderer = structlog.dev.ConsoleRenderer(colors=colors, pad_event_to=0, pad_level=False)
    return structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=shared)


def configure_logging(config: LoggingConfig | None = None, *, level: str | None = None) -> None:
    """Route structlog through stdlib logging into the configured outputs.

    Args:
        config: Outputs and root level. Defaults to console on stderr.
        level: Overrides ``config.level`` (the CLI's ``--verbose``).

    Reconfiguring replaces the handlers installed by a previous call.
    """
    from schemaguard.config.models import LoggingConfig

    config = config or LoggingConfig()
    root_level = _level(level or config.level)

    shared: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
        _add_request_id,  # type: ignore[list-item]
    ]
    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    for existing in root.handlers:
        existing.close()
    root.handlers.clear()
    root.setLevel(root_level)

    for output in config.outputs:
        handler = _handler(output)
        # An explicit --verbose level beats per-output levels from the config file.
        handler.setLevel(root_level if level else _level(output.level, root_level))
        handler.setFormatter(_formatter(output, shared))
        root.addHandler(handler)


def get_logger(name: str | None = None) -> Any:
    """Module logger, resolved lazily so later ``configure_logging`` calls apply."""
    if name is None:
        return structlog.get_logger()
    return structlog._config.BoundLoggerLazyProxy(None, initial_values={"logger": name}, logger_factory_args=(name,))
