"""
Core diagnostics logging configuration and initialization logic.

arborlog never calls ``structlog.configure``: the global structlog setup
belongs to the application. Diagnostics events are resolved on every call:

1. through arborlog's own pipeline once ``configure_logging`` was called;
2. otherwise through the application's pipeline if it configured structlog;
3. otherwise through a private pipeline built from ``settings.logging``.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO

import structlog
from structlog.typing import EventDict, WrappedLogger

from .formatters import ConsoleFormatter, orjson_dumps

# Set by configure_logging, cleared by reset_logging
_pipeline: Optional[Dict[str, Any]] = None
_console_configured = False


class DiagnosticsLogger:
    """Named structlog logger whose pipeline is looked up at call time.

    Args:
        name: Value of the ``logger`` key on every event.
        unfiltered: Ignore the diagnostics level of arborlog's own pipeline.
    """

    def __init__(self, name: str, *, unfiltered: bool = False) -> None:
        self._name = name
        self._unfiltered = unfiltered

    @property
    def name(self) -> str:
        return self._name

    def __getattr__(self, method: str) -> Any:
        return getattr(_resolve(self._name, self._unfiltered), method)

    def __repr__(self) -> str:
        return f"DiagnosticsLogger(name={self._name!r})"


def get_logger(name: str | None = None, *, unfiltered: bool = False) -> DiagnosticsLogger:
    """Get a structured diagnostics logger."""
    return DiagnosticsLogger(name or "arborlog", unfiltered=unfiltered)


def _resolve(name: str, unfiltered: bool) -> Any:
    pipeline = _pipeline
    if pipeline is None:
        if structlog.is_configured():
            return structlog.get_logger(logger=name)
        pipeline = _pipeline_from_settings()

    level = logging.NOTSET if unfiltered else pipeline["level"]
    return structlog.wrap_logger(
        structlog.PrintLogger(file=pipeline["stream"] or sys.stderr),
        processors=pipeline["processors"],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        cache_logger_on_first_use=False,
        logger=name,
    )


# =============================================================================
# Structlog Processors
# =============================================================================


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add ISO 8601 timestamp to log event."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def add_logger_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add logger name to log event."""
    event_dict.setdefault("logger", "arborlog")
    return event_dict


def rename_event_key(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename 'event' to 'message'."""
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def _console_renderer(stream: Optional[TextIO]) -> Any:
    def render(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> str:
        target = stream or sys.stderr
        use_color = bool(getattr(target, "isatty", lambda: False)())
        return ConsoleFormatter.format(event_dict, use_color=use_color)

    return render


# =============================================================================
# Configuration Logic
# =============================================================================


def _build_pipeline(level: str, fmt: str, stream: Optional[TextIO]) -> Dict[str, Any]:
    if fmt.lower() == "json":
        renderer: Any = structlog.processors.JSONRenderer(serializer=orjson_dumps)
    else:
        renderer = _console_renderer(stream)

    return {
        "level": getattr(logging, level.upper(), logging.WARNING),
        "stream": stream,
        "processors": [
            structlog.processors.add_log_level,
            add_timestamp,
            add_logger_name,
            rename_event_key,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
    }


def configure_logging(
    *,
    level: str = "WARNING",
    fmt: str = "console",
    stream: TextIO | None = None,
) -> None:
    """
    Configure arborlog diagnostics logging.

    Only arborlog's own loggers are affected; the global structlog
    configuration is left untouched.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        fmt: Output format (console, json)
        stream: Output stream (default: stderr at the time of each event)
    """
    global _pipeline
    _pipeline = _build_pipeline(level, fmt, stream)


def reset_logging() -> None:
    """Drop the pipeline installed by ``configure_logging``."""
    global _pipeline
    _pipeline = None


def _pipeline_from_settings() -> Dict[str, Any]:
    global _console_configured
    from arborlog.config import settings

    log_settings = settings.logging
    if not _console_configured:
        ConsoleFormatter.configure(
            timestamp_format=log_settings.console_timestamp_format,
            level_width=log_settings.console_level_width,
            logger_width=log_settings.console_logger_width,
            separator=log_settings.console_separator,
        )
        _console_configured = True
    return _build_pipeline(log_settings.level.value, log_settings.format.value, None)
