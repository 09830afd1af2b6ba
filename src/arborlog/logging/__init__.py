"""
Diagnostics logging for arborlog itself.

Registry and dispatch events (category registration, logger swaps, failed
stack renders) are reported through structlog so they blend into
applications that already use it. Importing arborlog never configures
structlog.

Library: structlog + orjson for JSON rendering.
"""

from .core import DiagnosticsLogger, configure_logging, get_logger, reset_logging

__all__ = ["DiagnosticsLogger", "configure_logging", "get_logger", "reset_logging"]
