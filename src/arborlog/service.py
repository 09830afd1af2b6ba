"""
Category service: registry owner and root logger factory.

One ``CategoryService`` owns a ``RuntimeSettings`` registry and hands out a
single ``DelegateLogger`` per root category. Concrete loggers are built from
the root category's settings and rebuilt behind the delegate when the
configuration is reset.

The module-level functions operate on the process-wide current service;
tests install a fresh one with ``use_service``.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, Dict, Optional, TextIO

from arborlog.configuration import CategoryConfiguration, CategorySettings
from arborlog.delegate import DelegateLogger
from arborlog.dispatch import CategoryLogger, ErrorRenderer, is_category_logger
from arborlog.exceptions import NonRootCategoryLookup
from arborlog.formatters import render_default_message, render_error
from arborlog.levels import LoggerType, LogLevel
from arborlog.logging import get_logger as get_diagnostics_logger
from arborlog.message import LogMessage
from arborlog.registry import RuntimeSettings
from arborlog.sinks import BaseSink, CallbackSink, ConsoleSink, MessageBufferSink, RawConsoleSink

if TYPE_CHECKING:
    from arborlog.category import Category

logger = get_diagnostics_logger("arborlog.service")
# Forwarded category messages already passed their own level filter
custom_logger = get_diagnostics_logger("arborlog.custom", unfiltered=True)

_STDLIB_LEVELS = {
    LogLevel.TRACE: logging.DEBUG,
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.FATAL: logging.CRITICAL,
}


class CategoryService:
    """Registry plus one memoised logger per root category.

    Args:
        runtime_settings: Registry to use; a fresh one when omitted.
        error_renderer: Async stack renderer given to every logger built here.
        stream: Stream for console sinks (stderr when omitted).
    """

    def __init__(
        self,
        runtime_settings: Optional[RuntimeSettings] = None,
        *,
        error_renderer: ErrorRenderer = render_error,
        stream: Optional[TextIO] = None,
    ) -> None:
        self._runtime_settings = runtime_settings if runtime_settings is not None else RuntimeSettings()
        self._error_renderer = error_renderer
        self._stream = stream
        self._root_loggers: Dict[Category, DelegateLogger] = {}
        self._lock = threading.RLock()

    @property
    def runtime_settings(self) -> RuntimeSettings:
        return self._runtime_settings

    def register(self, category: Category) -> CategorySettings:
        return self._runtime_settings.register(category)

    def get_logger(self, root: Category) -> DelegateLogger:
        """Return the logger of a root category, creating it on first use."""
        if root.parent is not None:
            raise NonRootCategoryLookup(path=root.path)

        with self._lock:
            delegate = self._root_loggers.get(root)
            if delegate is None:
                delegate = DelegateLogger(self._create_root_logger(root))
                self._root_loggers[root] = delegate
                logger.debug("root_logger_created", root=root.path, target=repr(delegate.delegate))
            return delegate

    def set_default_configuration(self, config: CategoryConfiguration, reset: bool = True) -> None:
        """Install a new default; with ``reset`` existing categories and loggers follow it."""
        with self._lock:
            self._runtime_settings.set_default_configuration(config, reset)
            if reset:
                for root in self._root_loggers:
                    self._swap(root)

    def set_configuration_category(
        self,
        config: CategoryConfiguration,
        category: Category,
        include_children: bool = True,
        reset_root_logger: bool = False,
    ) -> None:
        """Override one category (and by default its subtree).

        With ``reset_root_logger`` the logger of the category's root is rebuilt
        from the new settings if one was already handed out. Without it, live
        loggers keep their sink but see new levels and formats immediately.
        """
        with self._lock:
            self._runtime_settings.set_configuration_category(config, category, include_children)
            if reset_root_logger:
                root = category.root
                if root in self._root_loggers:
                    self._swap(root)

    def clear(self) -> None:
        """Forget all categories, settings and issued loggers."""
        with self._lock:
            for delegate in self._root_loggers.values():
                _close(delegate.delegate)
            self._runtime_settings.clear()
            self._root_loggers.clear()

    # =========================================================================
    # Logger construction
    # =========================================================================

    def _swap(self, root: Category) -> None:
        delegate = self._root_loggers[root]
        previous = delegate.delegate
        delegate.delegate = self._create_root_logger(root)
        _close(previous)
        logger.debug("root_logger_swapped", root=root.path, target=repr(delegate.delegate))

    def _create_root_logger(self, root: Category) -> Any:
        root_settings = self._runtime_settings.require_category_settings(root)
        logger_type = root_settings.logger_type

        if logger_type is LoggerType.CONSOLE:
            return self._wrap(root, ConsoleSink(self._renderer_for(root), stream=self._stream))
        if logger_type is LoggerType.RAW_CONSOLE:
            return self._wrap(root, RawConsoleSink(stream=self._stream))
        if logger_type is LoggerType.MESSAGE_BUFFER:
            return self._wrap(root, MessageBufferSink(self._renderer_for(root)))

        call_back_logger = root_settings.call_back_logger
        if call_back_logger is None:
            return self._wrap(root, CallbackSink(_forward_to_diagnostics))

        created = call_back_logger(root, self._runtime_settings)
        if isinstance(created, BaseSink):
            return self._wrap(root, created)
        if is_category_logger(created):
            return created
        raise TypeError(
            f"call_back_logger for root '{root.path}' must return a category logger or a BaseSink, "
            f"got {type(created).__name__}"
        )

    def _wrap(self, root: Category, sink: BaseSink) -> CategoryLogger:
        return CategoryLogger(root, self._runtime_settings, sink, error_renderer=self._error_renderer)

    def _renderer_for(self, root: Category) -> Any:
        # Formatter is looked up per message so configuration changes apply to live sinks.
        def render(message: LogMessage) -> str:
            root_settings = self._runtime_settings.get_category_settings(root)
            formatter = root_settings.formatter_log_message if root_settings is not None else None
            if formatter is not None:
                return formatter(message)
            return render_default_message(message)

        return render


def _close(target: Any) -> None:
    # Loggers returned by a custom callback manage their own sinks
    if isinstance(target, CategoryLogger):
        target.sink.close()


def _forward_to_diagnostics(message: LogMessage) -> None:
    custom_logger.log(
        _STDLIB_LEVELS.get(message.level, logging.INFO),
        render_default_message(message),
        categories=[category.path for category in message.categories],
    )


# =============================================================================
# Process-wide service
# =============================================================================

_service: Optional[CategoryService] = None
_service_lock = threading.Lock()


def get_service() -> CategoryService:
    """Return the current service, creating it on first use."""
    global _service
    with _service_lock:
        if _service is None:
            _service = CategoryService()
        return _service


def use_service(service: Optional[CategoryService]) -> Optional[CategoryService]:
    """Install ``service`` as the current service and return the previous one."""
    global _service
    with _service_lock:
        previous, _service = _service, service
        return previous


def get_logger(root: Category) -> DelegateLogger:
    """Logger of a root category, from the service the category registered with."""
    return root.service.get_logger(root)


def get_runtime_settings() -> RuntimeSettings:
    return get_service().runtime_settings


def set_default_configuration(config: CategoryConfiguration, reset: bool = True) -> None:
    get_service().set_default_configuration(config, reset)


def set_configuration_category(
    config: CategoryConfiguration,
    category: Category,
    include_children: bool = True,
    reset_root_logger: bool = False,
) -> None:
    category.service.set_configuration_category(config, category, include_children, reset_root_logger)


def clear() -> None:
    get_service().clear()
