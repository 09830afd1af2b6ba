"""
Ordered dispatch of log messages.

``CategoryLogger`` accepts log calls synchronously, builds one ``LogMessage``
per call that passes the level filter, queues it, and hands queued messages
to its sink strictly in submission order.

Messages carrying an error are not ready until the error's stack has been
rendered, which happens asynchronously. The queue never lets a later message
overtake an earlier one that is still rendering (head-of-line blocking).
"""

from __future__ import annotations

import asyncio
import threading
from collections import deque
from datetime import datetime
from functools import partial
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Deque, Optional, Sequence, Set

from arborlog.exceptions import NullCategoryElement
from arborlog.formatters import render_error
from arborlog.levels import LogLevel
from arborlog.logging import get_logger
from arborlog.message import LogMessage, Message

if TYPE_CHECKING:
    from arborlog.category import Category
    from arborlog.registry import RuntimeSettings
    from arborlog.sinks import BaseSink

logger = get_logger("arborlog.dispatch")

ErrorRenderer = Callable[[BaseException], Awaitable[str]]
MessageFactory = Callable[[], Message]
ErrorFactory = Callable[[], Optional[BaseException]]
Categories = Optional[Sequence["Category"]]


def _stack_unavailable(error: BaseException, reason: str) -> str:
    return f"{type(error).__name__}: {error} <stack unavailable: {reason}>"


async def _render_stack(renderer: ErrorRenderer, error: BaseException) -> str:
    return await renderer(error)


class CategoryLogger:
    """Logger for one root category, delivering to a sink in submission order.

    Args:
        root_category: Category used when a call names no categories.
        runtime_settings: Registry resolving each category's settings.
        sink: Receives ready messages through ``emit(message)``.
        error_renderer: Async callable turning an exception into a stack string.
            Called exactly once per error-bearing message.

    Render tasks cannot be cancelled through this class. A renderer that
    never completes blocks every later message of this logger.
    """

    def __init__(
        self,
        root_category: Category,
        runtime_settings: RuntimeSettings,
        sink: BaseSink,
        *,
        error_renderer: ErrorRenderer = render_error,
    ) -> None:
        self._root_category = root_category
        self._runtime_settings = runtime_settings
        self._sink = sink
        self._error_renderer = error_renderer
        self._queue: Deque[LogMessage] = deque()
        self._lock = threading.RLock()
        self._draining = False
        self._render_tasks: Set[asyncio.Future[str]] = set()

    @property
    def root_category(self) -> Category:
        return self._root_category

    @property
    def runtime_settings(self) -> RuntimeSettings:
        return self._runtime_settings

    @property
    def sink(self) -> BaseSink:
        return self._sink

    @property
    def pending(self) -> int:
        """Number of queued messages not yet handed to the sink."""
        with self._lock:
            return len(self._queue)

    # =========================================================================
    # Logging API
    # =========================================================================

    def trace(self, msg: Message, categories: Categories = None) -> None:
        self._log(LogLevel.TRACE, msg, None, False, categories)

    def debug(self, msg: Message, categories: Categories = None) -> None:
        self._log(LogLevel.DEBUG, msg, None, False, categories)

    def info(self, msg: Message, categories: Categories = None) -> None:
        self._log(LogLevel.INFO, msg, None, False, categories)

    def warn(self, msg: Message, categories: Categories = None) -> None:
        self._log(LogLevel.WARN, msg, None, False, categories)

    def error(self, msg: Message, error: Optional[BaseException] = None, categories: Categories = None) -> None:
        self._log(LogLevel.ERROR, msg, error, False, categories)

    def fatal(self, msg: Message, error: Optional[BaseException] = None, categories: Categories = None) -> None:
        self._log(LogLevel.FATAL, msg, error, False, categories)

    def resolved(self, msg: Message, error: Optional[BaseException], categories: Categories = None) -> None:
        """Log at ERROR for an error that was already handled or recovered from."""
        self._log(LogLevel.ERROR, msg, error, True, categories)

    def log(
        self,
        level: LogLevel,
        msg: Message,
        error: Optional[BaseException] = None,
        categories: Categories = None,
    ) -> None:
        self._log(level, msg, error, False, categories)

    # Lazy variants: factories run only when the level filter passes.

    def trace_lazy(self, msg: MessageFactory, categories: Categories = None) -> None:
        self._log_internal(LogLevel.TRACE, msg, None, False, categories)

    def debug_lazy(self, msg: MessageFactory, categories: Categories = None) -> None:
        self._log_internal(LogLevel.DEBUG, msg, None, False, categories)

    def info_lazy(self, msg: MessageFactory, categories: Categories = None) -> None:
        self._log_internal(LogLevel.INFO, msg, None, False, categories)

    def warn_lazy(self, msg: MessageFactory, categories: Categories = None) -> None:
        self._log_internal(LogLevel.WARN, msg, None, False, categories)

    def error_lazy(
        self, msg: MessageFactory, error: Optional[ErrorFactory] = None, categories: Categories = None
    ) -> None:
        self._log_internal(LogLevel.ERROR, msg, error, False, categories)

    def fatal_lazy(
        self, msg: MessageFactory, error: Optional[ErrorFactory] = None, categories: Categories = None
    ) -> None:
        self._log_internal(LogLevel.FATAL, msg, error, False, categories)

    def resolved_lazy(self, msg: MessageFactory, error: ErrorFactory, categories: Categories = None) -> None:
        self._log_internal(LogLevel.ERROR, msg, error, True, categories)

    def log_lazy(
        self,
        level: LogLevel,
        msg: MessageFactory,
        error: Optional[ErrorFactory] = None,
        categories: Categories = None,
    ) -> None:
        self._log_internal(level, msg, error, False, categories)

    async def flush(self) -> None:
        """Wait for outstanding stack renders and deliver everything that is ready."""
        while self._render_tasks:
            await asyncio.gather(*list(self._render_tasks), return_exceptions=True)
        self._drain()

    # =========================================================================
    # Message construction
    # =========================================================================

    def _log(
        self,
        level: LogLevel,
        msg: Message,
        error: Optional[BaseException],
        resolved: bool,
        categories: Categories,
    ) -> None:
        self._log_internal(level, lambda: msg, lambda: error, resolved, categories)

    def _log_internal(
        self,
        level: LogLevel,
        msg: MessageFactory,
        error: Optional[ErrorFactory],
        resolved: bool,
        categories: Categories,
    ) -> None:
        level = LogLevel(level)
        if categories:
            log_categories = tuple(categories)
            for index, category in enumerate(log_categories):
                if category is None:
                    raise NullCategoryElement(index=index)
        else:
            log_categories = (self._root_category,)

        # Messages at OFF are never emitted
        if level is LogLevel.OFF:
            return

        for category in log_categories:
            category_settings = self._runtime_settings.require_category_settings(category)
            if category_settings.log_level <= level:
                actual_error = error() if error is not None else None
                message = LogMessage(
                    message=msg(),
                    error=actual_error,
                    categories=log_categories,
                    date=datetime.now(),
                    level=level,
                    log_format=category_settings.log_format,
                    ready=actual_error is None,
                    resolved_error_message=resolved,
                )
                self._submit(message)
                return

    def _submit(self, message: LogMessage) -> None:
        with self._lock:
            self._queue.append(message)

        if message.error is None:
            self._drain()
        else:
            self._render(message, message.error)

    # =========================================================================
    # Stack rendering
    # =========================================================================

    def _render(self, message: LogMessage, error: BaseException) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is None:
            # No event loop in this thread: render to completion right here.
            try:
                stack = asyncio.run(_render_stack(self._error_renderer, error))
            except Exception as exc:
                logger.warning("error_render_failed", root=self._root_category.path, error=repr(exc))
                stack = _stack_unavailable(error, f"render failed with {exc!r}")
            message.mark_ready(stack)
            self._drain()
            return

        task = loop.create_task(_render_stack(self._error_renderer, error))
        self._render_tasks.add(task)
        task.add_done_callback(partial(self._on_rendered, message, error))

    def _on_rendered(self, message: LogMessage, error: BaseException, task: asyncio.Future[str]) -> None:
        self._render_tasks.discard(task)
        if task.cancelled():
            logger.warning("error_render_cancelled", root=self._root_category.path)
            stack = _stack_unavailable(error, "render cancelled")
        elif task.exception() is not None:
            exc = task.exception()
            logger.warning("error_render_failed", root=self._root_category.path, error=repr(exc))
            stack = _stack_unavailable(error, f"render failed with {exc!r}")
        else:
            stack = task.result()

        message.mark_ready(stack)
        self._drain()

    # =========================================================================
    # Delivery
    # =========================================================================

    def _drain(self) -> None:
        with self._lock:
            # A sink logging back into this logger lands here while the outer
            # loop is still delivering; the outer loop picks the message up.
            if self._draining:
                return
            self._draining = True
            try:
                while self._queue and self._queue[0].ready:
                    self._sink.emit(self._queue.popleft())
            finally:
                self._draining = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}(root={self._root_category.path!r}, sink={type(self._sink).__name__})"


def is_category_logger(value: Any) -> bool:
    """True for objects usable as a root logger (the logging API, not a bare sink)."""
    return all(callable(getattr(value, name, None)) for name in ("trace", "debug", "info", "warn", "error", "fatal"))
