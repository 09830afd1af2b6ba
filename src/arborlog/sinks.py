"""
Sink abstractions and concrete implementations.

A sink receives ready log messages, one at a time and in order, from a
``CategoryLogger``. Sinks never reorder or buffer for ordering purposes.
"""

from __future__ import annotations

import sys
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, TextIO

from .formatters import render_default_message
from .message import LogMessage

# LogMessage -> rendered line
Renderer = Callable[[LogMessage], str]


# =============================================================================
# Sink Abstraction (Strategy Pattern)
# =============================================================================


class BaseSink(ABC):
    """Abstract base class for log sinks."""

    @abstractmethod
    def emit(self, message: LogMessage) -> None:
        """Consume one ready log message."""
        ...

    def close(self) -> None:
        """Release resources held by the sink."""
        pass


class ConsoleSink(BaseSink):
    """Writes one rendered line per message to a text stream.

    Args:
        render: Turns a message into text; the default renderer when omitted.
        stream: Output stream (default: stderr, resolved at emit time).
    """

    def __init__(self, render: Optional[Renderer] = None, stream: Optional[TextIO] = None) -> None:
        self._render = render or render_default_message
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stderr

    def emit(self, message: LogMessage) -> None:
        stream = self.stream
        stream.write(self._render(message) + "\n")
        stream.flush()


class RawConsoleSink(BaseSink):
    """Writes the bare message text, followed by the stack when there is one."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._stream = stream

    def emit(self, message: LogMessage) -> None:
        stream = self._stream or sys.stderr
        stream.write(message.message_as_string + "\n")
        if message.error_as_stack is not None:
            stream.write(message.error_as_stack + "\n")
        stream.flush()


class MessageBufferSink(BaseSink):
    """Keeps rendered messages in memory, mostly for tests and diagnostics.

    Args:
        render: Turns a message into text; the default renderer when omitted.
        max_messages: Oldest messages are dropped beyond this many (None keeps all).
    """

    def __init__(self, render: Optional[Renderer] = None, max_messages: Optional[int] = None) -> None:
        self._render = render or render_default_message
        self._max_messages = max_messages
        self._messages: List[str] = []
        self._lock = threading.Lock()

    def emit(self, message: LogMessage) -> None:
        rendered = self._render(message)
        with self._lock:
            self._messages.append(rendered)
            if self._max_messages is not None and len(self._messages) > self._max_messages:
                del self._messages[: len(self._messages) - self._max_messages]

    def get_messages(self) -> List[str]:
        with self._lock:
            return list(self._messages)

    def clear(self) -> None:
        with self._lock:
            self._messages.clear()

    def __str__(self) -> str:
        return "\n".join(self.get_messages())


class CallbackSink(BaseSink):
    """Hands every message to a user callable."""

    def __init__(self, callback: Callable[[LogMessage], Any]) -> None:
        self._callback = callback

    def emit(self, message: LogMessage) -> None:
        self._callback(message)
