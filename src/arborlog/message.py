"""
Log message payloads and the resolved log record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

import orjson

from .levels import CategoryLogFormat, LogLevel

if TYPE_CHECKING:
    from .category import Category


@dataclass(frozen=True)
class LogData:
    """Structured payload: a message plus auxiliary data.

    Args:
        msg: The human readable message.
        data: Optional auxiliary data rendered after the message.
        ds: Optional stringifier for ``data``; compact JSON is used otherwise.
    """

    msg: str
    data: Any = None
    ds: Optional[Callable[[Any], str]] = None

    @property
    def message_as_string(self) -> str:
        return self.msg

    def data_as_string(self) -> Optional[str]:
        if self.data is None:
            return None
        if self.ds is not None:
            return self.ds(self.data)
        return orjson.dumps(self.data, default=str).decode()


Message = Union[str, LogData]


@dataclass
class LogMessage:
    """One resolved log record waiting in (or leaving) a dispatch queue.

    ``log_format`` is a snapshot of the matching category's format taken when
    the record was built. ``ready`` stays False until the attached error's
    stack has been rendered; it is flipped once through ``mark_ready``.
    """

    message: Message
    error: Optional[BaseException]
    categories: tuple[Category, ...]
    date: datetime
    level: LogLevel
    log_format: CategoryLogFormat
    ready: bool
    resolved_error_message: bool = False
    error_as_stack: Optional[str] = field(default=None)

    @property
    def message_as_string(self) -> str:
        if isinstance(self.message, LogData):
            return self.message.message_as_string
        return self.message

    @property
    def is_message_log_data(self) -> bool:
        return isinstance(self.message, LogData)

    @property
    def log_data(self) -> Optional[LogData]:
        if isinstance(self.message, LogData):
            return self.message
        return None

    @property
    def is_resolved_error_message(self) -> bool:
        return self.resolved_error_message

    def mark_ready(self, stack: Optional[str]) -> None:
        if self.ready:
            return
        self.error_as_stack = stack
        self.ready = True
