"""
Log levels, logger types and log format options.
"""

from __future__ import annotations

from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict, Field


class LogLevel(IntEnum):
    """Ordered log levels. A category emits a message iff its level <= message level."""

    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    FATAL = 5
    OFF = 6

    @classmethod
    def from_name(cls, name: str | LogLevel) -> LogLevel:
        """Parse a level name case-insensitively ("warn", "WARNING" and "Warn" all work)."""
        if isinstance(name, LogLevel):
            return name
        normalized = name.strip().upper()
        if normalized == "WARNING":
            normalized = "WARN"
        elif normalized == "CRITICAL":
            normalized = "FATAL"
        try:
            return cls[normalized]
        except KeyError:
            raise ValueError(f"log level must be one of {[lvl.name for lvl in cls]}, got {name!r}") from None


class LoggerType(str, Enum):
    """Kind of sink a root category logger writes to."""

    CONSOLE = "console"
    RAW_CONSOLE = "raw_console"  # message and stack only, no decoration
    MESSAGE_BUFFER = "message_buffer"
    CUSTOM = "custom"


class DateFormatStyle(str, Enum):
    """Supported timestamp layouts."""

    DEFAULT = "default"  # yyyy-MM-dd HH:mm:ss,SSS
    YEAR_MONTH_DAY_TIME = "year_month_day_time"  # yyyy-MM-dd HH:mm:ss
    YEAR_DAY_MONTH_WITH_FULL_TIME = "year_day_month_with_full_time"  # yyyy-dd-MM HH:mm:ss,SSS
    YEAR_DAY_MONTH_TIME = "year_day_month_time"  # yyyy-dd-MM HH:mm:ss


class DateFormat(BaseModel):
    """Timestamp layout plus the separator placed between date fields."""

    model_config = ConfigDict(frozen=True)

    style: DateFormatStyle = DateFormatStyle.DEFAULT
    date_separator: str = "-"


class CategoryLogFormat(BaseModel):
    """What the default renderer shows besides the message itself."""

    model_config = ConfigDict(frozen=True)

    date_format: DateFormat = Field(default_factory=DateFormat)
    show_time_stamp: bool = True
    show_category_name: bool = True
