"""
Rendering of log messages, timestamps and error stacks.
"""

from __future__ import annotations

import traceback
from datetime import datetime
from typing import TYPE_CHECKING

from .levels import DateFormat, DateFormatStyle

if TYPE_CHECKING:
    from .message import LogMessage

# =============================================================================
# ANSI colours
# =============================================================================

COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "debug": "\033[36m",
    "info": "\033[32m",
    "warning": "\033[33m",
    "error": "\033[31m",
    "critical": "\033[1;31m",
    "timestamp": "\033[90m",
    "logger": "\033[35m",
    "key": "\033[34m",
}


def colorize(text: str, color: str) -> str:
    """Apply ANSI color to text."""
    return f"{COLORS.get(color, '')}{text}{COLORS['reset']}"


# =============================================================================
# Dates
# =============================================================================

_DATE_LAYOUTS = {
    DateFormatStyle.DEFAULT: ("%Y{sep}%m{sep}%d", True),
    DateFormatStyle.YEAR_MONTH_DAY_TIME: ("%Y{sep}%m{sep}%d", False),
    DateFormatStyle.YEAR_DAY_MONTH_WITH_FULL_TIME: ("%Y{sep}%d{sep}%m", True),
    DateFormatStyle.YEAR_DAY_MONTH_TIME: ("%Y{sep}%d{sep}%m", False),
}


def render_date(date: datetime, date_format: DateFormat) -> str:
    """Render ``date`` using the layout and separator of ``date_format``."""
    day_layout, with_millis = _DATE_LAYOUTS[date_format.style]
    # strftime directives must not be mangled by a '%' in the separator
    separator = date_format.date_separator.replace("%", "%%")
    result = date.strftime(day_layout.format(sep=separator) + " %H:%M:%S")
    if with_millis:
        result += f",{date.microsecond // 1000:03d}"
    return result


# =============================================================================
# Messages
# =============================================================================


def render_default_message(message: LogMessage, add_stack: bool = True) -> str:
    """Render the standard single log line.

    Layout: ``<date> LEVEL [(resolved)] [cat1, cat2] text [data]: <data>``,
    followed by the rendered stack on the next line when present.
    """
    log_format = message.log_format
    result = ""
    if log_format.show_time_stamp:
        result += render_date(message.date, log_format.date_format) + " "

    result += message.level.name
    if message.is_resolved_error_message:
        result += " (resolved)"
    result += " "

    if log_format.show_category_name:
        result += "[" + ", ".join(category.name for category in message.categories) + "]"

    result += " " + message.message_as_string

    log_data = message.log_data
    if log_data is not None:
        data_string = log_data.data_as_string()
        if data_string is not None:
            result += " [data]: " + data_string

    if add_stack and message.error_as_stack is not None:
        result += "\n" + message.error_as_stack
    return result


# =============================================================================
# Errors
# =============================================================================


async def render_error(error: BaseException) -> str:
    """Render an exception with its traceback."""
    return "".join(traceback.format_exception(type(error), error, error.__traceback__)).rstrip("\n")
