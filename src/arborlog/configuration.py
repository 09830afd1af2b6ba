"""
Category configuration and per-category runtime settings.

A ``CategoryConfiguration`` is what applications install, either as the
default for all categories or as an override for one subtree. The registry
turns it into one ``CategorySettings`` object per category, so changing one
category's settings never leaks into another.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Optional

from .exceptions import ConflictingFormatterConfiguration
from .levels import CategoryLogFormat, DateFormat, LoggerType, LogLevel

if TYPE_CHECKING:
    from .category import Category
    from .config import DefaultsSettings
    from .message import LogMessage
    from .registry import RuntimeSettings

# (root_category, runtime_settings) -> category logger or sink
CallBackLogger = Callable[["Category", "RuntimeSettings"], Any]
# LogMessage -> rendered line
MessageFormatter = Callable[["LogMessage"], str]


class _ConfigurationFields:
    """Fields shared by configurations and resolved settings.

    Setting a message formatter while the logger type is CUSTOM fails
    immediately: custom loggers do their own rendering.
    """

    def __init__(
        self,
        log_level: LogLevel = LogLevel.ERROR,
        logger_type: LoggerType = LoggerType.CONSOLE,
        log_format: Optional[CategoryLogFormat] = None,
        call_back_logger: Optional[CallBackLogger] = None,
        formatter_log_message: Optional[MessageFormatter] = None,
    ) -> None:
        self.log_level = LogLevel(log_level)
        self._logger_type = LoggerType(logger_type)
        self.log_format = log_format if log_format is not None else CategoryLogFormat()
        self.call_back_logger = call_back_logger
        self._formatter_log_message: Optional[MessageFormatter] = None
        self.formatter_log_message = formatter_log_message

    @property
    def logger_type(self) -> LoggerType:
        return self._logger_type

    @logger_type.setter
    def logger_type(self, value: LoggerType) -> None:
        value = LoggerType(value)
        if value is LoggerType.CUSTOM and self._formatter_log_message is not None:
            raise ConflictingFormatterConfiguration()
        self._logger_type = value

    @property
    def formatter_log_message(self) -> Optional[MessageFormatter]:
        return self._formatter_log_message

    @formatter_log_message.setter
    def formatter_log_message(self, value: Optional[MessageFormatter]) -> None:
        if value is not None and self._logger_type is LoggerType.CUSTOM:
            raise ConflictingFormatterConfiguration()
        self._formatter_log_message = value


class CategoryConfiguration(_ConfigurationFields):
    """Configuration applied to categories as a default or as an override."""

    @classmethod
    def from_settings(cls, defaults: DefaultsSettings) -> CategoryConfiguration:
        """Build the default configuration from environment-driven settings."""
        return cls(
            log_level=LogLevel.from_name(defaults.level),
            logger_type=defaults.logger_type,
            log_format=CategoryLogFormat(
                date_format=DateFormat(style=defaults.date_format, date_separator=defaults.date_separator),
                show_time_stamp=defaults.show_time_stamp,
                show_category_name=defaults.show_category_name,
            ),
        )

    def copy(self) -> CategoryConfiguration:
        return CategoryConfiguration(
            log_level=self.log_level,
            logger_type=self.logger_type,
            log_format=self.log_format,
            call_back_logger=self.call_back_logger,
            formatter_log_message=self.formatter_log_message,
        )

    def __repr__(self) -> str:
        return (
            f"CategoryConfiguration(log_level={self.log_level.name}, "
            f"logger_type={self.logger_type.value}, log_format={self.log_format!r})"
        )


class CategorySettings(_ConfigurationFields):
    """Resolved runtime settings of exactly one category."""

    def __init__(self, category: Category, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.category = category

    @classmethod
    def from_configuration(cls, category: Category, config: CategoryConfiguration) -> CategorySettings:
        return cls(
            category,
            log_level=config.log_level,
            logger_type=config.logger_type,
            log_format=config.log_format,
            call_back_logger=config.call_back_logger,
            formatter_log_message=config.formatter_log_message,
        )

    def __repr__(self) -> str:
        return (
            f"CategorySettings(category={self.category.path!r}, log_level={self.log_level.name}, "
            f"logger_type={self.logger_type.value})"
        )
