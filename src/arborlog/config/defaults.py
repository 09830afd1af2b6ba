"""
Default Category Configuration.

The configuration every newly created category inherits until the
application installs its own default.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from arborlog.levels import DateFormatStyle, LoggerType


class DefaultsSettings(BaseSettings):
    """Process-wide default for category runtime settings."""

    model_config = SettingsConfigDict(
        env_prefix="ARBOR_DEFAULT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    level: str = Field(default="error", description="Minimum level (trace, debug, info, warn, error, fatal, off)")
    logger_type: LoggerType = Field(default=LoggerType.CONSOLE, description="Sink kind for root loggers")
    show_time_stamp: bool = Field(default=True, description="Render the capture time")
    show_category_name: bool = Field(default=True, description="Render the category names")
    date_format: DateFormatStyle = Field(default=DateFormatStyle.DEFAULT, description="Timestamp layout")
    date_separator: str = Field(default="-", description="Separator between date fields")
