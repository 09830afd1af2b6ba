"""
Diagnostics Logging Configuration.

Controls arborlog's own structlog output (registry and dispatch events), not
the category loggers handed out to applications.
"""

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DiagnosticsLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class DiagnosticsFormat(str, Enum):
    CONSOLE = "console"
    JSON = "json"


class LoggingSettings(BaseSettings):
    """Diagnostics logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ARBOR_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    level: DiagnosticsLevel = Field(default=DiagnosticsLevel.WARNING, description="Diagnostics log level")
    format: DiagnosticsFormat = Field(default=DiagnosticsFormat.CONSOLE, description="Output format")
    console_timestamp_format: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Console timestamp format",
    )
    console_level_width: int = Field(default=8, description="Console level column width")
    console_logger_width: int = Field(default=32, description="Console logger column width")
    console_separator: str = Field(default=" | ", description="Console column separator")
