"""
arborlog Configuration Module.

Nested settings: each concern is an independent sub-settings object with its
own environment variable prefix.

Usage:
    from arborlog.config import settings

    settings.defaults.level  # "error"
    settings.logging.level   # DiagnosticsLevel.WARNING
"""

from functools import cached_property

from pydantic_settings import BaseSettings, SettingsConfigDict

from .defaults import DefaultsSettings
from .logging import LoggingSettings


class Settings(BaseSettings):
    """Composite settings aggregating the configuration domains."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @cached_property
    def defaults(self) -> DefaultsSettings:
        return DefaultsSettings()

    @cached_property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


# Singleton instance
settings = Settings()

__all__ = [
    "Settings",
    "settings",
    "DefaultsSettings",
    "LoggingSettings",
]
