"""
Error taxonomy for arborlog.

Every error here is a programming or configuration mistake. They are raised at
the point of misuse and propagate to the caller; nothing is retried internally.

Two branches:
- InvalidArgument: a caller passed something the API cannot accept.
- ConfigurationError: the registry and the caller disagree about what exists
  or how it is configured.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ArborLogError(Exception):
    """Root of all arborlog errors."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}


# ================================
# Invalid arguments
# ================================


class InvalidArgument(ArborLogError, ValueError):
    """A call received an argument it cannot work with."""

    pass


class InvalidCategoryName(InvalidArgument):
    """Category name contains characters outside [A-Za-z0-9_]."""

    def __init__(self, *, name: str) -> None:
        super().__init__(
            f"Category name '{name}' is invalid, only letters, digits and '_' are allowed",
            code="INVALID_CATEGORY_NAME",
            details={"name": name},
        )


class NonRootCategoryLookup(InvalidArgument):
    """A logger was requested for a category that has a parent."""

    def __init__(self, *, path: str) -> None:
        super().__init__(
            f"Cannot get a logger for category '{path}', only root categories (without parent) are allowed",
            code="NON_ROOT_CATEGORY_LOOKUP",
            details={"path": path},
        )


class CategoryServiceMismatch(InvalidArgument):
    """A child category was given a service other than its parent's."""

    def __init__(self, *, name: str, parent_path: str) -> None:
        super().__init__(
            f"Category '{name}' must use the service of its parent '{parent_path}'",
            code="CATEGORY_SERVICE_MISMATCH",
            details={"name": name, "parent_path": parent_path},
        )


class NullCategoryElement(InvalidArgument):
    """An explicit category list contained None."""

    def __init__(self, *, index: int) -> None:
        super().__init__(
            f"Cannot have a None element within categories, at index={index}",
            code="NULL_CATEGORY_ELEMENT",
            details={"index": index},
        )


# ================================
# Configuration errors
# ================================


class ConfigurationError(ArborLogError):
    """Registry state does not match what the caller relies on."""

    pass


class CategoryNotRegistered(ConfigurationError):
    """No runtime settings exist for a category.

    Usually the category was created against a different service, or the
    registry was cleared underneath a live logger.
    """

    def __init__(self, *, path: str) -> None:
        super().__init__(
            f"Category with path '{path}' is not registered with this logger, "
            "maybe you registered it with a different service or the registry was cleared?",
            code="CATEGORY_NOT_REGISTERED",
            details={"path": path},
        )


class ConflictingFormatterConfiguration(ConfigurationError):
    """A message formatter was set while the logger type is CUSTOM."""

    def __init__(self) -> None:
        super().__init__(
            "You cannot specify a formatter for log messages if your logger_type is CUSTOM",
            code="CONFLICTING_FORMATTER_CONFIGURATION",
        )
