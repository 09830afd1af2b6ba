"""
Category runtime-settings registry.

Maps every registered category (by identity) to its own ``CategorySettings``.
New categories inherit the nearest subtree override installed above them, or
the current default configuration when there is none.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Dict, List, Optional

from arborlog.config import settings
from arborlog.configuration import CategoryConfiguration, CategorySettings
from arborlog.exceptions import CategoryNotRegistered
from arborlog.logging import get_logger

if TYPE_CHECKING:
    from arborlog.category import Category

logger = get_logger("arborlog.registry")


class RuntimeSettings:
    """Registry of category runtime settings.

    All mutation happens under one re-entrant lock, so categories may be
    created and reconfigured from several threads.

    Args:
        default_configuration: Initial default. When omitted the default is
            built from ``settings.defaults``; ``clear`` restores it.
    """

    def __init__(self, default_configuration: Optional[CategoryConfiguration] = None) -> None:
        self._lock = threading.RLock()
        self._base_default = default_configuration
        self._default = self._initial_default()
        self._settings: Dict[Category, CategorySettings] = {}
        # subtree overrides inherited by categories created later
        self._overrides: Dict[Category, CategoryConfiguration] = {}

    def _initial_default(self) -> CategoryConfiguration:
        if self._base_default is not None:
            return self._base_default.copy()
        return CategoryConfiguration.from_settings(settings.defaults)

    @property
    def default_configuration(self) -> CategoryConfiguration:
        return self._default

    def register(self, category: Category) -> CategorySettings:
        """Give ``category`` settings unless it already has them."""
        with self._lock:
            existing = self._settings.get(category)
            if existing is not None:
                return existing

            category_settings = CategorySettings.from_configuration(category, self._inherited_configuration(category))
            self._settings[category] = category_settings
            logger.debug(
                "category_registered",
                path=category.path,
                log_level=category_settings.log_level.name,
                logger_type=category_settings.logger_type.value,
            )
            return category_settings

    def _inherited_configuration(self, category: Category) -> CategoryConfiguration:
        node = category.parent
        while node is not None:
            override = self._overrides.get(node)
            if override is not None:
                return override
            node = node.parent
        return self._default

    def get_category_settings(self, category: Category) -> Optional[CategorySettings]:
        """Identity lookup; None when the category was never registered here."""
        return self._settings.get(category)

    def require_category_settings(self, category: Category) -> CategorySettings:
        category_settings = self._settings.get(category)
        if category_settings is None:
            raise CategoryNotRegistered(path=category.path)
        return category_settings

    def categories(self) -> List[Category]:
        """Registered categories in registration order."""
        with self._lock:
            return list(self._settings)

    def set_default_configuration(self, config: CategoryConfiguration, reset_existing: bool = True) -> None:
        """Install a new default configuration.

        Args:
            config: The new default.
            reset_existing: When True every registered category gets a fresh
                copy of ``config`` and subtree overrides are dropped. When
                False only categories registered afterwards see it.
        """
        with self._lock:
            self._default = config
            if reset_existing:
                self._overrides.clear()
                for category in self._settings:
                    self._settings[category] = CategorySettings.from_configuration(category, config)
            logger.debug(
                "default_configuration_changed",
                config=repr(config),
                reset_existing=reset_existing,
                category_count=len(self._settings),
            )

    def set_configuration_category(
        self,
        config: CategoryConfiguration,
        category: Category,
        include_children: bool = True,
    ) -> None:
        """Override the settings of ``category`` and optionally its subtree.

        With ``include_children`` the override also applies to categories
        created below ``category`` later on.
        """
        with self._lock:
            self.require_category_settings(category)

            targets = [category]
            if include_children:
                targets.extend(category.descendants())
                # nested overrides are superseded by this one
                for descendant in targets[1:]:
                    self._overrides.pop(descendant, None)
                self._overrides[category] = config
            else:
                self._overrides.pop(category, None)

            for target in targets:
                self._settings[target] = CategorySettings.from_configuration(target, config)

            logger.debug(
                "category_configuration_changed",
                path=category.path,
                config=repr(config),
                affected=len(targets),
            )

    def clear(self) -> None:
        """Forget every category and restore the initial default."""
        with self._lock:
            self._settings.clear()
            self._overrides.clear()
            self._default = self._initial_default()
            logger.debug("runtime_settings_cleared")
