"""
Runtime settings registry unit tests.

Covers default inheritance, default resets, subtree overrides and clearing.
"""

from __future__ import annotations

import pytest

from arborlog import (
    Category,
    CategoryConfiguration,
    CategoryLogFormat,
    CategoryNotRegistered,
    ConflictingFormatterConfiguration,
    DateFormat,
    DateFormatStyle,
    LoggerType,
    LogLevel,
    RuntimeSettings,
)


def _assert_default(category: Category, settings) -> None:
    assert settings.category is category
    assert settings.logger_type is LoggerType.CONSOLE
    assert settings.log_format.show_category_name
    assert settings.log_format.show_time_stamp
    assert settings.log_format.date_format.date_separator == "-"
    assert settings.log_format.date_format.style is DateFormatStyle.DEFAULT
    assert settings.log_level is LogLevel.ERROR
    assert settings.call_back_logger is None
    assert settings.formatter_log_message is None


CHANGED = CategoryConfiguration(
    LogLevel.INFO,
    LoggerType.MESSAGE_BUFFER,
    CategoryLogFormat(
        date_format=DateFormat(style=DateFormatStyle.YEAR_DAY_MONTH_WITH_FULL_TIME, date_separator="/"),
        show_time_stamp=False,
        show_category_name=False,
    ),
)


def _assert_changed(category: Category, settings) -> None:
    assert settings.category is category
    assert settings.logger_type is LoggerType.MESSAGE_BUFFER
    assert not settings.log_format.show_category_name
    assert not settings.log_format.show_time_stamp
    assert settings.log_format.date_format.date_separator == "/"
    assert settings.log_format.date_format.style is DateFormatStyle.YEAR_DAY_MONTH_WITH_FULL_TIME
    assert settings.log_level is LogLevel.INFO
    assert settings.call_back_logger is None


@pytest.fixture
def tree(service):
    root1 = Category("root1")
    child1 = Category("child1", root1)
    child11 = Category("child11", child1)
    child12 = Category("child12", child1)
    return root1, child1, child11, child12


class TestDefaultConfiguration:
    """Default configuration propagation"""

    def test_all_categories_have_settings(self, service, tree) -> None:
        for category in tree:
            assert service.runtime_settings.get_category_settings(category) is not None

    def test_default_applied(self, service, tree) -> None:
        runtime = service.runtime_settings
        for category in tree:
            _assert_default(category, runtime.get_category_settings(category))

        root2 = Category("root2")
        another = Category("someChild", root2)
        _assert_default(root2, runtime.get_category_settings(root2))
        _assert_default(another, runtime.get_category_settings(another))

    def test_reset_applies_new_default(self, service, tree) -> None:
        runtime = service.runtime_settings

        runtime.set_default_configuration(CHANGED)
        for category in tree:
            _assert_changed(category, runtime.get_category_settings(category))

        runtime.set_default_configuration(CategoryConfiguration())
        for category in tree:
            _assert_default(category, runtime.get_category_settings(category))

    def test_without_reset_only_new_categories(self, service, tree) -> None:
        runtime = service.runtime_settings

        runtime.set_default_configuration(CHANGED, reset_existing=False)
        for category in tree:
            _assert_default(category, runtime.get_category_settings(category))

        another_root = Category("anotherRoot")
        another_child = Category("someChild", another_root)
        _assert_changed(another_root, runtime.get_category_settings(another_root))
        _assert_changed(another_child, runtime.get_category_settings(another_child))

    def test_settings_are_not_aliased(self, service, tree) -> None:
        """Every category gets its own settings object"""
        runtime = service.runtime_settings
        runtime.set_default_configuration(CategoryConfiguration(LogLevel.WARN))
        root1, child1, _, _ = tree

        runtime.get_category_settings(root1).log_level = LogLevel.TRACE

        assert runtime.get_category_settings(child1).log_level is LogLevel.WARN
        assert runtime.default_configuration.log_level is LogLevel.WARN

    def test_register_is_idempotent(self, service, tree) -> None:
        runtime = service.runtime_settings
        root1 = tree[0]
        before = runtime.get_category_settings(root1)

        runtime.set_default_configuration(CHANGED, reset_existing=False)

        assert runtime.register(root1) is before
        _assert_default(root1, runtime.get_category_settings(root1))


class TestCategoryOverride:
    """Selective per-category configuration"""

    def test_override_subtree(self, service, tree) -> None:
        runtime = service.runtime_settings
        root1, child1, child11, child12 = tree

        runtime.set_configuration_category(CHANGED, child1)

        _assert_default(root1, runtime.get_category_settings(root1))
        for category in (child1, child11, child12):
            _assert_changed(category, runtime.get_category_settings(category))

    def test_override_without_children(self, service, tree) -> None:
        runtime = service.runtime_settings
        _, child1, child11, _ = tree

        runtime.set_configuration_category(CHANGED, child1, include_children=False)

        _assert_changed(child1, runtime.get_category_settings(child1))
        _assert_default(child11, runtime.get_category_settings(child11))
        late = Category("late", child1)
        _assert_default(late, runtime.get_category_settings(late))

    def test_later_children_inherit_override(self, service, tree) -> None:
        """Categories created below an override pick it up, siblings do not"""
        runtime = service.runtime_settings
        root1, child1, child11, _ = tree

        runtime.set_configuration_category(CHANGED, child1)
        late = Category("late", child11)
        sibling = Category("sibling", root1)

        _assert_changed(late, runtime.get_category_settings(late))
        _assert_default(sibling, runtime.get_category_settings(sibling))

    def test_nearest_override_wins(self, service, tree) -> None:
        runtime = service.runtime_settings
        root1, child1, _, _ = tree

        runtime.set_configuration_category(CategoryConfiguration(LogLevel.WARN), root1)
        runtime.set_configuration_category(CategoryConfiguration(LogLevel.DEBUG), child1)
        late = Category("late", child1)
        other = Category("other", root1)

        assert runtime.get_category_settings(late).log_level is LogLevel.DEBUG
        assert runtime.get_category_settings(other).log_level is LogLevel.WARN

    def test_subtree_override_supersedes_nested_override(self, service, tree) -> None:
        """A later category follows its parent's current settings"""
        runtime = service.runtime_settings
        root1, child1, _, _ = tree

        runtime.set_configuration_category(CategoryConfiguration(LogLevel.DEBUG), child1)
        runtime.set_configuration_category(CategoryConfiguration(LogLevel.WARN), root1)
        late = Category("late", child1)

        assert runtime.get_category_settings(child1).log_level is LogLevel.WARN
        assert runtime.get_category_settings(late).log_level is LogLevel.WARN

    def test_override_without_children_keeps_nested_override(self, service, tree) -> None:
        runtime = service.runtime_settings
        root1, child1, _, _ = tree

        runtime.set_configuration_category(CategoryConfiguration(LogLevel.DEBUG), child1)
        runtime.set_configuration_category(CategoryConfiguration(LogLevel.WARN), root1, include_children=False)
        late = Category("late", child1)

        assert runtime.get_category_settings(late).log_level is LogLevel.DEBUG

    def test_default_reset_drops_overrides(self, service, tree) -> None:
        runtime = service.runtime_settings
        child1 = tree[1]

        runtime.set_configuration_category(CHANGED, child1)
        runtime.set_default_configuration(CategoryConfiguration())
        late = Category("late", child1)

        _assert_default(late, runtime.get_category_settings(late))

    def test_unregistered_category_fails(self, service, tree) -> None:
        runtime = service.runtime_settings
        root1 = tree[0]
        runtime.clear()

        with pytest.raises(CategoryNotRegistered):
            runtime.set_configuration_category(CHANGED, root1)


class TestClear:
    """Clearing the registry"""

    def test_clear_forgets_categories(self, service, tree) -> None:
        runtime = service.runtime_settings
        runtime.set_default_configuration(CHANGED)

        runtime.clear()

        assert runtime.categories() == []
        for category in tree:
            assert runtime.get_category_settings(category) is None
        fresh = Category("fresh")
        _assert_default(fresh, runtime.get_category_settings(fresh))

    def test_clear_restores_explicit_initial_default(self) -> None:
        initial = CategoryConfiguration(LogLevel.DEBUG, LoggerType.MESSAGE_BUFFER)
        runtime = RuntimeSettings(initial)
        runtime.set_default_configuration(CHANGED)

        runtime.clear()

        assert runtime.default_configuration.log_level is LogLevel.DEBUG
        assert runtime.default_configuration is not initial

    def test_require_settings(self, service, tree) -> None:
        runtime = service.runtime_settings
        runtime.clear()

        with pytest.raises(CategoryNotRegistered) as exc_info:
            runtime.require_category_settings(tree[3])
        assert exc_info.value.details == {"path": "root1#child1#child12"}


class TestFormatterGuard:
    """Formatter and CUSTOM logger type are mutually exclusive"""

    def test_setting_formatter_on_custom_fails(self) -> None:
        config = CategoryConfiguration(
            LogLevel.INFO, LoggerType.CUSTOM, call_back_logger=lambda root, runtime: None
        )

        with pytest.raises(ConflictingFormatterConfiguration, match="cannot specify a formatter"):
            config.formatter_log_message = lambda message: message.message_as_string

    def test_constructor_rejects_conflict(self) -> None:
        with pytest.raises(ConflictingFormatterConfiguration):
            CategoryConfiguration(
                LogLevel.INFO, LoggerType.CUSTOM, formatter_log_message=lambda message: ""
            )

    def test_switching_to_custom_with_formatter_fails(self) -> None:
        config = CategoryConfiguration(LogLevel.INFO, LoggerType.MESSAGE_BUFFER)
        config.formatter_log_message = lambda message: ""

        with pytest.raises(ConflictingFormatterConfiguration):
            config.logger_type = LoggerType.CUSTOM

    def test_formatter_allowed_for_other_types(self) -> None:
        config = CategoryConfiguration(LogLevel.INFO, LoggerType.MESSAGE_BUFFER)
        config.formatter_log_message = str
        assert config.formatter_log_message is str
