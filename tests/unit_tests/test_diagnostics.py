"""
Diagnostics logging unit tests (structlog configuration and rendering).
"""

from __future__ import annotations

import io
import os
import subprocess
import sys

import orjson
import pytest
import structlog
from structlog.testing import capture_logs

from arborlog import Category, CategoryConfiguration, CategoryService, LoggerType, LogLevel
from arborlog.logging import configure_logging, get_logger, reset_logging
from arborlog.logging.formatters import ConsoleFormatter


@pytest.fixture(autouse=True)
def pristine_logging():
    """Neither arborlog nor the application has configured logging"""
    structlog.reset_defaults()
    reset_logging()
    yield
    structlog.reset_defaults()
    reset_logging()


@pytest.fixture
def diagnostics_stream():
    return io.StringIO()


class TestConfigureLogging:
    def test_json_output(self, diagnostics_stream) -> None:
        configure_logging(level="DEBUG", fmt="json", stream=diagnostics_stream)

        get_logger("arborlog.test").info("something_happened", answer=42)

        record = orjson.loads(diagnostics_stream.getvalue().splitlines()[-1])
        assert record["message"] == "something_happened"
        assert record["logger"] == "arborlog.test"
        assert record["level"] == "info"
        assert record["answer"] == 42
        assert "timestamp" in record

    def test_level_filtering(self, diagnostics_stream) -> None:
        configure_logging(level="WARNING", fmt="json", stream=diagnostics_stream)

        get_logger("arborlog.test").debug("hidden")
        get_logger("arborlog.test").warning("shown")

        lines = diagnostics_stream.getvalue().splitlines()
        assert len(lines) == 1
        assert orjson.loads(lines[0])["message"] == "shown"

    def test_registry_events(self, diagnostics_stream) -> None:
        configure_logging(level="DEBUG", fmt="json", stream=diagnostics_stream)

        local = CategoryService()
        Category("observed", service=local)

        events = [orjson.loads(line) for line in diagnostics_stream.getvalue().splitlines()]
        registered = [event for event in events if event["message"] == "category_registered"]
        assert registered[0]["path"] == "observed"
        assert registered[0]["logger"] == "arborlog.registry"

    def test_default_custom_logger_forwards(self, diagnostics_stream) -> None:
        configure_logging(level="INFO", fmt="json", stream=diagnostics_stream)
        local = CategoryService()
        local.set_default_configuration(CategoryConfiguration(LogLevel.INFO, LoggerType.CUSTOM))
        root = Category("custom", service=local)

        local.get_logger(root).warn("forwarded")

        events = [orjson.loads(line) for line in diagnostics_stream.getvalue().splitlines()]
        forwarded = [event for event in events if event["logger"] == "arborlog.custom"]
        assert len(forwarded) == 1
        assert forwarded[0]["level"] == "warning"
        assert "[custom] forwarded" in forwarded[0]["message"]
        assert forwarded[0]["categories"] == ["custom"]


class TestStructlogOwnership:
    """The application owns the global structlog configuration"""

    def test_import_leaves_structlog_unconfigured(self) -> None:
        script = (
            "import structlog, arborlog\n"
            "root = arborlog.Category('root')\n"
            "arborlog.get_logger(root).error('category_event')\n"
            "print('configured', structlog.is_configured())\n"
            "structlog.get_logger().info('app_event')\n"
        )
        env = {**os.environ, "PYTHONPATH": os.pathsep.join(sys.path)}

        result = subprocess.run([sys.executable, "-c", script], capture_output=True, text=True, env=env, check=True)

        assert "configured False" in result.stdout
        assert "app_event" in result.stdout
        assert "category_event" in result.stderr

    def test_events_follow_application_configuration(self) -> None:
        with capture_logs() as captured:
            Category("observed", service=CategoryService())

        registered = [entry for entry in captured if entry["event"] == "category_registered"]
        assert registered[0]["logger"] == "arborlog.registry"
        assert registered[0]["path"] == "observed"

    def test_explicit_configuration_wins_over_application(self, diagnostics_stream) -> None:
        structlog.configure(processors=[structlog.processors.KeyValueRenderer()])
        configure_logging(level="DEBUG", fmt="json", stream=diagnostics_stream)

        get_logger("arborlog.test").debug("mine")

        assert orjson.loads(diagnostics_stream.getvalue())["message"] == "mine"


class TestDefaultCustomForwarding:
    """CUSTOM without a callback under the default diagnostics settings"""

    def test_messages_below_diagnostics_level_are_forwarded(self, capsys) -> None:
        local = CategoryService()
        local.set_default_configuration(CategoryConfiguration(LogLevel.TRACE, LoggerType.CUSTOM))
        root = Category("custom", service=local)
        logger = local.get_logger(root)

        logger.trace("trace_custom")
        logger.info("info_custom")

        err = capsys.readouterr().err
        assert "[custom] trace_custom" in err
        assert "[custom] info_custom" in err
        assert "arborlog.custom" in err
        # arborlog's own debug events stay filtered
        assert "category_registered" not in err
        assert not structlog.is_configured()


class TestConsoleFormatter:
    def test_aligned_columns(self) -> None:
        line = ConsoleFormatter.format(
            {
                "level": "warning",
                "message": "error_render_failed",
                "logger": "arborlog.dispatch",
                "timestamp": "2024-03-05T07:08:09+00:00",
                "root": "app",
            }
        )

        parts = line.split(ConsoleFormatter.SEPARATOR)
        assert len(parts) == 4
        assert parts[1] == f"{'WARNING':>{ConsoleFormatter.LEVEL_WIDTH}}"
        assert parts[2].strip() == "arborlog.dispatch"
        assert parts[3] == "error_render_failed root=app"

    def test_long_logger_name_truncated(self) -> None:
        line = ConsoleFormatter.format({"level": "info", "message": "m", "logger": "x" * 100})
        logger_column = line.split(ConsoleFormatter.SEPARATOR)[2]
        assert len(logger_column) == ConsoleFormatter.LOGGER_WIDTH
        assert logger_column.startswith("...")
