"""Tests for structured logging."""

import json
import logging
import sys

import pytest

from taskload.observability.logging import (
    ConsoleFormatter,
    JsonFormatter,
    LogContext,
    configure_logging,
    get_logger,
    scenario_var,
    suite_id_var,
    test_id_var,
)


def make_record(message: str = "Ramped up", **extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="taskload.load.engine",
        level=logging.INFO,
        pathname=__file__,
        lineno=42,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    simulation = logging.getLogger("taskload.simulation")
    handlers = root.handlers[:]
    level = root.level
    simulation_level = simulation.level
    yield root
    root.handlers = handlers
    root.setLevel(level)
    simulation.setLevel(simulation_level)


class TestLogContext:
    """Tests for LogContext."""

    def test_sets_and_resets(self) -> None:
        """Context values are visible inside the block only."""
        with LogContext(test_id="load-test-1", scenario="High Load"):
            assert test_id_var.get() == "load-test-1"
            assert scenario_var.get() == "High Load"
            assert suite_id_var.get() == ""

        assert test_id_var.get() == ""
        assert scenario_var.get() == ""

    def test_nested(self) -> None:
        """Inner contexts override and then restore outer values."""
        with LogContext(suite_id="outer"):
            with LogContext(suite_id="inner"):
                assert suite_id_var.get() == "inner"
            assert suite_id_var.get() == "outer"

    def test_ignores_unknown_keys(self) -> None:
        """Keys without a context variable are ignored."""
        with LogContext(request_id="abc") as context:
            assert context.extra == {"request_id": "abc"}


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_basic_fields(self) -> None:
        """The record is emitted as one JSON object."""
        data = json.loads(JsonFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "taskload.load.engine"
        assert data["message"] == "Ramped up"
        assert data["line"] == 42
        assert "test_id" not in data

    def test_includes_context(self) -> None:
        """Correlation ids from the context are included."""
        with LogContext(test_id="load-test-7", suite_id="stress-suite-2"):
            data = json.loads(JsonFormatter().format(make_record()))

        assert data["test_id"] == "load-test-7"
        assert data["suite_id"] == "stress-suite-2"

    def test_extra_fields(self) -> None:
        """Extra attributes are copied, unserializable ones as strings."""
        data = json.loads(JsonFormatter().format(make_record(actors=100, payload=object())))

        assert data["actors"] == 100
        assert isinstance(data["payload"], str)

    def test_exception(self) -> None:
        """Exception info is structured."""
        try:
            raise ValueError("bad config")
        except ValueError:
            record = make_record()
            record.exc_info = sys.exc_info()

        data = json.loads(JsonFormatter().format(record))

        assert data["exception"]["type"] == "ValueError"
        assert data["exception"]["message"] == "bad config"


class TestConsoleFormatter:
    """Tests for ConsoleFormatter."""

    def test_plain_output(self) -> None:
        """Without colors the line is plain text with the logger name."""
        line = ConsoleFormatter(use_colors=False).format(make_record())

        assert "| INFO     | taskload.load.engine | Ramped up" in line

    def test_context_suffix(self) -> None:
        """Test id and scenario are appended."""
        with LogContext(test_id="load-test-1", scenario="Burst Load"):
            line = ConsoleFormatter(use_colors=False).format(make_record())

        assert line.endswith("| test=load-test-1 scenario=Burst Load")


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_handler(self, restore_root_logger: logging.Logger) -> None:
        """A single JSON handler is installed at the given level."""
        configure_logging(json_format=True, level="debug")

        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0].formatter, JsonFormatter)

    def test_console_handler(self, restore_root_logger: logging.Logger) -> None:
        """Console format replaces previous handlers."""
        configure_logging(json_format=True)
        configure_logging(json_format=False, level="WARNING")

        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0].formatter, ConsoleFormatter)
        assert logging.getLogger("taskload.simulation").level == logging.WARNING

    def test_get_logger(self) -> None:
        """get_logger returns the standard named logger."""
        assert get_logger("taskload.runner") is logging.getLogger("taskload.runner")
