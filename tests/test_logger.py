"""
Tests for OXTest logging utilities.
"""

import json
import logging
import sys

import pytest
from rich.logging import RichHandler

from oxtest.monitoring.logger import (
    ContextLogAdapter,
    JSONFormatter,
    get_logger,
    setup_logging,
)


@pytest.fixture()
def formatter() -> JSONFormatter:
    """Provide a reusable formatter instance."""
    return JSONFormatter()


@pytest.fixture()
def restore_root_logger():
    """Put the root logger back the way the test found it."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def make_record(msg: str, level: int = logging.INFO) -> logging.LogRecord:
    record = logging.LogRecord(
        name="oxtest.parsing.script",
        level=level,
        pathname=__file__,
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    record.created = 0.0
    return record


def test_json_formatter_base_fields(formatter: JSONFormatter) -> None:
    """Formatter should emit the standard fields as JSON."""
    output = json.loads(formatter.format(make_record("Parsed 3 commands")))

    assert output["timestamp"] == "1970-01-01T00:00:00+00:00"
    assert output["level"] == "INFO"
    assert output["logger"] == "oxtest.parsing.script"
    assert output["message"] == "Parsed 3 commands"
    assert output["line"] == 42
    assert "exception" not in output


def test_json_formatter_includes_context(formatter: JSONFormatter) -> None:
    """Formatter should surface parse context extras and ignore others."""
    record = make_record("Skipping invalid line", logging.WARNING)
    record.script = "login.ox.test"
    record.line_number = 4
    record.reason = "Unknown command: frobnicate"
    record.unrelated = "dropped"

    output = json.loads(formatter.format(record))

    assert output["script"] == "login.ox.test"
    assert output["line_number"] == 4
    assert output["reason"] == "Unknown command: frobnicate"
    assert "unrelated" not in output


def test_json_formatter_includes_exception(formatter: JSONFormatter) -> None:
    """Formatter should render exception info."""
    try:
        raise ValueError("boom")
    except ValueError:
        record = make_record("Failed")
        record.exc_info = sys.exc_info()

    output = json.loads(formatter.format(record))
    assert "ValueError: boom" in output["exception"]


def test_get_logger_with_context() -> None:
    """Context keyword arguments should produce an adapter."""
    assert isinstance(get_logger("oxtest.test"), logging.Logger)

    adapter = get_logger("oxtest.test", script="a.ox.test")
    assert isinstance(adapter, ContextLogAdapter)

    msg, kwargs = adapter.process("hello", {"extra": {"line_number": 2}})
    assert msg == "hello"
    assert kwargs["extra"] == {"line_number": 2, "script": "a.ox.test"}


def test_context_adapter_leaves_caller_extra_alone() -> None:
    """The adapter should not write its context into the caller's dict."""
    adapter = get_logger("oxtest.test", script="a.ox.test")
    caller_extra = {"line_number": 2}

    _, kwargs = adapter.process("hello", {"extra": caller_extra})

    assert caller_extra == {"line_number": 2}
    assert kwargs["extra"] is not caller_extra
    assert adapter.process("again", {"extra": None})[1]["extra"] == {"script": "a.ox.test"}


def test_setup_logging_text(restore_root_logger) -> None:
    """Text format should install a rich handler."""
    root = setup_logging(log_level="DEBUG", log_format="text")

    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0], RichHandler)


def test_setup_logging_json_with_file(restore_root_logger, tmp_path) -> None:
    """JSON format should write JSON lines to the log file too."""
    log_file = tmp_path / "oxtest.log"
    root = setup_logging(log_level="INFO", log_format="json", log_file=str(log_file))

    assert len(root.handlers) == 2
    assert all(isinstance(h.formatter, JSONFormatter) for h in root.handlers)

    logging.getLogger("oxtest.test").info("written", extra={"commands": 3})
    for handler in root.handlers:
        handler.flush()

    line = log_file.read_text().strip().splitlines()[-1]
    assert json.loads(line)["commands"] == 3
