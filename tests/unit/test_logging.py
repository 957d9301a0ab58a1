"""Tests for side-channel logging configuration (JSON + human-readable formatters)."""

from collections.abc import Generator
from io import StringIO
import json
import logging
import sys

import pytest
import structlog

from canonical_log import Event, Settings, emit
from canonical_log.core import DevFormatter, JsonFormatter, configure_logging
from tests.helpers import FailingSink


@pytest.fixture
def restore_logging() -> Generator[None, None, None]:
    """Drop the handler configure_logging installed and restore structlog defaults."""
    root = logging.getLogger()
    level = root.level
    yield
    root.handlers.clear()
    root.setLevel(level)
    structlog.reset_defaults()


def _record(name: str, msg: str, level: int = logging.WARNING, exc_info=None, **extra):
    record = logging.LogRecord(
        name=name,
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


# ---------------------------------------------------------------------------
# JsonFormatter
# ---------------------------------------------------------------------------


def test_json_formatter_puts_diagnostic_context_at_top_level() -> None:
    """Sink and error context from `extra` become first-class JSON keys."""
    record = _record(
        "canonical_log.emitter", "Sink write failed", sink="StdoutSink", error="broken pipe"
    )

    output = JsonFormatter().format(record)

    assert "\n" not in output
    parsed = json.loads(output)
    assert parsed["message"] == "Sink write failed"
    assert parsed["level"] == "warning"
    assert parsed["logger"] == "canonical_log.emitter"
    assert parsed["timestamp"].endswith("Z")
    assert parsed["sink"] == "StdoutSink"
    assert parsed["error"] == "broken pipe"
    assert "event" not in parsed


def test_json_formatter_includes_exception_when_present() -> None:
    """Exception info is rendered into the `exception` key."""
    try:
        raise ValueError("test error")
    except ValueError:
        record = _record("canonical_log.emitter", "Emit failed", logging.ERROR, sys.exc_info())

    parsed = json.loads(JsonFormatter().format(record))

    assert parsed["message"] == "Emit failed"
    assert "ValueError" in parsed["exception"]
    assert "test error" in parsed["exception"]


# ---------------------------------------------------------------------------
# DevFormatter
# ---------------------------------------------------------------------------


def test_dev_formatter_outputs_human_readable_line() -> None:
    record = _record(
        "canonical_log.middleware.http", "user_context hook failed", hook="user_context"
    )

    output = DevFormatter().format(record)

    assert "warning" in output
    assert "canonical_log.middleware.http" in output
    assert "user_context hook failed" in output
    assert "hook=" in output
    assert "\n" not in output
    with pytest.raises(json.JSONDecodeError):
        json.loads(output)


# ---------------------------------------------------------------------------
# configure_logging
# ---------------------------------------------------------------------------


@pytest.mark.usefixtures("restore_logging")
def test_configure_logging_routes_structlog_to_json() -> None:
    """structlog diagnostics land on the root handler as JSON with their keyword context."""
    stream = StringIO()
    configure_logging(level="INFO", stream=stream)

    structlog.get_logger("test.side_channel").warning("Sink write failed", sink="X", error="boom")

    parsed = json.loads(stream.getvalue().strip())
    assert parsed["message"] == "Sink write failed"
    assert parsed["level"] == "warning"
    assert parsed["logger"] == "test.side_channel"
    assert parsed["sink"] == "X"
    assert parsed["error"] == "boom"


@pytest.mark.usefixtures("restore_logging")
def test_configure_logging_uses_dev_formatter_for_development() -> None:
    """environment='development' produces human-readable output, not JSON."""
    stream = StringIO()
    configure_logging(level="INFO", environment="development", stream=stream)

    logging.getLogger("test.dev_env").info("Hello dev", extra={"request_id": "abc-123"})

    output = stream.getvalue().strip()
    with pytest.raises(json.JSONDecodeError):
        json.loads(output)
    assert "Hello dev" in output
    assert "request_id=" in output
    assert "abc-123" in output


@pytest.mark.usefixtures("restore_logging")
def test_configure_logging_respects_level() -> None:
    stream = StringIO()
    configure_logging(level="ERROR", stream=stream)

    structlog.get_logger("test.level").warning("filtered out")

    assert stream.getvalue() == ""


@pytest.mark.usefixtures("restore_logging")
def test_sink_failures_reach_side_channel_not_sinks() -> None:
    """A failing sink shows up as a diagnostic on the configured stream."""
    stream = StringIO()
    configure_logging(level="INFO", stream=stream)

    emit(Event(), Settings(sinks=[FailingSink()]))

    parsed = json.loads(stream.getvalue().strip())
    assert parsed["message"] == "Sink write failed"
    assert parsed["logger"] == "canonical_log.emitter"
    assert parsed["sink"] == "FailingSink"
    assert parsed["error"] == "disk full"


def test_unconfigured_diagnostics_stay_off_stdout(
    capsys: pytest.CaptureFixture[str], caplog: pytest.LogCaptureFixture
) -> None:
    """Without configure_logging, diagnostics go through stdlib logging, never stdout."""
    structlog.reset_defaults()

    emit(Event(), Settings(sinks=[FailingSink()]))

    assert capsys.readouterr().out == ""
    assert any("Sink write failed" in record.getMessage() for record in caplog.records)
    assert caplog.records[-1].name == "canonical_log.emitter"
