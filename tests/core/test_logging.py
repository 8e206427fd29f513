from __future__ import annotations

import logging

from ethermine_exporter.core.logging import _ContainerFormatter, setup_logging


def _record(level: int, msg: str, *, pathname: str = "test.py", lineno: int = 1) -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=level,
        pathname=pathname,
        lineno=lineno,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_setup_logging_sets_root_level() -> None:
    setup_logging("debug")
    assert logging.getLogger().level == logging.DEBUG

    setup_logging("warning")
    assert logging.getLogger().level == logging.WARNING


def test_setup_logging_defaults_to_info_for_unknown_level() -> None:
    setup_logging("nonexistent")
    assert logging.getLogger().level == logging.INFO


def test_setup_logging_quiets_httpx_at_debug() -> None:
    # Debug mode must not turn on httpx's own per-request chatter.
    setup_logging("debug")
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("uvicorn").level == logging.WARNING


def test_setup_logging_allows_uvicorn_at_error() -> None:
    setup_logging("error")
    assert logging.getLogger("uvicorn").level == logging.ERROR


def test_setup_logging_replaces_handlers() -> None:
    setup_logging("info")
    setup_logging("info")
    assert len(logging.getLogger().handlers) == 1


def test_formatter_excludes_location_for_info() -> None:
    output = _ContainerFormatter().format(_record(logging.INFO, "hello"))
    assert "hello" in output
    assert "[test.py:" not in output


def test_formatter_includes_location_for_warning() -> None:
    output = _ContainerFormatter().format(
        _record(logging.WARNING, "Failed to scrape target", lineno=42)
    )
    assert "Failed to scrape target" in output
    assert "[test.py:42]" in output


def test_formatter_timestamp_has_milliseconds() -> None:
    record = _record(logging.INFO, "tick")
    record.msecs = 7
    output = _ContainerFormatter().format(record)
    timestamp = output.split(" ", 1)[0]
    # 2024-01-01T00:00:00.007+0000
    assert timestamp[19:23] == ".007"
