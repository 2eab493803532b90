from __future__ import annotations

import json
import logging
import sys

from marketplace.core.logging import (
    RequestContextFilter,
    _ContainerFormatter,
    _JsonFormatter,
    request_id_var,
    setup_logging,
)


def _record(
    level: int = logging.INFO, msg: str = "hello", args=()
) -> logging.LogRecord:
    return logging.LogRecord(
        name="marketplace.test",
        level=level,
        pathname="enrollment_service.py",
        lineno=42,
        msg=msg,
        args=args,
        exc_info=None,
    )


# ---- setup_logging ----


def test_setup_logging_sets_root_level() -> None:
    setup_logging("debug")
    assert logging.getLogger().level == logging.DEBUG

    setup_logging("warning")
    assert logging.getLogger().level == logging.WARNING


def test_setup_logging_defaults_to_info_for_unknown_level() -> None:
    setup_logging("nonexistent")
    assert logging.getLogger().level == logging.INFO


def test_setup_logging_quiets_sql_echo_at_debug() -> None:
    setup_logging("debug")
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    assert logging.getLogger("uvicorn").level == logging.WARNING


def test_setup_logging_selects_json_formatter() -> None:
    setup_logging("info", json_format=True)
    handler = logging.getLogger().handlers[0]
    assert isinstance(handler.formatter, _JsonFormatter)
    setup_logging("info")


# ---- container formatter ----


def test_container_formatter_excludes_location_for_info() -> None:
    output = _ContainerFormatter().format(_record())
    assert "hello" in output
    assert "[enrollment_service.py:" not in output


def test_container_formatter_includes_location_for_warning() -> None:
    output = _ContainerFormatter().format(_record(logging.WARNING, "rejected"))
    assert "rejected" in output
    assert "[enrollment_service.py:42]" in output


# ---- JSON formatter ----


def test_json_formatter_produces_valid_json() -> None:
    record = _record(msg="Hello %s", args=("world",))
    parsed = json.loads(_JsonFormatter().format(record))
    assert parsed["level"] == "INFO"
    assert parsed["logger"] == "marketplace.test"
    assert parsed["message"] == "Hello world"
    assert "timestamp" in parsed


def test_json_formatter_includes_request_and_domain_fields() -> None:
    record = _record()
    record.request_id = "abc-123"  # type: ignore[attr-defined]
    record.path = "/v1/courses"  # type: ignore[attr-defined]
    record.user_id = "u-1"  # type: ignore[attr-defined]
    record.course_id = "c-1"  # type: ignore[attr-defined]

    parsed = json.loads(_JsonFormatter().format(record))
    assert parsed["request_id"] == "abc-123"
    assert parsed["path"] == "/v1/courses"
    assert parsed["user_id"] == "u-1"
    assert parsed["course_id"] == "c-1"
    assert "lesson_id" not in parsed


def test_json_formatter_includes_exception_info() -> None:
    try:
        raise ValueError("test error")
    except ValueError:
        record = _record(logging.ERROR, "Something failed")
        record.exc_info = sys.exc_info()

    parsed = json.loads(_JsonFormatter().format(record))
    assert "ValueError: test error" in parsed["exception"]


# ---- request context ----


def test_filter_stamps_current_request_id() -> None:
    reset = request_id_var.set("req-9")
    try:
        record = _record()
        assert RequestContextFilter().filter(record) is True
    finally:
        request_id_var.reset(reset)
    assert record.request_id == "req-9"  # type: ignore[attr-defined]


def test_filter_keeps_explicit_request_id() -> None:
    record = _record()
    record.request_id = "from-extra"  # type: ignore[attr-defined]
    RequestContextFilter().filter(record)
    assert record.request_id == "from-extra"  # type: ignore[attr-defined]


def test_setup_logging_installs_filter_on_handler() -> None:
    setup_logging("info")
    handler = logging.getLogger().handlers[0]
    assert any(isinstance(f, RequestContextFilter) for f in handler.filters)
