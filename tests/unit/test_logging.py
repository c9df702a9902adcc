"""Tests for thumbcrop.utils.logging module."""

from __future__ import annotations

import json
import logging

import pytest

from thumbcrop.utils.logging import (
    clear_correlation_context,
    configure_logging,
    get_logger,
    set_correlation_context,
)


def _read_last_json_log_line(capsys: pytest.CaptureFixture[str]) -> dict[str, object]:
    captured = capsys.readouterr()
    lines = [line for line in captured.out.splitlines() if line.strip()]
    assert lines, "Expected at least one log line on stdout"
    return json.loads(lines[-1])


def test_configure_logging_sets_root_level() -> None:
    configure_logging(level="WARNING", log_format="console")
    assert logging.getLogger().level == logging.WARNING


def test_configure_logging_default_settings_do_not_error() -> None:
    configure_logging()


def test_get_logger_returns_logger_proxy() -> None:
    configure_logging(level="DEBUG", log_format="console")
    logger = get_logger("test.module")
    assert hasattr(logger, "info")
    assert hasattr(logger, "debug")
    assert hasattr(logger, "exception")


def test_json_log_is_valid_and_contains_correlation_ids(
    capsys: pytest.CaptureFixture[str],
) -> None:
    configure_logging(level="INFO", log_format="json")
    set_correlation_context(batch_id="batch-123", image_id="beach.jpg")

    logger = get_logger("test.json")
    logger.info("hello", foo="bar")
    payload = _read_last_json_log_line(capsys)

    assert payload["event"] == "hello"
    assert payload["foo"] == "bar"
    assert payload["batch_id"] == "batch-123"
    assert payload["image_id"] == "beach.jpg"
    assert payload["level"] == "info"
    assert payload["logger"] == "test.json"
    assert "timestamp" in payload


def test_json_log_omits_correlation_ids_when_unset(
    capsys: pytest.CaptureFixture[str],
) -> None:
    configure_logging(level="INFO", log_format="json")
    clear_correlation_context()

    logger = get_logger("test.json")
    logger.info("hello")
    payload = _read_last_json_log_line(capsys)

    assert payload["event"] == "hello"
    assert "batch_id" not in payload
    assert "image_id" not in payload


def test_set_correlation_context_keeps_unset_values(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Test passing only image_id leaves an earlier batch_id in place."""
    configure_logging(level="INFO", log_format="json")
    set_correlation_context(batch_id="batch-1")
    set_correlation_context(image_id="a.png")

    get_logger("test.json").info("step")
    payload = _read_last_json_log_line(capsys)

    assert payload["batch_id"] == "batch-1"
    assert payload["image_id"] == "a.png"


def test_log_level_filters_info(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(level="WARNING", log_format="json")
    get_logger("test.json").info("hidden")
    captured = capsys.readouterr()
    assert "hidden" not in captured.out
