import json
import logging

import pytest
import structlog

from Chunk_Index_rev.config import LoggingSettings
from Chunk_Index_rev.utils.logging import (
    bind_correlation_id,
    configure_logging,
    get_correlation_id,
    redact_fields,
    reset_correlation_id,
)


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


def _lines(capsys) -> list[dict]:
    return [json.loads(line) for line in capsys.readouterr().out.splitlines() if line]


def test_configure_logging_sets_root_and_client_levels():
    configure_logging(LoggingSettings(level="debug"))
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING

    configure_logging(LoggingSettings(level="ERROR"))
    assert logging.getLogger().level == logging.ERROR
    assert logging.getLogger("qdrant_client").level == logging.ERROR


def test_unknown_level_falls_back_to_info():
    configure_logging(LoggingSettings(level="chatty"))
    assert logging.getLogger().level == logging.INFO


def test_events_render_as_redacted_json(capsys):
    configure_logging(LoggingSettings(scrub_fields=["api_key"]))
    tokens = bind_correlation_id("corr-123")
    try:
        structlog.get_logger("qdrant").info(
            "qdrant.connect", api_key="qdrant-secret", detail={"API_KEY": "x", "ok": 1}
        )
    finally:
        reset_correlation_id(tokens)

    (event,) = _lines(capsys)
    assert event["event"] == "qdrant.connect"
    assert event["logger"] == "qdrant"
    assert event["level"] == "info"
    assert event["correlation_id"] == "corr-123"
    assert event["api_key"] == "***"
    assert event["detail"] == {"API_KEY": "***", "ok": 1}
    assert "timestamp" in event


def test_events_below_configured_level_are_dropped(capsys):
    configure_logging(LoggingSettings(level="WARNING"))

    structlog.get_logger("qdrant").info("qdrant.count.failed")
    structlog.get_logger("qdrant").warning("normalize.group_ids.not_a_list")

    assert [event["event"] for event in _lines(capsys)] == ["normalize.group_ids.not_a_list"]


def test_redact_fields_masks_nested_lists():
    processor = redact_fields(["token"])

    event = processor(None, "info", {"event": "x", "items": [{"Token": "a"}, 3], "token": "b"})

    assert event == {"event": "x", "items": [{"Token": "***"}, 3], "token": "***"}


def test_correlation_id_reset_restores_previous_binding():
    outer = bind_correlation_id("outer")
    inner = bind_correlation_id("inner")
    assert get_correlation_id() == "inner"

    reset_correlation_id(inner)
    assert get_correlation_id() == "outer"
    reset_correlation_id(outer)
    assert get_correlation_id() is None
