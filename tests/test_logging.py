from __future__ import annotations

import io
import json
import logging

import pytest
import structlog

from relaybot.logging import MAX_FIELD_CHARS, bound_event, setup_logging


@pytest.fixture
def stream():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    buffer = io.StringIO()
    yield buffer
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


def _records(buffer: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in buffer.getvalue().splitlines() if line.strip()]


def test_json_records_carry_bot_and_event_fields(stream: io.StringIO) -> None:
    setup_logging(level="INFO", fmt="json", bot_name="relaybot", stream=stream)
    logger = structlog.get_logger("relaybot.test.bound")

    with bound_event(chat="1203@g.us", message_id="m1"):
        logger.info("dispatch.command.executed", command="ping")
    logger.info("after.event")

    first, second = _records(stream)
    assert first["event"] == "dispatch.command.executed"
    assert first["bot"] == "relaybot"
    assert first["chat"] == "1203@g.us"
    assert first["command"] == "ping"
    assert first["level"] == "info"
    assert "chat" not in second


def test_long_fields_are_truncated(stream: io.StringIO) -> None:
    setup_logging(level="INFO", fmt="json", stream=stream)
    logger = structlog.get_logger("relaybot.test.truncate")

    logger.warning("debug.shell_execute", command="x" * (MAX_FIELD_CHARS + 50))

    (record,) = _records(stream)
    assert record["command"] == "x" * MAX_FIELD_CHARS + f"... ({MAX_FIELD_CHARS + 50} chars)"
    assert "bot" not in record


def test_stdlib_records_share_the_chain(stream: io.StringIO) -> None:
    setup_logging(level="INFO", fmt="json", bot_name="relaybot", stream=stream)

    logging.getLogger("uvicorn.error").info("Application startup complete.")
    logging.getLogger("httpx").info("HTTP Request: GET /me")

    (record,) = _records(stream)
    assert record["event"] == "Application startup complete."
    assert record["bot"] == "relaybot"


def test_level_filters_records(stream: io.StringIO) -> None:
    setup_logging(level="WARNING", fmt="json", stream=stream)
    logger = structlog.get_logger("relaybot.test.level")

    logger.info("hidden")
    logger.warning("shown")

    assert [r["event"] for r in _records(stream)] == ["shown"]
