"""Unit tests for the structlog processor chain."""

import structlog

from src.utils.logging_config import build_processors, get_logger


def test_json_format_ends_with_json_renderer():
    processors = build_processors("json")

    assert isinstance(processors[-1], structlog.processors.JSONRenderer)


def test_console_format_ends_with_console_renderer():
    processors = build_processors("CONSOLE")

    assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)


def test_get_logger_accepts_event_context():
    logger = get_logger("tests.logging")

    logger.info("logging_configured", component="tests")
