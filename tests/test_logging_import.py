"""
Test that wrapped_logging can be imported without circular import and logger works.
"""

from __future__ import annotations


def test_logging_import():
    """Import get_logger from wrapped_logging and use the logger."""
    from backend_wrapped.wrapped_logging import get_logger

    logger = get_logger("test")
    assert logger is not None
    assert hasattr(logger, "info")
    assert hasattr(logger, "debug")
    assert hasattr(logger, "warning")
    assert hasattr(logger, "error")
    # Smoke test: call info (should not raise)
    logger.info("test_message", key="value")


def test_short_address():
    from backend_wrapped.wrapped_logging import short_address

    addr = "0x" + "ab" * 32
    assert short_address(addr) == "0xabab...ababab"
    assert short_address("0x1234") == "0x1234"
    assert short_address(None) == ""


def test_json_lines_are_keyed_by_event_type():
    import json

    from backend_wrapped.wrapped_logging.logger import build_processors

    event = {"event": "wrapped_pipeline_done", "logger": "test", "total_transactions": 3}
    for processor in build_processors("json"):
        event = processor(None, "info", event)

    line = json.loads(event)
    assert line["event_type"] == "wrapped_pipeline_done"
    assert "event" not in line
    assert line["level"] == "info"
    assert line["total_transactions"] == 3
    assert "timestamp" in line
