"""
structlog setup for the Wrapped service.

Every line goes to stderr; stdout belongs to the CLI report.
LOG_FORMAT=json (default) renders one JSON object per line keyed by event_type,
with level, timestamp and the emitting module under "logger". Any other value
selects structlog's console renderer. LOG_LEVEL filters below the given level.

This module imports nothing from backend_wrapped so every package can log.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()


def _rename_event(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    # Log lines are keyed by event_type, e.g. "ledger_fetch_page".
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    return event_dict


def build_processors(log_format: str = LOG_FORMAT) -> list[Any]:
    """Processor chain ending in the renderer for log_format."""
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
    ]
    if log_format == "json":
        processors += [_rename_event, structlog.processors.JSONRenderer()]
    else:
        # Console output keeps "event" as the line headline.
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    return processors


def configure_structlog(level: str = LOG_LEVEL, log_format: str = LOG_FORMAT) -> None:
    structlog.configure(
        processors=build_processors(log_format),
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level, logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Module logger; the first positional argument is the event_type:

        logger = get_logger(__name__)
        logger.info("wrapped_pipeline_done", address=short_address(addr), total_transactions=120)
    """
    return structlog.get_logger(name).bind(logger=name)


def short_address(address: str | None, chars: int = 6) -> str:
    """0xabcd...7890 form for log lines; short inputs are returned unchanged."""
    address = (address or "").strip()
    if len(address) <= chars * 2 + 3:
        return address
    return f"{address[:chars]}...{address[-chars:]}"
