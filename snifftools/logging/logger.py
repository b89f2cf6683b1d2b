"""
structlog setup for SniffTools.

Every line is one JSON object keyed by event_type, with level, timestamp,
logger name and whatever the request has bound (request_id from the HTTP
middleware, token from the analyzer). LOG_FORMAT=console switches to the
coloured dev renderer for local runs.

Imports nothing from snifftools, so any module can import it first.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()

# Addresses longer than this are cut in log lines
ADDRESS_LOG_CHARS = 16


def _stamp(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    return event_dict


def _event_type(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog's positional 'event' becomes event_type (and the default message)."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    if "event_type" in event_dict:
        event_dict.setdefault("message", str(event_dict["event_type"]))
    return event_dict


def _renderer(log_format: str) -> Any:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_structlog(level: str = LOG_LEVEL, log_format: str = LOG_FORMAT) -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _stamp,
            _event_type,
            _renderer(log_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level, logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Module logger; the first positional argument is the event_type.

        logger = get_logger(__name__)
        logger.warning("provider_fetch_failed", provider="birdeye", reason="timeout")
    """
    return structlog.get_logger(name).bind(logger=name)


def short_address(address: str) -> str:
    address = address or ""
    if len(address) > ADDRESS_LOG_CHARS:
        return address[:ADDRESS_LOG_CHARS] + "..."
    return address


def bind_token(address: str) -> structlog.BoundLogger:
    """Logger for one analysis, with the (shortened) mint bound as token."""
    return get_logger("snifftools.analysis").bind(token=short_address(address))
