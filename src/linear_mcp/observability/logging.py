"""Structured logging configuration for the Linear MCP server.

Provides JSON or human-readable log lines with contextual fields
(tool_name, request_id) via contextvars. Output goes to stderr because
stdout carries the MCP stdio protocol.
"""

import json
import logging
import sys
from contextvars import ContextVar
from typing import Optional

# Context variables for call-scoped logging fields
_tool_name: ContextVar[Optional[str]] = ContextVar("tool_name", default=None)
_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def set_log_context(tool_name: Optional[str] = None, request_id: Optional[str] = None):
    """Set contextual logging fields for the current async context."""
    if tool_name is not None:
        _tool_name.set(tool_name)
    if request_id is not None:
        _request_id.set(request_id)


def clear_log_context():
    """Clear all contextual logging fields."""
    _tool_name.set(None)
    _request_id.set(None)


def _context_fields() -> dict:
    fields = {}
    tool = _tool_name.get()
    if tool:
        fields["tool_name"] = tool
    request_id = _request_id.get()
    if request_id:
        fields["request_id"] = request_id
    return fields


class StructuredFormatter(logging.Formatter):
    """JSON structured log formatter with context fields."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_entry.update(_context_fields())

        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


class HumanReadableFormatter(logging.Formatter):
    """Human-readable log formatter for development."""

    def format(self, record: logging.LogRecord) -> str:
        parts = [
            f"[{self.formatTime(record, self.datefmt)}]",
            f"{record.levelname:8s}",
            f"{record.name}:",
            record.getMessage(),
        ]

        ctx = _context_fields()
        if ctx:
            short = {"tool_name": "tool", "request_id": "req"}
            parts.append("[" + ", ".join(f"{short[k]}={v}" for k, v in ctx.items()) + "]")

        msg = " ".join(parts)

        if record.exc_info and record.exc_info[1]:
            msg += "\n" + self.formatException(record.exc_info)

        return msg


def configure_logging(environment: str = "development", log_level: str = "INFO"):
    """Configure logging for the process.

    Args:
        environment: "production" for JSON output, anything else for human-readable.
        log_level: Logging level string (DEBUG, INFO, WARNING, ERROR).
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)

    if environment == "production":
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(HumanReadableFormatter(datefmt="%Y-%m-%d %H:%M:%S"))

    root_logger.addHandler(handler)

    # Quiet noisy third-party loggers; httpx logs full request URLs at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("mcp").setLevel(logging.WARNING)
