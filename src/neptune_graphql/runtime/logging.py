"""
Logging setup for the compiler and generated resolvers.

Two output formats:
- Console: human-readable lines for local runs
- JSONL: one JSON object per line, which CloudWatch indexes as structured
  fields when resolvers run in Lambda
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

ROOT_LOGGER = "neptune_graphql"

_NO_COLOR = bool(os.environ.get("NO_COLOR")) or not sys.stderr.isatty()


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "" if _NO_COLOR else "\033[0m"
    DIM = "" if _NO_COLOR else "\033[2m"

    DEBUG = "" if _NO_COLOR else "\033[36m"  # Cyan
    WARNING = "" if _NO_COLOR else "\033[33m"  # Yellow
    ERROR = "" if _NO_COLOR else "\033[31m"  # Red
    CRITICAL = "" if _NO_COLOR else "\033[35m"  # Magenta


class JSONLFormatter(logging.Formatter):
    """
    Formats log records as JSON Lines.

    Each entry holds timestamp, level, logger and message, plus ``context``
    when the record carries one (``extra={"context": {...}}``), the source
    location for warnings and above, and exception info when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = getattr(record, "context", None)
        if context:
            entry["context"] = context

        if record.levelno >= logging.WARNING:
            source: dict[str, Any] = {"file": record.pathname, "line": record.lineno}
            if record.funcName and record.funcName != "<module>":
                source["function"] = record.funcName
            entry["source"] = source

        if record.exc_info and record.exc_info[0]:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
            }

        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for console output."""

    LEVEL_COLORS = {
        logging.DEBUG: Colors.DEBUG,
        logging.WARNING: Colors.WARNING,
        logging.ERROR: Colors.ERROR,
        logging.CRITICAL: Colors.CRITICAL,
    }

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        component = record.name.rsplit(".", 1)[-1]

        if _NO_COLOR:
            prefix = f"[{timestamp}] [{component}]"
        else:
            prefix = f"{Colors.DIM}{timestamp}{Colors.RESET} [{component}]"

        # INFO lines carry no level tag
        if record.levelno != logging.INFO:
            level_name = record.levelname
            if not _NO_COLOR:
                level_name = f"{self.LEVEL_COLORS.get(record.levelno, '')}{level_name}"
                level_name += Colors.RESET
            prefix = f"{prefix} {level_name}:"

        message = f"{prefix} {record.getMessage()}"
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


def setup_logging(
    level: int | str = logging.INFO, json_format: bool | None = None
) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: Minimum log level (name or number)
        json_format: Emit JSONL. Defaults to True inside AWS Lambda
            (AWS_LAMBDA_FUNCTION_NAME set), console format otherwise.

    Returns:
        The configured ``neptune_graphql`` logger
    """
    if json_format is None:
        json_format = "AWS_LAMBDA_FUNCTION_NAME" in os.environ
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONLFormatter() if json_format else ConsoleFormatter())
    handler.setLevel(level)

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)
    root.propagate = False
    return root
