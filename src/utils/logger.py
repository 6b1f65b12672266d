"""Logging infrastructure for Recipe Matcher.

Configured via environment variables:
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
- LOG_TYPE: text (rich console), json (one object per line) (default: text)

Matching code may attach `query_id` and `match_path` ("remote", "local" or
"catalog") through `extra=`; both outputs render them when present.
"""

import json
import logging
import os
import sys
from typing import Any

from rich.console import Console
from rich.logging import RichHandler


CONTEXT_FIELDS = ("query_id", "match_path")


def _context(record: logging.LogRecord) -> dict[str, Any]:
    return {field: getattr(record, field) for field in CONTEXT_FIELDS if hasattr(record, field)}


class JSONFormatter(logging.Formatter):
    """Formatter that outputs one JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        log_data.update(_context(record))
        return json.dumps(log_data)


class MatchContextFormatter(logging.Formatter):
    """Message with a `[query_id=... match_path=...]` suffix.

    RichHandler draws the time and level columns itself.
    """

    def formatMessage(self, record: logging.LogRecord) -> str:
        message = super().formatMessage(record)
        context = " ".join(f"{field}={value}" for field, value in _context(record).items())
        return f"{message} [{context}]" if context else message


def get_logger(name: str) -> logging.Logger:
    """Create and configure logger instance.

    Args:
        name: Logger name, typically module name.

    Returns:
        Configured logger instance (existing handlers are reused).
    """
    logger_instance = logging.getLogger(name)

    if logger_instance.handlers:
        return logger_instance

    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_type = os.getenv("LOG_TYPE", "text").lower()

    log_level = getattr(logging, log_level_str, logging.INFO)
    logger_instance.setLevel(log_level)

    if log_type == "json":
        handler: logging.Handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
    else:
        handler = RichHandler(console=Console(), show_path=False, markup=False)
        handler.setFormatter(MatchContextFormatter("%(name)s  %(message)s"))
    handler.setLevel(log_level)
    logger_instance.addHandler(handler)

    return logger_instance


logger = get_logger("recipe_matcher")

# aiohttp logs every request at INFO
logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
