"""Logging configuration.

Two output modes share one handler setup:
- ``dev``: one readable line per record
- ``structured``: one JSON object per record, with request fields
  (``path``, ``method``, ``status_code``, ``user_id``) lifted from ``extra``

Every record passes through ``TokenRedactionFilter`` so bearer tokens and
JWT-shaped strings never reach the log output.
"""

import json
import logging
import re
import sys
from typing import Literal

LOGGER_PREFIX = "productivity"

DEV_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEV_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Attributes passed via ``extra=`` that structured output keeps
REQUEST_FIELDS = ("path", "method", "status_code", "user_id")

# Third-party loggers and the level they run at outside DEBUG
_QUIET_LOGGERS = {
    "uvicorn": logging.WARNING,
    "uvicorn.error": logging.WARNING,
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
}

_BEARER_RE = re.compile(r"(Bearer\s+)[A-Za-z0-9\-_.=]+", re.IGNORECASE)
_JWT_RE = re.compile(r"eyJ[A-Za-z0-9\-_]+\.[A-Za-z0-9\-_]+\.[A-Za-z0-9\-_]+")
REDACTED = "[REDACTED]"


def redact_tokens(text: str) -> str:
    """Mask bearer credentials and encoded JWTs in ``text``."""
    text = _BEARER_RE.sub(rf"\g<1>{REDACTED}", text)
    return _JWT_RE.sub(REDACTED, text)


class TokenRedactionFilter(logging.Filter):
    """Rewrites the record message with tokens masked."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact_tokens(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter.

    json.dumps() escapes quotes, backslashes and newlines, so every line
    stays valid JSON whatever the message contains.
    """

    def __init__(self):
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in REQUEST_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = redact_tokens(self.formatException(record.exc_info))
        return json.dumps(entry, default=str)


def _build_handler(format_type: Literal["structured", "dev"]) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if format_type == "structured":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(DEV_FORMAT, datefmt=DEV_DATEFMT))
    handler.addFilter(TokenRedactionFilter())
    return handler


def setup_logging(
    level: str = "INFO",
    format_type: Literal["structured", "dev"] = "dev",
) -> None:
    """
    Configure application logging.

    Replaces any handlers on the root logger, so calling it again (for
    example from the seed script after the app module was imported) is safe.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: 'structured' for JSON lines, 'dev' for readable lines
    """
    numeric_level = getattr(logging, level.upper())
    logging.root.handlers = [_build_handler(format_type)]
    logging.root.setLevel(numeric_level)

    for name, quiet_level in _QUIET_LOGGERS.items():
        # SQL echo is only wanted while debugging
        if name == "sqlalchemy.engine" and numeric_level == logging.DEBUG:
            quiet_level = logging.DEBUG
        logging.getLogger(name).setLevel(quiet_level)

    get_logger("logging").info(f"Logging configured: level={level}, format={format_type}")


def get_logger(name: str) -> logging.Logger:
    """Return ``productivity.<name>``."""
    return logging.getLogger(f"{LOGGER_PREFIX}.{name}")
