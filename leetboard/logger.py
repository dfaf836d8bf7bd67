"""Logging set-up: key=value lines on standard error."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime

from .config import AppConfig

LOGGER_NAME = "leetboard"

_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}

_LEVEL_NAMES = {"WARNING": "WARN", "CRITICAL": "ERROR"}


def _quote(value: object) -> str:
    text = str(value)
    needs_quotes = text == "" or any(
        ch.isspace() or ch in '"=' or not ch.isprintable() for ch in text
    )
    return json.dumps(text, ensure_ascii=False) if needs_quotes else text


class _KeyValueFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created).astimezone()
        parts = [
            f"time={stamp.isoformat(timespec='milliseconds')}",
            f"level={_LEVEL_NAMES.get(record.levelname, record.levelname)}",
            f"msg={_quote(record.getMessage())}",
        ]
        parts.extend(
            f"{key}={_quote(value)}"
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS
        )
        if record.exc_info:
            parts.append(f"err={_quote(self.formatException(record.exc_info))}")
        return " ".join(parts)


def configure_logging(app: AppConfig) -> logging.Logger:
    """Route the package's logs to standard error as key=value lines.

    Any earlier handlers on the package logger are replaced. ``app`` is the
    application's settings; the output format does not depend on it.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_KeyValueFormatter())
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger