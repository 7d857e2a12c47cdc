from __future__ import annotations

import logging
import sys
from typing import TextIO

"""Application logging: one stdout handler, one label per line.

Every line reads ``LABEL message`` where LABEL is INFO, WARN, ERROR or
SUMMARY (plus DEBUG under --debug). Modules log through
``logging.getLogger(__name__)``; their records propagate into the
``service_insights`` logger configured here and stop there.
"""

__all__ = [
    "APP_LOGGER_NAME",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "setup_logging",
    "get_logger",
    "log_summary",
    "reset_logging",
]

APP_LOGGER_NAME = "service_insights"

# sits between INFO (20) and WARNING (30)
SUMMARY_LEVEL = 25

_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        SUMMARY_LEVEL: "SUMMARY",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
    }

    def format(self, record: logging.LogRecord) -> str:
        label = self.LABELS.get(record.levelno, record.levelname)
        return f"{label} {record.getMessage()}"


def setup_logging(debug: bool = False, stream: TextIO | None = None) -> logging.Logger:
    """Configure the application logger once and return it.

    Later calls return the same logger; ``debug=True`` on a later call still
    lowers it (and its handler) to DEBUG. ``stream`` defaults to the current
    ``sys.stdout`` and only applies on the first call.
    """
    global _logger

    level = logging.DEBUG if debug else logging.INFO
    if _logger is not None:
        if debug:
            _logger.setLevel(level)
            for h in _logger.handlers:
                h.setLevel(level)
        return _logger

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    app = logging.getLogger(APP_LOGGER_NAME)
    app.setLevel(level)
    for old in list(app.handlers):
        app.removeHandler(old)

    out = logging.StreamHandler(stream or sys.stdout)
    out.setLevel(level)
    out.setFormatter(LabeledFormatter())
    app.addHandler(out)
    # root logger would print every line twice
    app.propagate = False

    _logger = app
    return app


def get_logger() -> logging.Logger:
    return _logger if _logger is not None else setup_logging()


def log_summary(message: str) -> None:
    """Emit ``message`` at SUMMARY level; the formatter adds the label."""
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Drop the configured logger and its handlers (tests start from scratch)."""
    global _logger
    if _logger is not None:
        for h in list(_logger.handlers):
            _logger.removeHandler(h)
        _logger = None
