"""Logging setup shared by the CLI and the HTTP function.

Everything goes to stderr; the CLI owns stdout for its JSON payload.
"""

import json
import logging
import sys

from teams_attendance.config import get_settings

PLAIN_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# Third-party loggers that are chatty at INFO.
QUIET_LOGGERS = ("multipart", "python_multipart", "httpx")


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for runs collected by a log shipper."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def _formatter(kind: str) -> logging.Formatter:
    return JsonFormatter() if kind == "json" else logging.Formatter(PLAIN_FORMAT)


def configure_logging(level: str | None = None) -> None:
    """Install a single stderr handler on the root logger.

    ``level`` overrides ``LOG_LEVEL`` from the settings; unknown names fall
    back to INFO. Calling this again replaces the handler.
    """
    settings = get_settings()
    log_level = logging.getLevelName((level or settings.LOG_LEVEL).upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_formatter(settings.LOG_FORMAT))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
