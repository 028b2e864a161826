"""Application-wide logging initialization

Call `initialize_logging()` once from the WSGI entry point, before the app
handles requests. Every record becomes one JSON line on stdout; whatever a
call site passes through ``extra=`` (``key``, ``event``, ``reason``) is
copied to the top level:

{
    "timestamp": "2025-12-26T12:00:00.000Z",
    "level": "INFO",
    "logger": "public_bucket.dispatcher",
    "message": "Redirecting to short link target. Responding with 302.",
    "key": "docs",
    "event": "SHORT_LINK_REDIRECT"
}
"""

import json
import logging
import logging.config
from datetime import datetime, UTC

# Attributes every LogRecord carries; anything else on a record came from `extra=`.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """One JSON object per record, extras included"""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=UTC).isoformat(timespec="milliseconds")

        log = {
            "timestamp": timestamp.replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log.update((name, value) for name, value in vars(record).items() if name not in _RECORD_ATTRS)

        if record.exc_info:
            log["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log, default=str)


def initialize_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"json": {"()": JsonFormatter}},
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                    "stream": "ext://sys.stdout",
                }
            },
            "root": {"level": level.upper(), "handlers": ["stdout"]},
        }
    )
