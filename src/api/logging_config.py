"""Logging configuration for the QuickQuote API."""
import json
import logging
import sys
from datetime import datetime, timezone

SERVICE_NAME = "quickquote"

# Record attributes passed through ``extra=`` that end up in JSON lines
CONTEXT_FIELDS = ("requested_currency", "rates_file", "data_file", "project_type")


class JSONFormatter(logging.Formatter):
    """One JSON object per log line, tagged with the service name."""
    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        for name in CONTEXT_FIELDS:
            if hasattr(record, name):
                log_entry[name] = getattr(record, name)
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO", json_output: bool = False) -> logging.Handler:
    """
    Route every log record to stdout.

    The ``calculator`` and ``api`` loggers follow ``level``; the root
    logger stays at WARNING so third-party chatter is kept out.

    Returns: the installed handler
    """
    handler = logging.StreamHandler(sys.stdout)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
        ))

    root = logging.getLogger()
    root.setLevel(logging.WARNING)
    root.handlers = [handler]

    app_level = getattr(logging, str(level).upper(), logging.INFO)
    for name in ("calculator", "api"):
        logging.getLogger(name).setLevel(app_level)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    return handler
