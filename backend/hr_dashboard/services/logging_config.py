"""Structured logging configuration for the HR dashboard API."""
import json
import logging
import sys
from datetime import datetime, timezone

# Attributes passed through ``extra=`` that are copied into the JSON line
EXTRA_FIELDS = (
    "request_id",
    "duration_ms",
    "sheet_range",
    "row_count",
    "http_method",
    "http_path",
    "http_status",
)


class JSONFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record):
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        for name in EXTRA_FIELDS:
            if hasattr(record, name):
                entry[name] = getattr(record, name)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


APP_LOGGER = "hr-dashboard"


def setup_logging(level: str = "INFO", json_output: bool = True) -> logging.Logger:
    """
    Route every record through one stdout handler.

    ``level`` applies to the ``hr-dashboard.*`` tree only; third-party
    loggers (httpx, httpcore, uvicorn.access) stay at WARNING so each
    upstream call is logged once, by the client that made it.
    """
    handler = logging.StreamHandler(sys.stdout)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    app_logger = logging.getLogger(APP_LOGGER)
    app_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    app_logger.propagate = True
    return app_logger
