"""
Logging configuration.
Call setup_logging() once at application startup.
"""

import json
import logging
from datetime import datetime, timezone

from scholardesk.core.config import settings


class JSONFormatter(logging.Formatter):
    """One JSON object per log line."""

    EXTRA_FIELDS = ("quotation_number", "quote_request_id", "customer_id", "payment_id", "total")

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        for key in self.EXTRA_FIELDS:
            if hasattr(record, key):
                entry[key] = getattr(record, key)
        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    """Readable console format for development."""

    def __init__(self):
        super().__init__("%(asctime)s [%(levelname)s] %(name)s: %(message)s", "%H:%M:%S")


def setup_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """
    Configure the root logger.

    Args:
        level: Override log level (default: settings.LOG_LEVEL)
        json_logs: Force JSON output (default: settings.LOG_JSON)
    """
    if level is None:
        level = settings.LOG_LEVEL
    if json_logs is None:
        json_logs = settings.LOG_JSON

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setFormatter(JSONFormatter() if json_logs else HumanFormatter())
    root.addHandler(console)

    # ReportLab and SQLAlchemy are chatty at DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("reportlab").setLevel(logging.WARNING)
