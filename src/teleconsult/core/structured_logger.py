"""
Structured logging utilities.

The service logs through plain ``logging.getLogger(__name__)`` loggers;
this module only decides how records are rendered (JSON lines or text)
and installs that once on the root logger.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from .config import LoggingSettings

_TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        request_id = getattr(record, "request_id", None)
        if request_id:
            log_obj["request_id"] = request_id

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_data"):
            log_obj.update(record.extra_data)

        return json.dumps(log_obj, default=str)


def configure_logging(settings: LoggingSettings) -> None:
    """Install a single stdout handler on the root logger."""
    root = logging.getLogger()
    root.setLevel(settings.level)

    for handler in list(root.handlers):
        if getattr(handler, "_teleconsult_handler", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    if settings.format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
    handler._teleconsult_handler = True
    root.addHandler(handler)
