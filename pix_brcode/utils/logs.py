"""Log formatters and logger setup.

Importing this module installs a text handler on the ``pix_brcode`` package
logger. The codec modules only call ``logging.getLogger(__name__)`` and never
import it, so an application using the library keeps its own logging
configuration; the CLI imports it through ``setup_logger_json``.
"""
import datetime
from decimal import Decimal
import json
import logging
from typing import Any, Optional
import uuid

from asgi_correlation_id import CorrelationIdFilter

from .constants import LOG_SOURCE

_RESERVED_ATTRS = frozenset([
    "msg", "name", "args", "module", "message", "asctime", "lineno", "thread", "threadName",
    "levelno", "levelname", "funcName", "pathname", "filename", "exc_info", "exc_text",
    "stack_info", "processName", "process", "relativeCreated", "created", "msecs", "taskName",
])


class CustomFormatter(logging.Formatter):
    def format(self, record):
        record.correlation_id_str = f"[{record.correlation_id}]" if getattr(record, "correlation_id", None) is not None else ""
        msg = super().format(record)
        extra_info = " ".join(
            f"{k}={v}" for k, v in record.__dict__.items()
            if k not in _RESERVED_ATTRS and k not in ("correlation_id_str", "correlation_id")
        )
        if extra_info:
            msg = f"{msg} ({extra_info})"
        return msg


class CustomJSONEncoder(json.JSONEncoder):
    """Custom JSON encoder that handles UUID, Decimal, and datetime objects."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, uuid.UUID):
            return str(obj)
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, datetime.datetime):
            return obj.isoformat()
        return super().default(obj)


class JSONFormatter(logging.Formatter):
    """A formatter that outputs one JSON object per record."""

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        dt = datetime.datetime.fromtimestamp(record.created).astimezone()
        # YYYY-MM-DD HH:MM:SS.microseconds+TZOFFSET
        return dt.strftime("%Y-%m-%d %H:%M:%S.%f%z")

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "logger": record.name,
            "level": record.levelname,
            "message": record.getMessage(),
        }

        if getattr(record, "correlation_id", None) is not None:
            log_data["correlation_id"] = record.correlation_id

        if record.exc_info:
            log_data["exc_info"] = self.formatException(record.exc_info)
        else:
            log_data["exc_info"] = None

        if getattr(record, "extra", None):
            log_data.update(record.extra)

        extra_info = {
            k: v for k, v in record.__dict__.items()
            if k not in _RESERVED_ATTRS and k not in ("extra", "correlation_id")
        }
        if extra_info:
            log_data.update(extra_info)
        return json.dumps(log_data, cls=CustomJSONEncoder)


logger = logging.getLogger(LOG_SOURCE)
logger.setLevel(logging.INFO)
logger.addFilter(CorrelationIdFilter())
handler = logging.StreamHandler()
# records emitted outside a request have no correlation_id
formatter = CustomFormatter('%(name)s - %(levelname)s - %(correlation_id_str)s %(message)s')
handler.setFormatter(formatter)
logger.addHandler(handler)


def setup_logger_json(
    level: str,
    module_name: str,
) -> logging.Logger:
    """Configure and return a JSON logger for the specified module.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        module_name: Name of the module requesting the logger

    Returns:
        logging.Logger: Configured logger instance named ``pix_brcode.<module_name>``
    """
    logger = logging.getLogger(f"{LOG_SOURCE}.{module_name}")
    logger.handlers.clear()
    logger.filters.clear()
    set_level = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    logger.setLevel(set_level[level.upper()])
    # avoid duplicates through the package-level handler
    logger.propagate = False

    logger.addFilter(CorrelationIdFilter())

    console_handler = logging.StreamHandler()
    console_handler.setLevel(set_level[level.upper()])
    console_handler.setFormatter(JSONFormatter())
    logger.addHandler(console_handler)

    return logger
