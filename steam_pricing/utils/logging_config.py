"""
Logging setup for the price cache.

Console output is always on; a rotating file is added when configured.
Structured fields such as the item id and currency travel in a context
variable, so records from concurrent requests never pick up each other's
fields.
"""

import contextvars
import logging
import logging.handlers
import sys
from pathlib import Path

from pythonjsonlogger import jsonlogger

from steam_pricing.utils.config_loader import LoggingConfig

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s%(context)s"
TEXT_DATEFMT = "%Y-%m-%d %H:%M:%S"
JSON_FORMAT = "%(timestamp)s %(level)s %(name)s %(message)s"

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("urllib3", "httpx", "httpcore")

_context_fields: contextvars.ContextVar[dict] = contextvars.ContextVar(
    "steam_pricing_log_fields", default={}
)


class ContextFilter(logging.Filter):
    """Copies the fields of the active LogContext onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        fields = _context_fields.get()
        record.context_fields = fields
        record.context = "".join(f" {key}={value}" for key, value in fields.items())
        return True


class JSONFormatter(jsonlogger.JsonFormatter):
    """One JSON object per record, with context fields at the top level."""

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict):
        super().add_fields(log_record, record, message_dict)
        # Drop the raw filter attributes merged in as extras
        log_record.pop("context", None)
        log_record.pop("context_fields", None)

        log_record["timestamp"] = self.formatTime(record)
        log_record["level"] = record.levelname
        log_record["source"] = f"{record.module}:{record.funcName}:{record.lineno}"
        log_record.update(getattr(record, "context_fields", {}))


def build_formatter(log_format: str = "text") -> logging.Formatter:
    """Formatter for ``"text"`` or ``"json"`` output."""
    if log_format.lower() == "json":
        return JSONFormatter(JSON_FORMAT)
    return logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATEFMT, defaults={"context": ""})


def setup_logging(config: LoggingConfig, level: str | None = None) -> None:
    """
    Configure the root logger from the logging config section.

    Args:
        config: Logging section of the application config.
        level: Overrides ``config.level`` (the CLI's --verbose).
    """
    level_name = (level or config.level).upper()
    formatter = build_formatter(config.format)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if config.file:
        log_file = Path(config.file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )

    # Filters on a logger skip propagated records, so attach to handlers
    context_filter = ContextFilter()
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level_name, logging.INFO))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.info(f"Logging configured: level={level_name}, format={config.format}")


class LogContext:
    """
    Attach structured fields to every record logged inside the block.

    Nested contexts extend the outer fields. The fields are per thread and
    per task, so the context is safe to use on the request path.
    """

    def __init__(self, **fields):
        self.fields = fields
        self._token: contextvars.Token | None = None

    def __enter__(self):
        self._token = _context_fields.set({**_context_fields.get(), **self.fields})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _context_fields.reset(self._token)
        return False
