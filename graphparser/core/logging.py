"""
Structured logging configuration.

The library only obtains loggers; handlers are installed by the application
through ``setup_logging``. Sampling runs attach the expression and range as
``extra_data``, which the JSON formatter flattens into each line.
"""

import sys
import logging
from typing import Any, Dict, Optional
from datetime import datetime, timezone
import json
from pathlib import Path

import numpy as np

from .config import Settings, get_settings


def _json_default(value: Any) -> Any:
    # float32 coordinates and results stay numbers in the JSON output
    if isinstance(value, np.generic):
        return value.item()
    return str(value)


class StructuredFormatter(logging.Formatter):
    """JSON lines: level, logger, message and any ``extra_data``"""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data.update(getattr(record, "extra_data", {}))

        return json.dumps(log_data, default=_json_default)


class TextFormatter(logging.Formatter):
    """Human-readable text log formatter"""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )


def setup_logging(config: Optional[Settings] = None) -> None:
    """Configure logging for an application embedding the library"""
    config = config or get_settings()

    log_level = getattr(logging, config.LOG_LEVEL.upper(), logging.WARNING)

    if config.LOG_FORMAT == "json":
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = TextFormatter()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if config.LOG_FILE:
        log_path = Path(config.LOG_FILE)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(log_level)

    logging.basicConfig(
        level=log_level,
        handlers=handlers,
        force=True
    )


def get_logger(name: str) -> logging.Logger:
    """Get logger instance"""
    return logging.getLogger(name)


class ContextLogger(logging.LoggerAdapter):
    """Logger that merges permanent context into each record's ``extra_data``"""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra_data = {**self.extra, **kwargs.pop("extra_data", {})}
        kwargs.setdefault("extra", {})["extra_data"] = extra_data
        return msg, kwargs


def get_context_logger(name: str, **context) -> ContextLogger:
    """Get logger with permanent context, e.g. the expression being sampled"""
    return ContextLogger(get_logger(name), context)
