"""Logging setup shared by the API process and scripts."""

import json
import logging
import logging.config
import sys
from datetime import datetime, timezone
from typing import Optional

from core.config import settings


class ColorFormatter(logging.Formatter):
    """Colours the whole line by level when writing to a terminal."""

    RESET = "\033[0m"
    COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[41m",
    }

    def __init__(
        self,
        fmt: str,
        datefmt: Optional[str] = None,
        style: str = "%",
        use_colors: Optional[bool] = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)
        if use_colors is None:
            use_colors = sys.stderr.isatty()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = self.COLORS.get(record.levelno)
        if not self.use_colors or not color:
            return message
        return f"{color}{message}{self.RESET}"


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="milliseconds"),
            "logger": record.name,
            "level": record.levelname,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging() -> None:
    formatter_name = "json" if settings.LOG_JSON else "standard"

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "()": "core.logger.ColorFormatter",
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            },
            "json": {
                "()": "core.logger.JsonFormatter",
            },
        },
        "handlers": {
            "default": {
                "level": settings.LOG_LEVEL,
                "class": "logging.StreamHandler",
                "formatter": formatter_name,
            },
        },
        "loggers": {
            "uvicorn": {"handlers": ["default"], "level": settings.LOG_LEVEL, "propagate": False},
            "uvicorn.error": {"handlers": ["default"], "level": settings.LOG_LEVEL, "propagate": False},
            "uvicorn.access": {"handlers": ["default"], "level": settings.LOG_LEVEL, "propagate": False},
        },
        "root": {
            "handlers": ["default"],
            "level": settings.LOG_LEVEL,
        },
    })
