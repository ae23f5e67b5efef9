"""
Configuración de logging.

- console: salida legible para desarrollo
- json: una línea JSON por registro, para agregadores de logs

Variables de entorno: LOG_LEVEL, LOG_FORMAT (ver app/core/config.py).
"""
import json
import logging
import logging.config
from datetime import datetime, timezone

from app.core.config import LOG_FORMAT, LOG_LEVEL

_STANDARD_ATTRS = {
    "name", "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "lineno", "funcName", "created",
    "msecs", "relativeCreated", "thread", "threadName", "taskName",
    "processName", "process", "exc_info", "exc_text", "stack_info",
    "message",
}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extras = {k: v for k, v in record.__dict__.items() if k not in _STANDARD_ATTRS}
        if extras:
            entry["extra"] = extras

        return json.dumps(entry, default=str)


def get_logging_config(level: str = LOG_LEVEL, fmt: str = LOG_FORMAT) -> dict:
    formatter = "json" if fmt == "json" else "verbose"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "verbose": {
                "format": "[{asctime}] {levelname} {name} {message}",
                "style": "{",
            },
            "json": {
                "()": "app.core.logging_config.JsonFormatter",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": formatter,
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "": {"handlers": ["console"], "level": level},
            "app": {"handlers": ["console"], "level": level, "propagate": False},
            "uvicorn.access": {"handlers": ["console"], "level": level, "propagate": False},
        },
    }


def configure_logging() -> None:
    logging.config.dictConfig(get_logging_config())
