"""Structured JSON logging for the clinic agent."""

import json
import logging
import logging.config
from datetime import datetime, timezone
from pathlib import Path

from .config import DEFAULT_LOG_PATH

# Third-party loggers that log every request at INFO.
NOISY_LOGGERS = ("httpx", "httpcore", "anthropic", "openai", "aiosqlite")


class JSONFormatter(logging.Formatter):
    """One JSON object per line; ``extra={"context": {...}}`` is nested as-is."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        context = getattr(record, "context", None)
        if context:
            entry["context"] = context
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        # Patient text is Portuguese; keep it readable in the log file.
        return json.dumps(entry, ensure_ascii=False, default=str)


def _build_config(level: str, log_file: Path, console: bool) -> dict:
    handlers = {
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(log_file),
            "maxBytes": 10 * 1024 * 1024,
            "backupCount": 5,
            "formatter": "json",
            "encoding": "utf-8",
        },
    }
    if console:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "stream": "ext://sys.stdout",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"json": {"()": JSONFormatter}},
        "handlers": handlers,
        "loggers": {name: {"level": "WARNING"} for name in NOISY_LOGGERS},
        "root": {"level": level.upper(), "handlers": list(handlers)},
    }


def setup_logging(
    log_level: str = "INFO",
    log_file: str | Path | None = None,
    console: bool = True,
) -> None:
    """
    Configure root logging for the service.

    Args:
        log_level: Root level name, usually ``Settings.log_level``.
        log_file: Rotating log file. Defaults to 04_logs/app.log.
        console: Also write JSON lines to stdout.
    """
    path = Path(log_file) if log_file else DEFAULT_LOG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(_build_config(log_level, path, console))


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance (typically for ``__name__``)."""
    return logging.getLogger(name)
