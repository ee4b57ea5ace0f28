import asyncio
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

_STDLIB_KWARGS = ("exc_info", "stack_info", "stacklevel")


def _current_task_name() -> Optional[str]:
    try:
        task = asyncio.current_task()
    except RuntimeError:
        return None
    return task.get_name() if task is not None else None


class JSONFormatter(logging.Formatter):
    """One JSON object per line; structured context goes under ``data``."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "where": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        task_name = getattr(record, "task_name", None)
        if task_name:
            entry["task"] = task_name

        context = getattr(record, "context", None)
        if context:
            entry["data"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        # Balances may be large ints or models; fall back to str().
        return json.dumps(entry, default=str)


class KeyValueFormatter(logging.Formatter):
    """Plain text line followed by ``key=value`` context pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = getattr(record, "context", None)
        if context:
            line += " | " + " ".join(f"{key}={value}" for key, value in context.items())
        return line


class ContextLogger:
    """Logger taking structured context as keyword arguments.

    ``logger.info("Kaspa wallet updated", ref="KAS-mainnet", new_transactions=2)``
    """

    def __init__(self, name: str, context: Optional[dict[str, Any]] = None):
        self.logger = logging.getLogger(name)
        self._context = dict(context or {})

    @property
    def name(self) -> str:
        return self.logger.name

    def bind(self, **context: Any) -> "ContextLogger":
        """Return a logger that adds ``context`` to every record."""
        return ContextLogger(self.name, {**self._context, **context})

    def _log(self, level: int, msg: str, *args: Any, **kwargs: Any):
        if not self.logger.isEnabledFor(level):
            return

        stdlib = {key: kwargs.pop(key) for key in _STDLIB_KWARGS if key in kwargs}
        stacklevel = stdlib.pop("stacklevel", 1)
        context = {**self._context, **kwargs}

        self.logger.log(
            level,
            msg,
            *args,
            stacklevel=max(1, int(stacklevel)) + 2,  # skip ContextLogger frames
            extra={"context": context or None, "task_name": _current_task_name()},
            **stdlib,
        )

    def debug(self, msg: str, *args: Any, **kwargs: Any):
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any):
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any):
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any):
        self._log(logging.ERROR, msg, *args, **kwargs)

    def critical(self, msg: str, *args: Any, **kwargs: Any):
        self._log(logging.CRITICAL, msg, *args, **kwargs)

    def exception(self, msg: str, *args: Any, **kwargs: Any):
        kwargs.setdefault("exc_info", True)
        self._log(logging.ERROR, msg, *args, **kwargs)


def setup_logging(level: str = "INFO", json_format: bool = True, log_file: Optional[str] = None):
    """Configure root logging for a worker process."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper()))
    root.handlers = []

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(
        JSONFormatter()
        if json_format
        else KeyValueFormatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    )
    root.addHandler(console)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JSONFormatter())
        root.addHandler(file_handler)

    # Per-request lines from the HTTP stack drown out sync logs.
    for noisy in ("httpx", "httpcore", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> ContextLogger:
    """Get a context-aware logger"""
    return ContextLogger(name)


# Pre-configured loggers
scheduler_logger = get_logger("scheduler")
kaspa_logger = get_logger("kaspa")
api_logger = get_logger("kaspa_api")
