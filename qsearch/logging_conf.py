"""Logging configuration built around structlog JSON logging."""

from __future__ import annotations

import logging.config
from pathlib import Path
from typing import Any

import structlog

_LOGGING_INITIALISED = False

_JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
# file name -> minimum level
_LOG_FILES = {"qsearch.log": "INFO", "error.log": "ERROR"}


def _default_log_dir() -> Path:
    from .config import ConfigLocator

    return ConfigLocator().logs_dir


def _dict_config(level: str, log_dir: Path) -> dict[str, Any]:
    handlers: dict[str, dict[str, Any]] = {
        # stderr: stdout carries the CSV rows
        "console": {"class": "logging.StreamHandler", "level": level, "formatter": "json"},
    }
    for filename, file_level in _LOG_FILES.items():
        handlers[Path(filename).stem + "_file"] = {
            "class": "logging.FileHandler",
            "level": file_level,
            "filename": str(log_dir / filename),
            "encoding": "utf-8",
            "formatter": "json",
        }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": "pythonjsonlogger.jsonlogger.JsonFormatter", "fmt": _JSON_FORMAT},
        },
        "handlers": handlers,
        "loggers": {
            "qsearch": {"handlers": list(handlers), "level": level, "propagate": False},
        },
    }


def configure_logging(verbose: bool = False, log_dir: Path | None = None) -> structlog.BoundLogger:
    """Configure structlog + stdlib handlers once and return the application logger.

    Later calls are no-ops, so the first caller decides the level and the
    log directory (``$QSEARCH_HOME/logs`` unless given).
    """

    global _LOGGING_INITIALISED
    if not _LOGGING_INITIALISED:
        log_dir = log_dir or _default_log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        logging.config.dictConfig(_dict_config("DEBUG" if verbose else "INFO", log_dir))

        # Event dict keys travel as ``extra`` and are rendered by the JSON formatter
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.stdlib.filter_by_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.stdlib.render_to_log_kwargs,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        _LOGGING_INITIALISED = True
    return structlog.get_logger("qsearch")


def component_logger(component: str) -> structlog.BoundLogger:
    """Return a logger bound to a pipeline component."""

    return structlog.get_logger(f"qsearch.{component}").bind(component=component)


__all__ = ["configure_logging", "component_logger"]
