"""Logging configuration built around structlog JSON logging."""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path
from typing import Iterable

import structlog

LOGGER_NAME = "addon_audit"
AUDIT_LOG = "audit.log"
ERROR_LOG = "error.log"

_LOGGING_INITIALISED = False


def configure_logging(verbose: bool = False, log_dir: Path | None = None) -> structlog.BoundLogger:
    """Configure structlog + stdlib handlers and return application logger.

    The console handler writes to stderr so stdout carries only the report.
    Without ``verbose`` it only passes CRITICAL records, leaving stderr to the
    report's own error lines. File handlers are added when ``log_dir`` is given.
    """

    global _LOGGING_INITIALISED

    if not _LOGGING_INITIALISED:
        console_level = "DEBUG" if verbose else "CRITICAL"
        handlers: dict[str, dict] = {
            "console": {
                "class": "logging.StreamHandler",
                "level": console_level,
                "formatter": "plain",
            },
        }
        if log_dir is not None:
            log_dir.mkdir(parents=True, exist_ok=True)
            handlers["audit_file"] = {
                "class": "logging.FileHandler",
                "level": "INFO",
                "filename": str(log_dir / AUDIT_LOG),
                "formatter": "plain",
                "encoding": "utf-8",
            }
            handlers["error_file"] = {
                "class": "logging.FileHandler",
                "level": "ERROR",
                "filename": str(log_dir / ERROR_LOG),
                "formatter": "plain",
                "encoding": "utf-8",
            }
        logging.config.dictConfig(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "plain": {
                        "()": "pythonjsonlogger.json.JsonFormatter",
                        "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
                    }
                },
                "handlers": handlers,
                "loggers": {
                    LOGGER_NAME: {
                        "handlers": list(handlers),
                        "level": "DEBUG" if verbose else "INFO",
                        "propagate": False,
                    },
                },
            }
        )

        # Forward structlog events to stdlib; JSON formatting happens at handler level
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOGGING_INITIALISED = True
    return structlog.get_logger(LOGGER_NAME)


def component_logger(component: str) -> structlog.BoundLogger:
    """Return the application logger bound to a component name."""

    return structlog.get_logger(f"{LOGGER_NAME}.{component}").bind(component=component)


def tail_log(path: Path, line_count: int = 100) -> list[str]:
    """Return the last N lines from a log file."""

    if not path.exists():
        return []
    with path.open("r", encoding="utf-8", errors="ignore") as stream:
        lines = stream.readlines()
    return lines[-line_count:]


def available_logs(log_dir: Path) -> Iterable[Path]:
    if not log_dir.exists():
        return []
    return sorted(p for p in log_dir.glob("*.log"))


__all__ = [
    "AUDIT_LOG",
    "ERROR_LOG",
    "available_logs",
    "component_logger",
    "configure_logging",
    "tail_log",
]
