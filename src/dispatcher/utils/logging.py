"""Logging configuration for the dispatcher.

Operational logs go through structlog on top of stdlib logging. They are
separate from the audit trail, which is persisted as LogEvent documents.
The structlog logger also serves as the fallback sink when an internal
error cannot be written to the event log.

Contact addresses must not leak into operational logs any more than into the
audit trail, so every entry passes through ``mask_contact_fields``.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

# Log entry keys that carry a recipient's raw contact address
CONTACT_FIELDS = ("email_id", "mobile_number", "target_id")


def get_environment() -> str:
    return (os.getenv("ENV") or os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level() -> str:
    """Get log level based on environment. ``LOG_LEVEL`` always wins."""
    level_map = {
        "production": "INFO",
        "staging": "INFO",
        "development": "DEBUG",
        "test": "WARNING",
    }
    return os.getenv("LOG_LEVEL", level_map.get(get_environment(), "INFO"))


def _rotating_handler(path: Path, level: str | int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(log_dir: str | Path = "logs") -> None:
    """Route stdlib logging to the console, ``dispatcher.log`` and ``dispatcher_error.log``."""
    log_level = get_log_level()
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [
        console_handler,
        _rotating_handler(log_dir / "dispatcher.log", log_level),
        # Internal errors dropped from the event log are kept here
        _rotating_handler(log_dir / "dispatcher_error.log", logging.ERROR),
    ]

    logging.getLogger("asyncio").setLevel(logging.WARNING)


def mask_contact_fields(logger, method_name: str, event_dict: dict) -> dict:
    """structlog processor replacing raw contact addresses with a masked form."""
    for key in CONTACT_FIELDS:
        value = event_dict.get(key)
        if isinstance(value, str) and value:
            event_dict[key] = f"{value[:2]}***"
    return event_dict


def setup_structlog(json_logs: bool | None = None) -> None:
    """Configure structlog. JSON output defaults to on in production and staging."""
    if json_logs is None:
        json_logs = get_environment() in ("production", "staging")

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        mask_contact_fields,
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.LINENO,
            ]
        ),
    ]

    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(log_dir: str | Path = "logs", json_logs: bool | None = None) -> None:
    """Configure all logging for the dispatcher process."""
    setup_stdlib_logging(log_dir)
    setup_structlog(json_logs)


def bind_batch_context(**kwargs: Any) -> None:
    """Bind identifiers (batch id, vendor, ...) to all subsequent log lines."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
