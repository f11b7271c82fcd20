"""Structured logging for the portfolio server (structlog over stdlib logging)."""

import sys
import structlog
import logging
from pathlib import Path
from typing import List
from core.config import Settings

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("apscheduler", "httpx", "httpcore", "aiosqlite", "sqlalchemy.engine")


def _handlers(settings: Settings, level: int) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))
    for handler in handlers:
        handler.setLevel(level)
    return handlers


def configure_logging(settings: Settings) -> None:
    """Route structlog through stdlib handlers at the configured level.

    LOG_FORMAT=json emits one JSON object per line with logger names and ISO
    timestamps; console emits padded plain text.
    """
    level = getattr(logging, settings.effective_log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        handlers=_handlers(settings, level),
        format="%(message)s",
        force=True
    )

    shared = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.log_format == "json":
        processors = [
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            *shared,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            *shared,
            structlog.dev.ConsoleRenderer(
                colors=False,
                pad_event_to=35,
                exception_formatter=structlog.dev.plain_traceback
            ),
        ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def log_execution_time(logger: structlog.BoundLogger, operation: str,
                       start_time: float, end_time: float, **kwargs) -> None:
    """Debug-level timing of a named operation."""
    logger.debug(
        "Operation completed",
        operation=operation,
        execution_time_seconds=round(end_time - start_time, 4),
        **kwargs
    )


def log_api_call(logger: structlog.BoundLogger, provider: str, endpoint: str,
                 success: bool, **kwargs) -> None:
    """One line per outbound request; failures are logged at warning."""
    log = logger.debug if success else logger.warning
    log("API call completed", provider=provider, endpoint=endpoint, success=success, **kwargs)


def log_cache_operation(logger: structlog.BoundLogger, operation: str,
                        key: str, hit: bool = None, **kwargs) -> None:
    """Log key-value store access."""
    if hit is not None:
        kwargs["cache_hit"] = hit
    logger.debug("Cache operation", operation=operation, cache_key=key, **kwargs)
