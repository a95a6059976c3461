"""Logging setup for the storefront.

Standard library handlers do the writing (stdout plus rotating files under
``LOG_DIR``); structlog builds the records. Production and staging render
JSON, every other environment a colored console line. Provider credentials
and webhook signatures are masked before rendering.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path

import structlog

LOG_FILE = "storefront.log"
ERROR_LOG_FILE = "storefront_error.log"
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

# Keys whose values never reach a log sink
SENSITIVE_KEYS = frozenset(
    {
        "access_token",
        "api_key",
        "email_api_key",
        "authorization",
        "webhook_secret",
        "x_signature",
        "signature",
    }
)
MASK = "***"

_LEVELS_BY_ENV = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}


def current_environment() -> str:
    return (os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level(environment: str | None = None) -> str:
    """``LOG_LEVEL`` wins; otherwise the level follows the environment."""
    environment = environment or current_environment()
    return os.getenv("LOG_LEVEL", _LEVELS_BY_ENV.get(environment, "INFO")).upper()


def mask_sensitive(_, __, event_dict: dict) -> dict:
    """structlog processor replacing credential values with a mask."""
    for key in event_dict.keys() & SENSITIVE_KEYS:
        if event_dict[key]:
            event_dict[key] = MASK
    return event_dict


def _rotating_handler(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def _configure_handlers(level: str, log_dir: Path) -> None:
    log_dir.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [
        console,
        _rotating_handler(log_dir / LOG_FILE, level),
        # Rejected webhooks and provider failures, kept apart for auditing
        _rotating_handler(log_dir / ERROR_LOG_FILE, logging.ERROR),
    ]

    for noisy in ("httpx", "httpcore", "asyncio", "protean"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def _processors(environment: str) -> list:
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        mask_sensitive,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if environment in ("production", "staging"):
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    return processors


def configure_logging(log_dir: str | Path | None = None) -> None:
    """Configure stdlib handlers and structlog for the running environment."""
    environment = current_environment()
    _configure_handlers(get_log_level(environment), Path(log_dir or os.getenv("LOG_DIR", "logs")))

    structlog.configure(
        processors=_processors(environment),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_request(method: str, path: str, request_id: str | None = None) -> None:
    """Start a fresh log context for one HTTP request."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(method=method, path=path)
    if request_id:
        structlog.contextvars.bind_contextvars(request_id=request_id)
