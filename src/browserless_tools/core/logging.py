"""Structured logging configuration using structlog.

Provides consistent, structured logging across the toolkit with:
- JSON output for production environments
- Pretty console output for development
- Censoring of the Browserless token wherever it shows up
"""

import logging
import re
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from .config import Environment, Settings, get_settings

SENSITIVE_KEYS = frozenset(
    {
        "password",
        "api_key",
        "apikey",
        "token",
        "secret",
        "authorization",
        "bearer",
    }
)

CENSORED = "***CENSORED***"

# token=... inside WebSocket URLs and error messages
_TOKEN_QUERY = re.compile(r"(token=)[^&\s\"']+", re.IGNORECASE)


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add application name and environment to log entries."""
    settings = get_settings()
    event_dict["app"] = settings.APP_NAME
    event_dict["environment"] = settings.ENVIRONMENT.value
    return event_dict


def redact_value(value: Any) -> Any:
    """Mask ``token=`` query parameters in string values."""
    if isinstance(value, str) and "token=" in value.lower():
        return _TOKEN_QUERY.sub(rf"\1{CENSORED}", value)
    return value


def censor_sensitive_data(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Censor sensitive keys and token-bearing URLs from log entries.

    Args:
        logger: The logger instance
        method_name: The name of the method being called
        event_dict: The event dictionary to modify

    Returns:
        Modified event dictionary with censored data
    """

    def _censor(data: dict[str, Any]) -> dict[str, Any]:
        censored: dict[str, Any] = {}
        for key, value in data.items():
            if any(sensitive in key.lower() for sensitive in SENSITIVE_KEYS):
                censored[key] = CENSORED
            elif isinstance(value, dict):
                censored[key] = _censor(value)
            elif isinstance(value, list):
                censored[key] = [
                    _censor(item) if isinstance(item, dict) else redact_value(item)
                    for item in value
                ]
            else:
                censored[key] = redact_value(value)
        return censored

    return _censor(dict(event_dict))


def get_log_processors(environment: Environment) -> list[Processor]:
    """Get log processors based on environment."""
    common_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
        censor_sensitive_data,
        structlog.processors.format_exc_info,
    ]

    if environment == Environment.PRODUCTION:
        return [*common_processors, structlog.processors.JSONRenderer()]
    return [*common_processors, structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def resolve_log_level(settings: Settings, level: str | None = None) -> int:
    """Explicit level, else DEBUG when ``DEBUG`` is set, else ``LOG_LEVEL``."""
    name = level or ("DEBUG" if settings.DEBUG else settings.LOG_LEVEL)
    return getattr(logging, name.upper(), logging.INFO)


def setup_logging(level: str | None = None) -> None:
    """Configure structured logging. Call this once at startup.

    Args:
        level: Optional level name overriding ``DEBUG`` and ``LOG_LEVEL``
    """
    settings = get_settings()

    log_level = resolve_log_level(settings, level)
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)

    structlog.configure(
        processors=get_log_processors(settings.ENVIRONMENT),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Playwright's driver and asyncio are chatty at DEBUG
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> Any:
    """Get a structlog logger (typically ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


class LogContext:
    """Context manager binding key-value pairs to every log line in a scope.

    Example:
        with LogContext(tool="click", selector="#submit"):
            logger.info("tool_invoked")
    """

    def __init__(self, **kwargs: Any) -> None:
        self.context = kwargs

    def __enter__(self) -> None:
        structlog.contextvars.bind_contextvars(**self.context)

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.context)
