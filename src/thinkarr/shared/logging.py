"""Structured logging configuration.

Log events are snake_case names with keyword context. Credentials for LLM
endpoints and media services pass through a lot of code, so any event field
whose name looks like a secret is masked before rendering.
"""

import logging
import sys
from collections.abc import MutableMapping
from typing import Any, cast

import structlog

from thinkarr.config import get_settings

REDACTED = "***"

SECRET_FIELD_MARKERS = ("api_key", "apikey", "token", "secret", "password", "authorization")

# Model streams and media service calls are chatty at INFO
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "openai")


def redact_secrets(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Mask values of fields such as ``api_key`` or ``plex_token``."""
    for key, value in event_dict.items():
        if value and any(marker in key.lower() for marker in SECRET_FIELD_MARKERS):
            event_dict[key] = REDACTED
    return event_dict


def setup_logging() -> None:
    settings = get_settings()
    level = logging.DEBUG if settings.app_debug else logging.INFO

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.is_development:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    else:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_request_context(**values: Any) -> None:
    """Attach values (user id, conversation id) to every event of this request."""
    structlog.contextvars.bind_contextvars(**values)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
