"""Structured logging for the chunk index layer.

Key Responsibilities:
    - Route ``structlog`` events through the standard library so qdrant-client
      and httpx records share one handler and level
    - Render every event as a single JSON line with credentials redacted
    - Carry a correlation identifier across the awaits of one request

Collaborators:
    - Upstream: :func:`Chunk_Index_rev.observability.setup_observability`
    - Downstream: ``logging`` and ``structlog``

Thread Safety:
    - Correlation IDs live in ``structlog.contextvars`` and follow asyncio tasks
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable, Mapping
from contextvars import Token
from typing import Any

import structlog
from structlog.typing import EventDict, Processor

from Chunk_Index_rev.config.settings import LoggingSettings

REDACTED = "***"
CORRELATION_ID = "correlation_id"

# Client libraries log every HTTP round trip at INFO.
_CHATTY_LOGGERS = ("httpx", "httpcore", "qdrant_client")


def redact_fields(scrub_fields: Iterable[str]) -> Processor:
    """Build a processor masking ``scrub_fields`` at any depth, case-insensitively."""
    lowered = frozenset(field.lower() for field in scrub_fields)

    def _redact(value: Any) -> Any:
        if isinstance(value, Mapping):
            return {
                key: REDACTED if str(key).lower() in lowered else _redact(item)
                for key, item in value.items()
            }
        if isinstance(value, list):
            return [_redact(item) for item in value]
        return value

    def processor(_: Any, __: str, event_dict: EventDict) -> EventDict:
        for key in list(event_dict):
            if key.lower() in lowered:
                event_dict[key] = REDACTED
            else:
                event_dict[key] = _redact(event_dict[key])
        return event_dict

    return processor


def _level_value(level: str) -> int:
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def configure_logging(settings: LoggingSettings | None = None) -> None:
    """Install the JSON handler on the root logger and configure structlog.

    Reconfigures global logging state; call once at startup.
    """
    settings = settings or LoggingSettings()
    level = _level_value(settings.level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logging.basicConfig(level=level, handlers=[handler], force=True)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            redact_fields(settings.scrub_fields),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True, default=str),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def bind_correlation_id(value: str) -> Mapping[str, Token[Any]]:
    """Bind ``value`` to every event logged from the current context.

    Returns the tokens :func:`reset_correlation_id` needs to restore the
    previous binding.
    """
    return structlog.contextvars.bind_contextvars(**{CORRELATION_ID: value})


def reset_correlation_id(tokens: Mapping[str, Token[Any]]) -> None:
    structlog.contextvars.reset_contextvars(**tokens)


def get_correlation_id() -> str | None:
    return structlog.contextvars.get_contextvars().get(CORRELATION_ID)


__all__ = [
    "REDACTED",
    "bind_correlation_id",
    "configure_logging",
    "get_correlation_id",
    "redact_fields",
    "reset_correlation_id",
]
