"""Observability helpers: logging, tracing, metrics and error reporting."""

from __future__ import annotations

import structlog

from Chunk_Index_rev.config.settings import AppSettings

from ..utils.logging import configure_logging
from .metrics import record_operation_failure, record_operation_success
from .sentry import capture_backend_failure, initialise_sentry
from .tracing import configure_tracing, instrumented

logger = structlog.get_logger(__name__)


def setup_observability(settings: AppSettings) -> None:
    """Configure logging, tracing and error tracking for the process."""
    configure_logging(settings.observability.logging)
    configure_tracing(settings.service_name, settings.telemetry)
    initialise_sentry(settings)
    logger.info(
        "observability.configured",
        environment=settings.environment.value,
        exporter=settings.telemetry.exporter,
        log_level=settings.observability.logging.level,
    )


__all__ = [
    "capture_backend_failure",
    "configure_tracing",
    "initialise_sentry",
    "instrumented",
    "record_operation_failure",
    "record_operation_success",
    "setup_observability",
]
