"""Sentry error tracking integration."""

from __future__ import annotations

import logging

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

from Chunk_Index_rev.config.settings import AppSettings

_SENTRY_INITIALISED = False


def initialise_sentry(settings: AppSettings) -> None:
    global _SENTRY_INITIALISED

    if _SENTRY_INITIALISED:
        return

    sentry_settings = settings.observability.sentry
    if not sentry_settings.dsn:
        return

    sentry_sdk.init(
        dsn=sentry_settings.dsn,
        environment=sentry_settings.environment or settings.environment.value,
        traces_sample_rate=sentry_settings.traces_sample_rate,
        send_default_pii=sentry_settings.send_default_pii,
        integrations=[LoggingIntegration(level=logging.INFO, event_level=logging.ERROR)],
    )

    _SENTRY_INITIALISED = True


def capture_backend_failure(message: str) -> None:
    """Report a backend write failure; a no-op until Sentry is initialised."""
    sentry_sdk.capture_message(message, level="error")
