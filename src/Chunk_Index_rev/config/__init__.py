"""Lightweight configuration package exports."""

from __future__ import annotations

from .settings import (
    AppSettings,
    Environment,
    LoggingSettings,
    ObservabilitySettings,
    QdrantSettings,
    TelemetrySettings,
    get_settings,
    load_settings,
)
from .vector_store import (
    DatasetConfiguration,
    VectorStoreConfig,
    load_vector_store_config,
)

__all__ = [
    "AppSettings",
    "DatasetConfiguration",
    "Environment",
    "LoggingSettings",
    "ObservabilitySettings",
    "QdrantSettings",
    "TelemetrySettings",
    "VectorStoreConfig",
    "get_settings",
    "load_settings",
    "load_vector_store_config",
]
