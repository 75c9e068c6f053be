"""Configuration system for the chunk index layer."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from enum import Enum
from functools import lru_cache
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environments supported by the platform."""

    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class TelemetrySettings(BaseModel):
    """Configuration block for OpenTelemetry export."""

    exporter: str = Field(default="console", description="Target exporter type")
    endpoint: str | None = Field(default=None, description="Exporter endpoint")
    sample_ratio: float = Field(default=0.1, ge=0.0, le=1.0)


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    level: str = Field(default="INFO", description="Log level for application output")
    scrub_fields: Sequence[str] = Field(
        default_factory=lambda: ["password", "token", "secret", "authorization", "api_key"],
        description="Fields that should be redacted in logs",
    )


class SentrySettings(BaseModel):
    """Sentry error tracking configuration."""

    dsn: str | None = Field(default=None, description="Sentry DSN for reporting errors")
    traces_sample_rate: float = Field(default=0.1, ge=0.0, le=1.0)
    send_default_pii: bool = False
    environment: str | None = Field(default=None, description="Override environment tag")


class ObservabilitySettings(BaseModel):
    """Aggregate observability configuration."""

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    sentry: SentrySettings = Field(default_factory=SentrySettings)


class QdrantSettings(BaseSettings):
    """Connection defaults for the Qdrant backend.

    Read from the ``QDRANT_URL``, ``QDRANT_API_KEY``, ``QDRANT_COLLECTION`` and
    ``QDRANT_EMBEDDING_SIZE`` environment variables. Individual datasets may
    override every value through :class:`~Chunk_Index_rev.config.vector_store.DatasetConfiguration`.
    """

    url: str = Field(default="http://localhost:6333", description="Qdrant HTTP endpoint")
    api_key: SecretStr | None = Field(default=None, description="Qdrant API key")
    collection: str = Field(default="chunks", description="Default collection name")
    embedding_size: int = Field(default=1536, description="Default dense embedding size")
    prefer_grpc: bool = False

    model_config = SettingsConfigDict(env_prefix="QDRANT_")


class AppSettings(BaseSettings):
    """Top-level application settings."""

    environment: Environment = Environment.DEV
    debug: bool = False
    service_name: str = "chunk-index"
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)
    qdrant: QdrantSettings = Field(default_factory=QdrantSettings)

    model_config = SettingsConfigDict(env_prefix="CHUNK_INDEX_", env_nested_delimiter="__")


class EnvironmentProfile(BaseModel):
    """Defaults an environment applies to settings the deployment left unset."""

    model_config = ConfigDict(frozen=True)

    debug: bool = False
    telemetry: Mapping[str, Any] = Field(default_factory=dict)
    logging: Mapping[str, Any] = Field(default_factory=dict)
    sentry: Mapping[str, Any] = Field(default_factory=dict)


ENVIRONMENT_PROFILES: Mapping[Environment, EnvironmentProfile] = {
    Environment.DEV: EnvironmentProfile(
        debug=True,
        telemetry={"exporter": "console", "sample_ratio": 1.0},
    ),
    Environment.STAGING: EnvironmentProfile(
        telemetry={"exporter": "otlp", "sample_ratio": 0.25},
        sentry={"traces_sample_rate": 0.25},
    ),
    Environment.PROD: EnvironmentProfile(
        telemetry={"exporter": "otlp", "sample_ratio": 0.05},
        logging={"level": "WARNING"},
        sentry={"traces_sample_rate": 0.05},
    ),
}

M = TypeVar("M", bound=BaseModel)


def _fill_unset(model: M, defaults: Mapping[str, Any]) -> M:
    """Copy ``defaults`` onto the fields of ``model`` nobody set explicitly."""
    missing = {key: value for key, value in defaults.items() if key not in model.model_fields_set}
    return model.model_copy(update=missing) if missing else model


def load_settings(environment: str | None = None) -> AppSettings:
    """Load settings, filling unset values from the environment's profile.

    The environment comes from ``environment`` or ``CHUNK_INDEX_ENV`` and
    defaults to ``dev``. Values set through ``CHUNK_INDEX_*`` variables win
    over the profile, so ``CHUNK_INDEX_TELEMETRY__EXPORTER=console`` keeps the
    console exporter in prod.

    Raises:
        RuntimeError: If the environment name or any variable is invalid.
    """
    env_value = (environment or os.getenv("CHUNK_INDEX_ENV", "dev")).lower()
    try:
        env = Environment(env_value)
        settings = AppSettings(environment=env)
    except ValueError as err:
        raise RuntimeError(f"Invalid configuration: {err}") from err

    profile = ENVIRONMENT_PROFILES[env]
    observability = settings.observability
    return _fill_unset(settings, {"debug": profile.debug}).model_copy(
        update={
            "telemetry": _fill_unset(settings.telemetry, profile.telemetry),
            "observability": observability.model_copy(
                update={
                    "logging": _fill_unset(observability.logging, profile.logging),
                    "sentry": _fill_unset(observability.sentry, profile.sentry),
                }
            ),
        }
    )


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Cached accessor used by production code."""
    return load_settings()


__all__ = [
    "ENVIRONMENT_PROFILES",
    "AppSettings",
    "Environment",
    "EnvironmentProfile",
    "LoggingSettings",
    "ObservabilitySettings",
    "QdrantSettings",
    "SentrySettings",
    "TelemetrySettings",
    "get_settings",
    "load_settings",
]
