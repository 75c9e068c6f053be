"""Dataset configuration schema and loaders for the vector store."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any
from uuid import UUID

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError

from .settings import QdrantSettings

DEFAULT_VECTOR_STORE_CONFIG = Path("config/vector_store.yaml")


class DatasetConfiguration(BaseModel):
    """Immutable per-call configuration describing where a dataset's points live.

    Every store operation receives one of these explicitly; nothing about the
    backend connection is held in module or process state.
    """

    model_config = ConfigDict(frozen=True)

    qdrant_url: str
    qdrant_api_key: SecretStr | None = None
    qdrant_collection_name: str
    embedding_size: int = 1536

    @classmethod
    def from_settings(
        cls,
        settings: QdrantSettings | None = None,
        **overrides: Any,
    ) -> DatasetConfiguration:
        """Build a configuration from environment defaults plus explicit overrides."""
        qdrant = settings or QdrantSettings()
        values: dict[str, Any] = {
            "qdrant_url": qdrant.url,
            "qdrant_api_key": qdrant.api_key,
            "qdrant_collection_name": qdrant.collection,
            "embedding_size": qdrant.embedding_size,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls.model_validate(values)

    def api_key_value(self) -> str | None:
        if self.qdrant_api_key is None:
            return None
        return self.qdrant_api_key.get_secret_value()


class DatasetEntry(BaseModel):
    dataset_id: UUID
    collection: str | None = None
    embedding_size: int | None = None
    url: str | None = None
    api_key: SecretStr | None = None

    def to_configuration(self, defaults: QdrantSettings) -> DatasetConfiguration:
        return DatasetConfiguration.from_settings(
            defaults,
            qdrant_url=self.url,
            qdrant_api_key=self.api_key,
            qdrant_collection_name=self.collection,
            embedding_size=self.embedding_size,
        )


class VectorStoreConfig(BaseModel):
    datasets: list[DatasetEntry] = Field(default_factory=list)

    def dataset_for(self, dataset_id: UUID) -> DatasetEntry | None:
        for entry in self.datasets:
            if entry.dataset_id == dataset_id:
                return entry
        return None


def load_vector_store_config(path: Path | None = None) -> VectorStoreConfig:
    target = path or DEFAULT_VECTOR_STORE_CONFIG
    if not target.exists():
        return VectorStoreConfig()
    with target.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    data = migrate_vector_store_config(data)
    try:
        return VectorStoreConfig.model_validate(data)
    except ValidationError as exc:  # pragma: no cover - forwarded to caller
        raise ValueError(str(exc)) from exc


def migrate_vector_store_config(data: Mapping[str, Any]) -> dict[str, Any]:
    """Migrate legacy configuration structures into the current schema.

    Older files nested everything under ``vector_store`` and keyed datasets by
    id instead of listing them.
    """
    migrated: dict[str, Any] = dict(data)
    if "vector_store" in migrated:
        migrated = dict(migrated["vector_store"])
    datasets = migrated.get("datasets")
    if isinstance(datasets, Mapping):
        migrated["datasets"] = [
            {"dataset_id": dataset_id, **dict(entry or {})}
            for dataset_id, entry in datasets.items()
        ]
    migrated.setdefault("datasets", [])
    return migrated


__all__ = [
    "DEFAULT_VECTOR_STORE_CONFIG",
    "DatasetConfiguration",
    "DatasetEntry",
    "VectorStoreConfig",
    "load_vector_store_config",
    "migrate_vector_store_config",
]
