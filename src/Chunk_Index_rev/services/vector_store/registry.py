"""Dataset registry for vector store configurations."""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from Chunk_Index_rev.config.settings import QdrantSettings
from Chunk_Index_rev.config.vector_store import DatasetConfiguration, VectorStoreConfig

from .errors import DatasetNotFoundError, InvalidVectorSizeError
from .models import SUPPORTED_DIMENSIONS


@dataclass(slots=True)
class DatasetRegistry:
    """In-memory registry of dataset configurations keyed by dataset id."""

    _datasets: dict[UUID, DatasetConfiguration] = field(default_factory=dict)

    def register(self, dataset_id: UUID, config: DatasetConfiguration) -> None:
        if config.embedding_size not in SUPPORTED_DIMENSIONS:
            raise InvalidVectorSizeError(config.embedding_size, supported=SUPPORTED_DIMENSIONS)
        self._datasets[dataset_id] = config

    def get(self, dataset_id: UUID) -> DatasetConfiguration:
        try:
            return self._datasets[dataset_id]
        except KeyError as exc:
            raise DatasetNotFoundError(dataset_id) from exc

    def __contains__(self, dataset_id: object) -> bool:
        return dataset_id in self._datasets

    def __len__(self) -> int:
        return len(self._datasets)

    @classmethod
    def from_config(
        cls,
        config: VectorStoreConfig,
        defaults: QdrantSettings | None = None,
    ) -> DatasetRegistry:
        """Register every dataset listed in ``config``, filling gaps from ``defaults``."""
        qdrant = defaults or QdrantSettings()
        registry = cls()
        for entry in config.datasets:
            registry.register(entry.dataset_id, entry.to_configuration(qdrant))
        return registry


__all__ = ["DatasetRegistry"]
