"""Vector store service resolving datasets to chunk stores.

Key Responsibilities:
    - Resolve a dataset id to its registered :class:`DatasetConfiguration`
    - Hand out :class:`QdrantChunkStore` instances bound to that configuration
    - Bootstrap a dataset's collection

Collaborators:
    - Upstream: Ingestion and search handlers
    - Downstream: :class:`DatasetRegistry`, :class:`QdrantChunkStore`

Side Effects:
    - ``from_settings`` configures process-wide logging, tracing and Sentry
    - ``bootstrap`` creates a collection and its payload indexes in Qdrant

Example:
    >>> service = VectorStoreService.from_settings()
    >>> store = service.store_for(dataset_id)
    >>> hits = await store.search(DenseVector(values=embedding), query_filter, limit=10)
"""

from __future__ import annotations

from pathlib import Path
from uuid import UUID

import structlog

from Chunk_Index_rev.config.settings import AppSettings, get_settings
from Chunk_Index_rev.config.vector_store import load_vector_store_config
from Chunk_Index_rev.observability import setup_observability

from .registry import DatasetRegistry
from .stores.qdrant import QdrantChunkStore
from .types import FilterAssembler, QdrantConnector

logger = structlog.get_logger(__name__)


class VectorStoreService:
    """Facade over the dataset registry and the Qdrant chunk store.

    Stores are cheap to build and hold no connection, so a new one is
    returned on every call.
    """

    def __init__(
        self,
        registry: DatasetRegistry,
        *,
        connector: QdrantConnector | None = None,
        filter_assembler: FilterAssembler | None = None,
    ) -> None:
        self.registry = registry
        self._connector = connector
        self._filter_assembler = filter_assembler

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings | None = None,
        *,
        config_path: Path | None = None,
        connector: QdrantConnector | None = None,
        filter_assembler: FilterAssembler | None = None,
    ) -> VectorStoreService:
        """Process entry point: set up observability, then register every dataset.

        Datasets are read from ``vector_store.yaml`` (``config_path`` or the
        default location) with gaps filled from ``settings.qdrant``.
        """
        settings = settings or get_settings()
        setup_observability(settings)
        registry = DatasetRegistry.from_config(
            load_vector_store_config(config_path), settings.qdrant
        )
        logger.info(
            "vector_store.service.ready",
            environment=settings.environment.value,
            datasets=len(registry),
        )
        return cls(registry, connector=connector, filter_assembler=filter_assembler)

    def store_for(self, dataset_id: UUID) -> QdrantChunkStore:
        """Return a store bound to ``dataset_id``.

        Raises:
            DatasetNotFoundError: If the dataset is not registered.
        """
        config = self.registry.get(dataset_id)
        return QdrantChunkStore(
            config,
            connector=self._connector,
            filter_assembler=self._filter_assembler,
        )

    async def bootstrap(self, dataset_id: UUID, *, quantize: bool = False) -> None:
        store = self.store_for(dataset_id)
        logger.info(
            "vector_store.bootstrap",
            dataset_id=str(dataset_id),
            collection=store.collection,
            quantize=quantize,
        )
        await store.create_collection(quantize=quantize)


__all__ = ["VectorStoreService"]
