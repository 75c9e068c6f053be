"""Protocol definitions for the vector store collaborators."""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import AbstractAsyncContextManager
from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from qdrant_client import AsyncQdrantClient
from qdrant_client.http import models as qm

from .models import ChunkMetadata, GroupSearchResults, SearchResult, VectorQuery

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from Chunk_Index_rev.config.vector_store import DatasetConfiguration

    from .filters import ChunkFilter


class QdrantConnector(Protocol):
    """Opens a backend handle for one operation and closes it on exit."""

    def __call__(
        self, config: DatasetConfiguration
    ) -> AbstractAsyncContextManager[AsyncQdrantClient]:  # pragma: no cover - protocol
        ...


class FilterAssembler(Protocol):
    """Turns caller filter criteria into a dataset-scoped Qdrant filter."""

    async def __call__(
        self, filters: ChunkFilter | None, dataset_id: UUID
    ) -> qm.Filter:  # pragma: no cover - protocol
        ...


class ChunkStorePort(Protocol):
    """Operations every chunk point store exposes."""

    async def create_collection(self, *, quantize: bool = False) -> None:
        """Create the collection, its vector spaces and payload indexes."""

    async def upsert_point(
        self,
        point_id: UUID,
        dense_vector: Sequence[float],
        metadata: ChunkMetadata,
        sparse_vector: Sequence[tuple[int, float]],
        group_ids: Sequence[UUID] | None = None,
    ) -> None:
        """Insert one point and wait until the backend has applied it."""

    async def update_point(
        self,
        point_id: UUID,
        metadata: ChunkMetadata | None = None,
        dense_vector: Sequence[float] | None = None,
        group_ids: Sequence[UUID] | None = None,
        *,
        dataset_id: UUID,
        sparse_vector: Sequence[tuple[int, float]],
    ) -> None:
        """Replace a point's vectors and/or payload."""

    async def add_to_group(self, point_id: UUID, group_id: UUID) -> None:
        """Append ``group_id`` to the point's group membership."""

    async def remove_from_group(self, point_id: UUID, group_id: UUID) -> None:
        """Drop every occurrence of ``group_id`` from the point's membership."""

    async def search(
        self,
        vector: VectorQuery,
        query_filter: qm.Filter,
        limit: int,
        score_threshold: float | None = None,
        page: int = 1,
    ) -> list[SearchResult]:
        """Flat similarity search."""

    async def search_groups(
        self,
        vector: VectorQuery,
        query_filter: qm.Filter,
        limit: int,
        score_threshold: float | None = None,
        group_size: int = 1,
        page: int = 1,
    ) -> list[GroupSearchResults]:
        """Similarity search grouped by ``group_ids``."""

    async def recommend(
        self,
        positive_ids: Sequence[UUID],
        negative_ids: Sequence[UUID],
        filters: ChunkFilter | None,
        limit: int,
        dataset_id: UUID,
    ) -> list[UUID]:
        """Recommend points from positive and negative examples."""

    async def recommend_groups(
        self,
        positive_ids: Sequence[UUID],
        negative_ids: Sequence[UUID],
        filters: ChunkFilter | None,
        limit: int,
        group_size: int,
        dataset_id: UUID,
    ) -> list[GroupSearchResults]:
        """Recommend groups from positive and negative examples."""

    async def count_points(self, query_filter: qm.Filter) -> int:
        """Approximate number of points matching ``query_filter``."""
