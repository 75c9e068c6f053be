"""Qdrant-backed implementation of :class:`ChunkStorePort`.

Key Responsibilities:
    - Bootstrap a collection with five dense spaces, one sparse space and the
      payload indexes used for filtering
    - Insert and update chunk points, routing dense vectors by dimensionality
    - Edit group membership by rewriting the whole payload
    - Dispatch flat and grouped search and recommendation queries

Collaborators:
    - Upstream: Ingestion and search handlers, usually through
      :class:`~Chunk_Index_rev.services.vector_store.service.VectorStoreService`
    - Downstream: ``qdrant_client.AsyncQdrantClient`` opened per operation by a
      :class:`~Chunk_Index_rev.services.vector_store.types.QdrantConnector`

Consistency:
    - ``update_point`` and the membership edits are read-modify-write sequences
      (retrieve, rebuild payload, overwrite) without compare-and-swap. Two
      concurrent edits of one point are last-writer-wins on the whole payload,
      so one of them can be lost.
    - No retries or timeouts are applied here; failures surface immediately.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any
from uuid import UUID

import structlog
from qdrant_client import AsyncQdrantClient
from qdrant_client.http import models as qm

from Chunk_Index_rev.config.vector_store import DatasetConfiguration
from Chunk_Index_rev.observability import capture_backend_failure, instrumented

from ..connection import BACKEND_ERRORS, qdrant_connection, translate_backend_error
from ..errors import (
    BackendUnavailableError,
    CollectionAlreadyExistsError,
    CollectionSetupError,
    CountFailedError,
    PayloadUpdateFailedError,
    PointNotFoundError,
    RecommendationFailedError,
    SearchFailedError,
    UpsertFailedError,
    VectorStoreError,
)
from ..filters import ChunkFilter, assemble_qdrant_filter
from ..models import (
    FIELD_INDEXES,
    GROUP_IDS,
    PAYLOAD_HNSW_M,
    SEARCH_PAGE_SIZE,
    SPARSE_VECTOR_NAME,
    SUPPORTED_DIMENSIONS,
    ChunkMetadata,
    DenseVector,
    GroupSearchResults,
    SearchResult,
    SparseVector,
    VectorQuery,
)
from ..normalize import decode_group_ids, payload_field, to_group_results, to_point_ids, to_search_results
from ..payloads import build_payload, copy_payload, group_id_strings
from ..routing import dense_vector_name, vector_name_for
from ..types import ChunkStorePort, FilterAssembler, QdrantConnector

logger = structlog.get_logger(__name__)


def translate_collection_error(error: BaseException, collection: str) -> VectorStoreError:
    """Classify a rejected ``create_collection`` call.

    Qdrant reports a taken name with HTTP 409 over REST; over gRPC only the
    message text says so, hence the substring fallback. Anything else is a
    generic setup failure.
    """
    if getattr(error, "status_code", None) == 409:
        return CollectionAlreadyExistsError(collection)
    if "already exists" in str(error).lower():
        return CollectionAlreadyExistsError(collection)
    return CollectionSetupError("Failed to create Collection", collection=collection)


class QdrantChunkStore(ChunkStorePort):
    """Chunk point store bound to one dataset configuration."""

    def __init__(
        self,
        config: DatasetConfiguration,
        *,
        connector: QdrantConnector | None = None,
        filter_assembler: FilterAssembler | None = None,
    ) -> None:
        self.config = config
        self._connect: QdrantConnector = connector or qdrant_connection
        self._assemble_filter: FilterAssembler = filter_assembler or assemble_qdrant_filter

    @property
    def collection(self) -> str:
        return self.config.qdrant_collection_name

    # ------------------------------------------------------------------
    # Collection bootstrap
    # ------------------------------------------------------------------
    @instrumented("create_collection")
    async def create_collection(self, *, quantize: bool = False) -> None:
        """Create the collection and its payload indexes.

        Args:
            quantize: Apply binary quantization (kept in RAM) to every dense
                space except the smallest one.

        Raises:
            CollectionAlreadyExistsError: If the name is already taken.
            CollectionSetupError: If creation or any field index is rejected.
                Indexes created before the failure are kept.
        """
        async with self._connect(self.config) as client:
            try:
                exists = await client.collection_exists(collection_name=self.collection)
            except BACKEND_ERRORS as exc:
                raise translate_backend_error(
                    exc, BackendUnavailableError("Failed to inspect Qdrant collection")
                ) from exc
            if exists:
                raise CollectionAlreadyExistsError(self.collection)

            try:
                await client.create_collection(
                    collection_name=self.collection,
                    vectors_config=self._build_vectors_config(quantize),
                    sparse_vectors_config={
                        SPARSE_VECTOR_NAME: qm.SparseVectorParams(
                            index=qm.SparseIndexParams(on_disk=False)
                        )
                    },
                    hnsw_config=qm.HnswConfigDiff(m=0, payload_m=PAYLOAD_HNSW_M),
                )
            except BACKEND_ERRORS as exc:
                logger.error(
                    "qdrant.collection.create_failed",
                    collection=self.collection,
                    error=str(exc),
                )
                raise translate_backend_error(
                    exc, translate_collection_error(exc, self.collection)
                ) from exc

            for field_name, schema in FIELD_INDEXES:
                try:
                    await client.create_payload_index(
                        collection_name=self.collection,
                        field_name=field_name,
                        field_schema=qm.PayloadSchemaType(schema),
                    )
                except BACKEND_ERRORS as exc:
                    logger.error(
                        "qdrant.collection.index_failed",
                        collection=self.collection,
                        field=field_name,
                        error=str(exc),
                    )
                    raise translate_backend_error(
                        exc,
                        CollectionSetupError(
                            "Failed to create index", collection=self.collection, field=field_name
                        ),
                    ) from exc

        logger.info("qdrant.collection.created", collection=self.collection, quantize=quantize)

    def _build_vectors_config(self, quantize: bool) -> dict[str, qm.VectorParams]:
        smallest = min(SUPPORTED_DIMENSIONS)
        quantization = (
            qm.BinaryQuantization(binary=qm.BinaryQuantizationConfig(always_ram=True))
            if quantize
            else None
        )
        return {
            dense_vector_name(size): qm.VectorParams(
                size=size,
                distance=qm.Distance.COSINE,
                quantization_config=quantization if size != smallest else None,
            )
            for size in SUPPORTED_DIMENSIONS
        }

    # ------------------------------------------------------------------
    # Point lifecycle
    # ------------------------------------------------------------------
    @instrumented("upsert_point")
    async def upsert_point(
        self,
        point_id: UUID,
        dense_vector: Sequence[float],
        metadata: ChunkMetadata,
        sparse_vector: Sequence[tuple[int, float]],
        group_ids: Sequence[UUID] | None = None,
    ) -> None:
        """Insert one point and block until Qdrant has applied it."""
        vector_name = dense_vector_name(len(dense_vector))
        payload = build_payload(metadata, group_ids=group_id_strings(group_ids or []))
        point = qm.PointStruct(
            id=str(point_id),
            vector=self._point_vectors(vector_name, dense_vector, sparse_vector),
            payload=payload,
        )

        async with self._connect(self.config) as client:
            try:
                await client.upsert(collection_name=self.collection, points=[point], wait=True)
            except BACKEND_ERRORS as exc:
                message = f"Failed inserting chunk to qdrant {exc!r}"
                capture_backend_failure(message)
                logger.error(
                    "qdrant.upsert.failed",
                    collection=self.collection,
                    point_id=str(point_id),
                    error=str(exc),
                )
                raise translate_backend_error(exc, UpsertFailedError(message)) from exc

    @instrumented("update_point")
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
        """Replace a point's payload, and its vectors when a new one is given.

        The payload is resolved in order: fresh ``metadata`` (group ids taken
        from ``group_ids``, else the stored ones, else empty); otherwise the
        stored payload verbatim; otherwise :class:`PointNotFoundError`.

        With ``dense_vector`` the point is re-upserted without waiting and the
        payload-only overwrite is skipped. ``sparse_vector`` is written together
        with it and has no default: an empty sequence clears the stored sparse
        vector. The whole payload is always replaced, and the fetch/overwrite
        pair is not atomic.
        """
        vectors = (
            self._point_vectors(dense_vector_name(len(dense_vector)), dense_vector, sparse_vector)
            if dense_vector is not None
            else None
        )

        async with self._connect(self.config) as client:
            current = await self._fetch_point(client, point_id)

            if metadata is not None:
                if group_ids is not None:
                    resolved_groups: Any = group_id_strings(group_ids)
                elif current is not None:
                    resolved_groups = payload_field(current.payload, GROUP_IDS, [])
                else:
                    resolved_groups = []
                payload = build_payload(metadata, group_ids=resolved_groups, dataset_id=dataset_id)
            elif current is not None:
                payload = copy_payload(current.payload)
            else:
                raise PointNotFoundError(point_id, collection=self.collection)

            if vectors is not None:
                point = qm.PointStruct(
                    id=str(point_id),
                    vector=vectors,
                    payload=payload,
                )
                try:
                    await client.upsert(collection_name=self.collection, points=[point], wait=False)
                except BACKEND_ERRORS as exc:
                    logger.error(
                        "qdrant.update.upsert_failed",
                        collection=self.collection,
                        point_id=str(point_id),
                        error=str(exc),
                    )
                    raise translate_backend_error(exc, UpsertFailedError()) from exc
                return

            await self._overwrite_payload(client, point_id, payload)

    @instrumented("count_points")
    async def count_points(self, query_filter: qm.Filter) -> int:
        """Approximate count of points matching ``query_filter``."""
        async with self._connect(self.config) as client:
            try:
                result = await client.count(
                    collection_name=self.collection,
                    count_filter=query_filter,
                    exact=False,
                )
            except BACKEND_ERRORS as exc:
                logger.info("qdrant.count.failed", collection=self.collection, error=str(exc))
                raise translate_backend_error(exc, CountFailedError()) from exc
        return int(result.count)

    # ------------------------------------------------------------------
    # Group membership
    # ------------------------------------------------------------------
    @instrumented("add_to_group")
    async def add_to_group(self, point_id: UUID, group_id: UUID) -> None:
        """Append ``group_id`` to the point's ``group_ids``.

        Duplicates are not filtered: adding the same group twice stores it
        twice. Concurrent edits of the same point may lose an update.
        """
        async with self._connect(self.config) as client:
            current = await self._require_point(client, point_id)
            group_ids = decode_group_ids(payload_field(current.payload, GROUP_IDS, None))
            group_ids.append(group_id)
            payload = copy_payload(current.payload, group_ids=group_id_strings(group_ids))
            await self._overwrite_payload(client, point_id, payload)

    @instrumented("remove_from_group")
    async def remove_from_group(self, point_id: UUID, group_id: UUID) -> None:
        """Remove every occurrence of ``group_id``; absent ids are a no-op.

        Concurrent edits of the same point may lose an update.
        """
        async with self._connect(self.config) as client:
            current = await self._require_point(client, point_id)
            group_ids = [
                existing
                for existing in decode_group_ids(payload_field(current.payload, GROUP_IDS, None))
                if existing != group_id
            ]
            payload = copy_payload(current.payload, group_ids=group_id_strings(group_ids))
            await self._overwrite_payload(client, point_id, payload)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------
    @instrumented("search")
    async def search(
        self,
        vector: VectorQuery,
        query_filter: qm.Filter,
        limit: int,
        score_threshold: float | None = None,
        page: int = 1,
    ) -> list[SearchResult]:
        """Flat similarity search.

        The offset advances by a fixed ten points per page whatever ``limit``
        is, so ``page=2, limit=5`` skips ten hits, not five.
        """
        using = vector_name_for(vector)
        offset = self._page_offset(page)
        async with self._connect(self.config) as client:
            try:
                response = await client.query_points(
                    collection_name=self.collection,
                    query=self._query_input(vector),
                    using=using,
                    query_filter=query_filter,
                    limit=limit,
                    offset=offset,
                    score_threshold=score_threshold,
                    with_payload=False,
                )
            except BACKEND_ERRORS as exc:
                logger.error(
                    "qdrant.search.failed",
                    collection=self.collection,
                    vector_name=using,
                    error=str(exc),
                )
                raise translate_backend_error(exc, SearchFailedError()) from exc
        return to_search_results(response.points)

    @instrumented("search_groups")
    async def search_groups(
        self,
        vector: VectorQuery,
        query_filter: qm.Filter,
        limit: int,
        score_threshold: float | None = None,
        group_size: int = 1,
        page: int = 1,
    ) -> list[GroupSearchResults]:
        """Similarity search grouped by ``group_ids``.

        Grouped queries have no offset, so ``limit * page`` groups are
        requested and the caller slices the page it needs.
        """
        using = vector_name_for(vector)
        self._page_offset(page)
        async with self._connect(self.config) as client:
            try:
                response = await client.query_points_groups(
                    collection_name=self.collection,
                    group_by=GROUP_IDS,
                    query=self._query_input(vector),
                    using=using,
                    query_filter=query_filter,
                    limit=limit * page,
                    group_size=group_size,
                    score_threshold=score_threshold,
                    with_payload=False,
                )
            except BACKEND_ERRORS as exc:
                logger.error(
                    "qdrant.search_groups.failed",
                    collection=self.collection,
                    vector_name=using,
                    error=str(exc),
                )
                raise translate_backend_error(exc, SearchFailedError()) from exc
        return to_group_results(response.groups)

    # ------------------------------------------------------------------
    # Recommendation
    # ------------------------------------------------------------------
    @instrumented("recommend")
    async def recommend(
        self,
        positive_ids: Sequence[UUID],
        negative_ids: Sequence[UUID],
        filters: ChunkFilter | None,
        limit: int,
        dataset_id: UUID,
    ) -> list[UUID]:
        """Recommend point ids using the dataset's configured embedding space."""
        using = dense_vector_name(self.config.embedding_size)
        query_filter = await self._assemble_filter(filters, dataset_id)
        async with self._connect(self.config) as client:
            try:
                response = await client.query_points(
                    collection_name=self.collection,
                    query=self._recommend_query(positive_ids, negative_ids),
                    using=using,
                    query_filter=query_filter,
                    limit=limit,
                    with_payload=True,
                )
            except BACKEND_ERRORS as exc:
                logger.info(
                    "qdrant.recommend.failed",
                    collection=self.collection,
                    vector_name=using,
                    error=str(exc),
                )
                raise translate_backend_error(exc, RecommendationFailedError()) from exc
        return to_point_ids(response.points)

    @instrumented("recommend_groups")
    async def recommend_groups(
        self,
        positive_ids: Sequence[UUID],
        negative_ids: Sequence[UUID],
        filters: ChunkFilter | None,
        limit: int,
        group_size: int,
        dataset_id: UUID,
    ) -> list[GroupSearchResults]:
        using = dense_vector_name(self.config.embedding_size)
        query_filter = await self._assemble_filter(filters, dataset_id)
        async with self._connect(self.config) as client:
            try:
                response = await client.query_points_groups(
                    collection_name=self.collection,
                    group_by=GROUP_IDS,
                    query=self._recommend_query(positive_ids, negative_ids),
                    using=using,
                    query_filter=query_filter,
                    limit=limit,
                    group_size=group_size,
                    with_payload=False,
                )
            except BACKEND_ERRORS as exc:
                logger.info(
                    "qdrant.recommend_groups.failed",
                    collection=self.collection,
                    vector_name=using,
                    error=str(exc),
                )
                raise translate_backend_error(exc, RecommendationFailedError()) from exc
        return to_group_results(response.groups)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _fetch_point(self, client: AsyncQdrantClient, point_id: UUID) -> qm.Record | None:
        try:
            records = await client.retrieve(
                collection_name=self.collection,
                ids=[str(point_id)],
                with_payload=True,
                with_vectors=False,
            )
        except BACKEND_ERRORS as exc:
            logger.error(
                "qdrant.retrieve.failed",
                collection=self.collection,
                point_id=str(point_id),
                error=str(exc),
            )
            raise translate_backend_error(
                exc, SearchFailedError("Failed to fetch point from qdrant")
            ) from exc
        return records[0] if records else None

    async def _require_point(self, client: AsyncQdrantClient, point_id: UUID) -> qm.Record:
        current = await self._fetch_point(client, point_id)
        if current is None:
            raise PointNotFoundError(point_id, collection=self.collection)
        return current

    async def _overwrite_payload(
        self,
        client: AsyncQdrantClient,
        point_id: UUID,
        payload: dict[str, Any],
    ) -> None:
        try:
            await client.overwrite_payload(
                collection_name=self.collection,
                payload=payload,
                points=[str(point_id)],
                wait=False,
            )
        except BACKEND_ERRORS as exc:
            logger.error(
                "qdrant.payload.overwrite_failed",
                collection=self.collection,
                point_id=str(point_id),
                error=str(exc),
            )
            raise translate_backend_error(exc, PayloadUpdateFailedError()) from exc

    def _point_vectors(
        self,
        vector_name: str,
        dense_vector: Sequence[float],
        sparse_vector: Sequence[tuple[int, float]],
    ) -> dict[str, Any]:
        sparse = SparseVector(entries=sparse_vector)
        return {
            vector_name: [float(value) for value in dense_vector],
            SPARSE_VECTOR_NAME: qm.SparseVector(indices=sparse.indices, values=sparse.values),
        }

    def _query_input(self, vector: VectorQuery) -> list[float] | qm.SparseVector:
        if isinstance(vector, SparseVector):
            return qm.SparseVector(indices=vector.indices, values=vector.values)
        if isinstance(vector, DenseVector):
            return [float(value) for value in vector.values]
        raise TypeError(f"Unsupported vector query type: {type(vector).__name__}")

    def _recommend_query(
        self, positive_ids: Sequence[UUID], negative_ids: Sequence[UUID]
    ) -> qm.RecommendQuery:
        return qm.RecommendQuery(
            recommend=qm.RecommendInput(
                positive=[str(point_id) for point_id in positive_ids],
                negative=[str(point_id) for point_id in negative_ids],
            )
        )

    @staticmethod
    def _page_offset(page: int) -> int:
        if page < 1:
            raise ValueError("page must be at least 1")
        return (page - 1) * SEARCH_PAGE_SIZE


__all__ = ["QdrantChunkStore", "translate_collection_error"]
