"""Domain models for the vector store subsystem."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, TypeAlias
from uuid import UUID

SUPPORTED_DIMENSIONS: tuple[int, ...] = (384, 512, 768, 1024, 1536)
SPARSE_VECTOR_NAME = "sparse_vectors"

# Payload schema shared with every consumer reading points directly.
TAG_SET = "tag_set"
LINK = "link"
METADATA = "metadata"
TIME_STAMP = "time_stamp"
DATASET_ID = "dataset_id"
GROUP_IDS = "group_ids"

PAYLOAD_FIELDS: tuple[str, ...] = (TAG_SET, LINK, METADATA, TIME_STAMP, DATASET_ID, GROUP_IDS)

# (field, schema) pairs in creation order; schema names match Qdrant's payload types.
FIELD_INDEXES: tuple[tuple[str, str], ...] = (
    (LINK, "text"),
    (TAG_SET, "text"),
    (DATASET_ID, "keyword"),
    (METADATA, "keyword"),
    (TIME_STAMP, "integer"),
    (GROUP_IDS, "keyword"),
)

# Stride used for flat search offsets, independent of the requested limit.
SEARCH_PAGE_SIZE = 10
PAYLOAD_HNSW_M = 16


@dataclass(slots=True, frozen=True)
class ChunkMetadata:
    """Chunk attributes used to build a point payload.

    ``tag_set`` and ``link`` are comma joined strings as stored by the
    ingestion layer; they are split into lists when the payload is built.
    """

    dataset_id: UUID
    tag_set: str | None = None
    link: str | None = None
    metadata: Any | None = None
    time_stamp: datetime | None = None


@dataclass(slots=True, frozen=True)
class DenseVector:
    """Dense query or point vector; its length selects the named space."""

    values: Sequence[float]

    def __len__(self) -> int:
        return len(self.values)


@dataclass(slots=True, frozen=True)
class SparseVector:
    """Sparse vector expressed as ``(index, value)`` pairs."""

    entries: Sequence[tuple[int, float]] = field(default_factory=tuple)

    @property
    def indices(self) -> list[int]:
        return [int(index) for index, _ in self.entries]

    @property
    def values(self) -> list[float]:
        return [float(value) for _, value in self.entries]


VectorQuery: TypeAlias = DenseVector | SparseVector


@dataclass(slots=True, frozen=True)
class SearchResult:
    """A single scored point returned by search or recommendation."""

    point_id: UUID
    score: float


@dataclass(slots=True, frozen=True)
class GroupSearchResults:
    """Hits that share one ``group_ids`` value, in backend order."""

    group_id: UUID
    hits: list[SearchResult] = field(default_factory=list)


__all__ = [
    "DATASET_ID",
    "FIELD_INDEXES",
    "GROUP_IDS",
    "LINK",
    "METADATA",
    "PAYLOAD_FIELDS",
    "PAYLOAD_HNSW_M",
    "SEARCH_PAGE_SIZE",
    "SPARSE_VECTOR_NAME",
    "SUPPORTED_DIMENSIONS",
    "TAG_SET",
    "TIME_STAMP",
    "ChunkMetadata",
    "DenseVector",
    "GroupSearchResults",
    "SearchResult",
    "SparseVector",
    "VectorQuery",
]
