"""Vector storage service for chunk points."""

from .errors import (
    BackendUnavailableError,
    CollectionAlreadyExistsError,
    CollectionSetupError,
    CountFailedError,
    DatasetNotFoundError,
    InvalidVectorSizeError,
    PayloadUpdateFailedError,
    PointNotFoundError,
    RecommendationFailedError,
    SearchFailedError,
    UpsertFailedError,
    VectorStoreError,
)
from .filters import ChunkFilter, TimeRange, assemble_qdrant_filter
from .models import (
    SUPPORTED_DIMENSIONS,
    ChunkMetadata,
    DenseVector,
    GroupSearchResults,
    SearchResult,
    SparseVector,
    VectorQuery,
)
from .registry import DatasetRegistry
from .service import VectorStoreService
from .stores.qdrant import QdrantChunkStore
from .types import ChunkStorePort, FilterAssembler, QdrantConnector

__all__ = [
    "SUPPORTED_DIMENSIONS",
    "BackendUnavailableError",
    "ChunkFilter",
    "ChunkMetadata",
    "ChunkStorePort",
    "CollectionAlreadyExistsError",
    "CollectionSetupError",
    "CountFailedError",
    "DatasetNotFoundError",
    "DatasetRegistry",
    "DenseVector",
    "FilterAssembler",
    "GroupSearchResults",
    "InvalidVectorSizeError",
    "PayloadUpdateFailedError",
    "PointNotFoundError",
    "QdrantChunkStore",
    "QdrantConnector",
    "RecommendationFailedError",
    "SearchFailedError",
    "SearchResult",
    "SparseVector",
    "TimeRange",
    "UpsertFailedError",
    "VectorQuery",
    "VectorStoreError",
    "VectorStoreService",
    "assemble_qdrant_filter",
]
