"""Custom exceptions for the vector store subsystem.

Every failure reported by the Qdrant backend is translated into one of these
exceptions at the call boundary, carrying an RFC 7807 problem detail so request
handlers can serialise it directly.

The module defines:
- VectorStoreError: Base exception with RFC 7807 problem details
- CollectionAlreadyExistsError: Collection name already taken
- CollectionSetupError: Collection or field-index creation rejected
- InvalidVectorSizeError: Dense vector length outside the supported set
- PointNotFoundError: Point absent on update or membership edit
- DatasetNotFoundError: No configuration registered for a dataset
- BackendUnavailableError: Connection or authentication failure
- SearchFailedError / RecommendationFailedError / CountFailedError: Query rejected
- UpsertFailedError / PayloadUpdateFailedError: Write rejected

Examples:
    try:
        await store.upsert_point(point_id, vector, metadata, sparse)
    except InvalidVectorSizeError as e:
        return e.problem.to_response()
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from Chunk_Index_rev.utils.errors import FoundationError


class VectorStoreError(FoundationError):
    """Base class for vector store errors with RFC 7807 payloads."""

    def __init__(
        self,
        message: str,
        *,
        status: int,
        detail: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, status=status, detail=detail, extra=extra)


class CollectionAlreadyExistsError(VectorStoreError):
    """Raised when creating a collection whose name is already taken."""

    def __init__(self, collection: str) -> None:
        super().__init__(
            "Collection already exists",
            status=409,
            detail=f"Collection '{collection}' already exists.",
            extra={"collection": collection},
        )


class CollectionSetupError(VectorStoreError):
    """Raised when the backend rejects collection or field-index creation.

    A failure while creating field indexes leaves the collection in place; no
    rollback is attempted.
    """

    def __init__(self, message: str, *, collection: str, field: str | None = None) -> None:
        extra: dict[str, Any] = {"collection": collection}
        if field is not None:
            extra["field"] = field
        super().__init__(message, status=502, detail=message, extra=extra)


class InvalidVectorSizeError(VectorStoreError):
    """Raised when a dense vector length has no matching named vector space."""

    def __init__(self, size: int, *, supported: tuple[int, ...]) -> None:
        super().__init__(
            "Invalid embedding vector size",
            status=422,
            detail=(
                f"Vector of length {size} does not match any supported size "
                f"({', '.join(str(value) for value in supported)})."
            ),
            extra={"size": size, "supported": list(supported)},
        )
        self.size = size


class PointNotFoundError(VectorStoreError):
    """Raised when a point required by an update or membership edit is absent."""

    def __init__(self, point_id: UUID, *, collection: str) -> None:
        super().__init__(
            "Point not found",
            status=404,
            detail=f"Point '{point_id}' does not exist in collection '{collection}'.",
            extra={"point_id": str(point_id), "collection": collection},
        )
        self.point_id = point_id


class DatasetNotFoundError(VectorStoreError):
    """Raised when no configuration is registered for a dataset."""

    def __init__(self, dataset_id: UUID) -> None:
        super().__init__(
            "Dataset not found",
            status=404,
            detail=f"No vector store configuration registered for dataset '{dataset_id}'.",
            extra={"dataset_id": str(dataset_id)},
        )
        self.dataset_id = dataset_id


class BackendUnavailableError(VectorStoreError):
    """Raised when Qdrant cannot be reached or rejects the credentials.

    Applies to every operation: a refused connection during a search surfaces
    here rather than as :class:`SearchFailedError`.
    """

    def __init__(self, message: str = "Failed to connect to Qdrant") -> None:
        super().__init__(
            message,
            status=503,
            detail="Vector store backend is unavailable.",
        )


class SearchFailedError(VectorStoreError):
    def __init__(self, message: str = "Failed to search points on Qdrant") -> None:
        super().__init__(message, status=502, detail=message)


class RecommendationFailedError(VectorStoreError):
    """Raised when a recommendation query is rejected.

    The usual cause is a positive or negative example id that does not exist or
    has no vector in the configured space.
    """

    def __init__(
        self,
        message: str = (
            "Failed to recommend points from qdrant. "
            "Your are likely providing an invalid point id."
        ),
    ) -> None:
        super().__init__(message, status=400, detail=message)


class UpsertFailedError(VectorStoreError):
    def __init__(self, message: str = "Failed upserting chunk in qdrant") -> None:
        super().__init__(message, status=502, detail=message)


class PayloadUpdateFailedError(VectorStoreError):
    def __init__(self, message: str = "Failed updating chunk payload in qdrant") -> None:
        super().__init__(message, status=502, detail=message)


class CountFailedError(VectorStoreError):
    def __init__(self, message: str = "Failed to count points from qdrant") -> None:
        super().__init__(message, status=502, detail=message)


__all__ = [
    "BackendUnavailableError",
    "CollectionAlreadyExistsError",
    "CollectionSetupError",
    "CountFailedError",
    "DatasetNotFoundError",
    "InvalidVectorSizeError",
    "PayloadUpdateFailedError",
    "PointNotFoundError",
    "RecommendationFailedError",
    "SearchFailedError",
    "UpsertFailedError",
    "VectorStoreError",
]
