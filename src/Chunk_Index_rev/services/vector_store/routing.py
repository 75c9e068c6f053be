"""Selection of the named vector space a vector belongs to."""

from __future__ import annotations

from .errors import InvalidVectorSizeError
from .models import SPARSE_VECTOR_NAME, SUPPORTED_DIMENSIONS, DenseVector, SparseVector, VectorQuery


def dense_vector_name(size: int) -> str:
    """Return the named dense space for vectors of ``size`` dimensions.

    Raises:
        InvalidVectorSizeError: If ``size`` is not one of :data:`SUPPORTED_DIMENSIONS`.
    """
    if size not in SUPPORTED_DIMENSIONS:
        raise InvalidVectorSizeError(size, supported=SUPPORTED_DIMENSIONS)
    return f"{size}_vectors"


def vector_name_for(query: VectorQuery) -> str:
    if isinstance(query, SparseVector):
        return SPARSE_VECTOR_NAME
    if isinstance(query, DenseVector):
        return dense_vector_name(len(query.values))
    raise TypeError(f"Unsupported vector query type: {type(query).__name__}")


__all__ = ["dense_vector_name", "vector_name_for"]
