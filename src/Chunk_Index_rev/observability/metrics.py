"""Prometheus metrics for Qdrant backend operations.

Key Responsibilities:
    - Define counters and histograms describing every backend round trip
    - Provide small recording helpers used by :mod:`.tracing`

Collaborators:
    - Upstream: :func:`Chunk_Index_rev.observability.tracing.instrumented`
    - Downstream: Prometheus scrapers via the default registry

Thread Safety:
    - Thread-safe: Prometheus client metrics use atomic updates
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

QDRANT_OPERATIONS_TOTAL = Counter(
    "chunk_index_qdrant_operations_total",
    "Qdrant operations grouped by operation and outcome",
    ["operation", "outcome"],
)
QDRANT_OPERATION_DURATION_SECONDS = Histogram(
    "chunk_index_qdrant_operation_duration_seconds",
    "Latency of Qdrant operations including connection setup",
    ["operation"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)
QDRANT_OPERATION_ERRORS_TOTAL = Counter(
    "chunk_index_qdrant_operation_errors_total",
    "Qdrant operation failures grouped by error type",
    ["operation", "error_type"],
)


def record_operation_success(operation: str, duration_seconds: float) -> None:
    QDRANT_OPERATIONS_TOTAL.labels(operation=operation, outcome="success").inc()
    QDRANT_OPERATION_DURATION_SECONDS.labels(operation=operation).observe(duration_seconds)


def record_operation_failure(operation: str, error_type: str, duration_seconds: float) -> None:
    QDRANT_OPERATIONS_TOTAL.labels(operation=operation, outcome="error").inc()
    QDRANT_OPERATION_ERRORS_TOTAL.labels(operation=operation, error_type=error_type).inc()
    QDRANT_OPERATION_DURATION_SECONDS.labels(operation=operation).observe(duration_seconds)


__all__ = [
    "QDRANT_OPERATIONS_TOTAL",
    "QDRANT_OPERATION_DURATION_SECONDS",
    "QDRANT_OPERATION_ERRORS_TOTAL",
    "record_operation_failure",
    "record_operation_success",
]
