"""Backend connector for Qdrant.

Each logical operation opens its own :class:`~qdrant_client.AsyncQdrantClient`
and closes it when done; there is no pooling or caching, so every operation
pays connection setup latency.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import grpc
import structlog
from qdrant_client import AsyncQdrantClient
from qdrant_client.http.exceptions import ResponseHandlingException, UnexpectedResponse

from Chunk_Index_rev.config.settings import QdrantSettings
from Chunk_Index_rev.config.vector_store import DatasetConfiguration

from .errors import BackendUnavailableError, VectorStoreError

logger = structlog.get_logger(__name__)

# Exceptions raised by qdrant-client for rejected or failed backend calls.
BACKEND_ERRORS: tuple[type[BaseException], ...] = (
    UnexpectedResponse,
    ResponseHandlingException,
    grpc.RpcError,
)

# Transport and credential failures, whichever operation hit them.
_UNAVAILABLE_STATUS_CODES = frozenset({401, 403})
_UNAVAILABLE_GRPC_CODES = frozenset({grpc.StatusCode.UNAVAILABLE, grpc.StatusCode.UNAUTHENTICATED})


def connection_failure(error: BaseException) -> BackendUnavailableError | None:
    """Return :class:`BackendUnavailableError` when ``error`` means Qdrant is unreachable.

    Refused connections and timeouts surface as ``ResponseHandlingException``;
    a missing or wrong API key as HTTP 401/403 or gRPC ``UNAUTHENTICATED``.
    Any other error belongs to the operation and yields ``None``.
    """
    if isinstance(error, ResponseHandlingException):
        return BackendUnavailableError()
    if isinstance(error, UnexpectedResponse):
        if error.status_code in _UNAVAILABLE_STATUS_CODES:
            return BackendUnavailableError("Qdrant rejected the credentials")
        return None
    if isinstance(error, grpc.RpcError):
        code = getattr(error, "code", None)
        if callable(code) and code() in _UNAVAILABLE_GRPC_CODES:
            return BackendUnavailableError()
    return None


def translate_backend_error(error: BaseException, fallback: VectorStoreError) -> VectorStoreError:
    """Map ``error`` to BackendUnavailable when applicable, else ``fallback``."""
    return connection_failure(error) or fallback


def get_qdrant_connection(
    qdrant_url: str | None = None,
    qdrant_api_key: str | None = None,
    *,
    prefer_grpc: bool = False,
) -> AsyncQdrantClient:
    """Create a client handle, falling back to ``QDRANT_URL`` / ``QDRANT_API_KEY``.

    Raises:
        BackendUnavailableError: If the client cannot be constructed.
    """
    if qdrant_url is None or qdrant_api_key is None:
        defaults = QdrantSettings()
        qdrant_url = qdrant_url or defaults.url
        if qdrant_api_key is None and defaults.api_key is not None:
            qdrant_api_key = defaults.api_key.get_secret_value()
    try:
        return AsyncQdrantClient(url=qdrant_url, api_key=qdrant_api_key, prefer_grpc=prefer_grpc)
    except Exception as exc:
        logger.error("qdrant.connect.failed", url=qdrant_url, error=str(exc))
        raise BackendUnavailableError() from exc


@asynccontextmanager
async def qdrant_connection(config: DatasetConfiguration) -> AsyncIterator[AsyncQdrantClient]:
    client = get_qdrant_connection(config.qdrant_url, config.api_key_value())
    try:
        yield client
    finally:
        await client.close()


__all__ = [
    "BACKEND_ERRORS",
    "connection_failure",
    "get_qdrant_connection",
    "qdrant_connection",
    "translate_backend_error",
]
