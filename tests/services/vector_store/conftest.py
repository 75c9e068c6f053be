from __future__ import annotations

import asyncio
import copy
from collections.abc import Sequence
from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID

import grpc
import pytest
from qdrant_client.http import models as qm
from qdrant_client.http.exceptions import ResponseHandlingException, UnexpectedResponse

from Chunk_Index_rev.config.vector_store import DatasetConfiguration
from Chunk_Index_rev.services.vector_store.stores.qdrant import QdrantChunkStore

DATASET_ID = UUID("6f1c2b8e-4a8f-4d3b-9a51-0c4de8f3a001")


def backend_error(status_code: int = 500, content: bytes = b"boom") -> UnexpectedResponse:
    return UnexpectedResponse(
        status_code=status_code, reason_phrase="Error", content=content, headers={}
    )


def unreachable_error(reason: str = "refused") -> ResponseHandlingException:
    return ResponseHandlingException(ConnectionRefusedError(reason))


class RpcFailure(grpc.RpcError):
    """gRPC call failure carrying a status code, as raised by a grpc channel."""

    def __init__(self, code: grpc.StatusCode, details: str = "") -> None:
        super().__init__(details)
        self._code = code
        self._details = details

    def code(self) -> grpc.StatusCode:
        return self._code

    def details(self) -> str:
        return self._details


class FakeQdrantClient:
    """In-memory stand-in for ``AsyncQdrantClient`` recording every call."""

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, Any]] = {}
        self.indexes: list[tuple[str, str, qm.PayloadSchemaType]] = []
        self.points: dict[str, dict[str, Any]] = {}
        self.upserts: list[dict[str, Any]] = []
        self.overwrites: list[dict[str, Any]] = []
        self.query_calls: list[dict[str, Any]] = []
        self.group_calls: list[dict[str, Any]] = []
        self.count_calls: list[dict[str, Any]] = []
        self.query_response: list[qm.ScoredPoint] = []
        self.group_response: list[qm.PointGroup] = []
        self.failures: dict[str, BaseException] = {}
        self.fail_index_on: str | None = None
        self.closed = 0

    def _maybe_fail(self, operation: str) -> None:
        error = self.failures.get(operation)
        if error is not None:
            raise error

    def seed_point(self, point_id: UUID | str, payload: dict[str, Any] | None) -> None:
        self.points[str(point_id)] = {"vector": {}, "payload": payload}

    def payload_of(self, point_id: UUID | str) -> dict[str, Any] | None:
        return self.points[str(point_id)]["payload"]

    async def collection_exists(self, *, collection_name: str, **_: Any) -> bool:
        self._maybe_fail("collection_exists")
        return collection_name in self.collections

    async def create_collection(self, *, collection_name: str, **kwargs: Any) -> bool:
        self._maybe_fail("create_collection")
        self.collections[collection_name] = kwargs
        return True

    async def create_payload_index(
        self,
        *,
        collection_name: str,
        field_name: str,
        field_schema: qm.PayloadSchemaType,
        **_: Any,
    ) -> None:
        if self.fail_index_on == field_name:
            raise backend_error(400, b"index rejected")
        self.indexes.append((collection_name, field_name, field_schema))

    async def retrieve(
        self,
        *,
        collection_name: str,
        ids: Sequence[str],
        **_: Any,
    ) -> list[qm.Record]:
        self._maybe_fail("retrieve")
        records = [
            qm.Record(id=point_id, payload=copy.deepcopy(self.points[point_id]["payload"]))
            for point_id in ids
            if point_id in self.points
        ]
        # Yield after the snapshot so concurrent edits interleave like real round trips.
        await asyncio.sleep(0)
        return records

    async def upsert(
        self,
        *,
        collection_name: str,
        points: Sequence[qm.PointStruct],
        wait: bool = True,
        **_: Any,
    ) -> None:
        self._maybe_fail("upsert")
        self.upserts.append({"collection": collection_name, "points": list(points), "wait": wait})
        for point in points:
            self.points[str(point.id)] = {
                "vector": point.vector,
                "payload": copy.deepcopy(point.payload),
            }

    async def overwrite_payload(
        self,
        *,
        collection_name: str,
        payload: dict[str, Any],
        points: Sequence[str],
        wait: bool = True,
        **_: Any,
    ) -> None:
        self._maybe_fail("overwrite_payload")
        self.overwrites.append(
            {"collection": collection_name, "payload": payload, "points": list(points), "wait": wait}
        )
        for point_id in points:
            self.points.setdefault(point_id, {"vector": {}})["payload"] = copy.deepcopy(payload)

    async def count(self, *, collection_name: str, **kwargs: Any) -> qm.CountResult:
        self._maybe_fail("count")
        self.count_calls.append({"collection": collection_name, **kwargs})
        return qm.CountResult(count=len(self.points))

    async def query_points(self, *, collection_name: str, **kwargs: Any) -> qm.QueryResponse:
        self._maybe_fail("query_points")
        self.query_calls.append({"collection": collection_name, **kwargs})
        return qm.QueryResponse(points=list(self.query_response))

    async def query_points_groups(
        self, *, collection_name: str, **kwargs: Any
    ) -> qm.GroupsResult:
        self._maybe_fail("query_points_groups")
        self.group_calls.append({"collection": collection_name, **kwargs})
        return qm.GroupsResult(groups=list(self.group_response))

    async def close(self) -> None:
        self.closed += 1


@pytest.fixture()
def client() -> FakeQdrantClient:
    return FakeQdrantClient()


@pytest.fixture()
def connector(client: FakeQdrantClient):
    @asynccontextmanager
    async def _connect(config: DatasetConfiguration):
        try:
            yield client
        finally:
            await client.close()

    return _connect


@pytest.fixture()
def dataset_config(qdrant_url: str) -> DatasetConfiguration:
    return DatasetConfiguration(
        qdrant_url=qdrant_url,
        qdrant_collection_name="chunks-test",
        embedding_size=768,
    )


@pytest.fixture()
def store(dataset_config: DatasetConfiguration, connector) -> QdrantChunkStore:
    return QdrantChunkStore(dataset_config, connector=connector)


@pytest.fixture()
def dataset_id() -> UUID:
    return DATASET_ID


@pytest.fixture()
def make_backend_error():
    return backend_error


@pytest.fixture()
def make_unreachable_error():
    return unreachable_error


@pytest.fixture()
def make_rpc_error():
    return RpcFailure
