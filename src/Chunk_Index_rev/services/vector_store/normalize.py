"""Conversion of backend identifiers and scores into domain results.

Key Responsibilities:
    - Decode point identifiers; numeric or malformed ids are dropped
    - Decode group identifiers; non-string ids are dropped, unparseable
      strings become the nil UUID
    - Decode stored ``group_ids`` lists permissively so one corrupt entry never
      blocks a membership edit

Side Effects:
    - None; all helpers are pure
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any
from uuid import UUID

import structlog

from .models import GroupSearchResults, SearchResult

logger = structlog.get_logger(__name__)

NIL_UUID = UUID(int=0)


def _parse_uuid_or_nil(value: object) -> UUID:
    if not isinstance(value, str):
        return NIL_UUID
    try:
        return UUID(value)
    except ValueError:
        return NIL_UUID


def parse_point_id(point_id: Any) -> UUID | None:
    """Return the UUID for a string point id, ``None`` for anything else."""
    if not isinstance(point_id, str):
        return None
    try:
        return UUID(point_id)
    except ValueError:
        return None


def parse_group_id(group_id: Any) -> UUID | None:
    if not isinstance(group_id, str):
        return None
    return _parse_uuid_or_nil(group_id)


def decode_group_ids(value: Any) -> list[UUID]:
    """Decode a stored ``group_ids`` payload value into UUIDs.

    Entries that are not valid UUID strings are kept as the nil UUID. A value
    that is not a list decodes to an empty list.
    """
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning("qdrant.payload.group_ids_not_list", value_type=type(value).__name__)
        return []
    return [_parse_uuid_or_nil(item) for item in value]


def payload_field(payload: Mapping[str, Any] | None, key: str, default: Any) -> Any:
    if not payload or key not in payload:
        return default
    return payload[key]


def to_search_results(points: Iterable[Any]) -> list[SearchResult]:
    results: list[SearchResult] = []
    for point in points:
        point_id = parse_point_id(getattr(point, "id", None))
        if point_id is None:
            continue
        results.append(SearchResult(point_id=point_id, score=float(point.score)))
    return results


def to_point_ids(points: Iterable[Any]) -> list[UUID]:
    return [result.point_id for result in to_search_results(points)]


def to_group_results(groups: Iterable[Any]) -> list[GroupSearchResults]:
    results: list[GroupSearchResults] = []
    for group in groups:
        group_id = parse_group_id(getattr(group, "id", None))
        if group_id is None:
            continue
        results.append(
            GroupSearchResults(group_id=group_id, hits=to_search_results(group.hits or []))
        )
    return results


__all__ = [
    "NIL_UUID",
    "decode_group_ids",
    "parse_group_id",
    "parse_point_id",
    "payload_field",
    "to_group_results",
    "to_point_ids",
    "to_search_results",
]
