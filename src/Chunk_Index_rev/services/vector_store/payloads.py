"""Payload construction for chunk points.

Payloads are always written whole; Qdrant never receives a partial field patch
from this package. Two builders exist: one from fresh :class:`ChunkMetadata`
and one that copies a fetched point's current values.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any
from uuid import UUID

from .models import (
    DATASET_ID,
    GROUP_IDS,
    LINK,
    METADATA,
    TAG_SET,
    TIME_STAMP,
    ChunkMetadata,
)

_COPIED_FIELDS = (TAG_SET, LINK, METADATA, TIME_STAMP, DATASET_ID)


def split_joined(value: str | None) -> list[str]:
    """Split a comma joined string; ``None`` yields ``[""]``, never ``[]``."""
    return (value if value is not None else "").split(",")


def to_timestamp(value: datetime | None) -> int:
    """Seconds since the epoch; naive datetimes are read as UTC."""
    if value is None:
        return 0
    if value.tzinfo is None:
        return calendar.timegm(value.timetuple())
    return int(value.timestamp())


def group_id_strings(group_ids: Iterable[UUID]) -> list[str]:
    return [str(group_id) for group_id in group_ids]


def build_payload(
    metadata: ChunkMetadata,
    *,
    group_ids: Any,
    dataset_id: UUID | None = None,
) -> dict[str, Any]:
    """Build a complete payload from chunk metadata.

    Args:
        metadata: Chunk attributes.
        group_ids: Already encoded ``group_ids`` value, written verbatim.
        dataset_id: Overrides ``metadata.dataset_id`` when given.
    """
    owner = dataset_id if dataset_id is not None else metadata.dataset_id
    return {
        TAG_SET: split_joined(metadata.tag_set),
        LINK: split_joined(metadata.link),
        METADATA: metadata.metadata if metadata.metadata is not None else {},
        TIME_STAMP: to_timestamp(metadata.time_stamp),
        DATASET_ID: str(owner),
        GROUP_IDS: group_ids,
    }


def copy_payload(
    current: Mapping[str, Any] | None,
    *,
    group_ids: Any | None = None,
) -> dict[str, Any]:
    """Reproduce a fetched payload, optionally replacing ``group_ids``.

    Missing fields become ``""``; a missing ``group_ids`` becomes ``[]``.
    """
    source = current or {}
    payload = {field: source.get(field, "") for field in _COPIED_FIELDS}
    payload[GROUP_IDS] = group_ids if group_ids is not None else source.get(GROUP_IDS, [])
    return payload


__all__ = [
    "build_payload",
    "copy_payload",
    "group_id_strings",
    "split_joined",
    "to_timestamp",
]
