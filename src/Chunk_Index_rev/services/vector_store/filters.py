"""Default assembly of Qdrant filters from chunk filter criteria.

The filter assembler is a pluggable collaborator (see
:class:`~Chunk_Index_rev.services.vector_store.types.FilterAssembler`). The
implementation here covers the payload schema written by this package and
always scopes the filter to one dataset.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field
from qdrant_client.http import models as qm

from .models import DATASET_ID, GROUP_IDS, LINK, METADATA, TAG_SET, TIME_STAMP
from .payloads import to_timestamp


class TimeRange(BaseModel):
    start: datetime | None = None
    end: datetime | None = None


class ChunkFilter(BaseModel):
    """Structured filter criteria supplied by search and recommend callers."""

    tag_set: list[str] | None = None
    link: list[str] | None = None
    # Keyword match values only; anything else fails here, not inside a query.
    metadata: dict[str, str | int | bool] | None = None
    time_range: TimeRange | None = None
    group_ids: list[UUID] | None = Field(default=None)


def _any_text(key: str, values: list[str]) -> qm.Filter:
    return qm.Filter(
        should=[qm.FieldCondition(key=key, match=qm.MatchText(text=value)) for value in values]
    )


async def assemble_qdrant_filter(filters: ChunkFilter | None, dataset_id: UUID) -> qm.Filter:
    """Translate ``filters`` into a Qdrant filter scoped to ``dataset_id``."""
    must: list[qm.Condition] = [
        qm.FieldCondition(key=DATASET_ID, match=qm.MatchValue(value=str(dataset_id)))
    ]
    if filters is None:
        return qm.Filter(must=must)

    if filters.tag_set:
        must.append(_any_text(TAG_SET, filters.tag_set))
    if filters.link:
        must.append(_any_text(LINK, filters.link))
    for key, value in (filters.metadata or {}).items():
        must.append(qm.FieldCondition(key=f"{METADATA}.{key}", match=qm.MatchValue(value=value)))
    if filters.time_range and (filters.time_range.start or filters.time_range.end):
        must.append(
            qm.FieldCondition(
                key=TIME_STAMP,
                range=qm.Range(
                    gte=to_timestamp(filters.time_range.start) if filters.time_range.start else None,
                    lte=to_timestamp(filters.time_range.end) if filters.time_range.end else None,
                ),
            )
        )
    if filters.group_ids:
        must.append(
            qm.FieldCondition(
                key=GROUP_IDS,
                match=qm.MatchAny(any=[str(group_id) for group_id in filters.group_ids]),
            )
        )
    return qm.Filter(must=must)


__all__ = ["ChunkFilter", "TimeRange", "assemble_qdrant_filter"]
