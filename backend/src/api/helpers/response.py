"""Shape entries the way content API clients expect them."""
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

from models.entry import Entry


def _timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def serialize_entry(
    entry: Entry,
    populated: Mapping[str, Sequence[Entry]] | None = None,
) -> dict[str, Any]:
    """
    Flatten an entry into `id`, `documentId`, its data attributes and timestamps.

    Relations listed in `populated` are included as lists of serialized entries.
    """
    body: dict[str, Any] = {"id": entry.id, "documentId": entry.document_id}
    body.update(entry.data or {})
    if entry.slug is not None:
        body["slug"] = entry.slug
    body["createdAt"] = _timestamp(entry.created_at)
    body["updatedAt"] = _timestamp(entry.updated_at)
    body["publishedAt"] = _timestamp(entry.published_at)
    for attribute, related in (populated or {}).items():
        body[attribute] = [serialize_entry(child) for child in related]
    return body


def transform_response(data: Any, meta: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Wrap serialized data in the `{"data": ..., "meta": ...}` envelope."""
    return {"data": data, "meta": dict(meta or {})}
