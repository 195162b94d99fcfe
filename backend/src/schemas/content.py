"""Pydantic schemas for content API responses."""
from typing import Any

from pydantic import BaseModel


class Pagination(BaseModel):
    """Pagination block of a collection response."""

    page: int = 1
    pageSize: int  # noqa: N815
    pageCount: int  # noqa: N815
    total: int


class CollectionMeta(BaseModel):
    pagination: Pagination


class EntryResponse(BaseModel):
    """A single entry: `{"data": {...}, "meta": {}}`."""

    data: dict[str, Any]
    meta: dict[str, Any] = {}


class EntryListResponse(BaseModel):
    """A list of entries with pagination meta."""

    data: list[dict[str, Any]]
    meta: CollectionMeta
