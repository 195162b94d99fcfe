"""
Read-only endpoints for every registered content type.

Collection types are served at `/{pluralName}` and `/{pluralName}/{documentId}`,
single types at `/{singularName}`. Each route requires the public role to hold
the matching `find` / `findOne` permission.
"""
import math

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, require_public_permission
from api.helpers import serialize_entry, transform_response
from core.content_types import ContentTypeSchema, get_content_type_by_route
from models.entry import Entry
from schemas.content import EntryListResponse, EntryResponse
from services.document_service import document_service

router = APIRouter(tags=["content"])

DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 100


def _resolve_route(segment: str) -> ContentTypeSchema:
    schema = get_content_type_by_route(segment)
    if schema is None:
        raise HTTPException(status_code=404, detail="Not Found")
    return schema


def _populate_attributes(schema: ContentTypeSchema, populate: list[str]) -> list[str]:
    """Relation attributes to populate; '*' means all of them."""
    relations = schema.relation_attributes()
    if "*" in populate:
        return list(relations)
    unknown = [name for name in populate if name not in relations]
    if unknown:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid populate: {', '.join(unknown)}",
        )
    return populate


async def _serialize(
    db: AsyncSession,
    entry: Entry,
    attributes: list[str],
) -> dict:
    populated = {
        attribute: await document_service.get_related(db, entry, attribute)
        for attribute in attributes
    }
    return serialize_entry(entry, populated)


@router.get("/{segment}", response_model=EntryListResponse | EntryResponse)
async def find(
    segment: str,
    populate: list[str] = Query(default=[]),
    page: int = Query(default=1, ge=1, alias="pagination[page]"),
    page_size: int = Query(
        default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, alias="pagination[pageSize]",
    ),
    db: AsyncSession = Depends(get_async_session),
) -> dict:
    """List published entries of a collection type, or get a single type's entry."""
    schema = _resolve_route(segment)
    await require_public_permission(db, schema.singular_name, "find")
    attributes = _populate_attributes(schema, populate)

    if schema.is_single_type:
        entries = await document_service.find_many(db, schema.uid, limit=1)
        if not entries:
            raise HTTPException(status_code=404, detail="Not Found")
        return transform_response(await _serialize(db, entries[0], attributes))

    total = await document_service.count(db, schema.uid)
    entries = await document_service.find_many(
        db, schema.uid, offset=(page - 1) * page_size, limit=page_size,
    )
    data = [await _serialize(db, entry, attributes) for entry in entries]
    return transform_response(
        data,
        {
            "pagination": {
                "page": page,
                "pageSize": page_size,
                "pageCount": math.ceil(total / page_size),
                "total": total,
            },
        },
    )


@router.get("/{segment}/{document_id}", response_model=EntryResponse)
async def find_one(
    segment: str,
    document_id: str,
    populate: list[str] = Query(default=[]),
    db: AsyncSession = Depends(get_async_session),
) -> dict:
    """Get one published entry of a collection type by document id."""
    schema = _resolve_route(segment)
    if schema.is_single_type:
        raise HTTPException(status_code=404, detail="Not Found")
    await require_public_permission(db, schema.singular_name, "findOne")
    attributes = _populate_attributes(schema, populate)

    entry = await document_service.find_one(db, schema.uid, {"documentId": document_id})
    if entry is None or (schema.draft_and_publish and entry.published_at is None):
        raise HTTPException(status_code=404, detail="Not Found")
    return transform_response(await _serialize(db, entry, attributes))
