"""Welcome guide lookup endpoints."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session
from api.helpers import serialize_entry, transform_response
from schemas.content import EntryResponse
from services.document_service import document_service

router = APIRouter(prefix="/welcome-guides", tags=["welcome-guides"])

CONTENT_TYPE = "welcome-guide"
POPULATE = ("sections", "resources")


@router.get("/by-slug", include_in_schema=False)
@router.get("/by-slug/", include_in_schema=False)
async def get_welcome_guide_without_slug() -> None:
    """The route without a slug segment."""
    raise HTTPException(status_code=400, detail="Slug is required")


@router.get("/by-slug/{slug}", response_model=EntryResponse)
async def get_welcome_guide_by_slug(
    slug: str,
    db: AsyncSession = Depends(get_async_session),
) -> dict:
    """
    Get a welcome guide by slug, with its sections and resources.

    No authentication is required.
    """
    if not slug.strip():
        raise HTTPException(status_code=400, detail="Slug is required")

    guide = await document_service.find_one(db, CONTENT_TYPE, {"slug": slug})
    if guide is None:
        raise HTTPException(status_code=404, detail="Welcome Guide not found")

    populated = {
        attribute: await document_service.get_related(db, guide, attribute)
        for attribute in POPULATE
    }
    return transform_response(serialize_entry(guide, populated))
