"""Health check endpoints."""
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings, get_settings
from db.session import get_async_session
from services.run_gate import has_run


logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: str
    seeded: bool | None = None


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> HealthResponse:
    """Check application and database health, and whether demo data was imported."""
    db_status = "healthy"
    seeded = None
    try:
        await db.execute(text("SELECT 1"))
        seeded = await has_run(db, settings.environment)
    except Exception:
        logger.exception("Database health check failed")
        db_status = "unhealthy"

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        database=db_status,
        seeded=seeded,
    )
