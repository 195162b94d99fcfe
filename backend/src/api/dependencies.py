"""FastAPI dependencies for injection."""
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import get_settings
from db.session import get_async_session
from services.permission_service import PUBLIC_ROLE, action_for, has_permission


async def require_public_permission(
    db: AsyncSession,
    controller: str,
    action: str,
) -> None:
    """
    Reject the request unless the public role holds `controller.action`.

    Raises:
        HTTPException: 403 when the permission is missing.
    """
    if not await has_permission(db, PUBLIC_ROLE, action_for(controller, action)):
        raise HTTPException(status_code=403, detail="Forbidden")


__all__ = [
    "get_async_session",
    "get_settings",
    "require_public_permission",
]
