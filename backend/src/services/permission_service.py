"""Service layer for role permissions on content-type controllers."""
import logging
from collections.abc import Mapping, Sequence

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.permission import Permission, Role

logger = logging.getLogger(__name__)

PUBLIC_ROLE = "public"

ROLE_NAMES = {
    "public": "Public",
    "authenticated": "Authenticated",
}


def action_for(controller: str, action: str) -> str:
    """Fully qualified action, e.g. ('article', 'find') -> 'api::article.article.find'."""
    return f"api::{controller}.{controller}.{action}"


async def get_or_create_role(db: AsyncSession, role_type: str) -> Role:
    """Get a role by type, creating it when missing."""
    result = await db.execute(select(Role).where(Role.type == role_type))
    role = result.scalar_one_or_none()
    if role is None:
        role = Role(
            type=role_type,
            name=ROLE_NAMES.get(role_type, role_type.title()),
            description=f"Default role given to {role_type} users.",
        )
        db.add(role)
        await db.flush()
        logger.info("Created %s role", role_type)
    return role


async def set_public_permissions(
    db: AsyncSession,
    new_permissions: Mapping[str, Sequence[str]],
) -> int:
    """
    Grant the public role the given controller actions.

    `new_permissions` maps controller name to action names, e.g.
    {"article": ["find", "findOne"]}. Permissions the role already holds are
    skipped. Returns the number of permissions created.
    """
    role = await get_or_create_role(db, PUBLIC_ROLE)
    result = await db.execute(select(Permission.action).where(Permission.role_id == role.id))
    held = set(result.scalars().all())

    created = 0
    for controller, actions in new_permissions.items():
        for action in actions:
            qualified = action_for(controller, action)
            if qualified in held:
                continue
            db.add(Permission(action=qualified, role_id=role.id))
            held.add(qualified)
            created += 1
    await db.flush()
    logger.info("Granted %d public permission(s)", created)
    return created


async def has_permission(db: AsyncSession, role_type: str, action: str) -> bool:
    """Check whether a role holds a fully qualified action."""
    stmt = select(
        exists()
        .where(Permission.role_id == Role.id)
        .where(Role.type == role_type, Permission.action == action),
    )
    return bool(await db.scalar(stmt))
