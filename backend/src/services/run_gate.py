"""First-run gate for the seed pipeline."""
from sqlalchemy.ext.asyncio import AsyncSession

from services.store_service import CoreStore

INIT_FLAG = "initHasRun"


def setup_store(db: AsyncSession, environment: str) -> CoreStore:
    """Core store scope holding setup flags."""
    return CoreStore(db, environment=environment, type="type", name="setup")


async def is_first_run(db: AsyncSession, environment: str) -> bool:
    """
    Return True exactly once per database (and environment).

    The check and the set of `initHasRun` are a single atomic claim, so two
    processes starting against the same empty database cannot both seed it.
    The flag is never unset here.
    """
    return await setup_store(db, environment).claim(INIT_FLAG)


async def has_run(db: AsyncSession, environment: str) -> bool:
    """Read the flag without setting it."""
    return bool(await setup_store(db, environment).get(INIT_FLAG))
