"""Tests for the core store and the first-run gate."""
import asyncio
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from db.session import create_session_factory
from models.base import Base
from models.core_store import CoreStoreSetting
from services.run_gate import has_run, is_first_run
from services.store_service import CoreStore


def _store(db: AsyncSession, environment: str = "test") -> CoreStore:
    return CoreStore(db, environment=environment, type="type", name="setup")


# ---------------------------------------------------------------------------
# CoreStore
# ---------------------------------------------------------------------------


async def test_get_missing_key(db_session: AsyncSession) -> None:
    assert await _store(db_session).get("initHasRun") is None


async def test_set_and_get_roundtrip_and_key_format(db_session: AsyncSession) -> None:
    store = _store(db_session)
    await store.set("config", {"theme": "dark"})

    assert await store.get("config") == {"theme": "dark"}
    row = (await db_session.execute(select(CoreStoreSetting))).scalar_one()
    assert row.key == "type_setup_config"
    assert row.environment == "test"
    assert row.type == "dict"


async def test_set_overwrites(db_session: AsyncSession) -> None:
    store = _store(db_session)
    await store.set("initHasRun", False)
    await store.set("initHasRun", True)

    assert await store.get("initHasRun") is True
    rows = (await db_session.execute(select(CoreStoreSetting))).scalars().all()
    assert len(rows) == 1


async def test_values_are_scoped_by_environment(db_session: AsyncSession) -> None:
    await _store(db_session, "staging").set("initHasRun", True)
    assert await _store(db_session, "production").get("initHasRun") is None


async def test_claim_once(db_session: AsyncSession) -> None:
    store = _store(db_session)
    assert await store.claim("initHasRun") is True
    assert await store.claim("initHasRun") is False
    assert await store.get("initHasRun") is True


async def test_claim_flips_false_flag(db_session: AsyncSession) -> None:
    store = _store(db_session)
    await store.set("initHasRun", False)
    await db_session.commit()

    assert await store.claim("initHasRun") is True
    assert await store.claim("initHasRun") is False


async def test_claim_is_durable_across_sessions(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    async with session_factory() as first:
        assert await _store(first).claim("initHasRun") is True
    async with session_factory() as second:
        assert await _store(second).claim("initHasRun") is False


# ---------------------------------------------------------------------------
# Run gate
# ---------------------------------------------------------------------------


async def test_is_first_run_true_exactly_once(db_session: AsyncSession) -> None:
    assert await has_run(db_session, "test") is False
    assert await is_first_run(db_session, "test") is True
    assert await is_first_run(db_session, "test") is False
    assert await is_first_run(db_session, "test") is False
    assert await has_run(db_session, "test") is True


async def test_is_first_run_uses_setup_flag(db_session: AsyncSession) -> None:
    await is_first_run(db_session, "test")

    row = (await db_session.execute(select(CoreStoreSetting))).scalar_one()
    assert row.key == "type_setup_initHasRun"
    assert row.value == "true"


async def test_existing_flag_blocks_first_run(db_session: AsyncSession) -> None:
    await _store(db_session).set("initHasRun", True)
    await db_session.commit()

    assert await is_first_run(db_session, "test") is False


async def test_concurrent_starters_have_one_winner(tmp_path: Path) -> None:
    """Separate engines on one database file race for the flag; exactly one wins."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'gate.db'}"
    engines = [create_async_engine(url) for _ in range(5)]

    async def start(engine: AsyncEngine) -> bool:
        async with create_session_factory(engine)() as db:
            return await is_first_run(db, "test")

    try:
        async with engines[0].begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        results = await asyncio.gather(*(start(engine) for engine in engines))

        async with create_session_factory(engines[0])() as db:
            assert await has_run(db, "test") is True
    finally:
        for engine in engines:
            await engine.dispose()

    assert results.count(True) == 1
