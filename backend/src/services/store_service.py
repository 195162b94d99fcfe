"""Persistent key/value settings scoped by environment, type and name."""
import json
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.core_store import CoreStoreSetting

_TRUE = json.dumps(True)


class CoreStore:
    """
    Scoped view of `core_store_settings`.

    Keys are stored as `<type>_<name>_<key>` per environment; values are
    JSON-encoded. `get` and `set` flush only. `claim` commits, since its
    result is only meaningful once the flag is durable.
    """

    def __init__(self, db: AsyncSession, *, environment: str, type: str, name: str) -> None:  # noqa: A002
        self.db = db
        self.environment = environment
        self.type = type
        self.name = name

    def _key(self, key: str) -> str:
        return f"{self.type}_{self.name}_{key}"

    async def _row(self, key: str) -> CoreStoreSetting | None:
        stmt = select(CoreStoreSetting).where(
            CoreStoreSetting.key == self._key(key),
            CoreStoreSetting.environment == self.environment,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get(self, key: str) -> Any:
        """Return the decoded value, or None when the key is not set."""
        row = await self._row(key)
        if row is None or row.value is None:
            return None
        return json.loads(row.value)

    async def set(self, key: str, value: Any) -> None:
        """Insert or overwrite a value."""
        row = await self._row(key)
        encoded = json.dumps(value)
        if row is None:
            self.db.add(CoreStoreSetting(
                key=self._key(key),
                value=encoded,
                type=type(value).__name__,
                environment=self.environment,
            ))
        else:
            row.value = encoded
            row.type = type(value).__name__
        await self.db.flush()

    async def claim(self, key: str) -> bool:
        """
        Atomically set a boolean flag to true.

        Returns True only for the caller whose write flipped the flag (absent or
        false -> true). Concurrent callers race on the unique (key, environment)
        constraint or on the conditional UPDATE, so exactly one of them wins.
        """
        self.db.add(CoreStoreSetting(
            key=self._key(key),
            value=_TRUE,
            type="bool",
            environment=self.environment,
        ))
        try:
            await self.db.commit()
            return True
        except IntegrityError:
            await self.db.rollback()

        result = await self.db.execute(
            update(CoreStoreSetting)
            .where(
                CoreStoreSetting.key == self._key(key),
                CoreStoreSetting.environment == self.environment,
                (CoreStoreSetting.value.is_(None)) | (CoreStoreSetting.value != _TRUE),
            )
            .values(value=_TRUE, type="bool")
            .execution_options(synchronize_session=False),
        )
        await self.db.commit()
        return result.rowcount == 1
