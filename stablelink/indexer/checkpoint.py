"""
Checkpoint store for the indexer watermark.
"""

from typing import Awaitable, Callable, Optional

import structlog
from sqlalchemy import select, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from stablelink.models.indexer_state import IndexerState


logger = structlog.get_logger(__name__)


def _insert_for(db: AsyncSession):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise NotImplementedError(f"Checkpoint upsert not supported on {dialect}")


class CheckpointStore:
    """
    Reads and writes named block watermarks in ``indexer_state``.

    Writes are atomic upserts and never lower a stored value.
    """

    def __init__(self):
        self.logger = logger.bind(service="checkpoint_store")

    async def get(self, db: AsyncSession, key: str) -> Optional[int]:
        """Last processed block for ``key``, or None if never set."""
        result = await db.execute(
            select(IndexerState.last_block).where(IndexerState.key == key)
        )
        return result.scalar_one_or_none()

    async def set(self, db: AsyncSession, key: str, block: int) -> None:
        """Advance ``key`` to ``block``. Lower values are ignored."""
        insert = _insert_for(db)
        stmt = insert(IndexerState).values(key=key, last_block=block)
        stmt = stmt.on_conflict_do_update(
            index_elements=[IndexerState.key],
            set_={"last_block": stmt.excluded.last_block, "updated_at": func.now()},
            where=IndexerState.last_block < stmt.excluded.last_block,
        )
        await db.execute(stmt)
        self.logger.debug("Checkpoint written", key=key, last_block=block)

    async def get_or_init(
        self,
        db: AsyncSession,
        key: str,
        head: Callable[[], Awaitable[int]]
    ) -> int:
        """
        Read ``key``, creating it at the current chain head on first run.

        Blocks before the head are not indexed unless an operator seeds an
        earlier value.
        """
        current = await self.get(db, key)
        if current is not None:
            return current

        block = await head()
        insert = _insert_for(db)
        await db.execute(
            insert(IndexerState)
            .values(key=key, last_block=block)
            .on_conflict_do_nothing(index_elements=[IndexerState.key])
        )
        self.logger.info("Checkpoint initialized at chain head", key=key, last_block=block)

        # Another writer may have won the insert
        return await self.get(db, key)

    async def seed(self, db: AsyncSession, key: str, block: int) -> None:
        """Overwrite ``key`` unconditionally. Operator use only."""
        insert = _insert_for(db)
        stmt = insert(IndexerState).values(key=key, last_block=block)
        stmt = stmt.on_conflict_do_update(
            index_elements=[IndexerState.key],
            set_={"last_block": stmt.excluded.last_block, "updated_at": func.now()},
        )
        await db.execute(stmt)
        self.logger.warning("Checkpoint seeded", key=key, last_block=block)
