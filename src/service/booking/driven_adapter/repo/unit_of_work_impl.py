"""
asyncpg Unit of Work

One pooled connection and one READ COMMITTED transaction per unit.
lock_location() takes a transaction-scoped advisory lock so concurrent
check-then-insert units on the same location run one after another.
"""

from typing import Any, Self

import asyncpg
from asyncpg.transaction import Transaction
from uuid_utils import UUID

from src.platform.database.asyncpg_setting import get_asyncpg_pool
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.service.booking.driven_adapter.repo.booking_command_repo_impl import (
    BookingCommandRepoImpl,
)
from src.service.booking.driven_adapter.repo.location_query_repo_impl import (
    LocationQueryRepoImpl,
)


def advisory_lock_key(location_id: UUID) -> int:
    """Fold a UUID into the signed 64-bit key pg_advisory_xact_lock expects."""
    key = int.from_bytes(location_id.bytes[:8], 'big')
    return key - (1 << 64) if key >= (1 << 63) else key


class AsyncpgUnitOfWork(AbstractUnitOfWork):
    def __init__(self, *, pool: asyncpg.Pool | None = None) -> None:
        super().__init__()
        self._pool = pool
        self._conn: asyncpg.Connection | None = None
        self._transaction: Transaction | None = None

    async def __aenter__(self) -> Self:
        pool = self._pool or await get_asyncpg_pool()
        self._conn = await pool.acquire()
        try:
            self._transaction = self._conn.transaction(isolation='read_committed')
            await self._transaction.start()
        except Exception:
            await pool.release(self._conn)
            self._conn = None
            raise

        self.booking_command_repo = BookingCommandRepoImpl(conn=self._conn)
        self.location_query_repo = LocationQueryRepoImpl(conn=self._conn)
        return await super().__aenter__()

    async def __aexit__(self, *args: Any) -> None:
        try:
            await super().__aexit__(*args)
        finally:
            if self._conn is not None:
                pool = self._pool or await get_asyncpg_pool()
                await pool.release(self._conn)
                self._conn = None
                self._transaction = None

    async def lock_location(self, *, location_id: Any) -> None:
        assert self._conn is not None, 'Unit of work is not open'
        await self._conn.execute('SELECT pg_advisory_xact_lock($1)', advisory_lock_key(location_id))
        Logger.base.debug(f'🔒 [UOW] Advisory lock held for location {location_id}')

    async def _commit(self) -> None:
        assert self._transaction is not None, 'Unit of work is not open'
        transaction, self._transaction = self._transaction, None
        await transaction.commit()

    async def rollback(self) -> None:
        if self._transaction is not None:
            transaction, self._transaction = self._transaction, None
            await transaction.rollback()
