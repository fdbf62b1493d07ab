from typing import List

import asyncpg
from uuid_utils import UUID

from src.platform.database.asyncpg_setting import get_asyncpg_pool
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_location_query_repo import ILocationQueryRepo
from src.service.booking.domain.entity.location_entity import Location


_LOCATION_COLUMNS = 'id, name, address, capacity, price_per_hour_cents, active'


class LocationQueryRepoImpl(ILocationQueryRepo):
    """
    Reads the location catalog.

    Bound to a unit of work connection when conn is given, otherwise each
    call borrows a connection from the pool.
    """

    def __init__(self, *, conn: asyncpg.Connection | None = None) -> None:
        self.conn = conn

    @staticmethod
    def _to_entity(row: asyncpg.Record) -> Location:
        return Location(
            id=row['id'],
            name=row['name'],
            address=row['address'],
            capacity=row['capacity'],
            price_per_hour_cents=row['price_per_hour_cents'],
            active=row['active'],
        )

    async def _fetch(self, query: str, *args) -> list[asyncpg.Record]:
        if self.conn is not None:
            return await self.conn.fetch(query, *args)

        async with (await get_asyncpg_pool()).acquire() as conn:
            return await conn.fetch(query, *args)

    @Logger.io
    async def get_by_id(self, *, location_id: UUID) -> Location | None:
        rows = await self._fetch(
            f'SELECT {_LOCATION_COLUMNS} FROM locations WHERE id = $1', location_id
        )
        return self._to_entity(rows[0]) if rows else None

    @Logger.io
    async def list_active(self) -> List[Location]:
        rows = await self._fetch(
            f'SELECT {_LOCATION_COLUMNS} FROM locations WHERE active ORDER BY name ASC'
        )
        return [self._to_entity(row) for row in rows]
