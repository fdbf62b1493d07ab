import asyncio

import asyncpg
from uuid_utils import UUID

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger


# Global connection pools per event loop
asyncpg_pools: dict[int, asyncpg.Pool] = {}


async def init_connection(conn: asyncpg.Connection) -> None:
    """Initialize each connection with the uuid_utils UUID codec"""

    def _uuid_decoder(value: bytes) -> UUID:
        return UUID(bytes=value)

    def _uuid_encoder(value: UUID) -> bytes:
        return value.bytes

    await conn.set_type_codec(
        'uuid',
        encoder=_uuid_encoder,
        decoder=_uuid_decoder,
        schema='pg_catalog',
        format='binary',
    )


async def get_asyncpg_pool() -> asyncpg.Pool:
    loop_id = id(asyncio.get_running_loop())

    if loop_id in asyncpg_pools:
        pool = asyncpg_pools[loop_id]
        Logger.base.debug(
            f'📊 [Pool Stats] size={pool.get_size()}, free={pool.get_idle_size()}, '
            f'max={pool.get_max_size()}, min={pool.get_min_size()}'
        )
        return pool

    pool = await asyncpg.create_pool(
        settings.DATABASE_DSN,
        min_size=settings.ASYNCPG_POOL_MIN_SIZE,
        max_size=settings.ASYNCPG_POOL_MAX_SIZE,
        command_timeout=settings.ASYNCPG_POOL_COMMAND_TIMEOUT,
        max_inactive_connection_lifetime=settings.ASYNCPG_POOL_MAX_INACTIVE_LIFETIME,
        timeout=settings.ASYNCPG_POOL_TIMEOUT,
        init=init_connection,
    )
    asyncpg_pools[loop_id] = pool
    Logger.base.info(
        f'🐘 [Pool] Created asyncpg pool (min={settings.ASYNCPG_POOL_MIN_SIZE}, '
        f'max={settings.ASYNCPG_POOL_MAX_SIZE})'
    )
    return pool


async def close_asyncpg_pool() -> None:
    """Close the asyncpg connection pool for the current event loop"""
    loop_id = id(asyncio.get_running_loop())
    pool = asyncpg_pools.pop(loop_id, None)
    if pool is not None:
        await pool.close()
        Logger.base.info('🐘 [Pool] Closed asyncpg pool')
