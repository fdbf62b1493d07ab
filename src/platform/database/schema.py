"""
PostgreSQL schema for the booking core

Plain DDL executed through asyncpg; statements are idempotent so
create_db_schema() can run on every start.
"""

import asyncpg

from src.platform.logging.loguru_io import Logger


SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS locations (
        id                    UUID PRIMARY KEY,
        name                  TEXT NOT NULL,
        address               TEXT NOT NULL,
        capacity              INTEGER NOT NULL CHECK (capacity >= 0),
        price_per_hour_cents  INTEGER NOT NULL CHECK (price_per_hour_cents >= 0),
        active                BOOLEAN NOT NULL DEFAULT TRUE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS bookings (
        id                  UUID PRIMARY KEY,
        location_id         UUID NOT NULL REFERENCES locations (id),
        event_id            UUID,
        organization_id     UUID NOT NULL,
        start_time          TIMESTAMPTZ NOT NULL,
        end_time            TIMESTAMPTZ NOT NULL,
        status              VARCHAR(32) NOT NULL,
        total_amount_cents  INTEGER NOT NULL,
        currency            VARCHAR(3) NOT NULL,
        payment_intent_id   TEXT,
        created_at          TIMESTAMPTZ NOT NULL,
        updated_at          TIMESTAMPTZ NOT NULL
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_bookings_location_window
        ON bookings (location_id, start_time, end_time)
    """,
    'CREATE INDEX IF NOT EXISTS idx_locations_active_name ON locations (active, name)',
)


async def create_db_schema(conn: asyncpg.Connection) -> None:
    async with conn.transaction():
        for statement in SCHEMA_STATEMENTS:
            await conn.execute(statement)
    Logger.base.info(f'🗄️ [Schema] Ensured {len(SCHEMA_STATEMENTS)} schema objects')
