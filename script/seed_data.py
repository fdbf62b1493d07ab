#!/usr/bin/env python3
"""
Database Seed Script
Populate the location catalog

Notes:
- Run `python script/reset_database.py` first
- Re-running is safe: existing ids are left untouched
"""

import asyncio

import asyncpg
import uuid_utils

from src.platform.config.core_setting import settings
from src.platform.database.asyncpg_setting import init_connection
from src.service.booking.domain.entity.location_entity import Location


SEED_LOCATIONS = [
    Location(
        id=uuid_utils.uuid7(),
        name='Main Hall',
        address='1 Conference Way',
        capacity=500,
        price_per_hour_cents=50_000,
    ),
    Location(
        id=uuid_utils.uuid7(),
        name='Rooftop Terrace',
        address='1 Conference Way, 12th floor',
        capacity=120,
        price_per_hour_cents=20_000,
    ),
    Location(
        id=uuid_utils.uuid7(),
        name='Workshop Room B',
        address='3 Side Street',
        capacity=30,
        price_per_hour_cents=5_000,
    ),
    Location(
        id=uuid_utils.uuid7(),
        name='Old Warehouse',
        address='9 Dock Road',
        capacity=800,
        price_per_hour_cents=30_000,
        active=False,
    ),
]


async def seed_locations(conn: asyncpg.Connection) -> int:
    await conn.executemany(
        """
        INSERT INTO locations (id, name, address, capacity, price_per_hour_cents, active)
        VALUES ($1, $2, $3, $4, $5, $6)
        ON CONFLICT (id) DO NOTHING
        """,
        [
            (
                location.id,
                location.name,
                location.address,
                location.capacity,
                location.price_per_hour_cents,
                location.active,
            )
            for location in SEED_LOCATIONS
        ],
    )
    return len(SEED_LOCATIONS)


async def main():
    print('🌱 Seeding locations...')
    conn = await asyncpg.connect(settings.DATABASE_DSN)
    try:
        await init_connection(conn)
        count = await seed_locations(conn)
    finally:
        await conn.close()

    for location in SEED_LOCATIONS:
        status = 'active' if location.active else 'inactive'
        print(f'   ✅ {location.name} ({status}) → {location.id}')
    print(f'✅ Seeded {count} locations')


if __name__ == '__main__':
    asyncio.run(main())
