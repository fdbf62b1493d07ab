#!/usr/bin/env python3
"""
Database Reset Script
Reset PostgreSQL database structure

Features:
1. Drop & Recreate Database - completely wipe the database
2. Create Schema - locations and bookings tables

Notes:
- This script only resets database structure, does not seed data
- To seed locations, run `python script/seed_data.py`
"""

import asyncio

import asyncpg

from src.platform.config.core_setting import settings
from src.platform.database.schema import create_db_schema

DB_WAIT_SECONDS = 1


def _admin_dsn() -> str:
    return settings.DATABASE_DSN.rsplit('/', 1)[0] + '/postgres'


async def _drop_and_create_db(db_name: str) -> None:
    """Drop and recreate database"""
    admin_conn = await asyncpg.connect(_admin_dsn())
    try:
        await admin_conn.execute(
            """
            SELECT pg_terminate_backend(pid)
            FROM pg_stat_activity
            WHERE datname = $1 AND pid <> pg_backend_pid()
            """,
            db_name,
        )

        await admin_conn.execute(f'DROP DATABASE IF EXISTS "{db_name}"')
        print(f"   ✅ Database '{db_name}' dropped")

        await asyncio.sleep(DB_WAIT_SECONDS)

        await admin_conn.execute(f'CREATE DATABASE "{db_name}"')
        print(f"   ✅ Database '{db_name}' created")
    finally:
        await admin_conn.close()


async def drop_and_recreate_database() -> None:
    db_name = settings.POSTGRES_DB
    print(f'Server: {settings.POSTGRES_SERVER}:{settings.POSTGRES_PORT}')
    print(f'Database name: {db_name}')

    print('🗑️ Dropping database...')
    await _drop_and_create_db(db_name)

    print('🏗️ Creating schema...')
    conn = await asyncpg.connect(settings.DATABASE_DSN)
    try:
        await create_db_schema(conn)
    finally:
        await conn.close()
    print('Database recreation completed!')


async def main():
    print('🔄 Starting database reset...')
    print('=' * 50)

    try:
        await drop_and_recreate_database()
        print('=' * 50)
        print('✅ Database reset completed!')
        print('💡 To seed locations, run: python script/seed_data.py')

    except Exception as e:
        print(f'❌ Reset failed: {e}')
        exit(1)


if __name__ == '__main__':
    asyncio.run(main())
