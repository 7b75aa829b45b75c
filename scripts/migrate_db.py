#!/usr/bin/env python3
"""
Database Migration — Create the queue table from the SQLAlchemy model.

Usage:
    python scripts/migrate_db.py            # create missing tables
    python scripts/migrate_db.py --check    # report status only
"""
import asyncio
import os
import sys
import argparse

# Ensure app root is on path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import inspect


async def _existing_tables(engine) -> list[str]:
    async with engine.connect() as conn:
        return await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())


async def run_migration(check_only: bool = False):
    from config.settings import load_settings
    settings = load_settings()

    from database.session import get_database, close_db
    from database.models import Base

    database = get_database(settings)
    engine = database.engine
    defined = set(Base.metadata.tables.keys())

    if check_only:
        print(f"Database: {engine.dialect.name}")
        print(f"Tables defined: {', '.join(sorted(defined))}")
        existing = await _existing_tables(engine)
        print(f"Tables existing: {', '.join(existing) or '(none)'}")
        missing = defined - set(existing)
        if missing:
            print(f"Tables MISSING: {', '.join(sorted(missing))}")
            print("Run without --check to create them.")
        else:
            print("All tables exist.")
        await close_db()
        return

    print("Running database migration...")
    await database.create_tables()
    existing = await _existing_tables(engine)
    print(f"Tables created/verified: {', '.join(existing)}")
    await close_db()
    print("Migration complete.")


def main():
    parser = argparse.ArgumentParser(description="Queue table migration")
    parser.add_argument("--check", action="store_true", help="Check status only")
    args = parser.parse_args()

    asyncio.run(run_migration(check_only=args.check))


if __name__ == "__main__":
    main()
