"""Storefront database management CLI.

Creates, drops and seeds the SQL schema behind the catalogue and the cart.

Usage:
    storefront-manage setup-db                  # Create all tables
    storefront-manage drop-db                   # Drop all tables
    storefront-manage seed                      # Insert the demo catalogue
    storefront-manage --database-url sqlite+aiosqlite:///shop.db setup-db
"""

import argparse
import asyncio
import sys

from catalogue.seed import seed_catalogue
from storefront.settings import MEMORY_DATABASE_URL, get_settings
from storefront.store import SqlStore


async def setup_database(database_url):
    store = SqlStore.from_url(database_url)
    try:
        print("Creating database schema...")
        await store.create_all()
        print("  schema ready.")
    finally:
        await store.close()


async def drop_database(database_url):
    store = SqlStore.from_url(database_url)
    try:
        print("Dropping database schema...")
        await store.drop_all()
        print("  schema dropped.")
    finally:
        await store.close()


async def seed_database(database_url):
    store = SqlStore.from_url(database_url)
    try:
        await store.create_all()
        added = await seed_catalogue(store)
        print(f"  {added} products added.")
    finally:
        await store.close()


COMMANDS = {
    "setup-db": setup_database,
    "drop-db": drop_database,
    "seed": seed_database,
}


def main(argv=None):
    parser = argparse.ArgumentParser(description="Storefront database management")
    parser.add_argument(
        "--database-url",
        help="SQLAlchemy async URL (default: STOREFRONT_DATABASE_URL)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("seed", help="Insert the demo catalogue (idempotent)")

    args = parser.parse_args(argv)
    database_url = args.database_url or get_settings().database_url
    if database_url == MEMORY_DATABASE_URL:
        print("The in-memory store has no schema to manage; set --database-url.", file=sys.stderr)
        return 1

    asyncio.run(COMMANDS[args.command](database_url))
    print("Done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
