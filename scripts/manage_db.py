#!/usr/bin/env python3
"""
Database management script for the StableLink backend.
"""

import asyncio
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from sqlalchemy import select

from alembic.config import Config
from alembic import command
from stablelink.core.config import settings
from stablelink.core.database import init_database, close_database, get_async_session, DatabaseManager
from stablelink.core.logging import setup_logging, get_logger
from stablelink.indexer.checkpoint import CheckpointStore
from stablelink.models.organization import Organization, ApiKey

console = Console()
logger = get_logger(__name__)
app = typer.Typer(help="Database management commands")

DEFAULT_TEST_KEY = "sk_test_stablelink_default_key_replace_in_production"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


@app.command()
def init():
    """Initialize database with tables."""
    async def _init():
        setup_logging()
        await init_database()
        await DatabaseManager.create_tables()
        await close_database()
        console.print("✅ Database initialized successfully!")

    asyncio.run(_init())


@app.command()
def upgrade(revision: str = "head"):
    """Apply migrations."""
    alembic_cfg = Config("alembic.ini")
    command.upgrade(alembic_cfg, revision)

    console.print(f"✅ Database upgraded to: {revision}")


@app.command()
def downgrade(revision: str):
    """Downgrade database to specific revision."""
    alembic_cfg = Config("alembic.ini")
    command.downgrade(alembic_cfg, revision)

    console.print(f"⬇️ Database downgraded to: {revision}")


@app.command()
def reset():
    """Reset database (drop all tables)."""
    confirm = typer.confirm("Are you sure you want to drop all tables?")
    if not confirm:
        console.print("❌ Operation cancelled")
        return

    async def _reset():
        setup_logging()
        await init_database()
        await DatabaseManager.drop_tables()
        await close_database()
        console.print("🗑️ All tables dropped!")

    asyncio.run(_reset())


@app.command()
def health():
    """Check database health."""
    async def _health():
        setup_logging()
        await init_database()

        is_healthy = await DatabaseManager.health_check()
        await close_database()

        if is_healthy:
            console.print("✅ Database is healthy!")
        else:
            console.print("❌ Database health check failed!")
            sys.exit(1)

    asyncio.run(_health())


@app.command()
def seed(test_key: str = typer.Option(DEFAULT_TEST_KEY, help="Test API key to install")):
    """Create the default organization and its test API key."""
    console.print("🌱 Seeding database...")

    async def _seed():
        setup_logging()
        await init_database()

        async with get_async_session() as db:
            organization = (await db.execute(select(Organization).limit(1))).scalar_one_or_none()
            if organization is None:
                organization = Organization(
                    name="Default Organization",
                    primary_wallet=ZERO_ADDRESS,
                    default_platform_fee=300,
                )
                db.add(organization)
                await db.flush()

            api_key = (await db.execute(
                select(ApiKey).where(ApiKey.organization_id == organization.id).limit(1)
            )).scalar_one_or_none()
            if api_key is None:
                db.add(ApiKey(organization_id=organization.id, test_key=test_key))
            else:
                api_key.test_key = test_key

        await close_database()
        console.print(f"✅ Seed done. Use API key (x-api-key or Authorization: Bearer): {test_key}")

    asyncio.run(_seed())


@app.command()
def checkpoint(
    set_block: Optional[int] = typer.Option(None, "--set", help="Overwrite the checkpoint with this block"),
    key: str = typer.Option(settings.indexer_state_key, help="Checkpoint key"),
):
    """Show the indexer checkpoint, or seed it to an earlier block."""
    async def _checkpoint():
        setup_logging()
        await init_database()
        store = CheckpointStore()

        async with get_async_session() as db:
            if set_block is not None:
                await store.seed(db, key, set_block)
            last_block = await store.get(db, key)

        await close_database()

        table = Table(title="Indexer Checkpoint")
        table.add_column("Key", style="cyan")
        table.add_column("Last Block", style="green")
        table.add_row(key, str(last_block) if last_block is not None else "not initialized")
        console.print(table)

    asyncio.run(_checkpoint())


if __name__ == "__main__":
    app()
