# pos_bridge/cli/create_tables.py
import asyncio
import click

from pos_bridge import models  # noqa: F401  registers all models
from pos_bridge.database import Base, engine

@click.command("create-tables")
def create_tables():
    """Create all database tables directly using SQLAlchemy"""

    async def _create_tables():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await engine.dispose()
        click.echo("All tables created successfully!")

    asyncio.run(_create_tables())

if __name__ == "__main__":
    create_tables()
