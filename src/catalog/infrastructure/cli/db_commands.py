"""CLI commands for the catalog database."""

from __future__ import annotations

import asyncio

import click

from catalog.infrastructure.config import get_settings
from catalog.infrastructure.persistence.database import build_engine, create_schema


@click.command("init")
def db_init() -> None:
    """Create the catalog tables if they do not exist yet."""
    settings = get_settings()

    async def run() -> None:
        engine = build_engine(settings.database_url, echo=settings.echo_sql)
        try:
            await create_schema(engine)
        finally:
            await engine.dispose()

    asyncio.run(run())
    click.echo("Database ready.")
