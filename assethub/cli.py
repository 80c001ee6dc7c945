"""
Operational commands for the AssetHub service.

Usage:
    assethub init-db
    assethub seed --force
    assethub favourites 11111111-1111-1111-1111-111111111111 --limit 5
    assethub serve --port 8000
"""

from __future__ import annotations

import asyncio
import json
import uuid

import click
from rich.console import Console
from rich.table import Table

from assethub.db.connection import Database, sanitize_database_url
from assethub.db.repositories import (
    AssetRepository,
    FavouritePage,
    FavouriteRepository,
    UserRepository,
)
from assethub.db.seed import seed_dev_once
from assethub.errors import AssetHubError
from assethub.services.favourites_service import FavouritesService
from assethub.settings import get_settings

console = Console()


async def _init_db() -> str:
    settings = get_settings()
    database = Database.from_settings(settings)
    try:
        await database.create_schema()
    finally:
        await database.dispose()
    return sanitize_database_url(settings.resolved_database_url)


async def _seed(force: bool) -> bool | None:
    """Seed demo rows; ``None`` means seeding is disabled for this environment."""
    settings = get_settings()
    if not (force or settings.should_seed):
        return None

    database = Database.from_settings(settings)
    try:
        await database.create_schema()
        async with database.session() as session:
            return await seed_dev_once(session)
    finally:
        await database.dispose()


async def _list_favourites(
    user_id: uuid.UUID, limit: int | None, after: str | None
) -> FavouritePage:
    database = Database.from_settings(get_settings())
    try:
        async with database.session() as session:
            service = FavouritesService(
                users=UserRepository(session),
                assets=AssetRepository(session),
                favourites=FavouriteRepository(session),
            )
            return await service.list_keyset(user_id=user_id, limit=limit, after=after)
    finally:
        await database.dispose()


@click.group()
def cli() -> None:
    """Manage the AssetHub database and API server."""


@cli.command("init-db")
def init_db() -> None:
    """Create any missing tables."""
    url = asyncio.run(_init_db())
    console.print(f"[green]✓[/green] Schema ready at {url}")


@cli.command()
@click.option("--force", is_flag=True, help="Seed even when APP_ENV is not 'dev'.")
def seed(force: bool) -> None:
    """Insert demo users and assets into an empty database."""
    result = asyncio.run(_seed(force))
    if result is None:
        console.print("[yellow]Seeding disabled[/yellow] (set APP_ENV=dev or pass --force)")
    elif result:
        console.print("[green]✓[/green] Demo users and assets inserted")
    else:
        console.print("Database already populated; nothing to do")


@cli.command()
@click.argument("user_id", type=click.UUID)
@click.option("--limit", type=int, default=None, help="Page size (default 20, max 50).")
@click.option("--after", default=None, help="Cursor printed by a previous call.")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
def favourites(
    user_id: uuid.UUID, limit: int | None, after: str | None, output_json: bool
) -> None:
    """Print one keyset page of USER_ID's favourites."""
    try:
        page = asyncio.run(_list_favourites(user_id, limit, after))
    except AssetHubError as exc:
        raise click.ClickException(exc.message) from exc

    if output_json:
        click.echo(
            json.dumps(
                {
                    "items": [
                        {
                            "id": str(asset.id),
                            "type": asset.asset_type.value,
                            "description": asset.description,
                        }
                        for asset in page.assets
                    ],
                    "next_after": page.next_cursor,
                },
                indent=2,
            )
        )
        return

    if not page.assets:
        console.print("No favourites")
        return

    table = Table(title=f"Favourites for {user_id}")
    table.add_column("Asset ID", style="cyan")
    table.add_column("Type")
    table.add_column("Description")
    for asset in page.assets:
        table.add_row(str(asset.id), asset.asset_type.value, asset.description)
    console.print(table)
    if page.next_cursor:
        console.print(f"Next page: --after {page.next_cursor}")


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.option("--reload", is_flag=True, help="Restart on code changes.")
def serve(host: str, port: int, reload: bool) -> None:
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("assethub.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    cli()
