"""CLI entry point for the indexer."""

from __future__ import annotations

import asyncio

import click

from .core.enums import StorageBackend
from .core.errors import IndexerError


def _storage_overrides(database_url: str | None) -> dict:
    if not database_url:
        return {}
    return {"storage": {"backend": StorageBackend.SQL.value, "database_url": database_url}}


@click.group()
def main() -> None:
    """Dispute protocol indexer."""


@main.command()
@click.argument("events_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--config", default=None, help="Config file path (TOML)")
@click.option("--database-url", default=None, help="Persist to this SQL database")
def replay(events_file: str, config: str | None, database_url: str | None) -> None:
    """Apply a JSONL file of decoded events, in file order."""
    from .main import run

    try:
        stats = asyncio.run(
            run(events_file, config_path=config, overrides=_storage_overrides(database_url))
        )
    except IndexerError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(
        f"dispatched={stats['dispatched']} applied={stats['applied']} "
        f"skipped={stats['skipped']} dropped={stats['dropped']}"
    )


@main.command()
@click.argument("entity_type")
@click.argument("entity_id")
@click.option("--config", default=None, help="Config file path (TOML)")
@click.option("--database-url", default=None, help="Read from this SQL database")
def show(entity_type: str, entity_id: str, config: str | None, database_url: str | None) -> None:
    """Print one stored entity as JSON."""
    from .main import show as show_entity

    try:
        entity = asyncio.run(
            show_entity(
                entity_type,
                entity_id,
                config_path=config,
                overrides=_storage_overrides(database_url),
            )
        )
    except IndexerError as exc:
        raise click.ClickException(str(exc)) from exc

    if entity is None:
        raise click.ClickException(f"{entity_type} {entity_id} not found")
    click.echo(entity.model_dump_json(indent=2))


if __name__ == "__main__":
    main()
