"""strudelshelf add / list / remove: manage local catalog samples.

Usage:
  strudelshelf add --name kick --file-path /uploads/kick.wav --tags drums,909
  strudelshelf list
  strudelshelf remove --id <id> --yes
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from strudelshelf.audio.utils import format_duration, is_valid_audio_file
from strudelshelf.cli.common import console, load_config_or_exit, open_db, resolve_db
from strudelshelf.cli.errors import (
    err_duplicate_sample,
    err_no_db,
    err_not_audio,
    err_sample_not_found,
)
from strudelshelf.db.models import StoredSample
from strudelshelf.db.repository import DuplicateSampleError, SampleRepository
from strudelshelf.discovery.models import UPLOAD_SOURCE


def add_cmd(
    name: Annotated[str, typer.Option("--name", help="Sample name.")],
    file_path: Annotated[
        str, typer.Option("--file-path", help="Stored path or URL of the audio file.")
    ],
    source_url: Annotated[
        str | None,
        typer.Option("--source-url", help="Public URL; defaults to --file-path."),
    ] = None,
    description: Annotated[str | None, typer.Option("--description")] = None,
    category: Annotated[str | None, typer.Option("--category")] = None,
    tags: Annotated[
        str | None, typer.Option("--tags", help="Comma-separated tags.")
    ] = None,
    bpm: Annotated[int | None, typer.Option("--bpm", min=0)] = None,
    key: Annotated[str | None, typer.Option("--key", help="Musical key, e.g. 'C minor'.")] = None,
    author: Annotated[str | None, typer.Option("--author")] = None,
    duration: Annotated[
        float | None, typer.Option("--duration", min=0.0, help="Length in seconds.")
    ] = None,
    private: Annotated[
        bool, typer.Option("--private", help="Hide the sample from search.")
    ] = False,
    db: Annotated[Path | None, typer.Option("--db", help="Path to the catalog database.")] = None,
) -> None:
    """Register an uploaded sample in the local catalog."""
    cfg = load_config_or_exit()
    db_path = resolve_db(db, cfg)
    if not db_path.exists():
        console.print(err_no_db(str(db_path)))
        raise typer.Exit(1)

    if not is_valid_audio_file(file_path):
        console.print(err_not_audio(file_path))
        raise typer.Exit(1)

    tag_list = [t.strip() for t in tags.split(",") if t.strip()] if tags else []
    sample = StoredSample(
        id="",
        name=name,
        file_path=file_path,
        source_url=source_url,
        source=UPLOAD_SOURCE,
        description=description,
        bpm=bpm,
        key=key,
        tags=json.dumps(tag_list) if tag_list else None,
        author=author,
        category=category,
        duration=duration,
        is_public=not private,
    )

    conn = open_db(db_path)
    try:
        sample_id = SampleRepository(conn).add_sample(sample)
    except DuplicateSampleError:
        console.print(err_duplicate_sample(file_path))
        raise typer.Exit(1)
    finally:
        conn.close()

    console.print(f"[green]✓[/] Added {escape(name)}  [dim]id={sample_id}[/]")


def list_cmd(
    db: Annotated[Path | None, typer.Option("--db", help="Path to the catalog database.")] = None,
) -> None:
    """List every sample in the local catalog, newest first."""
    cfg = load_config_or_exit()
    db_path = resolve_db(db, cfg)
    if not db_path.exists():
        console.print(err_no_db(str(db_path)))
        raise typer.Exit(1)

    conn = open_db(db_path)
    try:
        samples = SampleRepository(conn).list_samples()
    finally:
        conn.close()

    if not samples:
        console.print("[dim]Catalog is empty.[/]")
        return

    table = Table(title=f"Catalog ({len(samples)})")
    table.add_column("ID", overflow="fold")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Length", justify="right")
    table.add_column("Public")
    for s in samples:
        table.add_row(
            s.id,
            escape(s.name),
            escape(s.category or ""),
            format_duration(s.duration) if s.duration is not None else "",
            "yes" if s.is_public else "no",
        )
    console.print(table)


def remove_cmd(
    sample_id: Annotated[str, typer.Option("--id", help="Catalog id of the sample.")],
    db: Annotated[Path | None, typer.Option("--db", help="Path to the catalog database.")] = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation prompt.")] = False,
) -> None:
    """Remove a sample from the local catalog."""
    cfg = load_config_or_exit()
    db_path = resolve_db(db, cfg)
    if not db_path.exists():
        console.print(err_no_db(str(db_path)))
        raise typer.Exit(1)

    conn = open_db(db_path)
    try:
        repo = SampleRepository(conn)
        existing = repo.get_sample(sample_id)
        if existing is None:
            console.print(err_sample_not_found(sample_id))
            raise typer.Exit(0)

        console.print(f"\nRemove sample: [bold]{escape(existing.name)}[/] ({escape(existing.file_path)})")
        if not yes and not typer.confirm("Confirm removal?", default=False):
            console.print("[dim]Cancelled.[/]")
            raise typer.Exit(0)

        repo.delete_sample(sample_id)
        console.print(f"[green]✓[/] Removed: {escape(existing.name)}")
    finally:
        conn.close()
