"""strudelshelf init: create the catalog database and project config.

Creates:
  .strudelshelf.db              empty sample catalog with schema
  strudelshelf.yaml             project config (github/search/catalog sections)
  ~/.strudelshelf/config.yaml   global defaults (created once, mode 0o600)
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from strudelshelf.config import CatalogCfg, ensure_global_config, write_project_config
from strudelshelf.db.connection import Database
from strudelshelf.db.schema import initialize

console = Console()

_DEFAULT_PROJECT_DIR = Path(".")


def init_cmd(
    project_dir: Annotated[
        Path,
        typer.Argument(help="Directory to initialize. Defaults to current directory."),
    ] = _DEFAULT_PROJECT_DIR,
    global_config: Annotated[
        Path | None,
        typer.Option("--global-config", hidden=True, help="Override global config path (for testing)."),
    ] = None,
) -> None:
    """Create a sample catalog and a strudelshelf.yaml in PROJECT_DIR."""
    project_dir = project_dir.resolve()
    project_dir.mkdir(parents=True, exist_ok=True)

    db_name = CatalogCfg().db
    db_path = project_dir / db_name
    existed = db_path.exists()

    with Database(db_path) as conn:
        initialize(conn)
    if existed:
        console.print(f"  [yellow]⚠[/] {escape(str(db_path))} already exists; schema is up to date.")
    else:
        console.print(f"  [green]✓[/] {escape(str(db_path))}")

    cfg_path = write_project_config(project_dir, db_name)
    if cfg_path is not None:
        console.print(f"  [green]✓[/] {escape(str(cfg_path))}")
    else:
        console.print("  [dim]strudelshelf.yaml already present, left unchanged.[/]")

    global_path = ensure_global_config(global_config)
    console.print(f"  [green]✓[/] {escape(str(global_path))}")

    console.print(
        "\n[bold]Next:[/]\n"
        "  export GITHUB_TOKEN=ghp_...          (optional, raises rate limits)\n"
        "  strudelshelf add --name kick --file-path samples/kick.wav\n"
        "  strudelshelf search -q kick"
    )
