"""strudelshelf CLI entry point."""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer

from strudelshelf.cli.catalog import add_cmd, list_cmd, remove_cmd
from strudelshelf.cli.common import configure_logging
from strudelshelf.cli.init import init_cmd
from strudelshelf.cli.preview import preview_cmd
from strudelshelf.cli.search import discover_cmd, search_cmd
from strudelshelf.cli.snippet import snippet_cmd


def _installed_version() -> str:
    try:
        return importlib.metadata.version("strudelshelf")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"strudelshelf {_installed_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="strudelshelf",
    help=(
        "strudelshelf: Strudel sample discovery and library.\n\n"
        "  strudelshelf search   GitHub manifests + local catalog in one list.\n"
        "  strudelshelf snippet  Strudel code for saved search results."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log discovery details to stderr."),
    ] = False,
) -> None:
    """strudelshelf: Strudel sample discovery and library."""
    configure_logging(verbose)


app.command("init")(init_cmd)
app.command("add")(add_cmd)
app.command("list")(list_cmd)
app.command("remove")(remove_cmd)
app.command("search")(search_cmd)
app.command("discover")(discover_cmd)
app.command("snippet")(snippet_cmd)
app.command("preview")(preview_cmd)


@app.command("version")
def version_cmd() -> None:
    """Show the installed strudelshelf version."""
    typer.echo(f"strudelshelf {_installed_version()}")


if __name__ == "__main__":
    app()
