"""strudelshelf search / discover: unified sample search and remote discovery.

Usage:
  strudelshelf search -q kick --category drums
  strudelshelf search --source upload --json samples.json
  strudelshelf discover -q 808 --max-repos 5
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from strudelshelf.audio.utils import format_duration
from strudelshelf.cli.common import (
    build_discovery,
    console,
    load_config_or_exit,
    open_db,
    resolve_db,
)
from strudelshelf.cli.errors import err_catalog_data, err_code_search_failed, err_no_db
from strudelshelf.config import github_token
from strudelshelf.db.repository import SampleRepository
from strudelshelf.discovery.github import CodeSearchError
from strudelshelf.discovery.models import DiscoveryReport, SampleDescriptor, SourceFilter
from strudelshelf.discovery.search import CatalogDataError, SampleSearch


def search_cmd(
    query: Annotated[
        str,
        typer.Option("--query", "-q", help="Text matched against names and descriptions."),
    ] = "",
    category: Annotated[
        str | None,
        typer.Option("--category", "-c", help="Exact category to keep."),
    ] = None,
    source: Annotated[
        str | None,
        typer.Option("--source", help="Sources to search: all, github or upload."),
    ] = None,
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-n", min=0, help="Maximum number of results."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the catalog database."),
    ] = None,
    json_out: Annotated[
        Path | None,
        typer.Option("--json", help="Also write results to this JSON file."),
    ] = None,
) -> None:
    """Search GitHub manifests and the local catalog."""
    cfg = load_config_or_exit()
    source_value = source or cfg.search.source
    try:
        sources = SourceFilter(source_value)
    except ValueError:
        console.print(
            f"[red]Error:[/] Unknown --source '{escape(source_value)}'. "
            "Use all, github or upload."
        )
        raise typer.Exit(1)

    discovery = build_discovery(cfg) if sources.includes_remote else None

    conn = None
    catalog = None
    if sources.includes_local:
        db_path = resolve_db(db, cfg)
        if not db_path.exists():
            console.print(err_no_db(str(db_path)))
            raise typer.Exit(1)
        conn = open_db(db_path)
        catalog = SampleRepository(conn)

    try:
        searcher = SampleSearch(
            discovery, catalog, remote_repository_cap=cfg.github.max_repositories
        )
        result = searcher.search(
            query=query,
            category=category,
            source_filter=sources,
            limit=cfg.search.limit if limit is None else limit,
        )
    except CodeSearchError as exc:
        console.print(err_code_search_failed(str(exc), has_token=github_token() is not None))
        raise typer.Exit(1)
    except CatalogDataError as exc:
        console.print(err_catalog_data(str(exc)))
        raise typer.Exit(1)
    finally:
        if conn is not None:
            conn.close()

    if result.samples:
        console.print(_samples_table(result.samples))
    else:
        console.print("[yellow]No samples found.[/]")

    if result.discovery is not None:
        _print_discovery_problems(result.discovery)

    console.print(f"\n[bold]{len(result.samples)}[/] sample(s)")

    if json_out is not None:
        _write_json(json_out, result.samples)


def discover_cmd(
    query: Annotated[
        str,
        typer.Option("--query", "-q", help="Extra code-search terms."),
    ] = "",
    max_repos: Annotated[
        int | None,
        typer.Option("--max-repos", min=1, help="Maximum repositories to inspect."),
    ] = None,
    json_out: Annotated[
        Path | None,
        typer.Option("--json", help="Also write samples to this JSON file."),
    ] = None,
) -> None:
    """Find strudel.json manifests on GitHub and list their samples."""
    cfg = load_config_or_exit()
    discovery = build_discovery(cfg)

    try:
        report = discovery.discover(query, max_repos or cfg.github.max_repositories)
    except CodeSearchError as exc:
        console.print(err_code_search_failed(str(exc), has_token=github_token() is not None))
        raise typer.Exit(1)

    table = Table(title="Repositories")
    table.add_column("Repository")
    table.add_column("Samples", justify="right")
    table.add_column("Status")
    failed = {f.repository: f.reason for f in report.failures}
    for repo in report.repositories:
        count = sum(1 for s in report.samples if s.source == f"github:{repo}")
        status = f"[red]✗ {escape(failed[repo])}[/]" if repo in failed else "[green]✓[/]"
        table.add_row(escape(repo), str(count), status)
    console.print(table)

    if report.skipped:
        console.print(f"[yellow]{len(report.skipped)} skipped manifest entries:[/]")
        for entry in report.skipped:
            console.print(
                f"  [dim]{escape(entry.repository)}[/] {escape(entry.name)}: {escape(entry.reason)}"
            )

    if report.warnings:
        console.print(f"[dim]{len(report.warnings)} ignored manifest field(s):[/]")
        for note in report.warnings:
            console.print(
                f"  [dim]{escape(note.repository)}[/] {escape(note.name)}.{note.field_name}: "
                f"{escape(note.reason)}"
            )

    console.print(
        f"\n[bold]{len(report.samples)}[/] sample(s) from "
        f"{len(report.repositories) - len(report.failures)}/{len(report.repositories)} repositories"
    )

    if json_out is not None:
        _write_json(json_out, report.samples)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _samples_table(samples: list[SampleDescriptor]) -> Table:
    table = Table()
    table.add_column("Name")
    table.add_column("Source")
    table.add_column("Category")
    table.add_column("BPM", justify="right")
    table.add_column("Key")
    table.add_column("Length", justify="right")
    table.add_column("URL", overflow="fold")
    for s in samples:
        table.add_row(
            escape(s.name),
            escape(s.source),
            escape(s.category or ""),
            str(s.bpm) if s.bpm is not None else "",
            escape(s.key or ""),
            format_duration(s.duration) if s.duration is not None else "",
            escape(s.source_url),
        )
    return table


def _print_discovery_problems(report: DiscoveryReport) -> None:
    for failure in report.failures:
        console.print(
            f"[yellow]⚠[/] No samples from {escape(failure.repository)}: {escape(failure.reason)}"
        )
    if report.skipped:
        console.print(
            f"[yellow]⚠[/] {len(report.skipped)} skipped manifest entries "
            "(run strudelshelf --verbose search for details)."
        )


def _write_json(path: Path, samples: list[SampleDescriptor]) -> None:
    path.write_text(
        json.dumps([s.to_dict() for s in samples], indent=2, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
    console.print(f"[green]✓[/] Wrote {len(samples)} sample(s) to {escape(str(path))}")
