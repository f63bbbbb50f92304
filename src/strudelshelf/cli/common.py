"""Shared CLI plumbing: config loading, catalog access, search wiring."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from strudelshelf.cli.errors import err_config
from strudelshelf.config import ConfigError, ShelfConfig, github_token, load_config
from strudelshelf.db.connection import Database
from strudelshelf.db.schema import initialize
from strudelshelf.discovery.discovery import RepositoryDiscovery
from strudelshelf.discovery.github import GitHubClient, ManifestFetcher

console = Console()


def configure_logging(verbose: bool) -> None:
    """Route library logging through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def load_config_or_exit() -> ShelfConfig:
    try:
        return load_config()
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1)


def resolve_db(db: Path | None, cfg: ShelfConfig) -> Path:
    return db if db is not None else Path(cfg.catalog.db)


def open_db(db_path: Path) -> sqlite3.Connection:
    conn = Database(db_path).connect()
    initialize(conn)
    return conn


def build_discovery(cfg: ShelfConfig) -> RepositoryDiscovery:
    """Construct GitHub collaborators from config and the environment token."""
    client = GitHubClient(
        github_token(), api_url=cfg.github.api_url, timeout=cfg.github.timeout
    )
    fetcher = ManifestFetcher(timeout=cfg.github.timeout)
    return RepositoryDiscovery(
        client,
        fetcher,
        manifest_filename=cfg.github.manifest_filename,
        raw_url_template=cfg.github.raw_url_template,
    )
