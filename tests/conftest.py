"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from strudelshelf.db.connection import Database
from strudelshelf.db.schema import initialize


@pytest.fixture
def tmp_db(tmp_path):
    """File-based catalog DB in tmp_path with schema initialized, closed after test."""
    db = Database(tmp_path / ".strudelshelf.db")
    conn = db.connect()
    initialize(conn)
    yield conn
    conn.close()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep the real ~/.strudelshelf and GitHub credentials out of every test."""
    monkeypatch.setattr(
        "strudelshelf.config._GLOBAL_CONFIG_PATH", tmp_path / "no-global" / "config.yaml"
    )
    for var in ("GITHUB_TOKEN", "STRUDELSHELF_DB", "STRUDELSHELF_GITHUB_API_URL"):
        monkeypatch.delenv(var, raising=False)
