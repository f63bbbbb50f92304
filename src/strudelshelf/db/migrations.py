"""Catalog schema versions and the runner that brings a database up to date.

Each applied version is recorded as a row in ``schema_version``; versions are
never edited or removed once released, only appended.
"""

from __future__ import annotations

import sqlite3

# Created outside MIGRATIONS so the runner can read the current version.
_CREATE_SCHEMA_VERSION = """
CREATE TABLE IF NOT EXISTS schema_version (
    version     INTEGER NOT NULL,
    applied_at  DATETIME NOT NULL DEFAULT (datetime('now'))
)
"""

# tags and metadata hold JSON text; NULL means empty.
_V1_SQL = """
CREATE TABLE IF NOT EXISTS samples (
    id              TEXT PRIMARY KEY,
    name            TEXT NOT NULL,
    description     TEXT,
    file_path       TEXT NOT NULL,
    source_url      TEXT,
    source          TEXT NOT NULL DEFAULT 'upload',
    bpm             INTEGER CHECK (bpm IS NULL OR bpm >= 0),
    key             TEXT,
    tags            TEXT,
    author          TEXT,
    category        TEXT,
    duration        REAL CHECK (duration IS NULL OR duration >= 0),
    metadata        TEXT,
    is_public       INTEGER NOT NULL DEFAULT 1,
    created_at      DATETIME NOT NULL DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now')),
    UNIQUE (source, file_path)
);

CREATE INDEX IF NOT EXISTS idx_samples_category ON samples(category);
"""

# (version, sql) pairs in release order. executescript() commits first.
MIGRATIONS: list[tuple[int, str]] = [
    (1, _V1_SQL),
]


def run_migrations(conn: sqlite3.Connection) -> None:
    """Run every migration newer than the recorded version of *conn*.

    A database already at the latest version is left untouched.
    """
    conn.execute(_CREATE_SCHEMA_VERSION)
    conn.commit()

    current = conn.execute(
        "SELECT COALESCE(MAX(version), 0) FROM schema_version"
    ).fetchone()[0]

    pending = [(v, sql) for v, sql in MIGRATIONS if v > current]
    for version, sql in pending:
        conn.executescript(sql)
        conn.execute("INSERT INTO schema_version (version) VALUES (?)", (version,))
        conn.commit()
