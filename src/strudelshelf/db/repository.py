"""Repository for the local sample catalog.

Implements the catalog side of unified search: public samples filtered by a
case-insensitive substring of name or description and an exact category,
newest first.
"""

from __future__ import annotations

import sqlite3
import uuid

from strudelshelf.db.models import StoredSample

_COLUMNS = (
    "id, name, description, file_path, source_url, source, bpm, key, tags, "
    "author, category, duration, metadata, is_public, created_at"
)


class DuplicateSampleError(ValueError):
    """Raised when a sample with the same source and file path already exists."""


class SampleRepository:
    """Data access layer for catalog samples.

    Wraps an open sqlite3.Connection; the connection is owned by the caller
    and must be closed after use.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialise with an open database connection.

        Args:
            conn: An open sqlite3.Connection with the schema initialised
                (see strudelshelf.db.schema.initialize).
        """
        self._conn = conn
        # sqlite lower() folds ASCII only.
        conn.create_function("casefold", 1, _casefold, deterministic=True)

    def add_sample(self, sample: StoredSample) -> str:
        """Insert *sample* and return its id (generated when empty).

        Raises:
            DuplicateSampleError: If (source, file_path) is already stored.
        """
        sample_id = sample.id or str(uuid.uuid4())
        try:
            self._conn.execute(
                """
                INSERT INTO samples (id, name, description, file_path, source_url, source,
                                     bpm, key, tags, author, category, duration, metadata,
                                     is_public)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    sample_id,
                    sample.name,
                    sample.description,
                    sample.file_path,
                    sample.source_url,
                    sample.source,
                    sample.bpm,
                    sample.key,
                    sample.tags,
                    sample.author,
                    sample.category,
                    sample.duration,
                    sample.metadata,
                    int(sample.is_public),
                ),
            )
        except sqlite3.IntegrityError as exc:
            self._conn.rollback()
            if "UNIQUE" in str(exc):
                raise DuplicateSampleError(
                    f"Sample already in catalog: {sample.source} {sample.file_path}"
                ) from exc
            raise
        self._conn.commit()
        return sample_id

    def get_sample(self, sample_id: str) -> StoredSample | None:
        """Return a sample by id, or None if not found."""
        row = self._conn.execute(
            f"SELECT {_COLUMNS} FROM samples WHERE id = ?", (sample_id,)
        ).fetchone()
        return _row_to_sample(row) if row else None

    def list_samples(self) -> list[StoredSample]:
        """Return all samples, newest first, public or not."""
        rows = self._conn.execute(
            f"SELECT {_COLUMNS} FROM samples ORDER BY created_at DESC, rowid DESC"
        ).fetchall()
        return [_row_to_sample(r) for r in rows]

    def count_samples(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM samples").fetchone()[0]

    def delete_sample(self, sample_id: str) -> bool:
        """Delete a sample; return True if a row was removed."""
        cur = self._conn.execute("DELETE FROM samples WHERE id = ?", (sample_id,))
        self._conn.commit()
        return cur.rowcount > 0

    def find_public_samples(
        self, query: str = "", category: str | None = None, limit: int = 50
    ) -> list[StoredSample]:
        """Return public samples matching *query* and *category*, newest first.

        Args:
            query: Substring matched case-insensitively against name or
                description; empty matches everything.
            category: Exact category; None or empty matches everything.
            limit: Maximum number of rows.
        """
        clauses = ["is_public = 1"]
        params: list[object] = []
        if query:
            needle = query.casefold()
            clauses.append(
                "(instr(casefold(name), ?) > 0 OR instr(casefold(coalesce(description, '')), ?) > 0)"
            )
            params.extend([needle, needle])
        if category:
            clauses.append("category = ?")
            params.append(category)
        params.append(limit)

        rows = self._conn.execute(
            f"""
            SELECT {_COLUMNS} FROM samples
            WHERE {' AND '.join(clauses)}
            ORDER BY created_at DESC, rowid DESC
            LIMIT ?
            """,
            params,
        ).fetchall()
        return [_row_to_sample(r) for r in rows]


# ------------------------------------------------------------------
# Row mappers
# ------------------------------------------------------------------


def _casefold(value: str | None) -> str | None:
    return value.casefold() if value else value


def _row_to_sample(row: sqlite3.Row) -> StoredSample:
    return StoredSample(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        file_path=row["file_path"],
        source_url=row["source_url"],
        source=row["source"],
        bpm=row["bpm"],
        key=row["key"],
        tags=row["tags"],
        author=row["author"],
        category=row["category"],
        duration=row["duration"],
        metadata=row["metadata"],
        is_public=bool(row["is_public"]),
        created_at=row["created_at"],
    )
