"""Catalog record model."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class StoredSample:
    id: str
    name: str
    file_path: str
    source_url: str | None = None
    source: str = "upload"
    description: str | None = None
    bpm: int | None = None
    key: str | None = None
    tags: str | None = None  # JSON array text
    author: str | None = None
    category: str | None = None
    duration: float | None = None
    metadata: str | None = None  # JSON object text
    is_public: bool = True
    created_at: str | None = None
