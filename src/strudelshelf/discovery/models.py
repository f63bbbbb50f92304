"""Value objects shared by discovery, search and snippet generation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

UPLOAD_SOURCE = "upload"
GITHUB_SOURCE_PREFIX = "github:"


class SourceFilter(str, Enum):
    """Which sources a unified search draws from."""

    ALL = "all"
    GITHUB = "github"
    UPLOAD = "upload"

    @property
    def includes_remote(self) -> bool:
        return self in (SourceFilter.ALL, SourceFilter.GITHUB)

    @property
    def includes_local(self) -> bool:
        return self in (SourceFilter.ALL, SourceFilter.UPLOAD)


@dataclass(frozen=True)
class SampleDescriptor:
    """One playable sample, regardless of where it was found.

    Attributes:
        name: Identifier; unique within one manifest only.
        source_url: Resolved location of the playable asset.
        file_path: Stored path of the asset; defaults to *source_url*.
        source: ``"upload"`` or ``"github:<owner>/<repo>"``.
        tags: Ordered tags; empty tuple when none.
        metadata: Fields not otherwise modelled.
        id: Catalog row id for local samples, None for remote ones.
    """

    name: str
    source_url: str
    source: str
    file_path: str = ""
    description: str | None = None
    bpm: int | None = None
    key: str | None = None
    tags: tuple[str, ...] = ()
    author: str | None = None
    category: str | None = None
    duration: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    id: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("sample name must not be empty")
        if not self.source_url:
            raise ValueError(f"sample '{self.name}' has no source URL")
        if self.bpm is not None and (isinstance(self.bpm, bool) or not isinstance(self.bpm, int)):
            raise ValueError(f"bpm must be an integer (got {self.bpm!r})")
        if self.bpm is not None and self.bpm < 0:
            raise ValueError(f"bpm must be non-negative (got {self.bpm})")
        if self.duration is not None and self.duration < 0:
            raise ValueError(f"duration must be non-negative (got {self.duration})")
        # Frozen: normalise through object.__setattr__.
        if not isinstance(self.tags, tuple):
            object.__setattr__(self, "tags", tuple(self.tags))
        if not self.file_path:
            object.__setattr__(self, "file_path", self.source_url)

    @property
    def is_remote(self) -> bool:
        return self.source.startswith(GITHUB_SOURCE_PREFIX)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable representation."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "filePath": self.file_path,
            "sourceUrl": self.source_url,
            "source": self.source,
            "bpm": self.bpm,
            "key": self.key,
            "tags": list(self.tags),
            "author": self.author,
            "category": self.category,
            "duration": self.duration,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SampleDescriptor:
        """Rebuild a descriptor from :meth:`to_dict` output.

        Raises:
            ValueError: If required fields are missing or invalid.
        """
        try:
            name = data["name"]
            source_url = data["sourceUrl"]
        except KeyError as exc:
            raise ValueError(f"sample record is missing field {exc}") from exc
        return cls(
            name=name,
            source_url=source_url,
            source=data.get("source") or UPLOAD_SOURCE,
            file_path=data.get("filePath") or "",
            description=data.get("description"),
            bpm=data.get("bpm"),
            key=data.get("key"),
            tags=tuple(data.get("tags") or ()),
            author=data.get("author"),
            category=data.get("category"),
            duration=data.get("duration"),
            metadata=dict(data.get("metadata") or {}),
            id=data.get("id"),
        )


# ---------------------------------------------------------------------------
# Per-item outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SkippedEntry:
    """A manifest entry that did not become a descriptor."""

    name: str
    reason: str
    repository: str = ""


@dataclass(frozen=True)
class FieldWarning:
    """A kept entry whose field was dropped; the raw value is in its metadata."""

    name: str
    field_name: str
    reason: str
    repository: str = ""


@dataclass
class ExtractionReport:
    """Descriptors, skipped entries and dropped fields from one manifest."""

    samples: list[SampleDescriptor] = field(default_factory=list)
    skipped: list[SkippedEntry] = field(default_factory=list)
    warnings: list[FieldWarning] = field(default_factory=list)


@dataclass(frozen=True)
class RepositoryFailure:
    """A repository whose manifest could not be fetched or parsed."""

    repository: str
    manifest_url: str
    reason: str


@dataclass
class DiscoveryReport:
    """Outcome of one discovery run.

    Attributes:
        samples: All descriptors, in repository-encounter order.
        repositories: Repository labels returned by code search, in order.
        failures: Repositories that contributed nothing.
        skipped: Manifest entries skipped across all repositories.
        warnings: Fields dropped from kept entries.
    """

    samples: list[SampleDescriptor] = field(default_factory=list)
    repositories: list[str] = field(default_factory=list)
    failures: list[RepositoryFailure] = field(default_factory=list)
    skipped: list[SkippedEntry] = field(default_factory=list)
    warnings: list[FieldWarning] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures and not self.skipped

    def log_to(self, logger: logging.Logger) -> None:
        """Write failures and skipped entries as warnings, dropped fields as info."""
        for failure in self.failures:
            logger.warning(
                "No samples from %s (%s): %s",
                failure.repository,
                failure.manifest_url,
                failure.reason,
            )
        for entry in self.skipped:
            logger.warning(
                "Skipped sample '%s' in %s: %s", entry.name, entry.repository, entry.reason
            )
        for note in self.warnings:
            logger.info(
                "Dropped %s of sample '%s' in %s: %s",
                note.field_name,
                note.name,
                note.repository,
                note.reason,
            )


@dataclass
class SearchResult:
    """Merged search output; *discovery* is None when no remote source was queried."""

    samples: list[SampleDescriptor] = field(default_factory=list)
    discovery: DiscoveryReport | None = None
