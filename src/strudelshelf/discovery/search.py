"""Unified search over remote manifests and the local sample catalog.

Merge order: remote samples first, then local ones. Results are not
deduplicated across sources; a sample published on GitHub and also uploaded
locally appears twice.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

from strudelshelf.db.models import StoredSample
from strudelshelf.discovery.discovery import RepositoryDiscovery
from strudelshelf.discovery.models import (
    SampleDescriptor,
    SearchResult,
    SourceFilter,
)

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
DEFAULT_REMOTE_REPOSITORY_CAP = 10


class CatalogDataError(ValueError):
    """Raised when a stored catalog record holds unparseable JSON."""


class SampleCatalog(Protocol):
    def find_public_samples(
        self, query: str = "", category: str | None = None, limit: int = DEFAULT_LIMIT
    ) -> list[StoredSample]: ...


class SampleSearch:
    """Search GitHub manifests and the local catalog as one list.

    Args:
        discovery: Remote discovery; may be None when only local search is used.
        catalog: Local catalog; may be None when only remote search is used.
        remote_repository_cap: Repository cap passed to discovery.
    """

    def __init__(
        self,
        discovery: RepositoryDiscovery | None,
        catalog: SampleCatalog | None,
        *,
        remote_repository_cap: int = DEFAULT_REMOTE_REPOSITORY_CAP,
    ) -> None:
        self.discovery = discovery
        self.catalog = catalog
        self.remote_repository_cap = remote_repository_cap

    def search(
        self,
        query: str = "",
        category: str | None = None,
        source_filter: SourceFilter | str = SourceFilter.ALL,
        limit: int = DEFAULT_LIMIT,
    ) -> SearchResult:
        """Return up to *limit* samples matching *query* and *category*.

        Raises:
            ValueError: On an unknown *source_filter* or a negative *limit*.
            CodeSearchError: If remote sources are requested and code search fails.
            CatalogDataError: If a stored record has invalid tags/metadata JSON.
        """
        sources = SourceFilter(source_filter)
        if limit < 0:
            raise ValueError("limit must be >= 0")

        result = SearchResult()

        if sources.includes_remote:
            if self.discovery is None:
                raise ValueError("remote search requested but no discovery is configured")
            report = self.discovery.discover(query, self.remote_repository_cap)
            report.log_to(logger)
            result.discovery = report
            result.samples.extend(report.samples)

        if sources.includes_local:
            if self.catalog is None:
                raise ValueError("local search requested but no catalog is configured")
            records = self.catalog.find_public_samples(
                query=query, category=category or None, limit=limit
            )
            result.samples.extend(descriptor_from_record(r) for r in records)

        # Remote samples were never category-filtered.
        if category and sources == SourceFilter.ALL:
            result.samples = [s for s in result.samples if s.category == category]

        del result.samples[limit:]
        return result


def descriptor_from_record(record: StoredSample) -> SampleDescriptor:
    """Map a stored catalog record to a descriptor.

    Raises:
        CatalogDataError: If ``tags`` or ``metadata`` is not valid JSON.
    """
    return SampleDescriptor(
        id=record.id,
        name=record.name,
        description=record.description,
        file_path=record.file_path,
        source_url=record.source_url or record.file_path,
        source=record.source,
        bpm=record.bpm,
        key=record.key,
        tags=tuple(_parse_json(record, "tags", record.tags, [])),
        author=record.author,
        category=record.category,
        duration=record.duration,
        metadata=_parse_json(record, "metadata", record.metadata, {}),
    )


def _parse_json(record: StoredSample, field_name: str, text: str | None, empty: Any) -> Any:
    if not text:
        return empty
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise CatalogDataError(
            f"Catalog sample '{record.id}' has invalid {field_name} JSON: {exc}"
        ) from exc
