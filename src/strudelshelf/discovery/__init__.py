"""strudelshelf discovery pipeline: extraction, GitHub discovery, unified search."""

from strudelshelf.discovery.discovery import RepositoryDiscovery
from strudelshelf.discovery.extractor import extract, extract_report
from strudelshelf.discovery.github import (
    CodeSearchError,
    CodeSearchHit,
    GitHubClient,
    ManifestFetchError,
    ManifestFetcher,
)
from strudelshelf.discovery.models import (
    DiscoveryReport,
    FieldWarning,
    SampleDescriptor,
    SearchResult,
    SourceFilter,
)
from strudelshelf.discovery.search import CatalogDataError, SampleSearch

__all__ = [
    "CatalogDataError",
    "CodeSearchError",
    "CodeSearchHit",
    "DiscoveryReport",
    "FieldWarning",
    "GitHubClient",
    "ManifestFetchError",
    "ManifestFetcher",
    "RepositoryDiscovery",
    "SampleDescriptor",
    "SampleSearch",
    "SearchResult",
    "SourceFilter",
    "extract",
    "extract_report",
]
