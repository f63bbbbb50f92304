"""Repository discovery: code search, sequential manifest fetch, extraction.

A failed manifest fetch costs only that repository's samples; a failed
code search fails the whole run.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from strudelshelf.discovery.extractor import extract_report
from strudelshelf.discovery.github import CodeSearchHit, ManifestFetchError
from strudelshelf.discovery.models import DiscoveryReport, RepositoryFailure

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST_FILENAME = "strudel.json"
DEFAULT_RAW_URL_TEMPLATE = "https://raw.githubusercontent.com/{repository}/{branch}/{path}"
_FALLBACK_BRANCH = "HEAD"


class CodeSearchClient(Protocol):
    def search_code(self, query: str, per_page: int = ...) -> list[CodeSearchHit]: ...


class ManifestSource(Protocol):
    def fetch(self, url: str) -> dict[str, Any]: ...


class RepositoryDiscovery:
    """Find manifests through code search and extract their samples.

    Args:
        client: Code-search collaborator (see GitHubClient).
        fetcher: Manifest fetch collaborator (see ManifestFetcher).
        manifest_filename: File name passed to the ``filename:`` qualifier.
        raw_url_template: Format string with ``{repository}``, ``{branch}``
            and ``{path}`` placeholders.
    """

    def __init__(
        self,
        client: CodeSearchClient,
        fetcher: ManifestSource,
        *,
        manifest_filename: str = DEFAULT_MANIFEST_FILENAME,
        raw_url_template: str = DEFAULT_RAW_URL_TEMPLATE,
    ) -> None:
        self.client = client
        self.fetcher = fetcher
        self.manifest_filename = manifest_filename
        self.raw_url_template = raw_url_template

    def build_query(self, query: str = "") -> str:
        return f"filename:{self.manifest_filename} {query}".strip()

    def raw_url(self, hit: CodeSearchHit) -> str:
        return self.raw_url_template.format(
            repository=hit.repository,
            branch=hit.default_branch or _FALLBACK_BRANCH,
            path=hit.path,
        )

    def discover(self, query: str = "", max_repositories: int = 10) -> DiscoveryReport:
        """Search for manifests matching *query* and aggregate their samples.

        Raises:
            ValueError: If *max_repositories* is less than 1.
            CodeSearchError: If the code-search call fails.
        """
        if max_repositories < 1:
            raise ValueError("max_repositories must be >= 1")

        hits = self.client.search_code(self.build_query(query), per_page=max_repositories)
        report = DiscoveryReport()

        for hit in hits[:max_repositories]:
            report.repositories.append(hit.repository)
            manifest_url = self.raw_url(hit)
            try:
                manifest = self.fetcher.fetch(manifest_url)
            except ManifestFetchError as exc:
                logger.debug("Manifest fetch failed for %s: %s", hit.repository, exc)
                report.failures.append(
                    RepositoryFailure(
                        repository=hit.repository, manifest_url=manifest_url, reason=str(exc)
                    )
                )
                continue

            extraction = extract_report(manifest, manifest_url, hit.repository)
            logger.debug(
                "%s: %d samples, %d skipped",
                hit.repository,
                len(extraction.samples),
                len(extraction.skipped),
            )
            report.samples.extend(extraction.samples)
            report.skipped.extend(extraction.skipped)
            report.warnings.extend(extraction.warnings)

        return report
