"""GitHub collaborators: code search and raw manifest fetch.

Both clients are constructed explicitly and injected into RepositoryDiscovery;
nothing here holds module-level credentials.

Fetch limits:
- Allowed URL schemes: https:// and http:// only.
- Max manifest body: 1 MB.
- Timeout: 30 seconds by default (connect + read).
- Max redirects: 3.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

_USER_AGENT = "strudelshelf/0.1"
_GITHUB_ACCEPT = "application/vnd.github+json"
_MAX_MANIFEST_BYTES = 1024 * 1024  # 1 MB
_TIMEOUT = 30.0  # seconds
_MAX_REDIRECTS = 3
_MAX_PER_PAGE = 100  # GitHub search API cap
_ALLOWED_SCHEMES = {"https", "http"}


class CodeSearchError(RuntimeError):
    """Raised when the code-search call itself fails."""


class ManifestFetchError(RuntimeError):
    """Raised when a manifest cannot be fetched or is not a JSON object."""


@dataclass(frozen=True)
class CodeSearchHit:
    """One file returned by code search.

    Attributes:
        repository: Repository full name (``owner/repo``).
        path: File path inside the repository.
        html_url: Browser URL of the file.
        default_branch: Repository default branch; None when the API omits it.
    """

    repository: str
    path: str
    html_url: str
    default_branch: str | None = None


class GitHubClient:
    """Minimal GitHub REST client for the code-search endpoint."""

    def __init__(
        self,
        token: str | None = None,
        *,
        api_url: str = "https://api.github.com",
        timeout: float = _TIMEOUT,
        opener: urllib.request.OpenerDirector | None = None,
    ) -> None:
        """
        Args:
            token: Optional token; anonymous access has a lower rate limit.
            api_url: Base URL of the REST API.
            timeout: Request timeout in seconds.
            opener: Prebuilt opener (tests pass a fake).
        """
        self._token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._opener = opener

    def search_code(self, query: str, per_page: int = 10) -> list[CodeSearchHit]:
        """Run a code search and return the hits, at most *per_page* of them.

        Malformed items are logged and left out.

        Raises:
            CodeSearchError: On transport, HTTP-status or payload errors.
        """
        per_page = max(1, min(per_page, _MAX_PER_PAGE))
        params = urllib.parse.urlencode({"q": query, "per_page": per_page})
        url = f"{self.api_url}/search/code?{params}"

        headers = {"Accept": _GITHUB_ACCEPT, "User-Agent": _USER_AGENT}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        logger.debug("GitHub code search: %s", query)
        try:
            request = urllib.request.Request(url, headers=headers)
            with _open(self._opener, request, timeout=self.timeout) as response:
                payload = json.loads(response.read().decode("utf-8"))
        except urllib.error.HTTPError as exc:
            raise CodeSearchError(f"GitHub code search failed: HTTP {exc.code} {exc.reason}") from exc
        except (OSError, RuntimeError) as exc:
            raise CodeSearchError(f"GitHub code search failed: {exc}") from exc
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise CodeSearchError(f"GitHub code search returned invalid JSON: {exc}") from exc

        items = payload.get("items") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            raise CodeSearchError("GitHub code search response has no 'items' list.")
        hits = []
        for item in items[:per_page]:
            hit = _hit_from_item(item)
            if hit is not None:
                hits.append(hit)
        return hits


class ManifestFetcher:
    """Fetch a raw manifest URL and parse it as a JSON object."""

    def __init__(
        self,
        *,
        timeout: float = _TIMEOUT,
        opener: urllib.request.OpenerDirector | None = None,
    ) -> None:
        self.timeout = timeout
        self._opener = opener

    def fetch(self, url: str) -> dict[str, Any]:
        """Return the manifest at *url*.

        Raises:
            ManifestFetchError: On bad scheme, non-success status, transport
                error, oversize body, invalid JSON, or a non-object document.
        """
        scheme = urllib.parse.urlparse(url).scheme
        if scheme not in _ALLOWED_SCHEMES:
            raise ManifestFetchError(
                f"Unsupported URL scheme '{scheme}'. Only https:// and http:// are allowed."
            )

        request = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
        try:
            with _open(self._opener, request, timeout=self.timeout) as response:
                body = response.read(_MAX_MANIFEST_BYTES + 1)
        except urllib.error.HTTPError as exc:
            raise ManifestFetchError(f"HTTP {exc.code} fetching '{url}'") from exc
        except (OSError, RuntimeError) as exc:
            raise ManifestFetchError(f"Failed to fetch '{url}': {exc}") from exc

        if len(body) > _MAX_MANIFEST_BYTES:
            raise ManifestFetchError(
                f"Manifest exceeds {_MAX_MANIFEST_BYTES // 1024} KB limit: '{url}'"
            )

        try:
            data = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ManifestFetchError(f"Invalid JSON in '{url}': {exc}") from exc

        if not isinstance(data, dict):
            raise ManifestFetchError(
                f"Manifest at '{url}' is a JSON {type(data).__name__}, expected an object."
            )
        return data


def _hit_from_item(item: Any) -> CodeSearchHit | None:
    try:
        repo = item["repository"]
        return CodeSearchHit(
            repository=str(repo["full_name"]),
            path=str(item["path"]),
            html_url=str(item.get("html_url", "")),
            default_branch=repo.get("default_branch") or None,
        )
    except (KeyError, TypeError, AttributeError) as exc:
        logger.warning("Ignoring malformed code-search item: %r (%s)", item, exc)
        return None


class _LimitedRedirectHandler(urllib.request.HTTPRedirectHandler):
    """Raise an error after more than *max_redirects* redirects."""

    def __init__(self, max_redirects: int) -> None:
        self._max_redirects = max_redirects
        self._count = 0

    def redirect_request(self, req, fp, code, msg, headers, newurl):
        self._count += 1
        if self._count > self._max_redirects:
            raise RuntimeError(
                f"Too many redirects (>{self._max_redirects}) for URL '{req.full_url}'."
            )
        return super().redirect_request(req, fp, code, msg, headers, newurl)


def _open(
    opener: urllib.request.OpenerDirector | None,
    request: urllib.request.Request,
    timeout: float,
):
    # Fresh opener per request so the redirect count starts at zero.
    if opener is None:
        opener = urllib.request.build_opener(_LimitedRedirectHandler(_MAX_REDIRECTS))
    return opener.open(request, timeout=timeout)
