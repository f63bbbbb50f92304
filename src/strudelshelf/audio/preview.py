"""Audio preview fetch with SSRF protection.

Security requirements:
- SSRF guard: ipaddress module blocks private/loopback/link-local ranges before
  any connection is established.
- Allowed URL schemes: https:// and http:// only.
- Content-Type whitelist: audio/* and application/octet-stream.
- Max response body: 25 MB.
- Timeout: 30 seconds (connect + read).
- Max redirects: 3.
"""

from __future__ import annotations

import ipaddress
import socket
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass

from strudelshelf.discovery.github import _LimitedRedirectHandler

_USER_AGENT = "Strudel-Sample-Library/1.0"
_MAX_BYTES = 25 * 1024 * 1024  # 25 MB
_TIMEOUT = 30  # seconds
_MAX_REDIRECTS = 3
_ALLOWED_SCHEMES = {"https", "http"}
_DEFAULT_CONTENT_TYPE = "audio/mpeg"


class SsrfError(ValueError):
    """Raised when a URL resolves to a private or reserved address."""


class PreviewError(RuntimeError):
    """Raised when a preview cannot be fetched."""


@dataclass(frozen=True)
class PreviewAudio:
    body: bytes
    content_type: str


def fetch_preview(url: str, *, timeout: float = _TIMEOUT) -> PreviewAudio:
    """Fetch the audio at *url* for playback preview.

    Raises:
        ValueError: If *url* has an unsupported scheme or no hostname.
        SsrfError: If the host resolves to a private or reserved address.
        PreviewError: On transport failure, non-audio content or oversize body.
    """
    validate_scheme(url)
    check_ssrf(url)

    request = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
    opener = urllib.request.build_opener(_LimitedRedirectHandler(_MAX_REDIRECTS))

    try:
        with opener.open(request, timeout=timeout) as response:
            raw_ct = response.headers.get("Content-Type") or _DEFAULT_CONTENT_TYPE
            body = response.read(_MAX_BYTES + 1)
    except urllib.error.HTTPError as exc:
        raise PreviewError(f"Failed to fetch audio file '{url}': HTTP {exc.code}") from exc
    except (OSError, RuntimeError) as exc:
        raise PreviewError(f"Failed to fetch audio file '{url}': {exc}") from exc

    ct = raw_ct.split(";")[0].strip().lower()
    if not (ct.startswith("audio/") or ct == "application/octet-stream"):
        raise PreviewError(f"Unsupported Content-Type '{ct}' for URL '{url}'.")
    if len(body) > _MAX_BYTES:
        raise PreviewError(
            f"Audio file exceeds {_MAX_BYTES // (1024 * 1024)} MB limit for URL '{url}'."
        )
    return PreviewAudio(body=body, content_type=ct)


def validate_scheme(url: str) -> None:
    parsed = urllib.parse.urlparse(url)
    if parsed.scheme not in _ALLOWED_SCHEMES:
        raise ValueError(
            f"Unsupported URL scheme '{parsed.scheme}'. Only https:// and http:// are allowed."
        )


def check_ssrf(url: str) -> None:
    """Resolve the hostname and block private/reserved IP ranges.

    Raises SsrfError if any resolved address is private, loopback,
    link-local, or otherwise reserved.
    """
    hostname = urllib.parse.urlparse(url).hostname
    if not hostname:
        raise ValueError(f"URL has no hostname: {url}")

    try:
        addrinfos = socket.getaddrinfo(hostname, None)
    except socket.gaierror as exc:
        raise ValueError(f"DNS resolution failed for '{hostname}': {exc}") from exc

    for addrinfo in addrinfos:
        try:
            ip = ipaddress.ip_address(addrinfo[4][0])
        except ValueError:
            continue
        if (
            ip.is_private
            or ip.is_loopback
            or ip.is_link_local
            or ip.is_reserved
            or ip.is_multicast
            or ip.is_unspecified
        ):
            raise SsrfError(
                f"URL resolves to private address ({ip}). "
                "Access to internal network addresses is not allowed."
            )
