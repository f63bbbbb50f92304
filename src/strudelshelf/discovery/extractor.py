"""Manifest extraction: strudel.json documents to sample descriptors.

Path resolution is directory-prefix concatenation onto the manifest URL.
``./`` and ``../`` segments are passed through untouched.
"""

from __future__ import annotations

import logging
import re
import urllib.parse
from collections.abc import Mapping
from typing import Any

from strudelshelf.discovery.models import (
    GITHUB_SOURCE_PREFIX,
    ExtractionReport,
    FieldWarning,
    SampleDescriptor,
    SkippedEntry,
)

logger = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")

# Entry keys with a dedicated descriptor field; everything else goes to metadata.
_MODELLED_KEYS = frozenset(["src", "bpm", "key", "tags", "category", "description"])


def extract(
    manifest: Any, manifest_url: str, repository_label: str
) -> tuple[SampleDescriptor, ...]:
    """Return the descriptors found in *manifest*, in manifest order."""
    return tuple(extract_report(manifest, manifest_url, repository_label).samples)


def extract_report(
    manifest: Any, manifest_url: str, repository_label: str
) -> ExtractionReport:
    """Extract descriptors from *manifest* and record every skipped entry.

    Args:
        manifest: Parsed JSON document (untrusted).
        manifest_url: Absolute URL the manifest was fetched from.
        repository_label: ``owner/repo`` the manifest belongs to.

    Returns:
        ExtractionReport with descriptors in manifest insertion order.

    Raises:
        ValueError: If *manifest_url* is not an absolute URL.
    """
    _validate_manifest_url(manifest_url)
    report = ExtractionReport()

    if not isinstance(manifest, Mapping):
        return report
    samples = manifest.get("samples")
    if samples is None:
        return report
    if not isinstance(samples, Mapping):
        report.skipped.append(
            SkippedEntry(
                name="samples",
                reason=f"'samples' must be an object, got {type(samples).__name__}",
                repository=repository_label,
            )
        )
        return report

    base = manifest_directory(manifest_url)
    source = f"{GITHUB_SOURCE_PREFIX}{repository_label}"
    author = repository_label.split("/")[0] or None

    for name, value in samples.items():
        try:
            sample, dropped = _build(str(name), value, base, source, author)
        except ValueError as exc:
            logger.debug("Skipping '%s' in %s: %s", name, repository_label, exc)
            report.skipped.append(
                SkippedEntry(name=str(name), reason=str(exc), repository=repository_label)
            )
            continue
        report.samples.append(sample)
        report.warnings.extend(
            FieldWarning(
                name=str(name), field_name=field_name, reason=reason, repository=repository_label
            )
            for field_name, reason in dropped
        )

    return report


def resolve_path(path: str, manifest_url: str) -> str:
    """Resolve a manifest *path* against the directory of *manifest_url*."""
    return _resolve_from_base(path, manifest_directory(manifest_url))


def manifest_directory(manifest_url: str) -> str:
    """Return *manifest_url* without its final path segment."""
    return manifest_url[: manifest_url.rfind("/")]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _validate_manifest_url(url: str) -> None:
    parsed = urllib.parse.urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"manifest URL must be absolute: '{url}'")


def _build(
    name: str, value: Any, base: str, source: str, author: str | None
) -> tuple[SampleDescriptor, list[tuple[str, str]]]:
    """Return the descriptor for one entry and the ``(field, reason)`` pairs dropped from it."""
    if isinstance(value, str):
        sample = SampleDescriptor(
            name=name,
            source_url=_resolve_from_base(value, base),
            source=source,
            author=author,
        )
        return sample, []

    if not isinstance(value, Mapping):
        raise ValueError(f"entry must be a path or an object, got {type(value).__name__}")

    src = value.get("src")
    if not isinstance(src, str) or not src:
        raise ValueError("entry has no 'src' path")

    metadata = {k: v for k, v in value.items() if k not in _MODELLED_KEYS}
    dropped: list[tuple[str, str]] = []

    # Unusable bpm/tags go to metadata verbatim.
    try:
        bpm = _bpm(value.get("bpm"))
    except ValueError as exc:
        bpm = None
        metadata["bpm"] = value["bpm"]
        dropped.append(("bpm", str(exc)))
    try:
        tags = _tags(value.get("tags"))
    except ValueError as exc:
        tags = ()
        metadata["tags"] = value["tags"]
        dropped.append(("tags", str(exc)))

    sample = SampleDescriptor(
        name=name,
        source_url=_resolve_from_base(src, base),
        source=source,
        description=_optional_str(value.get("description")),
        bpm=bpm,
        key=_optional_str(value.get("key")),
        tags=tags,
        author=author,
        category=_optional_str(value.get("category")),
        metadata=metadata,
    )
    return sample, dropped


def _resolve_from_base(path: str, base: str) -> str:
    if _SCHEME_RE.match(path):
        return path
    return f"{base}/{path.lstrip('/')}"


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _bpm(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"bpm must be an integer (got {value!r})")
    if value < 0:
        raise ValueError(f"bpm must be non-negative (got {value})")
    return value


def _tags(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list):
        raise ValueError(f"tags must be a list (got {type(value).__name__})")
    return tuple(str(t) for t in value)
