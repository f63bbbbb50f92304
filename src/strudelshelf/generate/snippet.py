"""Strudel code snippets for selected samples.

Single sample:   s("kick").sound("https://.../kick.wav")
Several samples: stack(
                   s("kick").sound("..."),
                   s("snare").sound("...")
                 )

Names are sanitized only inside ``stack(...)``. Quotes in names, URLs and
patterns are emitted as-is, so a value containing ``"`` yields broken code.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from strudelshelf.discovery.models import SampleDescriptor

EMPTY_SELECTION = "// No samples selected"
EMPTY_COLLECTION = "// No samples in collection"

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9_]")


def sanitize_name(name: str) -> str:
    """Replace every character outside ``[A-Za-z0-9_]`` with ``_``."""
    return _UNSAFE_NAME_CHARS.sub("_", name)


def sample_call(sample: SampleDescriptor, *, sanitize: bool = True) -> str:
    name = sanitize_name(sample.name) if sanitize else sample.name
    return f's("{name}").sound("{sample.source_url}")'


def generate_snippet(samples: Sequence[SampleDescriptor]) -> str:
    """Return Strudel code referencing *samples*.

    One sample keeps its raw name; two or more are wrapped in ``stack(...)``
    with sanitized names.
    """
    if not samples:
        return EMPTY_SELECTION
    if len(samples) == 1:
        return sample_call(samples[0], sanitize=False)
    return _stack([f"  {sample_call(s)}" for s in samples])


def generate_collection_snippet(
    samples: Sequence[SampleDescriptor], pattern: str | None = None
) -> str:
    """Return a ``stack(...)`` of *samples*, each chained with *pattern* if given."""
    if not samples:
        return EMPTY_COLLECTION
    suffix = f'.pattern("{pattern}")' if pattern else ""
    return _stack([f"  {sample_call(s)}{suffix}" for s in samples])


def _stack(lines: list[str]) -> str:
    return "stack(\n" + ",\n".join(lines) + "\n)"
