"""Audio file helpers."""

from __future__ import annotations

from pathlib import PurePosixPath

AUDIO_MIME_TYPES = frozenset(["audio/wav", "audio/mpeg", "audio/mp3", "audio/ogg", "audio/webm"])
AUDIO_EXTENSIONS = frozenset([".wav", ".mp3", ".ogg", ".webm"])


def is_valid_audio_file(filename: str, content_type: str | None = None) -> bool:
    """Return True if *content_type* or the extension of *filename* is a supported audio format."""
    if content_type and content_type.split(";")[0].strip().lower() in AUDIO_MIME_TYPES:
        return True
    return PurePosixPath(filename).suffix.lower() in AUDIO_EXTENSIONS


def format_duration(seconds: float) -> str:
    """Format *seconds* as ``M:SS`` (fractions truncated)."""
    total = max(0, int(seconds))
    return f"{total // 60}:{total % 60:02d}"
