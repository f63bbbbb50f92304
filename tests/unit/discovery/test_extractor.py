"""Tests for manifest extraction."""

from __future__ import annotations

import pytest

from strudelshelf.discovery.extractor import (
    extract,
    extract_report,
    manifest_directory,
    resolve_path,
)

MANIFEST_URL = "https://raw.example.com/owner/repo/main/strudel.json"


# ------------------------------------------------------------------
# Path resolution
# ------------------------------------------------------------------


def test_relative_path_joined_to_manifest_directory():
    (sample,) = extract({"samples": {"kick": "kick.wav"}}, MANIFEST_URL, "owner/repo")
    assert sample.source_url == "https://raw.example.com/owner/repo/main/kick.wav"
    assert sample.file_path == sample.source_url
    assert sample.author == "owner"
    assert sample.source == "github:owner/repo"
    assert sample.name == "kick"
    assert sample.tags == ()


@pytest.mark.parametrize(
    "url",
    [
        "https://cdn.example.com/kit/kick.wav",
        "http://example.org/a.wav",
        "ftp://files.example.net/b.wav",
    ],
)
def test_absolute_url_unchanged(url):
    (sample,) = extract({"samples": {"kick": url}}, MANIFEST_URL, "owner/repo")
    assert sample.source_url == url


def test_nested_relative_path():
    assert (
        resolve_path("drums/808/bd.wav", MANIFEST_URL)
        == "https://raw.example.com/owner/repo/main/drums/808/bd.wav"
    )


def test_leading_slash_gives_single_separator():
    assert resolve_path("/kick.wav", MANIFEST_URL) == "https://raw.example.com/owner/repo/main/kick.wav"


def test_dot_segments_not_normalised():
    assert resolve_path("../kick.wav", MANIFEST_URL) == "https://raw.example.com/owner/repo/main/../kick.wav"


def test_manifest_directory():
    assert manifest_directory(MANIFEST_URL) == "https://raw.example.com/owner/repo/main"


def test_relative_manifest_url_rejected():
    with pytest.raises(ValueError, match="absolute"):
        extract({"samples": {}}, "owner/repo/strudel.json", "owner/repo")


# ------------------------------------------------------------------
# Entry shapes
# ------------------------------------------------------------------


def test_object_entry_copies_metadata():
    manifest = {
        "samples": {
            "bass": {
                "src": "bass/sub.wav",
                "bpm": 120,
                "key": "F minor",
                "tags": ["sub", "808"],
                "category": "bass",
                "description": "Deep sub",
                "license": "CC0",
            }
        }
    }
    (sample,) = extract(manifest, MANIFEST_URL, "owner/repo")
    assert sample.source_url == "https://raw.example.com/owner/repo/main/bass/sub.wav"
    assert sample.bpm == 120
    assert sample.key == "F minor"
    assert sample.tags == ("sub", "808")
    assert sample.category == "bass"
    assert sample.description == "Deep sub"
    assert sample.metadata == {"license": "CC0"}


def test_object_entry_without_tags_defaults_empty():
    (sample,) = extract({"samples": {"a": {"src": "a.wav"}}}, MANIFEST_URL, "o/r")
    assert sample.tags == ()
    assert sample.bpm is None


def test_integral_float_bpm_accepted():
    (sample,) = extract({"samples": {"a": {"src": "a.wav", "bpm": 90.0}}}, MANIFEST_URL, "o/r")
    assert sample.bpm == 90


def test_order_preserved():
    manifest = {"samples": {"z": "z.wav", "a": "a.wav", "m": "m.wav"}}
    assert [s.name for s in extract(manifest, MANIFEST_URL, "o/r")] == ["z", "a", "m"]


def test_name_not_sanitised():
    (sample,) = extract({"samples": {"Kick 01 (dry)": "k.wav"}}, MANIFEST_URL, "o/r")
    assert sample.name == "Kick 01 (dry)"


def test_unknown_top_level_keys_ignored():
    manifest = {"_base": "ignored", "version": 2, "samples": {"a": "a.wav"}}
    assert len(extract(manifest, MANIFEST_URL, "o/r")) == 1


# ------------------------------------------------------------------
# Empty / malformed input
# ------------------------------------------------------------------


def test_missing_samples_returns_empty():
    report = extract_report({"name": "kit"}, MANIFEST_URL, "o/r")
    assert report.samples == []
    assert report.skipped == []


def test_non_object_manifest_returns_empty():
    assert extract(["a.wav"], MANIFEST_URL, "o/r") == ()


def test_samples_not_object_recorded_as_skip():
    report = extract_report({"samples": ["a.wav"]}, MANIFEST_URL, "o/r")
    assert report.samples == []
    assert len(report.skipped) == 1
    assert "must be an object" in report.skipped[0].reason


def test_entry_without_src_skipped_others_kept():
    manifest = {"samples": {"a": "a.wav", "broken": {"bpm": 100}, "c": "c.wav"}}
    report = extract_report(manifest, MANIFEST_URL, "owner/repo")
    assert [s.name for s in report.samples] == ["a", "c"]
    (skipped,) = report.skipped
    assert skipped.name == "broken"
    assert skipped.repository == "owner/repo"
    assert "src" in skipped.reason


@pytest.mark.parametrize(
    "entry, reason",
    [
        (42, "path or an object"),
        ([], "path or an object"),
        ({"src": ""}, "src"),
        ({"src": 7}, "src"),
    ],
)
def test_invalid_entries_skipped_with_reason(entry, reason):
    report = extract_report({"samples": {"x": entry}}, MANIFEST_URL, "o/r")
    assert report.samples == []
    assert reason in report.skipped[0].reason


@pytest.mark.parametrize(
    "bad, reason",
    [(-5, "non-negative"), ("fast", "integer"), ("120", "integer"), (True, "integer")],
)
def test_bad_bpm_keeps_entry(bad, reason):
    entry = {"src": "k.wav", "bpm": bad, "category": "drums"}
    report = extract_report({"samples": {"kick": entry}}, MANIFEST_URL, "owner/repo")

    (sample,) = report.samples
    assert sample.bpm is None
    assert sample.category == "drums"
    assert sample.metadata == {"bpm": bad}
    assert report.skipped == []
    (warning,) = report.warnings
    assert (warning.name, warning.field_name, warning.repository) == ("kick", "bpm", "owner/repo")
    assert reason in warning.reason


def test_single_string_tag_wrapped():
    report = extract_report(
        {"samples": {"kick": {"src": "k.wav", "tags": "drums"}}}, MANIFEST_URL, "o/r"
    )
    (sample,) = report.samples
    assert sample.tags == ("drums",)
    assert report.skipped == []
    assert report.warnings == []


def test_non_list_tags_keeps_entry():
    report = extract_report(
        {"samples": {"kick": {"src": "k.wav", "tags": {"a": 1}}}}, MANIFEST_URL, "o/r"
    )
    (sample,) = report.samples
    assert sample.tags == ()
    assert sample.metadata == {"tags": {"a": 1}}
    (warning,) = report.warnings
    assert warning.field_name == "tags"


def test_only_missing_src_loses_an_entry():
    manifest = {
        "samples": {
            "a": {"src": "a.wav", "bpm": "slow", "tags": 3},
            "b": {"bpm": 100},
        }
    }
    report = extract_report(manifest, MANIFEST_URL, "o/r")
    assert [s.name for s in report.samples] == ["a"]
    assert [e.name for e in report.skipped] == ["b"]
    assert sorted(w.field_name for w in report.warnings) == ["bpm", "tags"]


def test_extract_is_pure():
    manifest = {"samples": {"a": "a.wav", "b": {"src": "b.wav", "tags": ["t"], "extra": 1}}}
    first = extract(manifest, MANIFEST_URL, "o/r")
    second = extract(manifest, MANIFEST_URL, "o/r")
    assert first == second
    assert manifest == {"samples": {"a": "a.wav", "b": {"src": "b.wav", "tags": ["t"], "extra": 1}}}
