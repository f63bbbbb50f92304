"""Tests for SampleSearch (unified remote + local search)."""

from __future__ import annotations

import json

import pytest

from strudelshelf.db.models import StoredSample
from strudelshelf.db.repository import SampleRepository
from strudelshelf.discovery.github import CodeSearchError
from strudelshelf.discovery.models import DiscoveryReport, SampleDescriptor, SourceFilter
from strudelshelf.discovery.search import (
    CatalogDataError,
    SampleSearch,
    descriptor_from_record,
)


class FakeDiscovery:
    def __init__(self, samples=(), error=None):
        self.samples = list(samples)
        self.error = error
        self.calls = []

    def discover(self, query="", max_repositories=10):
        self.calls.append((query, max_repositories))
        if self.error:
            raise self.error
        return DiscoveryReport(samples=list(self.samples), repositories=["o/r"])


class FakeCatalog:
    def __init__(self, records=()):
        self.records = list(records)
        self.calls = []

    def find_public_samples(self, query="", category=None, limit=50):
        self.calls.append({"query": query, "category": category, "limit": limit})
        return [r for r in self.records if not category or r.category == category][:limit]


def _remote(name, category=None):
    return SampleDescriptor(
        name=name,
        source_url=f"https://raw.githubusercontent.com/o/r/main/{name}.wav",
        source="github:o/r",
        author="o",
        category=category,
    )


def _record(id, name="kick", category=None, tags=None, metadata=None, source_url="u"):
    return StoredSample(
        id=id,
        name=name,
        file_path=f"/uploads/{id}.wav",
        source_url=source_url,
        category=category,
        tags=tags,
        metadata=metadata,
    )


# ------------------------------------------------------------------
# Source selection
# ------------------------------------------------------------------


def test_github_only_skips_catalog():
    discovery = FakeDiscovery([_remote("kick")])
    catalog = FakeCatalog([_record("l1")])
    result = SampleSearch(discovery, catalog).search("kick", source_filter="github")

    assert [s.name for s in result.samples] == ["kick"]
    assert catalog.calls == []
    assert discovery.calls == [("kick", 10)]
    assert result.discovery is not None


def test_upload_only_skips_discovery():
    discovery = FakeDiscovery([_remote("kick")])
    catalog = FakeCatalog([_record("l1")])
    result = SampleSearch(discovery, catalog).search("kick", source_filter=SourceFilter.UPLOAD)

    assert [s.id for s in result.samples] == ["l1"]
    assert discovery.calls == []
    assert result.discovery is None


def test_all_puts_remote_before_local():
    discovery = FakeDiscovery([_remote("a"), _remote("b")])
    catalog = FakeCatalog([_record("l1"), _record("l2")])
    result = SampleSearch(discovery, catalog).search()

    assert [s.source for s in result.samples] == ["github:o/r", "github:o/r", "upload", "upload"]


def test_remote_repository_cap_passed():
    discovery = FakeDiscovery()
    SampleSearch(discovery, FakeCatalog(), remote_repository_cap=3).search("x", source_filter="github")
    assert discovery.calls == [("x", 3)]


def test_unknown_source_filter():
    with pytest.raises(ValueError):
        SampleSearch(FakeDiscovery(), FakeCatalog()).search(source_filter="soundcloud")


def test_negative_limit():
    with pytest.raises(ValueError):
        SampleSearch(FakeDiscovery(), FakeCatalog()).search(limit=-1)


def test_missing_collaborator_for_requested_source():
    with pytest.raises(ValueError, match="catalog"):
        SampleSearch(FakeDiscovery(), None).search(source_filter="upload")
    with pytest.raises(ValueError, match="discovery"):
        SampleSearch(None, FakeCatalog()).search(source_filter="github")


# ------------------------------------------------------------------
# Failure handling
# ------------------------------------------------------------------


def test_search_failure_propagates():
    discovery = FakeDiscovery(error=CodeSearchError("HTTP 403"))
    with pytest.raises(CodeSearchError):
        SampleSearch(discovery, FakeCatalog()).search("kick", source_filter="github")


def test_search_failure_propagates_for_all():
    discovery = FakeDiscovery(error=CodeSearchError("down"))
    with pytest.raises(CodeSearchError):
        SampleSearch(discovery, FakeCatalog([_record("l1")])).search("kick")


def test_invalid_catalog_json_is_hard_error():
    catalog = FakeCatalog([_record("bad", tags="[not json")])
    with pytest.raises(CatalogDataError, match="bad"):
        SampleSearch(None, catalog).search(source_filter="upload")


# ------------------------------------------------------------------
# Category filtering + limit
# ------------------------------------------------------------------


def test_category_pre_filters_local_and_post_filters_remote():
    discovery = FakeDiscovery([_remote("kick", "drums"), _remote("sub", "bass"), _remote("plain")])
    catalog = FakeCatalog([_record("l1", category="drums"), _record("l2", category="bass")])

    result = SampleSearch(discovery, catalog).search("kick", category="drums", limit=50)

    assert catalog.calls == [{"query": "kick", "category": "drums", "limit": 50}]
    assert [(s.source, s.name) for s in result.samples] == [
        ("github:o/r", "kick"),
        ("upload", "kick"),
    ]
    assert all(s.category == "drums" for s in result.samples)


def test_github_only_does_not_post_filter_category():
    discovery = FakeDiscovery([_remote("kick", "drums"), _remote("sub", "bass")])
    result = SampleSearch(discovery, None).search(category="drums", source_filter="github")
    assert [s.name for s in result.samples] == ["kick", "sub"]


def test_limit_truncates_merged_list():
    discovery = FakeDiscovery([_remote(f"r{i}") for i in range(4)])
    catalog = FakeCatalog([_record(f"l{i}") for i in range(4)])
    result = SampleSearch(discovery, catalog).search(limit=5)
    assert len(result.samples) == 5
    assert [s.name for s in result.samples[:4]] == ["r0", "r1", "r2", "r3"]


def test_limit_zero():
    result = SampleSearch(FakeDiscovery([_remote("a")]), FakeCatalog([_record("l")])).search(limit=0)
    assert result.samples == []


def test_cross_source_duplicates_kept():
    url = "https://raw.githubusercontent.com/o/r/main/kick.wav"
    discovery = FakeDiscovery([_remote("kick")])
    catalog = FakeCatalog([_record("l1", source_url=url)])
    result = SampleSearch(discovery, catalog).search("kick")
    assert [s.source_url for s in result.samples] == [url, url]


# ------------------------------------------------------------------
# Record mapping
# ------------------------------------------------------------------


def test_record_mapping_parses_json_fields():
    record = _record("l1", tags=json.dumps(["909", "dry"]), metadata=json.dumps({"bits": 24}))
    record.bpm = 128
    record.duration = 0.5
    sample = descriptor_from_record(record)

    assert sample.id == "l1"
    assert sample.tags == ("909", "dry")
    assert sample.metadata == {"bits": 24}
    assert sample.bpm == 128
    assert sample.source == "upload"
    assert sample.file_path == "/uploads/l1.wav"


def test_record_mapping_null_json_fields():
    sample = descriptor_from_record(_record("l1"))
    assert sample.tags == ()
    assert sample.metadata == {}


def test_record_without_source_url_uses_file_path():
    sample = descriptor_from_record(_record("l1", source_url=None))
    assert sample.source_url == "/uploads/l1.wav"


def test_sqlite_catalog_end_to_end(tmp_db):
    repo = SampleRepository(tmp_db)
    repo.add_sample(StoredSample(id="k", name="Kick", file_path="/k.wav", category="drums"))
    repo.add_sample(StoredSample(id="s", name="Snare", file_path="/s.wav", category="drums"))
    repo.add_sample(StoredSample(id="p", name="Kick pad", file_path="/p.wav", is_public=False))

    result = SampleSearch(None, repo).search("kick", source_filter="upload")
    assert [s.id for s in result.samples] == ["k"]
    assert result.samples[0].source_url == "/k.wav"
