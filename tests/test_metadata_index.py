"""
Tests for the JSON metadata index.
"""

import json
import os
from datetime import datetime, timezone

from image_cache.entities import MetadataRecordEntity
from image_cache.repositories import JsonMetadataIndex

URL = "https://example.com/a.png"


def record(key: str, url: str = URL, width: int | str = 200, fmt: str = "webp") -> MetadataRecordEntity:
    return MetadataRecordEntity(
        cache_key=key,
        source_url=url,
        requested_width=width,
        requested_quality=80,
        image_format=fmt,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def test_record_then_get(metadata_index):
    metadata_index.record("acme", "k1", record("k1"))
    assert metadata_index.get("acme", "k1") == record("k1")
    assert metadata_index.get("acme", "k2") is None


def test_find_by_url_ignores_parameters(metadata_index):
    metadata_index.record("acme", "k1", record("k1", width=200, fmt="webp"))
    metadata_index.record("acme", "k2", record("k2", width="original", fmt="jpeg"))

    found = metadata_index.find_by_url("acme", URL)
    assert found is not None
    assert found.cache_key == "k1"
    assert found.image_format == "webp"


def test_find_by_url_misses_unknown_url(metadata_index):
    metadata_index.record("acme", "k1", record("k1"))
    assert metadata_index.find_by_url("acme", "https://example.com/other.png") is None


def test_namespaces_have_separate_indexes(metadata_index):
    metadata_index.record("acme", "k1", record("k1"))
    assert metadata_index.find_by_url("globex", URL) is None
    assert metadata_index.count("acme") == 1
    assert metadata_index.count("globex") == 0


def test_index_is_persisted_as_key_to_record_map(files, metadata_index):
    metadata_index.record("acme", "k1", record("k1"))

    path = files.namespace_dir("acme") / "metadata.json"
    data = json.loads(path.read_text())
    assert data == {
        "k1": {
            "cache_key": "k1",
            "source_url": URL,
            "requested_width": 200,
            "requested_quality": 80,
            "format": "webp",
            "created_at": "2024-01-01T00:00:00+00:00",
        }
    }


def test_new_instance_reads_existing_index(files, metadata_index):
    metadata_index.record("acme", "k1", record("k1"))

    reopened = JsonMetadataIndex(files)
    assert reopened.find_by_url("acme", URL) == record("k1")


def test_changes_by_another_process_are_picked_up(files, metadata_index):
    other = JsonMetadataIndex(files)
    assert metadata_index.find_by_url("acme", URL) is None

    other.record("acme", "k1", record("k1"))
    path = files.namespace_dir("acme") / "metadata.json"
    # Guarantee a visible mtime change on coarse-grained filesystems
    stat = path.stat()
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))

    assert metadata_index.find_by_url("acme", URL) == record("k1")


def test_corrupt_index_is_treated_as_empty(files, metadata_index):
    directory = files.namespace_dir("acme")
    directory.mkdir(parents=True)
    (directory / "metadata.json").write_text("{not json")

    assert metadata_index.find_by_url("acme", URL) is None
    metadata_index.record("acme", "k1", record("k1"))
    assert metadata_index.count("acme") == 1
