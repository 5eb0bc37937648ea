"""Tests for the on-disk cache store."""

import json

from modresolve.common import disk_cache
from modresolve.common.disk_cache import DiskCache


class TestDiskCache:
    """JSON documents with TTL stamps."""

    def test_path_is_rooted(self, cache_dir):
        """Test that keys map under the cache root."""
        cache = DiskCache(cache_dir)
        assert cache.path("jsr", "std", "assert", "meta.json") == f"{cache_dir}/jsr/std/assert/meta.json"

    def test_stamped_round_trip(self, cache_dir):
        """Test that a stamped document reads back within its TTL."""
        cache = DiskCache(cache_dir)
        path = cache.path("jsr", "a", "b", "meta.json")
        cache.write_json(path, {"latest": "1.0.0"}, stamp=True)

        data = cache.read_json(path, ttl_seconds=60)
        assert data["latest"] == "1.0.0"
        assert "_cachedAt" in data

    def test_expired_document_reads_as_miss(self, cache_dir, monkeypatch):
        """Test that an expired document is a miss."""
        cache = DiskCache(cache_dir)
        path = cache.path("meta.json")
        cache.write_json(path, {"latest": "1.0.0"}, stamp=True)
        stamp = json.loads(open(path).read())["_cachedAt"]

        monkeypatch.setattr(disk_cache, "now_ms", lambda: stamp + 61_000)
        assert cache.read_json(path, ttl_seconds=60) is None
        assert cache.read_json(path) is not None

    def test_unstamped_document_is_expired_under_ttl(self, cache_dir):
        """Test that a document without a stamp is a miss under a TTL."""
        cache = DiskCache(cache_dir)
        path = cache.path("meta.json")
        cache.write_json(path, {"latest": "1.0.0"})
        assert cache.read_json(path, ttl_seconds=3600) is None

    def test_corrupt_document_reads_as_miss(self, cache_dir, write_file):
        """Test that unreadable JSON is a miss."""
        cache = DiskCache(cache_dir)
        path = write_file(cache.path("broken.json"), "{not json")
        assert cache.read_json(path) is None

    def test_write_bytes_creates_parents(self, cache_dir):
        """Test that writes create missing directories."""
        cache = DiskCache(cache_dir)
        path = cache.path("http", "example.com", "abc", "mod.ts")
        cache.write_bytes(path, b"export {}")
        assert cache.exists(path)
        assert cache.read_bytes(path) == b"export {}"
