"""Tests for the HTTP(S) resolver."""

import os
from unittest.mock import patch

import pytest

from modresolve.errors import FetchError
from modresolve.resolvers.http import HttpResolver, url_basename


class TestHttpResolver:
    """Caching and relative resolution for remote modules."""

    @patch("modresolve.resolvers.http.fetch_bytes")
    def test_resolve_downloads_once(self, mock_fetch, config):
        """Test that a URL is downloaded only once."""
        mock_fetch.return_value = b"export const a = 1;"
        resolver = HttpResolver(config)
        url = "https://deno.land/x/mod/a.ts"

        assert resolver.resolve(url) == url
        assert resolver.resolve(url) == url
        assert mock_fetch.call_count == 1

        local = resolver.get_local_path(url)
        assert local.startswith(os.path.join(config.cache_dir, "http", "deno.land"))
        assert local.endswith("/a.ts")
        with open(local, "rb") as fh:
            assert fh.read() == b"export const a = 1;"

    @patch("modresolve.resolvers.http.fetch_bytes")
    def test_existing_cache_file_skips_fetch(self, mock_fetch, config, write_file):
        """Test that a file already on disk is not fetched."""
        resolver = HttpResolver(config)
        url = "https://example.com/lib/mod.js"
        write_file(resolver.cache_path(url), "cached")

        fresh = HttpResolver(config)
        assert fresh.resolve(url) == url
        mock_fetch.assert_not_called()
        assert fresh.get_local_path(url) == resolver.cache_path(url)

    @patch("modresolve.resolvers.http.fetch_bytes")
    def test_fetch_error_propagates(self, mock_fetch, config):
        """Test that fetch errors reach the caller."""
        mock_fetch.side_effect = FetchError("https://example.com/x.ts", 500)
        with pytest.raises(FetchError):
            HttpResolver(config).resolve("https://example.com/x.ts")

    def test_cache_path_is_deterministic_and_distinct(self, config):
        """Test cache path stability and host port handling."""
        resolver = HttpResolver(config)
        a = resolver.cache_path("https://example.com:8443/a/mod.ts")
        assert a == resolver.cache_path("https://example.com:8443/a/mod.ts")
        assert a != resolver.cache_path("https://example.com:8443/b/mod.ts")
        assert "/http/example.com_8443/" in a

    @patch("modresolve.resolvers.http.fetch_bytes")
    def test_resolve_relative_same_origin(self, mock_fetch, config):
        """Test relative imports against a URL parent."""
        mock_fetch.return_value = b""
        resolver = HttpResolver(config)

        result = resolver.resolve_relative("../util/b.ts", "https://example.com/pkg/src/a.ts")

        assert result == "https://example.com/pkg/util/b.ts"
        assert mock_fetch.call_args.args[0] == "https://example.com/pkg/util/b.ts"

    @patch("modresolve.resolvers.http.fetch_bytes")
    def test_resolve_relative_cannot_escape_root(self, mock_fetch, config):
        """Test that .. stops at the URL root."""
        mock_fetch.return_value = b""
        result = HttpResolver(config).resolve_relative("../../../x.ts", "http://example.com/a.ts")
        assert result == "http://example.com/x.ts"

    def test_url_basename(self):
        """Test basename extraction and the default name."""
        assert url_basename("https://example.com/a/b.ts?x=1#frag") == "b.ts"
        assert url_basename("https://example.com/") == "index.js"
        assert url_basename("https://example.com") == "index.js"

    def test_url_basename_dot_segments(self):
        """Test that dot segments never become the cached file name."""
        assert url_basename("https://example.com/a/..") == "index.js"
        assert url_basename("https://example.com/a/.") == "index.js"

    @patch("modresolve.resolvers.http.fetch_bytes")
    def test_resolve_url_ending_in_dot_segment(self, mock_fetch, config):
        """Test that a URL ending in .. is cached as a regular file."""
        mock_fetch.return_value = b"up"
        resolver = HttpResolver(config)
        url = "https://example.com/a/.."

        assert resolver.resolve(url) == url
        local = resolver.get_local_path(url)
        assert local.endswith("/index.js")
        assert os.path.isfile(local)

    @patch("modresolve.resolvers.http.fetch_bytes")
    def test_is_cached(self, mock_fetch, config):
        """Test that is_cached reports resolved URLs and files on disk."""
        mock_fetch.return_value = b"x"
        resolver = HttpResolver(config)
        url = "https://example.com/seen.ts"

        assert not resolver.is_cached(url)
        resolver.resolve(url)
        assert resolver.is_cached(url)
        assert HttpResolver(config).is_cached(url)
        assert not resolver.is_cached("https://example.com/unseen.ts")
