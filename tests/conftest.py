"""Shared fixtures for resolver tests."""

import os

import pytest

from modresolve.config import ResolverConfig


@pytest.fixture
def cache_dir(tmp_path):
    path = tmp_path / "cache"
    path.mkdir()
    return str(path)


@pytest.fixture
def config(cache_dir):
    """Silent config rooted at a temporary cache directory."""
    return ResolverConfig(cache_dir=cache_dir, silent=True)


@pytest.fixture
def write_file():
    """Create a file (and its parents) with the given text."""
    def _write(path, text=""):
        os.makedirs(os.path.dirname(str(path)), exist_ok=True)
        with open(str(path), "w", encoding="utf-8") as fh:
            fh.write(text)
        return str(path)
    return _write
