"""Shared helpers: logging, HTTP, filesystem and on-disk cache."""
