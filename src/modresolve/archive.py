"""In-memory reader for gzip-compressed TAR archives (npm tarballs).

The TAR stream is read as a tape of 512-byte blocks. Header fields are
fixed-offset: name [0:100), size (octal) [124:136), type flag at 156, and
for POSIX ustar archives a path prefix at [345:500). Header checksums are
not validated.
"""

from __future__ import annotations

import gzip
import logging
import zlib
from dataclasses import dataclass
from typing import List

from .constants import Constants
from .errors import ArchiveError

logger = logging.getLogger(__name__)

BLOCK_SIZE = Constants.TAR_BLOCK_SIZE
_ZERO_BLOCK = bytes(BLOCK_SIZE)
_USTAR_MAGIC = b"ustar\x00"

_TYPE_MAP = {
    b"0": "file",
    b"\x00": "file",
    b"5": "dir",
    b"2": "link",
}


@dataclass
class TarEntry:
    """One archive member."""
    path: str
    content: bytes
    size: int
    type: str  # "file" | "dir" | "link" | "other"


def _read_string(block: bytes, start: int, length: int) -> str:
    raw = block[start:start + length].split(b"\x00", 1)[0]
    return raw.decode("utf-8", errors="replace")


def _read_octal(block: bytes, start: int, length: int) -> int:
    raw = block[start:start + length].replace(b"\x00", b" ").strip()
    if not raw:
        return 0
    try:
        return int(raw, 8)
    except ValueError as exc:
        raise ArchiveError(f"Invalid octal field in TAR header: {raw!r}") from exc


def gunzip(data: bytes) -> bytes:
    """Decompress a complete gzip buffer."""
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as exc:
        raise ArchiveError(f"Gzip decompression failed: {exc}") from exc


def parse_tar(data: bytes) -> List[TarEntry]:
    """Parse an uncompressed TAR buffer into a flat list of entries."""
    entries: List[TarEntry] = []
    pos = 0
    total = len(data)

    while pos + BLOCK_SIZE <= total:
        header = data[pos:pos + BLOCK_SIZE]
        if header == _ZERO_BLOCK:
            following = data[pos + BLOCK_SIZE:pos + 2 * BLOCK_SIZE]
            if pos + BLOCK_SIZE >= total or following == _ZERO_BLOCK:
                break

        name = _read_string(header, 0, 100)
        size = _read_octal(header, 124, 12)
        if not name or size < 0:
            pos += BLOCK_SIZE
            continue

        if header[257:263] == _USTAR_MAGIC:
            prefix = _read_string(header, 345, 155)
            if prefix:
                name = f"{prefix}/{name}"

        data_start = pos + BLOCK_SIZE
        if data_start + size > total:
            raise ArchiveError(f"Truncated TAR entry {name!r}: needs {size} bytes")
        blocks = -(-size // BLOCK_SIZE)

        entries.append(
            TarEntry(
                path=name,
                content=data[data_start:data_start + size],
                size=size,
                type=_TYPE_MAP.get(header[156:157], "other"),
            )
        )
        pos = data_start + blocks * BLOCK_SIZE

    logger.debug("Parsed %d TAR entries", len(entries))
    return entries


def untar_gz(data: bytes) -> List[TarEntry]:
    """Decompress a gzip buffer and parse the TAR stream inside it."""
    return parse_tar(gunzip(data))
