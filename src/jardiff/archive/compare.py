"""Streaming byte-for-byte comparison of archive entries."""

from __future__ import annotations

import zipfile
import zlib
from typing import BinaryIO

from jardiff.archive.models import ArchiveEntry
from jardiff.errors import ArchiveReadError

DEFAULT_BLOCK_SIZE = 2048

_STREAM_ERRORS = (OSError, EOFError, zlib.error, zipfile.BadZipFile)


def entries_equal(
    first: ArchiveEntry, second: ArchiveEntry, block_size: int = DEFAULT_BLOCK_SIZE
) -> bool:
    """Return True when both entries hold identical bytes of identical length."""
    if block_size < 1:
        raise ValueError("block_size must be a positive integer.")
    with first.open() as first_stream, second.open() as second_stream:
        offset = 0
        while True:
            first_block = read_block(first_stream, block_size, first.name, offset)
            second_block = read_block(second_stream, block_size, second.name, offset)
            if first_block != second_block:
                return False
            if not first_block:
                return True
            offset += len(first_block)


def read_block(stream: BinaryIO, block_size: int, entry_name: str, offset: int) -> bytes:
    """Read up to block_size bytes, short only at end of stream."""
    chunks: list[bytes] = []
    remaining = block_size
    while remaining > 0:
        try:
            chunk = stream.read(remaining)
        except _STREAM_ERRORS as exc:
            raise ArchiveReadError(
                f"Failed reading entry stream: {exc}", entry_name=entry_name, offset=offset
            ) from exc
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
        offset += len(chunk)
    return b"".join(chunks)
