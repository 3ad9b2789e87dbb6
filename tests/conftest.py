"""Shared archive builders for the test suite."""

from __future__ import annotations

import io
import zipfile
import zlib
from collections.abc import Callable, Iterable
from pathlib import Path

import pytest

from jardiff.archive import ArchiveEntry, ArchiveIndex

EntrySpec = tuple[str, bytes] | tuple[str, bytes, int]


@pytest.fixture
def make_archive(tmp_path: Path) -> Callable[..., Path]:
    """Write a zip under tmp_path from ordered (name, bytes) pairs."""

    def _make(
        filename: str,
        entries: Iterable[tuple[str, bytes]],
        compression: int = zipfile.ZIP_DEFLATED,
    ) -> Path:
        path = tmp_path / filename
        with zipfile.ZipFile(path, "w", compression=compression) as archive:
            for name, data in entries:
                archive.writestr(name, data)
        return path

    return _make


def memory_entry(name: str, data: bytes, checksum: int | None = None) -> ArchiveEntry:
    return ArchiveEntry(
        name=name,
        checksum=zlib.crc32(data) if checksum is None else checksum,
        size=len(data),
        opener=lambda: io.BytesIO(data),
    )


@pytest.fixture
def memory_index() -> Callable[[Iterable[EntrySpec]], ArchiveIndex]:
    """Build an in-memory index; a third tuple item forces the checksum."""

    def _build(specs: Iterable[EntrySpec]) -> ArchiveIndex:
        entries = []
        for spec in specs:
            checksum = spec[2] if len(spec) == 3 else None
            entries.append(memory_entry(spec[0], spec[1], checksum))
        return ArchiveIndex(entries)

    return _build


@pytest.fixture
def read_zip() -> Callable[[Path], dict[str, bytes]]:
    def _read(path: Path) -> dict[str, bytes]:
        with zipfile.ZipFile(path) as archive:
            return {info.filename: archive.read(info) for info in archive.infolist()}

    return _read
