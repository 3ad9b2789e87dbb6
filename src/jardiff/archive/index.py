"""Archive loading into name and checksum lookups."""

from __future__ import annotations

import zipfile
from collections.abc import Iterable, Iterator
from pathlib import Path
from types import TracebackType
from typing import BinaryIO

from jardiff.archive.models import ArchiveEntry
from jardiff.errors import ArchiveOpenError, ArchiveReadError


class ArchiveIndex:
    """Read-only view of an archive keyed by entry name and by checksum.

    Iteration follows the archive's native entry order. When a name occurs
    more than once the last indexed entry wins for name lookups, while every
    occurrence is kept for iteration and checksum lookups.
    """

    def __init__(
        self,
        entries: Iterable[ArchiveEntry],
        source: str = "<memory>",
        handle: zipfile.ZipFile | None = None,
    ) -> None:
        ordered = tuple(entries)
        by_name: dict[str, ArchiveEntry] = {}
        by_checksum: dict[int, list[ArchiveEntry]] = {}
        for entry in ordered:
            by_name[entry.name] = entry
            by_checksum.setdefault(entry.checksum, []).append(entry)
        self._entries = ordered
        self._by_name = by_name
        self._by_checksum = {crc: tuple(items) for crc, items in by_checksum.items()}
        self._source = source
        self._handle = handle

    @property
    def source(self) -> str:
        """Return the path or label the index was built from."""
        return self._source

    def __iter__(self) -> Iterator[ArchiveEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def names(self) -> tuple[str, ...]:
        """Return entry names in native order."""
        return tuple(entry.name for entry in self._entries)

    def lookup_by_name(self, name: str) -> ArchiveEntry | None:
        """Return the entry registered under name, if any."""
        return self._by_name.get(name)

    def lookup_by_checksum(self, checksum: int) -> tuple[ArchiveEntry, ...]:
        """Return entries sharing checksum in indexed order."""
        return self._by_checksum.get(checksum, ())

    def close(self) -> None:
        """Release the underlying archive handle."""
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def __enter__(self) -> ArchiveIndex:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def load_archive(path: str | Path) -> ArchiveIndex:
    """Open a zip/jar archive and index every entry in central-directory order."""
    archive_path = Path(path)
    label = str(archive_path)
    try:
        handle = zipfile.ZipFile(archive_path, "r")
    except (OSError, zipfile.BadZipFile) as exc:
        raise ArchiveOpenError(f"Cannot open archive: {exc}", path=label) from exc
    entries = [_entry_from_info(handle, info, label) for info in handle.infolist()]
    return ArchiveIndex(entries, source=label, handle=handle)


def _entry_from_info(handle: zipfile.ZipFile, info: zipfile.ZipInfo, label: str) -> ArchiveEntry:
    def opener() -> BinaryIO:
        try:
            return handle.open(info, "r")
        except (OSError, RuntimeError, ValueError, zipfile.BadZipFile) as exc:
            raise ArchiveReadError(
                f"Cannot open entry stream: {exc}", path=label, entry_name=info.filename
            ) from exc

    return ArchiveEntry(
        name=info.filename,
        checksum=info.CRC,
        size=info.file_size,
        opener=opener,
        compress_type=info.compress_type,
        date_time=info.date_time,
    )
