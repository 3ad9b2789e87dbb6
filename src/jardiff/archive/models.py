"""Typed models for archive entries."""

from __future__ import annotations

import zipfile
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import BinaryIO

EntryOpener = Callable[[], BinaryIO]

DEFAULT_DATE_TIME = (1980, 1, 1, 0, 0, 0)


@dataclass(slots=True, frozen=True)
class ArchiveEntry:
    """One named member of an archive with its CRC-32 checksum."""

    name: str
    checksum: int
    size: int
    opener: EntryOpener = field(repr=False, compare=False)
    compress_type: int = zipfile.ZIP_DEFLATED
    date_time: tuple[int, int, int, int, int, int] = DEFAULT_DATE_TIME

    def open(self) -> BinaryIO:
        """Return a fresh readable stream over the entry bytes."""
        return self.opener()
