"""Archive indexing and entry comparison."""

from .compare import DEFAULT_BLOCK_SIZE, entries_equal, read_block
from .index import ArchiveIndex, load_archive
from .models import ArchiveEntry, EntryOpener

__all__ = [
    "ArchiveEntry",
    "ArchiveIndex",
    "DEFAULT_BLOCK_SIZE",
    "EntryOpener",
    "entries_equal",
    "load_archive",
    "read_block",
]
