"""Best-match lookup of a new entry against the old archive."""

from __future__ import annotations

from jardiff.archive import DEFAULT_BLOCK_SIZE, ArchiveEntry, ArchiveIndex, entries_equal


def resolve_match(
    entry: ArchiveEntry, old_index: ArchiveIndex, block_size: int = DEFAULT_BLOCK_SIZE
) -> str | None:
    """Return the old name holding the same bytes as entry, preferring its own name."""
    same_name = old_index.lookup_by_name(entry.name)
    if (
        same_name is not None
        and same_name.checksum == entry.checksum
        and entries_equal(same_name, entry, block_size)
    ):
        return same_name.name

    for candidate in old_index.lookup_by_checksum(entry.checksum):
        if entries_equal(candidate, entry, block_size):
            return candidate.name
    return None
