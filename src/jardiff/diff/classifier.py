"""Two-pass partition of archive entries into retain, move, store and remove."""

from __future__ import annotations

from dataclasses import dataclass, field

from jardiff.archive import DEFAULT_BLOCK_SIZE, ArchiveIndex
from jardiff.diff.matching import resolve_match
from jardiff.diff.models import Classification, SourceStatus


@dataclass(slots=True)
class _FirstPassState:
    """Working state threaded through the first pass only."""

    status: dict[str, SourceStatus] = field(default_factory=dict)
    implicit: dict[str, None] = field(default_factory=dict)
    moves: dict[str, str] = field(default_factory=dict)
    new_or_modified: dict[str, None] = field(default_factory=dict)

    def status_of(self, old_name: str) -> SourceStatus:
        return self.status.get(old_name, SourceStatus.UNCLAIMED)

    def retain(self, name: str) -> None:
        self.implicit[name] = None
        self.status[name] = SourceStatus.IMPLICIT_RETAIN

    def move(self, new_name: str, old_name: str) -> None:
        self.moves[new_name] = old_name
        self.status[old_name] = SourceStatus.EXPLICIT_MOVE_SOURCE

    def store(self, new_name: str) -> None:
        self.new_or_modified[new_name] = None

    def promote_to_explicit(self, old_name: str) -> None:
        """Replace an implicit retain with a self-move once old_name is also moved away."""
        self.implicit.pop(old_name, None)
        self.move(old_name, old_name)


def classify(
    old_index: ArchiveIndex,
    new_index: ArchiveIndex,
    minimal: bool = False,
    block_size: int = DEFAULT_BLOCK_SIZE,
) -> Classification:
    """Classify every entry of both archives.

    With minimal=False no two moves share a source, so older appliers that
    only honor one move per source can still consume the patch; the second
    claimant is stored whole instead.
    """
    state = _first_pass(old_index, new_index, minimal, block_size)
    deleted = _second_pass(old_index, state)
    return Classification(
        implicit=frozenset(state.implicit),
        moves=state.moves,
        move_sources=frozenset(
            name
            for name, status in state.status.items()
            if status is SourceStatus.EXPLICIT_MOVE_SOURCE
        ),
        new_or_modified=tuple(state.new_or_modified),
        deleted=deleted,
    )


def _first_pass(
    old_index: ArchiveIndex, new_index: ArchiveIndex, minimal: bool, block_size: int
) -> _FirstPassState:
    state = _FirstPassState()
    for entry in new_index:
        new_name = entry.name
        old_name = resolve_match(entry, old_index, block_size)
        if old_name is None:
            state.store(new_name)
            continue

        prior = state.status_of(old_name)
        if old_name == new_name and prior is not SourceStatus.EXPLICIT_MOVE_SOURCE:
            state.retain(new_name)
            continue

        if not minimal and prior is not SourceStatus.UNCLAIMED:
            state.store(new_name)
        else:
            state.move(new_name, old_name)

        if minimal and prior is SourceStatus.IMPLICIT_RETAIN:
            state.promote_to_explicit(old_name)
    return state


def _second_pass(old_index: ArchiveIndex, state: _FirstPassState) -> tuple[str, ...]:
    deleted: list[str] = []
    for entry in old_index:
        name = entry.name
        if state.status_of(name) is not SourceStatus.UNCLAIMED:
            continue
        if name in state.new_or_modified:
            continue
        deleted.append(name)
    return tuple(deleted)
