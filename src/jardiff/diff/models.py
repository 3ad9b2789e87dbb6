"""Typed models for diff classification."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType


class SourceStatus(Enum):
    """Claim state of one old-archive name during the first pass.

    An old name only moves forward: UNCLAIMED -> IMPLICIT_RETAIN ->
    EXPLICIT_MOVE_SOURCE, or straight from UNCLAIMED to EXPLICIT_MOVE_SOURCE.
    """

    UNCLAIMED = "unclaimed"
    IMPLICIT_RETAIN = "implicit_retain"
    EXPLICIT_MOVE_SOURCE = "explicit_move_source"


class NewBucket(Enum):
    """Classification of a new-archive name."""

    IMPLICIT = "implicit"
    MOVE_TARGET = "move_target"
    NEW_OR_MODIFIED = "new_or_modified"


class OldBucket(Enum):
    """Classification of an old-archive name."""

    IMPLICIT = "implicit"
    MOVE_SOURCE = "move_source"
    SUPERSEDED = "superseded"
    DELETED = "deleted"


@dataclass(slots=True, frozen=True)
class Classification:
    """Deterministic outcome of one diff run.

    moves maps new name -> old name in discovery order. new_or_modified
    follows the new archive's order and deleted the old archive's order.
    """

    implicit: frozenset[str]
    moves: Mapping[str, str]
    move_sources: frozenset[str]
    new_or_modified: tuple[str, ...]
    deleted: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "moves", MappingProxyType(dict(self.moves)))

    def new_name_bucket(self, name: str) -> NewBucket | None:
        """Return the bucket a new-archive name landed in."""
        if name in self.implicit:
            return NewBucket.IMPLICIT
        if name in self.moves:
            return NewBucket.MOVE_TARGET
        if name in self.new_or_modified:
            return NewBucket.NEW_OR_MODIFIED
        return None

    def old_name_bucket(self, name: str) -> OldBucket:
        """Return the bucket an old-archive name landed in."""
        if name in self.implicit:
            return OldBucket.IMPLICIT
        if name in self.move_sources:
            return OldBucket.MOVE_SOURCE
        if name in self.new_or_modified:
            return OldBucket.SUPERSEDED
        return OldBucket.DELETED

    @property
    def is_empty(self) -> bool:
        return not (self.moves or self.new_or_modified or self.deleted)

    def summary(self) -> dict[str, int]:
        """Return bucket counts for reporting."""
        return {
            "implicit": len(self.implicit),
            "moved": len(self.moves),
            "stored": len(self.new_or_modified),
            "removed": len(self.deleted),
        }
