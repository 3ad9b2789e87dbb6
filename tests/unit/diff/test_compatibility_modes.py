from __future__ import annotations

from jardiff.diff import OldBucket, classify


def test_duplicate_source_is_stored_in_compatible_mode(memory_index) -> None:
    old = memory_index([("A", b"X")])
    new = memory_index([("B", b"X"), ("C", b"X")])

    result = classify(old, new, minimal=False)

    assert dict(result.moves) == {"B": "A"}
    assert result.new_or_modified == ("C",)
    assert result.deleted == ()


def test_duplicate_source_is_moved_twice_in_minimal_mode(memory_index) -> None:
    old = memory_index([("A", b"X")])
    new = memory_index([("B", b"X"), ("C", b"X")])

    result = classify(old, new, minimal=True)

    assert list(result.moves.items()) == [("B", "A"), ("C", "A")]
    assert result.new_or_modified == ()


def test_copy_of_retained_entry_is_stored_in_compatible_mode(memory_index) -> None:
    old = memory_index([("A", b"X")])
    new = memory_index([("A", b"X"), ("B", b"X")])

    result = classify(old, new, minimal=False)

    assert result.implicit == frozenset({"A"})
    assert dict(result.moves) == {}
    assert result.new_or_modified == ("B",)


def test_implicit_retain_becomes_self_move_in_minimal_mode(memory_index) -> None:
    old = memory_index([("A", b"X")])
    new = memory_index([("A", b"X"), ("B", b"X")])

    result = classify(old, new, minimal=True)

    assert result.implicit == frozenset()
    assert list(result.moves.items()) == [("B", "A"), ("A", "A")]
    assert result.move_sources == frozenset({"A"})
    assert result.old_name_bucket("A") is OldBucket.MOVE_SOURCE
    assert result.deleted == ()


def test_same_name_after_claimed_source_in_compatible_mode(memory_index) -> None:
    old = memory_index([("A", b"X")])
    new = memory_index([("B", b"X"), ("A", b"X")])

    result = classify(old, new, minimal=False)

    assert dict(result.moves) == {"B": "A"}
    assert result.new_or_modified == ("A",)
    assert result.implicit == frozenset()
    assert result.deleted == ()


def test_same_name_after_claimed_source_in_minimal_mode(memory_index) -> None:
    old = memory_index([("A", b"X")])
    new = memory_index([("B", b"X"), ("A", b"X")])

    result = classify(old, new, minimal=True)

    assert list(result.moves.items()) == [("B", "A"), ("A", "A")]
    assert result.new_or_modified == ()


def test_moved_away_and_overwritten_source_is_not_deleted(memory_index) -> None:
    old = memory_index([("A", b"X")])
    new = memory_index([("A", b"Y"), ("B", b"X")])

    result = classify(old, new)

    assert result.new_or_modified == ("A",)
    assert dict(result.moves) == {"B": "A"}
    assert result.deleted == ()
    assert result.old_name_bucket("A") is OldBucket.MOVE_SOURCE
