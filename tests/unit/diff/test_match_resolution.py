from __future__ import annotations

from jardiff.diff import resolve_match

from conftest import memory_entry


def test_same_name_wins_over_earlier_content_match(memory_index) -> None:
    old = memory_index([("copy.txt", b"payload"), ("keep.txt", b"payload")])

    assert resolve_match(memory_entry("keep.txt", b"payload"), old) == "keep.txt"


def test_renamed_content_resolves_to_old_name(memory_index) -> None:
    old = memory_index([("before.txt", b"payload"), ("other.txt", b"noise")])

    assert resolve_match(memory_entry("after.txt", b"payload"), old) == "before.txt"


def test_checksum_collision_is_settled_by_content(memory_index) -> None:
    old = memory_index([("a.bin", b"one", 7), ("b.bin", b"two", 7)])

    assert resolve_match(memory_entry("c.bin", b"two", 7), old) == "b.bin"


def test_same_name_with_colliding_checksum_falls_back_to_content_scan(memory_index) -> None:
    old = memory_index([("x.bin", b"aaa", 5), ("y.bin", b"bbb", 5)])

    assert resolve_match(memory_entry("x.bin", b"bbb", 5), old) == "y.bin"


def test_first_identical_candidate_in_indexed_order_wins(memory_index) -> None:
    old = memory_index([("z.txt", b"dup"), ("a.txt", b"dup")])

    assert resolve_match(memory_entry("n.txt", b"dup"), old) == "z.txt"


def test_no_match_returns_none(memory_index) -> None:
    old = memory_index([("a.txt", b"alpha")])

    assert resolve_match(memory_entry("a.txt", b"changed"), old) is None
    assert resolve_match(memory_entry("b.txt", b"beta", 99), old) is None
