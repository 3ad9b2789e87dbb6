from __future__ import annotations

import pytest

from jardiff.diff import Classification
from jardiff.patch import PatchFormatError, encode_index, parse_index, render_index


def _classification(
    moves: dict[str, str] | None = None, deleted: tuple[str, ...] = ()
) -> Classification:
    moves = moves or {}
    return Classification(
        implicit=frozenset(),
        moves=moves,
        move_sources=frozenset(moves.values()),
        new_or_modified=(),
        deleted=deleted,
    )


def test_empty_classification_renders_only_the_header() -> None:
    assert render_index(_classification()) == "version 1.0\r\n"


def test_removes_come_before_moves_with_crlf_endings() -> None:
    text = render_index(
        _classification(moves={"new b.txt": "old b.txt", "c": "c"}, deleted=("gone.txt",))
    )

    assert text == (
        "version 1.0\r\n"
        "remove gone.txt\r\n"
        "move old\\ b.txt new\\ b.txt\r\n"
        "move c c\r\n"
    )


def test_index_is_utf8_encoded() -> None:
    payload = encode_index(_classification(deleted=("café.txt",)))

    assert payload == "version 1.0\r\nremove café.txt\r\n".encode()


def test_parse_reads_commands_in_file_order() -> None:
    parsed = parse_index("version 1.0\r\nremove a\\ b\r\nmove x y\\ z\r\nmove q q\r\n")

    assert parsed.version == "version 1.0"
    assert parsed.removes == ("a b",)
    assert parsed.moves == (("x", "y z"), ("q", "q"))


def test_parse_rejects_missing_header() -> None:
    with pytest.raises(PatchFormatError, match="version 1.0"):
        parse_index("remove a\r\n")


@pytest.mark.parametrize(
    "line",
    ["rename a b", "remove", "move only-one", "move a b c", "remove a b"],
)
def test_parse_rejects_malformed_lines(line: str) -> None:
    with pytest.raises(PatchFormatError, match="line 2"):
        parse_index(f"version 1.0\r\n{line}\r\n")
