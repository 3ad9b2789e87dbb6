"""Control-index text format listing remove and move commands.

Each line ends in CRLF. The first line is the version header, followed by
one ``remove <name>`` per deleted entry and one ``move <old> <new>`` per
move. Spaces inside names are escaped with a single backslash. Backslashes
themselves are not escaped, so a name that already ends in a backslash
before a space cannot be told apart from an escaped space.
"""

from __future__ import annotations

from dataclasses import dataclass

from jardiff.diff import Classification

VERSION_HEADER = "version 1.0"
REMOVE_COMMAND = "remove"
MOVE_COMMAND = "move"
LINE_END = "\r\n"


class PatchFormatError(ValueError):
    """Raised when a control index cannot be parsed."""


@dataclass(slots=True, frozen=True)
class PatchIndex:
    """Commands parsed from a control index, in file order."""

    version: str
    removes: tuple[str, ...]
    moves: tuple[tuple[str, str], ...]


def escape_name(name: str) -> str:
    """Prefix every space with a backslash."""
    return name.replace(" ", "\\ ")


def render_index(classification: Classification) -> str:
    """Render removes in old-archive order then moves in discovery order."""
    lines = [VERSION_HEADER]
    for name in classification.deleted:
        lines.append(f"{REMOVE_COMMAND} {escape_name(name)}")
    for new_name, old_name in classification.moves.items():
        lines.append(f"{MOVE_COMMAND} {escape_name(old_name)} {escape_name(new_name)}")
    return "".join(f"{line}{LINE_END}" for line in lines)


def encode_index(classification: Classification) -> bytes:
    return render_index(classification).encode("utf-8")


def split_escaped(line: str) -> list[str]:
    """Split on unescaped spaces, dropping the escaping backslashes."""
    tokens: list[str] = []
    current: list[str] = []
    index = 0
    while index < len(line):
        char = line[index]
        if char == "\\" and index + 1 < len(line) and line[index + 1] == " ":
            current.append(" ")
            index += 2
            continue
        if char == " ":
            tokens.append("".join(current))
            current = []
            index += 1
            continue
        current.append(char)
        index += 1
    tokens.append("".join(current))
    return tokens


def parse_index(text: str) -> PatchIndex:
    """Parse a control index for inspection."""
    lines = text.split(LINE_END)
    if lines and lines[-1] == "":
        lines.pop()
    if not lines or lines[0] != VERSION_HEADER:
        raise PatchFormatError(f"Control index must start with '{VERSION_HEADER}'.")
    removes: list[str] = []
    moves: list[tuple[str, str]] = []
    for number, line in enumerate(lines[1:], start=2):
        command, _, rest = line.partition(" ")
        args = split_escaped(rest) if rest else []
        if command == REMOVE_COMMAND and len(args) == 1 and args[0]:
            removes.append(args[0])
            continue
        if command == MOVE_COMMAND and len(args) == 2 and all(args):
            moves.append((args[0], args[1]))
            continue
        raise PatchFormatError(f"Malformed control index line {number}: {line!r}")
    return PatchIndex(version=lines[0], removes=tuple(removes), moves=tuple(moves))
