"""Patch wire format and archive writer."""

from .wire import (
    LINE_END,
    MOVE_COMMAND,
    REMOVE_COMMAND,
    VERSION_HEADER,
    PatchFormatError,
    PatchIndex,
    encode_index,
    escape_name,
    parse_index,
    render_index,
    split_escaped,
)
from .writer import read_patch_index, write_patch

__all__ = [
    "LINE_END",
    "MOVE_COMMAND",
    "PatchFormatError",
    "PatchIndex",
    "REMOVE_COMMAND",
    "VERSION_HEADER",
    "encode_index",
    "escape_name",
    "parse_index",
    "read_patch_index",
    "render_index",
    "split_escaped",
    "write_patch",
]
