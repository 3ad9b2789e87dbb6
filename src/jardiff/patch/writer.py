"""Serialization of a classification into a patch archive."""

from __future__ import annotations

import contextlib
import zipfile
from pathlib import Path
from typing import BinaryIO

from jardiff.archive import ArchiveEntry, ArchiveIndex, read_block
from jardiff.config import DEFAULT_INDEX_NAME, DiffConfig
from jardiff.diff import Classification
from jardiff.errors import ArchiveOpenError, ArchiveReadError, JarDiffError, OutputWriteError
from jardiff.patch.wire import PatchFormatError, PatchIndex, encode_index, parse_index

_COMPRESSION = {"deflated": zipfile.ZIP_DEFLATED, "stored": zipfile.ZIP_STORED}


class _PatchSink:
    """Forwards zip output to the caller's stream until cut off after a failure.

    Once cut, writes and seeks are dropped so that neither ``ZipFile.close``
    nor an open entry handle can append a data descriptor or end record.
    """

    def __init__(self, output: BinaryIO) -> None:
        self._output = output
        self._live = True

    def cut(self) -> None:
        self._live = False

    def write(self, data: bytes) -> int:
        if self._live:
            self._output.write(data)
        return len(data)

    def flush(self) -> None:
        if self._live:
            self._output.flush()

    def tell(self) -> int:
        return self._output.tell()

    def seek(self, offset: int, whence: int = 0) -> int:
        if not self._live:
            return self._output.tell()
        return self._output.seek(offset, whence)


def write_patch(
    new_index: ArchiveIndex,
    classification: Classification,
    output: BinaryIO,
    config: DiffConfig | None = None,
) -> int:
    """Write the control index then every new or modified entry; return entry count.

    The central directory is written only once all entries are in place. After
    a failure nothing more reaches output, so a partial patch never has an end
    record and cannot be opened as a zip.
    """
    settings = config or DiffConfig()
    if settings.index_name in classification.new_or_modified:
        raise OutputWriteError(
            "New archive has an entry named like the control index.",
            entry_name=settings.index_name,
        )

    sink = _PatchSink(output)
    try:
        archive = zipfile.ZipFile(sink, "w")
    except (OSError, ValueError) as exc:
        raise OutputWriteError(f"Cannot start patch archive: {exc}") from exc

    written = 0
    try:
        _write_control_index(archive, classification, settings)
        written += 1
        for name in classification.new_or_modified:
            entry = new_index.lookup_by_name(name)
            if entry is None:
                raise ArchiveReadError(
                    "Entry vanished from new archive.", path=new_index.source, entry_name=name
                )
            _copy_entry(archive, sink, entry, settings.block_size)
            written += 1
    except BaseException:
        sink.cut()
        # Releases zipfile state only; the cut sink discards the end record.
        with contextlib.suppress(OSError, ValueError, RuntimeError):
            archive.close()
        raise
    _finish(archive)
    return written


def _write_control_index(
    archive: zipfile.ZipFile, classification: Classification, config: DiffConfig
) -> None:
    info = zipfile.ZipInfo(config.index_name)
    info.compress_type = _COMPRESSION[config.index_compression]
    payload = encode_index(classification)
    try:
        archive.writestr(info, payload)
    except (OSError, ValueError) as exc:
        raise OutputWriteError(
            f"Failed writing control index: {exc}", entry_name=config.index_name
        ) from exc


def _copy_entry(
    archive: zipfile.ZipFile, sink: _PatchSink, entry: ArchiveEntry, block_size: int
) -> None:
    info = zipfile.ZipInfo(entry.name, date_time=entry.date_time)
    info.compress_type = entry.compress_type
    info.file_size = entry.size
    with entry.open() as source:
        try:
            target = archive.open(info, "w")
            try:
                offset = 0
                while True:
                    block = read_block(source, block_size, entry.name, offset)
                    if not block:
                        break
                    target.write(block)
                    offset += len(block)
            except BaseException:
                # Cut first so closing the handle cannot seal a truncated entry.
                sink.cut()
                with contextlib.suppress(OSError, ValueError, RuntimeError):
                    target.close()
                raise
            target.close()
        except JarDiffError:
            raise
        except (OSError, ValueError, RuntimeError) as exc:
            raise OutputWriteError(
                f"Failed writing patch entry: {exc}", entry_name=entry.name
            ) from exc


def _finish(archive: zipfile.ZipFile) -> None:
    try:
        archive.close()
    except (OSError, ValueError) as exc:
        raise OutputWriteError(f"Failed finalizing patch archive: {exc}") from exc


def read_patch_index(path: str | Path, index_name: str = DEFAULT_INDEX_NAME) -> PatchIndex:
    """Load and parse the control index stored in a patch archive."""
    label = str(path)
    try:
        with zipfile.ZipFile(path, "r") as archive:
            payload = archive.read(index_name)
    except KeyError as exc:
        raise PatchFormatError(f"Patch archive has no '{index_name}' entry.") from exc
    except (OSError, zipfile.BadZipFile) as exc:
        raise ArchiveOpenError(f"Cannot open patch archive: {exc}", path=label) from exc
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise PatchFormatError("Control index is not valid UTF-8.") from exc
    return parse_index(text)
