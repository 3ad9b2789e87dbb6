"""Error taxonomy for patch creation."""

from __future__ import annotations


class JarDiffError(OSError):
    """Base class for failures that abort a patch run."""

    code = "JARDIFF_ERROR"

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        entry_name: str | None = None,
        offset: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.entry_name = entry_name
        self.offset = offset

    def __str__(self) -> str:
        details: list[str] = []
        if self.path is not None:
            details.append(f"path={self.path}")
        if self.entry_name is not None:
            details.append(f"entry={self.entry_name}")
        if self.offset is not None:
            details.append(f"offset={self.offset}")
        if not details:
            return self.message
        return f"{self.message} ({', '.join(details)})"


class ArchiveReadError(JarDiffError):
    """Raised when an archive cannot be enumerated or an entry stream fails."""

    code = "ARCHIVE_READ_FAILED"


class ArchiveOpenError(ArchiveReadError):
    """Raised when an archive is missing or corrupt at load time."""

    code = "ARCHIVE_OPEN_FAILED"


class OutputWriteError(JarDiffError):
    """Raised when writing the patch stream fails."""

    code = "OUTPUT_WRITE_FAILED"
