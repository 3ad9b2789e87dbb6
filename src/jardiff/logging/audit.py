"""Structured JSONL audit log of patch runs."""

from __future__ import annotations

import json
import uuid
from collections import deque
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path


@dataclass(slots=True, frozen=True)
class AuditEvent:
    """Sanitized record of a single patch operation."""

    timestamp: str
    run_id: str
    operation: str
    ok: bool
    error_code: str | None
    metadata: dict[str, object]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_run_id() -> str:
    return f"run-{uuid.uuid4().hex[:12]}"


def sanitize_arguments(arguments: dict[str, object]) -> dict[str, object]:
    """Keep paths, flags and numbers; reduce anything else to its shape."""
    sanitized: dict[str, object] = {}
    for key in sorted(arguments.keys()):
        value = arguments[key]
        if isinstance(value, Path):
            sanitized[key] = value.as_posix()
            continue
        if key.endswith("_path") and isinstance(value, str):
            sanitized[key] = value
            continue
        if isinstance(value, (int, float, bool)) or value is None:
            sanitized[key] = value
            continue
        if isinstance(value, str):
            sanitized[f"{key}_present"] = True
            sanitized[f"{key}_length"] = len(value)
            continue
        if isinstance(value, (list, tuple)):
            sanitized[f"{key}_type"] = "list"
            sanitized[f"{key}_length"] = len(value)
            continue
        if isinstance(value, dict):
            sanitized[f"{key}_type"] = "dict"
            sanitized[f"{key}_keys"] = sorted(str(k) for k in value.keys())
            continue
        sanitized[f"{key}_type"] = type(value).__name__
    return sanitized


class JsonlAuditLogger:
    """Append-only JSONL audit log of patch runs with a filtered tail reader."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def append(self, event: AuditEvent) -> None:
        """Append one event as a single JSON line, creating the log directory on demand."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(f"{json.dumps(asdict(event), sort_keys=True)}\n")

    def read(
        self,
        since: str | None = None,
        limit: int = 50,
        operation: str | None = None,
    ) -> list[dict[str, object]]:
        """Return the newest `limit` runs at or after `since`, oldest first.

        Lines that are not JSON objects are skipped. A missing log has no runs.
        """
        if limit < 1 or not self._path.exists():
            return []
        recent: deque[dict[str, object]] = deque(maxlen=limit)
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                event = _parse_event(line)
                if event is None:
                    continue
                if operation is not None and event.get("operation") != operation:
                    continue
                if since is not None and not _not_before(event, since):
                    continue
                recent.append(event)
        return list(recent)


def _parse_event(line: str) -> dict[str, object] | None:
    if not line.strip():
        return None
    try:
        event = json.loads(line)
    except json.JSONDecodeError:
        return None
    return event if isinstance(event, dict) else None


def _not_before(event: dict[str, object], since: str) -> bool:
    timestamp = event.get("timestamp")
    return isinstance(timestamp, str) and timestamp >= since
