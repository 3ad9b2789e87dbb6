from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

from jardiff.logging import AuditEvent, JsonlAuditLogger, sanitize_arguments, utc_timestamp


def _event(run_id: str, timestamp: str | None = None) -> AuditEvent:
    return AuditEvent(
        timestamp=timestamp or utc_timestamp(),
        run_id=run_id,
        operation="create",
        ok=True,
        error_code=None,
        metadata={"minimal": False},
    )


def test_audit_log_writes_jsonl_schema(tmp_path: Path) -> None:
    logger = JsonlAuditLogger(path=tmp_path / "nested" / "audit.jsonl")
    logger.append(_event("run-1"))

    lines = logger.path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    event = json.loads(lines[0])
    assert set(event.keys()) == {"error_code", "metadata", "ok", "operation", "run_id", "timestamp"}
    assert event["run_id"] == "run-1"
    assert event["timestamp"].endswith("Z")


def test_read_applies_since_and_limit(tmp_path: Path) -> None:
    logger = JsonlAuditLogger(path=tmp_path / "audit.jsonl")
    logger.append(_event("run-1", "2026-01-01T00:00:00.000Z"))
    logger.append(_event("run-2", "2026-02-01T00:00:00.000Z"))
    logger.append(_event("run-3", "2026-03-01T00:00:00.000Z"))
    with logger.path.open("a", encoding="utf-8") as handle:
        handle.write("not json\n")

    recent = logger.read(since="2026-01-15T00:00:00.000Z", limit=10)
    assert [event["run_id"] for event in recent] == ["run-2", "run-3"]
    assert [event["run_id"] for event in logger.read(limit=1)] == ["run-3"]
    assert logger.read(limit=0) == []


def test_sanitize_keeps_paths_and_flags_but_hides_free_text() -> None:
    sanitized = sanitize_arguments(
        {
            "old_path": "old.jar",
            "output": Path("out/patch.jar"),
            "minimal": True,
            "block_size": 2048,
            "note": "secret words",
        }
    )

    assert sanitized == {
        "block_size": 2048,
        "minimal": True,
        "note_length": 12,
        "note_present": True,
        "old_path": "old.jar",
        "output": "out/patch.jar",
    }


def test_read_filters_by_operation(tmp_path: Path) -> None:
    logger = JsonlAuditLogger(path=tmp_path / "audit.jsonl")
    logger.append(_event("run-1"))
    logger.append(replace(_event("run-2"), operation="inspect"))
    logger.append(_event("run-3"))

    assert [e["run_id"] for e in logger.read(operation="inspect")] == ["run-2"]
    assert [e["run_id"] for e in logger.read(operation="create", limit=1)] == ["run-3"]


def test_read_does_not_create_missing_log_directory(tmp_path: Path) -> None:
    logger = JsonlAuditLogger(path=tmp_path / "absent" / "audit.jsonl")

    assert logger.read() == []
    assert not (tmp_path / "absent").exists()
