"""Patch creation entrypoint and command line interface."""

from __future__ import annotations

import argparse
import json
import sys
import time
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import BinaryIO, TextIO

from jardiff.archive import load_archive
from jardiff.config import CliOverrides, DiffConfig, load_effective_config
from jardiff.diff import classify
from jardiff.errors import JarDiffError
from jardiff.logging import (
    AuditEvent,
    JsonlAuditLogger,
    new_run_id,
    sanitize_arguments,
    utc_timestamp,
)
from jardiff.patch import PatchFormatError, read_patch_index, write_patch


@dataclass(slots=True, frozen=True)
class PatchReport:
    """Counts and timings for one patch run."""

    implicit: int
    moved: int
    stored: int
    removed: int
    entries_written: int
    minimal: bool
    index_seconds: float
    classify_seconds: float
    write_seconds: float

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


def create_patch(
    old_path: str | Path,
    new_path: str | Path,
    output: BinaryIO,
    minimal: bool = False,
    config: DiffConfig | None = None,
) -> PatchReport:
    """Write a patch turning the archive at old_path into the one at new_path.

    Any error means no valid patch was produced; whatever reached output must
    be discarded by the caller.
    """
    settings = replace(config or DiffConfig(), minimal=minimal)
    started = time.perf_counter()
    with load_archive(old_path) as old_index, load_archive(new_path) as new_index:
        index_seconds = time.perf_counter() - started

        classify_started = time.perf_counter()
        classification = classify(
            old_index, new_index, minimal=settings.minimal, block_size=settings.block_size
        )
        classify_seconds = time.perf_counter() - classify_started

        write_started = time.perf_counter()
        written = write_patch(new_index, classification, output, settings)
        write_seconds = time.perf_counter() - write_started

    summary = classification.summary()
    return PatchReport(
        implicit=summary["implicit"],
        moved=summary["moved"],
        stored=summary["stored"],
        removed=summary["removed"],
        entries_written=written,
        minimal=settings.minimal,
        index_seconds=index_seconds,
        classify_seconds=classify_seconds,
        write_seconds=write_seconds,
    )


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for the jardiff command."""
    parser = argparse.ArgumentParser(prog="jardiff")
    subcommands = parser.add_subparsers(dest="command", required=True)

    create = subcommands.add_parser("create", help="Create a patch archive.")
    create.add_argument("old_archive")
    create.add_argument("new_archive")
    create.add_argument("output")
    create.add_argument("--minimal", choices=("true", "false"), required=False, default=None)
    create.add_argument("--block-size", type=int, required=False, default=None)
    create.add_argument("--index-name", required=False, default=None)
    create.add_argument(
        "--index-compression", choices=("deflated", "stored"), required=False, default=None
    )
    create.add_argument("--config", required=False, default=None)
    create.add_argument("--audit-log", required=False, default=None)

    inspect = subcommands.add_parser("inspect", help="Print the commands stored in a patch.")
    inspect.add_argument("patch")
    inspect.add_argument("--index-name", required=False, default=None)
    inspect.add_argument("--config", required=False, default=None)
    inspect.add_argument("--audit-log", required=False, default=None)

    history = subcommands.add_parser("history", help="Show recent audit log events.")
    history.add_argument("--audit-log", required=True)
    history.add_argument("--since", required=False, default=None)
    history.add_argument("--operation", choices=("create", "inspect"), required=False)
    history.add_argument("--limit", type=int, required=False, default=20)
    return parser


def main(argv: list[str] | None = None, out_stream: TextIO | None = None) -> int:
    """Entrypoint for the jardiff console script."""
    stream = out_stream or sys.stdout
    args = build_arg_parser().parse_args(argv)
    if args.command == "history":
        return _run_history(args, stream)

    try:
        config = load_effective_config(
            config_path=Path(args.config) if args.config is not None else None,
            overrides=_overrides_from_args(args),
        )
    except (ValueError, OSError) as exc:
        _emit(stream, error_payload("INVALID_CONFIG", str(exc)))
        return 1

    if args.command == "inspect":
        return _run_inspect(args.patch, config, stream)
    return _run_create(args, config, stream)


def _overrides_from_args(args: argparse.Namespace) -> CliOverrides:
    audit_log = Path(args.audit_log) if args.audit_log is not None else None
    if args.command == "inspect":
        return CliOverrides(index_name=args.index_name, audit_log=audit_log)
    minimal: bool | None = None
    if args.minimal == "true":
        minimal = True
    if args.minimal == "false":
        minimal = False
    return CliOverrides(
        minimal=minimal,
        block_size=args.block_size,
        index_name=args.index_name,
        index_compression=args.index_compression,
        audit_log=audit_log,
    )


def _run_create(args: argparse.Namespace, config: DiffConfig, stream: TextIO) -> int:
    run_id = new_run_id()
    arguments: dict[str, object] = {
        "old_path": args.old_archive,
        "new_path": args.new_archive,
        "output_path": args.output,
        "minimal": config.minimal,
        "block_size": config.block_size,
    }
    logger = _audit_logger(config)
    output_path = Path(args.output)
    created = False
    try:
        with output_path.open("wb") as output:
            created = True
            report = create_patch(
                args.old_archive,
                args.new_archive,
                output,
                minimal=config.minimal,
                config=config,
            )
    except OSError as exc:
        if created:
            output_path.unlink(missing_ok=True)
        code = exc.code if isinstance(exc, JarDiffError) else "OUTPUT_WRITE_FAILED"
        _log_run(logger, run_id, "create", arguments, error_code=code, outcome={})
        _emit(stream, error_payload(code, str(exc)))
        return 1

    _log_run(logger, run_id, "create", arguments, error_code=None, outcome=report.to_dict())
    _emit(
        stream,
        {
            "ok": True,
            "run_id": run_id,
            "report": report.to_dict(),
            "effective_config": config.to_public_dict(),
        },
    )
    return 0


def _run_inspect(patch: str, config: DiffConfig, stream: TextIO) -> int:
    run_id = new_run_id()
    arguments: dict[str, object] = {"patch_path": patch, "index_name": config.index_name}
    logger = _audit_logger(config)
    try:
        index = read_patch_index(patch, index_name=config.index_name)
    except PatchFormatError as exc:
        _log_run(logger, run_id, "inspect", arguments, error_code="INVALID_PATCH", outcome={})
        _emit(stream, error_payload("INVALID_PATCH", str(exc)))
        return 1
    except JarDiffError as exc:
        _log_run(logger, run_id, "inspect", arguments, error_code=exc.code, outcome={})
        _emit(stream, error_payload(exc.code, str(exc)))
        return 1
    outcome: dict[str, object] = {"removes": len(index.removes), "moves": len(index.moves)}
    _log_run(logger, run_id, "inspect", arguments, error_code=None, outcome=outcome)
    _emit(
        stream,
        {
            "ok": True,
            "version": index.version,
            "removes": list(index.removes),
            "moves": [{"from": old, "to": new} for old, new in index.moves],
        },
    )
    return 0


def _run_history(args: argparse.Namespace, stream: TextIO) -> int:
    logger = JsonlAuditLogger(path=Path(args.audit_log))
    try:
        events = logger.read(since=args.since, limit=args.limit, operation=args.operation)
    except (OSError, UnicodeDecodeError) as exc:
        _emit(stream, error_payload("AUDIT_LOG_UNREADABLE", str(exc)))
        return 1
    _emit(stream, {"ok": True, "events": events})
    return 0


def _audit_logger(config: DiffConfig) -> JsonlAuditLogger | None:
    if config.audit_log is None:
        return None
    return JsonlAuditLogger(path=config.audit_log)


def _log_run(
    logger: JsonlAuditLogger | None,
    run_id: str,
    operation: str,
    arguments: dict[str, object],
    error_code: str | None,
    outcome: dict[str, object],
) -> None:
    if logger is None:
        return
    metadata = sanitize_arguments(arguments)
    if outcome:
        metadata["report"] = outcome
    logger.append(
        AuditEvent(
            timestamp=utc_timestamp(),
            run_id=run_id,
            operation=operation,
            ok=error_code is None,
            error_code=error_code,
            metadata=metadata,
        )
    )


def error_payload(code: str, message: str) -> dict[str, object]:
    """Build the JSON error envelope printed on failure."""
    return {"ok": False, "error": {"code": code, "message": message}}


def _emit(stream: TextIO, payload: dict[str, object]) -> None:
    stream.write(f"{json.dumps(payload, sort_keys=True)}\n")
    stream.flush()


if __name__ == "__main__":
    raise SystemExit(main())
