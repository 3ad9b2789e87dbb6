"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from jardiff.archive import DEFAULT_BLOCK_SIZE

CONFIG_FILE_NAME = "jardiff.toml"
DEFAULT_INDEX_NAME = "META-INF/INDEX.JD"
BLOCK_SIZE_CAP = 16 * 1024 * 1024
INDEX_COMPRESSION_CHOICES = ("deflated", "stored")


@dataclass(slots=True, frozen=True)
class DiffConfig:
    """Fully merged patch creation settings."""

    minimal: bool = False
    block_size: int = DEFAULT_BLOCK_SIZE
    index_name: str = DEFAULT_INDEX_NAME
    index_compression: str = "deflated"
    audit_log: Path | None = None

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot for reports."""
        return {
            "minimal": self.minimal,
            "block_size": self.block_size,
            "index_name": self.index_name,
            "index_compression": self.index_compression,
            "audit_log": str(self.audit_log) if self.audit_log is not None else None,
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    minimal: bool | None = None
    block_size: int | None = None
    index_name: str | None = None
    index_compression: str | None = None
    audit_log: Path | None = None


def load_config_file(path: Path) -> dict[str, object]:
    """Load an optional jardiff.toml; a missing file yields an empty table."""
    if not path.exists():
        return {}
    with path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{path.name} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def merge_config(
    base: DiffConfig, file_payload: dict[str, object], overrides: CliOverrides
) -> DiffConfig:
    """Merge defaults, config file, then CLI overrides."""
    diff_payload = _get_table(file_payload, "diff")
    io_payload = _get_table(file_payload, "io")
    patch_payload = _get_table(file_payload, "patch")
    audit_payload = _get_table(file_payload, "audit")

    minimal = _optional_bool(diff_payload.get("minimal"), "diff.minimal", base.minimal)
    block_size = _optional_positive_int_with_cap(
        io_payload.get("block_size"), "io.block_size", base.block_size, BLOCK_SIZE_CAP
    )
    index_name = _optional_index_name(
        patch_payload.get("index_name"), "patch.index_name", base.index_name
    )
    index_compression = _optional_choice(
        patch_payload.get("index_compression"),
        "patch.index_compression",
        base.index_compression,
        INDEX_COMPRESSION_CHOICES,
    )
    audit_log = base.audit_log
    if "log_path" in audit_payload:
        raw_log_path = audit_payload["log_path"]
        if not isinstance(raw_log_path, str) or not raw_log_path:
            raise ValueError("Config field 'audit.log_path' must be a non-empty string.")
        audit_log = Path(raw_log_path)

    merged = DiffConfig(
        minimal=minimal,
        block_size=block_size,
        index_name=index_name,
        index_compression=index_compression,
        audit_log=audit_log,
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: DiffConfig, overrides: CliOverrides) -> DiffConfig:
    """Apply startup overrides at highest precedence."""
    audit_log = overrides.audit_log or config.audit_log
    return DiffConfig(
        minimal=_optional_bool(overrides.minimal, "overrides.minimal", config.minimal),
        block_size=_optional_positive_int_with_cap(
            overrides.block_size, "overrides.block_size", config.block_size, BLOCK_SIZE_CAP
        ),
        index_name=_optional_index_name(
            overrides.index_name, "overrides.index_name", config.index_name
        ),
        index_compression=_optional_choice(
            overrides.index_compression,
            "overrides.index_compression",
            config.index_compression,
            INDEX_COMPRESSION_CHOICES,
        ),
        audit_log=audit_log.resolve() if audit_log is not None else None,
    )


def load_effective_config(
    config_path: Path | None = None, overrides: CliOverrides | None = None
) -> DiffConfig:
    """Load effective config using merge order defaults -> config file -> overrides."""
    path = config_path if config_path is not None else Path.cwd() / CONFIG_FILE_NAME
    payload = load_config_file(path)
    return merge_config(DiffConfig(), payload, overrides or CliOverrides())


def _optional_bool(value: object, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"Config field '{name}' must be a boolean.")
    return value


def _optional_positive_int_with_cap(
    value: object,
    name: str,
    default: int,
    cap: int | None,
) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    if cap is not None and value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value


def _optional_index_name(value: object, name: str, default: str) -> str:
    if value is None:
        return default
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Config field '{name}' must be a non-empty string.")
    if value.endswith("/"):
        raise ValueError(f"Config field '{name}' must name a file entry, not a directory.")
    return value


def _optional_choice(value: object, name: str, default: str, choices: tuple[str, ...]) -> str:
    if value is None:
        return default
    if not isinstance(value, str) or value not in choices:
        raise ValueError(f"Config field '{name}' must be one of: {', '.join(choices)}.")
    return value
