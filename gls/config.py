"""Persistent JSON config helpers.

Stores GPFS mount roots, the migratability size limit, worker-pool tuning,
failure display and the labels used for storage states. All access is
defensive: malformed or missing config falls back to defaults per key.
"""

from __future__ import annotations

import json
import math
import os
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "gls"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

DEFAULT_GPFS_ROOTS: tuple[str, ...] = ("/gpfs/themis", "/nl/themis")
DEFAULT_MAX_FILE_SIZE_GB = 19450

STATE_KEYS: tuple[str, ...] = ("resident", "premigrated", "migrated")
DEFAULT_STATE_LABELS: dict[str, str] = {
    "resident": "Resident",
    "premigrated": "Premigrated",
    "migrated": "Migrated",
}
DEFAULT_STATE_HINTS: dict[str, str] = {
    "resident": "Indicates a file that is resident on disk",
    "premigrated": "Indicates a file that has been premigrated (e.g. resident on both tape and disk)",
    "migrated": "Indicates a file that has been migrated to tape",
}


def default_max_workers() -> int:
    """Half the available CPUs, rounded up, never below one."""
    return max(1, math.ceil((os.cpu_count() or 1) / 2))


@dataclass(frozen=True)
class ListingConfig:
    """Resolved configuration consumed by the listing pipeline and CLI."""

    gpfs_roots: tuple[str, ...] = DEFAULT_GPFS_ROOTS
    max_file_size_gb: int = DEFAULT_MAX_FILE_SIZE_GB
    disable_size_checking: bool = False
    always_use_max_workers: bool = False
    max_workers: int = field(default_factory=default_max_workers)
    suppress_stack_trace: bool = True
    hide_debug_flags: bool = True
    state_labels: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_STATE_LABELS))
    state_hints: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_STATE_HINTS))
    oracle_command: tuple[str, ...] | None = None

    @property
    def size_limit_gb(self) -> int | None:
        """Size limit for the oversize check, ``None`` when checking is disabled."""
        if self.disable_size_checking:
            return None
        return self.max_file_size_gb


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def _load_bool(data: dict[str, object], key: str, default: bool) -> bool:
    value = data.get(key)
    return value if isinstance(value, bool) else default


def _load_positive_int(data: dict[str, object], key: str, default: int) -> int:
    """Read a strictly positive integer; booleans and floats are rejected."""
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return default
    return value


def _load_string_list(value: object) -> tuple[str, ...] | None:
    """Return non-empty stripped strings from a JSON list, ``None`` if invalid."""
    if not isinstance(value, list):
        return None
    out = tuple(item.strip() for item in value if isinstance(item, str) and item.strip())
    return out or None


def _normalize_root(root: str) -> str:
    normalized = os.path.normpath(root)
    return normalized if normalized == "/" else normalized.rstrip("/")


def _load_state_strings(data: dict[str, object], key: str, defaults: dict[str, str]) -> dict[str, str]:
    """Overlay valid per-state strings from ``data[key]`` on ``defaults``."""
    out = dict(defaults)
    value = data.get(key)
    if not isinstance(value, dict):
        return out
    for state_key in STATE_KEYS:
        raw = value.get(state_key)
        if isinstance(raw, str) and raw.strip():
            out[state_key] = raw.strip()
    return out


def load_listing_config() -> ListingConfig:
    """Load and sanitize the listing configuration.

    Each key is validated on its own; invalid values keep their defaults.
    """
    data = load_config()
    roots = _load_string_list(data.get("gpfs_roots"))
    return ListingConfig(
        gpfs_roots=tuple(_normalize_root(root) for root in roots) if roots else DEFAULT_GPFS_ROOTS,
        max_file_size_gb=_load_positive_int(data, "max_file_size_gb", DEFAULT_MAX_FILE_SIZE_GB),
        disable_size_checking=_load_bool(data, "disable_size_checking", False),
        always_use_max_workers=_load_bool(data, "always_use_max_workers", False),
        max_workers=_load_positive_int(data, "max_workers", default_max_workers()),
        suppress_stack_trace=_load_bool(data, "suppress_stack_trace", True),
        hide_debug_flags=_load_bool(data, "hide_debug_flags", True),
        state_labels=_load_state_strings(data, "state_labels", DEFAULT_STATE_LABELS),
        state_hints=_load_state_strings(data, "state_hints", DEFAULT_STATE_HINTS),
        oracle_command=_load_string_list(data.get("oracle_command")),
    )


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "DEFAULT_GPFS_ROOTS",
    "DEFAULT_MAX_FILE_SIZE_GB",
    "DEFAULT_STATE_HINTS",
    "DEFAULT_STATE_LABELS",
    "ListingConfig",
    "default_max_workers",
    "load_config",
    "load_listing_config",
]
