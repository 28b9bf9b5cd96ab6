"""Domain datatypes for listed filesystem entries."""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace


class StorageState(enum.Enum):
    """Tiered-storage location of a file."""

    UNKNOWN = "unknown"
    RESIDENT = "resident"
    PREMIGRATED = "premigrated"
    MIGRATED = "migrated"


@dataclass(frozen=True)
class FileRecord:
    """One listed entry with metadata observed from ``lstat``."""

    name: str
    path: str
    is_directory: bool
    is_symlink: bool
    is_regular: bool
    permission_string: str
    owner: str
    group: str
    size_bytes: int
    modified_at: str
    storage_state: StorageState = StorageState.UNKNOWN
    oversize_for_migration: bool = False

    @property
    def is_hidden(self) -> bool:
        return self.name.startswith(".")

    def with_storage_state(self, state: StorageState) -> FileRecord:
        return replace(self, storage_state=state)


__all__ = [
    "StorageState",
    "FileRecord",
]
