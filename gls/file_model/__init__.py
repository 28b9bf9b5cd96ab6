"""Domain model for listed files plus metadata and storage-state helpers.

This package contains the non-concurrent primitives:
- file record and storage-state datatypes
- stat-backed metadata extraction and size/mode formatting
- oracle-backed tiered-storage classification
"""

from __future__ import annotations

from .types import FileRecord, StorageState
from .metadata import (
    MTIME_FORMAT,
    bytes_to_gb,
    display_name,
    extract,
    format_mtime,
    humanize_size,
    mode_to_string,
    resolve_group,
    resolve_owner,
)
from .storage import (
    Oracle,
    classify,
    code_from_attributes,
    command_oracle,
    oracle_from_command,
    state_from_code,
    xattr_oracle,
)

__all__ = [
    "FileRecord",
    "StorageState",
    "MTIME_FORMAT",
    "bytes_to_gb",
    "display_name",
    "extract",
    "format_mtime",
    "humanize_size",
    "mode_to_string",
    "resolve_group",
    "resolve_owner",
    "Oracle",
    "classify",
    "code_from_attributes",
    "command_oracle",
    "oracle_from_command",
    "state_from_code",
    "xattr_oracle",
]
