"""Stat-backed metadata extraction for one path.

Turns raw ``lstat`` data into a ``FileRecord``: an ls-style mode string,
owner and group names from the host identity database, size and a minute
resolution timestamp. Symlinks are inspected, never followed.
"""

from __future__ import annotations

import grp
import logging
import os
import pwd
import stat
from datetime import datetime

from ..errors import IdentityResolutionError, StatError
from .types import FileRecord

logger = logging.getLogger(__name__)

MTIME_FORMAT = "%b %d %H:%M %Y"
HUMAN_SIZE_UNIT = 1000
HUMAN_SIZE_PREFIXES = "kMGTPE"
BYTES_PER_GB = 1024 * 1024 * 1024

_PERMISSION_CHARS = "rwxrwxrwx"


def humanize_size(size_bytes: int) -> str:
    """Format a byte count with base-1000 units, e.g. ``123456 -> "123.5 kB"``."""
    if size_bytes < HUMAN_SIZE_UNIT:
        return f"{size_bytes} B"
    div = HUMAN_SIZE_UNIT
    exp = 0
    n = size_bytes // HUMAN_SIZE_UNIT
    while n >= HUMAN_SIZE_UNIT and exp < len(HUMAN_SIZE_PREFIXES) - 1:
        div *= HUMAN_SIZE_UNIT
        exp += 1
        n //= HUMAN_SIZE_UNIT
    return f"{size_bytes / div:.1f} {HUMAN_SIZE_PREFIXES[exp]}B"


def bytes_to_gb(size_bytes: int) -> int:
    """Truncating conversion to base-1024 gigabytes."""
    return size_bytes // BYTES_PER_GB


def mode_to_string(mode: int) -> str:
    """Render ``st_mode`` as a 10-character ls-style permission string.

    Special bits overwrite single positions regardless of the execute bit:
    setgid and setuid become ``s``, sticky becomes ``t``. The leading type
    character is overwritten in order by directory, symlink, device, pipe and
    socket checks.
    """
    chars = ["-"]
    for idx, ch in enumerate(_PERMISSION_CHARS):
        bit = 1 << (8 - idx)
        chars.append(ch if mode & bit else "-")

    if stat.S_ISDIR(mode):
        chars[0] = "d"
    if mode & stat.S_ISGID:
        chars[6] = "s"
    if mode & stat.S_ISUID:
        chars[3] = "s"
    if mode & stat.S_ISVTX:
        chars[9] = "t"
    if stat.S_ISLNK(mode):
        chars[0] = "l"
    if stat.S_ISBLK(mode):
        chars[0] = "b"
    elif stat.S_ISCHR(mode):
        chars[0] = "c"
    if stat.S_ISFIFO(mode):
        chars[0] = "p"
    if stat.S_ISSOCK(mode):
        chars[0] = "s"
    return "".join(chars)


def format_mtime(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp).strftime(MTIME_FORMAT)


def resolve_owner(uid: int) -> str:
    """Return the user name for ``uid``; unknown ids are fatal."""
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError as exc:
        raise IdentityResolutionError(f"unknown user id {uid}") from exc


def resolve_group(gid: int) -> str:
    """Return the group name for ``gid``; unknown ids are fatal."""
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError as exc:
        raise IdentityResolutionError(f"unknown group id {gid}") from exc


def display_name(path: str) -> str:
    """Leaf component used as the listed name (``.``/``..`` kept verbatim)."""
    return os.path.basename(path) or path


def extract(path: str, size_limit_gb: int | None = None) -> FileRecord:
    """Build a ``FileRecord`` for ``path`` from a non-dereferencing stat.

    ``size_limit_gb`` enables the migratability check: records larger than the
    limit (in base-1024 GB) are flagged ``oversize_for_migration``. ``None``
    disables the check. Raises ``StatError`` and ``IdentityResolutionError``.
    """
    try:
        st = os.lstat(path)
    except OSError as exc:
        raise StatError(f"cannot stat {path}: {exc.strerror or exc}") from exc

    mode = st.st_mode
    size_bytes = int(st.st_size)
    oversize = size_limit_gb is not None and bytes_to_gb(size_bytes) > size_limit_gb
    record = FileRecord(
        name=display_name(path),
        path=path,
        is_directory=stat.S_ISDIR(mode),
        is_symlink=stat.S_ISLNK(mode),
        is_regular=stat.S_ISREG(mode),
        permission_string=mode_to_string(mode),
        owner=resolve_owner(st.st_uid),
        group=resolve_group(st.st_gid),
        size_bytes=size_bytes,
        modified_at=format_mtime(st.st_mtime),
        oversize_for_migration=oversize,
    )
    logger.debug(
        "Gathered metadata for %s: username: %s, groupname: %s, mode: %s, size: %d, mtime: %s",
        record.name,
        record.owner,
        record.group,
        record.permission_string,
        record.size_bytes,
        record.modified_at,
    )
    return record


__all__ = [
    "MTIME_FORMAT",
    "humanize_size",
    "bytes_to_gb",
    "mode_to_string",
    "format_mtime",
    "resolve_owner",
    "resolve_group",
    "display_name",
    "extract",
]
