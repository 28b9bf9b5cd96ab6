"""Tiered-storage classification through a pluggable oracle.

An oracle is any callable taking a path and returning the raw tri-state code
used by the GPFS attribute check: ``0`` resident, ``1`` premigrated (on disk
and tape), ``2`` migrated to tape. Anything else means the oracle could not
tell and the file is reported as unknown.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Callable, Sequence

from .types import StorageState

logger = logging.getLogger(__name__)

Oracle = Callable[[str], int]

CODE_RESIDENT = 0
CODE_PREMIGRATED = 1
CODE_MIGRATED = 2
CODE_UNAVAILABLE = -1

TAPE_MARKER = "IBMTPS"
PREMIGRATED_MARKER = "IBMPMig"

_STATE_BY_CODE: dict[int, StorageState] = {
    CODE_RESIDENT: StorageState.RESIDENT,
    CODE_PREMIGRATED: StorageState.PREMIGRATED,
    CODE_MIGRATED: StorageState.MIGRATED,
}


def state_from_code(code: object) -> StorageState:
    """Map a raw oracle result to ``StorageState``.

    Unrecognized codes, including non-integers, map to ``UNKNOWN``.
    """
    if isinstance(code, bool) or not isinstance(code, int):
        return StorageState.UNKNOWN
    state = _STATE_BY_CODE.get(code)
    if state is None:
        logger.debug("Unrecognized storage code %r", code)
        return StorageState.UNKNOWN
    return state


def classify(path: str, oracle: Oracle) -> StorageState:
    """Ask ``oracle`` once about ``path`` and return the mapped state."""
    return state_from_code(oracle(path))


def _clean_attribute_bytes(raw: bytes) -> str:
    """Keep printable ASCII and turn ``0x01`` field separators into ``|``."""
    out: list[str] = []
    for byte in raw:
        if 32 <= byte < 127:
            out.append(chr(byte))
        elif byte == 1:
            out.append("|")
    return "".join(out)


def code_from_attributes(text: str) -> int:
    """Derive the tri-state code from a cleaned attribute dump."""
    if TAPE_MARKER in text:
        if PREMIGRATED_MARKER in text:
            return CODE_PREMIGRATED
        return CODE_MIGRATED
    return CODE_RESIDENT


def read_attribute_text(path: str) -> str:
    """Concatenate a file's extended attribute names and values as clean text.

    Attributes that cannot be read are skipped; platforms without xattr
    support yield an empty dump.
    """
    if not hasattr(os, "listxattr"):
        return ""
    try:
        names = os.listxattr(path, follow_symlinks=False)
    except OSError:
        return ""

    chunks: list[str] = []
    for name in names:
        chunks.append(name)
        try:
            value = os.getxattr(path, name, follow_symlinks=False)
        except OSError:
            continue
        chunks.append(_clean_attribute_bytes(value))
    return "|".join(chunks)


def xattr_oracle(path: str) -> int:
    """Default oracle scanning extended attributes for HSM tape markers."""
    return code_from_attributes(read_attribute_text(path))


def command_oracle(argv: Sequence[str]) -> Oracle:
    """Build an oracle that runs ``argv + [path]`` and returns its exit status.

    A command that cannot be launched reports ``CODE_UNAVAILABLE``.
    """
    base_argv = [str(part) for part in argv]

    def run(path: str) -> int:
        try:
            proc = subprocess.run(
                [*base_argv, path],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError as exc:
            logger.debug("Storage oracle %s failed to start: %s", base_argv[0], exc)
            return CODE_UNAVAILABLE
        return proc.returncode

    return run


def oracle_from_command(oracle_command: Sequence[str] | None) -> Oracle:
    """Return the configured command oracle, or the xattr oracle when unset."""
    if oracle_command:
        return command_oracle(oracle_command)
    return xattr_oracle


__all__ = [
    "Oracle",
    "CODE_RESIDENT",
    "CODE_PREMIGRATED",
    "CODE_MIGRATED",
    "CODE_UNAVAILABLE",
    "state_from_code",
    "classify",
    "code_from_attributes",
    "read_attribute_text",
    "xattr_oracle",
    "command_oracle",
    "oracle_from_command",
]
