"""Error taxonomy for listing failures.

Every failure that aborts a listing derives from ``GlsError`` and carries the
process exit code the CLI reports for it.
"""

from __future__ import annotations


class GlsError(Exception):
    """Base error for an aborted listing."""

    exit_code: int = 1


class StatError(GlsError):
    """Path is missing or cannot be stat'ed."""


class IdentityResolutionError(GlsError):
    """Owner uid or group gid has no entry in the identity database."""


class SymlinkResolutionError(GlsError):
    """Symlink target cannot be resolved."""


class TimeParseError(GlsError):
    """Stored modification-time string does not parse."""


class GlobError(GlsError):
    """Directory expansion failed."""


def exit_code_for_exception(exc: BaseException) -> int:
    """Resolve the process exit code for an exception."""
    if isinstance(exc, GlsError):
        return exc.exit_code
    return GlsError.exit_code


__all__ = [
    "GlsError",
    "StatError",
    "IdentityResolutionError",
    "SymlinkResolutionError",
    "TimeParseError",
    "GlobError",
    "exit_code_for_exception",
]
