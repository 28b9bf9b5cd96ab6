"""Expand input paths into directory groups of stat'ed records."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable

from ..errors import GlobError
from ..file_model import FileRecord
from .scheduler import StatScheduler, stat_and_classify

logger = logging.getLogger(__name__)


def is_eligible(path: str, roots: Iterable[str]) -> bool:
    """Return whether ``path`` is one of ``roots`` or lies underneath one."""
    for root in roots:
        if path == root:
            return True
        prefix = root if root.endswith("/") else root + "/"
        if path.startswith(prefix):
            return True
    return False


def eligibility_map(paths: Iterable[str], roots: Iterable[str]) -> dict[str, bool]:
    """Eligibility for each input path, keyed by the path itself."""
    roots = tuple(roots)
    return {path: is_eligible(path, roots) for path in paths}


def parent_directory(path: str) -> str:
    return os.path.dirname(path) or path


def list_child_paths(directory: str, show_hidden: bool) -> list[str]:
    """Return immediate child paths of ``directory``.

    Names starting with ``.`` are skipped unless ``show_hidden``. Raises
    ``GlobError`` when the directory cannot be listed.
    """
    children: list[str] = []
    try:
        with os.scandir(directory) as entries:
            for child in entries:
                if not show_hidden and child.name.startswith("."):
                    continue
                children.append(os.path.join(directory, child.name))
    except OSError as exc:
        raise GlobError(f"cannot list {directory}: {exc.strerror or exc}") from exc
    return children


def enumerate_path(
    path: str,
    show_all: bool,
    eligible: bool,
    scheduler: StatScheduler,
) -> tuple[str, list[FileRecord], Exception | None]:
    """Collect records for one input path.

    Returns ``(base, records, error)``. A non-directory yields one record keyed
    by its parent directory; a directory yields its children keyed by itself,
    with ``.`` and ``..`` first when ``show_all`` is set.
    """
    try:
        top = stat_and_classify(path, eligible, scheduler.oracle, scheduler.size_limit_gb)
    except Exception as exc:
        return path, [], exc

    if not top.is_directory:
        return parent_directory(path), [top], None

    try:
        children = list_child_paths(path, show_all)
    except GlobError as exc:
        return path, [], exc

    records: list[FileRecord] = []
    if show_all:
        try:
            for dot in (".", ".."):
                records.append(
                    stat_and_classify(
                        os.path.join(path, dot),
                        eligible,
                        scheduler.oracle,
                        scheduler.size_limit_gb,
                    )
                )
        except Exception as exc:
            return path, [], exc

    logger.debug("Enumerated %d entries under %s", len(children), path)
    gathered, error = scheduler.schedule(children, path, eligible)
    if error is not None:
        return path, [], error
    records.extend(gathered)
    return path, records, None


__all__ = [
    "eligibility_map",
    "enumerate_path",
    "is_eligible",
    "list_child_paths",
    "parent_directory",
]
