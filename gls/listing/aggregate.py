"""Listing aggregate: collection, sorting and presentation of directory groups.

``Listing`` owns every collected record, grouped by base directory in the
order the input paths were given. Presentation picks the text and color of
each name with a fixed priority: directories, symlinks, files too large to
migrate, then storage state.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import TextIO

from ..columnize import Cell, Color, TableWriter
from ..config import APP_NAME, ListingConfig
from ..errors import SymlinkResolutionError, TimeParseError
from ..file_model import MTIME_FORMAT, FileRecord, Oracle, StorageState, humanize_size, oracle_from_command
from .enumerator import eligibility_map, enumerate_path
from .scheduler import StatScheduler

logger = logging.getLogger(__name__)

TOO_LARGE_LABEL = "TOO LARGE TO MIGRATE"

_STATE_COLORS: dict[StorageState, tuple[str, Color]] = {
    StorageState.RESIDENT: ("resident", Color.GREEN),
    StorageState.PREMIGRATED: ("premigrated", Color.YELLOW),
    StorageState.MIGRATED: ("migrated", Color.RED),
}


@dataclass
class ListingRequest:
    """Input paths plus presentation flags for one invocation."""

    paths: list[str]
    long: bool = False
    human: bool = False
    show_all: bool = False
    sort_by_time: bool = False
    no_color: bool = False
    debug: bool = False
    eligible: dict[str, bool] = field(default_factory=dict)


def parse_mtime(value: str) -> datetime:
    try:
        return datetime.strptime(value, MTIME_FORMAT)
    except ValueError as exc:
        raise TimeParseError(f"cannot parse modification time {value!r}") from exc


def sort_records(records: list[FileRecord], by_time: bool) -> None:
    """Sort in place by name, or by modification time (oldest first)."""
    if by_time:
        records.sort(key=lambda record: parse_mtime(record.modified_at))
    else:
        records.sort(key=lambda record: record.name)


def symlink_target(record: FileRecord, base: str) -> str:
    """Resolve a symlink fully, shown relative to ``base`` when inside it."""
    link_path = os.path.join(base, record.name)
    try:
        target = os.path.realpath(link_path, strict=True)
    except OSError as exc:
        raise SymlinkResolutionError(f"cannot resolve symlink {link_path}: {exc.strerror or exc}") from exc
    if base != "/":
        if target == base:
            return "."
        if target.startswith(base + "/"):
            return "." + target[len(base):]
    return target


class Listing:
    """All directory groups of one invocation and how to print them."""

    def __init__(
        self,
        request: ListingRequest,
        config: ListingConfig | None = None,
        oracle: Oracle | None = None,
    ) -> None:
        self.request = request
        self.config = config if config is not None else ListingConfig()
        if oracle is None:
            oracle = oracle_from_command(self.config.oracle_command)
        self.scheduler = StatScheduler(
            oracle,
            self.config.max_workers,
            always_use_max=self.config.always_use_max_workers,
            size_limit_gb=self.config.size_limit_gb,
        )
        self.groups: dict[str, list[FileRecord]] = {}
        if request.debug:
            logging.getLogger(APP_NAME).setLevel(logging.DEBUG)

    def collect(self) -> Exception | None:
        """Stat every input path; stop at and return the first failure."""
        self.groups = {}
        for path in self.request.paths:
            eligible = self.request.eligible.get(path, False)
            base, records, error = enumerate_path(path, self.request.show_all, eligible, self.scheduler)
            if error is not None:
                return error
            self.groups.setdefault(base, []).extend(records)
        return None

    def sort(self) -> None:
        logger.debug("Starting sort")
        for records in self.groups.values():
            sort_records(records, self.request.sort_by_time)
        logger.debug("Sort finished")

    def _state_label(self, key: str) -> str:
        return self.config.state_labels.get(key, key.capitalize())

    def present(self, record: FileRecord, base: str) -> tuple[str, Color]:
        """Return the displayed name and its color tag for ``record``."""
        no_color = self.request.no_color
        if record.is_directory:
            return record.name, Color.RESET if no_color else Color.BLUE

        if record.is_symlink:
            target = symlink_target(record, base)
            text = f"{record.name} -> {target}" if self.request.long else record.name
            return text, Color.RESET if no_color else Color.LIGHT_BLUE

        if record.oversize_for_migration:
            if no_color:
                return f"({TOO_LARGE_LABEL}) {record.name}", Color.RESET
            return record.name, Color.BLINKING_RED_BACKGROUND

        state = _STATE_COLORS.get(record.storage_state)
        if state is None:
            return record.name, Color.RESET
        key, color = state
        if no_color:
            return f"({self._state_label(key)}) {record.name}", Color.RESET
        return record.name, color

    def long_columns(self, record: FileRecord) -> list[str]:
        size = humanize_size(record.size_bytes) if self.request.human else str(record.size_bytes)
        return [record.permission_string, record.owner, record.group, size, record.modified_at]

    def row_for(self, record: FileRecord, base: str) -> list[Cell]:
        name, color = self.present(record, base)
        cells: list[Cell] = []
        if self.request.long:
            cells.extend(self.long_columns(record))
        cells.append((name, color))
        return cells

    def render(self, stream: TextIO) -> None:
        """Sort and print every group; each group gets its own flushed writer."""
        self.sort()
        logger.debug("Printing to screen")
        multiple = len(self.groups) > 1
        for count, (base, records) in enumerate(self.groups.items()):
            if multiple:
                if count > 0:
                    stream.write("\n")
                stream.write(f"{base}:\n")
            with TableWriter.right_aligned(stream) as writer:
                for record in records:
                    if record.is_hidden and not self.request.show_all:
                        continue
                    writer.emit_row(self.row_for(record, base))

    def run(self, stream: TextIO) -> None:
        """Collect and render; collection failures are raised to the caller."""
        error = self.collect()
        if error is not None:
            raise error
        self.render(stream)


def build_request(
    paths: Sequence[str],
    config: ListingConfig,
    **flags: bool,
) -> ListingRequest:
    """Create a request for already-normalized ``paths`` with eligibility filled in."""
    path_list = list(paths)
    return ListingRequest(paths=path_list, eligible=eligibility_map(path_list, config.gpfs_roots), **flags)


__all__ = [
    "Listing",
    "ListingRequest",
    "TOO_LARGE_LABEL",
    "build_request",
    "parse_mtime",
    "sort_records",
    "symlink_target",
]
