"""Concurrent listing pipeline: enumerate, stat/classify, sort, present.

- ``scheduler``: per-batch worker pool over two bounded queues
- ``enumerator``: input path expansion and GPFS eligibility
- ``aggregate``: grouped records, sorting and colorized rendering
"""

from __future__ import annotations

from .scheduler import StatOutcome, StatScheduler, stat_and_classify, worker_count
from .enumerator import eligibility_map, enumerate_path, is_eligible, list_child_paths, parent_directory
from .aggregate import Listing, ListingRequest, build_request, parse_mtime, sort_records, symlink_target

__all__ = [
    "StatOutcome",
    "StatScheduler",
    "stat_and_classify",
    "worker_count",
    "eligibility_map",
    "enumerate_path",
    "is_eligible",
    "list_child_paths",
    "parent_directory",
    "Listing",
    "ListingRequest",
    "build_request",
    "parse_mtime",
    "sort_records",
    "symlink_target",
]
