"""Bounded worker pool that stats and classifies one directory batch.

Each ``schedule`` call launches a fresh set of threads. Paths travel to the
workers through a bounded work queue closed by one stop sentinel per worker;
outcomes come back through a result queue of the same capacity. The caller
joins every worker before draining results, so all worker writes happen
before the records are read.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from queue import Empty, Queue

from ..file_model import FileRecord, Oracle, classify, extract

logger = logging.getLogger(__name__)

_STOP = None


@dataclass(frozen=True)
class StatOutcome:
    """One worker result: a record, or the error that replaced it."""

    path: str
    record: FileRecord | None = None
    error: Exception | None = None


def worker_count(batch_size: int, max_workers: int, always_use_max: bool = False) -> int:
    """Number of threads to launch for a batch of ``batch_size`` paths.

    Small batches get ``batch_size // 2 + 1`` threads instead of the ceiling.
    """
    if always_use_max:
        return max_workers
    if batch_size < max_workers:
        return batch_size // 2 + 1
    return max_workers


def stat_and_classify(
    path: str,
    eligible: bool,
    oracle: Oracle,
    size_limit_gb: int | None = None,
) -> FileRecord:
    """Extract metadata for ``path`` and classify it when it is an eligible plain file."""
    record = extract(path, size_limit_gb)
    if eligible and record.is_regular:
        record = record.with_storage_state(classify(path, oracle))
    return record


class StatScheduler:
    """Scatter/gather stat jobs for sibling paths across a per-batch pool."""

    def __init__(
        self,
        oracle: Oracle,
        max_workers: int,
        *,
        always_use_max: bool = False,
        size_limit_gb: int | None = None,
    ) -> None:
        self.oracle = oracle
        self.max_workers = max(1, max_workers)
        self.always_use_max = always_use_max
        self.size_limit_gb = size_limit_gb

    def _worker(
        self,
        work: Queue[str | None],
        results: Queue[StatOutcome],
        eligible: bool,
    ) -> None:
        while True:
            path = work.get()
            if path is _STOP:
                return
            try:
                record = stat_and_classify(path, eligible, self.oracle, self.size_limit_gb)
            except Exception as exc:
                results.put(StatOutcome(path=path, error=exc))
                continue
            results.put(StatOutcome(path=path, record=record))

    def schedule(
        self,
        paths: Sequence[str],
        base_dir: str,
        eligible: bool,
    ) -> tuple[list[FileRecord], Exception | None]:
        """Stat every path in the batch concurrently.

        Returns ``(records, error)``. Record order is unspecified. When any
        path fails the batch yields no records and the first gathered error.
        """
        if not paths:
            return [], None

        n_workers = worker_count(len(paths), self.max_workers, self.always_use_max)
        logger.debug("Launching %d threads for %s", n_workers, base_dir)
        logger.debug("Maximum threads: %d", self.max_workers)
        logger.debug("Cores: %s", os.cpu_count())

        work: Queue[str | None] = Queue(maxsize=len(paths))
        results: Queue[StatOutcome] = Queue(maxsize=len(paths))
        workers: list[threading.Thread] = []
        for n in range(n_workers):
            logger.debug("Launching stat worker %d", n)
            worker = threading.Thread(
                target=self._worker,
                args=(work, results, eligible),
                name=f"gls-stat-{n}",
                daemon=True,
            )
            worker.start()
            workers.append(worker)

        for path in paths:
            logger.debug("Queuing work: %s", path)
            work.put(path)
        for _ in workers:
            work.put(_STOP)

        for worker in workers:
            worker.join()
        logger.debug("Stat workers completed; starting gather")

        records: list[FileRecord] = []
        first_error: Exception | None = None
        while True:
            try:
                outcome = results.get_nowait()
            except Empty:
                break
            if outcome.error is not None:
                if first_error is None:
                    first_error = outcome.error
                continue
            if outcome.record is not None:
                records.append(outcome.record)
        logger.debug("Gather complete")

        if first_error is not None:
            return [], first_error
        return records, None


__all__ = [
    "StatOutcome",
    "StatScheduler",
    "stat_and_classify",
    "worker_count",
]
