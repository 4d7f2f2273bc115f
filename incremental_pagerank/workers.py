# workers.py
#
# Project: Incremental PageRank Engine
#
# Description:
#   Worker contexts handed to the rank loops.  The pool that runs them is
#   owned by the caller (a concurrent.futures executor); the loops only
#   read each context's partition bounds and cancellation token.
#
#   Cancellation is cooperative: a token may be cancelled at any time
#   (e.g. by a test harness from inside a rank rule), but the loops only
#   sample it once per completed sweep.

import threading
from dataclasses import dataclass, field


class CancellationToken:
    """Thread-safe one-way flag signalling a simulated worker fault."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    def reset(self):
        self._event.clear()

    @property
    def cancelled(self):
        return self._event.is_set()


@dataclass
class WorkerContext:
    """
    Per-worker record.

    Attributes:
        worker_id: position of the worker in its set
        start:     first vertex of the worker's partition
        stop:      one past the last vertex of the partition
        token:     cancellation token (the fault flag)
    """
    worker_id: int
    start: int = 0
    stop: int = 0
    token: CancellationToken = field(default_factory=CancellationToken)

    @property
    def faulted(self):
        return self.token.cancelled


def create_workers(count):
    """Allocate ``count`` fresh worker contexts."""
    if count < 1:
        raise ValueError(f"need at least one worker, got {count}")
    return [WorkerContext(worker_id=i) for i in range(count)]


def chunk_bounds(start, count, parts):
    """
    Split [start, start+count) into ``parts`` contiguous, disjoint ranges.

    Earlier ranges take the remainder, so sizes differ by at most one.
    """
    base, extra = divmod(count, parts)
    bounds = []
    lo = start
    for p in range(parts):
        hi = lo + base + (1 if p < extra else 0)
        bounds.append((lo, hi))
        lo = hi
    return bounds


def partition_workers(workers, start, count):
    """Assign each worker its share of [start, start+count)."""
    if not workers:
        raise ValueError("worker set is empty")
    for worker, (lo, hi) in zip(workers, chunk_bounds(start, count, len(workers))):
        worker.start = lo
        worker.stop = hi
    return workers


def faulted_count(workers):
    """Number of workers whose token has been cancelled."""
    return sum(1 for w in workers if w.faulted)