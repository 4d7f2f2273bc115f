# loop.py
#
# Project: Incremental PageRank Engine
#
# Description:
#   The sweep-until-convergence engine, in a sequential and a
#   thread-parallel variant sharing one algorithm:
#
#     1. teleport mass C0 (constant, or dead-end aware from the previous
#        estimate)
#     2. rank update for every active vertex in range
#     3. contribution refresh for the WHOLE range, since inactive vertices
#        still feed their active neighbors
#     4. error between the current and previous estimates
#     5. synchronous: exchange the two buffers;
#        asynchronous: keep updating in place, snapshot for the next error
#     6. stop on error < tolerance, on a cancelled worker, or at the cap
#
#   The parallel loop runs each phase once per worker on disjoint vertex
#   ranges; executor.map() returning is the barrier between phases.
#   Partial errors and dead-end masses are reduced in worker order, so a
#   fixed partitioning gives reproducible results.

import numpy as np

from incremental_pagerank.primitives import (
    combine_errors,
    dead_end_mass,
    multiply_values,
    pagerank_calculate_ranks,
    pagerank_error,
    pagerank_teleport,
    teleport_from_mass,
)
from incremental_pagerank.utils import print_step, print_success, print_warning
from incremental_pagerank.workers import chunk_bounds, faulted_count, partition_workers


class RankBuffers:
    """
    The current and previous rank estimates of a run.

    After every completed sweep the newest estimate is ``latest``.
    """

    def __init__(self, current, previous):
        if len(current) != len(previous):
            raise ValueError("rank buffers must have equal length")
        self.current = current
        self.previous = previous

    @classmethod
    def from_initial(cls, ranks):
        ranks = np.asarray(ranks, dtype=np.float64)
        return cls(ranks.copy(), ranks.copy())

    def exchange(self):
        """Swap ownership: this sweep's current becomes next sweep's previous."""
        self.current, self.previous = self.previous, self.current

    def settle(self, lo, hi):
        """Snapshot current into previous over [lo, hi)."""
        self.previous[lo:hi] = self.current[lo:hi]

    @property
    def latest(self):
        return self.previous

    def __len__(self):
        return len(self.current)


def _check_lengths(n, **vectors):
    for name, vec in vectors.items():
        if len(vec) != n:
            raise ValueError(f"{name} has length {len(vec)}, expected {n}")


def _report_stop(l, error, options, faulted):
    """Report how the run ended: converged, aborted or out of budget."""
    if not options.verbose:
        return
    if error < options.tolerance:
        print_success(f"Converged after {l} sweeps (error={error:.3e})")
    elif faulted:
        print_warning(f"Aborted after {l} sweeps: worker fault observed")
    else:
        print_warning(f"Stopped at the iteration cap ({l} sweeps, error={error:.3e})")


def pagerank_seq_loop(buffers, contributions, factors, offsets, targets, degrees,
                      n, options, start, count, workers, rule, active):
    """
    Perform PageRank sweeps on a single thread.

    Args:
        buffers:       RankBuffers (updated; final ranks in buffers.latest)
        contributions: contribution of each vertex (updated)
        factors:       rank scaling factor of each vertex
        offsets:       edge offsets of the transposed graph
        targets:       edge targets of the transposed graph
        degrees:       out-degree of each vertex
        n:             total number of vertices
        options:       PagerankOptions
        start:         first vertex of the range
        count:         number of vertices in the range
        workers:       worker contexts; only the first is used
        rule:          RankRule computing a vertex's new rank
        active:        ActivationPredicate

    Returns:
        int: sweeps performed
    """
    _check_lengths(n, buffers=buffers, contributions=contributions,
                   factors=factors, degrees=degrees)
    if not workers:
        raise ValueError("worker set is empty")
    worker = workers[0]
    P = options.damping
    stop = start + count
    l = 0
    error = np.inf
    while l < options.max_iterations:
        c0 = pagerank_teleport(buffers.previous, degrees, P, n) if options.dead_ends else (1 - P) / n
        pagerank_calculate_ranks(buffers.current, contributions, factors, offsets, targets,
                                 c0, start, stop, worker, rule, active, options.asynchronous)
        l += 1
        multiply_values(contributions, buffers.current, factors, start, stop)
        error = pagerank_error(buffers.current, buffers.previous, options.error_norm, start, stop)
        if options.asynchronous:
            buffers.settle(start, stop)
        else:
            buffers.exchange()
        if options.verbose:
            print_step(f"Sweep {l}: error={error:.3e}")
        if error < options.tolerance:
            break
        if worker.faulted:
            break
    _report_stop(l, error, options, worker.faulted)
    return l


def pagerank_par_loop(buffers, contributions, factors, offsets, targets, degrees,
                      n, options, start, count, workers, rule, active, executor):
    """
    Perform PageRank sweeps across a set of workers.

    Same arguments as pagerank_seq_loop(), plus the executor that runs one
    task per worker.  Worker partition bounds are (re)assigned here.

    Returns:
        int: sweeps performed
    """
    _check_lengths(n, buffers=buffers, contributions=contributions,
                   factors=factors, degrees=degrees)
    partition_workers(workers, start, count)
    mass_bounds = chunk_bounds(0, n, len(workers))
    P = options.damping
    norm = options.error_norm
    stop = start + count

    def teleport():
        if not options.dead_ends:
            return (1 - P) / n
        partials = list(executor.map(
            lambda b: dead_end_mass(buffers.previous, degrees, b[0], b[1]), mass_bounds))
        mass = 0.0
        for m in partials:
            mass += m
        return teleport_from_mass(mass, P, n)

    def update(w):
        pagerank_calculate_ranks(buffers.current, contributions, factors, offsets, targets,
                                 c0, w.start, w.stop, w, rule, active, options.asynchronous)

    def refresh(w):
        multiply_values(contributions, buffers.current, factors, w.start, w.stop)

    def measure(w):
        return pagerank_error(buffers.current, buffers.previous, norm, w.start, w.stop)

    l = 0
    error = np.inf
    while l < options.max_iterations:
        c0 = teleport()
        list(executor.map(update, workers))
        l += 1
        list(executor.map(refresh, workers))
        error = combine_errors(list(executor.map(measure, workers)), norm)
        if options.asynchronous:
            buffers.settle(start, stop)
        else:
            buffers.exchange()
        if options.verbose:
            print_step(f"Sweep {l}: error={error:.3e}")
        if error < options.tolerance:
            break
        if faulted_count(workers) > 0:
            break
    _report_stop(l, error, options, faulted_count(workers) > 0)
    return l
