# drivers.py
#
# Project: Incremental PageRank Engine
#
# Description:
#   Entry points.  Each driver picks an activation policy and hands the
#   run to a rank loop:
#
#     pagerank_static_seq / pagerank_static_par
#         every vertex active; full recomputation
#     pagerank_dynamic_traversal_seq / pagerank_dynamic_traversal_par
#         only vertices reachable from the edited edges are active;
#         incremental recomputation seeded with the previous ranks
#
#   All drivers take the TRANSPOSED graph of the snapshot being ranked:
#   the rank update walks incoming edges, and the out-degree of each
#   vertex is the in-degree of the transpose.

import os
from concurrent.futures import ThreadPoolExecutor
from functools import partial

import numpy as np

from incremental_pagerank.affected import affected_vertices_traversal, reindex_mask
from incremental_pagerank.loop import RankBuffers, pagerank_par_loop, pagerank_seq_loop
from incremental_pagerank.options import PagerankOptions, PagerankResult
from incremental_pagerank.primitives import (
    AffectedVertices,
    AllActive,
    ContributionSumRule,
    pagerank_factors,
)
from incremental_pagerank.utils import Timer, print_stage, print_step
from incremental_pagerank.workers import create_workers, faulted_count


def default_worker_count():
    return os.cpu_count() or 4


def initial_ranks(xt, initial=None):
    """
    Align optional initial ranks to xt's key order.

    Args:
        xt:      transposed graph
        initial: key -> rank mapping, or None for a uniform 1/N start.
                 Keys missing from the mapping also start at 1/N.

    Returns:
        np.ndarray: float64 vector of length N
    """
    n = xt.order()
    if initial is None:
        return np.full(n, 1.0 / n, dtype=np.float64)
    return np.array([initial.get(k, 1.0 / n) for k in xt.keys], dtype=np.float64)


def _pagerank_run(xt, initial, options, loop, rule, active, workers):
    """
    Allocate the run's vectors and delegate to ``loop``.

    Repeats the whole computation ``options.repeat`` times from fresh
    buffers; the reported time is the mean in milliseconds.
    """
    n = xt.order()
    degrees = xt.in_degrees()
    factors = pagerank_factors(degrees, options.damping)
    rule = rule or ContributionSumRule()

    total = 0.0
    for _ in range(options.repeat):
        with Timer("PageRank", verbose=options.verbose) as timer:
            buffers = RankBuffers.from_initial(initial_ranks(xt, initial))
            contributions = buffers.current * factors
            iterations = loop(buffers, contributions, factors, xt.offsets, xt.targets,
                              degrees, n, options, 0, n, workers, rule, active)
        total += timer.milliseconds

    return PagerankResult(
        ranks=dict(zip(xt.keys, buffers.latest.tolist())),
        iterations=iterations,
        time=total / options.repeat,
        faulted_workers=faulted_count(workers),
    )


def _run_parallel(xt, initial, options, rule, active, workers, executor):
    workers = workers if workers is not None else create_workers(default_worker_count())
    if not workers:
        raise ValueError("worker set is empty")
    if executor is not None:
        loop = partial(pagerank_par_loop, executor=executor)
        return _pagerank_run(xt, initial, options, loop, rule, active, workers)
    with ThreadPoolExecutor(max_workers=len(workers)) as pool:
        loop = partial(pagerank_par_loop, executor=pool)
        return _pagerank_run(xt, initial, options, loop, rule, active, workers)


def _affected_predicate(x, y, deletions, insertions, verbose):
    mask = reindex_mask(x, affected_vertices_traversal(x, deletions, insertions), y)
    active = AffectedVertices(mask)
    if verbose:
        print_step(f"Affected vertices: {active.count()} / {y.order()}")
    return active


# ---------------------------------------------------------------------------
#  Static PageRank
# ---------------------------------------------------------------------------

def pagerank_static_seq(xt, initial=None, options=None, rule=None, workers=None):
    """
    Find the rank of each vertex in a graph, on one thread.

    Args:
        xt:      transpose of the graph
        initial: optional key -> rank mapping to start from
        options: PagerankOptions (defaults if None)
        rule:    RankRule (ContributionSumRule if None)
        workers: worker contexts; one is created if None

    Returns:
        PagerankResult
    """
    options = options or PagerankOptions()
    if xt.order() == 0:
        return PagerankResult()
    if options.verbose:
        print_stage("Static", f"PageRank on {xt.order()} vertices, {xt.size()} edges")
    workers = workers if workers is not None else create_workers(1)
    return _pagerank_run(xt, initial, options, pagerank_seq_loop, rule, AllActive(), workers)


def pagerank_static_par(xt, initial=None, options=None, rule=None, workers=None, executor=None):
    """
    Find the rank of each vertex in a graph, across a set of workers.

    Same as pagerank_static_seq(), plus an optional executor.  Without one,
    a ThreadPoolExecutor sized to the worker set lives for this call.
    """
    options = options or PagerankOptions()
    if xt.order() == 0:
        return PagerankResult()
    if options.verbose:
        print_stage("Static", f"Parallel PageRank on {xt.order()} vertices, {xt.size()} edges")
    return _run_parallel(xt, initial, options, rule, AllActive(), workers, executor)


# ---------------------------------------------------------------------------
#  Traversal-based dynamic PageRank
# ---------------------------------------------------------------------------

def pagerank_dynamic_traversal_seq(x, xt, y, yt, deletions, insertions,
                                   initial=None, options=None, rule=None, workers=None):
    """
    Find the rank of each vertex in an updated graph, on one thread.

    Only vertices reachable (in x) from an endpoint of a deleted or inserted
    edge are recomputed; every other vertex keeps its initial rank.

    Args:
        x:          graph before the batch
        xt:         transpose of x; accepted for symmetry, unused
        y:          graph after the batch
        yt:         transpose of y
        deletions:  ordered (source_key, target_key) pairs removed
        insertions: ordered (source_key, target_key) pairs added
        initial:    key -> rank mapping, normally the result for x
        options:    PagerankOptions (defaults if None)
        rule:       RankRule (ContributionSumRule if None)
        workers:    worker contexts; one is created if None

    Returns:
        PagerankResult for y
    """
    options = options or PagerankOptions()
    if yt.order() == 0:
        return PagerankResult()
    if options.verbose:
        print_stage("Dynamic", f"Incremental PageRank: {len(deletions)} deletions, "
                               f"{len(insertions)} insertions")
    active = _affected_predicate(x, y, deletions, insertions, options.verbose)
    workers = workers if workers is not None else create_workers(1)
    return _pagerank_run(yt, initial, options, pagerank_seq_loop, rule, active, workers)


def pagerank_dynamic_traversal_par(x, xt, y, yt, deletions, insertions,
                                   initial=None, options=None, rule=None,
                                   workers=None, executor=None):
    """Parallel counterpart of pagerank_dynamic_traversal_seq()."""
    options = options or PagerankOptions()
    if yt.order() == 0:
        return PagerankResult()
    if options.verbose:
        print_stage("Dynamic", f"Parallel incremental PageRank: {len(deletions)} deletions, "
                               f"{len(insertions)} insertions")
    active = _affected_predicate(x, y, deletions, insertions, options.verbose)
    return _run_parallel(yt, initial, options, rule, active, workers, executor)
