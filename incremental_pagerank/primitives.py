# primitives.py
#
# Project: Incremental PageRank Engine
#
# Description:
#   Per-range kernels orchestrated by the rank loops, plus the two
#   capability interfaces they plug into.
#
#   Every kernel works on a half-open vertex range [lo, hi) so the same
#   function serves the sequential loop (one range) and the parallel loop
#   (one disjoint range per worker).
#
#   Rank formula (Page et al. 1999, with the damping folded into the
#   scaling factor):
#       c[u]  = r[u] * P / outdeg(u)          (0 for dead ends)
#       C0    = (1 - P) / N                   naive teleport
#       C0    = (1 - P) / N + P * D / N       dead-end aware, D = rank
#                                             held by dead-end vertices
#       r'[v] = C0 + sum of c[u] over edges u -> v
#
# References:
#   [1] Page, L., Brin, S., Motwani, R., & Winograd, T. (1999).
#       "The PageRank Citation Ranking: Bringing Order to the Web."
#       http://ilpubs.stanford.edu:8090/422/1/1999-66.pdf

from typing import Protocol

import numpy as np

from incremental_pagerank.options import ErrorNorm


# ---------------------------------------------------------------------------
#  Capability interfaces
# ---------------------------------------------------------------------------

class RankRule(Protocol):
    """Computes a vertex's new rank from incoming contributions."""

    def __call__(self, worker, v, contributions, offsets, targets, c0):
        """
        Args:
            worker:        WorkerContext running this vertex
            v:             vertex position
            contributions: contribution vector (all vertices)
            offsets:       CSR offsets of the transposed graph
            targets:       CSR edge targets of the transposed graph
            c0:            teleport mass for this sweep

        Returns:
            float: the new rank of ``v``
        """
        ...


class ActivationPredicate(Protocol):
    """Decides whether a vertex is recomputed in a sweep."""

    def __call__(self, v):
        ...


class ContributionSumRule:
    """Standard PageRank update: teleport mass plus incoming contributions."""

    def __call__(self, worker, v, contributions, offsets, targets, c0):
        return c0 + contributions[targets[offsets[v]:offsets[v + 1]]].sum()


class AllActive:
    """Every vertex is recomputed (static mode)."""

    def __call__(self, v):
        return True


class AffectedVertices:
    """Only vertices flagged in a boolean mask are recomputed."""

    def __init__(self, mask):
        self.mask = np.asarray(mask, dtype=bool)

    def __call__(self, v):
        return bool(self.mask[v])

    def count(self):
        return int(self.mask.sum())


# ---------------------------------------------------------------------------
#  Kernels
# ---------------------------------------------------------------------------

def pagerank_factors(degrees, damping):
    """Scaling factor P / outdeg per vertex, 0 for dead ends."""
    degrees = np.asarray(degrees)
    factors = np.zeros(len(degrees), dtype=np.float64)
    linked = degrees > 0
    factors[linked] = damping / degrees[linked]
    return factors


def dead_end_mass(ranks, degrees, lo, hi):
    """Total rank held by dead-end vertices in [lo, hi)."""
    return float(ranks[lo:hi][degrees[lo:hi] == 0].sum())


def teleport_from_mass(mass, damping, n):
    return (1 - damping) / n + damping * mass / n


def pagerank_teleport(ranks, degrees, damping, n):
    """Dead-end-aware teleport mass C0 over the whole graph."""
    return teleport_from_mass(dead_end_mass(ranks, degrees, 0, n), damping, n)


def pagerank_calculate_ranks(current, contributions, factors, offsets, targets,
                             c0, lo, hi, worker, rule, active, asynchronous=False):
    """
    Recompute the rank of every active vertex in [lo, hi).

    Inactive vertices are left untouched.  In asynchronous mode a vertex's
    contribution is refreshed as soon as its rank is written, so vertices
    updated later in the sweep already see it.
    """
    for v in range(lo, hi):
        if not active(v):
            continue
        current[v] = rule(worker, v, contributions, offsets, targets, c0)
        if asynchronous:
            contributions[v] = current[v] * factors[v]


def multiply_values(out, x, y, lo, hi):
    """out[lo:hi] = x[lo:hi] * y[lo:hi]"""
    np.multiply(x[lo:hi], y[lo:hi], out=out[lo:hi])


def pagerank_error(current, previous, norm, lo, hi):
    """Distance between two rank estimates over [lo, hi); always >= 0."""
    if hi <= lo:
        return 0.0
    delta = np.abs(current[lo:hi] - previous[lo:hi])
    if norm == ErrorNorm.L1:
        return float(delta.sum())
    if norm == ErrorNorm.L2:
        return float(np.dot(delta, delta))
    if norm == ErrorNorm.LI:
        return float(delta.max())
    raise ValueError(f"unknown error norm {norm!r}")


def combine_errors(partials, norm):
    """Reduce per-worker errors, in worker order."""
    if norm == ErrorNorm.LI:
        return max(partials, default=0.0)
    total = 0.0
    for e in partials:
        total += e
    return total
