"""Shared graph fixtures for the PageRank tests."""

import pytest

from incremental_pagerank.graph import CsrGraph
from incremental_pagerank.primitives import ContributionSumRule


def cluster_edges(offset, size):
    """
    Ring plus chords over ``size`` vertices: strongly connected, no dead ends.

    Only every third vertex gets a chord, so out- and in-degrees are uneven
    and the uniform vector is not the fixed point.
    """
    edges = []
    for j in range(size):
        edges.append((offset + j, offset + (j + 1) % size))
        if j % 3 == 0:
            edges.append((offset + j, offset + (7 * j + 3) % size))
    return edges


@pytest.fixture
def ring_graph():
    """Strongly connected 100-vertex graph."""
    return CsrGraph.from_edges(cluster_edges(0, 100))


@pytest.fixture
def two_cluster_graph():
    """Clusters A (0..49) and B (50..99); A links into B, B never links back."""
    edges = cluster_edges(0, 50) + cluster_edges(50, 50)
    edges += [(0, 50), (10, 60), (20, 70)]
    return CsrGraph.from_edges(edges)


@pytest.fixture
def dead_end_graph():
    """Vertex 3 has no outgoing edges."""
    return CsrGraph.from_edges([(0, 1), (1, 2), (2, 0), (2, 3), (0, 3)])


@pytest.fixture
def empty_graph():
    return CsrGraph.from_edges([])


class FaultOnSweep:
    """Rank rule that cancels its worker during the k-th sweep."""

    def __init__(self, sweep, vertex=0):
        self.sweep = sweep
        self.vertex = vertex
        self.seen = 0
        self.inner = ContributionSumRule()

    def __call__(self, worker, v, contributions, offsets, targets, c0):
        if v == self.vertex:
            self.seen += 1
            if self.seen == self.sweep:
                worker.token.cancel()
        return self.inner(worker, v, contributions, offsets, targets, c0)


@pytest.fixture
def fault_on_sweep():
    return FaultOnSweep
