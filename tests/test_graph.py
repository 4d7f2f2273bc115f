"""Tests for the CSR graph snapshot and edit batches."""

import networkx as nx
import numpy as np
import pytest

from incremental_pagerank.graph import CsrGraph, random_edge_batch


class TestConstruction:
    def test_from_edges_deduplicates_and_sorts_keys(self):
        g = CsrGraph.from_edges([(2, 1), (1, 2), (1, 2)])
        assert g.keys == [1, 2]
        assert g.order() == 2
        assert g.size() == 2

    def test_isolated_vertices_are_kept(self):
        g = CsrGraph.from_edges([(0, 1)], vertices=[5])
        assert g.keys == [0, 1, 5]
        assert list(g.out_degrees()) == [1, 0, 0]

    def test_from_outgoing_ignores_unknown_and_repeated_links(self):
        g = CsrGraph.from_outgoing({'1': ['2', '2', '9'], '2': []})
        assert g.keys == ['1', '2']
        assert g.edges() == [('1', '2')]

    def test_networkx_round_trip(self):
        G = nx.gnp_random_graph(30, 0.1, seed=3, directed=True)
        g = CsrGraph.from_networkx(G)
        assert g.order() == G.number_of_nodes()
        assert set(g.to_networkx().edges()) == set(G.edges())

    def test_empty_graph(self, empty_graph):
        assert empty_graph.order() == 0
        assert empty_graph.size() == 0
        assert list(empty_graph.offsets) == [0]
        assert empty_graph.transpose().order() == 0

    def test_mismatched_matrix_rejected(self):
        g = CsrGraph.from_edges([(0, 1)])
        with pytest.raises(ValueError):
            CsrGraph([0, 1, 2], g.matrix)


class TestAccessors:
    def test_neighbors_follow_csr_rows(self, dead_end_graph):
        assert dead_end_graph.neighbors(0) == [1, 3]
        assert dead_end_graph.neighbors(3) == []
        assert dead_end_graph.has_edge(2, 3)
        assert not dead_end_graph.has_edge(3, 2)
        assert not dead_end_graph.has_edge(3, 42)

    def test_transpose_swaps_degrees(self, dead_end_graph):
        xt = dead_end_graph.transpose()
        np.testing.assert_array_equal(xt.in_degrees(), dead_end_graph.out_degrees())
        np.testing.assert_array_equal(xt.out_degrees(), dead_end_graph.in_degrees())

    def test_transpose_rows_list_incoming_edges(self, dead_end_graph):
        xt = dead_end_graph.transpose()
        assert xt.neighbors(3) == [0, 2]
        assert xt.neighbors(0) == [2]


class TestEdits:
    def test_with_edits_applies_batch(self, dead_end_graph):
        y = dead_end_graph.with_edits(deletions=[(0, 3)], insertions=[(3, 0)])
        assert not y.has_edge(0, 3)
        assert y.has_edge(3, 0)
        assert y.size() == dead_end_graph.size()
        # the original snapshot is untouched
        assert dead_end_graph.has_edge(0, 3)

    def test_with_edits_keeps_vertices_that_lose_all_edges(self):
        x = CsrGraph.from_edges([(0, 1)])
        y = x.with_edits(deletions=[(0, 1)])
        assert y.keys == [0, 1]
        assert y.size() == 0

    def test_deleting_missing_edge_raises(self, dead_end_graph):
        with pytest.raises(KeyError):
            dead_end_graph.with_edits(deletions=[(3, 2)])

    def test_random_edge_batch(self, ring_graph):
        deletions, insertions = random_edge_batch(ring_graph, 4, 6, seed=1)
        assert len(deletions) == 4
        assert len(insertions) == 6
        assert all(ring_graph.has_edge(u, v) for u, v in deletions)
        assert not any(ring_graph.has_edge(u, v) for u, v in insertions)
        assert all(u != v for u, v in insertions)

    def test_random_edge_batch_is_seeded(self, ring_graph):
        assert random_edge_batch(ring_graph, 3, 3, seed=9) == random_edge_batch(ring_graph, 3, 3, seed=9)
