# graph.py
#
# Project: Incremental PageRank Engine
#
# Description:
#   Immutable directed-graph snapshot in CSR form, backed by a
#   scipy.sparse.csr_matrix.  Row u holds the targets of u's outgoing
#   edges; the transpose holds incoming edges, which is what the rank
#   update walks.
#
#   Vertex keys are enumerated once, in sorted order, and every per-vertex
#   vector in the engine is aligned to that enumeration.
#
#   Edge batches (deletions / insertions) are ordered lists of
#   (source_key, target_key) pairs; with_edits() applies one batch and
#   returns the next snapshot.

import networkx as nx
import numpy as np
import scipy.sparse as sp


class CsrGraph:
    """Directed graph snapshot with a stable key enumeration."""

    def __init__(self, keys, matrix):
        self.keys = list(keys)
        self.index = {k: i for i, k in enumerate(self.keys)}
        self.matrix = sp.csr_matrix(matrix)
        if self.matrix.shape != (len(self.keys), len(self.keys)):
            raise ValueError(f"matrix shape {self.matrix.shape} does not match {len(self.keys)} keys")
        self.matrix.sort_indices()

    # ------------------------------------------------------------------
    #  Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_edges(cls, edges, vertices=()):
        """
        Build a graph from (source, target) pairs.

        Repeated edges count once, matching networkx.DiGraph.add_edge().
        Isolated vertices can be supplied through ``vertices``.
        """
        edges = list(dict.fromkeys(edges))
        keys = sorted(set(vertices) | {u for u, _ in edges} | {v for _, v in edges})
        index = {k: i for i, k in enumerate(keys)}
        n = len(keys)

        rows = np.array([index[u] for u, _ in edges], dtype=np.int64)
        cols = np.array([index[v] for _, v in edges], dtype=np.int64)
        data = np.ones(len(rows), dtype=np.float64)
        return cls(keys, sp.csr_matrix((data, (rows, cols)), shape=(n, n)))

    @classmethod
    def from_outgoing(cls, outgoing):
        """
        Build a graph from a page -> list of linked pages dictionary.

        Links to pages outside the dictionary are ignored, and repeated
        links from the same page count once.
        """
        edges = [
            (source, target)
            for source, targets in outgoing.items()
            for target in set(targets)
            if target in outgoing
        ]
        return cls.from_edges(edges, vertices=outgoing.keys())

    @classmethod
    def from_networkx(cls, G):
        return cls.from_edges(G.edges(), vertices=G.nodes())

    def to_networkx(self):
        G = nx.DiGraph()
        G.add_nodes_from(self.keys)
        G.add_edges_from(self.edges())
        return G

    # ------------------------------------------------------------------
    #  Accessors
    # ------------------------------------------------------------------

    def order(self):
        """Number of vertices."""
        return len(self.keys)

    def size(self):
        """Number of edges."""
        return int(self.matrix.nnz)

    @property
    def offsets(self):
        return self.matrix.indptr

    @property
    def targets(self):
        return self.matrix.indices

    def out_degrees(self):
        return np.diff(self.matrix.indptr)

    def in_degrees(self):
        return np.bincount(self.matrix.indices, minlength=self.order())

    def neighbors(self, key):
        """Keys of the targets of ``key``'s outgoing edges."""
        i = self.index[key]
        return [self.keys[j] for j in self.targets[self.offsets[i]:self.offsets[i + 1]]]

    def has_edge(self, u, v):
        if u not in self.index or v not in self.index:
            return False
        return v in self.neighbors(u)

    def edges(self):
        coo = self.matrix.tocoo()
        return [(self.keys[i], self.keys[j]) for i, j in zip(coo.row, coo.col)]

    def transpose(self):
        return CsrGraph(self.keys, self.matrix.T.tocsr())

    # ------------------------------------------------------------------
    #  Batch updates
    # ------------------------------------------------------------------

    def with_edits(self, deletions=(), insertions=()):
        """
        Apply an edit batch and return the resulting snapshot.

        Deletions are applied before insertions.  Every vertex of this
        graph is kept, even if it loses all of its edges.

        Raises:
            KeyError: a deletion names an edge that is not in the graph.
        """
        edges = dict.fromkeys(self.edges())
        for u, v in deletions:
            if (u, v) not in edges:
                raise KeyError(f"cannot delete missing edge ({u!r}, {v!r})")
            del edges[(u, v)]
        for u, v in insertions:
            edges[(u, v)] = None
        return CsrGraph.from_edges(edges, vertices=self.keys)

    def __repr__(self):
        return f"CsrGraph(order={self.order()}, size={self.size()})"


def random_edge_batch(graph, deletions, insertions, seed=None):
    """
    Draw a random edit batch for ``graph``.

    Deleted edges are sampled from the existing edges; inserted edges join
    two existing vertices and are neither present nor self-loops.

    Returns:
        tuple: (list of deleted (u, v), list of inserted (u, v))
    """
    rng = np.random.default_rng(seed)
    existing = graph.edges()
    n = graph.order()

    picked = rng.choice(len(existing), size=min(deletions, len(existing)), replace=False)
    removed = [existing[i] for i in sorted(picked)]

    added = []
    seen = set(existing)
    attempts = 0
    while n > 1 and len(added) < insertions and attempts < 100 * (insertions + 1):
        attempts += 1
        i, j = rng.integers(0, n, size=2)
        edge = (graph.keys[i], graph.keys[j])
        if i == j or edge in seen:
            continue
        seen.add(edge)
        added.append(edge)
    return removed, added
