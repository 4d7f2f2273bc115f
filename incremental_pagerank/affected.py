# affected.py
#
# Project: Incremental PageRank Engine
#
# Description:
#   Which vertices can change rank after an edit batch?
#
#   A vertex's rank depends only on its in-neighbors' ranks and out-degrees,
#   so a change can only travel along out-edges.  Starting a traversal from
#   both endpoints of every deleted and inserted edge, over the OLD graph,
#   marks every vertex the batch can reach in the new graph too: any new
#   path either uses old edges from the source, or passes through an
#   inserted edge whose target is itself a seed.
#
#   The mask is computed in the old graph's index space and then reindexed
#   into the new graph's: keys missing from the new graph are dropped, and
#   new keys the traversal never reached stay unmarked.
#
# References:
#   [1] Desikan, P., Pathak, N., Srivastava, J., & Kumar, V. (2005).
#       "Incremental PageRank Computation on Evolving Graphs." WWW 2005.

import numpy as np
from scipy.sparse.csgraph import breadth_first_order


def affected_vertices_traversal(x, deletions, insertions):
    """
    Mark vertices reachable from the endpoints of changed edges.

    Args:
        x:          CsrGraph before the batch
        deletions:  ordered (source_key, target_key) pairs removed
        insertions: ordered (source_key, target_key) pairs added

    Returns:
        np.ndarray: boolean mask in x's index space
    """
    visited = np.zeros(x.order(), dtype=bool)
    for u, v in list(deletions) + list(insertions):
        for key in (u, v):
            i = x.index.get(key)
            # Keys new to the batch have no old-graph position; closed sets
            # need no second traversal.
            if i is None or visited[i]:
                continue
            order = breadth_first_order(x.matrix, i, directed=True, return_predecessors=False)
            visited[order] = True
    return visited


def reindex_mask(x, mask, y):
    """Carry a boolean mask from x's key order into y's key order."""
    out = np.zeros(y.order(), dtype=bool)
    for i in np.flatnonzero(mask):
        j = y.index.get(x.keys[i])
        if j is not None:
            out[j] = True
    return out
