# validation.py
#
# Project: Incremental PageRank Engine
#
# Description:
#   Compare a PagerankResult against NetworkX's reference PageRank, or
#   against another result (e.g. incremental vs. from-scratch), using
#   standard ranking metrics.
#
#   nx.pagerank() redistributes dangling mass uniformly, so it is the
#   reference for runs with dead_ends=True.
#
# References:
#   [1] Spearman, C. (1904).
#       "The Proof and Measurement of Association between Two Things."
#       American Journal of Psychology, 15(1), 72-101.
#   [2] Kendall, M. (1938).
#       "A New Measure of Rank Correlation."
#       Biometrika, 30(1/2), 81-93.
#
# NetworkX License (3-clause BSD):
#   Copyright (c) 2004-2025, NetworkX Developers
#   All rights reserved.
#   See full license: https://github.com/networkx/networkx/blob/main/LICENSE.txt
#
#   This file invokes nx.pagerank() at runtime as a reference
#   implementation; no NetworkX code is copied.
#
# Metrics used:
#   Score-level:  Mean Absolute Error (MAE) and max absolute error.
#   Rank-level:   Spearman's rho and Kendall's tau over all N vertices.
#   Top-K level:  Precision@K (set overlap).

import networkx as nx
import numpy as np
from scipy.stats import kendalltau, spearmanr

from incremental_pagerank.utils import print_stage, print_summary_box


def compare_ranks(ranks, reference, top_k=5):
    """
    Score-, rank- and top-k agreement between two key -> rank mappings.

    Keys missing from ``reference`` count as rank 0.

    Returns:
        dict: mae, max_error, max_error_key, spearman, kendall, precision_at_k
    """
    keys = list(ranks)
    if not keys:
        return {"mae": 0.0, "max_error": 0.0, "max_error_key": None,
                "spearman": 1.0, "kendall": 1.0, "precision_at_k": 1.0}

    ours = np.array([ranks[k] for k in keys], dtype=np.float64)
    theirs = np.array([reference.get(k, 0.0) for k in keys], dtype=np.float64)

    abs_errors = np.abs(ours - theirs)
    # Correlation is undefined for constant vectors (e.g. a symmetric ring)
    if np.ptp(ours) == 0 or np.ptp(theirs) == 0:
        rho = tau = 1.0 if np.allclose(ours, theirs) else 0.0
    else:
        rho = float(spearmanr(ours, theirs)[0])
        tau = float(kendalltau(ours, theirs)[0])

    k = min(top_k, len(keys))
    top_ours = {keys[i] for i in np.argsort(-ours, kind='stable')[:k]}
    top_theirs = {keys[i] for i in np.argsort(-theirs, kind='stable')[:k]}

    return {
        "mae": float(abs_errors.mean()),
        "max_error": float(abs_errors.max()),
        "max_error_key": keys[int(abs_errors.argmax())],
        "spearman": rho,
        "kendall": tau,
        "precision_at_k": len(top_ours & top_theirs) / k,
    }


def networkx_reference(graph, damping=0.85, tolerance=1e-10, max_iterations=500):
    """Reference ranks from nx.pagerank() for a CsrGraph."""
    return nx.pagerank(graph.to_networkx(), alpha=damping,
                       tol=tolerance, max_iter=max_iterations)


def verify_with_networkx(graph, result, damping=0.85, label="Validation Metrics"):
    """
    Verify a result against nx.pagerank() and print the metrics.

    Args:
        graph:   CsrGraph the result was computed for (not transposed)
        result:  PagerankResult
        damping: damping factor used for the run

    Returns:
        dict: metrics from compare_ranks()
    """
    print_stage("Verify", "Comparing with NetworkX PageRank")
    metrics = compare_ranks(result.ranks, networkx_reference(graph, damping))
    report_metrics(label, metrics)
    return metrics


def report_metrics(label, metrics):
    print_summary_box(label, {
        "MAE (score)": f"{metrics['mae']:.2e}",
        "Max error": f"{metrics['max_error']:.2e} (vertex {metrics['max_error_key']})",
        "Spearman rho [1]": f"{metrics['spearman']:.6f}",
        "Kendall tau  [2]": f"{metrics['kendall']:.6f}",
        "Precision@5": f"{metrics['precision_at_k']:.2f}",
    })
