"""Tests for the per-range kernels and capability interfaces."""

import numpy as np
import pytest

from incremental_pagerank.options import ErrorNorm
from incremental_pagerank.primitives import (
    AffectedVertices,
    AllActive,
    ContributionSumRule,
    combine_errors,
    dead_end_mass,
    multiply_values,
    pagerank_calculate_ranks,
    pagerank_error,
    pagerank_factors,
    pagerank_teleport,
)
from incremental_pagerank.workers import create_workers


def test_factors_fold_in_damping_and_zero_dead_ends():
    f = pagerank_factors(np.array([2, 0, 4]), 0.8)
    np.testing.assert_allclose(f, [0.4, 0.0, 0.2])


def test_teleport_redistributes_dead_end_mass():
    ranks = np.array([0.1, 0.2, 0.3, 0.4])
    degrees = np.array([1, 0, 2, 0])
    assert dead_end_mass(ranks, degrees, 0, 4) == pytest.approx(0.6)
    assert dead_end_mass(ranks, degrees, 2, 4) == pytest.approx(0.4)
    c0 = pagerank_teleport(ranks, degrees, 0.85, 4)
    assert c0 == pytest.approx(0.15 / 4 + 0.85 * 0.6 / 4)


def test_teleport_without_dead_ends_is_constant():
    ranks = np.full(5, 0.2)
    assert pagerank_teleport(ranks, np.ones(5, dtype=int), 0.85, 5) == pytest.approx(0.15 / 5)


@pytest.mark.parametrize("norm, expected", [
    (ErrorNorm.L1, 0.6),
    (ErrorNorm.L2, 0.14),
    (ErrorNorm.LI, 0.3),
])
def test_error_norms(norm, expected):
    a = np.array([0.1, 0.5, 0.0])
    r = np.array([0.2, 0.2, 0.2])
    assert pagerank_error(a, r, norm, 0, 3) == pytest.approx(expected)


def test_error_is_scoped_to_range_and_non_negative():
    a = np.array([1.0, 0.0, 5.0])
    r = np.array([0.0, 0.0, 0.0])
    assert pagerank_error(a, r, ErrorNorm.L1, 1, 2) == 0.0
    assert pagerank_error(a, r, ErrorNorm.LI, 2, 2) == 0.0


def test_combine_errors():
    assert combine_errors([0.1, 0.2, 0.3], ErrorNorm.L1) == pytest.approx(0.6)
    assert combine_errors([0.1, 0.4, 0.3], ErrorNorm.LI) == 0.4
    assert combine_errors([], ErrorNorm.LI) == 0.0


def test_multiply_values_touches_only_range():
    out = np.zeros(4)
    multiply_values(out, np.array([1.0, 2.0, 3.0, 4.0]), np.full(4, 2.0), 1, 3)
    np.testing.assert_array_equal(out, [0.0, 4.0, 6.0, 0.0])


class TestCalculateRanks:
    def setup_method(self):
        # transposed graph: 0 <- 1, 0 <- 2, 1 <- 2, 2 <- 0
        self.offsets = np.array([0, 2, 3, 4])
        self.targets = np.array([1, 2, 2, 0])
        self.contributions = np.array([0.1, 0.2, 0.3])
        self.factors = np.array([1.0, 1.0, 1.0])
        self.worker = create_workers(1)[0]

    def test_default_rule_sums_incoming(self):
        rule = ContributionSumRule()
        value = rule(self.worker, 0, self.contributions, self.offsets, self.targets, 0.05)
        assert value == pytest.approx(0.55)

    def test_inactive_vertices_keep_their_value(self):
        current = np.array([9.0, 9.0, 9.0])
        active = AffectedVertices([True, False, True])
        pagerank_calculate_ranks(current, self.contributions, self.factors, self.offsets,
                                 self.targets, 0.0, 0, 3, self.worker, ContributionSumRule(), active)
        np.testing.assert_allclose(current, [0.5, 9.0, 0.1])
        assert active.count() == 2

    def test_asynchronous_refreshes_contribution_immediately(self):
        current = np.zeros(3)
        contributions = self.contributions.copy()
        pagerank_calculate_ranks(current, contributions, self.factors, self.offsets,
                                 self.targets, 0.0, 0, 3, self.worker, ContributionSumRule(),
                                 AllActive(), asynchronous=True)
        # vertex 2 reads vertex 0's fresh contribution (0.5), not the stale 0.1
        assert current[0] == pytest.approx(0.5)
        assert current[2] == pytest.approx(0.5)
        np.testing.assert_allclose(contributions, current)
