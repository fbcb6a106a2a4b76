"""
Tests for regularizers and their proximal operators.
"""

import numpy as np
import pytest
from glrm.exceptions import ConfigurationError
from glrm.objectives.regularizers import (
    Regularizer,
    L2Regularizer,
    L1Regularizer,
    NonNegativeRegularizer,
    OneSparseRegularizer,
    UnitOneSparseRegularizer,
    SimplexRegularizer,
    get_regularizer
)

ALL_REGULARIZERS = [
    L2Regularizer(),
    L1Regularizer(),
    NonNegativeRegularizer(),
    OneSparseRegularizer(),
    UnitOneSparseRegularizer(),
    SimplexRegularizer(),
]

HARD_CONSTRAINTS = [
    NonNegativeRegularizer(),
    OneSparseRegularizer(),
    UnitOneSparseRegularizer(),
    SimplexRegularizer(),
]


@pytest.fixture
def rng():
    return np.random.default_rng(42)


class TestL2Regularizer:
    """Test squared L2 norm."""

    def test_penalty(self):
        assert L2Regularizer().penalty(np.array([1.0, -2.0, 3.0])) == pytest.approx(14.0)

    def test_prox_shrinks(self):
        u = np.array([1.0, -2.0, 3.0])
        v = L2Regularizer().prox(u, alpha=0.5, gamma=1.0)
        assert np.allclose(v, u / 2.0)


class TestL1Regularizer:
    """Test L1 norm."""

    def test_penalty(self):
        assert L1Regularizer().penalty(np.array([1.0, -2.0, 3.0])) == pytest.approx(6.0)

    def test_prox_soft_threshold(self):
        u = np.array([0.3, -0.3, 2.0, -2.0])
        v = L1Regularizer().prox(u, alpha=1.0, gamma=0.5)
        assert np.allclose(v, [0.0, 0.0, 1.5, -1.5])


class TestNonNegativeRegularizer:
    """Test the non-negative orthant indicator."""

    def test_penalty(self):
        reg = NonNegativeRegularizer()
        assert reg.penalty(np.array([0.0, 1.0, 2.0])) == 0.0
        assert reg.penalty(np.array([0.0, -1e-12, 2.0])) == np.inf

    def test_prox(self, rng):
        reg = NonNegativeRegularizer()
        for _ in range(20):
            u = rng.normal(size=6)
            v = reg.prox(u, alpha=1.0, gamma=1.0)
            assert np.all(v >= 0)
            assert np.array_equal(v[u >= 0], u[u >= 0])


class TestOneSparseRegularizer:
    """Test the one-sparse indicator."""

    def test_penalty(self):
        reg = OneSparseRegularizer()
        assert reg.penalty(np.array([0.0, 0.7, 0.0])) == 0.0
        assert reg.penalty(np.array([0.1, 0.7, 0.0])) == np.inf
        assert reg.penalty(np.array([0.0, 0.0, 0.0])) == np.inf
        assert reg.penalty(np.array([0.1, 0.9, -0.2])) == np.inf

    def test_prox_keeps_max(self):
        reg = OneSparseRegularizer()
        u = np.array([0.1, 0.9, -0.2])
        v = reg.prox(u, alpha=1.0, gamma=1.0)
        assert np.allclose(v, [0.0, 0.9, 0.0])
        assert reg.penalty(v) == 0.0

    def test_prox_negative_max(self):
        """An all-negative vector is lifted to a tiny positive entry."""
        v = OneSparseRegularizer().prox(np.array([-3.0, -0.5, -1.0]), alpha=1.0, gamma=1.0)
        assert np.allclose(v, [0.0, 1e-6, 0.0])

    def test_prox_keeps_small_positive_entry(self):
        """A feasible entry below 1e-6 is not lifted."""
        u = np.array([0.0, 5e-7, 0.0])
        v = OneSparseRegularizer().prox(u, alpha=1.0, gamma=1.0)
        assert np.array_equal(v, u)

    def test_tie_break_is_reproducible(self):
        reg = OneSparseRegularizer()
        u = np.array([0.5, 0.5, 0.5, 0.5])
        v1 = reg.prox(u, 1.0, 1.0, np.random.default_rng(7))
        v2 = reg.prox(u, 1.0, 1.0, np.random.default_rng(7))
        assert np.array_equal(v1, v2)
        assert np.count_nonzero(v1) == 1

    def test_tie_break_uses_all_candidates(self):
        reg = OneSparseRegularizer()
        u = np.array([0.5, 0.5, 0.1])
        rng = np.random.default_rng(0)
        chosen = {int(np.argmax(reg.prox(u, 1.0, 1.0, rng))) for _ in range(50)}
        assert chosen == {0, 1}


class TestUnitOneSparseRegularizer:
    """Test the unit basis vector indicator."""

    def test_penalty(self):
        reg = UnitOneSparseRegularizer()
        assert reg.penalty(np.array([0.0, 1.0, 0.0])) == 0.0
        assert reg.penalty(np.array([0.0, 0.9, 0.0])) == np.inf
        assert reg.penalty(np.array([1.0, 1.0, 0.0])) == np.inf

    def test_prox(self):
        v = UnitOneSparseRegularizer().prox(np.array([0.2, -1.0, 0.8]), alpha=1.0, gamma=1.0)
        assert np.array_equal(v, [0.0, 0.0, 1.0])


class TestSimplexRegularizer:
    """Test the probability simplex indicator."""

    def test_penalty(self):
        reg = SimplexRegularizer()
        assert reg.penalty(np.array([0.5, 0.2, 0.3])) == 0.0
        assert reg.penalty(np.array([0.5, 0.2, 0.2])) == np.inf
        assert reg.penalty(np.array([1.2, -0.2])) == np.inf

    def test_prox_on_simplex_is_identity(self):
        u = np.array([0.5, 0.2, 0.3])
        v = SimplexRegularizer().prox(u, alpha=1.0, gamma=1.0)
        assert np.allclose(v, u, atol=1e-9)

    def test_prox_lands_on_simplex(self, rng):
        reg = SimplexRegularizer()
        for n in (1, 2, 5, 20):
            for _ in range(10):
                u = rng.normal(scale=3, size=n)
                v = reg.prox(u, alpha=1.0, gamma=1.0)
                assert np.all(v >= 0)
                assert np.sum(v) == pytest.approx(1.0, abs=1e-9)
                assert reg.penalty(v) == 0.0


class TestProxContract:
    """Properties shared by every regularizer."""

    @pytest.mark.parametrize("reg", ALL_REGULARIZERS)
    def test_identity_cases(self, reg):
        """alpha = 0, gamma = 0 or an empty vector leave u unchanged."""
        u = np.array([0.3, -0.4, 1.2])
        assert np.array_equal(reg.prox(u, alpha=0.0, gamma=1.0), u)
        assert np.array_equal(reg.prox(u, alpha=1.0, gamma=0.0), u)
        assert reg.prox(np.array([]), alpha=1.0, gamma=1.0).shape == (0,)

    @pytest.mark.parametrize("reg", ALL_REGULARIZERS)
    def test_prox_preserves_dimension(self, reg, rng):
        for n in (1, 3, 8):
            u = rng.normal(size=n)
            assert reg.prox(u, 0.3, 2.0, rng).shape == (n,)

    @pytest.mark.parametrize("reg", ALL_REGULARIZERS)
    def test_prox_does_not_mutate_input(self, reg, rng):
        u = rng.normal(size=5)
        original = u.copy()
        reg.prox(u, 1.0, 1.0, rng)
        assert np.array_equal(u, original)

    @pytest.mark.parametrize("reg", HARD_CONSTRAINTS)
    def test_zero_penalty_iff_fixed_point(self, reg, rng):
        """For hard constraints, penalty 0 exactly when prox is a no-op."""
        feasible = {
            'non_negative': np.array([0.0, 0.4, 2.0]),
            'one_sparse': np.array([0.0, 0.4, 0.0]),
            'unit_one_sparse': np.array([0.0, 0.0, 1.0]),
            'simplex': np.array([0.25, 0.25, 0.5]),
        }[reg.name]
        assert reg.penalty(feasible) == 0.0
        assert np.allclose(reg.prox(feasible, 1.0, 1.0, rng), feasible, atol=1e-12)

        tiny = np.array([0.0, 5e-7, 0.0])
        is_fixed = np.array_equal(reg.prox(tiny, 1.0, 1.0, rng), tiny)
        assert (reg.penalty(tiny) == 0.0) == is_fixed

        for _ in range(20):
            u = rng.normal(size=4)
            v = reg.prox(u, 1.0, 1.0, rng)
            is_fixed = np.allclose(v, u, atol=1e-12)
            assert (reg.penalty(u) == 0.0) == is_fixed
            assert reg.penalty(v) == 0.0

    @pytest.mark.parametrize("reg", HARD_CONSTRAINTS)
    def test_infinite_penalty_is_a_value(self, reg):
        """Violations return +inf rather than raising."""
        assert reg.penalty(np.array([-1.0, 2.0, 3.0])) == np.inf


class TestPenalize:
    """Test the matrix (row-sum) penalty."""

    def test_sum_over_rows(self):
        U = np.array([[1.0, 2.0], [3.0, -1.0]])
        assert L2Regularizer().penalize(U) == pytest.approx(15.0)
        assert L1Regularizer().penalize(U) == pytest.approx(7.0)

    def test_early_exit_on_infinite_row(self):
        calls = []

        class CountingNonNegative(NonNegativeRegularizer):
            def penalty(self, u):
                calls.append(1)
                return super().penalty(u)

        U = np.array([[1.0, 0.0], [-1.0, 0.0], [2.0, 0.0], [3.0, 0.0]])
        assert CountingNonNegative().penalize(U) == np.inf
        assert len(calls) == 2

    def test_none_and_empty(self):
        assert L2Regularizer().penalize(None) == 0.0
        assert L2Regularizer().penalize(np.zeros((0, 3))) == 0.0

    def test_columns_via_transpose(self):
        Y = np.array([[0.5, 0.0], [0.5, 1.0]])
        assert SimplexRegularizer().penalize(Y.T) == 0.0
        assert SimplexRegularizer().penalize(Y) == np.inf


class TestGetRegularizer:
    """Test the regularizer factory."""

    def test_all_names(self):
        for name in ['l2', 'l1', 'non_negative', 'one_sparse', 'unit_one_sparse', 'simplex']:
            reg = get_regularizer(name)
            assert isinstance(reg, Regularizer)
            assert reg.name == name

    def test_camel_case(self):
        assert isinstance(get_regularizer('NonNegative'), NonNegativeRegularizer)
        assert isinstance(get_regularizer('UnitOneSparse'), UnitOneSparseRegularizer)
        assert isinstance(get_regularizer('L2'), L2Regularizer)

    def test_unknown(self):
        with pytest.raises(ConfigurationError, match="Unknown regularization"):
            get_regularizer('elastic_net')


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
