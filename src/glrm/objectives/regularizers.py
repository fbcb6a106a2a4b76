"""
Regularizers for the rows of X and the columns of Y.

Each regularizer r provides:
1. penalty(u):                 r(u) ∈ [0, ∞]
2. prox(u, alpha, gamma, rng): argmin_v  alpha·gamma·r(v) + ½||v - u||²
3. penalize(U):                Σ_rows r(U_row), stopping at the first ∞

The hard-constraint regularizers (NonNegative, OneSparse, UnitOneSparse,
Simplex) use +∞ as the "constraint violated" value; it is a legitimate
result, never an exception.

Common choices:
    NNMF:               r_x = r_y = non_negative
    Orthogonal NNMF:    r_x = one_sparse, r_y = non_negative
    K-means:            r_x = unit_one_sparse, gamma_y = 0
    Quadratic mixture:  r_x = simplex, gamma_y = 0

Usage:
    >>> from glrm.objectives.regularizers import get_regularizer
    >>> reg = get_regularizer('l1')
    >>> reg.prox(np.array([0.5, -2.0]), alpha=1.0, gamma=1.0)
    array([ 0., -1.])
"""

from abc import ABC, abstractmethod
import numpy as np
from typing import Optional

from ..exceptions import ConfigurationError
from ..optimization.proximal import max_index, project_simplex, soft_threshold

ONE_SPARSE_FLOOR = 1e-6
SIMPLEX_TOL = 1e-9


class Regularizer(ABC):
    """Base class for GLRM regularizers."""

    name: str = ""

    @abstractmethod
    def penalty(self, u: np.ndarray) -> float:
        """
        Penalty of a single row/column vector.

        Parameters
        ----------
        u : np.ndarray, shape (k,)

        Returns
        -------
        penalty : float
            Non-negative value, +inf when a hard constraint is violated
        """

    @abstractmethod
    def _prox(self, u: np.ndarray, step: float, rng: Optional[np.random.Generator]) -> np.ndarray:
        """Proximal step for a non-empty u with step = alpha·gamma > 0."""

    def prox(
        self,
        u: np.ndarray,
        alpha: float,
        gamma: float,
        rng: Optional[np.random.Generator] = None
    ) -> np.ndarray:
        """
        Proximal operator of alpha·gamma·penalty evaluated at u.

        Parameters
        ----------
        u : np.ndarray, shape (k,)
            Point after the gradient step
        alpha : float
            Step size
        gamma : float
            Regularization weight
        rng : np.random.Generator, optional
            Random source for tie-breaking (OneSparse, UnitOneSparse)

        Returns
        -------
        v : np.ndarray, shape (k,)
            A copy of u when alpha == 0, gamma == 0 or u is empty
        """
        u = np.asarray(u, dtype=float)
        if u.size == 0 or alpha == 0 or gamma == 0:
            return u.copy()
        return self._prox(u, alpha * gamma, rng)

    def penalize(self, U: Optional[np.ndarray]) -> float:
        """
        Sum of row penalties of a matrix.

        Stops as soon as the running sum becomes infinite. Pass Y.T to
        penalize the columns of Y.
        """
        if U is None:
            return 0.0
        total = 0.0
        for row in np.atleast_2d(U):
            total += self.penalty(row)
            if np.isinf(total):
                return total
        return total

    def __eq__(self, other):
        return type(self) is type(other)

    def __hash__(self):
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class L2Regularizer(Regularizer):
    """
    Squared L2 norm.

    r(u) = Σ u_i²,   prox_i = u_i / (1 + 2·alpha·gamma)
    """

    name = 'l2'

    def penalty(self, u):
        u = np.asarray(u, dtype=float)
        return float(np.sum(u ** 2))

    def _prox(self, u, step, rng):
        return u / (1 + 2 * step)


class L1Regularizer(Regularizer):
    """
    L1 norm (sparsity).

    r(u) = Σ |u_i|,   prox = soft_threshold(u, alpha·gamma)
    """

    name = 'l1'

    def penalty(self, u):
        u = np.asarray(u, dtype=float)
        return float(np.sum(np.abs(u)))

    def _prox(self, u, step, rng):
        return soft_threshold(u, step)


class NonNegativeRegularizer(Regularizer):
    """Indicator of the non-negative orthant; prox clips at 0."""

    name = 'non_negative'

    def penalty(self, u):
        u = np.asarray(u, dtype=float)
        return 0.0 if np.all(u >= 0) else np.inf

    def _prox(self, u, step, rng):
        return np.maximum(u, 0)


class OneSparseRegularizer(Regularizer):
    """
    Indicator of non-negative vectors with exactly one positive entry.

    prox keeps only the largest entry; a non-positive maximum becomes 1e-6.
    """

    name = 'one_sparse'

    def penalty(self, u):
        u = np.asarray(u, dtype=float)
        if np.any(u < 0):
            return np.inf
        return 0.0 if np.count_nonzero(u > 0) == 1 else np.inf

    def _prox(self, u, step, rng):
        v = np.zeros_like(u)
        idx = max_index(u, rng)
        v[idx] = u[idx] if u[idx] > 0 else ONE_SPARSE_FLOOR
        return v


class UnitOneSparseRegularizer(Regularizer):
    """
    Indicator of the standard basis vectors e_1, ..., e_k (cluster assignment).

    prox sets the largest entry to 1 and every other entry to 0.
    """

    name = 'unit_one_sparse'

    def penalty(self, u):
        u = np.asarray(u, dtype=float)
        ones = np.count_nonzero(u == 1)
        zeros = np.count_nonzero(u == 0)
        return 0.0 if ones == 1 and zeros == len(u) - 1 else np.inf

    def _prox(self, u, step, rng):
        v = np.zeros_like(u)
        v[max_index(u, rng)] = 1.0
        return v


class SimplexRegularizer(Regularizer):
    """
    Indicator of the probability simplex {u ≥ 0, Σu = 1}.

    The sum constraint is checked within 1e-9. prox is the exact Chen-Ye
    projection.
    """

    name = 'simplex'

    def penalty(self, u):
        u = np.asarray(u, dtype=float)
        if u.size == 0 or np.any(u < 0):
            return np.inf
        return 0.0 if abs(np.sum(u) - 1) <= SIMPLEX_TOL else np.inf

    def _prox(self, u, step, rng):
        return project_simplex(u)


REGULARIZERS = {
    cls.name: cls
    for cls in (
        L2Regularizer,
        L1Regularizer,
        NonNegativeRegularizer,
        OneSparseRegularizer,
        UnitOneSparseRegularizer,
        SimplexRegularizer,
    )
}


def get_regularizer(name: str) -> Regularizer:
    """
    Factory function for regularizers.

    Parameters
    ----------
    name : str
        'l2', 'l1', 'non_negative', 'one_sparse', 'unit_one_sparse' or
        'simplex' (case-insensitive; CamelCase names such as 'NonNegative'
        are accepted too)

    Raises
    ------
    ConfigurationError
        If the name is unknown
    """
    key = _normalize_name(name)
    if key not in REGULARIZERS:
        raise ConfigurationError(
            f"Unknown regularization function '{name}'. "
            f"Available: {list(REGULARIZERS.keys())}"
        )
    return REGULARIZERS[key]()


def _normalize_name(name: str) -> str:
    name = str(name)
    if '_' not in name and any(c.isupper() for c in name[1:]):
        # 'UnitOneSparse' -> 'unit_one_sparse'
        name = ''.join('_' + c if c.isupper() and i > 0 else c for i, c in enumerate(name))
    return name.lower()
