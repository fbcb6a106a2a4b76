"""
Multidimensional losses for GLRM categorical columns.

A categorical column with L levels owns a block of L expanded columns in Y, so
its estimate is a vector u = x_i^T Y_block of length L and its observed value
is a level index a ∈ {0, ..., L-1}.

Usage:
    >>> from glrm.objectives.multi_losses import get_multi_loss
    >>> mloss = get_multi_loss('categorical')
    >>> mloss.loss(np.zeros(3), 1)
    3.0
"""

from abc import ABC, abstractmethod
import numpy as np

from ..exceptions import ConfigurationError, InvalidArgument


class MultiLossFunction(ABC):
    """Base class for categorical (multidimensional) losses."""

    name: str = ""

    @staticmethod
    def _check(u, a):
        u = np.asarray(u, dtype=float)
        if u.ndim != 1:
            raise InvalidArgument(f"u must be a 1D vector, got shape {u.shape}")
        if not 0 <= a <= len(u) - 1 or a != int(a):
            raise InvalidArgument(
                f"Index must be an integer between 0 and {len(u) - 1}, got {a}"
            )
        return u, int(a)

    @abstractmethod
    def loss(self, u: np.ndarray, a: int) -> float:
        """
        Loss of estimate vector u against observed level a.

        Parameters
        ----------
        u : np.ndarray, shape (L,)
            Estimates for the L levels
        a : int
            Observed level index in [0, L-1]

        Raises
        ------
        InvalidArgument
            If a is outside [0, L-1]
        """

    @abstractmethod
    def gradient(self, u: np.ndarray, a: int) -> np.ndarray:
        """Gradient of loss(u, a) with respect to u, shape (L,)."""

    def impute(self, u: np.ndarray) -> int:
        """
        Level minimizing loss(u, a), by exhaustive scan over all levels.

        Ties go to the lowest index.
        """
        u = np.asarray(u, dtype=float)
        candidates = np.array([self.loss(u, a) for a in range(len(u))])
        return int(np.argmin(candidates))

    def __eq__(self, other):
        return type(self) is type(other)

    def __hash__(self):
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class CategoricalLoss(MultiLossFunction):
    """
    One-vs-all hinge loss.

    Formula:
        L(u, a) = Σ_i max(1 + u_i, 0) + max(1 - u_a, 0) - max(1 + u_a, 0)

    The sum runs over every level including a; the correction term then swaps
    the true level's one-vs-rest hinge for the margin hinge.
    """

    name = 'categorical'

    def loss(self, u, a):
        u, a = self._check(u, a)
        total = np.sum(np.maximum(1 + u, 0))
        total += max(1 - u[a], 0) - max(1 + u[a], 0)
        return float(total)

    def gradient(self, u, a):
        u, a = self._check(u, a)
        grad = (1 + u > 0).astype(float)
        grad[a] = -1.0 if 1 - u[a] > 0 else 0.0
        return grad


class OrdinalLoss(MultiLossFunction):
    """
    Ordinal hinge loss over the L-1 thresholds between consecutive levels.

    Formula:
        L(u, a) = Σ_{i=0}^{L-2} max(1 - u_i, 0)   if a > i
                                max(1, 0)        otherwise

    The last entry of u never contributes.
    """

    name = 'ordinal'

    def loss(self, u, a):
        u, a = self._check(u, a)
        i = np.arange(len(u) - 1)
        terms = np.where(a > i, 1 - u[:-1], 1.0)
        return float(np.sum(np.maximum(terms, 0)))

    def gradient(self, u, a):
        u, a = self._check(u, a)
        grad = np.zeros(len(u))
        i = np.arange(len(u) - 1)
        grad[:-1] = np.where((a > i) & (1 - u[:-1] > 0), -1.0, 0.0)
        return grad


MULTI_LOSSES = {cls.name: cls for cls in (CategoricalLoss, OrdinalLoss)}


def get_multi_loss(name: str) -> MultiLossFunction:
    """
    Factory function for categorical losses.

    Parameters
    ----------
    name : str
        'categorical' or 'ordinal' (case-insensitive)

    Raises
    ------
    ConfigurationError
        If the name is unknown
    """
    key = str(name).lower()
    if key not in MULTI_LOSSES:
        raise ConfigurationError(
            f"Unknown multidimensional loss function '{name}'. "
            f"Available: {list(MULTI_LOSSES.keys())}"
        )
    return MULTI_LOSSES[key]()
