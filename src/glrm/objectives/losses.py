"""
Scalar loss functions for GLRM numeric columns.

Each loss L(u, a) compares the current model estimate u = x_i^T y_j of one
cell with the observed value a, and provides:

1. loss(u, a):     the per-entry loss
2. gradient(u, a): ∂L/∂u
3. impute(u):      argmin_a L(u, a), the value reconstructed from u

All methods work elementwise on Python floats or numpy arrays. A scalar input
gives a numpy scalar back.

Usage:
    >>> from glrm.objectives.losses import get_loss
    >>> loss = get_loss('huber')
    >>> loss.loss(3.0, 1.0), loss.gradient(3.0, 1.0)
    (1.5, 1.0)
"""

from abc import ABC, abstractmethod
import numpy as np
from scipy.special import expit, xlogy
from typing import Union

from ..exceptions import ConfigurationError, InvalidArgument

ArrayLike = Union[float, np.ndarray]


def check_period(period) -> int:
    """Return period as an int, or raise ConfigurationError unless it is a positive integer."""
    try:
        valid = not isinstance(period, bool) and float(period).is_integer() and period > 0
    except (TypeError, ValueError):
        valid = False
    if not valid:
        raise ConfigurationError(f"period must be a positive integer, got {period!r}")
    return int(period)


class LossFunction(ABC):
    """Base class for scalar GLRM losses."""

    name: str = ""

    @abstractmethod
    def loss(self, u: ArrayLike, a: ArrayLike) -> ArrayLike:
        """
        Loss of estimate u against observed value a.

        Parameters
        ----------
        u : float or np.ndarray
            Current estimate x_i^T y_j
        a : float or np.ndarray
            Observed value (same shape as u, or broadcastable)

        Returns
        -------
        loss : float or np.ndarray
        """

    @abstractmethod
    def gradient(self, u: ArrayLike, a: ArrayLike) -> ArrayLike:
        """Gradient of loss(u, a) with respect to u."""

    @abstractmethod
    def impute(self, u: ArrayLike) -> ArrayLike:
        """Value a minimizing loss(u, a); may be ±inf."""

    def __eq__(self, other):
        return type(self) is type(other) and vars(self) == vars(other)

    def __hash__(self):
        return hash((type(self), tuple(sorted(vars(self).items()))))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class L2Loss(LossFunction):
    """
    Quadratic loss.

    Formula:
        L(u, a) = (u - a)²
    """

    name = 'l2'

    def loss(self, u, a):
        u, a = np.asarray(u, dtype=float), np.asarray(a, dtype=float)
        return ((u - a) ** 2)[()]

    def gradient(self, u, a):
        u, a = np.asarray(u, dtype=float), np.asarray(a, dtype=float)
        return (2 * (u - a))[()]

    def impute(self, u):
        return np.asarray(u, dtype=float)[()]


class L1Loss(LossFunction):
    """
    Absolute loss.

    Formula:
        L(u, a) = |u - a|
    """

    name = 'l1'

    def loss(self, u, a):
        u, a = np.asarray(u, dtype=float), np.asarray(a, dtype=float)
        return np.abs(u - a)[()]

    def gradient(self, u, a):
        u, a = np.asarray(u, dtype=float), np.asarray(a, dtype=float)
        return np.sign(u - a)[()]

    def impute(self, u):
        return np.asarray(u, dtype=float)[()]


class HuberLoss(LossFunction):
    """
    Huber loss with unit threshold.

    Formula:
        L(u, a) = ½(u - a)²       if |u - a| ≤ 1
                  |u - a| - ½     otherwise
    """

    name = 'huber'

    def loss(self, u, a):
        u, a = np.asarray(u, dtype=float), np.asarray(a, dtype=float)
        r = np.abs(u - a)
        return np.where(r <= 1, 0.5 * r ** 2, r - 0.5)[()]

    def gradient(self, u, a):
        u, a = np.asarray(u, dtype=float), np.asarray(a, dtype=float)
        d = u - a
        return np.where(np.abs(d) <= 1, d, np.sign(d))[()]

    def impute(self, u):
        return np.asarray(u, dtype=float)[()]


class PoissonLoss(LossFunction):
    """
    Poisson loss for count data.

    Formula:
        L(u, a) = exp(u) - a·u + a·ln(a) - a,   a ≥ 0

    a·ln(a) is taken as 0 at a = 0.
    """

    name = 'poisson'

    @staticmethod
    def _check_target(a: np.ndarray):
        if np.any(a < 0):
            raise InvalidArgument("Poisson loss requires non-negative observed values")

    def loss(self, u, a):
        u, a = np.asarray(u, dtype=float), np.asarray(a, dtype=float)
        self._check_target(a)
        return (np.exp(u) - a * u + xlogy(a, a) - a)[()]

    def gradient(self, u, a):
        u, a = np.asarray(u, dtype=float), np.asarray(a, dtype=float)
        self._check_target(a)
        return (np.exp(u) - a)[()]

    def impute(self, u):
        return (np.exp(np.asarray(u, dtype=float)) - 1)[()]


class HingeLoss(LossFunction):
    """
    Hinge loss for ±1 targets.

    Formula:
        L(u, a) = max(1 - a·u, 0)

    impute(u) = 1/u. At u = 0 the result is an infinity with the sign of the
    zero (+inf for +0.0, -inf for -0.0).
    """

    name = 'hinge'

    def loss(self, u, a):
        u, a = np.asarray(u, dtype=float), np.asarray(a, dtype=float)
        return np.maximum(1 - a * u, 0)[()]

    def gradient(self, u, a):
        u, a = np.asarray(u, dtype=float), np.asarray(a, dtype=float)
        return np.where(a * u <= 1, -a, 0.0)[()]

    def impute(self, u):
        u = np.asarray(u, dtype=float)
        with np.errstate(divide='ignore'):
            return np.divide(1.0, u)[()]


class LogisticLoss(LossFunction):
    """
    Logistic loss for ±1 targets.

    Formula:
        L(u, a) = ln(1 + exp(-a·u))
        ∂L/∂u   = -a / (1 + exp(a·u))

    impute(u) is 0 at u = 0 (any value minimizes), +inf for u > 0 and
    -inf for u < 0.
    """

    name = 'logistic'

    def loss(self, u, a):
        u, a = np.asarray(u, dtype=float), np.asarray(a, dtype=float)
        return np.logaddexp(0.0, -a * u)[()]

    def gradient(self, u, a):
        u, a = np.asarray(u, dtype=float), np.asarray(a, dtype=float)
        # 1 / (1 + exp(a·u)) == sigmoid(-a·u)
        return (-a * expit(-a * u))[()]

    def impute(self, u):
        u = np.asarray(u, dtype=float)
        return np.where(u == 0, 0.0, np.where(u > 0, np.inf, -np.inf))[()]


class PeriodicLoss(LossFunction):
    """
    Periodic loss for cyclic quantities (hour of day, day of week, ...).

    Formula:
        L(u, a) = 1 - cos((a - u)·2π/p)
        ∂L/∂u   = (2π/p)·sin((a - u)·2π/p)

    Parameters
    ----------
    period : int, default=1
        Length of the period p (positive integer)
    """

    name = 'periodic'

    def __init__(self, period: int = 1):
        self.period = check_period(period)

    @property
    def frequency(self) -> float:
        """Angular frequency 2π/p."""
        return 2 * np.pi / self.period

    def loss(self, u, a):
        u, a = np.asarray(u, dtype=float), np.asarray(a, dtype=float)
        return (1 - np.cos((a - u) * self.frequency))[()]

    def gradient(self, u, a):
        u, a = np.asarray(u, dtype=float), np.asarray(a, dtype=float)
        return (self.frequency * np.sin((a - u) * self.frequency))[()]

    def impute(self, u):
        return np.asarray(u, dtype=float)[()]

    def __repr__(self) -> str:
        return f"PeriodicLoss(period={self.period})"


LOSSES = {
    cls.name: cls
    for cls in (L2Loss, L1Loss, HuberLoss, PoissonLoss, HingeLoss, LogisticLoss, PeriodicLoss)
}


def get_loss(name: str, **kwargs) -> LossFunction:
    """
    Factory function for scalar losses.

    Parameters
    ----------
    name : str
        Loss name: 'l2', 'l1', 'huber', 'poisson', 'hinge', 'logistic'
        or 'periodic' (case-insensitive)
    **kwargs
        Loss-specific parameters (``period`` for 'periodic')

    Returns
    -------
    loss : LossFunction

    Raises
    ------
    ConfigurationError
        If the name is unknown

    Examples
    --------
    >>> get_loss('periodic', period=24).impute(3.5)
    3.5
    """
    key = str(name).lower()
    if key not in LOSSES:
        raise ConfigurationError(
            f"Unknown loss function '{name}'. "
            f"Available: {list(LOSSES.keys())}"
        )
    return LOSSES[key](**kwargs)
