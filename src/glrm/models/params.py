"""
GLRMParameters: configuration of a Generalized Low Rank Model.

Resolves the loss, multi-loss and regularizer names into objects once, and
exposes the per-entry mathematics the optimizer and the scoring pass call:

    loss / lgrad / impute           numeric cells
    mloss / mlgrad / mimpute        categorical cells
    regularize_x / regularize_y     penalties of rows of X / columns of Y
    rproxgrad_x / rproxgrad_y       proximal steps for rows of X / columns of Y
"""

import numpy as np
from typing import Any, Dict, Optional

from ..data.glrm_data import TRANSFORMS, TransformType
from ..exceptions import ConfigurationError
from ..objectives.losses import check_period, get_loss
from ..objectives.multi_losses import get_multi_loss
from ..objectives.regularizers import get_regularizer


class GLRMParameters:
    """
    Model configuration.

    Attributes:
        k: Rank of the XY approximation
        loss: Loss for numeric columns ('l2', 'l1', 'huber', 'poisson',
              'hinge', 'logistic', 'periodic')
        multi_loss: Loss for categorical columns ('categorical', 'ordinal')
        period: Period of the periodic loss
        regularization_x: Regularizer for the rows of X
        regularization_y: Regularizer for the columns of Y
        gamma_x: Regularization weight on X
        gamma_y: Regularization weight on Y
        transform: Numeric column transform
        seed: Seed for random tie-breaking in proximal steps

    Example:
        >>> params = GLRMParameters(k=3, loss='huber', regularization_x='non_negative', gamma_x=0.1)
        >>> params.impute(2.5)
        2.5
        >>> params.has_closed_form()
        False
    """

    def __init__(
        self,
        k: int = 1,
        loss: str = 'l2',
        multi_loss: str = 'categorical',
        period: int = 1,
        regularization_x: str = 'l2',
        regularization_y: str = 'l2',
        gamma_x: float = 0.0,
        gamma_y: float = 0.0,
        transform: TransformType = 'none',
        seed: Optional[int] = None
    ):
        """
        Initialize and validate the configuration.

        Raises:
            ConfigurationError: If a loss, multi-loss, regularizer or transform
                                name is unknown, or period is not a positive integer
            ValueError: If k < 1 or a gamma is negative or not finite
        """
        if k < 1:
            raise ValueError(f"k must be positive, got {k}")
        for label, gamma in (('gamma_x', gamma_x), ('gamma_y', gamma_y)):
            if not np.isfinite(gamma) or gamma < 0:
                raise ValueError(f"{label} must be non-negative and finite, got {gamma}")
        if transform not in TRANSFORMS:
            raise ConfigurationError(
                f"Unknown transform '{transform}'. Available: {list(TRANSFORMS)}"
            )

        self.k = int(k)
        self.loss_name = str(loss).lower()
        self.multi_loss_name = str(multi_loss).lower()
        self.period = check_period(period)
        self.regularization_x = regularization_x
        self.regularization_y = regularization_y
        self.gamma_x = float(gamma_x)
        self.gamma_y = float(gamma_y)
        self.transform = transform
        self.seed = seed

        loss_kwargs = {'period': period} if self.loss_name == 'periodic' else {}
        self.loss_fn = get_loss(self.loss_name, **loss_kwargs)
        self.multi_loss_fn = get_multi_loss(self.multi_loss_name)
        self.regularizer_x = get_regularizer(regularization_x)
        self.regularizer_y = get_regularizer(regularization_y)

    def has_closed_form(self) -> bool:
        """Whether the problem is plain (ridge) PCA: L2 loss, L2 or no regularization."""
        return (
            self.loss_name == 'l2'
            and (self.gamma_x == 0 or self.regularizer_x.name == 'l2')
            and (self.gamma_y == 0 or self.regularizer_y.name == 'l2')
        )

    # Numeric cells

    def loss(self, u, a):
        return self.loss_fn.loss(u, a)

    def lgrad(self, u, a):
        return self.loss_fn.gradient(u, a)

    def impute(self, u):
        return self.loss_fn.impute(u)

    # Categorical cells

    def mloss(self, u: np.ndarray, a: int) -> float:
        return self.multi_loss_fn.loss(u, a)

    def mlgrad(self, u: np.ndarray, a: int) -> np.ndarray:
        return self.multi_loss_fn.gradient(u, a)

    def mimpute(self, u: np.ndarray) -> int:
        return self.multi_loss_fn.impute(u)

    # Regularization

    def regularize_x(self, u: Optional[np.ndarray]) -> float:
        """Penalty of one row of X (1D) or the sum over all rows of X (2D)."""
        return _regularize(self.regularizer_x, u)

    def regularize_y(self, u: Optional[np.ndarray]) -> float:
        """Penalty of one column of Y (1D) or the sum over the rows of a 2D array (pass Y.T)."""
        return _regularize(self.regularizer_y, u)

    def rproxgrad_x(self, u: np.ndarray, alpha: float, rng: Optional[np.random.Generator] = None) -> np.ndarray:
        """Proximal step of alpha·gamma_x·r_x at a row of X."""
        return self.regularizer_x.prox(u, alpha, self.gamma_x, rng)

    def rproxgrad_y(self, u: np.ndarray, alpha: float, rng: Optional[np.random.Generator] = None) -> np.ndarray:
        """Proximal step of alpha·gamma_y·r_y at a column of Y."""
        return self.regularizer_y.prox(u, alpha, self.gamma_y, rng)

    def to_dict(self) -> Dict[str, Any]:
        """Constructor arguments, for saving/loading."""
        return {
            'k': self.k,
            'loss': self.loss_name,
            'multi_loss': self.multi_loss_name,
            'period': self.period,
            'regularization_x': self.regularizer_x.name,
            'regularization_y': self.regularizer_y.name,
            'gamma_x': self.gamma_x,
            'gamma_y': self.gamma_y,
            'transform': self.transform,
            'seed': self.seed,
        }

    @classmethod
    def from_dict(cls, params: Dict[str, Any]) -> 'GLRMParameters':
        """Inverse of to_dict()."""
        return cls(**params)

    def __repr__(self) -> str:
        args = ", ".join(f"{key}={value!r}" for key, value in self.to_dict().items())
        return f"GLRMParameters({args})"


def _regularize(regularizer, u) -> float:
    if u is None:
        return 0.0
    u = np.asarray(u, dtype=float)
    if u.ndim == 1:
        return regularizer.penalty(u)
    return regularizer.penalize(u)
