"""
GLRM Objectives

Losses for numeric and categorical columns, regularizers for the factors,
and the total objective.
"""

from .losses import (
    LossFunction,
    L2Loss,
    L1Loss,
    HuberLoss,
    PoissonLoss,
    HingeLoss,
    LogisticLoss,
    PeriodicLoss,
    get_loss
)
from .multi_losses import (
    MultiLossFunction,
    CategoricalLoss,
    OrdinalLoss,
    get_multi_loss
)
from .regularizers import (
    Regularizer,
    L2Regularizer,
    L1Regularizer,
    NonNegativeRegularizer,
    OneSparseRegularizer,
    UnitOneSparseRegularizer,
    SimplexRegularizer,
    get_regularizer
)
from .objective import glrm_objective

__all__ = [
    # Scalar losses
    "LossFunction",
    "L2Loss",
    "L1Loss",
    "HuberLoss",
    "PoissonLoss",
    "HingeLoss",
    "LogisticLoss",
    "PeriodicLoss",
    "get_loss",
    # Categorical losses
    "MultiLossFunction",
    "CategoricalLoss",
    "OrdinalLoss",
    "get_multi_loss",
    # Regularizers
    "Regularizer",
    "L2Regularizer",
    "L1Regularizer",
    "NonNegativeRegularizer",
    "OneSparseRegularizer",
    "UnitOneSparseRegularizer",
    "SimplexRegularizer",
    "get_regularizer",
    # Objective
    "glrm_objective",
]
