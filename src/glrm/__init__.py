"""
GLRM: building blocks of Generalized Low Rank Models

A Generalized Low Rank Model approximates a mixed numeric/categorical table A
by the product of two low-rank factors X (n × k) and Y (k × m_expanded):

    minimize  Σ_{observed} L_j(x_i^T y_j, A_ij) + γ_x Σ_i r_x(x_i) + γ_y Σ_j r_y(y_j)

This package implements:
- Scalar losses for numeric columns and multi-losses for categorical columns
- Regularizers with their proximal operators (incl. exact simplex projection)
- Partition-parallel reconstruction/imputation of a dataset from fitted X, Y
"""

__version__ = "0.1.0"

# Errors
from .exceptions import GLRMError, ConfigurationError, InvalidArgument, ShapeMismatch

# Losses and regularizers
from .objectives import (
    LossFunction,
    MultiLossFunction,
    Regularizer,
    get_loss,
    get_multi_loss,
    get_regularizer,
    glrm_objective
)

# Proximal updates
from .optimization import project_simplex, prox_rows, prox_columns

# Data
from .data import GLRMData, Partition, partition_frame

# Scoring
from .scoring import ReconstructionTask, ScoringAdapter, GLRMModelMetrics

# Models
from .models import GLRMParameters, GLRMModel, GLRMOutput

__all__ = [
    # Errors
    "GLRMError",
    "ConfigurationError",
    "InvalidArgument",
    "ShapeMismatch",

    # Objectives
    "LossFunction",
    "MultiLossFunction",
    "Regularizer",
    "get_loss",
    "get_multi_loss",
    "get_regularizer",
    "glrm_objective",

    # Optimization
    "project_simplex",
    "prox_rows",
    "prox_columns",

    # Data
    "GLRMData",
    "Partition",
    "partition_frame",

    # Scoring
    "ReconstructionTask",
    "ScoringAdapter",
    "GLRMModelMetrics",

    # Models
    "GLRMParameters",
    "GLRMModel",
    "GLRMOutput",
]
