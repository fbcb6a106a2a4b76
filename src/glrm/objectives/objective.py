"""
Total GLRM objective.

    f(X, Y) = Σ_{(i,j) observed} L_j(x_i^T y_j, A_ij) + γ_x Σ_i r_x(x_i) + γ_y Σ_j r_y(y_j)

Numeric cells use the scalar loss, categorical cells use the multi-loss on
the categorical column's block of XY. Missing (NaN) cells contribute nothing.
"""

import numpy as np
from typing import Dict, Tuple

from ..exceptions import ShapeMismatch


def glrm_objective(
    A: np.ndarray,
    X: np.ndarray,
    Y: np.ndarray,
    params,
    cat_offsets: np.ndarray
) -> Tuple[float, Dict[str, float]]:
    """
    Objective value of the factors X, Y on the adapted data A.

    Parameters:
        A: Adapted data (n × m): categorical level indices first, then numerics;
           NaN marks missing cells
        X: Loading matrix (n × k)
        Y: Archetypes (k × m_expanded)
        params: GLRMParameters providing losses, regularizers and weights
        cat_offsets: Categorical block offsets (length ncats + 1)

    Returns:
        total: Objective value (may be +inf under a violated hard constraint)
        components: 'loss', 'reg_x', 'reg_y' and 'total'

    Raises:
        ShapeMismatch: If A, X, Y and cat_offsets disagree

    Example:
        >>> params = GLRMParameters(k=1)
        >>> A = np.array([[1.0, 2.0]])
        >>> total, parts = glrm_objective(A, np.ones((1, 1)), np.ones((1, 2)), params, np.array([0]))
        >>> total
        1.0
    """
    cat_offsets = np.asarray(cat_offsets, dtype=int)
    ncats = len(cat_offsets) - 1
    n, m = A.shape
    nnums = m - ncats
    if X.shape[0] != n or X.shape[1] != Y.shape[0]:
        raise ShapeMismatch(f"X {X.shape} and Y {Y.shape} do not fit data {A.shape}")
    if Y.shape[1] != cat_offsets[-1] + nnums:
        raise ShapeMismatch(
            f"Y has {Y.shape[1]} columns, layout expects {cat_offsets[-1] + nnums}"
        )

    XY = X @ Y
    loss_total = 0.0

    for d in range(ncats):
        start, end = cat_offsets[d], cat_offsets[d + 1]
        for i in np.flatnonzero(~np.isnan(A[:, d])):
            loss_total += params.mloss(XY[i, start:end], int(A[i, d]))

    if nnums > 0:
        U = XY[:, cat_offsets[-1]:]
        B = A[:, ncats:]
        observed = ~np.isnan(B)
        loss_total += float(np.sum(params.loss(U[observed], B[observed])))

    reg_x = params.gamma_x * params.regularize_x(X) if params.gamma_x > 0 else 0.0
    reg_y = params.gamma_y * params.regularize_y(Y.T) if params.gamma_y > 0 else 0.0

    total = loss_total + reg_x + reg_y
    return total, {
        'loss': loss_total,
        'reg_x': reg_x,
        'reg_y': reg_y,
        'total': total,
    }
