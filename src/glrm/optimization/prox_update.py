"""
Row-parallel proximal updates for the GLRM factors.

In the proximal-gradient step of alternating minimization every row of X (and
every column of Y) is updated independently:

    x_i ← prox_{alpha·gamma_x·r_x}(x_i - alpha·∇_i)

so the rows can be processed in parallel without locking. Random
tie-breaking draws from a per-row generator seeded with (seed, row), which
makes the result independent of the number of workers and their scheduling.

The gradient step itself belongs to the (external) driver; these functions
take the already gradient-stepped matrix.
"""

import numpy as np
from joblib import Parallel, delayed
from typing import Any, Optional


def row_rng(seed: Optional[int], row: int) -> np.random.Generator:
    """Independent generator for one row: a sub-stream of seed."""
    if seed is None:
        return np.random.default_rng()
    return np.random.default_rng([int(seed), int(row)])


def prox_rows(
    U: np.ndarray,
    alpha: float,
    gamma: float,
    regularizer: Any,
    seed: Optional[int] = None,
    n_jobs: Optional[int] = None
) -> np.ndarray:
    """
    Apply the proximal operator to every row of U.

    Parameters:
        U: Gradient-stepped factor (n × k), e.g. X
        alpha: Step size
        gamma: Regularization weight
        regularizer: Regularizer whose prox is applied
        seed: Base seed for tie-breaking; row i uses the stream (seed, i)
        n_jobs: Number of worker threads (None = sequential, -1 = all cores)

    Returns:
        V: New matrix with the same shape as U

    Example:
        >>> from glrm.objectives.regularizers import get_regularizer
        >>> X = np.array([[0.3, -0.1], [-1.0, 2.0]])
        >>> prox_rows(X, 1.0, 1.0, get_regularizer('non_negative'))
        array([[0.3, 0. ],
               [0. , 2. ]])
    """
    U = np.atleast_2d(np.asarray(U, dtype=float))
    if alpha == 0 or gamma == 0 or U.size == 0:
        return U.copy()

    def update(i):
        return regularizer.prox(U[i], alpha, gamma, row_rng(seed, i))

    if n_jobs is None or n_jobs == 1:
        rows = [update(i) for i in range(U.shape[0])]
    else:
        rows = Parallel(n_jobs=n_jobs, prefer="threads")(
            delayed(update)(i) for i in range(U.shape[0])
        )
    return np.vstack(rows)


def prox_columns(
    U: np.ndarray,
    alpha: float,
    gamma: float,
    regularizer: Any,
    seed: Optional[int] = None,
    n_jobs: Optional[int] = None
) -> np.ndarray:
    """
    Apply the proximal operator to every column of U (e.g. Y, k × m).

    Column j uses the stream (seed, j). See prox_rows.
    """
    U = np.atleast_2d(np.asarray(U, dtype=float))
    return prox_rows(U.T, alpha, gamma, regularizer, seed=seed, n_jobs=n_jobs).T
