"""
Proximal building blocks used by the GLRM regularizers.

- soft_threshold: prox of the L1 norm
- max_index:      argmax with random tie-breaking (OneSparse, UnitOneSparse)
- project_simplex: exact Euclidean projection onto the probability simplex

The simplex projection follows Chen & Ye, "Projection Onto A Simplex"
(arXiv:1101.6081). It is exact and runs in O(n log n) for the sort.
"""

import numpy as np
from typing import Optional


def soft_threshold(u: np.ndarray, threshold: float) -> np.ndarray:
    """
    Elementwise soft-thresholding.

    S_t(u) = max(u - t, 0) + min(u + t, 0)

    Parameters:
        u: Input vector
        threshold: Non-negative threshold t

    Returns:
        v: Shrunk vector, same shape as u
    """
    u = np.asarray(u, dtype=float)
    return np.maximum(u - threshold, 0) + np.minimum(u + threshold, 0)


def max_index(u: np.ndarray, rng: Optional[np.random.Generator] = None) -> int:
    """
    Index of the maximum entry of u.

    When several entries share the maximum, one of them is drawn uniformly
    from rng. Without a generator the first maximal index is returned.

    Parameters:
        u: Non-empty input vector
        rng: Random source for tie-breaking

    Returns:
        idx: Position of a maximal entry

    Example:
        >>> rng = np.random.default_rng(0)
        >>> max_index(np.array([1.0, 3.0, 3.0]), rng) in (1, 2)
        True
    """
    u = np.asarray(u, dtype=float)
    if u.size == 0:
        raise ValueError("max_index requires a non-empty vector")
    if np.all(np.isnan(u)):
        raise ValueError("max_index requires at least one non-NaN entry")
    ties = np.flatnonzero(u == np.nanmax(u))
    if len(ties) == 1 or rng is None:
        return int(ties[0])
    return int(rng.choice(ties))


def project_simplex(u: np.ndarray) -> np.ndarray:
    """
    Euclidean projection of u onto {x : x ≥ 0, Σx = 1}.

    Algorithm (Chen & Ye):
        1. Sort u ascending: s_0 ≤ ... ≤ s_{n-1}
        2. Suffix sums c_i = s_i + ... + s_{n-1}
        3. For i = n-1, ..., 1 take the first t_i = (c_i - 1)/(n - i)
           with t_i ≥ s_{i-1}; if none qualifies t = (c_0 - 1)/n
        4. Return max(u - t, 0)

    Ties in u are irrelevant: the result only depends on the sorted values.

    Parameters:
        u: Finite input vector of length n ≥ 1

    Returns:
        x: Projection of u, same shape, entries ≥ 0 summing to 1

    Example:
        >>> project_simplex(np.array([0.5, 0.2, 0.3]))
        array([0.5, 0.2, 0.3])
        >>> project_simplex(np.array([2.0, 0.0]))
        array([1., 0.])
    """
    u = np.asarray(u, dtype=float)
    n = len(u)
    s = np.sort(u)
    csum = np.cumsum(s[::-1])[::-1]

    t = (csum[0] - 1) / n
    for i in range(n - 1, 0, -1):
        t_i = (csum[i] - 1) / (n - i)
        if t_i >= s[i - 1]:
            t = t_i
            break

    return np.maximum(u - t, 0)
