"""
Reconstruction metrics for GLRM scoring.

Each partition accumulates its own GLRMMetricBuilder; builders are combined
with ``+`` (associative and commutative) once every partition is done.
"""

import numpy as np


class GLRMModelMetrics:
    """
    Final scoring metrics.

    Attributes:
        sumsqe: Sum of squared errors over observed (non-NaN) cells
        nobs: Number of scored rows
        mse: sumsqe / nobs (NaN when nothing was scored)
    """

    def __init__(self, sumsqe: float, nobs: int):
        self.sumsqe = sumsqe
        self.nobs = nobs
        self.mse = sumsqe / nobs if nobs > 0 else np.nan

    def __repr__(self) -> str:
        return f"GLRMModelMetrics(sumsqe={self.sumsqe:.6g}, nobs={self.nobs}, mse={self.mse:.6g})"


class GLRMMetricBuilder:
    """
    Local sum-of-squared-error accumulator.

    Example:
        >>> mb = GLRMMetricBuilder()
        >>> mb.per_row(np.array([1.0, 2.0]), np.array([0.0, np.nan]))
        >>> mb.sumsqe, mb.nobs
        (1.0, 1)
    """

    def __init__(self, sumsqe: float = 0.0, nobs: int = 0):
        self.sumsqe = sumsqe
        self.nobs = nobs

    def per_row(self, preds: np.ndarray, data_row: np.ndarray):
        """Add the squared errors of one row, skipping NaN observed cells."""
        observed = ~np.isnan(data_row)
        diff = data_row[observed] - preds[observed]
        self.sumsqe += float(np.sum(diff * diff))
        self.nobs += 1

    def __add__(self, other: 'GLRMMetricBuilder') -> 'GLRMMetricBuilder':
        return GLRMMetricBuilder(self.sumsqe + other.sumsqe, self.nobs + other.nobs)

    def make_metrics(self) -> GLRMModelMetrics:
        return GLRMModelMetrics(sumsqe=self.sumsqe, nobs=self.nobs)

    def __repr__(self) -> str:
        return f"GLRMMetricBuilder(sumsqe={self.sumsqe}, nobs={self.nobs})"
