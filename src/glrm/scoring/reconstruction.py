"""
ReconstructionTask: per-partition GLRM imputation.

For every row x_i of a partition the task reconstructs

    xy = x_i^T Y                        (length m_expanded)

and turns it into one prediction per original column:

    categorical column d:  mimpute(xy[cat_offsets[d]:cat_offsets[d+1]])
    numeric column j:      impute(xy[cat_offsets[-1] + j])

Predictions are written into the partition's output block in place. Y and the
parameters are shared read-only between partitions; a partition only touches
its own rows. Infinite imputations (e.g. logistic loss with u ≠ 0) are
written unchanged.
"""

import numpy as np

from ..data.partition import Partition
from ..exceptions import ShapeMismatch
from .metrics import GLRMMetricBuilder


class ReconstructionTask:
    """
    Imputation of the output columns of one partition from X and Y.

    Attributes:
        Y: Read-only archetypes (k × m_expanded)
        params: GLRMParameters providing impute / mimpute
        cat_offsets: Categorical block offsets (length ncats + 1)
        nnums: Number of numeric columns

    Example:
        >>> task = ReconstructionTask(np.array([[2.0, -1.0]]), GLRMParameters(k=1), [0], nnums=2)
        >>> frame = make_loading_frame(np.array([[1.0], [0.5]]), task.ncols)
        >>> [part] = partition_frame(frame, task.k, n_partitions=1)
        >>> task.map(part)
        >>> frame[:, 1:]
        array([[ 2. , -1. ],
               [ 1. , -0.5]])
    """

    def __init__(self, archetypes: np.ndarray, params, cat_offsets, nnums: int):
        """
        Validate the layout and freeze Y.

        Raises:
            ShapeMismatch: If Y is not a non-empty 2D matrix, its row count
                           differs from params.k, or its column count does not
                           match cat_offsets[-1] + nnums
        """
        Y = np.array(archetypes, dtype=float)
        if Y.ndim != 2 or Y.shape[0] == 0 or Y.shape[1] == 0:
            raise ShapeMismatch(f"archetypes must be a non-empty 2D matrix, got shape {Y.shape}")
        if Y.shape[0] != params.k:
            raise ShapeMismatch(f"archetypes have {Y.shape[0]} rows, expected k={params.k}")

        cat_offsets = np.asarray(cat_offsets, dtype=int)
        if cat_offsets.ndim != 1 or len(cat_offsets) == 0 or cat_offsets[0] != 0 \
                or np.any(np.diff(cat_offsets) < 0):
            raise ShapeMismatch(f"invalid categorical offsets {cat_offsets.tolist()}")
        if nnums < 0 or cat_offsets[-1] + nnums != Y.shape[1]:
            raise ShapeMismatch(
                f"archetypes have {Y.shape[1]} columns, layout expects "
                f"{cat_offsets[-1]} categorical + {nnums} numeric"
            )

        Y.setflags(write=False)
        self.Y = Y
        self.params = params
        self.cat_offsets = cat_offsets
        self.nnums = nnums

    @property
    def k(self) -> int:
        return self.Y.shape[0]

    @property
    def ncats(self) -> int:
        return len(self.cat_offsets) - 1

    @property
    def ncols(self) -> int:
        return self.ncats + self.nnums

    def check_loading(self, X: np.ndarray):
        """Raise ShapeMismatch unless X is a 2D matrix with k columns."""
        if X.ndim != 2 or X.shape[1] != self.k:
            raise ShapeMismatch(f"X must have k={self.k} columns, got shape {X.shape}")

    def impute_row(self, x: np.ndarray, preds: np.ndarray) -> np.ndarray:
        """
        Reconstruct one row into preds (length ncats + nnums).

        Parameters:
            x: Row of X (k,)
            preds: Output buffer, overwritten

        Returns:
            preds
        """
        xy = x @ self.Y
        for d in range(self.ncats):
            preds[d] = self.params.mimpute(xy[self.cat_offsets[d]:self.cat_offsets[d + 1]])
        if self.nnums > 0:
            preds[self.ncats:] = self.params.impute(xy[self.cat_offsets[-1]:])
        return preds

    def map(self, partition: Partition) -> GLRMMetricBuilder:
        """
        Fill the output block of a partition, row by row.

        Parameters:
            partition: Partition whose X rows are read and output rows written

        Returns:
            builder: Squared-error accumulator for this partition (empty when
                     the partition carries no observed data)

        Raises:
            ShapeMismatch: If the partition's blocks do not fit the layout
        """
        self.check_loading(partition.X)
        if partition.output.shape[1] != self.ncols:
            raise ShapeMismatch(
                f"partition {partition.index} has {partition.output.shape[1]} output "
                f"columns, expected {self.ncols}"
            )

        builder = GLRMMetricBuilder()
        preds = np.empty(self.ncols)
        for row in range(partition.n_rows):
            self.impute_row(partition.X[row], preds)
            partition.output[row] = preds
            if partition.observed is not None:
                builder.per_row(preds, partition.observed[row])
        return builder
