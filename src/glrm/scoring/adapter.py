"""
ScoringAdapter: runs ReconstructionTask over every partition of a dataset.

Scoring pass:
1. Validate X (and the observed data) against the task layout, before any
   work is dispatched
2. Build the loading frame [X | 0] and cut it into row partitions
3. Map the task over the partitions in parallel (shared memory, threads)
4. Reduce the per-partition metric builders
5. Return the output columns as a table, plus the metrics

If any partition fails the exception propagates and no table is returned.
"""

import time
import warnings
from functools import reduce
from operator import add
from typing import Optional, Tuple

import numpy as np
import pandas as pd
from joblib import Parallel, delayed, effective_n_jobs

from ..data.partition import make_loading_frame, partition_frame
from ..exceptions import ShapeMismatch
from .metrics import GLRMMetricBuilder, GLRMModelMetrics
from .reconstruction import ReconstructionTask


class ScoringAdapter:
    """
    Partition-parallel GLRM scoring.

    Attributes:
        task: ReconstructionTask shared (read-only) by all partitions
        n_jobs: Number of worker threads (joblib convention, -1 = all cores)
        n_partitions: Number of row partitions (default: one per worker)
        verbose: Whether to print progress
        frame_: Loading frame of the last pass (n × (k + m))

    Example:
        >>> task = ReconstructionTask(Y, params, data.cat_offsets, data.nnums)
        >>> adapter = ScoringAdapter(task, n_jobs=4)
        >>> preds, metrics = adapter.score(X, observed=data.A)
        >>> table = data.to_frame(preds)
    """

    def __init__(
        self,
        task: ReconstructionTask,
        n_jobs: Optional[int] = None,
        n_partitions: Optional[int] = None,
        verbose: bool = False
    ):
        if n_partitions is not None and n_partitions < 1:
            raise ValueError(f"n_partitions must be positive, got {n_partitions}")
        self.task = task
        self.n_jobs = n_jobs
        self.n_partitions = n_partitions
        self.verbose = verbose
        self.frame_: Optional[np.ndarray] = None

    def _resolve_partitions(self, n_rows: int) -> int:
        if self.n_partitions is None:
            return max(1, min(effective_n_jobs(self.n_jobs), n_rows))
        if self.n_partitions > n_rows > 0:
            warnings.warn(
                f"n_partitions ({self.n_partitions}) exceeds the number of rows "
                f"({n_rows}); using {n_rows} partitions.",
                RuntimeWarning
            )
        return self.n_partitions

    def score(
        self,
        X: np.ndarray,
        observed: Optional[np.ndarray] = None
    ) -> Tuple[np.ndarray, GLRMModelMetrics]:
        """
        Reconstruct every row of X.

        Parameters:
            X: Loading matrix (n × k)
            observed: Optional adapted data (n × m) to score against;
                      NaN cells are skipped

        Returns:
            predictions: Imputed values (n × m) in adapted column order
            metrics: Sum of squared errors over observed cells (nobs = 0
                     when no observed data is given)

        Raises:
            ShapeMismatch: If X or observed do not fit the task layout
        """
        X = np.asarray(X, dtype=float)
        self.task.check_loading(X)
        n = X.shape[0]
        m = self.task.ncols
        if observed is not None:
            observed = np.asarray(observed, dtype=float)
            if observed.shape != (n, m):
                raise ShapeMismatch(
                    f"observed data shape {observed.shape} must be ({n}, {m})"
                )

        frame = make_loading_frame(X, m)
        partitions = partition_frame(
            frame, self.task.k, self._resolve_partitions(n), observed=observed
        )

        if self.verbose:
            print(f"Scoring {n} rows × {m} columns (k={self.task.k})")
            print(f"  Partitions: {len(partitions)}, jobs: {effective_n_jobs(self.n_jobs)}")
        start = time.time()

        builders = Parallel(n_jobs=self.n_jobs, require="sharedmem")(
            delayed(self.task.map)(partition) for partition in partitions
        )
        builder = reduce(add, builders, GLRMMetricBuilder())

        predictions = frame[:, self.task.k:]
        if np.isinf(predictions).any():
            warnings.warn(
                "Reconstruction contains infinite values; the fit is degenerate "
                "for at least one column.",
                RuntimeWarning
            )

        self.frame_ = frame
        metrics = builder.make_metrics()
        if self.verbose:
            print(f"  Done in {time.time() - start:.2f}s, sum of squared errors: {metrics.sumsqe:.4f}")
        return predictions, metrics

    def score_frame(
        self,
        X: np.ndarray,
        data,
        observed: Optional[np.ndarray] = None,
        index=None
    ) -> Tuple[pd.DataFrame, GLRMModelMetrics]:
        """
        Like score(), but returns the predictions as a table.

        Parameters:
            X: Loading matrix (n × k)
            data: GLRMData layout used to name and reorder the columns
            observed: Optional adapted data (n × m)
            index: Optional row index for the table

        Returns:
            table: One column per original feature, in original order
            metrics: Scoring metrics
        """
        predictions, metrics = self.score(X, observed=observed)
        return data.to_frame(predictions, index=index), metrics
