"""
Row partitions of a GLRM loading frame.

The loading frame is an n × (k + m) array: columns [0, k) hold the rows of X,
columns [k, k + m) receive the m predictions. A Partition is a contiguous,
disjoint block of rows that owns numpy views into that frame (and, optionally,
into the observed adapted data), so writes made through a partition land in
the shared frame without copying.

Together the partitions produced by ``partition_frame`` cover every row
exactly once.
"""

import numpy as np
from typing import List, Optional

from ..exceptions import ShapeMismatch


class Partition:
    """
    One row block of the loading frame.

    Attributes:
        index (int): Position of the partition in the partition list
        start (int): First row (inclusive) in the full frame
        stop (int): Last row (exclusive) in the full frame
        X (np.ndarray): View of the X rows (n_rows × k)
        output (np.ndarray): View of the output columns (n_rows × m)
        observed (np.ndarray or None): View of the observed adapted rows (n_rows × m)
    """

    def __init__(
        self,
        index: int,
        start: int,
        stop: int,
        X: np.ndarray,
        output: np.ndarray,
        observed: Optional[np.ndarray] = None
    ):
        if X.shape[0] != stop - start or output.shape[0] != stop - start:
            raise ShapeMismatch(
                f"partition {index} spans {stop - start} rows but X has {X.shape[0]} "
                f"and output has {output.shape[0]}"
            )
        if observed is not None and observed.shape != output.shape:
            raise ShapeMismatch(
                f"observed block {observed.shape} must match output block {output.shape}"
            )
        self.index = index
        self.start = start
        self.stop = stop
        self.X = X
        self.output = output
        self.observed = observed

    @property
    def n_rows(self) -> int:
        return self.stop - self.start

    def __len__(self) -> int:
        return self.n_rows

    def __repr__(self) -> str:
        return f"Partition(index={self.index}, rows=[{self.start}, {self.stop}))"


def partition_bounds(n_rows: int, n_partitions: int) -> List[tuple]:
    """
    Split [0, n_rows) into at most n_partitions contiguous, non-empty ranges.

    Sizes differ by at most one row. Zero rows give no ranges.

    Example:
        >>> partition_bounds(5, 2)
        [(0, 3), (3, 5)]
    """
    if n_partitions < 1:
        raise ValueError(f"n_partitions must be positive, got {n_partitions}")
    n_partitions = min(n_partitions, n_rows)
    if n_partitions == 0:
        return []
    base, extra = divmod(n_rows, n_partitions)
    sizes = [base + (1 if i < extra else 0) for i in range(n_partitions)]
    edges = np.concatenate([[0], np.cumsum(sizes)])
    return [(int(a), int(b)) for a, b in zip(edges[:-1], edges[1:])]


def make_loading_frame(X: np.ndarray, n_outputs: int) -> np.ndarray:
    """
    Loading frame holding X in its first k columns and n_outputs zero columns.

    Parameters:
        X: Loading matrix (n × k)
        n_outputs: Number of output columns m

    Returns:
        frame: Array (n × (k + m))
    """
    X = np.asarray(X, dtype=float)
    n, k = X.shape
    frame = np.zeros((n, k + n_outputs))
    frame[:, :k] = X
    return frame


def partition_frame(
    frame: np.ndarray,
    k: int,
    n_partitions: int,
    observed: Optional[np.ndarray] = None
) -> List[Partition]:
    """
    Cut a loading frame into row partitions.

    Parameters:
        frame: Loading frame (n × (k + m))
        k: Number of X columns
        n_partitions: Requested number of partitions (capped at n)
        observed: Optional observed adapted data (n × m) to attach

    Returns:
        partitions: Partitions in row order
    """
    n = frame.shape[0]
    if observed is not None and observed.shape != (n, frame.shape[1] - k):
        raise ShapeMismatch(
            f"observed data shape {observed.shape} must be ({n}, {frame.shape[1] - k})"
        )
    partitions = []
    for i, (start, stop) in enumerate(partition_bounds(n, n_partitions)):
        partitions.append(Partition(
            index=i,
            start=start,
            stop=stop,
            X=frame[start:stop, :k],
            output=frame[start:stop, k:],
            observed=None if observed is None else observed[start:stop]
        ))
    return partitions
