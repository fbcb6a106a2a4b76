"""
GLRMData: adapts a mixed numeric/categorical table for GLRM.

The adapted layout puts categorical columns first and numeric columns after:

    adapted column:   [cat_0, ..., cat_{c-1}, num_0, ..., num_{p-1}]
    expanded column:  [cat_0 levels | cat_1 levels | ... | num_0, ..., num_{p-1}]

Categorical cell values are stored as level indices (floats, NaN when missing
or unknown). A categorical column with L levels owns L consecutive expanded
columns starting at cat_offsets[d]; numeric column j sits at expanded index
cat_offsets[-1] + j.
"""

import numpy as np
import pandas as pd
from typing import List, Literal, Optional

from ..exceptions import ConfigurationError, ShapeMismatch

TransformType = Literal['none', 'standardize', 'normalize', 'demean', 'descale']
TRANSFORMS = ('none', 'standardize', 'normalize', 'demean', 'descale')


def is_categorical(series: pd.Series) -> bool:
    """Whether a column is treated as categorical (non-numeric or boolean dtype)."""
    return (
        isinstance(series.dtype, pd.CategoricalDtype)
        or pd.api.types.is_bool_dtype(series)
        or not pd.api.types.is_numeric_dtype(series)
    )


class GLRMData:
    """
    Column layout and adapted matrix of a GLRM training table.

    Attributes:
        names (List[str]): Original column names, in original order
        cat_names (List[str]): Categorical column names (adapted order)
        num_names (List[str]): Numeric column names (adapted order)
        permutation (np.ndarray): permutation[i] = original index of adapted column i
        domains (List[list]): Levels of each categorical column
        cat_offsets (np.ndarray): Start of each categorical block in the expanded
            layout, length ncats + 1 (last entry = first numeric expanded column)
        names_expanded (List[str]): Expanded column names
        norm_sub (np.ndarray): Subtracted from each numeric column
        norm_mul (np.ndarray): Multiplied into each numeric column after subtraction
        A (np.ndarray): Adapted training matrix (n × m), NaN for missing cells

    Example:
        >>> df = pd.DataFrame({'x': [1.0, 2.0, np.nan], 'c': ['a', 'b', 'a']})
        >>> data = GLRMData(df)
        >>> data.cat_names, data.num_names, data.m_expanded
        (['c'], ['x'], 3)
    """

    def __init__(self, frame: pd.DataFrame, transform: TransformType = 'none'):
        """
        Fit the layout on a training frame.

        Parameters:
            frame: Training table; columns with numeric dtype are numeric,
                   everything else (object, category, bool) is categorical
            transform: Numeric transform, one of 'none', 'standardize',
                       'normalize', 'demean', 'descale'

        Raises:
            ConfigurationError: If transform is unknown
            ValueError: If the frame has no columns
        """
        if transform not in TRANSFORMS:
            raise ConfigurationError(
                f"Unknown transform '{transform}'. Available: {list(TRANSFORMS)}"
            )
        if frame.shape[1] == 0:
            raise ValueError("frame must have at least one column")

        self.transform = transform
        self.names: List[str] = [str(c) for c in frame.columns]

        cat_idx = [i for i, c in enumerate(frame.columns) if is_categorical(frame[c])]
        num_idx = [i for i in range(frame.shape[1]) if i not in cat_idx]
        self.permutation = np.array(cat_idx + num_idx, dtype=int)
        self.cat_names = [self.names[i] for i in cat_idx]
        self.num_names = [self.names[i] for i in num_idx]

        self.domains = [self._domain(frame.iloc[:, i]) for i in cat_idx]
        sizes = [len(d) for d in self.domains]
        self.cat_offsets = np.concatenate([[0], np.cumsum(sizes)]).astype(int)

        self.names_expanded = [
            f"{name}.{level}" for name, domain in zip(self.cat_names, self.domains)
            for level in domain
        ] + list(self.num_names)

        nums = frame.iloc[:, num_idx].astype(float) if num_idx else pd.DataFrame(index=frame.index)
        self.norm_sub, self.norm_mul = self._transform_stats(nums, transform)

        self.A = self.adapt(frame)

    @staticmethod
    def _domain(series: pd.Series) -> list:
        if isinstance(series.dtype, pd.CategoricalDtype):
            return list(series.cat.categories)
        return list(pd.Categorical(series.dropna()).categories)

    @staticmethod
    def _transform_stats(nums: pd.DataFrame, transform: str):
        p = nums.shape[1]
        sub, mul = np.zeros(p), np.ones(p)
        if p == 0 or transform == 'none':
            return sub, mul

        mean = nums.mean().to_numpy()
        std = nums.std().to_numpy()
        spread = (nums.max() - nums.min()).to_numpy()

        if transform in ('standardize', 'normalize', 'demean'):
            sub = np.nan_to_num(mean)
        if transform in ('standardize', 'descale'):
            mul = _safe_inverse(std)
        elif transform == 'normalize':
            mul = _safe_inverse(spread)
        return sub, mul

    @property
    def ncats(self) -> int:
        return len(self.cat_names)

    @property
    def nnums(self) -> int:
        return len(self.num_names)

    @property
    def ncols(self) -> int:
        return self.ncats + self.nnums

    @property
    def m_expanded(self) -> int:
        return int(self.cat_offsets[-1]) + self.nnums

    @property
    def nobs(self) -> int:
        return self.A.shape[0]

    @property
    def adapted_names(self) -> List[str]:
        return self.cat_names + self.num_names

    def adapt(self, frame: pd.DataFrame) -> np.ndarray:
        """
        Adapt a frame to the fitted layout.

        Levels not in a fitted domain become NaN, like missing values.

        Parameters:
            frame: Table containing (at least) every fitted column

        Returns:
            A: Adapted matrix (n × m) in adapted column order

        Raises:
            ShapeMismatch: If a fitted column is missing from the frame
        """
        missing = [c for c in self.names if c not in frame.columns.astype(str)]
        if missing:
            raise ShapeMismatch(f"frame is missing columns {missing}")
        frame = frame.rename(columns=str)

        A = np.empty((len(frame), self.ncols))
        for d, (name, domain) in enumerate(zip(self.cat_names, self.domains)):
            codes = pd.Categorical(frame[name], categories=domain).codes.astype(float)
            codes[codes < 0] = np.nan
            A[:, d] = codes
        for j, name in enumerate(self.num_names):
            values = pd.to_numeric(frame[name], errors='coerce').to_numpy(dtype=float)
            A[:, self.ncats + j] = (values - self.norm_sub[j]) * self.norm_mul[j]
        return A

    def expanded_matrix(self, A: Optional[np.ndarray] = None) -> np.ndarray:
        """
        Expanded numeric representation (n × m_expanded).

        Categorical columns become one-hot blocks (all-NaN block when the cell
        is missing); numeric columns are copied from the adapted matrix.

        Parameters:
            A: Adapted matrix (defaults to the training matrix)
        """
        A = self.A if A is None else A
        n = A.shape[0]
        E = np.zeros((n, self.m_expanded))
        for d in range(self.ncats):
            start, end = self.cat_offsets[d], self.cat_offsets[d + 1]
            level = A[:, d]
            observed = ~np.isnan(level)
            E[~observed, start:end] = np.nan
            rows = np.flatnonzero(observed)
            E[rows, start + level[observed].astype(int)] = 1.0
        E[:, self.cat_offsets[-1]:] = A[:, self.ncats:]
        return E

    def to_frame(self, P: np.ndarray, index=None) -> pd.DataFrame:
        """
        Turn an adapted-order prediction matrix into a table.

        Columns come back in original order and with original names.
        Categorical columns hold integer level indices.

        Parameters:
            P: Predictions (n × m) in adapted column order
            index: Optional row index for the result
        """
        if P.shape[1] != self.ncols:
            raise ShapeMismatch(f"expected {self.ncols} prediction columns, got {P.shape[1]}")
        columns = {}
        for i in np.argsort(self.permutation):
            name = self.adapted_names[i]
            if i < self.ncats:
                columns[name] = P[:, i].astype(np.int64)
            else:
                columns[name] = P[:, i]
        return pd.DataFrame(columns, index=index)

    def __repr__(self) -> str:
        return (
            f"GLRMData("
            f"n_rows={self.nobs}, "
            f"ncats={self.ncats}, "
            f"nnums={self.nnums}, "
            f"m_expanded={self.m_expanded}, "
            f"transform='{self.transform}')"
        )


def _safe_inverse(values: np.ndarray) -> np.ndarray:
    """1/values, with 1 where values is zero or undefined (constant columns)."""
    out = np.ones_like(values, dtype=float)
    ok = np.isfinite(values) & (values != 0)
    out[ok] = 1.0 / values[ok]
    return out
