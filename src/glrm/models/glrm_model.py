"""
GLRMModel: fitted factors plus the scoring entry point.

GLRM scoring is data imputation based on the feature domains, using the
reconstructed XY (Udell et al., "Generalized Low Rank Models", Section 5.3).
The factors are produced by an external alternating-minimization driver and
handed over through GLRMOutput.
"""

import numpy as np
import pandas as pd
from typing import Optional

from ..data.glrm_data import GLRMData
from ..exceptions import ShapeMismatch
from ..objectives.objective import glrm_objective
from ..scoring.adapter import ScoringAdapter
from ..scoring.metrics import GLRMModelMetrics
from ..scoring.reconstruction import ReconstructionTask
from .params import GLRMParameters


class GLRMOutput:
    """
    Result of fitting a GLRM.

    Attributes:
        archetypes: Y, mapping from the k-dim latent space to the expanded
                    columns (k × m_expanded)
        loading: X, one k-dim row per training example (n × k)
        data: GLRMData layout of the training frame
        iterations: Iterations run by the driver
        objective: Final objective value (computed when not given)
        step_size: Final step size of the driver
    """

    def __init__(
        self,
        archetypes: np.ndarray,
        loading: np.ndarray,
        data: GLRMData,
        iterations: int = 0,
        objective: Optional[float] = None,
        step_size: Optional[float] = None
    ):
        self.archetypes = np.asarray(archetypes, dtype=float)
        self.loading = np.asarray(loading, dtype=float)
        self.data = data
        self.iterations = iterations
        self.objective = objective
        self.step_size = step_size

        if self.archetypes.ndim != 2 or self.archetypes.shape[1] != data.m_expanded:
            raise ShapeMismatch(
                f"archetypes shape {self.archetypes.shape} does not match "
                f"{data.m_expanded} expanded columns"
            )
        if self.loading.shape != (data.nobs, self.archetypes.shape[0]):
            raise ShapeMismatch(
                f"loading shape {self.loading.shape} must be "
                f"({data.nobs}, {self.archetypes.shape[0]})"
            )

    @property
    def k(self) -> int:
        return self.archetypes.shape[0]

    @property
    def names_expanded(self):
        return self.data.names_expanded

    @property
    def cat_offsets(self) -> np.ndarray:
        return self.data.cat_offsets

    @property
    def ncats(self) -> int:
        return self.data.ncats

    @property
    def nnums(self) -> int:
        return self.data.nnums

    @property
    def nobs(self) -> int:
        return self.data.nobs


class GLRMModel:
    """
    Fitted Generalized Low Rank Model.

    Example:
        >>> data = GLRMData(df)
        >>> params = GLRMParameters(k=2, loss='huber')
        >>> model = GLRMModel(params, GLRMOutput(Y, X, data))
        >>> imputed = model.predict(n_jobs=4)
        >>> model.metrics_.sumsqe
    """

    def __init__(self, params: GLRMParameters, output: GLRMOutput):
        if params.k != output.k:
            raise ShapeMismatch(f"params.k={params.k} but archetypes have {output.k} rows")
        if params.transform != output.data.transform:
            raise ValueError(
                f"params.transform='{params.transform}' but data was adapted with "
                f"'{output.data.transform}'"
            )
        self.params = params
        self.output = output
        self.metrics_: Optional[GLRMModelMetrics] = None

        if output.objective is None:
            output.objective, _ = glrm_objective(
                output.data.A, output.loading, output.archetypes, params, output.cat_offsets
            )

    def reconstruction_task(self) -> ReconstructionTask:
        return ReconstructionTask(
            self.output.archetypes, self.params, self.output.cat_offsets, self.output.nnums
        )

    def predict(
        self,
        frame: Optional[pd.DataFrame] = None,
        n_jobs: Optional[int] = None,
        n_partitions: Optional[int] = None,
        verbose: bool = False
    ) -> pd.DataFrame:
        """
        Impute every cell of the training rows from XY.

        Parameters:
            frame: Observed table to score against (defaults to the training
                   frame); must have one row per row of X
            n_jobs: Number of worker threads
            n_partitions: Number of row partitions
            verbose: Whether to print progress

        Returns:
            imputed: One column per original feature; categorical columns hold
                     level indices into the fitted domains

        Raises:
            ShapeMismatch: If the frame does not have one row per row of X
        """
        data = self.output.data
        observed = data.A if frame is None else data.adapt(frame)
        index = None if frame is None else frame.index

        adapter = ScoringAdapter(
            self.reconstruction_task(), n_jobs=n_jobs, n_partitions=n_partitions, verbose=verbose
        )
        table, self.metrics_ = adapter.score_frame(
            self.output.loading, data, observed=observed, index=index
        )
        return table

    def __repr__(self) -> str:
        return f"GLRMModel(k={self.params.k}, loss='{self.params.loss_name}', data={self.output.data!r})"
