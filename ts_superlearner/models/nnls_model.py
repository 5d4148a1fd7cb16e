"""
Non-negative least squares combination, the default Super Learner metalearner.
"""

import numpy as np
import pandas as pd
from scipy.optimize import nnls

from ..core.learner import Fit, Learner
from ..core.task import OutcomeType, Task


class NNLSLearner(Learner):
    """
    Non-negative linear combination of the covariates (base learner predictions).

    Args:
        convex: Normalize the coefficients to sum to one
        name: Learner id
    """

    def __init__(self, convex: bool = True, name: str = None):
        super().__init__(name=name, convex=convex)

    def _train(self, task: Task) -> pd.Series:
        if task.outcome_type in (OutcomeType.CATEGORICAL, OutcomeType.MULTIVARIATE):
            raise ValueError(f"NNLSLearner does not support {task.outcome_type.value} outcomes")
        X = task.X.to_numpy(dtype=float)
        y = task.Y.to_numpy(dtype=float)
        root_w = np.sqrt(task.weights.to_numpy())

        coef, residual = nnls(X * root_w[:, None], y * root_w)
        if self.params['convex']:
            total = coef.sum()
            if total > 0:
                coef = coef / total
            else:
                self.logger.warning("All NNLS coefficients are zero; falling back to equal weights")
                coef = np.full(X.shape[1], 1.0 / X.shape[1])
        self.logger.debug(f"NNLS coefficients: {dict(zip(task.covariates, coef.round(4)))}, residual={residual:.4f}")
        return pd.Series(coef, index=task.covariates, name='coefficient')

    def _predict(self, fit: Fit, task: Task) -> np.ndarray:
        coef = fit.artifacts
        X = task.data[list(coef.index)].to_numpy(dtype=float)
        return X @ coef.to_numpy()
