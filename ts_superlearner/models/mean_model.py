"""
Weighted-mean learner: the simplest baseline and a useful stack member.
"""

import numpy as np
import pandas as pd

from ..core.learner import Fit, Learner
from ..core.task import OutcomeType, Task


class MeanLearner(Learner):
    """Predicts the weighted training mean of each outcome column."""

    def _train(self, task: Task) -> pd.Series:
        if task.outcome_type is OutcomeType.CATEGORICAL:
            raise ValueError("MeanLearner does not support categorical outcomes")
        y = task.Y
        if isinstance(y, pd.Series):
            y = y.to_frame()
        weights = task.weights.to_numpy()
        means = {column: float(np.average(y[column].to_numpy(dtype=float), weights=weights))
                 for column in y.columns}
        self.logger.debug(f"Training means: {means}")
        return pd.Series(means)

    def _predict(self, fit: Fit, task: Task) -> pd.DataFrame:
        means = fit.artifacts
        if len(means) == 1:
            columns = [self.name]
        else:
            columns = list(means.index)
        values = np.tile(means.to_numpy(dtype=float), (len(task), 1))
        return pd.DataFrame(values, index=task.index, columns=columns)
