"""
ARIMA learner backed by statsmodels' SARIMAX.

The learner models the outcome series alone. Predicting the training task
returns in-sample one-step-ahead fitted values; predicting a later window of the
same series forecasts forward from the end of training, so a validation gap
is skipped over rather than ignored.
"""

import logging
import threading
import warnings
from typing import Sequence

import numpy as np
from statsmodels.tsa.statespace.sarimax import SARIMAX

from ..core.exceptions import TrainingFailure
from ..core.learner import Fit, Learner
from ..core.task import OutcomeType, Task

logger = logging.getLogger(__name__)

# warnings.catch_warnings swaps process-wide state; fits on worker threads take turns
_FIT_LOCK = threading.Lock()


class ARIMALearner(Learner):
    """
    Seasonal ARIMA on the univariate outcome.

    Args:
        order: (p, d, q) order
        seasonal_order: (P, D, Q, s) seasonal order
        trend: statsmodels trend spec ('n', 'c', 't', 'ct')
        maxiter: Maximum optimizer iterations
        name: Learner id
    """

    def __init__(self, order: Sequence[int] = (1, 0, 0), seasonal_order: Sequence[int] = (0, 0, 0, 0),
                 trend: str = 'c', maxiter: int = 200, name: str = None):
        super().__init__(name=name, order=tuple(order), seasonal_order=tuple(seasonal_order),
                         trend=trend, maxiter=maxiter)

    @property
    def min_observations(self) -> int:
        p, d, q = self.params['order']
        P, D, Q, s = self.params['seasonal_order']
        return p + d + q + s * (P + D + Q) + 2

    def _train(self, task: Task):
        if task.outcome_type is not OutcomeType.CONTINUOUS:
            raise TrainingFailure(f"{self.name} needs a continuous outcome, got {task.outcome_type.value}",
                                  learner_name=self.name)
        if len(task) < self.min_observations:
            raise TrainingFailure(
                f"{self.name} with order={self.params['order']} seasonal_order={self.params['seasonal_order']} "
                f"needs at least {self.min_observations} observations, got {len(task)}",
                learner_name=self.name)

        y = task.Y.to_numpy(dtype=float)
        model = SARIMAX(
            y,
            order=self.params['order'],
            seasonal_order=self.params['seasonal_order'],
            trend=self.params['trend'],
            enforce_stationarity=False,
            enforce_invertibility=False,
        )
        with _FIT_LOCK, warnings.catch_warnings():
            # Convergence chatter on short windows is expected
            warnings.simplefilter('ignore')
            result = model.fit(disp=False, maxiter=self.params['maxiter'], method='lbfgs')
        logger.debug(f"{self.name}: fitted ARIMA{self.params['order']} on {len(y)} rows, aic={result.aic:.3f}")
        return result

    def _predict(self, fit: Fit, task: Task) -> np.ndarray:
        result = fit.artifacts
        training_task = fit.training_task

        if not task.shares_storage(training_task):
            return np.asarray(result.forecast(steps=len(task)))

        positions = task.positions
        train_positions = training_task.positions
        last = train_positions.max()
        if np.array_equal(positions, train_positions):
            return np.asarray(result.fittedvalues)

        prediction = np.empty(len(positions), dtype=float)
        future = positions > last
        if future.any():
            horizon = int(positions[future].max() - last)
            forecast = np.asarray(result.forecast(steps=horizon))
            prediction[future] = forecast[positions[future] - last - 1]

        past = ~future
        if past.any():
            loc = np.searchsorted(train_positions, positions[past])
            loc = np.clip(loc, 0, len(train_positions) - 1)
            if not np.array_equal(train_positions[loc], positions[past]):
                raise ValueError(f"{self.name} cannot predict rows before or between its training rows")
            prediction[past] = np.asarray(result.fittedvalues)[loc]
        return prediction
