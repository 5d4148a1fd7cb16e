"""
Adapter exposing any scikit-learn estimator as a learner.
"""

from typing import Any, Optional

import numpy as np
import pandas as pd
from sklearn.base import clone, is_classifier
from sklearn.utils.validation import has_fit_parameter

from ..core.learner import Fit, Learner
from ..core.task import OutcomeType, Task


class SklearnLearner(Learner):
    """
    Wrap a scikit-learn estimator.

    The estimator is cloned for every training run, so the wrapped instance is
    never fitted. Observation weights are passed as ``sample_weight`` when the
    estimator accepts them. Binary classifiers predict the probability of the
    positive class.

    Args:
        estimator: Unfitted scikit-learn estimator
        name: Learner id; defaults to the estimator class name
        **params: Estimator parameter overrides applied with ``set_params``
    """

    def __init__(self, estimator: Any, name: Optional[str] = None, **params):
        if not hasattr(estimator, 'fit') or not hasattr(estimator, 'predict'):
            raise TypeError(f"Expected a scikit-learn estimator, got {type(estimator).__name__}")
        super().__init__(name=name or type(estimator).__name__, **params)
        self.estimator = estimator

    def _train(self, task: Task) -> Any:
        model = clone(self.estimator)
        if self.params:
            model.set_params(**self.params)

        fit_kwargs = {}
        if task.weights_column is not None:
            if has_fit_parameter(model, 'sample_weight'):
                fit_kwargs['sample_weight'] = task.weights.to_numpy()
            else:
                self.logger.warning(f"{type(model).__name__} ignores observation weights")

        model.fit(task.X, task.Y, **fit_kwargs)
        return model

    def _predict(self, fit: Fit, task: Task) -> Any:
        model = fit.artifacts
        X = task.X
        if task.outcome_type is OutcomeType.BINARY and is_classifier(model) and hasattr(model, 'predict_proba'):
            classes = list(model.classes_)
            # 1 == True, so boolean outcomes match here too
            if 1 not in classes:
                # Training window held only the negative class
                return np.zeros(len(task))
            proba = model.predict_proba(X)
            return proba[:, classes.index(1)]

        prediction = model.predict(X)
        if task.outcome_type is OutcomeType.MULTIVARIATE:
            return pd.DataFrame(np.asarray(prediction), index=task.index, columns=task.outcome)
        return prediction
