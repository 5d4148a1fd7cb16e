"""
Super Learner: stacked ensemble with a cross-validated metalearner.

Training runs two tracks over the same task:

1. a CVLearner over the base stack yields out-of-fold predictions, on which the
   metalearner is trained, so the combination weights are never estimated from
   predictions of a model that saw the predicted rows;
2. the base stack is trained on the full task to obtain the deployable fits.

The deployable predictor is a Pipeline of the full-data stack fit and the
metalearner fit, assembled without retraining either.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Union

import pandas as pd

from .cv_learner import CVFit, CVLearner
from .learner import Fit, Learner
from .losses import LossFunction
from .pipeline import Pipeline, PipelineFit
from .stack import Stack, StackFit
from .task import Task

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SuperLearnerArtifacts:
    cv_fit: CVFit
    meta_fit: Fit
    full_fit: StackFit
    pipeline_fit: PipelineFit


class SuperLearnerFit(Fit):
    """Fit of a SuperLearner; predicts through the assembled pipeline."""

    @property
    def cv_fit(self) -> CVFit:
        return self.artifacts.cv_fit

    @property
    def meta_fit(self) -> Fit:
        return self.artifacts.meta_fit

    @property
    def full_fit(self) -> StackFit:
        return self.artifacts.full_fit

    @property
    def pipeline_fit(self) -> PipelineFit:
        return self.artifacts.pipeline_fit

    @property
    def coefficients(self) -> Optional[pd.Series]:
        """Metalearner weights per base learner, when the metalearner has them."""
        artifacts = self.meta_fit.artifacts
        if isinstance(artifacts, pd.Series) and list(artifacts.index) == self.meta_fit.training_task.covariates:
            return artifacts.copy()
        return None

    def cv_risk(self, loss_fn: LossFunction) -> Dict[str, float]:
        return self.cv_fit.cv_risk(loss_fn)

    def cv_risk_table(self, loss_fn: LossFunction) -> pd.DataFrame:
        return self.cv_fit.cv_risk_table(loss_fn)


class SuperLearner(Learner):
    """
    Ensemble of base learners combined by a metalearner.

    Args:
        learners: Base learners, as a Stack or a sequence of learners
        metalearner: Learner trained on out-of-fold base predictions;
            defaults to a convex non-negative least squares combination
        name: Learner id of the ensemble
        n_jobs: Number of threads for stack members and CV folds
    """

    fit_class = SuperLearnerFit

    def __init__(self, learners: Union[Stack, Sequence[Learner]], metalearner: Optional[Learner] = None,
                 name: str = 'SuperLearner', n_jobs: Optional[int] = 1):
        if isinstance(learners, Stack):
            stack = learners
        else:
            stack = Stack(*learners, n_jobs=n_jobs)
        if metalearner is None:
            from ..models.nnls_model import NNLSLearner
            metalearner = NNLSLearner(convex=True)
        if not isinstance(metalearner, Learner):
            raise TypeError(f"metalearner must be a learner, got {type(metalearner).__name__}")
        super().__init__(name=name, n_jobs=n_jobs)
        self.n_jobs = n_jobs
        self._stack = stack
        self._metalearner = metalearner

    @property
    def stack(self) -> Stack:
        return self._stack

    @property
    def metalearner(self) -> Learner:
        return self._metalearner

    def _train(self, task: Task) -> SuperLearnerArtifacts:
        logger.info(f"{self.name}: cross-validating {len(self._stack.learners)} learners")
        cv_fit = CVLearner(self._stack, n_jobs=self.n_jobs).train(task)

        meta_task = cv_fit.chain()
        logger.info(f"{self.name}: training metalearner {self._metalearner.name} on {len(meta_task)} out-of-fold rows")
        meta_fit = self._metalearner.train(meta_task)

        logger.info(f"{self.name}: training base learners on the full task ({len(task)} rows)")
        full_fit = self._stack.train(task)

        pipeline_fit = Pipeline(full_fit, meta_fit, name=f"{self.name}_pipeline").train(task)
        return SuperLearnerArtifacts(cv_fit=cv_fit, meta_fit=meta_fit, full_fit=full_fit,
                                     pipeline_fit=pipeline_fit)

    def _predict(self, fit: SuperLearnerFit, task: Task) -> pd.DataFrame:
        prediction = fit.pipeline_fit.predict(task)
        if prediction.shape[1] == 1:
            prediction = prediction.set_axis([self.name], axis=1)
        return prediction
