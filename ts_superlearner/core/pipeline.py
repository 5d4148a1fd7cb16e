"""
Sequential composition of learners.

Stage k+1 trains and predicts on the task chained out of stage k, so stages
always run one after the other.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple, Union

import pandas as pd

from .exceptions import NotTrainedError
from .learner import Fit, Learner
from .task import Task

logger = logging.getLogger(__name__)

Stage = Union[Learner, Fit]


class PipelineFit(Fit):
    """Fit of a Pipeline; its artifacts are the ordered stage fits."""

    @property
    def stages(self) -> Tuple[Fit, ...]:
        return self.artifacts


class Pipeline(Learner):
    """
    Chain of learners where each stage's chained output feeds the next stage.

    Stages may be untrained learners or existing fits. A pipeline built only
    from fits is already trained: ``train`` then wraps them without retraining.
    """

    fit_class = PipelineFit

    def __init__(self, *stages: Stage, name: Optional[str] = None):
        if len(stages) == 1 and isinstance(stages[0], (list, tuple)):
            stages = tuple(stages[0])
        if not stages:
            raise ValueError("Pipeline needs at least one stage")
        for stage in stages:
            if not isinstance(stage, (Learner, Fit)):
                raise TypeError(f"Pipeline stages must be learners or fits, got {type(stage).__name__}")
        super().__init__(name=name or '_'.join(stage.name for stage in stages))
        self._stages = tuple(stages)

    @property
    def stages(self) -> Tuple[Stage, ...]:
        return self._stages

    @property
    def is_trained(self) -> bool:
        return all(stage.is_trained for stage in self._stages)

    def train(self, task: Optional[Task] = None) -> PipelineFit:
        if self.is_trained:
            training_task = task if task is not None else self._stages[0].training_task
            logger.info(f"{self.name}: all {len(self._stages)} stages already trained, assembling without retraining")
            return PipelineFit(self, training_task, self._stages)
        return super().train(task)

    def _train(self, task: Task) -> Tuple[Fit, ...]:
        if any(stage.is_trained for stage in self._stages):
            logger.warning(f"{self.name}: mixing trained and untrained stages, retraining every stage")
        fits = []
        current = task
        for k, stage in enumerate(self._stages):
            learner = stage.learner if isinstance(stage, Fit) else stage
            logger.debug(f"{self.name}: training stage {k + 1}/{len(self._stages)} ({learner.name})")
            fit = learner.train(current)
            fits.append(fit)
            if k < len(self._stages) - 1:
                current = fit.chain(current)
        return tuple(fits)

    def _predict(self, fit: PipelineFit, task: Task) -> pd.DataFrame:
        current = task
        for stage_fit in fit.stages[:-1]:
            current = stage_fit.chain(current)
        return fit.stages[-1].predict(current)

    def _chain(self, fit: PipelineFit, task: Task) -> Task:
        current = task
        for stage_fit in fit.stages:
            current = stage_fit.chain(current)
        return current

    def as_fit(self, task: Optional[Task] = None) -> PipelineFit:
        """Wrap already-trained stages in a PipelineFit."""
        if not self.is_trained:
            raise NotTrainedError(f"{self.name} has untrained stages; call train(task) first")
        return self.train(task)

    def predict(self, task: Optional[Task] = None) -> pd.DataFrame:
        if self.is_trained:
            return self.as_fit().predict(task)
        return super().predict(task)

    def chain(self, task: Optional[Task] = None) -> Task:
        if self.is_trained:
            return self.as_fit().chain(task)
        return super().chain(task)
