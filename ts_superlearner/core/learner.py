"""
Learner/Fit contract shared by every predictive algorithm and composite.

A ``Learner`` is an untrained description (hyperparameters only). Training it
returns a ``Fit``: the learner plus opaque artifacts plus the task it was
trained on. Learners are never mutated by training, so the same learner
can be trained any number of times, concurrently, on different tasks.
"""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Type, Union

import numpy as np
import pandas as pd

from .exceptions import InvalidTaskSpec, NotTrainedError, SuperLearnerError, TrainingFailure
from .task import Task
from ..utils.logging_utils import log_execution_time

PredictionLike = Union[pd.DataFrame, pd.Series, np.ndarray]


class Fit:
    """A trained learner. Immutable once constructed."""

    is_trained = True

    def __init__(self, learner: 'Learner', training_task: Task, artifacts: Any):
        self._learner = learner
        self._training_task = training_task
        self._artifacts = artifacts

    @property
    def learner(self) -> 'Learner':
        return self._learner

    @property
    def name(self) -> str:
        return self._learner.name

    @property
    def training_task(self) -> Task:
        return self._training_task

    @property
    def artifacts(self) -> Any:
        return self._artifacts

    def _resolve_task(self, task: Optional[Task]) -> Task:
        if task is None:
            return self._training_task
        if not isinstance(task, Task):
            raise InvalidTaskSpec(f"Expected a Task, got {type(task).__name__}")
        return task

    def predict(self, task: Optional[Task] = None) -> pd.DataFrame:
        """Predict on ``task``, or on the training task when none is given."""
        task = self._resolve_task(task)
        raw = self._learner._predict(self, task)
        return self._as_prediction(raw, task)

    def chain(self, task: Optional[Task] = None) -> Task:
        """Derive the task the next pipeline stage trains/predicts on."""
        return self._learner._chain(self, self._resolve_task(task))

    def _as_prediction(self, raw: PredictionLike, task: Task) -> pd.DataFrame:
        if isinstance(raw, pd.DataFrame):
            return raw
        values = np.asarray(raw)
        if values.ndim == 1:
            values = values.reshape(-1, 1)
        if values.shape[0] != len(task):
            raise ValueError(
                f"{self.name} produced {values.shape[0]} predictions for a task of {len(task)} rows")
        if values.shape[1] == 1:
            columns = [self.name]
        else:
            columns = [f"{self.name}_{j}" for j in range(values.shape[1])]
        return pd.DataFrame(values, index=task.index, columns=columns)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name}, trained on {len(self._training_task)} rows)"


class Learner(ABC):
    """Abstract base class for all learners."""

    is_trained = False
    fit_class: Type[Fit] = Fit

    def __init__(self, name: Optional[str] = None, **params):
        """
        Initialize the learner.

        Args:
            name: Learner id used for prediction columns and risk keys
            **params: Learner hyperparameters
        """
        self._name = name or self.__class__.__name__
        self.params = params
        self.logger = logging.getLogger(f'ts_superlearner.learners.{self._name}')

    @property
    def name(self) -> str:
        return self._name

    def get_params(self) -> Dict[str, Any]:
        """Get learner hyperparameters."""
        return self.params.copy()

    def clone(self) -> 'Learner':
        """Private copy of this learner."""
        return copy.deepcopy(self)

    @log_execution_time
    def train(self, task: Task) -> Fit:
        """
        Train on ``task`` and return a new Fit.

        Raises:
            TrainingFailure: if the underlying algorithm cannot be trained on the task
        """
        if not isinstance(task, Task):
            raise InvalidTaskSpec(f"Expected a Task, got {type(task).__name__}")
        self.logger.debug(f"Training {self.name} on {len(task)} rows")
        try:
            artifacts = self._train(task)
        except SuperLearnerError:
            raise
        except Exception as e:
            raise TrainingFailure(f"{self.name} failed to train on {len(task)} rows: {e}",
                                  learner_name=self.name) from e
        return self.fit_class(self, task, artifacts)

    @abstractmethod
    def _train(self, task: Task) -> Any:
        """Fit the algorithm and return its artifacts."""

    @abstractmethod
    def _predict(self, fit: Fit, task: Task) -> PredictionLike:
        """Predict ``task`` with a fit produced by this learner."""

    def _chain(self, fit: Fit, task: Task) -> Task:
        return task.next_in_chain(fit.predict(task))

    def predict(self, task: Optional[Task] = None) -> pd.DataFrame:
        raise NotTrainedError(f"{self.name} has not been trained; call train(task) and predict with the Fit")

    def chain(self, task: Optional[Task] = None) -> Task:
        raise NotTrainedError(f"{self.name} has not been trained; call train(task) and chain with the Fit")

    def __str__(self) -> str:
        return f"{self.name}({self.params})"

    def __repr__(self) -> str:
        return self.__str__()


def predict(learner_or_fit: Union[Learner, Fit], task: Optional[Task] = None) -> pd.DataFrame:
    """Predict with a Fit; raises NotTrainedError for an untrained learner."""
    return learner_or_fit.predict(task)


def chain(learner_or_fit: Union[Learner, Fit], task: Optional[Task] = None) -> Task:
    """Chain with a Fit; raises NotTrainedError for an untrained learner."""
    return learner_or_fit.chain(task)
