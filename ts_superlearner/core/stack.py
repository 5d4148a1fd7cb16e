"""
Parallel composition of learners.

Every member trains on the same task, independently of the others. Predictions
are concatenated column-wise in construction order.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, Hashable, List, Optional, Sequence, Tuple

import pandas as pd

from .learner import Fit, Learner
from .parallel import run_parallel
from .task import Task

logger = logging.getLogger(__name__)


def unique_learner_ids(names: Sequence[str]) -> List[str]:
    """Member ids; colliding names get a ``_<position>`` suffix."""
    counts = Counter(names)
    return [f"{name}_{i}" if counts[name] > 1 else name for i, name in enumerate(names)]


class StackFit(Fit):
    """Fit of a Stack; its artifacts are the member fits in construction order."""

    @property
    def members(self) -> Tuple[Fit, ...]:
        return self.artifacts

    @property
    def learner_ids(self) -> List[str]:
        return self.learner.learner_ids


class Stack(Learner):
    """
    Set of learners trained side by side on one task.

    Args:
        *learners: Member learners (or a single list of them)
        name: Learner id of the stack itself
        n_jobs: Number of threads used to train/predict members
    """

    fit_class = StackFit

    def __init__(self, *learners: Learner, name: Optional[str] = None, n_jobs: Optional[int] = 1):
        if len(learners) == 1 and isinstance(learners[0], (list, tuple)):
            learners = tuple(learners[0])
        if not learners:
            raise ValueError("Stack needs at least one learner")
        for learner in learners:
            if not isinstance(learner, Learner):
                raise TypeError(f"Stack members must be learners, got {type(learner).__name__}")
        super().__init__(name=name or 'Stack', n_jobs=n_jobs)
        self.n_jobs = n_jobs
        self._learners = tuple(learners)
        self._learner_ids = unique_learner_ids([learner.name for learner in learners])

    @property
    def learners(self) -> Tuple[Learner, ...]:
        return self._learners

    @property
    def learner_ids(self) -> List[str]:
        return list(self._learner_ids)

    def _train(self, task: Task) -> Tuple[Fit, ...]:
        logger.info(f"{self.name}: training {len(self._learners)} learners on {len(task)} rows")
        fits = run_parallel(lambda learner: learner.train(task), self._learners, self.n_jobs)
        return tuple(fits)

    def _predict(self, fit: StackFit, task: Task) -> pd.DataFrame:
        predictions = run_parallel(lambda member: member.predict(task), fit.members, self.n_jobs)
        columns: Dict[Hashable, object] = {}
        for learner_id, prediction in zip(self._learner_ids, predictions):
            if len(prediction) != len(task):
                raise ValueError(f"{learner_id} returned {len(prediction)} rows for a task of {len(task)}")
            single = prediction.shape[1] == 1
            for j, column in enumerate(prediction.columns):
                key = learner_id if single else f"{learner_id}_{column}"
                if key in columns:
                    raise ValueError(f"Prediction column '{key}' of {learner_id} collides with another member's column")
                columns[key] = prediction.iloc[:, j].to_numpy()
        return pd.DataFrame(columns, index=task.index)

    def member_columns(self, columns: Sequence[Hashable]) -> Dict[str, List[Hashable]]:
        """Group prediction columns by the member that produced them."""
        groups: Dict[str, List[Hashable]] = {learner_id: [] for learner_id in self._learner_ids}
        ids_by_length = sorted(self._learner_ids, key=len, reverse=True)
        for column in columns:
            if column in groups:
                groups[column].append(column)
                continue
            owner = next((i for i in ids_by_length if str(column).startswith(f"{i}_")), None)
            if owner is not None:
                groups[owner].append(column)
        return groups
