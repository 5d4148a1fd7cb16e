"""
Run configuration for ts_superlearner.

A run is described by a JSON document with four sections::

    {
        "task": {"covariates": [...], "outcome": "y", "outcome_type": "continuous"},
        "folds": {"strategy": "rolling_origin", "first_window": 50, "validation_size": 10},
        "learners": [{"type": "mean"}, {"type": "arima", "params": {"order": [1, 0, 0]}}],
        "metalearner": {"type": "nnls", "params": {"convex": true}},
        "n_jobs": 1,
        "random_seed": 1337,
        "loss": "squared_error"
    }
"""

import json
import logging
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np
import pandas as pd

from .exceptions import InvalidFoldConfiguration, InvalidTaskSpec
from .folds import FoldSet, FoldStrategy, make_folds
from .learner import Learner
from .losses import LossFunction, get_loss
from .task import OutcomeType, Task

logger = logging.getLogger(__name__)


@dataclass
class FoldConfig:
    """Configuration for fold generation."""
    strategy: str = FoldStrategy.ROLLING_ORIGIN.value
    first_window: Optional[int] = None
    window_size: Optional[int] = None
    validation_size: int = 1
    gap: int = 0
    batch: int = 1

    def to_params(self) -> Dict[str, int]:
        """Parameters for ``make_folds``, keyed the way the strategy expects."""
        params = {'validation_size': self.validation_size, 'gap': self.gap, 'batch': self.batch}
        if self.strategy == FoldStrategy.ROLLING_ORIGIN.value:
            if self.window_size is not None:
                raise InvalidFoldConfiguration("rolling_origin takes first_window, not window_size")
            params['first_window'] = self.first_window
        elif self.strategy == FoldStrategy.ROLLING_WINDOW.value:
            if self.first_window is not None:
                raise InvalidFoldConfiguration("rolling_window takes window_size, not first_window")
            params['window_size'] = self.window_size
        return params

    def make(self, n_or_series: Any) -> FoldSet:
        return make_folds(n_or_series, self.strategy, self.to_params())


@dataclass
class LearnerConfig:
    """Configuration of a single learner built through the model factory."""
    type: str
    name: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict)

    def build(self) -> Learner:
        from ..models.model_factory import create_learner
        return create_learner(self.type, name=self.name, **self.params)

    def to_dict(self) -> Dict[str, Any]:
        result = {'type': self.type, 'params': dict(self.params)}
        if self.name is not None:
            result['name'] = self.name
        return result


@dataclass
class TaskConfig:
    """Column roles of the task built from the input data."""
    covariates: List[str] = field(default_factory=list)
    outcome: Union[str, List[str]] = 'y'
    outcome_type: str = OutcomeType.CONTINUOUS.value
    weights: Optional[str] = None


class SuperLearnerConfig:
    """
    Main configuration class for a Super Learner run.

    Holds the task roles, fold scheme, base learners, metalearner and
    execution settings, and builds the corresponding framework objects.
    """

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration from a dictionary.

        Args:
            config_dict: Configuration dictionary; missing sections use defaults.
        """
        self._load_from_dict(config_dict or {})

    def _load_from_dict(self, config_dict: Dict[str, Any]):
        task_config = config_dict.get('task', {})
        self.task = TaskConfig(
            covariates=list(task_config.get('covariates', [])),
            outcome=task_config.get('outcome', 'y'),
            outcome_type=task_config.get('outcome_type', OutcomeType.CONTINUOUS.value),
            weights=task_config.get('weights'),
        )

        fold_config = config_dict.get('folds', {})
        self.folds = FoldConfig(
            strategy=fold_config.get('strategy', FoldStrategy.ROLLING_ORIGIN.value),
            first_window=fold_config.get('first_window'),
            window_size=fold_config.get('window_size'),
            validation_size=fold_config.get('validation_size', 1),
            gap=fold_config.get('gap', 0),
            batch=fold_config.get('batch', 1),
        )

        learners = config_dict.get('learners', [{'type': 'mean'}, {'type': 'glm'}])
        self.learners = [self._learner_config(entry) for entry in learners]
        self.metalearner = self._learner_config(config_dict.get('metalearner', {'type': 'nnls'}))

        self.n_jobs = config_dict.get('n_jobs', 1)
        self.random_seed = config_dict.get('random_seed', 1337)
        self.loss = config_dict.get('loss', 'squared_error')

    @staticmethod
    def _learner_config(entry: Union[str, Dict[str, Any]]) -> LearnerConfig:
        if isinstance(entry, str):
            return LearnerConfig(type=entry)
        if 'type' not in entry:
            raise ValueError(f"Learner entry is missing 'type': {entry}")
        return LearnerConfig(type=entry['type'], name=entry.get('name'), params=dict(entry.get('params', {})))

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'SuperLearnerConfig':
        return cls(config_dict=config_dict)

    @classmethod
    def from_file(cls, config_path: str) -> 'SuperLearnerConfig':
        """
        Create configuration from a JSON file.

        Args:
            config_path: Path to configuration file.

        Returns:
            SuperLearnerConfig instance
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r') as f:
            config_dict = json.load(f)

        return cls(config_dict=config_dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        folds = {
            'strategy': self.folds.strategy,
            'validation_size': self.folds.validation_size,
            'gap': self.folds.gap,
            'batch': self.folds.batch,
        }
        if self.folds.first_window is not None:
            folds['first_window'] = self.folds.first_window
        if self.folds.window_size is not None:
            folds['window_size'] = self.folds.window_size
        return {
            'task': {
                'covariates': list(self.task.covariates),
                'outcome': self.task.outcome,
                'outcome_type': self.task.outcome_type,
                'weights': self.task.weights,
            },
            'folds': folds,
            'learners': [learner.to_dict() for learner in self.learners],
            'metalearner': self.metalearner.to_dict(),
            'n_jobs': self.n_jobs,
            'random_seed': self.random_seed,
            'loss': self.loss,
        }

    def save(self, config_path: str):
        """Save configuration to file."""
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, 'w') as f:
            json.dump(self.to_dict(), f, indent=4)

    def set_seeds(self) -> None:
        random.seed(self.random_seed)
        np.random.seed(self.random_seed)

    def loss_function(self) -> LossFunction:
        return get_loss(self.loss)

    def build_task(self, frame: pd.DataFrame) -> Task:
        """Bind ``frame`` to the configured roles and attach the configured folds."""
        covariates = self.task.covariates
        if not covariates:
            outcome = self.task.outcome if isinstance(self.task.outcome, list) else [self.task.outcome]
            covariates = [c for c in frame.columns if c not in outcome and c != self.task.weights]
            if not covariates:
                raise InvalidTaskSpec("No covariate columns configured or left in the data")
        folds = self.folds.make(len(frame))
        return Task(frame, covariates=covariates, outcome=self.task.outcome,
                    outcome_type=self.task.outcome_type, weights=self.task.weights, folds=folds)

    def build_learners(self) -> List[Learner]:
        return [learner.build() for learner in self.learners]

    def build_super_learner(self):
        from .super_learner import SuperLearner
        return SuperLearner(self.build_learners(), metalearner=self.metalearner.build(), n_jobs=self.n_jobs)

    def __repr__(self) -> str:
        return f"SuperLearnerConfig({json.dumps(self.to_dict())})"
