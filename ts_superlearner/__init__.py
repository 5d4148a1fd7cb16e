"""
ts_superlearner: cross-validated ensemble learning for time-series data.

Builds ordering-respecting folds over dependent observations and composes
arbitrary learners into pipelines, stacks, cross-validated wrappers and
Super Learner ensembles.
"""

import logging

from .core.exceptions import (
    SuperLearnerError,
    InvalidFoldConfiguration,
    InvalidTaskSpec,
    NotTrainedError,
    TrainingFailure,
)
from .core.folds import Fold, FoldSet, FoldStrategy, make_folds
from .core.task import OutcomeType, Task
from .core.learner import Fit, Learner, predict, chain
from .core.pipeline import Pipeline, PipelineFit
from .core.stack import Stack, StackFit
from .core.cv_learner import CVFit, CVLearner
from .core.super_learner import SuperLearner, SuperLearnerFit
from .core.config import SuperLearnerConfig
from .core import losses
from .models import ARIMALearner, MeanLearner, NNLSLearner, SklearnLearner, create_learner

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'SuperLearnerError', 'InvalidFoldConfiguration', 'InvalidTaskSpec', 'NotTrainedError', 'TrainingFailure',
    'Fold', 'FoldSet', 'FoldStrategy', 'make_folds',
    'OutcomeType', 'Task',
    'Fit', 'Learner', 'predict', 'chain',
    'Pipeline', 'PipelineFit', 'Stack', 'StackFit', 'CVFit', 'CVLearner', 'SuperLearner', 'SuperLearnerFit',
    'SuperLearnerConfig', 'losses',
    'ARIMALearner', 'MeanLearner', 'NNLSLearner', 'SklearnLearner', 'create_learner',
]
