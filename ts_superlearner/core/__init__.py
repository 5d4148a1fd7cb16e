"""
Core framework components: folds, tasks, the learner contract and composites.
"""

from .exceptions import (
    SuperLearnerError,
    InvalidFoldConfiguration,
    InvalidTaskSpec,
    NotTrainedError,
    TrainingFailure,
)
from .folds import Fold, FoldSet, FoldStrategy, make_folds
from .task import OutcomeType, Task
from .learner import Fit, Learner
from .pipeline import Pipeline, PipelineFit
from .stack import Stack, StackFit
from .cv_learner import CVFit, CVLearner
from .super_learner import SuperLearner, SuperLearnerFit

__all__ = [
    'SuperLearnerError', 'InvalidFoldConfiguration', 'InvalidTaskSpec', 'NotTrainedError', 'TrainingFailure',
    'Fold', 'FoldSet', 'FoldStrategy', 'make_folds', 'OutcomeType', 'Task', 'Fit', 'Learner',
    'Pipeline', 'PipelineFit', 'Stack', 'StackFit', 'CVFit', 'CVLearner', 'SuperLearner', 'SuperLearnerFit',
]
