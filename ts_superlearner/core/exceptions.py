"""
Exception hierarchy for ts_superlearner.

Every failure the framework raises derives from ``SuperLearnerError`` and from
the builtin exception callers would naturally catch for that kind of problem.
"""

from typing import Optional


class SuperLearnerError(Exception):
    """Base class for all framework errors."""


class InvalidFoldConfiguration(SuperLearnerError, ValueError):
    """Fold parameters cannot produce at least one valid fold."""


class InvalidTaskSpec(SuperLearnerError, ValueError):
    """Bad column references, outcome type mismatch or unusable fold assignment."""


class NotTrainedError(SuperLearnerError, RuntimeError):
    """predict/chain called on a learner that has not been trained."""


class TrainingFailure(SuperLearnerError, RuntimeError):
    """A learner could not be trained on the given task."""

    def __init__(self, message: str, learner_name: Optional[str] = None):
        super().__init__(message)
        self.learner_name = learner_name
