"""
Learner factory for creating reference learners by name.
"""

import logging
from typing import Any, Callable, Dict

from sklearn.ensemble import RandomForestRegressor
from sklearn.linear_model import LinearRegression, LogisticRegression, Ridge

from ..core.learner import Learner
from .arima_model import ARIMALearner
from .mean_model import MeanLearner
from .nnls_model import NNLSLearner
from .sklearn_model import SklearnLearner

logger = logging.getLogger(__name__)


def _sklearn_builder(estimator_class, defaults=None) -> Callable[..., Learner]:
    def build(name: str = None, **params) -> Learner:
        merged = dict(defaults or {})
        merged.update(params)
        return SklearnLearner(estimator_class(**merged), name=name)
    return build


class LearnerFactory:
    """Factory for creating learners from a type name and parameters."""

    _learners: Dict[str, Callable[..., Learner]] = {
        'mean': MeanLearner,
        'arima': ARIMALearner,
        'nnls': NNLSLearner,
        'glm': _sklearn_builder(LinearRegression),
        'ridge': _sklearn_builder(Ridge),
        'logistic': _sklearn_builder(LogisticRegression, {'max_iter': 1000}),
        'random_forest': _sklearn_builder(RandomForestRegressor, {'n_estimators': 100, 'random_state': 0}),
    }

    _aliases = {
        'linear': 'glm',
        'lm': 'glm',
        'rf': 'random_forest',
    }

    @classmethod
    def create_learner(cls, learner_type: str, name: str = None, **params) -> Learner:
        """Create a learner of the specified type."""
        learner_type = (learner_type or '').lower()
        learner_type = cls._aliases.get(learner_type, learner_type)

        if learner_type not in cls._learners:
            raise ValueError(f"Unknown learner type '{learner_type}'. Available: {cls.get_available_learners()}")

        logger.info(f"Creating {learner_type} learner with parameters: {params}")
        builder = cls._learners[learner_type]
        if name is not None:
            return builder(name=name, **params)
        return builder(**params)

    @classmethod
    def get_available_learners(cls) -> list:
        """Get list of available learner types, aliases included."""
        return sorted(list(cls._learners) + list(cls._aliases))

    @classmethod
    def is_learner_available(cls, learner_type: str) -> bool:
        learner_type = (learner_type or '').lower()
        return learner_type in cls._learners or learner_type in cls._aliases


def create_learner(learner_type: str, name: str = None, **params: Any) -> Learner:
    """Create a learner by type name."""
    return LearnerFactory.create_learner(learner_type, name=name, **params)


def get_available_learners() -> list:
    return LearnerFactory.get_available_learners()
