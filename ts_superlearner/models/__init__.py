"""
Reference learners adapting scikit-learn, statsmodels and scipy estimators.
"""

from .mean_model import MeanLearner
from .sklearn_model import SklearnLearner
from .arima_model import ARIMALearner
from .nnls_model import NNLSLearner
from .model_factory import LearnerFactory, create_learner, get_available_learners

__all__ = ['MeanLearner', 'SklearnLearner', 'ARIMALearner', 'NNLSLearner',
           'LearnerFactory', 'create_learner', 'get_available_learners']
