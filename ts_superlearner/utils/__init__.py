"""
Utility components for ts_superlearner.
"""

from .logging_utils import setup_logging
from .model_persistence import ModelPersistence, save_fit, load_fit

__all__ = [
    'setup_logging',
    'ModelPersistence',
    'save_fit',
    'load_fit',
]
