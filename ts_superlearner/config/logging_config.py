"""
Logging configuration for ts_superlearner.

This module provides granular control over logging levels for different components
to reduce noise while keeping fold- and member-level progress available for debugging.
"""

import copy
import logging
from typing import Dict, Any

# Default logging configuration
DEFAULT_LOGGING_CONFIG = {
    'root_level': logging.INFO,
    'file_level': logging.INFO,
    'console_level': logging.INFO,

    # Package loggers that emit records; submodules inherit from the nearest entry
    'components': {
        'ts_superlearner': logging.INFO,
        'ts_superlearner.core': logging.INFO,
        'ts_superlearner.core.cv_learner': logging.INFO,
        'ts_superlearner.core.super_learner': logging.INFO,
        'ts_superlearner.learners': logging.INFO,
        'ts_superlearner.models': logging.INFO,
        'ts_superlearner.utils': logging.INFO,
    },

    # Libraries called during training
    'third_party': {
        'statsmodels': logging.WARNING,
        'sklearn': logging.WARNING,
        'joblib': logging.WARNING,
    },

    # Verbose mode (for debugging)
    'verbose': False,

    # Log format
    'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    'date_format': '%Y-%m-%d %H:%M:%S',
}


def get_logging_config(verbose: bool = False, custom_config: Dict[str, Any] = None) -> Dict[str, Any]:
    """
    Get logging configuration with optional customization.

    Args:
        verbose: Enable verbose logging (DEBUG level)
        custom_config: Custom configuration overrides

    Returns:
        Logging configuration dictionary
    """
    config = copy.deepcopy(DEFAULT_LOGGING_CONFIG)

    if verbose:
        config['root_level'] = logging.DEBUG
        config['file_level'] = logging.DEBUG
        config['console_level'] = logging.DEBUG
        config['verbose'] = True

        # Fold and learner internals
        for component in config['components']:
            if component != 'ts_superlearner' and not component.endswith('.utils'):
                config['components'][component] = logging.DEBUG

    if custom_config:
        config.update(custom_config)

    return config


def apply_logging_config(config: Dict[str, Any]) -> None:
    """
    Apply logging configuration to all loggers.

    Args:
        config: Logging configuration dictionary
    """
    for logger_name, level in config['components'].items():
        logging.getLogger(logger_name).setLevel(level)

    for logger_name, level in config['third_party'].items():
        logging.getLogger(logger_name).setLevel(level)

    logging.getLogger().setLevel(config['root_level'])


def get_quiet_config() -> Dict[str, Any]:
    """Get minimal logging configuration for production use."""
    config = copy.deepcopy(DEFAULT_LOGGING_CONFIG)
    config.update({
        'root_level': logging.WARNING,
        'file_level': logging.INFO,
        'console_level': logging.WARNING,
        'components': {k: logging.WARNING for k in DEFAULT_LOGGING_CONFIG['components']},
        'third_party': {k: logging.ERROR for k in DEFAULT_LOGGING_CONFIG['third_party']},
        'verbose': False,
    })
    return config
