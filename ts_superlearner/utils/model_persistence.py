"""
Fit persistence utilities for ts_superlearner.

A fit is saved as a directory holding the joblib-pickled fit and a
``metadata.json`` describing it, so a loaded artifact can be checked against
what was saved.
"""

import json
import logging
import platform
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Tuple

import joblib

logger = logging.getLogger(__name__)


class ModelPersistence:
    """Save and load trained fits together with their metadata."""

    @staticmethod
    def save_fit(fit, filepath) -> Path:
        """
        Save a trained fit.

        Args:
            fit: Trained fit (anything with ``is_trained`` true)
            filepath: Directory to write into

        Returns:
            The directory the fit was written to
        """
        if not getattr(fit, 'is_trained', False):
            raise ValueError("Cannot save an untrained learner")

        filepath = Path(filepath)
        filepath.mkdir(parents=True, exist_ok=True)
        joblib.dump(fit, filepath / 'fit.joblib')

        metadata = {
            'saved_at': datetime.now().isoformat(),
            'learner_name': fit.name,
            'fit_class': type(fit).__name__,
            'learner_class': type(fit.learner).__name__,
            'training_rows': len(fit.training_task),
            'python_version': sys.version,
            'platform': platform.platform(),
            'dependencies': ModelPersistence._get_dependency_versions(),
        }
        with open(filepath / 'metadata.json', 'w') as f:
            json.dump(metadata, f, indent=2, default=str)
        logger.info(f"Saved {metadata['fit_class']} '{fit.name}' to {filepath}")
        return filepath

    @staticmethod
    def load_fit(filepath) -> Tuple[Any, Dict[str, Any]]:
        """
        Load a fit saved with ``save_fit``.

        Returns:
            (fit, metadata)

        Raises:
            FileNotFoundError: if the directory does not hold a saved fit
            ValueError: if the loaded fit does not match its metadata
        """
        filepath = Path(filepath)
        fit_path = filepath / 'fit.joblib'
        metadata_path = filepath / 'metadata.json'
        if not fit_path.exists() or not metadata_path.exists():
            raise FileNotFoundError(f"No saved fit found in {filepath}")

        with open(metadata_path, 'r') as f:
            metadata = json.load(f)
        fit = joblib.load(fit_path)

        if type(fit).__name__ != metadata['fit_class'] or fit.name != metadata['learner_name']:
            raise ValueError(
                f"Saved fit in {filepath} does not match its metadata "
                f"({type(fit).__name__}/{fit.name} vs {metadata['fit_class']}/{metadata['learner_name']})")
        logger.info(f"Loaded {metadata['fit_class']} '{fit.name}' from {filepath}")
        return fit, metadata

    @staticmethod
    def _get_dependency_versions() -> Dict[str, str]:
        """Get versions of key dependencies for reproducibility."""
        versions = {}
        for module_name, dist_name in (('numpy', 'numpy'), ('pandas', 'pandas'), ('sklearn', 'scikit-learn'),
                                       ('statsmodels', 'statsmodels'), ('scipy', 'scipy'), ('joblib', 'joblib')):
            try:
                module = __import__(module_name)
                versions[dist_name] = getattr(module, '__version__', 'unknown')
            except ImportError:
                pass
        return versions


def save_fit(fit, filepath) -> Path:
    return ModelPersistence.save_fit(fit, filepath)


def load_fit(filepath) -> Tuple[Any, Dict[str, Any]]:
    return ModelPersistence.load_fit(filepath)
