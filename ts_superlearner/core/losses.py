"""
Elementwise loss functions and risk aggregation.

A loss takes ``(prediction, observed)`` arrays and returns one loss per row
(or per row and output for multivariate outcomes). Risk is the weighted mean
of those losses over validation rows.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

import numpy as np

LossFunction = Callable[[np.ndarray, np.ndarray], np.ndarray]


def squared_error(prediction: np.ndarray, observed: np.ndarray) -> np.ndarray:
    prediction = np.asarray(prediction, dtype=float)
    observed = np.asarray(observed, dtype=float)
    return (prediction - observed) ** 2


def absolute_error(prediction: np.ndarray, observed: np.ndarray) -> np.ndarray:
    prediction = np.asarray(prediction, dtype=float)
    observed = np.asarray(observed, dtype=float)
    return np.abs(prediction - observed)


def absolute_percentage_error(prediction: np.ndarray, observed: np.ndarray, eps: float = 1e-9) -> np.ndarray:
    prediction = np.asarray(prediction, dtype=float)
    observed = np.asarray(observed, dtype=float)
    denom = np.maximum(np.abs(observed), eps)
    return np.abs((observed - prediction) / denom)


def log_loss(prediction: np.ndarray, observed: np.ndarray, eps: float = 1e-15) -> np.ndarray:
    """Binary negative log-likelihood of predicted positive-class probabilities."""
    p = np.clip(np.asarray(prediction, dtype=float), eps, 1 - eps)
    y = np.asarray(observed, dtype=float)
    return -(y * np.log(p) + (1 - y) * np.log(1 - p))


LOSSES: Dict[str, LossFunction] = {
    'squared_error': squared_error,
    'mse': squared_error,
    'absolute_error': absolute_error,
    'mae': absolute_error,
    'absolute_percentage_error': absolute_percentage_error,
    'mape': absolute_percentage_error,
    'log_loss': log_loss,
}


def get_loss(name: str) -> LossFunction:
    """Look up a loss function by name."""
    key = (name or '').lower()
    if key not in LOSSES:
        raise ValueError(f"Unknown loss '{name}'. Available: {sorted(LOSSES)}")
    return LOSSES[key]


def row_losses(loss_fn: LossFunction, prediction: np.ndarray, observed: np.ndarray) -> np.ndarray:
    """
    Evaluate ``loss_fn`` and reduce it to one value per row.

    Per-output losses of multivariate outcomes are summed across outputs. A loss
    that already aggregates (returns a scalar) comes back as a 0-d array.
    """
    losses = np.asarray(loss_fn(prediction, observed), dtype=float)
    if losses.ndim == 2:
        losses = losses.sum(axis=1)
    return losses


def weighted_risk(losses: np.ndarray, weights: Optional[np.ndarray] = None) -> float:
    """Weighted mean of row losses."""
    losses = np.asarray(losses, dtype=float)
    if losses.ndim == 0:
        return float(losses)
    if weights is None:
        return float(np.mean(losses))
    weights = np.asarray(weights, dtype=float)
    if weights.sum() <= 0:
        raise ValueError("Risk weights sum to zero")
    return float(np.average(losses, weights=weights))


def weighted_standard_error(losses: np.ndarray, weights: Optional[np.ndarray] = None) -> float:
    """
    Standard error of ``weighted_risk``.

    Uses the variance of a weighted mean, ``sum(p_i^2 (l_i - r)^2)`` with
    normalised weights ``p``, scaled by ``m / (m - 1)`` where ``m`` counts the
    rows with positive weight. With equal weights this is ``std(ddof=1) / sqrt(n)``.
    """
    losses = np.asarray(losses, dtype=float)
    if losses.ndim == 0:
        return float('nan')
    if weights is None:
        weights = np.ones(len(losses))
    weights = np.asarray(weights, dtype=float)
    m = int(np.count_nonzero(weights > 0))
    if m < 2:
        return float('nan')
    p = weights / weights.sum()
    risk = np.sum(p * losses)
    return float(np.sqrt(m / (m - 1) * np.sum(p ** 2 * (losses - risk) ** 2)))
