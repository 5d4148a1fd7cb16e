"""
Fold generation for temporally dependent observations.

Two schemes are supported:

* rolling origin: the training window starts at 0 and grows by ``batch``
  observations per fold while the validation origin advances with it;
* rolling window: a fixed-size training window slides forward by ``batch``.

No leakage: every validation window starts ``gap`` observations after the end
of its training window. Bounds-safe: a fold is only produced when its full
validation window fits in ``[0, n)``; an incomplete final fold is dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from numbers import Integral
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd

from .exceptions import InvalidFoldConfiguration

logger = logging.getLogger(__name__)


class FoldStrategy(str, Enum):
    ROLLING_ORIGIN = "rolling_origin"
    ROLLING_WINDOW = "rolling_window"


# Parameters each strategy requires, and the defaults of the shared optional ones
_REQUIRED_PARAMS = {
    FoldStrategy.ROLLING_ORIGIN: ("first_window", "validation_size"),
    FoldStrategy.ROLLING_WINDOW: ("window_size", "validation_size"),
}
_OPTIONAL_PARAMS = {"gap": 0, "batch": 1}
_POSITIVE_PARAMS = ("first_window", "window_size", "validation_size", "batch")


@dataclass(frozen=True)
class Fold:
    """A single train/validation partition, as half-open positional ranges."""

    fold_id: int
    train_start: int
    train_end: int
    validation_start: int
    validation_end: int

    @property
    def train_slice(self) -> slice:
        return slice(self.train_start, self.train_end)

    @property
    def validation_slice(self) -> slice:
        return slice(self.validation_start, self.validation_end)

    @property
    def train_index(self) -> np.ndarray:
        return np.arange(self.train_start, self.train_end)

    @property
    def validation_index(self) -> np.ndarray:
        return np.arange(self.validation_start, self.validation_end)

    @property
    def train_size(self) -> int:
        return self.train_end - self.train_start

    @property
    def validation_size(self) -> int:
        return self.validation_end - self.validation_start

    @property
    def gap(self) -> int:
        return self.validation_start - self.train_end

    def __repr__(self) -> str:
        return (f"Fold({self.fold_id}: train=[{self.train_start},{self.train_end}), "
                f"validation=[{self.validation_start},{self.validation_end}))")


@dataclass(frozen=True)
class FoldSet:
    """Ordered, immutable sequence of folds over a series of length ``n``."""

    folds: Tuple[Fold, ...]
    n: int
    strategy: FoldStrategy
    settings: Tuple[Tuple[str, int], ...] = ()

    @property
    def params(self) -> Dict[str, int]:
        return dict(self.settings)

    def __len__(self) -> int:
        return len(self.folds)

    def __iter__(self) -> Iterator[Fold]:
        return iter(self.folds)

    def __getitem__(self, item):
        return self.folds[item]

    def validation_positions(self) -> np.ndarray:
        """Validation positions of every fold, concatenated in fold order."""
        if not self.folds:
            return np.array([], dtype=int)
        return np.concatenate([fold.validation_index for fold in self.folds])

    def summary(self) -> pd.DataFrame:
        """One row per fold describing its train and validation windows."""
        rows = [{
            'fold_id': fold.fold_id,
            'train_start': fold.train_start,
            'train_end': fold.train_end,
            'validation_start': fold.validation_start,
            'validation_end': fold.validation_end,
            'train_size': fold.train_size,
            'validation_size': fold.validation_size,
        } for fold in self.folds]
        columns = ['fold_id', 'train_start', 'train_end', 'validation_start',
                   'validation_end', 'train_size', 'validation_size']
        return pd.DataFrame(rows, columns=columns)

    def __repr__(self) -> str:
        params = ', '.join(f"{k}={v}" for k, v in self.settings)
        return f"FoldSet({self.strategy.value}, n={self.n}, folds={len(self.folds)}, {params})"


def generate_rolling_origin_folds(n: int, first_window: int, validation_size: int,
                                  gap: int = 0, batch: int = 1) -> Iterator[Fold]:
    """Yield expanding-window folds: train on [0, first_window + k*batch)."""
    k = 0
    while True:
        train_end = first_window + k * batch
        validation_start = train_end + gap
        validation_end = validation_start + validation_size
        if validation_end > n:
            break
        yield Fold(k, 0, train_end, validation_start, validation_end)
        k += 1


def generate_rolling_window_folds(n: int, window_size: int, validation_size: int,
                                  gap: int = 0, batch: int = 1) -> Iterator[Fold]:
    """Yield fixed-size sliding folds: train on [k*batch, k*batch + window_size)."""
    k = 0
    while True:
        train_start = k * batch
        train_end = train_start + window_size
        validation_start = train_end + gap
        validation_end = validation_start + validation_size
        if validation_end > n:
            break
        yield Fold(k, train_start, train_end, validation_start, validation_end)
        k += 1


_GENERATORS = {
    FoldStrategy.ROLLING_ORIGIN: generate_rolling_origin_folds,
    FoldStrategy.ROLLING_WINDOW: generate_rolling_window_folds,
}


def _resolve_length(n_or_series: Any) -> int:
    if isinstance(n_or_series, bool):
        raise InvalidFoldConfiguration("Series length must be an integer or a sized object, got bool")
    if isinstance(n_or_series, Integral):
        return int(n_or_series)
    try:
        return len(n_or_series)
    except TypeError:
        raise InvalidFoldConfiguration(
            f"Cannot determine series length from {type(n_or_series).__name__}") from None


def _resolve_strategy(strategy: Union[str, FoldStrategy]) -> FoldStrategy:
    try:
        return FoldStrategy(strategy)
    except ValueError:
        available = [s.value for s in FoldStrategy]
        raise InvalidFoldConfiguration(
            f"Unknown fold strategy '{strategy}'. Available: {available}") from None


def validate_fold_params(strategy: FoldStrategy, params: Mapping[str, Any]) -> Dict[str, int]:
    """Check a parameter set against a strategy and fill in defaults."""
    required = _REQUIRED_PARAMS[strategy]
    allowed = set(required) | set(_OPTIONAL_PARAMS)

    unknown = sorted(set(params) - allowed)
    if unknown:
        raise InvalidFoldConfiguration(
            f"Unknown parameters for {strategy.value}: {unknown}. Allowed: {sorted(allowed)}")
    missing = [name for name in required if params.get(name) is None]
    if missing:
        raise InvalidFoldConfiguration(f"Missing parameters for {strategy.value}: {missing}")

    resolved: Dict[str, int] = {}
    for name in list(required) + list(_OPTIONAL_PARAMS):
        value = params.get(name)
        if value is None:
            value = _OPTIONAL_PARAMS[name]
        if isinstance(value, bool) or not isinstance(value, Integral):
            raise InvalidFoldConfiguration(f"{name} must be an integer, got {value!r}")
        value = int(value)
        if name in _POSITIVE_PARAMS and value < 1:
            raise InvalidFoldConfiguration(f"{name} must be at least 1, got {value}")
        if name == "gap" and value < 0:
            raise InvalidFoldConfiguration(f"gap must be non-negative, got {value}")
        resolved[name] = value
    return resolved


def make_folds(n_or_series: Any, strategy: Union[str, FoldStrategy] = FoldStrategy.ROLLING_ORIGIN,
               params: Optional[Mapping[str, Any]] = None, **kwargs) -> FoldSet:
    """
    Build a FoldSet for a series.

    Args:
        n_or_series: Series length, or any sized object (DataFrame, Series, Task)
        strategy: 'rolling_origin' or 'rolling_window'
        params: Strategy parameters; keyword arguments are merged on top

    Returns:
        FoldSet ordered by increasing origin

    Raises:
        InvalidFoldConfiguration: if no fold can be produced from the parameters
    """
    n = _resolve_length(n_or_series)
    strategy = _resolve_strategy(strategy)
    merged = dict(params or {})
    merged.update(kwargs)
    resolved = validate_fold_params(strategy, merged)

    if n < 1:
        raise InvalidFoldConfiguration(f"Series length must be at least 1, got {n}")

    window = resolved.get("first_window", resolved.get("window_size"))
    needed = window + resolved["gap"] + resolved["validation_size"]
    if needed > n:
        raise InvalidFoldConfiguration(
            f"{strategy.value} needs at least {needed} observations "
            f"(window={window}, gap={resolved['gap']}, validation_size={resolved['validation_size']}), got {n}")

    folds = tuple(_GENERATORS[strategy](n, **resolved))
    fold_set = FoldSet(folds=folds, n=n, strategy=strategy, settings=tuple(sorted(resolved.items())))

    logger.info(f"Generated {len(folds)} {strategy.value} folds for n={n} ({resolved})")
    for fold in folds:
        logger.debug(f"Fold {fold.fold_id}: Train={fold.train_size}, Validation={fold.validation_size}")
    return fold_set
