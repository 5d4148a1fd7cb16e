"""
Task: an immutable binding of a dataset to a prediction problem.

A Task owns a private copy of the data frame it was constructed from. Views
(full, fold training, fold validation, arbitrary subsets) are windowed Tasks that
share that frame and only hold row positions into it, so row order is always
the storage order and never silently changes.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Hashable, List, Optional, Sequence, Union

import numpy as np
import pandas as pd
from pandas.api import types as ptypes

from .exceptions import InvalidTaskSpec
from .folds import Fold, FoldSet

logger = logging.getLogger(__name__)

ColumnIds = Union[Hashable, Sequence[Hashable]]

# Marker for "carry the current fold assignment forward"
KEEP_FOLDS = object()


class OutcomeType(str, Enum):
    CONTINUOUS = "continuous"
    BINARY = "binary"
    CATEGORICAL = "categorical"
    MULTIVARIATE = "multivariate"


def _as_column_list(columns: ColumnIds, role: str) -> List[Hashable]:
    if columns is None:
        raise InvalidTaskSpec(f"{role} must not be None")
    if isinstance(columns, (str, bytes)) or not isinstance(columns, Sequence):
        columns = [columns]
    columns = list(columns)
    if not columns:
        raise InvalidTaskSpec(f"{role} must name at least one column")
    if len(set(columns)) != len(columns):
        raise InvalidTaskSpec(f"{role} contains duplicate column ids: {columns}")
    return columns


def _check_outcome_domain(data: pd.DataFrame, outcome: List[Hashable], outcome_type: OutcomeType) -> None:
    if outcome_type is OutcomeType.MULTIVARIATE:
        if len(outcome) < 2:
            raise InvalidTaskSpec("multivariate outcome needs at least two outcome columns")
    elif len(outcome) != 1:
        raise InvalidTaskSpec(f"{outcome_type.value} outcome needs exactly one outcome column, got {outcome}")

    for column in outcome:
        series = data[column]
        if outcome_type in (OutcomeType.CONTINUOUS, OutcomeType.MULTIVARIATE):
            if ptypes.is_bool_dtype(series) or not ptypes.is_numeric_dtype(series):
                raise InvalidTaskSpec(
                    f"{outcome_type.value} outcome '{column}' must be numeric, got dtype {series.dtype}")
        elif outcome_type is OutcomeType.BINARY:
            if ptypes.is_bool_dtype(series):
                continue
            values = series.dropna().unique()
            if not ptypes.is_numeric_dtype(series) or not set(values.tolist()) <= {0, 1}:
                raise InvalidTaskSpec(
                    f"binary outcome '{column}' must only hold 0/1 values, got {sorted(values.tolist())[:5]}")
        elif outcome_type is OutcomeType.CATEGORICAL:
            if ptypes.is_float_dtype(series):
                raise InvalidTaskSpec(
                    f"categorical outcome '{column}' must not be floating point, got dtype {series.dtype}")


class Task:
    """
    Bound prediction problem: data, covariate/outcome roles, weights and folds.

    Args:
        data: Observations in temporal order
        covariates: Covariate column id(s)
        outcome: Outcome column id(s)
        outcome_type: One of continuous, binary, categorical, multivariate
        weights: Optional column id holding non-negative observation weights
        folds: Optional FoldSet over all rows of ``data``

    Raises:
        InvalidTaskSpec: if the columns or outcome type do not fit the data
    """

    def __init__(self, data: pd.DataFrame, covariates: ColumnIds, outcome: ColumnIds,
                 outcome_type: Union[str, OutcomeType] = OutcomeType.CONTINUOUS,
                 weights: Optional[Hashable] = None, folds: Optional[FoldSet] = None):
        if not isinstance(data, pd.DataFrame):
            raise InvalidTaskSpec(f"data must be a pandas DataFrame, got {type(data).__name__}")
        if not data.columns.is_unique:
            raise InvalidTaskSpec("data has duplicate column names")

        covariates = _as_column_list(covariates, "covariates")
        outcome = _as_column_list(outcome, "outcome")
        missing = [c for c in covariates + outcome if c not in data.columns]
        if missing:
            raise InvalidTaskSpec(f"Columns not found in data: {missing}")

        try:
            outcome_type = OutcomeType(outcome_type)
        except ValueError:
            raise InvalidTaskSpec(
                f"Unknown outcome type '{outcome_type}'. Available: {[t.value for t in OutcomeType]}") from None
        _check_outcome_domain(data, outcome, outcome_type)

        if weights is not None:
            if weights not in data.columns:
                raise InvalidTaskSpec(f"Weights column not found in data: {weights!r}")
            w = data[weights]
            if ptypes.is_bool_dtype(w) or not ptypes.is_numeric_dtype(w):
                raise InvalidTaskSpec(f"Weights column '{weights}' must be numeric")
            if w.isna().any() or (w < 0).any():
                raise InvalidTaskSpec(f"Weights column '{weights}' must be non-negative and complete")

        if folds is not None:
            if not isinstance(folds, FoldSet):
                raise InvalidTaskSpec(f"folds must be a FoldSet, got {type(folds).__name__}")
            if folds.n != len(data):
                raise InvalidTaskSpec(f"FoldSet was built for n={folds.n} but data has {len(data)} rows")

        self._init(data.copy(), None, covariates, outcome, outcome_type, weights, folds)
        logger.debug(f"Created {self!r}")

    def _init(self, storage, positions, covariates, outcome, outcome_type, weights, folds):
        object.__setattr__(self, '_storage', storage)
        object.__setattr__(self, '_positions', positions)
        object.__setattr__(self, '_covariates', tuple(covariates))
        object.__setattr__(self, '_outcome', tuple(outcome))
        object.__setattr__(self, '_outcome_type', outcome_type)
        object.__setattr__(self, '_weights_column', weights)
        object.__setattr__(self, '_folds', folds)

    def __setattr__(self, name, value):
        raise AttributeError(f"Task is immutable; cannot set '{name}'")

    def __delattr__(self, name):
        raise AttributeError(f"Task is immutable; cannot delete '{name}'")

    def _window(self, positions: np.ndarray, folds: Optional[FoldSet] = None) -> 'Task':
        view = object.__new__(Task)
        view._init(self._storage, np.asarray(positions, dtype=int), self._covariates, self._outcome,
                   self._outcome_type, self._weights_column, folds)
        return view

    # ------------------------------------------------------------------ roles

    @property
    def covariates(self) -> List[Hashable]:
        return list(self._covariates)

    @property
    def outcome(self) -> List[Hashable]:
        return list(self._outcome)

    @property
    def outcome_type(self) -> OutcomeType:
        return self._outcome_type

    @property
    def weights_column(self) -> Optional[Hashable]:
        return self._weights_column

    @property
    def folds(self) -> Optional[FoldSet]:
        return self._folds

    # ------------------------------------------------------------------- data

    @property
    def positions(self) -> np.ndarray:
        """Row positions of this task in the shared storage."""
        if self._positions is None:
            return np.arange(len(self._storage))
        return self._positions.copy()

    @property
    def is_window(self) -> bool:
        return self._positions is not None

    def __len__(self) -> int:
        if self._positions is None:
            return len(self._storage)
        return len(self._positions)

    @property
    def data(self) -> pd.DataFrame:
        if self._positions is None:
            return self._storage.copy()
        return self._storage.iloc[self._positions].copy()

    @property
    def index(self) -> pd.Index:
        if self._positions is None:
            return self._storage.index.copy()
        return self._storage.index[self._positions]

    @property
    def X(self) -> pd.DataFrame:
        return self.data[list(self._covariates)]

    @property
    def Y(self) -> Union[pd.Series, pd.DataFrame]:
        frame = self.data
        if len(self._outcome) == 1:
            return frame[self._outcome[0]]
        return frame[list(self._outcome)]

    @property
    def weights(self) -> pd.Series:
        if self._weights_column is None:
            return pd.Series(np.ones(len(self)), index=self.index, name='weights')
        return self.data[self._weights_column].astype(float)

    # ------------------------------------------------------------------ views

    def shares_storage(self, other: 'Task') -> bool:
        return isinstance(other, Task) and self._storage is other._storage

    def full_view(self) -> 'Task':
        return self

    def _check_fold(self, fold: Fold) -> None:
        if not isinstance(fold, Fold):
            raise InvalidTaskSpec(f"Expected a Fold, got {type(fold).__name__}")
        if fold.validation_end > len(self) or fold.train_end > len(self):
            raise InvalidTaskSpec(f"{fold!r} does not fit a task of {len(self)} rows")

    def training_view(self, fold: Fold) -> 'Task':
        self._check_fold(fold)
        return self._window(self.positions[fold.train_slice])

    def validation_view(self, fold: Fold) -> 'Task':
        self._check_fold(fold)
        return self._window(self.positions[fold.validation_slice])

    def subset(self, positions: Sequence[int]) -> 'Task':
        """Window over ``positions`` relative to this task; may repeat rows."""
        positions = np.asarray(positions, dtype=int)
        if positions.size and (positions.min() < 0 or positions.max() >= len(self)):
            raise InvalidTaskSpec(f"Subset positions out of range for a task of {len(self)} rows")
        return self._window(self.positions[positions])

    def with_folds(self, folds: Optional[FoldSet]) -> 'Task':
        if folds is not None and (not isinstance(folds, FoldSet) or folds.n != len(self)):
            raise InvalidTaskSpec("FoldSet does not match the task length")
        return self._window(self.positions, folds=folds)

    # ------------------------------------------------------------- derivation

    def next_in_chain(self, predictions: pd.DataFrame, folds: Any = KEEP_FOLDS) -> 'Task':
        """
        Derive a task whose covariates are ``predictions``.

        Outcome and weights are taken from this task's rows. The fold assignment
        is carried forward unless ``folds`` says otherwise.
        """
        if isinstance(predictions, pd.Series):
            predictions = predictions.to_frame()
        if len(predictions) != len(self):
            raise InvalidTaskSpec(
                f"Chained predictions have {len(predictions)} rows, task has {len(self)}")

        reserved = set(self._outcome)
        if self._weights_column is not None:
            reserved.add(self._weights_column)
        columns = [f"{c}_prediction" if c in reserved else c for c in predictions.columns]

        frame = pd.DataFrame(predictions.to_numpy(), index=self.index, columns=columns)
        source = self.data
        for column in self._outcome:
            frame[column] = source[column].to_numpy()
        if self._weights_column is not None:
            frame[self._weights_column] = source[self._weights_column].to_numpy()

        if folds is KEEP_FOLDS:
            folds = self._folds
        return Task(frame, covariates=columns, outcome=list(self._outcome),
                    outcome_type=self._outcome_type, weights=self._weights_column, folds=folds)

    def __repr__(self) -> str:
        kind = 'window' if self.is_window else 'full'
        folds = len(self._folds) if self._folds is not None else 0
        return (f"Task(n={len(self)}, {kind}, covariates={list(self._covariates)}, "
                f"outcome={list(self._outcome)}, type={self._outcome_type.value}, folds={folds})")
