"""
Cross-validated wrapping of a learner.

A CVLearner trains one private copy of the wrapped learner per fold, on that
fold's training window only, and predicts each fold's validation window with
the matching copy. The resulting out-of-fold predictions never come from a
model that saw the rows being predicted, which makes them suitable both for
risk estimation and as training data for a metalearner.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from .exceptions import InvalidTaskSpec
from .folds import FoldSet
from .learner import Fit, Learner
from .losses import LossFunction, row_losses, weighted_risk, weighted_standard_error
from .parallel import run_parallel
from .stack import Stack
from .task import Task

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CVArtifacts:
    folds: FoldSet
    fold_fits: Tuple[Fit, ...]


class CVFit(Fit):
    """Fit of a CVLearner: one private fit per fold plus risk estimation."""

    @property
    def folds(self) -> FoldSet:
        return self.artifacts.folds

    @property
    def fold_fits(self) -> Tuple[Fit, ...]:
        return self.artifacts.fold_fits

    def folds_for(self, task: Optional[Task] = None) -> FoldSet:
        """FoldSet used to predict ``task``; must line up with the fold fits."""
        task = self._resolve_task(task)
        folds = task.folds
        if folds is None:
            if len(task) != self.folds.n:
                raise InvalidTaskSpec(
                    f"Task of {len(task)} rows has no folds and does not match the training folds (n={self.folds.n})")
            folds = self.folds
        if len(folds) != len(self.fold_fits):
            raise InvalidTaskSpec(f"Task carries {len(folds)} folds but {self.name} was trained on {len(self.fold_fits)}")
        return folds

    def fold_ids(self, task: Optional[Task] = None) -> np.ndarray:
        """Fold id of every out-of-fold prediction row."""
        folds = self.folds_for(task)
        if not len(folds):
            return np.array([], dtype=int)
        return np.concatenate([np.full(fold.validation_size, fold.fold_id) for fold in folds])

    def validation_task(self, task: Optional[Task] = None) -> Task:
        """Validation rows of every fold, in fold order."""
        task = self._resolve_task(task)
        return task.subset(self.folds_for(task).validation_positions())

    # ------------------------------------------------------------------ risk

    def _member_blocks(self, predictions: pd.DataFrame) -> Dict[str, List]:
        learner = self.learner.wrapped
        if isinstance(learner, Stack):
            return learner.member_columns(predictions.columns)
        return {learner.name: list(predictions.columns)}

    def _row_losses(self, loss_fn: LossFunction) -> Tuple[Dict[str, np.ndarray], np.ndarray, np.ndarray]:
        predictions = self.predict()
        validation = self.validation_task()
        observed = validation.Y.to_numpy()
        weights = validation.weights.to_numpy()
        losses = {}
        for learner_id, columns in self._member_blocks(predictions).items():
            block = predictions[columns].to_numpy()
            if block.shape[1] == 1:
                block = block[:, 0]
            losses[learner_id] = row_losses(loss_fn, block, observed)
        return losses, weights, self.fold_ids()

    def cv_risk(self, loss_fn: LossFunction) -> Dict[str, float]:
        """
        Out-of-fold risk per learner.

        Args:
            loss_fn: Elementwise loss ``(prediction, observed) -> losses``

        Returns:
            Mapping of learner id to weighted mean validation loss
        """
        losses, weights, _ = self._row_losses(loss_fn)
        return {learner_id: weighted_risk(values, weights) for learner_id, values in losses.items()}

    def cv_risk_by_fold(self, loss_fn: LossFunction) -> pd.DataFrame:
        """Validation risk per fold (rows) and learner (columns)."""
        predictions = self.predict()
        validation = self.validation_task()
        observed = validation.Y.to_numpy()
        weights = validation.weights.to_numpy()
        fold_ids = self.fold_ids()
        blocks = self._member_blocks(predictions)

        rows = {}
        for fold in self.folds:
            mask = fold_ids == fold.fold_id
            row = {}
            for learner_id, columns in blocks.items():
                block = predictions[columns].to_numpy()[mask]
                if block.shape[1] == 1:
                    block = block[:, 0]
                row[learner_id] = weighted_risk(row_losses(loss_fn, block, observed[mask]), weights[mask])
            rows[fold.fold_id] = row
        frame = pd.DataFrame.from_dict(rows, orient='index', columns=list(blocks))
        frame.index.name = 'fold_id'
        return frame

    def cv_risk_table(self, loss_fn: LossFunction) -> pd.DataFrame:
        """Risk summary per learner: overall risk, its standard error and fold spread."""
        losses, weights, _ = self._row_losses(loss_fn)
        by_fold = self.cv_risk_by_fold(loss_fn)
        records = []
        for learner_id, values in losses.items():
            fold_risks = by_fold[learner_id].to_numpy()
            records.append({
                'learner': learner_id,
                'risk': weighted_risk(values, weights),
                'se': weighted_standard_error(values, weights),
                'fold_sd': float(np.std(fold_risks, ddof=1)) if len(fold_risks) > 1 else float('nan'),
                'fold_min_risk': float(np.min(fold_risks)),
                'fold_max_risk': float(np.max(fold_risks)),
            })
        return pd.DataFrame.from_records(
            records, columns=['learner', 'risk', 'se', 'fold_sd', 'fold_min_risk', 'fold_max_risk'])


class CVLearner(Learner):
    """
    Cross-validated wrapper producing out-of-fold predictions.

    Args:
        learner: Untrained learner to cross-validate (commonly a Stack)
        name: Learner id; defaults to ``CV_<wrapped name>``
        n_jobs: Number of threads used to train/predict folds
    """

    fit_class = CVFit

    def __init__(self, learner: Learner, name: Optional[str] = None, n_jobs: Optional[int] = 1):
        if not isinstance(learner, Learner):
            raise TypeError(f"CVLearner wraps a learner, got {type(learner).__name__}")
        if learner.is_trained:
            raise ValueError("CVLearner needs an untrained learner to copy into each fold")
        super().__init__(name=name or f"CV_{learner.name}", n_jobs=n_jobs)
        self.n_jobs = n_jobs
        self._wrapped = learner

    @property
    def wrapped(self) -> Learner:
        return self._wrapped

    def _train(self, task: Task) -> CVArtifacts:
        folds = task.folds
        if folds is None or not len(folds):
            raise InvalidTaskSpec(f"{self.name} requires a task with a non-empty FoldSet")

        def train_fold(fold):
            logger.debug(f"{self.name}: fold {fold.fold_id} training on {fold.train_size} rows")
            return self._wrapped.clone().train(task.training_view(fold))

        fold_fits = run_parallel(train_fold, list(folds), self.n_jobs)
        logger.info(f"{self.name}: trained {len(fold_fits)} fold fits on {len(task)} rows")
        return CVArtifacts(folds=folds, fold_fits=tuple(fold_fits))

    def _predict(self, fit: CVFit, task: Task) -> pd.DataFrame:
        folds = fit.folds_for(task)
        pairs = list(zip(folds, fit.fold_fits))
        predictions = run_parallel(
            lambda pair: pair[1].predict(task.validation_view(pair[0])), pairs, self.n_jobs)
        return pd.concat(predictions, axis=0)

    def _chain(self, fit: CVFit, task: Task) -> Task:
        predictions = fit.predict(task)
        # Rows differ from the input task, so its folds no longer apply
        return fit.validation_task(task).next_in_chain(predictions, folds=None)
