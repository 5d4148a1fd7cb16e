"""
Unit tests for cross-validated learners and risk estimation.
"""

import unittest

import numpy as np
import pandas as pd
from sklearn.linear_model import LinearRegression

from ts_superlearner.core.cv_learner import CVFit, CVLearner
from ts_superlearner.core.exceptions import InvalidTaskSpec, TrainingFailure
from ts_superlearner.core.folds import make_folds
from ts_superlearner.core.losses import absolute_error, get_loss, squared_error
from ts_superlearner.core.pipeline import Pipeline
from ts_superlearner.core.stack import Stack
from ts_superlearner.core.task import Task
from ts_superlearner.models.arima_model import ARIMALearner
from ts_superlearner.models.mean_model import MeanLearner
from ts_superlearner.models.sklearn_model import SklearnLearner


def _series_df(n=60, seed=11):
    rng = np.random.default_rng(seed)
    x = rng.normal(size=n)
    return pd.DataFrame({
        'x': x,
        'trend': np.arange(n, dtype=float),
        'y': 1.5 * x + 0.05 * np.arange(n) + rng.normal(scale=0.3, size=n),
        'w': rng.uniform(0.5, 2.0, size=n),
    }, index=pd.date_range('2022-01-01', periods=n, freq='D'))


def _stack():
    return Stack(MeanLearner(name='mean'), SklearnLearner(LinearRegression(), name='lm'))


class TestCVLearnerTraining(unittest.TestCase):

    def setUp(self):
        self.folds = make_folds(60, 'rolling_origin', first_window=30, validation_size=5, gap=1, batch=5)
        self.task = Task(_series_df(), covariates=['x', 'trend'], outcome='y', folds=self.folds)

    def test_one_private_fit_per_fold(self):
        stack = _stack()
        fit = CVLearner(stack).train(self.task)

        self.assertIsInstance(fit, CVFit)
        self.assertEqual(len(fit.fold_fits), len(self.folds))
        self.assertFalse(stack.is_trained)
        for fold, fold_fit in zip(self.folds, fit.fold_fits):
            self.assertEqual(len(fold_fit.training_task), fold.train_size)
            np.testing.assert_array_equal(fold_fit.training_task.positions, fold.train_index)
            self.assertIsNot(fold_fit.learner, stack)

    def test_default_name(self):
        self.assertEqual(CVLearner(_stack()).name, 'CV_Stack')
        self.assertEqual(CVLearner(MeanLearner(), name='cv').name, 'cv')

    def test_out_of_fold_predictions(self):
        fit = CVLearner(_stack()).train(self.task)
        prediction = fit.predict()

        expected_rows = sum(fold.validation_size for fold in self.folds)
        self.assertEqual(len(prediction), expected_rows)
        self.assertFalse(prediction.index.duplicated().any())
        self.assertEqual(list(prediction.columns), ['mean', 'lm'])
        np.testing.assert_array_equal(prediction.index.to_numpy(),
                                      self.task.index[self.folds.validation_positions()].to_numpy())

        # The mean member of fold k predicts the mean of fold k's training window
        y = self.task.Y.to_numpy()
        for fold in self.folds:
            rows = prediction.iloc[fold.fold_id * 5:(fold.fold_id + 1) * 5]
            np.testing.assert_allclose(rows['mean'].to_numpy(), y[fold.train_slice].mean())

    def test_parallel_folds_match_sequential(self):
        sequential = CVLearner(_stack(), n_jobs=1).train(self.task).predict()
        threaded = CVLearner(_stack(), n_jobs=4).train(self.task).predict()
        pd.testing.assert_frame_equal(sequential, threaded)

    def test_chain_builds_meta_task(self):
        fit = CVLearner(_stack()).train(self.task)
        meta = fit.chain()
        positions = self.folds.validation_positions()

        self.assertEqual(meta.covariates, ['mean', 'lm'])
        self.assertEqual(len(meta), len(positions))
        np.testing.assert_allclose(meta.Y.to_numpy(), self.task.Y.to_numpy()[positions])
        self.assertIsNone(meta.folds)

    def test_requires_folds(self):
        with self.assertRaises(InvalidTaskSpec):
            CVLearner(_stack()).train(self.task.with_folds(None))

    def test_requires_untrained_learner(self):
        fitted = MeanLearner().train(self.task)
        with self.assertRaises(TypeError):
            CVLearner(fitted)
        with self.assertRaises(ValueError):
            CVLearner(Pipeline(fitted))

    def test_fold_failure_propagates(self):
        short = make_folds(60, 'rolling_origin', first_window=1, validation_size=5, batch=10)
        task = Task(_series_df(), covariates=['x', 'trend'], outcome='y', folds=short)
        with self.assertRaises(TrainingFailure):
            CVLearner(ARIMALearner(order=(2, 0, 0))).train(task)


class TestCVRisk(unittest.TestCase):

    def setUp(self):
        self.folds = make_folds(60, 'rolling_origin', first_window=30, validation_size=5, batch=5)
        self.task = Task(_series_df(), covariates=['x', 'trend'], outcome='y', folds=self.folds)
        self.fit = CVLearner(_stack()).train(self.task)

    def _hand_risk(self, loss_fn):
        """Refit every fold independently and average the loss over held-out rows."""
        losses = {'mean': [], 'lm': []}
        data = self.task.data
        for fold in self.folds:
            train = data.iloc[fold.train_slice]
            valid = data.iloc[fold.validation_slice]
            mean_prediction = np.full(len(valid), train['y'].mean())
            lm = LinearRegression().fit(train[['x', 'trend']], train['y'])
            lm_prediction = lm.predict(valid[['x', 'trend']])
            losses['mean'].append(loss_fn(mean_prediction, valid['y'].to_numpy()))
            losses['lm'].append(loss_fn(lm_prediction, valid['y'].to_numpy()))
        return {name: float(np.mean(np.concatenate(values)))
                for name, values in losses.items()}

    def test_cv_risk_matches_hand_computation(self):
        risk = self.fit.cv_risk(squared_error)
        expected = self._hand_risk(squared_error)
        self.assertEqual(list(risk), ['mean', 'lm'])
        for name in expected:
            self.assertAlmostEqual(risk[name], expected[name], places=10)

    def test_cv_risk_other_loss(self):
        risk = self.fit.cv_risk(get_loss('mae'))
        expected = self._hand_risk(absolute_error)
        for name in expected:
            self.assertAlmostEqual(risk[name], expected[name], places=10)

    def test_weighted_cv_risk(self):
        task = Task(_series_df(), covariates=['x', 'trend'], outcome='y', weights='w', folds=self.folds)
        fit = CVLearner(_stack()).train(task)
        risk = fit.cv_risk(squared_error)
        # Weighted least squares changes the lm fit, so only the mean member has a simple hand value
        data = task.data
        losses, weights = [], []
        for fold in self.folds:
            train = data.iloc[fold.train_slice]
            valid = data.iloc[fold.validation_slice]
            mean = np.average(train['y'], weights=train['w'])
            losses.append((valid['y'].to_numpy() - mean) ** 2)
            weights.append(valid['w'].to_numpy())
        expected = np.average(np.concatenate(losses), weights=np.concatenate(weights))
        self.assertAlmostEqual(risk['mean'], expected, places=10)

    def test_standard_error(self):
        losses = (self.fit.predict()['mean'].to_numpy() - self.fit.validation_task().Y.to_numpy()) ** 2
        table = self.fit.cv_risk_table(squared_error).set_index('learner')
        self.assertAlmostEqual(table.loc['mean', 'se'], np.std(losses, ddof=1) / np.sqrt(len(losses)), places=10)

    def test_weighted_standard_error(self):
        task = Task(_series_df(), covariates=['x', 'trend'], outcome='y', weights='w', folds=self.folds)
        fit = CVLearner(_stack()).train(task)
        validation = fit.validation_task()
        losses = (fit.predict()['mean'].to_numpy() - validation.Y.to_numpy()) ** 2
        w = validation.weights.to_numpy()
        p = w / w.sum()
        risk = np.sum(p * losses)
        n = len(losses)
        expected = np.sqrt(n / (n - 1) * np.sum(p ** 2 * (losses - risk) ** 2))

        table = fit.cv_risk_table(squared_error).set_index('learner')
        self.assertAlmostEqual(table.loc['mean', 'risk'], risk, places=10)
        self.assertAlmostEqual(table.loc['mean', 'se'], expected, places=10)
        self.assertNotAlmostEqual(expected, np.std(losses, ddof=1) / np.sqrt(n), places=6)

    def test_risk_by_fold_and_table(self):
        by_fold = self.fit.cv_risk_by_fold(squared_error)
        self.assertEqual(list(by_fold.index), [fold.fold_id for fold in self.folds])
        self.assertEqual(list(by_fold.columns), ['mean', 'lm'])
        # Equal-sized folds: the overall risk is the mean of the fold risks
        overall = self.fit.cv_risk(squared_error)
        for name in overall:
            self.assertAlmostEqual(by_fold[name].mean(), overall[name], places=10)

        table = self.fit.cv_risk_table(squared_error)
        self.assertEqual(list(table['learner']), ['mean', 'lm'])
        self.assertTrue((table['se'] > 0).all())
        self.assertTrue((table['fold_min_risk'] <= table['risk']).all())
        self.assertTrue((table['fold_max_risk'] >= table['risk']).all())

    def test_single_learner_risk(self):
        fit = CVLearner(MeanLearner(name='mean')).train(self.task)
        risk = fit.cv_risk(squared_error)
        self.assertEqual(list(risk), ['mean'])
        self.assertAlmostEqual(risk['mean'], self._hand_risk(squared_error)['mean'], places=10)

    def test_predict_mismatched_task(self):
        other = Task(_series_df(n=40), covariates=['x', 'trend'], outcome='y')
        with self.assertRaises(InvalidTaskSpec):
            self.fit.predict(other)


if __name__ == '__main__':
    unittest.main()
