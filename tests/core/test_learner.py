"""
Unit tests for the Learner/Fit contract.
"""

import unittest

import numpy as np
import pandas as pd

from ts_superlearner.core.exceptions import InvalidTaskSpec, NotTrainedError, TrainingFailure
from ts_superlearner.core.learner import Fit, Learner, chain, predict
from ts_superlearner.core.task import Task


class SlopeLearner(Learner):
    """Least-squares slope through the origin on the first covariate."""

    def _train(self, task):
        x = task.X.iloc[:, 0].to_numpy()
        y = task.Y.to_numpy()
        return float(x @ y / (x @ x))

    def _predict(self, fit, task):
        return fit.artifacts * task.X.iloc[:, 0].to_numpy()


class BrokenLearner(Learner):
    def _train(self, task):
        raise np.linalg.LinAlgError("singular matrix")

    def _predict(self, fit, task):
        return np.zeros(len(task))


def _task(n=30):
    x = np.arange(1, n + 1, dtype=float)
    df = pd.DataFrame({'x': x, 'y': 3.0 * x})
    return Task(df, covariates=['x'], outcome='y')


class TestLearnerContract(unittest.TestCase):

    def test_train_returns_new_fit(self):
        learner = SlopeLearner(name='slope')
        task = _task()
        fit = learner.train(task)

        self.assertIsInstance(fit, Fit)
        self.assertTrue(fit.is_trained)
        self.assertFalse(learner.is_trained)
        self.assertIs(fit.learner, learner)
        self.assertIs(fit.training_task, task)
        self.assertAlmostEqual(fit.artifacts, 3.0)

    def test_predict_defaults_to_training_task(self):
        task = _task()
        fit = SlopeLearner(name='slope').train(task)
        prediction = fit.predict()

        self.assertEqual(list(prediction.columns), ['slope'])
        self.assertEqual(len(prediction), len(task))
        np.testing.assert_allclose(prediction['slope'].to_numpy(), task.Y.to_numpy())
        pd.testing.assert_frame_equal(predict(fit), prediction)

    def test_predict_on_other_task(self):
        fit = SlopeLearner().train(_task())
        other = _task(5)
        np.testing.assert_allclose(fit.predict(other).iloc[:, 0].to_numpy(), 3.0 * np.arange(1, 6))
        with self.assertRaises(InvalidTaskSpec):
            fit.predict(pd.DataFrame({'x': [1.0]}))

    def test_untrained_learner_cannot_predict_or_chain(self):
        learner = SlopeLearner()
        with self.assertRaises(NotTrainedError):
            learner.predict(_task())
        with self.assertRaises(NotTrainedError):
            chain(learner)
        with self.assertRaises(RuntimeError):
            predict(learner)

    def test_chain_carries_outcome_and_folds(self):
        task = _task()
        fit = SlopeLearner(name='slope').train(task)
        chained = fit.chain()
        self.assertEqual(chained.covariates, ['slope'])
        np.testing.assert_allclose(chained.Y.to_numpy(), task.Y.to_numpy())
        self.assertEqual(len(chained), len(task))

    def test_training_failure_is_wrapped(self):
        with self.assertRaises(TrainingFailure) as ctx:
            BrokenLearner(name='broken').train(_task())
        self.assertEqual(ctx.exception.learner_name, 'broken')
        self.assertIsInstance(ctx.exception.__cause__, np.linalg.LinAlgError)

    def test_train_requires_task(self):
        with self.assertRaises(InvalidTaskSpec):
            SlopeLearner().train(pd.DataFrame({'x': [1.0]}))

    def test_retraining_does_not_change_earlier_fit(self):
        learner = SlopeLearner()
        first = learner.train(_task())
        df = pd.DataFrame({'x': [1.0, 2.0], 'y': [5.0, 10.0]})
        second = learner.train(Task(df, covariates='x', outcome='y'))
        self.assertAlmostEqual(first.artifacts, 3.0)
        self.assertAlmostEqual(second.artifacts, 5.0)

    def test_params_and_clone(self):
        learner = SlopeLearner(name='slope', alpha=0.5)
        self.assertEqual(learner.get_params(), {'alpha': 0.5})
        copy = learner.clone()
        self.assertIsNot(copy, learner)
        self.assertEqual(copy.name, 'slope')
        self.assertEqual(copy.get_params(), learner.get_params())

    def test_default_name_is_class_name(self):
        self.assertEqual(SlopeLearner().name, 'SlopeLearner')


if __name__ == '__main__':
    unittest.main()
