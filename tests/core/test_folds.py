"""
Unit tests for fold generation.
"""

import unittest

import numpy as np
import pandas as pd

from ts_superlearner.core.exceptions import InvalidFoldConfiguration, SuperLearnerError
from ts_superlearner.core.folds import (
    Fold,
    FoldSet,
    FoldStrategy,
    generate_rolling_origin_folds,
    make_folds,
)


class TestRollingOrigin(unittest.TestCase):
    """Expanding-window folds."""

    def test_first_two_folds(self):
        """The first folds on 100 rows are [0,10)/[10,20) and [0,11)/[11,21)."""
        folds = make_folds(100, "rolling_origin", {
            "first_window": 10, "validation_size": 10, "gap": 0, "batch": 1})

        self.assertEqual((folds[0].train_start, folds[0].train_end), (0, 10))
        self.assertEqual((folds[0].validation_start, folds[0].validation_end), (10, 20))
        self.assertEqual((folds[1].train_start, folds[1].train_end), (0, 11))
        self.assertEqual((folds[1].validation_start, folds[1].validation_end), (11, 21))

    def test_training_windows_grow_by_batch(self):
        folds = make_folds(100, "rolling_origin", first_window=20, validation_size=5, gap=2, batch=3)
        for k, fold in enumerate(folds):
            self.assertEqual(fold.train_size, 20 + k * 3)
            self.assertEqual(fold.train_start, 0)
        for current, following in zip(folds.folds, folds.folds[1:]):
            # strict prefix
            self.assertLess(current.train_end, following.train_end)
            self.assertTrue(set(current.train_index) < set(following.train_index))

    def test_last_fold_fits_and_incomplete_fold_is_dropped(self):
        folds = make_folds(100, "rolling_origin", first_window=10, validation_size=10)
        self.assertEqual(len(folds), 81)
        self.assertEqual(folds[-1].validation_end, 100)

        folds = make_folds(100, "rolling_origin", first_window=10, validation_size=10, batch=7)
        self.assertLessEqual(folds[-1].validation_end, 100)
        self.assertGreater(folds[-1].validation_end + 7, 100)

    def test_exact_fit_yields_one_fold(self):
        folds = make_folds(25, "rolling_origin", first_window=10, validation_size=10, gap=5)
        self.assertEqual(len(folds), 1)
        self.assertEqual(folds[0].validation_end, 25)

    def test_generator_is_lazy_sequence_of_folds(self):
        folds = list(generate_rolling_origin_folds(12, first_window=10, validation_size=1))
        self.assertEqual([f.fold_id for f in folds], [0, 1])
        self.assertIsInstance(folds[0], Fold)


class TestRollingWindow(unittest.TestCase):
    """Fixed-size sliding folds."""

    def test_constant_training_size(self):
        folds = make_folds(60, "rolling_window", window_size=15, validation_size=5, gap=1, batch=4)
        self.assertGreater(len(folds), 1)
        for fold in folds:
            self.assertEqual(fold.train_size, 15)

    def test_start_advances_by_batch(self):
        folds = make_folds(60, FoldStrategy.ROLLING_WINDOW, window_size=15, validation_size=5, batch=4)
        starts = [fold.train_start for fold in folds]
        self.assertTrue(np.all(np.diff(starts) == 4))
        self.assertEqual(starts[0], 0)


class TestFoldInvariants(unittest.TestCase):
    """Properties shared by every strategy."""

    def _fold_sets(self):
        yield make_folds(80, "rolling_origin", first_window=10, validation_size=4, gap=3, batch=2)
        yield make_folds(80, "rolling_window", window_size=10, validation_size=4, gap=3, batch=2)
        yield make_folds(80, "rolling_origin", first_window=30, validation_size=7)

    def test_gap_and_disjoint(self):
        for fold_set in self._fold_sets():
            gap = fold_set.params["gap"]
            for fold in fold_set:
                self.assertEqual(fold.validation_start - fold.train_end, gap)
                self.assertEqual(fold.gap, gap)
                self.assertFalse(set(fold.train_index) & set(fold.validation_index))
                self.assertGreater(fold.validation_index.min(), fold.train_index.max())

    def test_deterministic(self):
        first = make_folds(50, "rolling_window", window_size=5, validation_size=3, batch=2)
        second = make_folds(50, "rolling_window", {"window_size": 5, "validation_size": 3, "batch": 2})
        self.assertEqual(first, second)

    def test_fold_ids_in_chronological_order(self):
        for fold_set in self._fold_sets():
            self.assertEqual([f.fold_id for f in fold_set], list(range(len(fold_set))))
            origins = [f.validation_start for f in fold_set]
            self.assertEqual(origins, sorted(origins))

    def test_length_from_sized_object(self):
        frame = pd.DataFrame({"y": np.arange(30)})
        folds = make_folds(frame, "rolling_origin", first_window=10, validation_size=5, batch=5)
        self.assertEqual(folds.n, 30)
        self.assertEqual(len(folds), 4)


class TestFoldValidation(unittest.TestCase):
    """Invalid parameter sets."""

    def test_not_enough_observations(self):
        with self.assertRaises(InvalidFoldConfiguration):
            make_folds(19, "rolling_origin", first_window=10, validation_size=10)
        with self.assertRaises(InvalidFoldConfiguration):
            make_folds(20, "rolling_window", window_size=10, validation_size=5, gap=6)

    def test_non_positive_parameters(self):
        for params in ({"first_window": 0, "validation_size": 1},
                       {"first_window": 5, "validation_size": 0},
                       {"first_window": 5, "validation_size": 1, "batch": 0},
                       {"first_window": 5, "validation_size": 1, "gap": -1}):
            with self.subTest(params=params):
                with self.assertRaises(InvalidFoldConfiguration):
                    make_folds(50, "rolling_origin", params)

    def test_unknown_and_missing_parameters(self):
        with self.assertRaises(InvalidFoldConfiguration):
            make_folds(50, "rolling_origin", window_size=5, validation_size=1)
        with self.assertRaises(InvalidFoldConfiguration):
            make_folds(50, "rolling_window", validation_size=1)

    def test_non_integer_parameters(self):
        with self.assertRaises(InvalidFoldConfiguration):
            make_folds(50, "rolling_origin", first_window=5.5, validation_size=1)
        with self.assertRaises(InvalidFoldConfiguration):
            make_folds(50, "rolling_origin", first_window=True, validation_size=1)

    def test_unknown_strategy(self):
        with self.assertRaises(InvalidFoldConfiguration):
            make_folds(50, "blocked", first_window=5, validation_size=1)

    def test_error_is_value_error_in_the_framework_hierarchy(self):
        with self.assertRaises(ValueError):
            make_folds(0, "rolling_origin", first_window=1, validation_size=1)
        with self.assertRaises(SuperLearnerError):
            make_folds(0, "rolling_origin", first_window=1, validation_size=1)


class TestFoldSet(unittest.TestCase):
    """FoldSet accessors."""

    def test_summary_and_positions(self):
        folds = make_folds(30, "rolling_origin", first_window=10, validation_size=5, batch=5)
        summary = folds.summary()
        self.assertEqual(list(summary['train_size']), [10, 15, 20, 25])
        self.assertEqual(list(summary['validation_start']), [10, 15, 20, 25])
        np.testing.assert_array_equal(folds.validation_positions(), np.arange(10, 30))

    def test_immutable(self):
        folds = make_folds(30, "rolling_origin", first_window=10, validation_size=5)
        with self.assertRaises(Exception):
            folds.n = 10
        with self.assertRaises(Exception):
            folds[0].train_end = 3
        self.assertIsInstance(folds, FoldSet)


if __name__ == '__main__':
    unittest.main()
