from __future__ import annotations

from typing import Optional

import numpy as np
import pandas as pd

from ..core.folds import make_folds
from ..core.task import Task


def load_demo_series(n: int = 200, seed: int = 1337, phi: float = 0.6, level: float = 10.0) -> pd.DataFrame:
    """Return a small deterministic autoregressive series with weekly seasonality.

    Columns:
        y: outcome, AR(1) around ``level`` plus a weekly cycle
        y_lag1: previous value of y (covariate)
        time: observation number (covariate)
        season: weekly sine component (covariate)
    """
    rng = np.random.default_rng(seed)
    t = np.arange(n + 1)
    season = np.sin(2 * np.pi * t / 7.0)
    noise = rng.normal(loc=0.0, scale=0.5, size=n + 1)

    y = np.empty(n + 1)
    y[0] = level
    for i in range(1, n + 1):
        y[i] = level + phi * (y[i - 1] - level) + season[i] + noise[i]

    idx = pd.date_range("2020-01-01", periods=n + 1, freq="D")
    df = pd.DataFrame({
        "y": y,
        "y_lag1": np.r_[np.nan, y[:-1]],
        "time": t.astype(float),
        "season": season,
    }, index=idx)
    # First row has no lag
    return df.iloc[1:].copy()


def load_demo_task(n: int = 200, seed: int = 1337, first_window: Optional[int] = None,
                   validation_size: int = 10, gap: int = 0, batch: Optional[int] = None) -> Task:
    """Demo series bound to a rolling-origin task.

    Defaults: the first window is half the series and the origin advances by a
    full validation window, so validation windows do not overlap.
    """
    df = load_demo_series(n=n, seed=seed)
    first_window = first_window if first_window is not None else n // 2
    batch = batch if batch is not None else validation_size
    folds = make_folds(len(df), "rolling_origin", first_window=first_window,
                       validation_size=validation_size, gap=gap, batch=batch)
    return Task(df, covariates=["y_lag1", "time", "season"], outcome="y",
                outcome_type="continuous", folds=folds)
