"""
Thread-parallel execution of independent training/prediction jobs.

Results always come back in submission order, so callers can merge them
deterministically (construction order for stacks, fold order for CV).
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, TypeVar

import psutil
from joblib import Parallel, delayed

logger = logging.getLogger(__name__)

T = TypeVar('T')
R = TypeVar('R')


def resolve_n_jobs(n_jobs: Optional[int]) -> int:
    """Translate a joblib-style ``n_jobs`` into a concrete worker count."""
    if n_jobs is None:
        return 1
    if n_jobs == 0:
        raise ValueError("n_jobs must be non-zero")
    if n_jobs < 0:
        cores = psutil.cpu_count(logical=False) or psutil.cpu_count(logical=True) or 1
        return max(1, cores + 1 + n_jobs)
    return int(n_jobs)


def run_parallel(func: Callable[[T], R], items: Sequence[T], n_jobs: Optional[int] = 1) -> List[R]:
    """
    Apply ``func`` to every item, optionally on a thread pool.

    Exceptions raised by any job propagate unchanged to the caller.
    """
    workers = resolve_n_jobs(n_jobs)
    if workers == 1 or len(items) <= 1:
        return [func(item) for item in items]

    logger.debug(f"Running {len(items)} jobs on {workers} threads")
    # Threads avoid pickling learners and tasks; the heavy lifting releases the GIL in numpy/scipy
    return Parallel(n_jobs=workers, backend="threading", verbose=0)(
        delayed(func)(item) for item in items
    )
