"""
Feature builders shared by both reports.

All transforms are deterministic: no randomness, and missing values
propagate as NaN rather than raising.

- Hour-of-week index (Monday 00:00 = 0, Sunday 23:00 = 167)
- Fourier (sine/cosine) terms at fixed periods for cyclical patterns
- Per-capita rates
- Standardized (z) scores
"""

from __future__ import annotations

from typing import Iterable, Tuple

import numpy as np
import pandas as pd
from scipy import stats

from .config import HOURS_PER_DAY


def hour_of_week(timestamps: pd.Series) -> pd.Series:
    """
    Map timestamps to an hour-of-week bucket in [0, 167].

    Monday 00:00-00:59 is bucket 0; Sunday 23:00-23:59 is bucket 167.
    """
    ts = pd.to_datetime(timestamps)
    how = ts.dt.dayofweek * HOURS_PER_DAY + ts.dt.hour
    return how.rename("hour_of_week")


def fourier_terms(index: pd.Series | np.ndarray, period: float, harmonics: int) -> pd.DataFrame:
    """
    Sine/cosine terms of `index` at `period` for harmonics 1..`harmonics`.

    Parameters
    ----------
    index : array-like
        Position within the cycle (e.g. hour of week).
    period : float
        Cycle length in the same units as `index`.
    harmonics : int
        Number of harmonics; each contributes one sin and one cos column.

    Returns
    -------
    DataFrame
        Columns `sin_{period}_{k}` and `cos_{period}_{k}`, aligned to `index`.
    """
    if period <= 0:
        raise ValueError("period must be positive")
    if harmonics < 1:
        raise ValueError("harmonics must be >= 1")

    values = np.asarray(index, dtype=float)
    out_index = index.index if isinstance(index, pd.Series) else None
    cols = {}
    for k in range(1, harmonics + 1):
        angle = 2.0 * np.pi * k * values / period
        cols[f"sin_{period:g}_{k}"] = np.sin(angle)
        cols[f"cos_{period:g}_{k}"] = np.cos(angle)
    return pd.DataFrame(cols, index=out_index)


def fourier_design(index: pd.Series | np.ndarray, periods: Iterable[Tuple[float, int]]) -> pd.DataFrame:
    """Concatenate Fourier terms for several (period, harmonics) pairs."""
    frames = [fourier_terms(index, period, harmonics) for period, harmonics in periods]
    if not frames:
        raise ValueError("periods must contain at least one (period, harmonics) pair")
    return pd.concat(frames, axis=1)


def per_capita(count: pd.Series, population: pd.Series, per: float = 1_000_000) -> pd.Series:
    """
    Count normalised by population, scaled to `per` people.

    A population of zero yields NaN instead of inf.
    """
    pop = population.astype(float).where(population > 0)
    return count.astype(float) * per / pop


def standardize(series: pd.Series) -> pd.Series:
    """
    Z-score with sample standard deviation (ddof=1).

    NaN entries are ignored when computing the mean/std and stay NaN.
    """
    z = stats.zscore(series.astype(float).to_numpy(), ddof=1, nan_policy="omit")
    return pd.Series(z, index=series.index, name=f"{series.name}_z" if series.name else None)
