"""
Processing utilities for the NYPD Shooting Incident Data (Historic).

This module:
- Loads the raw CSV cached under `eda_reports_data/raw/`.
- Parses `OCCUR_DATE` (MM/DD/YYYY) and `OCCUR_TIME` (HH:MM:SS) into a single
  timestamp and derives calendar fields.
- Collapses victim-level rows into incidents (`INCIDENT_KEY`).
- Reshapes incidents into the tables the report plots and models:
  * 168 hour-of-week buckets with counts and average weekly rates,
  * day-of-week x hour and borough x hour count matrices,
  * incidents per year.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd

from .config import HOURS_PER_DAY, HOURS_PER_WEEK
from .download_data import cached_path
from .features import hour_of_week

REQUIRED_COLUMNS = ["INCIDENT_KEY", "OCCUR_DATE", "OCCUR_TIME", "BORO"]

DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def load_shootings(path: Optional[Path] = None) -> pd.DataFrame:
    """
    Read the raw shooting incident CSV.

    Parameters
    ----------
    path : Path, optional
        CSV path; defaults to the cached download under RAW_DIR.
    """
    if path is None:
        path = cached_path("shootings")
    df = pd.read_csv(path, dtype={"INCIDENT_KEY": str, "OCCUR_DATE": str, "OCCUR_TIME": str})
    print(f"  Loaded {len(df):,} shooting victim rows from {path}")
    return df


def _check_columns(df: pd.DataFrame) -> None:
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Shooting data is missing required columns: {missing}")


def clean_incidents(df: pd.DataFrame, dedupe: bool = True) -> pd.DataFrame:
    """
    Parse timestamps and derive calendar fields.

    Parameters
    ----------
    df : DataFrame
        Raw NYPD rows (one per victim).
    dedupe : bool, default True
        If True, keep the first row per `INCIDENT_KEY` so each shooting is
        counted once regardless of how many victims it had.

    Returns
    -------
    DataFrame
        Columns: INCIDENT_KEY, BORO, occurred_at, year, day_of_week (Mon=0),
        hour, hour_of_week.
    """
    _check_columns(df)

    out = df[REQUIRED_COLUMNS].copy()
    if dedupe:
        before = len(out)
        out = out.drop_duplicates(subset="INCIDENT_KEY", keep="first")
        print(f"  Collapsed {before:,} victim rows into {len(out):,} incidents")

    # Malformed dates/times are fatal: to_datetime raises on the first bad row.
    out["occurred_at"] = pd.to_datetime(
        out["OCCUR_DATE"].str.strip() + " " + out["OCCUR_TIME"].str.strip(),
        format="%m/%d/%Y %H:%M:%S",
    )
    out["BORO"] = out["BORO"].str.strip().str.title()
    out["year"] = out["occurred_at"].dt.year
    out["day_of_week"] = out["occurred_at"].dt.dayofweek
    out["hour"] = out["occurred_at"].dt.hour
    out["hour_of_week"] = hour_of_week(out["occurred_at"])

    out = out.drop(columns=["OCCUR_DATE", "OCCUR_TIME"])
    return out.sort_values("occurred_at").reset_index(drop=True)


def weeks_covered(incidents: pd.DataFrame) -> float:
    """
    Number of weeks spanned by the data: (last day - first day + 1) / 7.
    """
    if incidents.empty:
        raise ValueError("No incidents to measure a time span from")
    days = incidents["occurred_at"].dt.normalize()
    n_days = (days.max() - days.min()).days + 1
    return n_days / 7.0


def hour_of_week_counts(incidents: pd.DataFrame) -> pd.DataFrame:
    """
    Count incidents per hour-of-week bucket.

    Returns
    -------
    DataFrame
        Exactly 168 rows indexed by `hour_of_week` (0..167) with columns:
        - count : incidents in the bucket (0 for empty buckets)
        - rate_per_week : count / weeks covered (average incidents in that
          hour of a typical week)
        - day_of_week, hour : bucket decomposition
    """
    counts = (
        incidents["hour_of_week"]
        .value_counts()
        .reindex(range(HOURS_PER_WEEK), fill_value=0)
        .sort_index()
        .astype(int)
    )
    counts.index.name = "hour_of_week"

    out = counts.rename("count").to_frame()
    out["rate_per_week"] = out["count"] / weeks_covered(incidents)
    out["day_of_week"] = out.index // HOURS_PER_DAY
    out["hour"] = out.index % HOURS_PER_DAY
    return out


def day_hour_matrix(incidents: pd.DataFrame) -> pd.DataFrame:
    """7 x 24 incident counts: rows Mon..Sun, columns hour 0..23."""
    mat = pd.crosstab(incidents["day_of_week"], incidents["hour"])
    mat = mat.reindex(index=range(7), columns=range(HOURS_PER_DAY), fill_value=0)
    mat.index = pd.Index(DAY_NAMES, name="day_of_week")
    mat.columns.name = "hour"
    return mat


def borough_hour_matrix(incidents: pd.DataFrame) -> pd.DataFrame:
    """Borough x 24 incident counts, boroughs sorted by total descending."""
    mat = pd.pivot_table(
        incidents,
        index="BORO",
        columns="hour",
        values="INCIDENT_KEY",
        aggfunc="count",
        fill_value=0,
    )
    mat = mat.reindex(columns=range(HOURS_PER_DAY), fill_value=0)
    order = mat.sum(axis=1).sort_values(ascending=False).index
    return mat.loc[order]


def yearly_counts(incidents: pd.DataFrame) -> pd.Series:
    """Incidents per calendar year."""
    return incidents.groupby("year").size().rename("count")


def bucket_label(how: int) -> str:
    """Human-readable label for an hour-of-week bucket, e.g. 'Sat 02:00'."""
    how = int(how) % HOURS_PER_WEEK
    return f"{DAY_NAMES[how // HOURS_PER_DAY]} {how % HOURS_PER_DAY:02d}:00"


def day_boundaries() -> np.ndarray:
    """Hour-of-week positions where each day starts (for plot gridlines)."""
    return np.arange(0, HOURS_PER_WEEK + 1, HOURS_PER_DAY)
