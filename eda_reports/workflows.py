"""
Report-level workflow entry points.

Design goal: keep the run scripts to descriptive function calls, with
reshaping, feature building and model fitting delegated to module code.
Each workflow takes already-loaded DataFrames (so it can be exercised on
synthetic data) and returns a dict with:
- inputs: sample metadata
- tables: reshaped tables used by plots and the report
- models: OlsFit objects
- plot_data: arrays ready for plotting
- diagnostics: join / comparison diagnostics
"""

from __future__ import annotations

from typing import Any, Optional

import numpy as np
import pandas as pd

from .config import CASES_PER, DAILY_FOURIER, DEATHS_PER, HOURS_PER_WEEK, WEEKLY_FOURIER
from .features import fourier_design, fourier_terms, per_capita, standardize
from .process_covid import (
    county_snapshot,
    join_rucc,
    state_daily_series,
    state_rurality,
    state_totals,
)
from .process_shootings import (
    borough_hour_matrix,
    bucket_label,
    clean_incidents,
    day_hour_matrix,
    hour_of_week_counts,
    weeks_covered,
    yearly_counts,
)
from .regression import compare_nested, fit_ols, predict_curve


def run_shooting_analysis(
    raw: pd.DataFrame,
    dedupe: bool = True,
    daily: tuple[int, int] = DAILY_FOURIER,
    weekly: tuple[int, int] = WEEKLY_FOURIER,
) -> dict[str, Any]:
    """
    NYPD shootings: hour-of-week pattern with Fourier regressions.

    Two nested models on the 168 hour-of-week buckets, response
    `rate_per_week`:
    - daily: Fourier terms with a 24h period only
    - daily_weekly: 24h terms plus 168h terms (weekday/weekend shape)
    """
    if raw.empty:
        raise ValueError("Shooting data is empty")

    incidents = clean_incidents(raw, dedupe=dedupe)
    buckets = hour_of_week_counts(incidents)

    daily_terms = fourier_terms(buckets.index.to_series(), *daily)
    weekly_terms = fourier_terms(buckets.index.to_series(), *weekly)
    design = pd.concat([buckets, daily_terms, weekly_terms], axis=1)

    daily_fit = fit_ols(design, "rate_per_week", list(daily_terms.columns), name="daily")
    full_fit = fit_ols(
        design,
        "rate_per_week",
        list(daily_terms.columns) + list(weekly_terms.columns),
        name="daily_weekly",
    )
    comparison = compare_nested(daily_fit, full_fit)

    # Smooth curve on a fine grid for plotting.
    grid = pd.Series(np.linspace(0, HOURS_PER_WEEK, 4 * HOURS_PER_WEEK + 1), name="hour_of_week")
    grid_design = fourier_design(grid, [daily, weekly])
    grid_design.index = grid.values

    observed_peak = int(buckets["rate_per_week"].idxmax())
    fitted_peak = int(full_fit.fitted.idxmax())
    fitted_trough = int(full_fit.fitted.idxmin())

    return {
        "inputs": {
            "start": incidents["occurred_at"].min().strftime("%Y-%m-%d"),
            "end": incidents["occurred_at"].max().strftime("%Y-%m-%d"),
            "n_rows": int(len(raw)),
            "n_incidents": int(len(incidents)),
            "n_weeks": float(weeks_covered(incidents)),
            "deduplicated": dedupe,
        },
        "tables": {
            "buckets": design,
            "day_hour": day_hour_matrix(incidents),
            "borough_hour": borough_hour_matrix(incidents),
            "yearly": yearly_counts(incidents),
        },
        "models": {"daily": daily_fit, "daily_weekly": full_fit},
        "plot_data": {
            "grid": grid.values,
            "curves": {
                "daily": predict_curve(daily_fit, grid_design).values,
                "daily_weekly": predict_curve(full_fit, grid_design).values,
            },
        },
        "diagnostics": {
            "comparison": comparison,
            "observed_peak": observed_peak,
            "observed_peak_label": bucket_label(observed_peak),
            "fitted_peak": fitted_peak,
            "fitted_peak_label": bucket_label(fitted_peak),
            "fitted_trough": fitted_trough,
            "fitted_trough_label": bucket_label(fitted_trough),
        },
    }


def run_covid_analysis(
    confirmed: pd.DataFrame,
    deaths: pd.DataFrame,
    rucc: pd.DataFrame,
    as_of: Optional[str] = None,
) -> dict[str, Any]:
    """
    COVID-19: do more rural states have higher death rates?

    Builds one row per state with per-capita rates and a standardized,
    population-weighted rurality score, then fits:
    - rurality: deaths_per_million ~ rurality_z
    - rurality_cases: deaths_per_million ~ cases_per_thousand + rurality_z
    """
    if confirmed.empty or deaths.empty:
        raise ValueError("COVID time series are empty")
    if rucc.empty:
        raise ValueError("RUCC table is empty")

    snapshot = county_snapshot(confirmed, deaths, as_of=as_of)
    joined, join_diag = join_rucc(snapshot, rucc)

    states = state_totals(snapshot)
    rurality = state_rurality(joined)
    states = states.join(rurality, how="inner")
    states["cases_per_thousand"] = per_capita(states["cases"], states["Population"], per=CASES_PER)
    states["deaths_per_million"] = per_capita(states["deaths"], states["Population"], per=DEATHS_PER)
    states["case_fatality"] = states["deaths"] / states["cases"].where(states["cases"] > 0)
    states["rurality_z"] = standardize(states["rucc_weighted"])
    states = states.sort_values("rucc_weighted")

    rurality_fit = fit_ols(states, "deaths_per_million", ["rurality_z"], name="rurality")
    both_fit = fit_ols(
        states,
        "deaths_per_million",
        ["cases_per_thousand", "rurality_z"],
        name="rurality_cases",
    )
    comparison = compare_nested(rurality_fit, both_fit)

    # States without a rurality score (all matched counties unpopulated) are not ranked.
    ranked = states.dropna(subset=["rucc_weighted"])
    z_grid = pd.DataFrame({"rurality_z": np.linspace(states["rurality_z"].min(), states["rurality_z"].max(), 100)})
    daily = state_daily_series(confirmed, deaths)
    daily["new_cases_per_million"] = per_capita(daily["new_cases"], daily["Population"], per=DEATHS_PER)

    return {
        "inputs": {
            "as_of": snapshot["date"].iloc[0].strftime("%Y-%m-%d"),
            "n_counties": int(len(snapshot)),
            "n_states": int(len(states)),
        },
        "tables": {
            "states": states,
            "counties": joined,
            "daily": daily,
        },
        "models": {"rurality": rurality_fit, "rurality_cases": both_fit},
        "plot_data": {
            "rurality_line": {
                "x": z_grid["rurality_z"].to_numpy(),
                "y": predict_curve(rurality_fit, z_grid).to_numpy(),
            },
            "most_rural": ranked.index[-3:].tolist(),
            "most_urban": ranked.index[:3].tolist(),
        },
        "diagnostics": {
            "join": join_diag,
            "comparison": comparison,
            "rurality_cases_corr": float(states["rurality_z"].corr(states["cases_per_thousand"])),
        },
    }
