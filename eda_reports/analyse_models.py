"""
Rule-based commentary for the two reports.

Turns workflow outputs into short findings paragraphs (coefficient signs and
significance, nested-model comparisons, peak hours) plus a fixed list of
bias notes per report. Commentary is returned as lists of strings so the
report document and the console can both use it.

EXPLAIN: The rules only describe what the fitted numbers say; they do not
attempt causal interpretation.
"""

from __future__ import annotations

from typing import List

import pandas as pd

from .config import SIGNIFICANCE_LEVEL
from .regression import NestedComparison, OlsFit

SHOOTING_BIAS_NOTES = [
    "Reporting bias: only shootings recorded by the NYPD appear in the data; "
    "incidents without a victim or a police report are missing.",
    "Time recording: OCCUR_TIME is the reported time of occurrence and is often "
    "rounded to the hour or half hour, which sharpens hourly peaks.",
    "Unit of analysis: the source has one row per victim. Incidents are counted "
    "once per INCIDENT_KEY here; counting victims would weight multi-victim "
    "shootings more heavily.",
    "Aggregation: averaging over the full history hides changes in the weekly "
    "pattern between years (e.g. the 2020-2021 surge).",
    "Personal bias: an expectation that shootings cluster on weekend nights can "
    "steer model choice; the daily-only model is kept as a baseline so the "
    "weekly terms have to earn their place.",
]

COVID_BIAS_NOTES = [
    "Testing bias: confirmed cases depend on testing capacity, which differed "
    "between states and over time; cases per thousand is not an infection rate.",
    "Death attribution: states differed in how COVID-19 deaths were certified "
    "and reported, and JHU series contain back-corrections.",
    "Ecological fallacy: rurality is a population-weighted state average; a "
    "state-level association says nothing about individual counties or people.",
    "Confounding: age structure, insurance coverage, vaccination uptake and "
    "policy timing all correlate with rurality and are not in the model.",
    "Join coverage: counties whose FIPS codes changed (e.g. Connecticut's 2022 "
    "planning regions) or that JHU reports as 'Unassigned' do not match RUCC codes.",
    "Personal bias: expecting urban density to drive spread could lead to "
    "reading a weak slope as confirmation; the p-value and R² are reported "
    "alongside the slope for that reason.",
]


def describe_coefficients(fit: OlsFit, alpha: float = SIGNIFICANCE_LEVEL) -> List[str]:
    """
    One sentence per regressor: sign, size and whether p < alpha.
    """
    significant = set(fit.significant(alpha))
    lines = []
    for name in fit.regressors:
        coef = float(fit.params[name])
        pval = float(fit.pvalues[name])
        if name in significant:
            verdict = f"significant at the {alpha:.0%} level"
        else:
            verdict = f"not significant at the {alpha:.0%} level"
        if coef == 0:
            change = f"does not change with {name}"
        else:
            direction = "increases" if coef > 0 else "decreases"
            change = f"{direction} by {abs(coef):,.3g} per unit of {name}"
        lines.append(f"[{fit.name}] {fit.response} {change} (p = {pval:.3g}, {verdict}).")
    return lines


def describe_comparison(comparison: NestedComparison, alpha: float = SIGNIFICANCE_LEVEL) -> str:
    """Interpret a nested-model F-test."""
    if comparison.pvalue < alpha:
        verdict = (
            f"the extra terms in '{comparison.full}' improve the fit significantly "
            f"over '{comparison.restricted}'"
        )
    else:
        verdict = (
            f"the extra terms in '{comparison.full}' do not significantly improve "
            f"on '{comparison.restricted}'"
        )
    return (
        f"F-test ({comparison.df_diff:.0f} extra terms): F = {comparison.f_statistic:.2f}, "
        f"p = {comparison.pvalue:.3g}; {verdict}."
    )


def model_table(fits: List[OlsFit]) -> pd.DataFrame:
    """Side-by-side fit statistics for several models."""
    rows = []
    for fit in fits:
        rows.append(
            {
                "model": fit.name,
                "n": fit.nobs,
                "regressors": len(fit.regressors),
                "r_squared": fit.rsquared,
                "adj_r_squared": fit.rsquared_adj,
                "aic": fit.aic,
            }
        )
    return pd.DataFrame(rows).set_index("model")


def shooting_findings(result: dict) -> List[str]:
    """Findings paragraph lines for the shootings report."""
    meta = result["inputs"]
    diag = result["diagnostics"]
    daily = result["models"]["daily"]
    full = result["models"]["daily_weekly"]
    buckets = result["tables"]["buckets"]

    lines = [
        f"{meta['n_incidents']:,} incidents between {meta['start']} and {meta['end']} "
        f"({meta['n_weeks']:.0f} weeks).",
        f"The busiest hour of the week is {diag['observed_peak_label']} with "
        f"{buckets['rate_per_week'].max():.2f} incidents per week on average; the "
        f"fitted curve peaks at {diag['fitted_peak_label']} and bottoms out at "
        f"{diag['fitted_trough_label']}.",
        f"The daily-cycle model explains {daily.rsquared:.0%} of the variation across "
        f"hours; adding weekly terms raises this to {full.rsquared:.0%}.",
        describe_comparison(diag["comparison"]),
    ]

    day_totals = result["tables"]["day_hour"].sum(axis=1)
    weekend_share = day_totals[["Sat", "Sun"]].sum() / day_totals.sum() if day_totals.sum() > 0 else float("nan")
    lines.append(
        f"Saturday and Sunday account for {weekend_share:.0%} of incidents "
        f"(two of seven days would be {2 / 7:.0%})."
    )
    return lines


def covid_findings(result: dict) -> List[str]:
    """Findings paragraph lines for the COVID rurality report."""
    meta = result["inputs"]
    diag = result["diagnostics"]
    rural_fit = result["models"]["rurality"]
    both_fit = result["models"]["rurality_cases"]

    lines = [
        f"{meta['n_states']} states and territories with RUCC coverage, cumulative "
        f"counts as of {meta['as_of']}.",
        f"Most rural: {', '.join(result['plot_data']['most_rural'])}. "
        f"Most urban: {', '.join(result['plot_data']['most_urban'])}.",
    ]
    lines.extend(describe_coefficients(rural_fit))
    lines.append(f"Rurality alone explains {rural_fit.rsquared:.0%} of the variation in deaths per million.")
    lines.extend(describe_coefficients(both_fit))
    lines.append(describe_comparison(diag["comparison"]))
    lines.append(
        f"Correlation between rurality and cases per thousand: {diag['rurality_cases_corr']:.2f}."
    )

    share = diag["join"]["unmatched_population_share"]
    if share > 0:
        lines.append(f"{share:.1%} of the JHU population could not be matched to a RUCC code.")
    return lines


def print_commentary(title: str, findings: List[str], bias_notes: List[str]) -> None:
    """Print findings and bias notes to the console."""
    print(f"\n{title}")
    print("-" * len(title))
    for line in findings:
        print(f"  • {line}")
    print("\nSources of bias:")
    for note in bias_notes:
        print(f"  • {note}")
