"""
Plotting helpers for the two reports.

Each function accepts workflow output dicts and returns a matplotlib Figure
so the run scripts and the report document stay concise and declarative.
"""

from __future__ import annotations

import matplotlib.pyplot as plt
import numpy as np

from .config import HOURS_PER_DAY
from .plot_styles import HEATMAP_CMAP, style
from .process_shootings import DAY_NAMES, day_boundaries


def _day_axis(ax) -> None:
    """Label an hour-of-week x-axis with day names and day gridlines."""
    bounds = day_boundaries()
    ax.set_xlim(bounds[0], bounds[-1])
    ax.set_xticks(bounds[:-1] + HOURS_PER_DAY / 2)
    ax.set_xticklabels(DAY_NAMES)
    ax.tick_params(axis="x", length=0)
    for b in bounds:
        ax.axvline(b, **style("guide", "day_boundary"))


def _heatmap(ax, matrix, title: str, cbar_label: str):
    im = ax.imshow(matrix.to_numpy(), aspect="auto", cmap=HEATMAP_CMAP)
    ax.set_yticks(np.arange(matrix.shape[0]))
    ax.set_yticklabels([str(i) for i in matrix.index])
    ax.set_xticks(np.arange(0, matrix.shape[1], 3))
    ax.set_xticklabels([f"{h:02d}" for h in range(0, matrix.shape[1], 3)])
    ax.set_xlabel("Hour of day")
    ax.set_title(title)
    cbar = ax.figure.colorbar(im, ax=ax)
    cbar.set_label(cbar_label)
    return im


# --- NYPD shootings ---


def plot_hour_of_week_fit(shooting_result: dict):
    """
    Observed incidents per hour-of-week bucket with both Fourier fits.
    """
    buckets = shooting_result["tables"]["buckets"]
    plot_data = shooting_result["plot_data"]
    meta = shooting_result.get("inputs", {})

    fig, ax = plt.subplots(figsize=(11, 5))
    # Shift observed points to the middle of their hour so they line up with the curve.
    ax.scatter(buckets.index + 0.5, buckets["rate_per_week"], **style("observed", "observed"))
    for label in ("daily", "daily_weekly"):
        fit = shooting_result["models"][label]
        line_label = f"{style('fit', label)['label']} (R² = {fit.rsquared:.2f})"
        ax.plot(plot_data["grid"] + 0.5, plot_data["curves"][label], **style("fit", label, label=line_label))

    _day_axis(ax)
    ax.set_ylim(bottom=0)
    ax.set_ylabel("Average incidents per week in this hour")
    title = "NYPD shooting incidents by hour of week"
    if meta:
        title += f" ({meta.get('start', '')} to {meta.get('end', '')})"
    ax.set_title(title)
    ax.legend(loc="upper center")
    ax.grid(True, axis="y", linestyle="--", alpha=0.4)
    fig.tight_layout()
    return fig


def plot_day_hour_heatmap(shooting_result: dict):
    """Day-of-week x hour-of-day incident counts."""
    matrix = shooting_result["tables"]["day_hour"]
    fig, ax = plt.subplots(figsize=(10, 4))
    _heatmap(ax, matrix, "Shooting incidents by day and hour", "Incidents")
    fig.tight_layout()
    return fig


def plot_borough_hour_heatmap(shooting_result: dict, normalize: bool = True):
    """
    Borough x hour-of-day incidents.

    With `normalize`, each borough row is scaled to its share of that
    borough's incidents so boroughs of different size are comparable.
    """
    matrix = shooting_result["tables"]["borough_hour"]
    if normalize:
        matrix = matrix.div(matrix.sum(axis=1).where(matrix.sum(axis=1) > 0), axis=0)
    fig, ax = plt.subplots(figsize=(10, 4))
    _heatmap(
        ax,
        matrix,
        "Time-of-day profile by borough",
        "Share of borough incidents" if normalize else "Incidents",
    )
    fig.tight_layout()
    return fig


def plot_yearly_counts(shooting_result: dict):
    """Incidents per calendar year."""
    yearly = shooting_result["tables"]["yearly"]
    fig, ax = plt.subplots(figsize=(9, 4))
    ax.bar(yearly.index.astype(str), yearly.values, **style("bar", "incidents"))
    ax.set_xlabel("Year")
    ax.set_ylabel("Incidents")
    ax.set_title("Shooting incidents per year")
    ax.tick_params(axis="x", rotation=45)
    ax.grid(True, axis="y", linestyle="--", alpha=0.4)
    fig.tight_layout()
    return fig


# --- COVID rurality ---


def plot_rurality_scatter(covid_result: dict, annotate: bool = True):
    """
    Deaths per million vs standardized rurality, with the OLS line.
    """
    states = covid_result["tables"]["states"]
    line = covid_result["plot_data"]["rurality_line"]
    fit = covid_result["models"]["rurality"]
    meta = covid_result.get("inputs", {})

    fig, ax = plt.subplots(figsize=(9, 6))
    ax.scatter(states["rurality_z"], states["deaths_per_million"], **style("observed", "states"))
    slope = fit.params["rurality_z"]
    ax.plot(
        line["x"],
        line["y"],
        **style("fit", "rurality", label=f"OLS fit (slope {slope:,.0f}, p = {fit.pvalues['rurality_z']:.3f})"),
    )

    if annotate:
        labelled = set(covid_result["plot_data"]["most_rural"]) | set(covid_result["plot_data"]["most_urban"])
        resid = (fit.fitted - states.loc[fit.fitted.index, "deaths_per_million"]).abs()
        labelled |= set(resid.nlargest(3).index)
        for state in labelled:
            ax.annotate(
                state,
                (states.loc[state, "rurality_z"], states.loc[state, "deaths_per_million"]),
                fontsize=8,
                xytext=(3, 3),
                textcoords="offset points",
            )

    ax.set_xlabel("Rurality score (z of population-weighted RUCC; higher = more rural)")
    ax.set_ylabel("Cumulative deaths per million")
    title = "COVID-19 deaths vs state rurality"
    if meta:
        title += f" (as of {meta.get('as_of', '')})"
    ax.set_title(title)
    ax.legend(loc="upper left")
    ax.grid(True, linestyle="--", alpha=0.4)
    fig.tight_layout()
    return fig


def plot_observed_vs_fitted(covid_result: dict, model: str = "rurality_cases"):
    """Observed vs fitted deaths per million for one model."""
    states = covid_result["tables"]["states"]
    fit = covid_result["models"][model]
    observed = states.loc[fit.fitted.index, fit.response]

    fig, ax = plt.subplots(figsize=(6, 6))
    ax.scatter(fit.fitted, observed, **style("observed", "states"))
    lo = float(min(fit.fitted.min(), observed.min()))
    hi = float(max(fit.fitted.max(), observed.max()))
    ax.plot([lo, hi], [lo, hi], **style("fit", "identity"))
    ax.set_xlabel("Fitted deaths per million")
    ax.set_ylabel("Observed deaths per million")
    ax.set_title(f"{style('fit', model)['label']} (adj. R² = {fit.rsquared_adj:.2f})")
    ax.legend(loc="upper left")
    ax.grid(True, linestyle="--", alpha=0.4)
    fig.tight_layout()
    return fig


def plot_state_new_cases(covid_result: dict, states: list[str] | None = None, window: int = 7):
    """
    Rolling mean of daily new cases per million for a few states.

    Defaults to the three most rural and three most urban states.
    """
    daily = covid_result["tables"]["daily"]
    if states is None:
        states = covid_result["plot_data"]["most_rural"] + covid_result["plot_data"]["most_urban"]
    rural = set(covid_result["plot_data"]["most_rural"])

    fig, ax = plt.subplots(figsize=(11, 5))
    for state in states:
        sub = daily[daily["Province_State"] == state].set_index("date")
        smooth = sub["new_cases_per_million"].rolling(window, min_periods=1).mean()
        group = "rural_state" if state in rural else "urban_state"
        ax.plot(smooth.index, smooth.values, **style("series", group, label=state))
    ax.set_ylabel(f"New cases per million ({window}-day mean)")
    ax.set_title("Daily new COVID-19 cases: most rural (solid) vs most urban (dashed) states")
    ax.legend(loc="upper left", ncol=2, fontsize=8)
    ax.grid(True, linestyle="--", alpha=0.4)
    fig.autofmt_xdate()
    fig.tight_layout()
    return fig
