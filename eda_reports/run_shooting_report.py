"""
NYPD shootings report: when during the week do shootings happen?

Usage (from the project root):

    python -m eda_reports.run_shooting_report

Downloads the incident data if needed, fits the hour-of-week Fourier models,
prints model summaries and commentary, and writes
`eda_reports_data/reports/nypd_shootings/nypd_shootings.md` with figures.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pandas as pd

from .analyse_models import SHOOTING_BIAS_NOTES, model_table, print_commentary, shooting_findings
from .config import PROCESSED_DIR
from .download_data import download_shootings
from .plot_reports import (
    plot_borough_hour_heatmap,
    plot_day_hour_heatmap,
    plot_hour_of_week_fit,
    plot_yearly_counts,
)
from .process_shootings import load_shootings
from .report_document import ReportDocument
from .workflows import run_shooting_analysis


def build_report(raw: pd.DataFrame, output_dir: Optional[Path] = None) -> Path:
    """Run the analysis on `raw` incident rows and write the Markdown report."""
    result = run_shooting_analysis(raw)
    daily = result["models"]["daily"]
    full = result["models"]["daily_weekly"]

    print(daily.summary_text)
    print(full.summary_text)
    findings = shooting_findings(result)
    print_commentary("NYPD shootings: findings", findings, SHOOTING_BIAS_NOTES)

    doc = ReportDocument(
        name="nypd_shootings",
        title="NYPD Shooting Incidents: Weekly Timing",
        output_dir=output_dir,
    )
    doc.paragraph(
        "Source: NYPD Shooting Incident Data (Historic), NYC OpenData. Each incident "
        "is placed in one of 168 hour-of-week buckets (Monday 00:00 = 0) and the "
        "average number of incidents per week in each bucket is modelled with "
        "Fourier terms at daily (24h) and weekly (168h) periods."
    )

    doc.heading("Incidents over time")
    doc.figure(plot_yearly_counts(result), "Shooting incidents per year")

    doc.heading("When in the week")
    doc.figure(plot_day_hour_heatmap(result), "Incidents by day of week and hour")
    doc.figure(plot_borough_hour_heatmap(result), "Time-of-day profile by borough")
    doc.figure(plot_hour_of_week_fit(result), "Hour-of-week rate with Fourier fits")

    doc.heading("Models")
    doc.table(model_table([daily, full]))
    doc.model_summary(daily)
    doc.model_summary(full)

    doc.heading("Findings")
    doc.bullets(findings)

    doc.heading("Sources of bias")
    doc.bullets(SHOOTING_BIAS_NOTES)

    if output_dir is None:
        PROCESSED_DIR.mkdir(parents=True, exist_ok=True)
        result["tables"]["buckets"].to_csv(PROCESSED_DIR / "nypd_hour_of_week.csv")
    return doc.write()


def main() -> None:
    print("[Shootings] Step 1: Fetching data ...", flush=True)
    raw = load_shootings(download_shootings())

    print("\n[Shootings] Step 2: Analysis and report ...", flush=True)
    path = build_report(raw)
    print(f"\n✓ NYPD shootings report complete: {path}")


if __name__ == "__main__":
    main()
