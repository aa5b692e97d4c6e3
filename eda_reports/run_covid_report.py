"""
COVID-19 rurality report: did more rural states see higher death rates?

Usage (from the project root):

    python -m eda_reports.run_covid_report

Downloads the JHU time series and USDA RUCC codes if needed, builds one row
per state, fits the rurality regressions, prints model summaries and
commentary, and writes `eda_reports_data/reports/covid_rurality/covid_rurality.md`
with figures.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pandas as pd

from .analyse_models import COVID_BIAS_NOTES, covid_findings, model_table, print_commentary
from .config import PROCESSED_DIR
from .download_data import download_covid
from .plot_reports import plot_observed_vs_fitted, plot_rurality_scatter, plot_state_new_cases
from .process_covid import load_covid, load_rucc
from .report_document import ReportDocument
from .workflows import run_covid_analysis

STATE_TABLE_COLUMNS = [
    "rucc_weighted",
    "rurality_z",
    "cases_per_thousand",
    "deaths_per_million",
    "case_fatality",
]


def build_report(
    confirmed: pd.DataFrame,
    deaths: pd.DataFrame,
    rucc: pd.DataFrame,
    output_dir: Optional[Path] = None,
) -> Path:
    """Run the analysis on loaded tables and write the Markdown report."""
    result = run_covid_analysis(confirmed, deaths, rucc)
    rural_fit = result["models"]["rurality"]
    both_fit = result["models"]["rurality_cases"]

    print(rural_fit.summary_text)
    print(both_fit.summary_text)
    findings = covid_findings(result)
    print_commentary("COVID-19 rurality: findings", findings, COVID_BIAS_NOTES)

    doc = ReportDocument(
        name="covid_rurality",
        title="COVID-19 Deaths and State Rurality",
        output_dir=output_dir,
    )
    doc.paragraph(
        "Sources: JHU CSSE COVID-19 US time series (cumulative confirmed cases and "
        "deaths by county) and USDA ERS Rural-Urban Continuum Codes. Counties are "
        "joined on FIPS; each state's rurality is the population-weighted mean RUCC "
        "of its counties (1 = large metro, 9 = remote rural), standardized across states."
    )

    doc.heading("Case trajectories")
    doc.figure(plot_state_new_cases(result), "Daily new cases in the most rural and most urban states")

    doc.heading("Deaths and rurality")
    doc.figure(plot_rurality_scatter(result), "Deaths per million vs rurality")
    doc.figure(plot_observed_vs_fitted(result), "Observed vs fitted deaths per million")

    doc.heading("Models")
    doc.table(model_table([rural_fit, both_fit]))
    doc.model_summary(rural_fit)
    doc.model_summary(both_fit)

    doc.heading("State table")
    doc.table(result["tables"]["states"][STATE_TABLE_COLUMNS])

    doc.heading("Findings")
    doc.bullets(findings)

    doc.heading("Sources of bias")
    doc.bullets(COVID_BIAS_NOTES)

    if output_dir is None:
        PROCESSED_DIR.mkdir(parents=True, exist_ok=True)
        result["tables"]["states"].to_csv(PROCESSED_DIR / "covid_state_rurality.csv")
    return doc.write()


def main() -> None:
    print("[COVID] Step 1: Fetching data ...", flush=True)
    paths = download_covid()
    confirmed, deaths = load_covid(paths["covid_confirmed"], paths["covid_deaths"])
    rucc = load_rucc(paths["rucc"])

    print("\n[COVID] Step 2: Analysis and report ...", flush=True)
    path = build_report(confirmed, deaths, rucc)
    print(f"\n✓ COVID-19 rurality report complete: {path}")


if __name__ == "__main__":
    main()
