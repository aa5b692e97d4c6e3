"""
One-shot setup script for the report datasets.

Usage (from the project root):

    python -m eda_reports.setup_data

This will:
1. Download the NYPD shooting incident CSV.
2. Download the JHU COVID-19 US confirmed/deaths time series and the USDA
   rural-urban continuum codes.
3. Load each file once and print basic diagnostics so you can verify the
   shapes and date ranges.

Cached files are re-used; delete `eda_reports_data/raw/` to force a fresh
download.
"""

from __future__ import annotations

from .config import DATA_ROOT, PROCESSED_DIR, RAW_DIR, REPORTS_DIR
from .download_data import download_covid, download_shootings
from .process_covid import load_covid, load_rucc
from .process_shootings import clean_incidents, load_shootings


def main() -> None:
    """Run the full data-setup pipeline."""
    print(f"Report data root: {DATA_ROOT}", flush=True)
    for d in (DATA_ROOT, RAW_DIR, PROCESSED_DIR, REPORTS_DIR):
        d.mkdir(parents=True, exist_ok=True)

    print("\nStep 1: Downloading NYPD shooting incidents ...", flush=True)
    shootings_path = download_shootings()

    print("\nStep 2: Downloading COVID-19 time series and RUCC codes ...", flush=True)
    covid_paths = download_covid()

    print("\nStep 3: Quick sanity checks on downloaded datasets ...", flush=True)
    incidents = clean_incidents(load_shootings(shootings_path))
    print("\nNYPD shooting incidents:")
    print(f"  Incidents: {len(incidents):,}")
    print(f"  Date range: {incidents['occurred_at'].min().date()} -> {incidents['occurred_at'].max().date()}")

    confirmed, deaths = load_covid(covid_paths["covid_confirmed"], covid_paths["covid_deaths"])
    print("\nJHU COVID-19 US time series:")
    print(f"  Confirmed shape: {confirmed.shape}, deaths shape: {deaths.shape}")

    rucc = load_rucc(covid_paths["rucc"])
    print("\nRural-Urban Continuum Codes:")
    print(f"  Counties: {len(rucc):,}, codes: {sorted(rucc['rucc'].unique())}")

    print("\n✓ Report data setup complete.")


if __name__ == "__main__":
    main()
