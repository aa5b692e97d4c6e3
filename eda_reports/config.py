"""
Configuration for the exploratory reports.

Centralises paths so that all data lives under a single `eda_reports_data/`
directory at the project root, plus the fixed source URLs and the small set
of modelling constants shared by the workflows.
"""

from pathlib import Path

# Project root = parent of this `eda_reports` package
PROJECT_ROOT = Path(__file__).resolve().parents[1]

DATA_ROOT = PROJECT_ROOT / "eda_reports_data"
RAW_DIR = DATA_ROOT / "raw"              # Downloaded CSV files, as served
PROCESSED_DIR = DATA_ROOT / "processed"  # Tidy tables written by the workflows
REPORTS_DIR = DATA_ROOT / "reports"      # Markdown reports + PNG figures

# EXPLAIN: Actual directory creation is done by the download/report code,
# not at import time, to keep module side effects minimal.

# --- Source URLs ---
NYPD_SHOOTINGS_URL = (
    "https://data.cityofnewyork.us/api/views/833y-fsy8/rows.csv?accessType=DOWNLOAD"
)

JHU_BASE_URL = (
    "https://raw.githubusercontent.com/CSSEGISandData/COVID-19/master/"
    "csse_covid_19_data/csse_covid_19_time_series/"
)
COVID_CONFIRMED_US_URL = JHU_BASE_URL + "time_series_covid19_confirmed_US.csv"
COVID_DEATHS_US_URL = JHU_BASE_URL + "time_series_covid19_deaths_US.csv"

RUCC_URL = (
    "https://ers.usda.gov/sites/default/files/_laserfiche/DataFiles/53251/"
    "Ruralurbancontinuumcodes2023.csv"
)

# Cache filenames under RAW_DIR
NYPD_SHOOTINGS_FILE = "nypd_shooting_incidents.csv"
COVID_CONFIRMED_US_FILE = "time_series_covid19_confirmed_US.csv"
COVID_DEATHS_US_FILE = "time_series_covid19_deaths_US.csv"
RUCC_FILE = "rural_urban_continuum_codes.csv"

# --- Modelling constants ---
HOURS_PER_DAY = 24
HOURS_PER_WEEK = 168

# (period in hours, number of harmonics). Weekly harmonics must stay below 7,
# otherwise the 7th weekly harmonic duplicates the first daily one.
DAILY_FOURIER = (HOURS_PER_DAY, 2)
WEEKLY_FOURIER = (HOURS_PER_WEEK, 2)

CASES_PER = 1_000
DEATHS_PER = 1_000_000

SIGNIFICANCE_LEVEL = 0.05
