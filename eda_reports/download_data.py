"""
Tools for downloading the public CSV datasets used by the reports.

This module:
- Knows the fixed source URL and cache filename of each dataset:
  * NYPD Shooting Incident Data (Historic)
  * JHU CSSE COVID-19 US confirmed cases and deaths time series
  * USDA ERS Rural-Urban Continuum Codes
- Downloads each CSV into `eda_reports_data/raw/`, re-using a cached copy
  when one already exists.

Network failures are not retried: `requests` errors propagate and the
calling script stops.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import requests

from .config import (
    COVID_CONFIRMED_US_FILE,
    COVID_CONFIRMED_US_URL,
    COVID_DEATHS_US_FILE,
    COVID_DEATHS_US_URL,
    NYPD_SHOOTINGS_FILE,
    NYPD_SHOOTINGS_URL,
    RAW_DIR,
    RUCC_FILE,
    RUCC_URL,
)


@dataclass(frozen=True)
class DataSource:
    """One downloadable dataset: where it lives and where we cache it."""

    key: str
    url: str
    filename: str
    description: str


SOURCES: Dict[str, DataSource] = {
    "shootings": DataSource(
        key="shootings",
        url=NYPD_SHOOTINGS_URL,
        filename=NYPD_SHOOTINGS_FILE,
        description="NYPD Shooting Incident Data (Historic)",
    ),
    "covid_confirmed": DataSource(
        key="covid_confirmed",
        url=COVID_CONFIRMED_US_URL,
        filename=COVID_CONFIRMED_US_FILE,
        description="JHU CSSE COVID-19 confirmed cases (US counties)",
    ),
    "covid_deaths": DataSource(
        key="covid_deaths",
        url=COVID_DEATHS_US_URL,
        filename=COVID_DEATHS_US_FILE,
        description="JHU CSSE COVID-19 deaths (US counties)",
    ),
    "rucc": DataSource(
        key="rucc",
        url=RUCC_URL,
        filename=RUCC_FILE,
        description="USDA ERS Rural-Urban Continuum Codes",
    ),
}


def _download_csv(url: str, dest: Path, description: str, refresh: bool = False) -> Path:
    """
    Download a CSV file from `url` to `dest`.

    Parameters
    ----------
    url : str
        Fully-qualified URL of the CSV file.
    dest : Path
        Destination path (including filename).
    description : str
        Short description for progress output.
    refresh : bool, default False
        If True, download even when `dest` already exists.
    """
    dest.parent.mkdir(parents=True, exist_ok=True)

    if dest.exists() and not refresh:
        print(f"  ✓ {description} already downloaded at {dest}")
        return dest

    print(f"  Downloading {description} ...")
    print(f"    URL: {url}")
    resp = requests.get(url, timeout=120)
    resp.raise_for_status()
    if not resp.content:
        raise RuntimeError(f"Empty response when downloading {description} from {url}")

    dest.write_bytes(resp.content)
    size = dest.stat().st_size
    print(f"  ✓ Saved {description} ({size:,} bytes) to {dest}")
    return dest


def download_source(key: str, raw_dir: Optional[Path] = None, refresh: bool = False) -> Path:
    """
    Download one dataset by key ('shootings', 'covid_confirmed',
    'covid_deaths', 'rucc') and return the cached path.
    """
    source = SOURCES.get(key)
    if source is None:
        raise ValueError(f"Unknown data source {key!r}; expected one of {sorted(SOURCES)}")
    raw_dir = RAW_DIR if raw_dir is None else raw_dir
    return _download_csv(source.url, raw_dir / source.filename, source.description, refresh=refresh)


def download_shootings(raw_dir: Optional[Path] = None, refresh: bool = False) -> Path:
    """Download the NYPD shooting incident CSV."""
    return download_source("shootings", raw_dir=raw_dir, refresh=refresh)


def download_covid(raw_dir: Optional[Path] = None, refresh: bool = False) -> Dict[str, Path]:
    """
    Download everything the COVID report needs.

    Returns
    -------
    dict
        Mapping 'covid_confirmed' / 'covid_deaths' / 'rucc' -> cached path.
    """
    return {
        key: download_source(key, raw_dir=raw_dir, refresh=refresh)
        for key in ("covid_confirmed", "covid_deaths", "rucc")
    }


def cached_path(key: str, raw_dir: Optional[Path] = None) -> Path:
    """
    Return the cached path for a dataset, raising if it has not been
    downloaded yet.
    """
    source = SOURCES.get(key)
    if source is None:
        raise ValueError(f"Unknown data source {key!r}; expected one of {sorted(SOURCES)}")
    raw_dir = RAW_DIR if raw_dir is None else raw_dir
    path = raw_dir / source.filename
    if not path.exists():
        raise FileNotFoundError(
            f"No cached {source.description} at {path}. "
            "Have you run `python -m eda_reports.setup_data`?"
        )
    return path
