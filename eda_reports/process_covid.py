"""
Processing utilities for the COVID-19 rurality report.

This module:
- Loads the JHU CSSE US time series (confirmed cases, deaths). Both files are
  wide: one row per county, one column per date holding cumulative counts.
  The deaths file also carries a `Population` column.
- Melts the date columns to long form and aggregates counties to states.
- Loads the USDA ERS Rural-Urban Continuum Codes (RUCC). The 2023 release
  is long (`Attribute` / `Value` rows per county); older releases are wide.
  Both layouts are normalised to one row per county.
- Joins county snapshots to RUCC on FIPS and summarises rurality per state
  as a population-weighted mean RUCC.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import numpy as np
import pandas as pd

from .download_data import cached_path

ID_COLUMNS = ["FIPS", "Admin2", "Province_State"]
DATE_FORMAT = "%m/%d/%y"


def load_jhu_time_series(path: Path) -> pd.DataFrame:
    """Read one JHU CSSE US time-series CSV."""
    df = pd.read_csv(path)
    missing = [c for c in ID_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"{path.name} is missing required columns: {missing}")
    print(f"  Loaded {len(df):,} county rows x {len(_date_columns(df))} dates from {path.name}")
    return df


def load_covid(
    confirmed_path: Optional[Path] = None,
    deaths_path: Optional[Path] = None,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Load the cached confirmed-cases and deaths time series."""
    if confirmed_path is None:
        confirmed_path = cached_path("covid_confirmed")
    if deaths_path is None:
        deaths_path = cached_path("covid_deaths")
    confirmed = load_jhu_time_series(confirmed_path)
    deaths = load_jhu_time_series(deaths_path)
    if "Population" not in deaths.columns:
        raise ValueError("Deaths time series has no 'Population' column")
    return confirmed, deaths


def _date_columns(df: pd.DataFrame) -> list:
    """Columns whose header parses as a JHU date (M/D/YY)."""
    parsed = pd.to_datetime(pd.Series(df.columns, dtype=str), format=DATE_FORMAT, errors="coerce")
    return [col for col, ts in zip(df.columns, parsed) if pd.notna(ts)]


def melt_time_series(df: pd.DataFrame, value_name: str) -> pd.DataFrame:
    """
    Wide JHU table -> long rows.

    Returns
    -------
    DataFrame
        Columns: FIPS, Admin2, Province_State, date, <value_name>.
    """
    date_cols = _date_columns(df)
    if not date_cols:
        raise ValueError("No date columns found in time series")
    long = df.melt(id_vars=ID_COLUMNS, value_vars=date_cols, var_name="date", value_name=value_name)
    long["date"] = pd.to_datetime(long["date"], format=DATE_FORMAT)
    return long


def _latest_date(df: pd.DataFrame) -> pd.Timestamp:
    return max(pd.to_datetime(c, format=DATE_FORMAT) for c in _date_columns(df))


def county_snapshot(
    confirmed: pd.DataFrame,
    deaths: pd.DataFrame,
    as_of: Optional[str] = None,
) -> pd.DataFrame:
    """
    Cumulative cases and deaths per county on a single date.

    Parameters
    ----------
    confirmed, deaths : DataFrame
        Wide JHU tables.
    as_of : str, optional
        Snapshot date ('YYYY-MM-DD'); defaults to the last date in `deaths`.

    Returns
    -------
    DataFrame
        One row per county with an integer FIPS: FIPS, Admin2, Province_State,
        cases, deaths, Population. Rows without FIPS (cruise ships,
        unassigned totals) are dropped.
    """
    snap_date = _latest_date(deaths) if as_of is None else pd.Timestamp(as_of)
    date_col = f"{snap_date.month}/{snap_date.day}/{snap_date.strftime('%y')}"
    for name, df in (("confirmed", confirmed), ("deaths", deaths)):
        if date_col not in df.columns:
            raise ValueError(f"Date {snap_date.date()} not present in {name} time series")

    cases = confirmed[ID_COLUMNS + [date_col]].rename(columns={date_col: "cases"})
    dead = deaths[["FIPS", "Population", date_col]].rename(columns={date_col: "deaths"})

    cases = cases[cases["FIPS"].notna()].copy()
    dead = dead[dead["FIPS"].notna()].copy()
    cases["FIPS"] = cases["FIPS"].astype(int)
    dead["FIPS"] = dead["FIPS"].astype(int)

    snap = cases.merge(dead, on="FIPS", how="inner", validate="one_to_one")
    snap["date"] = snap_date
    print(f"  County snapshot on {snap_date.date()}: {len(snap):,} counties")
    return snap


def state_totals(snapshot: pd.DataFrame) -> pd.DataFrame:
    """
    Aggregate a county snapshot to states.

    Returns
    -------
    DataFrame
        Indexed by Province_State with cases, deaths, Population. States with
        zero population (e.g. 'Diamond Princess') are dropped.
    """
    totals = snapshot.groupby("Province_State")[["cases", "deaths", "Population"]].sum()
    dropped = totals.index[totals["Population"] <= 0].tolist()
    if dropped:
        print(f"  Dropping {len(dropped)} zero-population entries: {dropped}")
    return totals[totals["Population"] > 0]


def state_daily_series(confirmed: pd.DataFrame, deaths: pd.DataFrame) -> pd.DataFrame:
    """
    Long state x date table of cumulative and daily new counts.

    New counts are first differences of the cumulative series, clipped at
    zero because JHU back-corrections produce negative differences.

    Returns
    -------
    DataFrame
        Columns: Province_State, date, cases, deaths, new_cases, new_deaths,
        Population.
    """
    cases = melt_time_series(confirmed, "cases")
    dead = melt_time_series(deaths, "deaths")

    cases_state = cases.groupby(["Province_State", "date"], as_index=False)["cases"].sum()
    deaths_state = dead.groupby(["Province_State", "date"], as_index=False)["deaths"].sum()
    pop = deaths.groupby("Province_State")["Population"].sum().rename("Population")

    out = cases_state.merge(deaths_state, on=["Province_State", "date"], how="inner")
    out = out.merge(pop, left_on="Province_State", right_index=True, how="left")
    out = out.sort_values(["Province_State", "date"]).reset_index(drop=True)

    grouped = out.groupby("Province_State")
    out["new_cases"] = grouped["cases"].diff().fillna(out["cases"]).clip(lower=0)
    out["new_deaths"] = grouped["deaths"].diff().fillna(out["deaths"]).clip(lower=0)
    return out


def load_rucc(path: Optional[Path] = None) -> pd.DataFrame:
    """Read the RUCC CSV (ERS files are Latin-1 encoded) and tidy it."""
    if path is None:
        path = cached_path("rucc")
    raw = pd.read_csv(path, encoding="latin-1", dtype={"FIPS": str})
    return tidy_rucc(raw)


def _find_column(columns, prefix: str) -> str:
    matches = sorted(c for c in columns if str(c).startswith(prefix))
    if not matches:
        raise ValueError(f"RUCC data has no column starting with {prefix!r}")
    # Latest vintage wins, e.g. RUCC_2023 over RUCC_2013.
    return matches[-1]


def tidy_rucc(raw: pd.DataFrame) -> pd.DataFrame:
    """
    Normalise either RUCC layout to one row per county.

    Returns
    -------
    DataFrame
        Columns: FIPS (int), State, County_Name, rucc (1..9),
        rucc_population.
    """
    missing = [c for c in ("FIPS", "State", "County_Name") if c not in raw.columns]
    if missing:
        raise ValueError(f"RUCC data is missing required columns: {missing}")

    if "Attribute" in raw.columns:
        # Long layout: pivot attributes to columns.
        wide = raw.pivot_table(
            index=["FIPS", "State", "County_Name"],
            columns="Attribute",
            values="Value",
            aggfunc="first",
        ).reset_index()
        wide.columns.name = None
    else:
        wide = raw.copy()

    rucc_col = _find_column(wide.columns, "RUCC_")
    pop_col = _find_column(wide.columns, "Population_")

    out = pd.DataFrame(
        {
            "FIPS": pd.to_numeric(wide["FIPS"]).astype(int),
            "State": wide["State"],
            "County_Name": wide["County_Name"],
            "rucc": pd.to_numeric(wide[rucc_col], errors="coerce"),
            "rucc_population": pd.to_numeric(
                wide[pop_col].astype(str).str.replace(",", "", regex=False), errors="coerce"
            ),
        }
    )
    out = out[out["rucc"].notna()].copy()
    out["rucc"] = out["rucc"].astype(int)
    return out.sort_values("FIPS").reset_index(drop=True)


def join_rucc(snapshot: pd.DataFrame, rucc: pd.DataFrame) -> Tuple[pd.DataFrame, Dict[str, Any]]:
    """
    Inner-join a county snapshot to RUCC codes on FIPS.

    Every FIPS present on both sides is kept. Counties present on only one
    side are reported in the diagnostics rather than silently ignored.

    Returns
    -------
    (joined, diagnostics)
        joined : snapshot columns plus State, County_Name, rucc, rucc_population
        diagnostics : counts of matched/unmatched counties and the share of
        JHU population that found no RUCC code.
    """
    joined = snapshot.merge(
        rucc[["FIPS", "State", "County_Name", "rucc", "rucc_population"]],
        on="FIPS",
        how="inner",
        validate="one_to_one",
    )

    covid_only = snapshot[~snapshot["FIPS"].isin(rucc["FIPS"])]
    rucc_only = rucc[~rucc["FIPS"].isin(snapshot["FIPS"])]
    total_pop = float(snapshot["Population"].sum())
    unmatched_pop = float(covid_only["Population"].sum())

    diagnostics = {
        "matched_counties": int(len(joined)),
        "covid_only_counties": int(len(covid_only)),
        "rucc_only_counties": int(len(rucc_only)),
        "unmatched_population_share": unmatched_pop / total_pop if total_pop > 0 else np.nan,
        "covid_only_states": sorted(covid_only.loc[covid_only["Population"] > 0, "Province_State"].unique()),
    }
    print(
        f"  RUCC join: {diagnostics['matched_counties']:,} matched, "
        f"{diagnostics['covid_only_counties']:,} COVID-only, "
        f"{diagnostics['rucc_only_counties']:,} RUCC-only counties"
    )
    if diagnostics["unmatched_population_share"] > 0.01:
        print(
            f"  ⚠ {diagnostics['unmatched_population_share']:.1%} of population has no RUCC code "
            f"(states: {diagnostics['covid_only_states']})"
        )
    return joined, diagnostics


def state_rurality(joined: pd.DataFrame) -> pd.Series:
    """
    Population-weighted mean RUCC per state.

    Counties with zero population get no weight; a state whose matched
    counties all have zero population yields NaN.
    """
    weights = joined["Population"].astype(float).clip(lower=0)
    weighted = (joined["rucc"] * weights).groupby(joined["Province_State"]).sum()
    total = weights.groupby(joined["Province_State"]).sum()
    return (weighted / total.where(total > 0)).rename("rucc_weighted")
