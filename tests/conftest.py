import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def shooting_rows():
    """
    Synthetic NYPD rows over four weeks starting Monday 2022-01-03.

    Every hour gets one incident, evening hours (18-23) get two more and
    Saturday 02:00 gets five more; a handful of incidents have a second
    victim row sharing the INCIDENT_KEY.
    """
    start = pd.Timestamp("2022-01-03")
    boros = ["BRONX", "BROOKLYN", "QUEENS", "MANHATTAN", "STATEN ISLAND"]
    rows = []
    key = 0
    for week in range(4):
        for how in range(168):
            ts = start + pd.Timedelta(weeks=week, hours=how)
            n = 1
            if ts.hour >= 18:
                n += 2
            if ts.dayofweek == 5 and ts.hour == 2:
                n += 5
            for _ in range(n):
                key += 1
                rows.append(
                    {
                        "INCIDENT_KEY": str(100000 + key),
                        "OCCUR_DATE": ts.strftime("%m/%d/%Y"),
                        "OCCUR_TIME": ts.strftime("%H:%M:%S"),
                        "BORO": boros[key % len(boros)],
                        "VIC_SEX": "M",
                    }
                )
    df = pd.DataFrame(rows)
    # Second victim for every 50th incident.
    extra = df.iloc[::50].copy()
    extra["VIC_SEX"] = "F"
    return pd.concat([df, extra], ignore_index=True)


N_STATES = 30
COUNTIES_PER_STATE = 3
DATES = ["1/22/20", "1/23/20", "1/24/20", "1/25/20"]


def _state_name(i: int) -> str:
    return f"State{i:02d}"


@pytest.fixture
def covid_tables():
    """
    Synthetic JHU confirmed/deaths tables and a long-layout RUCC table.

    30 states x 3 counties. County RUCC codes rise with the state index, so
    rurality increases with i; deaths per capita are built to rise with
    rurality plus deterministic noise. Two extra JHU rows mimic an
    'Unassigned' county (no RUCC match) and a cruise ship (no FIPS).
    """
    rng = np.random.default_rng(42)
    confirmed_rows, deaths_rows, rucc_rows = [], [], []
    for i in range(N_STATES):
        state = _state_name(i)
        for c in range(COUNTIES_PER_STATE):
            fips = (i + 1) * 1000 + c + 1
            pop = 10_000 * (c + 1) + 1_000 * i
            rucc = 1 + (i * 8) // (N_STATES - 1) if c == 0 else min(9, 1 + (i * 8) // (N_STATES - 1) + c)
            rate_deaths = 0.002 + 0.0002 * rucc + rng.normal(0, 0.0001)
            rate_cases = 0.2 + 0.01 * rng.normal()
            final_cases = int(pop * rate_cases)
            final_deaths = int(pop * rate_deaths)
            ident = {"UID": 84000000 + fips, "FIPS": float(fips), "Admin2": f"County{c}", "Province_State": state}
            cases_series = {d: int(final_cases * (k + 1) / len(DATES)) for k, d in enumerate(DATES)}
            deaths_series = {d: int(final_deaths * (k + 1) / len(DATES)) for k, d in enumerate(DATES)}
            confirmed_rows.append({**ident, "Country_Region": "US", **cases_series})
            deaths_rows.append({**ident, "Country_Region": "US", "Population": pop, **deaths_series})
            for attr, value in (
                ("Population_2020", f"{pop:,}"),
                ("RUCC_2023", str(rucc)),
                ("Description", "Nonmetro" if rucc > 3 else "Metro"),
            ):
                rucc_rows.append(
                    {
                        "FIPS": f"{fips:05d}",
                        "State": f"S{i:02d}",
                        "County_Name": f"County{c}",
                        "Attribute": attr,
                        "Value": value,
                    }
                )

    unassigned = {"UID": 84099999, "FIPS": 99999.0, "Admin2": "Unassigned", "Province_State": _state_name(0)}
    ship = {"UID": 84088888, "FIPS": np.nan, "Admin2": np.nan, "Province_State": "Diamond Princess"}
    for ident, pop in ((unassigned, 0), (ship, 0)):
        confirmed_rows.append({**ident, "Country_Region": "US", **{d: 5 for d in DATES}})
        deaths_rows.append({**ident, "Country_Region": "US", "Population": pop, **{d: 1 for d in DATES}})

    confirmed = pd.DataFrame(confirmed_rows)
    deaths = pd.DataFrame(deaths_rows)
    rucc_long = pd.DataFrame(rucc_rows)
    return confirmed, deaths, rucc_long
