import pandas as pd
import pytest

from eda_reports.process_covid import (
    county_snapshot,
    join_rucc,
    load_covid,
    load_rucc,
    melt_time_series,
    state_daily_series,
    state_rurality,
    state_totals,
    tidy_rucc,
)


def test_melt_time_series_long_shape(covid_tables):
    confirmed, _, _ = covid_tables
    long = melt_time_series(confirmed, "cases")
    assert list(long.columns) == ["FIPS", "Admin2", "Province_State", "date", "cases"]
    assert len(long) == len(confirmed) * 4
    assert long["date"].min() == pd.Timestamp("2020-01-22")
    assert long["date"].max() == pd.Timestamp("2020-01-25")


def test_melt_time_series_requires_dates():
    with pytest.raises(ValueError, match="No date columns"):
        melt_time_series(pd.DataFrame({"FIPS": [1.0], "Admin2": ["a"], "Province_State": ["b"]}), "cases")


def test_county_snapshot_uses_last_date_and_drops_missing_fips(covid_tables):
    confirmed, deaths, _ = covid_tables
    snap = county_snapshot(confirmed, deaths)
    assert len(snap) == 91  # 90 counties + the unassigned row; the ship has no FIPS
    assert snap["FIPS"].dtype.kind == "i"
    assert snap["date"].iloc[0] == pd.Timestamp("2020-01-25")
    row = snap.set_index("FIPS").loc[1001]
    assert row["cases"] == confirmed.set_index("FIPS").loc[1001.0, "1/25/20"]
    assert row["deaths"] == deaths.set_index("FIPS").loc[1001.0, "1/25/20"]
    assert row["Population"] == 10_000


def test_county_snapshot_as_of(covid_tables):
    confirmed, deaths, _ = covid_tables
    snap = county_snapshot(confirmed, deaths, as_of="2020-01-23")
    assert snap["date"].iloc[0] == pd.Timestamp("2020-01-23")
    assert snap.set_index("FIPS").loc[1001, "cases"] == confirmed.set_index("FIPS").loc[1001.0, "1/23/20"]
    with pytest.raises(ValueError, match="not present"):
        county_snapshot(confirmed, deaths, as_of="2021-06-01")


def test_state_totals_sum_counties(covid_tables):
    confirmed, deaths, _ = covid_tables
    snap = county_snapshot(confirmed, deaths)
    totals = state_totals(snap)
    assert len(totals) == 30
    assert (totals["Population"] > 0).all()
    assert totals.loc["State00", "Population"] == 10_000 + 20_000 + 30_000
    assert totals["deaths"].sum() == snap["deaths"].sum()


def test_state_totals_drop_zero_population():
    snap = pd.DataFrame(
        {
            "Province_State": ["A", "B"],
            "cases": [10, 5],
            "deaths": [1, 0],
            "Population": [100, 0],
        }
    )
    assert state_totals(snap).index.tolist() == ["A"]


def test_state_daily_series_new_counts(covid_tables):
    confirmed, deaths, _ = covid_tables
    daily = state_daily_series(confirmed, deaths)
    assert (daily["new_cases"] >= 0).all()
    assert (daily["new_deaths"] >= 0).all()
    state0 = daily[daily["Province_State"] == "State00"]
    assert len(state0) == 4
    assert state0["new_cases"].sum() == state0["cases"].iloc[-1]


def test_state_daily_series_clips_corrections():
    ids = {"FIPS": [1001.0], "Admin2": ["A"], "Province_State": ["S"]}
    confirmed = pd.DataFrame({**ids, "1/1/21": [10], "1/2/21": [8], "1/3/21": [12]})
    deaths = pd.DataFrame({**ids, "Population": [1000], "1/1/21": [1], "1/2/21": [1], "1/3/21": [2]})
    daily = state_daily_series(confirmed, deaths)
    assert daily["new_cases"].tolist() == [10, 0, 4]
    assert daily["new_deaths"].tolist() == [1, 0, 1]


def test_tidy_rucc_long_layout(covid_tables):
    _, _, rucc_long = covid_tables
    rucc = tidy_rucc(rucc_long)
    assert len(rucc) == 90
    assert list(rucc.columns) == ["FIPS", "State", "County_Name", "rucc", "rucc_population"]
    assert rucc["FIPS"].is_unique
    assert rucc["rucc"].between(1, 9).all()
    assert rucc.set_index("FIPS").loc[1001, "rucc_population"] == 10_000


def test_tidy_rucc_wide_layout():
    wide = pd.DataFrame(
        {
            "FIPS": ["01001", "01003"],
            "State": ["AL", "AL"],
            "County_Name": ["Autauga County", "Baldwin County"],
            "Population_2010": [54571, 182265],
            "RUCC_2013": [2, 3],
            "Description": ["Metro", "Metro"],
        }
    )
    rucc = tidy_rucc(wide)
    assert rucc["FIPS"].tolist() == [1001, 1003]
    assert rucc["rucc"].tolist() == [2, 3]


def test_tidy_rucc_missing_columns():
    with pytest.raises(ValueError, match="County_Name"):
        tidy_rucc(pd.DataFrame({"FIPS": ["01001"], "State": ["AL"]}))


def test_join_rucc_keeps_all_matching_counties(covid_tables):
    confirmed, deaths, rucc_long = covid_tables
    snap = county_snapshot(confirmed, deaths)
    rucc = tidy_rucc(rucc_long)
    joined, diag = join_rucc(snap, rucc)

    common = set(snap["FIPS"]) & set(rucc["FIPS"])
    assert set(joined["FIPS"]) == common
    assert len(joined) == len(common) == 90
    assert diag["matched_counties"] == 90
    assert diag["covid_only_counties"] == 1
    assert diag["rucc_only_counties"] == 0
    assert diag["unmatched_population_share"] == pytest.approx(0.0)


def test_state_rurality_population_weighted(covid_tables):
    confirmed, deaths, rucc_long = covid_tables
    joined, _ = join_rucc(county_snapshot(confirmed, deaths), tidy_rucc(rucc_long))
    rurality = state_rurality(joined)
    # State00: RUCC 1, 2, 3 with populations 10k, 20k, 30k
    assert rurality.loc["State00"] == pytest.approx((1 * 10 + 2 * 20 + 3 * 30) / 60)
    # State29: every county has RUCC 9
    assert rurality.loc["State29"] == pytest.approx(9.0)


def test_load_from_csv_files(tmp_path, covid_tables):
    confirmed, deaths, rucc_long = covid_tables
    paths = {name: tmp_path / f"{name}.csv" for name in ("confirmed", "deaths", "rucc")}
    confirmed.to_csv(paths["confirmed"], index=False)
    deaths.to_csv(paths["deaths"], index=False)
    rucc_long.to_csv(paths["rucc"], index=False, encoding="latin-1")

    c, d = load_covid(paths["confirmed"], paths["deaths"])
    assert c.shape == confirmed.shape
    assert "Population" in d.columns
    assert len(load_rucc(paths["rucc"])) == 90


def test_load_covid_requires_population(tmp_path, covid_tables):
    confirmed, deaths, _ = covid_tables
    confirmed.to_csv(tmp_path / "c.csv", index=False)
    deaths.drop(columns="Population").to_csv(tmp_path / "d.csv", index=False)
    with pytest.raises(ValueError, match="Population"):
        load_covid(tmp_path / "c.csv", tmp_path / "d.csv")


# Total JHU population of the fixture counties: sum(60_000 + 3_000 * i) for 30 states.
FIXTURE_POPULATION = 3_105_000


def test_join_rucc_reports_unmatched_counties_on_both_sides(covid_tables, capsys):
    confirmed, deaths, rucc_long = covid_tables
    snap = county_snapshot(confirmed, deaths)
    snap = snap[snap["FIPS"] != 2001]  # State01 county missing from JHU (population 11_000)
    rucc = tidy_rucc(rucc_long)
    rucc = rucc[~rucc["FIPS"].isin([1002, 1003])]  # State00 counties missing from RUCC (20_000 + 30_000)
    capsys.readouterr()

    joined, diag = join_rucc(snap, rucc)

    assert len(joined) == 87
    assert diag["matched_counties"] == 87
    assert diag["covid_only_counties"] == 3  # 1002, 1003 and the unassigned row
    assert diag["rucc_only_counties"] == 1
    assert diag["unmatched_population_share"] == pytest.approx(50_000 / (FIXTURE_POPULATION - 11_000))
    assert diag["covid_only_states"] == ["State00"]
    out = capsys.readouterr().out
    assert "has no RUCC code" in out
    assert "State00" in out


def test_join_rucc_small_unmatched_share_is_not_flagged(covid_tables, capsys):
    confirmed, deaths, rucc_long = covid_tables
    snap = county_snapshot(confirmed, deaths)
    rucc = tidy_rucc(rucc_long)
    rucc = rucc[rucc["FIPS"] != 1003]
    capsys.readouterr()

    _, diag = join_rucc(snap, rucc)

    assert diag["covid_only_counties"] == 2
    assert diag["unmatched_population_share"] == pytest.approx(30_000 / FIXTURE_POPULATION)
    assert diag["covid_only_states"] == ["State00"]
    assert "has no RUCC code" not in capsys.readouterr().out
