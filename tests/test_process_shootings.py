import pandas as pd
import pytest

from eda_reports.process_shootings import (
    borough_hour_matrix,
    bucket_label,
    clean_incidents,
    day_hour_matrix,
    hour_of_week_counts,
    load_shootings,
    weeks_covered,
    yearly_counts,
)


def test_clean_incidents_dedupes_victim_rows(shooting_rows):
    incidents = clean_incidents(shooting_rows)
    assert len(incidents) == shooting_rows["INCIDENT_KEY"].nunique()
    assert incidents["INCIDENT_KEY"].is_unique


def test_clean_incidents_without_dedupe_keeps_all_rows(shooting_rows):
    incidents = clean_incidents(shooting_rows, dedupe=False)
    assert len(incidents) == len(shooting_rows)


def test_clean_incidents_derives_calendar_fields(shooting_rows):
    incidents = clean_incidents(shooting_rows)
    first = incidents.iloc[0]
    assert first["occurred_at"] == pd.Timestamp("2022-01-03 00:00:00")
    assert first["day_of_week"] == 0
    assert first["hour"] == 0
    assert first["hour_of_week"] == 0
    assert set(incidents["BORO"]) == {"Bronx", "Brooklyn", "Queens", "Manhattan", "Staten Island"}


def test_clean_incidents_missing_columns():
    with pytest.raises(ValueError, match="OCCUR_TIME"):
        clean_incidents(pd.DataFrame({"INCIDENT_KEY": ["1"], "OCCUR_DATE": ["01/01/2022"], "BORO": ["BRONX"]}))


def test_clean_incidents_malformed_time_is_fatal():
    bad = pd.DataFrame(
        {"INCIDENT_KEY": ["1"], "OCCUR_DATE": ["01/01/2022"], "OCCUR_TIME": ["not a time"], "BORO": ["BRONX"]}
    )
    with pytest.raises(ValueError):
        clean_incidents(bad)


def test_hour_of_week_counts_one_row_per_bucket(shooting_rows):
    incidents = clean_incidents(shooting_rows)
    buckets = hour_of_week_counts(incidents)
    assert len(buckets) == 168
    assert buckets.index.tolist() == list(range(168))
    assert (buckets["count"] >= 0).all()
    assert (buckets["rate_per_week"] >= 0).all()
    assert buckets["count"].sum() == len(incidents)


def test_hour_of_week_counts_rates(shooting_rows):
    incidents = clean_incidents(shooting_rows)
    assert weeks_covered(incidents) == pytest.approx(4.0)
    buckets = hour_of_week_counts(incidents)
    assert buckets.loc[0, "rate_per_week"] == pytest.approx(1.0)
    assert buckets.loc[18, "rate_per_week"] == pytest.approx(3.0)
    sat_2am = 5 * 24 + 2
    assert buckets.loc[sat_2am, "rate_per_week"] == pytest.approx(6.0)
    assert buckets.loc[sat_2am, "day_of_week"] == 5
    assert buckets.loc[sat_2am, "hour"] == 2


def test_hour_of_week_counts_fills_empty_buckets():
    rows = pd.DataFrame(
        {
            "INCIDENT_KEY": ["1", "2"],
            "OCCUR_DATE": ["01/03/2022", "01/03/2022"],
            "OCCUR_TIME": ["10:15:00", "10:45:00"],
            "BORO": ["BRONX", "QUEENS"],
        }
    )
    buckets = hour_of_week_counts(clean_incidents(rows))
    assert len(buckets) == 168
    assert buckets.loc[10, "count"] == 2
    assert buckets["count"].drop(10).eq(0).all()


def test_day_hour_and_borough_matrices(shooting_rows):
    incidents = clean_incidents(shooting_rows)
    dh = day_hour_matrix(incidents)
    assert dh.shape == (7, 24)
    assert dh.index.tolist() == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    assert dh.to_numpy().sum() == len(incidents)
    assert dh.loc["Sat", 2] == 24

    bh = borough_hour_matrix(incidents)
    assert bh.shape == (5, 24)
    assert bh.to_numpy().sum() == len(incidents)
    totals = bh.sum(axis=1).tolist()
    assert totals == sorted(totals, reverse=True)


def test_yearly_counts(shooting_rows):
    incidents = clean_incidents(shooting_rows)
    yearly = yearly_counts(incidents)
    assert yearly.to_dict() == {2022: len(incidents)}


def test_bucket_label():
    assert bucket_label(0) == "Mon 00:00"
    assert bucket_label(122) == "Sat 02:00"
    assert bucket_label(167) == "Sun 23:00"


def test_load_shootings_reads_csv(tmp_path, shooting_rows):
    path = tmp_path / "shootings.csv"
    shooting_rows.to_csv(path, index=False)
    df = load_shootings(path)
    assert len(df) == len(shooting_rows)
    assert df["INCIDENT_KEY"].iloc[0] == shooting_rows["INCIDENT_KEY"].iloc[0]
