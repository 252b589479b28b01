"""Tests for date parsing and day counts."""

from datetime import date, datetime

import pandas as pd
import pytest

from foodbank_ai.constants import FAR_FUTURE_DAYS
from foodbank_ai.temporal import (
    as_reference_date,
    days_since,
    days_until,
    parse_date,
    to_iso_date,
)


def test_days_until_whole_days():
    """Whole-day differences are exact."""
    assert days_until("2026-02-04", "2026-02-01") == 3
    assert days_until(date(2026, 2, 1), date(2026, 2, 1)) == 0


def test_days_until_rounds_partial_days_up():
    """A few hours remaining counts as one day."""
    assert days_until("2026-02-01T06:00:00", "2026-02-01") == 1


def test_days_until_negative_for_past_dates():
    assert days_until("2026-01-30", "2026-02-01") == -2


def test_days_until_sentinel_for_bad_input():
    """Missing or unparseable dates land far in the future."""
    assert days_until(None, "2026-02-01") == FAR_FUTURE_DAYS
    assert days_until("not a date", "2026-02-01") == FAR_FUTURE_DAYS
    assert days_until("2026-02-04", None) == FAR_FUTURE_DAYS


def test_days_since():
    assert days_since("2026-01-02", "2026-02-01") == 30
    assert days_since(None, "2026-02-01") is None
    assert days_since("garbage", "2026-02-01") is None


def test_parse_date_accepts_common_types():
    expected = pd.Timestamp("2026-02-01")
    assert parse_date("2026-02-01") == expected
    assert parse_date(date(2026, 2, 1)) == expected
    assert parse_date(datetime(2026, 2, 1)) == expected
    assert parse_date(expected) == expected
    assert parse_date("") is None
    assert parse_date(True) is None
    assert parse_date(["2026-02-03", "2026-02-04"]) is None
    assert parse_date({"date": "2026-02-03"}) is None


def test_parse_date_converts_timezones_to_utc():
    ts = parse_date("2026-02-01T05:00:00+05:00")
    assert ts.tzinfo is None
    assert ts == pd.Timestamp("2026-02-01 00:00:00")


def test_to_iso_date():
    assert to_iso_date("2026-02-01T13:45:00") == "2026-02-01"
    assert to_iso_date(None) is None


def test_as_reference_date():
    assert as_reference_date("2026-02-01") == pd.Timestamp("2026-02-01")
    assert as_reference_date(None) == pd.Timestamp(date.today())
    with pytest.raises(ValueError):
        as_reference_date("yesterday-ish")
