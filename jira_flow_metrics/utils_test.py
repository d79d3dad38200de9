"""Tests for utility functions in Jira Flow Metrics."""

import datetime

import pytest

from .test_classes import FauxFieldValue
from .test_data_factory import ts
from .utils import (
    MS_PER_DAY,
    MS_PER_HOUR,
    aggregation_time,
    end_of_day,
    get_date_range,
    get_duration,
    get_extension,
    get_percentile,
    get_tolerant_attr,
    multi_get,
    parse_timestamp,
    to_date,
    utc_day,
)


def test_get_extension():
    """Test get_extension functionality."""
    assert get_extension("foo.csv") == ".csv"
    assert get_extension("/path/to/foo.XLSX") == ".xlsx"
    assert get_extension("foo") == ""


def test_get_tolerant_attr():
    """Keys and attributes are read alike."""
    assert get_tolerant_attr({"id": "1"}, "id") == "1"
    assert get_tolerant_attr(FauxFieldValue("1", "Open"), "name") == "Open"
    assert get_tolerant_attr({"from": "1"}, "from", "from_") == "1"
    assert get_tolerant_attr({}, "id", default="x") == "x"
    assert get_tolerant_attr(None, "id") is None


def test_multi_get():
    """Nested paths through dicts and objects."""
    issue = {"fields": {"status": FauxFieldValue("4", "Done")}}
    assert multi_get(issue, "fields.status.id") == "4"
    assert multi_get(issue, "fields.priority.id") is None
    assert multi_get(issue, "fields.priority.id", "none") == "none"


def test_parse_timestamp():
    """JIRA timestamps, naive timestamps and invalid values."""
    expected = datetime.datetime(2024, 1, 1, 10, 0, tzinfo=datetime.timezone.utc)

    assert parse_timestamp("2024-01-01T10:00:00.000+0000") == expected
    assert parse_timestamp("2024-01-01T12:00:00.000+0200") == expected
    assert parse_timestamp("2024-01-01T10:00:00") == expected
    assert parse_timestamp(datetime.datetime(2024, 1, 1, 10, 0)) == expected
    assert parse_timestamp("not a date") is None
    assert parse_timestamp("") is None
    assert parse_timestamp(None) is None
    assert parse_timestamp(12345) is None

    # fragments are not completed from the current date
    assert parse_timestamp("Monday") is None
    assert parse_timestamp("10:30") is None
    assert parse_timestamp("5") is None


def test_aggregation_time(caplog):
    """Naive datetimes and ISO strings become aware datetimes."""
    expected = datetime.datetime(2024, 1, 10, tzinfo=datetime.timezone.utc)

    assert aggregation_time(expected) is expected
    assert aggregation_time(datetime.datetime(2024, 1, 10)) == expected
    assert aggregation_time("2024-01-10T00:00:00Z") == expected
    assert aggregation_time("2024-01-10T02:00:00+0200") == expected

    before = datetime.datetime.now(datetime.timezone.utc)
    assert aggregation_time() >= before
    assert aggregation_time("Monday") >= before
    assert "Invalid aggregation time" in caplog.text


def test_to_date():
    """Strings, dates and datetimes all become dates."""
    assert to_date("2024-01-05") == datetime.date(2024, 1, 5)
    assert to_date(datetime.date(2024, 1, 5)) == datetime.date(2024, 1, 5)
    assert to_date(datetime.datetime(2024, 1, 5, 13, 0)) == datetime.date(2024, 1, 5)
    assert to_date("garbage") is None
    assert to_date(None) is None


def test_utc_day_and_end_of_day():
    """Days are always UTC."""
    late_evening_elsewhere = parse_timestamp("2024-01-01T23:30:00.000-0200")
    assert utc_day(late_evening_elsewhere) == "2024-01-02"

    assert end_of_day("2024-01-02") == datetime.datetime(
        2024, 1, 2, 23, 59, 59, 999000, tzinfo=datetime.timezone.utc
    )


def test_get_duration():
    """Durations in each unit, and the zero cases."""
    start = ts("2024-01-01T00:00:00")
    end = ts("2024-01-02T12:00:00")

    assert get_duration(start, end, "ms") == 1.5 * MS_PER_DAY
    assert get_duration(start, end, "hours") == 36
    assert get_duration(start, end) == 1.5
    assert get_duration(end, start) == 0
    assert get_duration(start, start) == 0
    assert get_duration(None, end) == 0
    assert get_duration(start, None) == 0
    assert MS_PER_DAY == 24 * MS_PER_HOUR


def test_get_percentile():
    """Nearest-rank percentiles."""
    assert get_percentile([1, 2, 3, 4, 5], 50) == 3
    assert get_percentile([1, 2, 3, 4, 5], 85) == 5
    assert get_percentile([1, 2, 3, 4], 50) == 2
    assert get_percentile([7], 85) == 7
    assert get_percentile([1, 2, 3], 0) == 1
    assert get_percentile([], 50) == 0


def test_get_date_range():
    """Inclusive day lists."""
    assert get_date_range("2024-01-30", "2024-02-02") == [
        "2024-01-30",
        "2024-01-31",
        "2024-02-01",
        "2024-02-02",
    ]
    assert get_date_range(datetime.date(2024, 1, 1), "2024-01-01") == ["2024-01-01"]


@pytest.mark.parametrize(
    "start_date, end_date",
    [
        ("2024-01-05", "2024-01-01"),
        (None, "2024-01-01"),
        ("2024-01-01", ""),
        ("garbage", "2024-01-01"),
    ],
)
def test_get_date_range_invalid(start_date, end_date):
    """Missing, invalid and reversed ranges give no days."""
    assert get_date_range(start_date, end_date) == []


def test_get_date_range_limit(caplog):
    """Ranges longer than 1000 days are refused."""
    start = datetime.date(2020, 1, 1)

    assert len(get_date_range(start, start + datetime.timedelta(days=999))) == 1000
    assert get_date_range(start, start + datetime.timedelta(days=1000)) == []
    assert "more than the maximum" in caplog.text
