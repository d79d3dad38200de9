"""Tests for the cycle time calculator in Jira Flow Metrics."""

import datetime

import pandas as pd
import pytest

from ..calculator import run_calculators
from ..test_data_factory import ts
from ..timeline import IssueTimeline, TimelineEvent
from .cycletime import (
    CycleTimeCalculator,
    bucket_size_for,
    calculate_cycle_time,
    calculate_histogram,
    empty_cycle_time,
    find_cycle,
    format_bound,
)
from .timelines import TimelineCalculator


def _cycle(key, start, days):
    """An issue going Open -> In Progress at `start` -> Done `days` later."""
    started = ts(start)
    return IssueTimeline(
        key=key,
        events=(
            TimelineEvent(started - datetime.timedelta(hours=1), "1"),
            TimelineEvent(started, "2"),
            TimelineEvent(started + datetime.timedelta(days=days), "4"),
        ),
    )


def test_calculate_cycle_time(timelines):
    """A three day cycle lands in the 3-3.5 days bucket."""
    result = calculate_cycle_time(timelines, {"2", "3"}, {"4"})

    assert result == {
        "durations": [3.0],
        "histogram": [{"range": "3-3.5 days", "count": 1}],
        "avg": 3.0,
        "p50": 3.0,
        "p85": 3.0,
    }


def test_cycle_time_statistics():
    """Durations are sorted; mean and nearest-rank percentiles."""
    timelines = [_cycle(f"A-{days}", "2024-01-01T00:00:00", days) for days in (4, 1, 5, 3, 2)]

    result = calculate_cycle_time(timelines, {"2"}, {"4"})

    assert result["durations"] == [1, 2, 3, 4, 5]
    assert result["avg"] == 3
    assert result["p50"] == 3
    assert result["p85"] == 5


def test_cycle_time_empty_status_sets(timelines, caplog):
    """Unresolved start or end statuses give the zeroed default."""
    assert calculate_cycle_time(timelines, set(), {"4"}) == empty_cycle_time()
    assert calculate_cycle_time(timelines, {"2"}, set()) == empty_cycle_time()
    assert "Could not resolve cycle start or end statuses" in caplog.text


def test_cycle_time_nothing_completed(timelines):
    """No completed cycle gives the zeroed default."""
    assert calculate_cycle_time(timelines, {"2"}, {"6"}) == empty_cycle_time()


def test_find_cycle_ignores_end_before_start():
    """The end must be at or after the first start."""
    timeline = IssueTimeline(
        key="A-1",
        events=(
            TimelineEvent(ts("2024-01-01T00:00:00"), "4"),
            TimelineEvent(ts("2024-01-02T00:00:00"), "2"),
            TimelineEvent(ts("2024-01-04T00:00:00"), "4"),
        ),
    )

    start_event, end_event = find_cycle(timeline, {"2"}, {"4"})

    assert start_event.timestamp == ts("2024-01-02T00:00:00")
    assert end_event.timestamp == ts("2024-01-04T00:00:00")
    assert find_cycle(timeline, {"3"}, {"4"}) is None
    assert find_cycle(timeline, {"2"}, {"5"}) is None


@pytest.mark.parametrize(
    "max_duration, size",
    [(150, 10), (100.5, 10), (21, 2), (11, 1), (5, 0.5), (1.5, 0.5), (1, 0.1), (0.2, 0.1)],
)
def test_bucket_size_for(max_duration, size):
    """Bucket widths follow the longest cycle time."""
    assert bucket_size_for(max_duration) == size


def test_format_bound():
    """Whole numbers without decimals."""
    assert format_bound(3.0) == "3"
    assert format_bound(10) == "10"
    assert format_bound(3.5) == "3.5"


def test_calculate_histogram():
    """Buckets are labelled by their bounds and counted."""
    assert calculate_histogram([3.0, 3.2, 4.75, 9.9]) == [
        {"range": "3-3.5 days", "count": 2},
        {"range": "4.5-5 days", "count": 1},
        {"range": "9.5-10 days", "count": 1},
    ]
    assert calculate_histogram([1, 21]) == [
        {"range": "0-2 days", "count": 1},
        {"range": "20-22 days", "count": 1},
    ]
    assert calculate_histogram([]) == []


def test_histogram_is_sorted_numerically():
    """Buckets are ordered by lower bound, not by label."""
    assert [row["range"] for row in calculate_histogram([150, 25, 5])] == [
        "0-10 days",
        "20-30 days",
        "150-160 days",
    ]


def test_cycle_time_calculator(source, settings):
    """The calculator resolves the configured flow points."""
    results = run_calculators([TimelineCalculator, CycleTimeCalculator], source, settings, write=False)

    assert results[CycleTimeCalculator]["durations"] == [3.0]


def test_cycle_time_calculator_no_such_group(source, settings, caplog):
    """A missing group gives the zeroed default."""
    settings["cycle_start"] = {"type": "group", "value": "NoSuchGroup"}

    results = run_calculators([TimelineCalculator, CycleTimeCalculator], source, settings, write=False)

    assert results[CycleTimeCalculator] == empty_cycle_time()
    assert "NoSuchGroup" in caplog.text


def test_cycle_time_calculator_write(tmp_path, source, settings):
    """One record per completed issue."""
    output_file = tmp_path / "cycletime.json"
    settings["cycle_time_data"] = [str(output_file)]

    run_calculators([TimelineCalculator, CycleTimeCalculator], source, settings)

    data = pd.read_json(output_file, orient="records", convert_dates=False)
    assert list(data["key"]) == ["A-1"]
    assert list(data["start"]) == ["2024-01-01T02:00:00+00:00"]
    assert list(data["end"]) == ["2024-01-04T02:00:00+00:00"]
    assert list(data["cycle_time"]) == [3.0]
