"""Tests for the time in status calculator in Jira Flow Metrics."""

import pandas as pd
import pytest

from ..calculator import run_calculators
from ..test_data_factory import NOW, ts
from ..timeline import IssueTimeline, TimelineEvent
from ..utils import MS_PER_HOUR
from .timeinstatus import (
    TimeInStatusCalculator,
    accumulate_time_in_status,
    calculate_time_in_status,
)
from .timelines import TimelineCalculator


def _hours(rows, key="name"):
    return {row[key]: row["total_hours"] for row in rows}


def test_accumulate_time_in_status(timelines):
    """The last interval of each issue runs until now."""
    totals = accumulate_time_in_status(timelines, NOW)

    assert totals == {
        "1": (2 + 24 + 120) * MS_PER_HOUR,
        "2": (72 + 168) * MS_PER_HOUR,
        "4": 142 * MS_PER_HOUR,
    }


def test_calculate_time_in_status(timelines, lookup):
    """Totals and averages per status and group."""
    result = calculate_time_in_status(timelines, lookup, NOW)

    assert _hours(result["by_status"]) == {
        "Done": 142,
        "In Progress": 240,
        "In Review": 0,
        "Open": 146,
        "Reopened": 0,
    }
    in_progress = result["by_status"][1]
    assert in_progress["id"] == "2"
    assert in_progress["total_days"] == pytest.approx(10)
    assert in_progress["avg_hours"] == pytest.approx(80)
    assert in_progress["avg_days"] == pytest.approx(80 / 24)

    assert _hours(result["by_group"], "group_name") == {
        "Triage": 146,
        "In progress": 240,
        "Done": 142,
    }


def test_single_issue_time_adds_up_to_its_age(timelines, lookup):
    """With every status grouped, an issue's time sums to its age."""
    result = calculate_time_in_status(timelines[:1], lookup, NOW)

    total_ms = sum(row["total_ms"] for row in result["by_group"])
    assert total_ms == (NOW - timelines[0].created).total_seconds() * 1000


def test_negative_intervals_are_excluded(lookup, caplog):
    """Events after `now` do not subtract time."""
    timeline = IssueTimeline(
        key="A-1",
        events=(
            TimelineEvent(ts("2024-01-09T00:00:00"), "1"),
            TimelineEvent(ts("2024-01-11T00:00:00"), "2"),
        ),
    )

    result = calculate_time_in_status([timeline], lookup, NOW)

    assert _hours(result["by_status"])["Open"] == 48
    assert _hours(result["by_status"])["In Progress"] == 0
    assert "Ignored 1 negative status intervals" in caplog.text


def test_no_timelines(lookup):
    """Grouped statuses are listed with zero durations."""
    result = calculate_time_in_status([], lookup, NOW)

    assert all(row["total_ms"] == 0 and row["avg_days"] == 0 for row in result["by_status"])
    assert len(result["by_group"]) == 3


def test_time_in_status_calculator_write(tmp_path, source, settings):
    """Status and group times are written to their own files."""
    settings["time_in_status_data"] = [str(tmp_path / "time_in_status.csv")]
    settings["time_in_group_data"] = [str(tmp_path / "time_in_group.xlsx")]

    run_calculators([TimelineCalculator, TimeInStatusCalculator], source, settings)

    by_status = pd.read_csv(tmp_path / "time_in_status.csv", dtype={"id": str})
    assert list(by_status.columns) == [
        "id",
        "name",
        "total_ms",
        "total_hours",
        "total_days",
        "avg_hours",
        "avg_days",
    ]
    assert list(by_status["id"]) == ["4", "2", "3", "1", "5"]

    by_group = pd.read_excel(tmp_path / "time_in_group.xlsx", sheet_name="Time in group")
    assert list(by_group["group_name"]) == ["Triage", "In progress", "Done"]
