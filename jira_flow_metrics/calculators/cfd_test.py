"""Tests for the CFD calculator in Jira Flow Metrics."""

import pandas as pd

from ..calculator import run_calculators
from ..statuses import build_status_lookup
from .cfd import CFDCalculator, calculate_cfd_data
from .timelines import TimelineCalculator


def test_calculate_cfd_data(timelines, lookup):
    """Group populations at the end of each day."""
    assert calculate_cfd_data(timelines, lookup, "2024-01-01", "2024-01-05") == [
        {"date": "2024-01-01", "Triage": 0, "In progress": 1, "Done": 0},
        {"date": "2024-01-02", "Triage": 1, "In progress": 1, "Done": 0},
        {"date": "2024-01-03", "Triage": 0, "In progress": 2, "Done": 0},
        {"date": "2024-01-04", "Triage": 0, "In progress": 1, "Done": 1},
        {"date": "2024-01-05", "Triage": 1, "In progress": 1, "Done": 1},
    ]


def test_cfd_counts_status_in_each_group(timelines, statuses):
    """A status in two groups adds to both; ungrouped statuses to none."""
    lookup = build_status_lookup(
        statuses,
        [
            {"name": "Started", "statuses": ["2", "4"]},
            {"name": "Finished", "statuses": ["4"]},
        ],
    )

    assert calculate_cfd_data(timelines, lookup, "2024-01-05", "2024-01-05") == [
        {"date": "2024-01-05", "Started": 2, "Finished": 1},
    ]


def test_cfd_invalid_range(timelines, lookup, caplog):
    """Missing or reversed ranges give no data."""
    assert calculate_cfd_data(timelines, lookup, None, "2024-01-05") == []
    assert calculate_cfd_data(timelines, lookup, "2024-01-05", "2024-01-01") == []
    assert "Missing date range for CFD" in caplog.text


def test_cfd_calculator_write(tmp_path, source, settings):
    """Data file in group order, and a chart."""
    settings["cfd_data"] = [str(tmp_path / "cfd.csv")]
    settings["cfd_chart"] = str(tmp_path / "cfd.png")
    settings["cfd_chart_title"] = "Cumulative Flow Diagram"

    run_calculators([TimelineCalculator, CFDCalculator], source, settings)

    data = pd.read_csv(tmp_path / "cfd.csv")
    assert list(data.columns) == ["date", "Triage", "In progress", "Done"]
    assert list(data["Done"]) == [0, 0, 0, 1, 1]
    assert (tmp_path / "cfd.png").exists()


def test_cfd_chart_skipped_without_data(tmp_path, source, settings, caplog):
    """No chart is drawn without any days."""
    settings["start_date"] = None
    settings["cfd_chart"] = str(tmp_path / "cfd.png")

    run_calculators([TimelineCalculator, CFDCalculator], source, settings)

    assert not (tmp_path / "cfd.png").exists()
    assert "Cannot draw CFD with no data" in caplog.text
