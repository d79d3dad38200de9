"""Throughput calculator for Jira Flow Metrics.

This module counts how many issues reached a cycle end status on each day of
the reporting period.
"""

import logging

import matplotlib.pyplot as plt
import pandas as pd
from scipy import stats

from ..chart_styling_utils import (
    label_daily_axis,
    save_chart_with_styling,
    set_chart_style,
)
from ..utils import get_date_range, utc_day
from .base_calculator import BaseCalculator

logger = logging.getLogger(__name__)

THROUGHPUT_COLUMNS = ["date", "count"]


def calculate_throughput(timelines, end_ids, start_date, end_date):
    """Daily completion counts `[{date, count}]` for every day in the range.

    An issue completes on the UTC day it first entered an end status. Days
    without completions count 0. Returns an empty list when the end status
    set is empty or the date range is missing, invalid or too long.
    """
    if not end_ids or not start_date or not end_date:
        logger.warning("Missing end status configuration or date range")
        return []

    days = get_date_range(start_date, end_date)
    if not days:
        return []

    counts = dict.fromkeys(days, 0)
    completions = 0
    for timeline in timelines:
        end_event = timeline.first_event_in(end_ids)
        if end_event is None:
            continue
        completions += 1
        day = utc_day(end_event.timestamp)
        if day in counts:
            counts[day] += 1

    logger.info("Found %d completions overall", completions)
    return [{"date": day, "count": count} for day, count in counts.items()]


class ThroughputCalculator(BaseCalculator):
    """Daily throughput: issues reaching the `cycle_end` flow point per day
    between `start_date` and `end_date`.
    """

    def run(self):
        data = self.get_timeline_data()
        if data is None:
            return []
        return calculate_throughput(
            data.timelines,
            self.resolve_flow_point("cycle_end"),
            self.settings.get("start_date"),
            self.settings.get("end_date"),
        )

    def write(self):
        data = self.get_result()

        self.write_records(data, "throughput_data", "Throughput", THROUGHPUT_COLUMNS)

        chart_path = self.settings.get("throughput_chart")
        if chart_path:
            self.write_chart(data, chart_path)
        else:
            logger.debug("No output file specified for throughput chart")

    def write_chart(self, data, output_file):
        """Write throughput chart with a linear trend line."""
        chart_data = pd.DataFrame(data, columns=THROUGHPUT_COLUMNS)

        if len(chart_data.index) == 0:
            logger.warning("Cannot draw throughput chart with no data")
            return

        fig, ax = plt.subplots()

        if self.settings.get("throughput_chart_title"):
            ax.set_title(self.settings["throughput_chart_title"])

        chart_data["day"] = range(len(chart_data.index))

        if len(chart_data.index) > 1:
            slope, intercept, _, _, _ = stats.linregress(
                chart_data["day"], chart_data["count"]
            )
            chart_data["fitted"] = slope * chart_data["day"] + intercept
        else:
            chart_data["fitted"] = chart_data["count"]

        ax.set_xlabel("Date")
        ax.set_ylabel("Number of items")

        ax.plot(chart_data["day"], chart_data["count"], marker="o")
        label_daily_axis(
            ax,
            list(pd.to_datetime(chart_data["date"])),
            self.settings.get("date_format") or "%d/%m/%Y",
        )

        _, top = ax.get_ylim()
        ax.set_ylim(0, top + 1)

        ax.plot(chart_data["day"], chart_data["fitted"], "--", linewidth=2)

        set_chart_style()
        save_chart_with_styling(fig, output_file, "throughput")
