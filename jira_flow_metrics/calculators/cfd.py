"""CFD (Cumulative Flow Diagram) calculator for Jira Flow Metrics.

This module provides functionality to calculate and visualize cumulative flow
diagrams: the number of issues in each status group at the end of every day.
"""

import logging

import matplotlib.pyplot as plt
import pandas as pd

from ..chart_styling_utils import (
    label_daily_axis,
    save_chart_with_styling,
    set_chart_style,
)
from ..utils import end_of_day, get_date_range
from .base_calculator import BaseCalculator

logger = logging.getLogger(__name__)


def calculate_cfd_data(timelines, lookup, start_date, end_date):
    """Per-day group populations `[{date, <group>: count, ...}]`.

    Each issue is counted under every group of the status it occupied at
    23:59:59.999 UTC that day. Statuses in no group are not counted.
    """
    if not start_date or not end_date:
        logger.warning("Missing date range for CFD")
        return []

    days = get_date_range(start_date, end_date)
    if not days:
        return []

    logger.debug("Generating CFD for %d days", len(days))

    cfd_data = []
    for day in days:
        snapshot_time = end_of_day(day)
        snapshot = {"date": day}
        snapshot.update(dict.fromkeys(lookup.group_order, 0))

        for timeline in timelines:
            status_id = timeline.status_at(snapshot_time)
            if status_id is None:
                continue
            for group_name in lookup.group_names_for(status_id):
                snapshot[group_name] += 1

        cfd_data.append(snapshot)

    return cfd_data


class CFDCalculator(BaseCalculator):
    """Create the data to build a cumulative flow diagram: one row per day
    between `start_date` and `end_date` with a count for each status group,
    in group order.

    Write as a data file and/or a diagram.
    """

    def run(self):
        data = self.get_timeline_data()
        if data is None:
            return []
        return calculate_cfd_data(
            data.timelines,
            data.lookup,
            self.settings.get("start_date"),
            self.settings.get("end_date"),
        )

    def _columns(self):
        data = self.get_timeline_data()
        group_order = data.lookup.group_order if data is not None else []
        return ["date"] + list(group_order)

    def write(self):
        data = self.get_result()

        self.write_records(data, "cfd_data", "CFD", self._columns())

        chart_path = self.settings.get("cfd_chart")
        if chart_path:
            self.write_chart(data, chart_path)
        else:
            logger.debug("No output file specified for CFD chart")

    def write_chart(self, data, output_file):
        """Write CFD chart to output file."""
        chart_data = pd.DataFrame(data, columns=self._columns())

        if len(chart_data.index) == 0 or len(chart_data.columns) < 2:
            logger.warning("Cannot draw CFD with no data")
            return

        fig, ax = plt.subplots()

        if self.settings.get("cfd_chart_title"):
            ax.set_title(self.settings["cfd_chart_title"])

        ax.set_xlabel("Date")
        ax.set_ylabel("Number of items")

        # Last group at the bottom of the stack, as in a classic CFD
        groups = list(chart_data.columns[1:])[::-1]
        ax.stackplot(
            range(len(chart_data.index)),
            [chart_data[group] for group in groups],
            labels=groups,
        )
        label_daily_axis(
            ax,
            list(pd.to_datetime(chart_data["date"])),
            self.settings.get("date_format") or "%d/%m/%Y",
        )

        handles, labels = ax.get_legend_handles_labels()
        ax.legend(
            handles[::-1], labels[::-1], loc="center left", bbox_to_anchor=(1, 0.5)
        )

        set_chart_style()
        save_chart_with_styling(fig, output_file, "CFD")
