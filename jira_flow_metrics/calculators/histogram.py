"""Histogram calculator for Jira Flow Metrics.

This module writes the cycle time histogram as data and as a bar chart.
"""

import logging

import matplotlib.pyplot as plt
import pandas as pd

from ..chart_styling_utils import save_chart_with_styling, set_chart_style
from .base_calculator import BaseCalculator
from .cycletime import CycleTimeCalculator

logger = logging.getLogger(__name__)

HISTOGRAM_COLUMNS = ["range", "count"]


class HistogramCalculator(BaseCalculator):
    """Cycle time histogram rows `{range, count}` taken from the cycle time
    result, with bucket widths adapted to the longest cycle time.
    """

    def run(self):
        cycle_time_data = self.get_result(CycleTimeCalculator)
        if not cycle_time_data:
            return []
        return cycle_time_data["histogram"]

    def write(self):
        histogram = self.get_result()

        self.write_records(histogram, "histogram_data", "Histogram", HISTOGRAM_COLUMNS)

        chart_path = self.settings.get("histogram_chart")
        if chart_path:
            self.write_chart(histogram, chart_path)
        else:
            logger.debug("No output file specified for histogram chart")

    def write_chart(self, histogram, output_file):
        """Write the histogram as a bar chart."""
        chart_data = pd.DataFrame(histogram, columns=HISTOGRAM_COLUMNS)
        if self.check_chart_data_empty(chart_data, "histogram"):
            return

        cycle_time_data = self.get_result(CycleTimeCalculator)

        fig, ax = plt.subplots()

        if self.settings.get("histogram_chart_title"):
            ax.set_title(self.settings["histogram_chart_title"])

        ax.bar(chart_data["range"], chart_data["count"])
        ax.set_xlabel("Cycle time")
        ax.set_ylabel("Number of items")
        plt.setp(ax.get_xticklabels(), rotation=70, size="small")

        # Summary statistics as a block of text below the chart
        fig.text(
            0.5,
            -0.03,
            f"Mean {cycle_time_data['avg']:.1f} days | "
            f"50% {cycle_time_data['p50']:.1f} days | "
            f"85% {cycle_time_data['p85']:.1f} days",
            ha="center",
            va="top",
            fontsize="small",
        )

        set_chart_style()
        save_chart_with_styling(fig, output_file, "histogram")
