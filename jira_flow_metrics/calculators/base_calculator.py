"""Base calculator class with common functionality for Jira Flow Metrics.

This module provides a base calculator class that contains common functionality
shared across the aggregating calculators to reduce code duplication.
"""

import logging

import pandas as pd

from ..calculator import Calculator
from ..statuses import resolve_selector
from ..utils import get_extension
from .timelines import TimelineCalculator

logger = logging.getLogger(__name__)


class BaseCalculator(Calculator):
    """Base calculator class with common functionality."""

    def get_timeline_data(self):
        """The `TimelineData` built by `TimelineCalculator`, or None."""
        return self.get_result(TimelineCalculator)

    def resolve_flow_point(self, name):
        """Resolve the selector stored under setting `name` to status ids."""
        data = self.get_timeline_data()
        if data is None:
            return set()
        return resolve_selector(
            self.settings.get(name), data.lookup.groups, data.lookup.status_master
        )

    def write_data_files(self, frame, output_files, sheet_name):
        """Write a DataFrame to each output file, by file extension."""
        for output_file in output_files:
            output_extension = get_extension(output_file)

            logger.info("Writing %s data to %s", sheet_name.lower(), output_file)
            if output_extension == ".json":
                frame.to_json(output_file, orient="records")
            elif output_extension == ".xlsx":
                frame.to_excel(output_file, sheet_name=sheet_name, index=False)
            else:
                frame.to_csv(output_file, header=True, index=False)

    def write_records(self, records, setting, sheet_name, columns):
        """Write a list of dicts to the files named in `setting`, if any."""
        output_files = self.settings.get(setting)
        if not output_files:
            logger.debug("No output file specified for %s", setting)
            return
        frame = pd.DataFrame(records or [], columns=columns)
        self.write_data_files(frame, output_files, sheet_name)

    def check_chart_data_empty(self, chart_data, chart_name):
        """Check if chart data is empty and log warning if so."""
        if chart_data is None:
            return True

        if len(chart_data.index) == 0:
            logger.warning("Cannot draw %s chart with zero items", chart_name)
            return True

        return False
