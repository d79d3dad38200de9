"""Combined flow metrics result for Jira Flow Metrics.

Collects the output of every aggregating calculator into one plain nested
structure, and can export it as a single JSON document.
"""

import json
import logging

from .base_calculator import BaseCalculator
from .cfd import CFDCalculator
from .cycletime import CycleTimeCalculator, empty_cycle_time
from .distribution import DistributionCalculator, empty_distribution
from .summary import SummaryCalculator
from .support import SupportMetricsCalculator, empty_support_metrics
from .throughput import ThroughputCalculator
from .timeinstatus import TimeInStatusCalculator, empty_time_in_status

logger = logging.getLogger(__name__)


class FlowMetricsCalculator(BaseCalculator):
    """Assemble the complete metrics result.

    Returns None when no timelines could be built for the source. Must run
    after every other calculator.
    """

    def run(self):
        data = self.get_timeline_data()
        if data is None:
            return None

        lookup = data.lookup
        return {
            "distribution": self.get_result(
                DistributionCalculator, empty_distribution()
            ),
            "time_in_status": self.get_result(
                TimeInStatusCalculator, empty_time_in_status()
            ),
            "cycle_time_data": self.get_result(CycleTimeCalculator, empty_cycle_time()),
            "throughput_data": self.get_result(ThroughputCalculator, []),
            "cfd_data": self.get_result(CFDCalculator, []),
            "summary_stats": self.get_result(SummaryCalculator),
            "support_metrics": self.get_result(
                SupportMetricsCalculator, empty_support_metrics()
            ),
            "status_to_group": {
                status_id: names[0]
                for status_id, names in lookup.status_to_groups.items()
                if names
            },
            "status_to_groups": {
                status_id: list(names)
                for status_id, names in lookup.status_to_groups.items()
            },
            "status_master": {
                status_id: {"name": name}
                for status_id, name in lookup.status_master.items()
            },
        }

    def write(self):
        output_files = self.settings.get("metrics_data")
        if not output_files:
            logger.debug("No output file specified for metrics data")
            return

        result = self.get_result()
        if result is None:
            logger.warning("Cannot write metrics data with no result")
            return

        for output_file in output_files:
            logger.info("Writing metrics data to %s", output_file)
            with open(output_file, "w", encoding="utf-8") as out:
                json.dump(result, out, indent=2)
