"""Summary statistics calculator for Jira Flow Metrics.

Headline numbers for a metrics run, including the current work in progress.
"""

import logging

from ..timeline import current_status_id
from .base_calculator import BaseCalculator
from .cycletime import CycleTimeCalculator, empty_cycle_time
from .support import SupportMetricsCalculator, empty_support_metrics

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = [
    "total_issues",
    "avg_cycle_time",
    "p50_cycle_time",
    "p85_cycle_time",
    "current_wip",
    "avg_mtta_hours",
    "avg_mttr_hours",
]


def wip_status_ids(lookup, triage_ids, start_ids, end_ids):
    """Every known status that is not a triage, cycle start or cycle end status.

    This includes statuses that belong to no group at all.
    """
    excluded = set(triage_ids) | set(start_ids) | set(end_ids)
    return {status_id for status_id in lookup.status_master if status_id not in excluded}


def count_current_wip(issues, wip_ids):
    """Number of issues whose current status is a WIP status."""
    return sum(1 for issue in issues if current_status_id(issue) in wip_ids)


def calculate_summary_stats(issues, wip_ids, cycle_time_data, support_metrics):
    """Bundle totals, cycle time statistics, WIP and support averages."""
    current_wip = count_current_wip(issues, wip_ids)
    logger.info("Calculated current WIP: %d", current_wip)

    return {
        "total_issues": len(issues),
        "avg_cycle_time": cycle_time_data.get("avg") or 0,
        "p50_cycle_time": cycle_time_data.get("p50") or 0,
        "p85_cycle_time": cycle_time_data.get("p85") or 0,
        "current_wip": current_wip,
        "avg_mtta_hours": support_metrics.get("avg_mtta_hours") or 0,
        "avg_mttr_hours": support_metrics.get("avg_mttr_hours") or 0,
    }


class SummaryCalculator(BaseCalculator):
    """Summary statistics; runs after the cycle time and support calculators."""

    def run(self):
        data = self.get_timeline_data()
        issues = data.issues if data is not None else []
        wip_ids = set()
        if data is not None:
            wip_ids = wip_status_ids(
                data.lookup,
                self.resolve_flow_point("triage"),
                self.resolve_flow_point("cycle_start"),
                self.resolve_flow_point("cycle_end"),
            )
            logger.debug(
                "WIP statuses: %s",
                ", ".join(sorted(data.lookup.status_name(s) for s in wip_ids)),
            )

        return calculate_summary_stats(
            issues,
            wip_ids,
            self.get_result(CycleTimeCalculator, empty_cycle_time()),
            self.get_result(SupportMetricsCalculator, empty_support_metrics()),
        )

    def write(self):
        self.write_records([self.get_result()], "summary_data", "Summary", SUMMARY_COLUMNS)
