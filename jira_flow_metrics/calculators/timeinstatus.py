"""Time in status calculator for Jira Flow Metrics.

This module totals how long issues spent in each status and status group.
"""

import logging

from ..utils import MS_PER_DAY, MS_PER_HOUR
from .base_calculator import BaseCalculator
from .distribution import status_sort_key

logger = logging.getLogger(__name__)

DURATION_COLUMNS = ["total_ms", "total_hours", "total_days", "avg_hours", "avg_days"]
TIME_IN_STATUS_COLUMNS = ["id", "name"] + DURATION_COLUMNS
TIME_IN_GROUP_COLUMNS = ["group_name"] + DURATION_COLUMNS


def empty_time_in_status():
    """The time in status result when nothing can be measured."""
    return {"by_status": [], "by_group": []}


def _durations(total_ms, issue_count):
    if total_ms <= 0:
        return {
            "total_ms": 0,
            "total_hours": 0,
            "total_days": 0,
            "avg_hours": 0,
            "avg_days": 0,
        }
    return {
        "total_ms": total_ms,
        "total_hours": total_ms / MS_PER_HOUR,
        "total_days": total_ms / MS_PER_DAY,
        "avg_hours": total_ms / MS_PER_HOUR / issue_count if issue_count else 0,
        "avg_days": total_ms / MS_PER_DAY / issue_count if issue_count else 0,
    }


def accumulate_time_in_status(timelines, now):
    """Total milliseconds spent in each status across all timelines.

    The last interval of each timeline ends at `now`. Non-positive
    intervals are skipped; negative ones are logged.
    """
    totals = {}
    negative = 0

    for timeline in timelines:
        events = timeline.events
        for index, event in enumerate(events):
            end = events[index + 1].timestamp if index + 1 < len(events) else now
            duration_ms = (end - event.timestamp).total_seconds() * 1000
            if duration_ms < 0:
                negative += 1
                logger.debug(
                    "Issue %s has a negative interval in status %s (%.0f ms)",
                    timeline.key,
                    event.status_id,
                    duration_ms,
                )
                continue
            if duration_ms == 0:
                continue
            totals[event.status_id] = totals.get(event.status_id, 0) + duration_ms

    if negative > 0:
        logger.warning(
            "Ignored %d negative status intervals (clock skew or events "
            "dated after the aggregation time)",
            negative,
        )
    return totals


def calculate_time_in_status(timelines, lookup, now):
    """Time spent per status and per group.

    Averages divide by the number of timelines, including issues that never
    visited the status.
    """
    totals = accumulate_time_in_status(timelines, now)
    issue_count = len(timelines)

    by_status = []
    for status_id in lookup.status_master:
        total_ms = totals.get(status_id, 0)
        if total_ms <= 0 and not lookup.group_names_for(status_id):
            continue
        row = {"id": status_id, "name": lookup.status_name(status_id)}
        row.update(_durations(total_ms, issue_count))
        by_status.append(row)
    by_status.sort(key=status_sort_key(lookup))

    group_totals = dict.fromkeys(lookup.group_order, 0)
    for row in by_status:
        for group_name in lookup.group_names_for(row["id"]):
            group_totals[group_name] += row["total_ms"]

    by_group = []
    for group_name, total_ms in group_totals.items():
        row = {"group_name": group_name}
        row.update(_durations(total_ms, issue_count))
        by_group.append(row)

    return {"by_status": by_status, "by_group": by_group}


class TimeInStatusCalculator(BaseCalculator):
    """Time spent in each status and group, closing open intervals at `now`."""

    def run(self):
        data = self.get_timeline_data()
        if data is None:
            return empty_time_in_status()
        return calculate_time_in_status(data.timelines, data.lookup, data.now)

    def write(self):
        result = self.get_result()
        self.write_records(
            result["by_status"],
            "time_in_status_data",
            "Time in status",
            TIME_IN_STATUS_COLUMNS,
        )
        self.write_records(
            result["by_group"],
            "time_in_group_data",
            "Time in group",
            TIME_IN_GROUP_COLUMNS,
        )
