"""Cycle time calculator for Jira Flow Metrics.

This module measures, per issue, the time from first entering a cycle start
status to first entering a cycle end status afterwards, and summarises the
results.
"""

import logging
import math

import numpy as np

from ..utils import get_duration, get_percentile
from .base_calculator import BaseCalculator

logger = logging.getLogger(__name__)

CYCLE_TIME_COLUMNS = ["key", "start", "end", "cycle_time"]


def empty_cycle_time():
    """The cycle time result when nothing completed."""
    return {"durations": [], "histogram": [], "avg": 0, "p50": 0, "p85": 0}


def bucket_size_for(max_duration):
    """Histogram bucket width in days given the longest cycle time."""
    if max_duration > 100:
        return 10
    if max_duration > 20:
        return 2
    if max_duration > 10:
        return 1
    if max_duration > 1:
        return 0.5
    return 0.1


def format_bound(value):
    """Whole numbers without decimals, anything else with one."""
    if value % 1 == 0:
        return str(int(value))
    return f"{value:.1f}"


def calculate_histogram(durations):
    """Bucket durations (days) into `[{range, count}]` rows sorted by lower bound.

    Bucket labels read `"{lo}-{hi} days"`.
    """
    if not durations:
        return []

    size = bucket_size_for(max(durations))
    buckets = {}
    for duration in durations:
        start = math.floor(duration / size) * size
        label = f"{format_bound(start)}-{format_bound(start + size)} days"
        lower, count = buckets.get(label, (start, 0))
        buckets[label] = (lower, count + 1)

    return [
        {"range": label, "count": count}
        for label, (_, count) in sorted(buckets.items(), key=lambda b: b[1][0])
    ]


def find_cycle(timeline, start_ids, end_ids):
    """The (start, end) events of the issue's first cycle, or None.

    The start is the first event in a start status; the end is the first
    event in an end status at or after the start.
    """
    start_event = timeline.first_event_in(start_ids)
    if start_event is None:
        return None
    end_event = timeline.first_event_in(end_ids, not_before=start_event.timestamp)
    if end_event is None:
        return None
    return start_event, end_event


def collect_cycle_times(timelines, start_ids, end_ids):
    """Per-issue cycle records `{key, start, end, cycle_time}` (days)."""
    records = []
    for timeline in timelines:
        cycle = find_cycle(timeline, start_ids, end_ids)
        if cycle is None:
            continue
        start_event, end_event = cycle
        records.append(
            {
                "key": timeline.key,
                "start": start_event.timestamp,
                "end": end_event.timestamp,
                "cycle_time": get_duration(
                    start_event.timestamp, end_event.timestamp, "days"
                ),
            }
        )
    return records


def calculate_cycle_time(timelines, start_ids, end_ids):
    """Cycle time durations (days, ascending), histogram, mean, P50 and P85.

    Returns the zeroed default when either status set is empty or no issue
    completed a cycle.
    """
    if not start_ids or not end_ids:
        logger.warning("Could not resolve cycle start or end statuses")
        return empty_cycle_time()

    durations = sorted(
        record["cycle_time"]
        for record in collect_cycle_times(timelines, start_ids, end_ids)
    )

    if not durations:
        logger.info("No issues completed a cycle")
        return empty_cycle_time()

    avg = float(np.mean(durations))
    logger.info(
        "Calculated cycle time for %d issues. Average: %.2f days",
        len(durations),
        avg,
    )

    return {
        "durations": durations,
        "histogram": calculate_histogram(durations),
        "avg": avg,
        "p50": get_percentile(durations, 50),
        "p85": get_percentile(durations, 85),
    }


class CycleTimeCalculator(BaseCalculator):
    """Cycle time from the `cycle_start` to the `cycle_end` flow point.

    Writes one row per completed issue to `cycle_time_data`.
    """

    def run(self):
        data = self.get_timeline_data()
        if data is None:
            return empty_cycle_time()
        return calculate_cycle_time(
            data.timelines,
            self.resolve_flow_point("cycle_start"),
            self.resolve_flow_point("cycle_end"),
        )

    def write(self):
        output_files = self.settings.get("cycle_time_data")
        if not output_files:
            logger.debug("No output file specified for cycle time data")
            return

        data = self.get_timeline_data()
        records = []
        if data is not None:
            records = [
                dict(
                    record,
                    start=record["start"].isoformat(),
                    end=record["end"].isoformat(),
                )
                for record in collect_cycle_times(
                    data.timelines,
                    self.resolve_flow_point("cycle_start"),
                    self.resolve_flow_point("cycle_end"),
                )
            ]

        self.write_records(records, "cycle_time_data", "Cycle data", CYCLE_TIME_COLUMNS)
