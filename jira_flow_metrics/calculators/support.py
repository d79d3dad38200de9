"""Support metrics calculator for Jira Flow Metrics.

Mean time to acknowledge (MTTA) and mean time to resolution (MTTR), both
measured from issue creation.
"""

import logging

from .base_calculator import BaseCalculator

logger = logging.getLogger(__name__)

SUPPORT_COLUMNS = ["avg_mtta_hours", "avg_mttr_hours", "mtta_count", "mttr_count"]


def empty_support_metrics():
    """The support metrics result when nothing can be measured."""
    return {"avg_mtta_hours": 0, "avg_mttr_hours": 0, "mtta_count": 0, "mttr_count": 0}


def _hours_since_creation(timeline, event, metric):
    hours = (event.timestamp - timeline.created).total_seconds() / 3600
    if hours < 0:
        logger.warning(
            "Issue %s has a negative %s of %.2f hours; ignoring it",
            timeline.key,
            metric,
            hours,
        )
        return None
    return hours


def _average(values):
    return sum(values) / len(values) if values else 0


def calculate_support_metrics(timelines, triage_ids, end_ids):
    """Average hours from creation to acknowledgement and to resolution.

    An issue is acknowledged by its first transition (after creation) to a
    status outside the triage set, and resolved when it first enters an end
    status. Each average covers the issues with a non-negative duration for
    that metric; MTTA needs a triage set and MTTR an end set.
    """
    if not triage_ids:
        logger.warning("Could not resolve triage statuses; MTTA not calculated")
    if not end_ids:
        logger.warning("Could not resolve end statuses; MTTR not calculated")

    mtta_hours = []
    mttr_hours = []

    for timeline in timelines:
        if not timeline.events:
            continue

        if triage_ids:
            ack_event = next(
                (e for e in timeline.events[1:] if e.status_id not in triage_ids),
                None,
            )
            if ack_event is not None:
                hours = _hours_since_creation(timeline, ack_event, "MTTA")
                if hours is not None:
                    mtta_hours.append(hours)

        if end_ids:
            resolve_event = timeline.first_event_in(end_ids)
            if resolve_event is not None:
                hours = _hours_since_creation(timeline, resolve_event, "MTTR")
                if hours is not None:
                    mttr_hours.append(hours)

    result = {
        "avg_mtta_hours": _average(mtta_hours),
        "avg_mttr_hours": _average(mttr_hours),
        "mtta_count": len(mtta_hours),
        "mttr_count": len(mttr_hours),
    }
    logger.info(
        "Calculated MTTA for %d issues (%.2fh) and MTTR for %d issues (%.2fh)",
        result["mtta_count"],
        result["avg_mtta_hours"],
        result["mttr_count"],
        result["avg_mttr_hours"],
    )
    return result


class SupportMetricsCalculator(BaseCalculator):
    """MTTA against the `triage` flow point and MTTR against `cycle_end`."""

    def run(self):
        data = self.get_timeline_data()
        if data is None:
            return empty_support_metrics()
        return calculate_support_metrics(
            data.timelines,
            self.resolve_flow_point("triage"),
            self.resolve_flow_point("cycle_end"),
        )

    def write(self):
        self.write_records([self.get_result()], "support_data", "Support", SUPPORT_COLUMNS)
