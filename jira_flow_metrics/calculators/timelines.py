"""Timeline calculator for Jira Flow Metrics.

This module builds the per-issue status timelines every other calculator
works from, together with the status lookup tables for the run.
"""

import datetime
import logging
from dataclasses import dataclass
from typing import List

import pandas as pd

from ..calculator import Calculator
from ..issuesource import filter_issues
from ..statuses import StatusLookup, build_status_lookup
from ..timeline import IssueTimeline, build_timeline
from ..utils import aggregation_time, get_extension

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimelineData:
    """Inputs shared by the aggregating calculators."""

    issues: list
    lookup: StatusLookup
    timelines: List[IssueTimeline]
    now: datetime.datetime


def build_timelines(issues, status_master):
    """Build one timeline per issue, discarding issues that have none."""
    timelines = [build_timeline(issue, status_master) for issue in issues]
    timelines = [t for t in timelines if t is not None]

    discarded = len(issues) - len(timelines)
    if discarded > 0:
        logger.warning(
            "Could not build a status timeline for %d of %d issues; "
            "they are excluded from timeline-based metrics",
            discarded,
            len(issues),
        )
    return timelines


class TimelineCalculator(Calculator):
    """Build the status timelines of all issues in the source.

    Issues are filtered by the `issue_types` and `priorities` settings first.
    Returns a `TimelineData`, or None when the source has no issues or no
    statuses. This should run before any other calculator.
    """

    def run(self):
        issues = self.source.issues
        statuses = self.source.statuses

        if not isinstance(issues, list) or len(issues) == 0:
            logger.warning("No issues to process")
            return None

        if not isinstance(statuses, list) or len(statuses) == 0:
            logger.warning("Missing or empty status list; cannot process issues")
            return None

        issues = filter_issues(
            issues,
            issue_types=self.settings.get("issue_types"),
            priorities=self.settings.get("priorities"),
        )

        lookup = build_status_lookup(statuses, self.settings.get("status_groups"))
        timelines = build_timelines(issues, lookup.status_master)

        now = aggregation_time(self.settings.get("now"))

        logger.debug(
            "Built %d timelines across %d statuses and %d groups",
            len(timelines),
            len(lookup.status_master),
            len(lookup.group_order),
        )

        return TimelineData(issues=issues, lookup=lookup, timelines=timelines, now=now)

    def write(self):
        output_files = self.settings.get("timeline_data")
        if not output_files:
            logger.debug("No output file specified for timeline data")
            return

        data = self.get_result()
        if data is None:
            logger.warning("Cannot write timeline data with no timelines")
            return

        rows = [
            {
                "key": timeline.key,
                "timestamp": event.timestamp.isoformat(),
                "status_id": event.status_id,
                "status": data.lookup.status_name(event.status_id),
                "group": data.lookup.first_group_for(event.status_id),
            }
            for timeline in data.timelines
            for event in timeline.events
        ]
        frame = pd.DataFrame(
            rows, columns=["key", "timestamp", "status_id", "status", "group"]
        )

        for output_file in output_files:
            logger.info("Writing timeline data to %s", output_file)
            output_extension = get_extension(output_file)
            if output_extension == ".json":
                frame.to_json(output_file, orient="records")
            elif output_extension == ".xlsx":
                frame.to_excel(output_file, sheet_name="Timelines", index=False)
            else:
                frame.to_csv(output_file, index=False)
