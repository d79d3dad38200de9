"""Status distribution calculator for Jira Flow Metrics.

This module counts how many issues currently sit in each status and each
status group.
"""

import logging

from ..timeline import current_status_id
from ..utils import get_tolerant_attr
from .base_calculator import BaseCalculator

logger = logging.getLogger(__name__)

DISTRIBUTION_STATUS_COLUMNS = ["id", "name", "count", "percentage"]
DISTRIBUTION_GROUP_COLUMNS = ["name", "count", "percentage"]


def empty_distribution():
    """The distribution result when nothing can be counted."""
    return {"by_status": [], "by_group": []}


def status_sort_key(lookup):
    """Sort rows by their first group (ungrouped last), then status name."""

    def key(row):
        group = lookup.first_group_for(row["id"])
        return (group is None, (group or "").casefold(), str(row["name"]).casefold())

    return key


def _percentage(count, total):
    return (count / total) * 100 if total > 0 else 0


def calculate_distribution(issues, lookup):
    """Census of current statuses, per status and per group.

    Percentages are relative to the number of issues. Statuses that hold no
    issues are still listed when they belong to a group.
    """
    counts = {status_id: 0 for status_id in lookup.status_master}
    counted = 0

    for issue in issues:
        status_id = current_status_id(issue)
        if status_id is None:
            continue
        if status_id not in counts:
            logger.warning(
                "Issue %s has unknown current status id %s",
                get_tolerant_attr(issue, "key"),
                status_id,
            )
            continue
        counts[status_id] += 1
        counted += 1

    total = len(issues)
    by_status = [
        {
            "id": status_id,
            "name": lookup.status_name(status_id),
            "count": count,
            "percentage": _percentage(count, total),
        }
        for status_id, count in counts.items()
        if count > 0 or lookup.group_names_for(status_id)
    ]
    by_status.sort(key=status_sort_key(lookup))

    group_counts = dict.fromkeys(lookup.group_order, 0)
    for row in by_status:
        for group_name in lookup.group_names_for(row["id"]):
            group_counts[group_name] += row["count"]

    by_group = [
        {"name": name, "count": count, "percentage": _percentage(count, total)}
        for name, count in group_counts.items()
    ]

    logger.debug(
        "Counted %d issues across %d statuses", counted, len(lookup.status_master)
    )
    return {"by_status": by_status, "by_group": by_group}


class DistributionCalculator(BaseCalculator):
    """Current status distribution of all issues, by status and by group."""

    def run(self):
        data = self.get_timeline_data()
        if data is None:
            return empty_distribution()
        return calculate_distribution(data.issues, data.lookup)

    def write(self):
        result = self.get_result()
        self.write_records(
            result["by_status"],
            "distribution_data",
            "Distribution",
            DISTRIBUTION_STATUS_COLUMNS,
        )
        self.write_records(
            result["by_group"],
            "distribution_group_data",
            "Group distribution",
            DISTRIBUTION_GROUP_COLUMNS,
        )
