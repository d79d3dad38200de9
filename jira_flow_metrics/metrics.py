"""In-memory entry point for computing flow metrics.

`process_metrics` runs the calculator pipeline over issues that have already
been fetched, without writing any output, and returns the combined result.
"""

import logging

from .calculator import run_calculators
from .calculators.flowmetrics import FlowMetricsCalculator
from .config_main import METRICS_CALCULATORS
from .issuesource import IssueSource
from .statuses import Selector
from .utils import aggregation_time

logger = logging.getLogger(__name__)


def process_metrics(
    issues,
    status_groups,
    start_date,
    end_date,
    cycle_start,
    cycle_end,
    triage,
    all_statuses,
    now=None,
):
    """Compute every flow metric for `issues`.

    Args:
        issues: Issues as dicts or attribute-style objects
        status_groups: List of `{name, statuses}` status groups
        start_date: First day (`YYYY-MM-DD` or date) of the throughput/CFD range
        end_date: Last day (`YYYY-MM-DD` or date) of the throughput/CFD range
        cycle_start: Selector for the cycle start flow point
        cycle_end: Selector for the cycle end flow point
        triage: Selector for the triage flow point
        all_statuses: The universe of `{id, name}` statuses
        now: Aggregation time (datetime or ISO-8601 string); defaults to the
            current UTC time

    Returns:
        dict: The combined metrics, or None when the inputs are unusable
    """
    if not isinstance(issues, list) or len(issues) == 0:
        logger.warning("No issues to process")
        return None

    if not isinstance(all_statuses, list) or len(all_statuses) == 0:
        logger.warning("Missing or empty status list; cannot process issues")
        return None

    if not isinstance(status_groups, list):
        logger.warning("Status groups must be a list; cannot process issues")
        return None

    selectors = {
        "triage": Selector.coerce(triage),
        "cycle_start": Selector.coerce(cycle_start),
        "cycle_end": Selector.coerce(cycle_end),
    }
    for name, selector in selectors.items():
        if not selector.is_set():
            logger.warning(
                "No %s configured; dependent metrics will be empty",
                name.replace("_", " "),
            )

    now = aggregation_time(now)

    settings = {
        "status_groups": status_groups,
        "start_date": start_date,
        "end_date": end_date,
        "now": now,
    }
    settings.update(selectors)

    logger.info("Processing %d issues", len(issues))

    results = run_calculators(
        METRICS_CALCULATORS,
        IssueSource(issues, all_statuses),
        settings,
        write=False,
    )
    return results[FlowMetricsCalculator]
