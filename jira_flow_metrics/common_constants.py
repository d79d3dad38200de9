"""Common constants used across Jira Flow Metrics modules."""

from typing import Final, List

# Flow points configured in the `Flow` section
FLOW_POINT_KEYS: Final[List[str]] = [
    "triage",
    "cycle_start",
    "cycle_end",
]

# Chart filename keys used in config parsing
CHART_FILENAME_KEYS: Final[List[str]] = [
    "histogram_chart",
    "throughput_chart",
    "cfd_chart",
]

# Chart title keys used in config parsing
CHART_TITLE_KEYS: Final[List[str]] = [key + "_title" for key in CHART_FILENAME_KEYS]

# Data filename keys used in config parsing
DATA_FILENAME_KEYS: Final[List[str]] = [
    "distribution_data",
    "distribution_group_data",
    "time_in_status_data",
    "time_in_group_data",
    "timeline_data",
    "cycle_time_data",
    "histogram_data",
    "throughput_data",
    "cfd_data",
    "support_data",
    "summary_data",
    "metrics_data",
]
