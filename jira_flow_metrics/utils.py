"""Utility functions for Jira Flow Metrics.

This module provides common utility functions used across the metrics
calculations including date handling, durations and percentiles.
"""

import datetime
import logging
import math
import os.path

import dateutil.parser
import seaborn as sns

logger = logging.getLogger(__name__)

MS_PER_HOUR = 1000 * 60 * 60
MS_PER_DAY = MS_PER_HOUR * 24

# Longest date range (in days) the per-day aggregates will iterate over
MAX_DATE_RANGE_DAYS = 1000


def get_extension(filename):
    """Get file extension from filename."""
    return os.path.splitext(filename)[1].lower()


def set_chart_context(context):
    """Set seaborn chart context."""
    sns.set_context(context)


def get_tolerant_attr(obj, *names, default=None):
    """Read the first present key/attribute of `names` from `obj`.

    Supports both plain dicts (JSON from the REST API) and attribute-style
    objects such as JIRA `PropertyHolder` instances or test fakes.
    """
    if obj is None:
        return default
    for name in names:
        if isinstance(obj, dict):
            if name in obj:
                return obj[name]
        elif hasattr(obj, name):
            return getattr(obj, name)
    return default


def multi_get(obj, path, default=None):
    """Follow a dot-separated `path` through nested dicts/objects."""
    for name in path.split("."):
        obj = get_tolerant_attr(obj, name)
        if obj is None:
            return default
    return obj


def parse_timestamp(value):
    """Parse a timestamp into a timezone-aware datetime.

    Accepts ISO-8601 strings (including the `+0000` offsets JIRA emits) and
    datetime objects. Naive values are taken to be UTC. Returns None when
    the value is missing or cannot be parsed.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime.datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = dateutil.parser.isoparse(value)
        except (ValueError, OverflowError):
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


def aggregation_time(now=None):
    """The instant aggregates are computed at, as an aware datetime.

    `now` may be a datetime or an ISO-8601 string; naive values are UTC.
    Without a usable value the current UTC time is used.
    """
    parsed = parse_timestamp(now)
    if parsed is None:
        if now is not None:
            logger.warning("Invalid aggregation time %r; using the current time", now)
        return datetime.datetime.now(datetime.timezone.utc)
    return parsed


def to_date(value):
    """Coerce a `YYYY-MM-DD` string, date or datetime to a `datetime.date`.

    Returns None for missing or unparseable values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        try:
            return dateutil.parser.isoparse(value).date()
        except ValueError:
            return None
    return None


def utc_day(timestamp):
    """Return the UTC calendar day of `timestamp` as `YYYY-MM-DD`."""
    return timestamp.astimezone(datetime.timezone.utc).strftime("%Y-%m-%d")


def end_of_day(day):
    """Return the last millisecond of the UTC day `day` (`YYYY-MM-DD`)."""
    date = to_date(day)
    return datetime.datetime(
        date.year,
        date.month,
        date.day,
        23,
        59,
        59,
        999000,
        tzinfo=datetime.timezone.utc,
    )


def get_duration(start, end, unit="days"):
    """Duration between two datetimes in `ms`, `hours` or `days`.

    Missing bounds and non-positive differences yield 0.
    """
    if start is None or end is None:
        return 0

    diff_ms = (end - start).total_seconds() * 1000
    if diff_ms <= 0:
        return 0

    if unit == "ms":
        return diff_ms
    if unit == "hours":
        return diff_ms / MS_PER_HOUR
    return diff_ms / MS_PER_DAY


def get_percentile(sorted_values, percentile):
    """Nearest-rank percentile of an ascending list of numbers.

    The index is `ceil(p / 100 * n) - 1`, clamped to zero. An empty list
    yields 0.
    """
    if not sorted_values:
        return 0
    index = math.ceil((percentile / 100) * len(sorted_values)) - 1
    return sorted_values[max(0, index)]


def get_date_range(start_date, end_date):
    """List every day from `start_date` to `end_date` inclusive as `YYYY-MM-DD`.

    Returns an empty list when either bound is missing or invalid, when the
    range is reversed, or when it spans more than `MAX_DATE_RANGE_DAYS` days.
    """
    start = to_date(start_date)
    end = to_date(end_date)

    if start is None or end is None or start > end:
        return []

    days = (end - start).days + 1
    if days > MAX_DATE_RANGE_DAYS:
        logger.warning(
            "Date range %s to %s spans %d days, more than the maximum of %d",
            start,
            end,
            days,
            MAX_DATE_RANGE_DAYS,
        )
        return []

    return [
        (start + datetime.timedelta(days=offset)).strftime("%Y-%m-%d")
        for offset in range(days)
    ]
