"""Test configuration and fixtures for Jira Flow Metrics.

This module provides the statuses, groups, issues and settings shared by
the metrics tests.
"""

import copy

import pytest

from .issuesource import IssueSource
from .statuses import build_status_lookup
from .test_data_factory import (
    NOW,
    STATUS_GROUPS,
    STATUSES,
    create_standard_issues,
    create_standard_settings,
)
from .timeline import build_timeline

# Fixtures


@pytest.fixture(name="statuses")
def fixture_statuses():
    """The status universe: six statuses, one of them in no group."""
    return copy.deepcopy(STATUSES)


@pytest.fixture(name="status_groups")
def fixture_status_groups():
    """Triage, In progress and Done groups."""
    return copy.deepcopy(STATUS_GROUPS)


@pytest.fixture(name="now")
def fixture_now():
    """A fixed aggregation time."""
    return NOW


@pytest.fixture(name="issues")
def fixture_issues():
    """Three issues: completed, in progress and untouched."""
    return create_standard_issues()


@pytest.fixture(name="lookup")
def fixture_lookup(statuses, status_groups):
    """Status lookup tables for the standard statuses and groups."""
    return build_status_lookup(statuses, status_groups)


@pytest.fixture(name="settings")
def fixture_settings():
    """Pipeline settings for the standard statuses and groups."""
    return create_standard_settings()


@pytest.fixture(name="source")
def fixture_source(issues, statuses):
    """An in-memory issue source holding the standard issues."""
    return IssueSource(issues, statuses)


@pytest.fixture(name="timelines")
def fixture_timelines(issues, lookup):
    """Timelines of the standard issues."""
    return [build_timeline(issue, lookup.status_master) for issue in issues]
