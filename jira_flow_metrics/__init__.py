"""Jira Flow Metrics - flow metrics computed from JIRA issue histories.

This package rebuilds per-issue status timelines from changelogs and derives
status distribution, time in status, cycle time, throughput, cumulative flow
and support (MTTA/MTTR) metrics from them.
"""
