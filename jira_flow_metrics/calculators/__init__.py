"""Calculators for Jira Flow Metrics.

Each module provides the pure aggregation function(s) for one metric and a
`Calculator` subclass that runs it within the pipeline and writes its output.
"""
