"""Configuration exceptions for Jira Flow Metrics."""


class ConfigError(Exception):
    """
    Exception raised for errors in the configuration.
    """
