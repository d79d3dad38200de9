"""Type utilities for configuration processing.

This module provides utilities for type conversion and validation in
configuration files.
"""

import datetime

from .exceptions import ConfigError


def force_list(val) -> list:
    """
    Ensure the value is a list.
    """
    return list(val) if isinstance(val, (list, tuple)) else [val]


def force_str_list(key, val) -> list:
    """
    Ensure the value is a list of non-empty strings.
    """
    values = [] if val is None else force_list(val)
    for value in values:
        if value is None or isinstance(value, (dict, list)) or str(value) == "":
            raise ConfigError(
                f"Value `{value}` for key `{expand_key(key)}` is not a valid name"
            )
    return [str(value) for value in values]


def force_date(key, value) -> datetime.date:
    """
    Ensure value is a datetime.date, raise ConfigError otherwise.
    """
    if not isinstance(value, datetime.date):
        raise ConfigError(f"Value `{value}` for key `{expand_key(key)}` is not a date")
    return value


def expand_key(key) -> str:
    """
    Expand config key for display.
    """
    return str(key).replace("_", " ").lower()
