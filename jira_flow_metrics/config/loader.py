"""Configuration loader for Jira Flow Metrics."""

import logging
import os.path

import yaml

from ..common_constants import (
    CHART_FILENAME_KEYS,
    CHART_TITLE_KEYS,
    DATA_FILENAME_KEYS,
    FLOW_POINT_KEYS,
)
from ..statuses import SELECTOR_GROUP, SELECTOR_STATUS, SELECTOR_TYPES, Selector
from .exceptions import ConfigError
from .type_utils import expand_key, force_date, force_list, force_str_list
from .yaml_utils import ordered_load

logger = logging.getLogger(__name__)


def _create_default_options():
    """Create default options dictionary."""
    settings = {
        "status_groups": [],
        "triage": Selector(),
        "cycle_start": Selector(),
        "cycle_end": Selector(),
        "issue_types": [],
        "priorities": [],
        "start_date": None,
        "end_date": None,
        "date_format": "%d/%m/%Y",
    }
    for key in DATA_FILENAME_KEYS + CHART_FILENAME_KEYS + CHART_TITLE_KEYS:
        settings[key] = None

    return {
        "source": {
            "issues": None,
            "statuses": None,
        },
        "settings": settings,
    }


def _resolve_path(path, cwd):
    if path is None or cwd is None or os.path.isabs(str(path)):
        return path
    return os.path.abspath(os.path.join(cwd, str(path)))


def _parse_source_config(config, options, cwd):
    """Parse the `Source` section: the issues and statuses input files."""
    if "source" not in config or config["source"] is None:
        return

    source_config = config["source"]
    for key in ("issues", "statuses"):
        if key in source_config:
            options["source"][key] = _resolve_path(source_config[key], cwd)


def _to_status_groups(value):
    """Convert the `Status groups` section to a list of `{name, statuses}`.

    The section is either a mapping of group name to statuses or a list of
    mappings with `Name` and `Statuses` keys.
    """
    if value is None:
        return []

    if isinstance(value, dict):
        return [
            {"name": str(name), "statuses": force_str_list(name, statuses)}
            for name, statuses in value.items()
        ]

    if not isinstance(value, list):
        raise ConfigError("`Status groups` must be a mapping or a list of groups")

    groups = []
    seen = set()
    for group in value:
        if not isinstance(group, dict) or "name" not in group:
            raise ConfigError(
                f"Each entry in `Status groups` needs a `Name`, got `{group}`"
            )
        name = str(group["name"])
        if name in seen:
            raise ConfigError(f"Status group `{name}` is defined more than once")
        seen.add(name)
        groups.append(
            {
                "name": name,
                "statuses": force_str_list(
                    name, group["statuses"] if "statuses" in group else None
                ),
            }
        )
    return groups


def _to_selector(key, value):
    """Convert a flow point value to a `Selector`.

    A plain value names a group. A mapping holds either a `Group` or a
    `Status` key, or a `Type` and a `Value`.
    """
    if value is None or value == "":
        return Selector()

    if isinstance(value, (str, int)) and not isinstance(value, bool):
        return Selector(type=SELECTOR_GROUP, value=str(value))

    if isinstance(value, dict):
        if "group" in value:
            return Selector.coerce({"type": SELECTOR_GROUP, "value": value["group"]})
        if "status" in value:
            return Selector.coerce({"type": SELECTOR_STATUS, "value": value["status"]})
        if "type" in value:
            selector_type = str(value["type"]).lower()
            if selector_type not in SELECTOR_TYPES:
                raise ConfigError(
                    f"Unknown selector type `{value['type']}` for key "
                    f"`{expand_key(key)}`. Use one of: {', '.join(SELECTOR_TYPES)}"
                )
            return Selector.coerce(
                {
                    "type": selector_type,
                    "value": value["value"] if "value" in value else None,
                }
            )

    raise ConfigError(
        f"Value `{value}` for key `{expand_key(key)}` is not a group name or "
        f"a mapping with `Group` or `Status`"
    )


def _parse_status_groups_config(config, options):
    """Parse the `Status groups` section."""
    if "status groups" in config:
        options["settings"]["status_groups"] = _to_status_groups(
            config["status groups"]
        )


def _parse_flow_config(config, options):
    """Parse the `Flow` section: triage, cycle start and cycle end."""
    if "flow" not in config or config["flow"] is None:
        return

    flow_config = config["flow"]
    for key in FLOW_POINT_KEYS:
        if expand_key(key) in flow_config:
            options["settings"][key] = _to_selector(key, flow_config[expand_key(key)])


def _parse_filters_config(config, options):
    """Parse the `Filters` section."""
    if "filters" not in config or config["filters"] is None:
        return

    filters_config = config["filters"]
    for key in ("issue_types", "priorities"):
        if expand_key(key) in filters_config:
            options["settings"][key] = force_str_list(
                key, filters_config[expand_key(key)]
            )


def _parse_output_config(config, options):
    """Parse output configuration."""
    if "output" not in config or config["output"] is None:
        return

    output_config = config["output"]
    settings = options["settings"]

    # Output directory support
    if expand_key("output_directory") in output_config:
        options["output_directory"] = output_config[expand_key("output_directory")]

    _parse_date_values(output_config, settings)
    _parse_filename_values(output_config, settings)
    _parse_filename_list_values(output_config, settings)
    _parse_string_values(output_config, settings)


def _parse_date_values(output_config, settings):
    """Parse date values from output config."""
    for key in ("start_date", "end_date"):
        if expand_key(key) in output_config:
            settings[key] = force_date(key, output_config[expand_key(key)])


def _parse_filename_values(output_config, settings):
    """Parse filename values from output config."""
    for key in CHART_FILENAME_KEYS:
        if expand_key(key) in output_config:
            settings[key] = os.path.basename(output_config[expand_key(key)])


def _parse_filename_list_values(output_config, settings):
    """Parse filename list values from output config."""
    for key in DATA_FILENAME_KEYS:
        if expand_key(key) in output_config:
            settings[key] = list(
                map(
                    os.path.basename,
                    force_list(output_config[expand_key(key)]),
                )
            )


def _parse_string_values(output_config, settings):
    """Parse string values from output config."""
    for key in ["date_format"] + CHART_TITLE_KEYS:
        if expand_key(key) in output_config:
            settings[key] = str(output_config[expand_key(key)])


def _validate_date_range(settings):
    start_date = settings["start_date"]
    end_date = settings["end_date"]
    if start_date is not None and end_date is not None and start_date > end_date:
        raise ConfigError(
            f"`Start date` ({start_date}) must not be after `End date` ({end_date})"
        )


def config_to_options(data, cwd=None, extended=False, _visited_files=None):
    """
    Parse YAML config data and return options dict.
    """
    if _visited_files is None:
        _visited_files = set()

    try:
        config = ordered_load(data, yaml.SafeLoader)
    except Exception as e:
        raise ConfigError("Unable to parse YAML configuration file.") from e

    if config is None:
        raise ConfigError("Configuration file is empty") from None

    if not isinstance(config, dict):
        raise ConfigError("Configuration file must contain a mapping") from None

    options = _create_default_options()

    # Handle extends configuration
    if "extends" in config:
        if cwd is None:
            raise ConfigError("`extends` is not supported here.")

        extends_filename = os.path.abspath(
            os.path.normpath(
                os.path.join(cwd, config["extends"].replace("/", os.path.sep))
            )
        )

        if not os.path.exists(extends_filename):
            raise ConfigError(
                f"File `{extends_filename}` referenced in `extends` not found."
            ) from None

        if extends_filename in _visited_files:
            raise ConfigError(
                f"Circular extends reference detected: {extends_filename}"
            ) from None

        _visited_files.add(extends_filename)

        logger.debug("Extending file %s", extends_filename)
        with open(extends_filename, encoding="utf-8") as extends_file:
            options = config_to_options(
                extends_file.read(),
                cwd=os.path.dirname(extends_filename),
                extended=True,
                _visited_files=_visited_files,
            )

    _parse_source_config(config, options, cwd)
    _parse_status_groups_config(config, options)
    _parse_flow_config(config, options)
    _parse_filters_config(config, options)
    _parse_output_config(config, options)

    _validate_date_range(options["settings"])

    if not extended:
        _warn_missing_flow_points(options["settings"])

    return options


def _warn_missing_flow_points(settings):
    """Warn about flow points the metrics rely on but are not configured."""
    if not settings["cycle_start"].is_set() or not settings["cycle_end"].is_set():
        logger.warning(
            "No `Cycle start` or `Cycle end` in `Flow`. "
            "Cycle time, throughput and MTTR rely on these."
        )
    if not settings["triage"].is_set():
        logger.warning("No `Triage` in `Flow`. MTTA relies on this.")
