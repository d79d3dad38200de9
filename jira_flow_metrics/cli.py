"""Command line interface for Jira Flow Metrics."""

import argparse
import datetime
import logging
import os

from dotenv import load_dotenv

from .calculator import run_calculators
from .common_constants import FLOW_POINT_KEYS
from .config import ConfigError, config_to_options
from .config_main import CALCULATORS
from .issuesource import FileIssueSource
from .statuses import default_status_groups, map_status_names, reset_invalid_selectors
from .utils import set_chart_context

load_dotenv()

logger = logging.getLogger(__name__)


def parse_date_argument(value):
    """Parse a `YYYY-MM-DD` command line argument."""
    try:
        return datetime.datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Invalid date `{value}`, expected YYYY-MM-DD"
        ) from None


def configure_argument_parser():
    """Configure an ArgumentParser that manages command line options."""

    parser = argparse.ArgumentParser(
        description=(
            "Compute flow metrics from exported JIRA issues "
            "and produce data and charts."
        )
    )

    # Basic options
    parser.add_argument("config", metavar="config.yml", nargs="?", help="Configuration file")
    parser.add_argument("-v", dest="verbose", action="store_true", help="Verbose output")
    parser.add_argument(
        "-vv",
        dest="very_verbose",
        action="store_true",
        help="Even more verbose output",
    )

    # Output directory
    parser.add_argument(
        "--output-directory",
        "-o",
        metavar="metrics",
        help="Write output files to this directory, rather than the current working directory.",
    )

    # Input files
    parser.add_argument(
        "--issues",
        metavar="issues.json",
        help="JSON file with the issues to analyse (a list or a search response)",
    )
    parser.add_argument(
        "--statuses",
        metavar="statuses.json",
        help="JSON file with the statuses of the project",
    )

    # Reporting period
    parser.add_argument(
        "--start-date",
        metavar="YYYY-MM-DD",
        type=parse_date_argument,
        help="First day of the throughput and CFD period",
    )
    parser.add_argument(
        "--end-date",
        metavar="YYYY-MM-DD",
        type=parse_date_argument,
        help="Last day of the throughput and CFD period",
    )

    return parser


def main():
    parser = configure_argument_parser()
    args = parser.parse_args()
    run_command_line(parser, args)


def run_command_line(parser, args):
    if not args.config:
        parser.print_usage()
        return

    logging.basicConfig(
        format="[%(asctime)s %(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        level=(
            logging.DEBUG
            if args.very_verbose
            else logging.INFO if args.verbose else logging.WARNING
        ),
    )

    # Configuration and settings
    # (command line arguments override config file options)

    logger.debug("Parsing options from %s", args.config)
    try:
        with open(args.config, encoding="utf-8") as config:
            options = config_to_options(
                config.read(), cwd=os.path.dirname(os.path.abspath(args.config))
            )
    except FileNotFoundError:
        print(
            f"Error: Configuration file '{args.config}' not found. "
            "Please provide a valid config file."
        )
        return
    except ConfigError as e:
        logger.error("Invalid configuration in %s: %s", args.config, e)
        return

    # Allow command line arguments to override options
    override_options(options["source"], args)
    override_options(options["settings"], args)

    settings = options["settings"]
    if (
        settings["start_date"] is not None
        and settings["end_date"] is not None
        and settings["start_date"] > settings["end_date"]
    ):
        logger.error(
            "Start date %s is after end date %s", settings["start_date"], settings["end_date"]
        )
        return

    # Load the source before changing directory so relative paths still work
    try:
        source = get_file_issue_source(options["source"])
    except ConfigError as e:
        logger.error("%s", e)
        return
    except (FileNotFoundError, ValueError) as e:
        logger.error("Could not load input files: %s", e)
        return

    if not source.issues or not source.statuses:
        logger.error("No issues or no statuses to process; no output written")
        return

    prepare_settings(settings, source.statuses)

    # Set charting context, which determines how charts are rendered
    set_chart_context("paper")

    # Set output directory if required
    output_dir = None
    if "output_directory" in options:
        output_dir = options["output_directory"]
    if args.output_directory:
        output_dir = args.output_directory
    if output_dir:
        logger.info("Changing working directory to %s", output_dir)
        os.makedirs(output_dir, exist_ok=True)
        os.chdir(output_dir)

    logger.info("Running calculators")
    run_calculators(CALCULATORS, source, settings)


def override_options(options, arguments):
    """Update `options` dict with settings from `arguments`
    with the same key.
    """
    for key in options.keys():
        if getattr(arguments, key, None) is not None:
            options[key] = getattr(arguments, key)


def get_file_issue_source(source_options):
    """Build a `FileIssueSource`, falling back to the environment for files."""
    issues_file = source_options["issues"] or os.environ.get("FLOW_METRICS_ISSUES")
    statuses_file = source_options["statuses"] or os.environ.get("FLOW_METRICS_STATUSES")

    if not issues_file or not statuses_file:
        raise ConfigError(
            "Both an issues file and a statuses file are required. Set them "
            "under `Source` in the configuration, on the command line, or with "
            "FLOW_METRICS_ISSUES and FLOW_METRICS_STATUSES."
        )

    logger.info("Loading issues from %s and statuses from %s", issues_file, statuses_file)
    return FileIssueSource(issues_file, statuses_file)


def prepare_settings(settings, all_statuses):
    """Resolve status groups and flow points against the loaded statuses.

    Groups may list statuses by name; these are mapped to ids. Without any
    configured groups each status becomes its own group. Flow points naming
    a group that does not exist are reset.
    """
    if settings["status_groups"]:
        settings["status_groups"] = map_status_names(
            settings["status_groups"], all_statuses
        )
    else:
        logger.info("No status groups configured; using one group per status")
        settings["status_groups"] = default_status_groups(all_statuses)

    settings.update(
        reset_invalid_selectors(
            {key: settings[key] for key in FLOW_POINT_KEYS},
            settings["status_groups"],
        )
    )
    return settings


if __name__ == "__main__":
    main()
