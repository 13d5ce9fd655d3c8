"""Argument parsing functionality for nugetlock."""

import argparse
from constants import Constants


def _positive_int(value):
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {value}")
    return number


def _positive_float(value):
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive number: {value}")
    return number


def parse_args(argv=None):
    """Parses the arguments passed to the program.

    Options that can also come from a config file or the environment default
    to None so cli_config can tell "not given" apart from an explicit value.
    """
    parser = argparse.ArgumentParser(
        prog="nugetlock",
        description=(
            f"Recursively finds all {Constants.PACKAGES_CONFIG_FILE} files starting from "
            f"the current directory (or --root) and generates a {Constants.LOCK_FILE} "
            "next to each one."
        ),
        add_help=True,
    )

    parser.add_argument("--tfm",
                        dest="TFM",
                        help=f"Target framework moniker (default: {Constants.DEFAULT_TFM})",
                        action="store", type=str)
    parser.add_argument("--root",
                        dest="ROOT",
                        help="Root directory to search (default: current working directory)",
                        action="store", type=str)
    parser.add_argument("--fail-on-skipped",
                        dest="FAIL_ON_SKIPPED",
                        help="Exit with error code if any packages are skipped",
                        action="store_true",
                        default=None)
    parser.add_argument("--max-retries",
                        dest="MAX_RETRIES",
                        help=f"Maximum restore attempts per manifest (default: {Constants.MAX_RETRIES})",
                        action="store", type=_positive_int)
    parser.add_argument("--timeout",
                        dest="TIMEOUT",
                        help="Seconds to wait for each dotnet restore (default: no limit)",
                        action="store", type=_positive_float)
    parser.add_argument("--dotnet",
                        dest="DOTNET",
                        help="Path to the dotnet executable (default: auto-detect)",
                        action="store", type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store", type=str)
    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Write a JSON run report to this path",
                        action="store", type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store", type=str)

    return parser.parse_args(argv)
