"""nugetlock - convert packages.config files to packages.lock.json (recursively)

    Returns:
        int: Exit code (0 success, 1 failures, 2 skipped packages under --fail-on-skipped)
"""
import json
import logging
import sys

from constants import ExitCodes, Constants
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from args import parse_args
from cli_config import build_settings, validate_root
from nuget.convert import convert_tree
from nuget.errors import ToolEnvironmentError
from nuget.models import ConversionReport
from nuget.resolver import DotnetResolver, locate_dotnet

logger = logging.getLogger(__name__)


def export_json(report: ConversionReport, path: str) -> None:
    """Exports the run report to a JSON file.

    Args:
        report (ConversionReport): Aggregated run results.
        path (str): File path to export the JSON.
    """
    try:
        with open(path, 'w', encoding='utf-8') as file:
            json.dump(report.to_dict(), file, ensure_ascii=False, indent=4)
        logging.info("JSON report has been successfully exported at: %s", path)
    except OSError as e:
        logging.error("JSON report couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FAILURE.value)


def log_summary(report: ConversionReport, fail_on_skipped: bool) -> None:
    """Log the end-of-run totals."""
    if report.found == 0:
        logging.info("No %s files found in: %s", Constants.PACKAGES_CONFIG_FILE, report.root)

    logging.info("")
    logging.info("Summary:")
    logging.info("  Found: %d %s file(s)", report.found, Constants.PACKAGES_CONFIG_FILE)
    logging.info("  Success: %d", report.succeeded)
    logging.info("  Failed: %d", report.failed)
    if report.rejected:
        logging.info("  Rejected (skipped packages): %d", report.rejected)
    unique_skipped = report.unique_skipped
    if unique_skipped:
        logging.info("  Skipped packages: %d unique package(s)", len(unique_skipped))
        if fail_on_skipped:
            logging.info("  Skipped: %s", ", ".join(p.key for p in unique_skipped))


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    try:
        configure_logging(args.LOG_LEVEL, args.LOG_FILE)
    except OSError as e:
        logging.error("Error: log file couldn't be opened: %s", e)
        sys.exit(ExitCodes.FAILURE.value)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )

    try:
        settings = build_settings(args)
        root = validate_root(settings.root)
        resolver = DotnetResolver(locate_dotnet(settings.dotnet), timeout=settings.timeout)

        logging.info("=== NuGet %s to %s Converter ===", Constants.PACKAGES_CONFIG_FILE, Constants.LOCK_FILE)
        logging.info("Root directory: %s", root)
        logging.info("Target Framework: %s", settings.tfm)
        logging.info("Searching for %s files...", Constants.PACKAGES_CONFIG_FILE)
        logging.info("")

        report = convert_tree(root, settings.convert_options(), resolver)
    except ToolEnvironmentError as e:
        logging.error("Error: %s", e)
        sys.exit(ExitCodes.FAILURE.value)

    log_summary(report, settings.fail_on_skipped)

    if settings.output:
        export_json(report, settings.output)

    exit_code = report.exit_code(settings.fail_on_skipped)
    if is_debug_enabled(logger):
        logger.debug(
            "CLI finished",
            extra=extra_context(
                event="function_exit", component="cli", action="main", exit_code=exit_code
            )
        )
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
