"""Per-manifest conversion and directory-level orchestration.

Each packages.config is converted in isolation: errors are logged and
recorded on the ManifestResult, and the next manifest is processed. Only
ToolEnvironmentError escapes convert_tree.
"""
from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from typing import Optional

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from .diagnostics import extract_error_codes
from .discovery import discover_manifests, find_existing_project
from .errors import (
    ConversionError,
    NoCompatiblePackagesError,
    NoPackagesError,
    OutputMissingError,
    ResolverFailedError,
    RetryBudgetExhaustedError,
    StuckNoProgressError,
)
from .manifest import parse_packages_config
from .models import (
    ConversionMode,
    ConversionReport,
    FailureKind,
    ManifestResult,
    ManifestStatus,
    ResolutionOutcome,
)
from .narrowing import resolve_with_narrowing
from .resolver import Resolver

logger = logging.getLogger(__name__)


@dataclass
class ConvertOptions:
    """Tunables for a conversion run."""
    tfm: str = Constants.DEFAULT_TFM
    fail_on_skipped: bool = False
    max_retries: int = Constants.MAX_RETRIES


def error_for_outcome(outcome: ResolutionOutcome) -> ConversionError:
    """Map a failed narrowing outcome onto the matching exception."""
    skipped = outcome.skipped
    if outcome.failure is FailureKind.NO_PACKAGES:
        return NoPackagesError("No packages found", skipped)
    if outcome.failure is FailureKind.STUCK_NO_PROGRESS:
        return StuckNoProgressError(
            "Resolver reported incompatible packages that are not being restored", skipped
        )
    if outcome.failure is FailureKind.RETRY_BUDGET_EXHAUSTED:
        return RetryBudgetExhaustedError(
            f"Gave up after {outcome.attempts} restore attempt(s)", skipped
        )
    if outcome.failure is FailureKind.NO_COMPATIBLE_PACKAGES:
        return NoCompatiblePackagesError("Every package is incompatible with the target", skipped)
    return ResolverFailedError(
        _restore_failed_message(outcome.error_codes),
        diagnostic_text=outcome.diagnostic_text,
        error_codes=outcome.error_codes,
        skipped=skipped,
    )


def _restore_failed_message(error_codes) -> str:
    if error_codes:
        return f"dotnet restore failed ({', '.join(error_codes)})"
    return "dotnet restore failed"


def _lock_path_for(manifest_path: str) -> str:
    return os.path.join(os.path.dirname(manifest_path), Constants.LOCK_FILE)


def _restore_existing_project(project_path: str, manifest_path: str, resolver: Resolver) -> str:
    """Restore an existing project in place and return the lock file path."""
    directory = os.path.dirname(manifest_path)
    lock_path = _lock_path_for(manifest_path)
    logger.info("  Using existing project: %s", os.path.basename(project_path))

    result = resolver.invoke(project_path, directory)
    if not result.succeeded:
        # Incompatibility is not narrowed here: the project owns its target.
        codes = tuple(extract_error_codes(result.output))
        raise ResolverFailedError(
            _restore_failed_message(codes),
            diagnostic_text=result.output,
            error_codes=codes,
        )

    if os.path.isfile(lock_path):
        logger.info("  ✓ Lock file already exists: %s", lock_path)
        return lock_path

    obj_lock_path = os.path.join(directory, Constants.OBJ_DIR, Constants.LOCK_FILE)
    if os.path.isfile(obj_lock_path):
        shutil.copyfile(obj_lock_path, lock_path)
        logger.info("  ✓ Generated: %s", lock_path)
        return lock_path

    raise OutputMissingError("Lock file not found after restore")


def _restore_generated_project(
    manifest_path: str, options: ConvertOptions, resolver: Resolver
) -> ManifestResult:
    manifest = parse_packages_config(manifest_path)
    if not manifest.packages:
        raise NoPackagesError("No packages found")

    tfm = manifest.target_framework or options.tfm
    if manifest.target_framework and manifest.target_framework != options.tfm:
        logger.info("  Using targetFramework from %s: %s", Constants.PACKAGES_CONFIG_FILE, tfm)

    lock_path = _lock_path_for(manifest_path)
    with tempfile.TemporaryDirectory(prefix=Constants.TEMP_DIR_PREFIX) as workdir:
        outcome = resolve_with_narrowing(
            manifest.packages,
            tfm,
            resolver,
            workdir,
            explicit_tfm=manifest.target_framework is not None,
            max_retries=options.max_retries,
        )
        if not outcome.succeeded:
            raise error_for_outcome(outcome)

        if outcome.skipped:
            logger.warning(
                "  Skipped %d incompatible package(s): %s",
                len(outcome.skipped),
                ", ".join(p.key for p in outcome.skipped_refs),
            )
            if options.fail_on_skipped:
                logger.error("  Error: Packages were skipped; not writing %s", Constants.LOCK_FILE)
                return ManifestResult(
                    manifest=manifest_path,
                    status=ManifestStatus.REJECTED_SKIPPED,
                    skipped=outcome.skipped,
                    error="Packages were skipped",
                    mode=ConversionMode.GENERATED,
                )

        generated_lock = os.path.join(workdir, Constants.LOCK_FILE)
        if not os.path.isfile(generated_lock):
            raise OutputMissingError("Lock file not found after restore", outcome.skipped)
        shutil.copyfile(generated_lock, lock_path)

    logger.info("  ✓ Generated: %s", lock_path)
    return ManifestResult(
        manifest=manifest_path,
        status=ManifestStatus.SUCCEEDED,
        lock_file=lock_path,
        skipped=outcome.skipped,
        mode=ConversionMode.GENERATED,
    )


def convert_manifest(
    manifest_path: str, options: ConvertOptions, resolver: Resolver
) -> ManifestResult:
    """Produce packages.lock.json beside one packages.config.

    Prefers an existing sibling project file; otherwise generates a temporary
    project and runs the narrowing loop. Per-manifest errors never propagate.
    """
    logger.info("Processing: %s", manifest_path)
    mode: Optional[ConversionMode] = None
    try:
        project = find_existing_project(os.path.dirname(manifest_path))
        if project is not None:
            mode = ConversionMode.EXISTING_PROJECT
            lock_path = _restore_existing_project(project, manifest_path, resolver)
            return ManifestResult(
                manifest=manifest_path,
                status=ManifestStatus.SUCCEEDED,
                lock_file=lock_path,
                mode=mode,
            )
        mode = ConversionMode.GENERATED
        return _restore_generated_project(manifest_path, options, resolver)
    except ConversionError as e:
        logger.error("  Error: %s", e)
        diagnostic = getattr(e, "diagnostic_text", "")
        if diagnostic:
            logger.error("%s", diagnostic.rstrip())
        return ManifestResult(
            manifest=manifest_path,
            status=ManifestStatus.FAILED,
            skipped=e.skipped,
            error=str(e),
            mode=mode,
        )
    except OSError as e:
        logger.error("  Error: %s", e)
        return ManifestResult(
            manifest=manifest_path,
            status=ManifestStatus.FAILED,
            error=str(e),
            mode=mode,
        )


def convert_tree(root: str, options: ConvertOptions, resolver: Resolver) -> ConversionReport:
    """Convert every packages.config under ``root``, one at a time in discovery order."""
    report = ConversionReport(root=root)
    for manifest_path in discover_manifests(root):
        result = convert_manifest(manifest_path, options, resolver)
        report.results.append(result)
        if is_debug_enabled(logger):
            logger.debug(
                "Manifest processed",
                extra=extra_context(
                    event="manifest_done", component="convert", target=manifest_path,
                    outcome=result.status.value,
                    mode=result.mode.value if result.mode else None,
                ),
            )
    return report
