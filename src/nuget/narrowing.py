"""Compatibility-narrowing restore loop.

Repeatedly restores a generated project, dropping the packages dotnet reports
as incompatible with the target framework (NU1202), until the restore
succeeds or no further progress is possible.
"""
from __future__ import annotations

import logging
import os
from typing import Iterable, List, Optional, Tuple

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from .descriptor import write_project
from .diagnostics import extract_error_codes, extract_incompatible_packages, has_incompatibility_signal
from .models import FailureKind, PackageRef, ResolutionOutcome, SkippedPackage, SkipReason
from .resolver import Resolver
from .versions import same_package

logger = logging.getLogger(__name__)


def remove_incompatible(
    candidates: List[PackageRef], incompatible: Iterable[PackageRef]
) -> Tuple[List[PackageRef], List[PackageRef]]:
    """Split ``candidates`` into (kept, removed) against the reported packages.

    Order is preserved in both lists. Repeated reports of the same package are
    idempotent.
    """
    reported = list(incompatible)
    kept: List[PackageRef] = []
    removed: List[PackageRef] = []
    for pkg in candidates:
        if any(same_package(pkg.id, pkg.version, bad.id, bad.version) for bad in reported):
            removed.append(pkg)
        else:
            kept.append(pkg)
    return kept, removed


def resolve_with_narrowing(
    packages: Iterable[PackageRef],
    tfm: str,
    resolver: Resolver,
    workdir: str,
    explicit_tfm: bool = False,
    max_retries: int = Constants.MAX_RETRIES,
) -> ResolutionOutcome:
    """Restore ``packages`` for ``tfm``, narrowing away incompatible packages.

    Args:
        packages: Initial candidate set, unique by id.
        tfm: Target framework moniker.
        resolver: Restore capability invoked once per attempt.
        workdir: Directory holding the generated project and lock output.
        explicit_tfm: Whether the TFM came from the manifest (enables fallback).
        max_retries: Maximum number of restore attempts.

    Returns:
        ResolutionOutcome. On success the lock file is at
        ``<workdir>/packages.lock.json``; outcome.packages is the accepted set.
    """
    candidates = list(packages)
    if not candidates:
        return ResolutionOutcome(succeeded=False, failure=FailureKind.NO_PACKAGES)

    descriptor_path = os.path.join(workdir, Constants.TEMP_PROJECT_FILE)
    skipped: List[SkippedPackage] = []
    last_output = ""
    last_codes: List[str] = []
    attempts = 0

    def _outcome(succeeded: bool, failure: Optional[FailureKind] = None) -> ResolutionOutcome:
        return ResolutionOutcome(
            succeeded=succeeded,
            skipped=tuple(skipped),
            diagnostic_text=last_output,
            failure=failure,
            packages=tuple(candidates),
            attempts=attempts,
            error_codes=tuple(last_codes),
        )

    while attempts < max_retries:
        attempts += 1
        if is_debug_enabled(logger):
            logger.debug(
                "Restore attempt",
                extra=extra_context(
                    event="attempt", component="narrowing", action="restore",
                    attempt=attempts, count=len(candidates), tfm=tfm,
                ),
            )

        write_project(descriptor_path, candidates, tfm, explicit_tfm)
        result = resolver.invoke(descriptor_path, workdir)
        last_output = result.output

        if result.succeeded:
            last_codes = []
            return _outcome(True)

        last_codes = extract_error_codes(last_output)
        if not has_incompatibility_signal(last_output):
            return _outcome(False, FailureKind.RESOLVER_FAILED)

        incompatible = extract_incompatible_packages(last_output)
        if not incompatible:
            return _outcome(False, FailureKind.RESOLVER_FAILED)

        candidates, removed = remove_incompatible(candidates, incompatible)
        if not removed:
            logger.debug(
                "Reported incompatible packages not in candidate set: %s",
                ", ".join(p.key for p in incompatible),
            )
            return _outcome(False, FailureKind.STUCK_NO_PROGRESS)

        skipped.extend(SkippedPackage(pkg, SkipReason.INCOMPATIBLE_WITH_TARGET) for pkg in removed)
        logger.warning(
            "  Removing %d package(s) incompatible with %s: %s",
            len(removed), tfm, ", ".join(p.key for p in removed),
        )

        if not candidates:
            return _outcome(False, FailureKind.NO_COMPATIBLE_PACKAGES)

    return _outcome(False, FailureKind.RETRY_BUDGET_EXHAUSTED)
