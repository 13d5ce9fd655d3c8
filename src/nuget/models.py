"""Data models for manifest conversion and narrowing results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from constants import ExitCodes


@dataclass(frozen=True)
class PackageRef:
    """A package pinned to one version, as declared in packages.config."""
    id: str
    version: str

    @property
    def key(self) -> str:
        return f"{self.id}@{self.version}"

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "version": self.version}


class SkipReason(Enum):
    """Why a package was dropped from the candidate set."""
    INCOMPATIBLE_WITH_TARGET = "IncompatibleWithTarget"


@dataclass(frozen=True)
class SkippedPackage:
    """A package removed during narrowing."""
    package: PackageRef
    reason: SkipReason = SkipReason.INCOMPATIBLE_WITH_TARGET

    def to_dict(self) -> Dict[str, str]:
        data = self.package.to_dict()
        data["reason"] = self.reason.value
        return data


class FailureKind(Enum):
    """Terminal failure states of the narrowing loop."""
    NO_PACKAGES = "NoPackages"
    RESOLVER_FAILED = "ResolverFailed"
    STUCK_NO_PROGRESS = "StuckNoProgress"
    RETRY_BUDGET_EXHAUSTED = "RetryBudgetExhausted"
    NO_COMPATIBLE_PACKAGES = "NoCompatiblePackages"


@dataclass(frozen=True)
class ResolutionOutcome:
    """Terminal result of one narrowing loop run."""
    succeeded: bool
    skipped: Tuple[SkippedPackage, ...] = ()
    diagnostic_text: str = ""
    failure: Optional[FailureKind] = None
    packages: Tuple[PackageRef, ...] = ()
    attempts: int = 0
    error_codes: Tuple[str, ...] = ()

    @property
    def skipped_refs(self) -> List[PackageRef]:
        return [s.package for s in self.skipped]


@dataclass(frozen=True)
class Manifest:
    """Parsed packages.config contents."""
    packages: Tuple[PackageRef, ...]
    target_framework: Optional[str] = None


class ManifestStatus(Enum):
    """Per-manifest result status."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    REJECTED_SKIPPED = "rejected_skipped"


class ConversionMode(Enum):
    """Which control path produced a manifest result."""
    EXISTING_PROJECT = "existing-project"
    GENERATED = "generated"


@dataclass
class ManifestResult:
    """Outcome of converting a single packages.config."""
    manifest: str
    status: ManifestStatus
    lock_file: Optional[str] = None
    skipped: Tuple[SkippedPackage, ...] = ()
    error: Optional[str] = None
    mode: Optional[ConversionMode] = None

    @property
    def succeeded(self) -> bool:
        return self.status is ManifestStatus.SUCCEEDED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "manifest": self.manifest,
            "status": self.status.value,
            "mode": self.mode.value if self.mode else None,
            "lockFile": self.lock_file,
            "skipped": [s.to_dict() for s in self.skipped],
            "error": self.error,
        }


@dataclass
class ConversionReport:
    """Aggregate of every manifest processed in one run."""
    root: str
    results: List[ManifestResult] = field(default_factory=list)

    @property
    def found(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.status is ManifestStatus.SUCCEEDED)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status is ManifestStatus.FAILED)

    @property
    def rejected(self) -> int:
        return sum(1 for r in self.results if r.status is ManifestStatus.REJECTED_SKIPPED)

    @property
    def unique_skipped(self) -> List[PackageRef]:
        """Skipped packages across all manifests, deduplicated by id@version."""
        seen: Dict[str, PackageRef] = {}
        for result in self.results:
            for skipped in result.skipped:
                seen.setdefault(skipped.package.key, skipped.package)
        return list(seen.values())

    def exit_code(self, fail_on_skipped: bool = False) -> int:
        """Map the aggregate onto the process exit status."""
        if self.failed:
            return ExitCodes.FAILURE.value
        if fail_on_skipped and (self.rejected or self.unique_skipped):
            return ExitCodes.SKIPPED_PACKAGES.value
        return ExitCodes.SUCCESS.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "root": self.root,
            "totals": {
                "found": self.found,
                "succeeded": self.succeeded,
                "failed": self.failed,
                "rejected": self.rejected,
                "skippedPackages": len(self.unique_skipped),
            },
            "skipped": [p.to_dict() for p in self.unique_skipped],
            "manifests": [r.to_dict() for r in self.results],
        }
