"""Exception hierarchy for manifest conversion.

Everything deriving from ConversionError is scoped to a single manifest and is
caught by the orchestrator. ToolEnvironmentError is fatal to the whole run.
"""

from typing import Optional


class ConversionError(Exception):
    """Base class for errors that abort the conversion of one manifest.

    ``skipped`` carries packages already narrowed away before the failure so
    they still reach the run summary.
    """

    def __init__(self, message: str = "", skipped: tuple = ()):
        super().__init__(message)
        self.skipped = tuple(skipped)


class ManifestParseError(ConversionError):
    """packages.config could not be read or is not well-formed XML."""


class NoPackagesError(ConversionError):
    """The manifest declares no usable package entries."""


class AmbiguousDescriptorError(ConversionError):
    """More than one project file sits beside a manifest."""


class ResolverFailedError(ConversionError):
    """dotnet restore failed without a recoverable incompatibility signal."""

    def __init__(
        self,
        message: str,
        diagnostic_text: str = "",
        error_codes: Optional[tuple] = None,
        skipped: tuple = (),
    ):
        super().__init__(message, skipped)
        self.diagnostic_text = diagnostic_text
        self.error_codes = tuple(error_codes or ())


class StuckNoProgressError(ConversionError):
    """The resolver named incompatible packages that are not in the candidate set."""


class RetryBudgetExhaustedError(ConversionError):
    """The narrowing loop used every attempt without converging."""


class NoCompatiblePackagesError(ConversionError):
    """Narrowing removed every candidate package."""


class OutputMissingError(ConversionError):
    """Restore succeeded but no packages.lock.json was produced."""


class ToolEnvironmentError(Exception):
    """The environment cannot support a run (missing dotnet, bad root, bad config)."""
