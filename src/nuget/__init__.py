"""NuGet packages.config to packages.lock.json conversion.

This package provides:
- manifest.py: packages.config parsing and target framework normalization
- descriptor.py: temporary SDK-style project generation
- resolver.py: dotnet restore invocation and dotnet discovery
- diagnostics.py: NU1202 incompatibility extraction from restore output
- narrowing.py: the retry loop that drops incompatible packages
- discovery.py / convert.py: tree walk and per-manifest orchestration
"""

from .convert import ConvertOptions, convert_manifest, convert_tree  # noqa: F401
from .models import (  # noqa: F401
    ConversionReport,
    ManifestResult,
    ManifestStatus,
    PackageRef,
    ResolutionOutcome,
)
from .narrowing import resolve_with_narrowing  # noqa: F401
from .resolver import DotnetResolver, Resolver, ResolverResult, locate_dotnet  # noqa: F401

__all__ = [
    "ConvertOptions",
    "convert_manifest",
    "convert_tree",
    "ConversionReport",
    "ManifestResult",
    "ManifestStatus",
    "PackageRef",
    "ResolutionOutcome",
    "resolve_with_narrowing",
    "DotnetResolver",
    "Resolver",
    "ResolverResult",
    "locate_dotnet",
]
