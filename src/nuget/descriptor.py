"""Temporary SDK-style project generation for dotnet restore."""
from __future__ import annotations

import textwrap
from typing import Iterable
from xml.sax.saxutils import escape, quoteattr

from constants import Constants
from .models import PackageRef

_PROJECT_TEMPLATE = textwrap.dedent("""\
    <Project Sdk="Microsoft.NET.Sdk">
      <PropertyGroup>
    {properties}
      </PropertyGroup>
      <ItemGroup>
    {references}
      </ItemGroup>
    </Project>
""")


def needs_asset_target_fallback(tfm: str, explicit_tfm: bool) -> bool:
    """Fallback only applies to a net4x TFM that came from the manifest itself."""
    return explicit_tfm and tfm.startswith(Constants.FALLBACK_TFM_PREFIX)


def generate_project(packages: Iterable[PackageRef], tfm: str, explicit_tfm: bool = False) -> str:
    """Render a project file restoring ``packages`` for ``tfm`` with a lock file.

    Args:
        packages: Candidate packages, one PackageReference each, in order.
        tfm: Target framework moniker.
        explicit_tfm: True when the TFM was read from packages.config.

    Returns:
        Project file text.
    """
    properties = [
        f"    <TargetFramework>{escape(tfm)}</TargetFramework>",
        "    <RestorePackagesWithLockFile>true</RestorePackagesWithLockFile>",
    ]
    if needs_asset_target_fallback(tfm, explicit_tfm):
        properties.append(
            f"    <AssetTargetFallback>{escape(Constants.ASSET_TARGET_FALLBACK)}</AssetTargetFallback>"
        )

    references = [
        f"    <PackageReference Include={quoteattr(pkg.id)} Version={quoteattr(pkg.version)} />"
        for pkg in packages
    ]

    return _PROJECT_TEMPLATE.format(
        properties="\n".join(properties),
        references="\n".join(references),
    )


def write_project(path: str, packages: Iterable[PackageRef], tfm: str, explicit_tfm: bool = False) -> str:
    """Write the generated project to ``path`` and return the path."""
    with open(path, "w", encoding="utf-8") as f:
        f.write(generate_project(packages, tfm, explicit_tfm))
    return path
