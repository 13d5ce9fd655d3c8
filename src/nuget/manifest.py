"""packages.config reader."""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from .errors import ManifestParseError
from .models import Manifest, PackageRef

logger = logging.getLogger(__name__)


def normalize_target_framework(tfm: str) -> str:
    """Rewrite the legacy long form to a short moniker: ``netframework4.5 -> net45``."""
    tfm = tfm.strip()
    if tfm.lower().startswith(Constants.LEGACY_TFM_PREFIX):
        version = tfm[len(Constants.LEGACY_TFM_PREFIX):].replace(".", "")
        return f"net{version}"
    return tfm


def parse_packages_config(path: str) -> Manifest:
    """Parse a packages.config file.

    Args:
        path: Path to the packages.config file.

    Returns:
        Manifest holding packages in file order (unique by id, first entry
        wins) and the first targetFramework found, normalized.

    Raises:
        ManifestParseError: If the file cannot be read or is not valid XML.
    """
    try:
        tree = ET.parse(path)
    except (ET.ParseError, OSError) as e:
        raise ManifestParseError(f"Failed to parse {Constants.PACKAGES_CONFIG_FILE}: {e}") from e

    root = tree.getroot()
    # Remove namespace
    for elem in root.iter():
        if "}" in elem.tag:
            elem.tag = elem.tag.split("}")[1]

    if root.tag != "packages":
        logger.warning("Unexpected root element <%s> in %s", root.tag, path)
        return Manifest(packages=())

    packages: List[PackageRef] = []
    seen: Dict[str, PackageRef] = {}
    target_framework: Optional[str] = None

    for package in root.findall("package"):
        package_id = (package.get("id") or "").strip()
        version = (package.get("version") or "").strip()
        if not package_id or not version:
            logger.debug("Ignoring package entry without id/version in %s", path)
            continue

        existing = seen.get(package_id.lower())
        if existing is not None:
            logger.warning(
                "Duplicate package %s in %s; keeping %s",
                package_id, path, existing.key,
            )
            continue

        ref = PackageRef(id=package_id, version=version)
        seen[package_id.lower()] = ref
        packages.append(ref)

        if target_framework is None and package.get("targetFramework"):
            target_framework = normalize_target_framework(package.get("targetFramework"))

    if is_debug_enabled(logger):
        logger.debug(
            "Parsed manifest",
            extra=extra_context(
                event="parse", component="manifest", target=path,
                count=len(packages), tfm=target_framework,
            ),
        )

    return Manifest(packages=tuple(packages), target_framework=target_framework)
