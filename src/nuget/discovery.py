"""Manifest and project-file discovery."""
from __future__ import annotations

import logging
import os
from typing import List, Optional

from constants import Constants
from common.logging_utils import log_discovered_files
from .errors import AmbiguousDescriptorError

logger = logging.getLogger(__name__)


def discover_manifests(root: str) -> List[str]:
    """Find every packages.config under ``root``.

    Directories that cannot be read are skipped without aborting the walk.
    Results are in sorted walk order so runs are reproducible.
    """
    found: List[str] = []

    def _on_error(err: OSError) -> None:
        logger.debug("Skipping unreadable directory %s: %s", getattr(err, "filename", "?"), err)

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        dirnames.sort()
        if Constants.PACKAGES_CONFIG_FILE in filenames:
            found.append(os.path.join(dirpath, Constants.PACKAGES_CONFIG_FILE))

    log_discovered_files(logger, "discovery", found)
    return found


def find_existing_project(directory: str) -> Optional[str]:
    """Return the single project file in ``directory``, or None when there is none.

    Raises:
        AmbiguousDescriptorError: If several project files are present.
    """
    try:
        entries = sorted(os.listdir(directory))
    except OSError as e:
        logger.debug("Cannot list %s: %s", directory, e)
        return None

    projects = [
        os.path.join(directory, name)
        for name in entries
        if name.lower().endswith(Constants.PROJECT_FILE_EXTENSIONS)
        and os.path.isfile(os.path.join(directory, name))
    ]
    if not projects:
        return None
    if len(projects) > 1:
        names = ", ".join(os.path.basename(p) for p in projects)
        raise AmbiguousDescriptorError(f"Multiple project files found in {directory}: {names}")
    return projects[0]
