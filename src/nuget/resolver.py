"""dotnet restore invocation.

The resolver is a narrow capability: given a project path and a working
directory it runs one restore and reports exit status plus captured output.
The orchestrator and narrowing loop only see the Resolver interface, so tests
substitute a scripted fake.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from typing import List, Optional

from constants import Constants
from common.logging_utils import Timer, extra_context, is_debug_enabled
from .errors import ToolEnvironmentError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolverResult:
    """Captured result of one restore invocation."""

    exit_code: Optional[int]
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0 and not self.timed_out

    @property
    def output(self) -> str:
        return self.stdout + self.stderr


class Resolver:
    """Interface for running a restore against a project file."""

    def invoke(self, descriptor_path: str, workdir: str) -> ResolverResult:
        raise NotImplementedError


class DotnetResolver(Resolver):
    """Runs ``dotnet restore <project> --use-lock-file --force-evaluate``."""

    def __init__(self, executable: str = Constants.DOTNET_EXECUTABLE, timeout: Optional[float] = None):
        self.executable = executable
        self.timeout = timeout

    def build_command(self, descriptor_path: str) -> List[str]:
        return [
            self.executable,
            "restore",
            descriptor_path,
            "--use-lock-file",
            "--force-evaluate",
        ]

    def invoke(self, descriptor_path: str, workdir: str) -> ResolverResult:
        cmd = self.build_command(descriptor_path)
        env = os.environ.copy()
        env.update(Constants.DOTNET_ENV)

        logger.debug("Running: %s (cwd=%s)", " ".join(cmd), workdir)
        with Timer() as t:
            try:
                proc = subprocess.run(  # noqa: S603
                    cmd,
                    cwd=workdir,
                    env=env,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                    check=False,
                )
            except OSError as e:
                raise ToolEnvironmentError(f"dotnet CLI not usable: {self.executable}: {e}") from e
            except subprocess.TimeoutExpired as e:
                logger.error("dotnet restore timed out after %s seconds", self.timeout)
                return ResolverResult(
                    exit_code=None,
                    stdout=_as_text(e.stdout),
                    stderr=_as_text(e.stderr) + f"\ndotnet restore timed out after {self.timeout} seconds\n",
                    timed_out=True,
                )

        if is_debug_enabled(logger):
            logger.debug(
                "dotnet restore finished",
                extra=extra_context(
                    event="process_exit",
                    component="resolver",
                    action="restore",
                    target=descriptor_path,
                    exit_code=proc.returncode,
                    duration_ms=t.duration_ms(),
                ),
            )
        return ResolverResult(exit_code=proc.returncode, stdout=proc.stdout or "", stderr=proc.stderr or "")


def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def _dotnet_works(path: str) -> bool:
    try:
        proc = subprocess.run(  # noqa: S603
            [path, "--version"],
            capture_output=True,
            text=True,
            timeout=Constants.DOTNET_VERSION_TIMEOUT,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        logger.debug("dotnet candidate %s unusable: %s", path, exc)
        return False
    return proc.returncode == 0


def locate_dotnet(explicit: Optional[str] = None) -> str:
    """Find a working dotnet executable.

    Search order: ``explicit``, ``$DOTNET_ROOT/dotnet``, common install
    locations, then PATH.

    Raises:
        ToolEnvironmentError: If no candidate answers ``--version``.
    """
    if explicit:
        if _dotnet_works(explicit):
            return explicit
        raise ToolEnvironmentError(f"dotnet CLI not usable at: {explicit}")

    candidates: List[str] = []
    dotnet_root = os.environ.get(Constants.ENV_DOTNET_ROOT)
    if dotnet_root:
        candidates.append(os.path.join(dotnet_root, "dotnet"))
    candidates.extend(Constants.DOTNET_COMMON_PATHS)

    for candidate in candidates:
        if os.path.isfile(candidate) and _dotnet_works(candidate):
            logger.debug("Using dotnet at %s", candidate)
            return candidate

    on_path = shutil.which(Constants.DOTNET_EXECUTABLE)
    if on_path and _dotnet_works(on_path):
        logger.debug("Using dotnet from PATH: %s", on_path)
        return on_path

    raise ToolEnvironmentError("dotnet CLI is required but not installed")
