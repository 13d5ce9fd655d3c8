"""Runtime settings assembled from CLI flags, a config file and the environment.

Precedence, highest first: CLI flag, config file, environment variable,
built-in default from constants.Constants.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import yaml

from constants import Constants
from nuget.convert import ConvertOptions
from nuget.errors import ToolEnvironmentError

logger = logging.getLogger(__name__)

_CONFIG_KEYS = ("tfm", "root", "fail_on_skipped", "max_retries", "timeout", "dotnet", "output")


@dataclass
class Settings:
    """Resolved configuration for one run."""

    tfm: str = Constants.DEFAULT_TFM
    root: str = "."
    fail_on_skipped: bool = False
    max_retries: int = Constants.MAX_RETRIES
    timeout: Optional[float] = None
    dotnet: Optional[str] = None
    output: Optional[str] = None

    def convert_options(self) -> ConvertOptions:
        return ConvertOptions(
            tfm=self.tfm,
            fail_on_skipped=self.fail_on_skipped,
            max_retries=self.max_retries,
        )


def load_config_file(config_path: Optional[str]) -> Dict[str, Any]:
    """Load settings from a YAML or JSON file.

    A top-level ``nugetlock:`` section is used when present. Keys may use
    dashes or underscores (``max-retries`` / ``max_retries``).

    Raises:
        ToolEnvironmentError: If the file is missing, unreadable or malformed.
    """
    if not config_path:
        return {}
    if not os.path.isfile(config_path):
        raise ToolEnvironmentError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            if config_path.lower().endswith(".json"):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ToolEnvironmentError(f"Failed to load config {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ToolEnvironmentError(f"Config file must contain a mapping: {config_path}")

    section = data.get(Constants.CONFIG_SECTION, data)
    if not isinstance(section, dict):
        raise ToolEnvironmentError(f"'{Constants.CONFIG_SECTION}' section must be a mapping")

    normalized = {str(k).replace("-", "_"): v for k, v in section.items()}
    unknown = sorted(set(normalized) - set(_CONFIG_KEYS))
    if unknown:
        logger.warning("Ignoring unknown config key(s): %s", ", ".join(unknown))
    return {k: v for k, v in normalized.items() if k in _CONFIG_KEYS}


def _env_settings(environ: Mapping[str, str]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    mapping = {
        Constants.ENV_TFM: "tfm",
        Constants.ENV_TIMEOUT: "timeout",
        Constants.ENV_MAX_RETRIES: "max_retries",
        Constants.ENV_DOTNET: "dotnet",
    }
    for env_name, key in mapping.items():
        raw = environ.get(env_name, "").strip()
        if raw:
            values[key] = raw
    return values


def _coerce_int(name: str, value: Any) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise ToolEnvironmentError(f"Invalid {name}: {value!r}") from e
    if number < 1:
        raise ToolEnvironmentError(f"Invalid {name}: {value!r} (must be >= 1)")
    return number


def _coerce_float(name: str, value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ToolEnvironmentError(f"Invalid {name}: {value!r}") from e
    if number <= 0:
        raise ToolEnvironmentError(f"Invalid {name}: {value!r} (must be > 0)")
    return number


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return bool(value)


def build_settings(args: Any, environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Merge CLI args, config file and environment into Settings.

    Raises:
        ToolEnvironmentError: On an unreadable config file or invalid values.
    """
    environ = os.environ if environ is None else environ
    merged: Dict[str, Any] = {}
    merged.update(_env_settings(environ))
    merged.update(load_config_file(getattr(args, "CONFIG", None)))

    cli_values = {
        "tfm": getattr(args, "TFM", None),
        "root": getattr(args, "ROOT", None),
        "fail_on_skipped": getattr(args, "FAIL_ON_SKIPPED", None),
        "max_retries": getattr(args, "MAX_RETRIES", None),
        "timeout": getattr(args, "TIMEOUT", None),
        "dotnet": getattr(args, "DOTNET", None),
        "output": getattr(args, "OUTPUT", None),
    }
    merged.update({k: v for k, v in cli_values.items() if v is not None})

    settings = Settings(root=os.getcwd())
    if merged.get("tfm"):
        settings.tfm = str(merged["tfm"]).strip()
    if merged.get("root"):
        settings.root = str(merged["root"])
    if "fail_on_skipped" in merged:
        settings.fail_on_skipped = _coerce_bool(merged["fail_on_skipped"])
    if merged.get("max_retries") is not None:
        settings.max_retries = _coerce_int("max_retries", merged["max_retries"])
    settings.timeout = _coerce_float("timeout", merged.get("timeout"))
    if merged.get("dotnet"):
        settings.dotnet = str(merged["dotnet"])
    if merged.get("output"):
        settings.output = str(merged["output"])
    return settings


def validate_root(root: str) -> str:
    """Resolve ``root`` to an absolute directory path.

    Raises:
        ToolEnvironmentError: If it does not exist or is not a directory.
    """
    resolved = os.path.abspath(os.path.expanduser(root))
    if not os.path.exists(resolved):
        raise ToolEnvironmentError(f"Root directory does not exist: {resolved}")
    if not os.path.isdir(resolved):
        raise ToolEnvironmentError(f"Root directory is not a directory: {resolved}")
    return resolved
