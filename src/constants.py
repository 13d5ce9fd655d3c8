"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FAILURE = 1
    SKIPPED_PACKAGES = 2


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    DEFAULT_TFM = "net472"
    MAX_RETRIES = 20

    PACKAGES_CONFIG_FILE = "packages.config"
    LOCK_FILE = "packages.lock.json"
    OBJ_DIR = "obj"
    TEMP_PROJECT_FILE = "TempLockProject.csproj"
    TEMP_DIR_PREFIX = "nugetlock-"
    PROJECT_FILE_EXTENSIONS = (".csproj", ".vbproj", ".fsproj")

    # Target framework handling
    LEGACY_TFM_PREFIX = "netframework"
    FALLBACK_TFM_PREFIX = "net4"
    ASSET_TARGET_FALLBACK = "$(AssetTargetFallback);net40;net45;net46;net461;net462;net20"

    # Resolver diagnostics
    INCOMPATIBLE_CODE = "NU1202"

    # dotnet CLI
    DOTNET_EXECUTABLE = "dotnet"
    DOTNET_COMMON_PATHS = [
        "/usr/bin/dotnet",
        "/usr/local/bin/dotnet",
        "/usr/share/dotnet/dotnet",
    ]
    DOTNET_VERSION_TIMEOUT = 30
    DOTNET_ENV = {
        "DOTNET_NOLOGO": "1",
        "DOTNET_CLI_TELEMETRY_OPTOUT": "1",
    }

    # Environment variables
    ENV_LOG_LEVEL = "NUGETLOCK_LOG_LEVEL"
    ENV_LOG_FORMAT = "NUGETLOCK_LOG_FORMAT"
    ENV_TFM = "NUGETLOCK_TFM"
    ENV_TIMEOUT = "NUGETLOCK_TIMEOUT"
    ENV_MAX_RETRIES = "NUGETLOCK_MAX_RETRIES"
    ENV_DOTNET = "NUGETLOCK_DOTNET"
    ENV_DOTNET_ROOT = "DOTNET_ROOT"

    CONFIG_SECTION = "nugetlock"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
