"""
Centralized constants for reqbump.

This module defines immutable configuration values used across reqbump,
including configuration defaults, environment variable names and logging
formats. All values are intended to be treated as read-only.
"""

from typing import Final, Tuple

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

#: Name of the dedicated configuration file.
CONFIG_FILE_NAME: Final[str] = "reqbump.toml"

#: Table holding reqbump settings inside ``reqbump.toml``.
CONFIG_SECTION: Final[str] = "reqbump"

#: Environment variable pointing at an explicit configuration file.
CONFIG_ENV_VAR: Final[str] = "REQBUMP_CONFIG"

#: Ecosystem assumed when neither the CLI nor the config names one.
DEFAULT_ECOSYSTEM: Final[str] = "python"

#: Whether occurrences are assumed to be backed by a lockfile.
DEFAULT_HAS_LOCKFILE: Final[bool] = True

# ---------------------------------------------------------------------------
# Grammar defaults
# ---------------------------------------------------------------------------

#: Characters that may introduce a comparison operator. Used to tell an
#: unsupported operator apart from a malformed version.
OPERATOR_CHARACTERS: Final[str] = "<>=!~^"

#: Keywords that Maven accepts in place of a version.
MAVEN_KEYWORDS: Final[Tuple[str, ...]] = ("LATEST", "RELEASE")

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
