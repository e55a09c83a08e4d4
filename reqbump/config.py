"""Configuration file loader for reqbump.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``reqbump.toml``: settings under the ``[reqbump]`` table
- ``pyproject.toml``: settings under the ``[tool.reqbump]`` table

Discovery order:

1. Explicit path from ``--config`` or ``REQBUMP_CONFIG``
2. ``reqbump.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.reqbump]`` section

Configuration precedence: defaults < config file < CLI args.

Typical usage::

    config = load_config()  # Auto-discover
    config = load_config(Path("custom.toml"))  # Explicit path

Example (``reqbump.toml``)::

    [reqbump]
    ecosystem = "python"
    strategy = "widen_ranges"
    has_lockfile = true

    [reqbump.group_strategies]
    dev-dependencies = "bump_versions"
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from reqbump.exceptions import ConfigError
from reqbump.utils.logger import get_logger
from reqbump.models.occurrence import Ecosystem, Strategy
from reqbump.constants import (
    CONFIG_FILE_NAME,
    CONFIG_SECTION,
    DEFAULT_ECOSYSTEM,
    DEFAULT_HAS_LOCKFILE,
)

logger = get_logger("config")

_KNOWN_KEYS = frozenset({"ecosystem", "strategy", "has_lockfile", "group_strategies"})


@dataclass
class ReqbumpConfig:
    """Parsed and validated reqbump configuration.

    Contains settings from ``reqbump.toml`` or ``pyproject.toml``.
    All fields have defaults, so empty config files are valid.

    Attributes:
        ecosystem: Grammar used when the CLI does not name one.
        strategy: Rewrite policy; ``None`` selects the ecosystem default.
        has_lockfile: Whether the project pins versions in a lockfile.
            Group strategies only apply when it does.
        group_strategies: Strategy overrides per dependency group.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    ecosystem: Ecosystem = Ecosystem(DEFAULT_ECOSYSTEM)
    strategy: Optional[Strategy] = None
    has_lockfile: bool = DEFAULT_HAS_LOCKFILE
    group_strategies: Dict[str, Strategy] = field(default_factory=dict)

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging.

        Excludes ``source_path`` metadata.
        """
        return {
            "ecosystem": self.ecosystem.value,
            "strategy": self.strategy.value if self.strategy else None,
            "has_lockfile": self.has_lockfile,
            "group_strategies": {
                group: strategy.value for group, strategy in self.group_strategies.items()
            },
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Search order:

    1. ``explicit_path`` (from ``--config`` or ``REQBUMP_CONFIG``)
    2. ``reqbump.toml`` in current directory
    3. ``pyproject.toml`` with ``[tool.reqbump]`` section in current directory

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    reqbump_toml = cwd / CONFIG_FILE_NAME
    if reqbump_toml.is_file():
        logger.debug("Found %s: %s", CONFIG_FILE_NAME, reqbump_toml)
        return reqbump_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_section(pyproject_toml):
        logger.debug("Found [tool.%s] in pyproject.toml: %s", CONFIG_SECTION, pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_section(path: Path) -> bool:
    """Return True if ``pyproject.toml`` has a ``[tool.reqbump]`` table.

    An unreadable or invalid ``pyproject.toml`` simply does not count as a
    reqbump configuration file.
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    return CONFIG_SECTION in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> ReqbumpConfig:
    """Load and validate reqbump configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`ReqbumpConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return ReqbumpConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get(CONFIG_SECTION, {})
    else:
        section = raw.get(CONFIG_SECTION, {})

    if not section:
        logger.debug("Config file found but no reqbump section, using defaults")
        return ReqbumpConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> ReqbumpConfig:
    """Parse and validate the ``[reqbump]`` or ``[tool.reqbump]`` table.

    Raises:
        ConfigError: Unknown keys, wrong types or unknown enum values.
    """
    config = ReqbumpConfig()

    unknown = set(section.keys()) - _KNOWN_KEYS
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    if "ecosystem" in section:
        config.ecosystem = _enum_option(
            Ecosystem, section["ecosystem"], "ecosystem", config_path
        )

    if "strategy" in section:
        config.strategy = _enum_option(
            Strategy, section["strategy"], "strategy", config_path
        )

    if "has_lockfile" in section:
        val = section["has_lockfile"]
        if not isinstance(val, bool):
            raise ConfigError(
                f"has_lockfile must be a boolean, got {type(val).__name__}",
                config_path=config_path,
                option="has_lockfile",
            )
        config.has_lockfile = val

    if "group_strategies" in section:
        val = section["group_strategies"]
        if not isinstance(val, dict):
            raise ConfigError(
                f"group_strategies must be a table, got {type(val).__name__}",
                config_path=config_path,
                option="group_strategies",
            )
        config.group_strategies = {
            group: _enum_option(Strategy, value, f"group_strategies.{group}", config_path)
            for group, value in val.items()
        }

    return config


def _enum_option(enum_cls: Any, value: Any, option: str, config_path: str) -> Any:
    """Convert a string option to ``enum_cls`` or raise :class:`ConfigError`."""
    if not isinstance(value, str):
        raise ConfigError(
            f"{option} must be a string, got {type(value).__name__}",
            config_path=config_path,
            option=option,
        )
    try:
        return enum_cls.from_string(value)
    except ValueError as exc:
        raise ConfigError(str(exc), config_path=config_path, option=option) from exc
