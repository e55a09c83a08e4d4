"""
reqbump version information.

This module provides a single source of truth for the package version.
It follows Semantic Versioning: https://semver.org/
"""

from __future__ import annotations

__version__ = "0.1.0"

#: Human-readable version (for the CLI)
VERSION_STRING = f"reqbump {__version__}"
