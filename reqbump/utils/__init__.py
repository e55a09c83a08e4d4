"""
Utility helpers for reqbump.

This package provides reusable utilities used across reqbump, including:

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Update-type classification

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from reqbump.utils.logger import (
    disable_logging,
    get_logger,
    is_logging_configured,
    occurrence_logger,
    setup_logging,
)

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from reqbump.utils.console import (
    colorize_outcome,
    colorize_update_type,
    get_raw_console,
    print_error,
    print_json,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)

# ---------------------------------------------------------------------------
# Version utilities
# ---------------------------------------------------------------------------

from reqbump.utils.version_utils import get_update_type, reference_version

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    # Console
    "print_error",
    "print_json",
    "print_table",
    "print_success",
    "print_warning",
    "get_raw_console",
    "reconfigure_console",
    "colorize_outcome",
    "colorize_update_type",
    # Logging
    "get_logger",
    "setup_logging",
    "disable_logging",
    "is_logging_configured",
    "occurrence_logger",
    # Version utilities
    "get_update_type",
    "reference_version",
]
