"""
Unified data model exports for reqbump.

This module re-exports the data models to provide a stable and convenient
public API. Users can import models directly from ``reqbump.models``
instead of individual submodules.

Example:
    >>> from reqbump.models import RequirementOccurrence, UpdateRequest, Version
"""

from __future__ import annotations

from reqbump.models.version import BuildMetadata, Version, VersionScheme
from reqbump.models.constraint import (
    AtomicComparison,
    Constraint,
    ConstraintStyle,
    Operator,
    Requirement,
)
from reqbump.models.occurrence import (
    UNFIXABLE,
    Ecosystem,
    RequirementOccurrence,
    Strategy,
    Unchanged,
    Unfixable,
    Updated,
    UpdateOutcome,
    UpdateRequest,
)

__all__ = [
    "Version",
    "VersionScheme",
    "BuildMetadata",
    "Operator",
    "AtomicComparison",
    "Constraint",
    "ConstraintStyle",
    "Requirement",
    "Ecosystem",
    "Strategy",
    "RequirementOccurrence",
    "UpdateRequest",
    "UpdateOutcome",
    "Unchanged",
    "Updated",
    "Unfixable",
    "UNFIXABLE",
]
