"""
Version comparison utilities for reqbump.

This module classifies the jump from the version a requirement is written
against to a target version (``major``, ``minor``, ``patch``...), using the
version rules of the requirement's ecosystem.
"""

from __future__ import annotations

from typing import Optional, Tuple, Union

from reqbump.core.grammar import get_grammar
from reqbump.exceptions import InvalidVersionError
from reqbump.models.occurrence import Ecosystem
from reqbump.models.constraint import (
    UPPER_BOUND_OPERATORS,
    Operator,
    Requirement,
)
from reqbump.models.version import Version


def get_update_type(
    current_version: Optional[str],
    target_version: Optional[str],
    *,
    ecosystem: Union[Ecosystem, str] = Ecosystem.PYTHON,
) -> str:
    """Determine the semantic update type between two versions.

    Args:
        current_version: Version the requirement is written against, or
            ``None`` if there is none.
        target_version: Target version to compare against.
        ecosystem: Ecosystem whose version rules apply.

    Returns:
        One of:
            - ``"new"``       : No current version exists
            - ``"same"``      : Versions are equal
            - ``"downgrade"`` : Target version is lower than current
            - ``"major"``     : Major version change
            - ``"minor"``     : Minor version change
            - ``"patch"``     : Patch-level change
            - ``"update"``    : Update that cannot be classified further
            - ``"unknown"``   : Invalid or unsupported version comparison

    Examples:
        >>> get_update_type("1.0.0", "2.0.0")
        'major'
        >>> get_update_type(None, "1.0.0")
        'new'
        >>> get_update_type("v1.2.3", "v1.2.4", ecosystem="go_modules")
        'patch'
    """
    if target_version is None:
        return "unknown"

    if current_version is None:
        return "new"

    try:
        current = _parse_version(current_version, ecosystem)
        target = _parse_version(target_version, ecosystem)
    except InvalidVersionError:
        return "unknown"

    if target == current:
        return "same"

    if target < current:
        return "downgrade"

    return _classify_upgrade(current, target)


def reference_version(requirement: Optional[Requirement]) -> Optional[Version]:
    """Return the highest version a requirement is written against.

    Upper bounds and exclusions are ignored: for ``>=1.3.0,<1.5`` the
    reference version is ``1.3.0``.
    """
    if requirement is None:
        return None

    candidates = [
        atom.version
        for constraint in requirement.constraints
        for atom in constraint.comparisons
        if atom.version is not None
        and atom.operator not in UPPER_BOUND_OPERATORS
        and atom.operator is not Operator.NE
    ]
    return max(candidates) if candidates else None


def _parse_version(value: str, ecosystem: Union[Ecosystem, str]) -> Version:
    """Parse a version string with the ecosystem's rules."""
    grammar = get_grammar(ecosystem)
    return Version.parse(
        value,
        scheme=grammar.version_scheme,
        build_rule=grammar.build_rule,
        tag_prefix=grammar.tag_prefix,
    )


def _classify_upgrade(current: Version, target: Version) -> str:
    """Classify an upgrade between two valid versions."""
    current_major, current_minor, current_patch = _normalize_release(current)
    target_major, target_minor, target_patch = _normalize_release(target)

    if current_major != target_major:
        return "major"

    if current_minor != target_minor:
        return "minor"

    if current_patch != target_patch:
        return "patch"

    # Covers pre-release → release or metadata-only updates
    return "update"


def _normalize_release(version: Version) -> Tuple[int, int, int]:
    """Normalize a version's release segment to (major, minor, patch)."""
    release = version.release
    major = release[0] if len(release) > 0 else 0
    minor = release[1] if len(release) > 1 else 0
    patch = release[2] if len(release) > 2 else 0
    return major, minor, patch
