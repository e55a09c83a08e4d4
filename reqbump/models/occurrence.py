"""
Request and outcome data models for reqbump.

An :class:`UpdateRequest` describes one dependency: every place its
requirement occurs (:class:`RequirementOccurrence`), the version it should
be able to reach, and how aggressively requirement text may be rewritten
(:class:`Strategy`). Each occurrence yields one :data:`UpdateOutcome`.
"""

from __future__ import annotations

import dataclasses
from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, Final, List, Mapping, Optional, Tuple, Union


class Ecosystem(str, Enum):
    """Package ecosystems with a grammar table."""

    BUNDLER = "bundler"
    CARGO = "cargo"
    COMPOSER = "composer"
    ELM = "elm"
    GITHUB_ACTIONS = "github_actions"
    GO_MODULES = "go_modules"
    HEX = "hex"
    MAVEN = "maven"
    NPM_AND_YARN = "npm_and_yarn"
    NUGET = "nuget"
    PUB = "pub"
    PYTHON = "python"
    SWIFT = "swift"

    @classmethod
    def from_string(cls, value: Union[str, "Ecosystem"]) -> "Ecosystem":
        """Look up an ecosystem by name, accepting ``-`` for ``_``."""
        if isinstance(value, Ecosystem):
            return value
        normalized = value.strip().lower().replace("-", "_")
        try:
            return cls(normalized)
        except ValueError:
            choices = ", ".join(e.value for e in cls)
            raise ValueError(f"Unknown ecosystem {value!r} (expected one of: {choices})") from None


class Strategy(str, Enum):
    """Policy controlling how requirement text may be rewritten."""

    BUMP_VERSIONS = "bump_versions"
    BUMP_VERSIONS_IF_NECESSARY = "bump_versions_if_necessary"
    WIDEN_RANGES = "widen_ranges"
    LOCKFILE_ONLY = "lockfile_only"

    @classmethod
    def from_string(cls, value: Union[str, "Strategy"]) -> "Strategy":
        """Look up a strategy by name, accepting ``-`` for ``_``."""
        if isinstance(value, Strategy):
            return value
        normalized = value.strip().lower().replace("-", "_")
        try:
            return cls(normalized)
        except ValueError:
            choices = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown strategy {value!r} (expected one of: {choices})") from None


class Sentinel(Enum):
    """Marker values stored in place of requirement text."""

    UNFIXABLE = "unfixable"

    def __repr__(self) -> str:
        return self.name


#: Requirement value of an occurrence that cannot be rewritten safely.
UNFIXABLE: Final = Sentinel.UNFIXABLE

RequirementText = Union[str, None, Sentinel]


@dataclass(frozen=True)
class RequirementOccurrence:
    """
    One appearance of a dependency's requirement in one manifest.

    Attributes:
        file: Manifest the requirement was read from.
        requirement: Requirement text, ``None`` if absent, or
            :data:`UNFIXABLE` in updater output.
        groups: Dependency groups the occurrence belongs to.
        source: Opaque source details (registry, git pin, ...).
    """

    file: str
    requirement: RequirementText = None
    groups: Tuple[str, ...] = ()
    source: Optional[Mapping[str, Any]] = None

    def __post_init__(self) -> None:
        # Accept any iterable of group names
        object.__setattr__(self, "groups", tuple(self.groups))

    def replace(self, **changes: Any) -> "RequirementOccurrence":
        """Return a copy with the given fields replaced."""
        return dataclasses.replace(self, **changes)

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        requirement = self.requirement
        if isinstance(requirement, Sentinel):
            requirement = requirement.value
        return {
            "file": self.file,
            "requirement": requirement,
            "groups": list(self.groups),
            "source": dict(self.source) if self.source is not None else None,
        }


@dataclass(frozen=True)
class Unchanged:
    """The occurrence is left exactly as it was."""

    reason: str = ""


@dataclass(frozen=True)
class Updated:
    """The occurrence gets new requirement text and/or a new source."""

    requirement: Optional[str]
    source: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class Unfixable:
    """No textual change admits the target without human judgment."""

    reason: str = ""


UpdateOutcome = Union[Unchanged, Updated, Unfixable]


@dataclass
class UpdateRequest:
    """
    Everything needed to update one dependency's requirements.

    Attributes:
        dependency_name: Name of the dependency (informational).
        occurrences: Requirement occurrences, in manifest order.
        target_version: Version that must become admissible; ``None`` when
            no resolvable version exists (everything stays unchanged).
        ecosystem: Grammar to apply.
        strategy: Rewrite policy; ``None`` selects the ecosystem default.
        has_lockfile: Whether the project pins versions in a lockfile.
            Group strategy overrides only apply when it does.
        group_strategies: Per dependency-group strategy overrides.
        registry_source: Repository details attached to updated
            occurrences in ecosystems that record one (Maven, NuGet).
        updated_source: Replacement for git-style sources of the same type
            (e.g. a bumped tag ref).
    """

    dependency_name: str
    occurrences: List[RequirementOccurrence]
    target_version: Optional[str]
    ecosystem: Ecosystem = Ecosystem.PYTHON
    strategy: Optional[Strategy] = None
    has_lockfile: bool = True
    group_strategies: Mapping[str, Strategy] = field(default_factory=dict)
    registry_source: Optional[Mapping[str, Any]] = None
    updated_source: Optional[Mapping[str, Any]] = None
