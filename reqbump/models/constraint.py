"""
Requirement AST for reqbump.

A requirement string is parsed into a :class:`Requirement`: an OR-list of
:class:`Constraint` objects, each an AND-list of
:class:`AtomicComparison` objects. Every node keeps the textual details it
was written with (operator spelling, spacing, joiners, tag prefix and
wildcard suffix) so that an untouched node re-renders byte for byte.

Satisfaction always uses the relaxed version comparison, so build metadata
never decides whether a version is admitted.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from reqbump.models.version import Version, bump_release


class Operator(str, Enum):
    """Canonical comparison operators shared by every grammar."""

    EQ = "="
    NE = "!="
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="
    COMPATIBLE = "~>"
    CARET = "^"
    TILDE = "~"
    WILDCARD = "*"
    KEYWORD = "keyword"


#: Operators whose upper bound is implied by the precision of their version.
PREFIX_OPERATORS = frozenset(
    {Operator.COMPATIBLE, Operator.CARET, Operator.TILDE, Operator.WILDCARD}
)

#: Operators that pin a single version.
EXACT_OPERATORS = frozenset({Operator.EQ, Operator.KEYWORD})

#: Operators that only bound a range from below.
LOWER_BOUND_OPERATORS = frozenset({Operator.GT, Operator.GE})

#: Operators that only bound a range from above.
UPPER_BOUND_OPERATORS = frozenset({Operator.LT, Operator.LE})


class ConstraintStyle(str, Enum):
    """How a constraint is laid out as text."""

    OPERATORS = "operators"
    INTERVAL = "interval"
    ELM = "elm"


def release_lt(left: Sequence[int], right: Sequence[int]) -> bool:
    """Compare release tuples, treating missing components as zero."""
    length = max(len(left), len(right))
    padded_left = tuple(left) + (0,) * (length - len(left))
    padded_right = tuple(right) + (0,) * (length - len(right))
    return padded_left < padded_right


@dataclass(frozen=True)
class AtomicComparison:
    """
    A single comparison such as ``>= 1.3.0`` or ``~> 0.2``.

    Attributes:
        operator: Canonical operator.
        version: Compared version; ``None`` for ``*`` and keywords.
        precision: Number of release components written in the source.
        spelling: Operator as written (``"=="``, ``"~="``, ``""`` if bare).
        spacing: Whitespace between the operator and the version.
        prefix: Tag prefix written before the version (``"v"``).
        text: Version text as written, without prefix or wildcard suffix.
        suffix: Wildcard suffix (``".*"``, ``"-*"``, ``".+"``).
    """

    operator: Operator
    version: Optional[Version]
    precision: int
    spelling: str = ""
    spacing: str = ""
    prefix: str = ""
    text: str = ""
    suffix: str = ""

    @property
    def matches_anything(self) -> bool:
        """True for ``*``-style comparisons without fixed components."""
        return self.operator is Operator.WILDCARD and self.precision == 0

    def significant_index(self) -> int:
        """Index of the release component that bounds this comparison."""
        if self.operator is Operator.COMPATIBLE:
            return max(self.precision - 2, 0)
        if self.operator is Operator.TILDE:
            return 0 if self.precision <= 1 else 1
        if self.operator is Operator.CARET and self.version is not None:
            release = self.version.release[: self.precision]
            for index, part in enumerate(release):
                if part != 0:
                    return index
            return max(self.precision - 1, 0)
        return max(self.precision - 1, 0)

    def upper_bound(self) -> Optional[Tuple[int, ...]]:
        """Exclusive upper release bound implied by a prefix operator."""
        if self.operator not in PREFIX_OPERATORS or self.version is None:
            return None
        return bump_release(self.version.release, self.significant_index())

    def admits(self, candidate: Version) -> bool:
        """Return True if ``candidate`` satisfies this comparison."""
        if self.operator is Operator.KEYWORD:
            return False
        if self.matches_anything:
            return True

        assert self.version is not None
        if self.operator is Operator.WILDCARD:
            return self._prefix_matches(candidate)
        if self.operator is Operator.NE and self.suffix:
            return not self._prefix_matches(candidate)

        order = candidate.compare(self.version, relaxed=True)

        if self.operator is Operator.EQ:
            return order == 0
        if self.operator is Operator.NE:
            return order != 0
        if self.operator is Operator.GT:
            return order > 0
        if self.operator is Operator.GE:
            return order >= 0
        if self.operator is Operator.LT:
            return order < 0
        if self.operator is Operator.LE:
            return order <= 0

        upper = self.upper_bound()
        assert upper is not None
        return order >= 0 and release_lt(candidate.release, upper)

    def _prefix_matches(self, candidate: Version) -> bool:
        assert self.version is not None
        fixed = self.version.release[: self.precision]
        actual = tuple(candidate.release[: self.precision])
        actual += (0,) * (self.precision - len(actual))
        return actual == fixed


@dataclass(frozen=True)
class Constraint:
    """
    An AND-list of comparisons.

    Attributes:
        comparisons: The comparisons, in source order.
        joiners: Text written between consecutive comparisons. Interval
            constraints keep the separator between their bounds here.
        style: Layout used when rendering.
    """

    comparisons: Tuple[AtomicComparison, ...]
    joiners: Tuple[str, ...] = ()
    style: ConstraintStyle = ConstraintStyle.OPERATORS

    @property
    def matches_anything(self) -> bool:
        return all(c.matches_anything for c in self.comparisons)

    def admits(self, candidate: Version) -> bool:
        """Return True if ``candidate`` satisfies every comparison."""
        return all(c.admits(candidate) for c in self.comparisons)

    def has_operator(self, *operators: Operator) -> bool:
        return any(c.operator in operators for c in self.comparisons)


@dataclass(frozen=True)
class Requirement:
    """
    An OR-list of constraints, i.e. a full requirement string.

    Attributes:
        constraints: The alternatives, in source order.
        joiners: Text written between consecutive alternatives.
        raw: The requirement text the AST was parsed from.
    """

    constraints: Tuple[Constraint, ...]
    joiners: Tuple[str, ...] = ()
    raw: str = field(default="", compare=False)

    @property
    def matches_anything(self) -> bool:
        return any(c.matches_anything for c in self.constraints)

    def admits(self, candidate: Version) -> bool:
        """Return True if any alternative admits ``candidate``."""
        return any(c.admits(candidate) for c in self.constraints)
