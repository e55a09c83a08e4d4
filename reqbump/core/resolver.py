"""Decide how a requirement must change to admit a target version.

The resolver is a small state machine. A requirement that already admits
the target is never touched, whatever the strategy. Otherwise the
requirement is rewritten according to the strategy and the operators it
uses:

- an OR-list gains one clause, derived from the last clause that can be
  rewritten
- an Elm range moves its upper bound to the next major; any other Elm
  range is pinned to the target on both sides
- an exact pin takes the target version (dropping sibling atoms)
- a lone compatible, caret, tilde or wildcard atom is bumped to the target
  at its old precision, or widened into a ``>=lower,<upper`` range
- in a range, only the atoms that exclude the target move

When no textual change can admit the target safely (an exclusion of the
target, a lower bound above it, or a rewrite that still fails the
re-check) the outcome is :class:`~reqbump.models.occurrence.Unfixable`.
"""

from __future__ import annotations

import dataclasses
from typing import List, Optional, Sequence

from reqbump.core.grammar import GrammarTable, PinPrecision
from reqbump.core.parser import ConstraintParser
from reqbump.core.synthesizer import ConstraintSynthesizer
from reqbump.models.version import Version, VersionScheme, bump_release, format_release
from reqbump.models.constraint import (
    EXACT_OPERATORS,
    PREFIX_OPERATORS,
    AtomicComparison,
    Constraint,
    ConstraintStyle,
    Operator,
    Requirement,
)
from reqbump.models.occurrence import (
    Strategy,
    Unchanged,
    Unfixable,
    Updated,
    UpdateOutcome,
)
from reqbump.exceptions import RequirementParseError
from reqbump.utils.logger import get_logger


class _NoSafeRewrite(Exception):
    """Internal signal: the requirement cannot be rewritten safely."""


class UpdateResolver:
    """Compute the outcome of one requirement for one target version.

    Args:
        grammar: Grammar table of the ecosystem.
    """

    def __init__(self, grammar: GrammarTable) -> None:
        self.grammar = grammar
        self.parser = ConstraintParser(grammar)
        self.synthesizer = ConstraintSynthesizer(grammar)
        self.logger = get_logger("core.resolver")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve(
        self,
        requirement: Optional[Requirement],
        target: Version,
        strategy: Strategy,
    ) -> UpdateOutcome:
        """Decide what happens to ``requirement``.

        Args:
            requirement: Parsed requirement, or ``None`` if absent.
            target: Version that must become admissible.
            strategy: Rewrite policy.

        Returns:
            :class:`Unchanged`, :class:`Updated` with the new text, or
            :class:`Unfixable`.
        """
        if strategy is Strategy.LOCKFILE_ONLY:
            return Unchanged("lockfile only")
        if requirement is None:
            return Unchanged("no requirement")
        if requirement.admits(target):
            return Unchanged("already satisfied")

        try:
            updated = self._update_requirement(requirement, target, strategy)
        except _NoSafeRewrite as exc:
            self.logger.debug("No safe rewrite for %r: %s", requirement.raw, exc)
            return Unfixable(str(exc))

        text = self.synthesizer.render(updated)

        # Whatever was synthesized must read back as admitting the target
        try:
            reparsed = self.parser.parse(text)
        except RequirementParseError as exc:
            return Unfixable(f"rewritten requirement {text!r} cannot be parsed: {exc.message}")
        if reparsed is None or not reparsed.admits(target):
            return Unfixable(f"rewritten requirement {text!r} does not admit {target}")

        self.logger.debug("Rewrote %r to %r", requirement.raw, text)
        return Updated(text)

    # ------------------------------------------------------------------
    # Requirement and constraint level
    # ------------------------------------------------------------------

    def _update_requirement(
        self, requirement: Requirement, target: Version, strategy: Strategy
    ) -> Requirement:
        constraints = requirement.constraints

        if len(constraints) > 1:
            return Requirement(
                constraints=constraints + (self._new_alternative(constraints, target),),
                joiners=requirement.joiners,
                raw=requirement.raw,
            )

        updated = self._update_constraint(constraints[0], target, strategy)
        return Requirement(constraints=(updated,), raw=requirement.raw)

    def _new_alternative(
        self, constraints: Sequence[Constraint], target: Version
    ) -> Constraint:
        """Derive one more OR clause, from the last clause that can be rewritten."""
        failure: Optional[_NoSafeRewrite] = None
        for constraint in reversed(constraints):
            try:
                return self._update_constraint(constraint, target, Strategy.BUMP_VERSIONS)
            except _NoSafeRewrite as exc:
                failure = failure or exc
        assert failure is not None
        raise failure

    def _update_constraint(
        self, constraint: Constraint, target: Version, strategy: Strategy
    ) -> Constraint:
        if constraint.style is ConstraintStyle.ELM:
            return self._update_elm(constraint, target)

        comparisons = constraint.comparisons

        pin = next((c for c in comparisons if c.operator in EXACT_OPERATORS), None)
        if pin is not None:
            return Constraint(comparisons=(self._pin(pin, target),), style=constraint.style)

        for atom in comparisons:
            if atom.operator is Operator.NE and atom.suffix:
                raise _NoSafeRewrite(
                    f"wildcard exclusion {self.synthesizer.render_atom(atom)!r}"
                )

        if len(comparisons) == 1 and comparisons[0].operator in PREFIX_OPERATORS:
            atom = comparisons[0]
            if strategy is Strategy.WIDEN_RANGES:
                return self._widen(atom, target)
            return dataclasses.replace(constraint, comparisons=(self._bump(atom, target),))

        return self._update_range(constraint, target)

    def _update_range(self, constraint: Constraint, target: Version) -> Constraint:
        comparisons: List[AtomicComparison] = []

        for atom in constraint.comparisons:
            if atom.admits(target):
                comparisons.append(atom)
            elif atom.operator is Operator.LT:
                comparisons.append(self._raise_upper_bound(atom, target))
            elif atom.operator is Operator.LE:
                comparisons.append(
                    self._with_text(atom, target, self._target_text(target, atom.operator))
                )
            elif atom.operator in PREFIX_OPERATORS:
                comparisons.append(self._bump(atom, target))
            elif atom.operator is Operator.NE:
                raise _NoSafeRewrite(f"{self.synthesizer.render_atom(atom)!r} excludes {target}")
            else:
                raise _NoSafeRewrite(
                    f"lower bound {self.synthesizer.render_atom(atom)!r} excludes {target}"
                )

        if self.grammar.compact_ranges and constraint.style is ConstraintStyle.OPERATORS:
            return self._compact(comparisons)
        return dataclasses.replace(constraint, comparisons=tuple(comparisons))

    def _update_elm(self, constraint: Constraint, target: Version) -> Constraint:
        """Rewrite ``low <= v < high`` up to the next major; pin anything else."""
        low, high = constraint.comparisons

        if low.operator is Operator.GE and high.operator is Operator.LT and low.admits(target):
            upper = format_release(bump_release(target.release, 0) + (0, 0))
            return dataclasses.replace(
                constraint, comparisons=(low, self._with_text(high, target, upper))
            )

        text = self._target_text(target)
        pinned = [
            dataclasses.replace(
                self._with_text(atom, target, text), operator=operator, spelling="<="
            )
            for atom, operator in ((low, Operator.GE), (high, Operator.LE))
        ]
        return dataclasses.replace(constraint, comparisons=tuple(pinned))

    # ------------------------------------------------------------------
    # Atom rewrites
    # ------------------------------------------------------------------

    def _target_text(self, target: Version, operator: Operator = Operator.EQ) -> str:
        # PEP 440 only allows local versions in exact matches
        if not self.grammar.keep_build:
            return target.public_text
        if target.scheme is VersionScheme.PEP440 and operator not in EXACT_OPERATORS:
            return target.public_text
        return target.text

    def _with_text(
        self, atom: AtomicComparison, target: Version, text: str
    ) -> AtomicComparison:
        version = target.derive(text)
        return dataclasses.replace(
            atom, version=version, precision=version.precision, text=text
        )

    def _pin(self, atom: AtomicComparison, target: Version) -> AtomicComparison:
        """Pin ``atom`` to the target, honouring the table's precision rule."""
        text = self._target_text(target)

        if (
            self.grammar.pin_precision is PinPrecision.TRUNCATE
            and not target.is_prerelease
            and not target.build
        ):
            release = list(target.release)
            while len(release) > max(atom.precision, 1) and release[-1] == 0:
                release.pop()
            text = format_release(release)

        pinned = self._with_text(atom, target, text)
        if atom.operator is Operator.KEYWORD:
            return dataclasses.replace(pinned, operator=Operator.EQ)
        return pinned

    def _bump(self, atom: AtomicComparison, target: Version) -> AtomicComparison:
        """Move a prefix-style atom to the target at its old precision."""
        if target.is_prerelease and atom.operator is not Operator.WILDCARD:
            return self._with_text(atom, target, self._target_text(target, atom.operator))

        release = list(target.release[: atom.precision])
        release += [0] * (atom.precision - len(release))
        return self._with_text(atom, target, format_release(release))

    def _raise_upper_bound(
        self, atom: AtomicComparison, target: Version
    ) -> AtomicComparison:
        """Move an exclusive upper bound to the next boundary above the target.

        The boundary keeps the old bound's number of components and moves
        at the old bound's lowest non-zero position, capped by the
        target's own precision: ``<1.5`` becomes ``<1.6`` and ``< 1.2.3``
        becomes ``< 1.5.1`` for a ``1.5.0`` target.
        """
        assert atom.version is not None
        old = atom.version.release
        nonzero = [index for index, part in enumerate(old) if part != 0]
        index = min(nonzero[-1] if nonzero else 0, len(target.release) - 1)

        release = list(bump_release(target.release, index))
        release += [0] * (len(old) - len(release))
        return self._with_text(atom, target, format_release(release))

    def _widen(self, atom: AtomicComparison, target: Version) -> Constraint:
        """Turn a prefix-style atom into an explicit ``>=lower,<upper`` range."""
        assert atom.version is not None
        grammar = self.grammar

        lower = list(atom.version.release[: atom.precision])
        while len(lower) > 1 and lower[-1] == 0:
            lower.pop()
        upper = list(bump_release(target.release, atom.significant_index()))

        length = max(len(lower), len(upper))
        lower += [0] * (length - len(lower))
        upper += [0] * (length - len(upper))

        bounds = []
        for operator, release in ((Operator.GE, lower), (Operator.LT, upper)):
            text = format_release(release)
            bounds.append(
                AtomicComparison(
                    operator=operator,
                    version=target.derive(text),
                    precision=length,
                    spelling=grammar.spell(operator),
                    spacing=grammar.operator_spacing,
                    prefix=atom.prefix,
                    text=text,
                )
            )

        if grammar.range_style is ConstraintStyle.OPERATORS:
            joiners = (grammar.and_joiner,)
        else:
            joiners = (",",)
        return Constraint(
            comparisons=tuple(bounds), joiners=joiners, style=grammar.range_style
        )

    @staticmethod
    def _compact(comparisons: Sequence[AtomicComparison]) -> Constraint:
        """Sort atoms by version and join them with ``,`` and no spaces."""
        stripped = [dataclasses.replace(c, spacing="") for c in comparisons]
        unversioned = [c for c in stripped if c.version is None]
        versioned = sorted((c for c in stripped if c.version is not None), key=lambda c: c.version)
        ordered = unversioned + versioned
        return Constraint(comparisons=tuple(ordered), joiners=(",",) * (len(ordered) - 1))
