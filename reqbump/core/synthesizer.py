"""Render requirement ASTs back to ecosystem-native text."""

from __future__ import annotations

from typing import Optional, Sequence

from reqbump.core.grammar import GrammarTable
from reqbump.models.constraint import (
    LOWER_BOUND_OPERATORS,
    UPPER_BOUND_OPERATORS,
    AtomicComparison,
    Constraint,
    ConstraintStyle,
    Operator,
    Requirement,
)


def _interleave(parts: Sequence[str], joiners: Sequence[str], default: str) -> str:
    """Join ``parts`` with the observed joiners.

    Parts beyond the observed joiners (an accreted OR clause) reuse the
    last observed joiner, or ``default`` if there is none.
    """
    if not parts:
        return ""

    fallback = joiners[-1] if joiners else default
    pieces = [parts[0]]
    for index, part in enumerate(parts[1:]):
        pieces.append(joiners[index] if index < len(joiners) else fallback)
        pieces.append(part)
    return "".join(pieces)


class ConstraintSynthesizer:
    """Render requirements with the spelling they were written in.

    Atoms keep their own operator spelling, spacing, tag prefix and
    wildcard suffix; joiners are reused as observed. Only structure that
    did not exist before falls back to the grammar table's defaults.

    Args:
        grammar: Grammar table of the ecosystem.
    """

    def __init__(self, grammar: GrammarTable) -> None:
        self.grammar = grammar

    def render(self, requirement: Requirement) -> str:
        """Render a full requirement."""
        parts = [self.render_constraint(c) for c in requirement.constraints]
        return _interleave(parts, requirement.joiners, self.grammar.or_joiner)

    def render_constraint(self, constraint: Constraint) -> str:
        """Render one AND-clause in its layout style."""
        if constraint.style is ConstraintStyle.INTERVAL:
            return self._render_interval(constraint)
        if constraint.style is ConstraintStyle.ELM:
            return self._render_elm(constraint)

        parts = [self.render_atom(c) for c in constraint.comparisons]
        return _interleave(parts, constraint.joiners, self.grammar.and_joiner)

    @staticmethod
    def render_atom(atom: AtomicComparison) -> str:
        """Render one comparison exactly as its fields describe it."""
        return f"{atom.spelling}{atom.spacing}{atom.prefix}{atom.text}{atom.suffix}"

    # ------------------------------------------------------------------
    # Bracketed layouts
    # ------------------------------------------------------------------

    @staticmethod
    def _version_text(atom: Optional[AtomicComparison]) -> str:
        return f"{atom.prefix}{atom.text}" if atom is not None else ""

    def _render_interval(self, constraint: Constraint) -> str:
        comparisons = constraint.comparisons
        if len(comparisons) == 1 and comparisons[0].operator is Operator.EQ:
            return f"[{self._version_text(comparisons[0])}]"

        lower = next((c for c in comparisons if c.operator in LOWER_BOUND_OPERATORS), None)
        upper = next((c for c in comparisons if c.operator in UPPER_BOUND_OPERATORS), None)

        opening = "[" if lower is not None and lower.operator is Operator.GE else "("
        closing = "]" if upper is not None and upper.operator is Operator.LE else ")"
        separator = constraint.joiners[0] if constraint.joiners else ","

        return (
            f"{opening}{self._version_text(lower)}{separator}"
            f"{self._version_text(upper)}{closing}"
        )

    def _render_elm(self, constraint: Constraint) -> str:
        lower = next(c for c in constraint.comparisons if c.operator in LOWER_BOUND_OPERATORS)
        upper = next(c for c in constraint.comparisons if c.operator in UPPER_BOUND_OPERATORS)

        lower_op = "<=" if lower.operator is Operator.GE else "<"
        upper_op = "<=" if upper.operator is Operator.LE else "<"
        return (
            f"{self._version_text(lower)} {lower_op} v "
            f"{upper_op} {self._version_text(upper)}"
        )
