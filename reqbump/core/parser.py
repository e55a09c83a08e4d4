"""Requirement parser driven by an ecosystem grammar table.

Turns requirement text into a :class:`~reqbump.models.constraint.Requirement`
AST. Every atom remembers how it was written (operator spelling, spacing,
tag prefix, wildcard suffix) and every joiner between clauses is kept, so
an untouched AST renders back to the original text.

Recognised forms:

- absent text (``None``), which yields ``None``
- empty text, ``*`` or an ecosystem "any" token (``any`` in Pub)
- Maven/NuGet interval notation (``[1.0]``, ``[1.0,2.0)``, ``(,1.0]``,
  unions such as ``[1,2),[3,4)``)
- Elm ranges (``1.0.0 <= v < 2.0.0``)
- OR-lists of AND-lists of operator comparisons (``>= 1.3.0, <1.5``,
  ``~> 0.2 or ~> 1.0``, ``^0.8.0 || ^1.3.0``)

Typical usage::

    from reqbump.core import ConstraintParser, get_grammar

    parser = ConstraintParser(get_grammar("python"))
    requirement = parser.parse(">= 1.3.0, <1.5")
    len(requirement.constraints[0].comparisons)   # 2
"""

from __future__ import annotations

import re
from typing import List, Optional, Pattern, Tuple

from reqbump.constants import OPERATOR_CHARACTERS
from reqbump.core.grammar import GrammarTable
from reqbump.models.version import Version, split_tag_prefix
from reqbump.models.constraint import (
    AtomicComparison,
    Constraint,
    ConstraintStyle,
    Operator,
    Requirement,
)
from reqbump.exceptions import (
    InvalidVersionError,
    MalformedRequirementError,
    UnsupportedGrammarError,
)
from reqbump.utils.logger import get_logger

_ELM_RANGE = re.compile(
    r"^(?P<low>\S+)\s+(?P<low_op><=|<)\s+v\s+(?P<high_op><=|<)\s+(?P<high>\S+)$"
)

_INTERVAL = re.compile(
    r"""
    (?P<open>[\[(])\s*
    (?P<low>[^,\[\]()]*?)\s*
    (?:(?P<separator>,\s*)(?P<high>[^,\[\]()]*?)\s*)?
    (?P<close>[\])])
    """,
    re.VERBOSE,
)

_INTERVAL_JOINER = re.compile(r"\s*,\s*")

_HYPHEN_RANGE = re.compile(r"\S\s+-\s+\S")


class ConstraintParser:
    """Parse requirement strings of one ecosystem.

    The parser is stateless apart from patterns compiled from its grammar
    table, so one instance can be shared freely.

    Args:
        grammar: Grammar table of the ecosystem.
    """

    def __init__(self, grammar: GrammarTable) -> None:
        self.grammar = grammar
        self.logger = get_logger("core.parser")

        tokens = grammar.operator_tokens()
        self._tokens = frozenset(tokens)
        self._operator_pattern: Optional[Pattern[str]] = None
        if tokens:
            alternatives = "|".join(re.escape(token) for token in tokens)
            self._operator_pattern = re.compile(
                rf"^(?P<op>{alternatives})?(?P<spacing>\s*)(?P<body>.*)$", re.DOTALL
            )

        self._or_split = self._splitter(grammar.or_pattern)
        self._and_split = self._splitter(grammar.and_pattern)

        wild = re.escape(grammar.wildcard_chars)
        self._wildcard_pattern = re.compile(
            rf"^(?P<release>\d+(?:\.\d+)*)(?P<suffix>(?:[.\-][{wild}])+)$"
        )
        self._bare_wildcard = re.compile(rf"^[{wild}](?:\.[{wild}])*$")

    @staticmethod
    def _splitter(pattern: Optional[str]) -> Optional[Pattern[str]]:
        # The capturing group keeps joiners in the re.split() output
        return re.compile(f"({pattern})") if pattern else None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def parse(self, text: Optional[str]) -> Optional[Requirement]:
        """Parse requirement text.

        Args:
            text: Requirement as written in the manifest, or ``None``.

        Returns:
            The requirement AST, or ``None`` if ``text`` is ``None``.

        Raises:
            UnsupportedGrammarError: The text uses syntax the ecosystem's
                grammar does not cover.
            MalformedRequirementError: The text is structurally broken or
                contains an unparsable version.
        """
        if text is None:
            return None

        stripped = text.strip()
        if not stripped or stripped in self.grammar.any_tokens:
            self.logger.debug("Requirement %r matches any version", text)
            return self._any_requirement(text, stripped)

        try:
            requirement = self._parse_requirement(text, stripped)
        except InvalidVersionError as exc:
            raise MalformedRequirementError(
                f"Invalid version in requirement: {exc.message}",
                requirement=text,
                ecosystem=self.grammar.ecosystem.value,
            ) from exc

        self.logger.debug(
            "Parsed %r into %d constraint(s)", text, len(requirement.constraints)
        )
        return requirement

    # ------------------------------------------------------------------
    # Requirement level
    # ------------------------------------------------------------------

    def _parse_requirement(self, raw: str, text: str) -> Requirement:
        grammar = self.grammar

        if grammar.interval_notation and text[0] in "[(":
            return self._parse_intervals(raw, text)

        if grammar.range_style is ConstraintStyle.ELM:
            match = _ELM_RANGE.match(text)
            if match:
                return Requirement(
                    constraints=(self._parse_elm_range(match),), raw=raw
                )

        if _HYPHEN_RANGE.search(text):
            raise UnsupportedGrammarError(
                "Hyphen ranges are not supported",
                requirement=raw,
                ecosystem=grammar.ecosystem.value,
            )

        clauses, joiners = self._split(self._or_split, text, raw)
        constraints = tuple(self._parse_constraint(clause, raw) for clause in clauses)
        return Requirement(constraints=constraints, joiners=joiners, raw=raw)

    def _any_requirement(self, raw: str, text: str) -> Requirement:
        comparison = AtomicComparison(
            operator=Operator.WILDCARD, version=None, precision=0, text=text
        )
        return Requirement(
            constraints=(Constraint(comparisons=(comparison,)),), raw=raw
        )

    def _split(
        self, splitter: Optional[Pattern[str]], text: str, raw: str
    ) -> Tuple[List[str], Tuple[str, ...]]:
        """Split ``text`` into parts and the joiners written between them."""
        if splitter is None:
            return [text], ()

        pieces = splitter.split(text)
        parts = pieces[::2]
        joiners = tuple(pieces[1::2])

        if any(not part.strip() for part in parts):
            raise MalformedRequirementError(
                "Requirement contains an empty clause",
                requirement=raw,
                ecosystem=self.grammar.ecosystem.value,
            )
        return parts, joiners

    # ------------------------------------------------------------------
    # Constraint level
    # ------------------------------------------------------------------

    def _parse_constraint(self, clause: str, raw: str) -> Constraint:
        tokens, joiners = self._split(self._and_split, clause, raw)

        comparisons: List[AtomicComparison] = []
        kept_joiners: List[str] = []
        last = len(tokens) - 1
        index = 0

        # An operator written apart from its version ("> 1.0" with a
        # whitespace joiner) is glued back together, keeping the spacing.
        while index <= last:
            start = index
            while tokens[index] in self._tokens:
                if index == last:
                    raise MalformedRequirementError(
                        f"Operator {tokens[index]!r} is not followed by a version",
                        requirement=raw,
                        ecosystem=self.grammar.ecosystem.value,
                    )
                index += 1

            glued = "".join(tokens[k] + joiners[k] for k in range(start, index))
            if comparisons:
                kept_joiners.append(joiners[start - 1])
            comparisons.append(self._parse_atom(glued + tokens[index], raw))
            index += 1

        return Constraint(comparisons=tuple(comparisons), joiners=tuple(kept_joiners))

    def _parse_elm_range(self, match: "re.Match[str]") -> Constraint:
        low_op = Operator.GE if match.group("low_op") == "<=" else Operator.GT
        high_op = Operator.LE if match.group("high_op") == "<=" else Operator.LT
        low = self._comparison(low_op, match.group("low"), spelling=match.group("low_op"))
        high = self._comparison(high_op, match.group("high"), spelling=match.group("high_op"))
        return Constraint(comparisons=(low, high), style=ConstraintStyle.ELM)

    def _parse_intervals(self, raw: str, text: str) -> Requirement:
        constraints: List[Constraint] = []
        joiners: List[str] = []
        position = 0

        while True:
            match = _INTERVAL.match(text, position)
            if not match:
                raise MalformedRequirementError(
                    "Invalid interval notation",
                    requirement=raw,
                    ecosystem=self.grammar.ecosystem.value,
                )
            constraints.append(self._interval_constraint(match, raw))
            position = match.end()
            if position == len(text):
                break

            joiner = _INTERVAL_JOINER.match(text, position)
            if not joiner or joiner.end() == len(text):
                raise MalformedRequirementError(
                    "Invalid interval notation",
                    requirement=raw,
                    ecosystem=self.grammar.ecosystem.value,
                )
            joiners.append(joiner.group(0))
            position = joiner.end()

        return Requirement(constraints=tuple(constraints), joiners=tuple(joiners), raw=raw)

    def _interval_constraint(self, match: "re.Match[str]", raw: str) -> Constraint:
        opening, closing = match.group("open"), match.group("close")
        low, high = match.group("low"), match.group("high")
        separator = match.group("separator")

        if separator is None:
            if opening != "[" or closing != "]" or not low:
                raise MalformedRequirementError(
                    "Exact interval must be written as [version]",
                    requirement=raw,
                    ecosystem=self.grammar.ecosystem.value,
                )
            pin = self._comparison(Operator.EQ, low)
            return Constraint(comparisons=(pin,), style=ConstraintStyle.INTERVAL)

        if not low and not high:
            raise MalformedRequirementError(
                "Interval has neither a lower nor an upper bound",
                requirement=raw,
                ecosystem=self.grammar.ecosystem.value,
            )

        comparisons: List[AtomicComparison] = []
        if low:
            operator = Operator.GE if opening == "[" else Operator.GT
            comparisons.append(self._comparison(operator, low))
        if high:
            operator = Operator.LE if closing == "]" else Operator.LT
            comparisons.append(self._comparison(operator, high))

        return Constraint(
            comparisons=tuple(comparisons),
            joiners=(separator,),
            style=ConstraintStyle.INTERVAL,
        )

    # ------------------------------------------------------------------
    # Atom level
    # ------------------------------------------------------------------

    def _parse_atom(self, token: str, raw: str) -> AtomicComparison:
        grammar = self.grammar

        if token in grammar.keywords:
            return AtomicComparison(
                operator=Operator.KEYWORD, version=None, precision=0, text=token
            )

        spelling, spacing, body = "", "", token
        if self._operator_pattern is not None:
            match = self._operator_pattern.match(token)
            assert match is not None
            spelling = match.group("op") or ""
            spacing = match.group("spacing")
            body = match.group("body")

        if not body:
            raise MalformedRequirementError(
                f"Operator {spelling!r} is not followed by a version",
                requirement=raw,
                ecosystem=grammar.ecosystem.value,
            )
        if body[0] in OPERATOR_CHARACTERS:
            raise UnsupportedGrammarError(
                f"Unsupported operator in {token!r}",
                requirement=raw,
                ecosystem=grammar.ecosystem.value,
            )

        operator = grammar.operators[spelling] if spelling else grammar.bare_operator
        prefix, rest = split_tag_prefix(body, grammar.tag_prefix)

        if self._bare_wildcard.match(rest):
            return AtomicComparison(
                operator=Operator.WILDCARD,
                version=None,
                precision=0,
                spelling=spelling,
                spacing=spacing,
                text=rest,
            )

        wildcard = self._wildcard_pattern.match(rest)
        if wildcard:
            return self._wildcard_atom(wildcard, operator, spelling, spacing, prefix, raw)

        version = self._version(rest)
        return AtomicComparison(
            operator=operator,
            version=version,
            precision=version.precision,
            spelling=spelling,
            spacing=spacing,
            prefix=prefix,
            text=rest,
        )

    def _wildcard_atom(
        self,
        match: "re.Match[str]",
        operator: Operator,
        spelling: str,
        spacing: str,
        prefix: str,
        raw: str,
    ) -> AtomicComparison:
        bare = not spelling
        if operator is not Operator.EQ and operator is not Operator.NE and not bare:
            raise UnsupportedGrammarError(
                f"Wildcards cannot be combined with {spelling!r}",
                requirement=raw,
                ecosystem=self.grammar.ecosystem.value,
            )

        release = match.group("release")
        return AtomicComparison(
            operator=Operator.NE if operator is Operator.NE else Operator.WILDCARD,
            version=self._version(release),
            precision=len(release.split(".")),
            spelling=spelling,
            spacing=spacing,
            prefix=prefix,
            text=release,
            suffix=match.group("suffix"),
        )

    def _comparison(
        self, operator: Operator, body: str, *, spelling: str = ""
    ) -> AtomicComparison:
        prefix, rest = split_tag_prefix(body, self.grammar.tag_prefix)
        version = self._version(rest)
        return AtomicComparison(
            operator=operator,
            version=version,
            precision=version.precision,
            spelling=spelling,
            prefix=prefix,
            text=rest,
        )

    def _version(self, text: str) -> Version:
        return Version.parse(
            text,
            scheme=self.grammar.version_scheme,
            build_rule=self.grammar.build_rule,
        )
