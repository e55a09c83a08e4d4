"""Constraint grammar tables, one per ecosystem.

A :class:`GrammarTable` is pure data. The parser reads it to recognise
operators, joiners and wildcards; the synthesizer reads it to spell new
structure; the resolver reads it for precision and build-metadata rules.
Supporting another ecosystem means adding an :class:`Ecosystem` member and
a table to :data:`GRAMMARS`, nothing else.

Typical usage::

    from reqbump.core.grammar import get_grammar

    grammar = get_grammar("hex")
    grammar.spell(Operator.COMPATIBLE)   # '~>'
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple, Union

from reqbump.constants import MAVEN_KEYWORDS
from reqbump.models.constraint import ConstraintStyle, Operator
from reqbump.models.occurrence import Ecosystem, Strategy
from reqbump.models.version import BuildMetadata, VersionScheme


class PinPrecision(str, Enum):
    """How an exact pin takes on the target version's text.

    ``TARGET`` copies the target as written. ``TRUNCATE`` keeps the old
    pin's digit count when the extra target digits are zeros
    (``0.1`` → ``1.5`` for target ``1.5.0``) and never pads.
    """

    TARGET = "target"
    TRUNCATE = "truncate"


@dataclass(frozen=True)
class GrammarTable:
    """
    Grammar of one ecosystem's requirement strings.

    Attributes:
        ecosystem: Ecosystem described by this table.
        operators: Operator tokens mapped to canonical operators. When
            several tokens share an operator, the first one is used to
            spell new comparisons.
        version_scheme: Version parsing and ordering rules.
        build_rule: Whether build metadata breaks ordering ties.
        keep_build: Whether a rewritten version keeps the target's build
            metadata.
        tag_prefix: Prefix allowed (and preserved) before versions.
        bare_operator: Meaning of a version written without operator.
        and_pattern: Regex separating comparisons of one constraint, or
            ``None`` if constraints hold a single comparison.
        and_joiner: Joiner used for newly synthesized ranges.
        or_pattern: Regex separating alternatives, or ``None``.
        or_joiner: Joiner used between alternatives when none was observed.
        operator_spacing: Whitespace between operator and version in
            newly synthesized comparisons.
        wildcard_chars: Characters acting as a wildcard component.
        any_tokens: Whole requirement strings meaning "any version".
        keywords: Words accepted in place of a version (never satisfied).
        interval_notation: Whether ``[1.0,2.0)`` notation is accepted.
        range_style: Layout of newly synthesized ranges.
        pin_precision: Precision rule for exact pins.
        compact_ranges: Rewritten ranges are sorted by version and joined
            with ``,`` and no spaces.
        registry_source_type: Source ``type`` attached to updated
            occurrences, if the ecosystem records one.
        default_strategy: Strategy used when a request names none.
    """

    ecosystem: Ecosystem
    operators: Mapping[str, Operator] = field(default_factory=dict)
    version_scheme: VersionScheme = VersionScheme.SEMVER
    build_rule: BuildMetadata = BuildMetadata.IGNORE
    keep_build: bool = True
    tag_prefix: str = ""
    bare_operator: Operator = Operator.EQ
    and_pattern: Optional[str] = None
    and_joiner: str = ", "
    or_pattern: Optional[str] = None
    or_joiner: str = " || "
    operator_spacing: str = ""
    wildcard_chars: str = "*"
    any_tokens: Tuple[str, ...] = ("*",)
    keywords: Tuple[str, ...] = ()
    interval_notation: bool = False
    range_style: ConstraintStyle = ConstraintStyle.OPERATORS
    pin_precision: PinPrecision = PinPrecision.TARGET
    compact_ranges: bool = False
    registry_source_type: Optional[str] = None
    default_strategy: Strategy = Strategy.BUMP_VERSIONS

    def spell(self, operator: Operator) -> str:
        """Return the token used to write ``operator`` in this grammar."""
        for token, candidate in self.operators.items():
            if candidate is operator:
                return token
        return operator.value

    def operator_tokens(self) -> Tuple[str, ...]:
        """Operator tokens, longest first, for greedy matching."""
        return tuple(sorted(self.operators, key=len, reverse=True))


_COMPARISONS: Mapping[str, Operator] = {
    ">=": Operator.GE,
    "<=": Operator.LE,
    ">": Operator.GT,
    "<": Operator.LT,
}

_COMMA = r"\s*,\s*"


GRAMMARS: Mapping[Ecosystem, GrammarTable] = {
    Ecosystem.BUNDLER: GrammarTable(
        ecosystem=Ecosystem.BUNDLER,
        operators={"=": Operator.EQ, "!=": Operator.NE, **_COMPARISONS, "~>": Operator.COMPATIBLE},
        and_pattern=_COMMA,
        operator_spacing=" ",
        pin_precision=PinPrecision.TRUNCATE,
    ),
    Ecosystem.CARGO: GrammarTable(
        ecosystem=Ecosystem.CARGO,
        operators={"=": Operator.EQ, **_COMPARISONS, "^": Operator.CARET, "~": Operator.TILDE},
        bare_operator=Operator.CARET,
        and_pattern=_COMMA,
        pin_precision=PinPrecision.TRUNCATE,
    ),
    Ecosystem.COMPOSER: GrammarTable(
        ecosystem=Ecosystem.COMPOSER,
        operators={
            "==": Operator.EQ,
            "=": Operator.EQ,
            "!=": Operator.NE,
            "<>": Operator.NE,
            **_COMPARISONS,
            "^": Operator.CARET,
            "~": Operator.COMPATIBLE,
        },
        tag_prefix="v",
        and_pattern=r"\s*,\s*|\s+",
        and_joiner=" ",
        or_pattern=r"\s*\|\|?\s*",
    ),
    Ecosystem.ELM: GrammarTable(
        ecosystem=Ecosystem.ELM,
        operators={"<=": Operator.LE, "<": Operator.LT},
        range_style=ConstraintStyle.ELM,
        any_tokens=(),
    ),
    Ecosystem.GITHUB_ACTIONS: GrammarTable(
        ecosystem=Ecosystem.GITHUB_ACTIONS,
        tag_prefix="v",
        any_tokens=(),
    ),
    Ecosystem.GO_MODULES: GrammarTable(
        ecosystem=Ecosystem.GO_MODULES,
        build_rule=BuildMetadata.TIEBREAK,
        tag_prefix="v",
        any_tokens=(),
    ),
    Ecosystem.HEX: GrammarTable(
        ecosystem=Ecosystem.HEX,
        operators={"==": Operator.EQ, "!=": Operator.NE, **_COMPARISONS, "~>": Operator.COMPATIBLE},
        build_rule=BuildMetadata.TIEBREAK,
        and_pattern=r"\s+and\s+",
        and_joiner=" and ",
        or_pattern=r"\s+or\s+",
        or_joiner=" or ",
        operator_spacing=" ",
        pin_precision=PinPrecision.TRUNCATE,
    ),
    Ecosystem.MAVEN: GrammarTable(
        ecosystem=Ecosystem.MAVEN,
        version_scheme=VersionScheme.MAVEN,
        tag_prefix="v",
        wildcard_chars="+",
        any_tokens=("+",),
        keywords=MAVEN_KEYWORDS,
        interval_notation=True,
        range_style=ConstraintStyle.INTERVAL,
        registry_source_type="maven_repo",
    ),
    Ecosystem.NPM_AND_YARN: GrammarTable(
        ecosystem=Ecosystem.NPM_AND_YARN,
        operators={"=": Operator.EQ, **_COMPARISONS, "^": Operator.CARET, "~": Operator.TILDE},
        tag_prefix="v",
        and_pattern=r"\s+",
        and_joiner=" ",
        or_pattern=r"\s*\|\|\s*",
        wildcard_chars="*xX",
        any_tokens=("*", "x", "X"),
    ),
    Ecosystem.NUGET: GrammarTable(
        ecosystem=Ecosystem.NUGET,
        keep_build=False,
        interval_notation=True,
        range_style=ConstraintStyle.INTERVAL,
        registry_source_type="nuget_repo",
    ),
    Ecosystem.PUB: GrammarTable(
        ecosystem=Ecosystem.PUB,
        operators={**_COMPARISONS, "^": Operator.CARET},
        and_pattern=r"\s+",
        and_joiner=" ",
        any_tokens=("any",),
    ),
    Ecosystem.PYTHON: GrammarTable(
        ecosystem=Ecosystem.PYTHON,
        operators={
            "==": Operator.EQ,
            "===": Operator.EQ,
            "=": Operator.EQ,
            "!=": Operator.NE,
            "~=": Operator.COMPATIBLE,
            **_COMPARISONS,
            "^": Operator.CARET,
            "~": Operator.TILDE,
        },
        version_scheme=VersionScheme.PEP440,
        build_rule=BuildMetadata.TIEBREAK,
        and_pattern=_COMMA,
        and_joiner=",",
        or_pattern=r"\s*\|\|\s*",
        compact_ranges=True,
    ),
    Ecosystem.SWIFT: GrammarTable(
        ecosystem=Ecosystem.SWIFT,
        operators={"=": Operator.EQ, **_COMPARISONS},
        and_pattern=_COMMA,
        operator_spacing=" ",
        any_tokens=(),
    ),
}


def get_grammar(ecosystem: Union[Ecosystem, str]) -> GrammarTable:
    """Return the grammar table for ``ecosystem``.

    Raises:
        ValueError: ``ecosystem`` names no known ecosystem.
    """
    return GRAMMARS[Ecosystem.from_string(ecosystem)]
