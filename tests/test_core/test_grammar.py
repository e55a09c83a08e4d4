from __future__ import annotations

import dataclasses

import pytest

from reqbump.core.grammar import GRAMMARS, PinPrecision, get_grammar
from reqbump.models.constraint import ConstraintStyle, Operator
from reqbump.models.occurrence import Ecosystem
from reqbump.models.version import BuildMetadata, VersionScheme


@pytest.mark.unit
class TestGrammarTables:
    """Tests for the per-ecosystem grammar tables."""

    def test_every_ecosystem_has_a_table(self) -> None:
        """Test GRAMMARS covers the whole Ecosystem enum."""
        assert set(GRAMMARS) == set(Ecosystem)

    def test_tables_know_their_ecosystem(self) -> None:
        """Test each table is keyed by its own ecosystem."""
        for ecosystem, grammar in GRAMMARS.items():
            assert grammar.ecosystem is ecosystem

    def test_tables_are_frozen(self) -> None:
        """Test tables cannot be mutated."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            get_grammar("python").tag_prefix = "v"  # type: ignore[misc]

    def test_get_grammar_accepts_strings(self) -> None:
        """Test lookup by name."""
        assert get_grammar("go-modules") is GRAMMARS[Ecosystem.GO_MODULES]
        assert get_grammar(Ecosystem.HEX) is GRAMMARS[Ecosystem.HEX]

    def test_get_grammar_unknown(self) -> None:
        """Test unknown ecosystems raise ValueError."""
        with pytest.raises(ValueError):
            get_grammar("gradle")


@pytest.mark.unit
class TestSpelling:
    """Tests for GrammarTable.spell and operator_tokens."""

    @pytest.mark.parametrize(
        "ecosystem, operator, expected",
        [
            ("hex", Operator.COMPATIBLE, "~>"),
            ("python", Operator.EQ, "=="),
            ("python", Operator.COMPATIBLE, "~="),
            ("composer", Operator.COMPATIBLE, "~"),
            ("npm_and_yarn", Operator.TILDE, "~"),
            ("bundler", Operator.GE, ">="),
        ],
    )
    def test_spell(self, ecosystem: str, operator: Operator, expected: str) -> None:
        """Test the first token mapped to an operator is used."""
        assert get_grammar(ecosystem).spell(operator) == expected

    def test_spell_falls_back_to_canonical(self) -> None:
        """Test grammars without operator tokens use the canonical spelling."""
        assert get_grammar("nuget").spell(Operator.GE) == ">="

    def test_operator_tokens_longest_first(self) -> None:
        """Test tokens are ordered for greedy matching."""
        tokens = get_grammar("python").operator_tokens()

        assert tokens[0] == "==="
        assert tokens.index("==") < tokens.index("=")
        assert tokens.index("~=") < tokens.index("~")


@pytest.mark.unit
class TestEcosystemRules:
    """Tests for ecosystem-specific table entries."""

    def test_cargo_bare_version_is_caret(self) -> None:
        """Test Cargo reads a bare version as a caret requirement."""
        assert get_grammar("cargo").bare_operator is Operator.CARET

    def test_python_rules(self) -> None:
        """Test Python uses PEP 440 and compact ranges."""
        grammar = get_grammar("python")

        assert grammar.version_scheme is VersionScheme.PEP440
        assert grammar.compact_ranges
        assert grammar.and_joiner == ","

    def test_build_metadata_rules(self) -> None:
        """Test which ecosystems let build metadata break ties."""
        assert get_grammar("hex").build_rule is BuildMetadata.TIEBREAK
        assert get_grammar("go_modules").build_rule is BuildMetadata.TIEBREAK
        assert get_grammar("npm_and_yarn").build_rule is BuildMetadata.IGNORE
        assert get_grammar("nuget").keep_build is False

    def test_interval_ecosystems(self) -> None:
        """Test Maven and NuGet accept bracket notation and record a registry."""
        for name, source_type in (("maven", "maven_repo"), ("nuget", "nuget_repo")):
            grammar = get_grammar(name)
            assert grammar.interval_notation
            assert grammar.range_style is ConstraintStyle.INTERVAL
            assert grammar.registry_source_type == source_type

    def test_pin_precision(self) -> None:
        """Test which ecosystems truncate exact pins."""
        assert get_grammar("hex").pin_precision is PinPrecision.TRUNCATE
        assert get_grammar("python").pin_precision is PinPrecision.TARGET

    def test_elm_style(self) -> None:
        """Test Elm renders new ranges in its own layout."""
        assert get_grammar("elm").range_style is ConstraintStyle.ELM
