"""Unit tests for reqbump.core.resolver.

Test Coverage:
- Requirements that already admit the target are never rewritten
- Exact pins, including precision and build-metadata rules
- Bumping and widening of compatible, caret, tilde and wildcard atoms
- Range upper-bound arithmetic
- OR-list accretion
- Unfixable requirements
- Fixtures from the Hex, NuGet, Maven and Elm requirement updaters
"""

from __future__ import annotations

import pytest
from packaging.specifiers import SpecifierSet

from reqbump.core.grammar import get_grammar
from reqbump.core.resolver import UpdateResolver
from reqbump.models.occurrence import Strategy, Unchanged, Unfixable, Updated
from reqbump.models.version import Version

BUMP = Strategy.BUMP_VERSIONS
IF_NECESSARY = Strategy.BUMP_VERSIONS_IF_NECESSARY
WIDEN = Strategy.WIDEN_RANGES
LOCKFILE = Strategy.LOCKFILE_ONLY

REWRITING_STRATEGIES = [BUMP, IF_NECESSARY, WIDEN]


def _resolve(ecosystem: str, text, target: str, strategy: Strategy = BUMP):
    grammar = get_grammar(ecosystem)
    resolver = UpdateResolver(grammar)
    version = Version.parse(
        target,
        scheme=grammar.version_scheme,
        build_rule=grammar.build_rule,
        tag_prefix=grammar.tag_prefix,
    )
    return resolver.resolve(resolver.parser.parse(text), version, strategy)


# ============================================================================
# Unchanged outcomes
# ============================================================================


@pytest.mark.unit
class TestUnchanged:
    """Tests for requirements that are left alone."""

    @pytest.mark.parametrize("strategy", REWRITING_STRATEGIES)
    @pytest.mark.parametrize(
        "ecosystem, text, target",
        [
            ("hex", "~> 1.2", "1.5.0"),
            ("hex", "< 2.0.0", "1.5.0"),
            ("hex", "> 1.0.0 and < 2.0.0", "1.5.0"),
            ("hex", "~> 0.2 or < 3.0.0", "2.5.0"),
            ("python", ">=1.0,<2.0", "1.5.0"),
            ("python", "*", "1.5.0"),
            ("python", "", "1.5.0"),
            ("nuget", "23.*", "23.6-jre"),
            ("nuget", "*", "23.6-jre"),
            ("maven", "[23.0,)", "23.6-jre"),
            ("npm_and_yarn", "^1.3.0", "1.9.0"),
        ],
    )
    def test_satisfied_requirement_is_unchanged(
        self, ecosystem: str, text: str, target: str, strategy: Strategy
    ) -> None:
        """Test a requirement admitting the target is unchanged under every strategy."""
        outcome = _resolve(ecosystem, text, target, strategy)

        assert outcome == Unchanged("already satisfied")

    @pytest.mark.parametrize("strategy", list(Strategy))
    def test_absent_requirement_is_unchanged(self, strategy: Strategy) -> None:
        """Test a missing requirement is unchanged regardless of strategy."""
        assert isinstance(_resolve("python", None, "1.5.0", strategy), Unchanged)

    @pytest.mark.parametrize("text", ["!=1.5.0", "==1.0.0", "^1.3.0", ">=2.0"])
    def test_lockfile_only_never_rewrites(self, text: str) -> None:
        """Test lockfile-only leaves even unsatisfied requirements alone."""
        assert _resolve("python", text, "1.5.0", LOCKFILE) == Unchanged("lockfile only")


# ============================================================================
# Headline scenarios
# ============================================================================


@pytest.mark.unit
class TestScenarios:
    """Tests for the core rewrite scenarios."""

    def test_compatible_bump(self) -> None:
        """Test ~> 0.2.3 moves to the target at three components."""
        assert _resolve("hex", "~> 0.2.3", "1.5.0") == Updated("~> 1.5.0")

    def test_range_upper_bound_moves(self) -> None:
        """Test only the upper bound of a range moves."""
        assert _resolve("python", ">= 1.3.0, <1.5", "1.5.0") == Updated(">=1.3.0,<1.6")

    @pytest.mark.parametrize("strategy", REWRITING_STRATEGIES)
    def test_exclusion_of_target_is_unfixable(self, strategy: Strategy) -> None:
        """Test != target cannot be fixed by any rewriting strategy."""
        outcome = _resolve("python", "!=1.5.0", "1.5.0", strategy)

        assert isinstance(outcome, Unfixable)
        assert "excludes 1.5.0" in outcome.reason

    def test_caret_widen(self) -> None:
        """Test widening ^1.3.0 to admit 2.5.0."""
        assert _resolve("python", "^1.3.0", "2.5.0", WIDEN) == Updated(">=1.3,<3.0")

    def test_caret_bump(self) -> None:
        """Test bumping ^1.3.0 to admit 2.5.0."""
        assert _resolve("python", "^1.3.0", "2.5.0", BUMP) == Updated("^2.5.0")

    def test_wildcard_sibling_is_dropped(self) -> None:
        """Test ==1.4.*, ==1.4.1 collapses to the exact pin."""
        assert _resolve("python", "==1.4.*, ==1.4.1", "1.5.0") == Updated("==1.5.0")

    @pytest.mark.parametrize("ecosystem", ["hex", "nuget", "python"])
    def test_precision_preservation(self, ecosystem: str) -> None:
        """Test a four-component pin takes the target's three components."""
        assert _resolve(ecosystem, "1.1.0.1", "1.5.0") == Updated("1.5.0")

    @pytest.mark.parametrize(
        "ecosystem, text, target",
        [
            ("hex", "~> 0.2.3", "1.5.0"),
            ("hex", "~> 0.2 or ~> 1.0", "2.5.0"),
            ("python", ">= 1.3.0, <1.5", "1.5.0"),
            ("npm_and_yarn", "^1.3.0", "2.5.0"),
            ("maven", "22.+", "23.6-jre"),
        ],
    )
    def test_bump_strategies_agree(self, ecosystem: str, text: str, target: str) -> None:
        """Test bump_versions and bump_versions_if_necessary give the same text."""
        assert _resolve(ecosystem, text, target, BUMP) == _resolve(
            ecosystem, text, target, IF_NECESSARY
        )


# ============================================================================
# Exact pins
# ============================================================================


@pytest.mark.unit
class TestExactPins:
    """Tests for exact pin rewrites."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("1.2.3", "1.5.0"),
            ("== 1.2.3", "== 1.5.0"),
            ("0.1", "1.5"),
            ("1.1.0.1", "1.5.0"),
        ],
    )
    def test_hex_pins(self, text: str, expected: str) -> None:
        """Test Hex keeps the old precision when the extra digits are zeros."""
        assert _resolve("hex", text, "1.5.0") == Updated(expected)

    def test_truncate_keeps_nonzero_digits(self) -> None:
        """Test truncation never drops a non-zero component."""
        assert _resolve("bundler", "= 1.0", "1.5.2") == Updated("= 1.5.2")

    def test_truncate_skips_prereleases(self) -> None:
        """Test pre-release targets are copied as written."""
        assert _resolve("hex", "0.1", "1.5.0-rc.1") == Updated("1.5.0-rc.1")

    def test_target_precision_is_copied(self) -> None:
        """Test Python copies the target text."""
        assert _resolve("python", "==0.1", "1.5.0") == Updated("==1.5.0")

    def test_tag_prefix_survives(self) -> None:
        """Test a v prefix is re-emitted on the new version."""
        assert _resolve("go_modules", "v1.2.3", "v1.5.0") == Updated("v1.5.0")

    def test_pin_in_interval_notation(self) -> None:
        """Test [v] stays bracketed."""
        assert _resolve("nuget", "[23.3-jre]", "23.6-jre") == Updated("[23.6-jre]")

    def test_pin_moves_down_to_older_target(self) -> None:
        """Test a pin that excludes an older target is rewritten too."""
        assert _resolve("python", "==2.0.0", "1.5.0") == Updated("==1.5.0")


# ============================================================================
# Prefix-style atoms
# ============================================================================


@pytest.mark.unit
class TestBump:
    """Tests for bumping compatible, caret, tilde and wildcard atoms."""

    @pytest.mark.parametrize(
        "ecosystem, text, target, expected",
        [
            ("hex", "~> 0.2", "1.5.0", "~> 1.5"),
            ("python", "==1.4.*", "1.5.0", "==1.5.*"),
            ("python", "~=1.2.0", "1.5.3", "~=1.5.3"),
            ("npm_and_yarn", "~1.2", "1.5.3", "~1.5"),
            ("cargo", "0.2", "0.3.1", "0.3"),
            ("composer", "~1.2", "2.4.0", "~2.4"),
            ("npm_and_yarn", "1.x", "2.3.0", "2.x"),
        ],
    )
    def test_bump_at_old_precision(
        self, ecosystem: str, text: str, target: str, expected: str
    ) -> None:
        """Test the target is written at the atom's old precision."""
        assert _resolve(ecosystem, text, target) == Updated(expected)

    def test_bump_pads_short_target(self) -> None:
        """Test a target with fewer components is padded with zeros."""
        assert _resolve("hex", "~> 0.2.3", "2.0") == Updated("~> 2.0.0")

    def test_prerelease_target_is_written_in_full(self) -> None:
        """Test a pre-release target keeps its pre-release part."""
        assert _resolve("npm_and_yarn", "^1.3.0", "2.0.0-beta.1") == Updated("^2.0.0-beta.1")

    def test_prefix_atom_inside_range(self) -> None:
        """Test a compatible atom next to a lower bound is bumped alone."""
        assert _resolve("bundler", "~> 1.4, >= 1.4.2", "2.1.0") == Updated("~> 2.1, >= 1.4.2")


@pytest.mark.unit
class TestWiden:
    """Tests for widening prefix-style atoms into ranges."""

    @pytest.mark.parametrize(
        "ecosystem, text, target, expected",
        [
            ("python", "^0.0.3", "0.0.5", ">=0.0.3,<0.0.6"),
            ("python", "~1", "2.0.0", ">=1,<3"),
            ("python", "==1.4.*", "1.5.0", ">=1.4,<1.6"),
            ("cargo", "^1.3.0", "2.5.0", ">=1.3, <3.0"),
            ("npm_and_yarn", "^1.3.0", "2.5.0", ">=1.3 <3.0"),
            ("hex", "~> 1.4.0", "1.5.0", ">= 1.4 and < 1.6"),
            ("maven", "22.+", "23.6-jre", "[22,24)"),
            ("npm_and_yarn", "^v1.3.0", "2.5.0", ">=v1.3 <v3.0"),
        ],
    )
    def test_widen(self, ecosystem: str, text: str, target: str, expected: str) -> None:
        """Test the lower bound stays and the upper bound clears the target."""
        assert _resolve(ecosystem, text, target, WIDEN) == Updated(expected)

    def test_widen_leaves_pins_exact(self) -> None:
        """Test exact pins are re-pinned even when widening."""
        assert _resolve("python", "==1.4.1", "1.5.0", WIDEN) == Updated("==1.5.0")

    def test_widen_moves_range_bounds(self) -> None:
        """Test ranges are handled the same way as when bumping."""
        assert _resolve("python", ">= 1.3.0, <1.5", "1.5.0", WIDEN) == Updated(">=1.3.0,<1.6")


# ============================================================================
# Ranges
# ============================================================================


@pytest.mark.unit
class TestRanges:
    """Tests for range bound arithmetic."""

    @pytest.mark.parametrize(
        "ecosystem, text, target, expected",
        [
            ("hex", "< 1.2.3", "1.5.0", "< 1.5.1"),
            ("hex", "> 1.0.0 and < 1.2.0", "1.5.0", "> 1.0.0 and < 1.6.0"),
            ("bundler", "< 1.2.0", "1.5.0", "< 1.6.0"),
            ("python", "<=1.9.2", "1.10", "<=1.10"),
            ("swift", ">= 1.0.0, < 2.0.0", "2.1.0", ">= 1.0.0, < 3.0.0"),
            ("npm_and_yarn", ">=1.0.0 <1.2.0", "1.5.0", ">=1.0.0 <1.6.0"),
        ],
    )
    def test_upper_bounds(self, ecosystem: str, text: str, target: str, expected: str) -> None:
        """Test upper bounds move to the next boundary above the target."""
        assert _resolve(ecosystem, text, target) == Updated(expected)

    def test_python_ranges_are_sorted(self) -> None:
        """Test rewritten Python ranges are ordered by version."""
        assert _resolve("python", "<1.5, >= 1.3.0", "1.5.0") == Updated(">=1.3.0,<1.6")

    def test_satisfied_exclusion_is_kept(self) -> None:
        """Test an exclusion that does not hit the target stays."""
        assert _resolve("python", ">=1.0,!=1.2.0,<1.5", "1.5.0") == Updated(
            ">=1.0,!=1.2.0,<1.6"
        )

    def test_local_version_stays_out_of_range_bounds(self) -> None:
        """Test a local target is written without its local label in a bound."""
        outcome = _resolve("python", ">=1.0,<=1.4", "1.5.0+local")

        assert outcome == Updated(">=1.0,<=1.5.0")
        SpecifierSet(outcome.requirement)

    def test_local_version_kept_in_exact_pin(self) -> None:
        """Test an exact pin keeps the local label."""
        assert _resolve("python", "==1.4.0", "1.5.0+local") == Updated("==1.5.0+local")

    @pytest.mark.parametrize(
        "text",
        [">=1.6, <2.0", ">1.5.0", ">=1.0,!=1.5.0", "!=1.4.*, <1.5"],
    )
    def test_unfixable_ranges(self, text: str) -> None:
        """Test ranges that only a human can fix."""
        assert isinstance(_resolve("python", text, "1.5.0"), Unfixable)


# ============================================================================
# OR-lists
# ============================================================================


@pytest.mark.unit
class TestAlternatives:
    """Tests for OR-list accretion."""

    @pytest.mark.parametrize("strategy", REWRITING_STRATEGIES)
    def test_hex_or_list_gains_clause(self, strategy: Strategy) -> None:
        """Test a new alternative is derived from the last one."""
        outcome = _resolve("hex", "~> 0.2 or ~> 1.0", "2.5.0", strategy)

        assert outcome == Updated("~> 0.2 or ~> 1.0 or ~> 2.5")

    @pytest.mark.parametrize(
        "ecosystem, text, target, expected",
        [
            ("python", "1.3.* || 1.4.*", "1.5.0", "1.3.* || 1.4.* || 1.5.*"),
            ("npm_and_yarn", "^0.8.0 || ^1.3.0", "2.5.0", "^0.8.0 || ^1.3.0 || ^2.5.0"),
            ("composer", "^1.0|^2.0", "3.1.0", "^1.0|^2.0|^3.1"),
        ],
    )
    def test_or_joiner_is_reused(
        self, ecosystem: str, text: str, target: str, expected: str
    ) -> None:
        """Test the observed OR joiner is used for the new alternative."""
        assert _resolve(ecosystem, text, target) == Updated(expected)

    def test_earlier_clause_is_used_when_last_cannot_move(self) -> None:
        """Test a later clause with a lower bound above the target is skipped."""
        outcome = _resolve("python", ">=1.0, <2.0 || >=3.0", "2.5.0")

        assert outcome == Updated(">=1.0, <2.0 || >=3.0 || >=1.0,<3.0")

    def test_unfixable_when_no_clause_can_move(self) -> None:
        """Test the last clause's reason is reported when every clause fails."""
        outcome = _resolve("python", ">=3.0 || >=4.0", "2.5.0")

        assert outcome == Unfixable("lower bound '>=4.0' excludes 2.5.0")


# ============================================================================
# Ecosystem fixtures
# ============================================================================


@pytest.mark.unit
class TestNugetFixtures:
    """Tests mirroring the NuGet requirement updater fixtures."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("23.3-jre", "23.6-jre"),
            ("[23.3-jre]", "[23.6-jre]"),
            ("22.*", "23.*"),
            ("22.3-*", "23.6-*"),
        ],
    )
    def test_rewrites(self, text: str, expected: str) -> None:
        """Test soft, hard and wildcard requirements."""
        assert _resolve("nuget", text, "23.6-jre") == Updated(expected)

    def test_build_metadata_is_dropped(self) -> None:
        """Test NuGet rewrites drop the target's build metadata."""
        outcome = _resolve(
            "nuget", "3.0.0-beta4.20207.4+07df2f07", "3.0.0-beta4.20210.2+38fe3493"
        )

        assert outcome == Updated("3.0.0-beta4.20210.2")


@pytest.mark.unit
class TestMavenFixtures:
    """Tests mirroring the Maven requirement updater fixtures."""

    @pytest.mark.parametrize(
        "text, target, expected",
        [
            ("LATEST", "23.6-jre", "23.6-jre"),
            ("23.3-jre", "23.6-jre", "23.6-jre"),
            ("v2-rev398-1.24.1", "v2-rev404-1.25.0", "v2-rev404-1.25.0"),
            ("23.3.RELEASE", "23.6-jre", "23.6-jre"),
            ("[23.3-jre]", "23.6-jre", "[23.6-jre]"),
            ("22.+", "23.6-jre", "23.+"),
        ],
    )
    def test_rewrites(self, text: str, target: str, expected: str) -> None:
        """Test keyword, soft, hard and dynamic requirements."""
        assert _resolve("maven", text, target) == Updated(expected)

    def test_interval_upper_bound(self) -> None:
        """Test a bracketed upper bound moves like any other."""
        assert _resolve("maven", "[1.0,2.0)", "2.1") == Updated("[1.0,3.0)")


@pytest.mark.unit
class TestElmFixtures:
    """Tests mirroring the Elm requirement updater."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("1.0.0 <= v < 2.0.0", "1.0.0 <= v < 3.0.0"),
            ("1.0.0 <= v <= 1.0.0", "2.1.0 <= v <= 2.1.0"),
            ("1.0.0 < v < 2.0.0", "2.1.0 <= v <= 2.1.0"),
            ("1.0.0", "2.1.0"),
        ],
    )
    def test_rewrites(self, text: str, expected: str) -> None:
        """Test ranges and exact versions."""
        assert _resolve("elm", text, "2.1.0") == Updated(expected)

    def test_upper_bound_moves_to_next_major(self) -> None:
        """Test the new upper bound is the major above the target."""
        outcome = _resolve("elm", "1.0.0 <= v < 1.2.0", "1.5.0")

        assert outcome == Updated("1.0.0 <= v < 2.0.0")

    def test_lower_bound_above_target_is_pinned(self) -> None:
        """Test a range starting above the target is replaced by an exact range."""
        outcome = _resolve("elm", "3.0.0 <= v < 4.0.0", "2.1.0")

        assert outcome == Updated("2.1.0 <= v <= 2.1.0")
