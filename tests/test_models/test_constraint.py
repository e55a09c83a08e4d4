from __future__ import annotations

import pytest

from reqbump.models.version import Version
from reqbump.models.constraint import (
    EXACT_OPERATORS,
    PREFIX_OPERATORS,
    AtomicComparison,
    Constraint,
    Operator,
    Requirement,
    release_lt,
)


def _atom(operator: Operator, text: str, *, precision=None, suffix: str = "") -> AtomicComparison:
    version = Version.parse(text)
    return AtomicComparison(
        operator=operator,
        version=version,
        precision=version.precision if precision is None else precision,
        text=text,
        suffix=suffix,
    )


def _v(text: str) -> Version:
    return Version.parse(text)


@pytest.mark.unit
class TestReleaseLt:
    """Tests for release tuple comparison."""

    def test_missing_components_are_zero(self) -> None:
        """Test (1, 5) and (1, 5, 0) are equal."""
        assert not release_lt((1, 5), (1, 5, 0))
        assert not release_lt((1, 5, 0), (1, 5))

    def test_ordering(self) -> None:
        """Test shorter tuples compare after padding."""
        assert release_lt((1, 4, 9), (1, 5))
        assert not release_lt((2,), (1, 9, 9))


@pytest.mark.unit
class TestOperatorGroups:
    """Tests for the operator families."""

    def test_prefix_operators(self) -> None:
        """Test operators whose bound comes from their precision."""
        assert PREFIX_OPERATORS == {
            Operator.COMPATIBLE,
            Operator.CARET,
            Operator.TILDE,
            Operator.WILDCARD,
        }

    def test_exact_operators(self) -> None:
        """Test keywords count as exact pins."""
        assert Operator.KEYWORD in EXACT_OPERATORS
        assert Operator.EQ in EXACT_OPERATORS


@pytest.mark.unit
class TestSignificantIndex:
    """Tests for AtomicComparison.significant_index and upper_bound."""

    @pytest.mark.parametrize(
        "text, expected_index, expected_bound",
        [
            ("0.2.3", 1, (0, 3)),
            ("0.2", 0, (1,)),
            ("1.4.0", 1, (1, 5)),
        ],
    )
    def test_compatible(self, text, expected_index, expected_bound) -> None:
        """Test ~> lets the last written component move."""
        atom = _atom(Operator.COMPATIBLE, text)

        assert atom.significant_index() == expected_index
        assert atom.upper_bound() == expected_bound

    @pytest.mark.parametrize(
        "text, expected_index, expected_bound",
        [
            ("1.3.0", 0, (2,)),
            ("0.2.3", 1, (0, 3)),
            ("0.0.3", 2, (0, 0, 4)),
            ("0.0", 1, (0, 1)),
        ],
    )
    def test_caret(self, text, expected_index, expected_bound) -> None:
        """Test ^ bounds at the first non-zero component."""
        atom = _atom(Operator.CARET, text)

        assert atom.significant_index() == expected_index
        assert atom.upper_bound() == expected_bound

    @pytest.mark.parametrize(
        "text, expected_bound",
        [("1", (2,)), ("1.2", (1, 3)), ("1.2.3", (1, 3))],
    )
    def test_tilde(self, text, expected_bound) -> None:
        """Test ~ bounds at the minor component when one is given."""
        assert _atom(Operator.TILDE, text).upper_bound() == expected_bound

    def test_wildcard(self) -> None:
        """Test 1.4.* is bounded by 1.5."""
        atom = _atom(Operator.WILDCARD, "1.4", suffix=".*")

        assert atom.upper_bound() == (1, 5)

    def test_plain_comparisons_have_no_upper_bound(self) -> None:
        """Test upper_bound is None outside the prefix family."""
        assert _atom(Operator.LT, "1.5").upper_bound() is None
        assert _atom(Operator.EQ, "1.5").upper_bound() is None


@pytest.mark.unit
class TestAtomicComparisonAdmits:
    """Tests for AtomicComparison.admits."""

    @pytest.mark.parametrize(
        "operator, text, candidate, expected",
        [
            (Operator.EQ, "1.5", "1.5.0", True),
            (Operator.EQ, "1.5", "1.5.1", False),
            (Operator.NE, "1.5.0", "1.5.0", False),
            (Operator.NE, "1.5.0", "1.5.1", True),
            (Operator.GT, "1.0.0", "1.0.0", False),
            (Operator.GE, "1.0.0", "1.0.0", True),
            (Operator.LT, "1.5", "1.5.0", False),
            (Operator.LE, "1.5", "1.5.0", True),
            (Operator.COMPATIBLE, "1.2", "1.5.0", True),
            (Operator.COMPATIBLE, "1.2", "2.0.0", False),
            (Operator.COMPATIBLE, "0.2.3", "0.2.2", False),
            (Operator.CARET, "1.3.0", "1.9.9", True),
            (Operator.CARET, "1.3.0", "2.5.0", False),
        ],
    )
    def test_comparison_operators(self, operator, text, candidate, expected) -> None:
        """Test each operator against a candidate version."""
        assert _atom(operator, text).admits(_v(candidate)) is expected

    def test_wildcard_prefix_match(self) -> None:
        """Test wildcards match on their fixed components."""
        atom = _atom(Operator.WILDCARD, "1.4", suffix=".*")

        assert atom.admits(_v("1.4.9"))
        assert atom.admits(_v("1.4"))
        assert not atom.admits(_v("1.5.0"))

    def test_wildcard_prefix_match_pads_short_candidate(self) -> None:
        """Test a short candidate is padded with zeros."""
        atom = _atom(Operator.WILDCARD, "2.0", suffix=".*")

        assert atom.admits(_v("2"))

    def test_wildcard_exclusion(self) -> None:
        """Test != with a wildcard suffix excludes the whole prefix."""
        atom = _atom(Operator.NE, "1.4", suffix=".*")

        assert not atom.admits(_v("1.4.2"))
        assert atom.admits(_v("1.5.0"))

    def test_bare_wildcard_matches_anything(self) -> None:
        """Test * admits every version."""
        atom = AtomicComparison(operator=Operator.WILDCARD, version=None, precision=0, text="*")

        assert atom.matches_anything
        assert atom.admits(_v("99.0.0-alpha"))

    def test_keyword_admits_nothing(self) -> None:
        """Test LATEST-style keywords never admit a version."""
        atom = AtomicComparison(
            operator=Operator.KEYWORD, version=None, precision=0, text="LATEST"
        )

        assert not atom.admits(_v("1.0.0"))

    def test_build_metadata_is_ignored(self) -> None:
        """Test satisfaction uses the relaxed comparison."""
        atom = _atom(Operator.EQ, "1.0.0")

        assert atom.admits(_v("1.0.0+gc.1"))


@pytest.mark.unit
class TestConstraintAndRequirement:
    """Tests for the AND and OR levels of the AST."""

    def test_constraint_requires_every_comparison(self) -> None:
        """Test a Constraint is an AND-list."""
        constraint = Constraint(
            comparisons=(_atom(Operator.GE, "1.3.0"), _atom(Operator.LT, "1.5")),
            joiners=(", ",),
        )

        assert constraint.admits(_v("1.4.0"))
        assert not constraint.admits(_v("1.5.0"))
        assert not constraint.admits(_v("1.2.0"))

    def test_has_operator(self) -> None:
        """Test operator lookup across a constraint."""
        constraint = Constraint(
            comparisons=(_atom(Operator.GE, "1.3.0"), _atom(Operator.LT, "1.5")),
        )

        assert constraint.has_operator(Operator.LT)
        assert constraint.has_operator(Operator.EQ, Operator.GE)
        assert not constraint.has_operator(Operator.NE)

    def test_requirement_accepts_any_alternative(self) -> None:
        """Test a Requirement is an OR-list."""
        requirement = Requirement(
            constraints=(
                Constraint(comparisons=(_atom(Operator.COMPATIBLE, "0.2"),)),
                Constraint(comparisons=(_atom(Operator.COMPATIBLE, "1.0"),)),
            ),
            joiners=(" or ",),
        )

        assert requirement.admits(_v("0.9.0"))
        assert requirement.admits(_v("1.5.0"))
        assert not requirement.admits(_v("2.5.0"))

    def test_matches_anything(self) -> None:
        """Test a requirement with a bare wildcard alternative matches anything."""
        star = AtomicComparison(operator=Operator.WILDCARD, version=None, precision=0)
        requirement = Requirement(
            constraints=(
                Constraint(comparisons=(_atom(Operator.EQ, "1.0.0"),)),
                Constraint(comparisons=(star,)),
            ),
        )

        assert requirement.matches_anything
        assert not requirement.constraints[0].matches_anything

    def test_raw_text_is_not_part_of_equality(self) -> None:
        """Test two ASTs compare equal regardless of their raw text."""
        constraint = Constraint(comparisons=(_atom(Operator.EQ, "1.0.0"),))

        assert Requirement((constraint,), raw="1.0.0") == Requirement((constraint,), raw="=1.0.0")
