"""
Version data model for reqbump.

A :class:`Version` is an ordered release tuple of arbitrary arity with
optional pre-release identifiers and build metadata. How text is split into
those parts, and how two versions are ordered, depends on the ecosystem's
:class:`VersionScheme`:

- ``semver`` covers every ecosystem whose versions look like
  ``1.2.3-rc.1+build`` (bundler and Go also write pre-releases as
  ``1.2.3.pre1``, NuGet allows four release components).
- ``pep440`` delegates parsing and ordering to :mod:`packaging.version`.
- ``maven`` treats everything after the numeric release as a qualifier.

Build metadata never affects satisfaction checks. Whether it breaks ties in
ordering is decided per ecosystem through :class:`BuildMetadata`.
"""

from __future__ import annotations

import re
from enum import Enum
from dataclasses import dataclass, field
from functools import total_ordering
from typing import Any, Optional, Sequence, Tuple, Union

from packaging.version import InvalidVersion as PackagingInvalidVersion
from packaging.version import Version as PackagingVersion

from reqbump.exceptions import InvalidVersionError

Identifier = Union[int, str]


class VersionScheme(str, Enum):
    """Parsing and ordering rules for version text."""

    SEMVER = "semver"
    PEP440 = "pep440"
    MAVEN = "maven"


class BuildMetadata(str, Enum):
    """How build metadata participates in ordering."""

    IGNORE = "ignore"
    TIEBREAK = "tiebreak"


_SEMVER_PATTERN = re.compile(
    r"""
    ^(?P<release>\d+(?:\.\d+)*)
    (?:[-.](?P<pre>[0-9A-Za-z][0-9A-Za-z.\-]*))?
    (?:\+(?P<build>[0-9A-Za-z][0-9A-Za-z.\-]*))?$
    """,
    re.VERBOSE,
)

_MAVEN_PATTERN = re.compile(
    r"^(?P<release>\d+(?:\.\d+)*)(?:[-.]?(?P<qualifier>[0-9A-Za-z][0-9A-Za-z.\-_]*))?$"
)

_TEXT_PARTS = re.compile(
    r"^(?P<release>(?:\d+!)?\d+(?:\.\d+)*)(?P<pre>[^+]*)(?P<build>\+.*)?$"
)

# Maven qualifier ordering; anything unknown sorts after "sp", lexically.
_MAVEN_QUALIFIERS = {
    "alpha": 0,
    "a": 0,
    "beta": 1,
    "b": 1,
    "milestone": 2,
    "m": 2,
    "rc": 3,
    "cr": 3,
    "snapshot": 4,
    "": 5,
    "ga": 5,
    "final": 5,
    "release": 5,
    "sp": 6,
}
_MAVEN_RELEASE_RANK = 5
_MAVEN_UNKNOWN_RANK = 7


def split_tag_prefix(text: str, prefix: str) -> Tuple[str, str]:
    """Split a leading tag prefix (such as ``v``) from version text.

    The prefix is only recognised when a digit follows it, so ``"va1.0"``
    is left alone.

    Returns:
        ``(prefix, remainder)`` where ``prefix`` is ``""`` if absent.
    """
    if prefix and text.startswith(prefix) and text[len(prefix) : len(prefix) + 1].isdigit():
        return prefix, text[len(prefix) :]
    return "", text


def format_release(release: Sequence[int]) -> str:
    """Render release components as dotted text."""
    return ".".join(str(part) for part in release)


def bump_release(release: Sequence[int], index: int) -> Tuple[int, ...]:
    """Increment ``release[index]`` and drop everything below it.

    Missing components up to ``index`` are treated as zero.

    Example:
        >>> bump_release((1, 4, 2), 1)
        (1, 5)
        >>> bump_release((2,), 1)
        (2, 1)
    """
    segments = list(release[: index + 1])
    while len(segments) <= index:
        segments.append(0)
    segments[index] += 1
    return tuple(segments)


def _identifiers(text: Optional[str], separators: str = ".") -> Tuple[Identifier, ...]:
    if not text:
        return ()
    parts = re.split(f"[{re.escape(separators)}]", text)
    return tuple(int(part) if part.isdigit() else part for part in parts if part)


def _identifier_keys(identifiers: Sequence[Identifier]) -> Tuple[Tuple[int, int, str], ...]:
    # Numeric identifiers sort before alphanumeric ones.
    keys = []
    for identifier in identifiers:
        if isinstance(identifier, int):
            keys.append((0, identifier, ""))
        else:
            keys.append((1, 0, identifier))
    return tuple(keys)


def _trim(release: Sequence[int]) -> Tuple[int, ...]:
    segments = list(release)
    while segments and segments[-1] == 0:
        segments.pop()
    return tuple(segments)


def _maven_qualifier_key(qualifier: Sequence[Identifier]) -> Tuple[Any, ...]:
    if not qualifier:
        return (_MAVEN_RELEASE_RANK, "", ())

    head = str(qualifier[0]).lower()
    match = re.match(r"^([a-z]*)(\d*)$", head)
    word, number = (match.group(1), match.group(2)) if match else (head, "")
    rank = _MAVEN_QUALIFIERS.get(word)

    if rank is None:
        return (_MAVEN_UNKNOWN_RANK, head, _identifier_keys(qualifier[1:]))

    rest = ([int(number)] if number else []) + list(qualifier[1:])
    return (rank, "", _identifier_keys(rest))


@total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """
    A parsed version of one ecosystem.

    Instances are created through :meth:`parse`. Ordering operators use
    the strict comparison (build metadata breaks ties when the ecosystem
    says so); satisfaction checks use ``compare(..., relaxed=True)``.

    Attributes:
        text: Version text as written, without any tag prefix.
        release: Numeric release components.
        prerelease: Pre-release identifiers (Maven: qualifier identifiers).
        build: Build or local metadata identifiers.
        scheme: Parsing and ordering rules in effect.
        build_rule: Whether build metadata breaks ordering ties.
    """

    text: str
    release: Tuple[int, ...]
    prerelease: Tuple[Identifier, ...] = ()
    build: Tuple[Identifier, ...] = ()
    scheme: VersionScheme = VersionScheme.SEMVER
    build_rule: BuildMetadata = BuildMetadata.IGNORE
    _parsed: Optional[PackagingVersion] = field(default=None, repr=False)
    _public: Optional[PackagingVersion] = field(default=None, repr=False)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def parse(
        cls,
        text: Optional[str],
        *,
        scheme: VersionScheme = VersionScheme.SEMVER,
        build_rule: BuildMetadata = BuildMetadata.IGNORE,
        tag_prefix: str = "",
    ) -> "Version":
        """Parse version text.

        Args:
            text: Version text, optionally starting with ``tag_prefix``.
            scheme: Parsing and ordering rules.
            build_rule: Whether build metadata breaks ordering ties.
            tag_prefix: Prefix stripped before parsing (e.g. ``"v"``).

        Returns:
            Parsed :class:`Version`.

        Raises:
            InvalidVersionError: ``text`` is empty or not a valid version.
        """
        if text is None or not text.strip():
            raise InvalidVersionError("Empty version string", version=text or "")

        _, body = split_tag_prefix(text.strip(), tag_prefix)

        if scheme is VersionScheme.PEP440:
            return cls._parse_pep440(body, build_rule)
        if scheme is VersionScheme.MAVEN:
            return cls._parse_maven(body, build_rule)
        return cls._parse_semver(body, build_rule)

    @classmethod
    def _parse_semver(cls, body: str, build_rule: BuildMetadata) -> "Version":
        match = _SEMVER_PATTERN.match(body)
        if not match:
            raise InvalidVersionError(f"Invalid version: {body!r}", version=body)

        return cls(
            text=body,
            release=tuple(int(part) for part in match.group("release").split(".")),
            prerelease=_identifiers(match.group("pre")),
            build=_identifiers(match.group("build")),
            scheme=VersionScheme.SEMVER,
            build_rule=build_rule,
        )

    @classmethod
    def _parse_pep440(cls, body: str, build_rule: BuildMetadata) -> "Version":
        try:
            parsed = PackagingVersion(body)
        except PackagingInvalidVersion as exc:
            raise InvalidVersionError(
                f"Invalid PEP 440 version: {body!r}", version=body
            ) from exc

        prerelease: Tuple[Identifier, ...] = tuple(parsed.pre) if parsed.pre else ()
        if parsed.dev is not None:
            prerelease += ("dev", parsed.dev)

        return cls(
            text=body,
            release=tuple(parsed.release),
            prerelease=prerelease,
            build=_identifiers(parsed.local),
            scheme=VersionScheme.PEP440,
            build_rule=build_rule,
            _parsed=parsed,
            _public=PackagingVersion(parsed.public) if parsed.local else parsed,
        )

    @classmethod
    def _parse_maven(cls, body: str, build_rule: BuildMetadata) -> "Version":
        match = _MAVEN_PATTERN.match(body)
        if not match:
            raise InvalidVersionError(f"Invalid Maven version: {body!r}", version=body)

        return cls(
            text=body,
            release=tuple(int(part) for part in match.group("release").split(".")),
            prerelease=_identifiers(match.group("qualifier"), separators=".-_"),
            scheme=VersionScheme.MAVEN,
            build_rule=build_rule,
        )

    def derive(self, text: str) -> "Version":
        """Parse ``text`` with this version's scheme and build rule."""
        return Version.parse(text, scheme=self.scheme, build_rule=self.build_rule)

    def release_only(self) -> "Version":
        """Return the release part alone, without pre-release or build."""
        return self.derive(format_release(self.release))

    # ------------------------------------------------------------------
    # Text accessors
    # ------------------------------------------------------------------

    @property
    def precision(self) -> int:
        """Number of explicit release components."""
        return len(self.release)

    @property
    def is_prerelease(self) -> bool:
        if self.scheme is VersionScheme.MAVEN:
            return _maven_qualifier_key(self.prerelease)[0] < _MAVEN_RELEASE_RANK
        return bool(self.prerelease)

    @property
    def pre_tail(self) -> str:
        """Text between the release and the build metadata (``"-rc.1"``)."""
        match = _TEXT_PARTS.match(self.text)
        return match.group("pre") if match else ""

    @property
    def public_text(self) -> str:
        """Version text without build metadata."""
        match = _TEXT_PARTS.match(self.text)
        if not match or not match.group("build"):
            return self.text
        return self.text[: match.start("build")]

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------

    def _key(self, relaxed: bool) -> Any:
        if self.scheme is VersionScheme.PEP440:
            if relaxed or self.build_rule is BuildMetadata.IGNORE:
                return self._public
            return self._parsed

        if self.scheme is VersionScheme.MAVEN:
            return (_trim(self.release), _maven_qualifier_key(self.prerelease))

        key: Tuple[Any, ...] = (
            _trim(self.release),
            0 if self.prerelease else 1,
            _identifier_keys(self.prerelease),
        )
        if not relaxed and self.build_rule is BuildMetadata.TIEBREAK:
            key += (_identifier_keys(self.build),)
        return key

    def compare(self, other: "Version", *, relaxed: bool = False) -> int:
        """Compare with another version of the same scheme.

        Args:
            other: Version to compare against.
            relaxed: Ignore build metadata entirely (satisfaction rule).

        Returns:
            ``-1``, ``0`` or ``1``.
        """
        if self.scheme is not other.scheme:
            raise TypeError(
                f"Cannot compare {self.scheme.value} and {other.scheme.value} versions"
            )
        mine, theirs = self._key(relaxed), other._key(relaxed)
        if mine == theirs:
            return 0
        return -1 if mine < theirs else 1

    def is_identical(self, other: "Version") -> bool:
        """Exact, build-sensitive equality of the written versions."""
        return self.scheme is other.scheme and self.text == other.text

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version) or other.scheme is not self.scheme:
            return NotImplemented
        return self.compare(other) == 0

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version) or other.scheme is not self.scheme:
            return NotImplemented
        return self.compare(other) < 0

    def __hash__(self) -> int:
        return hash((self.scheme, self._key(relaxed=False)))

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"Version({self.text!r})"
