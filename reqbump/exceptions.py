"""
Custom exception hierarchy for reqbump.

This module defines structured exception types used across reqbump.
All exceptions inherit from :class:`ReqbumpError` and support optional
structured metadata via the ``details`` attribute to improve diagnostics
and logging.

Note that an *unfixable* requirement is not an error: it is reported as an
:class:`~reqbump.models.occurrence.Unfixable` outcome.
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional


class ReqbumpError(Exception):
    """Base exception for all reqbump errors.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    """Truncate long text for safe logging or error reporting."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class InvalidVersionError(ReqbumpError):
    """Raised when a version string cannot be parsed.

    Args:
        message: Error description.
        version: The offending version text.
        ecosystem: Ecosystem whose version rules were applied.
    """

    __slots__ = ("version", "ecosystem")

    def __init__(
        self,
        message: str,
        *,
        version: Optional[str] = None,
        ecosystem: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        if version is not None:
            details["version"] = _truncate(version)
        _add_if(details, "ecosystem", ecosystem)

        super().__init__(message, details)

        self.version = version
        self.ecosystem = ecosystem


class RequirementParseError(ReqbumpError):
    """Raised when a requirement string cannot be turned into a constraint AST.

    Callers that only care whether parsing failed should catch this class;
    the subclasses tell an unsupported grammar apart from malformed text.

    Args:
        message: Error description.
        requirement: The requirement text being parsed.
        ecosystem: Ecosystem whose grammar was applied.
    """

    __slots__ = ("requirement", "ecosystem")

    def __init__(
        self,
        message: str,
        *,
        requirement: Optional[str] = None,
        ecosystem: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        if requirement is not None:
            details["requirement"] = _truncate(requirement)
        _add_if(details, "ecosystem", ecosystem)

        super().__init__(message, details)

        self.requirement = requirement
        self.ecosystem = ecosystem


class UnsupportedGrammarError(RequirementParseError):
    """Raised for requirement syntax the ecosystem's grammar does not cover."""


class MalformedRequirementError(RequirementParseError):
    """Raised for requirement text that is structurally broken."""


class ConfigError(ReqbumpError):
    """Raised when configuration cannot be loaded or is invalid.

    Args:
        message: Error description.
        config_path: Path of the configuration file involved.
        option: Name of the offending option, if any.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option
