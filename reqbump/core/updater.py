"""Apply an update request to every occurrence of one dependency.

:class:`RequirementsUpdater` runs parse, resolve and synthesize for each
:class:`~reqbump.models.occurrence.RequirementOccurrence` independently and
keeps their order. It also performs source substitution: registry details
are attached to occurrences whose requirement was rewritten, and git-style
sources are replaced by the request's updated source.

Typical usage::

    from reqbump.core import RequirementsUpdater
    from reqbump.models import RequirementOccurrence, UpdateRequest

    request = UpdateRequest(
        dependency_name="requests",
        occurrences=[RequirementOccurrence(file="requirements.txt", requirement="==2.0.0")],
        target_version="2.31.0",
    )
    RequirementsUpdater(request).updated_requirements()
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from reqbump.core.grammar import get_grammar
from reqbump.core.parser import ConstraintParser
from reqbump.core.resolver import UpdateResolver
from reqbump.models.version import Version
from reqbump.models.occurrence import (
    UNFIXABLE,
    RequirementOccurrence,
    Sentinel,
    Strategy,
    Unchanged,
    Unfixable,
    Updated,
    UpdateOutcome,
    UpdateRequest,
)
from reqbump.exceptions import InvalidVersionError, RequirementParseError
from reqbump.utils.logger import get_logger, occurrence_logger


class RequirementsUpdater:
    """Update all requirement occurrences of one dependency.

    Args:
        request: The dependency, its occurrences and the update policy.

    Raises:
        InvalidVersionError: ``request.target_version`` cannot be parsed.
        ValueError: The request names an unknown ecosystem or strategy.
    """

    def __init__(self, request: UpdateRequest) -> None:
        self.request = request
        self.grammar = get_grammar(request.ecosystem)
        self.parser = ConstraintParser(self.grammar)
        self.resolver = UpdateResolver(self.grammar)
        self.logger = get_logger("core.updater")

        self.strategy = (
            Strategy.from_string(request.strategy)
            if request.strategy is not None
            else self.grammar.default_strategy
        )
        self.group_strategies = {
            group: Strategy.from_string(strategy)
            for group, strategy in request.group_strategies.items()
        }
        self.target: Optional[Version] = None
        if request.target_version is not None:
            self.target = self._parse_target(request.target_version)

    def _parse_target(self, text: str) -> Version:
        try:
            return Version.parse(
                text,
                scheme=self.grammar.version_scheme,
                build_rule=self.grammar.build_rule,
                tag_prefix=self.grammar.tag_prefix,
            )
        except InvalidVersionError as exc:
            raise InvalidVersionError(
                f"Invalid target version for {self.request.dependency_name}",
                version=text,
                ecosystem=self.grammar.ecosystem.value,
            ) from exc

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def outcomes(self) -> List[UpdateOutcome]:
        """Return one outcome per occurrence, in input order.

        Raises:
            RequirementParseError: An occurrence's requirement cannot be
                parsed; ``details["file"]`` names the occurrence's file.
        """
        return [self._outcome(occurrence) for occurrence in self.request.occurrences]

    def updated_requirements(self) -> List[RequirementOccurrence]:
        """Return the occurrences with their outcomes applied, in input order.

        Unfixable occurrences get :data:`~reqbump.models.occurrence.UNFIXABLE`
        as their requirement.
        """
        return [
            self.apply_outcome(occurrence, outcome)
            for occurrence, outcome in zip(self.request.occurrences, self.outcomes())
        ]

    def strategy_for(self, occurrence: RequirementOccurrence) -> Strategy:
        """Strategy applying to ``occurrence`` after group overrides.

        Overrides only apply to projects with a lockfile, and never replace
        a lockfile-only request.
        """
        if self.strategy is Strategy.LOCKFILE_ONLY or not self.request.has_lockfile:
            return self.strategy
        for group in occurrence.groups:
            if group in self.group_strategies:
                return self.group_strategies[group]
        return self.strategy

    # ------------------------------------------------------------------
    # Per-occurrence pipeline
    # ------------------------------------------------------------------

    def _outcome(self, occurrence: RequirementOccurrence) -> UpdateOutcome:
        if self.target is None:
            return Unchanged("no target version")

        strategy = self.strategy_for(occurrence)
        if strategy is Strategy.LOCKFILE_ONLY:
            return Unchanged("lockfile only")
        if isinstance(occurrence.requirement, Sentinel):
            return Unchanged("requirement already marked")

        try:
            requirement = self.parser.parse(occurrence.requirement)
        except RequirementParseError as exc:
            exc.details["file"] = occurrence.file
            raise

        outcome = self.resolver.resolve(requirement, self.target, strategy)
        log = occurrence_logger(self.logger, occurrence.file)
        log.debug("%s (%s): %s", self.request.dependency_name, strategy.value, outcome)

        if isinstance(outcome, Unfixable):
            log.info(
                "Cannot update %s to %s: %s",
                self.request.dependency_name,
                self.target,
                outcome.reason,
            )
            return outcome

        rewritten = isinstance(outcome, Updated)
        source = self._source_for(occurrence, rewritten)
        if rewritten:
            return Updated(outcome.requirement, source)
        if source != occurrence.source:
            return Updated(occurrence.requirement, source)
        return outcome

    def _source_for(
        self, occurrence: RequirementOccurrence, rewritten: bool
    ) -> Optional[Mapping[str, Any]]:
        request = self.request
        current = occurrence.source

        updated_source = request.updated_source
        if (
            updated_source is not None
            and current is not None
            and current.get("type") == updated_source.get("type")
        ):
            return dict(updated_source)

        registry_type = self.grammar.registry_source_type
        if rewritten and registry_type and request.registry_source is not None:
            source: Dict[str, Any] = {"type": registry_type}
            source.update(request.registry_source)
            return source

        return current

    @staticmethod
    def apply_outcome(
        occurrence: RequirementOccurrence, outcome: UpdateOutcome
    ) -> RequirementOccurrence:
        """Return ``occurrence`` with ``outcome`` applied to it."""
        if isinstance(outcome, Unfixable):
            return occurrence.replace(requirement=UNFIXABLE)
        if isinstance(outcome, Updated):
            return occurrence.replace(requirement=outcome.requirement, source=outcome.source)
        return occurrence
