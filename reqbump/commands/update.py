"""Update command implementation for reqbump.

Rewrites the given requirement strings so they admit a target version,
following an update strategy. Each argument is treated as one occurrence
of the same dependency; the command prints the result and never writes
files.

Typical usage::

    # Minimal rewrite with the ecosystem's default strategy
    $ reqbump update ">= 1.3.0, <1.5" --target 1.5.0

    # Widen instead of bump
    $ reqbump update "^1.3.0" --target 2.5.0 --strategy widen_ranges

    # Apply group strategies from the configuration file
    $ reqbump update "^1.3.0" --target 2.5.0 --group dev-dependencies --json
"""

from __future__ import annotations

import sys
from typing import Any, Dict, List, Optional, Tuple

import click
from rich.markup import escape

from reqbump.core import RequirementsUpdater
from reqbump.exceptions import ReqbumpError
from reqbump.context import pass_context, ReqbumpContext
from reqbump.models import (
    Ecosystem,
    RequirementOccurrence,
    Strategy,
    Unfixable,
    Updated,
    UpdateOutcome,
    UpdateRequest,
)
from reqbump.utils import (
    get_logger,
    print_error,
    print_json,
    print_success,
    print_table,
    print_warning,
    colorize_outcome,
)

logger = get_logger("commands.update")


@click.command()
@click.argument("requirements", nargs=-1, required=True)
@click.option(
    "--target",
    "-t",
    required=True,
    help="Version the requirements must admit.",
)
@click.option(
    "--ecosystem",
    "-e",
    type=click.Choice([e.value for e in Ecosystem], case_sensitive=False),
    default=None,
    help="Requirement grammar (defaults to the configured ecosystem).",
)
@click.option(
    "--strategy",
    "-s",
    type=click.Choice([s.value for s in Strategy], case_sensitive=False),
    default=None,
    help="Rewrite policy (defaults to the configured or ecosystem default).",
)
@click.option(
    "--group",
    "-g",
    "groups",
    multiple=True,
    help="Dependency group of the requirements (can be repeated).",
)
@click.option(
    "--no-lockfile",
    is_flag=True,
    help="Treat the project as having no lockfile (disables group strategies).",
)
@click.option(
    "--name",
    default="dependency",
    show_default=True,
    help="Dependency name used in messages.",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Print machine-readable JSON instead of a table.",
)
@pass_context
def update(
    ctx: ReqbumpContext,
    requirements: Tuple[str, ...],
    target: str,
    ecosystem: Optional[str],
    strategy: Optional[str],
    groups: Tuple[str, ...],
    no_lockfile: bool,
    name: str,
    as_json: bool,
) -> None:
    """Rewrite REQUIREMENTS so they admit the target version.

    Settings not given on the command line come from the configuration
    file (``reqbump.toml`` or ``[tool.reqbump]`` in ``pyproject.toml``).

    Exits:
        0 when every requirement could be handled (including unfixable
        ones, which are reported), 1 if an error occurred.
    """
    request = _build_request(
        ctx, requirements, target, ecosystem, strategy, groups, no_lockfile, name
    )

    try:
        updater = RequirementsUpdater(request)
        outcomes = updater.outcomes()
    except ReqbumpError as exc:
        print_error(str(exc))
        sys.exit(1)

    occurrences = [
        RequirementsUpdater.apply_outcome(occurrence, outcome)
        for occurrence, outcome in zip(request.occurrences, outcomes)
    ]

    if as_json:
        print_json(_to_json(request, outcomes, occurrences))
    else:
        _display(request, outcomes)

    sys.exit(0)


def _build_request(
    ctx: ReqbumpContext,
    requirements: Tuple[str, ...],
    target: str,
    ecosystem: Optional[str],
    strategy: Optional[str],
    groups: Tuple[str, ...],
    no_lockfile: bool,
    name: str,
) -> UpdateRequest:
    """Merge CLI options over the loaded configuration."""
    config = ctx.config
    occurrences = [
        RequirementOccurrence(file=f"<argument {index}>", requirement=text, groups=groups)
        for index, text in enumerate(requirements, start=1)
    ]
    request = UpdateRequest(
        dependency_name=name,
        occurrences=occurrences,
        target_version=target,
        ecosystem=Ecosystem.from_string(ecosystem) if ecosystem else config.ecosystem,
        strategy=Strategy.from_string(strategy) if strategy else config.strategy,
        has_lockfile=False if no_lockfile else config.has_lockfile,
        group_strategies=dict(config.group_strategies),
    )
    logger.debug(
        "Update request: ecosystem=%s strategy=%s has_lockfile=%s groups=%s",
        request.ecosystem.value,
        request.strategy.value if request.strategy else "<default>",
        request.has_lockfile,
        list(groups),
    )
    return request


def _outcome_label(outcome: UpdateOutcome) -> str:
    if isinstance(outcome, Updated):
        return "updated"
    if isinstance(outcome, Unfixable):
        return "unfixable"
    return "unchanged"


def _to_json(
    request: UpdateRequest,
    outcomes: List[UpdateOutcome],
    occurrences: List[RequirementOccurrence],
) -> Dict[str, Any]:
    results = []
    for original, outcome, occurrence in zip(request.occurrences, outcomes, occurrences):
        entry = occurrence.to_json()
        entry["previous_requirement"] = original.requirement
        entry["outcome"] = _outcome_label(outcome)
        if isinstance(outcome, Unfixable):
            entry["reason"] = outcome.reason
        results.append(entry)

    return {
        "dependency": request.dependency_name,
        "target_version": request.target_version,
        "ecosystem": request.ecosystem.value,
        "occurrences": results,
    }


def _display(request: UpdateRequest, outcomes: List[UpdateOutcome]) -> None:
    rows = []
    for occurrence, outcome in zip(request.occurrences, outcomes):
        label = _outcome_label(outcome)
        if isinstance(outcome, Updated):
            new_text = outcome.requirement if outcome.requirement is not None else "-"
        elif isinstance(outcome, Unfixable):
            new_text = outcome.reason
        else:
            new_text = occurrence.requirement if occurrence.requirement is not None else "-"
        rows.append(
            {
                "Requirement": escape(occurrence.requirement or "-"),
                "Outcome": colorize_outcome(label),
                "Result": escape(new_text),
            }
        )

    print_table(
        rows,
        title=escape(f"{request.dependency_name} -> {request.target_version}"),
        column_styles={"Requirement": {"style": "requirement", "no_wrap": True}},
    )

    unfixable = sum(1 for outcome in outcomes if isinstance(outcome, Unfixable))
    updated = sum(1 for outcome in outcomes if isinstance(outcome, Updated))
    if unfixable:
        print_warning(f"{unfixable} requirement(s) need manual attention")
    if updated:
        print_success(f"Rewrote {updated} requirement(s)")
    elif not unfixable:
        print_success("Nothing to update")
