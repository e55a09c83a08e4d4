"""Check command implementation for reqbump.

Reports whether each given requirement already admits a target version,
and how big the jump from the requirement's version to the target is.
Nothing is rewritten; use ``reqbump update`` for that.

Typical usage::

    $ reqbump check "~> 0.2.3" "~> 1.5" --target 1.5.0 --ecosystem hex
    $ reqbump check ">= 1.3.0, <1.5" --target 1.5.0 --json
"""

from __future__ import annotations

import sys
from typing import Any, Dict, List, Optional, Tuple

import click
from rich.markup import escape

from reqbump.core import ConstraintParser, get_grammar
from reqbump.exceptions import ReqbumpError
from reqbump.models import Ecosystem, Version
from reqbump.context import pass_context, ReqbumpContext
from reqbump.utils import (
    get_logger,
    print_error,
    print_json,
    print_success,
    print_table,
    print_warning,
    colorize_update_type,
    get_update_type,
    reference_version,
)

logger = get_logger("commands.check")


@click.command()
@click.argument("requirements", nargs=-1, required=True)
@click.option(
    "--target",
    "-t",
    required=True,
    help="Version the requirements should admit.",
)
@click.option(
    "--ecosystem",
    "-e",
    type=click.Choice([e.value for e in Ecosystem], case_sensitive=False),
    default=None,
    help="Requirement grammar (defaults to the configured ecosystem).",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Print machine-readable JSON instead of a table.",
)
@pass_context
def check(
    ctx: ReqbumpContext,
    requirements: Tuple[str, ...],
    target: str,
    ecosystem: Optional[str],
    as_json: bool,
) -> None:
    """Check whether REQUIREMENTS admit the target version.

    Each argument is one requirement string, written exactly as it
    appears in the manifest.

    Exits:
        0 if every requirement admits the target, 1 if at least one does
        not or an error occurred.
    """
    try:
        rows = _check_requirements(
            requirements,
            target,
            Ecosystem.from_string(ecosystem) if ecosystem else ctx.config.ecosystem,
        )
    except ReqbumpError as exc:
        print_error(str(exc))
        sys.exit(1)

    if as_json:
        print_json(rows)
    else:
        _display(rows, target)

    sys.exit(0 if all(row["satisfied"] for row in rows) else 1)


def _check_requirements(
    requirements: Tuple[str, ...], target_text: str, ecosystem: Ecosystem
) -> List[Dict[str, Any]]:
    """Evaluate each requirement against the target.

    Raises:
        ReqbumpError: The target or a requirement cannot be parsed.
    """
    grammar = get_grammar(ecosystem)
    parser = ConstraintParser(grammar)
    target = Version.parse(
        target_text,
        scheme=grammar.version_scheme,
        build_rule=grammar.build_rule,
        tag_prefix=grammar.tag_prefix,
    )
    logger.debug("Checking %d requirement(s) against %s", len(requirements), target)

    rows = []
    for text in requirements:
        requirement = parser.parse(text)
        current = reference_version(requirement)
        rows.append(
            {
                "requirement": text,
                "satisfied": requirement is None or requirement.admits(target),
                "current": current.text if current is not None else None,
                "update_type": get_update_type(
                    current.text if current is not None else None,
                    target_text,
                    ecosystem=ecosystem,
                ),
            }
        )
    return rows


def _display(rows: List[Dict[str, Any]], target: str) -> None:
    table_rows = [
        {
            "Requirement": escape(row["requirement"]),
            "Admits target": "yes" if row["satisfied"] else "no",
            "Written for": escape(row["current"] or "-"),
            "Update type": colorize_update_type(row["update_type"]),
        }
        for row in rows
    ]
    print_table(
        table_rows,
        title=escape(f"Requirements vs {target}"),
        column_styles={"Requirement": {"style": "requirement", "no_wrap": True}},
        row_styler=lambda row: None if row["Admits target"] == "yes" else "bold",
    )

    blocked = sum(1 for row in rows if not row["satisfied"])
    if blocked:
        print_warning(f"{blocked} requirement(s) do not admit {target}")
    else:
        print_success(f"All requirements admit {target}")
