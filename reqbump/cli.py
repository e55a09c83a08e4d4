"""
Command-line interface for reqbump.

The ``reqbump`` group loads configuration, sets up logging and console
colors, and hands a :class:`~reqbump.context.ReqbumpContext` to the
``check`` and ``update`` subcommands. :func:`main` turns every way a run
can end into a process exit code.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from reqbump.config import load_config
from reqbump.__version__ import __version__
from reqbump.context import ReqbumpContext
from reqbump.exceptions import ConfigError, ReqbumpError
from reqbump.utils.logger import get_logger, setup_logging
from reqbump.utils.console import print_error, print_warning, reconfigure_console
from reqbump.constants import CONFIG_ENV_VAR
from reqbump.commands.check import check
from reqbump.commands.update import update

logger = get_logger("cli")

# -v count -> level; anything above the last entry stays at DEBUG
_VERBOSITY_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    envvar=CONFIG_ENV_VAR,
    help="Configuration file (default: reqbump.toml or [tool.reqbump] in pyproject.toml).",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Log more: -v for decisions, -vv for every occurrence.",
)
@click.option(
    "--color/--no-color",
    default=True,
    envvar="REQBUMP_COLOR",
    help="Enable or disable colored output.",
)
@click.version_option(__version__, prog_name="reqbump", message="%(prog)s %(version)s")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """reqbump: rewrite version requirements so a target version fits.

    \b
    Commands:
      reqbump check    Does each requirement already admit the target?
      reqbump update   Rewrite requirements so they admit the target

    \b
    Examples:
      reqbump check "~> 0.2.3" --target 1.5.0 --ecosystem hex
      reqbump update ">= 1.3.0, <1.5" --target 1.5.0
      reqbump -v update "^1.3.0" -t 2.5.0 -e npm_and_yarn -s widen_ranges
    """
    level = _VERBOSITY_LEVELS[min(verbose, len(_VERBOSITY_LEVELS) - 1)]
    setup_logging(level=level, verbose=verbose >= 2, color=color)

    try:
        loaded = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(EXIT_FAILURE) from exc

    state = ReqbumpContext()
    state.config = loaded
    state.config_path = config or loaded.source_path
    state.verbose = verbose
    state.color = color
    ctx.obj = state

    _apply_color(color)

    logger.debug(
        "reqbump %s (config=%s, verbosity=%d, color=%s)",
        __version__,
        state.config_path or "<defaults>",
        verbose,
        color,
    )
    logger.debug("Effective configuration: %s", loaded.to_log_dict())


def _apply_color(color: bool) -> None:
    """Propagate --color/--no-color to Rich through ``NO_COLOR``."""
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()


cli.add_command(check)
cli.add_command(update)


def main() -> int:
    """Run the CLI and return its exit code.

    Returns:
        ``0`` on success, ``1`` when a requirement check fails or an error
        occurs, ``2`` for usage errors and ``130`` when interrupted.
    """
    try:
        cli(standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except (click.exceptions.Abort, KeyboardInterrupt):
        print_warning("Operation cancelled by user")
        return EXIT_INTERRUPTED
    except SystemExit as exc:
        # Commands report their result through sys.exit()
        if exc.code is None:
            return EXIT_OK
        return exc.code if isinstance(exc.code, int) else EXIT_FAILURE
    except ReqbumpError as exc:
        print_error(str(exc))
        logger.debug("Error details: %s", exc.details or "<none>", exc_info=True)
        return EXIT_FAILURE
    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return EXIT_FAILURE
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
