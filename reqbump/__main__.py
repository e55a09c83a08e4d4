"""
Executable module for reqbump.

Running:
    python -m reqbump

is equivalent to:
    reqbump

This module simply forwards execution to the CLI entrypoint defined in
`reqbump.cli`.
"""

from __future__ import annotations

import sys


def main() -> int:
    """
    Main entrypoint when executing `python -m reqbump`.

    Returns:
        Exit code returned by the CLI, or 1 if the CLI cannot be imported.
    """
    try:
        # Import lazily so dependencies are only loaded during CLI use
        from reqbump.cli import main as cli_main
    except ImportError as exc:
        _print_startup_error(exc)
        return 1

    return cli_main()


def _print_startup_error(exc: ImportError) -> None:
    """Report a CLI import failure on stderr."""
    try:
        from reqbump.__version__ import __version__

        version = __version__
    except ImportError:
        version = "<unknown>"

    sys.stderr.write("reqbump could not start: a dependency is missing or broken.\n")
    sys.stderr.write(f"Python version : {sys.version}\n")
    sys.stderr.write(f"reqbump version: {version}\n")
    sys.stderr.write("\n")
    sys.stderr.write(f"ImportError: {exc}\n")


if __name__ == "__main__":
    sys.exit(main())
