"""
reqbump: rewrite dependency requirements so a target version fits.

Given a dependency's requirement strings (``~> 0.2.3``, ``>= 1.3.0, <1.5``,
``[23.3-jre]``...), a resolved target version and an update strategy,
reqbump produces the minimally changed requirement text that admits the
target, leaves satisfied requirements alone, and reports the ones no safe
rewrite can fix. It covers bundler, Cargo, Composer, Elm, GitHub Actions,
Go modules, Hex, Maven, npm/Yarn, NuGet, Pub, Python and Swift.

reqbump never touches files or the network: callers feed it requirement
strings and write the results back themselves.
"""

from __future__ import annotations

from reqbump.__version__ import __version__
from reqbump.core import RequirementsUpdater
from reqbump.models import (
    UNFIXABLE,
    Ecosystem,
    RequirementOccurrence,
    Strategy,
    Unchanged,
    Unfixable,
    Updated,
    UpdateRequest,
)

__all__ = [
    "__version__",
    "RequirementsUpdater",
    "UpdateRequest",
    "RequirementOccurrence",
    "Ecosystem",
    "Strategy",
    "Unchanged",
    "Updated",
    "Unfixable",
    "UNFIXABLE",
]
