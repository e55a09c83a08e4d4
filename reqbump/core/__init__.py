"""
Core engine exports for reqbump.

The engine is a pipeline of small, stateless pieces driven by a grammar
table: parse a requirement, resolve the update, synthesize the new text.
Most callers only need :class:`RequirementsUpdater`:

    from reqbump.core import RequirementsUpdater
"""

from __future__ import annotations

from reqbump.core.grammar import GRAMMARS, GrammarTable, PinPrecision, get_grammar
from reqbump.core.parser import ConstraintParser
from reqbump.core.resolver import UpdateResolver
from reqbump.core.synthesizer import ConstraintSynthesizer
from reqbump.core.updater import RequirementsUpdater

__all__ = [
    "GRAMMARS",
    "GrammarTable",
    "PinPrecision",
    "get_grammar",
    "ConstraintParser",
    "UpdateResolver",
    "ConstraintSynthesizer",
    "RequirementsUpdater",
]
