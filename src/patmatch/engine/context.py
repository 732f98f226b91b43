"""
Per-call matching state.
"""

from typing import NamedTuple

from .diagnostics import Diagnostics


class Region(NamedTuple):
    """
    The slice of the source a node may match in. Positions stay absolute;
    a ``LineIR`` or ``SectionIR`` narrows ``end`` for its child.
    """
    start: int
    end: int


class MatchContext:
    """Source text and diagnostics of one top-level match call."""
    __slots__ = ('source', 'diagnostics')

    def __init__(self, source: str, diagnostics: Diagnostics = None):
        self.source = source
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    def whole(self) -> Region:
        return Region(0, len(self.source))
