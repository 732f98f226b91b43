"""
Match records.

A successful match produces a tree of records mirroring the pattern: each
record holds the node it matched, its span and its children's records.
Records only hold offsets into the source; the text is never copied.
"""

from typing import Iterator, List, Tuple

from ..ir.nodes import PatternIR


class MatchRecord:
    """
    Span ``[start, end)`` matched by ``node``.

    ``children`` by node kind:

    - sequence: one record per child
    - alternation: the record of the alternative that matched
    - repeat: one record per repetition
    - separated repeat: item, separator, item, ... interleaved
    - named, convert, line, section, string, collect, rule ref, rule set:
      the single wrapped child (line and section spans include their
      terminator, the child's does not)
    - primitives: none
    """
    __slots__ = ('node', 'start', 'end', 'children')

    def __init__(self, node: PatternIR, start: int, end: int,
                 children: Tuple['MatchRecord', ...] = ()):
        self.node = node
        self.start = start
        self.end = end
        self.children = children

    def text(self, source: str) -> str:
        return source[self.start:self.end]

    def spans(self) -> List[Tuple[int, int]]:
        return [(c.start, c.end) for c in self.children]

    def leaves(self) -> Iterator['MatchRecord']:
        """Leaf records in input order."""
        stack = [self]
        while stack:
            record = stack.pop()
            if record.children:
                stack.extend(reversed(record.children))
            else:
                yield record

    def __repr__(self):
        return f"MatchRecord({type(self.node).__name__}, {self.start}, {self.end})"
