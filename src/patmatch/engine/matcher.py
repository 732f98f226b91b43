"""
Matching Engine

Backtracking search over the pattern IR. Each ``visit_*`` method is a
generator yielding the node's candidate ``MatchRecord``s at a position, in
preference order. Consumers pull one candidate at a time and come back for
the next only when everything after it failed, which is what gives greedy
repetition its regex-style backtracking.

Failures never raise: a node that cannot match simply yields nothing, and
every failed primitive registers what it expected in ``Diagnostics``.
Sequences and repetitions keep an explicit stack of child candidate
iterators, so their depth does not grow with the input.
"""

from typing import Iterator, Optional

from ..ir.nodes import (
    PatternIR, PatternVisitor, LiteralIR, CharClassIR, CharOfIR, IntegerIR, FloatIR, BoolIR,
    SequenceIR, AlternationIR, RepeatIR, RepeatSeparatedIR, NamedIR, ConvertIR,
    LineIR, SectionIR, StringIR, CollectIR, RuleRefIR, RuleSetIR,
)
from ..utils.config import (
    BLANK_LINE, NEWLINE, LABEL_LINE, LABEL_SECTION, LABEL_START_OF_LINE,
    LABEL_START_OF_SECTION, LABEL_END_OF_LINE, LABEL_END_OF_SECTION,
)
from .context import MatchContext, Region
from .primitives import (
    match_literal, match_char, match_char_of, match_integer, match_float, match_bool,
    quote, char_of_label,
)
from .records import MatchRecord


Candidates = Iterator[MatchRecord]

# Repetition machine modes
_ADVANCE, _EMIT, _BACKTRACK = range(3)


class MatchingEngine(PatternVisitor[Candidates]):
    """Yields candidate matches of a node at ``pos`` within ``region``."""

    def __init__(self, context: MatchContext):
        self.context = context
        self.source = context.source
        self.diagnostics = context.diagnostics

    def candidates(self, node: PatternIR, pos: int, region: Optional[Region] = None) -> Candidates:
        if region is None:
            region = self.context.whole()
        return node.accept(self, pos, region)

    # === Primitives ===

    def visit_literal(self, node: LiteralIR, pos: int, region: Region) -> Candidates:
        end = match_literal(node.text, self.source, pos, region.end)
        if end is None:
            self.diagnostics.expected(pos, quote(node.text))
            return
        yield MatchRecord(node, pos, end)

    def visit_char_class(self, node: CharClassIR, pos: int, region: Region) -> Candidates:
        end = match_char(node.predicate, self.source, pos, region.end)
        if end is None:
            self.diagnostics.expected(pos, node.name)
            return
        yield MatchRecord(node, pos, end)

    def visit_char_of(self, node: CharOfIR, pos: int, region: Region) -> Candidates:
        end = match_char_of(node.options, self.source, pos, region.end)
        if end is None:
            self.diagnostics.expected(pos, char_of_label(node.options))
            return
        yield MatchRecord(node, pos, end)

    def visit_integer(self, node: IntegerIR, pos: int, region: Region) -> Candidates:
        end = match_integer(node.signed, node.base, self.source, pos, region.end)
        if end is None:
            self.diagnostics.expected(pos, node.name)
            return
        yield MatchRecord(node, pos, end)

    def visit_float(self, node: FloatIR, pos: int, region: Region) -> Candidates:
        end = match_float(self.source, pos, region.end)
        if end is None:
            self.diagnostics.expected(pos, node.name)
            return
        yield MatchRecord(node, pos, end)

    def visit_bool(self, node: BoolIR, pos: int, region: Region) -> Candidates:
        end = match_bool(self.source, pos, region.end)
        if end is None:
            self.diagnostics.expected(pos, "bool")
            return
        yield MatchRecord(node, pos, end)

    # === Sequence & alternation ===

    def visit_sequence(self, node: SequenceIR, pos: int, region: Region) -> Candidates:
        children = node.children
        count = len(children)
        if count == 0:
            yield MatchRecord(node, pos, pos)
            return
        # iters[i] produces candidates for children[i]; records[i] is the one in use
        iters = [children[0].accept(self, pos, region)]
        records = []
        while iters:
            record = next(iters[-1], None)
            if record is None:
                iters.pop()
                if records:
                    records.pop()
                continue
            records.append(record)
            if len(records) == count:
                yield MatchRecord(node, pos, record.end, tuple(records))
                records.pop()
            else:
                iters.append(children[len(records)].accept(self, record.end, region))

    def visit_alternation(self, node: AlternationIR, pos: int, region: Region) -> Candidates:
        # Ordered choice: commit to the first alternative with any candidate.
        for child in node.children:
            candidates = child.accept(self, pos, region)
            first = next(candidates, None)
            if first is None:
                continue
            yield MatchRecord(node, pos, first.end, (first,))
            for record in candidates:
                yield MatchRecord(node, pos, record.end, (record,))
            return

    # === Repetition ===

    def visit_repeat(self, node: RepeatIR, pos: int, region: Region) -> Candidates:
        return self._repeat(node, None, pos, region)

    def visit_repeat_separated(self, node: RepeatSeparatedIR, pos: int, region: Region) -> Candidates:
        return self._repeat(node, node.separator, pos, region)

    def _repeat(self, node, separator: Optional[PatternIR], pos: int, region: Region) -> Candidates:
        """
        Greedy repetition with backtracking.

        Steps are items, or with a separator item, separator, item, ...
        ``_ADVANCE`` pushes steps while it can, ``_EMIT`` yields the current
        count if it is a valid stopping point, and ``_BACKTRACK`` moves the
        last step to its next candidate (or drops it, giving a shorter count).
        """
        child = node.child
        min_count = node.min_count
        if node.max_count is None:
            max_steps = None
        elif separator is None:
            max_steps = node.max_count
        else:
            max_steps = max(2 * node.max_count - 1, 0)

        iters = []
        records = []
        mode = _ADVANCE
        while True:
            if mode == _ADVANCE:
                step = len(records)
                if max_steps is None or step < max_steps:
                    is_item = separator is None or step % 2 == 0
                    start = records[-1].end if records else pos
                    candidates = (child if is_item else separator).accept(self, start, region)
                    record = self._next_step(candidates, records, step, separator, min_count, pos)
                    if record is not None:
                        iters.append(candidates)
                        records.append(record)
                        continue
                mode = _EMIT
            elif mode == _EMIT:
                steps = len(records)
                if separator is None:
                    items, complete = steps, True
                else:
                    items, complete = (steps + 1) // 2, steps % 2 == 1 or steps == 0
                if complete and items >= min_count:
                    end = records[-1].end if records else pos
                    yield MatchRecord(node, pos, end, tuple(records))
                mode = _BACKTRACK
            else:
                if not iters:
                    return
                step = len(records) - 1
                record = self._next_step(iters[-1], records[:-1], step, separator, min_count, pos)
                if record is not None:
                    records[-1] = record
                    mode = _ADVANCE
                else:
                    iters.pop()
                    records.pop()
                    mode = _EMIT

    @staticmethod
    def _next_step(candidates: Candidates, before, step: int, separator, min_count: int,
                   pos: int) -> Optional[MatchRecord]:
        """
        Next usable candidate for repetition step ``step``. Once the minimum
        count is reached, an item that consumes nothing since the previous
        item is skipped; otherwise the repetition could loop forever.
        """
        if separator is None:
            items_before = step
            base = before[step - 1].end if step else pos
        else:
            if step % 2 == 1:
                return next(candidates, None)
            items_before = step // 2
            base = before[step - 2].end if step >= 2 else pos
        allow_empty = items_before < min_count
        for record in candidates:
            if allow_empty or record.end > base:
                return record
        return None

    # === Transparent wrappers ===

    def _wrap(self, node: PatternIR, child: PatternIR, pos: int, region: Region) -> Candidates:
        for record in child.accept(self, pos, region):
            yield MatchRecord(node, pos, record.end, (record,))

    def visit_named(self, node: NamedIR, pos: int, region: Region) -> Candidates:
        return self._wrap(node, node.child, pos, region)

    def visit_convert(self, node: ConvertIR, pos: int, region: Region) -> Candidates:
        return self._wrap(node, node.child, pos, region)

    def visit_string(self, node: StringIR, pos: int, region: Region) -> Candidates:
        return self._wrap(node, node.child, pos, region)

    def visit_collect(self, node: CollectIR, pos: int, region: Region) -> Candidates:
        return self._wrap(node, node.child, pos, region)

    def visit_rule_ref(self, node: RuleRefIR, pos: int, region: Region) -> Candidates:
        return self._wrap(node, node.body, pos, region)

    def visit_rule_set(self, node: RuleSetIR, pos: int, region: Region) -> Candidates:
        return self._wrap(node, node.entry, pos, region)

    # === Lines and sections ===

    def visit_line(self, node: LineIR, pos: int, region: Region) -> Candidates:
        source = self.source
        if pos != region.start and source[pos - 1] != NEWLINE:
            self.diagnostics.expected(pos, LABEL_START_OF_LINE)
            return
        newline = source.find(NEWLINE, pos, region.end)
        if newline >= 0:
            inner, outer = newline, newline + 1
        elif pos < region.end:
            inner = outer = region.end
        else:
            self.diagnostics.expected(pos, LABEL_LINE)
            return
        record = self._fill(node.child, pos, inner, LABEL_END_OF_LINE)
        if record is not None:
            yield MatchRecord(node, pos, outer, (record,))

    def visit_section(self, node: SectionIR, pos: int, region: Region) -> Candidates:
        source = self.source
        at_start = (
            pos == region.start
            or (pos == region.start + 1 and source[region.start] == NEWLINE)
            or source.endswith(BLANK_LINE, region.start, pos)
        )
        if not at_start:
            self.diagnostics.expected(pos, LABEL_START_OF_SECTION)
            return
        if pos < region.end and source[pos] == NEWLINE:
            # a blank line right here: an empty section
            inner, outer = pos, pos + 1
        else:
            blank = source.find(BLANK_LINE, pos, region.end)
            if blank >= 0:
                inner, outer = blank + 1, blank + 2
            elif pos < region.end:
                inner = outer = region.end
            else:
                self.diagnostics.expected(pos, LABEL_SECTION)
                return
        record = self._fill(node.child, pos, inner, LABEL_END_OF_SECTION)
        if record is not None:
            yield MatchRecord(node, pos, outer, (record,))

    def _fill(self, child: PatternIR, start: int, end: int, label: str) -> Optional[MatchRecord]:
        """First candidate of ``child`` covering exactly ``[start, end)``."""
        for record in child.accept(self, start, Region(start, end)):
            if record.end == end:
                return record
            self.diagnostics.expected(record.end, label)
        return None
