"""
Parse Driver

Top-level entry points: ``match`` (prefix match, no conversion), ``convert``
(values from a finished match) and ``parse`` (whole-input match, then
convert). A failed parse raises exactly one error: ``ParseError`` when no
match covers the input, ``ConversionError`` when one does but its text
cannot be converted.
"""

import logging
from typing import Any, Optional

from ..ir.nodes import PatternIR
from ..shared.errors import ParseError, PatternError
from ..utils.config import DEFAULT_SOURCE_NAME, LABEL_END_OF_INPUT
from .context import MatchContext
from .converter import ConversionEngine
from .diagnostics import Diagnostics, Failure
from .matcher import MatchingEngine
from .records import MatchRecord

logger = logging.getLogger("patmatch.engine.driver")


class MatchResult:
    """Match result: a record on success, the furthest failure otherwise"""
    def __init__(
        self,
        record: Optional[MatchRecord] = None,
        failure: Optional[Failure] = None,
        source: str = "",
    ):
        self.record = record
        self.failure = failure
        self.source = source

    @property
    def success(self) -> bool:
        return self.record is not None

    @property
    def end(self) -> int:
        if self.record is None:
            raise ValueError("failed match has no end")
        return self.record.end

    def text(self) -> str:
        if self.record is None:
            raise ValueError("failed match has no text")
        return self.record.text(self.source)

    def error(self, file: str = DEFAULT_SOURCE_NAME) -> ParseError:
        if self.failure is None:
            raise ValueError("successful match has no error")
        return ParseError(self.failure.position, self.failure.expected, self.source, file)

    def __bool__(self) -> bool:
        return self.success


def _check_pattern(pattern: Any) -> PatternIR:
    if not isinstance(pattern, PatternIR):
        raise PatternError(f"expected a pattern, got {type(pattern).__name__}")
    return pattern


def match(pattern: PatternIR, text: str, start: int = 0) -> MatchResult:
    """
    Match ``pattern`` at exactly ``start``, consuming some prefix of
    ``text[start:]``. Returns the preferred candidate, whatever its length.
    """
    _check_pattern(pattern)
    if not 0 <= start <= len(text):
        raise ValueError(f"start position {start} is outside the input")
    context = MatchContext(text)
    engine = MatchingEngine(context)
    record = next(engine.candidates(pattern, start), None)
    if record is None:
        return MatchResult(failure=context.diagnostics.failure(), source=text)
    return MatchResult(record=record, source=text)


def match_all(pattern: PatternIR, text: str, file: str = DEFAULT_SOURCE_NAME) -> MatchRecord:
    """Match ``pattern`` against the whole of ``text``; raise ``ParseError`` if impossible."""
    _check_pattern(pattern)
    context = MatchContext(text, Diagnostics())
    engine = MatchingEngine(context)
    end = len(text)
    rejected = 0
    for record in engine.candidates(pattern, 0):
        if record.end == end:
            logger.debug(f"matched {end} chars after rejecting {rejected} partial match(es)")
            return record
        # a partial match competes for furthest failure like any other
        context.diagnostics.expected(record.end, LABEL_END_OF_INPUT)
        rejected += 1
    failure = context.diagnostics.failure()
    logger.debug(f"no match; furthest failure at {failure.position}: {list(failure.expected)}")
    raise ParseError(failure.position, failure.expected, text, file)


def convert(pattern: PatternIR, record: MatchRecord, text: str,
            file: str = DEFAULT_SOURCE_NAME) -> Any:
    """Convert a finished match of ``pattern`` over ``text`` into its value."""
    _check_pattern(pattern)
    if record.node is not pattern:
        raise PatternError("match record does not belong to this pattern")
    return ConversionEngine(text, file).convert(record)


def parse(pattern: PatternIR, text: str, file: str = DEFAULT_SOURCE_NAME) -> Any:
    """Match ``pattern`` against all of ``text`` and convert the match."""
    logger.debug(f"parsing {len(text)} chars from {file}")
    record = match_all(pattern, text, file)
    return convert(pattern, record, text, file)
