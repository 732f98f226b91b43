"""
Conversion Engine

Second pass over a finished match: walks the pattern and its match record
together and builds the value. Runs only after the whole input matched, so
nothing here can cause more matching. Semantic failures (integer overflow,
a conversion function raising) become ``ConversionError``s.
"""

from typing import Any, List

import numpy as np

from ..ir.nodes import (
    PatternVisitor, LiteralIR, CharClassIR, CharOfIR, IntegerIR, FloatIR, BoolIR,
    SequenceIR, AlternationIR, RepeatIR, RepeatSeparatedIR, NamedIR, ConvertIR,
    LineIR, SectionIR, StringIR, CollectIR, RuleRefIR, RuleSetIR,
)
from ..shared.errors import CallbackError, ConversionError, IntegerOverflowError
from ..shared.types import ShapeKind, produces_value
from ..utils.config import BOOLEAN_TRUE_LITERAL, DEFAULT_SOURCE_NAME
from .environment import BindingEnvironment
from .primitives import integer_bounds, integer_value
from .records import MatchRecord


def _callable_name(fn: Any) -> str:
    return getattr(fn, "__name__", None) or type(fn).__name__


class ConversionEngine(PatternVisitor[Any]):
    """Builds values from match records. One instance per parse call."""

    def __init__(self, source: str, file: str = DEFAULT_SOURCE_NAME):
        self.source = source
        self.file = file
        self.env = BindingEnvironment()

    def convert(self, record: MatchRecord) -> Any:
        return record.node.accept(self, record)

    def _error(self, cls, message: str, record: MatchRecord, **kwargs) -> ConversionError:
        return cls(message, record.start, record.end, self.source, self.file, **kwargs)

    # === Primitives ===

    def visit_literal(self, node: LiteralIR, record: MatchRecord) -> Any:
        return ()

    def visit_char_class(self, node: CharClassIR, record: MatchRecord) -> Any:
        ch = record.text(self.source)
        if node.base is None:
            return ch
        return int(ch, node.base)

    def visit_char_of(self, node: CharOfIR, record: MatchRecord) -> int:
        return node.options.index(record.text(self.source))

    def visit_integer(self, node: IntegerIR, record: MatchRecord) -> int:
        value = integer_value(record.text(self.source), node.base)
        if node.width is not None:
            low, high = integer_bounds(node.signed, node.width)
            if value > high:
                raise self._error(IntegerOverflowError,
                                  f"number too large to fit in target type `{node.shape}`", record,
                                  label=f"does not fit in `{node.shape}`")
            if value < low:
                raise self._error(IntegerOverflowError,
                                  f"number too small to fit in target type `{node.shape}`", record,
                                  label=f"does not fit in `{node.shape}`")
        return value

    def visit_float(self, node: FloatIR, record: MatchRecord) -> Any:
        value = float(record.text(self.source))
        if node.width == 32:
            return np.float32(value)
        return value

    def visit_bool(self, node: BoolIR, record: MatchRecord) -> bool:
        return record.text(self.source) == BOOLEAN_TRUE_LITERAL

    # === Combinators ===

    def visit_sequence(self, node: SequenceIR, record: MatchRecord) -> Any:
        values = []
        for child, child_record in zip(node.children, record.children):
            value = self.convert(child_record)
            if produces_value(child.shape):
                values.append(value)
        if not values:
            return ()
        if len(values) == 1:
            return values[0]
        return tuple(values)

    def visit_alternation(self, node: AlternationIR, record: MatchRecord) -> Any:
        return self.convert(record.children[0])

    def visit_repeat(self, node: RepeatIR, record: MatchRecord) -> Any:
        values = [self.convert(child) for child in record.children]
        if node.is_optional:
            return values[0] if values else None
        return values

    def visit_repeat_separated(self, node: RepeatSeparatedIR, record: MatchRecord) -> List[Any]:
        # children interleave items and separators; separators carry no value
        return [self.convert(child) for child in record.children[::2]]

    def visit_named(self, node: NamedIR, record: MatchRecord) -> Any:
        value = self.convert(record.children[0])
        self.env.set_value(node.name, value)
        return value

    def visit_convert(self, node: ConvertIR, record: MatchRecord) -> Any:
        with self.env.scope():
            value = self.convert(record.children[0])
            if node.bindings is None:
                args = [value]
            else:
                args = [self.env.get_value(name) for name in node.bindings]
        try:
            return node.user_fn(*args)
        except Exception as e:
            name = _callable_name(node.user_fn)
            raise self._error(CallbackError, f"conversion `{name}` failed: {e}", record,
                              note=f"{type(e).__name__} raised while converting this text") from e

    # === Wrappers ===

    def visit_line(self, node: LineIR, record: MatchRecord) -> Any:
        return self.convert(record.children[0])

    def visit_section(self, node: SectionIR, record: MatchRecord) -> Any:
        return self.convert(record.children[0])

    def visit_string(self, node: StringIR, record: MatchRecord) -> str:
        # the child only decides what matches; its value is never built
        return record.text(self.source)

    def visit_collect(self, node: CollectIR, record: MatchRecord) -> Any:
        values = self.convert(record.children[0])
        if node.child.shape.kind == ShapeKind.OPTIONAL:
            values = [] if values is None else [values]
        try:
            return node.factory(values)
        except (TypeError, ValueError) as e:
            raise self._error(ConversionError, f"cannot build a {node.container}: {e}", record) from e

    def visit_rule_ref(self, node: RuleRefIR, record: MatchRecord) -> Any:
        with self.env.scope():
            return self.convert(record.children[0])

    def visit_rule_set(self, node: RuleSetIR, record: MatchRecord) -> Any:
        return self.convert(record.children[0])
