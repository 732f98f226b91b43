"""
Builder functions for pattern IR.

Thin wrappers over the node constructors. Plain strings passed where a
pattern is expected become literals.
"""

from collections import deque
from typing import Any, Callable, Optional, Sequence, Union

from ..shared.types import Shape, ANY, UNIT
from .nodes import (
    PatternIR, LiteralIR, CharOfIR, SequenceIR, AlternationIR, RepeatIR, RepeatSeparatedIR,
    NamedIR, ConvertIR, LineIR, SectionIR, StringIR, CollectIR,
)

PatternLike = Union[PatternIR, str]


def as_pattern(value: PatternLike) -> PatternIR:
    if isinstance(value, str):
        return LiteralIR(value)
    return value


def lit(text: str) -> LiteralIR:
    return LiteralIR(text)


def empty() -> SequenceIR:
    """Matches the empty string, produces ``()``."""
    return SequenceIR(())


def seq(*children: PatternLike) -> SequenceIR:
    return SequenceIR([as_pattern(c) for c in children])


def alt(*children: PatternLike) -> AlternationIR:
    return AlternationIR([as_pattern(c) for c in children])


def repeat(child: PatternLike, min_count: int = 0, max_count: Optional[int] = None) -> RepeatIR:
    return RepeatIR(as_pattern(child), min_count, max_count)


def star(child: PatternLike) -> RepeatIR:
    return RepeatIR(as_pattern(child), 0, None)


def plus(child: PatternLike) -> RepeatIR:
    return RepeatIR(as_pattern(child), 1, None)


def opt(child: PatternLike) -> RepeatIR:
    """Zero or one; produces the child's value or None."""
    return RepeatIR(as_pattern(child), 0, 1)


def repeat_n(child: PatternLike, count: int) -> RepeatIR:
    """Exactly ``count`` repetitions."""
    return RepeatIR(as_pattern(child), count, count)


def repeat_sep(child: PatternLike, separator: PatternLike, min_count: int = 0,
               max_count: Optional[int] = None) -> RepeatSeparatedIR:
    return RepeatSeparatedIR(as_pattern(child), as_pattern(separator), min_count, max_count)


def repeat_sep_n(child: PatternLike, separator: PatternLike, count: int) -> RepeatSeparatedIR:
    return RepeatSeparatedIR(as_pattern(child), as_pattern(separator), count, count)


def named(name: str, child: PatternLike) -> NamedIR:
    return NamedIR(name, as_pattern(child))


def convert(child: PatternLike, user_fn: Callable[..., Any],
            bindings: Optional[Sequence[str]] = None, returns: Shape = ANY) -> ConvertIR:
    """
    ``user_fn(*values of bindings)`` or, without bindings, ``user_fn(value)``.
    """
    return ConvertIR(as_pattern(child), user_fn, bindings, returns)


def _discard(value: Any) -> tuple:
    return ()


def skip(child: PatternLike) -> ConvertIR:
    """Matches as ``child`` but produces no value."""
    return ConvertIR(as_pattern(child), _discard, None, UNIT)


def line(child: PatternLike) -> LineIR:
    return LineIR(as_pattern(child))


def lines(child: PatternLike) -> RepeatIR:
    """Any number of lines, each matching ``child``; produces a list."""
    return RepeatIR(LineIR(as_pattern(child)), 0, None)


def section(child: PatternLike) -> SectionIR:
    return SectionIR(as_pattern(child))


def sections(child: PatternLike) -> RepeatIR:
    """Any number of blank-line separated sections; produces a list."""
    return RepeatIR(SectionIR(as_pattern(child)), 0, None)


def string(child: PatternLike) -> StringIR:
    return StringIR(as_pattern(child))


def char_of(options: str) -> CharOfIR:
    return CharOfIR(options)


def set_of(child: PatternLike) -> CollectIR:
    return CollectIR(as_pattern(child), set, "set")


def dict_of(child: PatternLike) -> CollectIR:
    """Repeated ``(key, value)`` pairs into a dict; later keys win."""
    return CollectIR(as_pattern(child), dict, "dict")


def deque_of(child: PatternLike) -> CollectIR:
    return CollectIR(as_pattern(child), deque, "deque")


def _sorted_set(values: Any) -> list:
    return sorted(set(values))


def _sorted_dict(items: Any) -> dict:
    return dict(sorted(dict(items).items()))


def sorted_set_of(child: PatternLike) -> CollectIR:
    """Distinct values in ascending order, as a list."""
    return CollectIR(as_pattern(child), _sorted_set, "sorted_set")


def sorted_dict_of(child: PatternLike) -> CollectIR:
    """Like ``dict_of``, with keys in ascending order."""
    return CollectIR(as_pattern(child), _sorted_dict, "sorted_dict")
