"""
patmatch: text parsing by pattern matching.

Patterns are built with the combinators below or written in pattern
notation and compiled with ``parser``. ``parse`` matches a pattern against
the whole input and converts the match into a Python value.
"""

from typing import Any, Mapping, Optional

from .engine.driver import MatchResult, match, match_all, convert, parse
from .engine.records import MatchRecord
from .frontend import default_parser
from .ir.nodes import PatternIR
from .ir.rules import RuleSetBuilder
from .ir.serialization import dump
from .prelude import (  # noqa: F401
    u8, u16, u32, u64, u128, usize, i8, i16, i32, i64, i128, isize, big_int, big_uint,
    f32, f64, boolean, alpha, alnum, upper, lower, any_char, digit, digit_bin, digit_hex,
    alt, as_pattern, char_of, deque_of, dict_of, empty, line, lines, lit, named, opt,
    plus, repeat, repeat_n, repeat_sep, repeat_sep_n, section, sections, seq, set_of, skip,
    sorted_dict_of, sorted_set_of, star, string,
)
from .prelude import BUILTINS
from .shared.errors import (
    PatmatchError, PatternError, ShapeError, BindingError, PatternSyntaxError,
    ParseError, ConversionError, IntegerOverflowError, CallbackError,
)
from .utils.config import PATTERN_SOURCE_NAME

__version__ = "0.1.0"


def parser(source: str, env: Optional[Mapping[str, Any]] = None,
           source_file: str = PATTERN_SOURCE_NAME, **names: Any) -> PatternIR:
    """
    Compile pattern notation into a pattern.

    Names used by the notation are looked up in ``env`` and ``names``
    (keyword arguments win), then among the builtins.
    """
    scope = dict(env or {})
    scope.update(names)
    return default_parser().parse(source, scope, source_file)
