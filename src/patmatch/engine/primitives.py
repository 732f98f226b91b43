"""
Primitive matchers: literals, character classes and numeric lexing.

Each matcher looks at ``source[pos:end]`` and returns the end position of
the match, or None. Numeric tokens are lexed with maximal munch; whether
the digits fit the target width is decided later, on conversion.
"""

import re
from typing import Dict, Optional, Tuple

from ..utils.config import BOOLEAN_FALSE_LITERAL, BOOLEAN_TRUE_LITERAL

_DIGITS = {
    2: "[01]",
    10: "[0-9]",
    16: "[0-9A-Fa-f]",
}

_INTEGER_REGEXES: Dict[Tuple[bool, int], "re.Pattern"] = {
    (signed, base): re.compile(("[+-]?" if signed else "") + digits + "+")
    for signed in (False, True)
    for base, digits in _DIGITS.items()
}

_FLOAT_REGEX = re.compile(
    r"[+-]?(?:(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)

_BOOL_REGEX = re.compile(f"{BOOLEAN_TRUE_LITERAL}|{BOOLEAN_FALSE_LITERAL}")


# ---------------------------------------------------------------------------
# Character predicates
# ---------------------------------------------------------------------------

def is_alpha(c: str) -> bool:
    return c.isalpha()


def is_alnum(c: str) -> bool:
    return c.isalnum()


def is_upper(c: str) -> bool:
    return c.isupper()


def is_lower(c: str) -> bool:
    return c.islower()


def is_any(c: str) -> bool:
    return True


def is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def is_bin_digit(c: str) -> bool:
    return c in "01"


def is_hex_digit(c: str) -> bool:
    return c in "0123456789abcdefABCDEF"


# ---------------------------------------------------------------------------
# Matchers
# ---------------------------------------------------------------------------

def match_literal(text: str, source: str, pos: int, end: int) -> Optional[int]:
    stop = pos + len(text)
    if stop <= end and source.startswith(text, pos, stop):
        return stop
    return None


def match_char(predicate, source: str, pos: int, end: int) -> Optional[int]:
    if pos < end and predicate(source[pos]):
        return pos + 1
    return None


def match_char_of(options: str, source: str, pos: int, end: int) -> Optional[int]:
    if pos < end and source[pos] in options:
        return pos + 1
    return None


def _match_regex(regex, source: str, pos: int, end: int) -> Optional[int]:
    m = regex.match(source, pos, end)
    return m.end() if m else None


def match_integer(signed: bool, base: int, source: str, pos: int, end: int) -> Optional[int]:
    return _match_regex(_INTEGER_REGEXES[(signed, base)], source, pos, end)


def match_float(source: str, pos: int, end: int) -> Optional[int]:
    return _match_regex(_FLOAT_REGEX, source, pos, end)


def match_bool(source: str, pos: int, end: int) -> Optional[int]:
    return _match_regex(_BOOL_REGEX, source, pos, end)


# ---------------------------------------------------------------------------
# Integer conversion helpers
# ---------------------------------------------------------------------------

# Stays below the interpreter's limit on decimal string conversion
_DECIMAL_CHUNK = 4000


def integer_value(text: str, base: int) -> int:
    """Value of a lexed integer token (optional sign, then digits)."""
    if base != 10 or len(text) <= _DECIMAL_CHUNK:
        return int(text, base)
    sign = -1 if text[0] == "-" else 1
    digits = text.lstrip("+-")
    value = 0
    for i in range(0, len(digits), _DECIMAL_CHUNK):
        chunk = digits[i:i + _DECIMAL_CHUNK]
        value = value * 10 ** len(chunk) + int(chunk)
    return sign * value


def integer_bounds(signed: bool, width: int) -> Tuple[int, int]:
    """Inclusive (min, max) of a ``width``-bit integer."""
    if signed:
        return -(1 << (width - 1)), (1 << (width - 1)) - 1
    return 0, (1 << width) - 1


# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------

def quote(text: str) -> str:
    """Render text as a double-quoted label: ``"x="``"""
    escaped = (text.replace("\\", "\\\\").replace('"', '\\"')
               .replace("\n", "\\n").replace("\t", "\\t"))
    return f'"{escaped}"'


def char_of_label(options: str) -> str:
    return f"one of {quote(options)}"
