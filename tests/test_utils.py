"""
Test utilities for the patmatch test suite.

Helpers for the parse-then-compare pattern used throughout the tests.
"""

import sys
from pathlib import Path
from typing import Any, Optional, Sequence, Type

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
from patmatch.engine.driver import match_all, parse
from patmatch.ir.nodes import PatternIR
from patmatch.shared.errors import ParseError, PatmatchError


def assert_parse_eq(pattern: PatternIR, text: str, expected: Any) -> Any:
    """Parse ``text`` and compare the value, including its type."""
    value = parse(pattern, text)
    assert value == expected, f"parse of {text!r}: {value!r} != {expected!r}"
    assert type(value) is type(expected), (
        f"parse of {text!r}: {type(value).__name__} is not {type(expected).__name__}")
    return value


def assert_no_parse(pattern: PatternIR, text: str,
                    expected: Optional[Sequence[str]] = None) -> ParseError:
    """Assert the whole of ``text`` does not match; optionally check the labels."""
    with pytest.raises(ParseError) as exc_info:
        match_all(pattern, text)
    error = exc_info.value
    if expected is not None:
        for label in expected:
            assert label in error.expected, f"{label!r} not in {error.expected!r}"
    return error


def assert_parse_error(pattern: PatternIR, text: str, error_type: Type[PatmatchError],
                       message: Optional[str] = None) -> PatmatchError:
    """Parse ``text`` and expect exactly ``error_type``; optionally check the message."""
    with pytest.raises(error_type) as exc_info:
        parse(pattern, text)
    error = exc_info.value
    if message is not None:
        assert message in str(error), f"{message!r} not in {str(error)!r}"
    return error
