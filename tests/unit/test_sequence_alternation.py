"""
Tests for sequences and ordered choice.
"""

import pytest

from tests.test_utils import assert_parse_eq, assert_no_parse
from patmatch.engine.driver import match, match_all, parse
from patmatch.prelude import alpha, alt, convert, digit, empty, i32, opt, plus, seq, star, u8, u64
from patmatch.shared.errors import ParseError, ShapeError


def const(value):
    return lambda *_: value


class TestSequence:
    def test_unit_children_are_dropped(self):
        assert_parse_eq(seq("x=", u64, ";"), "x=12;", 12)

    def test_several_values_make_a_tuple(self):
        assert_parse_eq(seq(u8, ",", u8), "3,4", (3, 4))

    def test_no_values_is_unit(self):
        assert_parse_eq(seq("a", "b"), "ab", ())

    def test_empty_sequence(self):
        assert_parse_eq(empty(), "", ())

    def test_backtracks_into_earlier_children(self):
        # the star first takes both letters, then gives one back
        pattern = seq(star(alpha), "b")
        assert_parse_eq(pattern, "ab", ["a"])

    def test_failure_points_past_matched_prefix(self):
        error = assert_no_parse(seq("x=", u64, ";"), "x=12!", ['";"'])
        assert error.position == 4

    def test_optional_value(self):
        pattern = seq("x=", opt(i32), ";")
        assert_parse_eq(pattern, "x=123;", 123)
        assert parse(pattern, "x=;") is None


class TestAlternation:
    def test_first_match_wins(self):
        pattern = alt(convert("ab", const(2)), convert("a", const(1)))
        assert parse(pattern, "ab") == 2
        assert parse(pattern, "a") == 1

    def test_commits_to_first_alternative_that_matches(self):
        # "a" matches a prefix of "ab", so "ab" is never tried
        pattern = alt(convert("a", const(1)), convert("ab", const(2)))
        error = assert_no_parse(pattern, "ab", ["end of input"])
        assert error.position == 1

    def test_later_alternative_when_earlier_fails(self):
        pattern = alt(seq("#", u8), seq("$", u8))
        assert_parse_eq(pattern, "$5", 5)

    def test_all_alternatives_fail(self):
        error = assert_no_parse(alt("a", "b"), "c", ['"a"', '"b"'])
        assert error.expected == ['"a"', '"b"']

    def test_committed_alternative_keeps_its_own_backtracking(self):
        pattern = seq(alt(plus(digit), seq("x", plus(digit))), "9")
        assert_parse_eq(pattern, "129", [1, 2])

    def test_incompatible_shapes_rejected(self):
        with pytest.raises(ShapeError):
            alt(u8, alpha)

    def test_unit_alternatives(self):
        assert_parse_eq(seq(alt("+", "-"), u8), "-4", 4)

    def test_same_width_integers_are_compatible(self):
        assert_parse_eq(alt(seq("0x", u64), u64), "17", 17)


class TestMatch:
    def test_prefix_match(self):
        result = match(seq("a", "b"), "abc")
        assert result.success
        assert result.end == 2
        assert result.text() == "ab"

    def test_match_at_offset(self):
        result = match(u64, "xx42", start=2)
        assert result
        assert (result.record.start, result.record.end) == (2, 4)

    def test_failed_match_has_failure(self):
        result = match(u64, "x")
        assert not result
        assert result.failure.position == 0
        assert result.failure.expected == ("u64",)
        assert isinstance(result.error(), ParseError)

    def test_start_outside_input(self):
        with pytest.raises(ValueError):
            match(u64, "1", start=5)

    def test_match_all_requires_whole_input(self):
        with pytest.raises(ParseError) as exc_info:
            match_all(u64, "12 ")
        assert exc_info.value.expected == ["end of input"]
        assert exc_info.value.position == 2
