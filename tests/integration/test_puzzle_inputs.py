"""
End-to-end parsing of realistic multi-line inputs, built both with the
combinator API and with pattern notation.
"""

import pytest

import patmatch
from patmatch import (
    ConversionError, ParseError, alpha, char_of, digit, i64, line, lines, plus, repeat_sep,
    section, sections, seq, string, u8, u64,
)
from patmatch.prelude import convert

pytestmark = pytest.mark.integration


CALORIES = """\
1000
2000
3000

4000

5000
6000
"""

CRATES = """\
move 1 from 2 to 1
move 3 from 1 to 3
"""

GRID = """\
#..#
.##.
"""


class TestCombinatorApi:
    def test_grouped_numbers(self):
        pattern = sections(lines(u64))
        groups = patmatch.parse(pattern, CALORIES)
        assert groups == [[1000, 2000, 3000], [4000], [5000, 6000]]
        assert max(sum(g) for g in groups) == 11000

    def test_instruction_lines(self):
        move = seq("move ", u64, " from ", u64, " to ", u64)
        assert patmatch.parse(lines(move), CRATES) == [(1, 2, 1), (3, 1, 3)]

    def test_grid(self):
        grid = lines(plus(char_of(".#")))
        assert patmatch.parse(grid, GRID) == [[1, 0, 0, 1], [0, 1, 1, 0]]

    def test_header_section_then_records(self):
        pattern = seq(
            section(line(seq("seeds: ", repeat_sep(u64, " ")))),
            lines(convert(seq(string(plus(alpha)), " ", i64), tuple)),
        )
        text = "seeds: 79 14 55\n\nfoo -3\nbar 12\n"
        assert patmatch.parse(pattern, text) == ([79, 14, 55], [("foo", -3), ("bar", 12)])

    def test_error_points_at_bad_line(self):
        text = CALORIES.replace("4000", "4O00")
        with pytest.raises(ParseError) as exc_info:
            patmatch.parse(sections(lines(u64)), text)
        assert exc_info.value.line == 5
        assert exc_info.value.column == 2

    def test_overflow_in_a_later_line(self):
        with pytest.raises(ConversionError) as exc_info:
            patmatch.parse(lines(u8), "1\n2\n256\n")
        assert exc_info.value.location.line == 3


class TestNotation:
    def test_grouped_numbers(self):
        assert patmatch.parser("sections(lines(u64))").parse(CALORIES)[2] == [5000, 6000]

    def test_instruction_records(self):
        pattern = patmatch.parser(
            '"move " n:u64 " from " src:u64 " to " dst:u64 => Move(n, src, dst)',
            Move=lambda n, src, dst: {"n": n, "from": src, "to": dst},
        )
        assert patmatch.parse(patmatch.lines(pattern), CRATES)[1] == {"n": 3, "from": 1, "to": 3}

    def test_directions(self):
        pattern = patmatch.parser('''
            rule dir = {"U" => (0, -1), "D" => (0, 1), "L" => (-1, 0), "R" => (1, 0)};
            lines(d:dir " " n:u8 => (d, n))
        ''')
        assert pattern.parse("R 4\nU 2\n") == [((1, 0), 4), ((0, -1), 2)]

    def test_digits_grid(self):
        pattern = patmatch.parser("lines(digit+)")
        assert pattern.parse("123\n456\n") == [[1, 2, 3], [4, 5, 6]]

    def test_same_result_as_combinators(self):
        built = sections(lines(u64))
        compiled = patmatch.parser("sections(lines(u64))")
        assert built == compiled
        assert patmatch.parse(built, CALORIES) == patmatch.parse(compiled, CALORIES)


class TestMatchRecords:
    def test_spans_cover_input(self):
        text = "ab,cd,ef"
        record = patmatch.match_all(repeat_sep(plus(alpha), ","), text)
        spans = record.spans()
        assert spans[0][0] == 0
        assert spans[-1][1] == len(text)
        assert all(a[1] == b[0] for a, b in zip(spans, spans[1:]))

    def test_literal_leaves_reproduce_input(self):
        pattern = seq("key", plus(seq("=", "v")), ";")
        text = "key=v=v;"
        record = patmatch.match_all(pattern, text)
        assert "".join(leaf.text(text) for leaf in record.leaves()) == text

    def test_digit_leaves(self):
        text = "12 34"
        record = patmatch.match_all(repeat_sep(plus(digit), " "), text)
        assert [leaf.text(text) for leaf in record.leaves()] == ["1", "2", " ", "3", "4"]
