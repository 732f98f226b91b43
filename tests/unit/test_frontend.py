"""
Tests for pattern notation: compiling notation into pattern IR.
"""

import pytest

import patmatch
from tests.test_utils import assert_parse_eq, assert_no_parse
from patmatch.prelude import i32, opt, repeat_sep, seq, u8
from patmatch.shared.errors import BindingError, PatternError, PatternSyntaxError

pytestmark = pytest.mark.frontend


class TestPrimitivesAndCombinators:
    def test_builds_same_ir_as_builders(self, compile_pattern):
        assert compile_pattern('"x=" i32? ";"') == seq("x=", opt(i32), ";")

    def test_optional_number(self, compile_pattern):
        pattern = compile_pattern('"x=" i32? ";"')
        assert_parse_eq(pattern, "x=123;", 123)
        assert pattern.parse("x=;") is None

    def test_single_quoted_literal_with_escapes(self, compile_pattern):
        assert_parse_eq(compile_pattern(r"'a\tb' u8"), "a\tb7", 7)

    def test_quantifiers(self, compile_pattern):
        assert_parse_eq(compile_pattern("digit+ alpha*"), "12ab", ([1, 2], ["a", "b"]))

    def test_stacked_quantifiers(self, compile_pattern):
        assert_parse_eq(compile_pattern('("a" u8)?*'), "a1a2", [1, 2])

    def test_empty_group(self, compile_pattern):
        assert_parse_eq(compile_pattern('"a" () "b"'), "ab", ())

    def test_comments_and_whitespace(self, compile_pattern):
        pattern = compile_pattern('''
            # a key and its value
            string(alpha+)   # key
            "=" u8           # value
        ''')
        assert_parse_eq(pattern, "k=1", ("k", 1))

    def test_builtin_calls(self, compile_pattern):
        assert_parse_eq(compile_pattern('repeat_sep(digit, " ")'), "1 2 3", [1, 2, 3])
        assert_parse_eq(compile_pattern("repeat_n(digit, 3)"), "123", [1, 2, 3])
        assert_parse_eq(compile_pattern('repeat_sep_n(u8, ",", 2)'), "4,5", [4, 5])
        assert_parse_eq(compile_pattern('set_of(repeat_sep(u8, ","))'), "1,1", {1})
        assert_parse_eq(compile_pattern('sorted_set_of(repeat_sep(u8, ","))'), "2,1,2", [1, 2])
        assert_parse_eq(compile_pattern('char_of("xyz")'), "z", 2)
        assert_parse_eq(compile_pattern('skip(u8) ":" u8'), "1:2", 2)

    def test_lines_and_sections(self, compile_pattern):
        assert_parse_eq(compile_pattern("section(lines(u64))"), "1\n2\n3\n\n", [1, 2, 3])
        assert_parse_eq(compile_pattern("sections(lines(u64))"), "1\n\n2\n", [[1], [2]])
        assert_parse_eq(compile_pattern("line(alpha+)"), "ab\n", ["a", "b"])

    def test_hex_integers(self, compile_pattern):
        assert_parse_eq(compile_pattern('"#" u32_hex'), "#ff00", 0xff00)


class TestAlternationNotation:
    def test_first_match_wins(self, compile_pattern):
        assert compile_pattern('{"ab" => 2, "a" => 1}').parse("ab") == 2

    def test_prefix_alternative_commits(self, compile_pattern):
        assert_no_parse(compile_pattern('{"a" => 1, "ab" => 2}'), "ab", ["end of input"])

    def test_trailing_comma(self, compile_pattern):
        assert compile_pattern('{"<" => -1, ">" => 1,}').parse(">") == 1

    def test_incompatible_alternatives(self, compile_pattern):
        with pytest.raises(PatternError):
            compile_pattern("{u8, alpha}")


class TestMappers:
    def test_labels_become_arguments(self, compile_pattern):
        pattern = compile_pattern('"(" x:i64 "," y:i64 ")" => (y, x)')
        assert_parse_eq(pattern, "(1,-2)", (-2, 1))

    def test_mapper_constants(self, compile_pattern):
        pattern = compile_pattern('{"on" => True, "off" => False, "?" => None}')
        assert pattern.parse("off") is False
        assert pattern.parse("?") is None

    def test_list_and_numbers(self, compile_pattern):
        pattern = compile_pattern('n:u8 "!" => [n, 2.5, "s"]')
        assert_parse_eq(pattern, "3!", [3, 2.5, "s"])

    def test_safe_builtins(self, compile_pattern):
        pattern = compile_pattern('xs:repeat_sep(u8, ",") => sum(xs)')
        assert_parse_eq(pattern, "1,2,3", 6)

    def test_environment_functions_and_values(self, compile_pattern):
        pattern = compile_pattern('n:u64 => scale(n, FACTOR)', scale=lambda a, b: a * b, FACTOR=10)
        assert_parse_eq(pattern, "4", 40)

    def test_label_wins_over_environment(self, compile_pattern):
        pattern = compile_pattern('n:u8 => n', n=99)
        assert_parse_eq(pattern, "7", 7)

    def test_unknown_mapper_name(self, compile_pattern):
        with pytest.raises(PatternSyntaxError, match="unknown name `m`"):
            compile_pattern("n:u8 => m")

    def test_label_under_repetition_rejected(self, compile_pattern):
        with pytest.raises(BindingError) as exc_info:
            compile_pattern("(n:u8)* => n")
        assert exc_info.value.location is not None

    def test_equal_mappers_build_equal_patterns(self, compile_pattern):
        source = '"(" x:i64 "," y:i64 ")" => (x, y)'
        assert compile_pattern(source) == compile_pattern(source)


class TestEnvironment:
    def test_string_constants_are_literals(self):
        pattern = patmatch.parser("u8 SEP u8", SEP=" -> ")
        assert_parse_eq(pattern, "1 -> 2", (1, 2))

    def test_environment_patterns(self):
        pair = seq(u8, ",", u8)
        assert_parse_eq(patmatch.parser("lines(pair)", {"pair": pair}), "1,2\n", [(1, 2)])

    def test_user_combinators(self):
        def csv(item):
            return repeat_sep(item, ",")

        assert_parse_eq(patmatch.parser("csv(u8)", csv=csv), "1,2", [1, 2])

    def test_keyword_names_override_env(self):
        pattern = patmatch.parser("X", {"X": "a"}, X="b")
        assert_parse_eq(pattern, "b", ())

    def test_environment_value_not_a_pattern(self):
        with pytest.raises(PatternSyntaxError, match="not a pattern"):
            patmatch.parser("thing", thing=3)


class TestSyntaxErrors:
    def test_unknown_pattern_name(self, compile_pattern):
        with pytest.raises(PatternSyntaxError) as exc_info:
            compile_pattern("u8 ubyte")
        error = exc_info.value
        assert "unknown pattern `ubyte`" in str(error)
        assert (error.location.line, error.location.column) == (1, 4)

    def test_unexpected_character(self, compile_pattern):
        with pytest.raises(PatternSyntaxError) as exc_info:
            compile_pattern("u8 ~")
        assert exc_info.value.location.column == 4
        assert "error[E0103]" in exc_info.value.render(color=False)

    def test_unexpected_end(self, compile_pattern):
        with pytest.raises(PatternSyntaxError):
            compile_pattern('("a"')

    def test_non_greedy_rejected(self, compile_pattern):
        with pytest.raises(PatternSyntaxError, match="non-greedy"):
            compile_pattern("u8*? alpha")

    def test_wrong_argument_count(self, compile_pattern):
        with pytest.raises(PatternSyntaxError, match="takes 2 argument"):
            compile_pattern("repeat_sep(u8)")

    def test_count_must_be_a_number(self, compile_pattern):
        with pytest.raises(PatternSyntaxError):
            compile_pattern("repeat_n(u8, u8)")

    def test_char_of_needs_a_string(self, compile_pattern):
        with pytest.raises(PatternSyntaxError):
            compile_pattern("char_of(u8)")

    def test_unknown_function(self, compile_pattern):
        with pytest.raises(PatternSyntaxError, match="unknown function"):
            compile_pattern("frobnicate(u8)")

    def test_pattern_source_name(self, pattern_parser):
        with pytest.raises(PatternSyntaxError) as exc_info:
            pattern_parser.parse("nope", source_file="day1.pat")
        assert exc_info.value.location.file == "day1.pat"
