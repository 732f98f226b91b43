"""
Tests for pattern construction: validation in constructors, structural
equality and immutability.
"""

import pytest

from patmatch.ir.nodes import (
    AlternationIR, ConvertIR, LiteralIR, NamedIR, RepeatIR, SequenceIR,
)
from patmatch.prelude import (
    alpha, alt, convert, digit, lines, named, opt, plus, repeat_sep, seq, star, u8, u64,
)
from patmatch.shared.errors import BindingError, PatternError, ShapeError
from patmatch.shared.scope import BindingInfo


def pair(x, y):
    return (x, y)


class TestValidation:
    def test_children_must_be_patterns(self):
        with pytest.raises(PatternError):
            SequenceIR([LiteralIR("a"), 5])

    def test_alternation_needs_children(self):
        with pytest.raises(PatternError):
            AlternationIR([])

    def test_convert_needs_callable(self):
        with pytest.raises(PatternError):
            ConvertIR(u8, "not callable")

    def test_capture_name_must_be_identifier(self):
        with pytest.raises(PatternError):
            NamedIR("two words", u8)

    def test_bool_is_not_a_count(self):
        with pytest.raises(PatternError):
            RepeatIR(u8, True)

    def test_shape_error_is_a_pattern_error(self):
        with pytest.raises(PatternError):
            alt(seq(u8, ",", u8), u8)


class TestBindings:
    def test_duplicate_name_in_sequence(self):
        with pytest.raises(BindingError, match="more than once"):
            seq(named("x", u8), named("x", u8))

    def test_unknown_binding(self):
        with pytest.raises(BindingError, match="unknown name"):
            convert(named("x", u8), pair, ["x", "y"])

    def test_binding_under_repetition_is_not_definite(self):
        with pytest.raises(BindingError, match="every match"):
            convert(star(named("x", u8)), lambda x: x, ["x"])

    def test_binding_in_some_alternatives_is_not_definite(self):
        with pytest.raises(BindingError, match="every match"):
            convert(alt(named("x", u8), seq("-", u8)), lambda x: x, ["x"])

    def test_binding_in_every_alternative_is_definite(self):
        pattern = convert(alt(named("x", u8), seq("-", named("x", u8))), lambda x: x, ["x"])
        assert pattern.parse("-5") == 5

    def test_same_name_in_separate_alternatives(self):
        info = alt(named("x", u8), seq("+", named("x", u8))).binding
        assert info.definite == {"x"}

    def test_names_are_hidden_by_conversion(self):
        inner = convert(seq(named("x", u8), ",", named("y", u8)), pair, ["x", "y"])
        assert inner.binding.possible == frozenset()
        assert inner.binding.nested == {"x", "y"}

    def test_shadowing_a_nested_name(self):
        inner = convert(named("x", u8), lambda x: x, ["x"])
        with pytest.raises(BindingError, match="shadows"):
            seq(named("x", u8), ",", inner)

    def test_binding_listed_twice(self):
        with pytest.raises(BindingError):
            convert(named("x", u8), pair, ["x", "x"])

    def test_empty_binding_info_is_shared(self):
        assert BindingInfo.empty() is LiteralIR("a").binding


class TestEquality:
    def test_same_structure_is_equal(self):
        def build():
            return lines(seq(named("n", u64), opt(seq(",", repeat_sep(digit, " ")))))

        first, second = build(), build()
        assert first == second
        assert hash(first) == hash(second)
        assert first.parse("1,2 3\n4\n") == second.parse("1,2 3\n4\n") == [(1, [2, 3]), (4, None)]

    def test_different_structure_is_not_equal(self):
        assert seq("a", "b") != seq("a", "c")
        assert star(alpha) != plus(alpha)

    def test_equal_patterns_dedupe_in_sets(self):
        assert len({seq("a", u8), seq("a", u8), seq("b", u8)}) == 2

    def test_nodes_are_immutable(self):
        node = LiteralIR("a")
        with pytest.raises(AttributeError):
            node.text = "b"

    def test_repr_is_the_dump(self):
        assert repr(seq("a", u8)) == '(seq (literal "a") (integer "u8"))'
