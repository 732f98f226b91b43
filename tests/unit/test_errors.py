"""
Tests for the error hierarchy and rustc-style rendering.
"""

import re

import pytest

from patmatch.prelude import seq, u8
from patmatch.shared.errors import (
    BindingError, CallbackError, ConversionError, Error, ErrorReporter, IntegerOverflowError,
    ParseError, PatmatchError, PatmatchImplementationError, PatternError, PatternSyntaxError,
    ShapeError, describe_expected,
)
from patmatch.shared.source_location import SourceLocation, line_column

_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")


def _strip_ansi(text: str) -> str:
    return _ANSI_ESCAPE.sub("", text)


class TestHierarchy:
    def test_codes(self):
        assert PatternError.code == "E0100"
        assert ShapeError.code == "E0101"
        assert BindingError.code == "E0102"
        assert PatternSyntaxError.code == "E0103"
        assert ParseError.code == "E0200"
        assert ConversionError.code == "E0300"
        assert IntegerOverflowError.code == "E0301"
        assert CallbackError.code == "E0302"

    def test_kinds_are_disjoint(self):
        assert issubclass(ShapeError, PatternError)
        assert not issubclass(ParseError, PatternError)
        assert not issubclass(ConversionError, ParseError)
        assert issubclass(IntegerOverflowError, ConversionError)
        assert all(issubclass(cls, PatmatchError)
                   for cls in (PatternError, ParseError, ConversionError))

    def test_implementation_error_is_separate(self):
        assert not issubclass(PatmatchImplementationError, PatmatchError)
        assert str(PatmatchImplementationError("bad")) == "[E9999] bad"


class TestParseError:
    def test_fields(self):
        error = ParseError(4, ["u8", '","'], "ab\ncdef")
        assert (error.line, error.column) == (2, 2)
        assert error.expected == ["u8", '","']
        assert error.location.file == "<input>"
        assert str(error) == 'expected one of u8, "," at line 2 column 2'

    def test_describe_expected(self):
        assert describe_expected([]) == "nothing"
        assert describe_expected(["u8"]) == "u8"

    def test_position_at_end_of_input(self):
        error = ParseError(3, ["u8"], "ab\n")
        assert (error.line, error.column) == (2, 1)


class TestRendering:
    def test_conversion_error_underlines_the_span(self):
        with pytest.raises(IntegerOverflowError) as exc_info:
            seq("n=", u8).parse("n=999")
        rendered = exc_info.value.render(color=False)
        assert "error[E0301]: number too large to fit in target type `u8`" in rendered
        assert "1 | n=999" in rendered
        assert "  ^^^" in rendered

    def test_color_can_be_forced(self):
        error = ParseError(0, ["u8"], "x")
        assert "\x1b[" in error.render(color=True)
        assert _strip_ansi(error.render(color=True)) == error.render(color=False)

    def test_no_color_env(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        assert "\x1b[" not in ParseError(0, ["u8"], "x").render()

    def test_error_without_location(self):
        out = PatternError("bad pattern").render(color=False)
        assert "error[E0100]: bad pattern" in out
        assert "<unknown location>" in out

    def test_help_and_note(self):
        error = PatternSyntaxError("oops", SourceLocation("<pattern>", 1, 3), "u8 ?? x",
                                   help="try this", note="because")
        out = error.render(color=False)
        assert "= help: try this" in out
        assert "= note: because" in out


class TestErrorReporter:
    def test_collects_and_formats(self):
        reporter = ErrorReporter({})
        assert not reporter.has_errors()
        reporter.report_exception(ParseError(1, ["u8"], "ax", "data.txt"))
        reporter.report_error("second", None, code="E0100")
        assert reporter.has_errors()
        out = reporter.format_all_errors(color=False)
        assert "data.txt:1:2" in out
        assert "1 | ax" in out
        assert "aborting due to 2 previous errors" in out

    def test_print_errors_writes_to_stderr(self, capsys, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        reporter = ErrorReporter({"data.txt": "ax"})
        reporter.report_error("bad digit", SourceLocation.from_offset("ax", 1, file="data.txt"),
                              code="E0200")
        reporter.print_errors()
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "error[E0200]: bad digit" in captured.err
        assert "\x1b[" not in captured.err

    def test_file_not_in_sources(self):
        err = Error(message="oops", location=SourceLocation("missing.txt", 1, 1), code="E0200")
        out = ErrorReporter({}).format_error(err, color=False)
        assert "missing.txt:1:1" in out


class TestSourceLocation:
    def test_line_column(self):
        assert line_column("ab\ncd", 0) == (1, 1)
        assert line_column("ab\ncd", 2) == (1, 3)
        assert line_column("ab\ncd", 3) == (2, 1)

    def test_from_offset_clamps(self):
        loc = SourceLocation.from_offset("abc", 10)
        assert loc.start == 3
        assert str(loc) == "<input>:1:4"

    def test_span(self):
        loc = SourceLocation.from_offset("abcdef", 1, end=4)
        assert (loc.column, loc.end_column) == (2, 5)
