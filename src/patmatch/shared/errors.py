"""
Error Reporting

Diagnostics are rendered rustc style: a header with the error code, an arrow
to file:line:column, the offending source line and a caret underline.
"""

import os
import sys
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Sequence

from .source_location import SourceLocation
from ..utils.config import COLOR_ENV_VAR, DEFAULT_SOURCE_NAME


# ---------------------------------------------------------------------------
# ANSI color helpers (disabled when NO_COLOR is set)
# ---------------------------------------------------------------------------

def _use_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    explicit = os.environ.get(COLOR_ENV_VAR, "").lower()
    if explicit in ("0", "false", "no", "never"):
        return False
    return True

_BOLD   = "\033[1m"
_RED    = "\033[31m"
_BLUE   = "\033[34m"
_CYAN   = "\033[36m"
_RESET  = "\033[0m"

def _style(text: str, *codes: str, color: bool = True) -> str:
    if not color:
        return text
    prefix = "".join(codes)
    return f"{prefix}{text}{_RESET}" if prefix else text


# ---------------------------------------------------------------------------
# Error dataclass
# ---------------------------------------------------------------------------

@dataclass
class Error:
    """A single diagnostic, independent of the exception that carried it."""
    message: str
    location: Optional[SourceLocation]
    code: Optional[str] = None
    help: Optional[str] = None
    note: Optional[str] = None
    label: Optional[str] = None


# ---------------------------------------------------------------------------
# Formatting engine
# ---------------------------------------------------------------------------

def _format_diagnostic(
    error: Error,
    source_files: Dict[str, str],
    color: bool = False,
) -> str:
    """
    Render a single diagnostic in rustc style.

    Example output (plain, no color)::

        error[E0200]: expected u64 at line 2 column 1
         --> <input>:2:1
          |
        2 | x
          | ^ expected u64
    """
    out: List[str] = []

    code_str = f"[{error.code}]" if error.code else ""
    out.append(
        _style(f"error{code_str}", _BOLD, _RED, color=color)
        + _style(f": {error.message}", _BOLD, color=color)
    )

    if error.location is None:
        out.append(_style(" --> ", _BOLD, _BLUE, color=color) + "<unknown location>")
        _append_annotations(out, error, 1, color)
        return "\n".join(out)

    loc = error.location
    source = source_files.get(loc.file)
    if source is None:
        out.append(
            _style(" --> ", _BOLD, _BLUE, color=color)
            + f"{loc.file}:{loc.line}:{loc.column}"
        )
        _append_annotations(out, error, 1, color)
        return "\n".join(out)

    src_lines = source.split("\n")
    gw = max(len(str(loc.line)), 1)

    out.append(_style(" " * gw + "--> ", _BOLD, _BLUE, color=color) + str(loc))
    out.append(_style(" " * (gw + 1) + "|", _BOLD, _BLUE, color=color))

    idx = loc.line - 1
    code_line = src_lines[idx] if 0 <= idx < len(src_lines) else ""
    out.append(_style(str(loc.line).rjust(gw) + " | ", _BOLD, _BLUE, color=color) + code_line)

    col_start = max(loc.column, 1) - 1
    if loc.end_line in (0, loc.line) and loc.end_column > loc.column:
        span_len = loc.end_column - loc.column
    else:
        span_len = 1
    carets = " " * col_start + "^" * span_len
    label_suffix = f" {error.label}" if error.label else ""
    out.append(
        _style(" " * (gw + 1) + "| ", _BOLD, _BLUE, color=color)
        + _style(carets + label_suffix, _BOLD, _RED, color=color)
    )

    _append_annotations(out, error, gw, color)
    return "\n".join(out)


def _append_annotations(
    out: List[str],
    error: Error,
    gw: int,
    color: bool,
) -> None:
    if not (error.help or error.note):
        return
    out.append(_style(" " * (gw + 1) + "|", _BOLD, _BLUE, color=color))
    pad = " " * (gw + 1)
    if error.help:
        out.append(
            _style(f"{pad}= ", _BOLD, _CYAN, color=color)
            + _style("help: ", _BOLD, color=color)
            + error.help
        )
    if error.note:
        out.append(
            _style(f"{pad}= ", _BOLD, _CYAN, color=color)
            + _style("note: ", _BOLD, color=color)
            + error.note
        )


# ---------------------------------------------------------------------------
# ErrorReporter
# ---------------------------------------------------------------------------

class ErrorReporter:
    """Collects diagnostics and renders them against the known sources."""

    def __init__(self, source_files: Dict[str, str]):
        self.source_files = source_files
        self.errors: List[Error] = []

    def report_error(
        self,
        message: str,
        location: Optional[SourceLocation],
        code: Optional[str] = None,
        help: Optional[str] = None,
        note: Optional[str] = None,
        label: Optional[str] = None,
    ) -> None:
        self.errors.append(Error(
            message=message,
            location=location,
            code=code,
            help=help,
            note=note,
            label=label,
        ))

    def report_exception(self, exc: "PatmatchError") -> None:
        if exc.source is not None and exc.location is not None:
            self.source_files.setdefault(exc.location.file, exc.source)
        self.errors.append(exc.to_error())

    def format_error(self, error: Error, color: Optional[bool] = None) -> str:
        use_color = color if color is not None else _use_color()
        return _format_diagnostic(error, self.source_files, color=use_color)

    def format_all_errors(self, color: Optional[bool] = None) -> str:
        parts = [self.format_error(e, color=color) for e in self.errors]
        use_color = color if color is not None else _use_color()
        count = len(self.errors)
        summary = f"aborting due to {count} previous error{'s' if count != 1 else ''}"
        parts.append(
            _style("error", _BOLD, _RED, color=use_color)
            + _style(f": {summary}", _BOLD, color=use_color)
        )
        return "\n\n".join(parts)

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def print_errors(self) -> None:
        color = _use_color()
        for error in self.errors:
            print(self.format_error(error, color=color), file=sys.stderr)


# ============================================================================
# Exception Classes
# ============================================================================

class PatmatchError(Exception):
    """Base exception for all patmatch errors"""
    code = "E0001"

    def __init__(self,
                 message: str,
                 location: Optional[SourceLocation] = None,
                 source: Optional[str] = None,
                 help: Optional[str] = None,
                 note: Optional[str] = None,
                 label: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.location = location
        self.source = source
        self.help_text = help
        self.note_text = note
        self.label_text = label

    def __str__(self):
        return self.message

    def to_error(self) -> Error:
        return Error(
            message=self.message,
            location=self.location,
            code=self.code,
            help=self.help_text,
            note=self.note_text,
            label=self.label_text,
        )

    def render(self, color: Optional[bool] = None) -> str:
        """Rustc-style rendering including the source snippet when known."""
        source_files: Dict[str, str] = {}
        if self.source is not None and self.location is not None:
            source_files[self.location.file] = self.source
        use_color = color if color is not None else _use_color()
        return _format_diagnostic(self.to_error(), source_files, color=use_color)


# ---- construction ---------------------------------------------------------

class PatternError(PatmatchError):
    """An invalid pattern was built. Raised while constructing the IR."""
    code = "E0100"


class ShapeError(PatternError):
    """Incompatible value shapes, e.g. between alternatives."""
    code = "E0101"


class BindingError(PatternError):
    """Duplicate, unbound or shadowed named captures."""
    code = "E0102"


class PatternSyntaxError(PatternError):
    """Pattern notation could not be parsed or resolved."""
    code = "E0103"


# ---- matching -------------------------------------------------------------

def describe_expected(expected: Sequence[str]) -> str:
    if not expected:
        return "nothing"
    if len(expected) == 1:
        return expected[0]
    return "one of " + ", ".join(expected)


class ParseError(PatmatchError):
    """
    The input does not match the pattern.

    Carries the furthest position any primitive reached and the
    expectation labels registered there, in first-registration order.
    """
    code = "E0200"

    def __init__(self, position: int, expected: Sequence[str], source: str,
                 file: str = DEFAULT_SOURCE_NAME):
        location = SourceLocation.from_offset(source, position, file)
        self.position = position
        self.expected = list(expected)
        self.line = location.line
        self.column = location.column
        described = describe_expected(self.expected)
        message = f"expected {described} at line {self.line} column {self.column}"
        super().__init__(message, location, source, label=f"expected {described}")


# ---- conversion -----------------------------------------------------------

class ConversionError(PatmatchError):
    """The input matched but the matched text could not be converted."""
    code = "E0300"

    def __init__(self, message: str, start: int, end: int, source: str,
                 file: str = DEFAULT_SOURCE_NAME, **kwargs):
        location = SourceLocation.from_offset(source, start, file, end=end)
        self.start = start
        self.end = end
        super().__init__(message, location, source, **kwargs)


class IntegerOverflowError(ConversionError):
    """Integer text outside the target width."""
    code = "E0301"


class CallbackError(ConversionError):
    """A user conversion function raised. The original is ``__cause__``."""
    code = "E0302"


class PatmatchImplementationError(Exception):
    """
    Error in the patmatch implementation itself (not the user's pattern).

    Never use this for errors in user patterns or input text.
    """
    def __init__(self, message: str, error_code: str = "E9999"):
        super().__init__(message)
        self.message = message
        self.error_code = error_code

    def __str__(self):
        return f"[{self.error_code}] {self.message}"
