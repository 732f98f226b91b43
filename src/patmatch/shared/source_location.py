"""
Source Location (Span)

Positions are character offsets into the matched text; line and column are
1-based and counted in characters.
"""

from dataclasses import dataclass

from ..utils.config import DEFAULT_SOURCE_NAME


@dataclass(frozen=True)
class SourceLocation:
    """
    Source location of a diagnostic.

    - File name, 1-based line and column
    - Optional start/end offsets and end line/column for multi-char spans
    - Immutable (frozen) for hashability
    """
    file: str
    line: int
    column: int
    start: int = 0
    end: int = 0
    end_line: int = 0
    end_column: int = 0

    @classmethod
    def from_offset(cls, source: str, offset: int, file: str = DEFAULT_SOURCE_NAME,
                    end: int = 0) -> "SourceLocation":
        """Build a location for character offset ``offset`` of ``source``."""
        offset = max(0, min(offset, len(source)))
        line, column = line_column(source, offset)
        if end > offset:
            end = min(end, len(source))
            end_line, end_column = line_column(source, end)
        else:
            end, end_line, end_column = offset, 0, 0
        return cls(file, line, column, offset, end, end_line, end_column)

    def __str__(self) -> str:
        """Format as file:line:column"""
        return f"{self.file}:{self.line}:{self.column}"


def line_column(source: str, offset: int):
    """1-based (line, column) of ``offset`` in ``source``."""
    line = source.count("\n", 0, offset) + 1
    line_start = source.rfind("\n", 0, offset) + 1
    return line, offset - line_start + 1
