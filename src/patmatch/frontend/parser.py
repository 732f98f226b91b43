"""
Pattern Parser

Compiles pattern notation into pattern IR with a cached lark LALR parser.
Syntax errors and invalid patterns both surface as ``PatternError``s
carrying the notation's source location.
"""

import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from lark import Lark
from lark.exceptions import (
    UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken, VisitError,
)

from ..ir.nodes import PatternIR
from ..shared.errors import PatternError, PatternSyntaxError
from ..shared.source_location import SourceLocation
from ..utils.config import DEFAULT_PARSER_CACHE_FILE, GRAMMAR_FILE_NAME, PATTERN_SOURCE_NAME
from .transformer import PatternTransformer, declared_rules

logger = logging.getLogger("patmatch.frontend.parser")


class PatternParser:
    """
    Pattern notation parser.

    - Takes notation text, returns pattern IR
    - Preserves source locations on IR nodes
    - Uses lark LALR with its native grammar cache
    """

    def __init__(self, cache_file: str = DEFAULT_PARSER_CACHE_FILE):
        grammar_path = Path(__file__).parent / GRAMMAR_FILE_NAME
        self.parser = Lark.open(
            str(grammar_path),
            parser='lalr',              # Required for caching
            cache=cache_file,
            propagate_positions=True,   # Enable position tracking for error reporting
            maybe_placeholders=False,
        )
        logger.debug(f"loaded pattern grammar from {grammar_path}")

    def parse(self, source: str, env: Optional[Mapping[str, Any]] = None,
              source_file: str = PATTERN_SOURCE_NAME) -> PatternIR:
        """
        Compile ``source`` into a pattern.

        ``env`` supplies names the notation may use: patterns, string
        constants, functions returning patterns, and values for mappers.
        """
        try:
            tree = self.parser.parse(source)
        except UnexpectedInput as e:
            raise self._syntax_error(e, source, source_file) from e

        transformer = PatternTransformer(env, source_file, source)
        try:
            for name, shape in declared_rules(tree):
                transformer.declare_rule(name, shape)
            return transformer.transform(tree)
        except VisitError as e:
            orig = e.orig_exc
            if isinstance(orig, PatternError):
                self._attach_location(orig, getattr(e.obj, "meta", None), source, source_file)
                raise orig from None
            raise

    @staticmethod
    def _attach_location(error: PatternError, meta, source: str, source_file: str) -> None:
        if error.location is None and meta is not None and not getattr(meta, "empty", True):
            error.location = SourceLocation(
                file=source_file,
                line=meta.line,
                column=meta.column,
                start=meta.start_pos,
                end=meta.end_pos,
                end_line=meta.end_line,
                end_column=meta.end_column,
            )
        if error.source is None:
            error.source = source

    @staticmethod
    def _syntax_error(e: UnexpectedInput, source: str, source_file: str) -> PatternSyntaxError:
        if isinstance(e, UnexpectedEOF):
            message = "unexpected end of pattern"
            location = SourceLocation.from_offset(source, len(source), source_file)
        else:
            location = SourceLocation(
                file=source_file,
                line=getattr(e, "line", 0) or 0,
                column=getattr(e, "column", 0) or 0,
                start=getattr(e, "pos_in_stream", 0) or 0,
            )
            if isinstance(e, UnexpectedToken):
                if e.token.type == "$END":
                    message = "unexpected end of pattern"
                else:
                    message = f"unexpected `{e.token}`"
            elif isinstance(e, UnexpectedCharacters):
                message = f"unexpected character `{e.char}`"
            else:
                message = "invalid pattern"
        return PatternSyntaxError(message, location, source, label=message)
