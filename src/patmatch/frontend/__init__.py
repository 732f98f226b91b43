"""
Pattern notation front end (lark grammar and transformer).
"""

from typing import Optional

from .parser import PatternParser

_default_parser: Optional[PatternParser] = None


def default_parser() -> PatternParser:
    """Shared parser instance; the grammar is loaded once per process."""
    global _default_parser
    if _default_parser is None:
        _default_parser = PatternParser()
    return _default_parser
