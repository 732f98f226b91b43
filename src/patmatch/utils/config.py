"""
Configuration constants to replace magic numbers throughout patmatch
"""

import os
import tempfile

# Front end grammar cache (under temp dir to avoid cluttering project root)
DEFAULT_PARSER_CACHE_FILE = os.path.join(tempfile.gettempdir(), "patmatch_grammar.cache")
GRAMMAR_FILE_NAME = "grammar.lark"

# Source names used in diagnostics
DEFAULT_SOURCE_NAME = "<input>"
PATTERN_SOURCE_NAME = "<pattern>"

# Diagnostics color override (NO_COLOR always wins)
COLOR_ENV_VAR = "PATMATCH_COLOR"

# Integer configuration
PLATFORM_INT_WIDTH = 64  # width of usize / isize
INTEGER_WIDTHS = (8, 16, 32, 64, 128)
INTEGER_BASES = (2, 10, 16)

# Float configuration
FLOAT_WIDTHS = (32, 64)

# Boolean literals
BOOLEAN_TRUE_LITERAL = "true"
BOOLEAN_FALSE_LITERAL = "false"

# Framing characters
NEWLINE = "\n"
BLANK_LINE = "\n\n"

# Expectation labels
LABEL_END_OF_INPUT = "end of input"
LABEL_END_OF_LINE = "end of line"
LABEL_START_OF_LINE = "start of line"
LABEL_LINE = "line"
LABEL_SECTION = "section"
LABEL_START_OF_SECTION = "start of section"
LABEL_END_OF_SECTION = "end of section"
