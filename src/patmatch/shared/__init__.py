"""
Shared components: source locations, errors, value shapes, bindings.
"""

from .source_location import SourceLocation
from .errors import (
    Error, ErrorReporter, PatmatchError, PatmatchImplementationError,
    PatternError, ShapeError, BindingError, PatternSyntaxError,
    ParseError, ConversionError, IntegerOverflowError, CallbackError,
)
from .types import (
    Shape, ShapeKind, IntShape, FloatShape, TupleShape, ListShape, OptionalShape, CollectionShape,
    UNIT, CHAR, BOOL, STR, ANY, NAMED_SHAPES,
)
from .scope import BindingInfo
