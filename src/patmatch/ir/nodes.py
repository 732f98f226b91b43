"""
Pattern IR Nodes

The closed set of pattern node variants. Nodes are immutable once built and
validate themselves in their constructors: value shapes, binding scopes and
repetition bounds are checked here, never at match time.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Optional, Sequence, Tuple, TypeVar, TYPE_CHECKING

from ..shared.errors import PatternError, ShapeError
from ..shared.scope import BindingInfo
from ..shared.source_location import SourceLocation
from ..shared.types import (
    Shape, ShapeKind, IntShape, FloatShape, ListShape, OptionalShape, CollectionShape,
    UNIT, CHAR, BOOL, STR, ANY, compatible, unify, sequence_shape,
)
from ..utils.config import INTEGER_BASES, INTEGER_WIDTHS, FLOAT_WIDTHS, PLATFORM_INT_WIDTH

if TYPE_CHECKING:
    from ..engine.driver import MatchResult
    from .rules import RuleTable

T = TypeVar('T')


class PatternIR:
    """
    Base class for all pattern nodes.

    - ``shape``: static shape of the value produced on conversion
    - ``binding``: named captures visible to the enclosing conversion scope
    - ``location``: where the node came from in pattern notation, if anywhere

    Equality and hashing are structural over the defining fields only.
    """
    __slots__ = ('location', 'shape', 'binding')

    _DERIVED = frozenset(('location', 'shape', 'binding'))

    def __init__(self, shape: Shape, binding: BindingInfo,
                 location: Optional[SourceLocation] = None):
        self.shape = shape
        self.binding = binding
        self.location = location

    def __setattr__(self, name, value):
        if hasattr(self, name):
            raise AttributeError(f"{self.__class__.__name__}.{name} is immutable")
        object.__setattr__(self, name, value)

    def __delattr__(self, name):
        raise AttributeError(f"{self.__class__.__name__}.{name} is immutable")

    def accept(self, visitor: 'PatternVisitor[T]', *args) -> T:
        raise NotImplementedError(f"accept() not implemented for {self.__class__.__name__}")

    def _get_all_attributes(self):
        """Defining attribute values for equality/hashing (works with __slots__)."""
        attrs = {}
        for cls in self.__class__.__mro__:
            slots = getattr(cls, '__slots__', ())
            if isinstance(slots, str):
                slots = (slots,)
            for slot in slots:
                if slot not in attrs and slot not in self._DERIVED:
                    attrs[slot] = getattr(self, slot, None)
        return attrs

    def __eq__(self, other):
        if not isinstance(other, self.__class__) or not isinstance(self, other.__class__):
            return False
        return self._get_all_attributes() == other._get_all_attributes()

    def __hash__(self):
        attrs = self._get_all_attributes()
        return hash((self.__class__.__name__,) + tuple(sorted(attrs.items())))

    def __repr__(self):
        from .serialization import dump
        return dump(self, pretty=False)

    # -- conveniences ------------------------------------------------------

    def parse(self, text: str) -> Any:
        """Match the whole of ``text`` and convert it."""
        from ..engine.driver import parse
        return parse(self, text)

    def match(self, text: str, start: int = 0) -> 'MatchResult':
        """Match a prefix of ``text[start:]`` without converting."""
        from ..engine.driver import match
        return match(self, text, start)


def _check_pattern(value: Any, what: str) -> 'PatternIR':
    if not isinstance(value, PatternIR):
        raise PatternError(f"{what} must be a pattern, got {type(value).__name__}")
    return value


def _check_count(value: Any, what: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise PatternError(f"{what} must be a non-negative integer, got {value!r}")


# =============================================================================
# Primitives
# =============================================================================

class LiteralIR(PatternIR):
    """Exact text. Produces no value."""
    __slots__ = ('text',)

    def __init__(self, text: str, location: Optional[SourceLocation] = None):
        if not isinstance(text, str):
            raise PatternError(f"literal text must be a string, got {type(text).__name__}")
        self.text = text
        super().__init__(UNIT, BindingInfo.empty(), location)

    def accept(self, visitor: 'PatternVisitor[T]', *args) -> T:
        return visitor.visit_literal(self, *args)


class CharClassIR(PatternIR):
    """
    One character satisfying ``predicate``.

    Produces the character itself, or its numeric value when ``base`` is set
    (digit classes).
    """
    __slots__ = ('name', 'predicate', 'base')

    def __init__(self, name: str, predicate: Callable[[str], bool], base: Optional[int] = None,
                 location: Optional[SourceLocation] = None):
        if not callable(predicate):
            raise PatternError(f"character class `{name}` needs a callable predicate")
        if base is not None and base not in INTEGER_BASES:
            raise PatternError(f"unsupported digit base {base!r}")
        self.name = name
        self.predicate = predicate
        self.base = base
        shape = CHAR if base is None else IntShape(False, PLATFORM_INT_WIDTH)
        super().__init__(shape, BindingInfo.empty(), location)

    def accept(self, visitor: 'PatternVisitor[T]', *args) -> T:
        return visitor.visit_char_class(self, *args)


class CharOfIR(PatternIR):
    """One character out of ``options``. Produces its index in ``options``."""
    __slots__ = ('options',)

    def __init__(self, options: str, location: Optional[SourceLocation] = None):
        if not isinstance(options, str) or not options:
            raise PatternError("char_of needs a non-empty string of options")
        self.options = options
        super().__init__(IntShape(False, PLATFORM_INT_WIDTH), BindingInfo.empty(), location)

    def accept(self, visitor: 'PatternVisitor[T]', *args) -> T:
        return visitor.visit_char_of(self, *args)


class IntegerIR(PatternIR):
    """
    Optional sign (signed forms only) followed by digits of ``base``.

    ``width`` is the bit width checked on conversion; None means arbitrary
    precision, which never overflows.
    """
    __slots__ = ('signed', 'base', 'width', 'name')

    def __init__(self, signed: bool, base: int = 10, width: Optional[int] = 64,
                 name: Optional[str] = None, location: Optional[SourceLocation] = None):
        if base not in INTEGER_BASES:
            raise PatternError(f"unsupported integer base {base!r}")
        if width is not None and width not in INTEGER_WIDTHS:
            raise PatternError(f"unsupported integer width {width!r}")
        shape = IntShape(bool(signed), width)
        if name is None:
            name = str(shape) + {2: "_bin", 10: "", 16: "_hex"}[base]
        self.signed = bool(signed)
        self.base = base
        self.width = width
        self.name = name
        super().__init__(shape, BindingInfo.empty(), location)

    def accept(self, visitor: 'PatternVisitor[T]', *args) -> T:
        return visitor.visit_integer(self, *args)


class FloatIR(PatternIR):
    """Decimal floating point literal (also ``inf`` and ``nan``)."""
    __slots__ = ('width', 'name')

    def __init__(self, width: int = 64, name: Optional[str] = None,
                 location: Optional[SourceLocation] = None):
        if width not in FLOAT_WIDTHS:
            raise PatternError(f"unsupported float width {width!r}")
        self.width = width
        self.name = name or f"f{width}"
        super().__init__(FloatShape(width), BindingInfo.empty(), location)

    def accept(self, visitor: 'PatternVisitor[T]', *args) -> T:
        return visitor.visit_float(self, *args)


class BoolIR(PatternIR):
    """``true`` or ``false``"""
    __slots__ = ()

    def __init__(self, location: Optional[SourceLocation] = None):
        super().__init__(BOOL, BindingInfo.empty(), location)

    def accept(self, visitor: 'PatternVisitor[T]', *args) -> T:
        return visitor.visit_bool(self, *args)


# =============================================================================
# Combinators
# =============================================================================

class SequenceIR(PatternIR):
    """
    Children matched end to end.

    Value: ``()`` when no child produces a value, the single producing
    child's value, or a tuple of all producing children's values.
    """
    __slots__ = ('children',)

    def __init__(self, children: Sequence[PatternIR], location: Optional[SourceLocation] = None):
        children = tuple(_check_pattern(c, "sequence element") for c in children)
        self.children = children
        super().__init__(
            sequence_shape(c.shape for c in children),
            BindingInfo.sequence([c.binding for c in children]),
            location,
        )

    def accept(self, visitor: 'PatternVisitor[T]', *args) -> T:
        return visitor.visit_sequence(self, *args)


class AlternationIR(PatternIR):
    """
    Ordered choice: the first child that matches wins and later children
    are never tried. All children must produce compatible values.
    """
    __slots__ = ('children',)

    def __init__(self, children: Sequence[PatternIR], location: Optional[SourceLocation] = None):
        children = tuple(_check_pattern(c, "alternative") for c in children)
        if not children:
            raise PatternError("alternation needs at least one alternative")
        shape = children[0].shape
        for child in children[1:]:
            if not compatible(shape, child.shape):
                raise ShapeError(
                    f"alternatives produce incompatible values: `{shape}` and `{child.shape}`",
                    location=child.location or location,
                    help="every alternative must produce the same kind of value",
                )
            shape = unify(shape, child.shape)
        self.children = children
        super().__init__(shape, BindingInfo.alternation([c.binding for c in children]), location)

    def accept(self, visitor: 'PatternVisitor[T]', *args) -> T:
        return visitor.visit_alternation(self, *args)


def _repeat_bounds(min_count: int, max_count: Optional[int]) -> None:
    _check_count(min_count, "minimum repeat count")
    if max_count is not None:
        _check_count(max_count, "maximum repeat count")
        if min_count > max_count:
            raise PatternError(
                f"minimum repeat count {min_count} exceeds maximum {max_count}")


class RepeatIR(PatternIR):
    """
    Greedy, backtracking repetition of ``child``.

    ``max_count`` None is unbounded. ``(0, 1)`` produces an optional value,
    every other range a list.
    """
    __slots__ = ('child', 'min_count', 'max_count')

    def __init__(self, child: PatternIR, min_count: int = 0, max_count: Optional[int] = None,
                 location: Optional[SourceLocation] = None):
        _check_pattern(child, "repeated pattern")
        _repeat_bounds(min_count, max_count)
        self.child = child
        self.min_count = min_count
        self.max_count = max_count
        super().__init__(
            OptionalShape(child.shape) if self.is_optional else ListShape(child.shape),
            child.binding.repeated(),
            location,
        )

    @property
    def is_optional(self) -> bool:
        return self.min_count == 0 and self.max_count == 1

    def accept(self, visitor: 'PatternVisitor[T]', *args) -> T:
        return visitor.visit_repeat(self, *args)


class RepeatSeparatedIR(PatternIR):
    """Like ``RepeatIR``, with ``separator`` matched between items. Separator values are dropped."""
    __slots__ = ('child', 'separator', 'min_count', 'max_count')

    def __init__(self, child: PatternIR, separator: PatternIR, min_count: int = 0,
                 max_count: Optional[int] = None, location: Optional[SourceLocation] = None):
        _check_pattern(child, "repeated pattern")
        _check_pattern(separator, "separator")
        _repeat_bounds(min_count, max_count)
        self.child = child
        self.separator = separator
        self.min_count = min_count
        self.max_count = max_count
        binding = BindingInfo.sequence([child.binding, separator.binding]).repeated()
        super().__init__(ListShape(child.shape), binding, location)

    def accept(self, visitor: 'PatternVisitor[T]', *args) -> T:
        return visitor.visit_repeat_separated(self, *args)


class NamedIR(PatternIR):
    """Matches as ``child``; binds its value to ``name`` for the enclosing conversion."""
    __slots__ = ('name', 'child')

    def __init__(self, name: str, child: PatternIR, location: Optional[SourceLocation] = None):
        if not isinstance(name, str) or not name.isidentifier():
            raise PatternError(f"capture name must be an identifier, got {name!r}")
        _check_pattern(child, "captured pattern")
        self.name = name
        self.child = child
        super().__init__(child.shape, child.binding.named(name), location)

    def accept(self, visitor: 'PatternVisitor[T]', *args) -> T:
        return visitor.visit_named(self, *args)


class ConvertIR(PatternIR):
    """
    Matches as ``child``; converts by calling ``user_fn``.

    With ``bindings`` the function receives the values of those named
    captures, in order. Without, it receives the child's value. ``returns``
    declares the result shape (``ANY`` when unknown).
    """
    __slots__ = ('child', 'user_fn', 'bindings', 'returns')

    def __init__(self, child: PatternIR, user_fn: Callable[..., Any],
                 bindings: Optional[Sequence[str]] = None, returns: Shape = ANY,
                 location: Optional[SourceLocation] = None):
        _check_pattern(child, "converted pattern")
        if not callable(user_fn):
            raise PatternError(f"conversion function must be callable, got {type(user_fn).__name__}")
        if bindings is not None:
            bindings = tuple(bindings)
        binding = child.binding.converted(bindings)
        self.child = child
        self.user_fn = user_fn
        self.bindings = bindings
        self.returns = returns
        super().__init__(returns, binding, location)

    def accept(self, visitor: 'PatternVisitor[T]', *args) -> T:
        return visitor.visit_convert(self, *args)


class LineIR(PatternIR):
    """One line: ``child`` must cover it exactly. Consumes the newline."""
    __slots__ = ('child',)

    def __init__(self, child: PatternIR, location: Optional[SourceLocation] = None):
        self.child = _check_pattern(child, "line pattern")
        super().__init__(child.shape, child.binding, location)

    def accept(self, visitor: 'PatternVisitor[T]', *args) -> T:
        return visitor.visit_line(self, *args)


class SectionIR(PatternIR):
    """Lines up to a blank line or end of input. Consumes the blank line."""
    __slots__ = ('child',)

    def __init__(self, child: PatternIR, location: Optional[SourceLocation] = None):
        self.child = _check_pattern(child, "section pattern")
        super().__init__(child.shape, child.binding, location)

    def accept(self, visitor: 'PatternVisitor[T]', *args) -> T:
        return visitor.visit_section(self, *args)


class StringIR(PatternIR):
    """Matches as ``child``; produces the matched text."""
    __slots__ = ('child',)

    def __init__(self, child: PatternIR, location: Optional[SourceLocation] = None):
        self.child = _check_pattern(child, "string pattern")
        super().__init__(STR, child.binding.converted(None), location)

    def accept(self, visitor: 'PatternVisitor[T]', *args) -> T:
        return visitor.visit_string(self, *args)


class CollectIR(PatternIR):
    """Matches as ``child`` (a list or optional); produces ``factory(values)``."""
    __slots__ = ('child', 'factory', 'container')

    def __init__(self, child: PatternIR, factory: Callable[[Any], Any], container: str,
                 location: Optional[SourceLocation] = None):
        _check_pattern(child, "collected pattern")
        if child.shape.kind not in (ShapeKind.LIST, ShapeKind.OPTIONAL, ShapeKind.ANY):
            raise ShapeError(f"{container}_of needs a repeated pattern, got `{child.shape}`",
                             location=location)
        element = child.shape.element if child.shape.kind != ShapeKind.ANY else ANY
        self.child = child
        self.factory = factory
        self.container = container
        super().__init__(CollectionShape(container, element), child.binding, location)

    def accept(self, visitor: 'PatternVisitor[T]', *args) -> T:
        return visitor.visit_collect(self, *args)


# =============================================================================
# Rules (named, possibly recursive patterns)
# =============================================================================

class RuleRefIR(PatternIR):
    """
    Reference to a rule of a ``RuleTable``. The body is looked up when
    matching, so rules may refer to themselves.
    """
    __slots__ = ('table', 'name')

    def __init__(self, table: 'RuleTable', name: str, shape: Shape = ANY,
                 location: Optional[SourceLocation] = None):
        self.table = table
        self.name = name
        super().__init__(shape, BindingInfo.empty(), location)

    @property
    def body(self) -> PatternIR:
        return self.table.body(self.name)

    def accept(self, visitor: 'PatternVisitor[T]', *args) -> T:
        return visitor.visit_rule_ref(self, *args)


class RuleSetIR(PatternIR):
    """A complete set of rules plus the entry pattern that uses them."""
    __slots__ = ('table', 'entry')

    def __init__(self, table: 'RuleTable', entry: PatternIR,
                 location: Optional[SourceLocation] = None):
        self.table = table
        self.entry = _check_pattern(entry, "rule set entry")
        super().__init__(entry.shape, entry.binding, location)

    def accept(self, visitor: 'PatternVisitor[T]', *args) -> T:
        return visitor.visit_rule_set(self, *args)


# =============================================================================
# Visitor
# =============================================================================

class PatternVisitor(ABC, Generic[T]):
    """Visitor for pattern nodes (no isinstance needed)."""

    @abstractmethod
    def visit_literal(self, node: LiteralIR, *args) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_char_class(self, node: CharClassIR, *args) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_char_of(self, node: CharOfIR, *args) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_integer(self, node: IntegerIR, *args) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_float(self, node: FloatIR, *args) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_bool(self, node: BoolIR, *args) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_sequence(self, node: SequenceIR, *args) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_alternation(self, node: AlternationIR, *args) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_repeat(self, node: RepeatIR, *args) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_repeat_separated(self, node: RepeatSeparatedIR, *args) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_named(self, node: NamedIR, *args) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_convert(self, node: ConvertIR, *args) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_line(self, node: LineIR, *args) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_section(self, node: SectionIR, *args) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_string(self, node: StringIR, *args) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_collect(self, node: CollectIR, *args) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_rule_ref(self, node: RuleRefIR, *args) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_rule_set(self, node: RuleSetIR, *args) -> T:
        raise NotImplementedError
