"""
Value Shapes

The static type model of pattern values. Every IR node computes its shape at
construction so that alternation compatibility is checked before any input
is seen.
"""

from dataclasses import dataclass
from typing import Tuple, Optional
from enum import Enum


class ShapeKind(Enum):
    """Shape kind"""
    UNIT = "unit"          # no value
    CHAR = "char"
    BOOL = "bool"
    STR = "str"
    INT = "int"
    FLOAT = "float"
    TUPLE = "tuple"
    LIST = "list"
    OPTIONAL = "optional"
    COLLECTION = "collection"  # set / dict / deque built from a list
    ANY = "any"            # result of an un-annotated user conversion


@dataclass(frozen=True)
class Shape:
    """Base shape. Immutable and hashable."""
    kind: ShapeKind

    def __str__(self) -> str:
        return self.kind.value

    def __repr__(self) -> str:
        return str(self)


@dataclass(frozen=True)
class IntShape(Shape):
    """Integer of a fixed bit width, or arbitrary precision when ``width`` is None"""
    signed: bool
    width: Optional[int]

    def __init__(self, signed: bool, width: Optional[int]):
        super().__init__(kind=ShapeKind.INT)
        object.__setattr__(self, 'signed', signed)
        object.__setattr__(self, 'width', width)

    def __str__(self) -> str:
        if self.width is None:
            return "big_int" if self.signed else "big_uint"
        return f"{'i' if self.signed else 'u'}{self.width}"


@dataclass(frozen=True)
class FloatShape(Shape):
    width: int

    def __init__(self, width: int):
        super().__init__(kind=ShapeKind.FLOAT)
        object.__setattr__(self, 'width', width)

    def __str__(self) -> str:
        return f"f{self.width}"


@dataclass(frozen=True)
class TupleShape(Shape):
    """Fixed-arity tuple produced by a sequence with several valued children"""
    elements: Tuple[Shape, ...]

    def __init__(self, elements: Tuple[Shape, ...]):
        super().__init__(kind=ShapeKind.TUPLE)
        object.__setattr__(self, 'elements', tuple(elements))

    def __str__(self) -> str:
        return "(" + ", ".join(str(e) for e in self.elements) + ")"


@dataclass(frozen=True)
class ListShape(Shape):
    element: Shape

    def __init__(self, element: Shape):
        super().__init__(kind=ShapeKind.LIST)
        object.__setattr__(self, 'element', element)

    def __str__(self) -> str:
        return f"[{self.element}]"


@dataclass(frozen=True)
class OptionalShape(Shape):
    element: Shape

    def __init__(self, element: Shape):
        super().__init__(kind=ShapeKind.OPTIONAL)
        object.__setattr__(self, 'element', element)

    def __str__(self) -> str:
        return f"{self.element}?"


@dataclass(frozen=True)
class CollectionShape(Shape):
    """A list converted into another container (``set``, ``dict``, ``deque``)"""
    container: str
    element: Shape

    def __init__(self, container: str, element: Shape):
        super().__init__(kind=ShapeKind.COLLECTION)
        object.__setattr__(self, 'container', container)
        object.__setattr__(self, 'element', element)

    def __str__(self) -> str:
        return f"{self.container}[{self.element}]"


UNIT = Shape(ShapeKind.UNIT)
CHAR = Shape(ShapeKind.CHAR)
BOOL = Shape(ShapeKind.BOOL)
STR = Shape(ShapeKind.STR)
ANY = Shape(ShapeKind.ANY)

# Shapes addressable by name, e.g. in rule annotations of the notation
NAMED_SHAPES = {
    "unit": UNIT,
    "char": CHAR,
    "bool": BOOL,
    "str": STR,
    "any": ANY,
    "f32": FloatShape(32),
    "f64": FloatShape(64),
    "big_int": IntShape(True, None),
    "big_uint": IntShape(False, None),
}
for _w in (8, 16, 32, 64, 128):
    NAMED_SHAPES[f"u{_w}"] = IntShape(False, _w)
    NAMED_SHAPES[f"i{_w}"] = IntShape(True, _w)
del _w


def produces_value(shape: Shape) -> bool:
    """Whether a node of this shape contributes to its enclosing sequence's value"""
    return shape.kind != ShapeKind.UNIT


def sequence_shape(shapes) -> Shape:
    """Value shape of a sequence whose children have ``shapes``."""
    producing = [s for s in shapes if produces_value(s)]
    if not producing:
        return UNIT
    if len(producing) == 1:
        return producing[0]
    return TupleShape(tuple(producing))


def compatible(a: Shape, b: Shape) -> bool:
    """
    Whether values of shapes ``a`` and ``b`` may appear as alternatives.

    ``ANY`` is compatible with everything. Otherwise shapes must agree
    structurally: integers on signedness and width, tuples on arity.
    """
    if a.kind == ShapeKind.ANY or b.kind == ShapeKind.ANY:
        return True
    if a.kind != b.kind:
        return False
    if isinstance(a, IntShape):
        return a.signed == b.signed and a.width == b.width
    if isinstance(a, FloatShape):
        return a.width == b.width
    if isinstance(a, TupleShape):
        return (len(a.elements) == len(b.elements)
                and all(compatible(x, y) for x, y in zip(a.elements, b.elements)))
    if isinstance(a, CollectionShape):
        return a.container == b.container and compatible(a.element, b.element)
    if isinstance(a, (ListShape, OptionalShape)):
        return compatible(a.element, b.element)
    return True


def unify(a: Shape, b: Shape) -> Shape:
    """Most specific shape covering two compatible shapes."""
    if a.kind == ShapeKind.ANY:
        return b
    if b.kind == ShapeKind.ANY:
        return a
    if isinstance(a, TupleShape):
        return TupleShape(tuple(unify(x, y) for x, y in zip(a.elements, b.elements)))
    if isinstance(a, ListShape):
        return ListShape(unify(a.element, b.element))
    if isinstance(a, OptionalShape):
        return OptionalShape(unify(a.element, b.element))
    if isinstance(a, CollectionShape):
        return CollectionShape(a.container, unify(a.element, b.element))
    return a
