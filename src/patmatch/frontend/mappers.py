"""
Mapper expressions: the right-hand side of ``pattern => mapper``.

A mapper compiles to a small immutable expression tree wrapped in a
``Mapper`` callable. Being plain frozen dataclasses, two mappers built from
the same text compare equal, so patterns built twice stay equal.
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class MapperExpr:
    def evaluate(self, env: Dict[str, Any]) -> Any:
        raise NotImplementedError(f"evaluate() not implemented for {self.__class__.__name__}")


@dataclass(frozen=True)
class Const(MapperExpr):
    value: Any

    def evaluate(self, env: Dict[str, Any]) -> Any:
        return self.value


@dataclass(frozen=True)
class Capture(MapperExpr):
    """A labeled capture of the mapped pattern"""
    name: str

    def evaluate(self, env: Dict[str, Any]) -> Any:
        return env[self.name]


@dataclass(frozen=True)
class Global(MapperExpr):
    """A value from the caller's environment or a builtin"""
    name: str
    value: Any

    def evaluate(self, env: Dict[str, Any]) -> Any:
        return self.value


@dataclass(frozen=True)
class Call(MapperExpr):
    function: MapperExpr
    args: Tuple[MapperExpr, ...]

    def evaluate(self, env: Dict[str, Any]) -> Any:
        fn = self.function.evaluate(env)
        return fn(*(a.evaluate(env) for a in self.args))


@dataclass(frozen=True)
class TupleExpr(MapperExpr):
    items: Tuple[MapperExpr, ...]

    def evaluate(self, env: Dict[str, Any]) -> Any:
        return tuple(i.evaluate(env) for i in self.items)


@dataclass(frozen=True)
class ListExpr(MapperExpr):
    items: Tuple[MapperExpr, ...]

    def evaluate(self, env: Dict[str, Any]) -> Any:
        return [i.evaluate(env) for i in self.items]


def captures(expr: MapperExpr) -> Tuple[str, ...]:
    """Capture names used by ``expr``, in order of first use."""
    found = []
    stack = [expr]
    while stack:
        node = stack.pop()
        if isinstance(node, Capture):
            if node.name not in found:
                found.append(node.name)
        elif isinstance(node, Call):
            stack.extend(reversed(node.args))
            stack.append(node.function)
        elif isinstance(node, (TupleExpr, ListExpr)):
            stack.extend(reversed(node.items))
    return tuple(found)


@dataclass(frozen=True)
class Mapper:
    """Callable taking the captured values in ``params`` order."""
    params: Tuple[str, ...]
    body: MapperExpr
    text: str = ""

    @property
    def __name__(self) -> str:
        return f"=> {self.text}" if self.text else "mapper"

    def __call__(self, *args: Any) -> Any:
        return self.body.evaluate(dict(zip(self.params, args)))


# Builtins a mapper may call without the caller providing them
SAFE_BUILTINS = {
    fn.__name__: fn
    for fn in (abs, bool, chr, dict, float, frozenset, int, len, list, max, min, ord,
               range, reversed, set, sorted, str, sum, tuple)
}

CONSTANTS = {"None": None, "True": True, "False": False}


def resolve(expr: MapperExpr, bound, lookup) -> MapperExpr:
    """
    Replace captures not in ``bound`` by ``lookup(name)`` (a ``MapperExpr``).
    Captures of names the pattern binds are kept.
    """
    if isinstance(expr, Capture):
        return expr if expr.name in bound else lookup(expr.name)
    if isinstance(expr, Call):
        return Call(resolve(expr.function, bound, lookup),
                    tuple(resolve(a, bound, lookup) for a in expr.args))
    if isinstance(expr, TupleExpr):
        return TupleExpr(tuple(resolve(i, bound, lookup) for i in expr.items))
    if isinstance(expr, ListExpr):
        return ListExpr(tuple(resolve(i, bound, lookup) for i in expr.items))
    return expr
