"""
Binding scope analysis for named captures.

Each pattern node carries a ``BindingInfo`` summarizing the names its
subtree binds into the innermost enclosing conversion scope:

- ``definite``: bound on every successful match (safe to pass to a conversion)
- ``possible``: bound on some successful match
- ``nested``: bound inside a nested conversion scope (hidden from this one)

The summaries compose bottom-up, so every scope rule is enforced while the
pattern is being built.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from typing import FrozenSet, Iterable, Optional, Sequence

from .errors import BindingError

_EMPTY: FrozenSet[str] = frozenset()


def _names(names: Iterable[str]) -> str:
    return ", ".join(f"`{n}`" for n in sorted(names))


@dataclass(frozen=True)
class BindingInfo:
    """Names bound by a pattern subtree (see module docstring)."""
    definite: FrozenSet[str] = _EMPTY
    possible: FrozenSet[str] = _EMPTY
    nested: FrozenSet[str] = _EMPTY

    @classmethod
    def empty(cls) -> BindingInfo:
        return _NO_BINDINGS

    def named(self, name: str) -> BindingInfo:
        """Summary of ``Named(name, <node with this summary>)``."""
        if name in self.possible:
            raise BindingError(f"name {_names([name])} is bound more than once in the same scope")
        if name in self.nested:
            raise BindingError(f"name {_names([name])} shadows a binding of a nested conversion")
        return BindingInfo(self.definite | {name}, self.possible | {name}, self.nested)

    @classmethod
    def sequence(cls, parts: Sequence[BindingInfo]) -> BindingInfo:
        seen: FrozenSet[str] = _EMPTY
        for part in parts:
            dup = seen & part.possible
            if dup:
                raise BindingError(f"name {_names(dup)} is bound more than once in the same scope")
            seen = seen | part.possible
        nested = reduce(lambda acc, p: acc | p.nested, parts, _EMPTY)
        clash = seen & nested
        if clash:
            raise BindingError(f"name {_names(clash)} shadows a binding of a nested conversion")
        definite = reduce(lambda acc, p: acc | p.definite, parts, _EMPTY)
        return BindingInfo(definite, seen, nested)

    @classmethod
    def alternation(cls, parts: Sequence[BindingInfo]) -> BindingInfo:
        if not parts:
            return _NO_BINDINGS
        definite = reduce(lambda acc, p: acc & p.definite, parts[1:], parts[0].definite)
        possible = reduce(lambda acc, p: acc | p.possible, parts, _EMPTY)
        nested = reduce(lambda acc, p: acc | p.nested, parts, _EMPTY)
        clash = possible & nested
        if clash:
            raise BindingError(f"name {_names(clash)} shadows a binding of a nested conversion")
        return BindingInfo(definite, possible, nested)

    def repeated(self) -> BindingInfo:
        """A repeated subtree may run zero times, so nothing is definitely bound."""
        return BindingInfo(_EMPTY, self.possible, self.nested)

    def converted(self, bindings: Optional[Sequence[str]]) -> BindingInfo:
        """
        Close a conversion scope over this subtree.

        Every name the conversion consumes must be definitely bound by its
        child. Afterwards the child's names are hidden from outer scopes.
        """
        if bindings is not None:
            seen = set()
            for name in bindings:
                if name in seen:
                    raise BindingError(f"conversion lists {_names([name])} more than once")
                seen.add(name)
                if name in self.definite:
                    continue
                if name in self.possible:
                    raise BindingError(
                        f"name {_names([name])} may not be bound on every match",
                        help="bindings under a repetition or in only some alternatives "
                             "cannot be passed to a conversion",
                    )
                raise BindingError(f"conversion refers to unknown name {_names([name])}")
        clash = self.possible & self.nested
        if clash:
            raise BindingError(f"name {_names(clash)} shadows a binding of a nested conversion")
        return BindingInfo(_EMPTY, _EMPTY, self.nested | self.possible)


_NO_BINDINGS = BindingInfo()
