"""
Rule sets: named, possibly mutually recursive patterns.

A rule is declared first (yielding a ``RuleRefIR`` that can be used
anywhere) and given its body later, so a rule may refer to itself.
"""

import logging
from typing import Dict, Optional

from ..shared.errors import PatternError, ShapeError
from ..shared.source_location import SourceLocation
from ..shared.types import Shape, ANY, compatible
from .nodes import PatternIR, RuleRefIR, RuleSetIR

logger = logging.getLogger("patmatch.ir.rules")


class RuleTable:
    """Rule name -> body. Compared by identity."""

    def __init__(self):
        self._bodies: Dict[str, Optional[PatternIR]] = {}
        self._shapes: Dict[str, Shape] = {}

    def declare(self, name: str, shape: Shape) -> None:
        if name in self._bodies:
            raise PatternError(f"rule `{name}` is declared twice")
        self._bodies[name] = None
        self._shapes[name] = shape

    def assign(self, name: str, body: PatternIR) -> None:
        if name not in self._bodies:
            raise PatternError(f"rule `{name}` was never declared")
        if self._bodies[name] is not None:
            raise PatternError(f"rule `{name}` already has a body")
        self._bodies[name] = body

    def body(self, name: str) -> PatternIR:
        body = self._bodies.get(name)
        if body is None:
            raise PatternError(f"rule `{name}` has no body")
        return body

    def names(self):
        return list(self._bodies)

    def undefined(self):
        return [name for name, body in self._bodies.items() if body is None]

    def __contains__(self, name: str) -> bool:
        return name in self._bodies

    def __len__(self) -> int:
        return len(self._bodies)


class RuleSetBuilder:
    """
    Builds a ``RuleSetIR``.

    Usage::

        rules = RuleSetBuilder()
        value = rules.rule("value")
        rules.define(value, alt(u64, seq("[", repeat_sep(value, ","), "]")))
        pattern = rules.build(value)
    """

    def __init__(self):
        self.table = RuleTable()
        self._built = False

    def rule(self, name: str, shape: Shape = ANY,
             location: Optional[SourceLocation] = None) -> RuleRefIR:
        """Declare a rule and return a reference to it."""
        self._check_open()
        self.table.declare(name, shape)
        return RuleRefIR(self.table, name, shape, location=location)

    def define(self, ref: RuleRefIR, body: PatternIR) -> None:
        """Give a declared rule its body."""
        self._check_open()
        if not isinstance(ref, RuleRefIR) or ref.table is not self.table:
            raise PatternError("can only define rules declared by this builder")
        if not isinstance(body, PatternIR):
            raise PatternError(f"body of rule `{ref.name}` must be a pattern")
        if not compatible(ref.shape, body.shape):
            raise ShapeError(
                f"rule `{ref.name}` is declared as `{ref.shape}` but its body produces `{body.shape}`",
                location=body.location or ref.location,
            )
        self.table.assign(ref.name, body)

    def build(self, entry: PatternIR, location: Optional[SourceLocation] = None) -> RuleSetIR:
        """Close the set. Every declared rule must have a body."""
        self._check_open()
        missing = self.table.undefined()
        if missing:
            names = ", ".join(f"`{n}`" for n in missing)
            raise PatternError(f"rules declared but never defined: {names}", location=location)
        self._built = True
        logger.debug(f"built rule set with {len(self.table)} rule(s)")
        return RuleSetIR(self.table, entry, location=location)

    def _check_open(self) -> None:
        if self._built:
            raise PatternError("rule set is already built")
