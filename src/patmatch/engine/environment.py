"""
Binding Environment

Scope stack for named captures during conversion. Every conversion node and
every rule reference pushes a fresh scope; captures bind into the top scope
and conversions read only from it, so sibling and nested scopes never see
each other's names.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List

from ..shared.errors import PatmatchImplementationError


class BindingEnvironment:
    """
    - enter_scope(): push new scope (conversion node or rule body)
    - exit_scope(): pop
    - set_value(name, value): store in current (top) scope
    - get_value(name): lookup in current (top) scope only
    """
    _scope_stack: List[Dict[str, Any]]

    def __init__(self):
        self._scope_stack = [{}]  # top-level scope, for captures outside any conversion

    def enter_scope(self) -> None:
        self._scope_stack.append({})

    def exit_scope(self) -> None:
        if len(self._scope_stack) <= 1:
            raise PatmatchImplementationError("Cannot exit scope: no active conversion scope")
        self._scope_stack.pop()

    @contextmanager
    def scope(self) -> Iterator[Dict[str, Any]]:
        """Context manager: enter scope on enter, exit scope on exit (always, including on exception)."""
        self.enter_scope()
        try:
            yield self._scope_stack[-1]
        finally:
            self.exit_scope()

    def set_value(self, name: str, value: Any) -> None:
        self._scope_stack[-1][name] = value

    def get_value(self, name: str) -> Any:
        scope = self._scope_stack[-1]
        if name not in scope:
            raise PatmatchImplementationError(f"capture `{name}` was not bound before conversion")
        return scope[name]

    @property
    def depth(self) -> int:
        return len(self._scope_stack)
