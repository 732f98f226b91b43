"""
Pattern IR Serialization to S-Expressions
=========================================

Converts pattern IR to a canonical S-expression form for debugging and
golden tests. Keywords are ``sexpdata.Symbol`` (unquoted); text is quoted.

    (seq (literal "x=") (repeat (integer "i32") 0 1) (literal ";"))
"""

from typing import Any, List

import sexpdata

from .nodes import PatternIR


def _pretty_dumps(sexpr: Any, indent: int = 0, indent_str: str = "  ", max_line: int = 100) -> str:
    """
    Pretty-print structured sexpr. Keeps short forms on one line; breaks only when needed.
    """
    if sexpr is None:
        return "nil"
    if isinstance(sexpr, bool):
        return "true" if sexpr else "false"
    if isinstance(sexpr, (int, float)):
        return str(sexpr)
    # Check Symbol before str (sexpdata.Symbol subclasses str)
    if isinstance(sexpr, sexpdata.Symbol):
        return sexpr.value()
    if isinstance(sexpr, str):
        escaped = sexpr.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
        return f'"{escaped}"'
    if isinstance(sexpr, list):
        if not sexpr:
            return "()"
        parts = [_pretty_dumps(e, indent + 1, indent_str, max_line) for e in sexpr]
        one_line = "(" + " ".join(parts) + ")"
        if len(one_line) <= max_line and "\n" not in one_line:
            return one_line
        prefix = indent_str * indent
        next_prefix = indent_str * (indent + 1)
        rest = "\n".join(next_prefix + p for p in parts[1:])
        inner = parts[0] + ("\n" + rest if rest else "")
        return f"({inner}\n{prefix})"
    return str(sexpr)


def dump(node: PatternIR, pretty: bool = True, include_location: bool = False,
         include_shape: bool = False) -> str:
    """
    Serialize a pattern to an S-expression string.

    Args:
        node: pattern to serialize
        pretty: indent nested forms that do not fit one line (default True)
        include_location: add ``:loc`` for nodes built from notation
        include_shape: add ``:shape`` with each node's value shape
    """
    serializer = PatternSerializer(include_location=include_location, include_shape=include_shape)
    sexpr = serializer.serialize_to_sexpr(node)
    if pretty:
        return _pretty_dumps(sexpr)
    return sexpdata.dumps(sexpr)


class PatternSerializer:
    """Pattern IR to structured S-expression (nested lists + ``sexpdata.Symbol``)."""

    def __init__(self, include_location: bool = False, include_shape: bool = False):
        self.include_location = include_location
        self.include_shape = include_shape

    def _sym(self, s: str) -> Any:
        return sexpdata.Symbol(s)

    def serialize_to_sexpr(self, node: Any) -> Any:
        if node is None:
            return self._sym("nil")
        method = getattr(self, f"_serialize_{type(node).__name__}", None)
        if method is None:
            return [self._sym(type(node).__name__), self._sym("...")]
        return self._add_metadata(node, method(node))

    def _add_metadata(self, node: PatternIR, core: list) -> list:
        result = list(core)
        if self.include_shape:
            result.extend([self._sym(":shape"), str(node.shape)])
        if self.include_location and node.location is not None:
            loc = node.location
            result.extend([self._sym(":loc"), [loc.file, loc.line, loc.column]])
        return result

    def _children(self, nodes) -> List[Any]:
        return [self.serialize_to_sexpr(n) for n in nodes]

    def _count(self, value) -> Any:
        return self._sym("inf") if value is None else value

    @staticmethod
    def _fn_name(fn: Any) -> str:
        return getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None) or repr(fn)

    # === Primitives ===

    def _serialize_LiteralIR(self, node) -> list:
        return [self._sym("literal"), node.text]

    def _serialize_CharClassIR(self, node) -> list:
        core = [self._sym("char-class"), node.name]
        if node.base is not None:
            core.extend([self._sym(":base"), node.base])
        return core

    def _serialize_CharOfIR(self, node) -> list:
        return [self._sym("char-of"), node.options]

    def _serialize_IntegerIR(self, node) -> list:
        return [self._sym("integer"), node.name]

    def _serialize_FloatIR(self, node) -> list:
        return [self._sym("float"), node.name]

    def _serialize_BoolIR(self, node) -> list:
        return [self._sym("bool")]

    # === Combinators ===

    def _serialize_SequenceIR(self, node) -> list:
        return [self._sym("seq")] + self._children(node.children)

    def _serialize_AlternationIR(self, node) -> list:
        return [self._sym("alt")] + self._children(node.children)

    def _serialize_RepeatIR(self, node) -> list:
        return [self._sym("repeat"), self.serialize_to_sexpr(node.child),
                node.min_count, self._count(node.max_count)]

    def _serialize_RepeatSeparatedIR(self, node) -> list:
        return [self._sym("repeat-sep"), self.serialize_to_sexpr(node.child),
                self.serialize_to_sexpr(node.separator),
                node.min_count, self._count(node.max_count)]

    def _serialize_NamedIR(self, node) -> list:
        return [self._sym("named"), node.name, self.serialize_to_sexpr(node.child)]

    def _serialize_ConvertIR(self, node) -> list:
        core = [self._sym("convert"), self.serialize_to_sexpr(node.child),
                self._fn_name(node.user_fn)]
        if node.bindings is not None:
            core.extend([self._sym(":bindings"), list(node.bindings)])
        return core

    def _serialize_LineIR(self, node) -> list:
        return [self._sym("line"), self.serialize_to_sexpr(node.child)]

    def _serialize_SectionIR(self, node) -> list:
        return [self._sym("section"), self.serialize_to_sexpr(node.child)]

    def _serialize_StringIR(self, node) -> list:
        return [self._sym("string"), self.serialize_to_sexpr(node.child)]

    def _serialize_CollectIR(self, node) -> list:
        return [self._sym("collect"), self._sym(node.container), self.serialize_to_sexpr(node.child)]

    # === Rules ===

    def _serialize_RuleRefIR(self, node) -> list:
        return [self._sym("rule-ref"), node.name]

    def _serialize_RuleSetIR(self, node) -> list:
        rules = [[self._sym("rule"), name, self.serialize_to_sexpr(node.table.body(name))]
                 for name in node.table.names()]
        return [self._sym("rule-set"), rules, self.serialize_to_sexpr(node.entry)]
