"""
Pattern Transformer

Converts the lark parse tree of pattern notation into pattern IR. Names
resolve, in order, to rules of the same source, the caller's environment,
then the prelude builtins.
"""

import ast
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from lark import Transformer, v_args
from lark.lexer import Token
from typing_extensions import TypeAlias

from ..ir import builders
from ..ir.nodes import (
    PatternIR, LiteralIR, SequenceIR, AlternationIR, RepeatIR, NamedIR, ConvertIR, RuleRefIR,
)
from ..ir.rules import RuleSetBuilder
from ..prelude import BUILTINS
from ..shared.errors import PatternSyntaxError
from ..shared.source_location import SourceLocation
from ..shared.types import ANY, NAMED_SHAPES
from ..utils.config import PATTERN_SOURCE_NAME
from . import mappers as m

LarkMeta: TypeAlias = Any
Arg: TypeAlias = Union[PatternIR, int]

logger: logging.Logger = logging.getLogger("patmatch.frontend.transformer")

_QUANTIFIERS = {"*": (0, None), "+": (1, None), "?": (0, 1)}

# Builtin calls: name -> (number of pattern args, takes a trailing count, builder)
_BUILTIN_CALLS: Dict[str, tuple] = {
    "line": (1, False, builders.line),
    "lines": (1, False, builders.lines),
    "section": (1, False, builders.section),
    "sections": (1, False, builders.sections),
    "string": (1, False, builders.string),
    "skip": (1, False, builders.skip),
    "set_of": (1, False, builders.set_of),
    "dict_of": (1, False, builders.dict_of),
    "deque_of": (1, False, builders.deque_of),
    "sorted_set_of": (1, False, builders.sorted_set_of),
    "sorted_dict_of": (1, False, builders.sorted_dict_of),
    "repeat_sep": (2, False, builders.repeat_sep),
    "repeat_n": (1, True, builders.repeat_n),
    "repeat_sep_n": (2, True, builders.repeat_sep_n),
}


def declared_rules(tree) -> List[tuple]:
    """(name token, shape token or None) of every rule_def in a parse tree."""
    found = []
    for child in tree.children:
        if getattr(child, "data", None) == "rule_def":
            name = child.children[0]
            shape = child.children[1] if len(child.children) == 3 else None
            found.append((name, shape))
    return found


@v_args(inline=True, meta=True)
class PatternTransformer(Transformer):
    """
    Pattern notation transformer.

    Rules are declared by ``PatternParser`` before the tree is transformed
    (lark transforms bottom-up), so rule bodies may refer to any rule.
    """

    def __init__(self, env: Optional[Mapping[str, Any]] = None,
                 current_file: str = PATTERN_SOURCE_NAME, source: str = ""):
        super().__init__()
        self.env: Mapping[str, Any] = env or {}
        self.current_file = current_file
        self.source = source
        self.rules = RuleSetBuilder()
        self._rule_refs: Dict[str, RuleRefIR] = {}

    def _extract_location(self, meta: LarkMeta) -> Optional[SourceLocation]:
        """Extract location from lark meta object"""
        if meta is None or getattr(meta, "empty", True):
            return None
        return SourceLocation(
            file=self.current_file,
            line=meta.line,
            column=meta.column,
            start=meta.start_pos,
            end=meta.end_pos,
            end_line=meta.end_line,
            end_column=meta.end_column,
        )

    def _token_location(self, token: Token) -> SourceLocation:
        return SourceLocation(
            file=self.current_file,
            line=token.line,
            column=token.column,
            start=token.start_pos,
            end=token.end_pos,
            end_line=token.end_line,
            end_column=token.end_column,
        )

    def _error(self, message: str, location: Optional[SourceLocation], **kwargs) -> PatternSyntaxError:
        return PatternSyntaxError(message, location, self.source, **kwargs)

    # =========================================================================
    # RULES
    # =========================================================================

    def declare_rule(self, name: Token, shape: Optional[Token]) -> None:
        location = self._token_location(name)
        if str(name) in self._rule_refs:
            raise self._error(f"rule `{name}` is defined more than once", location)
        if shape is None:
            declared = ANY
        else:
            declared = NAMED_SHAPES.get(str(shape))
            if declared is None:
                raise self._error(f"unknown value shape `{shape}`", self._token_location(shape),
                                  help="use one of: " + ", ".join(sorted(NAMED_SHAPES)))
        self._rule_refs[str(name)] = self.rules.rule(str(name), declared, location=location)
        logger.debug(f"declared rule {name}: {declared}")

    def rule_def(self, meta: LarkMeta, name: Token, *rest) -> None:
        body = rest[-1]
        self.rules.define(self._rule_refs[str(name)], body)
        return None

    def start(self, meta: LarkMeta, *children) -> PatternIR:
        entry = children[-1]
        if not self._rule_refs:
            return entry
        return self.rules.build(entry, location=self._extract_location(meta))

    # =========================================================================
    # PATTERNS
    # =========================================================================

    def seq(self, meta: LarkMeta, *items: PatternIR) -> PatternIR:
        if len(items) == 1:
            return items[0]
        return SequenceIR(items, location=self._extract_location(meta))

    def labeled(self, meta: LarkMeta, label: Token, term: PatternIR) -> NamedIR:
        return NamedIR(str(label), term, location=self._extract_location(meta))

    def term(self, meta: LarkMeta, prim: PatternIR, *quantifiers: Token) -> PatternIR:
        location = self._extract_location(meta)
        result = prim
        for quant in quantifiers:
            if quant.type == "LAZY":
                raise self._error(
                    f"non-greedy quantifier `{quant}` is not supported",
                    self._token_location(quant),
                    help="write `(p*)?` for an optional repetition",
                )
            low, high = _QUANTIFIERS[str(quant)]
            result = RepeatIR(result, low, high, location=location)
        return result

    def empty(self, meta: LarkMeta) -> PatternIR:
        return SequenceIR((), location=self._extract_location(meta))

    def group(self, meta: LarkMeta, expr: PatternIR) -> PatternIR:
        return expr

    def literal(self, meta: LarkMeta, token: Token) -> LiteralIR:
        return LiteralIR(self._string_value(token), location=self._extract_location(meta))

    def alternation(self, meta: LarkMeta, *alternatives: PatternIR) -> AlternationIR:
        return AlternationIR(alternatives, location=self._extract_location(meta))

    def name(self, meta: LarkMeta, token: Token) -> PatternIR:
        name = str(token)
        location = self._extract_location(meta)
        if name in self._rule_refs:
            ref = self._rule_refs[name]
            return RuleRefIR(ref.table, name, ref.shape, location=location)
        if name in self.env:
            value = self.env[name]
            if isinstance(value, str):
                return LiteralIR(value, location=location)
            if isinstance(value, PatternIR):
                return value
            raise self._error(f"`{name}` is a {type(value).__name__}, not a pattern", location)
        if name in BUILTINS:
            return BUILTINS[name]
        raise self._error(f"unknown pattern `{name}`", location)

    def mapped(self, meta: LarkMeta, child: PatternIR, body: m.MapperExpr) -> ConvertIR:
        location = self._extract_location(meta)

        def lookup(name: str) -> m.MapperExpr:
            if name in self.env:
                return m.Global(name, self.env[name])
            if name in m.SAFE_BUILTINS:
                return m.Global(name, m.SAFE_BUILTINS[name])
            raise self._error(f"unknown name `{name}` in mapper", location,
                              help="label a part of the pattern, e.g. `n:u64`, to use it here")

        body = m.resolve(body, child.binding.possible, lookup)
        params = m.captures(body)
        text = self._mapper_text(meta)
        return ConvertIR(child, m.Mapper(params, body, text), params, location=location)

    # -- calls ----------------------------------------------------------------

    def args(self, meta: LarkMeta, *args: Arg) -> List[Arg]:
        return list(args)

    def int_arg(self, meta: LarkMeta, token: Token) -> int:
        return int(token)

    def call(self, meta: LarkMeta, name: Token, args: List[Arg]) -> PatternIR:
        location = self._extract_location(meta)
        fname = str(name)
        if fname == "char_of":
            if len(args) != 1 or not isinstance(args[0], LiteralIR):
                raise self._error("char_of takes a single string", location)
            return builders.char_of(args[0].text)
        if fname in _BUILTIN_CALLS:
            return self._builtin_call(fname, args, location)
        fn = self.env.get(fname)
        if fn is None or not callable(fn):
            raise self._error(f"unknown function `{fname}`", location)
        return self._user_call(fname, fn, args, location)

    def _builtin_call(self, fname: str, args: List[Arg], location) -> PatternIR:
        n_patterns, takes_count, build = _BUILTIN_CALLS[fname]
        expected = n_patterns + (1 if takes_count else 0)
        if len(args) != expected:
            raise self._error(f"{fname} takes {expected} argument(s), got {len(args)}", location)
        patterns, count = args[:n_patterns], args[n_patterns:]
        if not all(isinstance(a, PatternIR) for a in patterns):
            raise self._error(f"{fname} takes pattern arguments", location)
        if takes_count and not isinstance(count[0], int):
            raise self._error(f"last argument of {fname} must be a number", location)
        return build(*args)

    def _user_call(self, fname: str, fn: Callable[..., Any], args: List[Arg], location) -> PatternIR:
        result = fn(*args)
        if isinstance(result, str):
            return LiteralIR(result, location=location)
        if not isinstance(result, PatternIR):
            raise self._error(f"`{fname}` returned a {type(result).__name__}, not a pattern", location)
        return result

    # =========================================================================
    # MAPPERS
    # =========================================================================

    def mapper_args(self, meta: LarkMeta, *items: m.MapperExpr) -> List[m.MapperExpr]:
        return list(items)

    def m_call(self, meta: LarkMeta, name: Token, args: Optional[List[m.MapperExpr]] = None) -> m.Call:
        return m.Call(self._mapper_name(str(name), meta), tuple(args or ()))

    def m_unit(self, meta: LarkMeta) -> m.Const:
        return m.Const(())

    def m_paren(self, meta: LarkMeta, inner: m.MapperExpr) -> m.MapperExpr:
        return inner

    def m_tuple(self, meta: LarkMeta, first: m.MapperExpr,
                rest: Optional[List[m.MapperExpr]] = None) -> m.TupleExpr:
        return m.TupleExpr((first,) + tuple(rest or ()))

    def m_list(self, meta: LarkMeta, items: Optional[List[m.MapperExpr]] = None) -> m.ListExpr:
        return m.ListExpr(tuple(items or ()))

    def m_name(self, meta: LarkMeta, token: Token) -> m.MapperExpr:
        return self._mapper_name(str(token), meta)

    def m_number(self, meta: LarkMeta, token: Token) -> m.Const:
        text = str(token)
        try:
            return m.Const(int(text))
        except ValueError:
            return m.Const(float(text))

    def m_string(self, meta: LarkMeta, token: Token) -> m.Const:
        return m.Const(self._string_value(token))

    def _mapper_name(self, name: str, meta: LarkMeta) -> m.MapperExpr:
        # Labels are only known at the enclosing `mapped` node, which
        # resolves every other name.
        if name in m.CONSTANTS:
            return m.Const(m.CONSTANTS[name])
        return m.Capture(name)

    def _mapper_text(self, meta: LarkMeta) -> str:
        if not self.source or getattr(meta, "empty", True):
            return ""
        text = self.source[meta.start_pos:meta.end_pos]
        _, _, mapper = text.rpartition("=>")
        return " ".join(mapper.split())

    # =========================================================================
    # TOKENS
    # =========================================================================

    def _string_value(self, token: Token) -> str:
        try:
            value = ast.literal_eval(str(token))
        except (ValueError, SyntaxError) as e:
            raise self._error(f"invalid string literal {token}", self._token_location(token)) from e
        return value
