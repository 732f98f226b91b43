"""
Pattern IR: immutable pattern nodes, their builders, rule sets and the
s-expression dump.
"""

from .nodes import (
    PatternIR, PatternVisitor,
    LiteralIR, CharClassIR, CharOfIR, IntegerIR, FloatIR, BoolIR,
    SequenceIR, AlternationIR, RepeatIR, RepeatSeparatedIR, NamedIR, ConvertIR,
    LineIR, SectionIR, StringIR, CollectIR, RuleRefIR, RuleSetIR,
)
from .rules import RuleSetBuilder, RuleTable
from .serialization import dump
