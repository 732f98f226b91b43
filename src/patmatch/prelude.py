"""
Ready-made primitive patterns.

Integers come in every width, signed (``i*``) and unsigned (``u*``), in
decimal and with ``_bin`` / ``_hex`` variants; ``big_int`` / ``big_uint``
never overflow. Digit classes produce the digit's numeric value, the other
character classes the character itself.
"""

from typing import Dict

from .engine import primitives as p
from .ir.builders import (  # noqa: F401  (re-exported)
    alt, as_pattern, char_of, convert, deque_of, dict_of, empty, line, lines, lit, named, opt,
    plus, repeat, repeat_n, repeat_sep, repeat_sep_n, section, sections, seq, set_of, skip,
    sorted_dict_of, sorted_set_of, star, string,
)
from .ir.nodes import BoolIR, CharClassIR, FloatIR, IntegerIR, PatternIR
from .utils.config import INTEGER_WIDTHS, PLATFORM_INT_WIDTH

# Every named primitive, as the pattern notation sees them
BUILTINS: Dict[str, PatternIR] = {}

for _width in INTEGER_WIDTHS:
    for _signed, _prefix in ((False, "u"), (True, "i")):
        for _base, _suffix in ((10, ""), (2, "_bin"), (16, "_hex")):
            _name = f"{_prefix}{_width}{_suffix}"
            BUILTINS[_name] = IntegerIR(_signed, _base, _width, _name)

for _signed, _prefix in ((False, "usize"), (True, "isize")):
    for _base, _suffix in ((10, ""), (2, "_bin"), (16, "_hex")):
        BUILTINS[_prefix + _suffix] = IntegerIR(_signed, _base, PLATFORM_INT_WIDTH, _prefix + _suffix)

for _signed, _prefix in ((False, "big_uint"), (True, "big_int")):
    for _base, _suffix in ((10, ""), (2, "_bin"), (16, "_hex")):
        BUILTINS[_prefix + _suffix] = IntegerIR(_signed, _base, None, _prefix + _suffix)

BUILTINS.update({
    "f32": FloatIR(32),
    "f64": FloatIR(64),
    "bool": BoolIR(),
    "alpha": CharClassIR("letter", p.is_alpha),
    "alnum": CharClassIR("letter or digit", p.is_alnum),
    "upper": CharClassIR("uppercase letter", p.is_upper),
    "lower": CharClassIR("lowercase letter", p.is_lower),
    "any_char": CharClassIR("any character", p.is_any),
    "digit": CharClassIR("decimal digit", p.is_digit, base=10),
    "digit_bin": CharClassIR("binary digit", p.is_bin_digit, base=2),
    "digit_hex": CharClassIR("hexadecimal digit", p.is_hex_digit, base=16),
})

del _width, _signed, _prefix, _base, _suffix, _name

u8 = BUILTINS["u8"]
u16 = BUILTINS["u16"]
u32 = BUILTINS["u32"]
u64 = BUILTINS["u64"]
u128 = BUILTINS["u128"]
usize = BUILTINS["usize"]
i8 = BUILTINS["i8"]
i16 = BUILTINS["i16"]
i32 = BUILTINS["i32"]
i64 = BUILTINS["i64"]
i128 = BUILTINS["i128"]
isize = BUILTINS["isize"]

u8_bin, u8_hex = BUILTINS["u8_bin"], BUILTINS["u8_hex"]
u16_bin, u16_hex = BUILTINS["u16_bin"], BUILTINS["u16_hex"]
u32_bin, u32_hex = BUILTINS["u32_bin"], BUILTINS["u32_hex"]
u64_bin, u64_hex = BUILTINS["u64_bin"], BUILTINS["u64_hex"]
u128_bin, u128_hex = BUILTINS["u128_bin"], BUILTINS["u128_hex"]
usize_bin, usize_hex = BUILTINS["usize_bin"], BUILTINS["usize_hex"]
i8_bin, i8_hex = BUILTINS["i8_bin"], BUILTINS["i8_hex"]
i16_bin, i16_hex = BUILTINS["i16_bin"], BUILTINS["i16_hex"]
i32_bin, i32_hex = BUILTINS["i32_bin"], BUILTINS["i32_hex"]
i64_bin, i64_hex = BUILTINS["i64_bin"], BUILTINS["i64_hex"]
i128_bin, i128_hex = BUILTINS["i128_bin"], BUILTINS["i128_hex"]
isize_bin, isize_hex = BUILTINS["isize_bin"], BUILTINS["isize_hex"]

big_int = BUILTINS["big_int"]
big_uint = BUILTINS["big_uint"]
big_int_bin, big_int_hex = BUILTINS["big_int_bin"], BUILTINS["big_int_hex"]
big_uint_bin, big_uint_hex = BUILTINS["big_uint_bin"], BUILTINS["big_uint_hex"]

f32 = BUILTINS["f32"]
f64 = BUILTINS["f64"]
boolean = BUILTINS["bool"]

alpha = BUILTINS["alpha"]
alnum = BUILTINS["alnum"]
upper = BUILTINS["upper"]
lower = BUILTINS["lower"]
any_char = BUILTINS["any_char"]
digit = BUILTINS["digit"]
digit_bin = BUILTINS["digit_bin"]
digit_hex = BUILTINS["digit_hex"]
