"""Checked integer arithmetic for reserve- and supply-scaled quantities.

Amounts are u64 at the boundary; every intermediate product is computed at
u128 width. Python ints never wrap, so each helper enforces the width
explicitly and raises ``ArithmeticOverflowError`` instead.
"""

from __future__ import annotations

import math

from .errors import ArithmeticOverflowError

U64_MAX: int = (1 << 64) - 1
U128_MAX: int = (1 << 128) - 1


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def require_u64(name: str, value: int) -> int:
    """Validate that *value* is an amount representable as u64."""
    _require_int(name, value)
    if value < 0:
        raise ArithmeticOverflowError(f"{name} must be non-negative: {value}")
    if value > U64_MAX:
        raise ArithmeticOverflowError(f"{name} exceeds u64: {value}")
    return value


def _check_width(op: str, result: int, limit: int) -> int:
    if result > limit:
        raise ArithmeticOverflowError(f"{op} overflow: {result} > {limit}")
    return result


def checked_add(a: int, b: int, *, limit: int = U128_MAX) -> int:
    _require_int("a", a)
    _require_int("b", b)
    return _check_width("add", a + b, limit)


def checked_sub(a: int, b: int) -> int:
    _require_int("a", a)
    _require_int("b", b)
    if b > a:
        raise ArithmeticOverflowError(f"sub underflow: {a} - {b}")
    return a - b


def checked_mul(a: int, b: int, *, limit: int = U128_MAX) -> int:
    _require_int("a", a)
    _require_int("b", b)
    return _check_width("mul", a * b, limit)


def checked_div(numerator: int, denominator: int) -> int:
    """Floor division that treats a zero denominator as an arithmetic error."""
    _require_int("numerator", numerator)
    _require_int("denominator", denominator)
    if denominator == 0:
        raise ArithmeticOverflowError("division by zero")
    if numerator < 0 or denominator < 0:
        raise ArithmeticOverflowError("operands must be non-negative")
    return numerator // denominator


def ceil_div(numerator: int, denominator: int) -> int:
    if denominator == 0:
        raise ArithmeticOverflowError("division by zero")
    q = checked_div(numerator, denominator)
    if q * denominator != numerator:
        q += 1
    return q


def isqrt(value: int) -> int:
    """Exact floor square root (no float round-trip)."""
    _require_int("value", value)
    if value < 0:
        raise ArithmeticOverflowError(f"isqrt of negative value: {value}")
    return math.isqrt(value)
