"""
Swap fee deduction (deterministic, integer-only).

The fee is charged on the gross input with floor rounding:

    fee = floor(amount_in * numerator / denominator)
    net = amount_in - fee

The fee is never moved on its own; the gross input lands in the input vault,
so the fee accrues to share holders through the reserves.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..numeric import checked_div, checked_mul, checked_sub, require_u64


@dataclass(frozen=True)
class FeeRate:
    numerator: int
    denominator: int

    def __post_init__(self) -> None:
        for name, v in (("numerator", self.numerator), ("denominator", self.denominator)):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
        if self.denominator <= 0:
            raise ValueError(f"denominator must be positive: {self.denominator}")
        if not (0 <= self.numerator <= self.denominator):
            raise ValueError(
                f"numerator must be in [0, {self.denominator}]: {self.numerator}"
            )

    def __str__(self) -> str:
        return f"{self.numerator}/{self.denominator}"


# 30 / 1000 = 3%
DEFAULT_FEE_RATE = FeeRate(numerator=30, denominator=1000)


@dataclass(frozen=True)
class FeeResult:
    gross_in: int
    fee: int
    net_in: int


def compute_fee(amount_in: int, rate: FeeRate = DEFAULT_FEE_RATE) -> int:
    """Return ``floor(amount_in * rate)``; always within ``[0, amount_in]``."""
    require_u64("amount_in", amount_in)
    return checked_div(checked_mul(amount_in, rate.numerator), rate.denominator)


def deduct_fee(amount_in: int, rate: FeeRate = DEFAULT_FEE_RATE) -> int:
    """Return the net amount left for pricing after the fee is withheld."""
    return checked_sub(amount_in, compute_fee(amount_in, rate))


def apply_fee(amount_in: int, rate: FeeRate = DEFAULT_FEE_RATE) -> FeeResult:
    fee = compute_fee(amount_in, rate)
    return FeeResult(gross_in=amount_in, fee=fee, net_in=checked_sub(amount_in, fee))
