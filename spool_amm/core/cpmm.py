"""
Constant Product Market Maker (CPMM) swap pricing.

Pricing operates on the curve ``x * y = k`` with checked u128 intermediates:

    curve point       y' = k / (x + dx)
    new_reserve_out      = ceil(k / (x + dx))
    amount_out           = y - new_reserve_out   (== floor(y * dx / (x + dx)))

Rounding the post-swap output reserve up means integer flooring can only
leave value in the pool, never hand it to the trader.

Invariant: after each swap, (x + dx) * (y - amount_out) >= x * y
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from ..errors import ArithmeticOverflowError, InvalidVaultError, InvariantViolationError
from ..numeric import (
    U64_MAX,
    ceil_div,
    checked_add,
    checked_div,
    checked_mul,
    checked_sub,
    require_u64,
)
from ..state.pools import HolderId, Pool
from .fees import DEFAULT_FEE_RATE, FeeRate, apply_fee


class SwapDirection(Enum):
    A_TO_B = "A_TO_B"
    B_TO_A = "B_TO_A"


class InvariantPolicy(Enum):
    """How the post-swap reserve product is compared against the pre-swap one."""

    MONOTONIC = "MONOTONIC"  # k_after >= k_before
    EXACT = "EXACT"  # k_after == k_before


@dataclass(frozen=True)
class SwapQuote:
    amount_out: int
    net_in: int
    new_reserve_in: int
    new_reserve_out: int
    k_before: int
    k_after: int
    fee: int = 0


def vaults_for(pool: Pool, direction: SwapDirection) -> Tuple[HolderId, HolderId]:
    """Return (input_vault, output_vault) for a direction."""
    if direction is SwapDirection.A_TO_B:
        return pool.vault_a, pool.vault_b
    if direction is SwapDirection.B_TO_A:
        return pool.vault_b, pool.vault_a
    raise ValueError(f"unknown swap direction: {direction!r}")


def resolve_direction(pool: Pool, input_vault: HolderId, output_vault: HolderId) -> SwapDirection:
    """
    Map an (input_vault, output_vault) pair onto a swap direction.

    Only (vault_a, vault_b) and (vault_b, vault_a) are legitimate. The output
    side is reported when the input vault is valid but the output vault is not
    its counterpart (including the input vault itself).

    Raises:
        InvalidVaultError: On any other pairing
    """
    if input_vault == pool.vault_a:
        if output_vault != pool.vault_b:
            raise InvalidVaultError("output", output_vault)
        return SwapDirection.A_TO_B
    if input_vault == pool.vault_b:
        if output_vault != pool.vault_a:
            raise InvalidVaultError("output", output_vault)
        return SwapDirection.B_TO_A
    raise InvalidVaultError("input", input_vault)


def curve_reserve_out(input_reserve: int, output_reserve: int, net_input_amount: int) -> int:
    """Floored curve point ``floor(x * y / (x + dx))`` for the output reserve."""
    k = checked_mul(input_reserve, output_reserve)
    return checked_div(k, checked_add(input_reserve, net_input_amount))


def check_invariant(k_before: int, k_after: int, policy: InvariantPolicy = InvariantPolicy.MONOTONIC) -> None:
    """
    Raises:
        InvariantViolationError: If ``k_after`` fails ``policy`` against ``k_before``
    """
    if policy is InvariantPolicy.EXACT:
        ok = k_after == k_before
    else:
        ok = k_after >= k_before
    if not ok:
        raise InvariantViolationError(k_before, k_after, policy.value)


def price_swap(
    input_reserve: int,
    output_reserve: int,
    net_input_amount: int,
    *,
    policy: InvariantPolicy = InvariantPolicy.MONOTONIC,
) -> SwapQuote:
    """
    Price an exact-in swap whose fee has already been deducted.

    ``floor(x * y / (x + dx))`` (909 for 1000/1000/100) is the output reserve
    left after the swap, not the payout; the released amount is
    ``y - ceil(x * y / (x + dx))`` (90 for the same inputs).

    Args:
        input_reserve: Current reserve of the input asset
        output_reserve: Current reserve of the output asset
        net_input_amount: Input amount after fee deduction
        policy: Post-swap invariant comparison

    Returns:
        SwapQuote with the amount released from the output reserve

    Raises:
        ArithmeticOverflowError: On an empty reserve or any width overflow
        InvariantViolationError: If the post-swap product fails ``policy``
    """
    require_u64("input_reserve", input_reserve)
    require_u64("output_reserve", output_reserve)
    require_u64("net_input_amount", net_input_amount)
    if input_reserve == 0 or output_reserve == 0:
        raise ArithmeticOverflowError("cannot swap against an empty reserve")

    k_before = checked_mul(input_reserve, output_reserve)
    new_reserve_in = require_u64("new_reserve_in", checked_add(input_reserve, net_input_amount, limit=U64_MAX))
    new_reserve_out = ceil_div(k_before, new_reserve_in)
    amount_out = checked_sub(output_reserve, new_reserve_out)

    k_after = checked_mul(new_reserve_in, new_reserve_out)
    check_invariant(k_before, k_after, policy)

    return SwapQuote(
        amount_out=amount_out,
        net_in=net_input_amount,
        new_reserve_in=new_reserve_in,
        new_reserve_out=new_reserve_out,
        k_before=k_before,
        k_after=k_after,
    )


def quote_swap(
    input_reserve: int,
    output_reserve: int,
    amount_in: int,
    *,
    fee_rate: FeeRate = DEFAULT_FEE_RATE,
    policy: InvariantPolicy = InvariantPolicy.MONOTONIC,
) -> SwapQuote:
    """
    Deduct the fee from ``amount_in`` and price the remainder.

    The returned reserves describe the pricing curve (net input). The vault
    actually receives the gross ``amount_in``, so the fee stays in the pool.
    """
    fee = apply_fee(amount_in, fee_rate)
    quote = price_swap(input_reserve, output_reserve, fee.net_in, policy=policy)
    return SwapQuote(
        amount_out=quote.amount_out,
        net_in=quote.net_in,
        new_reserve_in=quote.new_reserve_in,
        new_reserve_out=quote.new_reserve_out,
        k_before=quote.k_before,
        k_after=quote.k_after,
        fee=fee.fee,
    )
