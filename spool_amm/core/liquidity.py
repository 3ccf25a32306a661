"""
Liquidity sizing: share amounts for deposits, reserve amounts for burns.

The engine is a two-state machine over ``total_share_supply``:

- empty pool (supply == 0): shares = isqrt(a * b) - MINIMUM_LIQUIDITY
- seeded pool:             shares = min(a * S // rA, b * S // rB)

Withdrawals are strictly proportional with floor rounding and no fee.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import AmountExceedsBalanceError, EmptyPoolError, LiquidityTooLowError
from ..numeric import checked_div, checked_mul, checked_sub, isqrt, require_u64

# Shares permanently withheld from the first deposit to deter share-price inflation.
MINIMUM_LIQUIDITY = 1000


@dataclass(frozen=True)
class DepositSizing:
    shares: int
    locked: int
    amount_a: int
    amount_b: int


@dataclass(frozen=True)
class WithdrawalSizing:
    burn_shares: int
    return_a: int
    return_b: int


def _first_deposit_shares(amount_a: int, amount_b: int, minimum_liquidity: int) -> int:
    liquidity = isqrt(checked_mul(amount_a, amount_b))
    if liquidity <= minimum_liquidity:
        raise LiquidityTooLowError(
            f"initial liquidity {liquidity} does not exceed minimum {minimum_liquidity}"
        )
    return checked_sub(liquidity, minimum_liquidity)


def _proportional_shares(
    amount_a: int,
    amount_b: int,
    reserve_a: int,
    reserve_b: int,
    total_share_supply: int,
) -> int:
    share_from_a = checked_div(checked_mul(amount_a, total_share_supply), reserve_a)
    share_from_b = checked_div(checked_mul(amount_b, total_share_supply), reserve_b)
    # Price the deposit at the less favourable of the two implied rates.
    return min(share_from_a, share_from_b)


def size_deposit(
    amount_a: int,
    amount_b: int,
    reserve_a: int,
    reserve_b: int,
    total_share_supply: int,
    *,
    minimum_liquidity: int = MINIMUM_LIQUIDITY,
) -> DepositSizing:
    """
    Compute shares to mint for depositing ``amount_a`` and ``amount_b``.

    The full deposit amounts are always moved; no refund is computed for an
    imbalanced ratio.

    Raises:
        LiquidityTooLowError: If the first deposit does not clear
            ``minimum_liquidity``, or a later deposit would mint zero shares
        ArithmeticOverflowError: On overflow or a zero reserve in a seeded pool
    """
    for name, v in (
        ("amount_a", amount_a),
        ("amount_b", amount_b),
        ("reserve_a", reserve_a),
        ("reserve_b", reserve_b),
        ("total_share_supply", total_share_supply),
        ("minimum_liquidity", minimum_liquidity),
    ):
        require_u64(name, v)

    if total_share_supply == 0:
        shares = _first_deposit_shares(amount_a, amount_b, minimum_liquidity)
        locked = minimum_liquidity
    else:
        shares = _proportional_shares(amount_a, amount_b, reserve_a, reserve_b, total_share_supply)
        locked = 0
        if shares == 0:
            raise LiquidityTooLowError("deposit is too small to mint any shares")

    return DepositSizing(
        shares=require_u64("shares", shares),
        locked=locked,
        amount_a=amount_a,
        amount_b=amount_b,
    )


def size_withdrawal(
    burn_share_amount: int,
    reserve_a: int,
    reserve_b: int,
    total_share_supply: int,
) -> WithdrawalSizing:
    """
    Compute reserve amounts released for burning ``burn_share_amount`` shares.

    Formula:
        return_a = floor(burn * reserve_a / supply)
        return_b = floor(burn * reserve_b / supply)

    Raises:
        EmptyPoolError: If ``total_share_supply`` is zero
        AmountExceedsBalanceError: If the burn exceeds the outstanding supply
        ArithmeticOverflowError: On overflow
    """
    for name, v in (
        ("burn_share_amount", burn_share_amount),
        ("reserve_a", reserve_a),
        ("reserve_b", reserve_b),
        ("total_share_supply", total_share_supply),
    ):
        require_u64(name, v)

    if total_share_supply == 0:
        raise EmptyPoolError("pool is empty")
    if burn_share_amount > total_share_supply:
        raise AmountExceedsBalanceError(burn_share_amount, total_share_supply, what="share supply")

    return_a = checked_div(checked_mul(burn_share_amount, reserve_a), total_share_supply)
    return_b = checked_div(checked_mul(burn_share_amount, reserve_b), total_share_supply)

    return WithdrawalSizing(
        burn_shares=burn_share_amount,
        return_a=require_u64("return_a", return_a),
        return_b=require_u64("return_b", return_b),
    )
