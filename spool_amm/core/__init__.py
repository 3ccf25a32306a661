"""
Core AMM algorithms
"""

from .fees import DEFAULT_FEE_RATE, FeeRate, apply_fee, compute_fee, deduct_fee
from .cpmm import (
    InvariantPolicy,
    SwapDirection,
    SwapQuote,
    check_invariant,
    curve_reserve_out,
    price_swap,
    quote_swap,
    resolve_direction,
    vaults_for,
)
from .liquidity import (
    MINIMUM_LIQUIDITY,
    DepositSizing,
    WithdrawalSizing,
    size_deposit,
    size_withdrawal,
)
from .amm import (
    AmmConfig,
    Deposit,
    Swap,
    Withdraw,
    StepResult,
    provide_liquidity,
    remove_liquidity,
    swap,
    step,
    step_or_raise,
)

__all__ = [
    "DEFAULT_FEE_RATE",
    "FeeRate",
    "apply_fee",
    "compute_fee",
    "deduct_fee",
    "InvariantPolicy",
    "SwapDirection",
    "SwapQuote",
    "check_invariant",
    "curve_reserve_out",
    "price_swap",
    "quote_swap",
    "resolve_direction",
    "vaults_for",
    "MINIMUM_LIQUIDITY",
    "DepositSizing",
    "WithdrawalSizing",
    "size_deposit",
    "size_withdrawal",
    "AmmConfig",
    "Deposit",
    "Swap",
    "Withdraw",
    "StepResult",
    "provide_liquidity",
    "remove_liquidity",
    "swap",
    "step",
    "step_or_raise",
]
