"""
AMM step orchestration (functional core).

This module wires the sizing and pricing engines to the collaborator
interfaces as a single step per operation:
- Read reserves and share supply
- Size / price and validate (fail-closed)
- Apply custody transfers and mint/burn in the mandated order

``step()`` applies the operation to a copy of the ledger, so a rejected
operation leaves the caller's ledger untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Union

from ..errors import AmmError, AmountExceedsBalanceError, ReservedHolderError
from ..numeric import require_u64
from ..state.ledger import TokenLedger
from ..state.pools import HolderId, Pool
from .cpmm import InvariantPolicy, SwapDirection, quote_swap, resolve_direction, vaults_for
from .fees import DEFAULT_FEE_RATE, FeeRate
from .liquidity import MINIMUM_LIQUIDITY, size_deposit, size_withdrawal

logger = logging.getLogger(__name__)

# Holder of the minimum liquidity withheld on the first deposit. Nothing can sign for it.
LOCKED_SHARES_HOLDER = "0x" + "00" * 32


@dataclass(frozen=True)
class AmmConfig:
    """Runtime config for the operation layer."""

    fee_rate: FeeRate = field(default=DEFAULT_FEE_RATE)
    minimum_liquidity: int = MINIMUM_LIQUIDITY
    invariant_policy: InvariantPolicy = InvariantPolicy.MONOTONIC

    def __post_init__(self) -> None:
        if not isinstance(self.minimum_liquidity, int) or isinstance(self.minimum_liquidity, bool):
            raise TypeError("minimum_liquidity must be an int")
        if self.minimum_liquidity < 0:
            raise ValueError(f"minimum_liquidity must be non-negative: {self.minimum_liquidity}")


# -- Operations ---------------------------------------------------------------


@dataclass(frozen=True)
class Deposit:
    amount_a: int
    amount_b: int


@dataclass(frozen=True)
class Swap:
    amount_in: int
    input_vault: HolderId
    output_vault: HolderId

    @classmethod
    def for_direction(cls, pool: Pool, amount_in: int, direction: SwapDirection) -> "Swap":
        input_vault, output_vault = vaults_for(pool, direction)
        return cls(amount_in=amount_in, input_vault=input_vault, output_vault=output_vault)


@dataclass(frozen=True)
class Withdraw:
    burn_shares: int


Operation = Union[Deposit, Swap, Withdraw]


# -- Effects ------------------------------------------------------------------


@dataclass(frozen=True)
class PoolReserves:
    reserve_a: int
    reserve_b: int
    total_share_supply: int


@dataclass(frozen=True)
class DepositEffects:
    amount_a: int
    amount_b: int
    shares_minted: int
    shares_locked: int


@dataclass(frozen=True)
class SwapEffects:
    direction: SwapDirection
    amount_in: int
    fee: int
    net_in: int
    amount_out: int
    k_before: int
    k_after: int


@dataclass(frozen=True)
class WithdrawEffects:
    burn_shares: int
    return_a: int
    return_b: int


Effects = Union[DepositEffects, SwapEffects, WithdrawEffects]


@dataclass(frozen=True)
class StepResult:
    ok: bool
    ledger: Optional[TokenLedger] = None
    effects: Optional[Effects] = None
    error: Optional[str] = None
    code: Optional[str] = None
    exception: Optional[AmmError] = None


def read_reserves(pool: Pool, ledger: TokenLedger) -> PoolReserves:
    """Query current reserves and share supply for ``pool``."""
    return PoolReserves(
        reserve_a=ledger.balance_of(pool.vault_a, pool.asset_a_mint),
        reserve_b=ledger.balance_of(pool.vault_b, pool.asset_b_mint),
        total_share_supply=ledger.total_supply(pool.share_mint),
    )


def _require_balance(ledger: TokenLedger, holder: HolderId, asset: str, amount: int) -> None:
    available = ledger.balance_of(holder, asset)
    if amount > available:
        raise AmountExceedsBalanceError(amount, available)


def _require_external_user(pool: Pool, user: HolderId) -> None:
    """Reject users that are one of the pool's own holders (vaults, authority, lock)."""
    if user in (pool.vault_a, pool.vault_b, pool.authority, LOCKED_SHARES_HOLDER):
        raise ReservedHolderError(user)


# -- Handlers -----------------------------------------------------------------


def _handle_deposit(
    config: AmmConfig, pool: Pool, ledger: TokenLedger, user: HolderId, op: Deposit
) -> DepositEffects:
    require_u64("amount_a", op.amount_a)
    require_u64("amount_b", op.amount_b)
    _require_balance(ledger, user, pool.asset_a_mint, op.amount_a)
    _require_balance(ledger, user, pool.asset_b_mint, op.amount_b)

    reserves = read_reserves(pool, ledger)
    sizing = size_deposit(
        op.amount_a,
        op.amount_b,
        reserves.reserve_a,
        reserves.reserve_b,
        reserves.total_share_supply,
        minimum_liquidity=config.minimum_liquidity,
    )
    logger.debug(
        "deposit sized: pool=%s shares=%d locked=%d reserves=(%d, %d) supply=%d",
        pool.pool_id, sizing.shares, sizing.locked,
        reserves.reserve_a, reserves.reserve_b, reserves.total_share_supply,
    )

    ledger.transfer(pool.asset_a_mint, user, pool.vault_a, op.amount_a, authority=user)
    ledger.transfer(pool.asset_b_mint, user, pool.vault_b, op.amount_b, authority=user)
    ledger.mint(pool.share_mint, user, sizing.shares, authority=pool.authority)
    if sizing.locked:
        ledger.mint(pool.share_mint, LOCKED_SHARES_HOLDER, sizing.locked, authority=pool.authority)

    return DepositEffects(
        amount_a=op.amount_a,
        amount_b=op.amount_b,
        shares_minted=sizing.shares,
        shares_locked=sizing.locked,
    )


def _handle_swap(config: AmmConfig, pool: Pool, ledger: TokenLedger, user: HolderId, op: Swap) -> SwapEffects:
    require_u64("amount_in", op.amount_in)
    direction = resolve_direction(pool, op.input_vault, op.output_vault)
    input_asset = pool.asset_for(op.input_vault)
    output_asset = pool.asset_for(op.output_vault)
    _require_balance(ledger, user, input_asset, op.amount_in)

    input_reserve = ledger.balance_of(op.input_vault, input_asset)
    output_reserve = ledger.balance_of(op.output_vault, output_asset)
    quote = quote_swap(
        input_reserve,
        output_reserve,
        op.amount_in,
        fee_rate=config.fee_rate,
        policy=config.invariant_policy,
    )
    logger.debug(
        "swap priced: pool=%s direction=%s in=%d fee=%d out=%d k_before=%d k_after=%d",
        pool.pool_id, direction.value, op.amount_in, quote.fee, quote.amount_out,
        quote.k_before, quote.k_after,
    )

    # The gross input goes to the vault; the fee stays in the reserve.
    ledger.transfer(input_asset, user, op.input_vault, op.amount_in, authority=user)
    ledger.transfer(output_asset, op.output_vault, user, quote.amount_out, authority=pool.authority)

    return SwapEffects(
        direction=direction,
        amount_in=op.amount_in,
        fee=quote.fee,
        net_in=quote.net_in,
        amount_out=quote.amount_out,
        k_before=quote.k_before,
        k_after=quote.k_after,
    )


def _handle_withdraw(
    config: AmmConfig, pool: Pool, ledger: TokenLedger, user: HolderId, op: Withdraw
) -> WithdrawEffects:
    require_u64("burn_shares", op.burn_shares)
    reserves = read_reserves(pool, ledger)
    sizing = size_withdrawal(
        op.burn_shares,
        reserves.reserve_a,
        reserves.reserve_b,
        reserves.total_share_supply,
    )
    _require_balance(ledger, user, pool.share_mint, op.burn_shares)
    logger.debug(
        "withdrawal sized: pool=%s burn=%d out=(%d, %d)",
        pool.pool_id, sizing.burn_shares, sizing.return_a, sizing.return_b,
    )

    # Burn before releasing reserves.
    ledger.burn(pool.share_mint, user, sizing.burn_shares, authority=user)
    ledger.transfer(pool.asset_a_mint, pool.vault_a, user, sizing.return_a, authority=pool.authority)
    ledger.transfer(pool.asset_b_mint, pool.vault_b, user, sizing.return_b, authority=pool.authority)

    return WithdrawEffects(burn_shares=sizing.burn_shares, return_a=sizing.return_a, return_b=sizing.return_b)


Handler = Callable[[AmmConfig, Pool, TokenLedger, HolderId, Operation], Effects]

_DISPATCH: Dict[type, Handler] = {
    Deposit: _handle_deposit,
    Swap: _handle_swap,
    Withdraw: _handle_withdraw,
}


def step(config: AmmConfig, pool: Pool, ledger: TokenLedger, user: HolderId, op: Operation) -> StepResult:
    """
    Execute one operation against ``pool`` on behalf of ``user``.

    This function is pure with respect to ``ledger``: on success the returned
    result carries a new ledger; on rejection nothing is applied.
    """
    handler = _DISPATCH.get(type(op))
    if handler is None:
        return StepResult(ok=False, error=f"unknown operation: {type(op).__name__}", code="unknown_operation")

    working = ledger.copy()
    try:
        _require_external_user(pool, user)
        effects = handler(config, pool, working, user, op)
    except AmmError as exc:
        logger.warning("%s rejected: pool=%s code=%s error=%s", type(op).__name__, pool.pool_id, exc.code, exc)
        return StepResult(ok=False, error=str(exc), code=exc.code, exception=exc)

    logger.info("%s applied: pool=%s effects=%s", type(op).__name__, pool.pool_id, effects)
    return StepResult(ok=True, ledger=working, effects=effects)


def step_or_raise(config: AmmConfig, pool: Pool, ledger: TokenLedger, user: HolderId, op: Operation) -> StepResult:
    """Like ``step()`` but re-raises the rejection instead of returning it.

    Raises:
        AmmError: The domain error that rejected the operation
        TypeError: For an operation type with no handler
    """
    result = step(config, pool, ledger, user, op)
    if result.ok:
        return result
    if result.exception is not None:
        raise result.exception
    raise TypeError(result.error)


# -- Entry points ---------------------------------------------------------------


def provide_liquidity(
    pool: Pool,
    ledger: TokenLedger,
    user: HolderId,
    amount_a: int,
    amount_b: int,
    *,
    config: AmmConfig = AmmConfig(),
) -> StepResult:
    return step_or_raise(config, pool, ledger, user, Deposit(amount_a=amount_a, amount_b=amount_b))


def swap(
    pool: Pool,
    ledger: TokenLedger,
    user: HolderId,
    amount_in: int,
    direction: SwapDirection,
    *,
    config: AmmConfig = AmmConfig(),
) -> StepResult:
    return step_or_raise(config, pool, ledger, user, Swap.for_direction(pool, amount_in, direction))


def remove_liquidity(
    pool: Pool,
    ledger: TokenLedger,
    user: HolderId,
    burn_share_amount: int,
    *,
    config: AmmConfig = AmmConfig(),
) -> StepResult:
    return step_or_raise(config, pool, ledger, user, Withdraw(burn_shares=burn_share_amount))
