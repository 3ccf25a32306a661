# [TESTER] v1

from __future__ import annotations

import logging

import pytest

from spool_amm.core import AmmConfig, Deposit, Swap, Withdraw, step, step_or_raise
from spool_amm.core.amm import (
    LOCKED_SHARES_HOLDER,
    DepositEffects,
    SwapEffects,
    WithdrawEffects,
    provide_liquidity,
    read_reserves,
    remove_liquidity,
    swap,
)
from spool_amm.core.cpmm import InvariantPolicy, SwapDirection
from spool_amm.core.fees import FeeRate
from spool_amm.errors import (
    AmountExceedsBalanceError,
    EmptyPoolError,
    InvalidVaultError,
    InvariantViolationError,
    LiquidityTooLowError,
    ReservedHolderError,
)
from spool_amm.state import TokenLedger, initialize_pool

USER = "0x" + "11" * 32
OTHER = "0x" + "22" * 32


def _setup(amount: int = 10_000_000):
    pool = initialize_pool(
        asset_a_mint="usdc",
        asset_b_mint="wsol",
        vault_a="usdc_vault",
        vault_b="wsol_vault",
        share_mint="lp",
    )
    ledger = TokenLedger()
    for holder in (USER, OTHER):
        ledger.mint(pool.asset_a_mint, holder, amount)
        ledger.mint(pool.asset_b_mint, holder, amount)
    return pool, ledger


def _seeded(amount_a: int = 1_000_000, amount_b: int = 1_000_000):
    pool, ledger = _setup()
    res = provide_liquidity(pool, ledger, USER, amount_a, amount_b)
    return pool, res.ledger


def test_end_to_end_deposit_swap_withdraw() -> None:
    pool, ledger = _setup()
    config = AmmConfig()

    res = step(config, pool, ledger, USER, Deposit(amount_a=2_000_000, amount_b=2_000_000))
    assert res.ok, res.error
    assert isinstance(res.effects, DepositEffects)
    assert res.effects.shares_minted == 2_000_000 - 1000
    assert res.ledger.balance_of(LOCKED_SHARES_HOLDER, pool.share_mint) == 1000

    res = step(config, pool, res.ledger, OTHER, Swap.for_direction(pool, 10_000, SwapDirection.A_TO_B))
    assert res.ok, res.error
    assert isinstance(res.effects, SwapEffects)
    assert res.effects.fee == 300
    assert res.effects.amount_out > 0

    shares = res.ledger.balance_of(USER, pool.share_mint)
    res = step(config, pool, res.ledger, USER, Withdraw(burn_shares=shares))
    assert res.ok, res.error
    assert isinstance(res.effects, WithdrawEffects)

    reserves = read_reserves(pool, res.ledger)
    assert reserves.total_share_supply == 1000
    assert reserves.reserve_a > 0 and reserves.reserve_b > 0
    assert res.ledger.verify_supply(pool.share_mint)


def test_first_deposit_reference_amounts() -> None:
    pool, ledger = _setup()
    res = provide_liquidity(pool, ledger, USER, 1_000_000, 1_000_000)
    assert res.effects.shares_minted == 999_000
    assert res.ledger.balance_of(USER, pool.share_mint) == 999_000
    assert res.ledger.total_supply(pool.share_mint) == 1_000_000
    assert res.ledger.balance_of(pool.vault_a, pool.asset_a_mint) == 1_000_000


def test_first_deposit_below_floor_moves_nothing() -> None:
    pool, ledger = _setup()
    res = step(AmmConfig(), pool, ledger, USER, Deposit(amount_a=10, amount_b=10))
    assert not res.ok
    assert res.code == "liquidity_too_low"
    assert res.ledger is None
    assert ledger.balance_of(pool.vault_a, pool.asset_a_mint) == 0
    assert ledger.total_supply(pool.share_mint) == 0
    with pytest.raises(LiquidityTooLowError):
        provide_liquidity(pool, ledger, USER, 10, 10)


def test_imbalanced_deposit_moves_full_amounts_and_mints_the_minimum() -> None:
    pool, ledger = _seeded()
    supply = ledger.total_supply(pool.share_mint)
    res = provide_liquidity(pool, ledger, OTHER, 100_000, 150_000)
    assert res.effects.shares_minted == (100_000 * supply) // 1_000_000
    assert res.ledger.balance_of(pool.vault_b, pool.asset_b_mint) == 1_150_000


def test_deposit_beyond_balance_is_rejected() -> None:
    pool, ledger = _setup(amount=100)
    with pytest.raises(AmountExceedsBalanceError):
        provide_liquidity(pool, ledger, USER, 101, 100)


def test_swap_moves_gross_input_into_vault() -> None:
    pool, ledger = _seeded()
    res = swap(pool, ledger, OTHER, 1000, SwapDirection.A_TO_B)
    effects = res.effects
    assert effects.fee == 30
    assert effects.net_in == 970
    assert res.ledger.balance_of(pool.vault_a, pool.asset_a_mint) == 1_001_000
    assert res.ledger.balance_of(pool.vault_b, pool.asset_b_mint) == 1_000_000 - effects.amount_out
    assert res.ledger.balance_of(OTHER, pool.asset_b_mint) == 10_000_000 + effects.amount_out


def test_swap_never_decreases_reserve_product() -> None:
    pool, ledger = _seeded(3_000_000, 1_000_000)
    before = read_reserves(pool, ledger)
    res = swap(pool, ledger, OTHER, 77_777, SwapDirection.B_TO_A)
    after = read_reserves(pool, res.ledger)
    assert after.reserve_a * after.reserve_b >= before.reserve_a * before.reserve_b


def test_swap_beyond_balance_is_rejected_before_pricing() -> None:
    pool, ledger = _seeded()
    res = step(AmmConfig(), pool, ledger, OTHER, Swap.for_direction(pool, 10_000_001, SwapDirection.A_TO_B))
    assert not res.ok
    assert isinstance(res.exception, AmountExceedsBalanceError)


def test_swap_with_same_vault_on_both_sides_is_rejected() -> None:
    pool, ledger = _seeded()
    op = Swap(amount_in=1000, input_vault=pool.vault_a, output_vault=pool.vault_a)
    res = step(AmmConfig(), pool, ledger, OTHER, op)
    assert not res.ok
    assert res.code == "invalid_vault"
    with pytest.raises(InvalidVaultError):
        step_or_raise(AmmConfig(), pool, ledger, OTHER, op)


def test_swap_against_foreign_vault_is_rejected() -> None:
    pool, ledger = _seeded()
    ledger.mint(pool.asset_a_mint, "fake_vault", 5)
    op = Swap(amount_in=1000, input_vault="fake_vault", output_vault=pool.vault_b)
    with pytest.raises(InvalidVaultError):
        step_or_raise(AmmConfig(), pool, ledger, OTHER, op)


def test_exact_invariant_policy_rejects_rounded_swap() -> None:
    pool, ledger = _seeded()
    config = AmmConfig(invariant_policy=InvariantPolicy.EXACT)
    with pytest.raises(InvariantViolationError):
        swap(pool, ledger, OTHER, 1000, SwapDirection.A_TO_B, config=config)
    # Rejected swaps leave the caller's ledger untouched.
    assert ledger.balance_of(OTHER, pool.asset_a_mint) == 10_000_000


def test_zero_fee_config() -> None:
    pool, ledger = _seeded()
    config = AmmConfig(fee_rate=FeeRate(0, 1))
    res = swap(pool, ledger, OTHER, 1000, SwapDirection.A_TO_B, config=config)
    assert res.effects.fee == 0
    assert res.effects.amount_out == (1_000_000 * 1000) // 1_001_000


def test_withdraw_from_empty_pool_is_rejected() -> None:
    pool, ledger = _setup()
    with pytest.raises(EmptyPoolError):
        remove_liquidity(pool, ledger, USER, 1)


def test_withdraw_more_than_held_is_rejected() -> None:
    pool, ledger = _seeded()
    held = ledger.balance_of(USER, pool.share_mint)
    with pytest.raises(AmountExceedsBalanceError):
        remove_liquidity(pool, ledger, USER, held + 1)


def test_withdraw_burns_before_release_and_rounds_down() -> None:
    pool, ledger = _seeded()
    before = read_reserves(pool, ledger)
    res = remove_liquidity(pool, ledger, USER, 333)
    assert res.effects.return_a == (333 * before.reserve_a) // before.total_share_supply
    assert res.ledger.total_supply(pool.share_mint) == before.total_share_supply - 333
    assert res.ledger.balance_of(USER, pool.asset_a_mint) == 9_000_000 + res.effects.return_a


def test_deposit_then_withdraw_round_trip_never_profits() -> None:
    pool, ledger = _seeded(1_000_003, 2_000_011)
    res = provide_liquidity(pool, ledger, OTHER, 12_345, 24_690)
    minted = res.effects.shares_minted
    res = remove_liquidity(pool, res.ledger, OTHER, minted)
    assert res.effects.return_a <= 12_345
    assert res.effects.return_b <= 24_690
    assert res.ledger.total_supply(pool.share_mint) >= 0


def test_unknown_operation_is_rejected() -> None:
    pool, ledger = _setup()
    res = step(AmmConfig(), pool, ledger, USER, object())  # type: ignore[arg-type]
    assert not res.ok
    assert res.code == "unknown_operation"
    with pytest.raises(TypeError):
        step_or_raise(AmmConfig(), pool, ledger, USER, object())  # type: ignore[arg-type]


def test_rejections_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    pool, ledger = _setup()
    with caplog.at_level(logging.WARNING, logger="spool_amm.core.amm"):
        step(AmmConfig(), pool, ledger, USER, Withdraw(burn_shares=1))
    assert any("empty_pool" in rec.getMessage() for rec in caplog.records)


def test_swap_by_pool_vault_is_rejected() -> None:
    pool, ledger = _seeded()
    before = read_reserves(pool, ledger)
    res = step(AmmConfig(), pool, ledger, pool.vault_a, Swap.for_direction(pool, 100_000, SwapDirection.A_TO_B))
    assert not res.ok
    assert res.code == "reserved_holder"
    with pytest.raises(ReservedHolderError):
        swap(pool, ledger, pool.vault_a, 100_000, SwapDirection.A_TO_B)
    assert read_reserves(pool, ledger) == before


def test_withdraw_by_lock_holder_is_rejected() -> None:
    pool, ledger = _seeded()
    shares = ledger.balance_of(USER, pool.share_mint)
    ledger = remove_liquidity(pool, ledger, USER, shares).ledger
    assert ledger.total_supply(pool.share_mint) == 1000

    with pytest.raises(ReservedHolderError):
        remove_liquidity(pool, ledger, LOCKED_SHARES_HOLDER, 1000)
    assert ledger.total_supply(pool.share_mint) == 1000


@pytest.mark.parametrize("holder", ["vault_b", "authority"])
def test_deposit_by_pool_holder_is_rejected(holder: str) -> None:
    pool, ledger = _setup()
    with pytest.raises(ReservedHolderError):
        provide_liquidity(pool, ledger, getattr(pool, holder), 1_000_000, 1_000_000)
