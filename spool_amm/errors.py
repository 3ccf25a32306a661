"""Exception types for the AMM accounting core.

Every error carries a stable ``code`` so that ``step()`` can report a
rejection without losing which rule fired.
"""

from __future__ import annotations


class AmmError(Exception):
    """Base class for all rejections raised by the core."""

    code = "amm_error"


class ArithmeticOverflowError(AmmError):
    """Raised when a checked operation leaves its width or divides by zero."""

    code = "arithmetic_overflow"


class LiquidityTooLowError(AmmError):
    """Raised when a deposit would not clear the minimum liquidity floor."""

    code = "liquidity_too_low"


class InvalidVaultError(AmmError):
    """Raised when a swap names vaults that are not the pool's reserve pair."""

    code = "invalid_vault"

    def __init__(self, side: str, vault: str) -> None:
        self.side = side
        self.vault = vault
        super().__init__(f"{side} vault is incorrect: {vault}")


class AmountExceedsBalanceError(AmmError):
    """Raised when a requested amount exceeds the available balance."""

    code = "amount_exceeds_balance"

    def __init__(self, requested: int, available: int, *, what: str = "balance") -> None:
        self.requested = requested
        self.available = available
        super().__init__(f"requested amount {requested} exceeds available {what} {available}")


class InvariantViolationError(AmmError):
    """Raised when the post-swap reserve product fails the invariant policy."""

    code = "invariant_violation"

    def __init__(self, k_before: int, k_after: int, policy: str) -> None:
        self.k_before = k_before
        self.k_after = k_after
        self.policy = policy
        super().__init__(f"invariant violation ({policy}): k_after={k_after} k_before={k_before}")


class EmptyPoolError(AmmError):
    """Raised when a withdrawal is sized against zero share supply."""

    code = "empty_pool"


class ConfigError(AmmError):
    """Raised when an AMM configuration file is malformed."""

    code = "config_error"


class ReservedHolderError(AmmError):
    """Raised when the acting user is one of the pool's own holders."""

    code = "reserved_holder"

    def __init__(self, holder: str) -> None:
        self.holder = holder
        super().__init__(f"pool-owned holder cannot act as user: {holder}")
