"""
spool-amm: accounting core for a two-asset constant-product AMM.
"""

from .errors import (
    AmmError,
    AmountExceedsBalanceError,
    ArithmeticOverflowError,
    ConfigError,
    EmptyPoolError,
    InvalidVaultError,
    InvariantViolationError,
    LiquidityTooLowError,
    ReservedHolderError,
)

__version__ = "0.1.0"

__all__ = [
    "AmmError",
    "AmountExceedsBalanceError",
    "ArithmeticOverflowError",
    "ConfigError",
    "EmptyPoolError",
    "InvalidVaultError",
    "InvariantViolationError",
    "LiquidityTooLowError",
    "ReservedHolderError",
    "__version__",
]
