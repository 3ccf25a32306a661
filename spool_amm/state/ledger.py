"""
In-memory token ledger standing in for the custody, mint and balance
collaborators.

Balances are keyed by (holder, asset). Total supply is tracked per asset and
moves only on mint/burn.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from ..numeric import U64_MAX, require_u64
from ..errors import AmountExceedsBalanceError, ArithmeticOverflowError
from .pools import AssetId, HolderId


class TokenLedger:
    """
    Deterministic balance table mapping (holder, asset) -> amount.

    Notes:
    - Balances and supplies are u64 and never negative.
    - Zero balances are omitted to keep the table sparse.
    - ``authority`` arguments are accepted for interface parity; signature
      checks belong to the host environment.
    """

    def __init__(self) -> None:
        self._balances: Dict[Tuple[HolderId, AssetId], int] = {}
        self._supply: Dict[AssetId, int] = {}

    def balance_of(self, holder: HolderId, asset: AssetId) -> int:
        """Get balance for (holder, asset). Returns 0 if not found."""
        return self._balances.get((holder, asset), 0)

    def total_supply(self, asset: AssetId) -> int:
        return self._supply.get(asset, 0)

    def _set(self, holder: HolderId, asset: AssetId, amount: int) -> None:
        if amount == 0:
            self._balances.pop((holder, asset), None)
        else:
            self._balances[(holder, asset)] = amount

    def _debit(self, holder: HolderId, asset: AssetId, amount: int) -> None:
        current = self.balance_of(holder, asset)
        if amount > current:
            raise AmountExceedsBalanceError(amount, current)
        self._set(holder, asset, current - amount)

    def _credit(self, holder: HolderId, asset: AssetId, amount: int) -> None:
        new_balance = self.balance_of(holder, asset) + amount
        if new_balance > U64_MAX:
            raise ArithmeticOverflowError(f"balance overflow for ({holder}, {asset})")
        self._set(holder, asset, new_balance)

    def transfer(
        self,
        asset: AssetId,
        from_holder: HolderId,
        to_holder: HolderId,
        amount: int,
        authority: Optional[HolderId] = None,
    ) -> None:
        """Move ``amount`` of ``asset`` between two balances."""
        require_u64("amount", amount)
        self._debit(from_holder, asset, amount)
        self._credit(to_holder, asset, amount)

    def mint(
        self,
        asset: AssetId,
        to_holder: HolderId,
        amount: int,
        authority: Optional[HolderId] = None,
    ) -> None:
        require_u64("amount", amount)
        supply = self.total_supply(asset) + amount
        if supply > U64_MAX:
            raise ArithmeticOverflowError(f"supply overflow for {asset}")
        self._credit(to_holder, asset, amount)
        self._supply[asset] = supply

    def burn(
        self,
        asset: AssetId,
        from_holder: HolderId,
        amount: int,
        authority: Optional[HolderId] = None,
    ) -> None:
        require_u64("amount", amount)
        self._debit(from_holder, asset, amount)
        self._supply[asset] = self.total_supply(asset) - amount

    def copy(self) -> "TokenLedger":
        clone = TokenLedger()
        clone._balances = dict(self._balances)
        clone._supply = dict(self._supply)
        return clone

    def verify_supply(self, asset: AssetId) -> bool:
        """True when recorded supply equals the sum of all balances of ``asset``."""
        held = sum(amount for (_, a), amount in self._balances.items() if a == asset)
        return held == self.total_supply(asset)

    def __repr__(self) -> str:
        return f"TokenLedger({len(self._balances)} balances, {len(self._supply)} supplies)"
