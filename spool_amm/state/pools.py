"""
Pool record for a two-asset constant-product pool.

The record only carries identifiers. Reserve balances and share supply live
in collaborator-owned balances and are read per operation.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass


# Type aliases
AssetId = str
HolderId = str

POOL_SEED = b"pool_state"


def _require_id(name: str, value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{name} must be a non-empty string")
    return value


def compute_pool_id(asset_a_mint: AssetId, asset_b_mint: AssetId) -> str:
    """
    Deterministically compute the pool identifier:

        pool_id = H("pool_state" || asset_a_mint || asset_b_mint)
    """
    if asset_a_mint == asset_b_mint:
        raise ValueError(f"pool assets must differ: {asset_a_mint}")
    data = POOL_SEED + asset_a_mint.encode("utf-8") + asset_b_mint.encode("utf-8")
    return "0x" + hashlib.sha256(data).hexdigest()


def derive_authority(pool_id: str, bump: int) -> HolderId:
    """Identifier of the pool-owned signer for the given bump."""
    if not isinstance(bump, int) or isinstance(bump, bool) or not (0 <= bump <= 255):
        raise ValueError(f"authority bump must be in [0, 255]: {bump}")
    data = b"authority" + pool_id.encode("utf-8") + bytes([bump])
    return "0x" + hashlib.sha256(data).hexdigest()


@dataclass(frozen=True)
class Pool:
    """
    Immutable AMM pool record.

    Attributes:
        asset_a_mint: Identifier of reserve asset A
        asset_b_mint: Identifier of reserve asset B
        vault_a: Custody balance holding reserve A
        vault_b: Custody balance holding reserve B
        share_mint: Identifier of the pool-share token
        authority_bump: Derivation value for the pool authority (0-255)
    """

    asset_a_mint: AssetId
    asset_b_mint: AssetId
    vault_a: HolderId
    vault_b: HolderId
    share_mint: AssetId
    authority_bump: int

    def __post_init__(self) -> None:
        for name in ("asset_a_mint", "asset_b_mint", "vault_a", "vault_b", "share_mint"):
            _require_id(name, getattr(self, name))
        if self.asset_a_mint == self.asset_b_mint:
            raise ValueError(f"pool assets must differ: {self.asset_a_mint}")
        if self.vault_a == self.vault_b:
            raise ValueError(f"pool vaults must differ: {self.vault_a}")
        if self.share_mint in (self.asset_a_mint, self.asset_b_mint):
            raise ValueError("share mint must differ from the reserve assets")
        # Validates the bump range.
        derive_authority(self.pool_id, self.authority_bump)

    @property
    def pool_id(self) -> str:
        return compute_pool_id(self.asset_a_mint, self.asset_b_mint)

    @property
    def authority(self) -> HolderId:
        return derive_authority(self.pool_id, self.authority_bump)

    def asset_for(self, vault: HolderId) -> AssetId:
        if vault == self.vault_a:
            return self.asset_a_mint
        if vault == self.vault_b:
            return self.asset_b_mint
        raise ValueError(f"vault {vault} not in pool {self.pool_id}")

    def __repr__(self) -> str:
        return (
            f"Pool(pool_id={self.pool_id[:16]}..., "
            f"assets=({self.asset_a_mint}, {self.asset_b_mint}), "
            f"share_mint={self.share_mint}, bump={self.authority_bump})"
        )


def initialize_pool(
    asset_a_mint: AssetId,
    asset_b_mint: AssetId,
    vault_a: HolderId,
    vault_b: HolderId,
    share_mint: AssetId,
    authority_bump: int = 255,
) -> Pool:
    """
    Create the pool record.

    Vault and share-token records are created by collaborators; this only
    binds their identifiers to the pool.

    Raises:
        ValueError: If identifiers collide or the bump is out of range
    """
    return Pool(
        asset_a_mint=asset_a_mint,
        asset_b_mint=asset_b_mint,
        vault_a=vault_a,
        vault_b=vault_b,
        share_mint=share_mint,
        authority_bump=authority_bump,
    )
