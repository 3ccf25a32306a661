"""
State records and collaborators for spool-amm
"""

from .ledger import TokenLedger
from .pools import Pool, compute_pool_id, derive_authority, initialize_pool

__all__ = [
    "TokenLedger",
    "Pool",
    "compute_pool_id",
    "derive_authority",
    "initialize_pool",
]
