"""
Token vault.

Custody contract that releases ERC-721 tokens against Merkle proofs of
ownership, plus the transfer executor it delegates outgoing moves to.
"""

from .state import DeliveryState, VaultState
from .transfer import TransferExecutor, TransferResult
from .token_vault import TokenVault

__all__ = [
    "DeliveryState",
    "TokenVault",
    "TransferExecutor",
    "TransferResult",
    "VaultState",
]
