"""
Host platform.

In-process execution environment for the vault: serialized, atomic
transactions, an event log, native balances, and a reference ERC-721
collection standing in for the asset standard.
"""

from .clock import Clock, FrozenClock, RealClock
from .context import CallContext
from .contract import (
    Contract,
    ContractArtifact,
    ContractState,
    placeholder_bytecode,
    register_contract,
    resolve_init_code,
)
from .errors import ChainError, ContractNotFoundError, ERC721Error, InsufficientFundsError
from .events import Event
from .host import Chain, ChainSnapshot, compute_create_address
from .erc721 import ERC721_RECEIVED, ERC721Collection

__all__ = [
    "CallContext",
    "Chain",
    "ChainError",
    "ChainSnapshot",
    "Clock",
    "Contract",
    "ContractArtifact",
    "ContractNotFoundError",
    "ContractState",
    "ERC721Collection",
    "ERC721Error",
    "ERC721_RECEIVED",
    "Event",
    "FrozenClock",
    "InsufficientFundsError",
    "RealClock",
    "compute_create_address",
    "placeholder_bytecode",
    "register_contract",
    "resolve_init_code",
]
