"""
Core cryptographic utilities.

Keccak-256 hashing, sorted-pair hashing and address helpers shared by the
commitment builder, the vault and the address predictor.
"""
from .hashing import (
    ZERO_ADDRESS,
    ZERO_HASH,
    address_bytes,
    from_hex,
    hash_pair_sorted,
    keccak256,
    normalize_address,
    to_bytes32,
    to_hex,
)

__all__ = [
    "ZERO_ADDRESS",
    "ZERO_HASH",
    "address_bytes",
    "from_hex",
    "hash_pair_sorted",
    "keccak256",
    "normalize_address",
    "to_bytes32",
    "to_hex",
]
