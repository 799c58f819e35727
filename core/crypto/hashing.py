"""
Hashing Utilities
Keccak-256 hashing, sorted-pair hashing and hex helpers for commitments.

This module provides:
- keccak256 for raw bytes (Ethereum flavour, not NIST SHA3-256)
- Sorted-pair hashing used for every internal Merkle node
- Hex encoding/decoding with 0x prefix
- Address normalization to EIP-55 checksum form

Security/Determinism Notes:
- Always hash raw bytes exactly as given
- Pair hashing sorts the two children by digest value, so callers never
  need to know whether a sibling sits on the left or the right
- All operations are deterministic
"""
from __future__ import annotations

from typing import Any

from eth_utils import is_address, keccak, to_canonical_address, to_checksum_address


# 32 zero bytes; a vault root equal to this disables proof verification
ZERO_HASH: bytes = b"\x00" * 32

ZERO_ADDRESS: str = "0x0000000000000000000000000000000000000000"


def keccak256(data: bytes) -> bytes:
    """
    Compute the Keccak-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte digest

    Example:
        >>> keccak256(b"").hex()
        'c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470'
    """
    return keccak(data)


def hash_pair_sorted(a: bytes, b: bytes) -> bytes:
    """
    Hash two digests in ascending byte order.

    parent = keccak256(min(a, b) + max(a, b))

    Args:
        a: First child digest
        b: Second child digest

    Returns:
        32-byte parent digest (commutative in its arguments)
    """
    if a < b:
        return keccak256(a + b)
    return keccak256(b + a)


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


def to_bytes32(value: Any) -> bytes:
    """
    Coerce a 0x-hex string or bytes into exactly 32 bytes.

    Raises:
        ValueError: If the value is not 32 bytes long
    """
    raw = from_hex(value) if isinstance(value, str) else bytes(value)
    if len(raw) != 32:
        raise ValueError(f"Expected 32 bytes, got {len(raw)}")
    return raw


def normalize_address(value: Any) -> str:
    """
    Normalize a 20-byte identifier to its EIP-55 checksummed string.

    Accepts 0x-hex strings in any case or raw 20-byte values.

    Raises:
        ValueError: If the value is not a 20-byte address
    """
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 20:
            raise ValueError(f"Address must be 20 bytes, got {len(value)}")
        return to_checksum_address(bytes(value))
    if not isinstance(value, str) or not is_address(value):
        raise ValueError(f"Not a valid address: {value!r}")
    return to_checksum_address(value)


def address_bytes(value: Any) -> bytes:
    """Return the raw 20 bytes of an address."""
    return to_canonical_address(normalize_address(value))


__all__ = [
    "ZERO_HASH",
    "ZERO_ADDRESS",
    "keccak256",
    "hash_pair_sorted",
    "to_hex",
    "from_hex",
    "to_bytes32",
    "normalize_address",
    "address_bytes",
]
