"""
Leaf Encoder
Canonical leaf derivation for ownership records.

Leaf rule (hard contract, shared with on-platform verification):

    leaf = keccak256(keccak256(abi.encode(address collection,
                                          address owner,
                                          uint256 token_id)))

abi.encode of three static types is three 32-byte words in field order,
so the preimage is always exactly 96 bytes. Hashing twice keeps a leaf
preimage from ever having the 64-byte shape of an internal node.
"""
from __future__ import annotations

from eth_abi import encode

from core.crypto.hashing import address_bytes, keccak256
from core.schemas.records import OwnershipRecord

LEAF_TYPES: tuple[str, str, str] = ("address", "address", "uint256")


def encode_record(record: OwnershipRecord) -> bytes:
    """ABI-encode a record as (address, address, uint256)."""
    return encode(
        list(LEAF_TYPES),
        [address_bytes(record.collection), address_bytes(record.owner), record.token_id],
    )


def encode_leaf(record: OwnershipRecord) -> bytes:
    """Derive the 32-byte commitment leaf for a record."""
    return keccak256(keccak256(encode_record(record)))


__all__ = [
    "LEAF_TYPES",
    "encode_record",
    "encode_leaf",
]
