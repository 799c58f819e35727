"""
Schemas & Errors
File: records.py

Purpose: The ownership record committed into the Merkle tree.

One record per (collection, token) expected to be released to exactly one
owner. Records are immutable once produced by the discovery pipeline.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.crypto.hashing import normalize_address

UINT256_MAX = 2**256 - 1


def parse_token_id(value: Any) -> int:
    """
    Token id from an int, a decimal string or a 0x-hex string.

    Discovery services and hand-edited artifacts use all three forms.

    Raises:
        ValueError: Not a number, or outside 0..2**256-1
    """
    if isinstance(value, bool):
        raise ValueError(f"Token id must be an integer, got {value!r}")
    if isinstance(value, str):
        text = value.strip()
        token_id = int(text, 16) if text.lower().startswith("0x") else int(text, 10)
    elif isinstance(value, int):
        token_id = value
    else:
        raise ValueError(f"Token id must be an integer or string, got {type(value).__name__}")
    if not 0 <= token_id <= UINT256_MAX:
        raise ValueError(f"Token id out of uint256 range: {token_id}")
    return token_id


class OwnershipRecord(BaseModel):
    """
    (collection, rightful owner, token id) triple.

    Addresses are stored in EIP-55 checksum form so that two records for
    the same identifiers compare and hash equal regardless of input case.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    collection: str = Field(
        ...,
        description="Address of the asset collection contract",
    )
    owner: str = Field(
        ...,
        description="Address of the rightful owner",
    )
    token_id: int = Field(
        ...,
        ge=0,
        le=UINT256_MAX,
        description="Token id within the collection (uint256)",
    )

    @field_validator("collection", "owner", mode="before")
    @classmethod
    def _checksum(cls, v: Any) -> str:
        return normalize_address(v)

    @field_validator("token_id", mode="before")
    @classmethod
    def _parse_token_id(cls, v: Any) -> int:
        return parse_token_id(v)

    def as_tuple(self) -> tuple[str, str, int]:
        return (self.collection, self.owner, self.token_id)


__all__ = [
    "UINT256_MAX",
    "OwnershipRecord",
    "parse_token_id",
]
