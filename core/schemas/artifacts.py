"""
Schemas & Errors
File: artifacts.py

Purpose: The published proof artifact.

Claimants have no lookup service at claim time, so the root and every
(record, proof) pair are distributed as one human-inspectable JSON
document:

    {
      "merkle_root": "0x...",
      "proof_details": [
        {
          "token_contract_address": "0x...",
          "owner_address": "0x...",
          "token_id": "1",
          "proof": ["0x...", ...],
          "etherscan_formatted_proof": "[0x...,0x...]"
        }
      ]
    }
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core.crypto.hashing import from_hex, normalize_address, to_bytes32, to_hex
from core.schemas.records import OwnershipRecord, parse_token_id


def format_etherscan_proof(proof: list[str]) -> str:
    """Render a proof the way block-explorer write forms expect it."""
    return f"[{','.join(proof)}]"


class ProofDetail(BaseModel):
    """One claimant's record plus its authentication path."""

    model_config = ConfigDict(extra="forbid")

    token_contract_address: str = Field(..., description="Collection address")
    owner_address: str = Field(..., description="Rightful owner address")
    token_id: str = Field(..., description="Token id as a decimal string")
    proof: list[str] = Field(
        default_factory=list,
        description="Sibling digests from leaf to root (0x-prefixed)",
    )
    etherscan_formatted_proof: str = Field(
        default="",
        description="Proof rendered as a single bracketed string",
    )

    @field_validator("token_contract_address", "owner_address", mode="before")
    @classmethod
    def _checksum(cls, v: Any) -> str:
        return normalize_address(v)

    @field_validator("token_id", mode="before")
    @classmethod
    def _token_id_decimal(cls, v: Any) -> str:
        return str(parse_token_id(v))

    @field_validator("proof")
    @classmethod
    def _proof_entries_are_bytes32(cls, v: list[str]) -> list[str]:
        for entry in v:
            to_bytes32(entry)
        return v

    @model_validator(mode="after")
    def _fill_etherscan_proof(self) -> "ProofDetail":
        if not self.etherscan_formatted_proof:
            self.etherscan_formatted_proof = format_etherscan_proof(self.proof)
        return self

    @classmethod
    def from_record(cls, record: OwnershipRecord, proof: list[bytes]) -> "ProofDetail":
        return cls(
            token_contract_address=record.collection,
            owner_address=record.owner,
            token_id=str(record.token_id),
            proof=[to_hex(p) for p in proof],
        )

    def to_record(self) -> OwnershipRecord:
        return OwnershipRecord(
            collection=self.token_contract_address,
            owner=self.owner_address,
            token_id=self.token_id,
        )

    def proof_bytes(self) -> list[bytes]:
        return [from_hex(p) for p in self.proof]


class ProofArtifact(BaseModel):
    """Root plus the proof of every committed record."""

    model_config = ConfigDict(extra="forbid")

    merkle_root: str = Field(..., description="Committed root (0x-prefixed bytes32)")
    proof_details: list[ProofDetail] = Field(default_factory=list)

    @field_validator("merkle_root")
    @classmethod
    def _root_is_bytes32(cls, v: str) -> str:
        to_bytes32(v)
        return v.lower()

    @property
    def root_bytes(self) -> bytes:
        return from_hex(self.merkle_root)

    def records(self) -> list[OwnershipRecord]:
        return [d.to_record() for d in self.proof_details]

    def details_for_owner(self, owner: str) -> list[ProofDetail]:
        """All proof details whose owner matches `owner` (any case)."""
        wanted = normalize_address(owner)
        return [d for d in self.proof_details if d.owner_address == wanted]

    def detail_for_token(self, collection: str, token_id: int | str) -> ProofDetail | None:
        wanted = normalize_address(collection)
        wanted_id = str(parse_token_id(token_id))
        for detail in self.proof_details:
            if detail.token_contract_address == wanted and detail.token_id == wanted_id:
                return detail
        return None


__all__ = [
    "ProofDetail",
    "ProofArtifact",
    "format_etherscan_proof",
]
