"""
Vault State

The four stored fields of a vault and the delivery predicate derived from
them. Only the root is kept on the vault; the record set it commits to is
published off-platform.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from core.crypto.hashing import ZERO_HASH, normalize_address, to_bytes32, to_hex


class DeliveryState(str, Enum):
    """
    Delivery gate, evaluated at call time.

    DISABLED: threshold is zero
    SCHEDULED: threshold is nonzero and still in the future
    OPEN: threshold is nonzero and at or before now
    """
    DISABLED = "disabled"
    SCHEDULED = "scheduled"
    OPEN = "open"


class VaultState(BaseModel):
    """
    Stored fields of a TokenVault.

    A zero merkle_root turns proof verification off; a zero
    token_delivery_allowed_timestamp turns delivery off.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    merkle_root: bytes = Field(default=ZERO_HASH, description="Committed root (32 bytes)")
    paused: bool = Field(default=False)
    token_delivery_allowed_timestamp: int = Field(default=0, ge=0, le=2**256 - 1)
    owner: str = Field(..., description="Administrator; set to the deploying transaction's origin")

    @field_validator("merkle_root", mode="before")
    @classmethod
    def _root_is_bytes32(cls, v: Any) -> bytes:
        return to_bytes32(v)

    @field_validator("owner", mode="before")
    @classmethod
    def _checksum(cls, v: Any) -> str:
        return normalize_address(v)

    @field_serializer("merkle_root")
    def _root_hex(self, v: bytes) -> str:
        return to_hex(v)

    @property
    def verification_enabled(self) -> bool:
        return self.merkle_root != ZERO_HASH

    def delivery_state(self, now: int) -> DeliveryState:
        threshold = self.token_delivery_allowed_timestamp
        if threshold == 0:
            return DeliveryState.DISABLED
        if threshold > now:
            return DeliveryState.SCHEDULED
        return DeliveryState.OPEN


__all__ = [
    "DeliveryState",
    "VaultState",
]
