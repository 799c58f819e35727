"""
Host platform errors.

These belong to the platform and to the asset standard, not to the vault.
The vault never lets them escape: the transfer executor folds them into
TokenTransferFailedException.
"""

from __future__ import annotations

from typing import Any


class ChainError(Exception):
    """Base class for host platform failures."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ContractNotFoundError(ChainError):
    """No contract is deployed at the address."""

    def __init__(self, address: str) -> None:
        super().__init__(f"No contract at {address}", details={"address": address})
        self.address = address


class InsufficientFundsError(ChainError):
    """Value transfer exceeds the sender's balance."""


class ERC721Error(ChainError):
    """
    Revert raised by an ERC-721 collection.

    `reason` carries the standard's error name, e.g. ERC721NonexistentToken.
    """

    def __init__(self, reason: str, **details: Any) -> None:
        super().__init__(reason, details=details)
        self.reason = reason


__all__ = [
    "ChainError",
    "ContractNotFoundError",
    "InsufficientFundsError",
    "ERC721Error",
]
