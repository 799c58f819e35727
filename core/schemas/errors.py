"""
Schemas & Errors
File: errors.py

Purpose: Standard error taxonomy for the token vault.
Defines both a Pydantic model for structured error communication
and Python exceptions for control flow.

Every vault failure aborts the whole call; none of these are retried
inside the vault. Off-platform tooling tells them apart by `code`.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Custody
    INVALID_PROOF = "INVALID_PROOF"
    PAUSED = "PAUSED"
    DELIVERY_NOT_ALLOWED = "DELIVERY_NOT_ALLOWED"
    TOKEN_TRANSFER_FAILED = "TOKEN_TRANSFER_FAILED"
    UNAUTHORIZED = "UNAUTHORIZED"

    # Commitment
    EMPTY_COMMITMENT_INPUT = "EMPTY_COMMITMENT_INPUT"
    LEAF_NOT_FOUND = "LEAF_NOT_FOUND"

    # Deployment
    DEPLOYMENT_FAILED = "DEPLOYMENT_FAILED"

    # Discovery
    DISCOVERY_FAILED = "DISCOVERY_FAILED"


# =============================================================================
# Pydantic Error Model (Structured Communication)
# =============================================================================

class VaultError(BaseModel):
    """
    Error model for structured error communication.

    Used when a failure has to cross a serialization boundary (for example
    when reporting the outcome of a claim attempt as JSON).
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.INVALID_PROOF],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )

    def to_exception(self) -> "VaultException":
        """
        Rebuild the exception this model was produced from.

        Known codes map back to their subclass; unknown codes give a plain
        VaultException carrying the code.
        """
        cls = _EXCEPTIONS_BY_CODE.get(self.code)
        if cls is None:
            return VaultException(
                code=self.code,
                message=self.message,
                details=dict(self.details),
                retryable=self.retryable,
            )
        exc = cls(message=self.message, details=dict(self.details))
        exc.retryable = self.retryable
        return exc


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class VaultException(Exception):
    """
    Base exception for all token vault errors.

    This exception carries structured error information and can be
    converted to/from VaultError models.
    """

    def __init__(
        self,
        message: str,
        code: str = "VAULT_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> VaultError:
        """Convert this exception to a VaultError model."""
        return VaultError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class InvalidProofException(VaultException):
    """Membership check failed against a nonzero root."""

    def __init__(
        self,
        message: str = "Invalid proof",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_PROOF,
            details=details,
            retryable=False,
        )


class PausedException(VaultException):
    """Activity blocked by the pause flag."""

    def __init__(
        self,
        message: str = "Contract is paused",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.PAUSED,
            details=details,
            retryable=False,
        )


class DeliveryNotAllowedException(VaultException):
    """Delivery threshold is zero or still in the future."""

    def __init__(
        self,
        message: str = (
            "Token delivery is not currently allowed. This may be available at a "
            "later time based on the tokenDeliveryAllowedTimestamp value."
        ),
        allowed_at: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if allowed_at is not None:
            full_details["token_delivery_allowed_timestamp"] = allowed_at
        super().__init__(
            message=message,
            code=ErrorCodes.DELIVERY_NOT_ALLOWED,
            details=full_details,
            retryable=False,
        )


class TokenTransferFailedException(VaultException):
    """The asset standard's transfer primitive failed, for any reason."""

    def __init__(
        self,
        message: str = "TokenTransferFailed",
        token_id: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if token_id is not None:
            full_details["token_id"] = token_id
        super().__init__(
            message=message,
            code=ErrorCodes.TOKEN_TRANSFER_FAILED,
            details=full_details,
            retryable=False,
        )


class UnauthorizedException(VaultException):
    """A non-owner invoked an owner-only operation."""

    def __init__(
        self,
        account: str | None = None,
        message: str = "OwnableUnauthorizedAccount",
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if account:
            full_details["account"] = account
        super().__init__(
            message=message,
            code=ErrorCodes.UNAUTHORIZED,
            details=full_details,
            retryable=False,
        )


class EmptyCommitmentInputException(VaultException):
    """A Merkle commitment was requested over zero records."""

    def __init__(
        self,
        message: str = "Cannot build a commitment from zero records",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.EMPTY_COMMITMENT_INPUT,
            details=details,
            retryable=False,
        )


class LeafNotFoundException(VaultException):
    """A proof was requested for a record that is not in the tree."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.LEAF_NOT_FOUND,
            details=details,
            retryable=False,
        )


class DeploymentFailedException(VaultException):
    """A factory deployment could not be carried out."""

    def __init__(
        self,
        message: str,
        address: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if address:
            full_details["address"] = address
        super().__init__(
            message=message,
            code=ErrorCodes.DEPLOYMENT_FAILED,
            details=full_details,
            retryable=False,
        )


class DiscoveryException(VaultException):
    """The ownership discovery service returned an error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        retryable: bool = True,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.DISCOVERY_FAILED,
            details=details,
            retryable=retryable,
        )


_EXCEPTIONS_BY_CODE: dict[str, type[VaultException]] = {
    ErrorCodes.INVALID_PROOF: InvalidProofException,
    ErrorCodes.PAUSED: PausedException,
    ErrorCodes.DELIVERY_NOT_ALLOWED: DeliveryNotAllowedException,
    ErrorCodes.TOKEN_TRANSFER_FAILED: TokenTransferFailedException,
    ErrorCodes.UNAUTHORIZED: UnauthorizedException,
    ErrorCodes.EMPTY_COMMITMENT_INPUT: EmptyCommitmentInputException,
    ErrorCodes.LEAF_NOT_FOUND: LeafNotFoundException,
    ErrorCodes.DEPLOYMENT_FAILED: DeploymentFailedException,
    ErrorCodes.DISCOVERY_FAILED: DiscoveryException,
}
