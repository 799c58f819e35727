"""
Schemas & Errors
File: __init__.py

Purpose: Export the public API for the schemas module.
"""

from .errors import (
    DeliveryNotAllowedException,
    DeploymentFailedException,
    DiscoveryException,
    EmptyCommitmentInputException,
    ErrorCodes,
    InvalidProofException,
    LeafNotFoundException,
    PausedException,
    TokenTransferFailedException,
    UnauthorizedException,
    VaultError,
    VaultException,
)

from .records import (
    UINT256_MAX,
    OwnershipRecord,
)

from .artifacts import (
    ProofArtifact,
    ProofDetail,
    format_etherscan_proof,
)


__all__ = [
    # Errors
    "DeliveryNotAllowedException",
    "DeploymentFailedException",
    "DiscoveryException",
    "EmptyCommitmentInputException",
    "ErrorCodes",
    "InvalidProofException",
    "LeafNotFoundException",
    "PausedException",
    "TokenTransferFailedException",
    "UnauthorizedException",
    "VaultError",
    "VaultException",
    # Records
    "UINT256_MAX",
    "OwnershipRecord",
    # Artifacts
    "ProofArtifact",
    "ProofDetail",
    "format_etherscan_proof",
]
