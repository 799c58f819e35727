"""
Off-platform pipeline.

Discovers the rightful owners of tokens held by an address, commits them
into a Merkle root and publishes the per-owner proofs as a JSON artifact.

Public API:
- AssetTransfersClient: JSON-RPC client for the transfer history service
- RightfulOwnerFinder: turns transfer history into ownership records
- build_proof_artifact: commit records and attach their proofs
- generate_proofs_info: discovery + commitment + optional write to disk
- save_proof_artifact / load_proof_artifact / verify_proof_artifact
"""

from orchestrator.discovery import (
    ASSET_TRANSFERS_METHOD,
    AssetTransfersClient,
    RightfulOwnerFinder,
)
from orchestrator.proofs import build_proof_artifact, generate_proofs_info
from orchestrator.artifacts import (
    ArtifactIOError,
    ArtifactVerificationError,
    ArtifactVerificationResult,
    load_proof_artifact,
    save_proof_artifact,
    verify_proof_artifact,
)


__all__ = [
    "ASSET_TRANSFERS_METHOD",
    "ArtifactIOError",
    "ArtifactVerificationError",
    "ArtifactVerificationResult",
    "AssetTransfersClient",
    "RightfulOwnerFinder",
    "build_proof_artifact",
    "generate_proofs_info",
    "load_proof_artifact",
    "save_proof_artifact",
    "verify_proof_artifact",
]
