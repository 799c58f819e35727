"""
Artifact IO

Provides functionality for saving, loading, and re-checking the published
proof artifact.
"""

from orchestrator.artifacts.io import (
    ArtifactIOError,
    ArtifactVerificationError,
    ArtifactVerificationResult,
    compute_sha256,
    dump_json,
    load_proof_artifact,
    save_proof_artifact,
    verify_proof_artifact,
)

__all__ = [
    "ArtifactIOError",
    "ArtifactVerificationError",
    "ArtifactVerificationResult",
    "compute_sha256",
    "dump_json",
    "load_proof_artifact",
    "save_proof_artifact",
    "verify_proof_artifact",
]
