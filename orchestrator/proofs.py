"""
Proof Publication Pipeline

Discovery -> commitment -> published artifact. Runs off-platform as a
single batch: the whole record set must be known before any proof is
produced, and the root it prints is what the vault owner installs.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from core.crypto.hashing import to_hex
from core.merkle.merkle_proofs import OwnershipMerkleTree
from core.schemas.artifacts import ProofArtifact, ProofDetail
from core.schemas.records import OwnershipRecord
from orchestrator.artifacts.io import save_proof_artifact
from orchestrator.discovery import RightfulOwnerFinder

logger = logging.getLogger(__name__)


def build_proof_artifact(records: Iterable[OwnershipRecord]) -> ProofArtifact:
    """
    Commit `records` and attach every record's proof, in input order.

    Raises:
        EmptyCommitmentInputException: If there are no records
    """
    tree = OwnershipMerkleTree.build(records)
    details = [ProofDetail.from_record(record, proof) for record, proof in tree.entries()]
    return ProofArtifact(merkle_root=to_hex(tree.root), proof_details=details)


def generate_proofs_info(
    finder: RightfulOwnerFinder,
    collection: str,
    holder: str,
    out_path: Optional[str | Path] = None,
) -> ProofArtifact:
    """
    Discover the records for (collection, holder), commit them and
    optionally write the artifact to `out_path`.
    """
    records = finder.find_owners(collection, holder)
    artifact = build_proof_artifact(records)
    logger.info(f"Merkle root {artifact.merkle_root} over {len(records)} tokens")

    if out_path is not None:
        path = save_proof_artifact(artifact, out_path)
        logger.info(f"Proof details written to {path} for {len(artifact.proof_details)} tokens")
    return artifact


__all__ = [
    "build_proof_artifact",
    "generate_proofs_info",
]
