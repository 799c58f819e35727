"""
Artifact IO
File: io.py

Purpose: Save, load and re-check the published proof artifact.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from core.merkle.merkle_proofs import MerkleVerifier, OwnershipMerkleTree
from core.schemas.artifacts import ProofArtifact, ProofDetail
from core.schemas.records import OwnershipRecord

logger = logging.getLogger(__name__)


class ArtifactIOError(Exception):
    """Error during artifact IO operations."""
    pass


class ArtifactVerificationError(ArtifactIOError):
    """A loaded artifact does not authenticate against its own root."""
    def __init__(self, result: "ArtifactVerificationResult"):
        self.result = result
        super().__init__(
            f"{len(result.invalid)} of {result.checked} proofs invalid"
            + ("" if result.root_matches else "; root does not match records")
        )


@dataclass
class ArtifactVerificationResult:
    """Outcome of re-checking every proof in an artifact."""
    checked: int
    root_matches: bool
    invalid: list[ProofDetail] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.root_matches and not self.invalid


def dump_json(artifact: ProofArtifact) -> str:
    """Serialize an artifact as pretty JSON (2-space indent)."""
    return json.dumps(artifact.model_dump(mode="json"), indent=2)


def compute_sha256(data: bytes) -> str:
    """Compute SHA-256 hex digest of data."""
    return hashlib.sha256(data).hexdigest()


def save_proof_artifact(artifact: ProofArtifact, out_path: str | Path) -> Path:
    """
    Write the artifact to `out_path`, creating parent directories.

    Returns:
        Path to the written file
    """
    path = Path(out_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = dump_json(artifact).encode("utf-8")
    path.write_bytes(data)
    logger.debug(f"Wrote {path} ({len(data)} bytes, sha256={compute_sha256(data)})")
    return path


def _read_json_file(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ArtifactIOError(f"Invalid JSON in {path}: {e}") from e


def load_proof_artifact(path: str | Path, *, verify: bool = False) -> ProofArtifact:
    """
    Load an artifact from disk.

    Args:
        path: Artifact file
        verify: Re-check every proof against the root after loading

    Raises:
        ArtifactIOError: Missing file, bad JSON or schema violation
        ArtifactVerificationError: verify=True and the artifact does not
            authenticate
    """
    path = Path(path)
    if not path.is_file():
        raise ArtifactIOError(f"Artifact not found: {path}")

    try:
        artifact = ProofArtifact.model_validate(_read_json_file(path))
    except ValidationError as e:
        raise ArtifactIOError(f"Invalid proof artifact {path}: {e}") from e

    if verify:
        result = verify_proof_artifact(artifact)
        if not result.ok:
            raise ArtifactVerificationError(result)
    return artifact


def verify_proof_artifact(artifact: ProofArtifact) -> ArtifactVerificationResult:
    """
    Check every proof against the artifact's root, and that the root is
    the commitment of the listed records.
    """
    root = artifact.root_bytes
    invalid: list[ProofDetail] = []
    records: list[OwnershipRecord] = []
    for detail in artifact.proof_details:
        try:
            record = detail.to_record()
        except ValidationError as e:
            logger.warning(f"Unreadable record for token {detail.token_id}: {e}")
            invalid.append(detail)
            continue
        records.append(record)
        if not MerkleVerifier.verify_record(record, detail.proof_bytes(), root):
            invalid.append(detail)

    root_matches = (
        bool(records)
        and len(records) == len(artifact.proof_details)
        and OwnershipMerkleTree.build(records).root == root
    )

    result = ArtifactVerificationResult(
        checked=len(artifact.proof_details),
        root_matches=root_matches,
        invalid=invalid,
    )
    if not result.ok:
        logger.warning(
            f"Artifact with root {artifact.merkle_root}: {len(invalid)} invalid proofs, "
            f"root_matches={root_matches}"
        )
    return result


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
