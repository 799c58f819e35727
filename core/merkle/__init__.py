"""
Merkle Tree and Commitments
Leaf encoding, sorted-pair Merkle construction and proof verification.

This module provides:
- encode_leaf: Double-keccak leaf for an OwnershipRecord
- build_merkle_root / build_merkle_proof / verify_merkle_proof: core functions
- OwnershipMerkleTree: commit a record set, get proofs on demand
- MerkleVerifier: verify a record + proof against a root

Canonical Commitment Rules:
1. Leaf: keccak256(keccak256(abi.encode(address, address, uint256)))
2. Parent: keccak256 of the two children sorted by digest
3. Odd level: last node promoted unchanged
4. Leaves sorted by digest before building
5. Single leaf: root = leaf

Usage:
    from core.merkle import OwnershipMerkleTree, MerkleVerifier

    tree = OwnershipMerkleTree.build(records)
    proof = tree.proof_of(records[0])
    assert MerkleVerifier.verify_record(records[0], proof, tree.root)
"""
from .leaf_encoder import (
    LEAF_TYPES,
    encode_leaf,
    encode_record,
)

from .merkle_tree import (
    merkle_parent,
    build_merkle_levels,
    build_merkle_root,
    build_merkle_proof,
    process_proof,
    verify_merkle_proof,
    compute_tree_depth,
)

from .merkle_proofs import (
    OwnershipMerkleTree,
    MerkleVerifier,
)


__all__ = [
    # Leaves
    "LEAF_TYPES",
    "encode_leaf",
    "encode_record",
    # Core functions
    "merkle_parent",
    "build_merkle_levels",
    "build_merkle_root",
    "build_merkle_proof",
    "process_proof",
    "verify_merkle_proof",
    "compute_tree_depth",
    # Record-level classes
    "OwnershipMerkleTree",
    "MerkleVerifier",
]
