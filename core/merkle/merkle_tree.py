"""
Merkle Tree Implementation
Deterministic Merkle tree construction, proof generation, and verification.

This module provides:
- Deterministic Merkle root computation over pre-hashed leaves
- Merkle proof generation for any leaf index
- Merkle proof verification by folding siblings into the leaf

Canonical Commitment Rules (Hard Contracts):
1. Leaf hashing happens upstream (core.merkle.leaf_encoder.encode_leaf)
2. Parent hashing: parent = keccak256(sorted(left, right)) - see
   core.crypto.hashing.hash_pair_sorted
3. Odd levels: the last node is promoted unchanged to the next level.
   It is NOT duplicated. A promoted node contributes no sibling to proofs.
4. Empty leaves: not a valid tree (callers raise EmptyCommitmentInputException)
5. Single leaf: root = leaf, proof = []

Because parents are order-independent, a proof is just a list of sibling
digests; no left/right flags or leaf index are needed to verify it.
"""
from __future__ import annotations

from functools import reduce
from typing import Sequence

from core.crypto.hashing import hash_pair_sorted


def merkle_parent(left: bytes, right: bytes) -> bytes:
    """
    Compute the parent hash of two child nodes.

    Children are ordered by digest value before hashing, so
    merkle_parent(a, b) == merkle_parent(b, a).
    """
    return hash_pair_sorted(left, right)


def build_merkle_levels(leaves: Sequence[bytes]) -> list[list[bytes]]:
    """
    Build every level of the tree, leaves first, root last.

    Example: [a, b, c] -> [[a, b, c], [parent(a,b), c], [parent(parent(a,b), c)]]

    Raises:
        ValueError: If leaves is empty
    """
    if len(leaves) == 0:
        raise ValueError("Cannot build a Merkle tree from an empty leaf list")

    levels: list[list[bytes]] = [list(leaves)]

    while len(levels[-1]) > 1:
        current_level = levels[-1]
        next_level: list[bytes] = []
        for i in range(0, len(current_level) - 1, 2):
            next_level.append(merkle_parent(current_level[i], current_level[i + 1]))

        # Promote the unpaired last node
        if len(current_level) % 2 == 1:
            next_level.append(current_level[-1])

        levels.append(next_level)

    return levels


def build_merkle_root(leaves: Sequence[bytes]) -> bytes:
    """
    Build a Merkle root from a sequence of leaf hashes.

    Raises:
        ValueError: If leaves is empty
    """
    return build_merkle_levels(leaves)[-1][0]


def proof_from_levels(levels: list[list[bytes]], index: int) -> list[bytes]:
    """
    Collect the sibling path for leaf `index` from prebuilt levels.

    Raises:
        IndexError: If index is out of range
    """
    if index < 0 or index >= len(levels[0]):
        raise IndexError(
            f"Leaf index {index} out of range for {len(levels[0])} leaves"
        )

    siblings: list[bytes] = []
    current_index = index

    for level in levels[:-1]:
        sibling_index = current_index ^ 1
        # A promoted node has no sibling on this level
        if sibling_index < len(level):
            siblings.append(level[sibling_index])
        current_index //= 2

    return siblings


def build_merkle_proof(leaves: Sequence[bytes], index: int) -> list[bytes]:
    """
    Generate the sibling path (bottom-up) for the leaf at `index`.

    Raises:
        IndexError: If index is out of range
        ValueError: If leaves is empty
    """
    return proof_from_levels(build_merkle_levels(leaves), index)


def process_proof(leaf: bytes, proof: Sequence[bytes]) -> bytes:
    """Fold a proof into a leaf, returning the implied root."""
    return reduce(merkle_parent, proof, leaf)


def verify_merkle_proof(leaf: bytes, proof: Sequence[bytes], root: bytes) -> bool:
    """
    Verify that `leaf` is committed under `root`.

    Returns:
        True if folding the proof into the leaf reproduces the root
    """
    return process_proof(leaf, proof) == root


def compute_tree_depth(num_leaves: int) -> int:
    """
    Number of levels from leaves to root (inclusive).

    A single leaf has depth 1, two or three leaves depth 2, and so on.
    Returns 0 for an empty tree.
    """
    if num_leaves == 0:
        return 0

    depth = 1
    n = num_leaves
    while n > 1:
        n = (n + 1) // 2
        depth += 1

    return depth


__all__ = [
    "merkle_parent",
    "build_merkle_levels",
    "build_merkle_root",
    "proof_from_levels",
    "build_merkle_proof",
    "process_proof",
    "verify_merkle_proof",
    "compute_tree_depth",
]
