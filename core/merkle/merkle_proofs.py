"""
Ownership Commitments
Record-level wrappers around the core Merkle tree functions.

This module provides:
- OwnershipMerkleTree: commit a record set, hand out proofs on demand
- MerkleVerifier: check a (record, proof) pair against a root

Leaves are sorted by digest before the tree is built, which together with
sorted-pair parents makes the root independent of input record order.
"""
from __future__ import annotations

import logging
from typing import Iterable, Iterator, Sequence

from core.merkle.leaf_encoder import encode_leaf
from core.merkle.merkle_tree import (
    build_merkle_levels,
    proof_from_levels,
    verify_merkle_proof,
)
from core.schemas.errors import EmptyCommitmentInputException, LeafNotFoundException
from core.schemas.records import OwnershipRecord

logger = logging.getLogger(__name__)


class OwnershipMerkleTree:
    """
    Commitment over a fixed multiset of ownership records.

    The tree is built once; changing the record set means building a new
    tree and publishing its root.

    Example:
        >>> tree = OwnershipMerkleTree.build(records)
        >>> proof = tree.proof_of(records[0])
        >>> MerkleVerifier.verify_record(records[0], proof, tree.root)
        True
    """

    def __init__(self, records: Sequence[OwnershipRecord]) -> None:
        if len(records) == 0:
            raise EmptyCommitmentInputException()

        self._records: list[OwnershipRecord] = list(records)
        hashed = [(encode_leaf(r), r) for r in self._records]
        hashed.sort(key=lambda pair: pair[0])

        self._leaves: list[bytes] = [leaf for leaf, _ in hashed]
        self._levels = build_merkle_levels(self._leaves)

        # First occurrence wins for duplicate records
        self._index_by_leaf: dict[bytes, int] = {}
        for i, leaf in enumerate(self._leaves):
            self._index_by_leaf.setdefault(leaf, i)

        logger.debug(
            f"Built ownership tree over {len(self._records)} records, "
            f"depth {len(self._levels)}"
        )

    @classmethod
    def build(cls, records: Iterable[OwnershipRecord]) -> "OwnershipMerkleTree":
        """
        Build a tree from records.

        Raises:
            EmptyCommitmentInputException: If there are no records
        """
        return cls(list(records))

    @property
    def root(self) -> bytes:
        return self._levels[-1][0]

    @property
    def records(self) -> list[OwnershipRecord]:
        """Records in their original input order."""
        return list(self._records)

    @property
    def leaves(self) -> list[bytes]:
        """Leaves in tree order (sorted by digest)."""
        return list(self._leaves)

    @property
    def depth(self) -> int:
        return len(self._levels)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record: object) -> bool:
        if not isinstance(record, OwnershipRecord):
            return False
        return encode_leaf(record) in self._index_by_leaf

    def proof_of(self, record: OwnershipRecord) -> list[bytes]:
        """
        Sibling path for a committed record.

        Raises:
            LeafNotFoundException: If the record was not committed
        """
        leaf = encode_leaf(record)
        index = self._index_by_leaf.get(leaf)
        if index is None:
            raise LeafNotFoundException(
                f"Record not in tree: {record.collection} #{record.token_id} -> {record.owner}",
                details={
                    "collection": record.collection,
                    "owner": record.owner,
                    "token_id": record.token_id,
                },
            )
        return proof_from_levels(self._levels, index)

    def entries(self) -> Iterator[tuple[OwnershipRecord, list[bytes]]]:
        """Yield (record, proof) for every record in input order."""
        for record in self._records:
            yield record, self.proof_of(record)


class MerkleVerifier:
    """
    Convenience class for verifying record proofs.

    Example:
        >>> MerkleVerifier.verify_record(record, proof, root)
        True
    """

    @staticmethod
    def verify_leaf(leaf: bytes, proof: Sequence[bytes], root: bytes) -> bool:
        return verify_merkle_proof(leaf, proof, root)

    @staticmethod
    def verify_record(
        record: OwnershipRecord,
        proof: Sequence[bytes],
        root: bytes,
    ) -> bool:
        """
        Re-derive the record's leaf and fold the proof into it.

        Returns False for any mismatch; never raises for well-typed input.
        """
        return verify_merkle_proof(encode_leaf(record), proof, root)


__all__ = [
    "OwnershipMerkleTree",
    "MerkleVerifier",
]
