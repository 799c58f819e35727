"""
Token Vault

Custody contract releasing ERC-721 tokens to owners who can prove
membership in a published commitment.

Release paths:
- retrieve_token: the caller is the claimed owner; the proof is checked
  against (collection, caller, token_id).
- deliver_token: anyone may pay to send a token to `owner`; the proof is
  checked against (collection, owner, token_id). Only available once the
  delivery timestamp has passed.

Gates, in the order they are evaluated: pause flag, delivery window
(deliver_token only), proof. A zero root skips the proof check entirely.

Every external operation finishes its checks and emits its event before
the outgoing transfer, which is always the last effect. No vault field is
written after, or depends on, the transfer, so a collection that calls
back into the vault mid-transfer meets exactly the gates any other caller
would.
"""

from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence, TypeVar

from chain.context import CallContext
from chain.contract import Contract, ContractArtifact, placeholder_bytecode, register_contract
from chain.erc721 import ERC721_RECEIVED
from core.crypto.hashing import ZERO_ADDRESS, from_hex, normalize_address, to_bytes32, to_hex
from core.merkle.merkle_proofs import MerkleVerifier
from core.schemas.errors import (
    DeliveryNotAllowedException,
    InvalidProofException,
    PausedException,
    TokenTransferFailedException,
    UnauthorizedException,
)
from core.schemas.records import UINT256_MAX, OwnershipRecord
from vault.state import DeliveryState, VaultState
from vault.transfer import TransferExecutor

if TYPE_CHECKING:
    from chain.host import Chain

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

ProofInput = Sequence[bytes | str]


def _atomic(method: F) -> F:
    """Run a state-changing operation all-or-nothing."""
    @functools.wraps(method)
    def wrapper(self: "TokenVault", *args: Any, **kwargs: Any) -> Any:
        with self.chain.atomic():
            return method(self, *args, **kwargs)
    return wrapper  # type: ignore[return-value]


def _coerce_proof(proof: ProofInput) -> list[bytes]:
    return [from_hex(p) if isinstance(p, str) else bytes(p) for p in proof]


@register_contract
class TokenVault(Contract):
    """
    Custody state machine.

    Constructor arguments: (merkle_root: bytes32, paused: bool,
    token_delivery_allowed_timestamp: uint256). The owner is the origin of
    the deploying transaction, so deploying through a factory still hands
    ownership to the account that signed.
    """

    ARTIFACT = ContractArtifact(
        contract_name="TokenVault",
        bytecode=placeholder_bytecode("TokenVault"),
        constructor_types=("bytes32", "bool", "uint256"),
    )

    def __init__(
        self,
        chain: "Chain",
        address: str,
        ctx: CallContext,
        merkle_root: bytes | str,
        paused: bool,
        token_delivery_allowed_timestamp: int,
    ) -> None:
        super().__init__(chain, address)
        self.state: VaultState = VaultState(
            merkle_root=merkle_root,
            paused=paused,
            token_delivery_allowed_timestamp=token_delivery_allowed_timestamp,
            owner=ctx.origin,
        )
        self._executor = TransferExecutor(chain, address)
        self.emit("OwnershipTransferred", previous_owner=ZERO_ADDRESS, new_owner=self.state.owner)
        logger.info(
            f"TokenVault at {address}: owner={self.state.owner} "
            f"root={to_hex(self.state.merkle_root)} paused={paused} "
            f"delivery_at={token_delivery_allowed_timestamp}"
        )

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def merkle_root(self) -> bytes:
        return self.state.merkle_root

    def paused(self) -> bool:
        return self.state.paused

    def token_delivery_allowed_timestamp(self) -> int:
        return self.state.token_delivery_allowed_timestamp

    def owner(self) -> str:
        return self.state.owner

    def delivery_state(self, timestamp: Optional[int] = None) -> DeliveryState:
        now = self.chain.timestamp if timestamp is None else timestamp
        return self.state.delivery_state(now)

    def verify_merkle_proof(
        self,
        collection: str,
        owner: str,
        token_id: int,
        proof: ProofInput,
    ) -> bool:
        """
        Check a proof against the current root without attempting a release.

        Returns False for any mismatch, including when the root is zero or
        a proof entry is not valid hex.
        """
        try:
            siblings = _coerce_proof(proof)
        except (TypeError, ValueError):
            return False
        record = OwnershipRecord(collection=collection, owner=owner, token_id=token_id)
        return MerkleVerifier.verify_record(record, siblings, self.state.merkle_root)

    # ------------------------------------------------------------------
    # Gates
    # ------------------------------------------------------------------

    def _only_owner(self, ctx: CallContext) -> None:
        if ctx.sender != self.state.owner:
            raise UnauthorizedException(account=ctx.sender)

    def _when_not_paused(self) -> None:
        if self.state.paused:
            raise PausedException()

    def _when_delivery_open(self, ctx: CallContext) -> None:
        if self.state.delivery_state(ctx.timestamp) is not DeliveryState.OPEN:
            raise DeliveryNotAllowedException(
                allowed_at=self.state.token_delivery_allowed_timestamp,
            )

    def _require_valid_proof(
        self,
        collection: str,
        owner: str,
        token_id: int,
        proof: ProofInput,
    ) -> None:
        if not self.state.verification_enabled:
            return
        if not self.verify_merkle_proof(collection, owner, token_id, proof):
            raise InvalidProofException(
                details={"collection": collection, "owner": owner, "token_id": token_id},
            )

    def _transfer_out(self, ctx: CallContext, collection: str, to: str, token_id: int) -> None:
        result = self._executor.execute(ctx, collection, to, token_id)
        if not result.ok:
            raise TokenTransferFailedException(token_id=token_id)

    # ------------------------------------------------------------------
    # Release paths
    # ------------------------------------------------------------------

    @_atomic
    def retrieve_token(
        self,
        ctx: CallContext,
        collection: str,
        token_id: int,
        proof: ProofInput,
    ) -> None:
        """
        Release a token to the caller, who must be its committed owner.

        Raises:
            PausedException: Vault is paused
            InvalidProofException: Root is nonzero and the proof does not
                commit (collection, caller, token_id)
            TokenTransferFailedException: Vault could not transfer the token
        """
        self._when_not_paused()
        collection = normalize_address(collection)
        self._require_valid_proof(collection, ctx.sender, token_id, proof)

        self.emit("TokenRetrieved", token_id=token_id, owner=ctx.sender)
        self._transfer_out(ctx, collection, ctx.sender, token_id)
        logger.info(f"Token #{token_id} of {collection} retrieved by {ctx.sender}")

    @_atomic
    def deliver_token(
        self,
        ctx: CallContext,
        collection: str,
        owner: str,
        token_id: int,
        proof: ProofInput,
    ) -> None:
        """
        Release a token to `owner` on their behalf; the caller only pays.

        Raises:
            PausedException: Vault is paused
            DeliveryNotAllowedException: Delivery timestamp is zero or in the future
            InvalidProofException: Root is nonzero and the proof does not
                commit (collection, owner, token_id)
            TokenTransferFailedException: Vault could not transfer the token
        """
        self._when_not_paused()
        self._when_delivery_open(ctx)
        collection = normalize_address(collection)
        owner = normalize_address(owner)
        self._require_valid_proof(collection, owner, token_id, proof)

        self.emit("TokenDelivered", token_id=token_id, owner=owner, facilitator=ctx.sender)
        self._transfer_out(ctx, collection, owner, token_id)
        logger.info(f"Token #{token_id} of {collection} delivered to {owner} by {ctx.sender}")

    # ------------------------------------------------------------------
    # Owner-only setters
    # ------------------------------------------------------------------

    @_atomic
    def set_merkle_root(self, ctx: CallContext, merkle_root: bytes | str) -> None:
        self._only_owner(ctx)
        self.state.merkle_root = to_bytes32(merkle_root)
        self.emit("MerkleRootUpdated", merkle_root=self.state.merkle_root)
        logger.info(f"Merkle root set to {to_hex(self.state.merkle_root)}")

    @_atomic
    def set_paused(self, ctx: CallContext, paused: bool) -> None:
        self._only_owner(ctx)
        self.state.paused = paused
        self.emit("PausedUpdated", paused=paused)
        logger.info(f"Paused set to {paused}")

    @_atomic
    def set_token_delivery_allowed_timestamp(self, ctx: CallContext, timestamp: int) -> None:
        self._only_owner(ctx)
        if not 0 <= timestamp <= UINT256_MAX:
            raise ValueError(f"Timestamp must fit in uint256, got {timestamp}")
        self.state.token_delivery_allowed_timestamp = timestamp
        self.emit("TokenDeliveryAllowedTimestampUpdated", timestamp=timestamp)
        logger.info(f"Token delivery allowed timestamp set to {timestamp}")

    @_atomic
    def transfer_ownership(self, ctx: CallContext, new_owner: str) -> None:
        self._only_owner(ctx)
        new_owner = normalize_address(new_owner)
        if new_owner == ZERO_ADDRESS:
            raise ValueError("OwnableInvalidOwner: new owner is the zero address")
        previous = self.state.owner
        self.state.owner = new_owner
        self.emit("OwnershipTransferred", previous_owner=previous, new_owner=new_owner)

    # ------------------------------------------------------------------
    # Owner-only recovery
    # ------------------------------------------------------------------

    @_atomic
    def admin_transfer_token(self, ctx: CallContext, collection: str, to: str, token_id: int) -> None:
        """Move a token out regardless of pause state or proofs."""
        self._only_owner(ctx)
        collection = normalize_address(collection)
        to = normalize_address(to)
        self._transfer_out(ctx, collection, to, token_id)
        logger.info(f"Admin transferred #{token_id} of {collection} to {to}")

    @_atomic
    def admin_transfer_tokens(
        self,
        ctx: CallContext,
        collection: str,
        to: str,
        token_ids: Sequence[int],
    ) -> None:
        """
        Move several tokens out; if any one fails, none move.

        Raises:
            TokenTransferFailedException: For the first token that could not move
        """
        self._only_owner(ctx)
        collection = normalize_address(collection)
        to = normalize_address(to)
        for token_id in token_ids:
            self._transfer_out(ctx, collection, to, token_id)
        logger.info(f"Admin transferred {len(token_ids)} tokens of {collection} to {to}")

    # ------------------------------------------------------------------
    # Inbound tokens and native value
    # ------------------------------------------------------------------

    def on_erc721_received(
        self,
        ctx: CallContext,
        operator: str,
        from_: str,
        token_id: int,
        data: bytes,
    ) -> bytes:
        """Accept every inbound safe transfer."""
        return ERC721_RECEIVED

    def receive(self, ctx: CallContext) -> None:
        """Accept plain value transfers."""

    def tip_jar(self, ctx: CallContext) -> None:
        self.emit("TipReceived", sender=ctx.sender, amount=ctx.value)

    @_atomic
    def withdraw(self, ctx: CallContext) -> int:
        """Send the vault's whole native balance to the owner."""
        self._only_owner(ctx)
        amount = self.chain.balance_of(self.address)
        self.chain.pay(ctx, self.address, self.state.owner, amount)
        self.emit("Withdrawal", to=self.state.owner, amount=amount)
        logger.info(f"Withdrew {amount} to {self.state.owner}")
        return amount


__all__ = ["TokenVault"]
