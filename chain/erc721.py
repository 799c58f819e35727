"""
Reference ERC-721 collection.

The asset standard is an external collaborator of the vault; this is a
minimal implementation of its contract so custody can be exercised
end-to-end. It follows the standard's rules for ownership, approvals and
the safe-transfer acknowledgment handshake, and reverts with ERC721Error.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from eth_utils import function_signature_to_4byte_selector
from pydantic import BaseModel, ConfigDict, Field

from chain.context import CallContext
from chain.contract import Contract, ContractArtifact, placeholder_bytecode, register_contract
from chain.errors import ERC721Error
from core.crypto.hashing import ZERO_ADDRESS, normalize_address

if TYPE_CHECKING:
    from chain.host import Chain

logger = logging.getLogger(__name__)


# bytes4(keccak256("onERC721Received(address,address,uint256,bytes)")) == 0x150b7a02
ERC721_RECEIVED: bytes = function_signature_to_4byte_selector(
    "onERC721Received(address,address,uint256,bytes)"
)


class ERC721State(BaseModel):
    """Storage of a collection."""

    model_config = ConfigDict(extra="forbid")

    name: str
    symbol: str
    owners: dict[int, str] = Field(default_factory=dict)
    token_approvals: dict[int, str] = Field(default_factory=dict)
    operator_approvals: dict[str, set[str]] = Field(default_factory=dict)
    next_token_id: int = 1


@register_contract
class ERC721Collection(Contract):
    """
    ERC-721 collection with a free public mint, like the test tokens the
    vault is exercised against.
    """

    ARTIFACT = ContractArtifact(
        contract_name="ERC721Collection",
        bytecode=placeholder_bytecode("ERC721Collection"),
        constructor_types=("string", "string"),
    )

    def __init__(
        self,
        chain: "Chain",
        address: str,
        ctx: CallContext,
        name: str = "Test ERC721 Token",
        symbol: str = "TEST",
    ) -> None:
        super().__init__(chain, address)
        self.state: ERC721State = ERC721State(name=name, symbol=symbol)

    # -- views ---------------------------------------------------------

    def name(self) -> str:
        return self.state.name

    def symbol(self) -> str:
        return self.state.symbol

    def exists(self, token_id: int) -> bool:
        return token_id in self.state.owners

    def owner_of(self, token_id: int) -> str:
        owner = self.state.owners.get(token_id)
        if owner is None:
            raise ERC721Error("ERC721NonexistentToken", token_id=token_id)
        return owner

    def balance_of(self, owner: str) -> int:
        owner = normalize_address(owner)
        if owner == ZERO_ADDRESS:
            raise ERC721Error("ERC721InvalidOwner", owner=owner)
        return sum(1 for holder in self.state.owners.values() if holder == owner)

    def get_approved(self, token_id: int) -> str:
        self.owner_of(token_id)
        return self.state.token_approvals.get(token_id, ZERO_ADDRESS)

    def is_approved_for_all(self, owner: str, operator: str) -> bool:
        operators = self.state.operator_approvals.get(normalize_address(owner), set())
        return normalize_address(operator) in operators

    # -- minting -------------------------------------------------------

    def mint(self, ctx: CallContext, to: str, token_id: int) -> None:
        to = normalize_address(to)
        if to == ZERO_ADDRESS:
            raise ERC721Error("ERC721InvalidReceiver", receiver=to)
        if token_id in self.state.owners:
            raise ERC721Error("ERC721InvalidSender", sender=ZERO_ADDRESS, token_id=token_id)
        self.state.owners[token_id] = to
        self.state.next_token_id = max(self.state.next_token_id, token_id + 1)
        self.emit("Transfer", from_=ZERO_ADDRESS, to=to, token_id=token_id)

    def free_mint(self, ctx: CallContext, quantity: int = 1) -> list[int]:
        """Mint the next `quantity` sequential ids to the caller."""
        minted: list[int] = []
        for _ in range(quantity):
            token_id = self.state.next_token_id
            self.mint(ctx, ctx.sender, token_id)
            minted.append(token_id)
        return minted

    # -- approvals -----------------------------------------------------

    def approve(self, ctx: CallContext, to: str, token_id: int) -> None:
        owner = self.owner_of(token_id)
        if ctx.sender != owner and not self.is_approved_for_all(owner, ctx.sender):
            raise ERC721Error("ERC721InvalidApprover", approver=ctx.sender)
        self.state.token_approvals[token_id] = normalize_address(to)
        self.emit("Approval", owner=owner, approved=normalize_address(to), token_id=token_id)

    def set_approval_for_all(self, ctx: CallContext, operator: str, approved: bool) -> None:
        operator = normalize_address(operator)
        operators = self.state.operator_approvals.setdefault(ctx.sender, set())
        if approved:
            operators.add(operator)
        else:
            operators.discard(operator)
        self.emit("ApprovalForAll", owner=ctx.sender, operator=operator, approved=approved)

    # -- transfers -----------------------------------------------------

    def _is_authorized(self, owner: str, spender: str, token_id: int) -> bool:
        return (
            spender == owner
            or self.is_approved_for_all(owner, spender)
            or self.state.token_approvals.get(token_id) == spender
        )

    def transfer_from(self, ctx: CallContext, from_: str, to: str, token_id: int) -> None:
        from_ = normalize_address(from_)
        to = normalize_address(to)
        if to == ZERO_ADDRESS:
            raise ERC721Error("ERC721InvalidReceiver", receiver=to)

        owner = self.owner_of(token_id)
        if owner != from_:
            raise ERC721Error("ERC721IncorrectOwner", sender=from_, token_id=token_id, owner=owner)
        if not self._is_authorized(owner, ctx.sender, token_id):
            raise ERC721Error("ERC721InsufficientApproval", operator=ctx.sender, token_id=token_id)

        self.state.token_approvals.pop(token_id, None)
        self.state.owners[token_id] = to
        self.emit("Transfer", from_=from_, to=to, token_id=token_id)

    def safe_transfer_from(
        self,
        ctx: CallContext,
        from_: str,
        to: str,
        token_id: int,
        data: bytes = b"",
    ) -> None:
        """Transfer, then require contract recipients to acknowledge receipt."""
        self.transfer_from(ctx, from_, to, token_id)
        self._check_on_erc721_received(ctx, normalize_address(from_), normalize_address(to), token_id, data)

    def _check_on_erc721_received(
        self,
        ctx: CallContext,
        from_: str,
        to: str,
        token_id: int,
        data: bytes,
    ) -> None:
        recipient = self.chain.get_contract(to)
        if recipient is None:
            return
        hook = getattr(recipient, "on_erc721_received", None)
        if hook is None:
            raise ERC721Error("ERC721InvalidReceiver", receiver=to)
        retval = hook(ctx.forward(self.address), ctx.sender, from_, token_id, data)
        if retval != ERC721_RECEIVED:
            raise ERC721Error("ERC721InvalidReceiver", receiver=to)


__all__ = [
    "ERC721_RECEIVED",
    "ERC721Collection",
    "ERC721State",
]
