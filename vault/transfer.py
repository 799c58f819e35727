"""
Transfer Executor

Moves one token out of custody through the collection's safe-transfer
primitive and reports only whether it worked.

Whether the vault did not hold the token, the collection blocked the
move, or the recipient refused it, the caller sees the same failed
result. The cause is logged at DEBUG level and then dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from chain.context import CallContext

if TYPE_CHECKING:
    from chain.host import Chain

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferResult:
    """Outcome of one transfer attempt."""
    ok: bool
    collection: str
    to: str
    token_id: int


class TransferExecutor:
    """
    Safe-transfer wrapper bound to one vault address.

    Usage:
        executor = TransferExecutor(chain, vault.address)
        result = executor.execute(ctx, collection, recipient, token_id)
        if not result.ok:
            raise TokenTransferFailedException(token_id=token_id)
    """

    def __init__(self, chain: "Chain", vault_address: str) -> None:
        self.chain = chain
        self.vault_address = vault_address

    def execute(
        self,
        ctx: CallContext,
        collection: str,
        to: str,
        token_id: int,
    ) -> TransferResult:
        """
        Attempt safe_transfer_from(vault, to, token_id) on `collection`.

        The nested call runs inside its own atomic block, so a failed
        attempt leaves no partial writes behind even when the caller goes
        on to handle the result instead of aborting.
        """
        token = self.chain.get_contract(collection)
        safe_transfer = getattr(token, "safe_transfer_from", None)
        if safe_transfer is None:
            logger.debug(f"Transfer of #{token_id} failed: {collection} is not a collection")
            return TransferResult(ok=False, collection=collection, to=to, token_id=token_id)

        try:
            with self.chain.atomic():
                safe_transfer(ctx.forward(self.vault_address), self.vault_address, to, token_id)
        except Exception as exc:
            logger.debug(f"Transfer of #{token_id} from {collection} to {to} failed: {exc!r}")
            return TransferResult(ok=False, collection=collection, to=to, token_id=token_id)

        return TransferResult(ok=True, collection=collection, to=to, token_id=token_id)


__all__ = [
    "TransferExecutor",
    "TransferResult",
]
