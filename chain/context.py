"""
Call Context

Who is calling, on whose behalf, and when. Every state-changing contract
method takes one of these as its first argument.
"""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class CallContext:
    """
    Context of a single contract invocation.

    Attributes:
        sender: Immediate caller (an account or a contract)
        origin: Account that signed the outermost transaction
        timestamp: Block timestamp, fixed for the whole transaction
        value: Native value attached to this call
    """
    sender: str
    origin: str
    timestamp: int
    value: int = 0

    def forward(self, sender: str, value: int = 0) -> "CallContext":
        """Context for a nested call made by `sender` within this transaction."""
        return replace(self, sender=sender, value=value)
