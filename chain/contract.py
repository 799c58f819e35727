"""
Contract base class and artifact registry.

A contract is a Python object living at an address on a Chain. All of its
mutable storage sits in `self.state`, a pydantic model, so the chain can
snapshot and restore it around each transaction.

Each contract class carries a ContractArtifact. Its `bytecode` is an
opaque identifier for the in-process implementation; factories use it to
map init code back to a class, and it is what address prediction hashes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from core.crypto.hashing import keccak256

if TYPE_CHECKING:
    from chain.host import Chain


# PUSH1 0x80 PUSH1 0x40 MSTORE
_BYTECODE_PREAMBLE = bytes.fromhex("6080604052")


def placeholder_bytecode(contract_name: str) -> bytes:
    """Stable creation bytecode for an in-process contract class."""
    return _BYTECODE_PREAMBLE + keccak256(contract_name.encode("utf-8"))


class ContractArtifact(BaseModel):
    """Compiled form of a contract: name, creation bytecode, constructor ABI."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    contract_name: str = Field(..., description="Contract name")
    bytecode: bytes = Field(..., description="Creation bytecode without constructor args")
    constructor_types: tuple[str, ...] = Field(
        default=(),
        description="ABI types of the constructor arguments, in order",
    )


class ContractState(BaseModel):
    """Storage of a contract with no mutable fields."""

    model_config = ConfigDict(extra="forbid")


class Contract:
    """
    Base class for in-process contracts.

    Subclasses set ARTIFACT and take (chain, address, ctx, *constructor_args).
    """

    ARTIFACT: ClassVar[ContractArtifact]

    def __init__(self, chain: "Chain", address: str) -> None:
        self.chain = chain
        self.address = address
        self.state: BaseModel = ContractState()

    @property
    def code(self) -> bytes:
        return self.ARTIFACT.bytecode

    def emit(self, name: str, **args: Any) -> None:
        self.chain.emit(self.address, name, **args)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(address={self.address!r})"


_REGISTRY: dict[bytes, type[Contract]] = {}


def register_contract(cls: type[Contract]) -> type[Contract]:
    """Class decorator making a contract deployable from init code."""
    _REGISTRY[cls.ARTIFACT.bytecode] = cls
    return cls


def resolve_init_code(init_code: bytes) -> tuple[type[Contract], bytes] | None:
    """
    Split init code into (contract class, encoded constructor args).

    Returns None when no registered bytecode prefixes the init code.
    """
    best: tuple[type[Contract], bytes] | None = None
    for bytecode, cls in _REGISTRY.items():
        if init_code.startswith(bytecode):
            if best is None or len(bytecode) > len(best[0].ARTIFACT.bytecode):
                best = (cls, init_code[len(bytecode):])
    return best


__all__ = [
    "Contract",
    "ContractArtifact",
    "ContractState",
    "placeholder_bytecode",
    "register_contract",
    "resolve_init_code",
]
