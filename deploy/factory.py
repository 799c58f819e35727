"""
CREATE2 Factory

Contract that deploys other contracts to addresses fixed by (factory,
salt, init code hash). Salts are front-running protected: the first 20
bytes must be zero or the calling account.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from eth_abi import decode
from eth_abi.exceptions import DecodingError
from pydantic import BaseModel, ConfigDict, Field

from chain.context import CallContext
from chain.contract import (
    Contract,
    ContractArtifact,
    placeholder_bytecode,
    register_contract,
    resolve_init_code,
)
from core.crypto.hashing import ZERO_ADDRESS, address_bytes, keccak256, normalize_address, to_bytes32
from core.schemas.errors import DeploymentFailedException
from deploy.create2 import predict_create2_address

if TYPE_CHECKING:
    from chain.host import Chain

logger = logging.getLogger(__name__)


class Create2FactoryState(BaseModel):
    model_config = ConfigDict(extra="forbid")

    deployed: set[str] = Field(default_factory=set)


@register_contract
class Create2Factory(Contract):
    """
    Usage:
        factory = chain.deploy(deployer, Create2Factory)
        expected = factory.find_create2_address(salt, keccak256(init_code))
        address = chain.transact(deployer, factory.address, "call_create2", salt, init_code)
        assert address == expected
    """

    ARTIFACT = ContractArtifact(
        contract_name="Create2Factory",
        bytecode=placeholder_bytecode("Create2Factory"),
    )

    def __init__(self, chain: "Chain", address: str, ctx: CallContext) -> None:
        super().__init__(chain, address)
        self.state: Create2FactoryState = Create2FactoryState()

    def find_create2_address(self, salt: bytes | str, init_code_hash: bytes | str) -> str:
        """
        Address call_create2 would deploy to, or the zero address if a
        contract already lives there.
        """
        address = predict_create2_address(self.address, salt, init_code_hash)
        if self.has_been_deployed(address):
            return ZERO_ADDRESS
        return address

    def has_been_deployed(self, address: str) -> bool:
        address = normalize_address(address)
        return address in self.state.deployed or self.chain.is_contract(address)

    def call_create2(self, ctx: CallContext, salt: bytes | str, init_code: bytes) -> str:
        """
        Deploy `init_code` at its CREATE2 address.

        Raises:
            DeploymentFailedException: Salt not owned by the caller, address
                already used, or init code not recognized
        """
        salt = to_bytes32(salt)
        prefix = salt[:20]
        if prefix != b"\x00" * 20 and prefix != address_bytes(ctx.sender):
            raise DeploymentFailedException(
                "Invalid salt - first 20 bytes of the salt must match calling address.",
                details={"sender": ctx.sender},
            )

        address = predict_create2_address(self.address, salt, keccak256(init_code))
        if self.has_been_deployed(address):
            raise DeploymentFailedException(
                "Invalid contract creation - contract has already been deployed.",
                address=address,
            )

        resolved = resolve_init_code(init_code)
        if resolved is None:
            raise DeploymentFailedException("Unrecognized init code", address=address)
        contract_cls, encoded_args = resolved

        types = contract_cls.ARTIFACT.constructor_types
        try:
            args = decode(list(types), encoded_args) if types else ()
        except DecodingError as e:
            raise DeploymentFailedException(
                f"Malformed constructor arguments for {contract_cls.__name__}: {e}",
                address=address,
            ) from e

        self.chain.create(ctx.forward(self.address), address, contract_cls, *args)
        self.state.deployed.add(address)
        logger.info(f"CREATE2 deployed {contract_cls.__name__} at {address} for {ctx.sender}")
        return address


__all__ = [
    "Create2Factory",
    "Create2FactoryState",
]
