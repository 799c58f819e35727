"""
Deterministic Address Predictor

Computes where a vault will live before it is deployed through a CREATE2
factory:

    address = keccak256(0xff || deployer || salt || keccak256(init_code))[12:]
    init_code = creation_bytecode || bytes32(root) || bool(paused) || uint256(timestamp)

The constructor arguments must be encoded exactly as the deployment will
feed them, in constructor field order. A mismatch in width, order or any
single field gives a different, equally valid-looking address with no
error raised anywhere, so callers should build init code through
build_init_code rather than by hand.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from eth_abi import encode
from pydantic import BaseModel, ConfigDict, Field, field_validator

from chain.contract import ContractArtifact
from core.config.runtime import DeploymentConfig
from core.crypto.hashing import (
    ZERO_HASH,
    address_bytes,
    from_hex,
    keccak256,
    normalize_address,
    to_bytes32,
)

logger = logging.getLogger(__name__)

# Constructor field order of TokenVault
VAULT_CONSTRUCTOR_TYPES: tuple[str, ...] = ("bytes32", "bool", "uint256")

CREATE2_PREFIX = b"\xff"


class ConstructorParams(BaseModel):
    """Constructor inputs of a vault, in declaration order."""

    model_config = ConfigDict(frozen=True)

    merkle_root: bytes = Field(default=ZERO_HASH)
    paused: bool = Field(default=True)
    token_delivery_allowed_timestamp: int = Field(default=0, ge=0, le=2**256 - 1)

    @field_validator("merkle_root", mode="before")
    @classmethod
    def _root_is_bytes32(cls, v: Any) -> bytes:
        return to_bytes32(v)

    def as_tuple(self) -> tuple[bytes, bool, int]:
        return (self.merkle_root, self.paused, self.token_delivery_allowed_timestamp)


def encode_constructor_args(params: ConstructorParams) -> bytes:
    """
    ABI-encode constructor arguments as three 32-byte words.

    All three types are static, so this is the plain concatenation of each
    argument encoded on its own.
    """
    return encode(list(VAULT_CONSTRUCTOR_TYPES), list(params.as_tuple()))


def build_init_code(bytecode: bytes, params: ConstructorParams) -> bytes:
    """Creation bytecode followed by the encoded constructor arguments."""
    return bytecode + encode_constructor_args(params)


def init_code_hash(bytecode: bytes, constructor_args: bytes) -> bytes:
    """keccak256 of the full init code."""
    return keccak256(bytecode + constructor_args)


def predict_create2_address(deployer: str, salt: bytes | str, code_hash: bytes | str) -> str:
    """
    Address a CREATE2 deployment will produce.

    Args:
        deployer: Factory contract performing the CREATE2
        salt: 32-byte salt
        code_hash: keccak256 of the init code

    Returns:
        Checksummed address

    Example:
        >>> predict_create2_address(
        ...     "0x0000000000000000000000000000000000000000",
        ...     b"\\x00" * 32,
        ...     keccak256(b"\\x00"),
        ... )
        '0x4D1A2e2bB4F88F0250f26Ffff098B0b30B26BF38'
    """
    digest = keccak256(
        CREATE2_PREFIX + address_bytes(deployer) + to_bytes32(salt) + to_bytes32(code_hash)
    )
    return normalize_address(digest[12:])


def make_salt(caller: str, suffix: Optional[bytes | int] = None) -> bytes:
    """
    Salt whose first 20 bytes are `caller`, so only `caller` can use it
    with a front-running-protected factory.

    Args:
        caller: Account that will submit the deployment
        suffix: Remaining 12 bytes, as bytes or an integer (default zero)
    """
    if suffix is None:
        tail = b"\x00" * 12
    elif isinstance(suffix, int):
        tail = suffix.to_bytes(12, "big")
    else:
        if len(suffix) > 12:
            raise ValueError(f"Salt suffix must be at most 12 bytes, got {len(suffix)}")
        tail = bytes(suffix).rjust(12, b"\x00")
    return address_bytes(caller) + tail


def load_artifact(path: str | Path) -> ContractArtifact:
    """
    Load a compiled contract artifact (Hardhat/Truffle JSON layout).

    Reads `contractName`, `bytecode` and the constructor inputs from `abi`.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file has no bytecode
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Artifact not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    bytecode = data.get("bytecode")
    if not bytecode or bytecode == "0x":
        raise ValueError(f"Artifact has no bytecode: {path}")

    constructor_types: tuple[str, ...] = ()
    for entry in data.get("abi", []):
        if entry.get("type") == "constructor":
            constructor_types = tuple(i["type"] for i in entry.get("inputs", []))
            break

    artifact = ContractArtifact(
        contract_name=data.get("contractName", path.stem),
        bytecode=from_hex(bytecode),
        constructor_types=constructor_types,
    )
    logger.debug(f"Loaded artifact {artifact.contract_name} from {path}")
    return artifact


def constructor_params_from_config(config: DeploymentConfig) -> ConstructorParams:
    return ConstructorParams(
        merkle_root=config.merkle_root,
        paused=config.paused,
        token_delivery_allowed_timestamp=config.token_delivery_allowed_timestamp,
    )


def predict_vault_address(
    factory: str,
    salt: bytes | str,
    bytecode: bytes,
    params: ConstructorParams,
) -> str:
    """Predicted address of a vault deployed by `factory` with `params`."""
    code_hash = init_code_hash(bytecode, encode_constructor_args(params))
    address = predict_create2_address(factory, salt, code_hash)
    logger.info(f"Predicted vault address {address} (factory={factory})")
    return address


__all__ = [
    "ConstructorParams",
    "VAULT_CONSTRUCTOR_TYPES",
    "build_init_code",
    "constructor_params_from_config",
    "encode_constructor_args",
    "init_code_hash",
    "load_artifact",
    "make_salt",
    "predict_create2_address",
    "predict_vault_address",
]
