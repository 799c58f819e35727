"""
Vault deployment.

Deterministic address prediction, constructor encoding and the CREATE2
factory contract.
"""

from .create2 import (
    VAULT_CONSTRUCTOR_TYPES,
    ConstructorParams,
    build_init_code,
    constructor_params_from_config,
    encode_constructor_args,
    init_code_hash,
    load_artifact,
    make_salt,
    predict_create2_address,
    predict_vault_address,
)
from .factory import Create2Factory, Create2FactoryState

__all__ = [
    "ConstructorParams",
    "Create2Factory",
    "Create2FactoryState",
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
