"""
EIP-712 signing for Ault transactions.

Importing this package verifies the message registry: field lists must be
in descending order and every message must have a wire schema.
"""
from .registry import EIP712_MSG_TYPES, MsgTypeConfig, Eip712Field, NESTED, NESTED_ARRAY
from .field_order import validate_field_order, validate_wire_coverage
from .domain import build_domain, resolve_evm_chain_id
from .builder import build_eip712_typed_data, add_type_with_dedup, DEFAULT_MAX_DUPLICATE_TYPES
from .hashing import hash_typed_data
from .signers import (
    AultSigner, CallableSigner, PrivySigner, PrivateKeySigner, WalletSigner, AdapterSigner,
    Eip1193Signer, ObjectSigner, detect_signer, normalize_signature, resolve_signer_address,
    recover_public_key, recover_compressed_pubkey, recover_signer_address,
)
from .broadcast import (
    ChainIdCache, DEFAULT_CHAIN_ID_CACHE, query_chain_id, query_account, broadcast_tx,
    sign_and_broadcast_eip712,
)

validate_field_order()
validate_wire_coverage()

__all__ = [
    "EIP712_MSG_TYPES", "MsgTypeConfig", "Eip712Field", "NESTED", "NESTED_ARRAY",
    "validate_field_order", "validate_wire_coverage",
    "build_domain", "resolve_evm_chain_id",
    "build_eip712_typed_data", "add_type_with_dedup", "DEFAULT_MAX_DUPLICATE_TYPES",
    "hash_typed_data",
    "AultSigner", "CallableSigner", "PrivySigner", "PrivateKeySigner", "WalletSigner",
    "AdapterSigner", "Eip1193Signer", "ObjectSigner", "detect_signer", "normalize_signature",
    "resolve_signer_address", "recover_public_key", "recover_compressed_pubkey",
    "recover_signer_address",
    "ChainIdCache", "DEFAULT_CHAIN_ID_CACHE", "query_chain_id", "query_account", "broadcast_tx",
    "sign_and_broadcast_eip712",
]
