"""
Ault SDK - EIP-712 signing, Protobuf encoding and REST queries for the Ault chain.
"""
from .version import __version__
from .client import AultClient
from .config import NetworkConfig
from .constants import GasConstants, DEFAULT_CHAIN_ID, DEFAULT_EVM_CHAIN_ID, BECH32_PREFIX
from .models import AccountInfo, BroadcastResult, FeeConfig, Network, TxContext, TxResult
from .exceptions import (
    AultError, ConfigurationError, UnknownMessageTypeError, UnsupportedLegacyAminoError,
    UnresolvableChainIdError, FieldOrderError, SignerDetectionError, ValidationError,
    SignatureMismatchError, NetworkError, RequestTimeoutError, CancelledError, ApiError,
    PaginationLoopError,
)
from .address import (
    evm_to_ault, ault_to_evm, normalize_address, normalize_validator_address,
    is_valid_ault_address, is_valid_evm_address, is_valid_validator_address,
)
from .messages import msg
from .eip712 import (
    AultSigner, PrivateKeySigner, CallableSigner, PrivySigner, WalletSigner, AdapterSigner,
    Eip1193Signer, detect_signer, build_eip712_typed_data, sign_and_broadcast_eip712,
    ChainIdCache, hash_typed_data,
)
from .proto import encode_message
from .core import HttpClient, RetryPolicy

__all__ = [
    "__version__",
    "AultClient",
    "NetworkConfig",
    "GasConstants",
    "DEFAULT_CHAIN_ID",
    "DEFAULT_EVM_CHAIN_ID",
    "BECH32_PREFIX",
    "AccountInfo",
    "BroadcastResult",
    "FeeConfig",
    "Network",
    "TxContext",
    "TxResult",
    "AultError",
    "ConfigurationError",
    "UnknownMessageTypeError",
    "UnsupportedLegacyAminoError",
    "UnresolvableChainIdError",
    "FieldOrderError",
    "SignerDetectionError",
    "ValidationError",
    "SignatureMismatchError",
    "NetworkError",
    "RequestTimeoutError",
    "CancelledError",
    "ApiError",
    "PaginationLoopError",
    "evm_to_ault",
    "ault_to_evm",
    "normalize_address",
    "normalize_validator_address",
    "is_valid_ault_address",
    "is_valid_evm_address",
    "is_valid_validator_address",
    "msg",
    "AultSigner",
    "PrivateKeySigner",
    "CallableSigner",
    "PrivySigner",
    "WalletSigner",
    "AdapterSigner",
    "Eip1193Signer",
    "detect_signer",
    "build_eip712_typed_data",
    "sign_and_broadcast_eip712",
    "ChainIdCache",
    "hash_typed_data",
    "encode_message",
    "HttpClient",
    "RetryPolicy",
]
