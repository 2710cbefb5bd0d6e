"""
Fixed EIP-712 domain and base types used by Cosmos EVM chains.
"""
from typing import Any, Dict, List, Optional

from ..core.chain_id import parse_evm_chain_id
from ..exceptions import UnresolvableChainIdError

DOMAIN_NAME = "Cosmos Web3"
DOMAIN_VERSION = "1.0.0"
DOMAIN_VERIFYING_CONTRACT = "cosmos"
DOMAIN_SALT = "0"

EIP712_DOMAIN_FIELDS: List[Dict[str, str]] = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "string"},
    {"name": "salt", "type": "string"},
]

TX_BASE_FIELDS: List[Dict[str, str]] = [
    {"name": "account_number", "type": "string"},
    {"name": "chain_id", "type": "string"},
    {"name": "fee", "type": "Fee"},
    {"name": "memo", "type": "string"},
    {"name": "sequence", "type": "string"},
]

FEE_FIELDS: List[Dict[str, str]] = [
    {"name": "amount", "type": "Coin[]"},
    {"name": "gas", "type": "string"},
]

COIN_FIELDS: List[Dict[str, str]] = [
    {"name": "denom", "type": "string"},
    {"name": "amount", "type": "string"},
]


def base_types() -> Dict[str, List[Dict[str, str]]]:
    """Fresh copy of the seed type table; callers mutate the result."""
    return {
        "EIP712Domain": [dict(f) for f in EIP712_DOMAIN_FIELDS],
        "Tx": [dict(f) for f in TX_BASE_FIELDS],
        "Fee": [dict(f) for f in FEE_FIELDS],
        "Coin": [dict(f) for f in COIN_FIELDS],
    }


def resolve_evm_chain_id(chain_id: str, override: Optional[int] = None) -> int:
    """
    Resolve the numeric EVM chain id for a Cosmos chain id.

    Args:
        chain_id: Cosmos chain id, e.g. ``ault_10904-1``
        override: Explicit EVM chain id that takes precedence

    Returns:
        EVM chain id

    Raises:
        UnresolvableChainIdError: If there is no override and the id does not parse
    """
    if override is not None:
        return int(override)
    parsed = parse_evm_chain_id(chain_id)
    if parsed is None:
        raise UnresolvableChainIdError(chain_id)
    return parsed


def build_domain(evm_chain_id: int) -> Dict[str, Any]:
    return {
        "name": DOMAIN_NAME,
        "version": DOMAIN_VERSION,
        "chainId": evm_chain_id,
        "verifyingContract": DOMAIN_VERIFYING_CONTRACT,
        "salt": DOMAIN_SALT,
    }
