"""
Conversion between Ault bech32 addresses and EVM hex addresses.

Both forms carry the same 20 account bytes; only the encoding differs.
"""
import re
from typing import Iterable, List, Optional

from bech32 import bech32_decode, bech32_encode, convertbits
from eth_utils import to_checksum_address

from .constants import BECH32_PREFIX, VALIDATOR_BECH32_PREFIX
from .exceptions import ValidationError

EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")


def _decode(address: str) -> Optional[tuple]:
    hrp, words = bech32_decode(address)
    if hrp is None or words is None:
        return None
    data = convertbits(words, 5, 8, False)
    if data is None:
        return None
    return hrp, bytes(data)


def bech32_to_bytes(address: str) -> bytes:
    """
    Decode the account bytes of any bech32 address.

    Raises:
        ValidationError: If the address is not valid bech32
    """
    decoded = _decode(address)
    if decoded is None:
        raise ValidationError(f"Invalid bech32 address: {address}")
    return decoded[1]


def bytes_to_bech32(data: bytes, prefix: str = BECH32_PREFIX) -> str:
    return bech32_encode(prefix, convertbits(list(data), 8, 5, True))


def is_valid_evm_address(address: str) -> bool:
    return isinstance(address, str) and bool(EVM_ADDRESS_RE.match(address))


def _has_prefix(address: str, prefix: str) -> bool:
    if not isinstance(address, str):
        return False
    decoded = _decode(address)
    return decoded is not None and decoded[0] == prefix and len(decoded[1]) == 20


def is_valid_ault_address(address: str) -> bool:
    return _has_prefix(address, BECH32_PREFIX)


def is_valid_validator_address(address: str) -> bool:
    return _has_prefix(address, VALIDATOR_BECH32_PREFIX)


def evm_to_ault(evm_address: str) -> str:
    """``0x...`` -> ``ault1...``"""
    if not is_valid_evm_address(evm_address):
        raise ValidationError(f"Invalid EVM address: {evm_address}")
    return bytes_to_bech32(bytes.fromhex(evm_address[2:]), BECH32_PREFIX)


def ault_to_evm(ault_address: str) -> str:
    """``ault1...`` -> checksummed ``0x...``"""
    return to_checksum_address("0x" + bech32_to_bytes(ault_address).hex())


def normalize_address(address: str) -> str:
    """
    Return the bech32 form of an Ault or EVM address.

    Raises:
        ValidationError: If the address is in neither format
    """
    if is_valid_ault_address(address):
        return address
    if is_valid_evm_address(address):
        return evm_to_ault(address)
    raise ValidationError(f"Invalid address format: {address}")


def normalize_addresses(addresses: Iterable[str]) -> List[str]:
    return [normalize_address(a) for a in addresses]


def normalize_validator_address(address: str) -> str:
    if is_valid_validator_address(address):
        return address
    raise ValidationError(f"Invalid validator address format: {address}")
