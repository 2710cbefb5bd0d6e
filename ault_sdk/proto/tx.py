"""
Cosmos transaction envelopes: TxBody, AuthInfo and TxRaw.

These are small fixed-shape compositions of ``BinaryWriter`` primitives
matching ``cosmos.tx.v1beta1`` field numbers.
"""
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple, Union

from .writer import BinaryWriter

ETH_SECP256K1_PUBKEY_TYPE_URL = "/cosmos.evm.crypto.v1.ethsecp256k1.PubKey"
SIGN_MODE_LEGACY_AMINO_JSON = 127


def encode_any(type_url: str, value: bytes) -> bytes:
    """Wrap encoded message bytes in a ``google.protobuf.Any``."""
    writer = BinaryWriter()
    writer.write_string(1, type_url)
    writer.write_bytes(2, value)
    return writer.finish()


def encode_coin(denom: str, amount: str) -> bytes:
    writer = BinaryWriter()
    writer.write_string(1, denom)
    writer.write_string(2, amount)
    return writer.finish()


def encode_eth_secp256k1_pubkey(key: bytes) -> bytes:
    """Encode a compressed secp256k1 key as ``ethsecp256k1.PubKey``."""
    writer = BinaryWriter()
    writer.write_bytes(1, key)
    return writer.finish()


def encode_mode_info(mode: int) -> bytes:
    single = BinaryWriter().write_int32(1, mode).finish()
    return BinaryWriter().write_bytes(1, single).finish()


@dataclass
class Coin:
    denom: str
    amount: str

    def to_bytes(self) -> bytes:
        return encode_coin(self.denom, self.amount)


@dataclass
class Fee:
    amount: List[Coin]
    gas_limit: int

    def to_bytes(self) -> bytes:
        writer = BinaryWriter()
        writer.write_repeated_bytes(1, [coin.to_bytes() for coin in self.amount])
        writer.write_uint64(2, self.gas_limit)
        return writer.finish()


@dataclass
class SignerInfo:
    """Signer entry of AuthInfo; the key is a compressed secp256k1 public key."""
    public_key: bytes
    sequence: int
    mode: int = SIGN_MODE_LEGACY_AMINO_JSON
    public_key_type_url: str = ETH_SECP256K1_PUBKEY_TYPE_URL

    def to_bytes(self) -> bytes:
        writer = BinaryWriter()
        pubkey_any = encode_any(self.public_key_type_url, encode_eth_secp256k1_pubkey(self.public_key))
        writer.write_bytes(1, pubkey_any)
        writer.write_bytes(2, encode_mode_info(self.mode))
        writer.write_uint64(3, self.sequence)
        return writer.finish()


@dataclass
class AuthInfo:
    signer_infos: List[SignerInfo]
    fee: Fee

    def to_bytes(self) -> bytes:
        writer = BinaryWriter()
        writer.write_repeated_bytes(1, [info.to_bytes() for info in self.signer_infos])
        writer.write_bytes(2, self.fee.to_bytes())
        return writer.finish()


@dataclass
class TxBody:
    """Messages are (type_url, encoded value) pairs in signing order."""
    messages: Sequence[Tuple[str, bytes]]
    memo: str = ""
    timeout_height: int = 0

    def to_bytes(self) -> bytes:
        writer = BinaryWriter()
        writer.write_repeated_bytes(1, [encode_any(url, value) for url, value in self.messages])
        writer.write_string(2, self.memo)
        writer.write_uint64(3, self.timeout_height)
        return writer.finish()


@dataclass
class TxRaw:
    body_bytes: bytes
    auth_info_bytes: bytes
    signatures: List[bytes] = field(default_factory=list)

    def to_bytes(self) -> bytes:
        writer = BinaryWriter()
        writer.write_bytes(1, self.body_bytes)
        writer.write_bytes(2, self.auth_info_bytes)
        writer.write_repeated_bytes(3, self.signatures)
        return writer.finish()


def strip_recovery_byte(signature: Union[bytes, bytearray]) -> bytes:
    """Cosmos expects the 64-byte ``r || s`` form; drop a trailing ``v``."""
    return bytes(signature[:64])
