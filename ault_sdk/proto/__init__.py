"""
Hand-rolled Protobuf encoding for Ault transactions.
"""
from .writer import BinaryWriter, decode_varint, encode_varint, WIRE_VARINT, WIRE_LENGTH_DELIMITED
from .schema import WIRE_SCHEMAS, MessageSchema, WireField, encode_message, encode_duration
from .tx import (
    AuthInfo, Coin, Fee, SignerInfo, TxBody, TxRaw, encode_any,
    ETH_SECP256K1_PUBKEY_TYPE_URL, SIGN_MODE_LEGACY_AMINO_JSON,
)

__all__ = [
    "BinaryWriter", "decode_varint", "encode_varint", "WIRE_VARINT", "WIRE_LENGTH_DELIMITED",
    "WIRE_SCHEMAS", "MessageSchema", "WireField", "encode_message", "encode_duration",
    "AuthInfo", "Coin", "Fee", "SignerInfo", "TxBody", "TxRaw", "encode_any",
    "ETH_SECP256K1_PUBKEY_TYPE_URL", "SIGN_MODE_LEGACY_AMINO_JSON",
]
