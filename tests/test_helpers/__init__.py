"""
Shared helpers for inspecting encoded transactions in tests.
"""
import base64

from ault_sdk.proto.writer import decode_varint


def walk_fields(data):
    """Walk top-level length-delimited and varint fields as (number, value) pairs."""
    out = []
    offset = 0
    while offset < len(data):
        tag, offset = decode_varint(data, offset)
        number, wire = tag >> 3, tag & 7
        if wire == 0:
            value, offset = decode_varint(data, offset)
        else:
            length, offset = decode_varint(data, offset)
            value, offset = data[offset:offset + length], offset + length
        out.append((number, value))
    return out


def decode_tx_raw(tx_bytes_b64):
    """Split base64 ``TxRaw`` bytes into body, auth info and signatures."""
    fields = walk_fields(base64.b64decode(tx_bytes_b64))
    return {
        "body": next(v for n, v in fields if n == 1),
        "auth_info": next(v for n, v in fields if n == 2),
        "signatures": [v for n, v in fields if n == 3],
    }
