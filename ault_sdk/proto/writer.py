"""
Minimal Protobuf wire writer.

Only the primitives needed by the Ault transaction envelopes and message
schemas are implemented. Every write method follows proto3 semantics and
omits default values (0, False, empty string, empty bytes).
"""
from typing import Iterable, List, Tuple, Union

WIRE_VARINT = 0
WIRE_LENGTH_DELIMITED = 2

BytesLike = Union[bytes, bytearray, memoryview]


def encode_varint(value: int) -> bytes:
    """
    Encode a non-negative integer as a base-128 varint.

    Args:
        value: Unsigned integer of any size

    Returns:
        Varint bytes, least significant group first

    Raises:
        ValueError: If value is negative
    """
    if value < 0:
        raise ValueError(f"Varint value must be non-negative, got {value}")
    out = bytearray()
    while value > 0x7F:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def decode_varint(data: BytesLike, offset: int = 0) -> Tuple[int, int]:
    """
    Decode a varint starting at ``offset``.

    Returns:
        Tuple of (value, offset just past the varint)

    Raises:
        ValueError: If the buffer ends before the varint terminates
    """
    result = 0
    shift = 0
    view = bytes(data)
    while True:
        if offset >= len(view):
            raise ValueError("Truncated varint")
        byte = view[offset]
        offset += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result, offset
        shift += 7


class BinaryWriter:
    """Accumulates encoded fields; call ``finish()`` for the message bytes."""

    def __init__(self):
        self._chunks: List[bytes] = []

    def write_varint(self, value: int) -> "BinaryWriter":
        self._chunks.append(encode_varint(value))
        return self

    def write_tag(self, field_number: int, wire_type: int) -> "BinaryWriter":
        return self.write_varint((field_number << 3) | wire_type)

    def write_string(self, field_number: int, value: str) -> "BinaryWriter":
        if not value:
            return self
        return self._write_length_delimited(field_number, value.encode("utf-8"))

    def write_bytes(self, field_number: int, value: BytesLike) -> "BinaryWriter":
        if not value:
            return self
        return self._write_length_delimited(field_number, bytes(value))

    def write_bool(self, field_number: int, value: bool) -> "BinaryWriter":
        if not value:
            return self
        self.write_tag(field_number, WIRE_VARINT)
        return self.write_varint(1)

    def write_uint64(self, field_number: int, value: int) -> "BinaryWriter":
        if value == 0:
            return self
        self.write_tag(field_number, WIRE_VARINT)
        return self.write_varint(value)

    def write_int32(self, field_number: int, value: int) -> "BinaryWriter":
        if value == 0:
            return self
        self.write_tag(field_number, WIRE_VARINT)
        # negative int32 values are sign-extended to 64 bits on the wire
        return self.write_varint(value if value > 0 else value + (1 << 64))

    def write_repeated_string(self, field_number: int, values: Iterable[str]) -> "BinaryWriter":
        for value in values:
            self.write_string(field_number, value)
        return self

    def write_repeated_uint64(self, field_number: int, values: Iterable[int]) -> "BinaryWriter":
        # unpacked encoding; every element is written, zero included
        for value in values:
            self.write_tag(field_number, WIRE_VARINT)
            self.write_varint(value)
        return self

    def write_repeated_bytes(self, field_number: int, values: Iterable[BytesLike]) -> "BinaryWriter":
        for value in values:
            self.write_bytes(field_number, value)
        return self

    def finish(self) -> bytes:
        return b"".join(self._chunks)

    def _write_length_delimited(self, field_number: int, payload: bytes) -> "BinaryWriter":
        self.write_tag(field_number, WIRE_LENGTH_DELIMITED)
        self.write_varint(len(payload))
        self._chunks.append(payload)
        return self
