"""
Value coercion helpers shared by the typed-data builder and the wire encoder.
"""
import base64
import binascii
import re
from datetime import timedelta
from typing import Any, Mapping, Tuple, Union

from ..exceptions import ValidationError

MAX_UINT64 = (1 << 64) - 1
# Largest integer a float can carry exactly
MAX_SAFE_INTEGER = (1 << 53) - 1
NANOS_PER_SECOND = 1_000_000_000

_BASE64_RE = re.compile(r"^(?:[A-Za-z0-9+/]{4})*(?:[A-Za-z0-9+/]{2}==|[A-Za-z0-9+/]{3}=)?$")
_UPPERCASE_RE = re.compile(r"[A-Z]")
_DECIMAL_RE = re.compile(r"^[+]?\d+$")

BytesInput = Union[bytes, bytearray, memoryview, str]


def bytes_to_base64(data: Union[bytes, bytearray, memoryview]) -> str:
    return base64.b64encode(bytes(data)).decode("ascii")


def base64_to_bytes(value: str, label: str = "value") -> bytes:
    """
    Decode a standard (padded) base64 string.

    Raises:
        ValidationError: If the string is not strict base64
    """
    stripped = value.strip()
    if not _BASE64_RE.match(stripped):
        raise ValidationError(f"{label} must be valid base64.")
    try:
        return base64.b64decode(stripped, validate=True)
    except binascii.Error as e:
        raise ValidationError(f"{label} must be valid base64: {e}") from e


def is_bytes_like(value: Any) -> bool:
    return isinstance(value, (bytes, bytearray, memoryview))


def to_bytes(value: BytesInput, label: str = "value") -> bytes:
    """Accept raw bytes or a base64 string."""
    if is_bytes_like(value):
        return bytes(value)
    if isinstance(value, str):
        return base64_to_bytes(value, label)
    raise ValidationError(f"{label} must be bytes or a base64 string.")


def to_uint64(value: Any, label: str = "value") -> int:
    """
    Coerce an integer-like value into the uint64 range.

    Accepts ints, integral floats within the safe integer range, and non-blank
    decimal strings. Floats beyond 2**53 - 1 are rejected because they may
    already have lost precision.

    Raises:
        ValidationError: If the value is not a representable unsigned integer
    """
    if isinstance(value, bool):
        raise ValidationError(f"{label} must be an integer, got a boolean.")
    if isinstance(value, int):
        result = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"{label} must be an integer.")
        if abs(value) > MAX_SAFE_INTEGER:
            raise ValidationError(f"{label} exceeds safe integer range; use int or string.")
        result = int(value)
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{label} must not be an empty string.")
        if not _DECIMAL_RE.match(stripped):
            raise ValidationError(f"{label} must be a decimal integer string, got {value!r}.")
        result = int(stripped)
    else:
        raise ValidationError(f"{label} must be an int, number, or decimal string.")
    if result < 0 or result > MAX_UINT64:
        raise ValidationError(f"{label} is outside the uint64 range: {result}")
    return result


def _to_signed_int(value: Any, label: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{label} must be an integer, got a boolean.")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"{label} must be an integer.")
        if abs(value) > MAX_SAFE_INTEGER:
            raise ValidationError(f"{label} exceeds safe integer range; use int or string.")
        return int(value)
    if isinstance(value, str) and value.strip():
        try:
            return int(value.strip())
        except ValueError as e:
            raise ValidationError(f"{label} must be a decimal integer string, got {value!r}.") from e
    raise ValidationError(f"{label} must be an int, number, or decimal string.")


def duration_to_nanoseconds(value: Any, label: str = "duration") -> int:
    """
    Convert a duration into whole nanoseconds.

    Accepts an int (already nanoseconds), a ``timedelta``, or a protobuf-style
    mapping with ``seconds`` and/or ``nanos``. All arithmetic is integral.

    Raises:
        ValidationError: If the value cannot represent a duration
    """
    if isinstance(value, timedelta):
        total_us = (value.days * 86_400 + value.seconds) * 1_000_000 + value.microseconds
        return total_us * 1_000
    if isinstance(value, Mapping):
        if value.get("seconds") is None and value.get("nanos") is None:
            raise ValidationError(f'Duration field "{label}" must include seconds or nanos.')
        seconds = _to_signed_int(value.get("seconds") or 0, f"{label}.seconds")
        nanos = _to_signed_int(value.get("nanos") or 0, f"{label}.nanos")
        if nanos < -999_999_999 or nanos > 999_999_999:
            raise ValidationError(
                f'Duration field "{label}.nanos" must be between -999999999 and 999999999.'
            )
        if seconds > 0 and nanos < 0:
            raise ValidationError(f'Duration field "{label}.nanos" must be >= 0 when seconds is positive.')
        if seconds < 0 and nanos > 0:
            raise ValidationError(f'Duration field "{label}.nanos" must be <= 0 when seconds is negative.')
        return seconds * NANOS_PER_SECOND + nanos
    if isinstance(value, (int, float, str)) and not isinstance(value, bool):
        return _to_signed_int(value, label)
    raise ValidationError(f'Duration field "{label}" must be nanoseconds, a timedelta, or {{seconds, nanos}}.')


def split_nanoseconds(total_nanos: int) -> Tuple[int, int]:
    """Split nanoseconds into (seconds, nanos); both parts carry the sign of the input."""
    sign = -1 if total_nanos < 0 else 1
    seconds, nanos = divmod(abs(total_nanos), NANOS_PER_SECOND)
    return sign * seconds, sign * nanos


def assert_snake_case_keys(value: Any, label: str, path: str = "") -> None:
    """
    Reject any mapping key containing an uppercase letter, recursively.

    Raises:
        ValidationError: On the first camelCase key found
    """
    if isinstance(value, Mapping):
        for key, child in value.items():
            key_path = f"{path}.{key}" if path else str(key)
            if _UPPERCASE_RE.search(str(key)):
                raise ValidationError(f'{label} expects snake_case keys; received "{key_path}".')
            assert_snake_case_keys(child, label, key_path)
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            assert_snake_case_keys(item, label, f"{path}[{index}]")
