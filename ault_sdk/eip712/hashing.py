"""
EIP-712 struct hashing that honours the declared ``EIP712Domain`` type.

``eth_account`` validates the domain against the canonical field types
(``verifyingContract: address``, ``salt: bytes32``). The Cosmos EVM domain
declares both as ``string``, so hashing is done here directly on top of
``eth_abi`` and ``eth_utils`` following the ``eth_signTypedData_v4`` rules.
"""
import re
from typing import Any, Dict, List, Mapping, Sequence, Set

from eth_abi import encode as abi_encode
from eth_utils import keccak, to_bytes, to_canonical_address

from ..exceptions import ValidationError

_ARRAY_SUFFIX_RE = re.compile(r"\[\d*\]$")

TypeTable = Mapping[str, Sequence[Mapping[str, str]]]


def _base_type(type_name: str) -> str:
    while _ARRAY_SUFFIX_RE.search(type_name):
        type_name = _ARRAY_SUFFIX_RE.sub("", type_name)
    return type_name


def _collect_dependencies(primary: str, types: TypeTable, found: Set[str]) -> Set[str]:
    if primary in found or primary not in types:
        return found
    found.add(primary)
    for field in types[primary]:
        _collect_dependencies(_base_type(field["type"]), types, found)
    return found


def encode_type(primary_type: str, types: TypeTable) -> str:
    """``Primary(fields...)`` followed by referenced struct types in name order."""
    deps = _collect_dependencies(primary_type, types, set())
    deps.discard(primary_type)
    ordered = [primary_type] + sorted(deps)
    encoded = []
    for name in ordered:
        members = ",".join(f"{field['type']} {field['name']}" for field in types[name])
        encoded.append(f"{name}({members})")
    return "".join(encoded)


def type_hash(primary_type: str, types: TypeTable) -> bytes:
    return keccak(text=encode_type(primary_type, types))


def _encode_atomic(type_name: str, value: Any) -> bytes:
    if type_name == "string":
        if not isinstance(value, str):
            value = str(value)
        return keccak(text=value)
    if type_name == "bytes":
        return keccak(to_bytes(hexstr=value) if isinstance(value, str) else bytes(value))
    if type_name == "address":
        return abi_encode(["address"], [to_canonical_address(value)])
    if type_name == "bool":
        return abi_encode(["bool"], [bool(value)])
    if type_name.startswith(("uint", "int")):
        if isinstance(value, str):
            value = int(value, 16) if value.lower().startswith("0x") else int(value)
        return abi_encode([type_name], [int(value)])
    if type_name.startswith("bytes"):
        raw = to_bytes(hexstr=value) if isinstance(value, str) else bytes(value)
        return abi_encode([type_name], [raw])
    raise ValidationError(f"Unsupported EIP-712 type: {type_name}")


def _encode_field(type_name: str, value: Any, types: TypeTable, field_name: str) -> bytes:
    if type_name in types:
        if value is None:
            return b"\x00" * 32
        return keccak(encode_data(type_name, value, types))
    if _ARRAY_SUFFIX_RE.search(type_name):
        if value is None:
            raise ValidationError(f"Missing value for field {field_name} of type {type_name}")
        item_type = _ARRAY_SUFFIX_RE.sub("", type_name)
        encoded: List[bytes] = [_encode_field(item_type, item, types, field_name) for item in value]
        return keccak(b"".join(encoded))
    if value is None:
        raise ValidationError(f"Missing value for field {field_name} of type {type_name}")
    return _encode_atomic(type_name, value)


def encode_data(primary_type: str, data: Mapping[str, Any], types: TypeTable) -> bytes:
    parts = [type_hash(primary_type, types)]
    for field in types[primary_type]:
        parts.append(_encode_field(field["type"], data.get(field["name"]), types, field["name"]))
    return b"".join(parts)


def hash_struct(primary_type: str, data: Mapping[str, Any], types: TypeTable) -> bytes:
    return keccak(encode_data(primary_type, data, types))


def hash_domain(typed_data: Mapping[str, Any]) -> bytes:
    return hash_struct("EIP712Domain", typed_data["domain"], typed_data["types"])


def hash_typed_data(typed_data: Mapping[str, Any]) -> bytes:
    """
    Compute the 32-byte digest a wallet signs for ``eth_signTypedData_v4``.

    Args:
        typed_data: Dict with ``types``, ``primaryType``, ``domain`` and ``message``

    Returns:
        ``keccak256(0x1901 || domainSeparator || hashStruct(message))``
    """
    types: Dict[str, Any] = typed_data["types"]
    if "EIP712Domain" not in types:
        raise ValidationError("Typed data is missing the EIP712Domain type.")
    domain_separator = hash_domain(typed_data)
    message_hash = hash_struct(typed_data["primaryType"], typed_data["message"], types)
    return keccak(b"\x19\x01" + domain_separator + message_hash)
