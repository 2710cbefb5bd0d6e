"""
EIP-712 typed-data builder for Cosmos EVM legacy Amino JSON signing.

Turns a transaction context plus an ordered list of messages into the
``{types, primaryType, domain, message}`` structure a wallet signs. Nested
sub-messages are given generated type names, and structurally identical
field lists share one name.
"""
import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ..core.encoding import bytes_to_base64, duration_to_nanoseconds, is_bytes_like, to_uint64
from ..exceptions import (
    ConfigurationError, UnknownMessageTypeError, UnsupportedLegacyAminoError, ValidationError,
)
from ..models import TxContext
from ..proto.schema import UINT64, WIRE_SCHEMAS, MessageSchema, WireField
from .domain import base_types, build_domain, resolve_evm_chain_id
from .registry import EIP712_MSG_TYPES, NESTED, FieldList, MsgTypeConfig

logger = logging.getLogger(__name__)

DEFAULT_MAX_DUPLICATE_TYPES = 1000

TypeTable = Dict[str, List[Dict[str, str]]]

_SNAKE_SEGMENT_RE = re.compile(r"_([a-z0-9])")


def add_type_with_dedup(
    types: TypeTable,
    base_name: str,
    fields: Sequence[Mapping[str, str]],
    max_duplicates: int = DEFAULT_MAX_DUPLICATE_TYPES,
) -> str:
    """
    Install ``fields`` under ``<base_name><n>`` and return the chosen name.

    The first free suffix is used unless an earlier suffix already holds an
    identical field list, in which case that name is reused.

    Raises:
        ConfigurationError: If every suffix up to ``max_duplicates`` holds a different list
    """
    candidate = [dict(f) for f in fields]
    for index in range(max_duplicates):
        name = f"{base_name}{index}"
        existing = types.get(name)
        if existing is None:
            types[name] = candidate
            return name
        if existing == candidate:
            return name
    raise ConfigurationError(f"Exceeded maximum duplicate types for {base_name}")


def type_name_from_field(field_name: str) -> str:
    """``submissions`` -> ``TypeValueSubmissions``; ``market_params`` -> ``TypeValueMarketParams``."""
    parts = [p for p in field_name.split("_") if p]
    return "TypeValue" + "".join(p[:1].upper() + p[1:] for p in parts)


def snake_to_camel(value: str) -> str:
    return _SNAKE_SEGMENT_RE.sub(lambda m: m.group(1).upper(), value)


def _nested_fields_for(name: str, config: MsgTypeConfig) -> FieldList:
    nested = config.nested_types.get(name)
    if nested is None:
        raise ConfigurationError(f"Missing nested type definition for field: {name}")
    return nested


def _lookup(record: Mapping[str, Any], field_name: str) -> Any:
    camel = snake_to_camel(field_name)
    value = record.get(camel)
    if value is None:
        value = record.get(field_name)
    return value


def resolve_value_fields(
    types: TypeTable,
    fields: FieldList,
    config: MsgTypeConfig,
    value: Any,
    max_duplicates: int = DEFAULT_MAX_DUPLICATE_TYPES,
) -> List[Dict[str, str]]:
    """
    Replace ``NESTED`` placeholders with generated, deduplicated type names.

    Nested lists are resolved depth first so inner types are registered
    before the type that references them. An empty array under a nested
    field has no element to derive a shape from and degrades to ``string[]``.
    """
    record = value if isinstance(value, Mapping) else {}
    resolved = []
    for field in fields:
        if not field.type.startswith(NESTED):
            resolved.append({"name": field.name, "type": field.type})
            continue

        is_array = field.type.endswith("[]")
        raw = _lookup(record, field.name)
        if is_array and isinstance(raw, (list, tuple)) and len(raw) == 0:
            resolved.append({"name": field.name, "type": "string[]"})
            continue

        nested_fields = _nested_fields_for(field.name, config)
        sample = raw[0] if is_array and isinstance(raw, (list, tuple)) else raw
        inner = resolve_value_fields(types, nested_fields, config, sample, max_duplicates)
        nested_name = add_type_with_dedup(types, type_name_from_field(field.name), inner, max_duplicates)
        resolved.append({"name": field.name, "type": f"{nested_name}[]" if is_array else nested_name})
    return resolved


def _stringify(value: Any, label: str) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(to_uint64(value, label))
    if is_bytes_like(value):
        return bytes_to_base64(value)
    return value


def _wire_fields(schema: Optional[MessageSchema]) -> Dict[str, WireField]:
    return {f.name: f for f in schema.fields} if schema is not None else {}


def normalize_value(
    value: Any,
    fields: FieldList,
    config: MsgTypeConfig,
    wire: Optional[MessageSchema] = None,
    prefix: str = "",
) -> Dict[str, Any]:
    """
    Map a message value onto its Amino JSON shape.

    Keys are read camelCase first, then snake_case, and emitted snake_case.
    Absent fields are skipped. Integers and bytes under ``string`` /
    ``string[]`` fields become decimal and base64 strings; duration fields
    become nanosecond strings. Fields that ``wire`` encodes as uint64 are
    rendered in the canonical decimal form of the number written to the
    wire, so ``5.0`` and ``"+007"`` sign as ``"5"`` and ``"7"``.

    Raises:
        ValidationError: If a numeric value is not a representable uint64
    """
    record = value if isinstance(value, Mapping) else {}
    wire_fields = _wire_fields(wire)
    normalized: Dict[str, Any] = {}
    for field in fields:
        raw = _lookup(record, field.name)
        label = f"{prefix}.{field.name}" if prefix else field.name
        wire_field = wire_fields.get(field.name)

        if field.type.startswith(NESTED):
            nested_fields = _nested_fields_for(field.name, config)
            nested_wire = wire_field.message if wire_field is not None else None
            if raw is None:
                continue
            if field.type.endswith("[]"):
                if isinstance(raw, (list, tuple)):
                    normalized[field.name] = [
                        normalize_value(item, nested_fields, config, nested_wire, f"{label}[{i}]")
                        for i, item in enumerate(raw)
                    ]
                else:
                    normalized[field.name] = raw
            else:
                normalized[field.name] = normalize_value(raw, nested_fields, config, nested_wire, label)
            continue

        if field.name in config.duration_fields:
            if raw is None:
                raise ValidationError(f'Duration field "{field.name}" is required.')
            normalized[field.name] = str(duration_to_nanoseconds(raw, field.name))
            continue

        if raw is None:
            continue

        is_uint64 = wire_field is not None and wire_field.kind == UINT64
        if field.type == "string[]" and isinstance(raw, (list, tuple)):
            if is_uint64:
                normalized[field.name] = [str(to_uint64(item, f"{label}[{i}]")) for i, item in enumerate(raw)]
            else:
                normalized[field.name] = [_stringify(item, f"{label}[{i}]") for i, item in enumerate(raw)]
        elif field.type == "string":
            normalized[field.name] = str(to_uint64(raw, label)) if is_uint64 else _stringify(raw, label)
        else:
            normalized[field.name] = raw
    return normalized


def _message_type_url(msg: Mapping[str, Any]) -> str:
    type_url = msg.get("type_url") or msg.get("typeUrl")
    if not type_url:
        raise ValidationError("Message is missing a type_url.")
    return type_url


def build_eip712_typed_data(
    context: Union[TxContext, Mapping[str, Any]],
    msgs: Sequence[Mapping[str, Any]],
    evm_chain_id: Optional[int] = None,
    max_duplicate_types: int = DEFAULT_MAX_DUPLICATE_TYPES,
) -> Dict[str, Any]:
    """
    Build the EIP-712 typed data for a transaction.

    Args:
        context: Chain id, account number, sequence, fee and memo
        msgs: Ordered messages, each ``{"type_url": ..., "value": {...}}``
        evm_chain_id: Explicit EVM chain id; parsed from ``chain_id`` when omitted
        max_duplicate_types: Upper bound on numeric suffixes per generated type name

    Returns:
        Dict with ``types``, ``primaryType``, ``domain`` and ``message``

    Raises:
        ValidationError: If ``msgs`` is empty
        UnknownMessageTypeError: If a type URL is not registered
        UnsupportedLegacyAminoError: If a message cannot be signed via legacy Amino JSON
        UnresolvableChainIdError: If no EVM chain id can be determined
    """
    if not isinstance(context, TxContext):
        context = TxContext(**context)
    if not msgs:
        raise ValidationError("At least one message is required")

    types = base_types()
    message: Dict[str, Any] = {
        "account_number": str(context.account_number),
        "chain_id": context.chain_id,
        "fee": {
            "amount": [{"denom": context.fee.denom, "amount": str(context.fee.amount)}],
            "gas": str(context.fee.gas),
        },
        "memo": context.memo,
        "sequence": str(context.sequence),
    }

    for index, msg in enumerate(msgs):
        type_url = _message_type_url(msg)
        config = EIP712_MSG_TYPES.get(type_url)
        if config is None:
            raise UnknownMessageTypeError(type_url)
        if not config.legacy_amino_registered:
            raise UnsupportedLegacyAminoError(type_url)

        value = msg.get("value") or {}
        value_fields = resolve_value_fields(types, config.value_fields, config, value, max_duplicate_types)
        value_type = add_type_with_dedup(types, "TypeValue", value_fields, max_duplicate_types)
        wrapper_type = add_type_with_dedup(
            types,
            config.eip712_type_name,
            [{"name": "value", "type": value_type}, {"name": "type", "type": "string"}],
            max_duplicate_types,
        )

        msg_field = f"msg{index}"
        types["Tx"].append({"name": msg_field, "type": wrapper_type})
        message[msg_field] = {
            "type": config.amino_type,
            "value": normalize_value(value, config.value_fields, config, WIRE_SCHEMAS.get(type_url)),
        }

    chain_id = resolve_evm_chain_id(context.chain_id, evm_chain_id)
    logger.debug(f"Built EIP-712 typed data for {len(msgs)} message(s) on EVM chain {chain_id}")
    return {
        "types": types,
        "primaryType": "Tx",
        "domain": build_domain(chain_id),
        "message": message,
    }
