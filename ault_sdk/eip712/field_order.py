"""
Load-time check that every registry field list is in descending order.

Cosmos EVM reproduces the legacy Amino JSON signing bytes from the EIP-712
payload, which only matches when fields are listed in descending
alphabetical order. A misordered list produces signatures the chain rejects
without any local symptom, so the registry is verified up front.
"""
import logging
from typing import List, Mapping, Sequence, Tuple

from ..exceptions import ConfigurationError, FieldOrderError
from ..proto.schema import WIRE_SCHEMAS
from .registry import EIP712_MSG_TYPES, Eip712Field, MsgTypeConfig

logger = logging.getLogger(__name__)


def expected_order(names: Sequence[str]) -> List[str]:
    return sorted(names, reverse=True)


def _is_strictly_descending(names: Sequence[str]) -> bool:
    return all(a > b for a, b in zip(names, names[1:]))


def find_field_order_violations(
    registry: Mapping[str, MsgTypeConfig],
) -> List[Tuple[str, List[str], List[str]]]:
    """
    Collect misordered field lists.

    Returns:
        List of (label, current order, expected order) tuples
    """
    violations = []

    def check(label: str, fields: Sequence[Eip712Field]) -> None:
        names = [f.name for f in fields]
        if not _is_strictly_descending(names):
            violations.append((label, names, expected_order(names)))

    for type_url, config in registry.items():
        check(f"{type_url} valueFields", config.value_fields)
        for nested_name, nested_fields in config.nested_types.items():
            check(f"{type_url} nestedTypes.{nested_name}", nested_fields)
    return violations


def validate_field_order(registry: Mapping[str, MsgTypeConfig] = EIP712_MSG_TYPES) -> None:
    """
    Verify the registry, raising on the first load with a bad entry.

    Raises:
        FieldOrderError: Listing every offending type with current and expected order
    """
    violations = find_field_order_violations(registry)
    if not violations:
        logger.debug(f"EIP-712 field order verified for {len(registry)} message types")
        return

    lines = [
        "EIP-712 field order validation failed.",
        "Fields MUST be in DESCENDING alphabetical order for Cosmos EVM signing.",
        "",
    ]
    for label, current, expected in violations:
        lines.append(f"  {label}")
        lines.append(f"    Current:  {current}")
        lines.append(f"    Expected: {expected}")
    raise FieldOrderError("\n".join(lines))


def validate_wire_coverage(registry: Mapping[str, MsgTypeConfig] = EIP712_MSG_TYPES) -> None:
    """
    Verify that the signing registry and the wire schemas describe the same messages.

    Raises:
        ConfigurationError: If a message or field exists on only one side
    """
    problems = []
    for type_url in sorted(set(registry) ^ set(WIRE_SCHEMAS)):
        side = "wire schema" if type_url in registry else "EIP-712 registry entry"
        problems.append(f"{type_url}: missing {side}")

    for type_url in sorted(set(registry) & set(WIRE_SCHEMAS)):
        config = registry[type_url]
        schema = WIRE_SCHEMAS[type_url]
        signed = {f.name for f in config.value_fields}
        wired = set(schema.field_names())
        if signed != wired:
            problems.append(f"{type_url}: fields differ (signed={sorted(signed)}, wire={sorted(wired)})")
        for wire_field in schema.fields:
            if wire_field.message is None:
                continue
            nested = config.nested_types.get(wire_field.name)
            if nested is None:
                problems.append(f"{type_url}: no nested type for {wire_field.name}")
            elif {f.name for f in nested} != set(wire_field.message.field_names()):
                problems.append(f"{type_url}: nested fields of {wire_field.name} differ")

    if problems:
        raise ConfigurationError("EIP-712 registry and wire schemas disagree:\n  " + "\n  ".join(problems))
