"""
Declarative wire schemas for every supported chain message.

Each message is a ``MessageSchema``: an ordered tuple of ``WireField``
descriptors giving the proto field number, the snake_case key read from the
message value, the scalar kind, and whether the field is repeated or a
nested message. A single generic encoder walks the descriptors and drives
``BinaryWriter``. Field numbers are the chain's wire contract and must match
the ``.proto`` definitions exactly.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from ..core.encoding import duration_to_nanoseconds, split_nanoseconds, to_bytes, to_uint64
from ..exceptions import UnknownMessageTypeError, ValidationError
from .writer import BinaryWriter

logger = logging.getLogger(__name__)

STRING = "string"
UINT64 = "uint64"
INT32 = "int32"
BOOL = "bool"
BYTES = "bytes"
DURATION = "duration"
MESSAGE = "message"


@dataclass(frozen=True)
class WireField:
    """One proto field of a message."""
    number: int
    name: str
    kind: str
    repeated: bool = False
    required: bool = True
    message: Optional["MessageSchema"] = None


@dataclass(frozen=True)
class MessageSchema:
    """Ordered proto fields of a message, by ascending field number."""
    name: str
    fields: Tuple[WireField, ...]

    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)


def _schema(name: str, *fields: WireField) -> MessageSchema:
    return MessageSchema(name=name, fields=tuple(fields))


def _optional(schema_name: str, *fields: WireField) -> MessageSchema:
    """Build a schema whose fields all fall back to proto3 defaults when absent."""
    relaxed = tuple(
        WireField(f.number, f.name, f.kind, f.repeated, False, f.message) for f in fields
    )
    return MessageSchema(name=schema_name, fields=relaxed)


def string(number: int, name: str) -> WireField:
    return WireField(number, name, STRING)


def uint64(number: int, name: str) -> WireField:
    return WireField(number, name, UINT64)


def boolean(number: int, name: str) -> WireField:
    return WireField(number, name, BOOL)


def raw_bytes(number: int, name: str) -> WireField:
    return WireField(number, name, BYTES)


def strings(number: int, name: str) -> WireField:
    return WireField(number, name, STRING, repeated=True)


def uint64s(number: int, name: str) -> WireField:
    return WireField(number, name, UINT64, repeated=True)


def message(number: int, name: str, schema: MessageSchema, repeated: bool = False) -> WireField:
    return WireField(number, name, MESSAGE, repeated=repeated, message=schema)


# google.protobuf.Duration
DURATION_SCHEMA = _schema(
    "google.protobuf.Duration",
    WireField(1, "seconds", UINT64),
    WireField(2, "nanos", INT32),
)

COIN_SCHEMA = _schema(
    "cosmos.base.v1beta1.Coin",
    string(1, "denom"),
    string(2, "amount"),
)

# ---------------------------------------------------------------------------
# ault.license.v1
# ---------------------------------------------------------------------------

LICENSE_PARAMS_SCHEMA = _optional(
    "ault.license.v1.Params",
    string(1, "class_name"),
    string(2, "class_symbol"),
    string(3, "base_token_uri"),
    boolean(4, "minting_paused"),
    uint64(5, "supply_cap"),
    boolean(6, "allow_metadata_update"),
    boolean(7, "admin_can_revoke"),
    boolean(8, "admin_can_burn"),
    uint64(9, "max_batch_mint_size"),
    uint64(10, "transfer_unlock_days"),
    boolean(11, "enable_transfers"),
    strings(12, "minter_allowed_msgs"),
    strings(13, "kyc_approver_allowed_msgs"),
    uint64(14, "free_max_gas_limit"),
    uint64(15, "max_voting_power_per_address"),
)

_MEMBER = (string(1, "authority"), string(2, "member"))
_BATCH_MEMBERS = (string(1, "authority"), strings(2, "members"))
_ADD_REMOVE = (string(1, "authority"), strings(2, "add"), strings(3, "remove"))
_ID_REASON = (string(1, "authority"), uint64(2, "id"), string(3, "reason"))
_LICENSE_PARAMS = (string(1, "authority"), message(2, "params", LICENSE_PARAMS_SCHEMA))

LICENSE_SCHEMAS: Dict[str, MessageSchema] = {
    "/ault.license.v1.MsgMintLicense": _schema(
        "MsgMintLicense",
        string(1, "minter"), string(2, "to"), string(3, "uri"), string(4, "reason"),
    ),
    "/ault.license.v1.MsgBatchMintLicense": _schema(
        "MsgBatchMintLicense",
        string(1, "minter"), strings(2, "to"), strings(3, "uri"), string(4, "reason"),
    ),
    "/ault.license.v1.MsgApproveMember": _schema("MsgApproveMember", *_MEMBER),
    "/ault.license.v1.MsgRevokeMember": _schema("MsgRevokeMember", *_MEMBER),
    "/ault.license.v1.MsgBatchApproveMember": _schema("MsgBatchApproveMember", *_BATCH_MEMBERS),
    "/ault.license.v1.MsgBatchRevokeMember": _schema("MsgBatchRevokeMember", *_BATCH_MEMBERS),
    "/ault.license.v1.MsgRevokeLicense": _schema("MsgRevokeLicense", *_ID_REASON),
    "/ault.license.v1.MsgBurnLicense": _schema("MsgBurnLicense", *_ID_REASON),
    "/ault.license.v1.MsgSetTokenURI": _schema(
        "MsgSetTokenURI",
        string(1, "minter"), uint64(2, "id"), string(3, "uri"),
    ),
    "/ault.license.v1.MsgSetMinters": _schema("MsgSetMinters", *_ADD_REMOVE),
    "/ault.license.v1.MsgSetKYCApprovers": _schema("MsgSetKYCApprovers", *_ADD_REMOVE),
    "/ault.license.v1.MsgSetParams": _schema("MsgSetParams", *_LICENSE_PARAMS),
    "/ault.license.v1.MsgUpdateParams": _schema("MsgUpdateParams", *_LICENSE_PARAMS),
    "/ault.license.v1.MsgTransferLicense": _schema(
        "MsgTransferLicense",
        string(1, "from"), string(2, "to"), uint64(3, "license_id"), string(4, "reason"),
    ),
}

# ---------------------------------------------------------------------------
# ault.miner.v1
# ---------------------------------------------------------------------------

WORK_SUBMISSION_SCHEMA = _schema(
    "ault.miner.v1.WorkSubmission",
    uint64(1, "license_id"),
    uint64(2, "epoch"),
    raw_bytes(3, "y"),
    raw_bytes(4, "proof"),
    raw_bytes(5, "nonce"),
)

MINER_PARAMS_SCHEMA = _optional(
    "ault.miner.v1.Params",
    uint64(1, "epoch_length_seconds"),
    uint64(2, "target_winners_per_epoch"),
    uint64(3, "max_winners_per_epoch"),
    uint64(4, "submission_window_seconds"),
    uint64(5, "controller_alpha_q16"),
    uint64(6, "controller_window"),
    string(7, "threshold_min"),
    string(8, "threshold_max"),
    uint64(9, "beacon_window_epochs"),
    uint64(10, "key_rotation_cooldown_seconds"),
    uint64(11, "vrf_verify_gas"),
    uint64(12, "min_key_age_epochs"),
    string(13, "initial_emission_per_epoch"),
    string(14, "emission_decay_rate"),
    uint64(15, "max_emission_years"),
    uint64(16, "max_payouts_per_block"),
    uint64(17, "max_epochs_per_block"),
    uint64(18, "staking_reward_percentage"),
    uint64(19, "max_commission_rate"),
    uint64(20, "max_commission_rate_increase_per_epoch"),
    uint64(21, "free_mining_until_epoch"),
    uint64(22, "free_mining_max_gas_limit"),
    strings(23, "miner_allowed_msgs"),
    uint64(24, "max_free_tx_per_epoch"),
)

MINER_SCHEMAS: Dict[str, MessageSchema] = {
    "/ault.miner.v1.MsgDelegateMining": _schema(
        "MsgDelegateMining",
        string(1, "owner"), uint64s(2, "license_ids"), string(3, "operator"),
    ),
    "/ault.miner.v1.MsgCancelMiningDelegation": _schema(
        "MsgCancelMiningDelegation",
        string(1, "owner"), uint64s(2, "license_ids"),
    ),
    "/ault.miner.v1.MsgRedelegateMining": _schema(
        "MsgRedelegateMining",
        string(1, "owner"), uint64s(2, "license_ids"), string(3, "new_operator"),
    ),
    "/ault.miner.v1.MsgSetOwnerVrfKey": _schema(
        "MsgSetOwnerVrfKey",
        raw_bytes(1, "vrf_pubkey"), raw_bytes(2, "possession_proof"),
        uint64(3, "nonce"), string(4, "owner"),
    ),
    "/ault.miner.v1.MsgSubmitWork": _schema(
        "MsgSubmitWork",
        uint64(1, "license_id"), uint64(2, "epoch"),
        raw_bytes(3, "y"), raw_bytes(4, "proof"), raw_bytes(5, "nonce"),
        string(6, "submitter"),
    ),
    "/ault.miner.v1.MsgBatchSubmitWork": _schema(
        "MsgBatchSubmitWork",
        message(1, "submissions", WORK_SUBMISSION_SCHEMA, repeated=True),
        string(2, "submitter"),
    ),
    "/ault.miner.v1.MsgUpdateParams": _schema(
        "MsgUpdateParams",
        string(1, "authority"), message(2, "params", MINER_PARAMS_SCHEMA),
    ),
    "/ault.miner.v1.MsgRegisterOperator": _schema(
        "MsgRegisterOperator",
        string(1, "operator"), uint64(2, "commission_rate"), string(3, "commission_recipient"),
    ),
    "/ault.miner.v1.MsgUnregisterOperator": _schema(
        "MsgUnregisterOperator",
        string(1, "operator"),
    ),
    "/ault.miner.v1.MsgUpdateOperatorInfo": _schema(
        "MsgUpdateOperatorInfo",
        string(1, "operator"), uint64(2, "new_commission_rate"),
        string(3, "new_commission_recipient"),
    ),
}

# ---------------------------------------------------------------------------
# ault.exchange.v1beta1
# ---------------------------------------------------------------------------

MARKET_PARAM_UPDATE_SCHEMA = _schema(
    "ault.exchange.v1beta1.MarketParamUpdate",
    uint64(1, "market_id"),
    string(2, "maker_fee_rate"),
    string(3, "taker_fee_rate"),
)

EXCHANGE_SCHEMAS: Dict[str, MessageSchema] = {
    "/ault.exchange.v1beta1.MsgCreateMarket": _schema(
        "MsgCreateMarket",
        string(1, "sender"), string(2, "base_denom"), string(3, "quote_denom"),
    ),
    "/ault.exchange.v1beta1.MsgPlaceLimitOrder": _schema(
        "MsgPlaceLimitOrder",
        string(1, "sender"), uint64(2, "market_id"), boolean(3, "is_buy"),
        string(4, "price"), string(5, "quantity"),
        WireField(6, "lifespan", DURATION),
    ),
    "/ault.exchange.v1beta1.MsgPlaceMarketOrder": _schema(
        "MsgPlaceMarketOrder",
        string(1, "sender"), uint64(2, "market_id"), boolean(3, "is_buy"), string(4, "quantity"),
    ),
    "/ault.exchange.v1beta1.MsgCancelOrder": _schema(
        "MsgCancelOrder",
        string(1, "sender"), raw_bytes(2, "order_id"),
    ),
    "/ault.exchange.v1beta1.MsgCancelAllOrders": _schema(
        "MsgCancelAllOrders",
        string(1, "sender"), uint64(2, "market_id"),
    ),
    "/ault.exchange.v1beta1.MsgUpdateMarketParams": _schema(
        "MsgUpdateMarketParams",
        string(1, "authority"),
        message(2, "updates", MARKET_PARAM_UPDATE_SCHEMA, repeated=True),
    ),
}

# ---------------------------------------------------------------------------
# cosmos.staking.v1beta1 / cosmos.distribution.v1beta1
# ---------------------------------------------------------------------------

_DELEGATION = (
    string(1, "delegator_address"),
    string(2, "validator_address"),
    message(3, "amount", COIN_SCHEMA),
)

STAKING_SCHEMAS: Dict[str, MessageSchema] = {
    "/cosmos.staking.v1beta1.MsgDelegate": _schema("MsgDelegate", *_DELEGATION),
    "/cosmos.staking.v1beta1.MsgUndelegate": _schema("MsgUndelegate", *_DELEGATION),
    "/cosmos.staking.v1beta1.MsgBeginRedelegate": _schema(
        "MsgBeginRedelegate",
        string(1, "delegator_address"),
        string(2, "validator_src_address"),
        string(3, "validator_dst_address"),
        message(4, "amount", COIN_SCHEMA),
    ),
    "/cosmos.distribution.v1beta1.MsgWithdrawDelegatorReward": _schema(
        "MsgWithdrawDelegatorReward",
        string(1, "delegator_address"),
        string(2, "validator_address"),
    ),
}

WIRE_SCHEMAS: Dict[str, MessageSchema] = {
    **LICENSE_SCHEMAS,
    **MINER_SCHEMAS,
    **EXCHANGE_SCHEMAS,
    **STAKING_SCHEMAS,
}


def _require_string(value: Any, label: str) -> str:
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise ValidationError(f"{label} must be a string.")
    return str(value)


def _require_bool(value: Any, label: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{label} must be a boolean.")
    return value


def _require_list(value: Any, label: str) -> list:
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"{label} must be a list.")
    return list(value)


def _require_mapping(value: Any, label: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValidationError(f"{label} must be an object.")
    return value


def encode_duration(nanoseconds: int) -> bytes:
    """Encode a non-negative nanosecond count as a ``google.protobuf.Duration``."""
    seconds, nanos = split_nanoseconds(nanoseconds)
    return encode_with_schema(DURATION_SCHEMA, {"seconds": seconds, "nanos": nanos}, DURATION_SCHEMA.name)


def _write_field(writer: BinaryWriter, field: WireField, raw: Any, label: str) -> None:
    if field.kind == STRING:
        if field.repeated:
            items = _require_list(raw, label)
            writer.write_repeated_string(
                field.number, [_require_string(item, f"{label}[{i}]") for i, item in enumerate(items)]
            )
        else:
            writer.write_string(field.number, _require_string(raw, label))
    elif field.kind == UINT64:
        if field.repeated:
            items = _require_list(raw, label)
            writer.write_repeated_uint64(
                field.number, [to_uint64(item, f"{label}[{i}]") for i, item in enumerate(items)]
            )
        else:
            writer.write_uint64(field.number, to_uint64(raw, label))
    elif field.kind == INT32:
        writer.write_int32(field.number, int(raw))
    elif field.kind == BOOL:
        writer.write_bool(field.number, _require_bool(raw, label))
    elif field.kind == BYTES:
        if field.repeated:
            items = _require_list(raw, label)
            writer.write_repeated_bytes(
                field.number, [to_bytes(item, f"{label}[{i}]") for i, item in enumerate(items)]
            )
        else:
            writer.write_bytes(field.number, to_bytes(raw, label))
    elif field.kind == DURATION:
        nanoseconds = duration_to_nanoseconds(raw, label)
        if nanoseconds < 0:
            raise ValidationError(f"{label} must be a non-negative duration.")
        writer.write_bytes(field.number, encode_duration(nanoseconds))
    elif field.kind == MESSAGE:
        if field.repeated:
            items = _require_list(raw, label)
            writer.write_repeated_bytes(
                field.number,
                [
                    encode_with_schema(field.message, _require_mapping(item, f"{label}[]"), f"{label}[]")
                    for item in items
                ],
            )
        else:
            writer.write_bytes(
                field.number, encode_with_schema(field.message, _require_mapping(raw, label), label)
            )
    else:
        raise ValueError(f"Unsupported wire kind: {field.kind}")


def encode_with_schema(schema: MessageSchema, value: Mapping[str, Any], prefix: str = "") -> bytes:
    """
    Encode a snake_case value record with the given schema.

    Args:
        schema: Message schema to drive the encoding
        value: Message value keyed by proto field name
        prefix: Label prefix used in validation messages

    Returns:
        Encoded message bytes

    Raises:
        ValidationError: If a required field is missing or a value has the wrong shape
    """
    writer = BinaryWriter()
    for field in schema.fields:
        label = f"{prefix}.{field.name}" if prefix else field.name
        raw = value.get(field.name)
        if raw is None:
            if field.required:
                raise ValidationError(f"{label} is required.")
            continue
        _write_field(writer, field, raw, label)
    return writer.finish()


def encode_message(type_url: str, value: Mapping[str, Any]) -> bytes:
    """
    Encode a message value into its chain wire bytes.

    Args:
        type_url: Registered message type URL
        value: snake_case value record

    Returns:
        Protobuf bytes of the message (without the ``Any`` envelope)

    Raises:
        UnknownMessageTypeError: If no schema is registered for the type URL
        ValidationError: If the value does not fit the schema
    """
    schema = WIRE_SCHEMAS.get(type_url)
    if schema is None:
        raise UnknownMessageTypeError(type_url)
    encoded = encode_with_schema(schema, value)
    logger.debug(f"Encoded {type_url} into {len(encoded)} bytes")
    return encoded
