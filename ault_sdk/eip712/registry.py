"""
Static EIP-712 registry of every message the SDK can sign.

Field lists mirror the chain's legacy Amino JSON view of each message and
MUST be kept in strict descending lexicographic order; ``field_order``
verifies this when the package is imported. Numeric and byte fields are
declared ``string`` because Amino JSON carries them as strings. ``NESTED``
marks a sub-message whose fields live in ``nested_types`` under the same
field name; the builder replaces it with a generated type name.
"""
from dataclasses import dataclass, field
from typing import Dict, NamedTuple, Tuple


class Eip712Field(NamedTuple):
    name: str
    type: str


NESTED = "NESTED"
NESTED_ARRAY = "NESTED[]"

FieldList = Tuple[Eip712Field, ...]


@dataclass(frozen=True)
class MsgTypeConfig:
    amino_type: str
    eip712_type_name: str
    value_fields: FieldList
    nested_types: Dict[str, FieldList] = field(default_factory=dict)
    duration_fields: Tuple[str, ...] = ()
    legacy_amino_registered: bool = True


def _fields(*specs) -> FieldList:
    """``"name"`` means a string field; ``("name", "type")`` sets the type."""
    out = []
    for spec in specs:
        if isinstance(spec, str):
            out.append(Eip712Field(spec, "string"))
        else:
            out.append(Eip712Field(*spec))
    return tuple(out)


def _msg(amino_type: str, value_fields: FieldList, **kwargs) -> MsgTypeConfig:
    msg_name = amino_type.rsplit("/", 1)[-1]
    return MsgTypeConfig(
        amino_type=amino_type,
        eip712_type_name=f"Type{msg_name}",
        value_fields=value_fields,
        **kwargs,
    )


LICENSE_PARAMS_FIELDS = _fields(
    "transfer_unlock_days",
    "supply_cap",
    ("minting_paused", "bool"),
    ("minter_allowed_msgs", "string[]"),
    "max_voting_power_per_address",
    "max_batch_mint_size",
    ("kyc_approver_allowed_msgs", "string[]"),
    "free_max_gas_limit",
    ("enable_transfers", "bool"),
    "class_symbol",
    "class_name",
    "base_token_uri",
    ("allow_metadata_update", "bool"),
    ("admin_can_revoke", "bool"),
    ("admin_can_burn", "bool"),
)

MINER_PARAMS_FIELDS = _fields(
    "vrf_verify_gas",
    "threshold_min",
    "threshold_max",
    "target_winners_per_epoch",
    "submission_window_seconds",
    "staking_reward_percentage",
    ("miner_allowed_msgs", "string[]"),
    "min_key_age_epochs",
    "max_winners_per_epoch",
    "max_payouts_per_block",
    "max_free_tx_per_epoch",
    "max_epochs_per_block",
    "max_emission_years",
    "max_commission_rate_increase_per_epoch",
    "max_commission_rate",
    "key_rotation_cooldown_seconds",
    "initial_emission_per_epoch",
    "free_mining_until_epoch",
    "free_mining_max_gas_limit",
    "epoch_length_seconds",
    "emission_decay_rate",
    "controller_window",
    "controller_alpha_q16",
    "beacon_window_epochs",
)

WORK_SUBMISSION_FIELDS = _fields("y", "proof", "nonce", "license_id", "epoch")

MARKET_PARAM_UPDATE_FIELDS = _fields("taker_fee_rate", "market_id", "maker_fee_rate")

COIN_FIELDS = _fields("denom", "amount")

_MEMBER = _fields("member", "authority")
_BATCH_MEMBERS = _fields(("members", "string[]"), "authority")
_ID_REASON = _fields("reason", "id", "authority")
_ADD_REMOVE = _fields(("remove", "string[]"), "authority", ("add", "string[]"))
_PARAMS = _fields(("params", NESTED), "authority")
_DELEGATION = _fields("validator_address", "delegator_address", ("amount", NESTED))

LICENSE_MSG_TYPES: Dict[str, MsgTypeConfig] = {
    "/ault.license.v1.MsgMintLicense": _msg(
        "license/MsgMintLicense", _fields("uri", "to", "reason", "minter"),
    ),
    "/ault.license.v1.MsgBatchMintLicense": _msg(
        "license/MsgBatchMintLicense",
        _fields(("uri", "string[]"), ("to", "string[]"), "reason", "minter"),
    ),
    "/ault.license.v1.MsgApproveMember": _msg("license/MsgApproveMember", _MEMBER),
    "/ault.license.v1.MsgRevokeMember": _msg("license/MsgRevokeMember", _MEMBER),
    "/ault.license.v1.MsgBatchApproveMember": _msg("license/MsgBatchApproveMember", _BATCH_MEMBERS),
    "/ault.license.v1.MsgBatchRevokeMember": _msg("license/MsgBatchRevokeMember", _BATCH_MEMBERS),
    "/ault.license.v1.MsgRevokeLicense": _msg("license/MsgRevokeLicense", _ID_REASON),
    "/ault.license.v1.MsgBurnLicense": _msg("license/MsgBurnLicense", _ID_REASON),
    "/ault.license.v1.MsgSetTokenURI": _msg("license/MsgSetTokenURI", _fields("uri", "minter", "id")),
    "/ault.license.v1.MsgSetMinters": _msg("license/MsgSetMinters", _ADD_REMOVE),
    "/ault.license.v1.MsgSetKYCApprovers": _msg("license/MsgSetKYCApprovers", _ADD_REMOVE),
    "/ault.license.v1.MsgSetParams": _msg(
        "license/MsgSetParams", _PARAMS, nested_types={"params": LICENSE_PARAMS_FIELDS},
    ),
    "/ault.license.v1.MsgUpdateParams": _msg(
        "license/MsgUpdateParams", _PARAMS, nested_types={"params": LICENSE_PARAMS_FIELDS},
    ),
    "/ault.license.v1.MsgTransferLicense": _msg(
        "license/MsgTransferLicense", _fields("to", "reason", "license_id", "from"),
    ),
}

MINER_MSG_TYPES: Dict[str, MsgTypeConfig] = {
    "/ault.miner.v1.MsgDelegateMining": _msg(
        "miner/MsgDelegateMining", _fields("owner", "operator", ("license_ids", "string[]")),
    ),
    "/ault.miner.v1.MsgCancelMiningDelegation": _msg(
        "miner/MsgCancelMiningDelegation", _fields("owner", ("license_ids", "string[]")),
    ),
    "/ault.miner.v1.MsgRedelegateMining": _msg(
        "miner/MsgRedelegateMining", _fields("owner", "new_operator", ("license_ids", "string[]")),
    ),
    "/ault.miner.v1.MsgSetOwnerVrfKey": _msg(
        "miner/MsgSetOwnerVrfKey", _fields("vrf_pubkey", "possession_proof", "owner", "nonce"),
    ),
    "/ault.miner.v1.MsgSubmitWork": _msg(
        "miner/MsgSubmitWork", _fields("y", "submitter", "proof", "nonce", "license_id", "epoch"),
    ),
    "/ault.miner.v1.MsgBatchSubmitWork": _msg(
        "miner/MsgBatchSubmitWork",
        _fields("submitter", ("submissions", NESTED_ARRAY)),
        nested_types={"submissions": WORK_SUBMISSION_FIELDS},
    ),
    "/ault.miner.v1.MsgUpdateParams": _msg(
        "miner/MsgUpdateParams", _PARAMS, nested_types={"params": MINER_PARAMS_FIELDS},
    ),
    "/ault.miner.v1.MsgRegisterOperator": _msg(
        "miner/MsgRegisterOperator", _fields("operator", "commission_recipient", "commission_rate"),
    ),
    "/ault.miner.v1.MsgUnregisterOperator": _msg("miner/MsgUnregisterOperator", _fields("operator")),
    "/ault.miner.v1.MsgUpdateOperatorInfo": _msg(
        "miner/MsgUpdateOperatorInfo",
        _fields("operator", "new_commission_recipient", "new_commission_rate"),
    ),
}

EXCHANGE_MSG_TYPES: Dict[str, MsgTypeConfig] = {
    "/ault.exchange.v1beta1.MsgCreateMarket": _msg(
        "exchange/MsgCreateMarket", _fields("sender", "quote_denom", "base_denom"),
    ),
    "/ault.exchange.v1beta1.MsgPlaceLimitOrder": _msg(
        "exchange/MsgPlaceLimitOrder",
        _fields("sender", "quantity", "price", "market_id", "lifespan", ("is_buy", "bool")),
        duration_fields=("lifespan",),
    ),
    "/ault.exchange.v1beta1.MsgPlaceMarketOrder": _msg(
        "exchange/MsgPlaceMarketOrder",
        _fields("sender", "quantity", "market_id", ("is_buy", "bool")),
    ),
    "/ault.exchange.v1beta1.MsgCancelOrder": _msg(
        "exchange/MsgCancelOrder", _fields("sender", "order_id"), legacy_amino_registered=False,
    ),
    "/ault.exchange.v1beta1.MsgCancelAllOrders": _msg(
        "exchange/MsgCancelAllOrders", _fields("sender", "market_id"),
    ),
    "/ault.exchange.v1beta1.MsgUpdateMarketParams": _msg(
        "exchange/MsgUpdateMarketParams",
        _fields(("updates", NESTED_ARRAY), "authority"),
        nested_types={"updates": MARKET_PARAM_UPDATE_FIELDS},
    ),
}

STAKING_MSG_TYPES: Dict[str, MsgTypeConfig] = {
    "/cosmos.staking.v1beta1.MsgDelegate": _msg(
        "cosmos-sdk/MsgDelegate", _DELEGATION, nested_types={"amount": COIN_FIELDS},
    ),
    "/cosmos.staking.v1beta1.MsgUndelegate": _msg(
        "cosmos-sdk/MsgUndelegate", _DELEGATION, nested_types={"amount": COIN_FIELDS},
    ),
    "/cosmos.staking.v1beta1.MsgBeginRedelegate": _msg(
        "cosmos-sdk/MsgBeginRedelegate",
        _fields("validator_src_address", "validator_dst_address", "delegator_address", ("amount", NESTED)),
        nested_types={"amount": COIN_FIELDS},
    ),
    "/cosmos.distribution.v1beta1.MsgWithdrawDelegatorReward": _msg(
        "cosmos-sdk/MsgWithdrawDelegationReward", _fields("validator_address", "delegator_address"),
    ),
}

EIP712_MSG_TYPES: Dict[str, MsgTypeConfig] = {
    **LICENSE_MSG_TYPES,
    **MINER_MSG_TYPES,
    **EXCHANGE_MSG_TYPES,
    **STAKING_MSG_TYPES,
}
