"""
Message builders.

Each builder returns ``{"type_url": ..., "value": {...}}`` with snake_case
keys, ready for ``build_eip712_typed_data`` and ``encode_message``::

    from ault_sdk.messages import msg

    mint = msg.license.mint_license(minter="ault1...", to="ault1...", uri="ipfs://...")
"""
from datetime import timedelta
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

IntLike = Union[int, str]
BytesLike = Union[bytes, str]
DurationLike = Union[int, timedelta, Mapping[str, Any]]

LICENSE = "/ault.license.v1."
MINER = "/ault.miner.v1."
EXCHANGE = "/ault.exchange.v1beta1."
STAKING = "/cosmos.staking.v1beta1."
DISTRIBUTION = "/cosmos.distribution.v1beta1."


def make_msg(type_url: str, **value: Any) -> Dict[str, Any]:
    """Build a message, dropping ``None`` values."""
    return {"type_url": type_url, "value": {k: v for k, v in value.items() if v is not None}}


def coin(denom: str, amount: IntLike) -> Dict[str, str]:
    return {"denom": denom, "amount": str(amount)}


class LicenseMsgs:
    @staticmethod
    def mint_license(minter: str, to: str, uri: str, reason: str = "") -> Dict[str, Any]:
        return make_msg(LICENSE + "MsgMintLicense", minter=minter, to=to, uri=uri, reason=reason)

    @staticmethod
    def batch_mint_license(minter: str, to: Sequence[str], uri: Sequence[str], reason: str = "") -> Dict[str, Any]:
        return make_msg(LICENSE + "MsgBatchMintLicense", minter=minter, to=list(to), uri=list(uri), reason=reason)

    @staticmethod
    def approve_member(authority: str, member: str) -> Dict[str, Any]:
        return make_msg(LICENSE + "MsgApproveMember", authority=authority, member=member)

    @staticmethod
    def revoke_member(authority: str, member: str) -> Dict[str, Any]:
        return make_msg(LICENSE + "MsgRevokeMember", authority=authority, member=member)

    @staticmethod
    def batch_approve_member(authority: str, members: Sequence[str]) -> Dict[str, Any]:
        return make_msg(LICENSE + "MsgBatchApproveMember", authority=authority, members=list(members))

    @staticmethod
    def batch_revoke_member(authority: str, members: Sequence[str]) -> Dict[str, Any]:
        return make_msg(LICENSE + "MsgBatchRevokeMember", authority=authority, members=list(members))

    @staticmethod
    def revoke_license(authority: str, id: IntLike, reason: str = "") -> Dict[str, Any]:
        return make_msg(LICENSE + "MsgRevokeLicense", authority=authority, id=id, reason=reason)

    @staticmethod
    def burn_license(authority: str, id: IntLike, reason: str = "") -> Dict[str, Any]:
        return make_msg(LICENSE + "MsgBurnLicense", authority=authority, id=id, reason=reason)

    @staticmethod
    def set_token_uri(minter: str, id: IntLike, uri: str) -> Dict[str, Any]:
        return make_msg(LICENSE + "MsgSetTokenURI", minter=minter, id=id, uri=uri)

    @staticmethod
    def set_minters(authority: str, add: Sequence[str] = (), remove: Sequence[str] = ()) -> Dict[str, Any]:
        return make_msg(LICENSE + "MsgSetMinters", authority=authority, add=list(add), remove=list(remove))

    @staticmethod
    def set_kyc_approvers(authority: str, add: Sequence[str] = (), remove: Sequence[str] = ()) -> Dict[str, Any]:
        return make_msg(LICENSE + "MsgSetKYCApprovers", authority=authority, add=list(add), remove=list(remove))

    @staticmethod
    def update_params(authority: str, params: Mapping[str, Any]) -> Dict[str, Any]:
        return make_msg(LICENSE + "MsgUpdateParams", authority=authority, params=dict(params))

    @staticmethod
    def set_params(authority: str, params: Mapping[str, Any]) -> Dict[str, Any]:
        return make_msg(LICENSE + "MsgSetParams", authority=authority, params=dict(params))

    @staticmethod
    def transfer_license(from_address: str, to: str, license_id: IntLike, reason: str = "") -> Dict[str, Any]:
        # "from" is a keyword, hence the parameter name
        return make_msg(
            LICENSE + "MsgTransferLicense",
            **{"from": from_address, "to": to, "license_id": license_id, "reason": reason},
        )


class MinerMsgs:
    @staticmethod
    def delegate_mining(owner: str, license_ids: Sequence[IntLike], operator: str) -> Dict[str, Any]:
        return make_msg(MINER + "MsgDelegateMining", owner=owner, license_ids=list(license_ids), operator=operator)

    @staticmethod
    def cancel_mining_delegation(owner: str, license_ids: Sequence[IntLike]) -> Dict[str, Any]:
        return make_msg(MINER + "MsgCancelMiningDelegation", owner=owner, license_ids=list(license_ids))

    @staticmethod
    def redelegate_mining(owner: str, license_ids: Sequence[IntLike], new_operator: str) -> Dict[str, Any]:
        return make_msg(
            MINER + "MsgRedelegateMining", owner=owner, license_ids=list(license_ids), new_operator=new_operator,
        )

    @staticmethod
    def set_owner_vrf_key(owner: str, vrf_pubkey: BytesLike, possession_proof: BytesLike,
                          nonce: IntLike) -> Dict[str, Any]:
        return make_msg(
            MINER + "MsgSetOwnerVrfKey",
            vrf_pubkey=vrf_pubkey, possession_proof=possession_proof, nonce=nonce, owner=owner,
        )

    @staticmethod
    def submit_work(submitter: str, license_id: IntLike, epoch: IntLike, y: BytesLike, proof: BytesLike,
                    nonce: BytesLike) -> Dict[str, Any]:
        return make_msg(
            MINER + "MsgSubmitWork",
            license_id=license_id, epoch=epoch, y=y, proof=proof, nonce=nonce, submitter=submitter,
        )

    @staticmethod
    def work_submission(license_id: IntLike, epoch: IntLike, y: BytesLike, proof: BytesLike,
                        nonce: BytesLike) -> Dict[str, Any]:
        return {"license_id": license_id, "epoch": epoch, "y": y, "proof": proof, "nonce": nonce}

    @staticmethod
    def batch_submit_work(submitter: str, submissions: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
        return make_msg(
            MINER + "MsgBatchSubmitWork",
            submitter=submitter, submissions=[dict(s) for s in submissions],
        )

    @staticmethod
    def update_params(authority: str, params: Mapping[str, Any]) -> Dict[str, Any]:
        return make_msg(MINER + "MsgUpdateParams", authority=authority, params=dict(params))

    @staticmethod
    def register_operator(operator: str, commission_rate: IntLike, commission_recipient: str) -> Dict[str, Any]:
        return make_msg(
            MINER + "MsgRegisterOperator",
            operator=operator, commission_rate=commission_rate, commission_recipient=commission_recipient,
        )

    @staticmethod
    def unregister_operator(operator: str) -> Dict[str, Any]:
        return make_msg(MINER + "MsgUnregisterOperator", operator=operator)

    @staticmethod
    def update_operator_info(operator: str, new_commission_rate: IntLike,
                             new_commission_recipient: str) -> Dict[str, Any]:
        return make_msg(
            MINER + "MsgUpdateOperatorInfo",
            operator=operator,
            new_commission_rate=new_commission_rate,
            new_commission_recipient=new_commission_recipient,
        )


class ExchangeMsgs:
    @staticmethod
    def create_market(sender: str, base_denom: str, quote_denom: str) -> Dict[str, Any]:
        return make_msg(EXCHANGE + "MsgCreateMarket", sender=sender, base_denom=base_denom, quote_denom=quote_denom)

    @staticmethod
    def place_limit_order(sender: str, market_id: IntLike, is_buy: bool, price: str, quantity: str,
                          lifespan: DurationLike) -> Dict[str, Any]:
        return make_msg(
            EXCHANGE + "MsgPlaceLimitOrder",
            sender=sender, market_id=market_id, is_buy=is_buy, price=price, quantity=quantity, lifespan=lifespan,
        )

    @staticmethod
    def place_market_order(sender: str, market_id: IntLike, is_buy: bool, quantity: str) -> Dict[str, Any]:
        return make_msg(
            EXCHANGE + "MsgPlaceMarketOrder", sender=sender, market_id=market_id, is_buy=is_buy, quantity=quantity,
        )

    @staticmethod
    def cancel_order(sender: str, order_id: BytesLike) -> Dict[str, Any]:
        return make_msg(EXCHANGE + "MsgCancelOrder", sender=sender, order_id=order_id)

    @staticmethod
    def cancel_all_orders(sender: str, market_id: IntLike) -> Dict[str, Any]:
        return make_msg(EXCHANGE + "MsgCancelAllOrders", sender=sender, market_id=market_id)

    @staticmethod
    def update_market_params(authority: str, updates: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
        return make_msg(EXCHANGE + "MsgUpdateMarketParams", authority=authority, updates=[dict(u) for u in updates])


class StakingMsgs:
    @staticmethod
    def delegate(delegator_address: str, validator_address: str, amount: Mapping[str, Any]) -> Dict[str, Any]:
        return make_msg(
            STAKING + "MsgDelegate",
            delegator_address=delegator_address, validator_address=validator_address, amount=dict(amount),
        )

    @staticmethod
    def undelegate(delegator_address: str, validator_address: str, amount: Mapping[str, Any]) -> Dict[str, Any]:
        return make_msg(
            STAKING + "MsgUndelegate",
            delegator_address=delegator_address, validator_address=validator_address, amount=dict(amount),
        )

    @staticmethod
    def begin_redelegate(delegator_address: str, validator_src_address: str, validator_dst_address: str,
                         amount: Mapping[str, Any]) -> Dict[str, Any]:
        return make_msg(
            STAKING + "MsgBeginRedelegate",
            delegator_address=delegator_address,
            validator_src_address=validator_src_address,
            validator_dst_address=validator_dst_address,
            amount=dict(amount),
        )


class DistributionMsgs:
    @staticmethod
    def withdraw_delegator_reward(delegator_address: str, validator_address: str) -> Dict[str, Any]:
        return make_msg(
            DISTRIBUTION + "MsgWithdrawDelegatorReward",
            delegator_address=delegator_address, validator_address=validator_address,
        )


class msg:
    """Namespace of message builders grouped by chain module."""
    license = LicenseMsgs
    miner = MinerMsgs
    exchange = ExchangeMsgs
    staking = StakingMsgs
    distribution = DistributionMsgs


def type_urls(messages: Sequence[Mapping[str, Any]]) -> List[str]:
    return [m["type_url"] for m in messages]


def find_message(messages: Sequence[Mapping[str, Any]], type_url: str) -> Optional[Mapping[str, Any]]:
    for m in messages:
        if m.get("type_url") == type_url:
            return m
    return None
