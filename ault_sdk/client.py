"""
AultClient - High-level client for the Ault chain.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, TypeVar, Union

from .address import normalize_address, normalize_addresses, normalize_validator_address
from .config import NetworkConfig, validate_url
from .constants import GasConstants
from .core.http import HttpClient, RetryPolicy
from .eip712.broadcast import ChainIdCache, sign_and_broadcast_eip712
from .eip712.signers import AultSigner, detect_signer, resolve_signer_address
from .exceptions import AultError, ValidationError
from .messages import IntLike, msg
from .models import Network, TxResult
from .rest import ExchangeApi, LicenseApi, MinerApi, RestContext, StakingApi

GasLike = Union[int, str]

T = TypeVar("T")
R = TypeVar("R")

PARALLEL_BATCH_SIZE = 50
LICENSE_STATUS_ACTIVE = "LICENSE_STATUS_ACTIVE"


def map_in_batches(fn: Callable[[T], R], items: Iterable[T], batch_size: int = PARALLEL_BATCH_SIZE) -> List[R]:
    """
    Apply ``fn`` to every item on a thread pool, ``batch_size`` items at a time.

    A batch starts only after the previous one has finished. Results keep
    the order of ``items``.
    """
    items = list(items)
    if not items:
        return []
    results: List[R] = []
    with ThreadPoolExecutor(max_workers=min(batch_size, len(items))) as executor:
        for start in range(0, len(items), batch_size):
            results.extend(executor.map(fn, items[start:start + batch_size]))
    return results


class AultClient:
    """
    Client for querying and transacting on the Ault chain.

    Queries are grouped per chain module (``client.license``, ``client.miner``,
    ``client.exchange``, ``client.staking``). Transactions are methods on the
    client itself; each one builds its messages for the configured signer,
    signs them with EIP-712 and broadcasts them.
    """

    def __init__(
        self,
        signer: Any,
        network: Union[str, Network] = "testnet",
        signer_address: Optional[str] = None,
        rest_url: Optional[str] = None,
        policy: Optional[RetryPolicy] = None,
        broadcast_policy: Optional[RetryPolicy] = None,
        default_gas_limit: Optional[GasLike] = None,
        default_memo: str = "",
        chain_id_cache: Optional[ChainIdCache] = None,
        http: Optional[HttpClient] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the AultClient

        Args:
            signer: Any signer input accepted by ``detect_signer`` (private key
                signer, eth_account account, wallet, adapter, callable, ...)
            network: Network name, chain id or a ``Network`` instance
            signer_address: Explicit signer address (bech32 or EVM hex)
            rest_url: Overrides the network's REST endpoint
            policy: Retry policy for queries
            broadcast_policy: Enables retries of the broadcast request
            default_gas_limit: Gas limit for transactions that do not set one
            default_memo: Memo for transactions that do not set one
            chain_id_cache: Chain id cache; the process-wide cache when omitted
            http: Shared HTTP client; left open by ``close``
            logger: Optional logger instance

        Raises:
            ValueError: If the REST URL is plain http on a non-local host
            ConfigurationError: If the signer cannot be used
            ValidationError: If no valid signer address can be resolved
        """
        if isinstance(network, Network):
            self.network = network
        else:
            self.network = NetworkConfig.get_network_config(network)
        if rest_url:
            self.network = self.network.model_copy(update={"rest_url": validate_url("rest_url", rest_url)})
        else:
            validate_url("rest_url", self.network.rest_url)

        self.logger = logger or logging.getLogger(__name__)
        self._owns_http = http is None
        self.http = http or HttpClient(policy)
        self.signer: AultSigner = detect_signer(signer)
        self.address = resolve_signer_address(self.signer, signer_address)
        self.broadcast_policy = broadcast_policy
        self.default_gas_limit = default_gas_limit if default_gas_limit is not None else GasConstants.EIP712_GAS_LIMIT
        self.default_memo = default_memo
        self.chain_id_cache = chain_id_cache

        context = RestContext(self.network.rest_url, http=self.http, policy=policy)
        self.license = LicenseApi(context)
        self.miner = MinerApi(context)
        self.exchange = ExchangeApi(context)
        self.staking = StakingApi(context)

    def execute(
        self,
        msgs: Sequence[Mapping[str, Any]],
        gas_limit: Optional[GasLike] = None,
        memo: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None,
        fee_amount: Optional[GasLike] = None,
    ) -> TxResult:
        """
        Sign and broadcast arbitrary messages with the client's signer.

        The transaction methods below forward ``gas_limit``, ``fee_amount``,
        ``memo`` and ``cancel_event`` keyword arguments here.

        Returns:
            TxResult; ``success`` is False when the chain rejected the transaction
        """
        result = sign_and_broadcast_eip712(
            self.network,
            self.signer,
            msgs,
            signer_address=self.address,
            gas_limit=gas_limit if gas_limit is not None else self.default_gas_limit,
            fee_amount=fee_amount,
            memo=memo if memo is not None else self.default_memo,
            http=self.http,
            chain_id_cache=self.chain_id_cache,
            broadcast_policy=self.broadcast_policy,
            cancel_event=cancel_event,
        )
        tx_result = TxResult.from_broadcast(result)
        if not tx_result.success:
            self.logger.warning(f"Transaction {tx_result.tx_hash} failed with code {tx_result.code}")
        return tx_result

    def _batch_gas(self, per_item: int, count: int, gas_limit: Optional[GasLike]) -> GasLike:
        if gas_limit is not None:
            return gas_limit
        return max(int(self.default_gas_limit), per_item * count)

    # License transactions

    def mint_license(self, to: str, uri: str, reason: str = "", **tx) -> TxResult:
        """
        Mint a new license.

        Args:
            to: Recipient address (bech32 or EVM hex)
            uri: Token URI for the license metadata
            reason: Reason recorded with the mint
        """
        return self.execute([msg.license.mint_license(self.address, normalize_address(to), uri, reason)], **tx)

    def batch_mint_license(self, recipients: Sequence[Mapping[str, str]], reason: str = "",
                           gas_limit: Optional[GasLike] = None, **tx) -> TxResult:
        """Mint one license per ``{"to": ..., "uri": ...}`` recipient in a single transaction."""
        message = msg.license.batch_mint_license(
            self.address,
            to=[normalize_address(r["to"]) for r in recipients],
            uri=[r["uri"] for r in recipients],
            reason=reason,
        )
        gas = self._batch_gas(GasConstants.PER_LICENSE, len(recipients), gas_limit)
        return self.execute([message], gas_limit=gas, **tx)

    def transfer_license(self, license_id: IntLike, to: str, reason: str = "", **tx) -> TxResult:
        message = msg.license.transfer_license(self.address, normalize_address(to), license_id, reason)
        return self.execute([message], **tx)

    def burn_license(self, license_id: IntLike, reason: str = "", **tx) -> TxResult:
        return self.execute([msg.license.burn_license(self.address, license_id, reason)], **tx)

    def revoke_license(self, license_id: IntLike, reason: str = "", **tx) -> TxResult:
        return self.execute([msg.license.revoke_license(self.address, license_id, reason)], **tx)

    def set_token_uri(self, license_id: IntLike, uri: str, **tx) -> TxResult:
        return self.execute([msg.license.set_token_uri(self.address, license_id, uri)], **tx)

    def approve_member(self, member: str, **tx) -> TxResult:
        return self.execute([msg.license.approve_member(self.address, normalize_address(member))], **tx)

    def revoke_member(self, member: str, **tx) -> TxResult:
        return self.execute([msg.license.revoke_member(self.address, normalize_address(member))], **tx)

    def batch_approve_member(self, members: Sequence[str], gas_limit: Optional[GasLike] = None, **tx) -> TxResult:
        message = msg.license.batch_approve_member(self.address, normalize_addresses(members))
        gas = self._batch_gas(GasConstants.PER_KYC_MEMBER, len(members), gas_limit)
        return self.execute([message], gas_limit=gas, **tx)

    def batch_revoke_member(self, members: Sequence[str], gas_limit: Optional[GasLike] = None, **tx) -> TxResult:
        message = msg.license.batch_revoke_member(self.address, normalize_addresses(members))
        gas = self._batch_gas(GasConstants.PER_KYC_MEMBER, len(members), gas_limit)
        return self.execute([message], gas_limit=gas, **tx)

    def set_kyc_approvers(self, add: Sequence[str] = (), remove: Sequence[str] = (), **tx) -> TxResult:
        message = msg.license.set_kyc_approvers(self.address, normalize_addresses(add), normalize_addresses(remove))
        return self.execute([message], **tx)

    def set_minters(self, add: Sequence[str] = (), remove: Sequence[str] = (), **tx) -> TxResult:
        message = msg.license.set_minters(self.address, normalize_addresses(add), normalize_addresses(remove))
        return self.execute([message], **tx)

    # Miner transactions

    def delegate_mining(self, license_ids: Sequence[IntLike], operator: str, **tx) -> TxResult:
        message = msg.miner.delegate_mining(self.address, license_ids, normalize_address(operator))
        return self.execute([message], **tx)

    def cancel_mining_delegation(self, license_ids: Sequence[IntLike], **tx) -> TxResult:
        return self.execute([msg.miner.cancel_mining_delegation(self.address, license_ids)], **tx)

    def redelegate_mining(self, license_ids: Sequence[IntLike], new_operator: str, **tx) -> TxResult:
        message = msg.miner.redelegate_mining(self.address, license_ids, normalize_address(new_operator))
        return self.execute([message], **tx)

    def set_owner_vrf_key(self, vrf_pubkey: Union[bytes, str], possession_proof: Union[bytes, str],
                          nonce: IntLike, **tx) -> TxResult:
        message = msg.miner.set_owner_vrf_key(self.address, vrf_pubkey, possession_proof, nonce)
        return self.execute([message], **tx)

    def submit_work(self, license_id: IntLike, epoch: IntLike, y: Union[bytes, str], proof: Union[bytes, str],
                    nonce: Union[bytes, str] = b"", **tx) -> TxResult:
        message = msg.miner.submit_work(self.address, license_id, epoch, y, proof, nonce)
        return self.execute([message], **tx)

    def batch_submit_work(self, submissions: Sequence[Mapping[str, Any]], **tx) -> TxResult:
        """
        Submit work for several licenses at once.

        Each submission carries ``license_id``, ``epoch``, ``y``, ``proof`` and
        optionally ``nonce``.
        """
        entries: List[Dict[str, Any]] = [
            msg.miner.work_submission(s["license_id"], s["epoch"], s["y"], s["proof"], s.get("nonce", b""))
            for s in submissions
        ]
        return self.execute([msg.miner.batch_submit_work(self.address, entries)], **tx)

    def register_operator(self, commission_rate: IntLike, commission_recipient: Optional[str] = None,
                          **tx) -> TxResult:
        recipient = normalize_address(commission_recipient or self.address)
        return self.execute([msg.miner.register_operator(self.address, commission_rate, recipient)], **tx)

    def unregister_operator(self, **tx) -> TxResult:
        return self.execute([msg.miner.unregister_operator(self.address)], **tx)

    def update_operator_info(self, new_commission_rate: IntLike, new_commission_recipient: Optional[str] = None,
                             **tx) -> TxResult:
        recipient = normalize_address(new_commission_recipient or self.address)
        return self.execute([msg.miner.update_operator_info(self.address, new_commission_rate, recipient)], **tx)

    # Exchange transactions

    def place_limit_order(self, market_id: IntLike, is_buy: bool, price: str, quantity: str,
                          lifespan: Any, **tx) -> TxResult:
        """
        Place a limit order.

        ``lifespan`` is a ``timedelta``, an integer number of nanoseconds, or a
        ``{"seconds", "nanos"}`` mapping.
        """
        message = msg.exchange.place_limit_order(self.address, market_id, is_buy, price, quantity, lifespan)
        return self.execute([message], **tx)

    def place_market_order(self, market_id: IntLike, is_buy: bool, quantity: str, **tx) -> TxResult:
        return self.execute([msg.exchange.place_market_order(self.address, market_id, is_buy, quantity)], **tx)

    def cancel_order(self, order_id: Union[bytes, str], **tx) -> TxResult:
        return self.execute([msg.exchange.cancel_order(self.address, order_id)], **tx)

    def cancel_all_orders(self, market_id: IntLike, **tx) -> TxResult:
        return self.execute([msg.exchange.cancel_all_orders(self.address, market_id)], **tx)

    def create_market(self, base_denom: str, quote_denom: str, **tx) -> TxResult:
        return self.execute([msg.exchange.create_market(self.address, base_denom, quote_denom)], **tx)

    # Staking transactions

    def delegate(self, validator_address: str, amount: Mapping[str, Any], **tx) -> TxResult:
        message = msg.staking.delegate(self.address, normalize_validator_address(validator_address), amount)
        return self.execute([message], **tx)

    def undelegate(self, validator_address: str, amount: Mapping[str, Any], **tx) -> TxResult:
        message = msg.staking.undelegate(self.address, normalize_validator_address(validator_address), amount)
        return self.execute([message], **tx)

    def redelegate(self, validator_src_address: str, validator_dst_address: str, amount: Mapping[str, Any],
                   **tx) -> TxResult:
        message = msg.staking.begin_redelegate(
            self.address,
            normalize_validator_address(validator_src_address),
            normalize_validator_address(validator_dst_address),
            amount,
        )
        return self.execute([message], **tx)

    def withdraw_rewards(self, validator_addresses: Sequence[str], **tx) -> TxResult:
        """Withdraw delegation rewards from each validator, one message per validator."""
        if not validator_addresses:
            raise ValidationError("validatorAddresses must include at least one validator address.")
        messages = [
            msg.distribution.withdraw_delegator_reward(self.address, normalize_validator_address(v))
            for v in validator_addresses
        ]
        return self.execute(messages, **tx)

    # Parallel license queries

    def get_all_license_ids(self, owner: str) -> List[str]:
        """
        Ids of every license held by ``owner``, looked up index by index.

        Indices whose lookup fails are skipped.
        """
        owner = normalize_address(owner)
        total = int(self.license.get_balance(owner).get("balance") or 0)

        def token_id(index: int) -> Optional[str]:
            try:
                return self.license.get_token_of_owner_by_index(owner, index).get("id")
            except AultError as e:
                self.logger.debug(f"Skipping token index {index} of {owner}: {e}")
                return None

        return [i for i in map_in_batches(token_id, range(total)) if i is not None]

    def get_license_details_parallel(self, license_ids: Sequence[IntLike]) -> List[Optional[Dict[str, Any]]]:
        """License records in the order of ``license_ids``; None where the lookup failed."""
        def details(license_id: IntLike) -> Optional[Dict[str, Any]]:
            try:
                return self.license.get_license(license_id).get("license")
            except AultError as e:
                self.logger.debug(f"License {license_id} lookup failed: {e}")
                return None

        return map_in_batches(details, license_ids)

    def get_license_delegations_parallel(self, license_ids: Sequence[IntLike]) -> List[Dict[str, Any]]:
        """
        Mining delegation status per license.

        Each entry is ``{"license_id", "is_delegated", "operator"}``; a failed
        lookup reports the license as not delegated.
        """
        def delegation(license_id: IntLike) -> Dict[str, Any]:
            try:
                result = self.miner.get_license_delegation(license_id)
            except AultError as e:
                self.logger.debug(f"Delegation lookup for license {license_id} failed: {e}")
                return {"license_id": license_id, "is_delegated": False, "operator": None}
            return {
                "license_id": license_id,
                "is_delegated": result["is_delegated"],
                "operator": (result["delegation"] or {}).get("operator"),
            }

        return map_in_batches(delegation, license_ids)

    def analyze_licenses(self, owner: str) -> Dict[str, Any]:
        """
        Summarize the licenses of ``owner``.

        Returns:
            Dict with ``total``, ``active`` and ``delegated`` counts, the
            ``licenses`` that could be read, and ``delegations`` as
            ``{"license_id", "operator"}`` pairs
        """
        license_ids = self.get_all_license_ids(owner)
        if not license_ids:
            return {"total": 0, "active": 0, "delegated": 0, "licenses": [], "delegations": []}

        with ThreadPoolExecutor(max_workers=2) as executor:
            details = executor.submit(self.get_license_details_parallel, license_ids)
            statuses = executor.submit(self.get_license_delegations_parallel, license_ids)
            licenses = [lic for lic in details.result() if lic is not None]
            delegations = [
                {"license_id": s["license_id"], "operator": s["operator"]}
                for s in statuses.result()
                if s["is_delegated"] and s["operator"]
            ]

        return {
            "total": len(license_ids),
            "active": sum(1 for lic in licenses if lic.get("status") == LICENSE_STATUS_ACTIVE),
            "delegated": len(delegations),
            "licenses": licenses,
            "delegations": delegations,
        }

    def close(self) -> None:
        """Close the HTTP client if this client created it."""
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> "AultClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
