"""
Sign-and-broadcast orchestrator for EIP-712 transactions.

One call runs a fixed sequence: resolve the signer and its address, check
message keys, resolve the chain id, read the account, build and sign the
typed data, resolve the public key, encode the messages, assemble ``TxRaw``
and broadcast it in sync mode.
"""
import logging
import threading
import time
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, NamedTuple, Optional, Sequence, Union

from cachetools import LRUCache

from ..address import bytes_to_bech32
from ..core.chain_id import parse_evm_chain_id
from ..core.encoding import assert_snake_case_keys, base64_to_bytes, bytes_to_base64, to_uint64
from ..constants import GasConstants
from ..core.http import HttpClient, RetryPolicy
from ..exceptions import ApiError, NetworkError, SignatureMismatchError, ValidationError
from ..models import AccountInfo, BroadcastResult, FeeConfig, Network, TxContext
from ..proto.schema import encode_message
from ..proto.tx import AuthInfo, Coin, Fee, SignerInfo, TxBody, TxRaw, strip_recovery_byte
from .builder import build_eip712_typed_data
from .signers import (
    detect_signer, normalize_signature, recover_public_key, resolve_signer_address,
)

logger = logging.getLogger(__name__)

BROADCAST_MODE_SYNC = "BROADCAST_MODE_SYNC"
NODE_INFO_PATH = "/cosmos/base/tendermint/v1beta1/node_info"
ACCOUNTS_PATH = "/cosmos/auth/v1beta1/accounts"
TXS_PATH = "/cosmos/tx/v1beta1/txs"


class ChainIdEntry(NamedTuple):
    chain_id: str
    resolved_at: float


class ChainIdCache:
    """
    Resolved chain ids keyed by REST URL.

    Entries never expire unless ``max_age`` (seconds) is set; ``invalidate``
    drops one URL or everything so a process can be pointed at another network.
    """

    def __init__(self, max_age: Optional[float] = None, maxsize: int = 32):
        self.max_age = max_age
        self._entries: LRUCache = LRUCache(maxsize=maxsize)
        self._lock = threading.RLock()

    def get(self, rest_url: str) -> Optional[ChainIdEntry]:
        with self._lock:
            entry = self._entries.get(rest_url)
            if entry is None:
                return None
            if self.max_age is not None and time.monotonic() - entry.resolved_at > self.max_age:
                del self._entries[rest_url]
                return None
            return entry

    def set(self, rest_url: str, chain_id: str) -> ChainIdEntry:
        entry = ChainIdEntry(chain_id=chain_id, resolved_at=time.monotonic())
        with self._lock:
            self._entries[rest_url] = entry
        return entry

    def invalidate(self, rest_url: Optional[str] = None) -> None:
        with self._lock:
            if rest_url is None:
                self._entries.clear()
            else:
                self._entries.pop(rest_url, None)


DEFAULT_CHAIN_ID_CACHE = ChainIdCache()


@contextmanager
def _http_client(http: Optional[HttpClient]) -> Iterator[HttpClient]:
    """Yield ``http``, or a fresh client that is closed on exit."""
    if http is not None:
        yield http
        return
    owned = HttpClient()
    try:
        yield owned
    finally:
        owned.close()


def query_chain_id(
    network: Network,
    http: Optional[HttpClient] = None,
    cache: Optional[ChainIdCache] = None,
    cancel_event: Optional[threading.Event] = None,
) -> str:
    """
    Return the chain id reported by the node, falling back to ``network.chain_id``.

    Successful lookups are cached per REST URL; the fallback is not.
    """
    cache = cache if cache is not None else DEFAULT_CHAIN_ID_CACHE
    entry = cache.get(network.rest_url)
    if entry is not None:
        return entry.chain_id

    url = f"{network.rest_url}{NODE_INFO_PATH}"
    try:
        with _http_client(http) as client:
            data = client.get_json(url, policy=RetryPolicy(retries=2, timeout=client.policy.timeout),
                                   cancel_event=cancel_event)
    except (NetworkError, ApiError) as e:
        logger.warning(f"Chain id lookup failed ({e}); using configured {network.chain_id}")
        return network.chain_id

    node_info = (data or {}).get("default_node_info") or (data or {}).get("node_info") or {}
    chain_id = node_info.get("network")
    if not chain_id:
        logger.warning(f"Node info at {url} has no network; using configured {network.chain_id}")
        return network.chain_id
    cache.set(network.rest_url, chain_id)
    return chain_id


def _base_account(account: Mapping[str, Any]) -> Mapping[str, Any]:
    nested = account.get("account") if isinstance(account.get("account"), Mapping) else {}
    vesting = account.get("base_vesting_account") or {}
    return (
        account.get("base_account")
        or account.get("baseAccount")
        or vesting.get("base_account")
        or nested.get("base_account")
        or account
    )


def query_account(
    network: Network,
    address: str,
    http: Optional[HttpClient] = None,
    cancel_event: Optional[threading.Event] = None,
) -> AccountInfo:
    """
    Read account number, sequence and public key; never cached.

    Handles plain ``BaseAccount`` responses as well as wrapped account types
    such as ``EthAccount`` or vesting accounts.
    """
    with _http_client(http) as client:
        data = client.get_json(f"{network.rest_url}{ACCOUNTS_PATH}/{address}", cancel_event=cancel_event)
    account = (data or {}).get("account") or {}
    base = _base_account(account)
    pub_key = base.get("pub_key") or base.get("pubKey") or {}
    return AccountInfo(
        account_number=int(base.get("account_number") or base.get("accountNumber") or 0),
        sequence=int(base.get("sequence") or 0),
        pubkey_base64=pub_key.get("key") if isinstance(pub_key, Mapping) else None,
    )


def broadcast_tx(
    network: Network,
    tx_bytes: bytes,
    http: Optional[HttpClient] = None,
    policy: Optional[RetryPolicy] = None,
    cancel_event: Optional[threading.Event] = None,
) -> BroadcastResult:
    """
    Submit signed ``TxRaw`` bytes in sync mode.

    A non-zero ``code`` is returned on the result, not raised.
    """
    payload = {"tx_bytes": bytes_to_base64(tx_bytes), "mode": BROADCAST_MODE_SYNC}
    with _http_client(http) as client:
        data = client.post_json(f"{network.rest_url}{TXS_PATH}", payload, policy=policy,
                                cancel_event=cancel_event)
    tx_response = (data or {}).get("tx_response")
    if not isinstance(tx_response, Mapping):
        raise ApiError(f"Broadcast response has no tx_response: {data}", url=f"{network.rest_url}{TXS_PATH}")
    return BroadcastResult(
        tx_hash=tx_response.get("txhash", ""),
        code=int(tx_response.get("code") or 0),
        raw_log=tx_response.get("raw_log") or "",
    )


def _type_url(msg: Mapping[str, Any]) -> str:
    return msg.get("type_url") or msg.get("typeUrl") or ""


def sign_and_broadcast_eip712(
    network: Network,
    signer: Any,
    msgs: Sequence[Mapping[str, Any]],
    signer_address: Optional[str] = None,
    gas_limit: Optional[Union[int, str]] = None,
    fee_amount: Optional[Union[int, str]] = None,
    memo: str = "",
    http: Optional[HttpClient] = None,
    chain_id_cache: Optional[ChainIdCache] = None,
    broadcast_policy: Optional[RetryPolicy] = None,
    cancel_event: Optional[threading.Event] = None,
) -> BroadcastResult:
    """
    Sign messages with EIP-712 and broadcast the resulting transaction.

    Args:
        network: Target network (REST URL, chain ids)
        signer: Any input accepted by ``detect_signer``
        msgs: Ordered messages ``{"type_url": ..., "value": {...}}`` with snake_case keys
        signer_address: Overrides the signer's own address (bech32 or EVM hex)
        gas_limit: Gas limit; defaults to ``GasConstants.EIP712_GAS_LIMIT``
        fee_amount: Fee in ``GasConstants.DENOM``; defaults to ``GasConstants.EIP712_FEE_AMOUNT``
        memo: Transaction memo
        http: HTTP client; a default client is created when omitted
        chain_id_cache: Chain id cache; the process-wide cache when omitted
        broadcast_policy: Enables retries of the broadcast POST
        cancel_event: Aborts pending requests when set

    Returns:
        BroadcastResult; a non-zero ``code`` means the chain rejected the transaction

    Raises:
        ConfigurationError: For unknown message types or unusable signers
        ValidationError: For malformed messages or a signature from the wrong key
        NetworkError: If a request fails after retries
        ApiError: If the REST API answers with an error status
    """
    if not msgs:
        raise ValidationError("At least one message is required")
    resolved_signer = detect_signer(signer)
    address = resolve_signer_address(resolved_signer, signer_address)

    for msg in msgs:
        assert_snake_case_keys(msg.get("value"), f"message value for {_type_url(msg)}")

    fee = FeeConfig(
        amount=fee_amount if fee_amount is not None else GasConstants.EIP712_FEE_AMOUNT,
        gas=gas_limit if gas_limit is not None else GasConstants.EIP712_GAS_LIMIT,
    )
    with _http_client(http) as client:
        return _sign_and_broadcast(
            network, resolved_signer, address, msgs, fee, memo, client,
            chain_id_cache, broadcast_policy, cancel_event,
        )


def _sign_and_broadcast(
    network: Network,
    resolved_signer: Any,
    address: str,
    msgs: Sequence[Mapping[str, Any]],
    fee: FeeConfig,
    memo: str,
    http: HttpClient,
    chain_id_cache: Optional[ChainIdCache],
    broadcast_policy: Optional[RetryPolicy],
    cancel_event: Optional[threading.Event],
) -> BroadcastResult:
    chain_id = query_chain_id(network, http=http, cache=chain_id_cache, cancel_event=cancel_event)
    account = query_account(network, address, http=http, cancel_event=cancel_event)

    context = TxContext(
        chain_id=chain_id,
        account_number=account.account_number,
        sequence=account.sequence,
        fee=fee,
        memo=memo,
    )
    evm_chain_id = parse_evm_chain_id(chain_id) or network.evm_chain_id
    typed_data = build_eip712_typed_data(context, msgs, evm_chain_id=evm_chain_id)
    logger.debug(f"Signing {len(msgs)} message(s) for {address} at sequence {account.sequence}")

    signature = normalize_signature(resolved_signer.sign_typed_data(typed_data))

    if account.pubkey_base64:
        pubkey = base64_to_bytes(account.pubkey_base64, "account pub_key")
    else:
        public_key = recover_public_key(typed_data, signature)
        recovered_address = bytes_to_bech32(public_key.to_canonical_address())
        if recovered_address != address:
            raise SignatureMismatchError(address, recovered_address)
        pubkey = public_key.to_compressed_bytes()

    encoded = [(_type_url(msg), encode_message(_type_url(msg), msg.get("value") or {})) for msg in msgs]
    body_bytes = TxBody(messages=encoded, memo=memo).to_bytes()
    auth_info_bytes = AuthInfo(
        signer_infos=[SignerInfo(public_key=pubkey, sequence=account.sequence)],
        fee=Fee(amount=[Coin(fee.denom, str(fee.amount))], gas_limit=to_uint64(fee.gas, "gas")),
    ).to_bytes()
    tx_raw = TxRaw(
        body_bytes=body_bytes,
        auth_info_bytes=auth_info_bytes,
        signatures=[strip_recovery_byte(bytes.fromhex(signature[2:]))],
    )

    result = broadcast_tx(network, tx_raw.to_bytes(), http=http, policy=broadcast_policy,
                          cancel_event=cancel_event)
    if result.code == 0:
        logger.info(f"Broadcast {result.tx_hash} accepted")
    else:
        logger.info(f"Broadcast {result.tx_hash} rejected with code {result.code}: {result.raw_log}")
    return result
