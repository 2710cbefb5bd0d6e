"""
Tests for the EIP-712 sign-and-broadcast flow.
"""
import base64
import time

import pytest

from ault_sdk.address import evm_to_ault
from ault_sdk.core.http import HttpClient, RetryPolicy
from ault_sdk.eip712.broadcast import (
    ChainIdCache, ChainIdEntry, broadcast_tx, query_account, query_chain_id, sign_and_broadcast_eip712,
)
from ault_sdk.eip712.builder import build_eip712_typed_data
from ault_sdk.eip712.signers import CallableSigner, PrivateKeySigner
from ault_sdk.exceptions import ApiError, SignatureMismatchError, ValidationError
from ault_sdk.messages import msg
from ault_sdk.models import TxContext
from tests.conftest import OTHER_ADDRESS, TEST_CHAIN_ID, TEST_PRIV_KEY, TEST_REST_URL
from tests.test_helpers import decode_tx_raw, walk_fields

TXS_URL = f"{TEST_REST_URL}/cosmos/tx/v1beta1/txs"
NODE_INFO_URL = f"{TEST_REST_URL}/cosmos/base/tendermint/v1beta1/node_info"


@pytest.fixture
def mint(test_address):
    return msg.license.mint_license(test_address, test_address, "ipfs://x")


def test_successful_broadcast(test_network, test_signer, test_address, mock_chain, mint):
    result = sign_and_broadcast_eip712(test_network, test_signer, [mint], memo="hello")

    assert result.tx_hash == "ABCDEF"
    assert result.code == 0

    payload = mock_chain["txs"].last_request.json()
    assert payload["mode"] == "BROADCAST_MODE_SYNC"
    tx = decode_tx_raw(payload["tx_bytes"])

    body = walk_fields(tx["body"])
    any_fields = dict(walk_fields(body[0][1]))
    assert any_fields[1] == b"/ault.license.v1.MsgMintLicense"
    assert body[1] == (2, b"hello")

    auth_info = walk_fields(tx["auth_info"])
    signer_info = dict(walk_fields(auth_info[0][1]))
    assert signer_info[3] == 3
    fee = dict(walk_fields(auth_info[1][1]))
    assert fee[2] == 200000

    context = TxContext(chain_id=TEST_CHAIN_ID, account_number=7, sequence=3, memo="hello")
    expected = PrivateKeySigner(TEST_PRIV_KEY).sign_typed_data(build_eip712_typed_data(context, [mint]))
    assert tx["signatures"] == [bytes.fromhex(expected[2:])[:64]]


def test_recovered_pubkey_is_compressed(test_network, test_signer, test_account, mock_chain, mint):
    sign_and_broadcast_eip712(test_network, test_signer, [mint])
    tx = decode_tx_raw(mock_chain["txs"].last_request.json()["tx_bytes"])
    signer_info = dict(walk_fields(walk_fields(tx["auth_info"])[0][1]))
    pubkey_any = dict(walk_fields(signer_info[1]))
    assert pubkey_any[1] == b"/cosmos.evm.crypto.v1.ethsecp256k1.PubKey"
    key = dict(walk_fields(pubkey_any[2]))[1]
    assert len(key) == 33
    assert key[0] in (2, 3)


def test_uses_account_pubkey_when_present(test_network, test_signer, test_address, mock_chain, requests_mock, mint):
    key = b"\x02" + b"\x42" * 32
    requests_mock.get(
        f"{TEST_REST_URL}/cosmos/auth/v1beta1/accounts/{test_address}",
        json={"account": {
            "@type": "/cosmos.evm.types.v1.EthAccount",
            "base_account": {
                "address": test_address,
                "pub_key": {"@type": "/cosmos.evm.crypto.v1.ethsecp256k1.PubKey",
                            "key": base64.b64encode(key).decode()},
                "account_number": "1",
                "sequence": "0",
            },
        }},
    )
    sign_and_broadcast_eip712(test_network, test_signer, [mint])
    tx = decode_tx_raw(mock_chain["txs"].last_request.json()["tx_bytes"])
    signer_info = dict(walk_fields(walk_fields(tx["auth_info"])[0][1]))
    pubkey_any = dict(walk_fields(signer_info[1]))
    assert dict(walk_fields(pubkey_any[2]))[1] == key
    assert 3 not in signer_info


def test_signature_from_wrong_key(test_network, test_signer, mock_chain, requests_mock, mint):
    other = evm_to_ault(OTHER_ADDRESS)
    requests_mock.get(
        f"{TEST_REST_URL}/cosmos/auth/v1beta1/accounts/{other}",
        json={"account": {"account_number": "2", "sequence": "0"}},
    )
    with pytest.raises(SignatureMismatchError) as excinfo:
        sign_and_broadcast_eip712(test_network, test_signer, [mint], signer_address=OTHER_ADDRESS)
    assert excinfo.value.expected == other
    assert mock_chain["txs"].call_count == 0


def test_rejected_transaction_is_returned(test_network, test_signer, requests_mock, mock_chain, mint):
    requests_mock.post(TXS_URL, json={"tx_response": {"txhash": "FFFF", "code": 5, "raw_log": "insufficient funds"}})
    result = sign_and_broadcast_eip712(test_network, test_signer, [mint])
    assert result.code == 5
    assert result.raw_log == "insufficient funds"


def test_camel_case_keys_rejected_before_network(test_network, test_signer, requests_mock):
    bad = {"type_url": "/ault.miner.v1.MsgUnregisterOperator", "value": {"operatorAddress": "x"}}
    with pytest.raises(ValidationError, match='received "operatorAddress"'):
        sign_and_broadcast_eip712(test_network, test_signer, [bad])
    assert requests_mock.call_count == 0


def test_empty_messages(test_network, test_signer):
    with pytest.raises(ValidationError, match="At least one message is required"):
        sign_and_broadcast_eip712(test_network, test_signer, [])


def test_node_chain_id_drives_domain(test_network, test_address, requests_mock, mock_chain, mint):
    requests_mock.get(NODE_INFO_URL, json={"default_node_info": {"network": "ault_777-2"}})
    seen = []
    inner = PrivateKeySigner(TEST_PRIV_KEY)

    def sign(typed_data):
        seen.append(typed_data)
        return inner.sign_typed_data(typed_data)

    sign_and_broadcast_eip712(test_network, CallableSigner(sign), [mint], signer_address=test_address)
    assert seen[0]["domain"]["chainId"] == 777
    assert seen[0]["message"]["chain_id"] == "ault_777-2"


def test_custom_fee_and_gas(test_network, test_signer, mock_chain, mint):
    seen = []
    inner = PrivateKeySigner(TEST_PRIV_KEY)

    class Recording(PrivateKeySigner):
        def sign_typed_data(self, typed_data):
            seen.append(typed_data)
            return inner.sign_typed_data(typed_data)

    sign_and_broadcast_eip712(test_network, Recording(TEST_PRIV_KEY), [mint], gas_limit=500000, fee_amount="7")
    assert seen[0]["message"]["fee"] == {"amount": [{"denom": "aault", "amount": "7"}], "gas": "500000"}
    tx = decode_tx_raw(mock_chain["txs"].last_request.json()["tx_bytes"])
    fee = dict(walk_fields(walk_fields(tx["auth_info"])[1][1]))
    assert fee[2] == 500000


def test_broadcast_policy_retries_post(test_network, test_signer, requests_mock, mock_chain, mint):
    route = requests_mock.post(TXS_URL, [
        {"status_code": 503},
        {"json": {"tx_response": {"txhash": "AB", "code": 0}}},
    ])
    result = sign_and_broadcast_eip712(
        test_network, test_signer, [mint], broadcast_policy=RetryPolicy(retries=1, retry_delay=0.01),
    )
    assert result.tx_hash == "AB"
    assert route.call_count == 2


class TestChainIdLookup:
    def test_cached_per_rest_url(self, test_network, requests_mock):
        route = requests_mock.get(NODE_INFO_URL, json={"default_node_info": {"network": "ault_5-1"}})
        cache = ChainIdCache()
        assert query_chain_id(test_network, cache=cache) == "ault_5-1"
        assert query_chain_id(test_network, cache=cache) == "ault_5-1"
        assert route.call_count == 1

    def test_invalidate(self, test_network, requests_mock):
        route = requests_mock.get(NODE_INFO_URL, json={"node_info": {"network": "ault_5-1"}})
        cache = ChainIdCache()
        query_chain_id(test_network, cache=cache)
        cache.invalidate(test_network.rest_url)
        query_chain_id(test_network, cache=cache)
        assert route.call_count == 2

    def test_expired_entry_is_refetched(self, test_network, requests_mock):
        route = requests_mock.get(NODE_INFO_URL, json={"default_node_info": {"network": "ault_6-1"}})
        cache = ChainIdCache(max_age=10)
        cache._entries[test_network.rest_url] = ChainIdEntry("ault_5-1", time.monotonic() - 100)
        assert query_chain_id(test_network, cache=cache) == "ault_6-1"
        assert route.call_count == 1

    def test_failure_falls_back_without_caching(self, test_network, requests_mock):
        route = requests_mock.get(NODE_INFO_URL, status_code=500)
        cache = ChainIdCache()
        assert query_chain_id(test_network, cache=cache) == TEST_CHAIN_ID
        assert route.call_count == 3
        assert cache.get(test_network.rest_url) is None

    def test_missing_network_field_falls_back(self, test_network, requests_mock):
        requests_mock.get(NODE_INFO_URL, json={"default_node_info": {}})
        assert query_chain_id(test_network, cache=ChainIdCache()) == TEST_CHAIN_ID


class TestAccountLookup:
    def test_vesting_account_shape(self, test_network, requests_mock):
        address = evm_to_ault(OTHER_ADDRESS)
        requests_mock.get(
            f"{TEST_REST_URL}/cosmos/auth/v1beta1/accounts/{address}",
            json={"account": {
                "@type": "/cosmos.vesting.v1beta1.ContinuousVestingAccount",
                "base_vesting_account": {"base_account": {
                    "account_number": "11", "sequence": "4", "pub_key": None,
                }},
            }},
        )
        account = query_account(test_network, address)
        assert account.account_number == 11
        assert account.sequence == 4
        assert account.pubkey_base64 is None

    def test_missing_account_is_an_api_error(self, test_network, requests_mock):
        address = evm_to_ault(OTHER_ADDRESS)
        requests_mock.get(f"{TEST_REST_URL}/cosmos/auth/v1beta1/accounts/{address}", status_code=404)
        with pytest.raises(ApiError) as excinfo:
            query_account(test_network, address)
        assert excinfo.value.status == 404


def test_broadcast_without_tx_response(test_network, requests_mock):
    requests_mock.post(TXS_URL, json={"code": 3, "message": "bad"})
    with pytest.raises(ApiError, match="no tx_response"):
        broadcast_tx(test_network, b"\x01", http=HttpClient())


class TestOwnedHttpClient:
    @pytest.fixture
    def closed(self, monkeypatch):
        closed = []
        monkeypatch.setattr(HttpClient, "close", lambda self: closed.append(self))
        return closed

    def test_created_client_is_closed(self, test_network, test_signer, mock_chain, mint, closed):
        sign_and_broadcast_eip712(test_network, test_signer, [mint])
        assert len(closed) == 1

    def test_supplied_client_is_left_open(self, test_network, test_signer, mock_chain, mint, closed):
        sign_and_broadcast_eip712(test_network, test_signer, [mint], http=HttpClient())
        assert closed == []

    def test_closed_when_the_request_fails(self, test_network, requests_mock, closed):
        requests_mock.post(TXS_URL, json={"code": 3, "message": "bad"})
        with pytest.raises(ApiError, match="no tx_response"):
            broadcast_tx(test_network, b"\x01")
        assert len(closed) == 1

    def test_query_helpers_close_their_client(self, test_network, test_address, mock_chain, closed):
        query_chain_id(test_network, cache=ChainIdCache())
        query_account(test_network, test_address)
        assert len(closed) == 2
