"""
Tests for the high-level AultClient.
"""
import re
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
from unittest.mock import patch

import pytest

from ault_sdk import AultClient
from ault_sdk.address import evm_to_ault
from ault_sdk.client import map_in_batches
from ault_sdk.constants import GasConstants
from ault_sdk.core.http import HttpClient
from ault_sdk.exceptions import UnsupportedLegacyAminoError, ValidationError
from ault_sdk.models import BroadcastResult
from ault_sdk.rest import LicenseApi
from tests.conftest import OTHER_ADDRESS, TEST_REST_URL


@pytest.fixture
def client(test_signer, test_network):
    return AultClient(test_signer, network=test_network)


@pytest.fixture
def broadcast():
    with patch("ault_sdk.client.sign_and_broadcast_eip712") as mock_broadcast:
        mock_broadcast.return_value = BroadcastResult(tx_hash="AA", code=0)
        yield mock_broadcast


def sent_messages(mock_broadcast):
    return mock_broadcast.call_args[0][2]


class TestInit:
    def test_address_from_signer(self, client, test_address):
        assert client.address == test_address
        assert isinstance(client.license, LicenseApi)

    def test_explicit_signer_address(self, test_network):
        client = AultClient(lambda td: "0x", network=test_network, signer_address=OTHER_ADDRESS)
        assert client.address == evm_to_ault(OTHER_ADDRESS)

    def test_named_network(self, test_signer):
        client = AultClient(test_signer, network="testnet")
        assert client.network.chain_id == "ault_10904-1"
        assert client.network.evm_chain_id == 10904

    def test_rest_url_override(self, test_signer, test_network):
        client = AultClient(test_signer, network=test_network, rest_url="https://other.example.com/")
        assert client.network.rest_url == "https://other.example.com"
        assert client.license.context.rest_url == "https://other.example.com"

    def test_insecure_rest_url_rejected(self, test_signer, test_network):
        with pytest.raises(ValueError, match="must use https://"):
            AultClient(test_signer, network=test_network, rest_url="http://node.example.com")

    def test_local_http_allowed(self, test_signer):
        client = AultClient(test_signer, network="localnet")
        assert client.network.rest_url == "http://localhost:1317"

    def test_signer_without_address(self, test_network):
        with pytest.raises(ValidationError, match="signer_address is required"):
            AultClient(lambda td: "0x", network=test_network)


class TestTransactions:
    def test_mint_license(self, client, broadcast, test_address):
        result = client.mint_license(OTHER_ADDRESS, "ipfs://meta", memo="m")
        assert result.success is True
        assert sent_messages(broadcast) == [{
            "type_url": "/ault.license.v1.MsgMintLicense",
            "value": {"minter": test_address, "to": evm_to_ault(OTHER_ADDRESS), "uri": "ipfs://meta", "reason": ""},
        }]
        kwargs = broadcast.call_args[1]
        assert kwargs["memo"] == "m"
        assert kwargs["gas_limit"] == GasConstants.EIP712_GAS_LIMIT
        assert kwargs["signer_address"] == test_address

    def test_batch_mint_gas_scales(self, client, broadcast):
        recipients = [{"to": OTHER_ADDRESS, "uri": f"ipfs://{i}"} for i in range(3)]
        client.batch_mint_license(recipients)
        value = sent_messages(broadcast)[0]["value"]
        assert value["uri"] == ["ipfs://0", "ipfs://1", "ipfs://2"]
        assert broadcast.call_args[1]["gas_limit"] == 3 * GasConstants.PER_LICENSE

    def test_batch_gas_never_below_default(self, client, broadcast):
        client.batch_approve_member([OTHER_ADDRESS])
        assert broadcast.call_args[1]["gas_limit"] == int(GasConstants.EIP712_GAS_LIMIT)

    def test_batch_gas_override(self, client, broadcast):
        client.batch_revoke_member([OTHER_ADDRESS] * 5, gas_limit=123)
        assert broadcast.call_args[1]["gas_limit"] == 123

    def test_transfer_license(self, client, broadcast, test_address):
        client.transfer_license(9, OTHER_ADDRESS)
        value = sent_messages(broadcast)[0]["value"]
        assert value["from"] == test_address
        assert value["license_id"] == 9

    def test_register_operator_defaults_recipient(self, client, broadcast, test_address):
        client.register_operator(5)
        assert sent_messages(broadcast)[0]["value"]["commission_recipient"] == test_address

    def test_batch_submit_work_default_nonce(self, client, broadcast):
        client.batch_submit_work([{"license_id": 1, "epoch": 2, "y": b"\x01", "proof": b"\x02"}])
        submission = sent_messages(broadcast)[0]["value"]["submissions"][0]
        assert submission["nonce"] == b""

    def test_place_limit_order(self, client, broadcast):
        client.place_limit_order(1, True, "1.5", "10", timedelta(minutes=5))
        value = sent_messages(broadcast)[0]["value"]
        assert value["lifespan"] == timedelta(minutes=5)
        assert value["is_buy"] is True

    def test_delegate_requires_validator_address(self, client, broadcast, test_address):
        with pytest.raises(ValidationError, match="Invalid validator address format"):
            client.delegate(test_address, {"denom": "aault", "amount": "1"})
        assert not broadcast.called

    def test_redelegate(self, client, broadcast, test_valoper):
        client.redelegate(test_valoper, test_valoper, {"denom": "aault", "amount": "1"})
        assert sent_messages(broadcast)[0]["type_url"] == "/cosmos.staking.v1beta1.MsgBeginRedelegate"

    def test_withdraw_rewards_one_message_per_validator(self, client, broadcast, test_valoper):
        client.withdraw_rewards([test_valoper, test_valoper])
        assert len(sent_messages(broadcast)) == 2

    def test_withdraw_rewards_requires_validators(self, client, broadcast):
        with pytest.raises(ValidationError, match="at least one validator address"):
            client.withdraw_rewards([])

    def test_failed_transaction(self, client, broadcast, caplog):
        broadcast.return_value = BroadcastResult(tx_hash="BB", code=11, raw_log="out of gas")
        result = client.burn_license(1)
        assert result.success is False
        assert result.code == 11
        assert "failed with code 11" in caplog.text

    def test_fee_amount_is_forwarded(self, client, broadcast):
        client.burn_license(4, fee_amount="9000")
        kwargs = broadcast.call_args[1]
        assert kwargs["fee_amount"] == "9000"
        assert kwargs["gas_limit"] == GasConstants.EIP712_GAS_LIMIT

    def test_fee_amount_defaults_to_none(self, client, broadcast):
        client.burn_license(4)
        assert broadcast.call_args[1]["fee_amount"] is None


class TestEndToEnd:
    def test_delegate(self, client, mock_chain, test_valoper):
        result = client.delegate(test_valoper, {"denom": "aault", "amount": "1000"})
        assert result.tx_hash == "ABCDEF"
        assert result.success is True
        assert mock_chain["txs"].call_count == 1

    def test_cancel_order_not_signable(self, client, mock_chain):
        with pytest.raises(UnsupportedLegacyAminoError):
            client.cancel_order(b"\x01\x02")
        assert mock_chain["txs"].call_count == 0

    def test_queries_share_the_client(self, client, requests_mock):
        requests_mock.get(f"{TEST_REST_URL}/ault/license/v1/params", json={"params": {}})
        assert client.license.get_params() == {"params": {}}


class TestLifecycle:
    @pytest.fixture
    def closed(self, monkeypatch):
        closed = []
        monkeypatch.setattr(HttpClient, "close", lambda self: closed.append(self))
        return closed

    def test_context_manager_closes_owned_http(self, test_signer, test_network, closed):
        with AultClient(test_signer, network=test_network) as client:
            assert isinstance(client, AultClient)
        assert closed == [client.http]

    def test_closed_when_the_block_raises(self, test_signer, test_network, closed):
        with pytest.raises(RuntimeError):
            with AultClient(test_signer, network=test_network):
                raise RuntimeError("boom")
        assert len(closed) == 1

    def test_shared_http_left_open(self, test_signer, test_network, closed):
        shared = HttpClient()
        with AultClient(test_signer, network=test_network, http=shared) as client:
            assert client.http is shared
        assert closed == []


class TestMapInBatches:
    def test_keeps_order(self):
        assert map_in_batches(lambda x: x * 2, range(7), batch_size=3) == [0, 2, 4, 6, 8, 10, 12]

    def test_empty(self):
        assert map_in_batches(lambda x: x, []) == []

    def test_batches_run_one_after_another(self):
        events = []
        lock = threading.Lock()

        def record(item):
            with lock:
                events.append(("start", item))
            with lock:
                events.append(("end", item))
            return item

        map_in_batches(record, range(5), batch_size=2)
        batches = [{0, 1}, {2, 3}, {4}]
        for earlier, later in zip(batches, batches[1:]):
            last_end = max(events.index(("end", i)) for i in earlier)
            first_start = min(events.index(("start", i)) for i in later)
            assert last_end < first_start


LICENSE_URL = f"{TEST_REST_URL}/ault/license/v1"
MINER_URL = f"{TEST_REST_URL}/cosmos/miner/v1"


class TestParallelQueries:
    @pytest.fixture
    def owner(self):
        return evm_to_ault(OTHER_ADDRESS)

    def test_all_license_ids(self, client, requests_mock, owner):
        requests_mock.get(f"{LICENSE_URL}/balance/{owner}", json={"balance": "3"})
        requests_mock.get(f"{LICENSE_URL}/token/{owner}/0", json={"id": "10"})
        requests_mock.get(f"{LICENSE_URL}/token/{owner}/1", status_code=404)
        requests_mock.get(f"{LICENSE_URL}/token/{owner}/2", json={"id": "12"})

        assert client.get_all_license_ids(OTHER_ADDRESS) == ["10", "12"]
        assert requests_mock.call_count == 4

    def test_zero_balance(self, client, requests_mock, owner):
        requests_mock.get(f"{LICENSE_URL}/balance/{owner}", json={"balance": "0"})
        assert client.get_all_license_ids(owner) == []
        assert requests_mock.call_count == 1

    def test_more_ids_than_one_batch(self, client, requests_mock, owner, monkeypatch):
        requests_mock.get(f"{LICENSE_URL}/balance/{owner}", json={"balance": "120"})
        requests_mock.get(
            re.compile(rf"{re.escape(LICENSE_URL)}/token/{owner}/\d+$"),
            json=lambda request, context: {"id": request.url.rsplit("/", 1)[-1]},
        )
        batch_sizes = []
        real_map = ThreadPoolExecutor.map

        def recording_map(executor, fn, items, **kwargs):
            batch_sizes.append(len(items))
            return real_map(executor, fn, items, **kwargs)

        monkeypatch.setattr(ThreadPoolExecutor, "map", recording_map)
        assert client.get_all_license_ids(owner) == [str(i) for i in range(120)]
        assert batch_sizes == [50, 50, 20]

    def test_license_details(self, client, requests_mock):
        requests_mock.get(f"{LICENSE_URL}/license/1", json={"license": {"id": "1"}})
        requests_mock.get(f"{LICENSE_URL}/license/2", status_code=400)
        assert client.get_license_details_parallel(["1", "2"]) == [{"id": "1"}, None]

    def test_license_delegations(self, client, requests_mock):
        requests_mock.get(
            f"{MINER_URL}/license/1/delegation",
            json={"delegation": {"operator": "ault1op"}, "is_delegated": True},
        )
        requests_mock.get(f"{MINER_URL}/license/2/delegation", status_code=404)
        requests_mock.get(f"{MINER_URL}/license/3/delegation", status_code=400)
        assert client.get_license_delegations_parallel(["1", "2", "3"]) == [
            {"license_id": "1", "is_delegated": True, "operator": "ault1op"},
            {"license_id": "2", "is_delegated": False, "operator": None},
            {"license_id": "3", "is_delegated": False, "operator": None},
        ]

    def test_analyze_licenses(self, client, requests_mock, owner):
        requests_mock.get(f"{LICENSE_URL}/balance/{owner}", json={"balance": "3"})
        for index, license_id in enumerate(["1", "2", "3"]):
            requests_mock.get(f"{LICENSE_URL}/token/{owner}/{index}", json={"id": license_id})
        requests_mock.get(f"{LICENSE_URL}/license/1", json={"license": {"id": "1", "status": "LICENSE_STATUS_ACTIVE"}})
        requests_mock.get(f"{LICENSE_URL}/license/2", json={"license": {"id": "2", "status": "LICENSE_STATUS_REVOKED"}})
        requests_mock.get(f"{LICENSE_URL}/license/3", status_code=404)
        requests_mock.get(
            f"{MINER_URL}/license/1/delegation",
            json={"delegation": {"operator": "ault1op"}, "is_delegated": True},
        )
        requests_mock.get(f"{MINER_URL}/license/2/delegation", json={"delegation": None, "is_delegated": False})
        requests_mock.get(f"{MINER_URL}/license/3/delegation", status_code=404)

        assert client.analyze_licenses(OTHER_ADDRESS) == {
            "total": 3,
            "active": 1,
            "delegated": 1,
            "licenses": [
                {"id": "1", "status": "LICENSE_STATUS_ACTIVE"},
                {"id": "2", "status": "LICENSE_STATUS_REVOKED"},
            ],
            "delegations": [{"license_id": "1", "operator": "ault1op"}],
        }

    def test_analyze_without_licenses(self, client, requests_mock, owner):
        requests_mock.get(f"{LICENSE_URL}/balance/{owner}", json={"balance": "0"})
        assert client.analyze_licenses(owner) == {
            "total": 0, "active": 0, "delegated": 0, "licenses": [], "delegations": [],
        }
