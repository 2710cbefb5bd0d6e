"""
Pytest fixtures for the Ault SDK tests.
"""
import time

import pytest
from eth_account import Account

from ault_sdk.address import bytes_to_bech32, evm_to_ault
from ault_sdk.core._rate_limited_log import reset_rate_limited_log
from ault_sdk.eip712.broadcast import DEFAULT_CHAIN_ID_CACHE
from ault_sdk.eip712.signers import PrivateKeySigner
from ault_sdk.models import Network

# Constants for testing
TEST_PRIV_KEY = "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"
TEST_REST_URL = "https://rest.example.com"
TEST_CHAIN_ID = "ault_10904-1"
TEST_EVM_CHAIN_ID = 10904
OTHER_ADDRESS = "0x1234567890123456789012345678901234567890"


# Make time.sleep instantaneous so retries don't slow the suite down
@pytest.fixture(autouse=True)
def _fast_sleep(monkeypatch):
    monkeypatch.setattr(time, "sleep", lambda *_a, **_kw: None)


# Process-wide caches must not leak between tests
@pytest.fixture(autouse=True)
def _reset_caches():
    DEFAULT_CHAIN_ID_CACHE.invalidate()
    reset_rate_limited_log()
    yield
    DEFAULT_CHAIN_ID_CACHE.invalidate()
    reset_rate_limited_log()


@pytest.fixture
def test_account():
    """Deterministic eth_account account"""
    return Account.from_key(TEST_PRIV_KEY)


@pytest.fixture
def test_signer():
    return PrivateKeySigner(TEST_PRIV_KEY)


@pytest.fixture
def test_address(test_account):
    """bech32 address of the test key"""
    return evm_to_ault(test_account.address)


@pytest.fixture
def test_valoper():
    """Validator operator address with 20 arbitrary bytes"""
    return bytes_to_bech32(bytes(range(1, 21)), "aultvaloper")


@pytest.fixture
def test_network():
    return Network(
        name="test",
        chain_id=TEST_CHAIN_ID,
        evm_chain_id=TEST_EVM_CHAIN_ID,
        rest_url=TEST_REST_URL,
        rpc_url="https://rpc.example.com",
        evm_rpc_url="https://evm.example.com",
    )


@pytest.fixture
def mock_chain(requests_mock, test_address):
    """
    Mock the node endpoints used by a broadcast: node info, account and txs.

    The broadcast route echoes a fixed hash; inspect ``mock_chain["txs"]`` for
    the submitted payload.
    """
    node_info = requests_mock.get(
        f"{TEST_REST_URL}/cosmos/base/tendermint/v1beta1/node_info",
        json={"default_node_info": {"network": TEST_CHAIN_ID}},
    )
    account = requests_mock.get(
        f"{TEST_REST_URL}/cosmos/auth/v1beta1/accounts/{test_address}",
        json={
            "account": {
                "@type": "/cosmos.auth.v1beta1.BaseAccount",
                "address": test_address,
                "pub_key": None,
                "account_number": "7",
                "sequence": "3",
            }
        },
    )
    txs = requests_mock.post(
        f"{TEST_REST_URL}/cosmos/tx/v1beta1/txs",
        json={"tx_response": {"txhash": "ABCDEF", "code": 0, "raw_log": ""}},
    )
    return {"node_info": node_info, "account": account, "txs": txs}
