"""
Tests for EIP-712 hashing and signature recovery.
"""
import copy

import pytest
from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_utils import keccak

from ault_sdk.eip712.builder import build_eip712_typed_data
from ault_sdk.eip712.hashing import encode_type, hash_typed_data
from ault_sdk.eip712.signers import PrivateKeySigner, recover_compressed_pubkey, recover_signer_address
from ault_sdk.exceptions import ValidationError
from ault_sdk.messages import coin, msg
from ault_sdk.models import TxContext

from tests.conftest import TEST_PRIV_KEY

ETHER_MAIL = {
    "types": {
        "EIP712Domain": [
            {"name": "name", "type": "string"},
            {"name": "version", "type": "string"},
            {"name": "chainId", "type": "uint256"},
            {"name": "verifyingContract", "type": "address"},
        ],
        "Person": [
            {"name": "name", "type": "string"},
            {"name": "wallet", "type": "address"},
        ],
        "Mail": [
            {"name": "from", "type": "Person"},
            {"name": "to", "type": "Person"},
            {"name": "contents", "type": "string"},
        ],
    },
    "primaryType": "Mail",
    "domain": {
        "name": "Ether Mail",
        "version": "1",
        "chainId": 1,
        "verifyingContract": "0xCcCCccccCCCCcCCCCCCcCcCccCcCCCcCcccccccC",
    },
    "message": {
        "from": {"name": "Cow", "wallet": "0xCD2a3d9F938E13CD947Ec05AbC7FE734Df8DD826"},
        "to": {"name": "Bob", "wallet": "0xbBbBBBBbbBBBbbbBbbBbbbbBBbBbbbbBbBbbBBbB"},
        "contents": "Hello, Bob!",
    },
}


@pytest.fixture
def cosmos_typed_data():
    context = TxContext(chain_id="ault_10904-1", account_number=7, sequence=3, memo="")
    return build_eip712_typed_data(context, [
        msg.license.mint_license("ault1minter", "ault1to", "ipfs://x"),
        msg.staking.delegate("ault1d", "aultvaloper1v", coin("aault", 1000)),
    ])


def test_encode_type_orders_dependencies():
    assert encode_type("Mail", ETHER_MAIL["types"]) == (
        "Mail(Person from,Person to,string contents)Person(string name,address wallet)"
    )


def test_ether_mail_digest():
    digest = hash_typed_data(ETHER_MAIL)
    assert "0x" + digest.hex() == "0xbe609aee343fb3c4b28e1df9e632fca64fcfaede20f02e86244efddf30957bd2"


def test_digest_matches_eth_account():
    signable = encode_typed_data(full_message=copy.deepcopy(ETHER_MAIL))
    expected = keccak(b"\x19" + signable.version + signable.header + signable.body)
    assert hash_typed_data(ETHER_MAIL) == expected


def test_signature_matches_eth_account():
    signed = Account.sign_typed_data(TEST_PRIV_KEY, full_message=copy.deepcopy(ETHER_MAIL))
    ours = PrivateKeySigner(TEST_PRIV_KEY).sign_typed_data(ETHER_MAIL)
    assert ours == "0x" + bytes(signed.signature).hex()


def test_cosmos_domain_hashes_string_fields(cosmos_typed_data):
    digest = hash_typed_data(cosmos_typed_data)
    assert len(digest) == 32
    assert "EIP712Domain(string name,string version,uint256 chainId,string verifyingContract,string salt)" == (
        encode_type("EIP712Domain", cosmos_typed_data["types"])
    )


def test_digest_depends_on_sequence(cosmos_typed_data):
    changed = copy.deepcopy(cosmos_typed_data)
    changed["message"]["sequence"] = "4"
    assert hash_typed_data(changed) != hash_typed_data(cosmos_typed_data)


def test_recover_signer_address(cosmos_typed_data, test_address, test_account):
    signature = PrivateKeySigner(TEST_PRIV_KEY).sign_typed_data(cosmos_typed_data)
    assert recover_signer_address(cosmos_typed_data, signature) == test_address

    pubkey = recover_compressed_pubkey(cosmos_typed_data, signature)
    assert len(pubkey) == 33
    assert pubkey[0] in (2, 3)


def test_recover_accepts_zero_one_recovery_id(cosmos_typed_data, test_address):
    signature = PrivateKeySigner(TEST_PRIV_KEY).sign_typed_data(cosmos_typed_data)
    raw = bytearray(bytes.fromhex(signature[2:]))
    raw[64] -= 27
    assert recover_signer_address(cosmos_typed_data, bytes(raw)) == test_address


def test_recover_rejects_bad_recovery_id(cosmos_typed_data):
    signature = "0x" + "11" * 64 + "05"
    with pytest.raises(ValidationError, match="recovery id"):
        recover_signer_address(cosmos_typed_data, signature)


def test_missing_domain_type():
    typed_data = copy.deepcopy(ETHER_MAIL)
    del typed_data["types"]["EIP712Domain"]
    with pytest.raises(ValidationError, match="EIP712Domain"):
        hash_typed_data(typed_data)


def test_unsupported_atomic_type():
    typed_data = copy.deepcopy(ETHER_MAIL)
    typed_data["types"]["Mail"][2]["type"] = "float"
    with pytest.raises(ValidationError, match="Unsupported EIP-712 type: float"):
        hash_typed_data(typed_data)
