"""
Tests for address conversion.
"""
import pytest

from ault_sdk.address import (
    ault_to_evm, bech32_to_bytes, bytes_to_bech32, evm_to_ault, is_valid_ault_address, is_valid_evm_address,
    is_valid_validator_address, normalize_address, normalize_addresses, normalize_validator_address,
)
from ault_sdk.exceptions import ValidationError
from tests.conftest import OTHER_ADDRESS


def test_round_trip(test_account):
    ault = evm_to_ault(test_account.address)
    assert ault.startswith("ault1")
    assert is_valid_ault_address(ault)
    assert ault_to_evm(ault) == test_account.address


def test_same_bytes_in_both_forms():
    assert bech32_to_bytes(evm_to_ault(OTHER_ADDRESS)) == bytes.fromhex(OTHER_ADDRESS[2:])


def test_evm_lowercase_accepted():
    assert evm_to_ault(OTHER_ADDRESS.lower()) == evm_to_ault(OTHER_ADDRESS)


@pytest.mark.parametrize("value", ["0x123", "1234567890123456789012345678901234567890", "0xZZ" + "0" * 38, None])
def test_invalid_evm(value):
    assert not is_valid_evm_address(value)


def test_evm_to_ault_rejects_invalid():
    with pytest.raises(ValidationError, match="Invalid EVM address"):
        evm_to_ault("0x123")


def test_bad_checksum_rejected():
    good = evm_to_ault(OTHER_ADDRESS)
    bad = good[:-1] + ("q" if good[-1] != "q" else "p")
    assert not is_valid_ault_address(bad)
    with pytest.raises(ValidationError, match="Invalid bech32 address"):
        bech32_to_bytes(bad)


def test_prefixes_are_distinct(test_valoper):
    assert is_valid_validator_address(test_valoper)
    assert not is_valid_ault_address(test_valoper)
    assert not is_valid_validator_address(evm_to_ault(OTHER_ADDRESS))


def test_wrong_length_payload():
    short = bytes_to_bech32(b"\x01" * 10)
    assert not is_valid_ault_address(short)


def test_normalize_address():
    ault = evm_to_ault(OTHER_ADDRESS)
    assert normalize_address(ault) == ault
    assert normalize_address(OTHER_ADDRESS) == ault
    assert normalize_addresses([OTHER_ADDRESS, ault]) == [ault, ault]
    with pytest.raises(ValidationError, match="Invalid address format: nope"):
        normalize_address("nope")


def test_normalize_validator_address(test_valoper):
    assert normalize_validator_address(test_valoper) == test_valoper
    with pytest.raises(ValidationError, match="Invalid validator address format"):
        normalize_validator_address(evm_to_ault(OTHER_ADDRESS))
