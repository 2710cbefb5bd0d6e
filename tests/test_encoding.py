"""
Tests for value coercion helpers.
"""
from datetime import timedelta

import pytest

from ault_sdk.core.chain_id import parse_evm_chain_id
from ault_sdk.core.encoding import (
    MAX_UINT64, assert_snake_case_keys, base64_to_bytes, bytes_to_base64, duration_to_nanoseconds,
    split_nanoseconds, to_bytes, to_uint64,
)
from ault_sdk.exceptions import ValidationError


class TestUint64:
    @pytest.mark.parametrize("value,expected", [
        (0, 0),
        (42, 42),
        ("42", 42),
        (" 7 ", 7),
        (3.0, 3),
        (MAX_UINT64, MAX_UINT64),
        (str(MAX_UINT64), MAX_UINT64),
        ("+007", 7),
    ])
    def test_accepted(self, value, expected):
        assert to_uint64(value) == expected

    @pytest.mark.parametrize("value,message", [
        (True, "boolean"),
        (-1, "outside the uint64 range"),
        (MAX_UINT64 + 1, "outside the uint64 range"),
        (1.5, "must be an integer"),
        (float(2 ** 60), "safe integer range"),
        ("", "empty string"),
        ("   ", "empty string"),
        ("12abc", "decimal integer string"),
        ("-5", "decimal integer string"),
        (None, "int, number, or decimal string"),
    ])
    def test_rejected(self, value, message):
        with pytest.raises(ValidationError, match=message):
            to_uint64(value, "id")

    def test_safe_integer_boundary(self):
        assert to_uint64(2 ** 53) == 2 ** 53
        assert to_uint64(float(2 ** 53 - 1)) == 2 ** 53 - 1
        with pytest.raises(ValidationError, match="safe integer range"):
            to_uint64(float(2 ** 53))


class TestBase64:
    def test_round_trip(self):
        assert base64_to_bytes(bytes_to_base64(b"\x00\xff\x10")) == b"\x00\xff\x10"

    def test_empty(self):
        assert base64_to_bytes("") == b""

    @pytest.mark.parametrize("value", ["abc", "a$==", "AQ=", "AQ==AQ=="])
    def test_invalid(self, value):
        with pytest.raises(ValidationError, match="proof must be valid base64"):
            base64_to_bytes(value, "proof")

    def test_to_bytes(self):
        assert to_bytes(b"\x01") == b"\x01"
        assert to_bytes(bytearray(b"\x02")) == b"\x02"
        assert to_bytes("Aw==") == b"\x03"
        with pytest.raises(ValidationError, match="bytes or a base64 string"):
            to_bytes(5)


class TestDurations:
    def test_int_is_nanoseconds(self):
        assert duration_to_nanoseconds(3_600_000_000_000) == 3_600_000_000_000

    def test_timedelta(self):
        assert duration_to_nanoseconds(timedelta(hours=1)) == 3_600_000_000_000
        assert duration_to_nanoseconds(timedelta(microseconds=1500)) == 1_500_000

    def test_mapping(self):
        assert duration_to_nanoseconds({"seconds": 5, "nanos": 250}) == 5_000_000_250
        assert duration_to_nanoseconds({"seconds": "-2", "nanos": -1}) == -2_000_000_001
        assert duration_to_nanoseconds({"nanos": 9}) == 9

    @pytest.mark.parametrize("value,message", [
        ({}, "must include seconds or nanos"),
        ({"seconds": 1, "nanos": -1}, "must be >= 0"),
        ({"seconds": -1, "nanos": 1}, "must be <= 0"),
        ({"seconds": 0, "nanos": 1_000_000_000}, "between -999999999 and 999999999"),
        (True, "must be nanoseconds"),
        ([1], "must be nanoseconds"),
    ])
    def test_rejected(self, value, message):
        with pytest.raises(ValidationError, match=message):
            duration_to_nanoseconds(value, "lifespan")

    @pytest.mark.parametrize("total,expected", [
        (0, (0, 0)),
        (1_500_000_000, (1, 500_000_000)),
        (-1_500_000_000, (-1, -500_000_000)),
        (999, (0, 999)),
    ])
    def test_split(self, total, expected):
        assert split_nanoseconds(total) == expected


class TestSnakeCaseKeys:
    def test_accepts_snake_case(self):
        assert_snake_case_keys({"license_ids": [1], "params": {"supply_cap": "1"}}, "msg")

    def test_rejects_nested_camel_case(self):
        with pytest.raises(ValidationError, match='received "submissions\\[0\\].licenseId"'):
            assert_snake_case_keys({"submissions": [{"licenseId": 1}]}, "msg")


@pytest.mark.parametrize("chain_id,expected", [
    ("ault_10904-1", 10904),
    ("ault_904-12", 904),
    ("localchain", None),
    ("ault-10904-1", None),
    ("", None),
    (None, None),
])
def test_parse_evm_chain_id(chain_id, expected):
    assert parse_evm_chain_id(chain_id) == expected
