"""
Protocol constants shared across the SDK.
"""
import os

DEFAULT_CHAIN_ID = "ault_10904-1"
DEFAULT_EVM_CHAIN_ID = 904
BECH32_PREFIX = "ault"
VALIDATOR_BECH32_PREFIX = "aultvaloper"

# Request defaults; the timeout and retry budget can be set from the environment
API_TIMEOUT = float(os.environ.get("AULT_API_TIMEOUT", "30"))
DEFAULT_MAX_RETRIES = int(os.environ.get("AULT_MAX_RETRIES", "3"))
RETRY_DELAY = 1.0
MAX_BACKOFF = 30.0


class GasConstants:
    """Fee and gas defaults for EIP-712 transactions"""
    DENOM = "aault"
    EIP712_FEE_AMOUNT = "5000000000000000"
    EIP712_GAS_LIMIT = "200000"
    PER_LICENSE = 200000
    PER_KYC_MEMBER = 100000
