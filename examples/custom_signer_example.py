#!/usr/bin/env python3
"""
Example of signing with a custom signer and low-level helpers.
"""
import json
import os

from eth_account import Account

from ault_sdk import (
    AultSigner, NetworkConfig, build_eip712_typed_data, evm_to_ault, hash_typed_data, msg,
    sign_and_broadcast_eip712,
)
from ault_sdk.models import TxContext


class LoggingSigner(AultSigner):
    """Wraps an eth_account key and prints every digest it signs."""

    def __init__(self, private_key: str):
        self.account = Account.from_key(private_key)
        self.address = self.account.address

    def sign_typed_data(self, typed_data):
        digest = hash_typed_data(typed_data)
        print(f"Signing digest 0x{digest.hex()}")
        return self.account.unsafe_sign_hash(digest)


def main():
    """
    Demonstrate the building blocks behind AultClient.

    This example shows how to:
    1. Preview the EIP-712 typed data for a message
    2. Sign it with a custom AultSigner subclass
    3. Broadcast it with sign_and_broadcast_eip712
    """
    PRIVATE_KEY = os.environ.get("PRIVATE_KEY")
    if not PRIVATE_KEY:
        print("ERROR: PRIVATE_KEY environment variable is required")
        return

    network = NetworkConfig.get_network("testnet")
    signer = LoggingSigner(PRIVATE_KEY)
    message = msg.miner.unregister_operator(evm_to_ault(signer.address))

    preview = build_eip712_typed_data(
        TxContext(chain_id=network.chain_id, account_number=0, sequence=0), [message],
    )
    print(json.dumps(preview["types"], indent=2))

    result = sign_and_broadcast_eip712(network, signer, [message], memo="custom signer")
    print(f"Transaction hash: {result.tx_hash} (code {result.code})")


if __name__ == "__main__":
    main()
