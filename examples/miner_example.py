#!/usr/bin/env python3
"""
Example of delegating mining licenses and checking operator state.
"""
import os

from ault_sdk import AultClient


def main():
    """
    Demonstrate the miner module.

    This example shows how to:
    1. Read the current epoch and emission info
    2. Look up an operator and its delegated licenses
    3. Delegate licenses to that operator
    """
    PRIVATE_KEY = os.environ.get("PRIVATE_KEY")
    OPERATOR = os.environ.get("OPERATOR_ADDRESS")
    LICENSE_IDS = [i for i in os.environ.get("LICENSE_IDS", "").split(",") if i]

    if not PRIVATE_KEY or not OPERATOR:
        print("ERROR: PRIVATE_KEY and OPERATOR_ADDRESS environment variables are required")
        return

    client = AultClient({"type": "private_key", "key": PRIVATE_KEY})

    epoch = client.miner.get_current_epoch()
    print(f"Current epoch: {epoch}")
    print(f"Emission: {client.miner.get_emission_info()}")

    operator = client.miner.get_operator(OPERATOR)["operator"]
    if operator is None:
        print(f"{OPERATOR} is not a registered operator")
        return
    print(f"Operator: {operator}")

    for license_id in LICENSE_IDS:
        delegation = client.miner.get_license_delegation(license_id)
        print(f"License {license_id} delegated: {delegation['is_delegated']}")

    if LICENSE_IDS:
        result = client.delegate_mining(LICENSE_IDS, OPERATOR)
        print(f"Delegation tx {result.tx_hash}: {'ok' if result.success else result.raw_log}")


if __name__ == "__main__":
    main()
