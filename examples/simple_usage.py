#!/usr/bin/env python3
"""
Simple example of using the Ault SDK.
"""
import os

from ault_sdk import AultClient, NetworkConfig, PrivateKeySigner


def main():
    """
    Demonstrate basic usage of the AultClient.

    This example shows how to:
    1. Initialize the client from a private key
    2. Summarize the licenses owned by the signer
    3. Mint a license and inspect the broadcast result
    """
    PRIVATE_KEY = os.environ.get("PRIVATE_KEY")
    NETWORK = os.environ.get("AULT_NETWORK", "testnet")

    if not PRIVATE_KEY:
        print("ERROR: PRIVATE_KEY environment variable is required")
        return

    print("Available networks:")
    for network_name in NetworkConfig.load_networks().keys():
        print(f"  - {network_name}")
    print()

    with AultClient(PrivateKeySigner(PRIVATE_KEY), network=NETWORK) as client:
        print(f"Signer address: {client.address}")

        summary = client.analyze_licenses(client.address)
        print(f"Licenses owned: {summary['total']} ({summary['active']} active, {summary['delegated']} delegated)")

        recipient = os.environ.get("RECIPIENT", client.address)
        try:
            result = client.mint_license(recipient, "ipfs://example-metadata", reason="example mint")
            print(f"Transaction hash: {result.tx_hash}")
            print(f"Status: {'Success' if result.success else f'Failed (code {result.code}): {result.raw_log}'}")
        except Exception as e:
            print(f"Error minting license: {str(e)}")


if __name__ == "__main__":
    main()
