"""
Cosmos chain id helpers.
"""
import re
from typing import Optional

COSMOS_CHAIN_ID_RE = re.compile(r"^[a-z]+_(\d+)-\d+$")


def parse_evm_chain_id(chain_id: str) -> Optional[int]:
    """Extract the EVM chain id from a ``<name>_<evm id>-<revision>`` Cosmos chain id."""
    match = COSMOS_CHAIN_ID_RE.match(chain_id or "")
    if not match:
        return None
    return int(match.group(1))
