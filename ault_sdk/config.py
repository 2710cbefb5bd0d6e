"""
Network configuration for the Ault SDK.

Known networks live in the packaged ``networks.json``. Endpoints can be
overridden per call or through ``AULT_<NETWORK>_REST_URL`` style environment
variables.
"""
import importlib.resources
import json
import logging
import os
import urllib.parse
from typing import Any, Dict, Optional

from .constants import DEFAULT_CHAIN_ID, DEFAULT_EVM_CHAIN_ID
from .core.chain_id import parse_evm_chain_id
from .models import Network

logger = logging.getLogger(__name__)


def validate_url(url_name: str, url: str) -> str:
    """
    Require https except for local development hosts.

    Raises:
        ValueError: If the URL is plain http on a non-local host
    """
    parsed = urllib.parse.urlparse(url)
    host = parsed.hostname or ""
    is_local = host in ("localhost", "127.0.0.1")
    if parsed.scheme != "https" and not is_local:
        raise ValueError(f"{url_name} must use https:// for security (got: {parsed.scheme}://)")
    return url.rstrip("/")


class NetworkConfig:
    """Registry of known Ault networks"""

    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        """
        Load network definitions from the packaged JSON file.

        Returns:
            Mapping of network name to raw network definition
        """
        if cls._networks_cache is not None:
            return cls._networks_cache
        resource = importlib.resources.files("ault_sdk").joinpath("networks.json")
        with resource.open("r", encoding="utf-8") as f:
            cls._networks_cache = json.load(f)
        return cls._networks_cache

    @classmethod
    def _find(cls, network: str) -> Optional[Dict[str, Any]]:
        networks = cls.load_networks()
        if network in networks:
            return networks[network]
        for definition in networks.values():
            if definition.get("chainId") == network:
                return definition
        return None

    @classmethod
    def get_network(cls, network: str) -> Network:
        """
        Look up a network by name (``testnet``) or chain id (``ault_10904-1``).

        Raises:
            ValueError: If the network is unknown
        """
        definition = cls._find(network)
        if definition is None:
            available = ", ".join(sorted(cls.load_networks()))
            raise ValueError(f"Unknown network: {network}. Available networks: {available}")
        network_model = Network(**definition)
        env_rest = os.environ.get(f"AULT_{network_model.name.upper()}_REST_URL")
        if env_rest:
            network_model = network_model.model_copy(update={"rest_url": env_rest.rstrip("/")})
        return network_model

    @classmethod
    def get_network_config(cls, chain_id: str = DEFAULT_CHAIN_ID) -> Network:
        """
        Resolve a network, falling back to localhost endpoints for unknown chain ids.

        The EVM chain id of an unknown network is parsed from the Cosmos chain id
        when possible, otherwise the Ault default is used.
        """
        if cls._find(chain_id) is not None:
            return cls.get_network(chain_id)
        evm_chain_id = parse_evm_chain_id(chain_id) or DEFAULT_EVM_CHAIN_ID
        logger.debug(f"Unknown chain id {chain_id}; using localhost endpoints (EVM chain {evm_chain_id})")
        return Network(
            name=chain_id,
            chain_id=chain_id,
            evm_chain_id=evm_chain_id,
            rest_url="http://localhost:1317",
            rpc_url="http://localhost:26657",
            evm_rpc_url="http://localhost:8545",
        )

    @classmethod
    def get_rest_url(cls, network: str, override: Optional[str] = None) -> str:
        """Return the REST endpoint; an explicit override wins over env and file."""
        if override:
            return override.rstrip("/")
        return cls.get_network_config(network).rest_url

    @classmethod
    def get_chain_id(cls, network: str) -> str:
        return cls.get_network(network).chain_id

    @classmethod
    def get_evm_chain_id(cls, network: str) -> int:
        return cls.get_network_config(network).evm_chain_id
