"""
Queries for ``cosmos.staking.v1beta1`` and delegator rewards.
"""
from typing import Any, Dict, Optional

from .context import RestContext, build_query, fetch_rest, pagination_params, segment

STAKING_PREFIX = "/cosmos/staking/v1beta1"
DISTRIBUTION_PREFIX = "/cosmos/distribution/v1beta1"


class StakingApi:
    def __init__(self, context: RestContext):
        self.context = context

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return fetch_rest(self.context, f"{path}{build_query(params)}")

    def get_validators(self, status: Optional[str] = None, **pagination) -> Dict[str, Any]:
        """List validators, optionally filtered by ``BOND_STATUS_*``."""
        return self._get(f"{STAKING_PREFIX}/validators", {"status": status, **pagination_params(**pagination)})

    def get_validator(self, validator_address: str) -> Dict[str, Any]:
        return self._get(f"{STAKING_PREFIX}/validators/{segment(validator_address)}")

    def get_delegations(self, delegator_address: str, **pagination) -> Dict[str, Any]:
        return self._get(
            f"{STAKING_PREFIX}/delegations/{segment(delegator_address)}", pagination_params(**pagination),
        )

    def get_unbonding_delegations(self, delegator_address: str, **pagination) -> Dict[str, Any]:
        return self._get(
            f"{STAKING_PREFIX}/delegators/{segment(delegator_address)}/unbonding_delegations",
            pagination_params(**pagination),
        )

    def get_staking_rewards(self, delegator_address: str) -> Dict[str, Any]:
        return self._get(f"{DISTRIBUTION_PREFIX}/delegators/{segment(delegator_address)}/rewards")

    def get_staking_params(self) -> Dict[str, Any]:
        return self._get(f"{STAKING_PREFIX}/params")

    def get_staking_pool(self) -> Dict[str, Any]:
        return self._get(f"{STAKING_PREFIX}/pool")
