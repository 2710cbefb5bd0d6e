"""
Queries for the ``ault.miner.v1`` module and its operator registry.
"""
from typing import Any, Dict, Optional, Union

from ..core.pagination import paginate_all
from ..exceptions import ApiError
from .context import (
    DEFAULT_PAGE_LIMIT, RestContext, build_query, fetch_rest, is_not_found, pagination_params,
    parse_rest_response, segment,
)
from .types import EpochsResponse, LicenseDelegationResponse, OperatorInfoResponse

PREFIX = "/ault/miner/v1"
OPERATOR_PREFIX = "/cosmos/miner/v1"

IdLike = Union[int, str]


class MinerApi:
    """Read-only access to epochs, emissions, operators and delegations."""

    def __init__(self, context: RestContext):
        self.context = context

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return fetch_rest(self.context, f"{path}{build_query(params)}")

    def get_current_epoch(self) -> Dict[str, Any]:
        return self._get(f"{PREFIX}/epoch")

    def get_license_miner_info(self, license_id: IdLike) -> Dict[str, Any]:
        return self._get(f"{PREFIX}/license/{segment(license_id)}/info")

    def get_beacon(self, epoch: IdLike) -> Dict[str, Any]:
        return self._get(f"{PREFIX}/beacon/{segment(epoch)}")

    def get_params(self) -> Dict[str, Any]:
        return self._get(f"{PREFIX}/params")

    def get_owner_key(self, owner: str) -> Dict[str, Any]:
        return self._get(f"{PREFIX}/owner/{segment(owner)}/key")

    def get_emission_info(self) -> Dict[str, Any]:
        return self._get(f"{PREFIX}/emission/info")

    def get_emission_schedule(self) -> Dict[str, Any]:
        return self._get(f"{PREFIX}/emission/schedule")

    def get_epoch_info(self, epoch: IdLike) -> Dict[str, Any]:
        return self._get(f"{PREFIX}/epoch/{segment(epoch)}")

    def get_epochs(self, **pagination) -> Dict[str, Any]:
        return self._get(f"{PREFIX}/epochs", pagination_params(**pagination))

    def get_epochs_all(self) -> Dict[str, Any]:
        """Every epoch record, following pagination cursors."""
        def build_url(cursor: Optional[str]) -> str:
            query = build_query(pagination_params(key=cursor, limit=DEFAULT_PAGE_LIMIT))
            return self.context.url(f"{PREFIX}/epochs{query}")

        page = paginate_all(
            self.context.http,
            build_url,
            get_items=lambda res: res.epochs,
            get_next_cursor=lambda res: res.pagination.next_key if res.pagination else None,
            parse_response=lambda data, url: parse_rest_response(EpochsResponse, data, url),
            policy=self.context.policy,
            cancel_event=self.context.cancel_event,
        )
        return {"epochs": page.items, "total": page.total}

    def get_operator(self, operator: str) -> Dict[str, Any]:
        """``{"operator": {...}}``, or ``{"operator": None}`` for an unknown operator."""
        try:
            result = fetch_rest(
                self.context, f"{OPERATOR_PREFIX}/operator/{segment(operator)}", OperatorInfoResponse,
            )
        except ApiError as e:
            if is_not_found(e):
                return {"operator": None}
            raise
        return {"operator": result.operator or result.info}

    def get_operators(self, **pagination) -> Dict[str, Any]:
        return self._get(f"{OPERATOR_PREFIX}/operators", pagination_params(**pagination))

    def get_license_delegation(self, license_id: IdLike) -> Dict[str, Any]:
        """Mining delegation of a license; an undelegated license reports ``is_delegated: False``."""
        not_delegated = {"delegation": None, "is_delegated": False}
        try:
            result = fetch_rest(
                self.context,
                f"{OPERATOR_PREFIX}/license/{segment(license_id)}/delegation",
                LicenseDelegationResponse,
            )
        except ApiError as e:
            if is_not_found(e):
                return not_delegated
            raise
        if not result.is_delegated:
            return not_delegated
        return {"delegation": result.delegation, "is_delegated": True}

    def get_delegated_licenses(self, operator: str, **pagination) -> Dict[str, Any]:
        return self._get(
            f"{OPERATOR_PREFIX}/operator/{segment(operator)}/licenses", pagination_params(**pagination),
        )

    def get_license_payouts(self, license_id: IdLike, from_epoch: Optional[IdLike] = None,
                            to_epoch: Optional[IdLike] = None) -> Dict[str, Any]:
        return self._get(
            f"{PREFIX}/license/{segment(license_id)}/payouts", {"from_epoch": from_epoch, "to_epoch": to_epoch},
        )
