"""
Queries for the ``ault.license.v1`` module.
"""
from typing import Any, Dict, Optional, Union

from ..core.pagination import paginate_all
from .context import (
    DEFAULT_PAGE_LIMIT, RestContext, build_query, fetch_rest, pagination_params, parse_rest_response, segment,
)
from .types import OwnedByResponse

PREFIX = "/ault/license/v1"

IdLike = Union[int, str]


class LicenseApi:
    """Read-only access to licenses, ownership and membership."""

    def __init__(self, context: RestContext):
        self.context = context

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return fetch_rest(self.context, f"{PREFIX}{path}{build_query(params)}")

    def get_license(self, license_id: IdLike) -> Dict[str, Any]:
        return self._get(f"/license/{segment(license_id)}")

    def get_licenses(self, status: Optional[str] = None, **pagination) -> Dict[str, Any]:
        return self._get("/licenses", {"status": status, **pagination_params(**pagination)})

    def get_licenses_by_owner(self, owner: str, **pagination) -> Dict[str, Any]:
        return self._get(f"/licenses_by_owner/{segment(owner)}", pagination_params(**pagination))

    def get_balance(self, owner: str) -> Dict[str, Any]:
        return self._get(f"/balance/{segment(owner)}")

    def get_owner(self, license_id: IdLike) -> Dict[str, Any]:
        return self._get(f"/owner/{segment(license_id)}")

    def get_token_of_owner_by_index(self, owner: str, index: int) -> Dict[str, Any]:
        return self._get(f"/token/{segment(owner)}/{segment(index)}")

    def get_owned_by(self, owner: str, **pagination) -> Dict[str, Any]:
        return self._get(f"/owned_by/{segment(owner)}", pagination_params(**pagination))

    def get_licenses_by_owner_all(self, owner: str) -> Dict[str, Any]:
        """
        Every license id owned by ``owner``, following pagination cursors.

        Returns:
            ``{"license_ids": [...], "total": n}``
        """
        def build_url(cursor: Optional[str]) -> str:
            query = build_query(pagination_params(key=cursor, limit=DEFAULT_PAGE_LIMIT))
            return self.context.url(f"{PREFIX}/owned_by/{segment(owner)}{query}")

        page = paginate_all(
            self.context.http,
            build_url,
            get_items=lambda res: res.license_ids,
            get_next_cursor=lambda res: res.pagination.next_key if res.pagination else None,
            parse_response=lambda data, url: parse_rest_response(OwnedByResponse, data, url),
            policy=self.context.policy,
            cancel_event=self.context.cancel_event,
        )
        return {"license_ids": page.items, "total": page.total}

    def get_total_supply(self) -> Dict[str, Any]:
        return self._get("/total_supply")

    def is_active(self, license_id: IdLike) -> Dict[str, Any]:
        return self._get(f"/is_active/{segment(license_id)}")

    def get_params(self) -> Dict[str, Any]:
        return self._get("/params")

    def get_minters(self, **pagination) -> Dict[str, Any]:
        return self._get("/minters", pagination_params(**pagination))

    def get_transfer_unlock_time(self) -> Dict[str, Any]:
        return self._get("/transfer_unlock_time")

    def get_kyc_approvers(self, **pagination) -> Dict[str, Any]:
        return self._get("/kyc_approvers", pagination_params(**pagination))

    def get_approved_members(self, **pagination) -> Dict[str, Any]:
        return self._get("/approved_members", pagination_params(**pagination))

    def is_approved_member(self, address: str) -> Dict[str, Any]:
        return self._get(f"/is_approved_member/{segment(address)}")

    def is_kyc_approver(self, address: str) -> Dict[str, Any]:
        return self._get(f"/is_kyc_approver/{segment(address)}")

    def get_active_license_count_at(self, owner: str, snapshot_time: str) -> Dict[str, Any]:
        return self._get(f"/active_license_count_at/{segment(owner)}", {"snapshot_time": snapshot_time})
