"""
Queries for the ``ault.exchange.v1beta1`` module.
"""
from typing import Any, Dict, Optional, Union

from .context import RestContext, build_query, fetch_rest, pagination_params, segment

PREFIX = "/ault/exchange/v1beta1"

IdLike = Union[int, str]


class ExchangeApi:
    def __init__(self, context: RestContext):
        self.context = context

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return fetch_rest(self.context, f"{PREFIX}{path}{build_query(params)}")

    def get_params(self) -> Dict[str, Any]:
        return self._get("/params")

    def get_markets(self, **pagination) -> Dict[str, Any]:
        return self._get("/markets", pagination_params(**pagination))

    def get_market(self, market_id: IdLike) -> Dict[str, Any]:
        return self._get(f"/markets/{segment(market_id)}")

    def get_orders(self, orderer: Optional[str] = None, market_id: Optional[IdLike] = None,
                   **pagination) -> Dict[str, Any]:
        return self._get("/orders", {"orderer": orderer, "market_id": market_id, **pagination_params(**pagination)})

    def get_order(self, order_id: str) -> Dict[str, Any]:
        return self._get(f"/orders/{segment(order_id)}")

    def get_order_book(self, market_id: IdLike, level_start: Optional[int] = None,
                       level_end: Optional[int] = None) -> Dict[str, Any]:
        return self._get(
            f"/markets/{segment(market_id)}/order_book", {"level_start": level_start, "level_end": level_end},
        )
