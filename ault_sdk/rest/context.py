"""
Shared plumbing for the REST query modules.
"""
import logging
import threading
import urllib.parse
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Type, TypeVar, Union

import requests
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..core.http import HttpClient, RetryPolicy
from ..exceptions import ApiError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

DEFAULT_PAGE_LIMIT = 1000


@dataclass
class RestContext:
    """Where and how REST queries are sent"""
    rest_url: str
    http: HttpClient = field(default_factory=HttpClient)
    policy: Optional[RetryPolicy] = None
    cancel_event: Optional[threading.Event] = None

    def __post_init__(self):
        self.rest_url = self.rest_url.rstrip("/")

    def url(self, path: str) -> str:
        return f"{self.rest_url}{path}"


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def segment(value: Any) -> str:
    """Percent-encode one URL path segment; slashes included."""
    return requests.utils.quote(str(value), safe="")


def build_query(params: Optional[Mapping[str, Any]]) -> str:
    """
    ``?k=v&...`` for every value that is not ``None`` or ``""``; empty when nothing is left.
    """
    entries = [(k, _query_value(v)) for k, v in (params or {}).items() if v is not None and v != ""]
    if not entries:
        return ""
    return "?" + urllib.parse.urlencode(entries)


def pagination_params(
    key: Optional[str] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    count_total: Optional[bool] = None,
    reverse: Optional[bool] = None,
) -> Dict[str, Any]:
    """Cosmos ``pagination.*`` query parameters."""
    return {
        "pagination.key": key,
        "pagination.offset": offset,
        "pagination.limit": limit,
        "pagination.count_total": count_total,
        "pagination.reverse": reverse,
    }


def parse_rest_response(model: Type[ModelT], data: Any, url: str) -> ModelT:
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ApiError(f"Invalid API response from {url}: {e}", url=url) from e


def fetch_rest(
    context: RestContext,
    path: str,
    model: Optional[Type[ModelT]] = None,
) -> Union[Dict[str, Any], ModelT]:
    """
    GET ``path`` relative to the context's REST URL.

    Returns the decoded JSON, or an instance of ``model`` when given.

    Raises:
        ApiError: On a non-success status, bad JSON, or a response ``model`` rejects
        NetworkError: If the request fails after retries
    """
    url = context.url(path)
    logger.debug(f"GET {url}")
    data = context.http.get_json(url, policy=context.policy, cancel_event=context.cancel_event)
    if model is None:
        return data
    return parse_rest_response(model, data, url)


def is_not_found(error: ApiError) -> bool:
    return error.status == 404
