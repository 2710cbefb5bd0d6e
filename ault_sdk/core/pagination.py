"""
Cursor pagination over Cosmos REST list endpoints.
"""
import logging
import threading
from typing import Any, Callable, List, NamedTuple, Optional, Set

from ..exceptions import PaginationLoopError
from .http import HttpClient, RetryPolicy

logger = logging.getLogger(__name__)


class Page(NamedTuple):
    items: List[Any]
    total: int


def paginate_all(
    http: HttpClient,
    build_url: Callable[[Optional[str]], str],
    get_items: Callable[[Any], List[Any]],
    get_next_cursor: Callable[[Any], Optional[str]],
    get_total: Optional[Callable[[Any], int]] = None,
    parse_response: Optional[Callable[[Any, str], Any]] = None,
    policy: Optional[RetryPolicy] = None,
    cancel_event: Optional[threading.Event] = None,
) -> Page:
    """
    Fetch every page of a cursor-paginated endpoint.

    Stops when the next cursor is empty or a page has no items. The total is
    taken from the first page when ``get_total`` is given, otherwise it is
    the number of collected items.

    Args:
        http: Client used for each page request
        build_url: Maps the current cursor (``None`` for the first page) to a URL
        get_items: Extracts the items of a page
        get_next_cursor: Extracts the next cursor of a page
        get_total: Extracts the server-reported total
        parse_response: Optional ``(raw, url) -> page`` validation hook
        policy: Retry policy for each page request
        cancel_event: Aborts between pages when set

    Raises:
        PaginationLoopError: If a cursor repeats
    """
    collected: List[Any] = []
    seen: Set[str] = set()
    cursor: Optional[str] = None
    total: Optional[int] = None

    while True:
        url = build_url(cursor)
        raw = http.get_json(url, policy=policy, cancel_event=cancel_event)
        page = parse_response(raw, url) if parse_response else raw

        items = list(get_items(page) or [])
        collected.extend(items)
        if total is None and get_total is not None:
            total = get_total(page)

        next_cursor = get_next_cursor(page)
        if not next_cursor or not items:
            break
        if next_cursor in seen:
            raise PaginationLoopError(next_cursor)
        seen.add(next_cursor)
        cursor = next_cursor

    logger.debug(f"Collected {len(collected)} item(s) across {len(seen) + 1} page(s)")
    if total is None:
        total = len(collected)
    return Page(items=collected, total=total)
