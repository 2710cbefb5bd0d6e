"""
HTTP transport for the Ault REST API.

``HttpClient`` wraps a ``requests.Session``. urllib3 handles connection
level retries on the mounted adapter; status, method and backoff policy is
applied by the loop in ``HttpClient.request`` so that cancellation and
jitter stay under SDK control.
"""
import logging
import random
import threading
import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..constants import API_TIMEOUT, DEFAULT_MAX_RETRIES, MAX_BACKOFF, RETRY_DELAY
from ..exceptions import ApiError, CancelledError, NetworkError, RequestTimeoutError
from ._rate_limited_log import rate_limited_log

logger = logging.getLogger(__name__)

DEFAULT_RETRYABLE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
DEFAULT_RETRYABLE_STATUSES = frozenset({408, 429, 500, 502, 503, 504})
JITTER_RATIO = 0.3


@dataclass(frozen=True)
class RetryPolicy:
    """When and how often a request is retried"""
    timeout: float = API_TIMEOUT
    retries: int = DEFAULT_MAX_RETRIES
    retry_delay: float = RETRY_DELAY
    exponential_backoff: bool = True
    retryable_methods: FrozenSet[str] = field(default=DEFAULT_RETRYABLE_METHODS)
    retryable_statuses: FrozenSet[int] = field(default=DEFAULT_RETRYABLE_STATUSES)
    retry_on_timeout: bool = False

    def with_method(self, method: str) -> "RetryPolicy":
        """Copy of this policy that also retries ``method``."""
        return replace(self, retryable_methods=self.retryable_methods | {method.upper()})

    def backoff(self, attempt: int) -> float:
        """Delay in seconds before retry number ``attempt + 1``."""
        if not self.exponential_backoff:
            return self.retry_delay
        delay = self.retry_delay * (2 ** attempt)
        jitter = random.random() * JITTER_RATIO * delay
        return min(delay + jitter, MAX_BACKOFF)


def _sleep(seconds: float, cancel_event: Optional[threading.Event], url: str) -> None:
    if cancel_event is None:
        time.sleep(seconds)
        return
    if cancel_event.wait(seconds):
        raise CancelledError(f"Request to {url} cancelled", url)


def _check_cancelled(cancel_event: Optional[threading.Event], url: str) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise CancelledError(f"Request to {url} cancelled", url)


class HttpClient:
    """
    JSON-over-HTTP client with retries, timeouts and cooperative cancellation.

    Args:
        policy: Default retry policy for every request
        session: Optional pre-configured ``requests.Session``
        connect_retries: urllib3 retries for failed connections
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        session: Optional[requests.Session] = None,
        connect_retries: int = 2,
    ):
        self.policy = policy or RetryPolicy()
        if session is None:
            session = requests.Session()
            retries = Retry(
                total=connect_retries,
                connect=connect_retries,
                read=0,
                status=0,
                other=0,
                backoff_factor=0.2,
                raise_on_status=False,
            )
            session.mount("http://", HTTPAdapter(max_retries=retries))
            session.mount("https://", HTTPAdapter(max_retries=retries))
        self.session = session

    def request(
        self,
        method: str,
        url: str,
        json_body: Any = None,
        policy: Optional[RetryPolicy] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> requests.Response:
        """
        Send a request, retrying per ``policy``.

        A response is returned once it is successful, not retryable, or the
        retry budget is spent; non-OK responses are returned as-is.

        Raises:
            RequestTimeoutError: If the final attempt timed out
            NetworkError: If the final attempt failed at the transport level
            CancelledError: If ``cancel_event`` is set before or between attempts
        """
        policy = policy or self.policy
        method = method.upper()
        can_retry = method in policy.retryable_methods
        last_error: Optional[Exception] = None

        for attempt in range(policy.retries + 1):
            _check_cancelled(cancel_event, url)
            try:
                response = self.session.request(method, url, json=json_body, timeout=policy.timeout)
            except requests.Timeout as e:
                last_error = RequestTimeoutError(
                    f"Request to {url} timed out after {policy.timeout}s", url
                )
                last_error.__cause__ = e
                if not (can_retry and policy.retry_on_timeout) or attempt >= policy.retries:
                    break
            except requests.RequestException as e:
                last_error = e
                if not can_retry or attempt >= policy.retries:
                    break
            else:
                retryable = (
                    not response.ok
                    and can_retry
                    and response.status_code in policy.retryable_statuses
                    and attempt < policy.retries
                )
                if not retryable:
                    return response
                last_error = None
                rate_limited_log(
                    f"Retrying {method} {url} after status {response.status_code}",
                    logger_instance=logger,
                )

            delay = policy.backoff(attempt)
            logger.debug(f"Attempt {attempt + 1} for {method} {url} failed; sleeping {delay:.2f}s")
            _sleep(delay, cancel_event, url)

        if isinstance(last_error, RequestTimeoutError):
            raise last_error
        raise NetworkError(f"Failed to fetch {url}: {last_error or 'Unknown error'}", url) from last_error

    def get_json(
        self,
        url: str,
        policy: Optional[RetryPolicy] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Any:
        response = self.request("GET", url, policy=policy, cancel_event=cancel_event)
        return self._parse(response, url)

    def post_json(
        self,
        url: str,
        data: Dict[str, Any],
        policy: Optional[RetryPolicy] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Any:
        """
        POST ``data`` as JSON.

        POST is only retried when the caller passes a policy; that policy is
        then widened to include POST.
        """
        if policy is None:
            policy = replace(self.policy, retries=0)
        else:
            policy = policy.with_method("POST")
        response = self.request("POST", url, json_body=data, policy=policy, cancel_event=cancel_event)
        return self._parse(response, url)

    @staticmethod
    def _parse(response: requests.Response, url: str) -> Any:
        if not response.ok:
            raise ApiError(
                f"API request failed: {response.status_code} {response.reason}",
                status=response.status_code,
                url=url,
                body=response.text,
            )
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(
                "Failed to parse JSON response", status=response.status_code, url=url
            ) from e

    def close(self) -> None:
        self.session.close()
