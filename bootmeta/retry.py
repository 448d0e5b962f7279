"""Retrying HTTP client for instance metadata services.

Every GET is retried with exponential backoff while the service is
unreachable or answering 5xx. Responses are classified, never interpreted:

    - 2xx: the body is returned, even when empty ("present")
    - 404: None is returned ("absent")
    - 5xx or network error: retried, then TransportExhausted
    - malformed URL or other request error: TransportExhausted, not retried
    - anything else: UnexpectedStatus, not retried

Whether an empty body means "absent" is a per-provider decision made by the
caller (see ``bootmeta.providers.common.KeyFetcher``).

Example:
    from bootmeta.config import RetryConfig
    from bootmeta.retry import RetryClient

    client = RetryClient(RetryConfig(max_attempts=3), headers={"Metadata-Flavor": "Google"})
    body = client.get("http://metadata.google.internal/computeMetadata/v1/instance/hostname")
"""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping

import requests
from loguru import logger
from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from bootmeta.config import RetryConfig
from bootmeta.errors import TransportExhausted, UnexpectedStatus

log = logger.bind(component="retry")

# Network failures and 5xx (raised as HTTPError); InvalidURL, MissingSchema
# and the like fail on the first attempt
_TRANSIENT_ERRORS = (requests.ConnectionError, requests.Timeout, requests.HTTPError)


class RetryClient:
    """Blocking GET client with bounded exponential backoff.

    The client holds only immutable configuration and a requests session;
    it is safe to reuse for sequential calls but not across threads.

    Args:
        config: Backoff and attempt limits.
        headers: Static headers sent with every request.
        session: Session to issue requests with. A new one by default.
        sleep: Callable used to wait between attempts. Tests replace it.
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        *,
        headers: Mapping[str, str] | None = None,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config or RetryConfig()
        self._headers = dict(headers or {})
        self._session = session or requests.Session()
        self._sleep = sleep

    def get(self, url: str, headers: Mapping[str, str] | None = None) -> bytes | None:
        """GET ``url`` and return its body, or None when the key is absent.

        Raises:
            TransportExhausted: Every attempt failed with a network error
                or a 5xx response, or the request could not be made at
                all (malformed URL, unsupported scheme).
            UnexpectedStatus: The service answered with a non-retryable
                status other than 404.
        """
        request_headers = {**self._headers, **(headers or {})}
        retrying = Retrying(
            stop=stop_after_attempt(self.config.max_attempts),
            wait=wait_exponential(
                multiplier=self.config.initial_backoff,
                max=self.config.max_backoff,
            ),
            retry=retry_if_exception_type(_TRANSIENT_ERRORS),
            sleep=self._sleep,
            before_sleep=self._log_retry,
        )

        try:
            return retrying(self._attempt, url, request_headers)
        except RetryError as e:
            cause = e.last_attempt.exception()
            log.error(
                "Giving up on {url} after {attempts} attempts: {cause}",
                url=url, attempts=self.config.max_attempts, cause=cause,
            )
            raise TransportExhausted(url, self.config.max_attempts, cause) from cause
        except requests.RequestException as e:
            attempts = retrying.statistics.get("attempt_number", 1)
            log.error("GET {url} failed: {error}", url=url, error=e)
            raise TransportExhausted(url, attempts, e) from e

    def _attempt(self, url: str, headers: dict[str, str]) -> bytes | None:
        log.debug("GET {url}", url=url)
        resp = self._session.get(url, headers=headers, timeout=self.config.timeout)

        if resp.status_code == 404:
            return None
        if 500 <= resp.status_code < 600:
            # HTTPError is a RequestException, so tenacity retries it
            resp.raise_for_status()
        if not 200 <= resp.status_code < 300:
            raise UnexpectedStatus(url, resp.status_code)
        return resp.content

    def _log_retry(self, state: RetryCallState) -> None:
        error = state.outcome.exception() if state.outcome else None
        delay = state.next_action.sleep if state.next_action else 0.0
        log.warning(
            "Retry {attempt}/{max_attempts} for {url} after {error}. Waiting {delay:.1f}s...",
            attempt=state.attempt_number,
            max_attempts=self.config.max_attempts,
            url=state.args[0] if state.args else "?",
            error=error,
            delay=delay,
        )

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> RetryClient:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
