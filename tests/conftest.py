from __future__ import annotations

import re
from collections.abc import Callable, Iterator, Mapping
from typing import TypeAlias

import pytest
import responses
from requests import PreparedRequest

from bootmeta.config import RetryConfig

# Instant retries: tests must never wait on backoff
FAST_RETRY = RetryConfig(initial_backoff=0.0, max_backoff=0.0, max_attempts=3, timeout=1.0)

MetadataValue: TypeAlias = str | bytes | int | Exception


@pytest.fixture
def rsps() -> Iterator[responses.RequestsMock]:
    with responses.RequestsMock(assert_all_requests_are_fired=False) as r:
        yield r


def serve_metadata(
    rsps: responses.RequestsMock,
    base_url: str,
    data: Mapping[str, MetadataValue],
) -> list[PreparedRequest]:
    """Serve ``data`` as a metadata tree rooted at ``base_url``.

    Values map to responses: str/bytes are 200 bodies, an int is a bare
    status code, an exception is raised as a transport error. Keys that are
    not in ``data`` answer 404. Returns the list of received requests.
    """
    seen: list[PreparedRequest] = []

    def callback(request: PreparedRequest) -> tuple[int, dict[str, str], bytes] | Exception:
        seen.append(request)
        key = (request.url or "")[len(base_url):]
        value = data.get(key)
        match value:
            case None:
                return (404, {}, b"not found")
            case Exception():
                return value
            case int():
                return (value, {}, b"")
            case str():
                return (200, {}, value.encode())
            case bytes():
                return (200, {}, value)
        raise AssertionError(f"unsupported metadata value {value!r}")

    rsps.add_callback(responses.GET, re.compile(re.escape(base_url) + ".*"), callback=callback)
    return seen


Serve: TypeAlias = Callable[[str, Mapping[str, MetadataValue]], list[PreparedRequest]]


@pytest.fixture
def serve(rsps: responses.RequestsMock) -> Serve:
    def _serve(base_url: str, data: Mapping[str, MetadataValue]) -> list[PreparedRequest]:
        return serve_metadata(rsps, base_url, data)

    return _serve


@pytest.fixture
def fast_retry() -> RetryConfig:
    return FAST_RETRY
