"""Key-value fetch helpers shared by the metadata providers."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Self

from loguru import logger

from bootmeta.errors import ParseError
from bootmeta.network import parse_ip
from bootmeta.retry import RetryClient
from bootmeta.types import IPAddress

log = logger.bind(component="fetch")


@dataclass(frozen=True, slots=True)
class KeyFetcher:
    """Fetches keys relative to a metadata endpoint.

    Args:
        client: Retry Client issuing the requests.
        base_url: Endpoint every key is appended to.
        empty_is_absent: Treat a present-but-empty body as absent. Some
            services answer 200 with no body for keys they do not have.
    """

    client: RetryClient
    base_url: str
    empty_is_absent: bool = False

    def url(self, key: str) -> str:
        return self.base_url + key

    def fetch_string(self, key: str) -> str | None:
        body = self.client.get(self.url(key))
        if body is None or (self.empty_is_absent and not body):
            log.debug("Key {key} is absent", key=key)
            return None
        try:
            return body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError("UTF-8 text", body, key=key) from e

    def fetch_ip(self, key: str) -> IPAddress | None:
        value = self.fetch_string(key)
        if value is None:
            return None
        try:
            return parse_ip(value.strip(), "IP address")
        except ParseError as e:
            raise e.with_key(key) from e.__cause__

    def fetch_json(self, key: str) -> Any:
        value = self.fetch_string(key)
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise ParseError("JSON document", value, key=key) from e


def set_attribute(attributes: dict[str, str], name: str, value: object | None) -> None:
    """Record ``value`` under ``name`` unless it is absent."""
    if value is None:
        return
    attributes[name] = str(value)


class HTTPProvider:
    """Base for providers that own a Retry Client.

    Closing the provider closes the client's session:

        with get_metadata_provider("ec2") as provider:
            metadata = provider.fetch_metadata()
    """

    _client: RetryClient

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
