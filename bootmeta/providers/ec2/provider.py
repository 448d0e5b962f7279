"""EC2 metadata provider.

Reads scalar keys from the versioned instance metadata service, the region
from the instance identity document, and every distinct public key.
"""

from __future__ import annotations

from typing import Self

from loguru import logger

from bootmeta.errors import ParseError
from bootmeta.providers.common import HTTPProvider, KeyFetcher, set_attribute
from bootmeta.providers.ec2.config import EC2
from bootmeta.retry import RetryClient
from bootmeta.ssh_keys import unique_key_indices
from bootmeta.types import Metadata

log = logger.bind(component="ec2")


class EC2Provider(HTTPProvider):
    def __init__(self, fetcher: KeyFetcher) -> None:
        self._fetcher = fetcher
        self._client = fetcher.client

    @classmethod
    def create(cls, config: EC2) -> Self:
        client = RetryClient(config.retry)
        return cls(KeyFetcher(client, config.endpoint))

    def fetch_metadata(self) -> Metadata:
        fetch = self._fetcher
        log.debug("Fetching EC2 metadata from {url}", url=fetch.base_url)

        instance_id = fetch.fetch_string("meta-data/instance-id")
        public = fetch.fetch_ip("meta-data/public-ipv4")
        local = fetch.fetch_ip("meta-data/local-ipv4")
        hostname = fetch.fetch_string("meta-data/hostname")
        availability_zone = fetch.fetch_string("meta-data/placement/availability-zone")
        region = self._fetch_region()
        ssh_keys = self.fetch_ssh_keys()

        attributes: dict[str, str] = {}
        set_attribute(attributes, "EC2_INSTANCE_ID", instance_id)
        set_attribute(attributes, "EC2_IPV4_LOCAL", local)
        set_attribute(attributes, "EC2_IPV4_PUBLIC", public)
        set_attribute(attributes, "EC2_HOSTNAME", hostname)
        set_attribute(attributes, "EC2_AVAILABILITY_ZONE", availability_zone)
        set_attribute(attributes, "EC2_REGION", region)

        return Metadata(
            attributes=attributes,
            hostname=hostname or "",
            ssh_keys=tuple(ssh_keys),
        )

    def _fetch_region(self) -> str | None:
        key = "dynamic/instance-identity/document"
        document = self._fetcher.fetch_json(key)
        if document is None:
            return None
        if not isinstance(document, dict):
            raise ParseError("instance identity document", document, key=key)
        region = document.get("region")
        if region is not None and not isinstance(region, str):
            raise ParseError("region", region, key=key)
        return region or None

    def fetch_ssh_keys(self) -> list[str]:
        """Fetch the body of every distinct key listed under public-keys."""
        key = "meta-data/public-keys"
        listing = self._fetcher.fetch_string(key)
        try:
            indices = unique_key_indices(listing)
        except ParseError as e:
            raise e.with_key(key) from e.__cause__

        keys: list[str] = []
        for index in indices:
            body = self._fetcher.fetch_string(f"meta-data/public-keys/{index}/openssh-key")
            if body is not None:
                keys.append(body)
        return keys
