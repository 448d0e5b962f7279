"""OpenStack metadata provider (EC2-compatible meta-data tree)."""

from __future__ import annotations

from typing import Self

from loguru import logger

from bootmeta.errors import ParseError
from bootmeta.providers.common import HTTPProvider, KeyFetcher, set_attribute
from bootmeta.providers.openstack.config import OpenStack
from bootmeta.retry import RetryClient
from bootmeta.ssh_keys import first_key_index
from bootmeta.types import Metadata

log = logger.bind(component="openstack")


class OpenStackProvider(HTTPProvider):
    def __init__(self, fetcher: KeyFetcher) -> None:
        self._fetcher = fetcher
        self._client = fetcher.client

    @classmethod
    def create(cls, config: OpenStack) -> Self:
        # unset values come back as empty strings
        fetcher = KeyFetcher(RetryClient(config.retry), config.endpoint, empty_is_absent=True)
        return cls(fetcher)

    def fetch_metadata(self) -> Metadata:
        fetch = self._fetcher
        log.debug("Fetching OpenStack metadata from {url}", url=fetch.base_url)

        instance_id = fetch.fetch_string("instance-id")
        local = fetch.fetch_ip("local-ipv4")
        public = fetch.fetch_ip("public-ipv4")
        hostname = fetch.fetch_string("hostname")
        ssh_keys = self.fetch_ssh_keys()

        attributes: dict[str, str] = {}
        set_attribute(attributes, "OPENSTACK_INSTANCE_ID", instance_id)
        set_attribute(attributes, "OPENSTACK_IPV4_LOCAL", local)
        set_attribute(attributes, "OPENSTACK_IPV4_PUBLIC", public)
        set_attribute(attributes, "OPENSTACK_HOSTNAME", hostname)

        return Metadata(
            attributes=attributes,
            hostname=hostname or "",
            ssh_keys=tuple(ssh_keys),
        )

    def fetch_ssh_keys(self) -> list[str]:
        """Fetch the first listed key; the meta-data tree only serves that one."""
        key = "public-keys"
        listing = self._fetcher.fetch_string(key)
        try:
            index = first_key_index(listing)
        except ParseError as e:
            raise e.with_key(key) from e.__cause__
        if index is None:
            return []

        key_path = f"public-keys/{index}/openssh-key"
        body = self._fetcher.fetch_string(key_path)
        if not body:
            raise ParseError("OpenSSH public key", body, key=key_path)
        return [body]
