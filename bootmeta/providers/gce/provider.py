"""GCE metadata provider.

The GCE metadata server answers 200 with an empty body for attributes that
are not set, so empty bodies are treated as absent.
"""

from __future__ import annotations

from typing import Self

from loguru import logger

from bootmeta.errors import ParseError
from bootmeta.providers.common import HTTPProvider, KeyFetcher, set_attribute
from bootmeta.providers.gce.config import GCE, GCE_HEADERS
from bootmeta.retry import RetryClient
from bootmeta.ssh_keys import parse_colon_listing
from bootmeta.types import Metadata

log = logger.bind(component="gce")

_TRUE_VALUES = frozenset({"1", "t", "true"})


def parse_bool(value: str | None) -> bool:
    return value is not None and value.strip().lower() in _TRUE_VALUES


class GCEProvider(HTTPProvider):
    def __init__(self, fetcher: KeyFetcher) -> None:
        self._fetcher = fetcher
        self._client = fetcher.client

    @classmethod
    def create(cls, config: GCE) -> Self:
        client = RetryClient(config.retry, headers=GCE_HEADERS)
        return cls(KeyFetcher(client, config.endpoint, empty_is_absent=True))

    def fetch_metadata(self) -> Metadata:
        fetch = self._fetcher
        log.debug("Fetching GCE metadata from {url}", url=fetch.base_url)

        public = fetch.fetch_ip("instance/network-interfaces/0/access-configs/0/external-ip")
        local = fetch.fetch_ip("instance/network-interfaces/0/ip")
        hostname = fetch.fetch_string("instance/hostname")
        ssh_keys = self.fetch_ssh_keys()

        attributes: dict[str, str] = {}
        set_attribute(attributes, "GCE_IP_LOCAL_0", local)
        set_attribute(attributes, "GCE_IP_EXTERNAL_0", public)
        set_attribute(attributes, "GCE_HOSTNAME", hostname)

        return Metadata(
            attributes=attributes,
            hostname=hostname or "",
            ssh_keys=tuple(ssh_keys),
        )

    def _fetch_keys(self, key: str) -> list[str] | None:
        """Keys listed under ``key``, or None when the attribute is unset."""
        listing = self._fetcher.fetch_string(key)
        if listing is None:
            return None
        try:
            return parse_colon_listing(listing)
        except ParseError as e:
            raise e.with_key(key) from e.__cause__

    def fetch_ssh_keys(self) -> list[str]:
        """Collect instance and project keys.

        The deprecated instance ``sshKeys`` attribute, when set, replaces
        everything else. Project keys are skipped when the instance sets
        ``block-project-ssh-keys``.
        """
        deprecated = self._fetch_keys("instance/attributes/sshKeys")
        if deprecated is not None:
            log.debug("Using deprecated instance sshKeys attribute")
            return deprecated

        instance_keys = self._fetch_keys("instance/attributes/ssh-keys") or []

        block = self._fetcher.fetch_string("instance/attributes/block-project-ssh-keys")
        if parse_bool(block):
            log.debug("Project SSH keys blocked for this instance")
            return instance_keys

        project_keys = self._fetch_keys("project/attributes/sshKeys") or []
        return instance_keys + project_keys
