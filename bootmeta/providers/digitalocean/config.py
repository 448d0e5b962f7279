"""DigitalOcean provider configuration."""

from __future__ import annotations

import typing
from dataclasses import dataclass, field

from bootmeta.config import RetryConfig

if typing.TYPE_CHECKING:
    from bootmeta.providers.digitalocean.provider import DigitalOceanProvider

DIGITALOCEAN_ENDPOINT = "http://169.254.169.254/metadata/v1.json"


@dataclass(frozen=True, slots=True)
class DigitalOcean:
    """DigitalOcean droplet metadata service.

    The whole record is one JSON document, so ``endpoint`` is the full
    document URL rather than a root.

    Args:
        endpoint: URL of the metadata JSON document.
        retry: Retry Client configuration.
    """

    endpoint: str = DIGITALOCEAN_ENDPOINT
    retry: RetryConfig = field(default_factory=RetryConfig)

    @property
    def type(self) -> str: return "digitalocean"

    def create_provider(self) -> DigitalOceanProvider:
        from bootmeta.providers.digitalocean.provider import DigitalOceanProvider
        return DigitalOceanProvider.create(self)
