"""GCE provider configuration."""

from __future__ import annotations

import typing
from dataclasses import dataclass, field

from bootmeta.config import RetryConfig

if typing.TYPE_CHECKING:
    from bootmeta.providers.gce.provider import GCEProvider

GCE_ENDPOINT = "http://metadata.google.internal/computeMetadata/v1/"
GCE_HEADERS = {"Metadata-Flavor": "Google"}


@dataclass(frozen=True, slots=True)
class GCE:
    """Google Compute Engine metadata server.

    Every request carries ``Metadata-Flavor: Google``; the server rejects
    requests without it.

    Args:
        endpoint: Metadata root every key is appended to.
        retry: Retry Client configuration.
    """

    endpoint: str = GCE_ENDPOINT
    retry: RetryConfig = field(default_factory=RetryConfig)

    @property
    def type(self) -> str: return "gce"

    def create_provider(self) -> GCEProvider:
        from bootmeta.providers.gce.provider import GCEProvider
        return GCEProvider.create(self)
