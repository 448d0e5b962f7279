"""OpenStack provider configuration."""

from __future__ import annotations

import typing
from dataclasses import dataclass, field

from bootmeta.config import RetryConfig

if typing.TYPE_CHECKING:
    from bootmeta.providers.openstack.provider import OpenStackProvider

OPENSTACK_ENDPOINT = "http://169.254.169.254/latest/meta-data/"


@dataclass(frozen=True, slots=True)
class OpenStack:
    """OpenStack EC2-compatible metadata service.

    Args:
        endpoint: Metadata root every key is appended to.
        retry: Retry Client configuration.
    """

    endpoint: str = OPENSTACK_ENDPOINT
    retry: RetryConfig = field(default_factory=RetryConfig)

    @property
    def type(self) -> str: return "openstack-metadata"

    def create_provider(self) -> OpenStackProvider:
        from bootmeta.providers.openstack.provider import OpenStackProvider
        return OpenStackProvider.create(self)
