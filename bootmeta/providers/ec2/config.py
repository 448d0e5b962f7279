"""EC2 provider configuration."""

from __future__ import annotations

import typing
from dataclasses import dataclass, field

from bootmeta.config import RetryConfig

if typing.TYPE_CHECKING:
    from bootmeta.providers.ec2.provider import EC2Provider

EC2_ENDPOINT = "http://169.254.169.254/2009-04-04/"


@dataclass(frozen=True, slots=True)
class EC2:
    """Amazon EC2 instance metadata service.

    Args:
        endpoint: Versioned metadata root every key is appended to.
        retry: Retry Client configuration.
    """

    endpoint: str = EC2_ENDPOINT
    retry: RetryConfig = field(default_factory=RetryConfig)

    @property
    def type(self) -> str: return "ec2"

    def create_provider(self) -> EC2Provider:
        from bootmeta.providers.ec2.provider import EC2Provider
        return EC2Provider.create(self)
