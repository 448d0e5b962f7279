"""bootmeta - normalized cloud instance metadata for boot-time configuration.

Example:

    from bootmeta import get_metadata_provider, load_config

    with get_metadata_provider("digitalocean", load_config()) as provider:
        metadata = provider.fetch_metadata()

    for name, value in metadata.attributes.items():
        print(f"{name}={value}")
"""

from bootmeta.config import RetryConfig, load_config
from bootmeta.errors import (
    MetadataError,
    ParseError,
    TransportExhausted,
    UnexpectedStatus,
    UnknownProviderError,
)
from bootmeta.logging import LogConfig, setup_logging, teardown_logging
from bootmeta.providers import MetadataProvider, get_metadata_provider
from bootmeta.retry import RetryClient
from bootmeta.types import Metadata, NetworkInterface, Route

__version__ = "0.1.0"

__all__ = [
    "LogConfig",
    "Metadata",
    "MetadataError",
    "MetadataProvider",
    "NetworkInterface",
    "ParseError",
    "RetryClient",
    "RetryConfig",
    "Route",
    "TransportExhausted",
    "UnexpectedStatus",
    "UnknownProviderError",
    "get_metadata_provider",
    "load_config",
    "setup_logging",
    "teardown_logging",
]
