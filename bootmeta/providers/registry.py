"""Provider lookup by name.

Maps the provider names accepted on the command line of the embedding
program to their configuration classes, and builds a ready provider from
the merged TOML configuration.

Provider modules are imported lazily, only for the provider requested.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeAlias

from loguru import logger

from bootmeta.config import RawConfig, provider_section, retry_config
from bootmeta.errors import UnknownProviderError
from bootmeta.providers.provider import MetadataProvider

if TYPE_CHECKING:
    from .digitalocean.config import DigitalOcean
    from .ec2.config import EC2
    from .gce.config import GCE
    from .openstack.config import OpenStack

    ProviderConfig: TypeAlias = DigitalOcean | EC2 | GCE | OpenStack

log = logger.bind(component="registry")

PROVIDER_NAMES = ("digitalocean", "ec2", "gce", "openstack-metadata")


def _get_provider_map() -> dict[str, type]:
    from .digitalocean.config import DigitalOcean
    from .ec2.config import EC2
    from .gce.config import GCE
    from .openstack.config import OpenStack

    return {
        "digitalocean": DigitalOcean,
        "ec2": EC2,
        "gce": GCE,
        "openstack-metadata": OpenStack,
    }


def build_provider_config(name: str, config: RawConfig | None = None) -> ProviderConfig:
    """Build the configuration object for provider ``name``.

    Raises:
        UnknownProviderError: ``name`` is not a known provider.
        ValueError: The configuration holds unknown or invalid settings.
    """
    cls = _get_provider_map().get(name)
    if cls is None:
        raise UnknownProviderError(name)

    section = provider_section(name, config or {})
    kwargs = {"retry": retry_config(section)}
    if "endpoint" in section:
        kwargs["endpoint"] = section["endpoint"]
    return cls(**kwargs)


def get_metadata_provider(name: str, config: RawConfig | None = None) -> MetadataProvider:
    """Create the metadata provider registered under ``name``."""
    provider_config = build_provider_config(name, config)
    log.debug(
        "Creating provider {name} for {config_type}",
        name=name, config_type=type(provider_config).__name__,
    )
    return provider_config.create_provider()
