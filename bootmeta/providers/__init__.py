"""Cloud metadata providers for bootmeta.

NOTE: Only config classes are imported at package level. Provider
implementations are loaded on demand by the registry:

    from bootmeta.providers import get_metadata_provider

    with get_metadata_provider("gce") as provider:
        metadata = provider.fetch_metadata()
"""

from bootmeta.providers.digitalocean import DigitalOcean
from bootmeta.providers.ec2 import EC2
from bootmeta.providers.gce import GCE
from bootmeta.providers.openstack import OpenStack
from bootmeta.providers.provider import MetadataProvider
from bootmeta.providers.registry import PROVIDER_NAMES, get_metadata_provider

__all__ = [
    "PROVIDER_NAMES",
    "DigitalOcean",
    "EC2",
    "GCE",
    "MetadataProvider",
    "OpenStack",
    "get_metadata_provider",
]
