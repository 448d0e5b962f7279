"""OpenStack metadata provider.

For the provider implementation, import explicitly:

    from bootmeta.providers.openstack.provider import OpenStackProvider
"""

from __future__ import annotations

from .config import OpenStack

__all__ = [
    "OpenStack",
]
