"""DigitalOcean droplet metadata provider.

For the provider implementation, import explicitly:

    from bootmeta.providers.digitalocean.provider import DigitalOceanProvider
"""

from __future__ import annotations

from .config import DigitalOcean

__all__ = [
    "DigitalOcean",
]
