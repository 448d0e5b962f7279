"""Google Compute Engine metadata provider.

For the provider implementation, import explicitly:

    from bootmeta.providers.gce.provider import GCEProvider
"""

from __future__ import annotations

from .config import GCE

__all__ = [
    "GCE",
]
