"""Amazon EC2 instance metadata provider.

For the provider implementation, import explicitly:

    from bootmeta.providers.ec2.provider import EC2Provider
"""

from __future__ import annotations

from .config import EC2

__all__ = [
    "EC2",
]
