"""Normalized metadata record shared by every provider."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeAlias
from ipaddress import IPv4Address, IPv4Interface, IPv6Address, IPv6Interface

from netaddr import EUI

__all__ = [
    "IPAddress",
    "IPInterface",
    "Route",
    "NetworkInterface",
    "Metadata",
]

IPAddress: TypeAlias = IPv4Address | IPv6Address
IPInterface: TypeAlias = IPv4Interface | IPv6Interface


@dataclass(frozen=True, slots=True)
class Route:
    """Routing entry: reach ``destination`` via ``gateway``.

    The destination keeps the host bits of the address it was derived from,
    e.g. ``10.0.0.5/16``; ``destination.network`` gives the masked form.
    """

    destination: IPInterface
    gateway: IPAddress

    @property
    def is_default(self) -> bool:
        return self.destination.network.prefixlen == 0


@dataclass(frozen=True, slots=True)
class NetworkInterface:
    """One interface per distinct hardware address.

    Attributes:
        hardware_address: 48-bit MAC address identifying the interface.
        nameservers: Nameservers, shared by every interface of one fetch.
        ip_addresses: Addresses with their prefix lengths, in discovery order.
        routes: Routes, in discovery order.
    """

    hardware_address: EUI
    nameservers: tuple[IPAddress, ...] = ()
    ip_addresses: tuple[IPInterface, ...] = ()
    routes: tuple[Route, ...] = ()


@dataclass(frozen=True, slots=True)
class Metadata:
    """Instance metadata as returned by ``MetadataProvider.fetch_metadata``.

    Attributes:
        attributes: Provider-specific environment variable name to value.
            Absent values are omitted, never stored as empty strings.
        hostname: Instance hostname, may be empty.
        ssh_keys: Public keys in provider-reported order.
        network_interfaces: Interfaces, one per hardware address. Order is
            not significant.
    """

    attributes: dict[str, str] = field(default_factory=dict)
    hostname: str = ""
    ssh_keys: tuple[str, ...] = ()
    network_interfaces: tuple[NetworkInterface, ...] = ()
