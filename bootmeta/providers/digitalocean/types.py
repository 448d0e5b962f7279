"""DigitalOcean metadata document types.

TypedDicts for the v1.json document - no conversion needed.
"""

from __future__ import annotations

from typing import NotRequired, TypedDict


class AddressResponse(TypedDict):
    ip_address: str
    gateway: str
    netmask: NotRequired[str]  # IPv4 only
    cidr: NotRequired[int]  # IPv6 only


class InterfaceResponse(TypedDict):
    mac: str
    type: str  # "public" or "private"
    ipv4: NotRequired[AddressResponse]
    ipv6: NotRequired[AddressResponse]
    anchor_ipv4: NotRequired[AddressResponse]


class InterfacesResponse(TypedDict):
    public: NotRequired[list[InterfaceResponse]]
    private: NotRequired[list[InterfaceResponse]]


class DNSResponse(TypedDict):
    nameservers: list[str]


class MetadataResponse(TypedDict):
    droplet_id: NotRequired[int]
    hostname: NotRequired[str]
    region: NotRequired[str]
    public_keys: NotRequired[list[str]]
    interfaces: NotRequired[InterfacesResponse]
    dns: NotRequired[DNSResponse]
