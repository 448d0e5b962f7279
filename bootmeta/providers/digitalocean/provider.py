"""DigitalOcean metadata provider.

The droplet metadata service serves the whole record as a single JSON
document, including structured per-interface network data that is turned
into NetworkInterfaces by ``bootmeta.network.synthesize_network``.
"""

from __future__ import annotations

import json
from typing import Any, Self, cast

from loguru import logger

from bootmeta.errors import ParseError
from bootmeta.network import (
    Address,
    InterfaceDescription,
    parse_ip,
    synthesize_network,
)
from bootmeta.providers.common import HTTPProvider
from bootmeta.providers.digitalocean.config import DigitalOcean
from bootmeta.providers.digitalocean.types import (
    AddressResponse,
    InterfaceResponse,
    MetadataResponse,
)
from bootmeta.retry import RetryClient
from bootmeta.ssh_keys import normalize_key_array
from bootmeta.types import Metadata

log = logger.bind(component="digitalocean")

# (field, attribute infix) for the per-interface IP attributes
_PUBLIC_ATTRIBUTES = (
    ("ipv4", "IPV4_PUBLIC"),
    ("ipv6", "IPV6_PUBLIC"),
    ("anchor_ipv4", "IPV4_ANCHOR"),
)
_PRIVATE_ATTRIBUTES = (("ipv4", "IPV4_PRIVATE"), ("ipv6", "IPV6_PRIVATE"))


# =============================================================================
# Document decoding (pure functions)
# =============================================================================


def _string(raw: Any, where: str) -> str | None:
    if raw is not None and not isinstance(raw, str):
        raise ParseError("string", raw, key=where)
    return raw


def _address(raw: Any, where: str) -> Address | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ParseError("address object", raw, key=where)
    raw = cast(AddressResponse, raw)
    return Address(
        ip_address=raw.get("ip_address", ""),
        gateway=raw.get("gateway", ""),
        netmask=raw.get("netmask"),
        cidr=raw.get("cidr"),
    )


def parse_interfaces(raw: Any, bucket: str) -> list[InterfaceDescription]:
    """Decode one interface bucket ("public" or "private")."""
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ParseError("interface list", raw, key=f"interfaces.{bucket}")

    descriptions: list[InterfaceDescription] = []
    for i, iface in enumerate(raw):
        where = f"interfaces.{bucket}[{i}]"
        if not isinstance(iface, dict):
            raise ParseError("interface object", iface, key=where)
        iface = cast(InterfaceResponse, iface)
        descriptions.append(
            InterfaceDescription(
                mac=_string(iface.get("mac"), f"{where}.mac") or "",
                public=_string(iface.get("type"), f"{where}.type") == "public",
                ipv4=_address(iface.get("ipv4"), f"{where}.ipv4"),
                ipv6=_address(iface.get("ipv6"), f"{where}.ipv6"),
                anchor_ipv4=_address(iface.get("anchor_ipv4"), f"{where}.anchor_ipv4"),
            )
        )
    return descriptions


def parse_attributes(document: MetadataResponse) -> dict[str, str]:
    attributes: dict[str, str] = {}
    hostname = _string(document.get("hostname"), "hostname")
    if hostname:
        attributes["DIGITALOCEAN_HOSTNAME"] = hostname
    region = _string(document.get("region"), "region")
    if region:
        attributes["DIGITALOCEAN_REGION"] = region

    interfaces = document.get("interfaces") or {}
    buckets = (
        ("public", _PUBLIC_ATTRIBUTES),
        ("private", _PRIVATE_ATTRIBUTES),
    )
    for bucket, fields in buckets:
        for i, iface in enumerate(interfaces.get(bucket) or []):
            for field, infix in fields:
                address = iface.get(field)
                if address is None:
                    continue
                ip = parse_ip(address.get("ip_address"), "IP address")
                attributes[f"DIGITALOCEAN_{infix}_{i}"] = str(ip)
    return attributes


# =============================================================================
# Provider
# =============================================================================


class DigitalOceanProvider(HTTPProvider):
    def __init__(self, client: RetryClient, url: str) -> None:
        self._client = client
        self._url = url

    @classmethod
    def create(cls, config: DigitalOcean) -> Self:
        return cls(RetryClient(config.retry), config.endpoint)

    def fetch_document(self) -> MetadataResponse:
        body = self._client.get(self._url)
        if body is None:
            raise ParseError("metadata document", None, key=self._url)
        try:
            document = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError("JSON document", body, key=self._url) from e
        if not isinstance(document, dict):
            raise ParseError("metadata document", document, key=self._url)
        return cast(MetadataResponse, document)

    def fetch_metadata(self) -> Metadata:
        log.debug("Fetching DigitalOcean metadata from {url}", url=self._url)
        document = self.fetch_document()

        interfaces = document.get("interfaces") or {}
        if not isinstance(interfaces, dict):
            raise ParseError("interfaces object", interfaces, key="interfaces")
        private = parse_interfaces(interfaces.get("private"), "private")
        public = parse_interfaces(interfaces.get("public"), "public")
        dns = document.get("dns") or {}
        if not isinstance(dns, dict):
            raise ParseError("dns object", dns, key="dns")
        nameservers = dns.get("nameservers") or []

        network = synthesize_network(private, public, nameservers)

        try:
            ssh_keys = normalize_key_array(document.get("public_keys"))
        except ParseError as e:
            raise e.with_key("public_keys") from e.__cause__

        attributes = parse_attributes(document)
        return Metadata(
            attributes=attributes,
            hostname=attributes.get("DIGITALOCEAN_HOSTNAME", ""),
            ssh_keys=tuple(ssh_keys),
            network_interfaces=network,
        )
