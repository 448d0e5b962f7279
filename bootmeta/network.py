"""Network configuration synthesis.

Converts provider-native interface descriptions (address, netmask or
prefix, gateway per address family, plus a hardware address and a
public/private flag) into the canonical NetworkInterface set.

Descriptions are folded in order, private before public, into an
accumulator keyed by hardware address. Two descriptions sharing a MAC are
merged by concatenating their address and route lists; nothing is
deduplicated.

Every parse failure is fatal: a bad nameserver, MAC, address, mask or
gateway aborts the whole synthesis with ParseError.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from ipaddress import (
    IPv4Address,
    IPv4Interface,
    IPv6Address,
    IPv6Interface,
    ip_address,
)

from loguru import logger
from netaddr import EUI, AddrFormatError

from bootmeta.errors import ParseError
from bootmeta.types import IPAddress, IPInterface, NetworkInterface, Route

log = logger.bind(component="network")

IPV4_DEFAULT = IPv4Interface("0.0.0.0/0")
IPV6_DEFAULT = IPv6Interface("::/0")


# =============================================================================
# Provider-native input
# =============================================================================


@dataclass(frozen=True, slots=True)
class Address:
    """An address as reported by the provider, before validation.

    IPv4 addresses carry a dotted ``netmask``; IPv6 addresses carry a
    ``cidr`` prefix length.
    """

    ip_address: str
    gateway: str
    netmask: str | None = None
    cidr: int | None = None


@dataclass(frozen=True, slots=True)
class InterfaceDescription:
    """One interface entry as reported by the provider."""

    mac: str
    public: bool = False
    ipv4: Address | None = None
    ipv6: Address | None = None
    anchor_ipv4: Address | None = None


# =============================================================================
# Parsing helpers (pure functions)
# =============================================================================


def parse_ip(value: str | None, what: str) -> IPAddress:
    # ipaddress also accepts integers
    if not isinstance(value, str):
        raise ParseError(what, value)
    try:
        return ip_address(value)
    except ValueError as e:
        raise ParseError(what, value) from e


def parse_nameservers(servers: Iterable[str]) -> tuple[IPAddress, ...]:
    return tuple(parse_ip(server, "nameserver IP address") for server in servers)


def parse_mac(value: str) -> EUI:
    """Parse a 48-bit hardware address in any common notation."""
    if not isinstance(value, str):
        raise ParseError("MAC address", value)
    try:
        mac = EUI(value)
    except (AddrFormatError, TypeError, ValueError) as e:
        raise ParseError("MAC address", value) from e
    if mac.version != 48:
        raise ParseError("MAC address", value)
    return mac


def netmask_prefix(netmask: str | None) -> int:
    """Convert a dotted IPv4 netmask into its prefix length.

    Only contiguous masks are accepted; "255.255.0.255" is a ParseError.
    """
    mask = parse_ip(netmask, "IPv4 netmask")
    if not isinstance(mask, IPv4Address):
        raise ParseError("IPv4 netmask", netmask)
    bits = int(mask)
    prefix = bin(bits).count("1")
    if bits != (0xFFFFFFFF << (32 - prefix)) & 0xFFFFFFFF:
        raise ParseError("IPv4 netmask", netmask)
    return prefix


def parse_ipv4_address(address: Address) -> IPv4Interface:
    ip = parse_ip(address.ip_address, "IPv4 address")
    if not isinstance(ip, IPv4Address):
        raise ParseError("IPv4 address", address.ip_address)
    return IPv4Interface((ip, netmask_prefix(address.netmask)))


def parse_ipv6_address(address: Address) -> IPv6Interface:
    ip = parse_ip(address.ip_address, "IPv6 address")
    if not isinstance(ip, IPv6Address):
        raise ParseError("IPv6 address", address.ip_address)
    cidr = address.cidr
    if isinstance(cidr, bool) or not isinstance(cidr, int) or not 0 <= cidr <= 128:
        raise ParseError("IPv6 prefix length", cidr)
    return IPv6Interface((ip, cidr))


def parse_route(gateway: str | None, destination: IPInterface) -> Route:
    return Route(destination=destination, gateway=parse_ip(gateway, "gateway address"))


def default_route(destination: IPInterface, gateway: IPAddress) -> Route:
    default = IPV4_DEFAULT if destination.version == 4 else IPV6_DEFAULT
    return Route(destination=default, gateway=gateway)


# =============================================================================
# Synthesis
# =============================================================================


@dataclass(frozen=True, slots=True)
class InterfaceEntry:
    """Addresses and routes gathered for one hardware address."""

    hardware_address: EUI
    ip_addresses: tuple[IPInterface, ...] = ()
    routes: tuple[Route, ...] = ()

    def merge(self, other: InterfaceEntry) -> InterfaceEntry:
        """Append ``other``'s lists after this entry's lists."""
        return InterfaceEntry(
            hardware_address=self.hardware_address,
            ip_addresses=self.ip_addresses + other.ip_addresses,
            routes=self.routes + other.routes,
        )


def parse_interface(description: InterfaceDescription) -> InterfaceEntry:
    """Parse one description into its own addresses and routes.

    Public IPv4/IPv6 addresses additionally get a default route through
    their gateway. Anchor addresses never do.
    """
    mac = parse_mac(description.mac)
    addresses: list[IPInterface] = []
    routes: list[Route] = []

    families = (
        (description.ipv4, parse_ipv4_address, description.public),
        (description.ipv6, parse_ipv6_address, description.public),
        (description.anchor_ipv4, parse_ipv4_address, False),
    )
    for address, parse, with_default in families:
        if address is None:
            continue
        addr = parse(address)
        route = parse_route(address.gateway, addr)
        addresses.append(addr)
        routes.append(route)
        if with_default:
            routes.append(default_route(addr, route.gateway))

    return InterfaceEntry(mac, tuple(addresses), tuple(routes))


def fold_interfaces(
    descriptions: Iterable[InterfaceDescription],
) -> dict[EUI, InterfaceEntry]:
    """Fold descriptions, in order, into one entry per hardware address."""
    entries: dict[EUI, InterfaceEntry] = {}
    for description in descriptions:
        entry = parse_interface(description)
        existing = entries.get(entry.hardware_address)
        if existing is not None:
            log.debug("Merging duplicate interface {mac}", mac=entry.hardware_address)
            entry = existing.merge(entry)
        entries[entry.hardware_address] = entry
    return entries


def synthesize_network(
    private: Sequence[InterfaceDescription],
    public: Sequence[InterfaceDescription],
    nameservers: Iterable[str],
) -> tuple[NetworkInterface, ...]:
    """Build the canonical interface set from provider descriptions.

    Args:
        private: Private interface descriptions, processed first.
        public: Public interface descriptions, processed after.
        nameservers: Nameserver IP strings shared by every interface.

    Returns:
        One NetworkInterface per hardware address that ended up with at
        least one address. Order is not significant.

    Raises:
        ParseError: Any nameserver, MAC, address, mask or gateway is invalid.
    """
    servers = parse_nameservers(nameservers)
    entries = fold_interfaces([*private, *public])

    interfaces = tuple(
        NetworkInterface(
            hardware_address=entry.hardware_address,
            nameservers=servers,
            ip_addresses=entry.ip_addresses,
            routes=entry.routes,
        )
        for entry in entries.values()
        if entry.ip_addresses
    )
    log.debug(
        "Synthesized {n} interfaces from {m} descriptions",
        n=len(interfaces), m=len(private) + len(public),
    )
    return interfaces
