from __future__ import annotations

import copy
import json
from ipaddress import IPv4Interface, IPv6Interface, ip_address

import pytest
from netaddr import EUI

from bootmeta.errors import ParseError
from bootmeta.providers.digitalocean import DigitalOcean
from bootmeta.providers.digitalocean.config import DIGITALOCEAN_ENDPOINT
from bootmeta.providers.digitalocean.provider import parse_attributes, parse_interfaces

pytestmark = [pytest.mark.unit]

PUBLIC_MAC = "aa:bb:cc:00:00:01"
PRIVATE_MAC = "aa:bb:cc:00:00:02"

DOCUMENT = {
    "droplet_id": 2756294,
    "hostname": "sample-droplet",
    "region": "nyc3",
    "public_keys": ["ssh-rsa AAAA deploy", "ssh-ed25519 BBBB ops"],
    "interfaces": {
        "public": [
            {
                "mac": PUBLIC_MAC,
                "type": "public",
                "ipv4": {
                    "ip_address": "104.131.20.105",
                    "netmask": "255.255.192.0",
                    "gateway": "104.131.0.1",
                },
                "ipv6": {
                    "ip_address": "2604:a880:800:10::7a4:6001",
                    "cidr": 64,
                    "gateway": "2604:a880:800:10::1",
                },
                "anchor_ipv4": {
                    "ip_address": "10.17.0.5",
                    "netmask": "255.255.0.0",
                    "gateway": "10.17.0.1",
                },
            }
        ],
        "private": [
            {
                "mac": PRIVATE_MAC,
                "type": "private",
                "ipv4": {
                    "ip_address": "10.132.255.113",
                    "netmask": "255.255.0.0",
                    "gateway": "10.132.0.1",
                },
            }
        ],
    },
    "dns": {"nameservers": ["2001:4860:4860::8844", "8.8.8.8"]},
}


def document(**changes) -> dict:
    doc = copy.deepcopy(DOCUMENT)
    doc.update(changes)
    return doc


def fetch(serve, fast_retry, doc):
    body = doc if isinstance(doc, (str, int)) else json.dumps(doc)
    serve(DIGITALOCEAN_ENDPOINT, {"": body})
    return DigitalOcean(retry=fast_retry).create_provider().fetch_metadata()


class TestFetchMetadata:
    def test_full_record(self, serve, fast_retry):
        metadata = fetch(serve, fast_retry, DOCUMENT)

        assert metadata.hostname == "sample-droplet"
        assert metadata.ssh_keys == ("ssh-rsa AAAA deploy", "ssh-ed25519 BBBB ops")
        assert metadata.attributes == {
            "DIGITALOCEAN_HOSTNAME": "sample-droplet",
            "DIGITALOCEAN_REGION": "nyc3",
            "DIGITALOCEAN_IPV4_PUBLIC_0": "104.131.20.105",
            "DIGITALOCEAN_IPV6_PUBLIC_0": "2604:a880:800:10::7a4:6001",
            "DIGITALOCEAN_IPV4_ANCHOR_0": "10.17.0.5",
            "DIGITALOCEAN_IPV4_PRIVATE_0": "10.132.255.113",
        }

    def test_network_interfaces(self, serve, fast_retry):
        metadata = fetch(serve, fast_retry, DOCUMENT)
        by_mac = {iface.hardware_address: iface for iface in metadata.network_interfaces}
        assert set(by_mac) == {EUI(PUBLIC_MAC), EUI(PRIVATE_MAC)}

        public = by_mac[EUI(PUBLIC_MAC)]
        assert public.ip_addresses == (
            IPv4Interface("104.131.20.105/18"),
            IPv6Interface("2604:a880:800:10::7a4:6001/64"),
            IPv4Interface("10.17.0.5/16"),
        )
        defaults = [r for r in public.routes if r.is_default]
        assert [r.gateway for r in defaults] == [
            ip_address("104.131.0.1"),
            ip_address("2604:a880:800:10::1"),
        ]
        assert public.nameservers == (ip_address("2001:4860:4860::8844"), ip_address("8.8.8.8"))

        private = by_mac[EUI(PRIVATE_MAC)]
        assert private.ip_addresses == (IPv4Interface("10.132.255.113/16"),)
        assert not any(r.is_default for r in private.routes)

    def test_shared_mac_yields_one_interface(self, serve, fast_retry):
        doc = document()
        doc["interfaces"]["private"][0]["mac"] = PUBLIC_MAC.upper()
        metadata = fetch(serve, fast_retry, doc)

        (iface,) = metadata.network_interfaces
        assert iface.ip_addresses[0] == IPv4Interface("10.132.255.113/16")
        assert len(iface.ip_addresses) == 4

    def test_minimal_document(self, serve, fast_retry):
        metadata = fetch(serve, fast_retry, {"hostname": "bare"})
        assert metadata.attributes == {"DIGITALOCEAN_HOSTNAME": "bare"}
        assert metadata.ssh_keys == ()
        assert metadata.network_interfaces == ()

    def test_absent_document_is_parse_error(self, serve, fast_retry):
        with pytest.raises(ParseError, match="metadata document"):
            fetch(serve, fast_retry, 404)

    @pytest.mark.parametrize("body", ["{truncated", "[1, 2]"])
    def test_undecodable_document(self, serve, fast_retry, body: str):
        with pytest.raises(ParseError):
            fetch(serve, fast_retry, body)

    def test_bad_gateway_aborts(self, serve, fast_retry):
        doc = document()
        doc["interfaces"]["public"][0]["ipv4"]["gateway"] = "not-an-ip"
        with pytest.raises(ParseError, match="gateway address"):
            fetch(serve, fast_retry, doc)

    def test_bad_nameserver_aborts(self, serve, fast_retry):
        with pytest.raises(ParseError, match="nameserver"):
            fetch(serve, fast_retry, document(dns={"nameservers": ["ns1.example"]}))

    def test_public_keys_must_be_strings(self, serve, fast_retry):
        with pytest.raises(ParseError) as exc_info:
            fetch(serve, fast_retry, document(public_keys=[1234]))
        assert exc_info.value.key == "public_keys"

    def test_untyped_public_interface_gets_no_default_route(self, serve, fast_retry):
        doc = document()
        del doc["interfaces"]["public"][0]["type"]
        metadata = fetch(serve, fast_retry, doc)

        by_mac = {iface.hardware_address: iface for iface in metadata.network_interfaces}
        assert not any(r.is_default for r in by_mac[EUI(PUBLIC_MAC)].routes)
        assert metadata.attributes["DIGITALOCEAN_IPV4_PUBLIC_0"] == "104.131.20.105"

    @pytest.mark.parametrize("value", [134744072, 0, True])
    def test_numeric_nameserver_is_rejected(self, serve, fast_retry, value):
        with pytest.raises(ParseError, match="nameserver"):
            fetch(serve, fast_retry, document(dns={"nameservers": [value]}))

    @pytest.mark.parametrize("field", ["ip_address", "gateway"])
    def test_numeric_address_fields_are_rejected(self, serve, fast_retry, field: str):
        doc = document()
        doc["interfaces"]["private"][0]["ipv4"][field] = 167772165
        with pytest.raises(ParseError) as exc_info:
            fetch(serve, fast_retry, doc)
        assert exc_info.value.value == 167772165

    def test_numeric_mac_is_rejected(self, serve, fast_retry):
        doc = document()
        doc["interfaces"]["private"][0]["mac"] = 5
        with pytest.raises(ParseError) as exc_info:
            fetch(serve, fast_retry, doc)
        assert exc_info.value.key == "interfaces.private[0].mac"

    @pytest.mark.parametrize("field", ["hostname", "region"])
    def test_non_string_hostname_and_region_are_rejected(self, serve, fast_retry, field: str):
        with pytest.raises(ParseError) as exc_info:
            fetch(serve, fast_retry, document(**{field: 42}))
        assert exc_info.value.key == field


class TestDecoding:
    def test_only_type_public_marks_interface_public(self):
        raw = [
            {"mac": PUBLIC_MAC, "type": "public"},
            {"mac": PUBLIC_MAC, "type": "private"},
            {"mac": PRIVATE_MAC},
        ]
        flags = [d.public for d in parse_interfaces(raw, "public")]
        assert flags == [True, False, False]

    @pytest.mark.parametrize("field", ["mac", "type"])
    def test_interface_strings_are_checked(self, field: str):
        raw = [{"mac": PUBLIC_MAC, "type": "public", field: 5}]
        with pytest.raises(ParseError) as exc_info:
            parse_interfaces(raw, "public")
        assert exc_info.value.key == f"interfaces.public[0].{field}"

    def test_interface_list_must_be_list(self):
        with pytest.raises(ParseError) as exc_info:
            parse_interfaces({"mac": PUBLIC_MAC}, "private")
        assert exc_info.value.key == "interfaces.private"

    def test_multiple_interfaces_are_numbered(self):
        doc = document()
        second = copy.deepcopy(doc["interfaces"]["private"][0])
        second["ipv4"]["ip_address"] = "10.133.0.9"
        doc["interfaces"]["private"].append(second)
        attributes = parse_attributes(doc)
        assert attributes["DIGITALOCEAN_IPV4_PRIVATE_0"] == "10.132.255.113"
        assert attributes["DIGITALOCEAN_IPV4_PRIVATE_1"] == "10.133.0.9"
