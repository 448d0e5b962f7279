"""Fetch Metadata Example.

Fetches the instance metadata for the given provider and prints it the way
a boot-time unit would consume it: one NAME=value line per attribute,
followed by the SSH keys and network interfaces.

Usage:
    python examples/01_fetch_metadata.py ec2
"""

import sys

import bootmeta

if __name__ == "__main__":
    name = sys.argv[1] if len(sys.argv) > 1 else "ec2"

    bootmeta.setup_logging(bootmeta.LogConfig(level="DEBUG"))
    with bootmeta.get_metadata_provider(name, bootmeta.load_config()) as provider:
        metadata = provider.fetch_metadata()

    for key, value in sorted(metadata.attributes.items()):
        print(f"{key}={value}")

    print(f"\nhostname: {metadata.hostname or '-'}")
    for key in metadata.ssh_keys:
        print(f"ssh key: {key}")

    for iface in metadata.network_interfaces:
        print(f"\ninterface {iface.hardware_address}")
        for address in iface.ip_addresses:
            print(f"  address {address}")
        for route in iface.routes:
            print(f"  route {route.destination} via {route.gateway}")
        for ns in iface.nameservers:
            print(f"  nameserver {ns}")
