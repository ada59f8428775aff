"""
SysGuard Check: Device IP

Lists the IPv4 addresses of every network interface except loopback.
Informational only.
"""

from sysguard.core.check import BaseCheck
from sysguard.core.facts import CollectionFailure, FactCollector, InterfaceAddress


LOOPBACK_ADDRESS = "127.0.0.1"


def collect_ipv4(addresses: list[InterfaceAddress]) -> list[str]:
    """Keep IPv4 addresses, dropping the loopback address.

    Args:
        addresses: Addresses of all interfaces

    Returns:
        IPv4 address strings in interface order
    """
    return [
        entry.address.strip()
        for entry in addresses
        if entry.family == "IPv4" and entry.address.strip() != LOOPBACK_ADDRESS
    ]


class IPCheck(BaseCheck):
    """Record the device's IPv4 addresses."""

    id = "ip"
    name = "Device IP"
    description = "Lists non-loopback IPv4 addresses of all network interfaces"
    title_key = "A5"
    title = "Device IP"
    keys = ("A5", "B5")

    def evaluate(self, collector: FactCollector) -> dict[str, str]:
        try:
            addresses = collector.interface_addresses()
        except CollectionFailure as e:
            self.fact_unavailable(e)
            addresses = []

        return {"B5": ";".join(collect_ipv4(addresses))}
