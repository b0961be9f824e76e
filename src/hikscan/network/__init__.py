"""Address helpers, ARP discovery and the raw HTTP client."""

from hikscan.network.addresses import (
    HIKVISION_OUIS,
    expand_cidr,
    is_hikvision_mac,
    is_host_alive,
    is_valid_mac,
    normalize_mac,
    ping_host,
)
from hikscan.network.arp import get_arp_table, parse_arp_line
from hikscan.network.discovery import ArpDevice, discover_devices
from hikscan.network.http import HTTPClient, HTTPResponse, parse_http_response
from hikscan.network.interfaces import LocalInterface, local_ipv4_interfaces

__all__ = [
    # Addresses
    "HIKVISION_OUIS",
    "expand_cidr",
    "is_hikvision_mac",
    "is_host_alive",
    "is_valid_mac",
    "normalize_mac",
    "ping_host",
    # ARP
    "get_arp_table",
    "parse_arp_line",
    "ArpDevice",
    "discover_devices",
    # HTTP
    "HTTPClient",
    "HTTPResponse",
    "parse_http_response",
    # Interfaces
    "LocalInterface",
    "local_ipv4_interfaces",
]
