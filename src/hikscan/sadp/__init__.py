"""SADP (Search Active Devices Protocol) discovery and device commands."""

from hikscan.sadp.codec import from_xml, parse_response, to_csv, to_xml, truncate
from hikscan.sadp.commands import COMMANDS, build_command_xml, list_commands
from hikscan.sadp.registry import DeviceRegistry
from hikscan.sadp.scanner import (
    BROADCAST_ADDR,
    DEFAULT_TIMEOUT,
    MAX_PACKET_SIZE,
    MULTICAST_ADDR,
    SADP_PORT,
    SADPScanner,
)

__all__ = [
    "SADPScanner",
    "DeviceRegistry",
    "COMMANDS",
    "build_command_xml",
    "list_commands",
    "parse_response",
    "to_xml",
    "from_xml",
    "to_csv",
    "truncate",
    "MULTICAST_ADDR",
    "SADP_PORT",
    "BROADCAST_ADDR",
    "MAX_PACKET_SIZE",
    "DEFAULT_TIMEOUT",
]
