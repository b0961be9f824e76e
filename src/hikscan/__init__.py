"""
hikscan - Hikvision device discovery and management.

Finds devices through ARP correlation and the vendor's SADP multicast
protocol, and sends SADP management commands.
"""

__version__ = "0.1.0"

from hikscan.exceptions import (
    CommandError,
    HikscanError,
    MissingFieldError,
    SADPTimeoutError,
    TransportError,
    UnknownCommandError,
)
from hikscan.models import Command, Device, SendOptions
from hikscan.sadp import SADPScanner, build_command_xml, list_commands

__all__ = [
    "__version__",
    "SADPScanner",
    "build_command_xml",
    "list_commands",
    "Device",
    "Command",
    "SendOptions",
    "HikscanError",
    "CommandError",
    "UnknownCommandError",
    "MissingFieldError",
    "TransportError",
    "SADPTimeoutError",
]
