"""Local network interface enumeration."""

import ipaddress
import logging
import socket
from dataclasses import dataclass

import psutil

logger = logging.getLogger("hikscan.network.interfaces")


@dataclass(frozen=True)
class LocalInterface:
    """An IPv4 address bound to a local network adapter."""
    name: str
    ip: str
    netmask: str

    @property
    def broadcast(self) -> str:
        """Subnet-directed broadcast: host bits of ip set to one."""
        network = ipaddress.IPv4Network(f"{self.ip}/{self.netmask}", strict=False)
        return str(network.broadcast_address)


def local_ipv4_interfaces() -> list[LocalInterface]:
    """
    List every IPv4 address on interfaces that are up and not loopback.

    Raises:
        OSError: If the interface table cannot be read
    """
    stats = psutil.net_if_stats()
    result = []

    for name, addrs in psutil.net_if_addrs().items():
        if_stats = stats.get(name)
        if if_stats is None or not if_stats.isup:
            continue

        for addr in addrs:
            if addr.family != socket.AF_INET:
                continue
            ip = ipaddress.IPv4Address(addr.address)
            if ip.is_loopback:
                continue
            result.append(LocalInterface(
                name=name,
                ip=addr.address,
                netmask=addr.netmask or "255.255.255.255",
            ))

    logger.debug(f"Usable interfaces: {[f'{i.name}={i.ip}' for i in result]}")
    return result
