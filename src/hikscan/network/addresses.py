"""
Address and MAC helpers: CIDR expansion, MAC validation, vendor OUI
matching and host liveness probing.
"""

import asyncio
import ipaddress
import logging
import platform
import string

from hikscan.exceptions import AddressError

logger = logging.getLogger("hikscan.network.addresses")


# OUI prefixes assigned to Hikvision
HIKVISION_OUIS = frozenset({
    "00:0d:c5",
    "28:57:be",
    "44:19:b6",
    "54:c4:15",
    "80:cc:9c",
    "a4:14:37",
    "bc:ad:28",
    "c0:56:e3",
    "c4:2f:90",
    "e0:2f:6d",
    "f4:52:14",
    "48:40:a9",
    "8c:e7:48",
    "4c:bd:8f",
    "18:68:cb",
    "44:47:cc",
    "e4:24:6c",
})

# Ports tried before falling back to ICMP
LIVENESS_PORTS = (80, 443, 8000, 8080, 554)


def expand_cidr(cidr: str) -> list[str]:
    """
    Expand a CIDR range into its addresses, in ascending order.

    When the range has 8 or fewer host bits, the network and broadcast
    addresses are skipped (ranges of one or two addresses are kept whole).
    A bare address expands to itself.

    Raises:
        AddressError: If the input is neither a CIDR range nor an address
    """
    cidr = cidr.strip()
    if "/" not in cidr:
        try:
            ipaddress.ip_address(cidr)
        except ValueError as e:
            raise AddressError(f"invalid CIDR address: {cidr}") from e
        return [cidr]

    try:
        network = ipaddress.ip_network(cidr, strict=False)
    except ValueError as e:
        raise AddressError(f"invalid CIDR address: {cidr}") from e

    host_bits = network.max_prefixlen - network.prefixlen
    skip_edges = host_bits <= 8 and network.num_addresses > 2

    ips = []
    for addr in network:
        if skip_edges and addr in (network.network_address, network.broadcast_address):
            continue
        ips.append(str(addr))
    return ips


def normalize_mac(mac: str) -> str:
    """Uppercase a MAC address and use colon separators."""
    return mac.strip().upper().replace("-", ":")


def is_valid_mac(mac: str) -> bool:
    """Check for exactly six colon- or dash-separated two-digit hex groups."""
    parts = mac.replace("-", ":").split(":")
    if len(parts) != 6:
        return False
    return all(
        len(part) == 2 and all(c in string.hexdigits for c in part)
        for part in parts
    )


def is_hikvision_mac(mac: str) -> bool:
    """Check whether a MAC address carries a Hikvision OUI."""
    parts = mac.lower().replace("-", ":").split(":")
    if len(parts) < 3:
        return False
    return ":".join(parts[:3]) in HIKVISION_OUIS


async def is_host_alive(ip: str, timeout: float) -> bool:
    """
    Check whether a host is reachable.

    Tries a TCP connect on each of LIVENESS_PORTS, then falls back to ping.
    """
    for port in LIVENESS_PORTS:
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(ip, port),
                timeout=timeout,
            )
        except (OSError, asyncio.TimeoutError):
            continue
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass
        return True

    return await ping_host(ip, timeout)


def _ping_command(ip: str) -> list[str] | None:
    system = platform.system()
    if system in ("Linux", "Darwin"):
        return ["ping", "-c", "1", "-W", "1", ip]
    if system == "Windows":
        return ["ping", "-n", "1", "-w", "1000", ip]
    return None


async def ping_host(ip: str, timeout: float) -> bool:
    """Send one ICMP echo; the ping process is killed if it outlives timeout."""
    cmd = _ping_command(ip)
    if cmd is None:
        return False

    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
    except OSError as e:
        logger.debug(f"ping unavailable: {e}")
        return False

    try:
        returncode = await asyncio.wait_for(proc.wait(), timeout=timeout)
    except asyncio.TimeoutError:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
        await proc.wait()
        return False

    return returncode == 0
