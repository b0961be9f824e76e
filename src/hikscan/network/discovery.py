"""
ARP-correlation discovery.

Probes every address in a range for liveness, then matches the live hosts
against the system ARP table and keeps the ones with a Hikvision OUI.
"""

import asyncio
import logging
import subprocess
from dataclasses import dataclass

from hikscan.network.addresses import is_hikvision_mac, is_host_alive
from hikscan.network.arp import get_arp_table

_default_logger = logging.getLogger("hikscan.network.discovery")


@dataclass
class ArpDevice:
    """A Hikvision device found through the ARP table."""
    ip: str
    mac: str


async def sweep_alive_hosts(
    ips: list[str],
    workers: int,
    timeout: float,
) -> list[str]:
    """Return the live addresses from ips, preserving input order."""
    semaphore = asyncio.Semaphore(max(1, workers))

    async def probe(ip: str) -> bool:
        async with semaphore:
            return await is_host_alive(ip, timeout)

    results = await asyncio.gather(*[probe(ip) for ip in ips])
    return [ip for ip, alive in zip(ips, results) if alive]


async def discover_devices(
    ips: list[str],
    workers: int = 100,
    timeout: float = 1.0,
    logger: logging.Logger | None = None,
) -> list[ArpDevice]:
    """
    Find Hikvision devices among ips.

    Args:
        ips: Addresses to probe
        workers: Maximum concurrent liveness probes
        timeout: Per-host probe timeout in seconds
        logger: Logger for progress output

    Returns:
        Devices in input order. An unreadable ARP table yields an empty list.
    """
    log = logger or _default_logger

    alive = await sweep_alive_hosts(ips, workers, timeout)
    for ip in alive:
        log.debug(f"Host alive: ip={ip}")

    try:
        arp_table = get_arp_table()
    except (OSError, subprocess.SubprocessError) as e:
        log.warning(f"Failed to read ARP table: {e}")
        return []

    devices = []
    for ip in alive:
        mac = arp_table.get(ip)
        if mac and is_hikvision_mac(mac):
            devices.append(ArpDevice(ip=ip, mac=mac))
    return devices
