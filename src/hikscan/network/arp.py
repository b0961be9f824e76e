"""System ARP table reading."""

import ipaddress
import logging
import platform
import subprocess

from hikscan.network.addresses import is_valid_mac

logger = logging.getLogger("hikscan.network.arp")

ARP_COMMANDS = {
    "Darwin": ["arp", "-an"],
    "Linux": ["arp", "-n"],
    "Windows": ["arp", "-a"],
}


def parse_arp_line(line: str) -> tuple[str, str]:
    """
    Parse one line of `arp` output.

    Handles the BSD/macOS form `? (192.168.1.1) at aa:bb:cc:dd:ee:ff on en0`
    and the columnar Linux/Windows forms.

    Returns:
        (ip, mac) with a lowercase MAC; empty strings for non-entries
    """
    line = line.strip()
    if not line:
        return "", ""

    ip, mac = "", ""

    if ") at " in line:
        start = line.find("(")
        end = line.find(")")
        if start != -1 and end > start:
            ip = line[start + 1:end]
        rest = line[line.find(") at ") + 5:].split()
        if rest and ":" in rest[0]:
            mac = rest[0].lower()
        return ip, mac

    fields = line.split()
    if len(fields) < 2:
        return "", ""

    try:
        ipaddress.ip_address(fields[0])
    except ValueError:
        return "", ""

    ip = fields[0]
    for candidate in fields[1:]:
        candidate = candidate.replace("-", ":")
        if is_valid_mac(candidate):
            mac = candidate.lower()
            break

    return ip, mac


def get_arp_table() -> dict[str, str]:
    """
    Read the system ARP table.

    Returns:
        Mapping of IP address to lowercase MAC address. Unsupported
        platforms yield an empty table.

    Raises:
        OSError: If the arp command cannot be run
        subprocess.CalledProcessError: If arp exits with an error
    """
    cmd = ARP_COMMANDS.get(platform.system())
    if cmd is None:
        return {}

    result = subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        timeout=30,
        check=True,
    )

    table = {}
    for line in result.stdout.splitlines():
        ip, mac = parse_arp_line(line)
        if ip and mac:
            table[ip] = mac
    return table
