"""
SADP XML codec.

Parses ProbeMatch responses into Device records and renders device lists
as SADP-compatible XML or as CSV.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Optional, Union

from hikscan.models import DEVICE_SCHEMA, Device
from hikscan.network.addresses import normalize_mac

logger = logging.getLogger("hikscan.sadp.codec")

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'
DEVICE_LIST_VERSION = "2.0"

CSV_HEADER = (
    "ID,DeviceType,Activated,IPv4Address,Port,HttpPort,SoftwareVersion,"
    "IPv4Gateway,SerialNumber,IPv4SubnetMask,MAC,ChannelNum,DSPVersion,"
    "BootTime,DHCP"
)

_PROBE_MATCH = "ProbeMatch"


def _fields_from_element(element: ET.Element) -> dict:
    """
    Read schema fields from the direct children of element.

    Raises:
        ValueError: If an integer field holds non-integer text
    """
    values = {}
    children = {child.tag: child.text or "" for child in element}
    for tag, name, typ in DEVICE_SCHEMA:
        if tag not in children:
            continue
        text = children[tag]
        if typ is int:
            text = text.strip()
            values[name] = int(text) if text else 0
        else:
            values[name] = text
    return values


def parse_response(data: Union[bytes, str]) -> Optional[Device]:
    """
    Parse one SADP response datagram.

    Returns:
        A Device with a normalized MAC, or None when the payload is not a
        well-formed ProbeMatch document
    """
    raw = data.encode("utf-8", errors="replace") if isinstance(data, str) else data
    if b"<ProbeMatch" not in raw and b"ProbeMatch>" not in raw:
        return None

    try:
        root = ET.fromstring(raw)
    except ET.ParseError as e:
        logger.debug(f"Failed to parse response: error={e}")
        return None

    if root.tag != _PROBE_MATCH:
        logger.debug(f"Unexpected response root: tag={root.tag}")
        return None

    try:
        values = _fields_from_element(root)
    except ValueError as e:
        logger.debug(f"Failed to parse response: error={e}")
        return None

    device = Device(**values)
    device.mac = normalize_mac(device.mac)
    return device


def to_xml(devices: list[Device]) -> str:
    """Render devices as a SADPDeviceList document."""
    root = ET.Element("SADPDeviceList", version=DEVICE_LIST_VERSION)
    for device in devices:
        node = ET.SubElement(root, "Device")
        for tag, name, _ in DEVICE_SCHEMA:
            ET.SubElement(node, tag).text = str(getattr(device, name))

    ET.indent(root, space="  ")
    body = ET.tostring(root, encoding="unicode", short_empty_elements=False)
    return XML_DECLARATION + body


def from_xml(text: str) -> list[Device]:
    """
    Read devices back from a SADPDeviceList document.

    Raises:
        ValueError: If the document is malformed
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise ValueError(f"invalid device list: {e}") from e

    if root.tag != "SADPDeviceList":
        raise ValueError(f"invalid device list: unexpected root {root.tag}")

    return [Device(**_fields_from_element(node)) for node in root.findall("Device")]


def to_csv(devices: list[Device]) -> str:
    """Render devices as CSV rows with a 1-based ID column."""
    lines = [CSV_HEADER]
    for i, dev in enumerate(devices, start=1):
        row = [
            i,
            dev.device_type,
            dev.activated,
            dev.ipv4_address,
            dev.command_port,
            dev.http_port,
            dev.software_version,
            dev.ipv4_gateway,
            dev.device_sn,
            dev.ipv4_subnet_mask,
            dev.mac,
            dev.channel_num,
            dev.dsp_version,
            dev.boot_time,
            dev.dhcp,
        ]
        lines.append(",".join(str(value) for value in row))
    return "\n".join(lines) + "\n"


def truncate(s: str, max_len: int) -> str:
    """Shorten s to max_len characters, marking the cut with an ellipsis."""
    if len(s) <= max_len:
        return s
    if max_len <= 3:
        return "." * max(max_len, 0)
    return s[:max_len - 3] + "..."
