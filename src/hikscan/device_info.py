"""
Device information over HTTP.

Pulls firmware and model strings out of device info pages, and reads the
serial number needed for the legacy reset code from the UPnP description.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from hikscan.exceptions import HTTPClientError
from hikscan.network.http import HTTPClient

logger = logging.getLogger("hikscan.device_info")

# (path, description) pairs checked by the probe command
PROBE_ENDPOINTS = [
    ("/System/deviceInfo", "Device Info (ISAPI)"),
    ("/ISAPI/System/deviceInfo", "Device Info (ISAPI v2)"),
    ("/", "Web Interface"),
]

UPNP_DESCRIPTION_PATH = "/upnpdevicedesc.xml"

FIRMWARE_PATTERNS = [
    re.compile(r"<firmwareVersion>([^<]+)</firmwareVersion>"),
    re.compile(r"<version>([^<]+)</version>"),
    re.compile(r'"firmwareVersion"\s*:\s*"([^"]+)"'),
]

MODEL_PATTERNS = [
    re.compile(r"<deviceName>([^<]+)</deviceName>"),
    re.compile(r"<model>([^<]+)</model>"),
    re.compile(r'"model"\s*:\s*"([^"]+)"'),
]

_MODEL_NUMBER = re.compile(r"<modelNumber>([^<]+)</modelNumber>")
_SERIAL_NUMBER = re.compile(r"<serialNumber>([^<]+)</serialNumber>")


def _first_match(patterns: list[re.Pattern], body: str) -> str:
    for pattern in patterns:
        match = pattern.search(body)
        if match:
            return match.group(1)
    return ""


def extract_firmware_version(body: str) -> str:
    """Return the firmware version in an XML or JSON info page, or ""."""
    return _first_match(FIRMWARE_PATTERNS, body)


def extract_model(body: str) -> str:
    """Return the model name in an XML or JSON info page, or ""."""
    return _first_match(MODEL_PATTERNS, body)


@dataclass
class ResetInfo:
    """Inputs for the legacy reset code."""
    serial: str
    date: str
    model: str = ""


def fetch_reset_info(client: HTTPClient, ip_address: str, today: Optional[date] = None) -> ResetInfo:
    """
    Read the serial number from a device's UPnP description.

    The model prefix is stripped from the serial. The date is the local
    date, which may differ from the device clock.

    Raises:
        HTTPClientError: If the request fails, is not 200 or has no serial
    """
    resp = client.get(ip_address, UPNP_DESCRIPTION_PATH)
    if resp.status_code != 200:
        raise HTTPClientError(f"HTTP {resp.status_code} response")

    body = resp.body.decode("utf-8", errors="replace")
    logger.debug(f"Response from {UPNP_DESCRIPTION_PATH}: {body[:500]}")

    model_match = _MODEL_NUMBER.search(body)
    model = model_match.group(1) if model_match else ""

    serial_match = _SERIAL_NUMBER.search(body)
    if not serial_match:
        raise HTTPClientError("could not find serial number in response")
    serial = serial_match.group(1)

    if model and serial.startswith(model):
        serial = serial[len(model):]

    day = (today or date.today()).strftime("%Y%m%d")
    logger.debug(f"Extracted reset info: model={model} serial={serial} date={day}")
    return ResetInfo(serial=serial, date=day, model=model)
