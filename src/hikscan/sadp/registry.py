"""Per-discovery device registry keyed by MAC address."""

import threading

from hikscan.models import Device
from hikscan.network.addresses import normalize_mac


class DeviceRegistry:
    """
    Deduplicating store for one discovery run.

    The first device seen for a MAC wins; later responses for the same MAC
    are ignored.
    """

    def __init__(self):
        self._devices: dict[str, Device] = {}
        self._lock = threading.Lock()

    def add(self, device: Device) -> bool:
        """Insert device unless its MAC is already known. Returns True if inserted."""
        key = normalize_mac(device.mac)
        with self._lock:
            if key in self._devices:
                return False
            self._devices[key] = device
            return True

    def snapshot(self) -> list[Device]:
        """Copy out the current devices."""
        with self._lock:
            return list(self._devices.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._devices)

    def __contains__(self, mac: str) -> bool:
        with self._lock:
            return normalize_mac(mac) in self._devices
