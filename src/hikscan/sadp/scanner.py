"""
SADP transport.

Discovery fans out one task per local IPv4 address: each task binds a UDP
socket to its address, sends inquiry probes to the SADP multicast group and
the limited broadcast address, then collects ProbeMatch responses until its
deadline. Commands go unicast to a known IP, or are broadcast on every
interface and matched by MAC when the IP is unknown.
"""

import asyncio
import logging
import socket
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from hikscan.exceptions import CommandError, SADPTimeoutError, TransportError
from hikscan.log import nop_logger
from hikscan.models import Device, SendOptions
from hikscan.network.addresses import normalize_mac
from hikscan.network.interfaces import LocalInterface, local_ipv4_interfaces
from hikscan.sadp.codec import parse_response
from hikscan.sadp.commands import COMMANDS, build_command_xml
from hikscan.sadp.registry import DeviceRegistry

MULTICAST_ADDR = "239.255.255.250"
SADP_PORT = 37020
BROADCAST_ADDR = "255.255.255.255"
MAX_PACKET_SIZE = 65535
DEFAULT_TIMEOUT = 5.0
# Matching responses buffered for a broadcast command
RESPONSE_BUFFER = 10

UNSPECIFIED_IP = "0.0.0.0"


class SADPScanner:
    """
    SADP discovery and command client.

    Args:
        timeout: Discovery read window in seconds
        logger: Logger for transport diagnostics; silent when omitted
        port: SADP UDP port
        multicast_addr: Probe multicast group
        broadcast_addr: Limited broadcast address
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        logger: Optional[logging.Logger] = None,
        port: int = SADP_PORT,
        multicast_addr: str = MULTICAST_ADDR,
        broadcast_addr: str = BROADCAST_ADDR,
    ):
        self.timeout = timeout
        self.log = logger or nop_logger()
        self.port = port
        self.multicast_addr = multicast_addr
        self.broadcast_addr = broadcast_addr
        self._background: set[asyncio.Future] = set()

    # -- helpers ---------------------------------------------------------

    def _interfaces(self) -> list[LocalInterface]:
        try:
            return local_ipv4_interfaces()
        except OSError as e:
            raise TransportError(f"failed to get network interfaces: {e}") from e

    @staticmethod
    def _open_socket(local_ip: str) -> socket.socket:
        """Bind a non-blocking broadcast-capable UDP socket to local_ip."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            sock.setsockopt(
                socket.IPPROTO_IP, socket.IP_MULTICAST_IF, socket.inet_aton(local_ip)
            )
            sock.bind((local_ip, 0))
            sock.setblocking(False)
        except OSError:
            sock.close()
            raise
        return sock

    async def _send_all(
        self,
        sock: socket.socket,
        payloads: list[bytes],
        destinations: list[str],
        iface: LocalInterface,
    ) -> None:
        loop = asyncio.get_running_loop()
        for dest in destinations:
            for payload in payloads:
                try:
                    await loop.sock_sendto(sock, payload, (dest, self.port))
                except OSError as e:
                    self.log.debug(
                        f"Failed to send probe: interface={iface.name} ip={iface.ip} "
                        f"dest={dest} error={e}"
                    )

    async def _read_until(
        self,
        sock: socket.socket,
        timeout: float,
        on_datagram: Callable[[bytes, tuple], None],
        iface: LocalInterface,
    ) -> None:
        """Hand every datagram to on_datagram until timeout seconds pass."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                return
            try:
                data, addr = await asyncio.wait_for(
                    loop.sock_recvfrom(sock, MAX_PACKET_SIZE),
                    timeout=remaining,
                )
            except asyncio.TimeoutError:
                return
            except OSError as e:
                self.log.debug(f"Read failed: interface={iface.name} ip={iface.ip} error={e}")
                return
            on_datagram(data, addr)

    # -- discovery -------------------------------------------------------

    async def discover(self) -> list[Device]:
        """
        Probe every local IPv4 address and collect responding devices.

        Returns:
            One Device per MAC; the first response seen for a MAC wins

        Raises:
            TransportError: If local interfaces cannot be enumerated
        """
        interfaces = self._interfaces()
        registry = DeviceRegistry()

        tasks = [
            asyncio.create_task(self._discover_on_interface(iface, registry))
            for iface in interfaces
        ]
        await asyncio.gather(*tasks, return_exceptions=True)

        devices = registry.snapshot()
        self.log.debug(f"Discovery complete: interfaces={len(interfaces)} devices={len(devices)}")
        return devices

    async def _discover_on_interface(self, iface: LocalInterface, registry: DeviceRegistry) -> None:
        self.log.debug(f"Scanning on interface: interface={iface.name} ip={iface.ip}")

        try:
            sock = self._open_socket(iface.ip)
        except OSError as e:
            self.log.debug(f"Failed to bind: interface={iface.name} ip={iface.ip} error={e}")
            return

        with sock:
            probe_id = str(uuid.uuid4())
            payloads = [
                COMMANDS[name].template.format(probe_id).encode("utf-8")
                for name in ("inquiry", "inquiry_v32")
            ]
            await self._send_all(
                sock, payloads, [self.multicast_addr, self.broadcast_addr], iface
            )

            def on_datagram(data: bytes, addr: tuple) -> None:
                self.handle_datagram(data, addr, iface.ip, registry)

            await self._read_until(sock, self.timeout, on_datagram, iface)

    def handle_datagram(
        self,
        data: bytes,
        addr: tuple,
        adapter_ip: str,
        registry: DeviceRegistry,
    ) -> Optional[Device]:
        """
        Parse one response and offer it to the registry.

        Returns:
            The device if it was newly registered, else None
        """
        self.log.debug(f"Received response: bytes={len(data)} from={addr[0]}:{addr[1]}")

        device = parse_response(data)
        if device is None:
            return None

        device.adapter_ip = adapter_ip
        device.received_time = datetime.now(timezone.utc)

        if not registry.add(device):
            return None

        self.log.debug(
            f"Found device: ip={device.ipv4_address} mac={device.mac} type={device.device_type}"
        )
        return device

    # -- commands --------------------------------------------------------

    async def send_command(self, name: str, opts: SendOptions) -> str:
        """
        Send a catalog command and return the device's raw response.

        An empty or 0.0.0.0 target IP broadcasts the command on every
        interface and returns the first response mentioning the target MAC.

        Raises:
            CommandError: If the command cannot be built or routed
            SADPTimeoutError: If no response arrives in time
            TransportError: On socket failures
        """
        xml_cmd = build_command_xml(name, opts)

        if opts.target_ip in ("", UNSPECIFIED_IP):
            if not opts.target_mac:
                raise CommandError("MAC address required when target IP is 0.0.0.0")
            return await self._send_broadcast_with_mac(xml_cmd, opts)

        self.log.debug(f"Sending command: target={opts.target_ip} port={self.port}")
        self.log.debug(f"XML command: xml={xml_cmd}")

        loop = asyncio.get_running_loop()
        timeout = opts.timeout or DEFAULT_TIMEOUT

        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        except OSError as e:
            raise TransportError(f"failed to connect: {e}") from e

        with sock:
            async def exchange() -> bytes:
                sock.setblocking(False)
                await loop.sock_connect(sock, (opts.target_ip, self.port))
                await loop.sock_sendall(sock, xml_cmd.encode("utf-8"))
                return await loop.sock_recv(sock, MAX_PACKET_SIZE)

            try:
                data = await asyncio.wait_for(exchange(), timeout=timeout)
            except asyncio.TimeoutError:
                raise SADPTimeoutError("no response (timeout)") from None
            except OSError as e:
                raise TransportError(f"failed to exchange command: {e}") from e

        return data.decode("utf-8", errors="replace")

    async def _send_broadcast_with_mac(self, xml_cmd: str, opts: SendOptions) -> str:
        self.log.debug(f"Sending command via broadcast: mac={opts.target_mac}")
        self.log.debug(f"XML command: xml={xml_cmd}")

        target_mac = normalize_mac(opts.target_mac)
        markers = (target_mac, target_mac.replace(":", "-"))
        interfaces = self._interfaces()
        timeout = opts.timeout or DEFAULT_TIMEOUT
        responses: asyncio.Queue[str] = asyncio.Queue(maxsize=RESPONSE_BUFFER)
        payload = xml_cmd.encode("utf-8")

        tasks = [
            asyncio.create_task(
                self._exchange_on_interface(iface, payload, timeout, markers, responses)
            )
            for iface in interfaces
        ]
        all_done = asyncio.gather(*tasks, return_exceptions=True)
        first = asyncio.ensure_future(responses.get())

        try:
            await asyncio.wait({first, all_done}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if not first.done():
                first.cancel()
            if not all_done.done():
                self._background.add(all_done)
                all_done.add_done_callback(self._background.discard)

        if first.done() and not first.cancelled():
            return first.result()
        if not responses.empty():
            return responses.get_nowait()
        raise SADPTimeoutError(f"no response from device with MAC {opts.target_mac} (timeout)")

    async def _exchange_on_interface(
        self,
        iface: LocalInterface,
        payload: bytes,
        timeout: float,
        markers: tuple[str, ...],
        responses: asyncio.Queue,
    ) -> None:
        self.log.debug(f"Sending on interface: interface={iface.name} ip={iface.ip}")

        try:
            sock = self._open_socket(iface.ip)
        except OSError as e:
            self.log.debug(f"Failed to bind: interface={iface.name} ip={iface.ip} error={e}")
            return

        with sock:
            destinations = [self.multicast_addr, self.broadcast_addr, iface.broadcast]
            await self._send_all(sock, [payload], destinations, iface)

            def on_datagram(data: bytes, addr: tuple) -> None:
                text = data.decode("utf-8", errors="replace")
                upper = text.upper()
                if not any(marker in upper for marker in markers):
                    return
                try:
                    responses.put_nowait(text)
                except asyncio.QueueFull:
                    pass

            await self._read_until(sock, timeout, on_datagram, iface)

    async def wait_closed(self) -> None:
        """Wait for broadcast exchanges still draining in the background."""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)
