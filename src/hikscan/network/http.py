"""
Minimal raw-socket HTTP client.

Device web servers often send responses that strict HTTP libraries reject,
so requests are written by hand and the reply is read until the peer closes.
"""

import logging
import socket
from dataclasses import dataclass, field
from urllib.parse import urlsplit

from hikscan.exceptions import HTTPClientError

logger = logging.getLogger("hikscan.network.http")


@dataclass
class HTTPResponse:
    """A parsed HTTP response."""
    status_code: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)


def parse_http_response(data: bytes) -> HTTPResponse:
    """
    Parse a raw HTTP response.

    Header names are lowercased. The body is everything after the blank line.

    Raises:
        HTTPClientError: If the status line or header separator is missing
    """
    header_end = data.find(b"\r\n\r\n")
    if header_end == -1:
        raise HTTPClientError("invalid HTTP response: no header separator found")

    header_text = data[:header_end].decode("iso-8859-1")
    body = data[header_end + 4:]

    lines = header_text.split("\r\n")
    status_parts = lines[0].split(" ", 2)
    if len(status_parts) < 2:
        raise HTTPClientError(f"invalid HTTP status line: {lines[0]}")

    try:
        status_code = int(status_parts[1])
    except ValueError:
        raise HTTPClientError(f"invalid status code: {status_parts[1]}") from None

    headers = {}
    for line in lines[1:]:
        name, sep, value = line.partition(": ")
        if sep:
            headers[name.lower()] = value

    return HTTPResponse(status_code=status_code, body=body, headers=headers)


class HTTPClient:
    """Blocking single-request HTTP client over a raw TCP socket."""

    def __init__(self, user_agent: str, timeout: float = 10.0):
        self.user_agent = user_agent
        self.timeout = timeout

    def get(self, ip_address: str, path: str) -> HTTPResponse:
        """GET http://{ip_address}{path}."""
        return self.get_with_auth(ip_address, path, "")

    def get_with_auth(self, ip_address: str, path: str, auth_token: str) -> HTTPResponse:
        """GET with the auth token appended as ?auth=<token>."""
        url = f"http://{ip_address}{path}"
        if auth_token:
            url += f"?auth={auth_token}"

        try:
            parts = urlsplit(url)
            host = parts.hostname or ip_address
            port = parts.port or 80
        except ValueError as e:
            raise HTTPClientError(f"invalid URL: {e}") from e

        request_path = parts.path or "/"
        if parts.query:
            request_path += f"?{parts.query}"

        request = (
            f"GET {request_path} HTTP/1.1\r\n"
            f"Host: {host}\r\n"
            f"User-Agent: {self.user_agent}\r\n"
            "Accept: */*\r\n"
            "Connection: close\r\n"
            "\r\n"
        )

        logger.debug(f"HTTP GET host={host} port={port} path={request_path}")

        try:
            with socket.create_connection((host, port), timeout=self.timeout) as sock:
                sock.sendall(request.encode("utf-8"))
                chunks = []
                while True:
                    chunk = sock.recv(65536)
                    if not chunk:
                        break
                    chunks.append(chunk)
        except socket.timeout:
            raise HTTPClientError(f"connection timeout to {ip_address}") from None
        except OSError as e:
            raise HTTPClientError(f"connection failed to {ip_address}: {e}") from e

        return parse_http_response(b"".join(chunks))
