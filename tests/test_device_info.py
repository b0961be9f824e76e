"""Tests for HTTP device info extraction."""

from datetime import date

import pytest

from hikscan.device_info import (
    PROBE_ENDPOINTS,
    extract_firmware_version,
    extract_model,
    fetch_reset_info,
)
from hikscan.exceptions import HTTPClientError
from hikscan.network.http import HTTPResponse


UPNP_DESCRIPTION = b"""<?xml version="1.0"?>
<root xmlns="urn:schemas-upnp-org:device-1-0">
<device>
<deviceType>urn:schemas-upnp-org:device:Basic:1</deviceType>
<friendlyName>DS-7616NI-I2</friendlyName>
<modelNumber>DS-7616NI-I2</modelNumber>
<serialNumber>DS-7616NI-I20123456789</serialNumber>
</device>
</root>
"""


class MockClient:
    """Mock HTTPClient returning canned responses."""

    def __init__(self, response: HTTPResponse):
        self.response = response
        self.calls = []

    def get(self, ip_address: str, path: str) -> HTTPResponse:
        self.calls.append((ip_address, path))
        return self.response


class TestExtraction:
    """Test suite for firmware and model extraction."""

    def test_endpoints(self):
        assert [path for path, _ in PROBE_ENDPOINTS] == [
            "/System/deviceInfo", "/ISAPI/System/deviceInfo", "/",
        ]

    def test_firmware_from_isapi_xml(self):
        body = "<DeviceInfo><firmwareVersion>V5.4.5</firmwareVersion></DeviceInfo>"
        assert extract_firmware_version(body) == "V5.4.5"

    def test_firmware_from_version_tag(self):
        assert extract_firmware_version("<version>V4.0.1</version>") == "V4.0.1"

    def test_firmware_from_json(self):
        assert extract_firmware_version('{"firmwareVersion" : "V5.7.3"}') == "V5.7.3"

    def test_firmware_missing(self):
        assert extract_firmware_version("<html></html>") == ""

    def test_model_from_device_name(self):
        assert extract_model("<deviceName>Front Door</deviceName><model>DS-2CD</model>") == "Front Door"

    def test_model_from_model_tag(self):
        assert extract_model("<model>DS-2CD2143G0-I</model>") == "DS-2CD2143G0-I"

    def test_model_from_json(self):
        assert extract_model('{"model":"DS-2CD2143G0-I"}') == "DS-2CD2143G0-I"


class TestFetchResetInfo:
    """Test suite for fetch_reset_info."""

    def test_strips_model_prefix(self):
        client = MockClient(HTTPResponse(status_code=200, body=UPNP_DESCRIPTION))

        info = fetch_reset_info(client, "192.168.1.64", today=date(2023, 12, 15))

        assert client.calls == [("192.168.1.64", "/upnpdevicedesc.xml")]
        assert info.serial == "0123456789"
        assert info.model == "DS-7616NI-I2"
        assert info.date == "20231215"

    def test_serial_without_model(self):
        body = b"<root><serialNumber>ABC123</serialNumber></root>"
        info = fetch_reset_info(MockClient(HTTPResponse(status_code=200, body=body)), "10.0.0.5")

        assert info.serial == "ABC123"
        assert len(info.date) == 8

    def test_http_error_status(self):
        client = MockClient(HTTPResponse(status_code=404))

        with pytest.raises(HTTPClientError, match="HTTP 404 response"):
            fetch_reset_info(client, "192.168.1.64")

    def test_missing_serial(self):
        client = MockClient(HTTPResponse(status_code=200, body=b"<root></root>"))

        with pytest.raises(HTTPClientError, match="could not find serial number"):
            fetch_reset_info(client, "192.168.1.64")
