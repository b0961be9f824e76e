"""Tests for the SADP XML and CSV codec."""

import pytest

from hikscan.models import DEVICE_SCHEMA, Device
from hikscan.sadp.codec import (
    CSV_HEADER,
    from_xml,
    parse_response,
    to_csv,
    to_xml,
    truncate,
)


SAMPLE_PROBE_MATCH = b"""<?xml version="1.0" encoding="UTF-8"?>
<ProbeMatch>
<Uuid>7D4C3F4E-1C2B-4A5D-9E8F-0A1B2C3D4E5F</Uuid>
<Types>inquiry</Types>
<DeviceType>139435</DeviceType>
<DeviceDescription>DS-2CD2143G0-I</DeviceDescription>
<DeviceSN>DS-2CD2143G0-I20190101AAWRC12345678</DeviceSN>
<CommandPort>8000</CommandPort>
<HttpPort>80</HttpPort>
<MAC>4c-bd-8f-61-cc-5c</MAC>
<IPv4Address>192.168.1.64</IPv4Address>
<IPv4SubnetMask>255.255.255.0</IPv4SubnetMask>
<IPv4Gateway>192.168.1.1</IPv4Gateway>
<IPv6Address>::</IPv6Address>
<IPv6Gateway>::</IPv6Gateway>
<IPv6MaskLen>64</IPv6MaskLen>
<DHCP>false</DHCP>
<AnalogChannelNum>0</AnalogChannelNum>
<DigitalChannelNum>1</DigitalChannelNum>
<SoftwareVersion>V5.5.0build 170725</SoftwareVersion>
<DSPVersion>V7.3 build 170616</DSPVersion>
<BootTime>2023-12-15 10:00:00</BootTime>
<Encrypt>true</Encrypt>
<ResetAbility>false</ResetAbility>
<Activated>true</Activated>
<PasswordResetAbility>true</PasswordResetAbility>
<PasswordResetModeSecond>true</PasswordResetModeSecond>
<SDKOverTLSPort>8443</SDKOverTLSPort>
</ProbeMatch>
"""


def make_device(**overrides) -> Device:
    values = dict(
        uuid="7D4C3F4E-1C2B-4A5D-9E8F-0A1B2C3D4E5F",
        types="inquiry",
        device_type="DS-2CD2143G0-I",
        device_sn="DS-2CD2143G0-I20190101AAWRC12345678",
        mac="4C:BD:8F:61:CC:5C",
        ipv4_address="192.168.1.64",
        ipv4_subnet_mask="255.255.255.0",
        ipv4_gateway="192.168.1.1",
        dhcp="false",
        command_port=8000,
        http_port=80,
        dsp_version="V7.3 build 170616",
        boot_time="2023-12-15 10:00:00",
        software_version="V5.5.0build 170725",
        activated="true",
        analog_channel_num=0,
        digital_channel_num=1,
    )
    values.update(overrides)
    return Device(**values)


class TestParseResponse:
    """Test suite for parse_response."""

    def test_full_probe_match(self):
        device = parse_response(SAMPLE_PROBE_MATCH)

        assert device is not None
        assert device.mac == "4C:BD:8F:61:CC:5C"
        assert device.ipv4_address == "192.168.1.64"
        assert device.device_description == "DS-2CD2143G0-I"
        assert device.command_port == 8000
        assert device.http_port == 80
        assert device.ipv6_mask_len == 64
        assert device.sdk_over_tls_port == 8443
        assert device.password_reset_mode == "true"
        assert device.is_activated
        assert device.channel_num == 1

    def test_unknown_elements_ignored(self):
        device = parse_response(SAMPLE_PROBE_MATCH)
        assert not hasattr(device, "encrypt")

    def test_accepts_text(self):
        device = parse_response(SAMPLE_PROBE_MATCH.decode())
        assert device is not None
        assert device.mac == "4C:BD:8F:61:CC:5C"

    def test_dash_mac_normalized(self):
        device = parse_response(b"<ProbeMatch><MAC>aa-bb-cc-dd-ee-ff</MAC></ProbeMatch>")
        assert device.mac == "AA:BB:CC:DD:EE:FF"

    def test_empty_int_field_is_zero(self):
        device = parse_response(
            b"<ProbeMatch><MAC>aa:bb:cc:dd:ee:ff</MAC><HttpPort></HttpPort></ProbeMatch>"
        )
        assert device.http_port == 0

    def test_non_integer_content_rejected(self):
        assert parse_response(
            b"<ProbeMatch><MAC>aa:bb:cc:dd:ee:ff</MAC><HttpPort>eighty</HttpPort></ProbeMatch>"
        ) is None

    def test_malformed_xml(self):
        assert parse_response(b"<ProbeMatch><Invalid") is None

    def test_missing_marker(self):
        assert parse_response(b"<Probe><Uuid>x</Uuid><Types>inquiry</Types></Probe>") is None

    def test_wrong_root(self):
        assert parse_response(b"<Envelope><ProbeMatch></ProbeMatch></Envelope>") is None

    def test_empty(self):
        assert parse_response(b"") is None


class TestToXML:
    """Test suite for to_xml and from_xml."""

    def test_document_shape(self):
        xml = to_xml([make_device()])

        assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>\n<SADPDeviceList version="2.0">')
        assert "\n  <Device>\n    <Uuid>7D4C3F4E-1C2B-4A5D-9E8F-0A1B2C3D4E5F</Uuid>" in xml
        assert xml.rstrip().endswith("</SADPDeviceList>")

    def test_empty_fields_emitted(self):
        xml = to_xml([make_device()])

        assert "<IPv6Address></IPv6Address>" in xml
        assert "<OEMInfo></OEMInfo>" in xml

    def test_schema_order(self):
        xml = to_xml([make_device()])
        positions = [xml.index(f"<{tag}>") for tag, _, _ in DEVICE_SCHEMA]
        assert positions == sorted(positions)

    def test_local_metadata_not_serialized(self):
        xml = to_xml([make_device(adapter_ip="192.168.1.20")])
        assert "192.168.1.20" not in xml
        assert "AdapterIP" not in xml

    def test_empty_list(self):
        assert to_xml([]) == (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<SADPDeviceList version="2.0"></SADPDeviceList>'
        )

    def test_values_are_escaped(self):
        xml = to_xml([make_device(oem_info="A&B <Ltd>")])
        assert "<OEMInfo>A&amp;B &lt;Ltd&gt;</OEMInfo>" in xml

    def test_round_trip(self):
        devices = [
            make_device(),
            make_device(mac="00:0D:C5:11:22:33", ipv4_address="192.168.1.65", oem_info="A&B"),
        ]
        assert from_xml(to_xml(devices)) == devices

    def test_from_xml_rejects_garbage(self):
        with pytest.raises(ValueError):
            from_xml("<SADPDeviceList><Device>")

    def test_from_xml_rejects_wrong_root(self):
        with pytest.raises(ValueError):
            from_xml("<DeviceList></DeviceList>")


class TestToCSV:
    """Test suite for to_csv."""

    def test_header_and_rows(self):
        csv = to_csv([make_device(), make_device(mac="00:0D:C5:11:22:33", analog_channel_num=4)])
        lines = csv.splitlines()

        assert lines[0] == CSV_HEADER
        assert lines[1] == (
            "1,DS-2CD2143G0-I,true,192.168.1.64,8000,80,V5.5.0build 170725,192.168.1.1,"
            "DS-2CD2143G0-I20190101AAWRC12345678,255.255.255.0,4C:BD:8F:61:CC:5C,1,"
            "V7.3 build 170616,2023-12-15 10:00:00,false"
        )
        assert lines[2].startswith("2,")
        assert ",00:0D:C5:11:22:33,5," in lines[2]
        assert csv.endswith("\n")

    def test_empty(self):
        assert to_csv([]) == CSV_HEADER + "\n"


class TestTruncate:
    """Test suite for truncate."""

    @pytest.mark.parametrize("s,max_len,expected", [
        ("hello", 10, "hello"),
        ("hello", 5, "hello"),
        ("hello world", 8, "hello..."),
        ("hello world", 4, "h..."),
        ("hello", 3, "..."),
        ("hello", 2, ".."),
        ("hello", 0, ""),
        ("", 0, ""),
    ])
    def test_truncate(self, s, max_len, expected):
        assert truncate(s, max_len) == expected
