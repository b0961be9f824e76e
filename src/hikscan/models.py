"""Data models for hikscan."""

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


@dataclass
class Device:
    """A device discovered via SADP. Field order follows the ProbeMatch schema."""
    uuid: str = field(default="", metadata={"xml": "Uuid"})
    types: str = field(default="", metadata={"xml": "Types"})
    device_type: str = field(default="", metadata={"xml": "DeviceType"})
    device_description: str = field(default="", metadata={"xml": "DeviceDescription"})
    device_sn: str = field(default="", metadata={"xml": "DeviceSN"})
    mac: str = field(default="", metadata={"xml": "MAC"})
    ipv4_address: str = field(default="", metadata={"xml": "IPv4Address"})
    ipv4_subnet_mask: str = field(default="", metadata={"xml": "IPv4SubnetMask"})
    ipv4_gateway: str = field(default="", metadata={"xml": "IPv4Gateway"})
    ipv6_address: str = field(default="", metadata={"xml": "IPv6Address"})
    ipv6_gateway: str = field(default="", metadata={"xml": "IPv6Gateway"})
    ipv6_mask_len: int = field(default=0, metadata={"xml": "IPv6MaskLen"})
    dhcp: str = field(default="", metadata={"xml": "DHCP"})
    command_port: int = field(default=0, metadata={"xml": "CommandPort"})
    http_port: int = field(default=0, metadata={"xml": "HttpPort"})
    dsp_version: str = field(default="", metadata={"xml": "DSPVersion"})
    boot_time: str = field(default="", metadata={"xml": "BootTime"})
    software_version: str = field(default="", metadata={"xml": "SoftwareVersion"})
    activated: str = field(default="", metadata={"xml": "Activated"})
    password_reset_mode: str = field(default="", metadata={"xml": "PasswordResetModeSecond"})
    support_hc_platform: str = field(default="", metadata={"xml": "SupportHCPlatform"})
    hc_platform_enable: str = field(default="", metadata={"xml": "HCPlatformEnable"})
    support_reset: str = field(default="", metadata={"xml": "Support"})
    encoder: str = field(default="", metadata={"xml": "Encoder"})
    oem_info: str = field(default="", metadata={"xml": "OEMInfo"})
    analog_channel_num: int = field(default=0, metadata={"xml": "AnalogChannelNum"})
    digital_channel_num: int = field(default=0, metadata={"xml": "DigitalChannelNum"})
    sdk_over_tls_port: int = field(default=0, metadata={"xml": "SDKOverTLSPort"})
    sdk_server_status: str = field(default="", metadata={"xml": "SDKServerStatus"})

    # Local discovery metadata, never serialized to XML
    adapter_ip: str = ""
    received_time: Optional[datetime] = None

    @property
    def is_activated(self) -> bool:
        return self.activated == "true"

    @property
    def channel_num(self) -> int:
        return self.analog_channel_num + self.digital_channel_num

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["received_time"] = self.received_time.isoformat() if self.received_time else None
        return data


# (xml tag, attribute name, python type) in schema order
DEVICE_SCHEMA: tuple[tuple[str, str, type], ...] = tuple(
    (f.metadata["xml"], f.name, f.type)
    for f in fields(Device)
    if "xml" in f.metadata
)


@dataclass(frozen=True)
class Command:
    """A SADP command template from the catalog."""
    name: str
    description: str
    template: str
    # SendOptions attributes substituted after the correlation id, in template order
    fields: tuple[str, ...] = ()
    # SendOptions attributes that must be set, in validation order
    required: tuple[str, ...] = ()

    @property
    def needs_mac(self) -> bool:
        return "target_mac" in self.required

    @property
    def needs_pass(self) -> bool:
        return "password" in self.required


class SendOptions(BaseModel):
    """Per-call parameters for a SADP command."""
    target_ip: str = Field("", description="Device IP; empty or 0.0.0.0 selects broadcast mode")
    target_mac: str = Field("", description="Device MAC address")
    password: str = Field("", description="Device (or new) password")
    code: str = Field("", description="Security/reset code")
    new_ip: str = Field("", description="New IPv4 address (update)")
    new_mask: str = Field("", description="New subnet mask (update)")
    new_gateway: str = Field("", description="New gateway (update)")
    new_port: int = Field(0, description="New SDK port (update)")
    dhcp: bool = Field(False, description="Enable DHCP (update)")
    email: str = Field("", description="Recovery email (setmailbox)")
    timeout: float = Field(0, ge=0, description="Timeout in seconds; 0 uses the default")
