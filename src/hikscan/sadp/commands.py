"""
SADP command catalog.

Each command is a wire template plus the ordered SendOptions attributes it
substitutes and the ones it requires. Building a command validates the
required fields, fills network defaults and escapes every value.
"""

import logging
import uuid
from xml.sax.saxutils import escape

from hikscan.exceptions import MissingFieldError, UnknownCommandError
from hikscan.models import Command, SendOptions

logger = logging.getLogger("hikscan.sadp.commands")

XML_HEADER = '<?xml version="1.0" encoding="utf-8"?>'

DEFAULT_SUBNET_MASK = "255.255.255.0"
DEFAULT_COMMAND_PORT = 8000

# Names used in missing-field errors
FIELD_LABELS = {
    "target_mac": "MAC address",
    "password": "password",
    "code": "security code",
    "email": "email address",
}

_MAC = ("target_mac",)
_MAC_PASS = ("target_mac", "password")
_MAC_CODE_PASS = ("target_mac", "code", "password")


def _probe(body: str) -> str:
    return f"{XML_HEADER}<Probe><Uuid>{{}}</Uuid>{body}</Probe>"


_CATALOG = [
    Command(
        name="inquiry",
        description="Get device information",
        template=_probe("<Types>inquiry</Types>"),
    ),
    Command(
        name="inquiry_v32",
        description="Get device information (v32 format)",
        template=_probe("<Types>inquiry_v32</Types>"),
    ),
    Command(
        name="exchangecode",
        description="Get exchange code for password reset",
        template=_probe("<MAC>{}</MAC><Types>exchangecode</Types><Code></Code>"),
        fields=_MAC,
        required=_MAC,
    ),
    Command(
        name="getencryptstring",
        description="Get encryption string",
        template=_probe("<MAC>{}</MAC><Types>getencryptstring</Types>"),
        fields=_MAC,
        required=_MAC,
    ),
    Command(
        name="getencryptstring_v31",
        description="Get encryption string (v31 format)",
        template=_probe("<MAC>{}</MAC><Types>getencryptstring_v31</Types>"),
        fields=_MAC,
        required=_MAC,
    ),
    Command(
        name="getqrcodes",
        description="Get QR codes for device",
        template=_probe("<MAC>{}</MAC><Types>GetQRcodes</Types>"),
        fields=_MAC,
        required=_MAC,
    ),
    Command(
        name="getbindlist",
        description="Get device binding list",
        template=_probe("<MAC>{}</MAC><Types>getBindList</Types>"),
        fields=_MAC,
        required=_MAC,
    ),
    Command(
        name="resetpassword",
        description="Reset password using security code",
        template=_probe(
            "<MAC>{}</MAC><Types>resetPassword</Types>"
            "<Code>{}</Code><Password>{}</Password>"
        ),
        fields=_MAC_CODE_PASS,
        required=_MAC_CODE_PASS,
    ),
    Command(
        name="securitycode",
        description="Submit security code for password reset",
        template=_probe(
            "<MAC>{}</MAC><Types>securityCode</Types>"
            "<SecurityCode>{}</SecurityCode><Password>{}</Password>"
        ),
        fields=_MAC_CODE_PASS,
        required=_MAC_CODE_PASS,
    ),
    Command(
        name="activate",
        description="Activate an inactive device with a new password",
        template=_probe("<MAC>{}</MAC><Types>activate</Types><Password>{}</Password>"),
        fields=_MAC_PASS,
        required=_MAC_PASS,
    ),
    Command(
        name="update",
        description="Update device network parameters",
        template=_probe(
            "<Types>update</Types><PWErrorParse>true</PWErrorParse>"
            "<MAC>{}</MAC><Password>{}</Password>"
            "<IPv4Address>{}</IPv4Address><CommandPort>{}</CommandPort>"
            "<IPv4SubnetMask>{}</IPv4SubnetMask><IPv4Gateway>{}</IPv4Gateway>"
            "<DHCP>{}</DHCP>"
        ),
        fields=(
            "target_mac", "password", "new_ip", "new_port",
            "new_mask", "new_gateway", "dhcp",
        ),
        required=_MAC_PASS,
    ),
    Command(
        name="reboot",
        description="Reboot the device",
        template=_probe("<MAC>{}</MAC><Types>reboot</Types><Password>{}</Password>"),
        fields=_MAC_PASS,
        required=_MAC_PASS,
    ),
    Command(
        name="restore",
        description="Restore device to factory defaults",
        template=_probe("<MAC>{}</MAC><Types>restore</Types><Password>{}</Password>"),
        fields=_MAC_PASS,
        required=_MAC_PASS,
    ),
    Command(
        name="setmailbox",
        description="Set recovery email address",
        template=_probe(
            "<MAC>{}</MAC><Types>SetMailBox</Types>"
            "<MailBox>{}</MailBox><Password>{}</Password>"
        ),
        fields=("target_mac", "email", "password"),
        required=("target_mac", "password", "email"),
    ),
    Command(
        name="ezvizunbind",
        description="Unbind device from Ezviz cloud",
        template=_probe("<MAC>{}</MAC><Types>ezvizUnbind</Types><Password>{}</Password>"),
        fields=_MAC_PASS,
        required=_MAC_PASS,
    ),
]

COMMANDS: dict[str, Command] = {cmd.name: cmd for cmd in _CATALOG}


def list_commands() -> list[Command]:
    """Return the catalog in display order."""
    return list(_CATALOG)


def _render(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return escape(str(value))


def _apply_defaults(opts: SendOptions) -> SendOptions:
    """Fill unset network settings. Only templates that carry them are affected."""
    updates = {}
    if not opts.new_ip:
        updates["new_ip"] = opts.target_ip
    if not opts.new_mask:
        updates["new_mask"] = DEFAULT_SUBNET_MASK
    if not opts.new_port:
        updates["new_port"] = DEFAULT_COMMAND_PORT
    return opts.model_copy(update=updates) if updates else opts


def build_command_xml(name: str, opts: SendOptions) -> str:
    """
    Build the wire XML for a catalog command.

    Args:
        name: Catalog command name
        opts: Per-call parameters

    Returns:
        The filled template with a fresh correlation id

    Raises:
        UnknownCommandError: If name is not in the catalog
        MissingFieldError: If a required option is empty
    """
    cmd = COMMANDS.get(name)
    if cmd is None:
        raise UnknownCommandError(f"unknown command: {name}")

    for attr in cmd.required:
        if not getattr(opts, attr):
            raise MissingFieldError(name, attr, FIELD_LABELS.get(attr, attr))

    opts = _apply_defaults(opts)
    values = [_render(getattr(opts, attr)) for attr in cmd.fields]
    return cmd.template.format(str(uuid.uuid4()), *values)
