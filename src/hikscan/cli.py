"""Command-line interface for hikscan (the `sadp` command)."""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import NoReturn, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from hikscan import __version__
from hikscan.config import Settings, load_settings, parse_duration
from hikscan.crypto import generate_reset_code
from hikscan.device_info import (
    PROBE_ENDPOINTS,
    extract_firmware_version,
    extract_model,
    fetch_reset_info,
)
from hikscan.exceptions import HikscanError
from hikscan.log import setup_logging
from hikscan.models import Device, SendOptions
from hikscan.network import HTTPClient, discover_devices, expand_cidr, normalize_mac
from hikscan.sadp import (
    MULTICAST_ADDR,
    SADP_PORT,
    SADPScanner,
    list_commands,
    to_csv,
    to_xml,
    truncate,
)

console = Console()


class DurationType(click.ParamType):
    """Click type for durations such as 5, 2.5, 500ms or 1m30s."""

    name = "duration"

    def convert(self, value, param, ctx):
        if isinstance(value, float):
            return value
        try:
            return parse_duration(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


DURATION = DurationType()


def fail(message: str) -> NoReturn:
    """Print an error and exit with status 1."""
    console.print(f"[red]Error:[/red] {escape(message)}")
    sys.exit(1)


def get_settings() -> Settings:
    try:
        return load_settings()
    except HikscanError as e:
        fail(str(e))


def print_device_table(devices: list[Device]) -> None:
    """Print SADP devices as a table."""
    if not devices:
        console.print("[yellow]No devices found.[/yellow]")
        return

    table = Table(title=f"SADP Devices ({len(devices)} total)")
    table.add_column("#", justify="right")
    table.add_column("IPv4 Address", style="cyan")
    table.add_column("MAC Address")
    table.add_column("Device Type")
    table.add_column("Status")
    table.add_column("Port", justify="right")
    table.add_column("Serial Number")
    table.add_column("Software Version")

    for i, dev in enumerate(devices, start=1):
        status = "[green]Active[/green]" if dev.is_activated else "[yellow]Inactive[/yellow]"
        table.add_row(
            str(i),
            escape(dev.ipv4_address),
            escape(dev.mac),
            escape(truncate(dev.device_type, 20)),
            status,
            str(dev.command_port),
            escape(truncate(dev.device_sn, 15)),
            escape(dev.software_version),
        )

    console.print(table)


def print_arp_devices(devices) -> None:
    for dev in devices:
        console.print(f"  IP: {dev.ip:<15}  MAC: {dev.mac}")


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="sadp")
@click.pass_context
def main(ctx: click.Context):
    """SADP - Hikvision Device Discovery Tool.

    Discovers Hikvision devices via ARP and the SADP multicast protocol,
    and sends SADP management commands.

    \b
    Environment variables:
      DISCOVERY_WORKERS   Number of concurrent workers (default: 100)
      DISCOVERY_TIMEOUT   Per-host timeout (default: 1s)
      SADP_TIMEOUT        SADP protocol timeout (default: 5s)
      DEBUG               Enable debug output (default: false)

    \b
    Examples:
      sadp discover:sadp
      sadp discover:sadp --xml --output devices.xml
      sadp scan 192.168.1.0/24
      sadp send 192.168.1.64 inquiry
      sadp reset --serial ABC123 --date 20231215
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main.command()
@click.argument("cidr")
@click.option("-w", "--workers", default=None, type=click.IntRange(min=1),
              help="Number of concurrent workers (default: DISCOVERY_WORKERS)")
@click.option("-t", "--timeout", default=None, type=DURATION,
              help="Timeout for each host probe (default: DISCOVERY_TIMEOUT)")
@click.option("--debug", is_flag=True, help="Enable debug output")
def discover(cidr: str, workers: Optional[int], timeout: Optional[float], debug: bool):
    """Discover Hikvision devices via ARP.

    Probes every address in CIDR and matches live hosts against the
    system ARP table.

    Examples:

        sadp discover 192.168.1.0/24
    """
    settings = get_settings()
    log = setup_logging(debug or settings.debug)
    workers = workers or settings.discovery_workers
    timeout = settings.discovery_timeout if timeout is None else timeout

    try:
        ips = expand_cidr(cidr)
    except HikscanError as e:
        fail(f"invalid CIDR: {e}")

    log.info(f"Scanning IP addresses: count={len(ips)} workers={workers}")

    with console.status(f"[bold blue]Scanning {len(ips)} addresses..."):
        devices = asyncio.run(discover_devices(ips, workers, timeout, log))

    console.print()
    console.print(f"[bold]Discovered {len(devices)} Hikvision device(s)[/bold]")
    print_arp_devices(devices)


@main.command("discover:sadp")
@click.option("-t", "--timeout", default=None, type=DURATION,
              help="Discovery timeout (default: SADP_TIMEOUT)")
@click.option("-o", "--output", "output_file", type=click.Path(dir_okay=False),
              help="Write output to file (table mode writes XML)")
@click.option("--xml", "xml_format", is_flag=True, help="Output in SADP-compatible XML")
@click.option("--csv", "csv_format", is_flag=True, help="Output in CSV format")
@click.option("--json", "json_format", is_flag=True, help="Output in JSON format")
@click.option("--debug", is_flag=True, help="Enable debug output")
def discover_sadp(
    timeout: Optional[float],
    output_file: Optional[str],
    xml_format: bool,
    csv_format: bool,
    json_format: bool,
    debug: bool,
):
    """Discover devices via SADP multicast probes."""
    settings = get_settings()
    log = setup_logging(debug or settings.debug)
    timeout = settings.sadp_timeout if timeout is None else timeout
    machine = xml_format or csv_format or json_format

    scanner = SADPScanner(timeout=timeout, logger=logging.getLogger("hikscan.sadp"))

    try:
        if machine and not output_file:
            devices = asyncio.run(scanner.discover())
        else:
            console.print("[bold cyan]Discovering Hikvision devices via SADP protocol...[/bold cyan]")
            console.print(f"[dim]Sending multicast probes to {MULTICAST_ADDR}:{SADP_PORT}[/dim]")
            with console.status("[bold blue]Waiting for responses..."):
                devices = asyncio.run(scanner.discover())
            console.print(f"\nDiscovered {len(devices)} device(s)")
    except HikscanError as e:
        fail(str(e))

    log.debug(f"SADP discovery finished: devices={len(devices)}")

    output = ""
    if json_format:
        output = json.dumps([d.to_dict() for d in devices], indent=2)
    elif xml_format:
        output = to_xml(devices)
    elif csv_format:
        output = to_csv(devices)
    else:
        print_device_table(devices)
        if output_file:
            output = to_xml(devices)

    if output_file and output:
        try:
            Path(output_file).write_text(output)
        except OSError as e:
            fail(f"error writing file: {e}")
        console.print(f"Output written to: {escape(output_file)}")
    elif output:
        click.echo(output.rstrip("\n"))


@main.command()
@click.argument("cidr")
@click.option("-w", "--workers", default=None, type=click.IntRange(min=1),
              help="Number of concurrent workers (default: DISCOVERY_WORKERS)")
@click.option("-t", "--timeout", default=None, type=DURATION,
              help="Timeout for each host probe (default: DISCOVERY_TIMEOUT)")
@click.option("--debug", is_flag=True, help="Enable debug output")
def scan(cidr: str, workers: Optional[int], timeout: Optional[float], debug: bool):
    """Discover devices using both ARP and SADP.

    Examples:

        sadp scan 192.168.1.0/24

        sadp scan --workers 50 10.0.0.0/24
    """
    settings = get_settings()
    log = setup_logging(debug or settings.debug)
    workers = workers or settings.discovery_workers
    timeout = settings.discovery_timeout if timeout is None else timeout

    try:
        ips = expand_cidr(cidr)
    except HikscanError as e:
        fail(f"invalid CIDR: {e}")

    console.print(f"Scanning {escape(cidr)} for Hikvision devices...")

    console.print("\n[bold][1/2] ARP Discovery...[/bold]")
    arp_devices = asyncio.run(discover_devices(ips, workers, timeout, log))
    console.print(f"      Found {len(arp_devices)} device(s) via ARP")

    console.print("\n[bold][2/2] SADP Discovery...[/bold]")
    scanner = SADPScanner(timeout=settings.sadp_timeout, logger=logging.getLogger("hikscan.sadp"))
    try:
        sadp_devices = asyncio.run(scanner.discover())
    except HikscanError as e:
        log.warning(f"SADP discovery failed: {e}")
        sadp_devices = []
    console.print(f"      Found {len(sadp_devices)} device(s) via SADP")

    unique_macs = {dev.mac.upper() for dev in arp_devices}
    unique_macs.update(dev.mac.upper() for dev in sadp_devices)

    console.print()
    console.print(Panel.fit("[bold cyan]SCAN RESULTS[/bold cyan]", border_style="cyan"))
    console.print(f"Total unique devices: {len(unique_macs)}\n")

    if arp_devices:
        console.print("[bold]Devices found via ARP:[/bold]")
        print_arp_devices(arp_devices)
        console.print()

    if sadp_devices:
        console.print("[bold]Devices found via SADP:[/bold]")
        print_device_table(sadp_devices)


@main.command()
@click.argument("ip_address")
def probe(ip_address: str):
    """Check device info and status over HTTP."""
    settings = get_settings()
    client = HTTPClient(settings.user_agent, settings.http_timeout)

    console.print(f"Probing device at {escape(ip_address)}...\n")

    table = Table(title="Endpoints")
    table.add_column("Endpoint", style="cyan")
    table.add_column("Status")
    table.add_column("Details")

    for path, description in PROBE_ENDPOINTS:
        try:
            resp = client.get(ip_address, path)
        except HikscanError as e:
            table.add_row(description, "[red]ERROR[/red]", escape(str(e)))
            continue

        details = []
        if resp.status_code == 200 and resp.body:
            body = resp.body.decode("utf-8", errors="replace")
            firmware = extract_firmware_version(body)
            if firmware:
                details.append(f"Firmware: {firmware}")
            model = extract_model(body)
            if model:
                details.append(f"Model: {model}")

        table.add_row(description, f"HTTP {resp.status_code}", escape(", ".join(details)))

    console.print(table)


def print_command_list() -> None:
    table = Table(title="Available SADP Commands")
    table.add_column("Command", style="cyan")
    table.add_column("Needs MAC")
    table.add_column("Needs Pass")
    table.add_column("Description")

    for cmd in list_commands():
        table.add_row(
            cmd.name,
            "Yes" if cmd.needs_mac else "No",
            "Yes" if cmd.needs_pass else "No",
            cmd.description,
        )

    console.print(table)


@main.command()
@click.argument("target_ip", required=False)
@click.argument("command", required=False, default="inquiry")
@click.option("--mac", default="", help="Target device MAC address (required for most commands)")
@click.option("--password", default="", help="Device password")
@click.option("--code", default="", help="Security/reset code")
@click.option("--ip", "new_ip", default="", help="New IP address (update)")
@click.option("--mask", "new_mask", default="255.255.255.0", show_default=True,
              help="New subnet mask (update)")
@click.option("--gateway", "new_gateway", default="", help="New gateway (update)")
@click.option("--port", "new_port", default=8000, show_default=True, type=int,
              help="New SDK port (update)")
@click.option("--dhcp", is_flag=True, help="Enable DHCP (update)")
@click.option("--email", default="", help="Email address (setmailbox)")
@click.option("-t", "--timeout", default=None, type=DURATION,
              help="Command timeout (default: SADP_TIMEOUT)")
@click.option("--debug", is_flag=True, help="Enable debug output")
@click.option("--list", "list_cmds", is_flag=True, help="List available commands")
@click.pass_context
def send(
    ctx: click.Context,
    target_ip: Optional[str],
    command: str,
    mac: str,
    password: str,
    code: str,
    new_ip: str,
    new_mask: str,
    new_gateway: str,
    new_port: int,
    dhcp: bool,
    email: str,
    timeout: Optional[float],
    debug: bool,
    list_cmds: bool,
):
    """Send a SADP command to a device.

    TARGET_IP 0.0.0.0 broadcasts the command on every interface and
    matches the reply by --mac. COMMAND defaults to inquiry.

    Examples:

        sadp send 192.168.1.64 inquiry

        sadp send 192.168.1.64 exchangecode --mac 4C:BD:8F:61:CC:5C

        sadp send 0.0.0.0 exchangecode --mac 4C:BD:8F:61:CC:5C
    """
    if list_cmds:
        print_command_list()
        return

    if not target_ip:
        click.echo(ctx.get_help())
        return

    settings = get_settings()
    setup_logging(debug or settings.debug)
    timeout = settings.sadp_timeout if timeout is None else timeout
    mac_addr = normalize_mac(mac)

    opts = SendOptions(
        target_ip=target_ip,
        target_mac=mac_addr,
        password=password,
        code=code,
        new_ip=new_ip,
        new_mask=new_mask,
        new_gateway=new_gateway,
        new_port=new_port,
        dhcp=dhcp,
        email=email,
        timeout=timeout,
    )

    console.print(f"Sending '{escape(command)}' command to {escape(target_ip)}...")
    if target_ip == "0.0.0.0":
        console.print(f"Using broadcast mode (target MAC: {mac_addr})")

    scanner = SADPScanner(timeout=timeout, logger=logging.getLogger("hikscan.sadp"))
    try:
        response = asyncio.run(scanner.send_command(command, opts))
    except HikscanError as e:
        fail(str(e))

    click.echo("\nResponse:")
    click.echo("---")
    click.echo(response)
    click.echo("---")


RESET_NOTES = """\
IMPORTANT:
  - Serial number is CASE-SENSITIVE
  - Remove the model prefix from the serial number
    Example: DS-7616NI-I20123456789 -> 0123456789
  - Date must match the device's internal clock, NOT today's date
  - Check the 'Start Time' or 'Boot Time' in SADP to find device date

Note: This only works on firmware versions < 5.3.0"""


@main.command()
@click.option("--serial", default="", help="Device serial number (case-sensitive, without model prefix)")
@click.option("--date", "device_date", default="", help="Device date in YYYYMMDD format (device clock)")
@click.option("--ip", "ip_address", default="", help="Device IP to auto-fetch serial and date")
@click.option("--debug", is_flag=True, help="Enable debug output")
@click.pass_context
def reset(ctx: click.Context, serial: str, device_date: str, ip_address: str, debug: bool):
    """Generate a password reset code (firmware < 5.3.0)."""
    settings = get_settings()
    setup_logging(debug or settings.debug)

    if ip_address:
        client = HTTPClient(settings.user_agent, settings.http_timeout)
        try:
            info = fetch_reset_info(client, ip_address)
        except HikscanError as e:
            console.print(f"[yellow]Warning:[/yellow] Could not auto-fetch device info: {escape(str(e))}")
            console.print("Please provide --serial and --date manually")
        else:
            serial = serial or info.serial
            device_date = device_date or info.date
            console.print(
                f"[dim]Fetched serial {escape(info.serial)} (model {escape(info.model or '-')}); "
                f"using date {info.date}, verify it matches the device clock[/dim]"
            )

    if not serial or not device_date:
        click.echo(ctx.get_help())
        click.echo()
        click.echo(RESET_NOTES)
        return

    if len(device_date) != 8:
        fail(f"date must be in YYYYMMDD format (got: {device_date})")

    reset_code = generate_reset_code(serial, device_date)

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Serial Number", escape(serial))
    table.add_row("Device Date", escape(device_date))
    table.add_row("Seed", escape(serial + device_date))
    table.add_row("RESET CODE", f"[bold green]{escape(reset_code)}[/bold green]")

    console.print(Panel(table, title="Hikvision Password Reset Code", border_style="cyan"))
    console.print()
    console.print("[bold]Instructions:[/bold]")
    console.print("1. Open SADP Tool and select your device")
    console.print("2. Click 'Forgot Password' or enter the security code field")
    console.print("3. Enter the reset code above")
    console.print("4. The admin password will be reset to '12345' or '123456789abc'")
    console.print()
    console.print("[dim]Note: This only works on firmware < 5.3.0[/dim]")


if __name__ == "__main__":
    main()
