"""Command-line interface for OneWol (onewol)."""

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import click

from onewol import __version__

if TYPE_CHECKING:
    from onewol.config.store import AddressBook

DEFAULT_CONFIG = Path.home() / ".config" / "onewol" / "config.yaml"


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )


def _load_settings(config: str) -> dict:
    """Read and validate the config file. A missing file means defaults."""
    import yaml

    from onewol.config.loader import load_config, settings_from_config, validate_config

    path = Path(config)
    if not path.exists():
        return settings_from_config(None)
    try:
        raw = load_config(path) or {}
    except yaml.YAMLError as exc:
        click.echo(f"Cannot parse {path}: {exc}", err=True)
        sys.exit(1)
    errors = validate_config(raw)
    if errors:
        click.echo("Config validation errors:", err=True)
        for e in errors:
            click.echo(f"  • {e}", err=True)
        sys.exit(1)
    return settings_from_config(raw)


def _book(ctx: click.Context) -> "AddressBook":
    from onewol.config.store import AddressBook

    _load_settings(ctx.obj["config"])
    return AddressBook(Path(ctx.obj["config"]))


# ── Root group ────────────────────────────────────────────────────────────────


@click.group()
@click.version_option(version=__version__, prog_name="onewol")
@click.option(
    "--config",
    "-c",
    default=str(DEFAULT_CONFIG),
    envvar="ONEWOL_CONFIG",
    show_default=True,
    help="Path to onewol config.yaml",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config: str, verbose: bool) -> None:
    """OneWol: wake devices on the local network by MAC address."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


# ── devices group ─────────────────────────────────────────────────────────────


@main.group()
def devices() -> None:
    """Manage the device address book."""


@devices.command("list")
@click.pass_context
def devices_list(ctx: click.Context) -> None:
    """List all registered devices."""
    entries = _book(ctx).load_all()
    if not entries:
        click.echo("No devices registered.")
        return
    click.echo(f"{'MAC':<20} {'NAME'}")
    click.echo("─" * 44)
    for d in entries:
        click.echo(f"{d.mac:<20} {d.name}")


@devices.command("add")
@click.argument("mac")
@click.option("--name", "-n", default="", help="Display name for the device")
@click.pass_context
def devices_add(ctx: click.Context, mac: str, name: str) -> None:
    """Register a device by MAC address."""
    from onewol.config.store import DeviceExists
    from onewol.core.errors import InvalidMacFormat

    try:
        _book(ctx).add(mac, name)
    except InvalidMacFormat as exc:
        click.echo(str(exc), err=True)
        sys.exit(1)
    except DeviceExists:
        click.echo(f"Device {mac} is already registered.", err=True)
        sys.exit(1)
    click.echo(f"Added {mac}" + (f" ({name})" if name else ""))


@devices.command("rename")
@click.argument("mac")
@click.argument("name")
@click.pass_context
def devices_rename(ctx: click.Context, mac: str, name: str) -> None:
    """Change the display name of a registered device."""
    from onewol.config.store import DeviceNotFound

    try:
        _book(ctx).rename(mac, name)
    except DeviceNotFound:
        click.echo(f"Device {mac} not found.", err=True)
        sys.exit(1)
    click.echo(f"Renamed {mac} to {name}")


@devices.command("remove")
@click.argument("mac")
@click.pass_context
def devices_remove(ctx: click.Context, mac: str) -> None:
    """Remove a device from the address book."""
    from onewol.config.store import DeviceNotFound

    try:
        _book(ctx).remove(mac)
    except DeviceNotFound:
        click.echo(f"Device {mac} not found.", err=True)
        sys.exit(1)
    click.echo(f"Removed {mac}")


# ── wake command ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("target")
@click.pass_context
def wake(ctx: click.Context, target: str) -> None:
    """Send a Wake-on-LAN packet to TARGET (a MAC address or device name)."""
    from onewol.core.errors import InvalidMacFormat, NoEligibleInterfaces, SendFailure
    from onewol.core.wol import send_wake

    mac = _book(ctx).resolve(target)
    try:
        outcome = send_wake(mac)
    except InvalidMacFormat as exc:
        click.echo(f"✗  {exc}", err=True)
        sys.exit(1)
    except (NoEligibleInterfaces, SendFailure) as exc:
        click.echo(f"✗  Wake failed: {exc}", err=True)
        sys.exit(2)

    click.echo(f"✓  WOL packet sent to {mac}")
    for r in outcome.results:
        click.echo(f"   {r.target.interface_name:<12} → {r.target.broadcast_address}")


# ── network command ───────────────────────────────────────────────────────────


@main.command()
def network() -> None:
    """Show the local networks a wake packet would be broadcast on."""
    from onewol.core.interfaces import network_summary

    rows = network_summary()
    if not rows:
        click.echo("No usable IPv4 interfaces found.")
        return
    click.echo(f"{'INTERFACE':<16} {'ADDRESS':<16} {'CIDR'}")
    click.echo("─" * 52)
    for r in rows:
        click.echo(f"{r.name:<16} {r.address:<16} {r.cidr}")


# ── serve command ─────────────────────────────────────────────────────────────


@main.command()
@click.option("--host", default=None, help="Bind host [default: settings.host or 0.0.0.0]")
@click.option("--port", default=None, type=int, help="Bind port [default: settings.port or 3000]")
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int]) -> None:
    """Start the OneWol API server."""
    import uvicorn

    from onewol.api.routes import create_app

    config_path = ctx.obj["config"]
    settings = _load_settings(config_path)
    host = host or settings["host"]
    port = port or settings["port"]
    app = create_app(config_path=config_path)
    click.echo(f"Starting OneWol at http://{host}:{port}")
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
