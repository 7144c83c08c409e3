"""Local network interface discovery and classification."""

import ipaddress
import logging
import socket
from dataclasses import dataclass

import psutil

logger = logging.getLogger(__name__)

# Name prefixes of virtualization, bridge and tunnel interfaces. These rarely
# reach the physical segment where wake targets live.
VIRTUAL_PREFIXES = (
    "vnet",
    "veth",
    "docker",
    "br-",
    "virbr",
    "tun",
    "tap",
    "vmnet",
    "vmbr",
    "lo",
    "ovs",
    "ifb",
    "docker0",
)

_LINK_LOCAL = ipaddress.IPv4Network("169.254.0.0/16")


@dataclass(frozen=True)
class NetworkInterface:
    """One IPv4 address bound to a local interface."""

    name: str
    address: str
    netmask: str
    internal: bool = False

    @property
    def link_local(self) -> bool:
        try:
            return ipaddress.IPv4Address(self.address) in _LINK_LOCAL
        except ValueError:
            return False


@dataclass(frozen=True)
class InterfaceSummary:
    """Diagnostic view of an interface, as shown by ``GET /network``."""

    name: str
    address: str
    netmask: str
    cidr: str


def is_virtual(name: str) -> bool:
    """Return True if *name* looks like a virtual, bridge or tunnel interface."""
    if not name:
        return False
    return name.lower().startswith(VIRTUAL_PREFIXES)


def is_eligible(iface: NetworkInterface) -> bool:
    """Return True if a magic packet may be broadcast from *iface*."""
    return not (iface.internal or iface.link_local or is_virtual(iface.name))


def _is_loopback(address: str) -> bool:
    try:
        return ipaddress.IPv4Address(address).is_loopback
    except ValueError:
        return False


def survey_interfaces() -> list[NetworkInterface]:
    """
    Enumerate the host's IPv4 interface addresses.

    Loopback addresses and entries without an address or netmask are dropped.
    Virtual interfaces are *not* removed here; see :func:`is_eligible`.

    Returns:
        One NetworkInterface per (interface, IPv4 address) pair. Empty if the
        operating system could not be queried.
    """
    try:
        nets = psutil.net_if_addrs()
    except OSError as exc:
        logger.warning("Could not enumerate network interfaces: %s", exc)
        return []

    found: list[NetworkInterface] = []
    for name, addrs in nets.items():
        for addr in addrs:
            if addr.family != socket.AF_INET:
                continue
            if not addr.address or not addr.netmask:
                continue
            iface = NetworkInterface(
                name=name,
                address=addr.address,
                netmask=addr.netmask,
                internal=_is_loopback(addr.address),
            )
            if iface.internal:
                continue
            found.append(iface)
    logger.debug("Surveyed %d IPv4 interface address(es)", len(found))
    return found


def network_summary() -> list[InterfaceSummary]:
    """
    Describe every non-virtual IPv4 interface with its network in CIDR form.

    Returns:
        InterfaceSummary rows, e.g. ``eth0 192.168.1.50 255.255.255.0 192.168.1.0/24``
    """
    rows: list[InterfaceSummary] = []
    for iface in survey_interfaces():
        if is_virtual(iface.name):
            continue
        try:
            network = ipaddress.IPv4Network(f"{iface.address}/{iface.netmask}", strict=False)
        except ValueError as exc:
            logger.debug("Skipping %s (%s/%s): %s", iface.name, iface.address, iface.netmask, exc)
            continue
        rows.append(
            InterfaceSummary(
                name=iface.name,
                address=iface.address,
                netmask=iface.netmask,
                cidr=network.with_prefixlen,
            )
        )
    return rows
