"""Wake-on-LAN broadcast dispatch."""

import ipaddress
import logging
import socket
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, Optional

from onewol.core.errors import AllTargetsFiltered, NoEligibleInterfaces, SendFailure
from onewol.core.interfaces import NetworkInterface, is_eligible, survey_interfaces
from onewol.core.packet import encode_magic_packet, normalize_mac

logger = logging.getLogger(__name__)

WOL_PORT = 9
LIMITED_BROADCAST = "255.255.255.255"


@dataclass(frozen=True)
class BroadcastTarget:
    """Where one copy of the magic packet goes."""

    interface_name: str
    source_address: str
    broadcast_address: str


@dataclass(frozen=True)
class TargetResult:
    target: BroadcastTarget
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class WakeOutcome:
    """Aggregate result of one wake request."""

    mac: str
    packet: bytes
    results: list[TargetResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return bool(self.results) and all(r.ok for r in self.results)

    @property
    def failed(self) -> list[TargetResult]:
        return [r for r in self.results if not r.ok]


def broadcast_address(address: str, netmask: str) -> str:
    """
    Compute the subnet broadcast address for an IPv4 address and netmask.

    The netmask is applied bitwise, so non-contiguous masks still yield a
    result rather than an error.

    Raises:
        ValueError: If either value is not a dotted-quad IPv4 address
    """
    addr = int(ipaddress.IPv4Address(address))
    mask = int(ipaddress.IPv4Address(netmask))
    return str(ipaddress.IPv4Address((addr & mask) | (~mask & 0xFFFFFFFF)))


def _derive_targets(
    interfaces: Iterable[NetworkInterface],
) -> tuple[list[BroadcastTarget], list[str]]:
    """Return the usable targets and the names dropped for resolving to 255.255.255.255."""
    targets: list[BroadcastTarget] = []
    limited: list[str] = []
    for iface in interfaces:
        if not is_eligible(iface):
            continue
        try:
            bcast = broadcast_address(iface.address, iface.netmask)
        except ValueError as exc:
            logger.debug("Ignoring %s (%s/%s): %s", iface.name, iface.address, iface.netmask, exc)
            continue
        if bcast == LIMITED_BROADCAST:
            logger.debug("Dropping %s: broadcast resolves to %s", iface.name, LIMITED_BROADCAST)
            limited.append(iface.name)
            continue
        targets.append(
            BroadcastTarget(
                interface_name=iface.name,
                source_address=iface.address,
                broadcast_address=bcast,
            )
        )
    return targets, limited


def broadcast_targets(interfaces: Iterable[NetworkInterface]) -> list[BroadcastTarget]:
    """
    Derive one broadcast target per eligible interface.

    Targets that degenerate to the limited broadcast address are dropped.
    """
    return _derive_targets(interfaces)[0]


def _send_to_target(packet: bytes, target: BroadcastTarget, port: int) -> TargetResult:
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            sock.bind((target.source_address, 0))
            sock.sendto(packet, (target.broadcast_address, port))
    except OSError as exc:
        logger.warning(
            "WOL send via %s (%s -> %s:%d) failed: %s",
            target.interface_name,
            target.source_address,
            target.broadcast_address,
            port,
            exc,
        )
        return TargetResult(target=target, error=str(exc))
    logger.debug(
        "WOL packet sent via %s (%s -> %s:%d)",
        target.interface_name,
        target.source_address,
        target.broadcast_address,
        port,
    )
    return TargetResult(target=target)


def send_wake(mac: str) -> WakeOutcome:
    """
    Broadcast a Wake-on-LAN magic packet on every eligible local network.

    One UDP socket is opened per target and all sends run concurrently. The
    call returns only after every send has finished.

    Args:
        mac: MAC address of the machine to wake (any common notation)

    Returns:
        WakeOutcome listing the per-interface results, all successful

    Raises:
        InvalidMacFormat: If the MAC is malformed; nothing is sent
        NoEligibleInterfaces: If no interface can carry the broadcast
        SendFailure: If at least one send failed, even if others succeeded
    """
    packet = encode_magic_packet(mac)

    targets, limited = _derive_targets(survey_interfaces())
    if not targets:
        if limited:
            raise AllTargetsFiltered(limited)
        raise NoEligibleInterfaces()

    logger.info(
        "Sending WOL magic packet to %s via %d interface(s): %s",
        mac,
        len(targets),
        ", ".join(f"{t.interface_name}={t.broadcast_address}" for t in targets),
    )
    with ThreadPoolExecutor(max_workers=len(targets), thread_name_prefix="wol") as pool:
        futures = [pool.submit(_send_to_target, packet, t, WOL_PORT) for t in targets]
        results = [f.result() for f in futures]

    outcome = WakeOutcome(mac=normalize_mac(mac), packet=packet, results=results)
    if not outcome.success:
        raise SendFailure(outcome)
    logger.info("WOL packet for %s sent on all %d interface(s)", mac, len(results))
    return outcome
