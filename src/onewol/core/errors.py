"""Failure kinds raised by the wake dispatcher."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from onewol.core.wol import WakeOutcome


class WakeError(Exception):
    """Base class for every failure a wake request can end in."""


class InvalidMacFormat(WakeError, ValueError):
    """Raised when a MAC address does not normalize to 12 hex characters."""

    def __init__(self, mac: str) -> None:
        self.mac = mac
        super().__init__(f"Invalid MAC address: {mac!r}")


class NoEligibleInterfaces(WakeError):
    """Raised when the host has no interface a magic packet can be broadcast on."""

    def __init__(self, message: str = "no local network interfaces found") -> None:
        super().__init__(message)


class AllTargetsFiltered(NoEligibleInterfaces):
    """Eligible interfaces exist, but every one resolved to 255.255.255.255."""

    def __init__(self, interface_names: list[str]) -> None:
        self.interface_names = interface_names
        super().__init__(
            "every eligible interface resolved to the limited broadcast address "
            f"({', '.join(interface_names)})"
        )


class SendFailure(WakeError):
    """Raised when one or more per-interface sends failed."""

    def __init__(self, outcome: "WakeOutcome") -> None:
        self.outcome = outcome
        failed = outcome.failed
        super().__init__(
            f"{len(failed)} of {len(outcome.results)} send(s) failed: "
            + "; ".join(f"{r.target.interface_name}: {r.error}" for r in failed)
        )
