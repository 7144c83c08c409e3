"""Magic packet construction."""

import re

from wakeonlan import create_magic_packet

from onewol.core.errors import InvalidMacFormat

_NON_HEX_RE = re.compile(r"[^0-9a-f]")

MAGIC_PACKET_SIZE = 6 + 16 * 6


def normalize_mac(mac: str) -> str:
    """
    Reduce a MAC address to its bare lowercase hex digits.

    ``"AA:BB:CC:DD:EE:FF"``, ``"aa-bb-cc-dd-ee-ff"``, ``"aabb.ccdd.eeff"`` and
    ``"aabbccddeeff"`` all normalize to ``"aabbccddeeff"``. The address book
    uses the same rule to decide whether two records are the same device.
    """
    return _NON_HEX_RE.sub("", mac.lower())


def encode_magic_packet(mac: str) -> bytes:
    """
    Build the Wake-on-LAN payload for a MAC address.

    Args:
        mac: MAC address in any common notation (colon, dash, dot or bare hex)

    Returns:
        102 bytes: six 0xFF bytes followed by the MAC repeated 16 times

    Raises:
        InvalidMacFormat: If the address does not normalize to 12 hex characters
    """
    normalized = normalize_mac(mac or "")
    if len(normalized) != 12:
        raise InvalidMacFormat(mac)
    return create_magic_packet(normalized)
