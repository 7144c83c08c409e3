"""File-backed address book of wakeable devices."""

import logging
import threading
from pathlib import Path
from typing import Any, Optional

import yaml

from onewol.config.loader import ConfigError, Device, devices_from_config, load_config
from onewol.config.writer import build_config_dict, write_config
from onewol.core.errors import InvalidMacFormat
from onewol.core.packet import normalize_mac

logger = logging.getLogger(__name__)


class DeviceExists(Exception):
    """Raised when adding a MAC that is already in the address book."""

    def __init__(self, mac: str) -> None:
        self.mac = mac
        super().__init__(f"Device {mac} already exists")


class DeviceNotFound(Exception):
    """Raised when a MAC is not in the address book."""

    def __init__(self, mac: str) -> None:
        self.mac = mac
        super().__init__(f"Device {mac} not found")


class AddressBook:
    """
    Devices stored under the ``devices:`` key of the OneWol config file.

    Records are keyed by normalized MAC, so ``AA:BB:CC:DD:EE:FF`` and
    ``aabbccddeeff`` are the same device. The ``settings:`` section of the file
    is preserved on every write.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> dict[str, Any]:
        """Raw config dict. Raises ConfigError if the file is not a YAML mapping."""
        if not self.path.exists():
            return {}
        try:
            raw = load_config(self.path) or {}
        except yaml.YAMLError as exc:
            logger.warning("Cannot parse %s: %s", self.path, exc)
            raise ConfigError(f"{self.path}: invalid YAML") from exc
        if not isinstance(raw, dict):
            logger.warning("Cannot use %s: root is a %s, not a mapping", self.path, type(raw).__name__)
            raise ConfigError(f"{self.path}: config root must be a YAML mapping")
        return raw

    def load_all(self) -> list[Device]:
        return devices_from_config(self._read())

    def save_all(self, devices: list[Device]) -> None:
        raw = self._read()
        write_config(self.path, build_config_dict(devices, raw.get("settings")))
        logger.debug("Saved %d device(s) to %s", len(devices), self.path)

    def find(self, mac: str) -> Optional[Device]:
        key = normalize_mac(mac)
        return next((d for d in self.load_all() if d.key == key), None)

    def add(self, mac: str, name: str = "") -> Device:
        """
        Append a device.

        Raises:
            InvalidMacFormat: If *mac* does not normalize to 12 hex characters
            DeviceExists: If a device with the same normalized MAC is stored
        """
        if len(normalize_mac(mac)) != 12:
            raise InvalidMacFormat(mac)
        with self._lock:
            devices = self.load_all()
            if any(d.key == normalize_mac(mac) for d in devices):
                raise DeviceExists(mac)
            device = Device(mac=mac, name=name)
            devices.append(device)
            self.save_all(devices)
        logger.info("Added device %s (%s)", mac, name or "unnamed")
        return device

    def rename(self, mac: str, name: str) -> Device:
        """Set the display name of a stored device. Raises DeviceNotFound."""
        key = normalize_mac(mac)
        with self._lock:
            devices = self.load_all()
            match = next((d for d in devices if d.key == key), None)
            if match is None:
                raise DeviceNotFound(mac)
            match.name = name
            self.save_all(devices)
        return match

    def remove(self, mac: str) -> None:
        """Delete a stored device. Raises DeviceNotFound."""
        key = normalize_mac(mac)
        with self._lock:
            devices = self.load_all()
            remaining = [d for d in devices if d.key != key]
            if len(remaining) == len(devices):
                raise DeviceNotFound(mac)
            self.save_all(remaining)
        logger.info("Removed device %s", mac)

    def resolve(self, mac_or_name: str) -> str:
        """
        Map a device name or MAC to the MAC to wake.

        Unknown input is returned unchanged so ad-hoc MAC addresses still work.
        """
        devices = self.load_all()
        by_name = next((d for d in devices if d.name and d.name == mac_or_name), None)
        if by_name is not None:
            return by_name.mac
        key = normalize_mac(mac_or_name)
        by_mac = next((d for d in devices if key and d.key == key), None)
        return by_mac.mac if by_mac is not None else mac_or_name
