"""YAML configuration loader and validator."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from onewol.core.packet import normalize_mac

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000


class ConfigError(Exception):
    """Raised for invalid or missing configuration."""


@dataclass
class Device:
    """An address-book entry. Identity is the normalized MAC, not the spelling."""

    mac: str
    name: str = ""

    @property
    def key(self) -> str:
        return normalize_mac(self.mac)


def load_config(path: Path) -> Optional[dict[str, Any]]:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to the YAML config file

    Returns:
        Parsed configuration dictionary, or None if file is empty

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
    """
    with open(path) as f:
        result: Optional[dict[str, Any]] = yaml.safe_load(f)
        return result


def validate_config(config: dict[str, Any]) -> list[str]:
    """
    Validate a loaded configuration dictionary.

    Returns:
        List of validation error messages (empty list = valid)
    """
    errors: list[str] = []

    if not isinstance(config, dict):
        return ["Config root must be a YAML mapping"]

    settings = config.get("settings") or {}
    if not isinstance(settings, dict):
        errors.append("'settings' must be a mapping")
    elif "port" in settings:
        port = settings["port"]
        if not isinstance(port, int) or isinstance(port, bool) or not 1 <= port <= 65535:
            errors.append(f"settings.port: expected an integer 1-65535, got {port!r}")

    devices = config.get("devices") or []
    if not isinstance(devices, list):
        errors.append("'devices' must be a list")
        return errors

    seen: dict[str, int] = {}
    for i, device in enumerate(devices):
        prefix = f"devices[{i}]"
        if not isinstance(device, dict):
            errors.append(f"{prefix}: must be a mapping")
            continue
        mac = device.get("mac")
        if not mac:
            errors.append(f"{prefix}: missing required field 'mac'")
            continue
        key = normalize_mac(str(mac))
        if len(key) != 12:
            errors.append(f"{prefix}: invalid mac '{mac}'")
            continue
        if key in seen:
            errors.append(f"{prefix}: duplicate of devices[{seen[key]}] ('{mac}')")
        else:
            seen[key] = i

    return errors


def settings_from_config(config: Optional[dict[str, Any]]) -> dict[str, Any]:
    """Return the settings section with defaults filled in."""
    settings = dict((config or {}).get("settings") or {})
    settings.setdefault("host", DEFAULT_HOST)
    settings.setdefault("port", DEFAULT_PORT)
    return settings


def devices_from_config(config: Optional[dict[str, Any]]) -> list[Device]:
    """
    Construct the address book from a config dict.

    Entries without a MAC are skipped; names default to an empty string.
    """
    devices: list[Device] = []
    for raw in (config or {}).get("devices") or []:
        if not isinstance(raw, dict) or not raw.get("mac"):
            continue
        devices.append(Device(mac=str(raw["mac"]), name=str(raw.get("name") or "")))
    return devices
