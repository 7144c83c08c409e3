"""Atomic YAML config write-back for OneWol."""

import os
import tempfile
from pathlib import Path
from typing import Any, Optional

import yaml

from onewol.config.loader import Device


def device_to_raw(device: Device) -> dict[str, Any]:
    """Serialize a Device back to the raw YAML dict format the loader expects."""
    return {"mac": device.mac, "name": device.name}


def write_config(path: Path, config: dict[str, Any]) -> None:
    """
    Replace *path* with the YAML rendering of *config*.

    The document is rendered before anything touches disk, written to a
    sibling temp file, flushed to disk and then swapped in with os.replace.
    Readers see either the old file or the new one.

    Args:
        path: Destination config.yaml path.
        config: Full config dict (settings + devices).
    """
    text = yaml.safe_dump(config, default_flow_style=False, allow_unicode=True, sort_keys=False)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def build_config_dict(
    devices: list[Device],
    settings: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """
    Build a full config dict from devices + settings sections.

    Args:
        devices: Current address book.
        settings: Raw settings dict (host, port …).

    Returns:
        Config dict ready for write_config().
    """
    result: dict[str, Any] = {}
    if settings:
        result["settings"] = settings
    result["devices"] = [device_to_raw(d) for d in devices]
    return result
