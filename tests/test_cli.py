"""Tests for the OneWol CLI."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import yaml
from click.testing import CliRunner

from onewol.cli import main
from onewol.core.errors import NoEligibleInterfaces, SendFailure
from onewol.core.interfaces import InterfaceSummary
from onewol.core.wol import BroadcastTarget, TargetResult, WakeOutcome


# ── Helpers ───────────────────────────────────────────────────────────────────


def _write_config(path: Path, **overrides: object) -> None:
    """Write a minimal valid config with one device named 'desktop'."""
    config: dict = {"devices": [{"mac": "AA:BB:CC:DD:EE:FF", "name": "desktop"}]}
    config.update(overrides)
    path.write_text(yaml.dump(config))


def _ok_outcome() -> WakeOutcome:
    target = BroadcastTarget("eth0", "192.168.1.50", "192.168.1.255")
    return WakeOutcome(mac="aabbccddeeff", packet=b"", results=[TargetResult(target)])


def _invoke(cfg: Path, *args: str):
    return CliRunner().invoke(main, ["--config", str(cfg), *args])


# ── config error paths ────────────────────────────────────────────────────────


class TestConfigErrors:
    def test_validation_error_exits_1(self, tmp_path: Path) -> None:
        cfg = tmp_path / "bad.yaml"
        cfg.write_text(yaml.dump({"devices": [{"mac": "12:34"}]}))
        result = _invoke(cfg, "devices", "list")
        assert result.exit_code == 1

    def test_unparseable_yaml_exits_1(self, tmp_path: Path) -> None:
        cfg = tmp_path / "bad.yaml"
        cfg.write_text("devices: [unclosed\n")
        result = _invoke(cfg, "devices", "list")
        assert result.exit_code == 1
        assert "Cannot parse" in result.output

    def test_list_root_exits_1(self, tmp_path: Path) -> None:
        cfg = tmp_path / "bad.yaml"
        cfg.write_text("- a\n- b\n")
        result = _invoke(cfg, "devices", "add", "11:22:33:44:55:66")
        assert result.exit_code == 1
        assert cfg.read_text() == "- a\n- b\n"

    def test_missing_config_is_empty_book(self, tmp_path: Path) -> None:
        result = _invoke(tmp_path / "nope.yaml", "devices", "list")
        assert result.exit_code == 0
        assert "No devices registered." in result.output


# ── devices ───────────────────────────────────────────────────────────────────


class TestDevices:
    def test_list(self, tmp_path: Path) -> None:
        cfg = tmp_path / "config.yaml"
        _write_config(cfg)
        result = _invoke(cfg, "devices", "list")
        assert result.exit_code == 0
        assert "AA:BB:CC:DD:EE:FF" in result.output
        assert "desktop" in result.output

    def test_add(self, tmp_path: Path) -> None:
        cfg = tmp_path / "config.yaml"
        _write_config(cfg)
        result = _invoke(cfg, "devices", "add", "11:22:33:44:55:66", "--name", "nas")
        assert result.exit_code == 0
        raw = yaml.safe_load(cfg.read_text())
        assert raw["devices"][-1] == {"mac": "11:22:33:44:55:66", "name": "nas"}

    def test_add_creates_config(self, tmp_path: Path) -> None:
        cfg = tmp_path / "new" / "config.yaml"
        result = _invoke(cfg, "devices", "add", "11:22:33:44:55:66")
        assert result.exit_code == 0
        assert cfg.exists()

    def test_add_duplicate_exits_1(self, tmp_path: Path) -> None:
        cfg = tmp_path / "config.yaml"
        _write_config(cfg)
        result = _invoke(cfg, "devices", "add", "aabbccddeeff")
        assert result.exit_code == 1

    def test_add_invalid_exits_1(self, tmp_path: Path) -> None:
        cfg = tmp_path / "config.yaml"
        _write_config(cfg)
        result = _invoke(cfg, "devices", "add", "12:34")
        assert result.exit_code == 1

    def test_rename(self, tmp_path: Path) -> None:
        cfg = tmp_path / "config.yaml"
        _write_config(cfg)
        result = _invoke(cfg, "devices", "rename", "aa-bb-cc-dd-ee-ff", "workstation")
        assert result.exit_code == 0
        assert yaml.safe_load(cfg.read_text())["devices"][0]["name"] == "workstation"

    def test_remove_missing_exits_1(self, tmp_path: Path) -> None:
        cfg = tmp_path / "config.yaml"
        _write_config(cfg)
        result = _invoke(cfg, "devices", "remove", "11:22:33:44:55:66")
        assert result.exit_code == 1

    def test_remove(self, tmp_path: Path) -> None:
        cfg = tmp_path / "config.yaml"
        _write_config(cfg)
        result = _invoke(cfg, "devices", "remove", "AA:BB:CC:DD:EE:FF")
        assert result.exit_code == 0
        assert yaml.safe_load(cfg.read_text())["devices"] == []


# ── wake ──────────────────────────────────────────────────────────────────────


class TestWake:
    @patch("onewol.core.wol.send_wake")
    def test_wake_by_name(self, mock_wake: MagicMock, tmp_path: Path) -> None:
        mock_wake.return_value = _ok_outcome()
        cfg = tmp_path / "config.yaml"
        _write_config(cfg)
        result = _invoke(cfg, "wake", "desktop")
        assert result.exit_code == 0
        mock_wake.assert_called_once_with("AA:BB:CC:DD:EE:FF")
        assert "192.168.1.255" in result.output

    @patch("onewol.core.wol.send_wake")
    def test_wake_adhoc_mac(self, mock_wake: MagicMock, tmp_path: Path) -> None:
        mock_wake.return_value = _ok_outcome()
        cfg = tmp_path / "config.yaml"
        _write_config(cfg)
        result = _invoke(cfg, "wake", "11:22:33:44:55:66")
        assert result.exit_code == 0
        mock_wake.assert_called_once_with("11:22:33:44:55:66")

    def test_wake_invalid_exits_1(self, tmp_path: Path) -> None:
        cfg = tmp_path / "config.yaml"
        _write_config(cfg)
        result = _invoke(cfg, "wake", "laptop")
        assert result.exit_code == 1

    @patch("onewol.core.wol.send_wake", side_effect=NoEligibleInterfaces())
    def test_no_interfaces_exits_2(self, mock_wake: MagicMock, tmp_path: Path) -> None:
        cfg = tmp_path / "config.yaml"
        _write_config(cfg)
        result = _invoke(cfg, "wake", "desktop")
        assert result.exit_code == 2

    @patch("onewol.core.wol.send_wake")
    def test_send_failure_exits_2(self, mock_wake: MagicMock, tmp_path: Path) -> None:
        target = BroadcastTarget("eth0", "192.168.1.50", "192.168.1.255")
        mock_wake.side_effect = SendFailure(
            WakeOutcome(mac="aabbccddeeff", packet=b"", results=[TargetResult(target, "boom")])
        )
        cfg = tmp_path / "config.yaml"
        _write_config(cfg)
        result = _invoke(cfg, "wake", "desktop")
        assert result.exit_code == 2


# ── network / serve ───────────────────────────────────────────────────────────


class TestNetwork:
    @patch("onewol.core.interfaces.network_summary")
    def test_prints_rows(self, mock_summary: MagicMock, tmp_path: Path) -> None:
        mock_summary.return_value = [
            InterfaceSummary("eth0", "192.168.1.50", "255.255.255.0", "192.168.1.0/24")
        ]
        result = _invoke(tmp_path / "config.yaml", "network")
        assert result.exit_code == 0
        assert "eth0" in result.output
        assert "192.168.1.0/24" in result.output

    @patch("onewol.core.interfaces.network_summary", return_value=[])
    def test_no_rows(self, mock_summary: MagicMock, tmp_path: Path) -> None:
        result = _invoke(tmp_path / "config.yaml", "network")
        assert "No usable IPv4 interfaces found." in result.output


class TestServe:
    @patch("uvicorn.run")
    def test_uses_settings(self, mock_run: MagicMock, tmp_path: Path) -> None:
        cfg = tmp_path / "config.yaml"
        _write_config(cfg, settings={"host": "127.0.0.1", "port": 8081})
        result = _invoke(cfg, "serve")
        assert result.exit_code == 0
        assert mock_run.call_args.kwargs == {"host": "127.0.0.1", "port": 8081}

    @patch("uvicorn.run")
    def test_options_override_settings(self, mock_run: MagicMock, tmp_path: Path) -> None:
        cfg = tmp_path / "config.yaml"
        _write_config(cfg, settings={"port": 8081})
        result = _invoke(cfg, "serve", "--port", "9000")
        assert result.exit_code == 0
        assert mock_run.call_args.kwargs["port"] == 9000
        assert mock_run.call_args.kwargs["host"] == "0.0.0.0"


class TestVersion:
    def test_version(self) -> None:
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "onewol" in result.output
