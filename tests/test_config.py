"""Unit tests for settings, validation and inventory loading."""

from pathlib import Path

import pytest

from hostprov.core.config import (
    DEFAULT_REMOTE_COMMAND,
    DEFAULT_SSH_OPTIONS,
    Inventory,
    Settings,
    load_inventory,
    require_hostname,
    require_ipv4,
    validate_hostname,
)
from hostprov.core.errors import InvalidTargetError, InventoryError
from hostprov.core.remote import build_remote_command


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        for var in (
            "HOSTPROV_HOSTS_FILE",
            "HOSTPROV_HOSTNAME_FILE",
            "HOSTPROV_NETPLAN_DIR",
            "HOSTPROV_SYSLOG_ADDRESS",
            "HOSTPROV_HOME_ROOT",
        ):
            monkeypatch.delenv(var, raising=False)

        settings = Settings.from_env()
        assert settings.hosts_file == Path("/etc/hosts")
        assert settings.hostname_file == Path("/etc/hostname")
        assert settings.netplan_dir == Path("/etc/netplan")
        assert settings.syslog_address == "/dev/log"

    def test_overrides(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("HOSTPROV_HOSTS_FILE", str(tmp_path / "hosts"))
        monkeypatch.setenv("HOSTPROV_SYSLOG_ADDRESS", "")

        settings = Settings.from_env()
        assert settings.hosts_file == tmp_path / "hosts"
        assert settings.syslog_address is None


class TestValidation:
    """Tests for hostname and address validation."""

    def test_valid_hostnames(self):
        assert validate_hostname("loghost") is True
        assert validate_hostname("server1-mgmt") is True
        assert validate_hostname("web.example.com") is True
        assert validate_hostname("a") is True

    def test_invalid_hostnames(self):
        assert validate_hostname("") is False
        assert validate_hostname("host name") is False
        assert validate_hostname("-host") is False
        assert validate_hostname("host-") is False
        assert validate_hostname("web..local") is False
        assert validate_hostname("a" * 64) is False

    def test_require_hostname_raises(self):
        with pytest.raises(InvalidTargetError):
            require_hostname("bad/name")

    def test_require_ipv4(self):
        assert require_ipv4("192.168.16.3") == "192.168.16.3"
        with pytest.raises(InvalidTargetError):
            require_ipv4("192.168.16.300")
        with pytest.raises(InvalidTargetError):
            require_ipv4("fe80::1")


class TestLoadInventory:
    """Tests for inventory parsing."""

    def test_full_inventory(self, tmp_path: Path):
        path = tmp_path / "inventory.yaml"
        path.write_text(
            """push: dist/configure-host
ssh_options: ["-o", "StrictHostKeyChecking=no"]
targets:
  server1-mgmt:
    user: remoteadmin
    name: loghost
    ip: 192.168.16.3
    host_entries:
      webhost: 192.168.16.4
  server2-mgmt:
    user: remoteadmin
    port: 2222
    name: webhost
local:
  host_entries:
    loghost: 192.168.16.3
    webhost: 192.168.16.4
users:
  dennis:
    groups: [sudo]
    keys: "ssh-ed25519 AAAA student@generic-vm"
  aubrey:
"""
        )

        inventory = load_inventory(path)

        assert [t.destination for t in inventory.targets] == ["server1-mgmt", "server2-mgmt"]
        first = inventory.targets[0]
        assert first.ssh_target == "remoteadmin@server1-mgmt"
        assert first.hostname == "loghost"
        assert first.ip == "192.168.16.3"
        assert first.host_entries == [("webhost", "192.168.16.4")]
        assert inventory.targets[1].port == 2222
        assert inventory.targets[1].ip is None
        assert inventory.local_entries == [("loghost", "192.168.16.3"), ("webhost", "192.168.16.4")]
        assert inventory.push == tmp_path / "dist" / "configure-host"
        assert inventory.ssh_options == ["-o", "StrictHostKeyChecking=no"]
        assert [u.name for u in inventory.users] == ["dennis", "aubrey"]
        assert inventory.users[0].groups == ["sudo"]
        assert inventory.users[0].keys == ["ssh-ed25519 AAAA student@generic-vm"]
        assert inventory.users[1].groups == []

    def test_defaults(self, tmp_path: Path):
        path = tmp_path / "inventory.yaml"
        path.write_text("targets:\n  host1: {}\n")

        inventory = load_inventory(path)

        assert inventory.remote_command == DEFAULT_REMOTE_COMMAND
        assert inventory.ssh_options == DEFAULT_SSH_OPTIONS
        assert inventory.push is None
        assert inventory.targets[0].ssh_target == "host1"

    def test_malformed_entries_skipped(self, tmp_path: Path):
        path = tmp_path / "inventory.yaml"
        path.write_text(
            """targets:
  good:
    name: loghost
  null_host: null
  string_host: "just a string"
  bad_port:
    port: ssh
users:
  bad_user: [1, 2]
"""
        )

        inventory = load_inventory(path)

        assert [t.destination for t in inventory.targets] == ["good"]
        assert inventory.skipped == ["null_host", "string_host", "bad_port", "bad_user"]

    def test_scalar_values_become_strings(self, tmp_path: Path):
        path = tmp_path / "inventory.yaml"
        path.write_text("targets:\n  host1:\n    user: 1000\n    name: 1234\n")

        target = load_inventory(path).targets[0]

        assert target.hostname == "1234"
        assert target.user == "1000"
        assert build_remote_command(Inventory(), target) == "hostprov configure -name 1234"

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "inventory.yaml"
        path.write_text("")
        assert load_inventory(path).targets == []

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(InventoryError, match="Cannot read"):
            load_inventory(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "inventory.yaml"
        path.write_text("targets: [unclosed")
        with pytest.raises(InventoryError, match="Invalid YAML"):
            load_inventory(path)

    def test_non_mapping_document(self, tmp_path: Path):
        path = tmp_path / "inventory.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(InventoryError, match="mapping"):
            load_inventory(path)

    def test_targets_must_be_mapping(self, tmp_path: Path):
        path = tmp_path / "inventory.yaml"
        path.write_text("targets:\n  - host1\n")
        with pytest.raises(InventoryError, match="'targets'"):
            load_inventory(path)
