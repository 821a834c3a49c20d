"""Shared fakes for reconciler tests."""

from pathlib import Path

import pytest

from hostprov.core.errors import CommandError
from hostprov.core.reconciler import Reconciler


class MemoryFile:
    """In-memory stand-in for AtomicTextFile that counts writes."""

    def __init__(self, text: str = "", path: str = "/etc/hosts"):
        self.text = text
        self.path = Path(path)
        self.writes = 0

    def read(self) -> str:
        return self.text

    def write(self, text: str) -> None:
        self.text = text
        self.writes += 1


class FakeSystem:
    """Stand-in for System with scriptable failures."""

    def __init__(self, hostname: str = "oldname", primary_ip: str | None = "192.168.16.21"):
        self.hostname = hostname
        self.primary_ip = primary_ip
        self.fail_set_hostname = False
        self.fail_apply = False
        self.applied = 0

    def get_hostname(self) -> str:
        return self.hostname

    def set_hostname(self, name: str) -> None:
        if self.fail_set_hostname:
            raise CommandError(["hostnamectl", "set-hostname", name], 1, "Access denied")
        self.hostname = name

    def get_primary_ip(self) -> str | None:
        return self.primary_ip

    def apply_network(self) -> None:
        if self.fail_apply:
            raise CommandError(["netplan", "apply"], 1, "Invalid YAML")
        self.applied += 1


NETPLAN_STATIC = """network:
  version: 2
  ethernets:
    eth0:
      dhcp4: false
      addresses: [192.168.16.21/24]
"""


@pytest.fixture
def system() -> FakeSystem:
    return FakeSystem()


@pytest.fixture
def hosts_file() -> MemoryFile:
    return MemoryFile("127.0.0.1 localhost\n127.0.1.1 oldname\n192.168.16.21 oldname\n")


@pytest.fixture
def hostname_file() -> MemoryFile:
    return MemoryFile("oldname\n", path="/etc/hostname")


@pytest.fixture
def netplan_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "netplan"
    directory.mkdir()
    (directory / "50-cloud-init.yaml").write_text(NETPLAN_STATIC)
    return directory


@pytest.fixture
def reconciler(system, hosts_file, hostname_file, netplan_dir) -> Reconciler:
    return Reconciler(system, hosts_file, hostname_file, netplan_dir)
