"""Configuration paths, settings and inventory management."""

import ipaddress
import os
import re
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from hostprov.core.errors import InvalidTargetError, InventoryError


@dataclass
class Settings:
    """Locations of the system files the reconciler edits."""

    hosts_file: Path = Path("/etc/hosts")
    hostname_file: Path = Path("/etc/hostname")
    netplan_dir: Path = Path("/etc/netplan")
    syslog_address: str | None = "/dev/log"
    home_root: Path = Path("/home")

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables.

        Environment variables:
            HOSTPROV_HOSTS_FILE: hosts mapping file (default: /etc/hosts)
            HOSTPROV_HOSTNAME_FILE: persisted hostname (default: /etc/hostname)
            HOSTPROV_NETPLAN_DIR: netplan YAML directory (default: /etc/netplan)
            HOSTPROV_SYSLOG_ADDRESS: syslog socket, empty to disable (default: /dev/log)
            HOSTPROV_HOME_ROOT: parent of user home directories (default: /home)
        """
        return cls(
            hosts_file=Path(os.environ.get("HOSTPROV_HOSTS_FILE", "/etc/hosts")),
            hostname_file=Path(os.environ.get("HOSTPROV_HOSTNAME_FILE", "/etc/hostname")),
            netplan_dir=Path(os.environ.get("HOSTPROV_NETPLAN_DIR", "/etc/netplan")),
            syslog_address=os.environ.get("HOSTPROV_SYSLOG_ADDRESS", "/dev/log") or None,
            home_root=Path(os.environ.get("HOSTPROV_HOME_ROOT", "/home")),
        )


# --- Validation ---

# One DNS label: alphanumeric, inner hyphens/underscores, max 63 chars
VALID_LABEL_PATTERN = re.compile(r"^[a-zA-Z0-9]([a-zA-Z0-9_-]{0,61}[a-zA-Z0-9])?$")


def validate_hostname(name: str) -> bool:
    """Validate a hostname (optionally dotted) for hosts and hostname files.

    Args:
        name: Hostname to validate

    Returns:
        True if valid, False otherwise.
    """
    if not name or len(name) > 253:
        return False
    return all(VALID_LABEL_PATTERN.match(label) for label in name.split("."))


def require_hostname(name: str) -> str:
    """Return name unchanged or raise InvalidTargetError."""
    if not validate_hostname(name):
        raise InvalidTargetError(
            f"Invalid hostname '{name}': labels must be alphanumeric with inner "
            "hyphens/underscores, max 63 chars each"
        )
    return name


def require_ipv4(ip: str) -> str:
    """Return the canonical form of an IPv4 address or raise InvalidTargetError."""
    try:
        return str(ipaddress.IPv4Address(ip))
    except ValueError:
        raise InvalidTargetError(f"Invalid IPv4 address '{ip}'") from None


# --- Inventory ---

DEFAULT_REMOTE_COMMAND = "hostprov configure"
DEFAULT_REMOTE_DIR = "/root"

# SSH options for non-interactive connections
DEFAULT_SSH_OPTIONS = [
    "-o",
    "BatchMode=yes",
    "-o",
    "ConnectTimeout=10",
    "-o",
    "StrictHostKeyChecking=accept-new",
]


@dataclass
class Target:
    """A remote machine and the state to reconcile on it."""

    destination: str
    user: str | None = None
    port: int = 22
    hostname: str | None = None
    ip: str | None = None
    host_entries: list[tuple[str, str]] = field(default_factory=list)

    @property
    def ssh_target(self) -> str:
        """user@host form used by ssh and scp."""
        if self.user:
            return f"{self.user}@{self.destination}"
        return self.destination


@dataclass
class Account:
    """A local user account to bootstrap."""

    name: str
    groups: list[str] = field(default_factory=list)
    keys: list[str] = field(default_factory=list)


@dataclass
class Inventory:
    """Parsed inventory document."""

    targets: list[Target] = field(default_factory=list)
    local_entries: list[tuple[str, str]] = field(default_factory=list)
    users: list[Account] = field(default_factory=list)
    remote_command: str = DEFAULT_REMOTE_COMMAND
    push: Path | None = None
    remote_dir: str = DEFAULT_REMOTE_DIR
    ssh_options: list[str] = field(default_factory=lambda: list(DEFAULT_SSH_OPTIONS))
    skipped: list[str] = field(default_factory=list)


def _host_entries(data) -> list[tuple[str, str]]:
    if not isinstance(data, dict):
        return []
    return [(str(name), str(ip)) for name, ip in data.items() if ip is not None]


def _as_list(data) -> list[str]:
    if data is None:
        return []
    if isinstance(data, str):
        return [data]
    return [str(item) for item in data]


def load_inventory(path: Path) -> Inventory:
    """Load an inventory YAML file.

    Malformed target or user entries (null or non-dict values) are skipped
    and their names recorded in ``Inventory.skipped``.

    Raises:
        InventoryError: If the file cannot be read or is not a YAML mapping.
    """
    try:
        data = yaml.safe_load(Path(path).read_text())
    except OSError as e:
        raise InventoryError(f"Cannot read inventory {path}: {e}") from e
    except yaml.YAMLError as e:
        raise InventoryError(f"Invalid YAML in inventory {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InventoryError(f"Inventory {path} must be a YAML mapping")

    inventory = Inventory(
        remote_command=str(data.get("remote_command") or DEFAULT_REMOTE_COMMAND),
        remote_dir=str(data.get("remote_dir") or DEFAULT_REMOTE_DIR),
    )
    if data.get("push"):
        # Relative payload paths are taken from the inventory directory
        inventory.push = Path(path).parent / str(data["push"])
    if data.get("ssh_options") is not None:
        inventory.ssh_options = _as_list(data["ssh_options"])

    for section in ("targets", "users"):
        if not isinstance(data.get(section) or {}, dict):
            raise InventoryError(f"'{section}' in inventory {path} must be a mapping")

    for destination, info in (data.get("targets") or {}).items():
        if not isinstance(info, dict):
            inventory.skipped.append(str(destination))
            continue
        try:
            port = int(info.get("port", 22))
        except (TypeError, ValueError):
            inventory.skipped.append(str(destination))
            continue
        inventory.targets.append(
            Target(
                destination=str(destination),
                user=str(info["user"]) if info.get("user") else None,
                port=port,
                hostname=str(info["name"]) if info.get("name") else None,
                ip=str(info["ip"]) if info.get("ip") else None,
                host_entries=_host_entries(info.get("host_entries")),
            )
        )

    local = data.get("local") or {}
    if isinstance(local, dict):
        inventory.local_entries = _host_entries(local.get("host_entries"))

    for name, info in (data.get("users") or {}).items():
        # A bare "name:" line means an account with defaults
        if info is None:
            info = {}
        if not isinstance(info, dict):
            inventory.skipped.append(str(name))
            continue
        inventory.users.append(
            Account(
                name=str(name),
                groups=_as_list(info.get("groups")),
                keys=_as_list(info.get("keys")),
            )
        )

    return inventory
