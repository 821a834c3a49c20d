"""Static network configuration (netplan) lookup and rewriting."""

import re
from pathlib import Path

import yaml

from hostprov.utils.output import Status, report


def declares_addresses(data) -> bool:
    """Check whether a parsed netplan document contains an addresses list."""
    if isinstance(data, dict):
        for key, value in data.items():
            if key == "addresses" and value:
                return True
            if declares_addresses(value):
                return True
    elif isinstance(data, list):
        return any(declares_addresses(item) for item in data)
    return False


def address_pattern(ip: str) -> re.Pattern:
    """Match ip as a whole address, not as a prefix of a longer one."""
    return re.compile(rf"(?<![\d.]){re.escape(ip)}(?![\d])")


def contains_address(text: str, ip: str) -> bool:
    return bool(address_pattern(ip).search(text))


def replace_address(text: str, old: str, new: str) -> str:
    """Replace every whole-address occurrence of old with new.

    CIDR suffixes such as ``/24`` are left in place.
    """
    return address_pattern(old).sub(new, text)


def find_static_config(directory: Path, current_ip: str | None = None) -> Path | None:
    """Find the netplan file that declares a static address list.

    Files are scanned in name order. Among those declaring ``addresses``,
    the first one mentioning current_ip wins; otherwise the first one found.

    Args:
        directory: Netplan configuration directory (usually /etc/netplan)
        current_ip: Address currently assigned to the host

    Returns:
        Path of the matching file, or None if no file declares addresses.
    """
    if not directory.is_dir():
        return None

    candidates: list[tuple[Path, str]] = []
    for path in sorted(directory.glob("*.yaml")):
        try:
            text = path.read_text()
            data = yaml.safe_load(text)
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            report(Status.SKIP, f"Ignoring unreadable network config {path}: {e}")
            continue
        if declares_addresses(data):
            candidates.append((path, text))

    if not candidates:
        return None
    if current_ip:
        for path, text in candidates:
            if contains_address(text, current_ip):
                return path
    return candidates[0][0]
