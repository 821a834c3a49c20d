"""Users command: bootstrap local accounts and SSH keys from an inventory."""

import os
from pathlib import Path

import typer

from hostprov.core.accounts import AccountManager
from hostprov.core.config import Settings, load_inventory
from hostprov.core.errors import AccountError, HostprovError
from hostprov.utils.logs import setup_logging
from hostprov.utils.output import Status, error, info, ok, report, section, set_echo, warn
from hostprov.utils.signals import signals_ignored


def require_root() -> None:
    """Raise AccountError unless running as root."""
    if os.geteuid() != 0:
        raise AccountError("Please run this command with 'sudo' or as root")


def users(
    inventory_path: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="Inventory YAML with a 'users' section"
    ),
) -> None:
    """Create user accounts, groups and SSH keys declared in an inventory.

    For each user this command:
    - Creates the account with a home directory and /bin/bash
    - Adds missing supplementary groups
    - Generates RSA and Ed25519 key pairs if absent
    - Installs generated and declared public keys in authorized_keys

    Idempotent: safe to run multiple times.
    """
    section("User and SSH Key Management")
    settings = Settings.from_env()
    set_echo(True)
    if not setup_logging(settings.syslog_address) and settings.syslog_address:
        warn(f"System log unavailable at {settings.syslog_address}")

    try:
        require_root()
        inventory = load_inventory(inventory_path)
    except HostprovError as e:
        error(str(e))
        raise typer.Exit(1) from None

    for name in inventory.skipped:
        warn(f"Skipping malformed inventory entry: {name}")

    if not inventory.users:
        info("No users declared in inventory")
        return

    manager = AccountManager(settings.home_root)
    changed = 0
    with signals_ignored():
        for account in inventory.users:
            try:
                if manager.provision(account):
                    changed += 1
            except (HostprovError, OSError) as e:
                report(Status.ERROR, f"User {account.name}: {e}")
                raise typer.Exit(1) from None

    ok(f"{len(inventory.users)} user(s) verified, {changed} changed")
