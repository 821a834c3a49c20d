"""Deploy command: configure remote hosts over SSH, then the local machine."""

from pathlib import Path

import typer
from rich.markup import escape

from hostprov.core import remote
from hostprov.core.config import Inventory, Settings, Target, load_inventory
from hostprov.core.errors import HostprovError
from hostprov.core.reconciler import Reconciler
from hostprov.utils.logs import setup_logging
from hostprov.utils.output import (
    Status,
    create_table,
    error,
    info,
    ok,
    print_table,
    report,
    section,
    set_echo,
    warn,
)
from hostprov.utils.signals import signals_ignored


def deploy_target(inventory: Inventory, target: Target, verbose: bool = False) -> bool:
    """Push (optionally) and run the reconciler on one target."""
    section(f"Configuring {target.destination}")

    if inventory.push is not None:
        info(f"Copying {inventory.push} to {target.ssh_target}:{inventory.remote_dir}...")
        result = remote.scp_push(
            inventory.push, target, inventory.remote_dir, inventory.ssh_options
        )
        if not result.success:
            error(f"Failed to copy to {target.destination}. Skipping execution.")
            if result.stderr.strip():
                info(escape(result.stderr.strip()))
            return False

    cmd = remote.build_remote_command(inventory, target, verbose)
    info(f"Running: {escape(cmd)}")
    result = remote.ssh_run(target, cmd, inventory.ssh_options)
    output = (result.stdout + result.stderr).strip()
    if verbose and output:
        info(escape(output))

    if not result.success:
        error(f"Configuration failed on {target.destination} (exit code {result.returncode})")
        if output and not verbose:
            info(escape(output))
        return False

    ok(f"{target.destination} configured successfully")
    return True


def deploy_local(inventory: Inventory, reconciler: Reconciler) -> bool:
    """Apply the inventory's local host entries in process."""
    section("Configuring local machine")
    if not inventory.local_entries:
        info("No local host entries")
        return True

    success = True
    for name, ip in inventory.local_entries:
        try:
            reconciler.upsert_host_entry(name, ip)
        except (HostprovError, OSError) as e:
            report(Status.ERROR, f"Host entry {name} {ip}: {e}")
            success = False
    return success


def deploy(
    inventory_path: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="Inventory YAML describing targets"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Run the reconciler verbosely and show its output"
    ),
) -> None:
    """Configure every inventory target over SSH, then the local machine.

    Targets are processed one at a time, in inventory order. A target that
    fails does not stop the others; the exit code is 1 if any failed.

    Examples:
        hostprov deploy inventory.yaml
        hostprov deploy inventory.yaml --verbose
    """
    settings = Settings.from_env()
    set_echo(True)
    if not setup_logging(settings.syslog_address) and settings.syslog_address:
        warn(f"System log unavailable at {settings.syslog_address}")

    try:
        inventory = load_inventory(inventory_path)
    except HostprovError as e:
        error(str(e))
        raise typer.Exit(1) from None

    for name in inventory.skipped:
        warn(f"Skipping malformed inventory entry: {name}")

    if inventory.push is not None and not inventory.push.is_file():
        error(f"Payload {inventory.push} does not exist")
        raise typer.Exit(1)

    results: list[tuple[str, bool]] = []
    with signals_ignored():
        for target in inventory.targets:
            results.append((target.destination, deploy_target(inventory, target, verbose)))
        results.append(("local", deploy_local(inventory, Reconciler.from_settings(settings))))

    section("Summary")
    table = create_table("Deployment", ["Target", "Result"])
    for name, success in results:
        table.add_row(name, "[green]ok[/green]" if success else "[red]failed[/red]")
    print_table(table)

    failed = [name for name, success in results if not success]
    if failed:
        error(f"Deployment failed on: {', '.join(failed)}")
        raise typer.Exit(1)
    ok("Deployment complete")
