"""Push-and-run of the reconciler on remote hosts over SSH."""

import posixpath
import shlex
from pathlib import Path

from hostprov.core.config import Inventory, Target
from hostprov.utils.process import CommandResult, run

# Default timeout for a remote reconcile run (netplan apply can be slow)
REMOTE_TIMEOUT = 300


def build_configure_args(target: Target, verbose: bool = False) -> list[str]:
    """Reconciler arguments for a target, in the order they are applied."""
    args: list[str] = []
    if verbose:
        args.append("-verbose")
    if target.hostname:
        args += ["-name", target.hostname]
    if target.ip:
        args += ["-ip", target.ip]
    for name, ip in target.host_entries:
        args += ["-hostentry", name, ip]
    return args


def remote_payload_path(inventory: Inventory) -> str | None:
    """Where the pushed payload lands on the remote host."""
    if inventory.push is None:
        return None
    return posixpath.join(inventory.remote_dir, inventory.push.name)


def build_remote_command(inventory: Inventory, target: Target, verbose: bool = False) -> str:
    """Shell command line executed on the remote host."""
    args = [shlex.quote(arg) for arg in build_configure_args(target, verbose)]
    payload = remote_payload_path(inventory)
    if payload is not None:
        quoted = shlex.quote(payload)
        return " ".join([f"chmod +x {quoted} &&", quoted] + args)
    return " ".join([inventory.remote_command] + args)


def scp_push(
    source: Path, target: Target, remote_dir: str, ssh_options: list[str]
) -> CommandResult:
    """Copy a file into remote_dir on the target."""
    destination = f"{target.ssh_target}:{remote_dir}"
    cmd = ["scp"] + ssh_options + ["-P", str(target.port), str(source), destination]
    return run(cmd, timeout=REMOTE_TIMEOUT)


def ssh_run(
    target: Target, cmd: str, ssh_options: list[str], timeout: int = REMOTE_TIMEOUT
) -> CommandResult:
    """Run a command on the target via SSH."""
    ssh_cmd = ["ssh"] + ssh_options + ["-p", str(target.port), target.ssh_target, "--", cmd]
    return run(ssh_cmd, timeout=timeout)
