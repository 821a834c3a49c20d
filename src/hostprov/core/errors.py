"""Exception hierarchy."""

import shlex


class HostprovError(Exception):
    """Base class for all provisioning failures."""


class InvalidTargetError(HostprovError, ValueError):
    """Raised when a requested hostname or address is malformed."""


class InventoryError(HostprovError):
    """Raised when an inventory file cannot be read."""


class ReconcileError(HostprovError):
    """Raised when a reconcile operation cannot reach its target state."""


class CommandError(ReconcileError):
    """Raised when an underlying OS command exits non-zero."""

    def __init__(self, cmd: list[str], returncode: int, stderr: str = ""):
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr.strip()
        message = f"'{shlex.join(cmd)}' failed with exit code {returncode}"
        if self.stderr:
            message += f": {self.stderr}"
        super().__init__(message)


class NetworkConfigError(ReconcileError):
    """Raised when the static network configuration cannot be updated."""


class NetworkConfigNotFoundError(NetworkConfigError):
    """Raised when no static network configuration file exists."""


class AccountError(HostprovError):
    """Raised when a user account cannot be provisioned."""
