"""Subprocess execution helpers."""

import os
import subprocess
from dataclasses import dataclass

from hostprov.core.errors import CommandError


@dataclass
class CommandResult:
    """Result of a command execution."""

    cmd: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        """Check if command succeeded."""
        return self.returncode == 0

    def check(self) -> "CommandResult":
        """Raise CommandError unless the command succeeded."""
        if not self.success:
            raise CommandError(self.cmd, self.returncode, self.stderr)
        return self


def run(
    cmd: list[str],
    *,
    check: bool = False,
    capture: bool = True,
    timeout: int | None = None,
    env: dict[str, str] | None = None,
) -> CommandResult:
    """Run a command and return the result.

    With ``check=True`` a non-zero exit raises CommandError instead of
    returning a failed result.
    """
    # Merge provided env with current environment
    run_env = None
    if env:
        run_env = os.environ.copy()
        run_env.update(env)

    try:
        proc = subprocess.run(
            cmd,
            capture_output=capture,
            text=True,
            timeout=timeout,
            env=run_env,
        )
        result = CommandResult(
            cmd=cmd,
            returncode=proc.returncode,
            stdout=proc.stdout if capture else "",
            stderr=proc.stderr if capture else "",
        )
    except subprocess.TimeoutExpired:
        result = CommandResult(cmd=cmd, returncode=-1, stdout="", stderr="Command timed out")
    except FileNotFoundError:
        result = CommandResult(
            cmd=cmd, returncode=-1, stdout="", stderr=f"Command not found: {cmd[0]}"
        )

    if check:
        result.check()
    return result


def run_as(user: str, cmd: list[str], **kwargs) -> CommandResult:
    """Run a command as another user through sudo."""
    return run(["sudo", "-u", user] + cmd, **kwargs)

