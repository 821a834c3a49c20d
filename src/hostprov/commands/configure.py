"""Host configuration command (run on the machine being configured).

Accepts the single-dash flags used by the deploy wrapper::

    configure-host -verbose -name loghost -ip 192.168.16.3 -hostentry webhost 192.168.16.4

Unrecognized tokens are skipped. Operations run in command-line order;
a failing operation is reported and the rest still run, and the exit
code is 1 if anything failed.
"""

from dataclasses import dataclass, field

import typer

from hostprov.core.config import Settings
from hostprov.core.errors import HostprovError
from hostprov.core.reconciler import Reconciler
from hostprov.utils.logs import setup_logging
from hostprov.utils.output import Status, report, set_echo, warn
from hostprov.utils.signals import signals_ignored

# flag -> number of values it consumes
FLAGS = {
    "-verbose": 0,
    "-name": 1,
    "-ip": 1,
    "-hostentry": 2,
}


@dataclass
class ConfigureRequest:
    """Parsed command line: the operations to apply, in order."""

    verbose: bool = False
    steps: list[tuple[str, tuple[str, ...]]] = field(default_factory=list)


def parse_args(tokens: list[str]) -> ConfigureRequest:
    """Walk the argument list the way the shell script did.

    Raises:
        typer.BadParameter: If a flag is missing its value(s).
    """
    request = ConfigureRequest()
    i = 0
    while i < len(tokens):
        flag = tokens[i]
        if flag not in FLAGS:
            i += 1
            continue

        nargs = FLAGS[flag]
        values = tuple(tokens[i + 1 : i + 1 + nargs])
        if len(values) < nargs:
            raise typer.BadParameter(f"{flag} requires {nargs} value(s)")

        if flag == "-verbose":
            request.verbose = True
        else:
            request.steps.append((flag, values))
        i += 1 + nargs
    return request


def apply_step(reconciler: Reconciler, flag: str, values: tuple[str, ...]) -> bool:
    """Run one operation; returns True if the host changed."""
    if flag == "-name":
        return reconciler.set_hostname(values[0])
    if flag == "-ip":
        return reconciler.set_primary_ip(values[0])
    if flag == "-hostentry":
        return reconciler.upsert_host_entry(values[0], values[1])
    raise ValueError(f"Unknown operation {flag}")


def run_request(request: ConfigureRequest, reconciler: Reconciler) -> int:
    """Apply every step and return the number of failures."""
    failures = 0
    for flag, values in request.steps:
        try:
            apply_step(reconciler, flag, values)
        except (HostprovError, OSError) as e:
            report(Status.ERROR, f"{flag} {' '.join(values)}: {e}")
            failures += 1
    return failures


# Flags are parsed by parse_args, so click must pass every token through
CONTEXT_SETTINGS = {"allow_extra_args": True, "ignore_unknown_options": True}

app = typer.Typer(
    name="configure-host",
    help="Reconcile hostname, primary IP and hosts entries",
    add_completion=False,
)


@app.command(context_settings=CONTEXT_SETTINGS)
def configure(ctx: typer.Context) -> None:
    """Reconcile hostname, primary IP and /etc/hosts entries.

    Flags (single dash):
        -verbose                  Also print status lines to stdout
        -name <hostname>          Set the hostname
        -ip <ipv4>                Change the primary IP address
        -hostentry <name> <ip>    Add or update a hosts entry (repeatable)

    Idempotent: safe to run multiple times.
    """
    request = parse_args(list(ctx.args))

    settings = Settings.from_env()
    set_echo(request.verbose)
    if not setup_logging(settings.syslog_address) and settings.syslog_address and request.verbose:
        warn(f"System log unavailable at {settings.syslog_address}, logging to stdout only")

    with signals_ignored():
        failures = run_request(request, Reconciler.from_settings(settings))

    if failures:
        raise typer.Exit(1)
