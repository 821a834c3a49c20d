"""Rich console output helpers."""

import logging
from enum import Enum

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from hostprov.utils.logs import logger

console = Console()

_echo = True


class Status(Enum):
    """Category of a reconcile decision point."""

    PASS = "PASS"  # target already satisfied
    APPLY = "APPLY"  # change being made
    ERROR = "ERROR"
    CHECK = "CHECK"  # inspecting current state
    SKIP = "SKIP"


_STYLES = {
    Status.PASS: "green",
    Status.APPLY: "cyan",
    Status.ERROR: "red",
    Status.CHECK: "blue",
    Status.SKIP: "yellow",
}

_LEVELS = {
    Status.PASS: logging.INFO,
    Status.APPLY: logging.INFO,
    Status.ERROR: logging.ERROR,
    Status.CHECK: logging.INFO,
    Status.SKIP: logging.WARNING,
}


def set_echo(enabled: bool) -> None:
    """Enable or disable echoing status reports to the console."""
    global _echo
    _echo = enabled


def report(status: Status, msg: str) -> None:
    """Record a status line in the system log, echoing it when enabled.

    Errors are always echoed.
    """
    logger.log(_LEVELS[status], "%s: %s", status.value, msg)
    if _echo or status is Status.ERROR:
        style = _STYLES[status]
        console.print(f"[{style}]{status.value}:[/{style}] {escape(msg)}", highlight=False)


def info(msg: str) -> None:
    """Print an info message."""
    console.print(f"[blue]INFO:[/blue] {msg}")


def ok(msg: str) -> None:
    """Print a success message."""
    console.print(f"[green]OK:[/green] {msg}")


def warn(msg: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]WARN:[/yellow] {msg}")


def error(msg: str) -> None:
    """Print an error message."""
    console.print(f"[red]ERROR:[/red] {msg}")


def section(title: str) -> None:
    """Print a section header."""
    console.print(f"\n[bold]=== {title} ===[/bold]")


def create_table(title: str, columns: list[str]) -> Table:
    """Create a table with the given columns."""
    table = Table(title=title)
    for col in columns:
        table.add_column(col)
    return table


def print_table(table: Table) -> None:
    """Print a table."""
    console.print(table)
