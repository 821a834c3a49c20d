"""Main CLI application."""

import typer

from hostprov import __version__
from hostprov.commands import configure, deploy, users

app = typer.Typer(
    name="hostprov",
    help="Idempotent host provisioning: hostname, addresses, hosts entries and accounts",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"hostprov {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Idempotent host provisioning: hostname, addresses, hosts entries and accounts."""
    pass


# Register standalone commands
app.command(name="configure", context_settings=configure.CONTEXT_SETTINGS)(configure.configure)
app.command(name="deploy")(deploy.deploy)
app.command(name="users")(users.users)


if __name__ == "__main__":
    app()
