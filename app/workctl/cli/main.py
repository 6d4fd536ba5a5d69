"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from typing import Annotated

import typer

from workctl import __version__
from workctl.cli.commands import config, groups, history, install, logs, uninstall, verify

# Create main Typer app
app = typer.Typer(
    name="workctl",
    help="Declarative workstation setup for Debian and Ubuntu.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"workctl version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Mirror the log to the terminal.",
        ),
    ] = False,
) -> None:
    """workctl - Install, verify and remove workstation package groups.

    Groups of APT and Snap packages, workspace directories and desktop
    shortcuts are declared in a manifest and converged one item at a time.
    """
    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


# Register commands
app.add_typer(install.app, name="install")
app.add_typer(verify.app, name="verify")
app.add_typer(uninstall.app, name="uninstall")
app.add_typer(history.app, name="history")
app.add_typer(logs.app, name="log")
app.add_typer(groups.app, name="groups")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
