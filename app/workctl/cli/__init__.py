"""CLI package for workctl.

This package contains the Typer application and all subcommands.
"""

from workctl.cli.main import app

__all__ = ["app"]
