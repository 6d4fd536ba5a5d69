"""CLI commands for workctl.

This package contains all subcommand implementations.
"""

from workctl.cli.commands import config, groups, history, install, logs, uninstall, verify

__all__ = ["config", "groups", "history", "install", "logs", "uninstall", "verify"]
