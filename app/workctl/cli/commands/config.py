"""Config command implementation.

Shows the effective configuration and writes the default configuration
and manifest files for editing.
"""

from typing import Annotated

import tomli_w
import typer
from rich.markup import escape

from workctl.catalog import default_manifest
from workctl.cli.runtime import ExitCode, exit_with, require_config
from workctl.core.config import ConfigError, WorkctlConfig, save_config
from workctl.core.manifest import ManifestError, save_manifest
from workctl.core.paths import get_config_path, get_history_path, get_log_dir, get_manifest_path
from workctl.utils.formatting import console, print_error, print_info, print_success, print_warning

app = typer.Typer(
    help="Show or initialize workctl configuration.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.command()
def show() -> None:
    """Print the effective configuration and file locations."""
    config = require_config()
    config_path = get_config_path()
    manifest_path = get_manifest_path()

    console.print("[bold_header]Files[/]")
    state = "" if config_path.exists() else " [muted](not present, defaults apply)[/muted]"
    console.print(f"  Config:   {escape(str(config_path))}{state}")
    state = "" if manifest_path.exists() else " [muted](not present, built-in catalog)[/muted]"
    console.print(f"  Manifest: {escape(str(manifest_path))}{state}")
    console.print(f"  History:  {escape(str(get_history_path()))}")
    console.print(f"  Logs:     {escape(str(get_log_dir()))}")
    console.print(f"  Backups:  {escape(str(config.effective_backup_dir))}")

    console.print("\n[bold_header]Settings[/]")
    console.print(
        escape(tomli_w.dumps(config.model_dump(mode="json", exclude_none=True))),
        highlight=False,
    )


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite existing files.",
        ),
    ] = False,
    manifest: Annotated[
        bool,
        typer.Option(
            "--manifest",
            "-m",
            help="Also write the built-in catalog as manifest.toml.",
        ),
    ] = False,
) -> None:
    """Write the default config.toml (and manifest.toml) for editing.

    Examples:
        workctl config init
        workctl config init --manifest
        workctl config init --force
    """
    targets = [get_config_path()]
    if manifest:
        targets.append(get_manifest_path())

    existing = [path for path in targets if path.exists()]
    if existing and not force:
        for path in existing:
            print_error(f"File already exists: {path}")
        print_info("Use --force to overwrite.")
        raise exit_with(ExitCode.ERROR)
    for path in existing:
        print_warning(f"Overwriting {path}")

    try:
        saved = save_config(WorkctlConfig())
        print_success(f"Config written to {saved}")
        if manifest:
            saved = save_manifest(default_manifest())
            print_success(f"Manifest written to {saved}")
    except (ConfigError, ManifestError) as e:
        print_error(str(e))
        raise exit_with(ExitCode.ERROR) from e
