"""Groups command implementation.

Lists the install groups of the active manifest.
"""

from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from workctl.core.manifest import require_manifest
from workctl.core.paths import get_manifest_path
from workctl.models.manifest import Group
from workctl.models.package import Backend
from workctl.utils.formatting import console, print_info

app = typer.Typer(
    help="List install groups.",
    invoke_without_command=True,
)


def _backend_counts(group: Group) -> str:
    counts = [
        f"{sum(1 for i in group.items if i.backend is backend)} {backend.label}"
        for backend in Backend
        if group.uses_backend(backend)
    ]
    return ", ".join(counts) or "-"


@app.callback(invoke_without_command=True)
def list_groups(
    ctx: typer.Context,
    show_items: Annotated[
        bool,
        typer.Option(
            "--items",
            "-i",
            help="List the packages of every group.",
        ),
    ] = False,
) -> None:
    """List install groups.

    Shows the user manifest when one exists, the built-in catalog
    otherwise.
    """
    if ctx.invoked_subcommand is not None:
        return

    manifest = require_manifest()
    source = get_manifest_path() if get_manifest_path().exists() else "built-in catalog"

    table = Table(
        title="Install Groups",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Name", no_wrap=True)
    table.add_column("Title")
    table.add_column("Packages")
    table.add_column("Artifacts", justify="right")
    table.add_column("Backup", justify="right")

    for group in manifest.groups:
        table.add_row(
            group.name,
            escape(group.title),
            _backend_counts(group),
            str(len(group.artifacts)),
            str(len(group.backup_paths)),
        )

    console.print(table)

    if show_items:
        for group in manifest.groups:
            if not group.items:
                continue
            console.print(f"\n[bold_header]{escape(group.title)}[/]")
            for item in group.items:
                flags = [] if item.critical else ["optional"]
                if not item.removable:
                    flags.append("retained")
                suffix = f" [muted]({', '.join(flags)})[/muted]" if flags else ""
                console.print(
                    f"  {escape(item.display_name)} "
                    f"[muted]{item.backend.label}:{escape(item.identifier)}[/muted]{suffix}"
                )

    print_info(f"\n{len(manifest.groups)} group(s), {manifest.item_count} package(s) from {source}")
