import logging
from pathlib import Path
from typing import List, Optional, Tuple

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.traceback import install
from rich.table import Table

from .catalog import Catalog, open_catalog, rotated_backup
from .config import VHDConfig, ensure_config_folder, get_config_path, load_config, update_config
from .decorators import handle_vhd_errors
from .errors import NotFoundError
from .storage import STORAGE_KINDS, open_storage
from .vfs import DriveVFS, RootNode, flatten

# Initialize Rich Traceback for better error messages
install(show_locals=False)

# Initialize Rich Console
console = Console()

# Configure logging to use Rich's RichHandler
logging.basicConfig(
    level=logging.INFO,  # Set to INFO by default, DEBUG if verbose
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True)]
)
logger = logging.getLogger(__name__)

# Main app
app = typer.Typer()

# Command groups
drive_app = typer.Typer(help="Manage drive records in the catalog")

# Register command groups
app.add_typer(drive_app, name="drive")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose mode"),
):
    """
    vhd - virtual hard drive over local folders and cloud buckets.

    Browse a catalog of folders and files as one filesystem, and move file
    content to and from the storage behind each drive.
    """
    if verbose:
        logging.getLogger("vhd").setLevel(logging.DEBUG)
        console.print("[bold green]Verbose mode enabled.[/bold green]")


def open_vfs(config: VHDConfig) -> Tuple[Catalog, DriveVFS]:
    """Open the configured catalog and build the filesystem over it."""
    ensure_config_folder()
    if config.cli.verbose:
        logging.getLogger("vhd").setLevel(logging.DEBUG)
    catalog = open_catalog(config)
    root = RootNode.from_catalog(catalog, lambda record: open_storage(record, config))
    return catalog, DriveVFS(root)


# ============================================================================
# Shell Commands
# ============================================================================

@app.command()
@handle_vhd_errors
def shell():
    """
    Launch interactive shell for navigating the drives.

    Commands:
        ls, cd, pwd        - Navigate the virtual filesystem
        info, catalog      - Inspect files and folders
        get, put           - Download and upload files
        mkdir, mv          - Organize folders and files
        drive, find, hash  - Drives, name search, local CRC32C
        help               - Show help

    Example:
        vhd shell
    """
    from .repl import DriveShell

    config = load_config()
    catalog, vfs = open_vfs(config)
    try:
        DriveShell(vfs, console=console, history_path=config.history_path()).run()
    finally:
        catalog.close()


@app.command(name="exec")
@handle_vhd_errors
def exec_command(
    command: str = typer.Argument(..., help="Shell command to run (e.g. ls, put)"),
    args: Optional[List[str]] = typer.Argument(None, help="Command arguments"),
):
    """
    Run a single shell command and exit.

    Examples:
        vhd exec ls /photos
        vhd exec put ./scans /photos/2024
    """
    from .repl import DriveShell

    config = load_config()
    catalog, vfs = open_vfs(config)
    try:
        ok = DriveShell(vfs, console=console).execute_command(command, args or [])
    finally:
        catalog.close()
    if not ok:
        raise typer.Exit(code=1)


# ============================================================================
# Drive Commands
# ============================================================================

@drive_app.command(name="add")
@handle_vhd_errors
def drive_add(
    name: str = typer.Argument(..., help="Drive name, shown as /<name>"),
    kind: str = typer.Argument(..., help="Storage type: local or gcs"),
    location: str = typer.Argument(..., help="Folder (local) or bucket name (gcs)"),
    description: str = typer.Option("", "--description", "-d", help="Drive description"),
):
    """
    Register a new drive.

    Examples:
        vhd drive add backup local /mnt/disk/vhd
        vhd drive add photos gcs my-photo-bucket -d "Family photos"
    """
    if kind not in STORAGE_KINDS:
        raise ValueError(f"unknown storage type '{kind}' (expected one of: {', '.join(STORAGE_KINDS)})")
    if not name or "/" in name or name in (".", ".."):
        raise ValueError(f"invalid drive name '{name}'")

    config = load_config()
    ensure_config_folder()
    catalog = open_catalog(config)
    try:
        record = catalog.add_drive(name, kind, location, description)
    finally:
        catalog.close()
    console.print(f"[green]✓ Added drive '{escape(record.name)}' ({kind}::{escape(location)})[/green]")


@drive_app.command(name="list")
@handle_vhd_errors
def drive_list():
    """List configured drives."""
    config = load_config()
    ensure_config_folder()
    catalog = open_catalog(config)
    try:
        drives = catalog.fetch_drives()
    finally:
        catalog.close()

    if not drives:
        console.print("[yellow]No drives configured. Add one with 'vhd drive add'.[/yellow]")
        return

    table = Table(title="Drives", show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan")
    table.add_column("Type", style="white")
    table.add_column("Location", style="white")
    table.add_column("Description", style="dim")
    for record in drives:
        table.add_row(
            escape(record.name),
            escape(record.kind),
            escape(record.location),
            escape(record.description),
        )
    console.print(table)


# ============================================================================
# Export Commands
# ============================================================================

@app.command()
@handle_vhd_errors
def export(
    drive: str = typer.Argument(..., help="Drive to export"),
    output: Optional[Path] = typer.Argument(None, help="Output file (default: stdout)"),
):
    """
    Write a drive's catalog in flat-file format.

    One line per entry: path[:uuid:updated:created[:metadata]]. An existing
    output file is kept as <output>.bak.

    Examples:
        vhd export photos
        vhd export photos ~/photos.catalog
    """
    config = load_config()
    catalog, vfs = open_vfs(config)
    try:
        node = vfs.root.get_child(drive)
        if node is None:
            raise NotFoundError(f"no drive named {drive}")
        lines = flatten(node)
    finally:
        catalog.close()

    if output is None:
        for line in lines:
            console.print(line, markup=False, highlight=False)
        return

    with rotated_backup(output):
        with open(output, "w") as f:
            f.writelines(line + "\n" for line in lines)
    console.print(f"[green]✓ Exported {len(lines)} entries to {escape(str(output))}[/green]")


# ============================================================================
# Configuration Commands
# ============================================================================

@app.command()
@handle_vhd_errors
def config(
    show: bool = typer.Option(False, "--show", help="Show current configuration"),
    set_backend: Optional[str] = typer.Option(None, "--catalog-backend", help="Set catalog backend (sqlite, flatfile)"),
    set_catalog_path: Optional[str] = typer.Option(None, "--catalog-path", help="Set catalog location"),
    set_chunk_size: Optional[int] = typer.Option(None, "--chunk-size", help="Set bytes per stored object part"),
    set_credentials: Optional[str] = typer.Option(None, "--credentials-file", help="Set Google Cloud credentials file"),
    set_verbose: Optional[bool] = typer.Option(None, "--cli-verbose/--no-cli-verbose", help="Enable verbose output by default"),
    set_history: Optional[bool] = typer.Option(None, "--history/--no-history", help="Keep shell history on disk"),
):
    """
    View or edit vhd configuration.

    Configuration is stored at $VHD_HOME/config.json (default ~/.vhd/config.json).

    Examples:
        # Show current configuration
        vhd config --show

        # Use the older per-drive text catalogs
        vhd config --catalog-backend flatfile

        # Store files in 50 MiB parts
        vhd config --chunk-size 52428800
    """
    has_settings = any([
        set_backend, set_catalog_path, set_chunk_size is not None, set_credentials,
        set_verbose is not None, set_history is not None,
    ])

    if show or not has_settings:
        current = load_config()

        console.print(f"\n[bold]vhd Configuration[/bold]")
        console.print(f"[dim]Location: {get_config_path()}[/dim]\n")

        console.print("[bold cyan]Catalog Settings:[/bold cyan]")
        console.print(f"  Backend:     {current.catalog.backend}")
        console.print(f"  Location:    {current.catalog_path()}")

        console.print("\n[bold cyan]Storage Settings:[/bold cyan]")
        console.print(f"  Chunk Size:  {current.storage.chunk_size}")
        console.print(f"  Credentials: {current.credentials_path()}")

        console.print("\n[bold cyan]CLI Settings:[/bold cyan]")
        console.print(f"  Verbose:     {current.cli.verbose}")
        console.print(f"  History:     {current.cli.history}")
        return

    changes = []
    if set_backend is not None:
        changes.append(f"Catalog backend: {set_backend}")
    if set_catalog_path is not None:
        changes.append(f"Catalog path: {set_catalog_path}")
    if set_chunk_size is not None:
        changes.append(f"Chunk size: {set_chunk_size}")
    if set_credentials is not None:
        changes.append(f"Credentials file: {set_credentials}")
    if set_verbose is not None:
        changes.append(f"CLI verbose: {set_verbose}")
    if set_history is not None:
        changes.append(f"CLI history: {set_history}")

    console.print("[blue]Updating configuration:[/blue]")
    for change in changes:
        console.print(f"  • {escape(change)}")

    update_config(
        catalog_backend=set_backend,
        catalog_path=set_catalog_path,
        chunk_size=set_chunk_size,
        credentials_file=set_credentials,
        cli_verbose=set_verbose,
        cli_history=set_history,
    )
    console.print("[green]✓ Configuration updated![/green]")


if __name__ == "__main__":
    app()
