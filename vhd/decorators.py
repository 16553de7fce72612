"""Decorators for vhd CLI commands."""

import functools
import logging
from typing import Callable, Any

import typer
from rich.console import Console
from rich.markup import escape

from vhd.errors import BackingStoreError, CatalogCorruptError, VHDError

logger = logging.getLogger(__name__)
console = Console()


def handle_vhd_errors(func: Callable) -> Callable:
    """
    Decorator to handle common errors of vhd commands.

    Centralizes error handling for:
    - CatalogCorruptError: catalog records are inconsistent
    - BackingStoreError: catalog or storage I/O failed
    - VHDError: any other navigation or mutation failure
    - ValueError: invalid configuration or arguments
    - OSError: local files or the config folder are not accessible
    - General exceptions: unexpected errors

    Every case exits with code 1 (130 when interrupted).
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> Any:
        try:
            return func(*args, **kwargs)
        except CatalogCorruptError as e:
            console.print(f"[bold red]Catalog corrupt:[/bold red] {escape(str(e))}")
            raise typer.Exit(code=1)
        except BackingStoreError as e:
            console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
            console.print("[yellow]Tip: Check the catalog location and storage credentials[/yellow]")
            raise typer.Exit(code=1)
        except VHDError as e:
            console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
            raise typer.Exit(code=1)
        except ValueError as e:
            console.print(f"[bold red]Error:[/bold red] Invalid input: {escape(str(e))}")
            raise typer.Exit(code=1)
        except PermissionError as e:
            console.print(f"[bold red]Error:[/bold red] Permission denied: {escape(str(e))}")
            raise typer.Exit(code=1)
        except OSError as e:
            console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
            raise typer.Exit(code=1)
        except KeyboardInterrupt:
            console.print("\n[yellow]Operation cancelled by user[/yellow]")
            raise typer.Exit(code=130)
        except typer.Exit:
            raise
        except Exception as e:
            logger.error(f"Unexpected error in {func.__name__}: {e}", exc_info=True)
            console.print(f"[bold red]Unexpected error:[/bold red] {escape(str(e))}")
            raise typer.Exit(code=1)

    return wrapper
