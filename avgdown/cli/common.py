"""Helpers shared by avgdown commands."""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from avgdown.models import Failure

console = Console()


def get_config(ctx: click.Context) -> Optional[dict]:
    """Return the config loaded by the group, loading it if invoked directly."""
    if isinstance(ctx.obj, dict) and "config" in ctx.obj:
        return ctx.obj["config"]

    from avgdown.config import load_config

    return load_config()


def get_source(page: Optional[Path], json_path: Optional[Path]):
    """Build the page-data source selected on the command line.

    Raises:
        click.UsageError: If both or neither source options are given.
        SourceError: If the source file cannot be read.
    """
    if page and json_path:
        raise click.UsageError("Use either --page or --json, not both.")

    if page:
        from avgdown.sources.page import PageSource

        return PageSource.from_file(page)

    if json_path:
        from avgdown.sources.json_file import JsonSource

        return JsonSource.from_file(json_path)

    return None


def print_error(message: str, title: str = "Error") -> None:
    """Print an error panel."""
    console.print(Panel(
        f"[red]{escape(message)}[/red]",
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))


def print_failure(failure: Failure) -> None:
    """Print a failure panel and exit with status 1."""
    console.print(Panel(
        f"[red]{escape(failure.message)}[/red]",
        title=f"[bold red]{failure.kind}[/bold red]",
        border_style="red",
    ))
    raise SystemExit(1)
