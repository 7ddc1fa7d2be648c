"""Preference commands for avgdown CLI.

Views and edits the saved target loss and monitor threshold.
"""

import click
from rich.console import Console
from rich.table import Table

from avgdown.cli.common import print_error
from avgdown.config import (
    PREFERENCE_DEFAULTS,
    ConfigError,
    create_template_config,
    get_config_path,
    get_preference,
    load_config,
    save_preference,
)

console = Console()

PREFERENCE_LABELS = {
    "target_loss": "Target loss for calc (%)",
    "monitor_target_loss": "Loss threshold for scan (%)",
}


@click.group()
def prefs() -> None:
    """View and change saved preferences.

    \b
    Examples:
      avgdown prefs show
      avgdown prefs set target_loss 20
      avgdown prefs init
    """


@prefs.command("show")
def show() -> None:
    """Show saved preferences."""
    path = get_config_path()
    config = load_config(path)

    table = Table(title="Preferences", show_header=True, header_style="bold cyan")
    table.add_column("Key", style="bold")
    table.add_column("Value", justify="right")
    table.add_column("Description", style="dim")

    for name in PREFERENCE_DEFAULTS:
        table.add_row(name, f"{get_preference(name, config):g}", PREFERENCE_LABELS[name])

    console.print(table)

    if config is None:
        console.print(f"[dim]No config at {path}; showing defaults.[/dim]")
    else:
        console.print(f"[dim]Config: {path}[/dim]")


@prefs.command("set")
@click.argument("key", type=click.Choice(sorted(PREFERENCE_DEFAULTS)))
@click.argument("value", type=click.FloatRange(0, 100))
def set_preference(key: str, value: float) -> None:
    """Save a preference value (percentage between 0 and 100)."""
    try:
        path = save_preference(key, value)
    except ConfigError as e:
        print_error(str(e), title="Config Error")
        raise SystemExit(1)
    console.print(f"[green]✓[/green] {key} = {value:g} [dim]({path})[/dim]")


@prefs.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
def init(force: bool) -> None:
    """Create a config file with default values."""
    path = get_config_path()

    if path.exists() and not force:
        console.print(
            f"[yellow]Config already exists at {path}.[/yellow] "
            "Use [cyan]--force[/cyan] to overwrite."
        )
        return

    create_template_config(path)
    console.print(f"[green]✓[/green] Created config at [cyan]{path}[/cyan]")
